"""
LaTeX Lexer for the Math Editor

Splits LaTeX source into a flat list of tokens:
- Control sequences (\\alpha, \\frac, \\{, \\\\)
- Single characters (x, 2, +, ()
- Grouping ({ and }), script markers (^ and _), alignment (&)
- Whitespace runs (kept as SPACE tokens, the parser drops them in math mode)
- Template arguments (#0..#9, #? for a placeholder)

Unterminated groups never fail: the missing closing braces are appended
before END and reported as lex issues.

Usage:
    tokens = tokenize(r"x^{2} + \\alpha")
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenKind(Enum):
    """Token categories produced by the lexer."""
    COMMAND = "command"          # \alpha, \frac, \{, \\ ...
    CHAR = "char"                # Any other single character
    GROUP_OPEN = "group_open"    # {
    GROUP_CLOSE = "group_close"  # }
    SUPERSCRIPT = "superscript"  # ^
    SUBSCRIPT = "subscript"      # _
    ALIGNMENT = "alignment"      # &
    SPACE = "space"              # Run of whitespace
    ARGUMENT = "argument"        # #0..#9 or #?
    END = "end"                  # End of input


@dataclass(frozen=True)
class Token:
    """A single lexical token."""
    kind: TokenKind
    value: str = ""
    position: int = 0
    implicit: bool = False  # True for closing braces added by recovery

    def is_command(self, name: str) -> bool:
        return self.kind == TokenKind.COMMAND and self.value == name

    def is_char(self, char: str) -> bool:
        return self.kind == TokenKind.CHAR and self.value == char


@dataclass(frozen=True)
class LexIssue:
    """Recovered lexing anomaly (currently only unterminated groups)."""
    position: int
    message: str


SINGLE_CHAR_TOKENS = {
    '{': TokenKind.GROUP_OPEN,
    '}': TokenKind.GROUP_CLOSE,
    '^': TokenKind.SUPERSCRIPT,
    '_': TokenKind.SUBSCRIPT,
    '&': TokenKind.ALIGNMENT,
}


class LaTeXLexer:
    """
    Tokenizer for LaTeX math source.

    The lexer is not lazy: `tokenize()` scans the whole input (formulas are
    small) and returns a list that can be re-read any number of times.
    Balance of { and } is tracked so unterminated groups can be closed.
    """

    def __init__(self, source: str):
        self.source = source or ""
        self.issues: List[LexIssue] = []

    def tokenize(self) -> List[Token]:
        src = self.source
        tokens: List[Token] = []
        open_groups: List[int] = []
        i = 0
        n = len(src)

        while i < n:
            c = src[i]

            if c.isspace():
                start = i
                while i < n and src[i].isspace():
                    i += 1
                tokens.append(Token(TokenKind.SPACE, ' ', start))
                continue

            if c == '\\':
                start = i
                i += 1
                if i >= n:
                    # A lone trailing backslash is kept as a literal character
                    tokens.append(Token(TokenKind.CHAR, '\\', start))
                    continue
                if src[i].isalpha() and src[i].isascii():
                    while i < n and src[i].isalpha() and src[i].isascii():
                        i += 1
                    tokens.append(Token(TokenKind.COMMAND, src[start:i], start))
                    # Spaces after a control word only terminate it
                    while i < n and src[i] in ' \t':
                        i += 1
                else:
                    tokens.append(Token(TokenKind.COMMAND, src[start:i + 1], start))
                    i += 1
                continue

            if c == '#':
                if i + 1 < n and (src[i + 1].isdigit() or src[i + 1] == '?'):
                    tokens.append(Token(TokenKind.ARGUMENT, src[i:i + 2], i))
                    i += 2
                else:
                    tokens.append(Token(TokenKind.CHAR, '#', i))
                    i += 1
                continue

            if c == '%':
                # Comment: skip to end of line
                while i < n and src[i] != '\n':
                    i += 1
                continue

            kind = SINGLE_CHAR_TOKENS.get(c)
            if kind is not None:
                if kind == TokenKind.GROUP_OPEN:
                    open_groups.append(i)
                elif kind == TokenKind.GROUP_CLOSE and open_groups:
                    open_groups.pop()
                tokens.append(Token(kind, c, i))
            else:
                tokens.append(Token(TokenKind.CHAR, c, i))
            i += 1

        # Recovery: close any group left open
        for start in reversed(open_groups):
            self.issues.append(LexIssue(start, "unterminated group"))
            tokens.append(Token(TokenKind.GROUP_CLOSE, '}', n, implicit=True))

        tokens.append(Token(TokenKind.END, '', n))
        return tokens


def tokenize(source: str) -> List[Token]:
    """Tokenize LaTeX source into a list of tokens ending with END."""
    return LaTeXLexer(source).tokenize()


def tokens_to_string(tokens: List[Token]) -> str:
    """Debug helper: show tokens as a compact string."""
    parts = []
    for tok in tokens:
        if tok.kind == TokenKind.END:
            continue
        if tok.kind == TokenKind.SPACE:
            parts.append('␣')
        else:
            parts.append(tok.value)
    return ' '.join(parts)
