"""
LaTeX Parser

Recursive-descent parser from a token list to a forest of Atoms.

Supported input:
- Symbols and argument-less commands (x, +, \\alpha, \\le, \\sum)
- Superscripts and subscripts on the previous atom (x^2, x_{i}^{n})
- Fractions, roots with optional index, accents, font variants, \\text{}
- Grouping braces, \\left...\\right, \\begin{env}...\\end{env}
- Template arguments: #0..#9 (caller supplied atoms), #? (placeholder)

The parser never fails. Anomalies are recovered in place and collected as
ParseIssue entries:
- UNTERMINATED_GROUP: a { without matching } (closed at end of input)
- UNKNOWN_COMMAND: kept as an error atom with the command name
- INVALID_ARGUMENT_COUNT: command without enough arguments, kept as an
  error atom followed by the arguments that were read
- DOUBLE_SCRIPT: second ^ (or _) on one atom, moved to a placeholder base
- STRAY_CLOSE: } or \\right without an opening counterpart (dropped)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from ..data.latex_lexer import LaTeXLexer, Token, TokenKind
from ..data.symbol_table import ENVIRONMENTS, GLYPH_TO_COMMAND, lookup
from .atom import (
    Atom, AtomKind, Relation, clone_list, filled, make_placeholder, make_symbol,
)

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    UNTERMINATED_GROUP = "unterminated_group"
    UNKNOWN_COMMAND = "unknown_command"
    INVALID_ARGUMENT_COUNT = "invalid_argument_count"
    DOUBLE_SCRIPT = "double_script"
    STRAY_CLOSE = "stray_close"


@dataclass(frozen=True)
class ParseIssue:
    kind: IssueKind
    position: int
    message: str


@dataclass
class ParseResult:
    atoms: List[Atom]
    issues: List[ParseIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def has_issue(self, kind: IssueKind) -> bool:
        return any(issue.kind == kind for issue in self.issues)


Terminator = Callable[[Token], bool]

# Arguments are parsed in text mode for these commands
TEXT_COMMANDS = {r"\text", r"\mbox", r"\textrm"}


class Parser:
    """
    Parser over a token list.

    Args:
        tokens: Output of the lexer, terminated by END
        args: Atom forests substituted for #0, #1, ...
    """

    def __init__(self, tokens: List[Token], args: Optional[Sequence[List[Atom]]] = None):
        self.tokens = tokens
        self.pos = 0
        self.args = list(args or [])
        self.issues: List[ParseIssue] = []

    # -------------------------------------------------------------------------
    # Token access
    # -------------------------------------------------------------------------

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != TokenKind.END:
            self.pos += 1
        return tok

    def at_end(self) -> bool:
        return self.peek().kind == TokenKind.END

    def skip_spaces(self):
        while self.peek().kind == TokenKind.SPACE:
            self.pos += 1

    def report(self, kind: IssueKind, position: int, message: str):
        self.issues.append(ParseIssue(kind, position, message))
        logger.debug("parse issue at %d: %s", position, message)

    # -------------------------------------------------------------------------
    # Sequences
    # -------------------------------------------------------------------------

    def parse(self, mode: str = 'math') -> List[Atom]:
        """Parse the whole token list."""
        atoms = self.parse_sequence(mode)
        while not self.at_end():
            # Only a stray } stops a top-level sequence
            tok = self.advance()
            if tok.implicit:
                continue
            self.report(IssueKind.STRAY_CLOSE, tok.position, "unbalanced '}'")
            atoms.extend(self.parse_sequence(mode))
        return atoms

    def parse_sequence(self, mode: str, terminator: Optional[Terminator] = None) -> List[Atom]:
        """Parse atoms until END, a closing brace, or `terminator` matches."""
        result: List[Atom] = []
        while True:
            tok = self.peek()
            if tok.kind in (TokenKind.END, TokenKind.GROUP_CLOSE):
                break
            if terminator is not None and terminator(tok):
                break

            if tok.kind == TokenKind.SPACE:
                self.advance()
                if mode == 'text':
                    result.append(Atom(AtomKind.TEXT, ' '))
            elif tok.kind in (TokenKind.SUPERSCRIPT, TokenKind.SUBSCRIPT) and mode == 'math':
                self.advance()
                self.parse_script(result, tok, mode)
            elif tok.kind == TokenKind.ALIGNMENT:
                self.advance()
                result.append(Atom(AtomKind.ALIGN, '&'))
            else:
                result.extend(self.parse_atom(mode))
        return result

    def parse_script(self, result: List[Atom], marker: Token, mode: str):
        relation = Relation.SUPERSCRIPT if marker.kind == TokenKind.SUPERSCRIPT else Relation.SUBSCRIPT
        script = self.parse_argument(mode)
        if script is None:
            self.report(IssueKind.INVALID_ARGUMENT_COUNT, marker.position,
                        f"missing argument for '{marker.value}'")
            script = []

        base = result[-1] if result and result[-1].can_have_scripts else None
        if base is None:
            base = make_placeholder()
            result.append(base)
        elif base.slot(relation) is not None:
            self.report(IssueKind.DOUBLE_SCRIPT, marker.position,
                        f"double '{marker.value}' on one atom")
            logger.warning("double %s at %d moved to a placeholder base",
                           relation.name.lower(), marker.position)
            base = make_placeholder()
            result.append(base)
        base.set_slot(relation, filled(script))

    # -------------------------------------------------------------------------
    # Arguments
    # -------------------------------------------------------------------------

    def parse_group(self, mode: str) -> List[Atom]:
        """Parse `{ ... }`; the opening brace has been consumed."""
        body = self.parse_sequence(mode)
        if self.peek().kind == TokenKind.GROUP_CLOSE:
            tok = self.advance()
            if tok.implicit:
                self.report(IssueKind.UNTERMINATED_GROUP, tok.position, "unterminated group")
        return body

    def parse_argument(self, mode: str) -> Optional[List[Atom]]:
        """A required argument: a braced group or a single atom. None if missing."""
        self.skip_spaces()
        tok = self.peek()
        if tok.kind == TokenKind.GROUP_OPEN:
            self.advance()
            return self.parse_group(mode)
        if tok.kind in (TokenKind.COMMAND, TokenKind.CHAR, TokenKind.ARGUMENT):
            if tok.kind == TokenKind.COMMAND and tok.value in (r"\right", r"\end"):
                return None
            return self.parse_atom(mode)
        return None

    def parse_optional_argument(self, mode: str) -> Optional[List[Atom]]:
        """`[ ... ]` if present."""
        self.skip_spaces()
        if not self.peek().is_char('['):
            return None
        self.advance()
        body = self.parse_sequence(mode, terminator=lambda t: t.is_char(']'))
        if self.peek().is_char(']'):
            self.advance()
        return body

    def read_name(self) -> Optional[str]:
        """Literal `{name}` used by \\begin and \\end."""
        self.skip_spaces()
        if self.peek().kind != TokenKind.GROUP_OPEN:
            return None
        self.advance()
        chars = []
        while self.peek().kind in (TokenKind.CHAR, TokenKind.SPACE):
            chars.append(self.advance().value)
        if self.peek().kind == TokenKind.GROUP_CLOSE:
            self.advance()
        return ''.join(chars).strip()

    def read_delimiter(self) -> str:
        """Delimiter following \\left or \\right."""
        self.skip_spaces()
        tok = self.peek()
        if tok.kind in (TokenKind.CHAR, TokenKind.COMMAND) and tok.value not in (r"\right", r"\end"):
            self.advance()
            return tok.value
        return '.'

    # -------------------------------------------------------------------------
    # Atoms
    # -------------------------------------------------------------------------

    def parse_atom(self, mode: str) -> List[Atom]:
        """Parse one atom (commands may expand to more than one)."""
        tok = self.advance()

        if tok.kind == TokenKind.GROUP_OPEN:
            body = self.parse_group(mode)
            if not body:
                return [make_placeholder()]
            return [Atom(AtomKind.GROUP, children=body)]

        if tok.kind == TokenKind.ARGUMENT:
            return self.parse_template_argument(tok)

        if tok.kind == TokenKind.COMMAND:
            return self.parse_command(tok, mode)

        if tok.kind in (TokenKind.SUPERSCRIPT, TokenKind.SUBSCRIPT, TokenKind.ALIGNMENT):
            # Literal in text mode
            return [Atom(AtomKind.TEXT, tok.value)]

        return [self.make_char(tok.value, mode)]

    def make_char(self, char: str, mode: str) -> Atom:
        if mode == 'text':
            return Atom(AtomKind.TEXT, char)
        if char == '#':
            return make_symbol(r"\#")
        if char == '\\':
            return Atom(AtomKind.ERROR, '\\', is_error=True)
        command = GLYPH_TO_COMMAND.get(char)
        if command is not None and not char.isascii():
            return make_symbol(command)
        return make_symbol(char)

    def parse_template_argument(self, tok: Token) -> List[Atom]:
        if tok.value == '#?':
            return [make_placeholder()]
        index = int(tok.value[1])
        if index < len(self.args) and self.args[index]:
            return clone_list(self.args[index])
        return [make_placeholder()]

    def parse_command(self, tok: Token, mode: str) -> List[Atom]:
        name = tok.value

        if name == r"\left":
            return [self.parse_leftright(tok, mode)]
        if name == r"\right":
            self.read_delimiter()
            self.report(IssueKind.STRAY_CLOSE, tok.position, r"\right without \left")
            return []
        if name == r"\begin":
            return [self.parse_environment(tok, mode)]
        if name == r"\end":
            self.read_name()
            self.report(IssueKind.STRAY_CLOSE, tok.position, r"\end without \begin")
            return []
        if name == '\\\\':
            return [Atom(AtomKind.ALIGN, '\\\\')]
        if name == r"\placeholder":
            self.parse_argument('text')
            return [make_placeholder()]

        spec = lookup(name)
        if spec is None:
            self.report(IssueKind.UNKNOWN_COMMAND, tok.position, f"unknown command {name}")
            return [Atom(AtomKind.ERROR, name, is_error=True)]

        if spec.arity == 0:
            return [make_symbol(name)]

        kind = AtomKind(spec.kind)
        index = None
        if spec.optional_arg:
            index = self.parse_optional_argument(mode)

        arg_mode = 'text' if name in TEXT_COMMANDS else mode
        args = []
        for _ in range(spec.arity):
            arg = self.parse_argument(arg_mode)
            if arg is None:
                self.report(IssueKind.INVALID_ARGUMENT_COUNT, tok.position,
                            f"{name} expects {spec.arity} argument(s)")
                restored = [Atom(AtomKind.ERROR, name, is_error=True)]
                restored.extend(Atom(AtomKind.GROUP, children=a) if a else make_placeholder()
                                for a in args)
                return restored
            args.append(arg)

        if kind == AtomKind.FRACTION:
            return [Atom(kind, name, numerator=filled(args[0]), denominator=filled(args[1]))]
        if kind == AtomKind.RADICAL:
            return [Atom(kind, name, radicand=filled(args[0]),
                         index=index if index else None)]
        return [Atom(kind, name, children=filled(args[0]))]

    def parse_leftright(self, tok: Token, mode: str) -> Atom:
        left = self.read_delimiter()
        body = self.parse_sequence(mode, terminator=lambda t: t.is_command(r"\right"))
        if self.peek().is_command(r"\right"):
            self.advance()
            right = self.read_delimiter()
        else:
            self.report(IssueKind.UNTERMINATED_GROUP, tok.position, r"\left without \right")
            right = '.'
        return Atom(AtomKind.LEFTRIGHT, left, children=filled(body), right=right)

    def parse_environment(self, tok: Token, mode: str) -> Atom:
        name = self.read_name() or ''
        body = self.parse_sequence(mode, terminator=lambda t: t.is_command(r"\end"))
        if self.peek().is_command(r"\end"):
            self.advance()
            end_name = self.read_name()
            if end_name != name:
                self.report(IssueKind.STRAY_CLOSE, tok.position,
                            f"\\begin{{{name}}} ended by \\end{{{end_name}}}")
        else:
            self.report(IssueKind.UNTERMINATED_GROUP, tok.position, f"unterminated environment {name}")
        atom = Atom(AtomKind.ARRAY, name, children=body)
        if name not in ENVIRONMENTS:
            self.report(IssueKind.UNKNOWN_COMMAND, tok.position, f"unknown environment {name}")
            atom.is_error = True
        return atom


# =============================================================================
# Entry Points
# =============================================================================

def parse_tokens(tokens: List[Token], mode: str = 'math',
                 args: Optional[Sequence[List[Atom]]] = None) -> ParseResult:
    parser = Parser(tokens, args)
    atoms = parser.parse(mode)
    return ParseResult(atoms, parser.issues)


def parse_latex(source: str, mode: str = 'math',
                args: Optional[Sequence[List[Atom]]] = None) -> ParseResult:
    """
    Lex and parse a LaTeX string.

    Args:
        source: LaTeX source
        mode: 'math' or 'text'
        args: Atom forests for #0, #1, ... (copied, never aliased)

    Returns:
        ParseResult with the atom forest and any recovered issues
    """
    lexer = LaTeXLexer(source)
    tokens = lexer.tokenize()
    result = parse_tokens(tokens, mode, args)
    if result.issues:
        logger.debug("parsed %r with %d issue(s)", source, len(result.issues))
    return result


def parse(source: str, mode: str = 'math') -> List[Atom]:
    """Parse LaTeX and return only the atoms."""
    return parse_latex(source, mode).atoms
