"""
Math Editor Static Data

- LaTeXLexer / tokenize: LaTeX source to token list
- Symbol/command table: command arity, atom kind, glyphs, suggestions
- Inline shortcut and keystroke tables
"""

from .latex_lexer import (
    LaTeXLexer,
    LexIssue,
    Token,
    TokenKind,
    tokenize,
    tokens_to_string,
)
from .symbol_table import (
    COMMANDS,
    ENVIRONMENTS,
    CommandSpec,
    EnvironmentSpec,
    Suggestion,
    char_kind,
    glyph_for,
    lookup,
    speech_for,
    suggest,
)
from .shortcuts import (
    INLINE_SHORTCUTS,
    KEYSTROKES,
    normalize_keystroke,
    shortcuts_for,
)

__all__ = [
    'LaTeXLexer',
    'LexIssue',
    'Token',
    'TokenKind',
    'tokenize',
    'tokens_to_string',
    'COMMANDS',
    'ENVIRONMENTS',
    'CommandSpec',
    'EnvironmentSpec',
    'Suggestion',
    'char_kind',
    'glyph_for',
    'lookup',
    'speech_for',
    'suggest',
    'INLINE_SHORTCUTS',
    'KEYSTROKES',
    'normalize_keystroke',
    'shortcuts_for',
]
