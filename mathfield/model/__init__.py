"""
Math Editor Model Package

Modules:
    - atom / math_path: expression tree and value paths into it
    - parser / latex_output / spoken_text: LaTeX in, LaTeX and speech out
    - editable_mathlist: structural editor (selection, navigation, mutation)
    - undo: snapshot-based undo/redo
    - layout / box_geometry: box tree with TeX metrics, hit-testing
    - commands / shortcut_matcher: command protocol, command bar, shortcuts
    - mathfield: MathField, the editor facade
"""

from .atom import Atom, AtomKind, Relation, make_placeholder, make_root, make_symbol
from .math_path import InvalidPathError, MathPath, PathStep, resolve_path
from .parser import IssueKind, ParseIssue, ParseResult, parse, parse_latex
from .latex_output import to_latex
from .spoken_text import to_speakable_text
from .editable_mathlist import EditableMathlist, EditStatus
from .undo import UndoManager
from .layout import Box, LayoutEngine, MathStyle, layout
from .box_geometry import BoundingBox, nearest_atom
from .commands import Command, InsertArgs, Operation, parse_command, suggest_commands
from .shortcut_matcher import ShortcutMatch, match_end_of, match_keystroke
from .mathfield import CommandResult, MathField

__all__ = [
    # Tree
    'Atom',
    'AtomKind',
    'Relation',
    'make_placeholder',
    'make_root',
    'make_symbol',
    'InvalidPathError',
    'MathPath',
    'PathStep',
    'resolve_path',
    # LaTeX
    'IssueKind',
    'ParseIssue',
    'ParseResult',
    'parse',
    'parse_latex',
    'to_latex',
    'to_speakable_text',
    # Editing
    'EditableMathlist',
    'EditStatus',
    'UndoManager',
    'Command',
    'InsertArgs',
    'Operation',
    'parse_command',
    'suggest_commands',
    'ShortcutMatch',
    'match_end_of',
    'match_keystroke',
    'CommandResult',
    'MathField',
    # Layout
    'Box',
    'LayoutEngine',
    'MathStyle',
    'layout',
    'BoundingBox',
    'nearest_atom',
]
