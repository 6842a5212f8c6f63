"""
mathfield: an editable math formula core.

LaTeX is parsed into an atom tree, edited structurally through a selection
of paths, serialized back to LaTeX or spoken text, and laid out as a tree of
boxes with TeX metrics.
"""

from .configs import EditorConfig, setup_logging
from .model import (
    EditStatus,
    MathField,
    MathPath,
    MathStyle,
    layout,
    parse,
    parse_latex,
    to_latex,
    to_speakable_text,
)

__version__ = "0.1.0"

__all__ = [
    'EditorConfig',
    'setup_logging',
    'EditStatus',
    'MathField',
    'MathPath',
    'MathStyle',
    'layout',
    'parse',
    'parse_latex',
    'to_latex',
    'to_speakable_text',
]
