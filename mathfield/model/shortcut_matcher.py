"""
Shortcut Matcher

Pure lookups over the read-only shortcut tables and a caller-supplied
EditorConfig:

- match_end_of: longest inline shortcut that ends the typed text
- match_keystroke: key combination -> Command, per parse mode
- suggest: command-name completion (delegates to the symbol table)
"""

from typing import Dict, List, NamedTuple, Optional

from ..configs.editor_config import EditorConfig
from ..data import symbol_table
from ..data.shortcuts import INLINE_SHORTCUTS, KEYSTROKES, normalize_keystroke
from .commands import Command, parse_command


class ShortcutMatch(NamedTuple):
    match: str        # The trigger text, e.g. "pi"
    substitute: str   # LaTeX to insert, e.g. "\\pi"


def active_shortcuts(config: Optional[EditorConfig] = None) -> Dict[str, str]:
    """
    The effective shortcut table.

    User shortcuts win over built-ins. A user value of None disables that
    built-in trigger. With override_default_inline_shortcuts the built-ins are
    skipped entirely.
    """
    config = config or EditorConfig()
    table: Dict[str, Optional[str]] = {}
    if not config.override_default_inline_shortcuts:
        table.update(INLINE_SHORTCUTS)
    table.update(config.inline_shortcuts)
    return {trigger: sub for trigger, sub in table.items() if sub is not None}


def match_end_of(text: str, config: Optional[EditorConfig] = None) -> Optional[ShortcutMatch]:
    """Longest registered trigger that is a suffix of `text`."""
    if not text:
        return None
    table = active_shortcuts(config)
    for start in range(len(text)):
        candidate = text[start:]
        substitute = table.get(candidate)
        if substitute is not None:
            return ShortcutMatch(candidate, substitute)
    return None


def match_keystroke(mode: str, keystroke: str) -> Optional[Command]:
    """
    Command bound to a key combination in `mode` ('math' or 'command').

    Text mode shares the math table.
    """
    table = KEYSTROKES.get(mode, KEYSTROKES['math'])
    selector = table.get(normalize_keystroke(keystroke))
    if selector is None:
        return None
    return parse_command(selector)


def suggest(prefix: str, limit: Optional[int] = None) -> List[symbol_table.Suggestion]:
    return symbol_table.suggest(prefix, limit)
