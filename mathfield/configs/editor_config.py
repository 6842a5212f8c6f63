"""
Editor configuration.

Keys of the external configuration surface are camelCase
(`overrideDefaultInlineShortcuts`, `inlineShortcuts`); `from_dict` accepts
those as well as the snake_case field names.
"""

from dataclasses import dataclass, field, fields
from typing import Callable, Dict, Optional


@dataclass
class EditorConfig:
    """Configuration consumed by the editor core."""

    # Shortcuts
    override_default_inline_shortcuts: bool = False
    inline_shortcuts: Dict[str, Optional[str]] = field(default_factory=dict)

    # Navigation
    wrap_around: bool = True
    on_move_out_of: Optional[Callable[[int], bool]] = None   # direction -> wrap?
    on_selection_did_change: Optional[Callable[[object], None]] = None

    # Undo
    undo_max_depth: int = 1000

    # Layout
    default_style: str = "display"

    @classmethod
    def from_dict(cls, options: Dict) -> 'EditorConfig':
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _snake_case(key)
            if name not in names:
                raise ValueError(f"Unknown editor option: {key}")
            kwargs[name] = value
        config = cls(**kwargs)
        if config.undo_max_depth < 1:
            raise ValueError("undo_max_depth must be at least 1")
        return config


def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append('_')
            out.append(ch.lower())
        else:
            out.append(ch)
    return ''.join(out)
