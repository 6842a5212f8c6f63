"""
Undo Manager

Linear undo/redo over snapshots of an editor's tree and selection.

Snapshots are deep copies: nothing in the stack aliases the live tree, and a
restore copies again so the stack entry stays intact for a later redo.
"""

import copy
import logging
from dataclasses import dataclass
from typing import List

from .atom import Atom, strip_transient
from .math_path import MathPath

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    root: Atom
    anchor: MathPath
    focus: MathPath


class UndoManager:
    """
    Snapshot stack with a cursor.

    `index` is the number of snapshots "behind" the live state. Calling undo()
    when the live state has not been saved yet pushes it first so redo() can
    come back to it.
    """

    def __init__(self, mathlist, max_depth: int = 1000):
        self.mathlist = mathlist
        self.max_depth = max_depth
        self.stack: List[Snapshot] = []
        self.index = 0

    def _capture(self) -> Snapshot:
        root = copy.deepcopy(self.mathlist.root)
        strip_transient(root)
        return Snapshot(root, self.mathlist.anchor, self.mathlist.focus)

    def _restore(self, snapshot: Snapshot):
        self.mathlist.restore(copy.deepcopy(snapshot.root), snapshot.anchor, snapshot.focus)

    def can_undo(self) -> bool:
        return self.index > 0

    def can_redo(self) -> bool:
        return self.index + 1 < len(self.stack)

    def snapshot(self):
        """Save the current state, dropping any redo history."""
        del self.stack[self.index:]
        self.stack.append(self._capture())
        self.index += 1
        if len(self.stack) > self.max_depth:
            overflow = len(self.stack) - self.max_depth
            del self.stack[:overflow]
            self.index -= overflow
            logger.debug("undo stack trimmed by %d", overflow)

    def discard_if_unchanged(self) -> bool:
        """Drop the latest snapshot when the live state still equals it."""
        if not self.stack or self.index != len(self.stack):
            return False
        top = self.stack[-1]
        m = self.mathlist
        if top.root != m.root or top.anchor != m.anchor or top.focus != m.focus:
            return False
        self.stack.pop()
        self.index -= 1
        return True

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        if self.index == len(self.stack):
            # Save the live state for redo
            self.stack.append(self._capture())
        self.index -= 1
        self._restore(self.stack[self.index])
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self.index += 1
        self._restore(self.stack[self.index])
        return True

    def reset(self):
        self.stack.clear()
        self.index = 0

    def __len__(self) -> int:
        return len(self.stack)
