"""
Paths into the atom tree.

A MathPath is an immutable sequence of (relation, offset) steps starting at the
root. Every step but the last descends into the atom at `offset` of the
`relation` slot of the current atom. The last step names a sibling list and a
position in it: offset k means "after the atom at k", offset -1 means "before
the first atom".

Paths are values. They are compared step by step, never hold references into
the tree, and must be re-resolved after any mutation.
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from .atom import Atom, AtomKind, Relation, SLOT_NAMES


class InvalidPathError(ValueError):
    """A path that does not resolve in the tree (or cannot be parsed)."""


@dataclass(frozen=True, order=True)
class PathStep:
    relation: Relation
    offset: int

    def __str__(self) -> str:
        return f"{SLOT_NAMES[self.relation]}:{self.offset}"


_RELATION_BY_NAME = {name: rel for rel, name in SLOT_NAMES.items()}


@dataclass(frozen=True, order=True)
class MathPath:
    """Position of a caret (or selection endpoint) in the tree."""
    steps: Tuple[PathStep, ...] = ()

    @classmethod
    def of(cls, *pairs: Tuple[Relation, int]) -> 'MathPath':
        return cls(tuple(PathStep(Relation(rel), off) for rel, off in pairs))

    @classmethod
    def start(cls) -> 'MathPath':
        return cls.of((Relation.CHILDREN, -1))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def depth(self) -> int:
        return len(self.steps)

    @property
    def relation(self) -> Relation:
        return self.steps[-1].relation

    @property
    def offset(self) -> int:
        return self.steps[-1].offset

    def with_offset(self, offset: int) -> 'MathPath':
        last = self.steps[-1]
        return MathPath(self.steps[:-1] + (PathStep(last.relation, offset),))

    def parent(self) -> 'MathPath':
        """Path of the atom that owns the last sibling list, as a caret after it."""
        return MathPath(self.steps[:-1])

    def child(self, relation: Relation, offset: int) -> 'MathPath':
        """Descend into the atom at this path's offset."""
        return MathPath(self.steps + (PathStep(relation, offset),))

    def is_ancestor_of(self, other: 'MathPath') -> bool:
        return len(other.steps) > len(self.steps) and other.steps[:len(self.steps)] == self.steps

    # -------------------------------------------------------------------------
    # String form
    # -------------------------------------------------------------------------

    def to_string(self) -> str:
        return '/'.join(str(step) for step in self.steps)

    @classmethod
    def from_string(cls, text: str) -> 'MathPath':
        """Parse "children:3/superscript:0" back into a path."""
        steps = []
        for part in text.strip().split('/'):
            name, sep, offset = part.partition(':')
            if not sep or name not in _RELATION_BY_NAME:
                raise InvalidPathError(f"Bad path step: {part!r}")
            try:
                steps.append(PathStep(_RELATION_BY_NAME[name], int(offset)))
            except ValueError:
                raise InvalidPathError(f"Bad path offset: {part!r}")
        return cls(tuple(steps))

    def __str__(self) -> str:
        return self.to_string()


class PathTarget(NamedTuple):
    """What a path resolves to: a sibling list and a position in it."""
    parent: Atom             # Atom owning the sibling list
    relation: Relation
    siblings: List[Atom]     # The live list (mutations go through it)
    offset: int


def resolve_path(root: Atom, path: MathPath, strict: bool = False) -> Optional[PathTarget]:
    """
    Resolve a path against a tree.

    Returns None for a path that does not fit the tree, or raises
    InvalidPathError when `strict` is set.
    """
    def fail(message: str):
        if strict:
            raise InvalidPathError(f"{message}: {path}")
        return None

    if root.kind != AtomKind.ROOT or not path.steps:
        return fail("empty path")
    if path.steps[0].relation != Relation.CHILDREN:
        return fail("path must start in the root body")

    atom = root
    for step in path.steps[:-1]:
        slot = atom.slot(step.relation)
        if slot is None or not 0 <= step.offset < len(slot):
            return fail("path step out of range")
        atom = slot[step.offset]

    last = path.steps[-1]
    siblings = atom.slot(last.relation)
    if siblings is None or not -1 <= last.offset < len(siblings):
        return fail("path offset out of range")
    return PathTarget(atom, last.relation, siblings, last.offset)


def atom_at(root: Atom, path: MathPath) -> Optional[Atom]:
    """The atom immediately before the position of `path` (None at offset -1)."""
    target = resolve_path(root, path)
    if target is None or target.offset < 0:
        return None
    return target.siblings[target.offset]


def path_for_atom(root: Atom, identity: int) -> Optional[MathPath]:
    """Path of the caret right after the atom with the given identity."""
    def search(atom: Atom, prefix: Tuple[PathStep, ...]) -> Optional[MathPath]:
        for rel in atom.relations():
            for i, child in enumerate(atom.slot(rel)):
                here = prefix + (PathStep(rel, i),)
                if child.identity == identity:
                    return MathPath(here)
                found = search(child, here)
                if found is not None:
                    return found
        return None

    return search(root, ())


def common_prefix_length(a: MathPath, b: MathPath) -> int:
    n = 0
    for x, y in zip(a.steps, b.steps):
        if x != y:
            break
        n += 1
    return n
