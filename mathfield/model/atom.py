"""
Atom Expression Tree

The shared tree representation used by the parser, the structural editor, the
serializers and the layout engine.

Each Atom holds its content in named slots:
- CHILDREN: body of root, group, accent, font, leftright and array atoms
- SUPERSCRIPT / SUBSCRIPT: optional scripts, allowed on any non-root atom
- NUMERATOR / DENOMINATOR: fractions (both always present)
- INDEX / RADICAND: radicals (radicand always present, index optional)

A slot is either None (absent) or a list of atoms. Required slots are never
empty: an unfilled slot holds a single placeholder atom. Only the root body may
be an empty list.

`identity`, `has_caret`, `is_selected` and `caret_leading` are excluded from
equality, so two trees compare equal when they have the same structure and
content regardless of which atom instances make them up.
"""

import copy
import itertools
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Iterator, List, Optional

from ..data.symbol_table import char_kind, lookup


class AtomKind(Enum):
    """Closed set of atom kinds. Values double as layout class names."""
    ROOT = "root"
    ORD = "mord"
    BIN = "mbin"
    REL = "mrel"
    OPEN = "mopen"
    CLOSE = "mclose"
    PUNCT = "mpunct"
    OP = "mop"
    GROUP = "group"
    FRACTION = "genfrac"
    RADICAL = "surd"
    ACCENT = "accent"
    FONT = "font"
    LEFTRIGHT = "leftright"
    ARRAY = "array"
    SPACING = "spacing"
    TEXT = "text"
    PLACEHOLDER = "placeholder"
    COMMAND = "command"
    ERROR = "error"
    ALIGN = "align"


class Relation(IntEnum):
    """Child slots of an atom, in document (traversal) order."""
    CHILDREN = 0
    SUPERSCRIPT = 1
    SUBSCRIPT = 2
    NUMERATOR = 3
    DENOMINATOR = 4
    INDEX = 5
    RADICAND = 6


SLOT_NAMES = {
    Relation.CHILDREN: 'children',
    Relation.SUPERSCRIPT: 'superscript',
    Relation.SUBSCRIPT: 'subscript',
    Relation.NUMERATOR: 'numerator',
    Relation.DENOMINATOR: 'denominator',
    Relation.INDEX: 'index',
    Relation.RADICAND: 'radicand',
}

# Kinds whose body lives in CHILDREN
BODY_KINDS = {
    AtomKind.ROOT, AtomKind.GROUP, AtomKind.ACCENT, AtomKind.FONT,
    AtomKind.LEFTRIGHT, AtomKind.ARRAY,
}

# Atoms that stand for a single symbol
SYMBOL_KINDS = {
    AtomKind.ORD, AtomKind.BIN, AtomKind.REL, AtomKind.OPEN, AtomKind.CLOSE,
    AtomKind.PUNCT, AtomKind.OP, AtomKind.SPACING, AtomKind.TEXT,
}

_identity_counter = itertools.count(1)


def _next_identity() -> int:
    return next(_identity_counter)


@dataclass
class Atom:
    """A node of the expression tree."""
    kind: AtomKind
    value: str = ""

    children: Optional[List['Atom']] = None
    superscript: Optional[List['Atom']] = None
    subscript: Optional[List['Atom']] = None
    numerator: Optional[List['Atom']] = None
    denominator: Optional[List['Atom']] = None
    index: Optional[List['Atom']] = None
    radicand: Optional[List['Atom']] = None

    right: str = ""              # Closing delimiter of a leftright atom
    is_error: bool = False       # Unknown command / unbalanced input
    is_suggestion: bool = False  # Autocomplete preview in command mode

    # Not part of the tree's value
    identity: int = field(default_factory=_next_identity, compare=False)
    has_caret: bool = field(default=False, compare=False, repr=False)
    caret_leading: bool = field(default=False, compare=False, repr=False)
    is_selected: bool = field(default=False, compare=False, repr=False)

    # -------------------------------------------------------------------------
    # Slots
    # -------------------------------------------------------------------------

    def slot(self, relation: Relation) -> Optional[List['Atom']]:
        return getattr(self, SLOT_NAMES[relation])

    def set_slot(self, relation: Relation, atoms: Optional[List['Atom']]):
        setattr(self, SLOT_NAMES[relation], atoms)

    def relations(self) -> List[Relation]:
        """Relations of the slots present on this atom, in document order."""
        return [rel for rel in Relation if self.slot(rel) is not None]

    def required_relations(self) -> List[Relation]:
        """Structural slots that must always hold content."""
        if self.kind == AtomKind.FRACTION:
            return [Relation.NUMERATOR, Relation.DENOMINATOR]
        if self.kind == AtomKind.RADICAL:
            return [Relation.RADICAND]
        if self.kind in BODY_KINDS and self.kind not in (AtomKind.ROOT, AtomKind.ARRAY):
            return [Relation.CHILDREN]
        return []

    @property
    def is_placeholder(self) -> bool:
        return self.kind == AtomKind.PLACEHOLDER

    @property
    def can_have_scripts(self) -> bool:
        return self.kind not in (AtomKind.ROOT, AtomKind.ALIGN)

    @property
    def has_scripts(self) -> bool:
        return self.superscript is not None or self.subscript is not None

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def iter_atoms(self) -> Iterator['Atom']:
        """Depth-first iteration over this atom and all its descendants."""
        yield self
        for rel in self.relations():
            for child in self.slot(rel):
                yield from child.iter_atoms()

    def contains_atom(self, other: 'Atom') -> bool:
        return any(atom is other for atom in self.iter_atoms())

    def clone(self, fresh_identity: bool = True) -> 'Atom':
        """Deep copy. With fresh_identity, every copied atom gets a new identity."""
        result = copy.deepcopy(self)
        if fresh_identity:
            for atom in result.iter_atoms():
                atom.identity = _next_identity()
        return result

    def __repr__(self) -> str:
        parts = [self.kind.value]
        if self.value:
            parts.append(repr(self.value))
        for rel in self.relations():
            parts.append(f"{SLOT_NAMES[rel]}={self.slot(rel)!r}")
        return f"Atom({', '.join(parts)})"


# =============================================================================
# Constructors
# =============================================================================

def make_root(children: Optional[List[Atom]] = None) -> Atom:
    return Atom(AtomKind.ROOT, children=list(children or []))


def make_placeholder() -> Atom:
    return Atom(AtomKind.PLACEHOLDER)


def make_symbol(value: str, kind: Optional[AtomKind] = None) -> Atom:
    """Symbol atom for a character or an argument-less command."""
    if kind is None:
        spec = lookup(value)
        kind = AtomKind(spec.kind) if spec is not None else AtomKind(char_kind(value))
    return Atom(kind, value)


def make_fraction(numerator: List[Atom], denominator: List[Atom],
                  command: str = r"\frac") -> Atom:
    return Atom(AtomKind.FRACTION, command,
                numerator=filled(numerator), denominator=filled(denominator))


def make_radical(radicand: List[Atom], index: Optional[List[Atom]] = None) -> Atom:
    return Atom(AtomKind.RADICAL, r"\sqrt", radicand=filled(radicand),
                index=list(index) if index else None)


def make_group(kind: AtomKind, value: str, body: List[Atom]) -> Atom:
    """Body-carrying atom (group, accent, font, leftright)."""
    return Atom(kind, value, children=filled(body))


def filled(atoms: Optional[List[Atom]]) -> List[Atom]:
    """A required slot: the given atoms, or a lone placeholder."""
    atoms = list(atoms or [])
    return atoms if atoms else [make_placeholder()]


def is_placeholder_list(atoms: Optional[List[Atom]]) -> bool:
    """True for a slot holding only placeholders (or nothing)."""
    return not atoms or all(a.is_placeholder and not a.has_scripts for a in atoms)


def find_atom(atoms: List[Atom], predicate: Callable[[Atom], bool]) -> Optional[Atom]:
    for atom in atoms:
        for candidate in atom.iter_atoms():
            if predicate(candidate):
                return candidate
    return None


def clone_list(atoms: List[Atom], fresh_identity: bool = True) -> List[Atom]:
    return [atom.clone(fresh_identity) for atom in atoms]


def strip_transient(atom: Atom):
    """Reset the presentation flags of a subtree."""
    for a in atom.iter_atoms():
        a.has_caret = False
        a.caret_leading = False
        a.is_selected = False

