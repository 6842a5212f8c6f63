"""
Structural Editor

EditableMathlist owns a live atom tree and a selection (anchor and focus
paths) and exposes navigation, selection and mutation operations that keep
the tree well-formed:

- Navigation: move_to_next_char, move_to_superscript, move_to_next_placeholder, ...
- Selection: set_path, set_range, select_all, select_group, contains
- Mutation: insert, delete, promote_to_superscript/subscript
- Command mode: the run of command atoms around the caret, with
  autocomplete suggestion atoms inserted after the caret

Invariants after every call:
- anchor and focus resolve and share the same sibling list
- required slots (fraction parts, radicand, group bodies, scripts) are
  never empty; an unfilled slot holds one placeholder

Every operation returns an EditStatus. A selection that no longer resolves
(e.g. set from a stale path) yields INVALID_PATH and leaves the tree as is.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from ..configs.editor_config import EditorConfig
from ..data.symbol_table import GLYPH_TO_COMMAND
from .atom import (
    Atom, AtomKind, Relation, is_placeholder_list, make_placeholder, make_root,
    make_symbol,
)
from .commands import INSERT_FORMATS, INSERTION_MODES, SELECTION_MODES
from .latex_output import to_latex
from .math_path import MathPath, PathStep, PathTarget, path_for_atom, resolve_path
from .parser import parse_latex

logger = logging.getLogger(__name__)


class EditStatus(Enum):
    OK = "ok"
    NO_OP = "no_op"
    INVALID_PATH = "invalid_path"
    UNKNOWN_COMMAND = "unknown_command"


# Characters that are never inserted as a plain symbol
LATEX_SPECIALS = set('\\{}^_&#%')

# Atoms that end an operand for select_group
OPERAND_BOUNDARIES = (AtomKind.REL, AtomKind.PUNCT, AtomKind.ALIGN)


def _is_lone_placeholder(atoms: List[Atom]) -> bool:
    return len(atoms) == 1 and atoms[0].is_placeholder and not atoms[0].has_scripts


def _char_class(atom: Atom) -> Optional[str]:
    if atom.kind != AtomKind.ORD or len(atom.value) != 1 or atom.has_scripts:
        return None
    if atom.value.isdigit() or atom.value == '.':
        return 'digit'
    if atom.value.isalpha():
        return 'alpha'
    return None


def _find_placeholder(atom: Atom, path: MathPath) -> Optional[MathPath]:
    """Path (caret after it) of the first placeholder in a subtree."""
    if atom.is_placeholder:
        return path
    for rel in atom.relations():
        for j, child in enumerate(atom.slot(rel)):
            found = _find_placeholder(child, path.child(rel, j))
            if found is not None:
                return found
    return None


class EditableMathlist:
    """
    A live, editable atom tree with a selection.

    Args:
        root: Tree to edit (a new empty root if None)
        config: Editor configuration (wrap-around policy, callbacks)
    """

    def __init__(self, root: Optional[Atom] = None, config: Optional[EditorConfig] = None):
        self.root = root if root is not None else make_root()
        self.config = config or EditorConfig()
        self.anchor = MathPath.start()
        self.focus = MathPath.start()

    # =========================================================================
    # State
    # =========================================================================

    def restore(self, root: Atom, anchor: MathPath, focus: MathPath):
        """Replace the tree and selection (used by undo)."""
        self.root = root
        if resolve_path(root, anchor) is None or resolve_path(root, focus) is None:
            anchor = focus = MathPath.start()
        self.anchor, self.focus = anchor, focus

    def _set(self, anchor: MathPath, focus: Optional[MathPath] = None):
        focus = anchor if focus is None else focus
        changed = (anchor, focus) != (self.anchor, self.focus)
        self.anchor, self.focus = anchor, focus
        if changed:
            self._selection_did_change()

    def _selection_did_change(self):
        # Atoms the caret has moved past are no longer suggestions
        self.commit_command_string_before_insertion_point()
        if self.config.on_selection_did_change is not None:
            self.config.on_selection_did_change(self)

    def _target(self) -> Optional[PathTarget]:
        """Focus target, or None when the selection does not resolve."""
        if resolve_path(self.root, self.anchor) is None:
            return None
        return resolve_path(self.root, self.focus)

    def is_valid(self) -> bool:
        return self._target() is not None

    def siblings(self) -> List[Atom]:
        target = self._target()
        return target.siblings if target is not None else []

    def parent(self) -> Optional[Atom]:
        """Atom owning the sibling list of the selection."""
        target = self._target()
        return target.parent if target is not None else None

    def relation(self) -> Relation:
        return self.focus.relation

    def is_collapsed(self) -> bool:
        return self.anchor == self.focus

    def start_offset(self) -> int:
        return min(self.anchor.offset, self.focus.offset)

    def end_offset(self) -> int:
        return max(self.anchor.offset, self.focus.offset)

    def is_backward(self) -> bool:
        """True when the focus is before the anchor."""
        return self.focus < self.anchor

    def parse_mode(self) -> str:
        """'command', 'text' or 'math' at the caret."""
        target = self._target()
        if target is None:
            return 'math'
        if target.offset >= 0 and target.siblings[target.offset].kind == AtomKind.COMMAND:
            return 'command'
        atom = self.root
        for step in self.focus.steps[:-1]:
            atom = atom.slot(step.relation)[step.offset]
            if atom.kind == AtomKind.FONT and atom.value == r'\text':
                return 'text'
        return 'math'

    def latex(self) -> str:
        return to_latex(self.root.children)

    def path_for_atom(self, identity: int) -> Optional[MathPath]:
        return path_for_atom(self.root, identity)

    # =========================================================================
    # Selection
    # =========================================================================

    def set_path(self, path: MathPath, extent: int = 0) -> EditStatus:
        """Collapse the selection at `path`, or select `extent` atoms from it."""
        target = resolve_path(self.root, path)
        if target is None:
            return EditStatus.INVALID_PATH
        focus_offset = max(-1, min(len(target.siblings) - 1, path.offset + extent))
        self._set(path, path.with_offset(focus_offset))
        return EditStatus.OK

    def set_range(self, anchor: MathPath, focus: MathPath) -> EditStatus:
        """
        Select between two paths.

        Endpoints are brought up to their deepest common sibling list. An
        endpoint inside an atom of that list extends the selection over the
        whole atom. Endpoints in different slots of one atom select the atom.
        """
        if resolve_path(self.root, anchor) is None or resolve_path(self.root, focus) is None:
            return EditStatus.INVALID_PATH

        a, f = anchor.steps, focus.steps
        i = 0
        while i < len(a) - 1 and i < len(f) - 1 and a[i] == f[i]:
            i += 1

        if a[i].relation != f[i].relation:
            container = a[i - 1]
            before = MathPath(a[:i - 1] + (PathStep(container.relation, container.offset - 1),))
            after = MathPath(a[:i])
            if a[i].relation < f[i].relation:
                self._set(before, after)
            else:
                self._set(after, before)
            return EditStatus.OK

        a_offset, f_offset = a[i].offset, f[i].offset
        if len(a) > i + 1:
            a_offset = a[i].offset if a[i].offset > f[i].offset else a[i].offset - 1
        if len(f) > i + 1:
            f_offset = f[i].offset if f[i].offset > a[i].offset else f[i].offset - 1
        prefix = a[:i]
        self._set(MathPath(prefix + (PathStep(a[i].relation, a_offset),)),
                  MathPath(prefix + (PathStep(f[i].relation, f_offset),)))
        return EditStatus.OK

    def select_all(self) -> EditStatus:
        start = MathPath.start()
        self._set(start, start.with_offset(len(self.root.children) - 1))
        return EditStatus.OK

    def collapse_forward(self) -> EditStatus:
        if self.is_collapsed():
            return EditStatus.NO_OP
        self._set(self.focus.with_offset(self.end_offset()))
        return EditStatus.OK

    def collapse_backward(self) -> EditStatus:
        if self.is_collapsed():
            return EditStatus.NO_OP
        self._set(self.focus.with_offset(self.start_offset()))
        return EditStatus.OK

    def extract_contents(self) -> List[Atom]:
        """Selected atoms (empty when collapsed)."""
        target = self._target()
        if target is None or self.is_collapsed():
            return []
        return target.siblings[self.start_offset() + 1:self.end_offset() + 1]

    def contains(self, atom: Atom) -> bool:
        """True if `atom` is selected or inside a selected atom."""
        return any(candidate.contains_atom(atom) for candidate in self.extract_contents())

    def select_group(self) -> EditStatus:
        """
        Grow the selection to the next enclosing group:
        run of letters or digits, then operand between relations,
        then the whole sibling list, then the enclosing atom.
        """
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        siblings = target.siblings
        current = (self.start_offset(), self.end_offset())

        candidates = []
        if self.is_collapsed():
            candidates.append(self._word_range(siblings, target.offset))
        candidates.append(self._operand_range(siblings, current))
        candidates.append((-1, len(siblings) - 1))

        for candidate in candidates:
            if candidate is None:
                continue
            start, end = candidate
            if start <= current[0] and end >= current[1] and end > start and candidate != current:
                self._set(self.focus.with_offset(start), self.focus.with_offset(end))
                return EditStatus.OK

        if self.focus.depth > 1:
            container = self.focus.parent()
            self._set(container.with_offset(container.offset - 1), container)
            return EditStatus.OK
        return EditStatus.NO_OP

    @staticmethod
    def _word_range(siblings: List[Atom], offset: int) -> Optional[Tuple[int, int]]:
        if offset >= 0 and _char_class(siblings[offset]):
            pivot = offset
        elif offset + 1 < len(siblings) and _char_class(siblings[offset + 1]):
            pivot = offset + 1
        else:
            return None
        cls = _char_class(siblings[pivot])
        start = end = pivot
        while start - 1 >= 0 and _char_class(siblings[start - 1]) == cls:
            start -= 1
        while end + 1 < len(siblings) and _char_class(siblings[end + 1]) == cls:
            end += 1
        return start - 1, end

    @staticmethod
    def _operand_range(siblings: List[Atom], current: Tuple[int, int]) -> Tuple[int, int]:
        start, end = current
        while start >= 0 and siblings[start].kind not in OPERAND_BOUNDARIES:
            start -= 1
        while end + 1 < len(siblings) and siblings[end + 1].kind not in OPERAND_BOUNDARIES:
            end += 1
        return start, end

    # =========================================================================
    # Navigation
    # =========================================================================

    def _walk(self) -> List[Tuple[MathPath, Optional[Atom], bool]]:
        """
        Every caret position in document order, as
        (path, atom before the caret, inside a lone-placeholder slot).
        """
        result = []

        def visit(atoms: List[Atom], prefix: Tuple[PathStep, ...], relation: Relation):
            lone = bool(prefix) and _is_lone_placeholder(atoms)
            result.append((MathPath(prefix + (PathStep(relation, -1),)), None, lone))
            for i, atom in enumerate(atoms):
                here = prefix + (PathStep(relation, i),)
                for rel in atom.relations():
                    visit(atom.slot(rel), here, rel)
                result.append((MathPath(here), atom, lone))

        visit(self.root.children, (), Relation.CHILDREN)
        return result

    def _caret_stops(self) -> List[MathPath]:
        """Caret positions reachable by arrow keys (one stop per empty slot)."""
        return [path for path, atom, lone in self._walk() if not (lone and atom is None)]

    def _index_in(self, stops: List[MathPath], path: MathPath) -> int:
        if path not in stops:
            # Before a lone placeholder: same stop as after it
            path = path.with_offset(0)
        return stops.index(path)

    def _move_out_of(self, direction: int) -> bool:
        """Whether to wrap around at the start or end of the formula."""
        if self.config.on_move_out_of is not None:
            return bool(self.config.on_move_out_of(direction))
        return self.config.wrap_around

    def _move(self, direction: int) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        if not self.is_collapsed():
            return self.collapse_forward() if direction > 0 else self.collapse_backward()

        stops = self._caret_stops()
        index = self._index_in(stops, self.focus) + direction
        if not 0 <= index < len(stops):
            if not self._move_out_of(direction):
                return EditStatus.NO_OP
            index = 0 if direction > 0 else len(stops) - 1
        if stops[index] == self.focus:
            return EditStatus.NO_OP
        self._set(stops[index])
        return EditStatus.OK

    def move_to_next_char(self) -> EditStatus:
        return self._move(+1)

    def move_to_previous_char(self) -> EditStatus:
        return self._move(-1)

    def _move_vertically(self, up: bool) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        pairs = {
            Relation.DENOMINATOR: Relation.NUMERATOR,
            Relation.SUBSCRIPT: Relation.SUPERSCRIPT,
        } if up else {
            Relation.NUMERATOR: Relation.DENOMINATOR,
            Relation.SUPERSCRIPT: Relation.SUBSCRIPT,
        }
        steps = self.focus.steps
        for depth in range(len(steps) - 1, 0, -1):
            destination = pairs.get(steps[depth].relation)
            if destination is None:
                continue
            container = MathPath(steps[:depth])
            target = resolve_path(self.root, container)
            atom = target.siblings[target.offset]
            slot = atom.slot(destination)
            if slot is not None:
                self._set(container.child(destination, len(slot) - 1))
                return EditStatus.OK
        return EditStatus.NO_OP

    def move_up(self) -> EditStatus:
        return self._move_vertically(up=True)

    def move_down(self) -> EditStatus:
        return self._move_vertically(up=False)

    def move_to_group_start(self) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        self._set(self.focus.with_offset(-1))
        return EditStatus.OK

    def move_to_group_end(self) -> EditStatus:
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        self._set(self.focus.with_offset(len(target.siblings) - 1))
        return EditStatus.OK

    def move_to_mathfield_start(self) -> EditStatus:
        self._set(MathPath.start())
        return EditStatus.OK

    def move_to_mathfield_end(self) -> EditStatus:
        self._set(MathPath.start().with_offset(len(self.root.children) - 1))
        return EditStatus.OK

    def _leap(self, direction: int) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        walk = self._walk()
        paths = [path for path, _, _ in walk]
        current = paths.index(self.focus)
        placeholders = [i for i, (_, atom, _) in enumerate(walk)
                        if atom is not None and atom.is_placeholder]
        if not placeholders:
            return EditStatus.NO_OP

        if direction > 0:
            candidates = [i for i in placeholders if i > current]
            if not candidates and self._move_out_of(direction):
                candidates = placeholders
            index = candidates[0] if candidates else None
        else:
            # Skip the placeholder the selection is on
            start = paths.index(self.anchor) if not self.is_collapsed() else current
            candidates = [i for i in placeholders if i < min(start, current)]
            if not candidates and self._move_out_of(direction):
                candidates = placeholders
            index = candidates[-1] if candidates else None

        if index is None:
            return EditStatus.NO_OP
        path = paths[index]
        before = path.with_offset(path.offset - 1)
        if (before, path) == (self.anchor, self.focus):
            return EditStatus.NO_OP
        self._set(before, path)
        return EditStatus.OK

    def move_to_next_placeholder(self) -> EditStatus:
        return self._leap(+1)

    def move_to_previous_placeholder(self) -> EditStatus:
        return self._leap(-1)

    def _move_to_script(self, relation: Relation) -> EditStatus:
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        offset = self.end_offset()
        siblings = target.siblings
        if offset < 0 or not siblings[offset].can_have_scripts:
            siblings.insert(offset + 1, make_placeholder())
            offset += 1
        atom = siblings[offset]
        if atom.slot(relation) is None:
            atom.set_slot(relation, [make_placeholder()])
        script = atom.slot(relation)
        container = self.focus.with_offset(offset)
        self._set(container.child(relation, -1), container.child(relation, len(script) - 1))
        return EditStatus.OK

    def move_to_superscript(self) -> EditStatus:
        return self._move_to_script(Relation.SUPERSCRIPT)

    def move_to_subscript(self) -> EditStatus:
        return self._move_to_script(Relation.SUBSCRIPT)

    def _extend(self, direction: int) -> EditStatus:
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        offset = self.focus.offset + direction
        if -1 <= offset < len(target.siblings):
            self._set(self.anchor, self.focus.with_offset(offset))
            return EditStatus.OK
        if self.focus.depth == 1:
            return EditStatus.NO_OP
        # Grow over the enclosing atom
        container = self.focus.parent()
        if direction < 0:
            container = container.with_offset(container.offset - 1)
        return self.set_range(self.anchor, container)

    def extend_to_next_char(self) -> EditStatus:
        return self._extend(+1)

    def extend_to_previous_char(self) -> EditStatus:
        return self._extend(-1)

    # =========================================================================
    # Mutation helpers
    # =========================================================================

    def _needs_content(self, target: PathTarget) -> bool:
        if target.relation in (Relation.SUPERSCRIPT, Relation.SUBSCRIPT):
            return True
        return target.relation in target.parent.required_relations()

    def _fill_if_empty(self, target: PathTarget) -> bool:
        """Put a placeholder into an emptied required slot."""
        if not target.siblings and self._needs_content(target):
            target.siblings.append(make_placeholder())
            return True
        return False

    def _remove_range(self, path: MathPath, start: int, end: int):
        """Remove atoms (start, end] from the list of `path`; caret at start."""
        target = resolve_path(self.root, path)
        del target.siblings[start + 1:end + 1]
        if self._fill_if_empty(target):
            start = -1
        self._set(path.with_offset(start))

    def _delete_selection(self) -> EditStatus:
        if self.is_collapsed():
            return EditStatus.NO_OP
        self._remove_range(self.focus, self.start_offset(), self.end_offset())
        return EditStatus.OK

    def _place_caret(self, base: MathPath, offset: int, atoms: List[Atom], selection_mode: str):
        """Position the selection around atoms just inserted after `offset`."""
        last = offset + len(atoms)
        if selection_mode == 'placeholder':
            for k, atom in enumerate(atoms):
                found = _find_placeholder(atom, base.with_offset(offset + 1 + k))
                if found is not None:
                    self._set(found.with_offset(found.offset - 1), found)
                    return
            selection_mode = 'after'
        if selection_mode == 'after':
            self._set(base.with_offset(last))
        elif selection_mode == 'before':
            self._set(base.with_offset(offset))
        else:
            self._set(base.with_offset(offset), base.with_offset(last))

    def _insert_atoms(self, atoms: List[Atom], selection_mode: str = 'after'):
        target = self._target()
        siblings, offset = target.siblings, target.offset
        if _is_lone_placeholder(siblings):
            siblings.clear()
            offset = -1
        siblings[offset + 1:offset + 1] = atoms
        self._place_caret(self.focus, offset, atoms, selection_mode)

    def _make_atoms(self, text: str, fmt: str, mode: str, args: List[List[Atom]]) -> List[Atom]:
        if mode == 'command':
            return [Atom(AtomKind.COMMAND, c) for c in text]
        if fmt == 'auto' and len(text) == 1 and text not in LATEX_SPECIALS:
            if mode == 'text':
                return [Atom(AtomKind.TEXT, text)]
            if text.isspace():
                return []
            if not text.isascii() and text in GLYPH_TO_COMMAND:
                return [make_symbol(GLYPH_TO_COMMAND[text])]
            return [make_symbol(text)]
        result = parse_latex(text, 'text' if mode == 'text' else 'math', args)
        for issue in result.issues:
            logger.debug("insert %r: %s", text, issue.message)
        return result.atoms

    # =========================================================================
    # Mutation
    # =========================================================================

    def insert(self, text: str, selection_mode: str = 'placeholder',
               insertion_mode: str = 'replaceSelection', format: str = 'auto',
               mode: Optional[str] = None) -> EditStatus:
        """
        Insert a character or a LaTeX fragment.

        Args:
            text: A single character (inserted as a symbol) or LaTeX. In LaTeX,
                  #0 stands for the current selection and #? for a placeholder.
            selection_mode: 'placeholder' (select the first placeholder of the
                  inserted atoms, else as 'after'), 'after', 'before' or 'item'
            insertion_mode: 'replaceSelection', 'replaceAll', 'insertBefore'
                  or 'insertAfter'
            format: 'auto' or 'latex'
            mode: Parse mode override ('math', 'text' or 'command')
        """
        if selection_mode not in SELECTION_MODES:
            raise ValueError(f"Unknown selection mode: {selection_mode}")
        if insertion_mode not in INSERTION_MODES:
            raise ValueError(f"Unknown insertion mode: {insertion_mode}")
        if format not in INSERT_FORMATS:
            raise ValueError(f"Unknown format: {format}")
        if not text:
            return EditStatus.NO_OP
        if self._target() is None:
            return EditStatus.INVALID_PATH

        mode = mode or self.parse_mode()
        if insertion_mode == 'replaceAll':
            self.select_all()
        elif insertion_mode == 'insertBefore':
            self.collapse_backward()
        elif insertion_mode == 'insertAfter':
            self.collapse_forward()

        args = [list(self.extract_contents())]
        atoms = self._make_atoms(text, format, mode, args)
        self._delete_selection()
        if not atoms:
            return EditStatus.NO_OP
        self._insert_atoms(atoms, selection_mode)
        return EditStatus.OK

    def delete(self, count: int = 0) -> EditStatus:
        """
        Delete the selection, or `count` atoms around a collapsed caret
        (negative: before the caret, positive: after it).
        """
        if self._target() is None:
            return EditStatus.INVALID_PATH
        if not self.is_collapsed():
            return self._delete_selection()
        status = EditStatus.NO_OP
        step = self._delete_previous if count < 0 else self._delete_next
        for _ in range(abs(count)):
            result = step()
            if result != EditStatus.OK:
                break
            status = result
        return status

    def delete_previous_char(self) -> EditStatus:
        return self.delete(-1)

    def delete_next_char(self) -> EditStatus:
        return self.delete(+1)

    def delete_selection(self) -> EditStatus:
        return self.delete(0)

    def delete_to_group_start(self) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        if not self.is_collapsed():
            return self._delete_selection()
        if self.focus.offset < 0:
            return EditStatus.NO_OP
        self._remove_range(self.focus, -1, self.focus.offset)
        return EditStatus.OK

    def delete_to_group_end(self) -> EditStatus:
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        if not self.is_collapsed():
            return self._delete_selection()
        if self.focus.offset >= len(target.siblings) - 1:
            return EditStatus.NO_OP
        self._remove_range(self.focus, self.focus.offset, len(target.siblings) - 1)
        return EditStatus.OK

    def _delete_previous(self) -> EditStatus:
        target = self._target()
        siblings, offset = target.siblings, target.offset
        if offset >= 0 and not _is_lone_placeholder(siblings):
            self._remove_range(self.focus, offset - 1, offset)
            return EditStatus.OK
        return self._delete_at_boundary(-1)

    def _delete_next(self) -> EditStatus:
        target = self._target()
        siblings, offset = target.siblings, target.offset
        if offset + 1 < len(siblings) and not _is_lone_placeholder(siblings):
            self._remove_range(self.focus, offset, offset + 1)
            return EditStatus.OK
        return self._delete_at_boundary(+1)

    def _delete_at_boundary(self, direction: int) -> EditStatus:
        """Delete at the start (direction -1) or end (+1) of a slot."""
        target = self._target()
        if self.focus.depth == 1:
            if _is_lone_placeholder(target.siblings):
                self._remove_range(self.focus, -1, 0)
                return EditStatus.OK
            return EditStatus.NO_OP

        container_path = self.focus.parent()
        container_target = resolve_path(self.root, container_path)
        index = container_path.offset
        container = container_target.siblings[index]
        relation = self.focus.relation

        if relation in (Relation.SUPERSCRIPT, Relation.SUBSCRIPT) \
                and is_placeholder_list(container.slot(relation)):
            container.set_slot(relation, None)
            if container.is_placeholder and not container.has_scripts:
                self._remove_range(container_path, index - 1, index)
            else:
                self._set(container_path)
            return EditStatus.OK

        if all(is_placeholder_list(container.slot(rel)) for rel in container.relations()):
            self._remove_range(container_path, index - 1, index)
            return EditStatus.OK

        return self._move(direction)

    def _promote(self, relation: Relation) -> EditStatus:
        if self.is_collapsed():
            return self._move_to_script(relation)
        target = self._target()
        if target is None:
            return EditStatus.INVALID_PATH
        siblings = target.siblings
        start, end = self.start_offset(), self.end_offset()
        selected = siblings[start + 1:end + 1]
        del siblings[start + 1:end + 1]

        if start < 0 or not siblings[start].can_have_scripts:
            siblings.insert(start + 1, make_placeholder())
            start += 1
        base = siblings[start]
        existing = base.slot(relation)
        if existing is None or is_placeholder_list(existing):
            script = list(selected)
        else:
            script = existing + list(selected)
        base.set_slot(relation, script)
        container = self.focus.with_offset(start)
        self._set(container.child(relation, len(script) - 1))
        return EditStatus.OK

    def promote_to_superscript(self) -> EditStatus:
        """Make the selection the superscript of the atom before it."""
        return self._promote(Relation.SUPERSCRIPT)

    def promote_to_subscript(self) -> EditStatus:
        return self._promote(Relation.SUBSCRIPT)

    # =========================================================================
    # Command mode
    # =========================================================================

    def _command_run(self) -> Optional[Tuple[int, int]]:
        """Inclusive index range of the command atoms around the caret."""
        target = self._target()
        if target is None:
            return None
        siblings, offset = target.siblings, target.offset
        if offset >= 0 and siblings[offset].kind == AtomKind.COMMAND:
            pivot = offset
        elif offset + 1 < len(siblings) and siblings[offset + 1].kind == AtomKind.COMMAND:
            pivot = offset + 1
        else:
            return None
        start = end = pivot
        while start > 0 and siblings[start - 1].kind == AtomKind.COMMAND:
            start -= 1
        while end + 1 < len(siblings) and siblings[end + 1].kind == AtomKind.COMMAND:
            end += 1
        return start, end

    def enter_command_mode(self) -> EditStatus:
        if self._target() is None:
            return EditStatus.INVALID_PATH
        self._delete_selection()
        self._insert_atoms([Atom(AtomKind.COMMAND, '\\')], 'after')
        return EditStatus.OK

    def extract_command_string_around_insertion_point(self, include_suggestion: bool = False) -> str:
        run = self._command_run()
        if run is None:
            return ''
        atoms = self.siblings()[run[0]:run[1] + 1]
        return ''.join(a.value for a in atoms if include_suggestion or not a.is_suggestion)

    def decorate_command_string_around_insertion_point(self, flag: bool) -> EditStatus:
        """Mark (or unmark) the command run as an unknown command."""
        run = self._command_run()
        if run is None:
            return EditStatus.NO_OP
        for atom in self.siblings()[run[0]:run[1] + 1]:
            atom.is_error = flag
        return EditStatus.OK

    def commit_command_string_before_insertion_point(self) -> EditStatus:
        run = self._command_run()
        if run is None:
            return EditStatus.NO_OP
        status = EditStatus.NO_OP
        for atom in self.siblings()[run[0]:self.focus.offset + 1]:
            if atom.is_suggestion:
                atom.is_suggestion = False
                status = EditStatus.OK
        return status

    def position_insertion_point_after_commited_command(self) -> EditStatus:
        run = self._command_run()
        if run is None:
            return EditStatus.NO_OP
        siblings = self.siblings()
        last = run[0] - 1
        for i in range(run[0], run[1] + 1):
            if not siblings[i].is_suggestion:
                last = i
        self._set(self.focus.with_offset(last))
        return EditStatus.OK

    def splice_command_string_around_insertion_point(self, atoms: List[Atom]) -> EditStatus:
        """Replace the command run with `atoms` (e.g. the completed command)."""
        run = self._command_run()
        if run is None:
            return EditStatus.NO_OP
        target = self._target()
        start, end = run
        del target.siblings[start:end + 1]
        target.siblings[start:start] = atoms
        if self._fill_if_empty(target):
            self._set(self.focus.with_offset(-1))
            return EditStatus.OK
        self._place_caret(self.focus, start - 1, atoms, 'placeholder')
        return EditStatus.OK

    def insert_suggestion(self, text: str, trim_from_end: int) -> EditStatus:
        """
        Show the last `trim_from_end` characters of `text` as suggestion atoms
        after the caret. The caret does not move.
        """
        self.remove_suggestion()
        count = abs(trim_from_end)
        target = self._target()
        if target is None or count == 0:
            return EditStatus.NO_OP
        atoms = [Atom(AtomKind.COMMAND, c, is_suggestion=True) for c in text[-count:]]
        offset = target.offset
        target.siblings[offset + 1:offset + 1] = atoms
        return EditStatus.OK

    def remove_suggestion(self) -> EditStatus:
        target = self._target()
        if target is None:
            return EditStatus.NO_OP
        siblings = target.siblings
        before = sum(1 for a in siblings[:target.offset + 1] if a.is_suggestion)
        remaining = [a for a in siblings if not a.is_suggestion]
        if len(remaining) == len(siblings):
            return EditStatus.NO_OP
        siblings[:] = remaining
        self.anchor = self.anchor.with_offset(self.anchor.offset - before)
        self.focus = self.focus.with_offset(self.focus.offset - before)
        return EditStatus.OK

    # =========================================================================
    # Context extraction
    # =========================================================================

    def extract_group_string_before_insertion_point(self) -> str:
        """Plain characters typed just before the caret (for inline shortcuts)."""
        target = self._target()
        if target is None:
            return ''
        chars = []
        for atom in target.siblings[:target.offset + 1]:
            simple = atom.kind in (AtomKind.ORD, AtomKind.BIN, AtomKind.REL, AtomKind.PUNCT,
                                   AtomKind.OPEN, AtomKind.CLOSE)
            if simple and len(atom.value) == 1 and not atom.has_scripts:
                chars.append(atom.value)
            else:
                chars = []
        return ''.join(chars)

    def extract_group_before_selection(self) -> List[Atom]:
        target = self._target()
        return target.siblings[:self.start_offset() + 1] if target is not None else []

    def extract_group_after_selection(self) -> List[Atom]:
        target = self._target()
        return target.siblings[self.end_offset() + 1:] if target is not None else []

    # =========================================================================
    # Presentation flags
    # =========================================================================

    def update_presentation_flags(self, has_focus: bool = True):
        """Recompute has_caret / caret_leading / is_selected over the tree."""
        for atom in self.root.iter_atoms():
            atom.has_caret = False
            atom.caret_leading = False
            atom.is_selected = False
        target = self._target()
        if target is None:
            return
        for selected in self.extract_contents():
            for atom in selected.iter_atoms():
                atom.is_selected = True
        if has_focus and self.is_collapsed():
            if target.offset >= 0:
                target.siblings[target.offset].has_caret = True
            elif target.siblings:
                target.siblings[0].caret_leading = True
            else:
                target.parent.has_caret = True
