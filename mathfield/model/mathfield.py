"""
MathField

One editable formula: an EditableMathlist, its UndoManager, the shortcut
configuration and the command-mode suggestion state. This is the object a UI
layer holds; it translates typed text, key combinations and named commands
into editor operations and decides where undo snapshots go.

Usage:
    field = MathField()
    field.typed_text("x")
    field.keystroke("Ctrl-Up")
    field.typed_text("2")
    field.latex()            # 'x^{2}'
    box = field.render()
"""

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Union

from ..configs.editor_config import EditorConfig
from ..data.shortcuts import shortcuts_for
from ..data.symbol_table import SAMPLES, get_note, match_function, match_symbol
from .box_geometry import atom_bounds, nearest_atom
from .commands import (
    MUTATING_OPERATIONS, Command, CommandBarEntry, CommandContext, Operation,
    Selector, parse_command, suggest_commands,
)
from .editable_mathlist import EditableMathlist, EditStatus
from .layout import Box, MathStyle, layout
from .math_path import InvalidPathError, MathPath
from .parser import parse_latex
from .shortcut_matcher import match_end_of, match_keystroke, suggest
from .spoken_text import to_speakable_text
from .undo import UndoManager

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    status: EditStatus
    command: Optional[Command] = None

    @property
    def ok(self) -> bool:
        return self.status == EditStatus.OK


class SuggestionInfo(NamedTuple):
    match: str
    note: str
    sample: str
    shortcuts: List[str]


def _status(done: bool) -> EditStatus:
    return EditStatus.OK if done else EditStatus.NO_OP


class MathField:
    """
    Editable math formula.

    Args:
        latex: Initial content
        config: EditorConfig (shortcuts, wrap-around, undo depth, style)
    """

    def __init__(self, latex: str = '', config: Optional[EditorConfig] = None):
        self.config = config or EditorConfig()
        self.mathlist = EditableMathlist(config=self.config)
        self.undo_manager = UndoManager(self.mathlist, self.config.undo_max_depth)
        self.suggestion_index = 0

        m = self.mathlist
        self._handlers = {
            Operation.MOVE_TO_NEXT_CHAR: lambda c: m.move_to_next_char(),
            Operation.MOVE_TO_PREVIOUS_CHAR: lambda c: m.move_to_previous_char(),
            Operation.MOVE_UP: lambda c: m.move_up(),
            Operation.MOVE_DOWN: lambda c: m.move_down(),
            Operation.MOVE_TO_GROUP_START: lambda c: m.move_to_group_start(),
            Operation.MOVE_TO_GROUP_END: lambda c: m.move_to_group_end(),
            Operation.MOVE_TO_MATHFIELD_START: lambda c: m.move_to_mathfield_start(),
            Operation.MOVE_TO_MATHFIELD_END: lambda c: m.move_to_mathfield_end(),
            Operation.MOVE_TO_NEXT_PLACEHOLDER: lambda c: m.move_to_next_placeholder(),
            Operation.MOVE_TO_PREVIOUS_PLACEHOLDER: lambda c: m.move_to_previous_placeholder(),
            Operation.MOVE_TO_SUPERSCRIPT: lambda c: m.move_to_superscript(),
            Operation.MOVE_TO_SUBSCRIPT: lambda c: m.move_to_subscript(),
            Operation.EXTEND_TO_NEXT_CHAR: lambda c: m.extend_to_next_char(),
            Operation.EXTEND_TO_PREVIOUS_CHAR: lambda c: m.extend_to_previous_char(),
            Operation.SELECT_ALL: lambda c: m.select_all(),
            Operation.SELECT_GROUP: lambda c: m.select_group(),
            Operation.INSERT: self._insert,
            Operation.DELETE_PREVIOUS_CHAR: lambda c: self._delete(m.delete_previous_char),
            Operation.DELETE_NEXT_CHAR: lambda c: self._delete(m.delete_next_char),
            Operation.DELETE_SELECTION: lambda c: m.delete_selection(),
            Operation.DELETE_TO_GROUP_START: lambda c: m.delete_to_group_start(),
            Operation.DELETE_TO_GROUP_END: lambda c: m.delete_to_group_end(),
            Operation.PROMOTE_TO_SUPERSCRIPT: lambda c: m.promote_to_superscript(),
            Operation.PROMOTE_TO_SUBSCRIPT: lambda c: m.promote_to_subscript(),
            Operation.ENTER_COMMAND_MODE: lambda c: m.enter_command_mode(),
            Operation.COMPLETE: lambda c: self.complete(),
            Operation.NEXT_SUGGESTION: lambda c: self.next_suggestion(),
            Operation.PREVIOUS_SUGGESTION: lambda c: self.previous_suggestion(),
            Operation.UNDO: lambda c: self.undo(),
            Operation.REDO: lambda c: self.redo(),
        }

        if latex:
            m.insert(latex, selection_mode='after', insertion_mode='replaceAll', format='latex')

    # =========================================================================
    # Content
    # =========================================================================

    def latex(self, text: Optional[str] = None) -> str:
        """Return the content as LaTeX, replacing it first when `text` is given."""
        if text is not None and text != self.mathlist.latex():
            self.undo_manager.snapshot()
            m = self.mathlist
            if text:
                m.insert(text, selection_mode='after', insertion_mode='replaceAll', format='latex')
            else:
                m.select_all()
                m.delete_selection()
        return self.mathlist.latex()

    def text(self, format: str = 'latex') -> str:
        """Content as 'latex' or as 'spoken' text."""
        if format == 'latex':
            return self.mathlist.latex()
        if format == 'spoken':
            return to_speakable_text([self.mathlist.root])
        raise ValueError(f"Unknown text format: {format}")

    # =========================================================================
    # Commands
    # =========================================================================

    def perform(self, selector: Selector) -> CommandResult:
        """Run a named command: "moveToNextChar", ["insert", "\\sqrt{#0}"], ..."""
        command = parse_command(selector)
        if command is None:
            logger.debug("unknown command %r", selector)
            return CommandResult(EditStatus.UNKNOWN_COMMAND)
        saved = command.operation in MUTATING_OPERATIONS and command.operation != Operation.COMPLETE
        if saved:
            self.undo_manager.snapshot()
        status = self._handlers[command.operation](command)
        if saved and status != EditStatus.OK:
            self.undo_manager.discard_if_unchanged()
        return CommandResult(status, command)

    def _insert(self, command: Command) -> EditStatus:
        args = command.payload
        return self.mathlist.insert(args.text, selection_mode=args.selection_mode,
                                    insertion_mode=args.insertion_mode, format=args.format)

    def _delete(self, operation) -> EditStatus:
        in_command = self.mathlist.parse_mode() == 'command'
        status = operation()
        if in_command:
            self._update_suggestion()
        return status

    def keystroke(self, key: str) -> CommandResult:
        """Handle a key combination such as "Ctrl-Z", "Tab" or "a"."""
        mode = self.mathlist.parse_mode()
        if mode == 'text' and len(key) == 1:
            return CommandResult(self.typed_text(key))
        command = match_keystroke(mode, key)
        if command is not None:
            return self.perform(command)
        if len(key) == 1:
            return CommandResult(self.typed_text(key))
        return CommandResult(EditStatus.NO_OP)

    # =========================================================================
    # Typing
    # =========================================================================

    def typed_text(self, text: str) -> EditStatus:
        """Insert typed characters, applying inline shortcuts."""
        status = EditStatus.NO_OP
        for char in text:
            result = self._typed_char(char)
            if result == EditStatus.OK:
                status = result
        return status

    def _typed_char(self, char: str) -> EditStatus:
        m = self.mathlist
        mode = m.parse_mode()

        if mode == 'command':
            if char.isspace():
                return self.complete()
            m.remove_suggestion()
            self.suggestion_index = 0
            command = m.extract_command_string_around_insertion_point() + char
            suggestions = suggest(command)
            m.insert(char, mode='command')
            if suggestions:
                top = suggestions[0].match
                if top != command:
                    m.insert_suggestion(top, len(top) - len(command))
                m.decorate_command_string_around_insertion_point(False)
            else:
                m.decorate_command_string_around_insertion_point(True)
            return EditStatus.OK

        if mode == 'math':
            if char.isspace():
                return EditStatus.NO_OP
            prefix = m.extract_group_string_before_insertion_point()
            shortcut = match_end_of(prefix + char, self.config)
            if shortcut is not None:
                # The literal characters stay in the undo history
                m.insert(char)
                self.undo_manager.snapshot()
                m.delete(-len(shortcut.match))
                logger.debug("shortcut %r -> %r", shortcut.match, shortcut.substitute)
                return m.insert(shortcut.substitute, format='latex')

        self.undo_manager.snapshot()
        return m.insert(char)

    # =========================================================================
    # Command mode
    # =========================================================================

    def complete(self) -> EditStatus:
        """Replace the command being typed (with its suggestion) by its atoms."""
        m = self.mathlist
        command = m.extract_command_string_around_insertion_point(include_suggestion=True)
        if not command:
            return EditStatus.NO_OP
        self.undo_manager.snapshot()
        self.suggestion_index = 0
        if command == '\\':
            return m.splice_command_string_around_insertion_point([])

        spec = match_function('math', command) or match_symbol('math', command)
        source = command
        if spec is not None and spec.arity > 0:
            source = command + '{#?}' * spec.arity
        result = parse_latex(source)
        if not result.ok:
            logger.debug("completed unknown command %s", command)
        return m.splice_command_string_around_insertion_point(result.atoms)

    def _suggestions(self):
        command = self.mathlist.extract_command_string_around_insertion_point()
        return command, suggest(command)

    def _update_suggestion(self) -> EditStatus:
        m = self.mathlist
        m.position_insertion_point_after_commited_command()
        m.remove_suggestion()
        command, suggestions = self._suggestions()
        if not suggestions:
            m.decorate_command_string_around_insertion_point(len(command) > 1)
            return EditStatus.NO_OP
        match = suggestions[self.suggestion_index % len(suggestions)].match
        if match != command:
            m.insert_suggestion(match, len(match) - len(command))
        m.decorate_command_string_around_insertion_point(False)
        return EditStatus.OK

    def next_suggestion(self) -> EditStatus:
        self.suggestion_index += 1
        return self._update_suggestion()

    def previous_suggestion(self) -> EditStatus:
        self.suggestion_index -= 1
        return self._update_suggestion()

    def current_suggestion(self) -> Optional[SuggestionInfo]:
        """The suggestion shown for the command being typed, if any."""
        _, suggestions = self._suggestions()
        if not suggestions:
            return None
        match = suggestions[self.suggestion_index % len(suggestions)].match
        return SuggestionInfo(match, get_note(match), SAMPLES.get(match, match),
                              shortcuts_for(match))

    def command_bar(self) -> List[CommandBarEntry]:
        context = CommandContext(list(self.mathlist.extract_contents()),
                                 self.mathlist.parse_mode())
        return suggest_commands(context)

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> EditStatus:
        self.suggestion_index = 0
        return _status(self.undo_manager.undo())

    def redo(self) -> EditStatus:
        self.suggestion_index = 0
        return _status(self.undo_manager.redo())

    def snapshot(self):
        self.undo_manager.snapshot()

    # =========================================================================
    # Selection
    # =========================================================================

    def set_selection(self, anchor: Union[MathPath, str],
                      focus: Union[MathPath, str, None] = None) -> EditStatus:
        """Select between two paths (given as MathPath or "children:0/..." strings)."""
        try:
            anchor = MathPath.from_string(anchor) if isinstance(anchor, str) else anchor
            if focus is None:
                focus = anchor
            elif isinstance(focus, str):
                focus = MathPath.from_string(focus)
        except InvalidPathError as e:
            logger.debug("set_selection: %s", e)
            return EditStatus.INVALID_PATH
        return self.mathlist.set_range(anchor, focus)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, style: Union[str, MathStyle, None] = None, has_focus: bool = True) -> Box:
        """Recompute the presentation flags and lay out the formula."""
        self.mathlist.update_presentation_flags(has_focus)
        return layout(self.mathlist.root, style or self.config.default_style)

    def path_from_point(self, box: Box, x: float, y: float) -> Optional[MathPath]:
        """Caret path closest to a point of a rendered box tree."""
        identity = nearest_atom(box, x, y)
        if identity is None:
            return MathPath.start()
        path = self.mathlist.path_for_atom(identity)
        if path is None:
            return None
        bounds = atom_bounds(box, identity)
        if bounds is not None and x < bounds.center[0]:
            path = path.with_offset(path.offset - 1)
        return path

    def select_at_point(self, box: Box, x: float, y: float) -> EditStatus:
        path = self.path_from_point(box, x, y)
        if path is None:
            return EditStatus.INVALID_PATH
        return self.mathlist.set_path(path)
