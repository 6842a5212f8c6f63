"""
Command Protocol and Command Bar

Operations the editor can perform form a closed enumeration. A Command pairs
an Operation with its typed payload; `parse_command` converts the selectors
used by the keystroke tables ("moveToNextChar", ["insert", "\\sqrt{#0}"]) into
Commands and returns None for anything it does not know.

The command bar is a static table of entries offered for the current
selection (e.g. "Blackboard" when a single capital letter is selected),
ranked by utility.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

from .atom import Atom, AtomKind
from .latex_output import to_latex


class Operation(Enum):
    """Every operation addressable by name. Values are the selector names."""
    # Navigation
    MOVE_TO_NEXT_CHAR = "moveToNextChar"
    MOVE_TO_PREVIOUS_CHAR = "moveToPreviousChar"
    MOVE_UP = "moveUp"
    MOVE_DOWN = "moveDown"
    MOVE_TO_GROUP_START = "moveToGroupStart"
    MOVE_TO_GROUP_END = "moveToGroupEnd"
    MOVE_TO_MATHFIELD_START = "moveToMathFieldStart"
    MOVE_TO_MATHFIELD_END = "moveToMathFieldEnd"
    MOVE_TO_NEXT_PLACEHOLDER = "moveToNextPlaceholder"
    MOVE_TO_PREVIOUS_PLACEHOLDER = "moveToPreviousPlaceholder"
    MOVE_TO_SUPERSCRIPT = "moveToSuperscript"
    MOVE_TO_SUBSCRIPT = "moveToSubscript"

    # Selection
    EXTEND_TO_NEXT_CHAR = "extendToNextChar"
    EXTEND_TO_PREVIOUS_CHAR = "extendToPreviousChar"
    SELECT_ALL = "selectAll"
    SELECT_GROUP = "selectGroup"

    # Mutation
    INSERT = "insert"
    DELETE_PREVIOUS_CHAR = "deletePreviousChar"
    DELETE_NEXT_CHAR = "deleteNextChar"
    DELETE_SELECTION = "deleteSelection"
    DELETE_TO_GROUP_START = "deleteToGroupStart"
    DELETE_TO_GROUP_END = "deleteToGroupEnd"
    PROMOTE_TO_SUPERSCRIPT = "promoteToSuperscript"
    PROMOTE_TO_SUBSCRIPT = "promoteToSubscript"

    # Command mode
    ENTER_COMMAND_MODE = "enterCommandMode"
    COMPLETE = "complete"
    NEXT_SUGGESTION = "nextSuggestion"
    PREVIOUS_SUGGESTION = "previousSuggestion"

    # History
    UNDO = "undo"
    REDO = "redo"

    @classmethod
    def from_name(cls, name: str) -> Optional['Operation']:
        try:
            return cls(name)
        except ValueError:
            return None


# Operations that change the tree and get an undo snapshot first
MUTATING_OPERATIONS = {
    Operation.INSERT,
    Operation.DELETE_PREVIOUS_CHAR,
    Operation.DELETE_NEXT_CHAR,
    Operation.DELETE_SELECTION,
    Operation.DELETE_TO_GROUP_START,
    Operation.DELETE_TO_GROUP_END,
    Operation.PROMOTE_TO_SUPERSCRIPT,
    Operation.PROMOTE_TO_SUBSCRIPT,
    Operation.MOVE_TO_SUPERSCRIPT,
    Operation.MOVE_TO_SUBSCRIPT,
    Operation.ENTER_COMMAND_MODE,
    Operation.COMPLETE,
}


SELECTION_MODES = ('placeholder', 'after', 'before', 'item')
INSERTION_MODES = ('replaceSelection', 'replaceAll', 'insertBefore', 'insertAfter')
INSERT_FORMATS = ('auto', 'latex')

_OPTION_VALUES = {
    'selection_mode': SELECTION_MODES,
    'insertion_mode': INSERTION_MODES,
    'format': INSERT_FORMATS,
}


@dataclass(frozen=True)
class InsertArgs:
    """Payload of Operation.INSERT."""
    text: str
    selection_mode: str = 'placeholder'
    insertion_mode: str = 'replaceSelection'
    format: str = 'auto'


@dataclass(frozen=True)
class Command:
    operation: Operation
    payload: Optional[InsertArgs] = None

    @property
    def name(self) -> str:
        return self.operation.value


Selector = Union[str, Sequence, Command]

_OPTION_NAMES = {
    'selectionMode': 'selection_mode',
    'selection_mode': 'selection_mode',
    'insertionMode': 'insertion_mode',
    'insertion_mode': 'insertion_mode',
    'format': 'format',
}


def parse_command(selector: Selector) -> Optional[Command]:
    """
    Convert a selector into a Command.

        "selectAll"                                -> Command(SELECT_ALL)
        ["insert", "\\frac{#0}{#?}"]               -> Command(INSERT, InsertArgs(...))
        ["insert", "\\mathbb{#0}", {"selectionMode": "item"}]

    Returns None for unknown names, malformed arguments and option values
    outside SELECTION_MODES, INSERTION_MODES or INSERT_FORMATS.
    """
    if isinstance(selector, Command):
        return selector
    if isinstance(selector, str):
        name, args = selector, []
    elif isinstance(selector, (list, tuple)) and selector and isinstance(selector[0], str):
        name, args = selector[0], list(selector[1:])
    else:
        return None

    operation = Operation.from_name(name)
    if operation is None:
        return None
    if operation != Operation.INSERT:
        return Command(operation)

    if not args or not isinstance(args[0], str):
        return None
    options = {}
    if len(args) > 1:
        if not isinstance(args[1], dict):
            return None
        for key, value in args[1].items():
            if key not in _OPTION_NAMES:
                return None
            name = _OPTION_NAMES[key]
            if value not in _OPTION_VALUES[name]:
                return None
            options[name] = value
    return Command(operation, InsertArgs(args[0], **options))


# =============================================================================
# Command Bar
# =============================================================================

@dataclass
class CommandContext:
    """What the command bar knows about the editor state."""
    selection: List[Atom] = field(default_factory=list)
    mode: str = 'math'

    @property
    def selection_latex(self) -> str:
        return to_latex(self.selection)

    def single_char(self) -> Optional[str]:
        if len(self.selection) != 1:
            return None
        atom = self.selection[0]
        if atom.kind != AtomKind.ORD or len(atom.value) != 1 or atom.has_scripts:
            return None
        return atom.value


def _single_uppercase(context: CommandContext) -> bool:
    char = context.single_char()
    return char is not None and 'A' <= char <= 'Z'


def _single_alpha(context: CommandContext) -> bool:
    char = context.single_char()
    return char is not None and char.isalpha()


def _supsub_candidate(context: CommandContext) -> bool:
    return context.mode == 'math' and bool(context.selection)


def _math_mode(context: CommandContext) -> bool:
    return context.mode == 'math'


def _command_mode(context: CommandContext) -> bool:
    return context.mode == 'command'


@dataclass(frozen=True)
class CommandBarEntry:
    label: str
    command: Command
    condition: Callable[[CommandContext], bool]
    utility: int
    template: Optional[str] = None   # '%' stands for the selection

    def applies(self, context: CommandContext) -> bool:
        return self.condition(context)

    def render_label(self, context: CommandContext) -> str:
        """Label shown to the user, e.g. "\\mathbb{A}" for Blackboard."""
        if self.template is None:
            return self.label
        return self.template.replace('%', context.selection_latex)


def _wrap(template: str) -> Command:
    return Command(Operation.INSERT, InsertArgs(template, selection_mode='item'))


COMMAND_BAR: List[CommandBarEntry] = [
    CommandBarEntry('Complete', Command(Operation.COMPLETE), _command_mode, 1000),
    CommandBarEntry('Blackboard', _wrap(r'\mathbb{#0}'), _single_uppercase, 500, r'\mathbb{%}'),
    CommandBarEntry('Fraktur', _wrap(r'\mathfrak{#0}'), _single_uppercase, 400, r'\mathfrak{%}'),
    CommandBarEntry('Calligraphic', _wrap(r'\mathcal{#0}'), _single_uppercase, 400, r'\mathcal{%}'),
    CommandBarEntry('Script', _wrap(r'\mathscr{#0}'), _single_uppercase, 300, r'\mathscr{%}'),
    CommandBarEntry('Vector', _wrap(r'\vec{#0}'), _single_alpha, 300, r'\vec{%}'),
    CommandBarEntry('Bar', _wrap(r'\bar{#0}'), _single_alpha, 250, r'\bar{%}'),
    CommandBarEntry('Sans Serif', _wrap(r'\mathsf{#0}'), _single_alpha, 200, r'\mathsf{%}'),
    CommandBarEntry('Typewriter', _wrap(r'\mathtt{#0}'), _single_alpha, 200, r'\mathtt{%}'),
    CommandBarEntry('Bold', _wrap(r'\mathbf{#0}'), _single_alpha, 200, r'\mathbf{%}'),
    CommandBarEntry('Superscript', Command(Operation.PROMOTE_TO_SUPERSCRIPT), _supsub_candidate, 100),
    CommandBarEntry('Subscript', Command(Operation.PROMOTE_TO_SUBSCRIPT), _supsub_candidate, 100),
    CommandBarEntry('Command', Command(Operation.ENTER_COMMAND_MODE), _math_mode, 50),
]


def suggest_commands(context: CommandContext) -> List[CommandBarEntry]:
    """Command bar entries that apply to `context`, most useful first."""
    entries = [entry for entry in COMMAND_BAR if entry.applies(context)]
    return sorted(entries, key=lambda e: (-e.utility, e.label))
