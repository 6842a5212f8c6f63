"""
Tests for the command protocol and the command bar.
"""

from ..commands import (
    COMMAND_BAR, MUTATING_OPERATIONS, Command, CommandContext, InsertArgs,
    Operation, parse_command, suggest_commands,
)
from ..editable_mathlist import EditStatus
from ..mathfield import MathField
from ..parser import parse


def labels(context):
    return [entry.label for entry in suggest_commands(context)]


def test_parse_command():
    """Test bare names, insert payloads and rejected selectors."""
    print("\n" + "=" * 60)
    print("TEST: Parse Command")
    print("=" * 60)

    assert parse_command("selectAll") == Command(Operation.SELECT_ALL)
    assert parse_command(["moveUp"]) == Command(Operation.MOVE_UP)
    assert parse_command("selectAll").name == "selectAll"

    command = parse_command(["insert", r"\sqrt{#0}"])
    assert command.operation == Operation.INSERT
    assert command.payload == InsertArgs(r"\sqrt{#0}")

    command = parse_command(["insert", r"\mathbb{#0}", {"selectionMode": "item", "format": "latex"}])
    assert command.payload == InsertArgs(r"\mathbb{#0}", selection_mode="item", format="latex")
    command = parse_command(("insert", "x", {"insertion_mode": "insertAfter"}))
    assert command.payload.insertion_mode == "insertAfter"

    same = Command(Operation.UNDO)
    assert parse_command(same) is same

    for bad in ["nope", "insert", ["insert"], ["insert", 3], ["insert", "x", "item"],
                ["insert", "x", {"bogus": 1}], [], [42], 42, None]:
        assert parse_command(bad) is None, bad
    print("  PASSED!")


def test_insert_option_values():
    """Test that out-of-range insert options are rejected without side effects."""
    print("\n" + "=" * 60)
    print("TEST: Insert Option Values")
    print("=" * 60)

    for options in [{"selectionMode": "bogus"}, {"insertionMode": "nope"},
                    {"format": "foo"}, {"selection_mode": None}]:
        assert parse_command(["insert", "x", options]) is None, options

    command = parse_command(["insert", "x", {"selectionMode": "before", "insertionMode": "replaceAll",
                                             "format": "auto"}])
    assert command.payload == InsertArgs("x", selection_mode="before", insertion_mode="replaceAll")

    field = MathField("y")
    result = field.perform(["insert", "x", {"selectionMode": "bogus"}])
    assert result.status == EditStatus.UNKNOWN_COMMAND
    result = field.perform(["insert", "x", {"insertionMode": "nope"}])
    assert result.status == EditStatus.UNKNOWN_COMMAND
    assert field.latex() == "y"
    assert len(field.undo_manager) == 0
    print("  PASSED!")


def test_operation_sets():
    """Test operation lookup by name and the mutating set."""
    print("\n" + "=" * 60)
    print("TEST: Operation Sets")
    print("=" * 60)

    assert Operation.from_name("moveToMathFieldEnd") == Operation.MOVE_TO_MATHFIELD_END
    assert Operation.from_name("moveToMathfieldEnd") is None
    assert Operation.INSERT in MUTATING_OPERATIONS
    assert Operation.MOVE_TO_NEXT_CHAR not in MUTATING_OPERATIONS
    assert Operation.UNDO not in MUTATING_OPERATIONS

    # Every operation has a handler
    field = MathField()
    assert set(field._handlers) == set(Operation)
    print(f"  {len(Operation)} operations")
    print("  PASSED!")


def test_command_bar_single_letter():
    """Test the entries offered for a single selected letter."""
    print("\n" + "=" * 60)
    print("TEST: Command Bar Single Letter")
    print("=" * 60)

    upper = CommandContext(parse("A"), "math")
    names = labels(upper)
    assert names[:3] == ["Blackboard", "Calligraphic", "Fraktur"]
    assert "Complete" not in names
    assert names[-1] == "Command"

    entry = suggest_commands(upper)[0]
    assert entry.render_label(upper) == r"\mathbb{A}"
    assert entry.command.payload.selection_mode == "item"

    lower = CommandContext(parse("x"), "math")
    names = labels(lower)
    assert "Blackboard" not in names
    assert names[0] == "Vector"
    print(f"  {labels(upper)}")
    print("  PASSED!")


def test_command_bar_other_contexts():
    """Test longer selections, an empty selection and command mode."""
    print("\n" + "=" * 60)
    print("TEST: Command Bar Other Contexts")
    print("=" * 60)

    assert labels(CommandContext(parse("x+1"), "math")) == ["Subscript", "Superscript", "Command"]
    assert labels(CommandContext([], "math")) == ["Command"]
    assert labels(CommandContext([], "command")) == ["Complete"]
    assert labels(CommandContext(parse("x^2"), "math"))[0] == "Subscript"

    complete = [e for e in COMMAND_BAR if e.label == "Complete"][0]
    assert complete.render_label(CommandContext()) == "Complete"
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("COMMAND PROTOCOL TEST SUITE")
    print("=" * 60)

    tests = [
        test_parse_command,
        test_insert_option_values,
        test_operation_sets,
        test_command_bar_single_letter,
        test_command_bar_other_contexts,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"\n  FAILED: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("\n" + "=" * 60)
    print(f"RESULTS: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
