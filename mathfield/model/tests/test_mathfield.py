"""
Tests for the MathField facade.

Tests:
1. Typing and key combinations
2. Inline shortcuts and their undo step
3. Command mode: suggestions, completion, unknown commands
4. Content setter, spoken text, command bar
5. Selection by path and rejected commands
"""

from ...configs.editor_config import EditorConfig
from ..atom import AtomKind
from ..editable_mathlist import EditStatus
from ..math_path import MathPath
from ..mathfield import MathField


def test_typing_and_keys():
    """Test typing x, Ctrl-Up, 2."""
    print("\n" + "=" * 60)
    print("TEST: Typing and Keys")
    print("=" * 60)

    field = MathField()
    field.typed_text("x")
    result = field.keystroke("Ctrl-Up")
    assert result.ok and result.command.name == "moveToSuperscript"
    field.typed_text("2")
    assert field.latex() == "x^{2}"

    field.keystroke("Right")
    field.typed_text("+1")
    assert field.latex() == "x^{2}+1"

    # Spaces are ignored in math mode
    assert field.typed_text(" ") == EditStatus.NO_OP
    assert field.keystroke("Ctrl-Q").status == EditStatus.NO_OP
    print(f"  {field.latex()}")
    print("  PASSED!")


def test_inline_shortcuts():
    """Test substitution and the undo step that restores the typed text."""
    print("\n" + "=" * 60)
    print("TEST: Inline Shortcuts")
    print("=" * 60)

    field = MathField()
    field.typed_text("pi")
    assert field.latex() == r"\pi"
    field.undo()
    assert field.latex() == "pi"
    field.undo()
    assert field.latex() == ""

    field = MathField()
    field.typed_text("<=")
    assert field.latex() == r"\le"

    field = MathField(config=EditorConfig(inline_shortcuts={"pi": None}))
    field.typed_text("pi")
    assert field.latex() == "pi"
    print("  PASSED!")


def test_command_mode_completion():
    """Test \\ fr Tab 1 Tab 2 producing a fraction."""
    print("\n" + "=" * 60)
    print("TEST: Command Mode Completion")
    print("=" * 60)

    field = MathField()
    field.keystroke("\\")
    assert field.mathlist.parse_mode() == "command"
    field.typed_text("fr")
    assert field.mathlist.extract_command_string_around_insertion_point() == r"\fr"
    assert field.mathlist.extract_command_string_around_insertion_point(include_suggestion=True) == r"\frac"
    # Suggestion atoms are not part of the content
    assert field.latex() == r"\fr"

    field.keystroke("Tab")
    assert field.latex() == r"\frac{\placeholder{}}{\placeholder{}}"
    field.typed_text("1")
    field.keystroke("Tab")
    field.typed_text("2")
    assert field.latex() == r"\frac{1}{2}"

    # Space completes too
    field = MathField()
    field.keystroke("\\")
    field.typed_text("al")
    field.typed_text(" ")
    assert field.latex() == r"\alpha"
    assert field.mathlist.parse_mode() == "math"

    # A lone backslash completes to nothing
    field = MathField("a")
    field.keystroke("\\")
    field.keystroke("Tab")
    assert field.latex() == "a"
    print("  PASSED!")


def test_unknown_command():
    """Test that an unmatched command is flagged and completes to an error atom."""
    print("\n" + "=" * 60)
    print("TEST: Unknown Command")
    print("=" * 60)

    field = MathField()
    field.keystroke("\\")
    field.typed_text("zz")
    siblings = field.mathlist.siblings()
    assert [a.value for a in siblings] == ["\\", "z", "z"]
    assert all(a.is_error for a in siblings)
    assert field.current_suggestion() is None

    field.keystroke("Tab")
    atom = field.mathlist.root.children[0]
    assert atom.kind == AtomKind.ERROR and atom.is_error
    assert field.latex() == r"\zz"
    print("  PASSED!")


def test_suggestion_cycling():
    """Test next/previous suggestion and Backspace in command mode."""
    print("\n" + "=" * 60)
    print("TEST: Suggestion Cycling")
    print("=" * 60)

    field = MathField()
    field.keystroke("\\")
    field.typed_text("si")
    info = field.current_suggestion()
    assert info.match == r"\sin"
    assert info.shortcuts == ["sin"]

    field.keystroke("Down")
    assert field.current_suggestion().match == r"\sinh"
    text = field.mathlist.extract_command_string_around_insertion_point(include_suggestion=True)
    assert text == r"\sinh"
    field.keystroke("Up")
    assert field.current_suggestion().match == r"\sin"

    field.keystroke("Backspace")
    m = field.mathlist
    assert m.extract_command_string_around_insertion_point() == r"\s"
    completed = m.extract_command_string_around_insertion_point(include_suggestion=True)
    assert completed.startswith(r"\s") and len(completed) > 2
    print(f"  {info}")
    print("  PASSED!")


def test_latex_setter_and_text():
    """Test replacing content with undo, spoken text and format errors."""
    print("\n" + "=" * 60)
    print("TEST: Latex Setter and Text")
    print("=" * 60)

    field = MathField("x")
    assert field.latex("y+1") == "y+1"
    field.undo()
    assert field.latex() == "x"
    field.redo()
    assert field.latex() == "y+1"
    assert field.latex("") == ""

    field = MathField("x^2+1")
    assert field.text("spoken") == "x squared plus one"
    assert field.text("latex") == "x^{2}+1"
    try:
        field.text("mathml")
        assert False, "expected ValueError"
    except ValueError:
        pass
    print("  PASSED!")


def test_no_op_leaves_no_undo_step():
    """Test that a mutating command with no effect does not add an undo step."""
    print("\n" + "=" * 60)
    print("TEST: No-op Leaves No Undo Step")
    print("=" * 60)

    field = MathField()
    field.typed_text("x")
    assert field.perform("deletePreviousChar").ok
    depth = len(field.undo_manager)
    assert field.perform("deletePreviousChar").status == EditStatus.NO_OP
    assert len(field.undo_manager) == depth
    field.undo()
    assert field.latex() == "x"

    field = MathField("a")
    assert field.perform("deleteSelection").status == EditStatus.NO_OP
    assert not field.undo_manager.can_undo()
    print("  PASSED!")


def test_wrapping_commands():
    """Test Alt-/ around a selection and the Blackboard command bar entry."""
    print("\n" + "=" * 60)
    print("TEST: Wrapping Commands")
    print("=" * 60)

    field = MathField("x")
    field.perform("selectAll")
    field.keystroke("Alt-/")
    assert field.latex() == r"\frac{x}{\placeholder{}}"
    assert field.mathlist.focus == MathPath.from_string("children:0/denominator:0")

    field = MathField("A")
    assert [e.label for e in field.command_bar()] == ["Command"]
    field.perform("selectAll")
    entries = field.command_bar()
    assert entries[0].label == "Blackboard"
    assert field.perform(entries[0].command).ok
    assert field.latex() == r"\mathbb{A}"
    field.undo()
    assert field.latex() == "A"
    print("  PASSED!")


def test_selection_and_errors():
    """Test path selection, deleting a numerator and rejected commands."""
    print("\n" + "=" * 60)
    print("TEST: Selection and Errors")
    print("=" * 60)

    field = MathField(r"\frac{1}{2}")
    assert field.set_selection("children:0/numerator:0") == EditStatus.OK
    field.keystroke("Backspace")
    assert field.latex() == r"\frac{\placeholder{}}{2}"
    field.undo()
    assert field.latex() == r"\frac{1}{2}"

    assert field.set_selection("bogus") == EditStatus.INVALID_PATH
    assert field.set_selection("children:7") == EditStatus.INVALID_PATH
    assert field.set_selection("children:-1", "children:0") == EditStatus.OK
    assert field.mathlist.extract_contents()[0].kind == AtomKind.FRACTION

    assert field.perform("fooBar").status == EditStatus.UNKNOWN_COMMAND
    assert field.perform(["insert"]).status == EditStatus.UNKNOWN_COMMAND
    assert field.perform(["insert", "x"]).ok
    assert field.latex() == "x"

    # Text mode types characters literally
    field = MathField(r"\text{a}")
    field.set_selection("children:0/children:0")
    field.keystroke(" ")
    assert field.latex() == r"\text{a }"
    print("  PASSED!")


def test_render():
    """Test that rendering places the caret box."""
    print("\n" + "=" * 60)
    print("TEST: Render")
    print("=" * 60)

    field = MathField("x")
    box = field.render()
    assert len(box.find("ML__caret")) == 1
    assert not field.render(has_focus=False).find("ML__caret")
    field.perform("selectAll")
    assert field.render("text").find("ML__selected")
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("MATHFIELD TEST SUITE")
    print("=" * 60)

    tests = [
        test_typing_and_keys,
        test_inline_shortcuts,
        test_command_mode_completion,
        test_unknown_command,
        test_suggestion_cycling,
        test_latex_setter_and_text,
        test_no_op_leaves_no_undo_step,
        test_wrapping_commands,
        test_selection_and_errors,
        test_render,
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
