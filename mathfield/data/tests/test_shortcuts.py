"""
Tests for the inline shortcut and keystroke tables.
"""

from ..shortcuts import INLINE_SHORTCUTS, KEYSTROKES, normalize_keystroke, shortcuts_for
from ..symbol_table import lookup


def test_inline_shortcuts():
    """Test a sample of triggers and that substitutes name known commands."""
    print("\n" + "=" * 60)
    print("TEST: Inline Shortcuts")
    print("=" * 60)

    assert INLINE_SHORTCUTS["pi"] == r"\pi"
    assert INLINE_SHORTCUTS["<="] == r"\le"
    assert INLINE_SHORTCUTS["RR"] == r"\mathbb{R}"
    # "in" would fire inside ordinary words
    assert "in" not in INLINE_SHORTCUTS

    for trigger, substitute in INLINE_SHORTCUTS.items():
        command = substitute.split('{')[0].split('_')[0]
        assert lookup(command) is not None, f"{trigger} -> unknown {command}"
    print(f"  {len(INLINE_SHORTCUTS)} shortcuts")
    print("  PASSED!")


def test_shortcuts_for():
    """Test reverse lookup of triggers."""
    print("\n" + "=" * 60)
    print("TEST: Shortcuts For")
    print("=" * 60)

    assert shortcuts_for(r"\infty") == ["infty", "oo"]
    assert shortcuts_for(r"\ne") == ["!=", "<>"]
    assert shortcuts_for(r"\frac") == []
    print("  PASSED!")


def test_normalize_keystroke():
    """Test modifier ordering and key aliases."""
    print("\n" + "=" * 60)
    print("TEST: Normalize Keystroke")
    print("=" * 60)

    assert normalize_keystroke("Shift-Ctrl-Z") == "Ctrl-Shift-Z"
    assert normalize_keystroke("Alt-Ctrl-Up") == "Ctrl-Alt-Up"
    assert normalize_keystroke("Esc") == "Escape"
    assert normalize_keystroke("Shift-ArrowLeft") == "Shift-Left"
    assert normalize_keystroke("Alt--") == "Alt--"
    assert normalize_keystroke(" ") == "Space"
    assert normalize_keystroke("a") == "a"
    assert normalize_keystroke("Tab") == "Tab"
    print("  PASSED!")


def test_keystroke_tables():
    """Test the two mode tables."""
    print("\n" + "=" * 60)
    print("TEST: Keystroke Tables")
    print("=" * 60)

    assert KEYSTROKES["math"]["Tab"] == "moveToNextPlaceholder"
    assert KEYSTROKES["command"]["Tab"] == "complete"
    assert KEYSTROKES["math"]["Alt-/"] == ["insert", r"\frac{#0}{#?}"]
    assert KEYSTROKES["command"]["Down"] == "nextSuggestion"

    # Every key is already in normalized form
    for table in KEYSTROKES.values():
        for key in table:
            assert normalize_keystroke(key) == key, key
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("SHORTCUT TABLES TEST SUITE")
    print("=" * 60)

    tests = [
        test_inline_shortcuts,
        test_shortcuts_for,
        test_normalize_keystroke,
        test_keystroke_tables,
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
