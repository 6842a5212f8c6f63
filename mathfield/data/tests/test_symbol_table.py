"""
Tests for the symbol/command table and suggestion ranking.
"""

from ..symbol_table import (
    COMMANDS, ENVIRONMENTS, GLYPH_TO_COMMAND, char_kind, get_note,
    get_token_statistics, glyph_for, lookup, match_function, match_symbol,
    speech_for, suggest,
)


def test_lookup():
    """Test arity, kind and optional argument of core commands."""
    print("\n" + "=" * 60)
    print("TEST: Command Lookup")
    print("=" * 60)

    frac = lookup(r"\frac")
    assert frac.kind == "genfrac" and frac.arity == 2
    sqrt = lookup(r"\sqrt")
    assert sqrt.kind == "surd" and sqrt.arity == 1 and sqrt.optional_arg
    assert lookup(r"\alpha").kind == "mord"
    assert lookup(r"\le").kind == "mrel"
    assert lookup(r"\sum").kind == "mop"
    assert lookup(r"\nope") is None

    print(f"  Commands: {len(COMMANDS)}, kinds: {get_token_statistics()}")
    print("  PASSED!")


def test_characters():
    """Test kinds, glyphs and spoken forms of plain characters."""
    print("\n" + "=" * 60)
    print("TEST: Characters")
    print("=" * 60)

    assert char_kind("+") == "mbin"
    assert char_kind("=") == "mrel"
    assert char_kind("(") == "mopen"
    assert char_kind("x") == "mord"
    assert glyph_for("-") == "−"
    assert glyph_for(r"\alpha") == "α"
    assert speech_for("=") == "equals"
    assert speech_for(r"\infty") == "infinity"
    assert speech_for("x") == "x"
    print("  PASSED!")


def test_glyph_reverse_lookup():
    """Test unicode glyph to command mapping."""
    print("\n" + "=" * 60)
    print("TEST: Glyph Reverse Lookup")
    print("=" * 60)

    assert GLYPH_TO_COMMAND["α"] == r"\alpha"
    assert GLYPH_TO_COMMAND["≤"] == r"\le"
    assert "{" not in GLYPH_TO_COMMAND
    assert "|" not in GLYPH_TO_COMMAND
    print("  PASSED!")


def test_match_symbol_and_function():
    """Test the split between standalone symbols and argument-taking commands."""
    print("\n" + "=" * 60)
    print("TEST: Match Symbol / Function")
    print("=" * 60)

    assert match_symbol("math", r"\alpha") is not None
    assert match_symbol("math", r"\frac") is None
    assert match_function("math", r"\frac") is not None
    assert match_function("math", r"\sin") is not None
    assert match_function("math", r"\alpha") is None
    assert match_symbol("text", r"\alpha") is None
    print("  PASSED!")


def test_suggest_ranking():
    """Test exact match first, then frequency, then length."""
    print("\n" + "=" * 60)
    print("TEST: Suggestion Ranking")
    print("=" * 60)

    assert suggest(r"\al")[0].match == r"\alpha"
    assert suggest(r"\f")[0].match == r"\frac"

    names = [s.match for s in suggest(r"\si")]
    assert names[:3] == [r"\sin", r"\sinh", r"\sigma"]

    # An exact match wins over more frequent longer names
    assert suggest(r"\in")[0].match == r"\in"

    assert suggest(r"\s", limit=2) == suggest(r"\s")[:2]
    assert suggest("al") == []
    assert suggest("\\") == []
    assert all(s.match != r"\placeholder" for s in suggest(r"\pl"))

    frac = suggest(r"\frac")[0]
    assert frac.sample == r"\frac{x}{y}"
    assert frac.note == get_note(r"\frac")
    print(f"  \\si -> {names}")
    print("  PASSED!")


def test_environments():
    """Test environment delimiters."""
    print("\n" + "=" * 60)
    print("TEST: Environments")
    print("=" * 60)

    assert ENVIRONMENTS["pmatrix"].left == "("
    assert ENVIRONMENTS["cases"].right is None
    assert ENVIRONMENTS["matrix"].left is None
    assert get_note("bmatrix") == "matrix in brackets"
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("SYMBOL TABLE TEST SUITE")
    print("=" * 60)

    tests = [
        test_lookup,
        test_characters,
        test_glyph_reverse_lookup,
        test_match_symbol_and_function,
        test_suggest_ranking,
        test_environments,
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
