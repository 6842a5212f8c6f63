"""
Tests for the LaTeX lexer.

Tests:
1. Token kinds for scripts and groups
2. Control words and control symbols
3. Template arguments
4. Unterminated group recovery
5. Comments, whitespace and positions
"""

from ..latex_lexer import LaTeXLexer, TokenKind, tokenize, tokens_to_string


def kinds(source):
    return [tok.kind for tok in tokenize(source)]


def test_scripts_and_groups():
    """Test token kinds for x^{2}_i."""
    print("\n" + "=" * 60)
    print("TEST: Scripts and Groups")
    print("=" * 60)

    assert kinds("x^{2}_i") == [
        TokenKind.CHAR, TokenKind.SUPERSCRIPT, TokenKind.GROUP_OPEN, TokenKind.CHAR,
        TokenKind.GROUP_CLOSE, TokenKind.SUBSCRIPT, TokenKind.CHAR, TokenKind.END,
    ]
    assert kinds("a&b") == [TokenKind.CHAR, TokenKind.ALIGNMENT, TokenKind.CHAR, TokenKind.END]
    print("  PASSED!")


def test_control_sequences():
    """Test control words, control symbols and the row separator."""
    print("\n" + "=" * 60)
    print("TEST: Control Sequences")
    print("=" * 60)

    tokens = tokenize(r"\alpha x")
    assert tokens[0].kind == TokenKind.COMMAND and tokens[0].value == r"\alpha"
    # Spaces after a control word are swallowed
    assert tokens[1].kind == TokenKind.CHAR and tokens[1].value == "x"

    tokens = tokenize(r"\{a\\b")
    assert tokens[0].value == r"\{"
    assert tokens[2].kind == TokenKind.COMMAND and tokens[2].value == "\\\\"

    tokens = tokenize("x\\")
    assert tokens[1].kind == TokenKind.CHAR and tokens[1].value == "\\"
    print(f"  Tokens: {tokens_to_string(tokens)}")
    print("  PASSED!")


def test_template_arguments():
    """Test #0, #? and a literal #."""
    print("\n" + "=" * 60)
    print("TEST: Template Arguments")
    print("=" * 60)

    tokens = tokenize(r"\frac{#0}{#?}")
    arguments = [t.value for t in tokens if t.kind == TokenKind.ARGUMENT]
    assert arguments == ["#0", "#?"]

    tokens = tokenize("#a")
    assert tokens[0].kind == TokenKind.CHAR and tokens[0].value == "#"
    print("  PASSED!")


def test_unterminated_group():
    """Test that missing closing braces are added and reported."""
    print("\n" + "=" * 60)
    print("TEST: Unterminated Group")
    print("=" * 60)

    lexer = LaTeXLexer("{x{y")
    tokens = lexer.tokenize()
    closes = [t for t in tokens if t.kind == TokenKind.GROUP_CLOSE]
    assert len(closes) == 2
    assert all(t.implicit for t in closes)
    assert len(lexer.issues) == 2
    assert tokens[-1].kind == TokenKind.END

    lexer = LaTeXLexer("{x}")
    lexer.tokenize()
    assert lexer.issues == []
    print(f"  Issues: {lexer.issues}")
    print("  PASSED!")


def test_comments_spaces_positions():
    """Test comment skipping, whitespace runs and source offsets."""
    print("\n" + "=" * 60)
    print("TEST: Comments, Spaces, Positions")
    print("=" * 60)

    assert kinds("x%comment\ny") == [TokenKind.CHAR, TokenKind.SPACE, TokenKind.CHAR, TokenKind.END]
    assert kinds("a   b") == [TokenKind.CHAR, TokenKind.SPACE, TokenKind.CHAR, TokenKind.END]

    tokens = tokenize("ab+c")
    assert [t.position for t in tokens[:-1]] == [0, 1, 2, 3]
    assert tokens[-1].position == 4
    assert tokens_to_string(tokenize("x y")) == "x ␣ y"
    assert tokenize("")[0].kind == TokenKind.END
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("LATEX LEXER TEST SUITE")
    print("=" * 60)

    tests = [
        test_scripts_and_groups,
        test_control_sequences,
        test_template_arguments,
        test_unterminated_group,
        test_comments_spaces_positions,
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
