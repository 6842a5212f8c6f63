"""
Tests for the spoken text of formulas.
"""

from ..atom import make_root
from ..parser import parse
from ..spoken_text import to_speakable_text


def speak(source):
    return to_speakable_text(parse(source))


def test_powers_and_numbers():
    """Test squared, cubed, general exponents and digit runs."""
    print("\n" + "=" * 60)
    print("TEST: Powers and Numbers")
    print("=" * 60)

    assert speak("x^2+1") == "x squared plus one"
    assert speak("x^3") == "x cubed"
    assert speak("x^{n+1}") == "x to the power of n plus one, end exponent"
    assert speak("a_1") == "a sub one"
    assert speak("12") == "12"
    assert speak("10^2") == "10 squared"
    print(f"  {speak('x^{n+1}')!r}")
    print("  PASSED!")


def test_structures():
    """Test fractions, roots, operators with limits and fonts."""
    print("\n" + "=" * 60)
    print("TEST: Structures")
    print("=" * 60)

    assert speak(r"\frac{1}{2}") == "the fraction one over two, end fraction"
    assert speak(r"\sqrt{x}") == "the square root of x, end root"
    assert speak(r"\sqrt[3]{x}") == "the cube root of x, end root"
    assert speak(r"\sqrt[n]{x}") == "the root of index n of x, end root"
    assert speak(r"\sum_{i=1}^{n} i") == "the sum from i equals one to n of i"
    assert speak(r"\lim_{x\to 0} f") == "the limit from x to zero f"
    assert speak(r"\mathbb{R}") == "blackboard R"
    assert speak(r"\left(x\right)") == "open paren x close paren"
    print("  PASSED!")


def test_matrix_and_root_atom():
    """Test arrays and a root atom as input."""
    print("\n" + "=" * 60)
    print("TEST: Matrix and Root Atom")
    print("=" * 60)

    assert speak(r"\begin{matrix}a&b\\c&d\end{matrix}") == \
        "the matrix, row 1: a, b; row 2: c, d, end matrix"
    root = make_root(parse("x=1"))
    assert to_speakable_text([root]) == "x equals one"
    assert to_speakable_text([]) == ""
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("SPOKEN TEXT TEST SUITE")
    print("=" * 60)

    tests = [
        test_powers_and_numbers,
        test_structures,
        test_matrix_and_root_atom,
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
