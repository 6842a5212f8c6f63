"""
Tests for the layout engine.

Tests:
1. Math style transitions
2. Superscript and fraction metric composition
3. Style reduction inside fractions and scripts
4. Large operators and limits
5. Inter-atom spacing
6. Caret, selection and placeholder classes
"""

from ..atom import make_root
from ..layout import SIGMAS, MathStyle, layout
from ..parser import parse


def test_math_style():
    """Test script and fraction style transitions."""
    print("\n" + "=" * 60)
    print("TEST: Math Style")
    print("=" * 60)

    assert MathStyle.DISPLAY.sup() == MathStyle.SCRIPT
    assert MathStyle.TEXT.sub() == MathStyle.SCRIPT
    assert MathStyle.SCRIPT.sup() == MathStyle.SCRIPTSCRIPT
    assert MathStyle.DISPLAY.frac_num() == MathStyle.TEXT
    assert MathStyle.TEXT.frac_den() == MathStyle.SCRIPT
    assert MathStyle.SCRIPTSCRIPT.frac_num() == MathStyle.SCRIPTSCRIPT
    assert MathStyle.parse("text") == MathStyle.TEXT
    assert MathStyle.parse("scriptscript") == MathStyle.SCRIPTSCRIPT
    assert MathStyle.SCRIPT.size < MathStyle.TEXT.size
    assert MathStyle.SCRIPT.is_tight and not MathStyle.TEXT.is_tight
    print("  PASSED!")


def test_superscript_height():
    """Test that adding a superscript never lowers the box."""
    print("\n" + "=" * 60)
    print("TEST: Superscript Height")
    print("=" * 60)

    for style in ("display", "text"):
        base = layout(parse("x"), style)
        raised = layout(parse("x^{2}"), style)
        assert raised.height >= base.height
        assert raised.width > base.width
        assert raised.find("ML__supsub")
        assert raised.find("ML__sup")

    sub = layout(parse("x_{i}"))
    assert sub.depth >= layout(parse("x")).depth
    print(f"  x: h={base.height:.3f}  x^2: h={raised.height:.3f}")
    print("  PASSED!")


def test_fraction_metrics():
    """Test fraction height + depth against its parts and the rule."""
    print("\n" + "=" * 60)
    print("TEST: Fraction Metrics")
    print("=" * 60)

    for style in ("display", "text"):
        box = layout(parse(r"\frac{1}{2}"), style)
        frac = box.find("ML__mfrac")[0]
        num = frac.find("ML__numer")[0]
        den = frac.find("ML__denom")[0]
        assert frac.find("ML__rule")
        assert num.y > 0 > den.y
        assert frac.height + frac.depth >= num.height + den.depth + SIGMAS["rule_thickness"]
        print(f"  {style}: h={frac.height:.3f} d={frac.depth:.3f}")
    print("  PASSED!")


def test_style_reduction():
    """Test that nested content is laid out smaller."""
    print("\n" + "=" * 60)
    print("TEST: Style Reduction")
    print("=" * 60)

    plain = layout(parse("x"), "text")
    frac = layout(parse(r"\frac{x}{x}"), "text")
    num = frac.find("ML__numer")[0]
    assert num.width < plain.width

    dfrac = layout(parse(r"\dfrac{x}{x}"), "text")
    assert dfrac.find("ML__numer")[0].width == layout(parse("x"), "display").width

    sup = layout(parse("x^{x}"), "display").find("ML__sup")[0]
    assert sup.width < plain.width
    print("  PASSED!")


def test_large_operators():
    """Test limits in display style and scripts in text style."""
    print("\n" + "=" * 60)
    print("TEST: Large Operators")
    print("=" * 60)

    display = layout(parse(r"\sum_{i=1}^{n}"), "display")
    text = layout(parse(r"\sum_{i=1}^{n}"), "text")
    assert display.find("ML__limits")
    assert not text.find("ML__limits")
    assert text.find("ML__supsub")
    assert display.height > text.height

    assert layout(parse(r"\int"), "display").height > layout(parse(r"\int"), "text").height
    print("  PASSED!")


def test_spacing():
    """Test medium space around binary operators, suppressed in script style."""
    print("\n" + "=" * 60)
    print("TEST: Spacing")
    print("=" * 60)

    assert len(layout(parse("a+b"), "display").find("ML__kern")) == 2
    assert len(layout(parse("a+b"), "script").find("ML__kern")) == 0
    # A leading + is ordinary: no space
    assert len(layout(parse("+b"), "display").find("ML__kern")) == 0
    assert len(layout(parse("a=b"), "text").find("ML__kern")) == 2
    print("  PASSED!")


def test_presentation_classes():
    """Test caret, selection, placeholder and error classes."""
    print("\n" + "=" * 60)
    print("TEST: Presentation Classes")
    print("=" * 60)

    atoms = parse(r"a\placeholder{}\foo")
    atoms[0].has_caret = True
    atoms[0].is_selected = True
    box = layout(atoms)
    assert box.has_class("ML__base")
    assert len(box.find("ML__caret")) == 1
    assert box.find("ML__selected")
    assert box.find("ML__placeholder")
    assert box.find("ML__error")

    root = make_root()
    root.has_caret = True
    empty = layout(root)
    assert len(empty.find("ML__caret")) == 1

    matrix = layout(parse(r"\begin{pmatrix}a&b\\c&d\end{pmatrix}"))
    assert len(matrix.find("ML__cell")) == 4
    assert len(matrix.find("ML__delim")) == 2
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("LAYOUT ENGINE TEST SUITE")
    print("=" * 60)

    tests = [
        test_math_style,
        test_superscript_height,
        test_fraction_metrics,
        test_style_reduction,
        test_large_operators,
        test_spacing,
        test_presentation_classes,
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
