"""
Tests for box geometry and hit-testing.
"""

from ..box_geometry import (
    BoundingBox, atom_bounds, caret_position, flatten, nearest_atom, overall_bounds,
)
from ..layout import layout
from ..math_path import MathPath
from ..mathfield import MathField
from ..parser import parse


def test_bounding_box():
    """Test union and center."""
    print("\n" + "=" * 60)
    print("TEST: Bounding Box")
    print("=" * 60)

    a = BoundingBox(0, 0, 1, 1)
    b = BoundingBox(0.5, -1, 2, 0.5)
    u = a.union(b)
    assert (u.x_min, u.y_min, u.x_max, u.y_max) == (0, -1, 2, 1)
    assert u.center == (1.0, 0.0)
    assert a.center == (0.5, 0.5)
    print("  PASSED!")


def test_flatten():
    """Test absolute coordinates of nested boxes."""
    print("\n" + "=" * 60)
    print("TEST: Flatten")
    print("=" * 60)

    atoms = parse("x^{2}")
    box = layout(atoms)
    placed = flatten(box)
    assert placed[0].box is box and placed[0].depth_level == 0

    sup = [p for p in placed if p.box.has_class("ML__sup")][0]
    base_x = [p for p in placed if p.box.atom_id == atoms[0].identity and p.box.text == "x"][0]
    assert sup.x == base_x.x + base_x.box.width
    assert sup.y > 0

    bounds = overall_bounds(box)
    assert bounds.x_min == 0.0
    assert bounds.y_max >= sup.y + sup.box.height
    print(f"  {len(placed)} boxes")
    print("  PASSED!")


def test_nearest_atom():
    """Test the deepest containing box and the closest box outside."""
    print("\n" + "=" * 60)
    print("TEST: Nearest Atom")
    print("=" * 60)

    atoms = parse("x^{2}")
    box = layout(atoms)
    two = atoms[0].superscript[0]
    inside = atom_bounds(box, two.identity)
    cx, cy = inside.center
    assert nearest_atom(box, cx, cy) == two.identity

    assert nearest_atom(box, -5.0, 0.0) == atoms[0].identity
    assert nearest_atom(layout(parse("")), 0.0, 0.0) is None
    print("  PASSED!")


def test_path_from_point():
    """Test that the left half of an atom maps before it, the right half after."""
    print("\n" + "=" * 60)
    print("TEST: Path From Point")
    print("=" * 60)

    field = MathField("ab")
    box = field.render()
    a, b = field.mathlist.root.children
    a_box = atom_bounds(box, a.identity)
    b_box = atom_bounds(box, b.identity)

    assert field.path_from_point(box, a_box.x_min + 0.01, 0.2) == MathPath.from_string("children:-1")
    assert field.path_from_point(box, a_box.x_max - 0.01, 0.2) == MathPath.from_string("children:0")
    assert field.path_from_point(box, b_box.x_max - 0.01, 0.2) == MathPath.from_string("children:1")
    assert field.path_from_point(box, 100.0, 0.2) == MathPath.from_string("children:1")

    field.select_at_point(box, a_box.x_max - 0.01, 0.2)
    assert field.mathlist.focus == MathPath.from_string("children:0")

    empty = MathField()
    assert empty.path_from_point(empty.render(), 1.0, 1.0) == MathPath.start()
    print("  PASSED!")


def test_caret_position():
    """Test the caret location after the last atom and at the start."""
    print("\n" + "=" * 60)
    print("TEST: Caret Position")
    print("=" * 60)

    field = MathField("ab")
    box = field.render()
    a, b = field.mathlist.root.children
    x, y = caret_position(box)
    assert abs(x - atom_bounds(box, b.identity).x_max) < 1e-9
    assert abs(y) < 1e-9

    field.perform("moveToMathFieldStart")
    box = field.render()
    x, _ = caret_position(box)
    assert abs(x - atom_bounds(box, a.identity).x_min) < 1e-9

    assert caret_position(field.render(has_focus=False)) is None
    print("  PASSED!")


def run_all_tests():
    print("\n" + "=" * 60)
    print("BOX GEOMETRY TEST SUITE")
    print("=" * 60)

    tests = [
        test_bounding_box,
        test_flatten,
        test_nearest_atom,
        test_path_from_point,
        test_caret_position,
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
