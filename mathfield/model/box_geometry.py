"""
Box Geometry

Absolute positions of a laid-out box tree, used for hit-testing.

Coordinates: x grows to the right from the left edge of the root box, y grows
upwards from the root baseline. A box at absolute (x, y) covers
[x, x + width] horizontally and [y - depth, y + height] vertically.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .layout import Box


@dataclass
class BoundingBox:
    """Axis-aligned rectangle with y pointing up."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x_min + self.x_max) / 2,
                (self.y_min + self.y_max) / 2)

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            min(self.x_min, other.x_min),
            min(self.y_min, other.y_min),
            max(self.x_max, other.x_max),
            max(self.y_max, other.y_max)
        )


@dataclass
class PlacedBox:
    """A box with its absolute origin (left edge, baseline)."""
    box: Box
    x: float
    y: float
    depth_level: int

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox(self.x, self.y - self.box.depth,
                           self.x + self.box.width, self.y + self.box.height)


def flatten(root: Box) -> List[PlacedBox]:
    """All boxes of a tree with absolute coordinates, depth-first."""
    placed: List[PlacedBox] = []

    def visit(box: Box, origin_x: float, origin_y: float, level: int):
        x = origin_x + box.x
        y = origin_y + box.y
        placed.append(PlacedBox(box, x, y, level))
        for child in box.children:
            visit(child, x, y, level + 1)

    # The root is the frame of reference
    placed.append(PlacedBox(root, 0.0, 0.0, 0))
    for child in root.children:
        visit(child, 0.0, 0.0, 1)
    return placed


def bounds_array(placed: List[PlacedBox]) -> np.ndarray:
    """(N, 4) array of [x_min, y_min, x_max, y_max]."""
    if not placed:
        return np.zeros((0, 4))
    return np.array([[p.x, p.y - p.box.depth, p.x + p.box.width, p.y + p.box.height]
                     for p in placed], dtype=float)


def overall_bounds(root: Box) -> BoundingBox:
    """Union of all box extents (children may overflow their parents)."""
    bounds = bounds_array(flatten(root))
    return BoundingBox(float(bounds[:, 0].min()), float(bounds[:, 1].min()),
                       float(bounds[:, 2].max()), float(bounds[:, 3].max()))


def atom_bounds(root: Box, atom_id: int) -> Optional[BoundingBox]:
    """Union of the boxes correlated with one atom."""
    result = None
    for p in flatten(root):
        if p.box.atom_id == atom_id:
            result = p.bbox if result is None else result.union(p.bbox)
    return result


def nearest_atom(root: Box, x: float, y: float) -> Optional[int]:
    """
    Identity of the atom whose box is closest to a point.

    Among boxes containing the point the deepest (then smallest) one wins.
    Otherwise the box at the smallest distance wins.
    """
    placed = [p for p in flatten(root) if p.box.atom_id is not None]
    if not placed:
        return None

    bounds = bounds_array(placed)
    dx = np.maximum.reduce([bounds[:, 0] - x, np.zeros(len(placed)), x - bounds[:, 2]])
    dy = np.maximum.reduce([bounds[:, 1] - y, np.zeros(len(placed)), y - bounds[:, 3]])
    distance = np.hypot(dx, dy)

    inside = np.flatnonzero(distance == 0)
    if inside.size:
        levels = np.array([placed[i].depth_level for i in inside])
        areas = (bounds[inside, 2] - bounds[inside, 0]) * (bounds[inside, 3] - bounds[inside, 1])
        # Deepest first, then smallest area
        best = inside[np.lexsort((areas, -levels))[0]]
    else:
        best = int(np.argmin(distance))
    return placed[best].box.atom_id


def caret_position(root: Box) -> Optional[Tuple[float, float]]:
    """Absolute (x, baseline y) of the caret box, if the tree has one."""
    for p in flatten(root):
        if 'ML__caret' in p.box.classes:
            return p.x, p.y
    return None
