"""
Bounding Volume Hierarchy (BVH) for accelerating ray-shape intersection.

Each node holds an AABB and either:
- a single shape (leaf node), or
- two child nodes (interior node)

Splits are positional medians along a randomly chosen axis per node, so
the tree depth is about log2(n) but no cost heuristic is involved.
Traversal visits both children of every node whose box the ray enters and
keeps the nearer hit.
"""

from __future__ import annotations
import random
from typing import List, Optional, Sequence, Tuple

from .ray import Ray
from .shapes import AABB, Shape

HitResult = Tuple[float, Shape]


def _box_min(shape: Shape, axis: int) -> float:
    return shape.bounding_box().minimum[axis]


class BVHNode:
    """A node in the Bounding Volume Hierarchy tree.

    Leaves reference a shape owned by the scene; the tree owns its nodes.
    """

    __slots__ = ('left', 'right', 'shape', 'bbox')

    def __init__(
        self,
        objects: List[Shape],
        start: int = 0,
        end: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """Build a BVH over objects[start:end].

        The slice of ``objects`` is reordered in place.

        Args:
            objects: List of shapes
            start: Start index in the objects list
            end: End index (exclusive) in the objects list
            rng: Random generator choosing split axes (module-level random if None)
        """
        if end is None:
            end = len(objects)
        object_span = end - start
        if object_span <= 0:
            raise ValueError("Cannot build a BVH node over an empty range")

        randint = rng.randint if rng is not None else random.randint
        axis = randint(0, 2)

        self.left: Optional[BVHNode] = None
        self.right: Optional[BVHNode] = None
        self.shape: Optional[Shape] = None

        if object_span == 1:
            self.shape = objects[start]
            self.bbox: AABB = self.shape.bounding_box()
            return

        if object_span == 2:
            first, second = objects[start], objects[start + 1]
            if _box_min(second, axis) < _box_min(first, axis):
                first, second = second, first
            self.left = BVHNode([first], rng=rng)
            self.right = BVHNode([second], rng=rng)
        else:
            objects[start:end] = sorted(
                objects[start:end],
                key=lambda obj: _box_min(obj, axis)
            )
            mid = start + object_span // 2
            self.left = BVHNode(objects, start, mid, rng)
            self.right = BVHNode(objects, mid, end, rng)

        self.bbox = AABB.surrounding_box(self.left.bbox, self.right.bbox)

    @property
    def is_leaf(self) -> bool:
        return self.shape is not None

    def bounding_box(self) -> AABB:
        return self.bbox

    def intersect(self, ray: Ray) -> Optional[HitResult]:
        """Return (t, shape) for the nearest hit in this subtree, or None."""
        if not self.bbox.intersect(ray):
            return None

        if self.shape is not None:
            t = self.shape.intersect(ray)
            if t is None:
                return None
            return t, self.shape

        hit_left = self.left.intersect(ray)
        hit_right = self.right.intersect(ray)

        if hit_left is not None and hit_right is not None:
            return hit_left if hit_left[0] < hit_right[0] else hit_right
        if hit_left is not None:
            return hit_left
        return hit_right

    def depth(self) -> int:
        if self.is_leaf:
            return 1
        return 1 + max(self.left.depth(), self.right.depth())

    def leaves(self) -> List[Shape]:
        """Shapes referenced by the leaves, left to right."""
        if self.is_leaf:
            return [self.shape]
        return self.left.leaves() + self.right.leaves()


def build_bvh(shapes: Sequence[Shape], rng: Optional[random.Random] = None) -> Optional[BVHNode]:
    """Build a BVH over a copy of the shape sequence.

    Args:
        shapes: Shapes to accelerate (the sequence itself is not reordered)
        rng: Random generator choosing split axes

    Returns:
        The root node, or None for an empty sequence
    """
    objects = list(shapes)
    if not objects:
        return None
    return BVHNode(objects, 0, len(objects), rng)
