"""
Rays: a starting point plus a unit direction.

Points along a ray are origin + t * direction with t measured in world units.
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A ray with origin and normalized direction.

    The parametric form is: P(t) = origin + t * direction. Because the
    direction is normalized on construction, t is a distance.
    """

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        """Create a ray with given origin and direction.

        Args:
            origin: The starting point of the ray
            direction: The direction vector (normalized here; a zero
                vector stays zero)
        """
        self.origin = origin
        self.direction = direction.normalize()

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
