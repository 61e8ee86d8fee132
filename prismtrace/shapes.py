"""
Geometric shapes for the ray tracer.

The shape set is closed: Sphere, Cylinder and Triangle. Each one reports
the nearest positive ray parameter of an intersection, an outward unit
normal, UV coordinates for texturing, and a bounding box for the BVH.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Tuple
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material

# Tolerance for rays (near-)parallel to a plane or axis
PARALLEL_EPSILON = 1e-6


class AABB:
    """Axis-Aligned Bounding Box used to prune BVH traversal."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def intersect(self, ray: Ray) -> bool:
        """Test if the ray hits this box using the slab method.

        A direction component below the parallel tolerance requires the
        origin to lie inside that slab. Boxes entirely behind the origin
        are rejected.
        """
        t_min = -math.inf
        t_max = math.inf

        for i in range(3):
            origin = ray.origin[i]
            direction = ray.direction[i]

            if abs(direction) < PARALLEL_EPSILON:
                if origin < self.minimum[i] or origin > self.maximum[i]:
                    return False
                continue

            inv_d = 1.0 / direction
            t0 = (self.minimum[i] - origin) * inv_d
            t1 = (self.maximum[i] - origin) * inv_d

            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = max(t0, t_min)
            t_max = min(t1, t_max)

            if t_max <= t_min + PARALLEL_EPSILON:
                return False

        return t_max >= 0.0

    @staticmethod
    def surrounding_box(box0: AABB, box1: AABB) -> AABB:
        """Return the AABB that contains both input boxes."""
        return AABB(
            Vec3.component_min(box0.minimum, box1.minimum),
            Vec3.component_max(box0.maximum, box1.maximum)
        )

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Shape(ABC):
    """Abstract base class for all surfaces that can be hit by rays."""

    def __init__(self, material: Optional[Material] = None):
        self.material = material if material is not None else Material()

    def set_material(self, material: Material) -> None:
        self.material = material

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[float]:
        """Return the smallest positive ray parameter of a hit, or None."""
        pass

    @abstractmethod
    def normal_at(self, point: Point3) -> Vec3:
        """Outward unit normal at a point on the surface."""
        pass

    @abstractmethod
    def uv_at(self, point: Point3) -> Tuple[float, float]:
        """Texture coordinates of a point on the surface."""
        pass

    @abstractmethod
    def bounding_box(self) -> AABB:
        pass


class Sphere(Shape):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        super().__init__(material)
        if radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius

    def intersect(self, ray: Ray) -> Optional[float]:
        """Ray-sphere intersection using the quadratic formula.

        (P-C).(P-C) = r^2 with P = O + tD expands to
        t^2(D.D) + 2t(D.(O-C)) + (O-C).(O-C) - r^2 = 0.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a == 0:
            return None
        b = 2.0 * oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)
        t0 = (-b - sqrtd) / (2.0 * a)
        t1 = (-b + sqrtd) / (2.0 * a)

        if t0 > 0:
            return t0
        if t1 > 0:
            return t1
        # Both roots behind the origin
        return None

    def normal_at(self, point: Point3) -> Vec3:
        return (point - self.center).normalize()

    def uv_at(self, point: Point3) -> Tuple[float, float]:
        """Spherical coordinates: u from azimuth, v from elevation."""
        d = (point - self.center).normalize()
        u = 0.5 + math.atan2(d.z, d.x) / (2 * math.pi)
        v = 0.5 - math.asin(max(-1.0, min(1.0, d.y))) / math.pi
        return u, v

    def bounding_box(self) -> AABB:
        r_vec = Vec3(self.radius, self.radius, self.radius)
        return AABB(self.center - r_vec, self.center + r_vec)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Triangle(Shape):
    """A triangle defined by three vertices."""

    # Padding so flat triangles never produce zero-thickness slabs
    BOX_PADDING = 1e-4

    def __init__(self, v0: Point3, v1: Point3, v2: Point3, material: Optional[Material] = None):
        """Create a triangle from three vertices.

        Args:
            v0, v1, v2: The three vertices; the normal follows (v1-v0) x (v2-v0)
            material: Material for shading
        """
        super().__init__(material)
        self.v0 = v0
        self.v1 = v1
        self.v2 = v2

        self.e1 = v1 - v0
        self.e2 = v2 - v0
        self.normal = self.e1.cross(self.e2).normalize()

    def intersect(self, ray: Ray) -> Optional[float]:
        """Ray-triangle intersection using the Moller-Trumbore algorithm."""
        h = ray.direction.cross(self.e2)
        a = self.e1.dot(h)

        # Ray is parallel to triangle
        if abs(a) < PARALLEL_EPSILON:
            return None

        f = 1.0 / a
        s = ray.origin - self.v0
        u = f * s.dot(h)

        if u < 0.0 or u > 1.0:
            return None

        q = s.cross(self.e1)
        v = f * ray.direction.dot(q)

        if v < 0.0 or u + v > 1.0:
            return None

        t = f * self.e2.dot(q)

        # Reject hits at the origin itself
        if t <= PARALLEL_EPSILON:
            return None
        return t

    def normal_at(self, point: Point3) -> Vec3:
        return self.normal

    def uv_at(self, point: Point3) -> Tuple[float, float]:
        """Barycentric projection of the point onto the edge basis."""
        p = point - self.v0

        d00 = self.e1.dot(self.e1)
        d01 = self.e1.dot(self.e2)
        d11 = self.e2.dot(self.e2)
        d20 = p.dot(self.e1)
        d21 = p.dot(self.e2)

        denom = d00 * d11 - d01 * d01
        if abs(denom) < 1e-12:
            return 0.0, 0.0

        v = (d11 * d20 - d01 * d21) / denom
        u = (d00 * d21 - d01 * d20) / denom
        return u, v

    def bounding_box(self) -> AABB:
        pad = Vec3(self.BOX_PADDING, self.BOX_PADDING, self.BOX_PADDING)
        lo = Vec3.component_min(Vec3.component_min(self.v0, self.v1), self.v2)
        hi = Vec3.component_max(Vec3.component_max(self.v0, self.v1), self.v2)
        return AABB(lo - pad, hi + pad)

    def __repr__(self) -> str:
        return f"Triangle(v0={self.v0}, v1={self.v1}, v2={self.v2})"


class Cylinder(Shape):
    """A cylinder around an arbitrary axis.

    The surface extends ``height`` in both directions along the axis from
    ``center``, closed by two disk caps. With ``finite=False`` it is an
    infinite open tube.
    """

    # Distance from a cap plane within which a point counts as on the cap
    CAP_EPSILON = 1e-6

    def __init__(
        self,
        center: Point3,
        axis: Vec3,
        radius: float,
        height: float,
        material: Optional[Material] = None,
        finite: bool = True
    ):
        """Create a cylinder.

        Args:
            center: Midpoint of the cylinder's axis segment
            axis: Axis direction (normalized here)
            radius: Radius of the cylinder
            height: Half-extent along the axis
            material: Material for shading
            finite: Whether the surface is limited to the axial extent and capped
        """
        super().__init__(material)
        if radius <= 0:
            raise ValueError(f"Cylinder radius must be positive, got {radius}")
        if finite and height <= 0:
            raise ValueError(f"Cylinder height must be positive, got {height}")
        if axis.near_zero():
            raise ValueError("Cylinder axis must be non-zero")

        self.center = center
        self.axis = axis.normalize()
        self.radius = radius
        self.height = height
        self.finite = finite

        # Orthonormal basis perpendicular to the axis, for the UV angle
        helper = Vec3(1, 0, 0) if abs(self.axis.x) < 0.9 else Vec3(0, 0, 1)
        self._tangent = helper.cross(self.axis).normalize()
        self._bitangent = self.axis.cross(self._tangent)

    def _axial_height(self, point: Point3) -> float:
        return (point - self.center).dot(self.axis)

    def _lateral_hit(self, ray: Ray) -> float:
        oc = ray.origin - self.center
        d_proj = ray.direction - self.axis * ray.direction.dot(self.axis)
        oc_proj = oc - self.axis * oc.dot(self.axis)

        a = d_proj.dot(d_proj)
        # Ray runs along the axis: it never crosses the lateral surface
        if a < PARALLEL_EPSILON:
            return math.inf

        b = 2.0 * d_proj.dot(oc_proj)
        c = oc_proj.dot(oc_proj) - self.radius * self.radius

        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return math.inf

        sqrt_d = math.sqrt(discriminant)
        for t in ((-b - sqrt_d) / (2.0 * a), (-b + sqrt_d) / (2.0 * a)):
            if t <= 0:
                continue
            if not self.finite:
                return t
            if -self.height <= self._axial_height(ray.at(t)) <= self.height:
                return t
        return math.inf

    def _cap_hit(self, ray: Ray) -> float:
        denom = self.axis.dot(ray.direction)
        if abs(denom) < PARALLEL_EPSILON:
            return math.inf

        best = math.inf
        for cap_center in (self.center + self.axis * self.height,
                           self.center - self.axis * self.height):
            t = self.axis.dot(cap_center - ray.origin) / denom
            if 0 < t < best and (ray.at(t) - cap_center).length() <= self.radius:
                best = t
        return best

    def intersect(self, ray: Ray) -> Optional[float]:
        t = self._lateral_hit(ray)
        if self.finite:
            t = min(t, self._cap_hit(ray))
        return t if t != math.inf else None

    def normal_at(self, point: Point3) -> Vec3:
        h = self._axial_height(point)
        if self.finite:
            if abs(h - self.height) < self.CAP_EPSILON:
                return self.axis
            if abs(h + self.height) < self.CAP_EPSILON:
                return -self.axis
        radial = (point - self.center) - self.axis * h
        return radial.normalize()

    def uv_at(self, point: Point3) -> Tuple[float, float]:
        """u: angle around the axis in [0, 1]; v: normalized axial height."""
        rel = point - self.center
        angle = math.atan2(rel.dot(self._bitangent), rel.dot(self._tangent))
        u = 0.5 + angle / (2 * math.pi)
        if not self.finite:
            return u, 0.5
        v = (rel.dot(self.axis) + self.height) / (2.0 * self.height)
        return u, v

    def bounding_box(self) -> AABB:
        if not self.finite:
            return AABB(Vec3(-math.inf, -math.inf, -math.inf),
                        Vec3(math.inf, math.inf, math.inf))
        end0 = self.center + self.axis * self.height
        end1 = self.center - self.axis * self.height
        r_vec = Vec3(self.radius, self.radius, self.radius)
        return AABB(Vec3.component_min(end0, end1) - r_vec,
                    Vec3.component_max(end0, end1) + r_vec)

    def __repr__(self) -> str:
        return (f"Cylinder(center={self.center}, axis={self.axis}, "
                f"radius={self.radius}, height={self.height})")
