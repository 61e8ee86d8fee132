"""Tests for Ray class."""

from prismtrace.vec3 import Vec3, Point3
from prismtrace.ray import Ray


class TestRay:
    """Test Ray construction and evaluation."""

    def test_direction_is_normalized(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -10))
        assert ray.direction == Vec3(0, 0, -1)
        assert abs(ray.direction.length() - 1.0) < 1e-10

    def test_origin_kept(self):
        ray = Ray(Point3(1, 2, 3), Vec3(1, 0, 0))
        assert ray.origin == Point3(1, 2, 3)

    def test_at(self):
        ray = Ray(Point3(1, 0, 0), Vec3(0, 2, 0))
        assert ray.at(0) == Point3(1, 0, 0)
        assert ray.at(3) == Point3(1, 3, 0)

    def test_at_is_distance(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 1, 1))
        p = ray.at(2.0)
        assert abs(p.length() - 2.0) < 1e-10

    def test_zero_direction_stays_zero(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 0))
        assert ray.direction == Vec3(0, 0, 0)

    def test_repr(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        assert repr(ray) == "Ray(origin=[0, 0, 0], direction=[0, 0, 1])"
