"""Tests for lighting system."""

import pytest

from prismtrace.vec3 import Vec3, Point3
from prismtrace.lights import Light, LightSample, PointLight


class TestPointLight:
    """Test PointLight class."""

    def test_sample_direction(self):
        light = PointLight(Point3(0, 10, 0), Vec3(1, 1, 1))
        sample = light.sample(Point3(0, 0, 0))

        assert sample.direction == Vec3(0, 1, 0)
        assert abs(sample.direction.length() - 1.0) < 1e-10

    def test_sample_distance(self):
        light = PointLight(Point3(3, 4, 0), Vec3(1, 1, 1))
        sample = light.sample(Point3(0, 0, 0))
        assert abs(sample.distance - 5.0) < 1e-10

    def test_no_falloff(self):
        light = PointLight(Point3(0, 0, 0), Vec3(0.5, 2.0, 0.0))
        near = light.sample(Point3(1, 0, 0))
        far = light.sample(Point3(100, 0, 0))
        assert near.intensity == far.intensity == Vec3(0.5, 2.0, 0.0)

    def test_negative_intensity_rejected(self):
        with pytest.raises(ValueError):
            PointLight(Point3(0, 0, 0), Vec3(1, -0.1, 1))

    def test_is_light(self):
        light = PointLight(Point3(0, 0, 0), Vec3(1, 1, 1))
        assert isinstance(light, Light)
        assert isinstance(light.sample(Point3(1, 0, 0)), LightSample)

    def test_abstract_light(self):
        with pytest.raises(TypeError):
            Light()
