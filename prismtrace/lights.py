"""
Point light sources and the samples shading reads from them.

Only point lights are implemented. A point light has no falloff: its
intensity reaches every unoccluded point unchanged.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .vec3 import Vec3, Point3


@dataclass
class LightSample:
    """Result of sampling a light source from a surface point."""
    direction: Vec3       # Unit direction from the point to the light
    distance: float       # Distance to the light
    intensity: Vec3       # Per-channel intensity (non-negative, unbounded)


class Light(ABC):
    """Abstract base class for light sources."""

    @abstractmethod
    def sample(self, hit_point: Point3) -> LightSample:
        """Sample the light from a given point.

        Args:
            hit_point: The point being illuminated

        Returns:
            LightSample with direction, distance and intensity
        """
        pass


class PointLight(Light):
    """A point light source.

    Point lights emit equally in all directions from a single point and
    produce hard shadows.
    """

    def __init__(self, position: Point3, intensity: Vec3):
        """Create a point light.

        Args:
            position: Position of the light
            intensity: RGB intensity; components may exceed 1
        """
        if min(intensity) < 0:
            raise ValueError(f"Light intensity must be non-negative, got {intensity}")
        self.position = position
        self.intensity = intensity

    def sample(self, hit_point: Point3) -> LightSample:
        to_light = self.position - hit_point
        return LightSample(
            direction=to_light.normalize(),
            distance=to_light.length(),
            intensity=self.intensity
        )

    def __repr__(self) -> str:
        return f"PointLight(position={self.position}, intensity={self.intensity})"
