"""
Camera module for generating primary rays.

Pinhole projection: every primary ray starts at the camera position and
passes through the center of its pixel on a virtual image plane one unit
in front of the camera.
"""

from __future__ import annotations
import math
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera with a vertical field of view."""

    def __init__(
        self,
        width: int,
        height: int,
        position: Point3,
        look_at: Point3,
        up_vector: Vec3 = Vec3(0, 1, 0),
        fov: float = 90.0,
        exposure: float = 0.0
    ):
        """Create a camera.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            position: Camera position in world space
            look_at: Point the camera is looking at
            up_vector: World up vector (re-orthogonalized against the view)
            fov: Vertical field of view in degrees
            exposure: Carried for completeness; shading does not use it
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Camera resolution must be positive, got {width}x{height}")
        if not 0 < fov < 180:
            raise ValueError(f"Camera fov must be in (0, 180) degrees, got {fov}")

        self.width = width
        self.height = height
        self.position = position
        self.look_at = look_at
        self.up_vector = up_vector
        self.fov = fov
        self.exposure = exposure

        self.aspect_ratio = width / height
        self.fov_scale = math.tan(math.radians(fov) / 2)

        # Orthonormal camera basis
        self.forward = (look_at - position).normalize()
        self.right = self.forward.cross(up_vector).normalize()
        self.up = self.right.cross(self.forward).normalize()

    def generate_ray(self, x: int, y: int) -> Ray:
        """Generate the primary ray through the center of pixel (x, y).

        Args:
            x: Column, 0 at the left edge
            y: Row, 0 at the top edge

        Returns:
            A ray from the camera position through the pixel
        """
        px = (2.0 * (x + 0.5) / self.width - 1.0) * self.aspect_ratio * self.fov_scale
        # Image rows grow downward, world up is positive
        py = (1.0 - 2.0 * (y + 0.5) / self.height) * self.fov_scale

        direction = self.forward + self.right * px + self.up * py
        return Ray(self.position, direction)

    def describe(self) -> str:
        return "\n".join([
            f"Resolution: {self.width}x{self.height}",
            f"Position: {self.position}",
            f"Look At: {self.look_at}",
            f"Up Vector: {self.up_vector}",
            f"FOV: {self.fov:g} degrees",
            f"Exposure: {self.exposure:g}",
        ])

    def __repr__(self) -> str:
        return f"Camera(position={self.position}, look_at={self.look_at}, fov={self.fov})"
