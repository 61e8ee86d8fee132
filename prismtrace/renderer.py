"""
Renderer module - the heart of the ray tracer.

Implements:
- Primary ray generation per pixel
- Nearest-hit resolution by linear scan or BVH traversal
- Binary (hit/miss) and Phong shading modes
- Hard shadows from point lights
- Recursive mirror reflection and Snell refraction, bounded by a bounce limit
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from .camera import Camera
from .color import Color, HIGHLIGHT
from .materials import Material
from .ray import Ray
from .scene import Scene
from .shapes import Shape
from .tonemapping import tone_map
from .vec3 import Vec3, Point3

logger = logging.getLogger(__name__)

# Offset applied to secondary ray origins to avoid self-intersection
SURFACE_BIAS = 1e-4
# Fraction of the base color used as ambient light
AMBIENT_FACTOR = 0.5
# Index of refraction assumed outside every surface
AIR_INDEX = 1.0

PixelGrid = List[List[Color]]


class RenderMode(Enum):
    """Shading mode."""
    BINARY = "binary"
    PHONG = "phong"

    @classmethod
    def parse(cls, value: Union[str, RenderMode]) -> RenderMode:
        """Parse a mode name such as ``"phong"`` (case-insensitive)."""
        if isinstance(value, RenderMode):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown render mode: {value}") from None


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    nbounces: int = 0
    render_mode: RenderMode = RenderMode.PHONG
    use_bvh: bool = False

    def __post_init__(self):
        self.render_mode = RenderMode.parse(self.render_mode)
        if self.nbounces < 0:
            raise ValueError(f"nbounces must be non-negative, got {self.nbounces}")


@dataclass
class Hit:
    """Nearest intersection of a ray with the scene.

    Attributes:
        t: Ray parameter (distance) of the hit
        shape: The shape that was hit
        point: World-space intersection point
        normal: Outward unit normal of the shape at the point
    """
    t: float
    shape: Shape
    point: Point3
    normal: Vec3


class Renderer:
    """Whitted-style ray tracer with Phong shading."""

    def __init__(self, camera: Camera, scene: Scene, settings: Optional[RenderSettings] = None):
        """Create a renderer.

        Args:
            camera: Camera generating the primary rays
            scene: Scene to render
            settings: Render configuration (uses defaults if None)
        """
        self.camera = camera
        self.scene = scene
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    @property
    def nbounces(self) -> int:
        return self.settings.nbounces

    @property
    def render_mode(self) -> RenderMode:
        return self.settings.render_mode

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0),
                called after each completed row
        """
        self._progress_callback = callback

    def render_scene(self) -> PixelGrid:
        """Render every pixel and return the colors as rows of Color.

        Returns:
            A list of ``height`` rows, each a list of ``width`` colors
        """
        width = self.camera.width
        height = self.camera.height

        if self.settings.use_bvh:
            # Build before tracing so every ray sees the same tree
            self.scene.get_bvh()

        logger.debug("Rendering %dx%d, mode=%s, bvh=%s, nbounces=%d",
                     width, height, self.render_mode.value,
                     self.settings.use_bvh, self.nbounces)

        pixels: PixelGrid = []
        for y in range(height):
            row = [self.render_pixel(self.camera.generate_ray(x, y), 0) for x in range(width)]
            pixels.append(row)
            if self._progress_callback:
                self._progress_callback((y + 1) / height)

        return pixels

    def find_closest_hit(self, ray: Ray) -> Optional[Hit]:
        """Nearest positive-t intersection, by linear scan or BVH traversal."""
        if self.settings.use_bvh:
            found = self._traverse_bvh(ray)
            if found is None:
                return None
            t, shape = found
        else:
            t = math.inf
            shape = None
            for candidate in self.scene.shapes:
                distance = candidate.intersect(ray)
                if distance is not None and distance < t:
                    t = distance
                    shape = candidate
            if shape is None:
                return None

        point = ray.at(t)
        return Hit(t=t, shape=shape, point=point, normal=shape.normal_at(point))

    def _traverse_bvh(self, ray: Ray):
        bvh = self.scene.get_bvh()
        if bvh is None:
            return None
        try:
            return bvh.intersect(ray)
        except Exception as exc:
            # Traversal failures degrade to a miss for this ray
            logger.error("Error during BVH intersection: %s", exc)
            return None

    def render_pixel(self, ray: Ray, bounce: int = 0) -> Color:
        """Compute the color seen along a ray.

        Args:
            ray: The ray to trace
            bounce: Number of reflections/refractions already taken

        Returns:
            The clamped color for this ray
        """
        hit = self.find_closest_hit(ray)

        if hit is None:
            return self.scene.background

        if self.render_mode is RenderMode.BINARY:
            return HIGHLIGHT

        return self._shade_phong(ray, hit, bounce)

    def _shade_phong(self, ray: Ray, hit: Hit, bounce: int) -> Color:
        material: Material = hit.shape.material
        point = hit.point
        normal = hit.normal

        if material.has_texture:
            u, v = hit.shape.uv_at(point)
            base_color = material.base_color(u, v)
        else:
            base_color = material.base_color()

        ambient = base_color * AMBIENT_FACTOR
        diffuse = Color(0, 0, 0)
        specular = Color(0, 0, 0)

        view_dir = -ray.direction

        for light in self.scene.lights:
            sample = light.sample(point)
            light_dir = sample.direction

            if self._in_shadow(point, light_dir, sample.distance):
                continue

            light_color = Color.from_floats(sample.intensity)
            half_dir = (view_dir + light_dir).normalize()

            diff = max(normal.dot(light_dir), 0.0)
            diffuse = diffuse + material.diffuse() * diff * material.kd * light_color

            spec = math.pow(max(normal.dot(half_dir), 0.0), material.specular_exponent)
            specular = specular + material.specular() * spec * material.ks * light_color

        pixel_color = ambient + diffuse + specular

        if material.is_reflective and bounce < self.nbounces:
            reflect_dir = ray.direction.reflect(normal)
            reflected_ray = Ray(point + reflect_dir * SURFACE_BIAS, reflect_dir)
            reflected_color = self.render_pixel(reflected_ray, bounce + 1)
            pixel_color = self._blend(pixel_color, reflected_color, material.reflectivity)

        if material.is_refractive and bounce < self.nbounces:
            refracted_ray = self._refracted_ray(ray, point, normal, material.refractive_index)
            # None means total internal reflection: no refracted contribution
            if refracted_ray is not None:
                refracted_color = self.render_pixel(refracted_ray, bounce + 1)
                # Refraction reuses the reflectivity weight
                pixel_color = self._blend(pixel_color, refracted_color, material.reflectivity)

        return pixel_color.clamp()

    def _in_shadow(self, point: Point3, light_dir: Vec3, light_distance: float) -> bool:
        """Whether any shape blocks the segment from point to the light."""
        shadow_ray = Ray(point + light_dir * SURFACE_BIAS, light_dir)

        if self.settings.use_bvh:
            found = self._traverse_bvh(shadow_ray)
            return found is not None and found[0] < light_distance

        for shape in self.scene.shapes:
            distance = shape.intersect(shadow_ray)
            if distance is not None and distance < light_distance:
                return True
        return False

    @staticmethod
    def _blend(local: Color, secondary: Color, weight: float) -> Color:
        return local * (1 - weight) + secondary * weight

    @staticmethod
    def _refracted_ray(ray: Ray, point: Point3, normal: Vec3, index: float) -> Optional[Ray]:
        """Snell refraction through the surface, or None on total internal reflection."""
        eta = AIR_INDEX
        eta_prime = index
        cos_theta_i = -normal.dot(ray.direction)

        # Leaving the surface: flip the normal and swap the media
        if cos_theta_i < 0:
            cos_theta_i = -cos_theta_i
            normal = -normal
            eta, eta_prime = eta_prime, eta

        eta_ratio = eta / eta_prime
        cos_theta_t2 = 1.0 - eta_ratio * eta_ratio * (1.0 - cos_theta_i * cos_theta_i)
        if cos_theta_t2 <= 0.0:
            return None

        direction = (ray.direction * eta_ratio
                     + normal * (eta_ratio * cos_theta_i - math.sqrt(cos_theta_t2)))
        return Ray(point - normal * SURFACE_BIAS, direction)

    def tone_map(self, hdr_color: Color) -> Color:
        """Reinhard-compress a color. Opt-in; render_scene never calls it."""
        return tone_map(hdr_color)

    def describe(self) -> str:
        """Human-readable summary of the renderer, camera and scene settings."""
        return "\n".join([
            "Renderer Settings:",
            f"Number of bounces: {self.nbounces}",
            f"Render Mode: {self.render_mode.value.capitalize()}",
            f"BVH: {'enabled' if self.settings.use_bvh else 'disabled'}",
            "",
            "Camera Settings:",
            self.camera.describe(),
            "",
            "Scene Settings:",
            f"Number of Shapes: {len(self.scene.shapes)}",
            f"Number of Lights: {len(self.scene.lights)}",
            f"Background Color: {list(self.scene.background_color)}",
        ])
