"""
PrismTrace - A Python Ray Tracer

A Whitted-style ray tracer with support for:
- Spheres, finite/infinite cylinders and triangles
- Bounding Volume Hierarchy (BVH) acceleration
- Phong shading with hard shadows from point lights
- Recursive mirror reflection and refraction
- Image textures
- JSON/YAML scene descriptions and PPM/PNG output
"""

__version__ = "0.1.0"
__author__ = "PrismTrace Team"

from .vec3 import Vec3, Point3
from .ray import Ray
from .color import Color
from .shapes import AABB, Shape, Sphere, Cylinder, Triangle
from .bvh import BVHNode, build_bvh
from .camera import Camera
from .textures import ImageTexture, load_texture
from .materials import Material
from .lights import Light, LightSample, PointLight
from .scene import Scene
from .renderer import Renderer, RenderSettings, RenderMode, Hit
from .tonemapping import tone_map, tone_map_image, luminance
from .scene_parser import (
    SceneParser, SceneDescription, SceneParseError,
    load_scene, parse_scene, load_renderer
)
from .image_io import pixels_to_array, array_to_pixels, write_ppm, save_image
