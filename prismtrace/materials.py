"""
Surface materials for Phong shading.

A material carries the local lighting coefficients (ambient comes from the
base color, diffuse/specular from kd/ks), the recursive reflection and
refraction switches, and an optional image texture for the base color.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .color import Color
from .textures import ImageTexture

RGB = Tuple[float, float, float]


@dataclass
class Material:
    """Phong material parameters.

    Attributes:
        ks: Specular strength
        kd: Diffuse strength
        specular_exponent: Phong/Blinn shininess exponent
        diffuse_color: Base color, float RGB in [0, 1]
        specular_color: Highlight color, float RGB in [0, 1]
        is_reflective: Enables recursive mirror reflection
        reflectivity: Blend weight for reflected (and refracted) light
        is_refractive: Enables recursive refraction
        refractive_index: Index of refraction of the material (> 0)
        texture: Optional texture overriding the base color
        texture_filename: Name the texture was requested under
    """
    ks: float = 0.0
    kd: float = 0.0
    specular_exponent: float = 0.0
    diffuse_color: RGB = (0.0, 0.0, 0.0)
    specular_color: RGB = (0.0, 0.0, 0.0)
    is_reflective: bool = False
    reflectivity: float = 0.0
    is_refractive: bool = False
    refractive_index: float = 1.0
    texture: Optional[ImageTexture] = field(default=None, repr=False)
    texture_filename: str = ''

    def __post_init__(self):
        self.diffuse_color = tuple(float(c) for c in self.diffuse_color)
        self.specular_color = tuple(float(c) for c in self.specular_color)
        if len(self.diffuse_color) != 3 or len(self.specular_color) != 3:
            raise ValueError("Material colors must have 3 components")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity must be in [0, 1], got {self.reflectivity}")
        if self.refractive_index <= 0:
            raise ValueError(f"refractive_index must be positive, got {self.refractive_index}")

    @property
    def has_texture(self) -> bool:
        return self.texture is not None

    def base_color(self, u: float = 0.0, v: float = 0.0) -> Color:
        """Color used for the ambient term: texture sample or diffuse color."""
        if self.texture is not None:
            return self.texture.color_at(u, v)
        return Color.from_floats(self.diffuse_color)

    def diffuse(self) -> Color:
        return Color.from_floats(self.diffuse_color)

    def specular(self) -> Color:
        return Color.from_floats(self.specular_color)

    def describe(self) -> str:
        lines = [
            "Material {",
            f"  ks: {self.ks}",
            f"  kd: {self.kd}",
            f"  specularexponent: {self.specular_exponent}",
            f"  diffusecolor: {list(self.diffuse_color)}",
            f"  specularcolor: {list(self.specular_color)}",
            f"  isreflective: {str(self.is_reflective).lower()}",
            f"  reflectivity: {self.reflectivity}",
            f"  isrefractive: {str(self.is_refractive).lower()}",
            f"  refractiveindex: {self.refractive_index}",
            f"  hasTexture: {str(self.has_texture).lower()}",
            f"  textureFilename: {self.texture_filename}",
            "}",
        ]
        return "\n".join(lines)
