"""
Image textures for material base colors.

Textures are decoded with Pillow (PPM P3/P6 as well as PNG, JPEG and the
other formats it reads) and sampled with nearest-pixel lookup.
"""

from __future__ import annotations
import logging
import math
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from .color import Color

logger = logging.getLogger(__name__)


class ImageTexture:
    """A texture loaded from an image file."""

    def __init__(self, filename: Union[str, Path]):
        """Load a texture from an image file.

        Args:
            filename: Path to the image file

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If Pillow cannot decode the file
        """
        self.filename = str(filename)
        self._data: np.ndarray = self._load_image()
        self._height, self._width = self._data.shape[:2]

    @classmethod
    def from_array(cls, data: np.ndarray, filename: str = '<array>') -> 'ImageTexture':
        """Wrap an (H, W, 3) uint8 array as a texture."""
        tex = cls.__new__(cls)
        tex.filename = filename
        tex._data = np.asarray(data, dtype=np.uint8)
        tex._height, tex._width = tex._data.shape[:2]
        return tex

    def _load_image(self) -> np.ndarray:
        path = Path(self.filename)
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {self.filename}")

        with Image.open(path) as img:
            return np.array(img.convert('RGB'), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def color_at(self, u: float, v: float) -> Color:
        """Sample the nearest pixel at (u, v).

        Coordinates wrap around: only their fractional part is used. Row 0
        of the image corresponds to v = 0.
        """
        u = u - math.floor(u)
        v = v - math.floor(v)

        i = int(u * (self._width - 1))
        j = int(v * (self._height - 1))

        r, g, b = self._data[j, i]
        return Color(int(r), int(g), int(b))

    def __repr__(self) -> str:
        return f"ImageTexture({self.filename!r}, {self._width}x{self._height})"


def load_texture(filename: Union[str, Path]) -> Optional[ImageTexture]:
    """Load a texture, returning None instead of raising on failure."""
    try:
        return ImageTexture(filename)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load texture %s: %s", filename, exc)
        return None
