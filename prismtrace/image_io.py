"""
Image output for rendered pixel grids.

Plain PPM (``P3``) is written directly: a header with the magic token, the
dimensions and the maximum channel value, then one image row per line.
Every other extension is handed to Pillow.
"""

from __future__ import annotations
from pathlib import Path
from typing import IO, Sequence, Union

import numpy as np
from PIL import Image

from .color import Color, MAX_CHANNEL

PixelRows = Sequence[Sequence[Color]]


def pixels_to_array(pixels: PixelRows) -> np.ndarray:
    """Convert rows of Color into an (H, W, 3) uint8 array."""
    if not pixels:
        return np.zeros((0, 0, 3), dtype=np.uint8)
    return np.array([[c.to_tuple() for c in row] for row in pixels], dtype=np.uint8)


def array_to_pixels(image: np.ndarray) -> list[list[Color]]:
    """Convert an (H, W, 3) array back into rows of Color."""
    return [[Color(int(r), int(g), int(b)) for r, g, b in row] for row in image]


def _write_ppm_stream(pixels: PixelRows, stream: IO[str]) -> None:
    height = len(pixels)
    width = len(pixels[0]) if height else 0

    stream.write(f"P3\n{width} {height}\n{MAX_CHANNEL}\n")
    for row in pixels:
        if len(row) != width:
            raise ValueError("All pixel rows must have the same width")
        stream.write(" ".join(str(c) for c in row))
        stream.write("\n")


def write_ppm(pixels: PixelRows, target: Union[str, Path, IO[str]]) -> None:
    """Write pixels as a plain-text PPM image.

    Args:
        pixels: Rows of colors, top row first
        target: Output path or an open text stream
    """
    if hasattr(target, 'write'):
        _write_ppm_stream(pixels, target)
        return

    path = Path(target)
    with path.open('w') as f:
        _write_ppm_stream(pixels, f)


def save_image(pixels: PixelRows, filename: Union[str, Path]) -> None:
    """Save pixels to a file; the extension determines the format.

    Args:
        pixels: Rows of colors, top row first
        filename: Output filename (``.ppm`` is written as plain PPM)
    """
    path = Path(filename)
    if path.suffix.lower() == '.ppm':
        write_ppm(pixels, path)
        return

    image = Image.fromarray(pixels_to_array(pixels))
    image.save(path)
