"""
Reinhard tone mapping for rendered colors.

The operator compresses luminance with L_out = L / (1 + L) and scales all
three channels by the same factor L_out / L, which preserves hue. It is an
opt-in post-process: the renderer never applies it on its own.
"""

from __future__ import annotations

import numpy as np

from .color import Color, MAX_CHANNEL

# Rec. 709 luminance weights
LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def luminance(r: float, g: float, b: float) -> float:
    """Relative luminance of a linear float RGB triple."""
    return float(LUMINANCE_WEIGHTS[0] * r + LUMINANCE_WEIGHTS[1] * g + LUMINANCE_WEIGHTS[2] * b)


def reinhard_scale(lum: np.ndarray) -> np.ndarray:
    """Per-pixel channel scale L'/L. Black pixels get a scale of 0."""
    mapped = lum / (1.0 + lum)
    safe = np.where(lum > 0.0, lum, 1.0)
    return mapped / safe


def tone_map(color: Color) -> Color:
    """Apply Reinhard luminance compression to a single color.

    Channels never grow: the scale 1 / (1 + L) is at most 1.
    """
    r, g, b = color.to_floats()
    scale = float(reinhard_scale(np.array(luminance(r, g, b))))
    return Color(r * scale * MAX_CHANNEL, g * scale * MAX_CHANNEL, b * scale * MAX_CHANNEL)


def tone_map_image(image: np.ndarray) -> np.ndarray:
    """Tone map an (H, W, 3) uint8 image, returning a new uint8 image."""
    rgb = np.asarray(image, dtype=np.float64) / MAX_CHANNEL
    lum = rgb @ LUMINANCE_WEIGHTS
    scaled = rgb * reinhard_scale(lum)[..., np.newaxis]
    # Truncate like Color does
    return np.clip(scaled * MAX_CHANNEL, 0, MAX_CHANNEL).astype(np.uint8)
