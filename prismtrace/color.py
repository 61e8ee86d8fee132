"""
8-bit RGB color with saturating arithmetic.

Every operation clamps its result into [0, 255] and truncates toward
zero, so a chain like ``base * 0.5 + diffuse`` never leaves the displayable
range.
"""

from __future__ import annotations
from typing import Sequence, Union

from .vec3 import Vec3

MAX_CHANNEL = 255


def _saturate(value: float) -> int:
    if value != value:  # NaN
        return 0
    return int(min(max(value, 0.0), float(MAX_CHANNEL)))


class Color:
    """An immutable RGB triple of 8-bit channel values."""

    __slots__ = ('_r', '_g', '_b')

    def __init__(self, r: int = 0, g: int = 0, b: int = 0):
        self._r = _saturate(r)
        self._g = _saturate(g)
        self._b = _saturate(b)

    @property
    def r(self) -> int:
        return self._r

    @property
    def g(self) -> int:
        return self._g

    @property
    def b(self) -> int:
        return self._b

    @classmethod
    def from_floats(cls, rgb: Union[Sequence[float], Vec3]) -> Color:
        """Build a color from a normalized float triple (1.0 maps to 255)."""
        r, g, b = rgb
        return cls(r * MAX_CHANNEL, g * MAX_CHANNEL, b * MAX_CHANNEL)

    def to_floats(self) -> tuple[float, float, float]:
        """Return the channels as floats in [0, 1]."""
        return (self._r / MAX_CHANNEL, self._g / MAX_CHANNEL, self._b / MAX_CHANNEL)

    def to_tuple(self) -> tuple[int, int, int]:
        return (self._r, self._g, self._b)

    def __iter__(self):
        return iter((self._r, self._g, self._b))

    def __add__(self, other: Color) -> Color:
        if not isinstance(other, Color):
            return NotImplemented
        return Color(self._r + other._r, self._g + other._g, self._b + other._b)

    def __mul__(self, other: Union[Color, float]) -> Color:
        if isinstance(other, Color):
            # Component-wise modulation: 255 * 255 / 255 stays 255
            return Color(
                self._r * other._r / MAX_CHANNEL,
                self._g * other._g / MAX_CHANNEL,
                self._b * other._b / MAX_CHANNEL,
            )
        return Color(self._r * other, self._g * other, self._b * other)

    def __rmul__(self, other: float) -> Color:
        return self * other

    def clamp(self) -> Color:
        """Return a clamped copy. Channels are always in range already."""
        return Color(self._r, self._g, self._b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.to_tuple() == other.to_tuple()

    def __hash__(self) -> int:
        return hash(self.to_tuple())

    def __repr__(self) -> str:
        return f"Color({self._r}, {self._g}, {self._b})"

    def __str__(self) -> str:
        return f"{self._r} {self._g} {self._b}"


BLACK = Color(0, 0, 0)
HIGHLIGHT = Color(0, 255, 0)
