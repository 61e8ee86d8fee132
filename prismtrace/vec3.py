"""
Three-component vector type.

Vec3 is the one geometric value type of the tracer. It stands for:
- positions (``Point3`` is the same class)
- ray directions and surface normals
- float RGB triples such as light intensities
"""

from __future__ import annotations
from typing import Sequence, Union
import numpy as np

Operand = Union['Vec3', float]


def _raw(value: Operand):
    """Unwrap a Vec3 to its array; scalars pass through for broadcasting."""
    return value._data if isinstance(value, Vec3) else value


class Vec3:
    """An immutable 3D vector backed by a float64 numpy array.

    Arithmetic works component-wise against another Vec3 or broadcasts a
    scalar. Every operation returns a new vector.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array((x, y, z), dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Union[np.ndarray, Sequence[float]]) -> Vec3:
        """Wrap a numpy array or any 3-element sequence without copying floats twice."""
        vec = cls.__new__(cls)
        vec._data = np.asarray(arr, dtype=np.float64).reshape(3)
        return vec

    @property
    def x(self) -> float:
        return self[0]

    @property
    def y(self) -> float:
        return self[1]

    @property
    def z(self) -> float:
        return self[2]

    def __getitem__(self, index: int) -> float:
        if not -3 <= index < 3:
            raise IndexError(f"Vec3 index out of range: {index}")
        return float(self._data[index])

    def __iter__(self):
        return (float(c) for c in self._data)

    def __repr__(self) -> str:
        return "Vec3({:.4f}, {:.4f}, {:.4f})".format(*self)

    def __str__(self) -> str:
        return "[{:g}, {:g}, {:g}]".format(*self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Vec3):
            return bool(np.allclose(self._data, other._data))
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.to_tuple())

    # Arithmetic

    def __neg__(self) -> Vec3:
        return Vec3.from_array(np.negative(self._data))

    def __add__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data + _raw(other))

    def __radd__(self, other: float) -> Vec3:
        return self + other

    def __sub__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data - _raw(other))

    def __rsub__(self, other: float) -> Vec3:
        return Vec3.from_array(_raw(other) - self._data)

    def __mul__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data * _raw(other))

    def __rmul__(self, other: float) -> Vec3:
        return self * other

    def __truediv__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data / _raw(other))

    # Geometry

    def dot(self, other: Vec3) -> float:
        return float(self._data @ other._data)

    def cross(self, other: Vec3) -> Vec3:
        return Vec3.from_array(np.cross(self._data, other._data))

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        """Euclidean norm."""
        return float(np.sqrt(self.length_squared()))

    def normalize(self) -> Vec3:
        """Unit vector with the same direction; the zero vector maps to itself."""
        norm = self.length()
        if norm == 0:
            return Vec3()
        return self / norm

    def reflect(self, normal: Vec3) -> Vec3:
        """Mirror about a unit normal: d - 2(d.n)n."""
        return self - normal * (2.0 * self.dot(normal))

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        return bool(np.all(np.abs(self._data) < epsilon))

    @staticmethod
    def component_min(a: Vec3, b: Vec3) -> Vec3:
        return Vec3.from_array(np.minimum(a._data, b._data))

    @staticmethod
    def component_max(a: Vec3, b: Vec3) -> Vec3:
        return Vec3.from_array(np.maximum(a._data, b._data))

    # Conversion

    def to_array(self) -> np.ndarray:
        """Copy of the components as a numpy array."""
        return self._data.copy()

    def to_tuple(self) -> tuple[float, float, float]:
        return tuple(self)


Point3 = Vec3
