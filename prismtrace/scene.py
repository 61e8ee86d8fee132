"""
Scene container: background color, lights and shapes.

The scene owns the flat shape list and lazily builds one BVH over it on
first request. The cached tree is never rebuilt, so shapes added after the
first ``get_bvh()`` call are invisible to BVH traversal.
"""

from __future__ import annotations
import logging
import random
import threading
from typing import Iterable, List, Optional, Sequence

from .bvh import BVHNode, build_bvh
from .color import Color
from .lights import Light
from .shapes import Shape

logger = logging.getLogger(__name__)


class Scene:
    """Shapes, lights and background of a render."""

    def __init__(
        self,
        background_color: Sequence[float] = (0.0, 0.0, 0.0),
        lights: Optional[Iterable[Light]] = None,
        shapes: Optional[Iterable[Shape]] = None,
        rng: Optional[random.Random] = None
    ):
        """Create a scene.

        Args:
            background_color: Float RGB in [0, 1] returned for missed rays
            lights: Light sources, in order
            shapes: Shapes, in order
            rng: Random generator used when building the BVH
        """
        self.background_color = tuple(float(c) for c in background_color)
        if len(self.background_color) != 3:
            raise ValueError("Background color must have 3 components")
        self.lights: List[Light] = list(lights) if lights is not None else []
        self.shapes: List[Shape] = list(shapes) if shapes is not None else []

        self._rng = rng
        self._bvh: Optional[BVHNode] = None
        self._bvh_built = False
        self._bvh_lock = threading.Lock()

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    def add_shape(self, shape: Shape) -> None:
        self.shapes.append(shape)

    @property
    def background(self) -> Color:
        return Color.from_floats(self.background_color)

    def get_bvh(self) -> Optional[BVHNode]:
        """Build the BVH on first call and return the cached tree afterwards.

        Returns None for a scene without shapes; the build is attempted
        again on the next call.
        """
        if self._bvh_built:
            return self._bvh
        with self._bvh_lock:
            if not self._bvh_built and self.shapes:
                logger.debug("Building BVH over %d shapes", len(self.shapes))
                self._bvh = build_bvh(self.shapes, self._rng)
                self._bvh_built = True
        return self._bvh

    def describe(self) -> str:
        lines = [f"Background Color: {list(self.background_color)}",
                 f"Light Sources ({len(self.lights)}):"]
        lines.extend(f"  {light!r}" for light in self.lights)
        lines.append(f"Shapes ({len(self.shapes)}):")
        lines.extend(f"  {shape!r}" for shape in self.shapes)
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.shapes)
