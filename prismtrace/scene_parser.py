"""
Scene description parser.

Reads JSON (or YAML) render descriptions of the form:

```json
{
  "nbounces": 3,
  "rendermode": "phong",
  "camera": {
    "type": "pinhole", "width": 640, "height": 480,
    "position": [0, 0, 0], "lookAt": [0, 0, 1], "upVector": [0, 1, 0],
    "fov": 45, "exposure": 0.1
  },
  "scene": {
    "backgroundcolor": [0.25, 0.25, 0.25],
    "lightsources": [
      {"type": "pointlight", "position": [0, 1, 0], "intensity": [0.5, 0.5, 0.5]}
    ],
    "shapes": [
      {"type": "sphere", "center": [0, 0, 3], "radius": 1,
       "material": {"ks": 0.1, "kd": 0.9, "specularexponent": 20,
                    "diffusecolor": [0.8, 0.5, 0.5], "specularcolor": [1, 1, 1],
                    "isreflective": false, "reflectivity": 1.0,
                    "isrefractive": false, "refractiveindex": 1.0}}
    ]
  }
}
```

Missing required fields raise SceneParseError before anything is
rendered. Unknown shape and light types are skipped.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .camera import Camera
from .lights import Light, PointLight
from .materials import Material
from .renderer import Renderer, RenderMode, RenderSettings
from .scene import Scene
from .shapes import Cylinder, Shape, Sphere, Triangle
from .textures import load_texture
from .vec3 import Vec3

logger = logging.getLogger(__name__)

_MISSING = object()


class SceneParseError(ValueError):
    """Error during scene parsing."""
    pass


@dataclass
class SceneDescription:
    """Everything a render needs, as read from a scene document."""
    scene: Scene
    camera: Camera
    nbounces: int
    render_mode: RenderMode

    def to_settings(self, use_bvh: bool = False) -> RenderSettings:
        return RenderSettings(
            nbounces=self.nbounces,
            render_mode=self.render_mode,
            use_bvh=use_bvh
        )


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, texture_dir: Optional[Union[str, Path]] = None):
        """Create a parser.

        Args:
            texture_dir: Directory texture filenames are resolved against.
                Defaults to ``textures/`` next to the scene file, or to
                ``textures/`` in the working directory for in-memory documents.
        """
        self.texture_dir = Path(texture_dir) if texture_dir is not None else None

    def parse_file(self, filepath: Union[str, Path]) -> SceneDescription:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (JSON, or YAML by extension)

        Returns:
            The parsed scene description
        """
        path = Path(filepath)
        if not path.is_file():
            raise SceneParseError(f"Scene file not found: {filepath}")

        try:
            content = path.read_text()
        except OSError as exc:
            raise SceneParseError(f"Failed to open file: {filepath}: {exc}") from exc

        try:
            if path.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise SceneParseError(f"Parse error in {filepath}: {exc}") from exc

        if self.texture_dir is None:
            return SceneParser(path.parent / 'textures').parse_dict(data)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> SceneDescription:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            The parsed scene description
        """
        if not isinstance(data, dict):
            raise SceneParseError("Scene document must be a mapping")

        for key in ('rendermode', 'camera', 'scene'):
            if key not in data:
                raise SceneParseError(f"Scene document missing '{key}' field")

        try:
            nbounces = int(data.get('nbounces', 0))
        except (TypeError, ValueError):
            raise SceneParseError(f"nbounces must be an integer, got {data['nbounces']!r}") from None
        if nbounces < 0:
            raise SceneParseError(f"nbounces must be non-negative, got {nbounces}")

        try:
            render_mode = RenderMode.parse(data['rendermode'])
        except ValueError as exc:
            raise SceneParseError(str(exc)) from None

        camera = self._parse_camera(data['camera'])
        scene = self._parse_scene(data['scene'])

        return SceneDescription(scene=scene, camera=camera, nbounces=nbounces, render_mode=render_mode)

    def _require(self, data: Dict[str, Any], key: str, context: str) -> Any:
        value = data.get(key, _MISSING) if isinstance(data, dict) else _MISSING
        if value is _MISSING:
            raise SceneParseError(f"{context} missing '{key}' field")
        return value

    def _parse_vec3(self, data: Any, name: str) -> Vec3:
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"'{name}' must have 3 components, got {len(data)}")
            try:
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            except (TypeError, ValueError):
                raise SceneParseError(f"'{name}' must be numeric, got {data}") from None
        raise SceneParseError(f"Cannot parse '{name}' as a 3-vector: {data!r}")

    def _parse_float(self, data: Dict[str, Any], key: str, context: str) -> float:
        value = self._require(data, key, context)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise SceneParseError(f"{context} '{key}' must be a number, got {value!r}") from None

    def _parse_bool(self, data: Dict[str, Any], key: str, context: str, default: Any = _MISSING) -> bool:
        if default is _MISSING:
            value = self._require(data, key, context)
        else:
            value = data.get(key, default)
        if not isinstance(value, bool):
            raise SceneParseError(f"{context} '{key}' must be true or false, got {value!r}")
        return value

    def _parse_list(self, data: Dict[str, Any], key: str, context: str) -> List[Any]:
        # An empty YAML key or a JSON null means no entries
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise SceneParseError(f"{context} '{key}' must be a list, got {value!r}")
        return value

    def _parse_camera(self, camera_data: Dict[str, Any]) -> Camera:
        ctx = "Camera"
        camera_type = camera_data.get('type', 'pinhole') if isinstance(camera_data, dict) else None
        if camera_type != 'pinhole':
            raise SceneParseError(f"Unsupported camera type: {camera_type}")

        try:
            return Camera(
                width=int(self._require(camera_data, 'width', ctx)),
                height=int(self._require(camera_data, 'height', ctx)),
                position=self._parse_vec3(self._require(camera_data, 'position', ctx), 'position'),
                look_at=self._parse_vec3(self._require(camera_data, 'lookAt', ctx), 'lookAt'),
                up_vector=self._parse_vec3(self._require(camera_data, 'upVector', ctx), 'upVector'),
                fov=self._parse_float(camera_data, 'fov', ctx),
                exposure=float(camera_data.get('exposure', 0.0))
            )
        except SceneParseError:
            raise
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid camera: {exc}") from exc

    def _parse_scene(self, scene_data: Dict[str, Any]) -> Scene:
        background = self._parse_vec3(
            self._require(scene_data, 'backgroundcolor', "Scene"), 'backgroundcolor'
        )
        return Scene(
            background_color=background.to_tuple(),
            lights=self._parse_lights(self._parse_list(scene_data, 'lightsources', "Scene")),
            shapes=self._parse_shapes(self._parse_list(scene_data, 'shapes', "Scene"))
        )

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        ctx = "Material"
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Material must be a mapping, got {mat_data!r}")

        texture = None
        texture_filename = str(mat_data.get('textureFilename', '') or '')
        if self._parse_bool(mat_data, 'hasTexture', ctx, default=False) and texture_filename:
            texture = load_texture(self._texture_path(texture_filename))

        try:
            return Material(
                ks=self._parse_float(mat_data, 'ks', ctx),
                kd=self._parse_float(mat_data, 'kd', ctx),
                specular_exponent=self._parse_float(mat_data, 'specularexponent', ctx),
                diffuse_color=self._parse_vec3(
                    self._require(mat_data, 'diffusecolor', ctx), 'diffusecolor').to_tuple(),
                specular_color=self._parse_vec3(
                    self._require(mat_data, 'specularcolor', ctx), 'specularcolor').to_tuple(),
                is_reflective=self._parse_bool(mat_data, 'isreflective', ctx),
                reflectivity=self._parse_float(mat_data, 'reflectivity', ctx),
                is_refractive=self._parse_bool(mat_data, 'isrefractive', ctx),
                refractive_index=self._parse_float(mat_data, 'refractiveindex', ctx),
                texture=texture,
                texture_filename=texture_filename
            )
        except SceneParseError:
            raise
        except ValueError as exc:
            raise SceneParseError(f"Invalid material: {exc}") from exc

    def _texture_path(self, filename: str) -> Path:
        base = self.texture_dir if self.texture_dir is not None else Path('textures')
        return base / filename

    def _parse_shapes(self, shapes_data: List[Dict[str, Any]]) -> List[Shape]:
        shapes: List[Shape] = []
        for shape_data in shapes_data:
            shape_type = str(self._require(shape_data, 'type', "Shape")).lower()
            ctx = f"Shape '{shape_type}'"

            material = None
            if 'material' in shape_data:
                material = self._parse_material(shape_data['material'])

            try:
                if shape_type == 'sphere':
                    shapes.append(Sphere(
                        self._parse_vec3(self._require(shape_data, 'center', ctx), 'center'),
                        self._parse_float(shape_data, 'radius', ctx),
                        material
                    ))
                elif shape_type == 'cylinder':
                    shapes.append(Cylinder(
                        self._parse_vec3(self._require(shape_data, 'center', ctx), 'center'),
                        self._parse_vec3(self._require(shape_data, 'axis', ctx), 'axis'),
                        self._parse_float(shape_data, 'radius', ctx),
                        self._parse_float(shape_data, 'height', ctx),
                        material,
                        finite=self._parse_bool(shape_data, 'finite', ctx, default=True)
                    ))
                elif shape_type == 'triangle':
                    shapes.append(Triangle(
                        self._parse_vec3(self._require(shape_data, 'v0', ctx), 'v0'),
                        self._parse_vec3(self._require(shape_data, 'v1', ctx), 'v1'),
                        self._parse_vec3(self._require(shape_data, 'v2', ctx), 'v2'),
                        material
                    ))
                else:
                    logger.debug("Skipping unknown shape type: %s", shape_type)
            except SceneParseError:
                raise
            except ValueError as exc:
                raise SceneParseError(f"Invalid {shape_type}: {exc}") from exc
        return shapes

    def _parse_lights(self, lights_data: List[Dict[str, Any]]) -> List[Light]:
        lights: List[Light] = []
        for light_data in lights_data:
            light_type = str(self._require(light_data, 'type', "Light")).lower()
            ctx = f"Light '{light_type}'"

            if light_type == 'pointlight':
                intensity = self._parse_vec3(self._require(light_data, 'intensity', ctx), 'intensity')
                try:
                    lights.append(PointLight(
                        self._parse_vec3(self._require(light_data, 'position', ctx), 'position'),
                        intensity
                    ))
                except ValueError as exc:
                    raise SceneParseError(f"Invalid {light_type}: {exc}") from exc
            else:
                logger.debug("Skipping unknown light type: %s", light_type)
        return lights


def load_scene(filepath: Union[str, Path], texture_dir: Optional[Union[str, Path]] = None) -> SceneDescription:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file
        texture_dir: Directory for texture files (``textures/`` beside the scene by default)

    Returns:
        The parsed scene description
    """
    return SceneParser(texture_dir).parse_file(filepath)


def parse_scene(data: Dict[str, Any], texture_dir: Optional[Union[str, Path]] = None) -> SceneDescription:
    """Convenience function to parse a scene from a dictionary."""
    return SceneParser(texture_dir).parse_dict(data)


def load_renderer(filepath: Union[str, Path], use_bvh: bool = False) -> Renderer:
    """Load a scene file and build a renderer ready for render_scene().

    Args:
        filepath: Path to the scene file
        use_bvh: Resolve intersections through the scene BVH

    Returns:
        A configured Renderer
    """
    description = load_scene(filepath)
    return Renderer(description.camera, description.scene, description.to_settings(use_bvh))
