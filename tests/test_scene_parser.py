"""Tests for scene description parsing."""

import pytest
import copy
import json
import logging
from PIL import Image
import yaml

from prismtrace.color import Color
from prismtrace.vec3 import Vec3, Point3
from prismtrace.lights import PointLight
from prismtrace.renderer import Renderer, RenderMode
from prismtrace.shapes import Sphere, Cylinder, Triangle
from prismtrace.scene_parser import (
    SceneParser, SceneDescription, SceneParseError,
    load_scene, parse_scene, load_renderer
)


MATERIAL = {
    "ks": 0.1, "kd": 0.9, "specularexponent": 20,
    "diffusecolor": [0.8, 0.5, 0.5], "specularcolor": [1, 1, 1],
    "isreflective": False, "reflectivity": 1.0,
    "isrefractive": False, "refractiveindex": 1.0
}

SCENE = {
    "nbounces": 3,
    "rendermode": "phong",
    "camera": {
        "type": "pinhole", "width": 64, "height": 48,
        "position": [0, 0, 0], "lookAt": [0, 0, 1], "upVector": [0, 1, 0],
        "fov": 45, "exposure": 0.1
    },
    "scene": {
        "backgroundcolor": [0.25, 0.25, 0.25],
        "lightsources": [
            {"type": "pointlight", "position": [0, 1, 0], "intensity": [0.5, 0.5, 0.5]}
        ],
        "shapes": [
            {"type": "sphere", "center": [0, 0, 3], "radius": 1, "material": MATERIAL},
            {"type": "cylinder", "center": [1, 0, 5], "axis": [0, 1, 0],
             "radius": 0.5, "height": 1.0, "material": MATERIAL},
            {"type": "triangle", "v0": [0, 0, 6], "v1": [1, 0, 6], "v2": [0, 1, 6],
             "material": MATERIAL}
        ]
    }
}


@pytest.fixture
def document():
    return copy.deepcopy(SCENE)


class TestParseDict:
    """Test parsing from dictionaries."""

    def test_full_scene(self, document):
        desc = parse_scene(document)

        assert isinstance(desc, SceneDescription)
        assert desc.nbounces == 3
        assert desc.render_mode is RenderMode.PHONG
        assert desc.camera.width == 64
        assert desc.camera.height == 48
        assert desc.camera.fov == 45.0
        assert desc.camera.exposure == 0.1
        assert desc.scene.background_color == (0.25, 0.25, 0.25)

    def test_shapes_in_order(self, document):
        shapes = parse_scene(document).scene.shapes
        assert [type(s) for s in shapes] == [Sphere, Cylinder, Triangle]
        assert shapes[0].center == Point3(0, 0, 3)
        assert shapes[0].radius == 1.0
        assert shapes[1].finite
        assert shapes[2].v2 == Point3(0, 1, 6)

    def test_material(self, document):
        mat = parse_scene(document).scene.shapes[0].material
        assert mat.ks == 0.1
        assert mat.kd == 0.9
        assert mat.specular_exponent == 20.0
        assert mat.diffuse_color == (0.8, 0.5, 0.5)
        assert mat.reflectivity == 1.0
        assert not mat.has_texture

    def test_lights(self, document):
        lights = parse_scene(document).scene.lights
        assert len(lights) == 1
        assert isinstance(lights[0], PointLight)
        assert lights[0].intensity == Vec3(0.5, 0.5, 0.5)

    def test_nbounces_defaults_to_zero(self, document):
        del document["nbounces"]
        assert parse_scene(document).nbounces == 0

    def test_binary_mode(self, document):
        document["rendermode"] = "binary"
        assert parse_scene(document).render_mode is RenderMode.BINARY

    def test_infinite_cylinder(self, document):
        document["scene"]["shapes"][1]["finite"] = False
        assert not parse_scene(document).scene.shapes[1].finite

    def test_shape_without_material(self, document):
        del document["scene"]["shapes"][0]["material"]
        mat = parse_scene(document).scene.shapes[0].material
        assert mat.kd == 0.0
        assert mat.refractive_index == 1.0

    def test_optional_lists(self, document):
        del document["scene"]["lightsources"]
        del document["scene"]["shapes"]
        desc = parse_scene(document)
        assert desc.scene.lights == []
        assert desc.scene.shapes == []

    def test_unknown_types_skipped(self, document, caplog):
        document["scene"]["shapes"].append({"type": "torus", "radius": 1})
        document["scene"]["lightsources"].append({"type": "arealight"})
        with caplog.at_level(logging.DEBUG, logger="prismtrace.scene_parser"):
            desc = parse_scene(document)
        assert len(desc.scene.shapes) == 3
        assert len(desc.scene.lights) == 1
        assert "torus" in caplog.text

    def test_to_settings(self, document):
        settings = parse_scene(document).to_settings(use_bvh=True)
        assert settings.nbounces == 3
        assert settings.use_bvh


class TestParseErrors:
    """Test that invalid documents fail before rendering."""

    @pytest.mark.parametrize("key", ["rendermode", "camera", "scene"])
    def test_missing_top_level(self, document, key):
        del document[key]
        with pytest.raises(SceneParseError, match=key):
            parse_scene(document)

    def test_missing_camera_field(self, document):
        del document["camera"]["lookAt"]
        with pytest.raises(SceneParseError, match="lookAt"):
            parse_scene(document)

    def test_missing_background(self, document):
        del document["scene"]["backgroundcolor"]
        with pytest.raises(SceneParseError, match="backgroundcolor"):
            parse_scene(document)

    def test_missing_material_field(self, document):
        del document["scene"]["shapes"][0]["material"]["kd"]
        with pytest.raises(SceneParseError, match="kd"):
            parse_scene(document)

    def test_missing_shape_field(self, document):
        del document["scene"]["shapes"][0]["radius"]
        with pytest.raises(SceneParseError, match="radius"):
            parse_scene(document)

    def test_unknown_render_mode(self, document):
        document["rendermode"] = "raymarch"
        with pytest.raises(SceneParseError, match="raymarch"):
            parse_scene(document)

    def test_negative_bounces(self, document):
        document["nbounces"] = -2
        with pytest.raises(SceneParseError):
            parse_scene(document)

    def test_bad_vector(self, document):
        document["camera"]["position"] = [0, 0]
        with pytest.raises(SceneParseError, match="position"):
            parse_scene(document)

    def test_invalid_shape_values(self, document):
        document["scene"]["shapes"][0]["radius"] = -1
        with pytest.raises(SceneParseError):
            parse_scene(document)

    def test_unsupported_camera(self, document):
        document["camera"]["type"] = "orthographic"
        with pytest.raises(SceneParseError):
            parse_scene(document)

    def test_not_a_mapping(self):
        with pytest.raises(SceneParseError):
            parse_scene([1, 2, 3])

    @pytest.mark.parametrize("key", ["isreflective", "isrefractive"])
    def test_string_flag_rejected(self, document, key):
        document["scene"]["shapes"][0]["material"][key] = "false"
        with pytest.raises(SceneParseError, match=key):
            parse_scene(document)

    def test_numeric_flag_rejected(self, document):
        document["scene"]["shapes"][0]["material"]["isreflective"] = 0
        with pytest.raises(SceneParseError, match="isreflective"):
            parse_scene(document)

    def test_string_has_texture_rejected(self, document):
        material = document["scene"]["shapes"][0]["material"]
        material["hasTexture"] = "no"
        material["textureFilename"] = "wood.png"
        with pytest.raises(SceneParseError, match="hasTexture"):
            parse_scene(document)

    def test_string_finite_rejected(self, document):
        document["scene"]["shapes"][1]["finite"] = "false"
        with pytest.raises(SceneParseError, match="finite"):
            parse_scene(document)

    def test_shapes_not_a_list(self, document):
        document["scene"]["shapes"] = {"type": "sphere"}
        with pytest.raises(SceneParseError, match="shapes"):
            parse_scene(document)

    def test_null_lists_mean_empty(self, document):
        document["scene"]["shapes"] = None
        document["scene"]["lightsources"] = None
        desc = parse_scene(document)
        assert desc.scene.shapes == []
        assert desc.scene.lights == []

    def test_is_value_error(self):
        assert issubclass(SceneParseError, ValueError)


class TestParseFile:
    """Test loading scene files."""

    def test_json_file(self, tmp_path, document):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(document))
        desc = load_scene(path)
        assert len(desc.scene.shapes) == 3

    def test_yaml_file(self, tmp_path, document):
        path = tmp_path / "scene.yaml"
        path.write_text(yaml.safe_dump(document))
        desc = load_scene(path)
        assert desc.nbounces == 3
        assert len(desc.scene.lights) == 1

    def test_yaml_empty_lists(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text(
            "rendermode: phong\n"
            "camera:\n"
            "  width: 4\n"
            "  height: 2\n"
            "  position: [0, 0, 0]\n"
            "  lookAt: [0, 0, -1]\n"
            "  upVector: [0, 1, 0]\n"
            "  fov: 45\n"
            "scene:\n"
            "  backgroundcolor: [0.1, 0.2, 0.3]\n"
            "  lightsources:\n"
            "  shapes:\n"
        )
        desc = load_scene(path)
        assert desc.scene.lights == []
        assert desc.scene.shapes == []

    def test_yaml_boolean_words(self, tmp_path, document):
        text = yaml.safe_dump(document).replace("isreflective: false", "isreflective: yes")
        path = tmp_path / "scene.yaml"
        path.write_text(text)
        assert load_scene(path).scene.shapes[0].material.is_reflective

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError, match="not found"):
            load_scene(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(SceneParseError, match="Parse error"):
            load_scene(path)

    def test_texture_resolved_beside_scene(self, tmp_path, document):
        (tmp_path / "textures").mkdir()
        Image.new('RGB', (2, 2), color=(12, 34, 56)).save(tmp_path / "textures" / "wood.png")

        material = document["scene"]["shapes"][0]["material"]
        material["hasTexture"] = True
        material["textureFilename"] = "wood.png"
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(document))

        mat = load_scene(path).scene.shapes[0].material
        assert mat.has_texture
        assert mat.texture_filename == "wood.png"
        assert mat.base_color(0.1, 0.1) == Color(12, 34, 56)

    def test_explicit_texture_dir(self, tmp_path, document):
        Image.new('RGB', (1, 1), color=(1, 2, 3)).save(tmp_path / "tex.png")
        material = document["scene"]["shapes"][0]["material"]
        material["hasTexture"] = True
        material["textureFilename"] = "tex.png"

        mat = SceneParser(tmp_path).parse_dict(document).scene.shapes[0].material
        assert mat.base_color() == Color(1, 2, 3)

    def test_missing_texture_is_not_fatal(self, tmp_path, document, caplog):
        material = document["scene"]["shapes"][0]["material"]
        material["hasTexture"] = True
        material["textureFilename"] = "absent.ppm"
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(document))

        with caplog.at_level(logging.WARNING):
            mat = load_scene(path).scene.shapes[0].material
        assert not mat.has_texture
        assert mat.texture_filename == "absent.ppm"
        assert "absent.ppm" in caplog.text


class TestLoadRenderer:
    """Test the one-call renderer loader."""

    def test_builds_renderer(self, tmp_path, document):
        document["camera"]["width"] = 4
        document["camera"]["height"] = 2
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(document))

        renderer = load_renderer(path, use_bvh=True)
        assert isinstance(renderer, Renderer)
        assert renderer.nbounces == 3
        assert renderer.settings.use_bvh

        pixels = renderer.render_scene()
        assert len(pixels) == 2
        assert len(pixels[0]) == 4
