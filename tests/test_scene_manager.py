"""Tests for SceneManager and scene construction checks.

Tests cover:
- Adding primitives and lights through the manager
- Rejection of degenerate geometry, and opting out of checks
- Export to config/dict and loading back
- JSON files
"""

import json

import pytest


class TestSceneManagerBasics:
    """Tests for basic SceneManager operations."""

    def test_new_manager_clears_scene(self):
        from whitted.scene.intersection import add_sphere, get_sphere_count
        from whitted.scene.manager import SceneManager

        add_sphere((0.0, 0.0, -1.0), 0.5)
        scene = SceneManager()

        assert scene.get_sphere_count() == 0
        assert get_sphere_count() == 0

    def test_add_primitives(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        sphere_idx = scene.add_sphere((0, 0, -1), 0.5, color=(1, 0, 0), reflection=0.5)
        plane_idx = scene.add_plane((0, 1, 0), -0.5)
        triangle_idx = scene.add_triangle((0, 0, -1), (1, 0, -1), (0, 1, -1))
        light_idx = scene.add_light((0.8, 0.8, 0.2))

        assert (sphere_idx, plane_idx, triangle_idx, light_idx) == (0, 0, 0, 0)
        assert scene.get_primitive_count() == 3
        assert scene.get_light_count() == 1

        sphere = scene.spheres[0]
        assert sphere.center == (0.0, 0.0, -1.0)
        assert sphere.radius == 0.5
        assert sphere.color == (1.0, 0.0, 0.0)
        assert sphere.reflection == 0.5
        # Defaults
        assert scene.planes[0].color == (1.0, 1.0, 1.0)
        assert scene.planes[0].reflection == 0.0

    def test_added_sphere_is_hit(self):
        from whitted.scene.intersection import query_nearest_hit
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, -1), 0.5, color=(0, 1, 0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.color == pytest.approx((0.0, 1.0, 0.0))

    def test_clear(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, -1), 0.5)
        scene.add_light((0, 1, 0))
        scene.clear()

        assert scene.get_primitive_count() == 0
        assert scene.get_light_count() == 0
        assert scene.spheres == []
        assert scene.lights == []

    def test_capacity_limits(self):
        from whitted.scene.intersection import MAX_LIGHTS, MAX_SPHERES
        from whitted.scene.manager import SceneManager

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_lights() == MAX_LIGHTS

        scene = SceneManager()
        for _ in range(MAX_LIGHTS):
            scene.add_light((0, 1, 0))
        with pytest.raises(RuntimeError):
            scene.add_light((0, 1, 0))
        assert len(scene.lights) == MAX_LIGHTS


class TestValidation:
    """Tests for construction-time checks."""

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("nan"), float("inf")])
    def test_bad_radius(self, radius):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="radius"):
            scene.add_sphere((0, 0, -1), radius)
        assert scene.get_sphere_count() == 0

    def test_bad_vectors(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="3 components"):
            scene.add_sphere((0, 0), 1.0)
        with pytest.raises(ValueError, match="finite"):
            scene.add_sphere((0, float("nan"), 0), 1.0)
        with pytest.raises(ValueError, match="zero vector"):
            scene.add_plane((0, 0, 0), 1.0)
        with pytest.raises(ValueError, match="zero vector"):
            scene.add_light((0, 0, 0))

    def test_degenerate_triangle(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Degenerate"):
            scene.add_triangle((0, 0, 0), (1, 1, 1), (2, 2, 2))
        with pytest.raises(ValueError, match="Degenerate"):
            scene.add_triangle((1, 2, 3), (1, 2, 3), (1, 2, 3))
        assert scene.get_triangle_count() == 0

    def test_validation_can_be_disabled(self):
        """With validate=False degenerate geometry reaches the tracer."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager(validate=False)
        scene.add_sphere((0, 0, -1), 0.0)
        scene.add_triangle((0, 0, 0), (1, 1, 1), (2, 2, 2))

        assert scene.get_sphere_count() == 1
        assert scene.get_triangle_count() == 1

    def test_check_triangle_returns_floats(self):
        from whitted.scene.validation import check_triangle

        a, b, c = check_triangle((0, 0, -1), (1, 0, -1), (0, 1, -1))

        assert a == (0.0, 0.0, -1.0)
        assert isinstance(b[0], float)
        assert c == (0.0, 1.0, -1.0)


class TestSerialization:
    """Tests for config, dict and JSON export and import."""

    def _build(self, scene):
        scene.add_sphere((-1, -0.25, -1), 0.25, color=(1, 0, 0), reflection=0.5)
        scene.add_plane((0, 1, 0), -0.5, color=(0.1, 0.1, 0.1), reflection=0.1)
        scene.add_triangle((0.25, 0.5, -1), (0, 0.5, -1), (0, 0, -1), color=(1, 0, 1))
        scene.add_light((-0.8, 0.8, 0.2))

    def test_to_dict(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        self._build(scene)

        data = scene.to_dict()

        assert set(data) == {"spheres", "planes", "triangles", "lights"}
        assert data["spheres"] == [
            {"center": [-1.0, -0.25, -1.0], "radius": 0.25, "color": [1.0, 0.0, 0.0], "reflection": 0.5}
        ]
        assert data["planes"][0]["d"] == -0.5
        assert data["triangles"][0]["v1"] == [0.0, 0.5, -1.0]
        assert data["lights"] == [[-0.8, 0.8, 0.2]]

    def test_from_dict_restores_scene(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        self._build(scene)
        data = scene.to_dict()

        other = SceneManager()
        other.from_dict(data)

        assert other.to_dict() == data
        assert other.get_primitive_count() == 3
        assert other.get_light_count() == 1

    def test_from_dict_defaults(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.from_dict({"spheres": [{"center": [0, 0, -1], "radius": 0.5}]})

        assert scene.spheres[0].color == (1.0, 1.0, 1.0)
        assert scene.spheres[0].reflection == 0.0
        assert scene.get_plane_count() == 0

    def test_from_dict_missing_fields(self):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="radius"):
            scene.from_dict({"spheres": [{"center": [0, 0, -1]}]})
        with pytest.raises(ValueError, match="'d'"):
            scene.from_dict({"planes": [{"normal": [0, 1, 0]}]})
        with pytest.raises(ValueError, match="v2"):
            scene.from_dict({"triangles": [{"v0": [0, 0, 0], "v1": [1, 0, 0]}]})

    def test_json_file(self, tmp_path):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        self._build(scene)
        path = tmp_path / "scene.json"

        scene.save_json(path)
        assert json.loads(path.read_text()) == scene.to_dict()

        other = SceneManager()
        other.load_json(path)
        assert other.to_dict() == scene.to_dict()

    def test_load_invalid_json(self, tmp_path):
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        path = tmp_path / "bad.json"

        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid"):
            scene.load_json(path)

        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="JSON object"):
            scene.load_json(path)

    def test_invalid_entry_keeps_current_scene(self, tmp_path):
        """A bad entry after good ones leaves the previous scene in place."""
        from whitted.scene.intersection import get_sphere_count, query_nearest_hit
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        self._build(scene)
        before = scene.to_dict()

        path = tmp_path / "half.json"
        path.write_text(
            json.dumps(
                {
                    "spheres": [
                        {"center": [0, 0, -3], "radius": 1.0},
                        {"center": [0, 0, -5], "radius": -1.0},
                    ]
                }
            )
        )
        with pytest.raises(ValueError, match="radius"):
            scene.load_json(path)

        assert scene.to_dict() == before
        assert get_sphere_count() == 1
        assert scene.get_light_count() == 1
        # Field storage still holds the previous sphere, not the rejected file's
        assert query_nearest_hit((0.5, 0.0, 0.0), (0.0, 0.0, -1.0)) is None
        assert query_nearest_hit((-1.0, -0.25, 0.0), (0.0, 0.0, -1.0)) is not None

    def test_over_capacity_keeps_current_scene(self):
        from whitted.scene.intersection import MAX_LIGHTS
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        self._build(scene)
        before = scene.to_dict()

        with pytest.raises(RuntimeError, match="lights"):
            scene.from_dict({"lights": [[0, 1, 0]] * (MAX_LIGHTS + 1)})

        assert scene.to_dict() == before

    def test_load_missing_file(self, tmp_path):
        from whitted.scene.manager import SceneManager

        with pytest.raises(OSError):
            SceneManager().load_json(tmp_path / "missing.json")
