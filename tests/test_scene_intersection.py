"""Tests for scene storage and nearest-hit selection.

Tests cover:
- Adding primitives and lights, counts and clearing
- Capacity limits
- Nearest hit across and within primitive categories
- Tie-breaking between equal distances
- Python-side queries via query_nearest_hit
"""

import pytest
import taichi as ti


class TestSceneStorage:
    """Tests for the scene field storage."""

    def test_add_and_count(self):
        from whitted.scene.intersection import (
            add_light,
            add_plane,
            add_sphere,
            add_triangle,
            get_light_count,
            get_plane_count,
            get_sphere_count,
            get_triangle_count,
        )

        assert add_sphere((0.0, 0.0, -1.0), 0.5) == 0
        assert add_sphere((1.0, 0.0, -1.0), 0.5) == 1
        assert add_plane((0.0, 1.0, 0.0), -0.5) == 0
        assert add_triangle((0, 0, -1), (1, 0, -1), (0, 1, -1)) == 0
        assert add_light((0.0, 0.0, 1.0)) == 0

        assert get_sphere_count() == 2
        assert get_plane_count() == 1
        assert get_triangle_count() == 1
        assert get_light_count() == 1

    def test_clear_scene(self):
        from whitted.scene.intersection import (
            add_light,
            add_sphere,
            clear_scene,
            get_light_count,
            get_sphere_count,
        )

        add_sphere((0.0, 0.0, -1.0), 0.5)
        add_light((0.0, 0.0, 1.0))
        clear_scene()

        assert get_sphere_count() == 0
        assert get_light_count() == 0

    def test_light_capacity(self):
        from whitted.scene.intersection import MAX_LIGHTS, add_light

        for _ in range(MAX_LIGHTS):
            add_light((0.0, 1.0, 0.0))

        with pytest.raises(RuntimeError, match="lights"):
            add_light((0.0, 1.0, 0.0))

    def test_plane_capacity(self):
        from whitted.scene.intersection import MAX_PLANES, add_plane, get_plane_count

        for i in range(MAX_PLANES):
            add_plane((0.0, 1.0, 0.0), float(-i))

        with pytest.raises(RuntimeError, match="planes"):
            add_plane((0.0, 1.0, 0.0), 0.0)
        assert get_plane_count() == MAX_PLANES


class TestNearestHit:
    """Tests for nearest-hit selection."""

    def test_empty_scene_misses(self):
        from whitted.scene.intersection import query_nearest_hit

        assert query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_miss_returns_none(self):
        from whitted.scene.intersection import add_sphere, query_nearest_hit

        add_sphere((0.0, 0.0, -3.0), 1.0)

        assert query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)) is None

    def test_hit_record_fields(self):
        from whitted.scene.intersection import add_sphere, query_nearest_hit

        add_sphere((0.0, 0.0, -1.0), 0.5, color=(1.0, 0.0, 0.0), reflection=0.5)

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.t == pytest.approx(0.5, abs=1e-6)
        assert hit.point == pytest.approx((0.0, 0.0, -0.5), abs=1e-6)
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)
        assert hit.color == pytest.approx((1.0, 0.0, 0.0))
        assert hit.reflection == pytest.approx(0.5)

    def test_nearest_sphere_regardless_of_order(self):
        from whitted.scene.intersection import add_sphere, query_nearest_hit

        add_sphere((0.0, 0.0, -6.0), 1.0, color=(0.0, 0.0, 1.0))
        add_sphere((0.0, 0.0, -3.0), 1.0, color=(1.0, 0.0, 0.0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.t == pytest.approx(2.0, abs=1e-5)
        assert hit.color == pytest.approx((1.0, 0.0, 0.0))

    def test_nearest_across_categories(self):
        """A triangle in front of a sphere in front of a plane."""
        from whitted.scene.intersection import (
            add_plane,
            add_sphere,
            add_triangle,
            query_nearest_hit,
        )

        # Plane z = -10 facing the camera
        add_plane((0.0, 0.0, 1.0), -10.0, color=(0.0, 0.0, 1.0))
        add_sphere((0.0, 0.0, -3.0), 1.0, color=(1.0, 0.0, 0.0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.t == pytest.approx(2.0, abs=1e-5)
        assert hit.color == pytest.approx((1.0, 0.0, 0.0))

        add_triangle((-1, -1, -1), (1, -1, -1), (0, 1, -1), color=(0.0, 1.0, 0.0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.t == pytest.approx(1.0, abs=1e-5)
        assert hit.color == pytest.approx((0.0, 1.0, 0.0))
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_plane_only(self):
        from whitted.scene.intersection import add_plane, query_nearest_hit

        add_plane((0.0, 0.0, 1.0), -10.0, color=(0.0, 0.0, 1.0), reflection=0.25)

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.t == pytest.approx(10.0, abs=1e-5)
        assert hit.point == pytest.approx((0.0, 0.0, -10.0), abs=1e-5)
        assert hit.reflection == pytest.approx(0.25)

    def test_tie_between_categories_keeps_sphere(self):
        """On equal t the primitive tested first (spheres) wins."""
        from whitted.scene.intersection import add_plane, add_sphere, query_nearest_hit

        # Both hit at exactly t = 2
        add_plane((0.0, 0.0, 1.0), -2.0, color=(0.0, 0.0, 1.0))
        add_sphere((0.0, 0.0, -3.0), 1.0, color=(1.0, 0.0, 0.0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.t == pytest.approx(2.0, abs=1e-6)
        assert hit.color == pytest.approx((1.0, 0.0, 0.0))

    def test_tie_within_category_keeps_lower_index(self):
        from whitted.scene.intersection import add_sphere, query_nearest_hit

        add_sphere((0.0, 0.0, -3.0), 1.0, color=(1.0, 0.0, 0.0))
        add_sphere((0.0, 0.0, -3.0), 1.0, color=(0.0, 1.0, 0.0))

        hit = query_nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.color == pytest.approx((1.0, 0.0, 0.0))

    def test_intersect_scene_in_kernel(self):
        """intersect_scene can be called from user kernels."""
        from whitted.core.vector import vec3
        from whitted.scene.intersection import add_sphere, intersect_scene

        add_sphere((0.0, 0.0, -1.0), 0.5, color=(1.0, 0.0, 0.0))

        hits = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                toward = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
                away = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0))
                hits[0] = toward.hit
                hits[1] = away.hit

        test_kernel()
        assert hits[0] == 1
        assert hits[1] == 0
