"""Unit tests for vector algebra and rays.

Tests cover:
- Componentwise add, sub and scale
- Dot and cross products
- Length and normalization, including the zero vector
- Mirror reflection about a normal
"""

import math

import pytest
import taichi as ti


class TestRay:
    """Tests for the Ray dataclass."""

    def test_make_ray_and_ray_at(self):
        """Test make_ray and evaluating a point along the ray."""
        from whitted.core.vector import make_ray, ray_at, vec3

        point = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -1.0))
            point[None] = ray_at(ray, 2.5)

        test_kernel()
        p = point[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] - 0.5) < 1e-6


class TestArithmetic:
    """Tests for componentwise operations and products."""

    def test_add_sub_scale(self):
        from whitted.core.vector import add, scale, sub, vec3

        sum_result = ti.field(dtype=ti.math.vec3, shape=())
        diff_result = ti.field(dtype=ti.math.vec3, shape=())
        scaled_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 2.0, 3.0)
            b = vec3(0.5, -1.0, 4.0)
            sum_result[None] = add(a, b)
            diff_result[None] = sub(a, b)
            scaled_result[None] = scale(a, -2.0)

        test_kernel()
        assert sum_result[None].to_numpy().tolist() == pytest.approx([1.5, 1.0, 7.0])
        assert diff_result[None].to_numpy().tolist() == pytest.approx([0.5, 3.0, -1.0])
        assert scaled_result[None].to_numpy().tolist() == pytest.approx([-2.0, -4.0, -6.0])

    def test_dot_product(self):
        from whitted.core.vector import dot, vec3

        result = ti.field(dtype=ti.f32, shape=())
        orthogonal = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            orthogonal[None] = dot(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 12.0) < 1e-5
        assert orthogonal[None] == 0.0

    def test_cross_product_right_handed(self):
        """x cross y is z, and the result is orthogonal to both inputs."""
        from whitted.core.vector import cross, dot, vec3

        xy = ti.field(dtype=ti.math.vec3, shape=())
        general = ti.field(dtype=ti.math.vec3, shape=())
        dots = ti.Vector.field(2, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            xy[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            a = vec3(1.0, 2.0, 3.0)
            b = vec3(-2.0, 0.5, 1.0)
            c = cross(a, b)
            general[None] = c
            dots[None] = ti.Vector([dot(c, a), dot(c, b)])

        test_kernel()
        assert xy[None].to_numpy().tolist() == pytest.approx([0.0, 0.0, 1.0])
        # (2*1 - 3*0.5, 3*-2 - 1*1, 1*0.5 - 2*-2)
        assert general[None].to_numpy().tolist() == pytest.approx([0.5, -7.0, 4.5])
        assert abs(dots[None][0]) < 1e-5
        assert abs(dots[None][1]) < 1e-5


class TestNormalize:
    """Tests for length and normalize."""

    def test_length(self):
        from whitted.core.vector import length, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length(vec3(3.0, 4.0, 12.0))

        test_kernel()
        assert abs(result[None] - 13.0) < 1e-5

    def test_normalize_unit_length(self):
        from whitted.core.vector import length, normalize, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        mag = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = normalize(vec3(0.0, 3.0, -4.0))
            direction[None] = n
            mag[None] = length(n)

        test_kernel()
        assert direction[None].to_numpy().tolist() == pytest.approx([0.0, 0.6, -0.8], abs=1e-6)
        assert abs(mag[None] - 1.0) < 1e-6

    def test_normalize_zero_vector_is_nan(self):
        """A zero vector read from a field normalizes to NaN in every component."""
        from whitted.core.vector import normalize

        inp = ti.field(dtype=ti.math.vec3, shape=())
        result = ti.field(dtype=ti.math.vec3, shape=())
        inp[None] = [0.0, 0.0, 0.0]

        @ti.kernel
        def test_kernel():
            result[None] = normalize(inp[None])

        test_kernel()
        assert all(math.isnan(c) for c in result[None].to_numpy().tolist())


class TestReflect:
    """Tests for mirror reflection."""

    def test_reflect_off_floor(self):
        """A ray going down-forward bounces up-forward off a +y normal."""
        from whitted.core.vector import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert result[None].to_numpy().tolist() == pytest.approx([1.0, 1.0, 0.0])

    def test_reflect_head_on(self):
        from whitted.core.vector import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert result[None].to_numpy().tolist() == pytest.approx([0.0, 0.0, 1.0])

    def test_reflect_preserves_length(self):
        from whitted.core.vector import length, normalize, reflect, vec3

        mag = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(0.3, -0.5, -0.8))
            n = normalize(vec3(0.2, 1.0, 0.1))
            mag[None] = length(reflect(d, n))

        test_kernel()
        assert abs(mag[None] - 1.0) < 1e-5
