"""Unit tests for the ray module.

Tests cover:
- Ray and Hit dataclasses, ray_at, make_ray, miss_hit
- Vector utility functions (dot, scale, normalize, length_squared)
- INFINITY and DELTA constants
"""

import math

import numpy as np
import taichi as ti


class TestConstants:
    """Tests for the process-wide float constants."""

    def test_infinity_is_largest_float32(self):
        from spheretrace.core.ray import INFINITY

        assert INFINITY == float(np.finfo(np.float32).max)
        assert np.float32(INFINITY) == INFINITY

    def test_delta_is_sqrt_epsilon(self):
        from spheretrace.core.ray import DELTA

        assert abs(DELTA - math.sqrt(np.finfo(np.float32).eps)) < 1e-12
        assert 0.0 < DELTA < 1e-3


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from spheretrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_make_ray_and_ray_at(self):
        """Test make_ray builds a ray usable with ray_at."""
        from spheretrace.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, -4.0), vec3(0.0, 0.0, 1.0))
            result[None] = ray_at(ray, 4.0)

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6


class TestHit:
    """Tests for Hit records."""

    def test_miss_hit_is_at_infinity(self):
        from spheretrace.core.ray import INFINITY, miss_hit

        distance = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            hit = miss_hit()
            distance[None] = hit.distance
            normal[None] = hit.normal

        test_kernel()
        assert distance[None] == INFINITY
        n = normal[None]
        assert n[0] == 0.0 and n[1] == 0.0 and n[2] == 0.0

    def test_make_hit(self):
        from spheretrace.core.ray import make_hit, vec3

        distance = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            hit = make_hit(2.5, vec3(0.0, 1.0, 0.0))
            distance[None] = hit.distance
            normal[None] = hit.normal

        test_kernel()
        assert abs(distance[None] - 2.5) < 1e-6
        assert abs(normal[None][1] - 1.0) < 1e-6


class TestVectorUtilities:
    """Tests for vector helpers."""

    def test_dot(self):
        from spheretrace.core.ray import dot, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))

        test_kernel()
        assert abs(result[None] - 12.0) < 1e-6

    def test_scale_add_sub(self):
        from spheretrace.core.ray import scale, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 2.0, 3.0)
            b = vec3(0.5, 0.5, 0.5)
            result[None] = scale(2.0, a + b) - b

        test_kernel()
        r = result[None]
        assert abs(r[0] - 2.5) < 1e-6
        assert abs(r[1] - 4.5) < 1e-6
        assert abs(r[2] - 6.5) < 1e-6

    def test_normalize_unit_length(self):
        from spheretrace.core.ray import length_squared, normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        length = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            v = normalize(vec3(3.0, 0.0, 4.0))
            result[None] = v
            length[None] = length_squared(v)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.6) < 1e-6
        assert abs(r[2] - 0.8) < 1e-6
        assert abs(length[None] - 1.0) < 1e-6

    def test_normalize_host(self):
        from spheretrace.core.ray import normalize_host

        x, y, z = normalize_host((-1.0, -3.0, 2.0))
        norm = math.sqrt(14.0)
        assert abs(x + 1.0 / norm) < 1e-12
        assert abs(y + 3.0 / norm) < 1e-12
        assert abs(z - 2.0 / norm) < 1e-12
