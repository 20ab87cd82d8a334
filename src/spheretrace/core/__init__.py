"""Core rendering module.

This module contains the fundamental building blocks of the sphere tracer:

Components:
    ray: Ray and Hit records, vector utilities, INFINITY and DELTA constants
    integrator: Shadow-ray shading and the per-pixel sampling kernel
    renderer: Batched rendering driver with progress reporting

All compute-intensive operations use Taichi kernels, so pixels are traced in
parallel while the output buffer stays in row-major order.
"""

from .ray import (
    DELTA,
    INFINITY,
    Hit,
    Ray,
    dot,
    length_squared,
    make_hit,
    make_ray,
    miss_hit,
    normalize,
    normalize_host,
    ray_at,
    scale,
    vec3,
)

# Note: integrator and renderer are NOT imported here. They declare Taichi
# fields at import time, which must happen after ti.init(). Import them
# directly from spheretrace.core.integrator or spheretrace.core.renderer.

__all__ = [
    "DELTA",
    "INFINITY",
    "Hit",
    "Ray",
    "dot",
    "length_squared",
    "make_hit",
    "make_ray",
    "miss_hit",
    "normalize",
    "normalize_host",
    "ray_at",
    "scale",
    "vec3",
]
