"""Ray, hit record and vector utilities for the sphere tracer.

This module provides the Ray and Hit dataclasses together with the small set
of vector operations the tracer needs. Addition, subtraction and scalar
multiplication come from Taichi's vec3 operators; the helpers below cover the
rest. All operations are designed to work within Taichi kernels.

Two process-wide constants are derived once from the float32 type:

    INFINITY: the "no hit" distance sentinel (largest finite float32).
    DELTA: sqrt(float32 epsilon), the outward bias applied to shadow-ray
        origins to keep a surface from shadowing itself.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, -4.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 4.0)  # Inside a kernel: (0, 0, 0)
"""

import math

import numpy as np
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# A finite sentinel keeps comparisons well defined under Taichi's fast-math mode.
INFINITY = float(np.finfo(np.float32).max)
DELTA = math.sqrt(float(np.finfo(np.float32).eps))


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Every caller in
            this package passes a unit vector; distances are only comparable
            between rays when that holds.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class Hit:
    """Nearest intersection found so far along a ray.

    Attributes:
        distance: Distance along the ray to the hit. INFINITY means no hit.
        normal: Outward unit surface normal at the hit point. Meaningless
            while distance is INFINITY.
    """

    distance: ti.f32
    normal: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def make_hit(distance: ti.f32, normal: vec3) -> Hit:
    """Create a hit record from a distance and surface normal."""
    return Hit(distance=distance, normal=normal)


@ti.func
def miss_hit() -> Hit:
    """Create the starting hit record of a nearest-hit search.

    Returns:
        A Hit at INFINITY with a zero normal.
    """
    return Hit(distance=INFINITY, normal=vec3(0.0, 0.0, 0.0))


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def scale(s: ti.f32, v: vec3) -> vec3:
    """Multiply a vector by a scalar."""
    return s * v


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike tm.normalize there is no zero-length guard: v must have non-zero
    magnitude. Every direction normalised by the tracer comes from fixed,
    non-degenerate camera or scene geometry.

    Args:
        v: The input vector.

    Returns:
        (1 / sqrt(dot(v, v))) * v
    """
    return scale(1.0 / ti.sqrt(dot(v, v)), v)


def normalize_host(v: tuple[float, float, float]) -> tuple[float, float, float]:
    """Normalize a vector on the host (Python scope).

    Used for configuration values such as the light direction before they are
    written into Taichi fields. Same precondition as normalize().

    Args:
        v: The input vector as an (x, y, z) tuple.

    Returns:
        A unit-length (x, y, z) tuple.
    """
    arr = np.asarray(v, dtype=np.float64)
    arr = arr / np.sqrt(np.dot(arr, arr))
    return (float(arr[0]), float(arr[1]), float(arr[2]))
