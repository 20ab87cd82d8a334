"""Sphere primitive with ray-sphere distance and hit refinement.

The sphere is used twice: as a renderable primitive and, unrendered, as the
bounding volume of a scene group. Both uses share ray_sphere(); only
primitives go through intersect_sphere() to produce a surface normal.

ray_sphere() uses the geometric form of the quadratic for unit-length ray
directions:

    v = center - origin
    b = dot(v, direction)
    disc = b^2 - dot(v, v) + radius^2

The roots are b - sqrt(disc) and b + sqrt(disc). The near root is returned
when it lies in front of the origin, otherwise the far root. A shadow ray
starting just outside a sphere therefore sees both roots behind it and never
reports the sphere it left.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, -1, 0), radius=1.0)
    >>> # Use ray_sphere / intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import INFINITY, Hit, Ray, dot, length_squared, make_hit, normalize, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def ray_sphere(sphere: Sphere, ray: Ray) -> ti.f32:
    """Distance along a ray to a sphere.

    Args:
        sphere: The sphere to test.
        ray: The ray, with a unit-length direction.

    Returns:
        The near root if it is positive (origin outside the sphere), the far
        root if only that one is in front (origin inside the sphere), or
        INFINITY when the ray misses or the sphere lies behind the origin.
    """
    v = sphere.center - ray.origin
    b = dot(v, ray.direction)
    disc = b * b - length_squared(v) + sphere.radius * sphere.radius

    result = INFINITY
    if disc >= 0.0:
        d = ti.sqrt(disc)
        t2 = b + d
        if t2 >= 0.0:
            t1 = b - d
            result = t2
            if t1 > 0.0:
                result = t1
    return result


@ti.func
def intersect_sphere(hit: Hit, ray: Ray, sphere: Sphere) -> Hit:
    """Refine a hit record with one sphere.

    The record only ever gets nearer: when the sphere is at least as far as
    the current hit, the input record is returned unchanged.

    Args:
        hit: The nearest hit found so far.
        ray: The ray being traced.
        sphere: The sphere to test.

    Returns:
        Either hit, or a new Hit at the sphere with the outward unit normal
        (not flipped for rays starting inside the sphere).
    """
    result = hit
    lam = ray_sphere(sphere, ray)
    if lam < hit.distance:
        result = make_hit(lam, normalize(ray_at(ray, lam) - sphere.center))
    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
