"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere dataclass, ray-sphere distance and hit refinement

The same Sphere type serves as a renderable primitive and as the bounding
volume of a scene group. Intersection routines are Taichi functions
(@ti.func) callable from any kernel.
"""

from .sphere import Sphere, intersect_sphere, make_sphere, ray_sphere

__all__ = [
    "Sphere",
    "intersect_sphere",
    "make_sphere",
    "ray_sphere",
]
