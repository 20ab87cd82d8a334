"""Fixed-eye pinhole camera for primary ray generation.

The camera sits at a fixed eye point and looks down +Z. The image plane is
n pixels wide at distance n from the eye, so a pixel coordinate (px, py)
maps to the direction

    normalize(px - n/2, py - n/2, n)

with py growing upwards. Pixel coordinates may be fractional: the renderer
passes sub-pixel offsets for supersampling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> setup_camera(PinholeCamera(eye=(0.0, 0.0, -4.0), image_size=1024))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(512.0, 512.0)  # Ray through the image center
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray, make_ray, normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        image_size: Width and height of the square image in pixels. Also the
            distance from the eye to the image plane, in pixel units.
    """

    eye: tuple[float, float, float] = (0.0, 0.0, -4.0)
    image_size: int = 1024


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_image_size = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the image size is not positive.
    """
    if camera.image_size <= 0:
        raise ValueError(f"Image size must be positive, got {camera.image_size}")

    _camera_eye[None] = [camera.eye[0], camera.eye[1], camera.eye[2]]
    _camera_image_size[None] = float(camera.image_size)


@ti.func
def get_ray(px: ti.f32, py: ti.f32) -> Ray:
    """Generate a primary ray through pixel coordinates (px, py).

    Args:
        px: Horizontal pixel coordinate, 0 at the left edge.
        py: Vertical pixel coordinate, 0 at the bottom edge.

    Returns:
        A ray from the eye with a unit-length direction.
    """
    n = _camera_image_size[None]
    direction = normalize(vec3(px - n * 0.5, py - n * 0.5, n))
    return make_ray(_camera_eye[None], direction)
