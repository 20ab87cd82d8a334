"""Shadow-ray integrator and supersampling render kernel.

Each primary ray is shaded with a single directional light and hard shadows:

    1. Find the nearest hit. No hit: black.
    2. g = dot(normal, light). g >= 0 means the surface faces away from the
       light: black (there is no ambient term).
    3. Offset the hit point by DELTA along the normal and cast a shadow ray
       towards the light (-light). Any hit: black.
    4. Otherwise the intensity is -g, the cosine between the normal and the
       direction to the light.

The render kernel traces samples_per_axis^2 sub-samples per pixel on a
regular sub-pixel grid and averages them. Output row 0 is the top of the
image (largest y), so the buffer is already in the order the bytes are
written.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.camera.pinhole import setup_camera
    >>> from spheretrace.core.integrator import (
    ...     render_image, setup_light, setup_render_target
    ... )
    >>> from spheretrace.scene.intersection import load_scene
    >>> from spheretrace.scene.sphere_cluster import create_sphere_cluster_scene
    >>>
    >>> root, camera = create_sphere_cluster_scene(level=4)
    >>> load_scene(root)
    >>> setup_camera(camera)
    >>> setup_light((-1.0, -3.0, 2.0))
    >>> setup_render_target(camera.image_size)
    >>> render_image(samples_per_axis=4)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretrace.camera.pinhole import get_ray
from spheretrace.core.ray import DELTA, INFINITY, Ray, dot, make_ray, normalize_host, ray_at
from spheretrace.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Light Source Configuration
# =============================================================================

# Unit direction the light travels in (configured by setup_light)
_light_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_light(direction: tuple[float, float, float]) -> None:
    """Configure the directional light.

    Args:
        direction: Direction the light travels in. Normalised here; must
            have non-zero length.
    """
    _light_direction[None] = list(normalize_host(direction))


def get_light_direction() -> tuple[float, float, float]:
    """Get the unit direction of the configured light."""
    light = _light_direction[None]
    return (float(light[0]), float(light[1]), float(light[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image size (preallocated to avoid kernel recompilation)
MAX_IMAGE_SIZE = 2048

_image_size = ti.field(dtype=ti.i32, shape=())

# Average intensity per pixel in [0, 1], indexed [row, column], row 0 on top
_intensity = ti.field(dtype=ti.f32, shape=(MAX_IMAGE_SIZE, MAX_IMAGE_SIZE))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(size: int) -> None:
    """Initialize the render target for a square image.

    Args:
        size: Image width and height in pixels (max MAX_IMAGE_SIZE).

    Raises:
        ValueError: If size is not positive or exceeds MAX_IMAGE_SIZE.
    """
    if size <= 0 or size > MAX_IMAGE_SIZE:
        raise ValueError(
            f"Image size {size} outside supported range (1 to {MAX_IMAGE_SIZE})"
        )

    _image_size[None] = size
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _intensity.fill(0.0)


def reset_render_target() -> None:
    """Mark the render target as uninitialized."""
    _render_target_initialized[None] = 0


def get_image_size() -> int:
    """Get the current render target size."""
    return int(_image_size[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_intensity_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered intensities as a NumPy array.

    Returns:
        Array of shape (size, size), row 0 at the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    size = get_image_size()
    return _intensity.to_numpy()[:size, :size]


# =============================================================================
# Shading
# =============================================================================


@ti.func
def ray_trace(light: vec3, ray: Ray) -> ti.f32:
    """Shade one ray against the loaded scene.

    Args:
        light: Unit direction the light travels in.
        ray: The ray to trace.

    Returns:
        The diffuse intensity in [0, 1]; 0 for background, surfaces facing
        away from the light and shadowed points.
    """
    intensity = 0.0
    hit = intersect_scene(ray)
    if hit.distance < INFINITY:
        g = dot(hit.normal, light)
        if g < 0.0:
            p = ray_at(ray, hit.distance) + DELTA * hit.normal
            shadow = intersect_scene(make_ray(p, -light))
            if shadow.distance >= INFINITY:
                intensity = -g
    return intensity


@ti.func
def render_pixel(light: vec3, x: ti.i32, y: ti.i32, samples_per_axis: ti.i32) -> ti.f32:
    """Average intensity of one pixel over a regular sub-pixel grid.

    Args:
        light: Unit direction the light travels in.
        x: Pixel column, 0 at the left edge.
        y: Pixel row in image coordinates, 0 at the bottom edge.
        samples_per_axis: Sub-samples along each axis.

    Returns:
        The mean of samples_per_axis^2 traced intensities.
    """
    ss = ti.cast(samples_per_axis, ti.f32)
    total = 0.0
    for dx in range(samples_per_axis):
        for dy in range(samples_per_axis):
            px = ti.cast(x, ti.f32) + ti.cast(dx, ti.f32) / ss
            py = ti.cast(y, ti.f32) + ti.cast(dy, ti.f32) / ss
            total += ray_trace(light, get_ray(px, py))
    return total / (ss * ss)


@ti.kernel
def render_rows(row_start: ti.i32, row_end: ti.i32, samples_per_axis: ti.i32):
    """Render the output rows [row_start, row_end).

    Pixels are independent and traced in parallel.

    Args:
        row_start: First output row (0 is the top of the image).
        row_end: One past the last output row.
        samples_per_axis: Sub-samples along each axis.
    """
    size = _image_size[None]
    light = _light_direction[None]
    for row, x in ti.ndrange((row_start, row_end), size):
        y = size - 1 - row
        _intensity[row, x] = render_pixel(light, x, y, samples_per_axis)


def render_image(samples_per_axis: int = 1) -> None:
    """Render the whole image into the render target.

    Args:
        samples_per_axis: Sub-samples along each axis (1 for one ray per
            pixel).

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If samples_per_axis is not positive.
    """
    _check_render_target_initialized()
    if samples_per_axis <= 0:
        raise ValueError(f"samples_per_axis must be positive, got {samples_per_axis}")
    render_rows(0, get_image_size(), samples_per_axis)
