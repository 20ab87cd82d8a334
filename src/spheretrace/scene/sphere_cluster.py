"""Fractal sphere cluster scene.

A cluster of level L around a sphere (c, r) is the sphere itself plus four
clusters of level L - 1 with radius r/2, centered at

    c + rn * (dx, 1, dz)    for dz in (-1, 1), dx in (-1, 1)

where rn = 3r / sqrt(12). Each offset has length 1.5r, so the children rest
on the upper half of their parent. Every group is bounded by (c, 3r), which
encloses all of its descendants at any level:

    1.5r (child offset) + 1.5r (child bound) = 3r

The node count of a level-L cluster is 1 for L = 1 and 2 + 4 * nodes(L - 1)
otherwise, so rendering cost grows exponentially with the level.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.scene.sphere_cluster import create_sphere_cluster_scene
    >>> root, camera = create_sphere_cluster_scene(level=3)
    >>> root.count_nodes()
    26
"""

import math
from dataclasses import dataclass

from spheretrace.camera.pinhole import PinholeCamera
from spheretrace.scene.node import SceneNode, SphereInfo

# =============================================================================
# Scene Constants
# =============================================================================

DEFAULT_LEVEL = 8

ROOT_CENTER = (0.0, -1.0, 0.0)
ROOT_RADIUS = 1.0

# Direction the light travels in; normalised when the light is set up
LIGHT_DIRECTION = (-1.0, -3.0, 2.0)

EYE = (0.0, 0.0, -4.0)
IMAGE_SIZE = 1024

# Sub-samples per pixel along each axis: 4 gives 16 samples per pixel
SAMPLES_PER_AXIS = 4

# Bounding sphere radius relative to the cluster's own sphere
BOUND_SCALE = 3.0


@dataclass
class SphereClusterParams:
    """Parameters of the sphere cluster scene.

    Defaults reproduce the reference image.

    Attributes:
        center: Center of the root sphere.
        radius: Radius of the root sphere.
        light_direction: Direction the light travels in (need not be unit
            length).
        eye: Camera position.
        image_size: Width and height of the square image in pixels.
        samples_per_axis: Supersampling factor; each pixel averages
            samples_per_axis^2 rays.
    """

    center: tuple[float, float, float] = ROOT_CENTER
    radius: float = ROOT_RADIUS
    light_direction: tuple[float, float, float] = LIGHT_DIRECTION
    eye: tuple[float, float, float] = EYE
    image_size: int = IMAGE_SIZE
    samples_per_axis: int = SAMPLES_PER_AXIS


def create_sphere_cluster(
    level: int,
    center: tuple[float, float, float],
    radius: float,
) -> SceneNode:
    """Build a fractal sphere cluster.

    Args:
        level: Recursion depth. 1 yields a single leaf sphere.
        center: Center of the cluster's own sphere.
        radius: Radius of the cluster's own sphere.

    Returns:
        A leaf for level 1, otherwise a group bounded by (center, 3 * radius)
        whose first child is the leaf (center, radius), followed by the four
        sub-clusters.

    Raises:
        ValueError: If level is smaller than 1.
    """
    if level < 1:
        raise ValueError(f"Cluster level must be at least 1, got {level}")

    sphere = SceneNode.leaf(SphereInfo(center=center, radius=radius))
    if level == 1:
        return sphere

    children = [sphere]
    rn = 3.0 * radius / math.sqrt(12.0)
    for dz in (-1, 1):
        for dx in (-1, 1):
            child_center = (
                center[0] + rn * dx,
                center[1] + rn,
                center[2] + rn * dz,
            )
            children.append(create_sphere_cluster(level - 1, child_center, radius * 0.5))

    return SceneNode.group(SphereInfo(center=center, radius=BOUND_SCALE * radius), children)


def cluster_node_count(level: int) -> int:
    """Number of nodes create_sphere_cluster() builds for a level."""
    if level < 1:
        raise ValueError(f"Cluster level must be at least 1, got {level}")
    count = 1
    for _ in range(level - 1):
        count = 2 + 4 * count
    return count


def create_sphere_cluster_scene(
    level: int = DEFAULT_LEVEL,
    params: SphereClusterParams | None = None,
) -> tuple[SceneNode, PinholeCamera]:
    """Create the sphere cluster scene and its camera.

    Args:
        level: Recursion depth of the cluster.
        params: Optional scene parameters. If None, uses the defaults.

    Returns:
        A tuple of (root SceneNode, PinholeCamera).

    Raises:
        ValueError: If level is smaller than 1.
    """
    if params is None:
        params = SphereClusterParams()

    root = create_sphere_cluster(level, params.center, params.radius)
    camera = PinholeCamera(eye=params.eye, image_size=params.image_size)
    return root, camera
