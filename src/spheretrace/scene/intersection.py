"""Scene storage and nearest-hit traversal.

The host-side SceneNode tree is flattened into Taichi fields so kernels can
walk it. Taichi functions cannot recurse, so the tree is stored in preorder
with a skip link per node:

    node_skips[i] = index of the first node after the subtree rooted at i

A leaf's skip link is simply i + 1. Walking the array front to back visits
every node in the same order as a recursive traversal, and jumping to
node_skips[i] discards the subtree of group i in one step.

Traversal accumulates the nearest hit: a group whose bounding sphere is not
nearer than the current hit is skipped, otherwise its children are visited
in order, each one only ever tightening the hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.scene.intersection import load_scene, intersect_scene
    >>> from spheretrace.scene.sphere_cluster import create_sphere_cluster
    >>> load_scene(create_sphere_cluster(3, (0.0, -1.0, 0.0), 1.0))
    26
    >>> # Use intersect_scene within a Taichi kernel
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Hit, Ray, miss_hit
from spheretrace.geometry.sphere import Sphere, intersect_sphere, make_sphere, ray_sphere
from spheretrace.scene.node import NodeKind, SceneNode

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of nodes (leaves and groups) in a loaded scene.
# A sphere cluster of level 10 has 436906 nodes.
MAX_NODES = 1 << 20

# Node storage: Structure of Arrays layout in preorder
node_kinds = ti.field(dtype=ti.i32, shape=MAX_NODES)
node_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_NODES)
node_radii = ti.field(dtype=ti.f32, shape=MAX_NODES)
node_skips = ti.field(dtype=ti.i32, shape=MAX_NODES)
num_nodes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear the loaded scene.

    Resets the node count to zero. The field data is not cleared but will be
    overwritten by the next load_scene().
    """
    num_nodes[None] = 0


def get_node_count() -> int:
    """Get the number of nodes in the loaded scene."""
    return int(num_nodes[None])


def flatten_scene(root: SceneNode) -> dict[str, np.ndarray]:
    """Flatten a scene tree into preorder arrays with skip links.

    Args:
        root: The root of the scene tree.

    Returns:
        A dict with "kinds" (int32), "centers" (float32, N x 3),
        "radii" (float32) and "skips" (int32) arrays of length N.
    """
    kinds: list[int] = []
    centers: list[tuple[float, float, float]] = []
    radii: list[float] = []
    skips: list[int] = []

    def visit(node: SceneNode) -> None:
        index = len(kinds)
        kinds.append(int(node.kind))
        centers.append(node.sphere.center)
        radii.append(node.sphere.radius)
        skips.append(index + 1)
        for child in node.children:
            visit(child)
        skips[index] = len(kinds)

    visit(root)

    return {
        "kinds": np.asarray(kinds, dtype=np.int32),
        "centers": np.asarray(centers, dtype=np.float32).reshape(-1, 3),
        "radii": np.asarray(radii, dtype=np.float32),
        "skips": np.asarray(skips, dtype=np.int32),
    }


def load_scene(root: SceneNode) -> int:
    """Flatten a scene tree and upload it to the scene fields.

    Replaces any previously loaded scene.

    Args:
        root: The root of the scene tree.

    Returns:
        The number of nodes loaded.

    Raises:
        RuntimeError: If the tree has more than MAX_NODES nodes.
    """
    flat = flatten_scene(root)
    count = len(flat["kinds"])
    if count > MAX_NODES:
        raise RuntimeError(f"Maximum number of scene nodes ({MAX_NODES}) exceeded: {count}")

    # from_numpy needs arrays covering the whole field
    kinds = np.zeros(MAX_NODES, dtype=np.int32)
    centers = np.zeros((MAX_NODES, 3), dtype=np.float32)
    radii = np.zeros(MAX_NODES, dtype=np.float32)
    skips = np.zeros(MAX_NODES, dtype=np.int32)
    kinds[:count] = flat["kinds"]
    centers[:count] = flat["centers"]
    radii[:count] = flat["radii"]
    skips[:count] = flat["skips"]

    node_kinds.from_numpy(kinds)
    node_centers.from_numpy(centers)
    node_radii.from_numpy(radii)
    node_skips.from_numpy(skips)
    num_nodes[None] = count
    return count


@ti.func
def _node_sphere(index: ti.i32) -> Sphere:
    """The sphere (primitive or bound) stored for a node."""
    return make_sphere(node_centers[index], node_radii[index])


@ti.func
def _traverse(hit: Hit, ray: Ray, start: ti.i32, end: ti.i32) -> Hit:
    """Walk the preorder range [start, end) with bounding-sphere pruning.

    Args:
        hit: The nearest hit found so far.
        ray: The ray being traced.
        start: Index of the first node to visit.
        end: Index one past the last node of the range.

    Returns:
        The nearest of hit and every leaf reached in the range.
    """
    result = hit
    i = start
    while i < end:
        sphere = _node_sphere(i)
        if node_kinds[i] == int(NodeKind.LEAF):
            result = intersect_sphere(result, ray, sphere)
            i += 1
        elif ray_sphere(sphere, ray) >= result.distance:
            # Nothing inside the bound can beat the current hit
            i = node_skips[i]
        else:
            i += 1
    return result


@ti.func
def intersect_node(hit: Hit, ray: Ray, index: ti.i32) -> Hit:
    """Refine a hit record with the subtree rooted at one node.

    Args:
        hit: The nearest hit found so far.
        ray: The ray being traced.
        index: Preorder index of the subtree root.

    Returns:
        The refined hit. Equal to hit when the subtree is pruned or has no
        nearer intersection.
    """
    return _traverse(hit, ray, index, node_skips[index])


@ti.func
def intersect_scene(ray: Ray) -> Hit:
    """Find the nearest intersection of a ray with the loaded scene.

    Args:
        ray: The ray being traced.

    Returns:
        The nearest hit, or a record at INFINITY when the ray hits nothing.
    """
    return _traverse(miss_hit(), ray, 0, num_nodes[None])


@ti.func
def intersect_scene_unpruned(ray: Ray) -> Hit:
    """Brute-force nearest intersection, ignoring every bounding sphere.

    Reference for intersect_scene(): it tests every leaf in the same order
    without pruning.

    Args:
        ray: The ray being traced.

    Returns:
        The nearest hit, or a record at INFINITY when the ray hits nothing.
    """
    result = miss_hit()
    i = 0
    while i < num_nodes[None]:
        if node_kinds[i] == int(NodeKind.LEAF):
            result = intersect_sphere(result, ray, _node_sphere(i))
        i += 1
    return result
