"""Scene module: scene tree, fractal builder and device-side traversal.

Components:
    node: Host-side scene tree (leaf spheres and bounded groups)
    sphere_cluster: Fractal sphere cluster builder and scene parameters
    intersection: Flattened Taichi storage and nearest-hit traversal

The scene is built once on the host, flattened into preorder Taichi fields
with skip links, and read by every pixel's trace. Nothing mutates it while
rendering.
"""

from .intersection import (
    MAX_NODES,
    clear_scene,
    flatten_scene,
    get_node_count,
    intersect_node,
    intersect_scene,
    intersect_scene_unpruned,
    load_scene,
)
from .node import NodeKind, SceneNode, SphereInfo
from .sphere_cluster import (
    DEFAULT_LEVEL,
    SphereClusterParams,
    cluster_node_count,
    create_sphere_cluster,
    create_sphere_cluster_scene,
)

__all__ = [
    # Scene tree
    "NodeKind",
    "SceneNode",
    "SphereInfo",
    # Builder
    "DEFAULT_LEVEL",
    "SphereClusterParams",
    "cluster_node_count",
    "create_sphere_cluster",
    "create_sphere_cluster_scene",
    # Traversal
    "MAX_NODES",
    "clear_scene",
    "flatten_scene",
    "get_node_count",
    "intersect_node",
    "intersect_scene",
    "intersect_scene_unpruned",
    "load_scene",
]
