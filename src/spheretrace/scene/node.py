"""Host-side scene tree: a closed union of leaf spheres and bounded groups.

A scene is a strict ownership tree of SceneNode values. Each node is one of
exactly two kinds, selected by an explicit discriminant:

    LEAF: a directly renderable sphere.
    GROUP: an unrendered bounding sphere plus an ordered tuple of children.
        The bound must enclose every child; it is only used to prune
        traversal.

Nodes are frozen dataclasses and children are stored in tuples, so a tree is
read-only once built. Rendering never walks this tree directly: it is
flattened into Taichi fields by spheretrace.scene.intersection.load_scene().

Example:
    >>> leaf = SceneNode.leaf(SphereInfo(center=(0.0, 0.0, 0.0), radius=1.0))
    >>> group = SceneNode.group(SphereInfo((0.0, 0.0, 0.0), 3.0), [leaf])
    >>> group.count_nodes()
    2
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum


class NodeKind(IntEnum):
    """Discriminant of a scene node.

    The integer values are also stored in the flattened Taichi scene fields.
    """

    LEAF = 0
    GROUP = 1


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere, used for primitives and bounds.

    Attributes:
        center: Center of the sphere in world space (x, y, z).
        radius: Radius of the sphere.
    """

    center: tuple[float, float, float]
    radius: float


@dataclass(frozen=True)
class SceneNode:
    """A node of the scene tree.

    Attributes:
        kind: NodeKind.LEAF or NodeKind.GROUP.
        sphere: The renderable sphere of a leaf, or the bounding sphere of a
            group.
        children: Child nodes in traversal order. Always empty for leaves.
    """

    kind: NodeKind
    sphere: SphereInfo
    children: tuple[SceneNode, ...] = ()

    @classmethod
    def leaf(cls, sphere: SphereInfo) -> SceneNode:
        """Create a leaf node rendering the given sphere."""
        return cls(kind=NodeKind.LEAF, sphere=sphere)

    @classmethod
    def group(cls, bound: SphereInfo, children: Iterable[SceneNode]) -> SceneNode:
        """Create a group node.

        Args:
            bound: A sphere enclosing all geometry of the children.
            children: The child nodes, in traversal order.

        Returns:
            A new group node owning the children.
        """
        return cls(kind=NodeKind.GROUP, sphere=bound, children=tuple(children))

    @property
    def is_leaf(self) -> bool:
        return self.kind == NodeKind.LEAF

    @property
    def bound(self) -> SphereInfo:
        """The bounding sphere of a group (the sphere itself for a leaf)."""
        return self.sphere

    def iter_preorder(self) -> Iterator[SceneNode]:
        """Iterate over this node and all descendants, parents first."""
        yield self
        for child in self.children:
            yield from child.iter_preorder()

    def iter_leaves(self) -> Iterator[SphereInfo]:
        """Iterate over the renderable spheres of this subtree."""
        for node in self.iter_preorder():
            if node.is_leaf:
                yield node.sphere

    def count_nodes(self) -> int:
        """Count the nodes in this subtree, including this node."""
        return 1 + sum(child.count_nodes() for child in self.children)

    def depth(self) -> int:
        """Number of levels in this subtree (1 for a leaf)."""
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)
