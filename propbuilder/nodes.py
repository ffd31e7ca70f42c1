"""Node construction with tag/layer inheritance."""

import logging
from typing import Optional

from .constants import FORAGE_TAG, NAVMESH_TAG
from .models import (ColliderPolicy, MaterialRef, MeshRef, Node,
                     PhysicsMaterialRef, RendererPolicy)
from .registry import TagLayerRegistry

logger = logging.getLogger(__name__)

# Roles allowed to break tag/layer inheritance, and the tag they take.
AUXILIARY_ROLES = {
    "navigation": NAVMESH_TAG,
    "forage": FORAGE_TAG,
}


class NodeBuilder:
    """Create nodes for one generation.

    Ids are sequential per builder, so the same spec always yields the
    same tree.
    """

    def __init__(self, registry: TagLayerRegistry):
        self.registry = registry
        self._next_id = 0

    def _new_id(self) -> str:
        self._next_id += 1
        return f"node-{self._next_id}"

    def _auxiliary_tag(self, role: str) -> str:
        try:
            return AUXILIARY_ROLES[role]
        except KeyError:
            raise ValueError(f"Unknown auxiliary role: {role}") from None

    def new_root(self, name: str, tag: str, role: Optional[str] = None,
                 collider_mesh: Optional[MeshRef] = None,
                 collider_material: Optional[PhysicsMaterialRef] = None) -> Node:
        """Top-level node; *role* replaces *tag* for auxiliary roots."""
        if role is not None:
            tag = self._auxiliary_tag(role)
        node = Node(id=self._new_id(), name=name, tag=tag,
                    layer=self.registry.resolve(tag))
        if collider_mesh is not None:
            node.collider = ColliderPolicy(mesh=collider_mesh,
                                           material=collider_material)
        return node

    def new_child_node(self, parent: Node, name: str,
                       geometry: Optional[MeshRef] = None,
                       material: Optional[MaterialRef] = None,
                       wants_collider: bool = False,
                       collider_material: Optional[PhysicsMaterialRef] = None,
                       role: Optional[str] = None,
                       cast_shadows: bool = True,
                       receive_shadows: bool = True) -> Node:
        """Create a child of *parent* and append it to the parent's children.

        The child inherits the parent's tag and layer unless *role* names
        an auxiliary role.  A renderer is attached when both geometry and
        material are given; a collider when *wants_collider* is set.
        """
        if role is not None:
            tag = self._auxiliary_tag(role)
            layer = self.registry.resolve(tag)
        else:
            tag, layer = parent.tag, parent.layer

        node = Node(id=self._new_id(), name=name, tag=tag, layer=layer,
                    parent_id=parent.id, geometry=geometry)
        if geometry is not None and material is not None:
            node.renderer = RendererPolicy(material=material,
                                           cast_shadows=cast_shadows,
                                           receive_shadows=receive_shadows)
        if wants_collider:
            node.collider = ColliderPolicy(mesh=geometry,
                                           material=collider_material)
        parent.children.append(node)
        return node
