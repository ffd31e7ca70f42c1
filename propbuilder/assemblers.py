"""Category-specific node tree assembly.

Each category produces a fixed set of structural roots, saved as
separate templates:

    Standard   Nav, Object, [Skybox]
    Resource   Nav, Object, Stump
    Tree       Nav, Object, Stump
    Bush       Nav, Object
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .constants import NAVMESH_TAG, RESOURCE_DEFAULTS
from .errors import ValidationError
from .lod import bind_renderers, fixed_band_plan, plan_lod_bands
from .materials import MaterialFallbackResolver
from .models import (Category, FoliageMarker, GeneratedTree, MaterialKind,
                     Node, ObjectSpec, ResourceMetadata)
from .nodes import NodeBuilder

logger = logging.getLogger(__name__)

FOLIAGE_PREFIXES = ("Leaves_", "Bush_")


@dataclass
class AssemblyContext:
    nodes: NodeBuilder
    resolver: MaterialFallbackResolver
    materials: dict = field(default_factory=dict)  # MaterialKind → MaterialRef

    def material(self, kind: MaterialKind, texture=None):
        """Resolve a material once per generation."""
        if kind not in self.materials:
            self.materials[kind] = self.resolver.resolve(kind, texture)
        return self.materials[kind]


def is_foliage_name(name: str) -> bool:
    return name.startswith(FOLIAGE_PREFIXES)


def foliage_marker(root: Node) -> FoliageMarker:
    """Mark every foliage child of *root* for wind animation."""
    return FoliageMarker(renderers=tuple(
        child.id for child in root.children
        if child.renderer is not None and is_foliage_name(child.name)))


def resource_metadata(category: Category) -> ResourceMetadata:
    defaults = RESOURCE_DEFAULTS[category.value]
    return ResourceMetadata(health=defaults['health'],
                            max_health=defaults['health'],
                            dropable=True,
                            drop_count=defaults['drop_count'])


class StructureAssembler(ABC):
    category: Category

    def assemble(self, spec: ObjectSpec, ctx: AssemblyContext) -> GeneratedTree:
        tree = GeneratedTree(self.category, spec.name)
        tree.add("Nav", self._build_nav(spec, ctx))
        self.build(spec, ctx, tree)
        logger.info(f"Assembled {self.category.value} object: "
                    f"{', '.join(tree.artifact_names)}")
        return tree

    @abstractmethod
    def build(self, spec: ObjectSpec, ctx: AssemblyContext,
              tree: GeneratedTree) -> None:
        raise NotImplementedError

    def _build_nav(self, spec, ctx) -> Node:
        """Collider-only proxy used for navigation mesh baking."""
        return ctx.nodes.new_root("Nav", NAVMESH_TAG, role="navigation",
                                  collider_mesh=spec.primary_mesh)

    def _object_root(self, spec, ctx, collider_mesh=None) -> Node:
        return ctx.nodes.new_root("Object", self.category.tag,
                                  collider_mesh=collider_mesh,
                                  collider_material=spec.physics_material)

    def _build_stump(self, spec, ctx, material) -> Node:
        """Detached stump left behind once the object is harvested."""
        root = ctx.nodes.new_root("Stump", self.category.tag,
                                  collider_mesh=spec.stump_mesh,
                                  collider_material=spec.physics_material)
        model = ctx.nodes.new_child_node(root, "Model_0",
                                         geometry=spec.stump_mesh,
                                         material=material)
        plan = fixed_band_plan(self.category, [spec.stump_mesh])
        root.lod = plan.with_bands([bind_renderers(plan.bands[0], [model.id]),
                                    plan.bands[1]])
        return root


class StandardAssembler(StructureAssembler):
    category = Category.Standard

    def build(self, spec, ctx, tree):
        root = self._object_root(spec, ctx, spec.main_mesh)
        plan = plan_lod_bands(spec.lod_config(), spec.main_mesh,
                              spec.child_meshes)

        bands = []
        for i, band in enumerate(plan.bands):
            ids = []
            for mesh in band.geometry:
                node = ctx.nodes.new_child_node(
                    root, f"Model_{i}", geometry=mesh,
                    material=spec.main_material,
                    cast_shadows=band.cast_shadows,
                    receive_shadows=band.receive_shadows)
                ids.append(node.id)
            bands.append(bind_renderers(band, ids))
        root.lod = plan.with_bands(bands)
        tree.add("Object", root)

        if spec.create_skybox:
            tree.add("Skybox", self._build_skybox(spec, ctx))

    def _build_skybox(self, spec, ctx) -> Node:
        """Distant backdrop copy: one unshadowed renderer, no collider."""
        root = ctx.nodes.new_root("Skybox", self.category.tag)
        ctx.nodes.new_child_node(root, "Model_0",
                                 geometry=spec.skybox_mesh or spec.main_mesh,
                                 material=spec.main_material,
                                 cast_shadows=False, receive_shadows=False)
        return root


class ResourceAssembler(StructureAssembler):
    category = Category.Resource

    def build(self, spec, ctx, tree):
        root = self._object_root(spec, ctx, spec.main_mesh)
        parts = [("Model_0", spec.main_mesh),
                 ("Metal_0", spec.metal_mesh),
                 ("Stump_0", spec.stump_mesh)]
        models = [ctx.nodes.new_child_node(root, name, geometry=mesh,
                                           material=spec.main_material)
                  for name, mesh in parts]

        plan = fixed_band_plan(self.category, [m.geometry for m in models])
        root.lod = plan.with_bands([
            bind_renderers(plan.bands[0], [m.id for m in models]),
            plan.bands[1],
        ])
        root.resource = resource_metadata(self.category)
        tree.add("Object", root)
        tree.add("Stump", self._build_stump(spec, ctx, spec.main_material))


class TreeAssembler(StructureAssembler):
    category = Category.Tree

    def build(self, spec, ctx, tree):
        trunk = ctx.material(MaterialKind.Trunk, spec.trunk_texture)
        leaves = ctx.material(MaterialKind.Leaves, spec.leaves_texture)

        root = self._object_root(spec, ctx, spec.trunk_mesh)
        ctx.nodes.new_child_node(root, "Trunk_0", geometry=spec.trunk_mesh,
                                 material=trunk)
        ctx.nodes.new_child_node(root, "Leaves_0", geometry=spec.leaves_mesh,
                                 material=leaves)
        ctx.nodes.new_child_node(root, "Stump_0", geometry=spec.stump_mesh,
                                 material=trunk)

        index = 1
        for pair_number, (trunk_mesh, leaves_mesh) in enumerate(spec.extra_pairs, 1):
            if trunk_mesh is None and leaves_mesh is None:
                continue
            if trunk_mesh is None or leaves_mesh is None:
                raise ValidationError([f"additional model pair {pair_number} "
                                       f"needs both trunk and leaves meshes"])
            ctx.nodes.new_child_node(root, f"Trunk_{index}",
                                     geometry=trunk_mesh, material=trunk)
            ctx.nodes.new_child_node(root, f"Leaves_{index}",
                                     geometry=leaves_mesh, material=leaves)
            index += 1

        root.foliage = foliage_marker(root)
        root.resource = resource_metadata(self.category)
        tree.add("Object", root)
        tree.add("Stump", self._build_stump(spec, ctx, trunk))


class BushAssembler(StructureAssembler):
    category = Category.Bush

    def build(self, spec, ctx, tree):
        material = ctx.material(MaterialKind.Bush, spec.bush_texture)
        models = [m for m in spec.bush_models if m is not None]
        if not models:
            raise ValidationError(["Bush requires at least one bush model"])

        root = self._object_root(spec, ctx)
        for i, mesh in enumerate(models):
            ctx.nodes.new_child_node(root, f"Bush_{i}", geometry=mesh,
                                     material=material,
                                     wants_collider=(i == 0),
                                     collider_material=spec.physics_material)

        if spec.has_forage:
            ctx.nodes.new_child_node(root, "Forage",
                                     geometry=spec.forage_mesh or models[0],
                                     material=material, role="forage")

        root.foliage = foliage_marker(root)
        root.resource = resource_metadata(self.category)
        tree.add("Object", root)


def _all_assemblers():
    return {
        Category.Standard: StandardAssembler,
        Category.Resource: ResourceAssembler,
        Category.Tree: TreeAssembler,
        Category.Bush: BushAssembler,
    }


def get_assembler(category) -> StructureAssembler:
    try:
        assembler_cls = _all_assemblers().get(Category(category))
    except ValueError:
        assembler_cls = None
    if assembler_cls is None:
        raise KeyError(f"Unknown category: {category}")
    return assembler_cls()


def list_categories() -> list:
    return [category.value for category in _all_assemblers()]
