import json
import tempfile
import unittest
from pathlib import Path

from propbuilder.constants import NO_LAYER
from propbuilder.models import (COLLIDER_COOKING, CookingOption, MaterialRef,
                                MeshRef, PhysicsMaterialRef, ShaderRef)
from propbuilder.nodes import NodeBuilder
from propbuilder.registry import TagLayerRegistry


MATERIAL = MaterialRef("Wood", ShaderRef("Standard"))


class CountingRegistry(TagLayerRegistry):
    def __init__(self, layers=None):
        super().__init__(layers)
        self.lookups = []

    def resolve(self, name):
        self.lookups.append(name)
        return super().resolve(name)


class NodeBuilderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.builder = NodeBuilder(TagLayerRegistry({"Standard": 9, "Navmesh": 8,
                                                     "Forage": 13}))

    def test_child_inherits_tag_and_layer(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        child = self.builder.new_child_node(root, "Model_0", MeshRef("m"), MATERIAL)
        grandchild = self.builder.new_child_node(child, "Detail", MeshRef("d"), MATERIAL)
        self.assertEqual((root.tag, root.layer), ("Standard", 9))
        self.assertEqual((child.tag, child.layer), ("Standard", 9))
        self.assertEqual((grandchild.tag, grandchild.layer), ("Standard", 9))
        self.assertEqual(child.parent_id, root.id)
        self.assertEqual(root.children, [child])

    def test_auxiliary_roles_override_tag(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        forage = self.builder.new_child_node(root, "Forage", MeshRef("f"), MATERIAL,
                                             role="forage")
        self.assertEqual((forage.tag, forage.layer), ("Forage", 13))
        nav = self.builder.new_root("Nav", "Standard", role="navigation")
        self.assertEqual((nav.tag, nav.layer), ("Navmesh", 8))

    def test_unknown_role_rejected(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        with self.assertRaises(ValueError):
            self.builder.new_child_node(root, "X", role="decoration")

    def test_collider_uses_fixed_cooking(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        physics = PhysicsMaterialRef("Bark")
        node = self.builder.new_child_node(root, "Model_0", MeshRef("m"), MATERIAL,
                                           wants_collider=True,
                                           collider_material=physics)
        self.assertEqual(node.collider.mesh, MeshRef("m"))
        self.assertEqual(node.collider.material, physics)
        self.assertEqual(node.collider.cooking, COLLIDER_COOKING)
        for option in CookingOption:
            self.assertIn(option, node.collider.cooking)

    def test_renderer_only_with_geometry_and_material(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        bare = self.builder.new_child_node(root, "Empty")
        unshadowed = self.builder.new_child_node(root, "Model_4", MeshRef("m"), MATERIAL,
                                                 cast_shadows=False,
                                                 receive_shadows=False)
        self.assertIsNone(bare.renderer)
        self.assertIsNone(bare.collider)
        self.assertFalse(unshadowed.renderer.cast_shadows)
        self.assertFalse(unshadowed.renderer.receive_shadows)

    def test_ids_are_sequential(self) -> None:
        root = self.builder.new_root("Object", "Standard")
        child = self.builder.new_child_node(root, "Model_0")
        self.assertEqual([root.id, child.id], ["node-1", "node-2"])
        self.assertEqual([n.name for n in root.walk()], ["Object", "Model_0"])
        self.assertIs(root.find("Model_0"), child)


class TagLayerRegistryTests(unittest.TestCase):
    def test_unknown_layer_is_sentinel(self) -> None:
        registry = TagLayerRegistry({"Default": 0})
        self.assertEqual(registry.resolve("Missing"), NO_LAYER)
        self.assertEqual(registry.cached, {"Missing": NO_LAYER})

    def test_lookups_are_memoized(self) -> None:
        registry = TagLayerRegistry({"Tree": 11})
        registry._layers["Tree"] = 99
        self.assertEqual(registry.resolve("Tree"), 99)
        registry._layers["Tree"] = 5
        self.assertEqual(registry.resolve("Tree"), 99)

    def test_from_file_overlays_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "layers.json"
            path.write_text(json.dumps({"Tree": 21, "Rocks": 22}), encoding="utf-8")
            registry = TagLayerRegistry.from_file(path)
        self.assertEqual(registry.resolve("Tree"), 21)
        self.assertEqual(registry.resolve("Rocks"), 22)
        self.assertEqual(registry.resolve("Navmesh"), 8)

    def test_builder_resolves_each_tag_through_registry(self) -> None:
        registry = CountingRegistry()
        builder = NodeBuilder(registry)
        root = builder.new_root("Object", "Bush")
        builder.new_child_node(root, "Bush_0")
        builder.new_child_node(root, "Forage", role="forage")
        self.assertEqual(registry.lookups, ["Bush", "Forage"])


if __name__ == "__main__":
    unittest.main()
