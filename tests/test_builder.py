import json
import tempfile
import unittest
from pathlib import Path

from propbuilder.builder import PropBuilder
from propbuilder.errors import GenerationError, StoreError, ValidationError
from propbuilder.materials import MaterialFallbackResolver, ShaderRegistry
from propbuilder.models import (Category, MaterialRef, MeshRef, ObjectSpec,
                                PhysicsMaterialRef, ShaderRef, TemplateHandle,
                                TextureRef)
from propbuilder.registry import TagLayerRegistry
from propbuilder.store import FileTemplateStore, TemplateStore, load_template


MATERIAL = MaterialRef("Ore", ShaderRef("Standard"))


def resource_spec(**kwargs):
    return ObjectSpec(Category.Resource, main_mesh=MeshRef("ore"),
                      metal_mesh=MeshRef("metal"), stump_mesh=MeshRef("stump"),
                      main_material=MATERIAL, **kwargs)


def tree_spec(**kwargs):
    values = dict(trunk_mesh=MeshRef("trunk"), leaves_mesh=MeshRef("leaves"),
                  stump_mesh=MeshRef("stump"), trunk_texture=TextureRef("Bark"),
                  leaves_texture=TextureRef("Leaf"),
                  physics_material=PhysicsMaterialRef("Wood"))
    values.update(kwargs)
    return ObjectSpec(Category.Tree, **values)


class MemoryStore(TemplateStore):
    """Keeps saved artifacts in memory; optionally fails on one of them."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.folders = []
        self.saved = []

    def ensure_folder(self, category, object_name=""):
        folder = "/".join(p for p in ("mem", category.folder, object_name) if p)
        self.folders.append(folder)
        return folder

    def save(self, artifact, target_path):
        if artifact.name == self.fail_on:
            raise StoreError(artifact.name, f"{target_path}/{artifact.name}",
                             "disk full")
        self.saved.append(artifact)
        return TemplateHandle(artifact.name, f"{target_path}/{artifact.name}")


class FailingFolderStore(MemoryStore):
    def ensure_folder(self, category, object_name=""):
        raise StoreError(category.folder, "/readonly", "permission denied")


class CountingResolver(MaterialFallbackResolver):
    def __init__(self, shaders=None):
        super().__init__(shaders)
        self.calls = []

    def resolve(self, kind, texture=None):
        self.calls.append(kind)
        return super().resolve(kind, texture)


class PropBuilderGenerateTests(unittest.TestCase):
    def builder(self, store, resolver=None):
        return PropBuilder(store=store, registry=TagLayerRegistry(),
                           resolver=resolver)

    def test_returns_one_handle_per_artifact(self) -> None:
        store = MemoryStore()
        handles = self.builder(store).generate(resource_spec(name="IronOre"))
        self.assertEqual([h.artifact for h in handles],
                         ["Resource_Nav", "Resource_Object", "Resource_Stump"])
        self.assertEqual(store.folders, ["mem/Resources/IronOre"])
        self.assertEqual(handles[0].path, "mem/Resources/IronOre/Resource_Nav")

    def test_validation_error_is_not_wrapped(self) -> None:
        store = MemoryStore()
        with self.assertRaises(ValidationError) as ctx:
            self.builder(store).generate(ObjectSpec(Category.Resource))
        self.assertIn("Resource requires main_mesh", ctx.exception.errors)
        self.assertEqual(store.folders, [])
        self.assertEqual(store.saved, [])

    def test_save_failure_keeps_earlier_artifacts(self) -> None:
        store = MemoryStore(fail_on="Resource_Object")
        with self.assertRaises(GenerationError) as ctx:
            self.builder(store).generate(resource_spec())
        error = ctx.exception
        self.assertEqual(error.stage, "save")
        self.assertEqual(error.target_path, "mem/Resources")
        self.assertIsInstance(error.cause, StoreError)
        self.assertIn("Resource_Object", str(error))
        self.assertEqual([a.name for a in store.saved], ["Resource_Nav"])

    def test_folder_failure_reports_prepare_stage(self) -> None:
        with self.assertRaises(GenerationError) as ctx:
            self.builder(FailingFolderStore()).generate(resource_spec(name="Ore"))
        self.assertEqual(ctx.exception.stage, "prepare")
        self.assertEqual(ctx.exception.target_path, "Objects/Resources/Ore")

    def test_progress_callback(self) -> None:
        updates = []
        self.builder(MemoryStore()).generate(
            tree_spec(), progress_callback=lambda pct, msg: updates.append((pct, msg)))
        percentages = [pct for pct, _ in updates]
        self.assertEqual(percentages[:4], [5, 15, 30, 50])
        self.assertEqual(percentages[-1], 100)
        self.assertEqual(percentages, sorted(percentages))
        self.assertTrue(any("Saving Tree_Stump" in msg for _, msg in updates))

    def test_tree_materials_resolved_once(self) -> None:
        resolver = CountingResolver()
        self.builder(MemoryStore(), resolver).generate(tree_spec())
        self.assertEqual([k.value for k in resolver.calls], ["Trunk", "Leaves"])

    def test_tree_degrades_to_fallback_materials(self) -> None:
        resolver = MaterialFallbackResolver(ShaderRegistry(["Standard"]))
        store = MemoryStore()
        with tempfile.TemporaryDirectory() as tmp:
            spec = tree_spec(trunk_texture=TextureRef("Bark", str(Path(tmp) / "no.png")))
            handles = self.builder(store, resolver).generate(spec)
        self.assertEqual(len(handles), 3)
        root = store.saved[1].root
        trunk = root.find("Trunk_0").renderer.material
        leaves = root.find("Leaves_0").renderer.material
        self.assertTrue(trunk.fallback)
        self.assertEqual(trunk.color, (0.45, 0.30, 0.15, 1.0))
        self.assertFalse(leaves.fallback)
        self.assertEqual(leaves.shader.name, "Standard")

    def test_build_tree_does_not_persist(self) -> None:
        store = MemoryStore()
        tree = self.builder(store).build_tree(resource_spec())
        self.assertEqual(len(tree.roots), 3)
        self.assertEqual(store.folders, [])
        self.assertEqual(store.saved, [])


class FileTemplateStoreTests(unittest.TestCase):
    def test_generate_writes_json_templates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = FileTemplateStore(tmp, preview=False)
            builder = PropBuilder(store=store, registry=TagLayerRegistry())
            handles = builder.generate(resource_spec(name="IronOre"))

            folder = Path(tmp) / "Objects" / "Resources" / "IronOre"
            self.assertEqual(sorted(p.name for p in folder.iterdir()),
                             ["Resource_Nav.json", "Resource_Object.json",
                              "Resource_Stump.json"])
            self.assertEqual(handles[1].path, str(folder / "Resource_Object.json"))

            data = load_template(folder / "Resource_Object.json")
            self.assertEqual(data["category"], "Resource")
            self.assertEqual(data["role"], "Object")
            self.assertEqual(data["object_name"], "IronOre")
            root = data["root"]
            self.assertEqual(root["tag"], "Resource")
            self.assertEqual(root["resource"]["drop_count"], 5)
            self.assertEqual([b["threshold"] for b in root["lod"]["bands"]], [1.0, 0.0])
            self.assertEqual(root["collider"]["cooking"],
                             ["FAST_MIDPHASE", "FAST_SIMULATION",
                              "MESH_CLEANING", "WELD_VERTICES"])

    def test_save_overwrites_and_leaves_no_temp_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = FileTemplateStore(tmp, preview=False)
            builder = PropBuilder(store=store, registry=TagLayerRegistry())
            builder.generate(resource_spec())
            builder.generate(resource_spec())
            folder = Path(tmp) / "Objects" / "Resources"
            self.assertEqual(len(list(folder.iterdir())), 3)

    def test_save_into_missing_folder_raises_store_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = FileTemplateStore(tmp, preview=False)
            tree = PropBuilder(store=store).build_tree(resource_spec())
            with self.assertRaises(StoreError) as ctx:
                store.save(tree.roots[0], str(Path(tmp) / "missing"))
        self.assertIn("missing", ctx.exception.path)

    def test_load_template_rejects_other_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "other.json"
            path.write_text(json.dumps({"format": "gltf"}), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_template(path)


if __name__ == "__main__":
    unittest.main()
