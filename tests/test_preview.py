import tempfile
import unittest
from pathlib import Path

import numpy as np
import trimesh

from propbuilder.builder import PropBuilder
from propbuilder.models import (Category, MaterialRef, MeshRef, ObjectSpec,
                                ShaderRef)
from propbuilder.preview import build_preview_scene, export_preview
from propbuilder.registry import TagLayerRegistry
from propbuilder.store import FileTemplateStore


class PreviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        mesh_path = self.tmp / "crate.stl"
        trimesh.creation.box(extents=(2.0, 1.0, 1.0)).export(str(mesh_path))
        self.spec = ObjectSpec(
            Category.Standard, name="Crate",
            main_mesh=MeshRef("crate", str(mesh_path)),
            main_material=MaterialRef("Wood", ShaderRef("Standard"),
                                      color=(0.6, 0.4, 0.2, 1.0)),
            create_skybox=True)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def generated(self, spec=None):
        builder = PropBuilder(store=FileTemplateStore(self.tmp, preview=False),
                              registry=TagLayerRegistry())
        return builder.build_tree(spec or self.spec)

    def test_scene_mirrors_node_tree(self) -> None:
        artifact = self.generated().get("Object")
        scene = build_preview_scene(artifact)
        self.assertEqual(scene.metadata['template'], "Standard_Object")
        self.assertEqual(len(scene.geometry), 1)
        root, model = artifact.root, artifact.root.children[0]
        self.assertIn(f"Object ({root.id})", scene.graph.nodes)
        self.assertIn(f"Model_0 ({model.id})", scene.graph.nodes)

    def test_export_writes_glb(self) -> None:
        artifact = self.generated().get("Object")
        summary = export_preview(artifact, self.tmp / "out" / "crate.glb")
        self.assertIsNotNone(summary)
        self.assertTrue(Path(summary['path']).is_file())
        self.assertEqual(summary['meshes'], 1)
        np.testing.assert_allclose(summary['extents'], [2.0, 1.0, 1.0], atol=1e-6)
        self.assertAlmostEqual(summary['radius'], np.sqrt(6.0) / 2.0, places=5)

    def test_no_preview_without_geometry(self) -> None:
        nav = self.generated().get("Nav")
        self.assertIsNone(export_preview(nav, self.tmp / "nav.glb"))
        self.assertFalse((self.tmp / "nav.glb").exists())

    def test_missing_mesh_file_skipped(self) -> None:
        spec = ObjectSpec(Category.Standard,
                          main_mesh=MeshRef("ghost", str(self.tmp / "ghost.obj")),
                          main_material=MaterialRef("Wood", ShaderRef("Standard")))
        artifact = self.generated(spec).get("Object")
        with self.assertLogs("propbuilder.preview", level="WARNING"):
            self.assertIsNone(export_preview(artifact, self.tmp / "ghost.glb"))

    def test_store_writes_preview_next_to_template(self) -> None:
        store = FileTemplateStore(self.tmp, preview=True)
        PropBuilder(store=store, registry=TagLayerRegistry()).generate(self.spec)
        folder = self.tmp / "Objects" / "Standard" / "Crate"
        self.assertTrue((folder / "Standard_Object.glb").is_file())
        self.assertTrue((folder / "Standard_Skybox.glb").is_file())
        self.assertFalse((folder / "Standard_Nav.glb").exists())


if __name__ == "__main__":
    unittest.main()
