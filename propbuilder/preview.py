"""GLB previews of generated templates.

Each template node becomes a scene-graph node; nodes with a renderer
and a loadable mesh file carry that mesh with a solid PBR material
taken from the node's material colour.
"""

import logging
import pathlib

import numpy as np
import trimesh

logger = logging.getLogger(__name__)


def _frame_name(node) -> str:
    return f"{node.name} ({node.id})"


def _load_mesh(mesh_ref, cache: dict):
    """Load a mesh file once per preview; None when it can't be read."""
    if mesh_ref is None or not mesh_ref.path:
        return None
    key = str(mesh_ref.path)
    if key not in cache:
        path = pathlib.Path(key)
        if not path.is_file():
            logger.warning(f"Mesh '{mesh_ref.name}' not found at {path} — "
                           f"skipped in preview")
            cache[key] = None
        else:
            try:
                cache[key] = trimesh.load(str(path), force='mesh')
            except Exception as e:
                logger.warning(f"Failed to load mesh '{mesh_ref.name}': {e}")
                cache[key] = None
    mesh = cache[key]
    return mesh.copy() if mesh is not None else None


def _pbr_material(material_ref):
    kwargs = {
        'name': material_ref.name,
        'baseColorFactor': list(material_ref.color),
        'doubleSided': True,
    }
    if material_ref.alpha_cutoff is not None:
        kwargs['alphaMode'] = 'MASK'
        kwargs['alphaCutoff'] = material_ref.alpha_cutoff
    return trimesh.visual.material.PBRMaterial(**kwargs)


def build_preview_scene(artifact) -> trimesh.Scene:
    scene = trimesh.Scene()
    scene.metadata['template'] = artifact.name
    frames = {}
    cache = {}

    for node in artifact.root.walk():
        frame = _frame_name(node)
        parent = frames.get(node.parent_id, scene.graph.base_frame)
        frames[node.id] = frame

        mesh = _load_mesh(node.geometry, cache) if node.renderer else None
        if mesh is None:
            scene.graph.update(frame_to=frame, frame_from=parent)
            continue

        mesh.visual = trimesh.visual.TextureVisuals(
            material=_pbr_material(node.renderer.material))
        scene.add_geometry(mesh, node_name=frame, geom_name=frame,
                           parent_node_name=parent)
    return scene


def export_preview(artifact, output_path):
    """Write a GLB preview of *artifact*.

    Returns a summary dict, or None when no node had a loadable mesh.
    """
    scene = build_preview_scene(artifact)
    if len(scene.geometry) == 0:
        logger.warning(f"No loadable meshes in {artifact.name} — no preview written")
        return None

    output_path = pathlib.Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    scene.export(str(output_path), file_type='glb')

    extents = np.asarray(scene.extents, dtype=np.float64)
    radius = float(np.linalg.norm(extents) / 2.0)
    logger.info(f"Preview {output_path.name}: {len(scene.geometry)} meshes, "
                f"bounding radius {radius:.2f}")
    return {
        'path': str(output_path),
        'meshes': len(scene.geometry),
        'extents': extents.tolist(),
        'radius': radius,
    }
