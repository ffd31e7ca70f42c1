"""Data classes for specs, nodes, LOD plans and path management."""

import enum
import pathlib
from dataclasses import dataclass, field, replace
from typing import Optional

from .constants import (CATEGORY_FOLDERS, CUSTOM_SEED_TRANSITION,
                        DEFAULT_CULLING_DISTANCES, DEFAULT_SHADOW_DISTANCES,
                        GEOMETRY_QUEUE, MAX_LOD_BIAS, MAX_TRANSITION,
                        MIN_LOD_BIAS, OUTPUT_DIR, TEMPLATE_FOLDER)


class Category(str, enum.Enum):
    Standard = "Standard"
    Resource = "Resource"
    Tree = "Tree"
    Bush = "Bush"

    @property
    def folder(self) -> str:
        return CATEGORY_FOLDERS[self.value]

    @property
    def tag(self) -> str:
        return self.value


class MaterialKind(str, enum.Enum):
    Trunk = "Trunk"
    Leaves = "Leaves"
    Bush = "Bush"

    @property
    def is_foliage(self) -> bool:
        return self is not MaterialKind.Trunk


class CookingOption(enum.Flag):
    FAST_SIMULATION = enum.auto()
    MESH_CLEANING = enum.auto()
    WELD_VERTICES = enum.auto()
    FAST_MIDPHASE = enum.auto()


# Every generated collider is cooked the same way.
COLLIDER_COOKING = (CookingOption.FAST_SIMULATION | CookingOption.MESH_CLEANING |
                    CookingOption.WELD_VERTICES | CookingOption.FAST_MIDPHASE)


class PathManager:
    """Manage template folders relative to the output directory."""

    @staticmethod
    def get_category_folder(category: Category, root=None) -> pathlib.Path:
        """Folder holding every template of one category."""
        base = pathlib.Path(root) if root is not None else OUTPUT_DIR
        return base / TEMPLATE_FOLDER / category.folder

    @staticmethod
    def get_target_folder(category: Category, object_name: str = "",
                          root=None) -> pathlib.Path:
        """Category folder, plus an object-name subfolder when one is given."""
        folder = PathManager.get_category_folder(category, root)
        if object_name:
            folder = folder / object_name
        return folder


# ── Borrowed asset handles ────────────────────────────────────────────────

@dataclass(frozen=True)
class MeshRef:
    name: str
    path: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "path": self.path}


@dataclass(frozen=True)
class TextureRef:
    name: str
    path: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "path": self.path}


@dataclass(frozen=True)
class PhysicsMaterialRef:
    name: str
    path: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "path": self.path}


@dataclass(frozen=True)
class ShaderRef:
    name: str


@dataclass(frozen=True)
class MaterialRef:
    name: str
    shader: ShaderRef
    color: tuple = (1.0, 1.0, 1.0, 1.0)
    texture: Optional[TextureRef] = None
    alpha_cutoff: Optional[float] = None
    wind: Optional[tuple] = None
    render_queue: int = GEOMETRY_QUEUE
    fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "shader": self.shader.name,
            "color": list(self.color),
            "texture": self.texture.to_dict() if self.texture else None,
            "alpha_cutoff": self.alpha_cutoff,
            "wind": list(self.wind) if self.wind else None,
            "render_queue": self.render_queue,
            "fallback": self.fallback,
        }


# ── Input ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LODConfig:
    category: Category
    configure_lod: bool = False
    use_preset: bool = True
    lod_bias: float = 1.0
    use_custom_settings: bool = False
    culling_distance: float = 100.0
    shadow_distance: float = 50.0
    transition_thresholds: tuple = ()

    @property
    def size(self) -> float:
        """Culling radius of the LOD group."""
        if self.use_custom_settings:
            return self.culling_distance
        return DEFAULT_CULLING_DISTANCES[self.category.value]

    @property
    def effective_shadow_distance(self) -> float:
        if self.use_custom_settings:
            return self.shadow_distance
        return DEFAULT_SHADOW_DISTANCES[self.category.value]


@dataclass(frozen=True)
class ObjectSpec:
    """Everything needed to generate the templates of one object."""
    category: Category
    name: str = ""
    # Geometry
    main_mesh: Optional[MeshRef] = None
    metal_mesh: Optional[MeshRef] = None
    stump_mesh: Optional[MeshRef] = None
    trunk_mesh: Optional[MeshRef] = None
    leaves_mesh: Optional[MeshRef] = None
    extra_pairs: tuple = ()          # ((trunk, leaves), ...)
    bush_models: tuple = ()
    forage_mesh: Optional[MeshRef] = None
    skybox_mesh: Optional[MeshRef] = None
    child_meshes: tuple = ()
    # Materials
    main_material: Optional[MaterialRef] = None
    physics_material: Optional[PhysicsMaterialRef] = None
    trunk_texture: Optional[TextureRef] = None
    leaves_texture: Optional[TextureRef] = None
    bush_texture: Optional[TextureRef] = None
    # Toggles
    create_skybox: bool = False
    configure_lod: bool = False
    use_lod_preset: bool = True
    use_custom_lod_settings: bool = False
    has_forage: bool = False
    # Numeric parameters
    lod_bias: float = 1.0
    culling_distance: float = 100.0
    shadow_distance: float = 50.0
    transition_thresholds: tuple = (CUSTOM_SEED_TRANSITION,)

    @property
    def primary_mesh(self) -> Optional[MeshRef]:
        """Mesh used for the navigation proxy and the main collider."""
        if self.category is Category.Tree:
            return self.trunk_mesh
        if self.category is Category.Bush:
            return next((m for m in self.bush_models if m is not None), None)
        return self.main_mesh

    def lod_config(self) -> LODConfig:
        return LODConfig(
            category=self.category,
            configure_lod=self.configure_lod,
            use_preset=self.use_lod_preset,
            lod_bias=self.lod_bias,
            use_custom_settings=self.use_custom_lod_settings,
            culling_distance=self.culling_distance,
            shadow_distance=self.shadow_distance,
            transition_thresholds=tuple(self.transition_thresholds),
        )

    def validation_errors(self) -> list:
        """Return the reasons this spec cannot be generated (empty if valid)."""
        errors = []
        required = {
            Category.Standard: ("main_mesh", "main_material"),
            Category.Resource: ("main_mesh", "metal_mesh", "stump_mesh",
                                "main_material"),
            Category.Tree: ("trunk_mesh", "leaves_mesh", "stump_mesh",
                            "trunk_texture", "leaves_texture"),
            Category.Bush: ("physics_material",),
        }[self.category]
        for attr in required:
            if getattr(self, attr) is None:
                errors.append(f"{self.category.value} requires {attr}")

        if self.category is Category.Bush and self.primary_mesh is None:
            errors.append("Bush requires at least one bush model")

        if self.category is Category.Tree:
            for i, pair in enumerate(self.extra_pairs):
                trunk, leaves = pair
                if (trunk is None) != (leaves is None):
                    errors.append(f"additional model pair {i + 1} needs both "
                                  f"trunk and leaves meshes")

        if self.name and (pathlib.PurePath(self.name).name != self.name
                          or self.name in (".", "..")):
            errors.append(f"object name {self.name!r} must be a single folder name")

        if self.configure_lod:
            if not MIN_LOD_BIAS <= self.lod_bias <= MAX_LOD_BIAS:
                errors.append(f"lod_bias must lie in [{MIN_LOD_BIAS}, "
                              f"{MAX_LOD_BIAS}], got {self.lod_bias}")
            if not self.use_lod_preset:
                thresholds = list(self.transition_thresholds)
                for t in thresholds:
                    if not 0.0 < t <= MAX_TRANSITION:
                        errors.append(f"transition {t} must lie in "
                                      f"(0, {MAX_TRANSITION}]")
                if len(set(thresholds)) != len(thresholds):
                    errors.append("transition thresholds must be distinct")

        if self.use_custom_lod_settings:
            if self.culling_distance <= 0:
                errors.append("culling_distance must be positive")
            if self.shadow_distance < 0:
                errors.append("shadow_distance must not be negative")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()


# ── LOD ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LODBand:
    threshold: float            # percent of screen height, 0 = culled
    cast_shadows: bool = False
    receive_shadows: bool = False
    geometry: tuple = ()        # source meshes for this band
    renderers: tuple = ()       # node ids, bound once nodes exist

    @property
    def is_terminal(self) -> bool:
        return self.threshold == 0 and not self.geometry

    def to_dict(self) -> dict:
        return {
            "threshold": self.threshold,
            "cast_shadows": self.cast_shadows,
            "receive_shadows": self.receive_shadows,
            "renderers": list(self.renderers),
        }


@dataclass(frozen=True)
class LODPlan:
    bands: tuple
    size: float
    shadow_distance: float
    fade_mode: str = "none"

    def with_bands(self, bands) -> "LODPlan":
        return replace(self, bands=tuple(bands))

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "shadow_distance": self.shadow_distance,
            "fade_mode": self.fade_mode,
            "bands": [band.to_dict() for band in self.bands],
        }


# ── Node tree ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ColliderPolicy:
    mesh: Optional[MeshRef]
    material: Optional[PhysicsMaterialRef] = None
    cooking: CookingOption = COLLIDER_COOKING

    def to_dict(self) -> dict:
        return {
            "mesh": self.mesh.to_dict() if self.mesh else None,
            "material": self.material.to_dict() if self.material else None,
            "cooking": sorted(opt.name for opt in CookingOption
                              if opt in self.cooking),
        }


@dataclass(frozen=True)
class RendererPolicy:
    material: MaterialRef
    cast_shadows: bool = True
    receive_shadows: bool = True

    def to_dict(self) -> dict:
        return {
            "material": self.material.to_dict(),
            "cast_shadows": self.cast_shadows,
            "receive_shadows": self.receive_shadows,
        }


@dataclass(frozen=True)
class ResourceMetadata:
    health: int
    max_health: int
    dropable: bool
    drop_count: int

    def to_dict(self) -> dict:
        return {"health": self.health, "max_health": self.max_health,
                "dropable": self.dropable, "drop_count": self.drop_count}


@dataclass(frozen=True)
class FoliageMarker:
    renderers: tuple

    def to_dict(self) -> dict:
        return {"renderers": list(self.renderers)}


@dataclass
class Node:
    id: str
    name: str
    tag: str
    layer: int
    parent_id: Optional[str] = None
    geometry: Optional[MeshRef] = None
    collider: Optional[ColliderPolicy] = None
    renderer: Optional[RendererPolicy] = None
    children: list = field(default_factory=list)
    lod: Optional[LODPlan] = None
    resource: Optional[ResourceMetadata] = None
    foliage: Optional[FoliageMarker] = None

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> Optional["Node"]:
        return next((n for n in self.walk() if n.name == name), None)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "tag": self.tag,
            "layer": self.layer,
            "parent_id": self.parent_id,
            "geometry": self.geometry.to_dict() if self.geometry else None,
            "collider": self.collider.to_dict() if self.collider else None,
            "renderer": self.renderer.to_dict() if self.renderer else None,
        }
        if self.lod is not None:
            data["lod"] = self.lod.to_dict()
        if self.resource is not None:
            data["resource"] = self.resource.to_dict()
        if self.foliage is not None:
            data["foliage"] = self.foliage.to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class TemplateArtifact:
    """One structural root, persisted as its own template."""
    category: Category
    role: str
    root: Node
    object_name: str = ""

    @property
    def name(self) -> str:
        return f"{self.category.value}_{self.role}"


@dataclass
class GeneratedTree:
    category: Category
    object_name: str
    roots: list = field(default_factory=list)

    def add(self, role: str, root: Node) -> TemplateArtifact:
        artifact = TemplateArtifact(self.category, role, root, self.object_name)
        self.roots.append(artifact)
        return artifact

    def get(self, role: str) -> Optional[TemplateArtifact]:
        return next((a for a in self.roots if a.role == role), None)

    @property
    def artifact_names(self) -> list:
        return [artifact.name for artifact in self.roots]


@dataclass(frozen=True)
class TemplateHandle:
    artifact: str
    path: str
