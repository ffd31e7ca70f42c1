from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union


class AssetRef(BaseModel):
    name: Optional[str] = None
    path: Optional[str] = None


class MaterialInput(BaseModel):
    name: str
    shader: str = "Standard"
    color: List[float] = Field(default_factory=lambda: [1.0, 1.0, 1.0, 1.0])
    texture: Optional[Union[str, AssetRef]] = None


class ModelPair(BaseModel):
    trunk: Optional[Union[str, AssetRef]] = None
    leaves: Optional[Union[str, AssetRef]] = None


class GenerateRequest(BaseModel):
    category: Literal["Standard", "Resource", "Tree", "Bush"]
    name: str = ""
    main_mesh: Optional[Union[str, AssetRef]] = None
    metal_mesh: Optional[Union[str, AssetRef]] = None
    stump_mesh: Optional[Union[str, AssetRef]] = None
    trunk_mesh: Optional[Union[str, AssetRef]] = None
    leaves_mesh: Optional[Union[str, AssetRef]] = None
    extra_pairs: List[ModelPair] = Field(default_factory=list)
    bush_models: List[Optional[Union[str, AssetRef]]] = Field(default_factory=list)
    forage_mesh: Optional[Union[str, AssetRef]] = None
    skybox_mesh: Optional[Union[str, AssetRef]] = None
    child_meshes: List[Optional[Union[str, AssetRef]]] = Field(default_factory=list)
    main_material: Optional[Union[str, MaterialInput]] = None
    physics_material: Optional[Union[str, AssetRef]] = None
    trunk_texture: Optional[Union[str, AssetRef]] = None
    leaves_texture: Optional[Union[str, AssetRef]] = None
    bush_texture: Optional[Union[str, AssetRef]] = None
    create_skybox: bool = False
    configure_lod: bool = False
    use_lod_preset: bool = True
    use_custom_lod_settings: bool = False
    has_forage: bool = False
    lod_bias: float = 1.0
    culling_distance: float = 100.0
    shadow_distance: float = 50.0
    transition_thresholds: List[float] = Field(default_factory=lambda: [1.0])

    def to_spec_dict(self) -> dict:
        """Plain dict accepted by propbuilder.object_spec_from_dict."""
        return self.model_dump(exclude_none=True)


class JobResponse(BaseModel):
    job_id: str
    status: str
    category: str
    progress: float
    message: str
    failed_stage: Optional[str] = None
    result: Optional[dict] = None


class TemplateInfo(BaseModel):
    name: str
    category: str
    filename: str
    object_name: Optional[str] = None
    has_preview: bool = False
