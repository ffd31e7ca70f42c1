"""Build ObjectSpecs from JSON-style dictionaries and spec files.

Asset references may be given as a path string or as an object with
``name`` and ``path`` keys::

    {
      "category": "Resource",
      "name": "IronOre",
      "main_mesh": "meshes/ore.obj",
      "metal_mesh": {"name": "OreMetal", "path": "meshes/ore_metal.obj"},
      "stump_mesh": "meshes/ore_stump.obj",
      "main_material": {"name": "Ore", "color": [0.5, 0.5, 0.5, 1.0]}
    }
"""

import json
import logging
import pathlib
from dataclasses import fields

from .constants import DEFAULT_SHADER
from .models import (Category, MaterialRef, MeshRef, ObjectSpec,
                     PhysicsMaterialRef, ShaderRef, TextureRef)

logger = logging.getLogger(__name__)

_MESH_FIELDS = ("main_mesh", "metal_mesh", "stump_mesh", "trunk_mesh",
                "leaves_mesh", "forage_mesh", "skybox_mesh")
_TEXTURE_FIELDS = ("trunk_texture", "leaves_texture", "bush_texture")
_BOOL_FIELDS = ("create_skybox", "configure_lod", "use_lod_preset",
                "use_custom_lod_settings", "has_forage")
_FLOAT_FIELDS = ("lod_bias", "culling_distance", "shadow_distance")
# String values that are names, never file paths.
_NAME_KEYS = ("category", "name", "shader", "main_material")


def _ref(cls, value):
    if value is None:
        return None
    if isinstance(value, str):
        return cls(name=pathlib.PurePath(value).stem, path=value)
    if not isinstance(value, dict):
        raise ValueError(f"{cls.__name__} must be a path or an object: {value!r}")
    path, name = value.get("path"), value.get("name")
    if not isinstance(path, (str, type(None))) or not isinstance(name, (str, type(None))):
        raise ValueError(f"{cls.__name__} name and path must be strings: {value!r}")
    name = name or (pathlib.PurePath(path).stem if path else None)
    if not name:
        raise ValueError(f"{cls.__name__} needs a name or a path: {value!r}")
    return cls(name=name, path=path)


def _material(value):
    if value is None:
        return None
    if isinstance(value, str):
        return MaterialRef(name=value, shader=ShaderRef(DEFAULT_SHADER))
    if not isinstance(value, dict) or not isinstance(value.get("name"), str) \
            or not value["name"]:
        raise ValueError(f"main_material needs a name: {value!r}")
    color = value.get("color", (1.0, 1.0, 1.0, 1.0))
    try:
        color = tuple(float(c) for c in color)
    except (TypeError, ValueError):
        raise ValueError(f"main_material color must be a list of numbers: "
                         f"{color!r}") from None
    if len(color) != 4:
        raise ValueError(f"main_material color needs 4 components (RGBA): {color!r}")
    return MaterialRef(
        name=value["name"],
        shader=ShaderRef(str(value.get("shader") or DEFAULT_SHADER)),
        color=color,
        texture=_ref(TextureRef, value.get("texture")),
    )


def _pair(value):
    if isinstance(value, dict):
        trunk, leaves = value.get("trunk"), value.get("leaves")
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        trunk, leaves = value
    else:
        raise ValueError(f"model pair must be [trunk, leaves] or "
                         f"{{'trunk', 'leaves'}}: {value!r}")
    return _ref(MeshRef, trunk), _ref(MeshRef, leaves)


def _list(data: dict, key: str) -> list:
    """A list-valued key; missing or null reads as empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _float(key: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {value!r}") from None


def object_spec_from_dict(data: dict) -> ObjectSpec:
    """Convert a plain dictionary into an ObjectSpec.

    Raises ValueError for an unknown category or any malformed value.
    Unknown keys are ignored with a warning.
    """
    if not isinstance(data, dict):
        raise ValueError(f"spec must be a JSON object, got {type(data).__name__}")
    if "category" not in data:
        raise ValueError("spec has no 'category'")
    try:
        category = Category(data["category"])
    except (TypeError, ValueError):
        raise ValueError(f"Unknown category: {data['category']!r}") from None

    known = {f.name for f in fields(ObjectSpec)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown spec keys: {', '.join(unknown)}")

    name = data.get("name") or ""
    if not isinstance(name, str):
        raise ValueError(f"name must be a string, got {name!r}")
    kwargs = {"category": category, "name": name}
    for key in _MESH_FIELDS:
        kwargs[key] = _ref(MeshRef, data.get(key))
    for key in _TEXTURE_FIELDS:
        kwargs[key] = _ref(TextureRef, data.get(key))
    for key in _BOOL_FIELDS:
        if data.get(key) is None:
            continue
        if not isinstance(data[key], bool):
            raise ValueError(f"{key} must be true or false, got {data[key]!r}")
        kwargs[key] = data[key]
    for key in _FLOAT_FIELDS:
        if data.get(key) is not None:
            kwargs[key] = _float(key, data[key])

    kwargs["main_material"] = _material(data.get("main_material"))
    kwargs["physics_material"] = _ref(PhysicsMaterialRef,
                                      data.get("physics_material"))
    kwargs["child_meshes"] = tuple(_ref(MeshRef, m)
                                   for m in _list(data, "child_meshes"))
    kwargs["bush_models"] = tuple(_ref(MeshRef, m)
                                  for m in _list(data, "bush_models"))
    kwargs["extra_pairs"] = tuple(_pair(p) for p in _list(data, "extra_pairs"))
    if data.get("transition_thresholds") is not None:
        kwargs["transition_thresholds"] = tuple(
            _float("transition_thresholds", t)
            for t in _list(data, "transition_thresholds"))
    return ObjectSpec(**kwargs)


def load_object_spec(spec_path) -> ObjectSpec:
    """Read a JSON spec file.

    Relative asset paths are resolved against the spec file's folder.
    """
    path = pathlib.Path(spec_path)
    data = json.loads(path.read_text(encoding="utf-8"))
    return object_spec_from_dict(_resolve_paths(data, path.resolve().parent))


def _resolve_paths(value, base: pathlib.Path, key: str = ""):
    if isinstance(value, dict):
        return {k: _resolve_paths(v, base, k) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_paths(v, base, key) for v in value]
    if isinstance(value, str) and key not in _NAME_KEYS:
        candidate = pathlib.Path(value)
        if not candidate.is_absolute():
            return str(base / candidate)
    return value
