import logging
from pathlib import Path
from typing import List

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from backend import config
from backend.models import TemplateInfo
from propbuilder.assemblers import list_categories
from propbuilder.models import Category, PathManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["templates"])


@router.get("/categories", response_model=List[str])
async def get_categories():
    """Return the object categories the generator supports."""
    return list_categories()


@router.get("/templates", response_model=List[TemplateInfo])
async def list_templates():
    """Return metadata for every template in the output directory."""
    templates: list[TemplateInfo] = []
    for category in Category:
        folder: Path = PathManager.get_category_folder(category, config.OUTPUT_DIR)
        if not folder.exists():
            continue
        for template_file in sorted(folder.rglob("*.json")):
            relative = template_file.relative_to(folder)
            templates.append(
                TemplateInfo(
                    name=template_file.stem,
                    category=category.value,
                    filename=relative.as_posix(),
                    object_name=relative.parent.as_posix() if relative.parent != Path(".") else None,
                    has_preview=template_file.with_suffix(".glb").exists(),
                )
            )
    return templates


@router.get("/templates/{category}/{filename:path}")
async def get_template(category: str, filename: str):
    """Serve one template (``.json``) or its preview (``.glb``)."""
    try:
        folder = PathManager.get_category_folder(Category(category), config.OUTPUT_DIR)
    except ValueError:
        raise HTTPException(status_code=404, detail="Unknown category")

    file_path = (folder / filename).resolve()
    if folder.resolve() not in file_path.parents:
        raise HTTPException(status_code=404, detail="Template file not found")
    if not file_path.exists() or not file_path.is_file():
        raise HTTPException(status_code=404, detail="Template file not found")

    media_type = ("model/gltf-binary" if file_path.suffix == ".glb"
                  else "application/json")
    return FileResponse(
        path=str(file_path),
        media_type=media_type,
        filename=file_path.name,
    )
