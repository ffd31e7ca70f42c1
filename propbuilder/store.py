"""Template persistence."""

import json
import logging
import os
import pathlib
import tempfile
from abc import ABC, abstractmethod

from .constants import OUTPUT_DIR, PREVIEW, TEMPLATE_FORMAT, TEMPLATE_VERSION
from .errors import StoreError
from .models import Category, PathManager, TemplateArtifact, TemplateHandle

logger = logging.getLogger(__name__)


def template_document(artifact: TemplateArtifact) -> dict:
    """JSON-serialisable form of one template."""
    return {
        "format": TEMPLATE_FORMAT,
        "version": TEMPLATE_VERSION,
        "category": artifact.category.value,
        "role": artifact.role,
        "name": artifact.name,
        "object_name": artifact.object_name,
        "root": artifact.root.to_dict(),
    }


def load_template(path) -> dict:
    """Read a template written by FileTemplateStore."""
    data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    if data.get("format") != TEMPLATE_FORMAT:
        raise ValueError(f"{path} is not a {TEMPLATE_FORMAT} file")
    return data


class TemplateStore(ABC):
    """Where generated templates end up."""

    @abstractmethod
    def ensure_folder(self, category: Category, object_name: str = "") -> str:
        """Create (if needed) and return the folder for one object."""
        raise NotImplementedError

    @abstractmethod
    def save(self, artifact: TemplateArtifact, target_path: str) -> TemplateHandle:
        """Persist *artifact* atomically; raise StoreError on failure."""
        raise NotImplementedError


class FileTemplateStore(TemplateStore):
    """Write each template as ``<folder>/<Category>_<Role>.json``.

    Files are written to a temporary sibling and renamed into place, so
    readers never observe a half-written template.  With *preview* on, a
    GLB preview is written next to each template.
    """

    def __init__(self, root=None, preview: bool = PREVIEW):
        self.root = pathlib.Path(root) if root is not None else OUTPUT_DIR
        self.preview = preview

    def ensure_folder(self, category, object_name=""):
        folder = PathManager.get_target_folder(category, object_name, self.root)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(category.folder, str(folder), str(e)) from e
        return str(folder)

    def template_path(self, artifact, target_path) -> pathlib.Path:
        return pathlib.Path(target_path) / f"{artifact.name}.json"

    def save(self, artifact, target_path):
        path = self.template_path(artifact, target_path)
        document = template_document(artifact)

        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{artifact.name}.",
                                            suffix=".tmp", dir=str(path.parent))
        except OSError as e:
            raise StoreError(artifact.name, str(path), str(e)) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(artifact.name, str(path), str(e)) from e

        logger.info(f"Saved template {artifact.name} → {path}")

        if self.preview:
            from .preview import export_preview
            try:
                export_preview(artifact, path.with_suffix(".glb"))
            except Exception as e:
                logger.warning(f"Failed to write preview for {artifact.name}: {e}")

        return TemplateHandle(artifact=artifact.name, path=str(path))
