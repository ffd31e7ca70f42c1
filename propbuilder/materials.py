"""Texture-to-material resolution with flat-colour fallbacks."""

import logging
import pathlib

from .constants import (ALPHA_TEST_QUEUE, DEFAULT_SHADER, FALLBACK_COLORS,
                        FOLIAGE_ALPHA_CUTOFF, FOLIAGE_SHADER, FOLIAGE_WIND)
from .errors import ResolutionFailure
from .models import MaterialKind, MaterialRef, ShaderRef, TextureRef

logger = logging.getLogger(__name__)


class ShaderRegistry:
    """Nullable shader lookup by name."""

    def __init__(self, shaders=None):
        names = [DEFAULT_SHADER, FOLIAGE_SHADER] if shaders is None else shaders
        self._shaders = {name: ShaderRef(name) for name in names}

    def find(self, name: str):
        return self._shaders.get(name)

    @property
    def default(self) -> ShaderRef:
        return self.find(DEFAULT_SHADER) or ShaderRef(DEFAULT_SHADER)


class MaterialFallbackResolver:
    """Build trunk, leaves and bush materials from optional textures.

    A missing or unreadable texture never stops generation: the caller
    gets a flat-coloured material on the default shader instead.
    """

    def __init__(self, shaders: ShaderRegistry = None):
        self.shaders = shaders if shaders is not None else ShaderRegistry()

    def resolve(self, kind, texture: TextureRef = None) -> MaterialRef:
        kind = MaterialKind(kind)
        if texture is None:
            logger.warning(f"No {kind.value.lower()} texture supplied — "
                           f"using fallback material")
            return self._fallback(kind)
        try:
            self._import_texture(texture)
        except ResolutionFailure as e:
            logger.warning(f"{e} — using fallback {kind.value.lower()} material")
            return self._fallback(kind)
        return self._textured(kind, texture)

    def _import_texture(self, texture: TextureRef) -> None:
        # Textures without a path are in-memory handles owned by the caller.
        if texture.path and not pathlib.Path(texture.path).is_file():
            raise ResolutionFailure(
                f"Texture '{texture.name}' not found at {texture.path}")

    def _foliage_shader(self) -> ShaderRef:
        shader = self.shaders.find(FOLIAGE_SHADER)
        if shader is None:
            logger.warning(f"Shader '{FOLIAGE_SHADER}' not found — "
                           f"using '{self.shaders.default.name}'")
            shader = self.shaders.default
        return shader

    def _textured(self, kind: MaterialKind, texture: TextureRef) -> MaterialRef:
        name = f"{texture.name}_{kind.value}"
        if not kind.is_foliage:
            return MaterialRef(name=name, shader=self.shaders.default,
                               texture=texture)
        return MaterialRef(
            name=name,
            shader=self._foliage_shader(),
            texture=texture,
            alpha_cutoff=FOLIAGE_ALPHA_CUTOFF,
            wind=FOLIAGE_WIND,
            render_queue=ALPHA_TEST_QUEUE,
        )

    def _fallback(self, kind: MaterialKind) -> MaterialRef:
        return MaterialRef(
            name=f"{kind.value}_Fallback",
            shader=self.shaders.default,
            color=FALLBACK_COLORS[kind.value],
            fallback=True,
        )
