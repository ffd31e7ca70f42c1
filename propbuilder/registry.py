"""Tag/layer registry with a per-process lookup cache."""

import json
import logging
import pathlib

from .constants import DEFAULT_LAYERS, LAYERS_FILE, NO_LAYER

logger = logging.getLogger(__name__)


class TagLayerRegistry:
    """Resolve layer names to ids.

    Lookups are memoized; each key is written once and only read after
    that, so one instance can be shared between generations.  Unknown
    names resolve to NO_LAYER rather than failing, since a missing layer
    never blocks geometry generation.
    """

    def __init__(self, layers=None):
        self._layers = dict(DEFAULT_LAYERS if layers is None else layers)
        self._cache = {}

    @classmethod
    def from_file(cls, path) -> "TagLayerRegistry":
        """Defaults overlaid with a JSON object of ``{"name": id}`` pairs."""
        data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
        layers = dict(DEFAULT_LAYERS)
        layers.update({str(k): int(v) for k, v in data.items()})
        logger.info(f"Loaded {len(data)} layer definitions from {path}")
        return cls(layers)

    def resolve(self, name: str) -> int:
        if name in self._cache:
            return self._cache[name]
        layer = self._layers.get(name, NO_LAYER)
        if layer == NO_LAYER:
            logger.warning(f"Layer '{name}' is not defined — using no layer")
        self._cache[name] = layer
        return layer

    @property
    def cached(self) -> dict:
        return dict(self._cache)


def default_registry() -> TagLayerRegistry:
    """Registry from PROPBUILDER_LAYERS_FILE, or the built-in layer table."""
    if LAYERS_FILE:
        return TagLayerRegistry.from_file(LAYERS_FILE)
    return TagLayerRegistry()
