"""Generation entry point: validate a spec, assemble its roots, save templates."""

import logging

from .assemblers import AssemblyContext, get_assembler
from .constants import TEMPLATE_FOLDER
from .errors import GenerationError, ValidationError
from .materials import MaterialFallbackResolver
from .models import Category, GeneratedTree, MaterialKind, ObjectSpec
from .nodes import NodeBuilder
from .registry import TagLayerRegistry, default_registry
from .store import FileTemplateStore, TemplateStore

logger = logging.getLogger(__name__)


class PropBuilder:
    def __init__(self, store: TemplateStore = None,
                 registry: TagLayerRegistry = None,
                 resolver: MaterialFallbackResolver = None):
        """
        store: where templates are persisted (file store under OUTPUT_DIR
            by default).
        registry: layer lookup shared by every generation of this builder.
        resolver: texture-to-material resolution with fallbacks.
        """
        self.store = store if store is not None else FileTemplateStore()
        self.registry = registry if registry is not None else default_registry()
        self.resolver = resolver if resolver is not None else MaterialFallbackResolver()

    def _context(self) -> AssemblyContext:
        return AssemblyContext(nodes=NodeBuilder(self.registry),
                               resolver=self.resolver)

    def validate(self, spec: ObjectSpec) -> None:
        errors = spec.validation_errors()
        if errors:
            logger.error(f"Invalid {spec.category.value} spec: {'; '.join(errors)}")
            raise ValidationError(errors)

    def _pre_resolve(self, spec: ObjectSpec, ctx: AssemblyContext) -> None:
        """Trees need both materials before any node is built."""
        ctx.material(MaterialKind.Trunk, spec.trunk_texture)
        ctx.material(MaterialKind.Leaves, spec.leaves_texture)

    def build_tree(self, spec: ObjectSpec) -> GeneratedTree:
        """Validate and assemble *spec* without persisting anything."""
        self.validate(spec)
        ctx = self._context()
        if spec.category is Category.Tree:
            self._pre_resolve(spec, ctx)
        return get_assembler(spec.category).assemble(spec, ctx)

    def generate(self, spec: ObjectSpec, progress_callback=None) -> list:
        """Generate and save every template for *spec*.

        Returns one TemplateHandle per saved artifact.  ValidationError is
        raised before anything is touched; later failures are raised as
        GenerationError naming the stage and target path.  Artifacts saved
        before a failure are left in place.
        """
        def _progress(pct, msg):
            if progress_callback:
                progress_callback(pct, msg)

        _progress(5, "Validating spec...")
        self.validate(spec)

        target = "/".join(p for p in (TEMPLATE_FOLDER, spec.category.folder,
                                      spec.name) if p)
        stage = "prepare"
        try:
            _progress(15, "Preparing target folder...")
            target = self.store.ensure_folder(spec.category, spec.name)
            ctx = self._context()

            if spec.category is Category.Tree:
                stage = "resolve"
                _progress(30, "Resolving materials...")
                self._pre_resolve(spec, ctx)

            stage = "assemble"
            _progress(50, f"Assembling {spec.category.value} object...")
            tree = get_assembler(spec.category).assemble(spec, ctx)

            stage = "save"
            handles = []
            for i, artifact in enumerate(tree.roots):
                _progress(60 + 35 * i / len(tree.roots),
                          f"Saving {artifact.name}...")
                handles.append(self.store.save(artifact, target))
        except Exception as e:
            logger.error(f"Error generating templates: {e} (stage: {stage}, "
                         f"path: {target})")
            raise GenerationError(stage, target, e) from e

        _progress(100, "Templates generated")
        logger.info(f"Generated {len(handles)} templates in {target}")
        return handles
