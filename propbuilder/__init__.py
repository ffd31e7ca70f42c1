"""PropBuilder: object templates (LOD groups, colliders, node trees) from artist assets.

Import constants FIRST so logging and .env settings are in place before
any other module logs.
"""

from propbuilder import constants as _constants  # noqa: F401

from propbuilder.builder import PropBuilder
from propbuilder.errors import (GenerationError, PlanError, PropBuilderError,
                                ResolutionFailure, StoreError, ValidationError)
from propbuilder.inputs import load_object_spec, object_spec_from_dict
from propbuilder.models import Category, ObjectSpec
from propbuilder.store import FileTemplateStore, TemplateStore
