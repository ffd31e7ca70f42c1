"""LOD band planning.

Turns transition parameters into an ordered list of LOD bands, most
detailed first.  Every plan ends with a synthetic culled band
(threshold 0, no renderers).  Thresholds are percentages of screen
height, matching what the runtime LOD group expects after dividing by
100.
"""

import logging
from dataclasses import replace

from .constants import (CUSTOM_SEED_TRANSITION, DEFAULT_CULLING_DISTANCES,
                        DEFAULT_NEAR_TRANSITION, DEFAULT_SHADOW_DISTANCES,
                        FIXED_NEAR_TRANSITION, LOD_PRESETS, MAX_TRANSITION,
                        MIN_TRANSITION, SHADOWED_BAND_LIMIT)
from .errors import PlanError
from .models import Category, LODBand, LODConfig, LODPlan

logger = logging.getLogger(__name__)

CULLED_BAND = LODBand(threshold=0.0)


def clamp_transition(value: float) -> float:
    return max(MIN_TRANSITION, min(MAX_TRANSITION, value))


def preset_transitions(category: Category, lod_bias: float) -> list:
    """Category preset thresholds scaled by *lod_bias* and clamped."""
    return [clamp_transition(t * lod_bias) for t in LOD_PRESETS[category.value]]


def casts_shadows(index: int) -> bool:
    """Only the three most detailed bands cast and receive shadows."""
    return index <= SHADOWED_BAND_LIMIT


def _transitions_for(config: LODConfig) -> list:
    if not config.configure_lod:
        return [DEFAULT_NEAR_TRANSITION]
    if config.use_preset:
        return preset_transitions(config.category, config.lod_bias)
    thresholds = list(config.transition_thresholds)
    if not thresholds:
        thresholds = [CUSTOM_SEED_TRANSITION]
    return thresholds


def plan_lod_bands(config: LODConfig, primary, child_geometry=()) -> LODPlan:
    """Derive the LOD bands for one object.

    Band 0 shows *primary*; band ``i >= 1`` shows ``child_geometry[i-1]``
    when it exists, otherwise nothing is visible at that distance.
    Raises PlanError when *primary* is missing.
    """
    if primary is None:
        raise PlanError(f"No primary geometry for {config.category.value} LOD group")

    # sorted() is stable, so equal thresholds keep their input order
    transitions = sorted(_transitions_for(config), reverse=True)
    child_geometry = list(child_geometry)

    bands = []
    for i, threshold in enumerate(transitions):
        if i == 0:
            geometry = (primary,)
        elif i - 1 < len(child_geometry) and child_geometry[i - 1] is not None:
            geometry = (child_geometry[i - 1],)
        else:
            logger.debug(f"LOD_{i} has no geometry — band renders nothing")
            geometry = ()
        shadowed = casts_shadows(i)
        bands.append(LODBand(threshold=threshold, cast_shadows=shadowed,
                             receive_shadows=shadowed, geometry=geometry))
    bands.append(CULLED_BAND)

    plan = LODPlan(bands=tuple(bands), size=config.size,
                   shadow_distance=config.effective_shadow_distance)
    logger.debug(f"Planned {len(bands)} LOD bands for {config.category.value} "
                 f"(size={plan.size})")
    return plan


def fixed_band_plan(category: Category, geometry,
                    threshold: float = FIXED_NEAR_TRANSITION) -> LODPlan:
    """A single very-near band showing every mesh in *geometry* at once."""
    geometry = tuple(geometry)
    if not geometry:
        raise PlanError(f"No geometry for {category.value} fixed LOD group")
    band = LODBand(threshold=threshold, cast_shadows=True,
                   receive_shadows=True, geometry=geometry)
    return LODPlan(bands=(band, CULLED_BAND),
                   size=DEFAULT_CULLING_DISTANCES[category.value],
                   shadow_distance=DEFAULT_SHADOW_DISTANCES[category.value])


def bind_renderers(band: LODBand, node_ids) -> LODBand:
    """Return a copy of *band* pointing at the nodes that render it."""
    return replace(band, renderers=tuple(node_ids))
