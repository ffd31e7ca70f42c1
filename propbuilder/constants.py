"""Configuration constants, paths, category tables and logging setup."""

import os
import pathlib
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ── Category tables ──────────────────────────────────────────────────────
# Keys are Category values (see models.Category).
CATEGORY_FOLDERS = {
    'Standard': 'Standard',
    'Resource': 'Resources',
    'Tree': 'Trees',
    'Bush': 'Bushes',
}

# Single preset transition (percent of screen height) per category,
# scaled by the LOD bias.
LOD_PRESETS = {
    'Standard': [1.0],
    'Resource': [1.0],
    'Tree': [1.0],
    'Bush': [1.0],
}

DEFAULT_CULLING_DISTANCES = {
    'Standard': 100.0,
    'Resource': 100.0,
    'Tree': 200.0,
    'Bush': 50.0,
}

DEFAULT_SHADOW_DISTANCES = {
    'Standard': 50.0,
    'Resource': 50.0,
    'Tree': 100.0,
    'Bush': 25.0,
}

# Harvest metadata attached to the main object root.
RESOURCE_DEFAULTS = {
    'Resource': {'health': 100, 'drop_count': 5},
    'Tree':     {'health': 100, 'drop_count': 5},
    'Bush':     {'health': 50, 'drop_count': 3},
}

# ── LOD ──────────────────────────────────────────────────────────────────
MIN_TRANSITION = 0.01          # percent
MAX_TRANSITION = 100.0         # percent
DEFAULT_NEAR_TRANSITION = 10.0 # single band when LOD is not configured
FIXED_NEAR_TRANSITION = 1.0    # resource / stump groups
CUSTOM_SEED_TRANSITION = 1.0   # seeds an empty custom list
MIN_LOD_BIAS = 0.1
MAX_LOD_BIAS = 2.0
SHADOWED_BAND_LIMIT = 2        # bands 0..2 cast and receive shadows

# ── Materials ────────────────────────────────────────────────────────────
DEFAULT_SHADER = "Standard"
FOLIAGE_SHADER = os.environ.get("PROPBUILDER_FOLIAGE_SHADER", "Nature/Foliage")
FOLIAGE_ALPHA_CUTOFF = 0.5
FOLIAGE_WIND = (1.0, 0.5, 0.25, 0.1)   # sway strength, speed, turbulence, phase
ALPHA_TEST_QUEUE = 2450
GEOMETRY_QUEUE = 2000

# Solid fallback colours (RGBA, 0-1)
FALLBACK_COLORS = {
    'Trunk':  (0.45, 0.30, 0.15, 1.0),   # brown
    'Leaves': (0.20, 0.50, 0.20, 1.0),   # green
    'Bush':   (0.20, 0.50, 0.20, 1.0),   # green
}

# ── Tags and layers ──────────────────────────────────────────────────────
NAVMESH_TAG = "Navmesh"
FORAGE_TAG = "Forage"
NO_LAYER = -1

DEFAULT_LAYERS = {
    'Default': 0,
    'Navmesh': 8,
    'Standard': 9,
    'Resource': 10,
    'Tree': 11,
    'Bush': 12,
    'Forage': 13,
}

LAYERS_FILE = os.environ.get("PROPBUILDER_LAYERS_FILE", "").strip() or None

# ── Paths ────────────────────────────────────────────────────────────────
BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()
OUTPUT_DIR = pathlib.Path(
    os.environ.get("PROPBUILDER_OUTPUT_DIR", str(BASE_DIR / "output")))
TEMPLATE_FOLDER = "Objects"
TEMPLATE_FORMAT = "propbuilder-template"
TEMPLATE_VERSION = 1

# Set PROPBUILDER_PREVIEW=1 to write a GLB preview next to each template
PREVIEW = os.environ.get("PROPBUILDER_PREVIEW", "").strip() in ("1", "true", "yes")


def log_level(name) -> str:
    """Upper-cased level name, or INFO when logging does not know it."""
    name = (name or "INFO").strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


LOG_LEVEL = log_level(os.environ.get("PROPBUILDER_LOG_LEVEL"))

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
