import os
import pathlib

# Importing propbuilder.constants loads .env before the variables below are read
from propbuilder.constants import OUTPUT_DIR, PREVIEW  # noqa: F401

BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "PROPBUILDER_CORS_ORIGINS",
        "http://localhost:5174,http://127.0.0.1:5174").split(",")
    if origin.strip()
]
