"""Configuration constants and .env loading.

WHY: A few defaults (the conventional version-tag field name, CLI log
level, JSON indentation) differ between deployments. Keeping them in one
module makes them easy to find and override without touching code.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values read from environment variables with fallbacks.

RULES:
- DEFAULT_PROPERTY_NAME is used when a model does not name its tag field
- Values are read once at import; registration captures them at that time
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Version tag
# ---------------------------------------------------------------------------

DEFAULT_PROPERTY_NAME = os.getenv("MODEL_VERSIONING_PROPERTY_NAME", "modelVersion")
"""Field name carrying the version tag when a model does not set property_name."""

# ---------------------------------------------------------------------------
# CLI defaults
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("MODEL_VERSIONING_LOG_LEVEL", "WARNING").upper()


def _parse_indent(raw: Optional[str]) -> Optional[int]:
    """Parse the JSON indent setting; empty or non-numeric means compact output."""
    if raw is None or not raw.strip().isdigit():
        return None
    return int(raw.strip())


DEFAULT_JSON_INDENT = _parse_indent(os.getenv("MODEL_VERSIONING_JSON_INDENT"))
