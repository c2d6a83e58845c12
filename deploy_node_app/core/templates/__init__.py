"""
Bundled file templates.

YAML templates are deep-merged with per-project properties before being
reconciled; everything else is copied verbatim.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent


def template_path(name: str) -> Path:
    """Absolute path of a bundled template. Raises if it does not exist."""
    path = TEMPLATE_DIR / name
    if not path.is_file():
        raise FileNotFoundError(
            f"No bundled template named {name!r} (available: {', '.join(available_templates())})"
        )
    return path


def load_template(name: str) -> str:
    """Read a bundled template as text."""
    path = template_path(name)
    logger.debug("Loading template %s", path)
    return path.read_text(encoding="utf-8")


def available_templates() -> list[str]:
    return sorted(p.name for p in TEMPLATE_DIR.iterdir() if p.is_file() and p.suffix != ".py")
