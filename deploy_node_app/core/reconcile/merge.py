"""
Template merge — structured template plus property overlay.

Overlay keys win at every nesting level.  Lists are replaced wholesale,
never concatenated or merged index by index.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import yaml

from deploy_node_app.core.reconcile.errors import ContentSourceError
from deploy_node_app.core.templates import load_template

logger = logging.getLogger(__name__)


def deep_merge(template: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Return a new mapping with *overlay* laid over *template*.

    Neither argument is modified.
    """
    merged = copy.deepcopy(template)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def dump_yaml(data: Any) -> str:
    """Serialize a manifest the way every generated YAML file is written."""
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def render_template(name: str, properties: dict[str, Any] | None = None) -> str:
    """Render a bundled template, applying *properties* to YAML templates.

    Non-YAML templates (Dockerfile, .dockerignore) are returned verbatim
    and cannot take an overlay.
    """
    raw = load_template(name)
    if not name.endswith((".yaml", ".yml")):
        if properties:
            raise ContentSourceError(f"Template {name!r} is not YAML and cannot take properties")
        return raw
    if not properties:
        return raw

    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ContentSourceError(f"Template {name!r} must be a YAML mapping to take properties")
    logger.debug("Merging %d top-level properties into %s", len(properties), name)
    return dump_yaml(deep_merge(data, properties))
