"""
Configuration loader — reads package.json and its deploy-node-app block.

The project's own ``package.json`` is both the marker of a Node.js
project and where saved deployment answers live.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deploy_node_app.core.models.answers import DeployAnswers, DeployConfig

logger = logging.getLogger(__name__)

PACKAGE_FILE = "package.json"
CONFIG_KEY = "deploy-node-app"


class ConfigError(Exception):
    """Raised when project configuration is invalid or missing."""


def load_package_json(path: Path) -> dict[str, Any]:
    """Load a package.json as a dict.

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading package config from %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def read_deploy_config(package_json: dict[str, Any]) -> DeployConfig:
    """Extract the deploy-node-app block, defaulting ``name`` to the package name."""
    block = package_json.get(CONFIG_KEY) or {}
    if not isinstance(block, dict):
        raise ConfigError(f'"{CONFIG_KEY}" in {PACKAGE_FILE} must be an object')

    environments: dict[str, DeployAnswers] = {}
    for key, value in block.items():
        if not isinstance(value, dict):
            continue
        try:
            environments[key] = DeployAnswers.model_validate(value)
        except ValidationError as e:
            raise ConfigError(f'Invalid saved answers for environment "{key}": {e}') from e

    name = block.get("name") if isinstance(block.get("name"), str) else ""
    config = DeployConfig(
        name=name or str(package_json.get("name") or ""),
        environments=environments,
    )
    logger.info("Loaded deploy config for '%s' (%d environment(s))", config.name, len(environments))
    return config


def with_saved_answers(
    package_json: dict[str, Any],
    env: str,
    answers: DeployAnswers,
) -> dict[str, Any]:
    """Return a copy of *package_json* with *answers* stored under *env*."""
    updated = copy.deepcopy(package_json)
    block = updated.get(CONFIG_KEY)
    if not isinstance(block, dict):
        block = {}
    block[env] = answers.model_dump(exclude_defaults=False)
    updated[CONFIG_KEY] = block
    return updated


def dump_package_json(package_json: dict[str, Any]) -> str:
    """Serialize package.json the way npm does: two-space indent, trailing newline."""
    return json.dumps(package_json, indent=2, ensure_ascii=False) + "\n"
