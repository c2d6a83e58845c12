"""
Local tool configuration — kube contexts and docker registries on this machine.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from deploy_node_app.core.config.loader import ConfigError

logger = logging.getLogger(__name__)


def default_kube_config() -> Path:
    return Path.home() / ".kube" / "config"


def default_docker_config() -> Path:
    return Path.home() / ".docker" / "config.json"


def read_local_kube_contexts(path: Path | None = None) -> list[str]:
    """Context names from a kubeconfig, in file order.

    A missing file yields an empty list.  A present but broken file is
    a ConfigError.
    """
    path = path or default_kube_config()
    if not path.is_file():
        logger.debug("No kubeconfig at %s", path)
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            f"It seems you have a Kubernetes config file at {path}, but it is not valid yaml, or unreadable!"
        ) from e

    contexts: list[str] = []
    for ctx in data.get("contexts") or []:
        if not isinstance(ctx, dict):
            continue
        inner = ctx.get("context") or {}
        name = ctx.get("name") or inner.get("name") or inner.get("cluster")
        if name:
            contexts.append(str(name))
    return contexts


def read_local_docker_registries(path: Path | None = None) -> list[str]:
    """Registry hosts the user is logged in to, from ~/.docker/config.json."""
    path = path or default_docker_config()
    if not path.is_file():
        logger.debug("No docker config at %s", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            f"It seems you have a Docker config.json file at {path}, but it is not valid json, or unreadable!"
        ) from e
    auths = data.get("auths") if isinstance(data, dict) else None
    return list(auths) if isinstance(auths, dict) else []
