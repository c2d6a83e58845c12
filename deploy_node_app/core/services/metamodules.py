"""
Meta-modules — npm dependencies that describe a backing service.

A meta-module is a dependency whose package.json carries a
``deploy-node-app`` block with ``"metamodule": true``.  It may ship a
``docker-compose.yaml`` (compose mode), a ``kustomization.yaml``
(Kubernetes mode), environment variables, and named ports.

Example block::

    "deploy-node-app": {
      "metamodule": true,
      "containerName": "redis",
      "ports": {"REDIS_PORT": "6379/tcp"},
      "host": "REDIS_HOST",
      "env": {"REDIS_DB": "0"}
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from deploy_node_app.core.config.loader import CONFIG_KEY, ConfigError
from deploy_node_app.core.services.docker_common import detect_compose_ports

logger = logging.getLogger(__name__)


def find_meta_modules(root: Path, package_json: dict[str, Any]) -> list[dict[str, Any]]:
    """Package.json blobs of every installed dependency flagged as a meta-module."""
    found: list[dict[str, Any]] = []
    for dep in (package_json.get("dependencies") or {}):
        dep_file = root / "node_modules" / dep / "package.json"
        try:
            data = json.loads(dep_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            continue
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unable to load %s: %s", dep_file, e)
            continue
        block = data.get(CONFIG_KEY) if isinstance(data, dict) else None
        if isinstance(block, dict) and block.get("metamodule") is True:
            data.setdefault("name", dep)
            found.append(data)
    logger.debug("Found %d meta-module(s)", len(found))
    return found


def _module_env(root: Path, mm: dict[str, Any]) -> dict[str, str]:
    metadata = mm[CONFIG_KEY]
    env: dict[str, str] = {k: str(v) for k, v in (metadata.get("env") or {}).items()}

    config_file = metadata.get("config")
    if config_file:
        path = root / "node_modules" / mm["name"] / config_file
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(
                f'Unable to include MetaModule "{mm["name"]}"\'s configuration file "{config_file}": {e}'
            ) from e
        if not isinstance(data, dict):
            raise ConfigError(f'MetaModule "{mm["name"]}" config file "{config_file}" must be a JSON object')
        env.update({k: str(v) for k, v in data.items()})
    return env


def generate_local_env(
    root: Path,
    meta_modules: list[dict[str, Any]],
    detect_ports: str | None = None,
) -> dict[str, str]:
    """Collect environment variables from every meta-module.

    Args:
        detect_ports: ``"compose"`` to resolve host ports through
            docker-compose; ``None`` to skip port detection.
    """
    if detect_ports not in (None, "compose"):
        raise ConfigError("Port detection is only available via docker-compose for now, sorry!")

    env_vars: dict[str, str] = {}
    for mm in meta_modules:
        metadata = mm[CONFIG_KEY]
        for key, value in _module_env(root, mm).items():
            if key in env_vars:
                logger.warning(
                    'MetaModule "%s" overwrites an already existing environment variable, "%s"!',
                    mm["name"], key,
                )
            env_vars[key] = value

        if detect_ports:
            name = metadata.get("containerName") or mm["name"].split("/")[-1]
            for port_name, port_spec in (metadata.get("ports") or {}).items():
                env_vars.update(detect_compose_ports(root, name, port_name, str(port_spec)))

        # Local runs assume the services are published on this machine
        if metadata.get("host"):
            env_vars[metadata["host"]] = "localhost"
    return env_vars


def format_env_file(env_vars: dict[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in env_vars.items())


def build_compose_file(root: Path, meta_modules: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge the compose services every meta-module ships."""
    services: dict[str, Any] = {}
    for mm in meta_modules:
        path = root / "node_modules" / mm["name"] / "docker-compose.yaml"
        if not path.is_file():
            logger.warning("%s doesn't support Docker Compose mode", mm["name"])
            continue
        try:
            config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid compose file {path}: {e}") from e
        services.update(config.get("services") or {})
    return {"version": "2", "services": services}


def build_kustomization(
    root: Path,
    meta_modules: list[dict[str, Any]],
    resources: list[str],
    config_dir: str = "inf",
) -> dict[str, Any]:
    """Kustomization listing our resources plus every meta-module base."""
    depth = len(Path(config_dir).parts)
    prefix = "/".join([".."] * depth)
    bases: list[str] = []
    for mm in meta_modules:
        if (root / "node_modules" / mm["name"] / "kustomization.yaml").is_file():
            bases.append(f"{prefix}/node_modules/{mm['name']}")
        else:
            logger.warning("%s doesn't support Kustomize mode", mm["name"])

    kustomization: dict[str, Any] = {"resources": list(resources)}
    if bases:
        kustomization["bases"] = bases
    return kustomization
