"""Image tag naming for builds and deployments."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel

from deploy_node_app.core.models.answers import DeployAnswers
from deploy_node_app.core.services.docker_common import ToolError, run_tool

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9._/-]+")


class DeployTags(BaseModel):
    """``env`` is the moving tag for the environment; ``hash`` pins a commit."""

    env: str
    hash: str


def image_name(app_name: str, registry: str = "") -> str:
    """Docker-safe repository name, prefixed with the registry when given."""
    name = _UNSAFE.sub("-", app_name.lower().lstrip("@")).strip("-")
    return f"{registry.rstrip('/')}/{name}" if registry else name


def _git_short_sha(root: Path) -> str:
    try:
        return run_tool("git", "rev-parse", "--short", "HEAD", cwd=root, timeout=10)
    except ToolError:
        logger.debug("No git revision available in %s", root)
        return ""


def deploy_tags(app_name: str, env: str, answers: DeployAnswers, root: Path) -> DeployTags:
    """Compute the tags a build is pushed under.

    Without a git revision the hash tag falls back to the environment tag.
    """
    repo = image_name(app_name, answers.registry)
    sha = _git_short_sha(root)
    env_tag = f"{repo}:{env}"
    return DeployTags(env=env_tag, hash=f"{repo}:{sha}" if sha else env_tag)
