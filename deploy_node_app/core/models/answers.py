"""
Deployment answers and project deploy config.

Answers are what the user told us about one environment (port,
entrypoint, registry, ...).  They are saved into ``package.json`` under
the ``deploy-node-app`` key so the next run does not ask again.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_RE = re.compile(r"^[a-z0-9_-]+$")


def validate_env_name(value: str) -> str:
    """Environment names: lowercase, 3+ chars, letters/digits/dashes/underscores."""
    if value != value.lower():
        raise ValueError("environment names must be lowercase")
    if len(value) < 3:
        raise ValueError("environment names must be longer than 2 characters")
    if not _ENV_RE.match(value):
        raise ValueError("environment names need to be numbers, letters, and dashes only")
    return value


class DeployAnswers(BaseModel):
    """Per-environment deployment parameters."""

    model_config = ConfigDict(extra="allow")

    port: int = Field(default=3000, ge=1, le=65535)
    protocol: Literal["http", "https", "tcp"] = "http"
    entrypoint: str = "index.js"
    context: str = ""
    registry: str = ""
    namespace: str = ""

    @field_validator("port", mode="before")
    @classmethod
    def _port_from_str(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            if not v.isdigit():
                raise ValueError("ports must be numbers!")
            return int(v)
        return v


class DeployConfig(BaseModel):
    """The ``deploy-node-app`` block of a package.json.

    Attributes:
        name:         Application name (defaults to the package name).
        environments: Saved answers keyed by environment name.
    """

    name: str = ""
    environments: dict[str, DeployAnswers] = Field(default_factory=dict)

    def answers_for(self, env: str) -> DeployAnswers | None:
        return self.environments.get(env)
