"""
Deployment questions — ask once per environment, then reuse.

Prompts go to stderr so that ``--output -`` keeps stdout clean for the
generated files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from deploy_node_app.core.models.answers import DeployAnswers, validate_env_name
from deploy_node_app.core.services.detection import Language

logger = logging.getLogger(__name__)


def _validated(validator):
    """Adapt a ValueError-raising validator to click's value_proc."""

    def proc(value: str) -> str:
        try:
            return validator(value)
        except ValueError as e:
            raise click.UsageError(str(e)) from e

    return proc


def prompt_env(default: str = "production") -> str:
    return click.prompt(
        "Which environment are you deploying to?",
        default=default,
        value_proc=_validated(validate_env_name),
        err=True,
    )


def prompt_answers(
    root: Path,
    language: Language,
    fmt: str,
    *,
    saved: DeployAnswers | None = None,
    registries: list[str] | None = None,
    contexts: list[str] | None = None,
) -> DeployAnswers:
    """Return saved answers when present, otherwise ask for each one."""
    if saved is not None:
        logger.info("Using saved answers from package.json")
        return saved

    port = click.prompt(
        "What port does your application listen on?",
        default=language.default_port,
        type=click.IntRange(1, 65535),
        err=True,
    )
    protocol = click.prompt(
        "Which protocol does your application speak?",
        default="http",
        type=click.Choice(["http", "https", "tcp"]),
        err=True,
    )

    def _entrypoint_exists(value: str) -> str:
        if language.uses_package_json and not (root / value).is_file():
            raise ValueError("That file doesn't seem to exist")
        return value

    entrypoint = click.prompt(
        "Where is your application's entrypoint?",
        default=language.default_entrypoint,
        value_proc=_validated(_entrypoint_exists),
        err=True,
    )

    context = ""
    if fmt == "k8s":
        contexts = contexts or []
        context = click.prompt(
            "Which Kubernetes context do you want to use?",
            default=contexts[0] if contexts else "",
            type=click.Choice(contexts) if contexts else click.STRING,
            err=True,
        )

    registries = registries or []
    registry = click.prompt(
        "Which docker registry do you want to use?",
        default=registries[0] if registries else "docker.io",
        err=True,
    )

    return DeployAnswers(
        port=port,
        protocol=protocol,
        entrypoint=entrypoint,
        context=context,
        registry=registry,
    )
