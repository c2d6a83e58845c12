"""
deploy-node-app — CLI entrypoint.

Usage:
    deploy-node-app --help
    deploy-node-app deploy production
    deploy-node-app init dev --format compose
    deploy-node-app local-env
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from deploy_node_app import __version__
from deploy_node_app.core.observability.logging_config import resolve_level, setup_logging


def _env_name(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    from deploy_node_app.core.models.answers import validate_env_name

    if value is None:
        return None
    try:
        return validate_env_name(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _labels(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for item in value:
        key, sep, val = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        labels[key] = val
    return labels


def _output(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value not in (None, "-"):
        raise click.BadParameter('only "-" (stdout) is supported')
    return value


def _fail(message: str) -> None:
    click.secho(f">> {message}", fg="red", err=True)
    sys.exit(1)


def _policy_and_gateway(update: bool, force: bool, output: str | None):
    from deploy_node_app.core.models.policy import ReconcilePolicy
    from deploy_node_app.core.reconcile import ClickPromptGateway

    policy = ReconcilePolicy.from_flags(update=update, force=force, output=output)
    gateway = ClickPromptGateway() if policy.interactive else None
    return policy, gateway


@click.group()
@click.version_option(version=__version__, prog_name="deploy-node-app")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--directory",
    "-d",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project directory (default: current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    directory: str | None,
) -> None:
    """Develop and deploy Node.js apps with Docker Compose or Kubernetes."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = Path(directory).resolve() if directory else Path.cwd()
    ctx.obj["quiet"] = quiet

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("DNA_LOG_FILE"),
        log_file_level=os.environ.get("DNA_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


def _run_deploy(
    ctx: click.Context,
    env: str,
    fmt: str,
    update: bool,
    force: bool,
    output: str | None,
    build: bool,
    deploy: bool,
    labels: dict[str, str],
    host: str,
    as_json: bool,
) -> None:
    from deploy_node_app.core.config.loader import ConfigError
    from deploy_node_app.core.reconcile import ReconcileError
    from deploy_node_app.core.services.docker_common import ToolError
    from deploy_node_app.core.use_cases.deploy import DeployOptions, run_deploy

    if as_json and output == "-":
        # Generated files already own stdout
        raise click.UsageError("--json cannot be combined with --output -")

    policy, gateway = _policy_and_gateway(update, force, output)
    opts = DeployOptions(
        root=ctx.obj["root"],
        env=env,
        fmt=fmt,
        policy=policy,
        build=build,
        deploy=deploy,
        labels=labels,
        host=host,
        gateway=gateway,
    )
    try:
        result = run_deploy(opts)
    except (ReconcileError, ConfigError, ToolError) as e:
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.deployed and result.tags and not ctx.obj.get("quiet"):
        click.secho(f'✅ Deployed "{result.tags.hash}"', fg="green", bold=True, err=True)
        if result.url:
            click.echo(f"   {result.url}", err=True)


_deploy_options = [
    click.option(
        "--format",
        "fmt",
        type=click.Choice(["k8s", "compose"]),
        default="k8s",
        show_default=True,
        help="Deployment target.",
    ),
    click.option("--update", is_flag=True, help="Review and confirm changes to existing files."),
    click.option("--force", is_flag=True, help="Overwrite existing files without asking."),
    click.option(
        "--output",
        "-o",
        default=None,
        callback=_output,
        help='Use "-" to print generated files to stdout instead of writing them.',
    ),
    click.option("--label", "labels", multiple=True, callback=_labels, help="Extra label (key=value)."),
    click.option("--host", default="", help="Public hostname for the UI service."),
    click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the result as JSON."),
]


def deploy_options(func):
    for option in reversed(_deploy_options):
        func = option(func)
    return func


@cli.command()
@click.argument("env", required=False, default="production", callback=_env_name)
@deploy_options
@click.option("--build/--no-build", default=True, help="Build the docker image.")
@click.option("--deploy/--no-deploy", default=True, help="Push and deploy the image.")
@click.pass_context
def deploy(
    ctx: click.Context,
    env: str,
    fmt: str,
    update: bool,
    force: bool,
    output: str | None,
    labels: dict[str, str],
    host: str,
    as_json: bool,
    build: bool,
    deploy: bool,
) -> None:
    """Write deployment files, then build, push and deploy ENV."""
    _run_deploy(ctx, env, fmt, update, force, output, build, deploy, labels, host, as_json)


@cli.command()
@click.argument("env", required=False, default=None, callback=_env_name)
@deploy_options
@click.pass_context
def init(
    ctx: click.Context,
    env: str | None,
    fmt: str,
    update: bool,
    force: bool,
    output: str | None,
    labels: dict[str, str],
    host: str,
    as_json: bool,
) -> None:
    """Write deployment files for ENV without building or deploying."""
    if env is None:
        from deploy_node_app.core.services.questions import prompt_env

        env = prompt_env()
    _run_deploy(ctx, env, fmt, update, force, output, False, False, labels, host, as_json)


@cli.command("local-env")
@click.option("--update", is_flag=True, help="Review and confirm changes to an existing .env.")
@click.option("--force", is_flag=True, help="Overwrite an existing .env without asking.")
@click.option("--output", "-o", default=None, callback=_output, help='Use "-" to print to stdout.')
@click.option(
    "--detect-ports/--no-detect-ports",
    default=True,
    help="Ask docker-compose for the host ports of running services.",
)
@click.pass_context
def local_env(
    ctx: click.Context,
    update: bool,
    force: bool,
    output: str | None,
    detect_ports: bool,
) -> None:
    """Write a .env file from installed meta-modules."""
    from deploy_node_app.core.config.loader import ConfigError
    from deploy_node_app.core.reconcile import ReconcileError
    from deploy_node_app.core.services.docker_common import ToolError
    from deploy_node_app.core.use_cases.deploy import run_local_env

    policy, gateway = _policy_and_gateway(update, force, output)
    try:
        run_local_env(
            ctx.obj["root"],
            policy,
            fmt="compose" if detect_ports else None,
            gateway=gateway,
        )
    except (ReconcileError, ConfigError, ToolError) as e:
        _fail(str(e))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
