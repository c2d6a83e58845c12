"""
Deploy use case — scaffold, build and ship a project.

This is the top-level orchestrator: it detects the language, gathers
answers, reconciles every generated file through one run-scoped
ledger, then optionally builds and deploys.  If anything fails (or the
user cancels), everything the run created is rolled back before the
error propagates.  On success the ledger is simply dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from deploy_node_app.core.config.loader import (
    PACKAGE_FILE,
    ConfigError,
    dump_package_json,
    load_package_json,
    read_deploy_config,
    with_saved_answers,
)
from deploy_node_app.core.config.local import read_local_docker_registries, read_local_kube_contexts
from deploy_node_app.core.models.answers import DeployAnswers
from deploy_node_app.core.models.artifact import TargetArtifact
from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile import (
    FileReconciler,
    PromptGateway,
    RollbackReport,
    WriteDecision,
    WriteLedger,
    ensure_dir,
    rollback,
)
from deploy_node_app.core.reconcile.merge import dump_yaml
from deploy_node_app.core.services.detection import detect_language
from deploy_node_app.core.services.docker_common import (
    ensure_binaries,
    is_git_ignored,
    run_tool,
)
from deploy_node_app.core.services.manifests import CONFIG_DIR, k8s_artifacts, resource_paths
from deploy_node_app.core.services.metamodules import (
    build_compose_file,
    build_kustomization,
    find_meta_modules,
    format_env_file,
    generate_local_env,
)
from deploy_node_app.core.services.questions import prompt_answers
from deploy_node_app.core.services.tags import DeployTags, deploy_tags, image_name

logger = logging.getLogger(__name__)

WWW_DIR = "src/www"


@dataclass
class DeployOptions:
    """Everything one deploy run needs."""

    root: Path
    env: str = "production"
    fmt: str = "k8s"
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    build: bool = True
    deploy: bool = True
    labels: dict[str, str] = field(default_factory=dict)
    host: str = ""
    gateway: PromptGateway | None = None
    out: TextIO | None = None
    kube_config: Path | None = None
    docker_config: Path | None = None


@dataclass
class DeployResult:
    """Outcome of a deploy run."""

    app_name: str = ""
    language: str = ""
    tags: DeployTags | None = None
    decisions: dict[str, WriteDecision] = field(default_factory=dict)
    built: bool = False
    deployed: bool = False
    url: str = ""
    rollback: RollbackReport | None = None

    @property
    def written(self) -> list[str]:
        return [p for p, d in self.decisions.items() if d is WriteDecision.WRITE]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "app_name": self.app_name,
            "language": self.language,
            "files": {p: d.value for p, d in self.decisions.items()},
            "built": self.built,
            "deployed": self.deployed,
        }
        if self.url:
            result["url"] = self.url
        if self.tags:
            result["tags"] = self.tags.model_dump()
        if self.rollback:
            result["rollback"] = self.rollback.to_dict()
        return result


def _make_reconciler(opts: DeployOptions, ledger: WriteLedger) -> FileReconciler:
    return FileReconciler(ledger, opts.policy, opts.gateway, out=opts.out)


def run_deploy(opts: DeployOptions) -> DeployResult:
    """Run the full scaffold → build → deploy flow.

    Raises whatever aborted the run, after rolling back its creations.
    """
    if opts.fmt not in ("k8s", "compose"):
        raise ConfigError(f"Unsupported format option provided: {opts.fmt!r}")

    ledger = WriteLedger(opts.root)
    result = DeployResult()
    try:
        _deploy(opts, ledger, result)
    except BaseException:
        # Cancellation included
        result.rollback = rollback(ledger)
        logger.warning(
            "Run aborted, rolled back %d file(s) and %d dir(s)",
            len(result.rollback.removed_files), len(result.rollback.removed_dirs),
        )
        raise
    return result


def _deploy(opts: DeployOptions, ledger: WriteLedger, result: DeployResult) -> None:
    root = opts.root
    language = detect_language(root)
    if language is None:
        raise ConfigError(
            "Unable to determine what sort of project this is. "
            "Supported: Node.js (package.json), Python, PHP, static nginx sites."
        )
    result.language = language.name

    package_json: dict[str, Any] = {}
    saved: DeployAnswers | None = None
    app_name = root.resolve().name
    if language.uses_package_json:
        package_json = load_package_json(root / PACKAGE_FILE)
        config = read_deploy_config(package_json)
        saved = config.answers_for(opts.env)
        app_name = config.name or app_name
    result.app_name = app_name

    will_run_tools = (opts.build or opts.deploy) and not opts.policy.dry_run
    if will_run_tools:
        ensure_binaries(opts.fmt, root)

    answers = prompt_answers(
        root,
        language,
        opts.fmt,
        saved=saved,
        registries=read_local_docker_registries(opts.docker_config),
        contexts=read_local_kube_contexts(opts.kube_config) if opts.fmt == "k8s" else [],
    )
    tags = deploy_tags(app_name, opts.env, answers, root)
    result.tags = tags

    reconciler = _make_reconciler(opts, ledger)

    def reconcile(artifact: TargetArtifact) -> None:
        result.decisions[artifact.path] = reconciler.reconcile_artifact(artifact)

    if language.uses_package_json:
        updated = with_saved_answers(package_json, opts.env, answers)
        reconcile(TargetArtifact(path=PACKAGE_FILE, content=dump_package_json(updated)))

    reconcile(TargetArtifact(path="Dockerfile", template=language.dockerfile_template))

    # Resource and service names must be DNS-safe
    svc_name = image_name(app_name).replace("/", "-")

    if opts.fmt == "k8s":
        handle_ui = (root / WWW_DIR).is_dir()
        ensure_dir(CONFIG_DIR, ledger, opts.policy)
        artifacts = k8s_artifacts(
            svc_name, answers, tags,
            handle_ui=handle_ui,
            labels=opts.labels,
            host=opts.host,
            command=["node", answers.entrypoint] if language.name == "nodejs" else None,
        )
        for artifact in artifacts:
            reconcile(artifact)
        meta_modules = find_meta_modules(root, package_json)
        kustomization = build_kustomization(root, meta_modules, resource_paths(artifacts), CONFIG_DIR)
        reconcile(TargetArtifact(path=f"{CONFIG_DIR}/kustomization.yaml", content=dump_yaml(kustomization)))
        if handle_ui and opts.host:
            result.url = f"https://{opts.host}"
    else:
        meta_modules = find_meta_modules(root, package_json)
        compose = build_compose_file(root, meta_modules)
        compose["services"] = {
            svc_name: {
                "build": ".",
                "image": tags.env,
                "ports": [f"{answers.port}:{answers.port}"],
            },
            **compose["services"],
        }
        reconcile(TargetArtifact(path="docker-compose.yaml", content=dump_yaml(compose)))

    reconcile(TargetArtifact(path=".dockerignore", template="dockerignore"))

    if not will_run_tools:
        return

    if opts.build:
        logger.info('Now building "%s"', tags.hash)
        run_tool("docker", "build", ".", "-t", tags.hash, "-t", tags.env, cwd=root, capture=False, timeout=None)
        result.built = True

    if opts.deploy:
        logger.info('Now deploying "%s"', tags.hash)
        run_tool("docker", "push", tags.hash, cwd=root, capture=False, timeout=None)
        if opts.fmt == "k8s":
            cmd = ["kubectl"]
            if answers.context:
                cmd.append(f"--context={answers.context}")
            cmd += ["apply", "-k", CONFIG_DIR]
            logger.info("Running: `%s`", " ".join(cmd))
            run_tool(*cmd, cwd=root, capture=False)
        else:
            run_tool("docker-compose", "up", "--remove-orphans", "--quiet-pull", "-d", cwd=root, capture=False)
        result.deployed = True


def run_local_env(
    root: Path,
    policy: ReconcilePolicy,
    *,
    fmt: str | None = "compose",
    gateway: PromptGateway | None = None,
    out: TextIO | None = None,
) -> DeployResult:
    """Write a ``.env`` collecting every meta-module's settings."""
    package_json = load_package_json(root / PACKAGE_FILE)
    ledger = WriteLedger(root)
    result = DeployResult(app_name=read_deploy_config(package_json).name, language="nodejs")
    try:
        meta_modules = find_meta_modules(root, package_json)
        env_vars = generate_local_env(root, meta_modules, fmt)
        if not is_git_ignored(root, ".env"):
            logger.warning(
                "It doesn't look like you have .env ignored by your .gitignore file! "
                "This is usually a bad idea! Fix with: \"echo .env >> .gitignore\""
            )
        reconciler = FileReconciler(ledger, policy, gateway, out=out)
        result.decisions[".env"] = reconciler.reconcile(".env", format_env_file(env_vars))
    except BaseException:
        result.rollback = rollback(ledger)
        raise
    return result
