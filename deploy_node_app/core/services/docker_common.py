"""External tool helpers — docker, docker-compose, kubectl, git.

Every subprocess the deploy flow runs goes through :func:`run_tool`, so
tests patch one function to stay off real binaries.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

# Binaries the deploy flow needs per output format
REQUIRED_BINARIES: dict[str, tuple[str, ...]] = {
    "k8s": ("docker", "kubectl"),
    "compose": ("docker", "docker-compose"),
}

INSTALL_HINTS: dict[str, str] = {
    "docker": "https://www.docker.com/get-started",
    "kubectl": "https://kubernetes.io/docs/tasks/tools/install-kubectl/",
    "docker-compose": "https://docs.docker.com/compose/install/",
}


class ToolError(Exception):
    """An external command failed or could not be started."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
        *,
        message: str | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            detail = f" (exit {returncode})" if returncode is not None else ""
            message = f'Command "{" ".join(command)}" failed to run{detail}'
            if stderr:
                message += f": {stderr}"
        super().__init__(message)


class MissingToolError(ToolError):
    """Required binaries are not installed or not working."""

    def __init__(self, programs: list[str]) -> None:
        self.programs = programs
        hints = "; ".join(
            f"You might need to install or start {p}! {INSTALL_HINTS.get(p, '')}".strip() for p in programs
        )
        super().__init__(programs, None, message=hints)


def run_tool(
    *args: str,
    cwd: Path,
    env: dict[str, str] | None = None,
    capture: bool = True,
    timeout: int | None = 600,
) -> str:
    """Run a command and return its stripped stdout.

    With ``capture=False`` output goes straight to the terminal (used for
    ``docker build`` and friends) and an empty string is returned.

    Raises:
        ToolError: Non-zero exit, missing binary, or timeout.
    """
    cmd = list(args)
    merged_env = {**os.environ, **(env or {})}
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=merged_env,
            capture_output=capture,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ToolError(cmd, None, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(cmd, None, f"timed out after {timeout}s") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip() if capture else ""
        raise ToolError(cmd, result.returncode, stderr)
    return (result.stdout or "").strip() if capture else ""


def check_program_version(program: str, cwd: Path) -> bool:
    """True if ``<program> version`` succeeds.

    For docker this also proves the daemon is reachable.
    """
    if shutil.which(program) is None:
        return False
    try:
        run_tool(program, "version", cwd=cwd, timeout=30)
    except ToolError:
        return False
    return True


def ensure_binaries(fmt: str, cwd: Path) -> None:
    """Check every binary the format needs.

    Raises:
        MissingToolError: One or more binaries are missing or not working.
    """
    missing = [p for p in REQUIRED_BINARIES.get(fmt, ()) if not check_program_version(p, cwd)]
    if missing:
        raise MissingToolError(missing)


def detect_compose_ports(root: Path, name: str, port_name: str, port_spec: str) -> dict[str, str]:
    """Ask docker-compose which host port a service's container port landed on.

    Returns ``{port_name: host_port}``, or ``{}`` when the project has no
    compose file.

    Raises:
        ToolError: The service has no running containers.
    """
    if not (root / "docker-compose.yaml").is_file():
        logger.warning(
            "It doesn't look like docker-compose is used here, so I can't "
            "automatically detect ports for you - using default values!"
        )
        return {}

    out = run_tool("docker-compose", "ps", "-q", name, cwd=root)
    containers = [c for c in out.splitlines() if c.strip()]
    if not containers:
        raise ToolError(
            ["docker-compose", "ps", "-q", name], None,
            'Containers are not running yet. Run "docker-compose up" first.',
        )

    fmt = '{{(index (index .NetworkSettings.Ports "%s") 0).HostPort}}' % port_spec
    ports: dict[str, str] = {}
    for container in containers:
        ports[port_name] = run_tool("docker", "inspect", container, f"--format={fmt}", cwd=root)
    return ports


def is_git_ignored(root: Path, pattern: str) -> bool:
    """True if *pattern* has its own line in the project's .gitignore."""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return False
    wanted = {pattern, f"{pattern}/", f"/{pattern}"}
    for line in gitignore.read_text(encoding="utf-8", errors="ignore").splitlines():
        if line.strip() in wanted:
            return True
    return False
