"""
File reconciler — decides, for each generated artifact, whether to write it.

Decision table (first match wins)::

    dry run                     → print content,            WRITE
    force                       → write (ledger if new),    WRITE
    file absent                 → write + ledger,           WRITE
    existing == desired         → nothing,                  SKIP
    differs, non-interactive    → warn,                     SKIP
    differs, interactive        → prompt:
        accept                  → write (never ledgered),   WRITE
        reject                  →                           SKIP
        show diff               → print diff, ask again     (RETRY)

A read or write that fails raises :class:`ArtifactWriteError`.  The reconciler
never retries and never rolls back; that is the orchestrator's call.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile.diff import format_diff, render_diff
from deploy_node_app.core.reconcile.errors import ArtifactWriteError
from deploy_node_app.core.reconcile.ledger import WriteLedger
from deploy_node_app.core.reconcile.prompt import ConfirmChoice, PromptGateway
from deploy_node_app.core.reconcile.provisioner import ensure_dir

if TYPE_CHECKING:
    from deploy_node_app.core.models.artifact import TargetArtifact

logger = logging.getLogger(__name__)


class WriteDecision(str, Enum):
    """Outcome of reconciling one artifact."""

    SKIP = "skip"
    WRITE = "write"
    RETRY = "retry"


class FileReconciler:
    """Reconciles generated files with a project tree.

    Args:
        ledger:      Run-scoped ledger; its root is the project root.
        policy:      Active reconciliation policy.
        gateway:     Asked only in interactive mode.
        out:         Receives content in dry-run mode (default: stdout).
        diff_stream: Receives rendered diffs (default: stdout).
    """

    def __init__(
        self,
        ledger: WriteLedger,
        policy: ReconcilePolicy,
        gateway: PromptGateway | None = None,
        *,
        out: TextIO | None = None,
        diff_stream: TextIO | None = None,
        color: bool = True,
    ) -> None:
        if policy.interactive and gateway is None:
            raise ValueError("An interactive policy needs a prompt gateway")
        self.ledger = ledger
        self.policy = policy
        self.gateway = gateway
        self._out = out
        self._diff_stream = diff_stream
        self._color = color

    @property
    def root(self) -> Path:
        return self.ledger.root

    def reconcile_artifact(self, artifact: TargetArtifact) -> WriteDecision:
        """Resolve the artifact's content, then reconcile it."""
        if artifact.reason:
            logger.debug("Reconciling %s (%s)", artifact.path, artifact.reason)
        return self.reconcile(artifact.path, artifact.resolve())

    def reconcile(self, path: str, desired_content: str) -> WriteDecision:
        """Bring ``<root>/<path>`` in line with *desired_content*.

        Returns ``WriteDecision.WRITE`` or ``WriteDecision.SKIP``.
        """
        if self.policy.dry_run:
            out = self._out or sys.stdout
            out.write(desired_content)
            out.flush()
            return WriteDecision.WRITE

        full_path = self.root / path
        while True:
            decision = self._decide(path, full_path, desired_content)
            if decision is not WriteDecision.RETRY:
                return decision

    # ── Internals ──────────────────────────────────────────────

    def _decide(self, path: str, full_path: Path, desired: str) -> WriteDecision:
        existing = self._read_existing(path, full_path)

        if self.policy.force or existing is None:
            self._write(path, full_path, desired, new=existing is None)
            return WriteDecision.WRITE

        if existing == desired:
            logger.debug("Unchanged: %s", path)
            return WriteDecision.SKIP

        if not self.policy.interactive:
            logger.warning(
                'Refusing to overwrite "%s"... Continuing... '
                "(Use --update to review changes or --force to overwrite)",
                path,
            )
            return WriteDecision.SKIP

        assert self.gateway is not None
        choice = self.gateway.confirm(path)
        if choice is ConfirmChoice.ACCEPT:
            self._write(path, full_path, desired, new=False)
            return WriteDecision.WRITE
        if choice is ConfirmChoice.SHOW_DIFF:
            stream = self._diff_stream or sys.stdout
            stream.write(format_diff(render_diff(existing, desired), color=self._color))
            stream.flush()
            return WriteDecision.RETRY
        logger.info("Left unchanged at user request: %s", path)
        return WriteDecision.SKIP

    def _read_existing(self, path: str, full_path: Path) -> str | None:
        try:
            with open(full_path, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except IsADirectoryError as e:
            raise ArtifactWriteError(path, "is a directory") from e
        except UnicodeDecodeError as e:
            raise ArtifactWriteError(path, "existing file is not valid UTF-8") from e
        except OSError as e:
            raise ArtifactWriteError(path, e.strerror or str(e)) from e

    def _write(self, path: str, full_path: Path, content: str, *, new: bool) -> None:
        ensure_dir(full_path.parent, self.ledger, self.policy)
        try:
            # newline="" keeps the bytes on disk identical to the dry-run output
            with open(full_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise ArtifactWriteError(path, e.strerror or str(e)) from e

        # Pre-existing files are never ledgered: rollback must not delete user files
        if new:
            self.ledger.record_file(full_path)
        logger.info("Successfully wrote \"%s\"%s", path, "" if new else " (updated)")
