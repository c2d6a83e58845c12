"""Directory provisioner — ``mkdir -p`` that ledgers every segment it creates."""

from __future__ import annotations

import logging
from pathlib import Path

from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile.errors import ArtifactWriteError
from deploy_node_app.core.reconcile.ledger import WriteLedger

logger = logging.getLogger(__name__)


def _display(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def ensure_dir(
    path: Path | str,
    ledger: WriteLedger,
    policy: ReconcilePolicy | None = None,
) -> bool:
    """Make sure *path* exists as a directory under the ledger's root.

    Every segment that did not exist before the call is recorded in the
    ledger, deepest first, excluding the project root itself.

    Returns:
        True if at least one directory was created.

    Raises:
        ArtifactWriteError: A segment exists as a file, or mkdir failed.
    """
    if policy is not None and policy.dry_run:
        return False

    root = ledger.root
    target = Path(path)
    if not target.is_absolute():
        target = root / target

    # Segments between the root and the target, shallowest first
    segments: list[Path] = []
    current = target
    while current != root and current != current.parent:
        segments.append(current)
        current = current.parent
    segments.reverse()

    missing = [seg for seg in segments if not seg.exists()]
    for seg in segments:
        if seg.exists() and not seg.is_dir():
            raise ArtifactWriteError(_display(seg, root), "exists and is not a directory")

    if not missing:
        return False

    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(_display(target, root), e.strerror or str(e)) from e

    for seg in reversed(missing):
        ledger.record_dir(seg)
    logger.debug("Created directory %s (%d new segment(s))", _display(target, root), len(missing))
    return True
