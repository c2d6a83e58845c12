"""
File reconciliation engine.

Writes generated files into a user's project without clobbering their
work, and records what it created so a failed run can be rolled back.
"""

from deploy_node_app.core.reconcile.diff import DiffSegment, format_diff, render_diff
from deploy_node_app.core.reconcile.errors import (
    ArtifactWriteError,
    ContentSourceError,
    ReconcileError,
)
from deploy_node_app.core.reconcile.ledger import DirEntry, FileEntry, WriteLedger
from deploy_node_app.core.reconcile.merge import deep_merge, render_template
from deploy_node_app.core.reconcile.prompt import (
    ClickPromptGateway,
    ConfirmChoice,
    PromptGateway,
    ScriptedPromptGateway,
)
from deploy_node_app.core.reconcile.provisioner import ensure_dir
from deploy_node_app.core.reconcile.reconciler import FileReconciler, WriteDecision
from deploy_node_app.core.reconcile.rollback import RollbackReport, rollback

__all__ = [
    "ArtifactWriteError",
    "ClickPromptGateway",
    "ConfirmChoice",
    "ContentSourceError",
    "DiffSegment",
    "DirEntry",
    "FileEntry",
    "FileReconciler",
    "PromptGateway",
    "ReconcileError",
    "RollbackReport",
    "ScriptedPromptGateway",
    "WriteDecision",
    "WriteLedger",
    "deep_merge",
    "ensure_dir",
    "format_diff",
    "render_diff",
    "render_template",
    "rollback",
]
