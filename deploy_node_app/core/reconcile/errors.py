"""
Reconciliation errors.

Declined writes are not errors (they are a ``SKIP`` decision).  What is
raised here is either a programmer error caught before any filesystem
access, or a fatal I/O failure the orchestrator must handle by rolling
back the run.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class for reconciliation failures."""


class ContentSourceError(ReconcileError):
    """An artifact was given both literal content and a template, or neither."""


class ArtifactWriteError(ReconcileError):
    """Writing a file or directory failed. Fatal for the whole run."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Error writing {path}: {message}")
