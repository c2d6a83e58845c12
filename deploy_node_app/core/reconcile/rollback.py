"""
Rollback executor — best-effort undo of everything a failed run created.

Phase 1 deletes every ledgered file.  Phase 2 removes ledgered
directories that are now empty, innermost first, and stops climbing a
chain at the first directory that still holds something.

Only directories in the ledger are ever candidates, and the walk never
leaves the project root, so a directory that was already empty before
the run survives.  A ledgered directory that became empty for another
reason is removed like any other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from deploy_node_app.core.reconcile.ledger import DirEntry, FileEntry, WriteLedger

logger = logging.getLogger(__name__)


@dataclass
class RollbackReport:
    """What a rollback did."""

    removed_files: list[Path] = field(default_factory=list)
    removed_dirs: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "removed_files": [str(p) for p in self.removed_files],
            "removed_dirs": [str(p) for p in self.removed_dirs],
            "errors": list(self.errors),
        }


def _is_within(path: Path, root: Path) -> bool:
    return path != root and root in path.parents


def rollback(ledger: WriteLedger) -> RollbackReport:
    """Undo the ledger's creations. Never raises."""
    report = RollbackReport()
    try:
        entries = ledger.consume()
        root = ledger.root
        files = [e.path for e in entries if isinstance(e, FileEntry)]
        dirs: dict[Path, None] = {}
        for e in entries:
            if isinstance(e, DirEntry):
                dirs.setdefault(e.path, None)

        # ── Phase 1: files ──────────────────────────────────────
        for path in files:
            try:
                path.unlink()
                report.removed_files.append(path)
                logger.debug('Removing file "%s"', path)
            except FileNotFoundError:
                logger.debug("Already gone: %s", path)
            except OSError as e:
                msg = f"Could not remove file {path}: {e.strerror or e}"
                logger.warning(msg)
                report.errors.append(msg)

        # ── Phase 2: directories, deepest first ─────────────────
        ledgered = set(dirs)
        for start in sorted(dirs, key=lambda p: len(p.parts), reverse=True):
            current = start
            while current in ledgered and _is_within(current, root):
                if not current.exists():
                    current = current.parent
                    continue
                try:
                    if any(current.iterdir()):
                        break
                    current.rmdir()
                except OSError as e:
                    msg = f"Could not remove directory {current}: {e.strerror or e}"
                    logger.warning(msg)
                    report.errors.append(msg)
                    break
                report.removed_dirs.append(current)
                logger.debug('Removing directory "%s"', current)
                current = current.parent
    except Exception as e:  # never raise out of a rollback
        msg = f"Rollback aborted: {e}"
        logger.error(msg)
        report.errors.append(msg)

    logger.info(
        "Rollback removed %d file(s), %d dir(s), %d error(s)",
        len(report.removed_files), len(report.removed_dirs), len(report.errors),
    )
    return report
