"""
Write ledger — what this run created, so a failed run can be undone.

One ledger per run, passed explicitly to the reconciler and provisioner.
Only filesystem objects that did not exist right before creation are
recorded.  Pre-existing files are never rollback candidates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class FileEntry(BaseModel):
    """A file created by this run."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: Path


class DirEntry(BaseModel):
    """A directory created by this run."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["dir"] = "dir"
    path: Path


LedgerEntry = Union[FileEntry, DirEntry]


class WriteLedger:
    """Append-only record of files and directories created during one run.

    Paths are stored absolute.  Appends are not deduplicated; nested
    provisioning may record the same directory more than once, and
    :meth:`dirs` folds those together for the rollback.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()
        self._entries: list[LedgerEntry] = []
        self._consumed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<WriteLedger root={str(self.root)!r} entries={len(self._entries)}>"

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def entries(self) -> list[LedgerEntry]:
        """Entries in append order (a copy)."""
        return list(self._entries)

    def _absolute(self, path: Path | str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.root / p

    def record_file(self, path: Path | str) -> None:
        entry = FileEntry(path=self._absolute(path))
        self._entries.append(entry)
        logger.debug("Ledger: file %s", entry.path)

    def record_dir(self, path: Path | str) -> None:
        entry = DirEntry(path=self._absolute(path))
        self._entries.append(entry)
        logger.debug("Ledger: dir %s", entry.path)

    def files(self) -> list[Path]:
        return [e.path for e in self._entries if isinstance(e, FileEntry)]

    def dirs(self) -> list[Path]:
        """Recorded directories, first occurrence wins."""
        seen: dict[Path, None] = {}
        for e in self._entries:
            if isinstance(e, DirEntry):
                seen.setdefault(e.path, None)
        return list(seen)

    def consume(self) -> list[LedgerEntry]:
        """Hand out the entries exactly once.

        The first call returns every entry and marks the ledger consumed;
        later calls return an empty list.
        """
        if self._consumed:
            logger.debug("Ledger already consumed")
            return []
        self._consumed = True
        return list(self._entries)
