"""
Tests for the write ledger — per-run record of created files and dirs.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from deploy_node_app.core.reconcile import DirEntry, FileEntry, WriteLedger


class TestEntries:
    def test_entries_are_frozen(self, tmp_path: Path):
        entry = FileEntry(path=tmp_path / "a")
        with pytest.raises(ValidationError):
            entry.path = tmp_path / "b"

    def test_kind_discriminates(self, tmp_path: Path):
        assert FileEntry(path=tmp_path).kind == "file"
        assert DirEntry(path=tmp_path).kind == "dir"


class TestWriteLedger:
    def test_starts_empty(self, ledger: WriteLedger):
        assert len(ledger) == 0
        assert ledger.files() == []
        assert ledger.dirs() == []
        assert not ledger.consumed

    def test_root_is_resolved(self, tmp_path: Path):
        ledger = WriteLedger(tmp_path / "sub" / "..")
        assert ledger.root == tmp_path.resolve()

    def test_relative_paths_joined_to_root(self, ledger: WriteLedger):
        ledger.record_file("inf/deployment.yaml")
        assert ledger.files() == [ledger.root / "inf" / "deployment.yaml"]

    def test_absolute_paths_kept(self, ledger: WriteLedger):
        target = ledger.root / "Dockerfile"
        ledger.record_file(target)
        assert ledger.files() == [target]

    def test_append_order(self, ledger: WriteLedger):
        ledger.record_dir("inf")
        ledger.record_file("inf/a.yaml")
        ledger.record_file("inf/b.yaml")
        kinds = [(e.kind, e.path.name) for e in ledger.entries]
        assert kinds == [("dir", "inf"), ("file", "a.yaml"), ("file", "b.yaml")]

    def test_duplicate_dirs_kept_but_folded(self, ledger: WriteLedger):
        ledger.record_dir("a/b")
        ledger.record_dir("a")
        ledger.record_dir("a/b")
        assert len(ledger) == 3
        assert ledger.dirs() == [ledger.root / "a" / "b", ledger.root / "a"]

    def test_entries_is_a_copy(self, ledger: WriteLedger):
        ledger.record_file("x")
        ledger.entries.clear()
        assert len(ledger) == 1


class TestConsume:
    def test_consume_once(self, ledger: WriteLedger):
        ledger.record_file("x")
        ledger.record_dir("d")
        first = ledger.consume()
        assert len(first) == 2
        assert ledger.consumed
        assert ledger.consume() == []

    def test_consume_empty(self, ledger: WriteLedger):
        assert ledger.consume() == []
        assert ledger.consumed
