"""
Tests for the directory provisioner — mkdir -p with ledgering.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile import ArtifactWriteError, WriteLedger, ensure_dir


class TestEnsureDir:
    def test_creates_and_ledgers_each_segment_deepest_first(self, ledger: WriteLedger):
        created = ensure_dir("a/b/c", ledger)
        root = ledger.root
        assert created is True
        assert (root / "a" / "b" / "c").is_dir()
        assert ledger.dirs() == [root / "a" / "b" / "c", root / "a" / "b", root / "a"]

    def test_existing_segments_not_ledgered(self, ledger: WriteLedger):
        (ledger.root / "a").mkdir()
        ensure_dir("a/b", ledger)
        assert ledger.dirs() == [ledger.root / "a" / "b"]

    def test_already_there(self, ledger: WriteLedger):
        (ledger.root / "inf").mkdir()
        assert ensure_dir("inf", ledger) is False
        assert len(ledger) == 0

    def test_root_never_ledgered(self, ledger: WriteLedger):
        assert ensure_dir(ledger.root, ledger) is False
        assert len(ledger) == 0

    def test_absolute_path_under_root(self, ledger: WriteLedger):
        ensure_dir(ledger.root / "x", ledger)
        assert ledger.dirs() == [ledger.root / "x"]

    def test_dry_run_touches_nothing(self, ledger: WriteLedger):
        policy = ReconcilePolicy(dry_run=True)
        assert ensure_dir("a/b", ledger, policy) is False
        assert not (ledger.root / "a").exists()
        assert len(ledger) == 0

    def test_file_in_the_way(self, ledger: WriteLedger):
        (ledger.root / "inf").write_text("not a dir")
        with pytest.raises(ArtifactWriteError, match="inf"):
            ensure_dir("inf/sub", ledger)
        assert len(ledger) == 0

    def test_mkdir_failure_wrapped(self, ledger: WriteLedger, monkeypatch):
        def boom(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "mkdir", boom)
        with pytest.raises(ArtifactWriteError, match="Permission denied"):
            ensure_dir("locked", ledger)
        assert len(ledger) == 0
