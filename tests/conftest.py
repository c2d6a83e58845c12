"""
Shared test fixtures and configuration.
"""

import json
from pathlib import Path

import pytest

from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile import WriteLedger


@pytest.fixture
def ledger(tmp_path: Path) -> WriteLedger:
    """A fresh ledger rooted at the test's tmp directory."""
    return WriteLedger(tmp_path)


@pytest.fixture
def non_interactive() -> ReconcilePolicy:
    return ReconcilePolicy()


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """A minimal Node.js project: package.json plus its entrypoint."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "my-app", "version": "1.0.0"}, indent=2) + "\n"
    )
    (tmp_path / "index.js").write_text("console.log('hi')\n")
    return tmp_path


@pytest.fixture
def saved_node_project(node_project: Path) -> Path:
    """A Node.js project with saved answers for ``production``."""
    pkg = json.loads((node_project / "package.json").read_text())
    pkg["deploy-node-app"] = {
        "production": {
            "port": 8080,
            "protocol": "http",
            "entrypoint": "index.js",
            "context": "prod-cluster",
            "registry": "registry.example.com",
        }
    }
    (node_project / "package.json").write_text(json.dumps(pkg, indent=2) + "\n")
    return node_project
