"""
Tests for configuration loading — package.json, saved answers, local tool config.
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from deploy_node_app.core.config.loader import (
    ConfigError,
    dump_package_json,
    load_package_json,
    read_deploy_config,
    with_saved_answers,
)
from deploy_node_app.core.config.local import read_local_docker_registries, read_local_kube_contexts
from deploy_node_app.core.models.answers import DeployAnswers


class TestLoadPackageJson:
    def test_load(self, node_project: Path):
        assert load_package_json(node_project / "package.json")["name"] == "my-app"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_package_json(tmp_path / "package.json")

    def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{ nope")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_package_json(tmp_path / "package.json")

    def test_not_an_object(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_package_json(tmp_path / "package.json")


class TestDeployConfig:
    def test_name_defaults_to_package_name(self):
        config = read_deploy_config({"name": "my-app"})
        assert config.name == "my-app"
        assert config.environments == {}

    def test_saved_answers(self, saved_node_project: Path):
        pkg = load_package_json(saved_node_project / "package.json")
        config = read_deploy_config(pkg)
        answers = config.answers_for("production")
        assert answers.port == 8080
        assert answers.registry == "registry.example.com"
        assert answers.context == "prod-cluster"

    def test_non_object_entries_skipped(self):
        config = read_deploy_config({"name": "a", "deploy-node-app": {"name": "b", "metamodule": True}})
        assert config.name == "b"
        assert config.environments == {}

    def test_invalid_answers(self):
        with pytest.raises(ConfigError, match='environment "dev"'):
            read_deploy_config({"deploy-node-app": {"dev": {"port": "abc"}}})

    def test_block_must_be_object(self):
        with pytest.raises(ConfigError):
            read_deploy_config({"deploy-node-app": ["dev"]})


class TestSaveAnswers:
    def test_does_not_mutate_input(self):
        pkg = {"name": "a"}
        updated = with_saved_answers(pkg, "dev", DeployAnswers(port=4000))
        assert "deploy-node-app" not in pkg
        assert updated["deploy-node-app"]["dev"]["port"] == 4000

    def test_keeps_other_environments(self):
        pkg = {"deploy-node-app": {"production": {"port": 80}}}
        updated = with_saved_answers(pkg, "dev", DeployAnswers())
        assert set(updated["deploy-node-app"]) == {"production", "dev"}

    def test_round_trip_through_read(self):
        updated = with_saved_answers({"name": "a"}, "dev", DeployAnswers(port=4000, registry="r.io"))
        reread = read_deploy_config(json.loads(dump_package_json(updated)))
        assert reread.answers_for("dev") == DeployAnswers(port=4000, registry="r.io")

    def test_dump_format(self):
        assert dump_package_json({"name": "a"}) == '{\n  "name": "a"\n}\n'


class TestLocalKubeConfig:
    def test_contexts(self, tmp_path: Path):
        config = tmp_path / "config"
        config.write_text(textwrap.dedent("""\
            apiVersion: v1
            contexts:
              - name: prod
                context:
                  cluster: prod-cluster
              - context:
                  cluster: staging-cluster
        """))
        assert read_local_kube_contexts(config) == ["prod", "staging-cluster"]

    def test_missing_file(self, tmp_path: Path):
        assert read_local_kube_contexts(tmp_path / "missing") == []

    def test_invalid_yaml(self, tmp_path: Path):
        config = tmp_path / "config"
        config.write_text("contexts: [unclosed")
        with pytest.raises(ConfigError, match="not valid yaml"):
            read_local_kube_contexts(config)


class TestLocalDockerConfig:
    def test_registries(self, tmp_path: Path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"auths": {"docker.io": {}, "ghcr.io": {}}}))
        assert read_local_docker_registries(config) == ["docker.io", "ghcr.io"]

    def test_no_auths(self, tmp_path: Path):
        config = tmp_path / "config.json"
        config.write_text("{}")
        assert read_local_docker_registries(config) == []

    def test_missing_file(self, tmp_path: Path):
        assert read_local_docker_registries(tmp_path / "missing.json") == []

    def test_invalid_json(self, tmp_path: Path):
        config = tmp_path / "config.json"
        config.write_text("{")
        with pytest.raises(ConfigError, match="not valid json"):
            read_local_docker_registries(config)
