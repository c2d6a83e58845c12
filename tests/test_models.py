"""
Tests for Pydantic models — artifacts, policy, deployment answers.
"""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from deploy_node_app.core.models.answers import DeployAnswers, DeployConfig, validate_env_name
from deploy_node_app.core.models.artifact import TargetArtifact
from deploy_node_app.core.models.policy import ReconcilePolicy
from deploy_node_app.core.reconcile import ContentSourceError


class TestTargetArtifact:
    def test_literal_content(self):
        artifact = TargetArtifact(path="package.json", content="{}\n")
        assert artifact.resolve() == "{}\n"

    def test_template(self):
        artifact = TargetArtifact(
            path="inf/service.yaml",
            template="backend-service.yaml",
            properties={"metadata": {"name": "svc"}},
        )
        assert yaml.safe_load(artifact.resolve())["metadata"]["name"] == "svc"

    def test_both_sources_rejected(self):
        with pytest.raises(ContentSourceError, match="only one"):
            TargetArtifact(path="x", content="a", template="dockerignore")

    def test_no_source_rejected(self):
        with pytest.raises(ContentSourceError):
            TargetArtifact(path="x")

    def test_properties_need_template(self):
        with pytest.raises(ContentSourceError, match="properties"):
            TargetArtifact(path="x", content="a", properties={"a": 1})

    def test_empty_content_is_a_source(self):
        assert TargetArtifact(path="x", content="").resolve() == ""


class TestReconcilePolicy:
    def test_default_is_non_interactive(self):
        policy = ReconcilePolicy()
        assert policy.mode == "non_interactive"
        assert not policy.interactive
        assert not policy.force
        assert not policy.dry_run

    def test_from_flags(self):
        assert ReconcilePolicy.from_flags().mode == "non_interactive"
        assert ReconcilePolicy.from_flags(update=True).mode == "interactive"
        assert ReconcilePolicy.from_flags(force=True).mode == "force"
        assert ReconcilePolicy.from_flags(update=True, force=True).mode == "force"

    def test_output_dash_is_dry_run(self):
        policy = ReconcilePolicy.from_flags(update=True, output="-")
        assert policy.dry_run
        assert not policy.interactive

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            ReconcilePolicy(mode="yolo")


class TestEnvName:
    @pytest.mark.parametrize("name", ["production", "dev", "qa-1", "my_env"])
    def test_valid(self, name):
        assert validate_env_name(name) == name

    @pytest.mark.parametrize("name,msg", [
        ("Prod", "lowercase"),
        ("qa", "longer than 2"),
        ("bad env", "dashes"),
    ])
    def test_invalid(self, name, msg):
        with pytest.raises(ValueError, match=msg):
            validate_env_name(name)


class TestDeployAnswers:
    def test_defaults(self):
        answers = DeployAnswers()
        assert answers.port == 3000
        assert answers.protocol == "http"
        assert answers.entrypoint == "index.js"

    def test_port_string_coerced(self):
        assert DeployAnswers(port="8080").port == 8080

    def test_port_not_a_number(self):
        with pytest.raises(ValidationError, match="ports must be numbers"):
            DeployAnswers(port="http")

    def test_port_out_of_range(self):
        with pytest.raises(ValidationError):
            DeployAnswers(port=70000)

    def test_unknown_protocol(self):
        with pytest.raises(ValidationError):
            DeployAnswers(protocol="udp")

    def test_extra_keys_kept(self):
        answers = DeployAnswers(port=80, uri="https://example.com")
        assert answers.model_dump()["uri"] == "https://example.com"

    def test_config_lookup(self):
        config = DeployConfig(name="app", environments={"dev": DeployAnswers(port=1234)})
        assert config.answers_for("dev").port == 1234
        assert config.answers_for("production") is None
