"""
Tests for prompt gateways.
"""

import click
import pytest
from click.testing import CliRunner

from deploy_node_app.core.reconcile import ClickPromptGateway, ConfirmChoice, ScriptedPromptGateway


def _ask_command(gateway):
    @click.command()
    def ask():
        click.echo(f"answer={gateway.confirm('inf/deployment.yaml').value}")

    return ask


class TestClickPromptGateway:
    @pytest.mark.parametrize("key,choice", [
        ("y", ConfirmChoice.ACCEPT),
        ("n", ConfirmChoice.REJECT),
        ("d", ConfirmChoice.SHOW_DIFF),
        ("Y", ConfirmChoice.ACCEPT),
    ])
    def test_keys(self, key, choice):
        runner = CliRunner()
        result = runner.invoke(_ask_command(ClickPromptGateway(err=False)), input=f"{key}\n")
        assert result.exit_code == 0
        assert 'Would you like to update "inf/deployment.yaml"?' in result.output
        assert f"answer={choice.value}" in result.output

    def test_default_is_yes(self):
        runner = CliRunner()
        result = runner.invoke(_ask_command(ClickPromptGateway(err=False)), input="\n")
        assert "answer=accept" in result.output

    def test_invalid_key_reprompts(self):
        runner = CliRunner()
        result = runner.invoke(_ask_command(ClickPromptGateway(err=False)), input="x\nn\n")
        assert "answer=reject" in result.output


class TestScriptedPromptGateway:
    def test_replays_and_records(self):
        gateway = ScriptedPromptGateway([ConfirmChoice.SHOW_DIFF, ConfirmChoice.REJECT])
        assert gateway.confirm("a") is ConfirmChoice.SHOW_DIFF
        assert gateway.confirm("b") is ConfirmChoice.REJECT
        assert gateway.asked == ["a", "b"]

    def test_runs_out(self):
        with pytest.raises(RuntimeError):
            ScriptedPromptGateway().confirm("a")
