"""
Tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from digital_tools.cli import main
from digital_tools.config import Config, set_config


@pytest.fixture
def runner(tmp_path):
    # Quiet logging so JSON output parses cleanly
    set_config(Config(data_dir=tmp_path / "cli", log_level="WARNING"))
    return CliRunner()


class TestListAndShow:
    """Tests for discovery commands."""

    def test_list(self, runner):
        result = runner.invoke(main, ["list", "--category", "data"])

        assert result.exit_code == 0
        assert "data.filter" in result.output
        assert "web.fetch" not in result.output

    def test_list_nothing(self, runner):
        result = runner.invoke(main, ["list", "--category", "nope"])

        assert result.exit_code == 0
        assert "No tools found" in result.output

    def test_show(self, runner):
        result = runner.invoke(main, ["show", "data.filter"])

        assert result.exit_code == 0
        assert "Filter Data" in result.output

    def test_show_unknown(self, runner):
        result = runner.invoke(main, ["show", "missing.tool"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_schema_single(self, runner):
        result = runner.invoke(main, ["schema", "data.json.parse"])

        assert result.exit_code == 0
        descriptor = json.loads(result.output)
        assert descriptor["name"] == "data.json.parse"
        assert descriptor["inputSchema"]["required"] == ["text"]

    def test_schema_all(self, runner):
        result = runner.invoke(main, ["schema"])

        assert result.exit_code == 0
        names = [d["name"] for d in json.loads(result.output)]
        assert "communication.email.send" in names
        assert "web.read" in names


class TestInvoke:
    """Tests for the invoke command."""

    def test_invoke_json(self, runner):
        args = json.dumps({"data": [{"s": 1}, {"s": 2}], "filter": {"s": 1}})

        result = runner.invoke(main, ["invoke", "data.filter", "--args", args, "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["result"]["count"] == 1

    def test_invoke_pretty(self, runner):
        result = runner.invoke(main, ["invoke", "data.json.parse", "--args", '{"text": "[1]"}'])

        assert result.exit_code == 0
        assert "data.json.parse" in result.output

    def test_invoke_validation_failure(self, runner):
        result = runner.invoke(main, ["invoke", "data.json.parse"])

        assert result.exit_code == 1
        assert "MISSING_REQUIRED_PARAMETER" in result.output

    def test_invoke_bad_json(self, runner):
        result = runner.invoke(main, ["invoke", "data.json.parse", "--args", "{oops"])

        assert result.exit_code == 2

    def test_invoke_needs_tool_or_request(self, runner):
        result = runner.invoke(main, ["invoke"])

        assert result.exit_code == 2

    def test_invoke_permission_denied(self, runner):
        args = json.dumps({"channel": "#ops", "text": "hi"})

        result = runner.invoke(main, ["invoke", "communication.slack.send", "--args", args])

        assert result.exit_code == 1
        assert "PERMISSION_DENIED" in result.output

    def test_confirmation_prompt_accepted(self, runner):
        args = json.dumps({"to": "+15550100", "message": "On my way"})

        result = runner.invoke(
            main,
            ["invoke", "communication.sms.send", "--args", args, "-g", "sms:execute"],
            input="y\n",
        )

        assert result.exit_code == 0
        assert "communication.sms.send" in result.output

    def test_confirmation_prompt_declined(self, runner):
        args = json.dumps({"to": "+15550100", "message": "On my way"})

        result = runner.invoke(
            main,
            ["invoke", "communication.sms.send", "--args", args, "-g", "sms:execute"],
            input="n\n",
        )

        assert result.exit_code == 1
        assert "Cancelled" in result.output

    def test_confirmation_yes_flag(self, runner):
        args = json.dumps({"to": ["a@example.com"], "subject": "Hi", "body": "Hello"})

        result = runner.invoke(
            main,
            ["invoke", "communication.email.send", "--args", args, "-g", "email:execute",
             "--as", "ai", "--yes", "--json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["result"]["recipients"] == 1

    def test_invoke_from_request_file(self, runner, tmp_path):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({
            "tool": "data.transform",
            "args": {"data": {"user": {"name": "Ada"}}, "transform": {"who": "user.name"}},
            "caller": "ai",
        }))

        result = runner.invoke(main, ["invoke", "--request", str(request_file), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["result"] == {"result": {"who": "Ada"}}

    def test_invalid_request_file(self, runner, tmp_path):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({"args": {}}))

        result = runner.invoke(main, ["invoke", "--request", str(request_file)])

        assert result.exit_code == 1
        assert "Invalid request" in result.output

    @pytest.mark.parametrize("extra", [
        ["data.transform"],
        ["--args", '{"data": {}}'],
        ["--as", "human"],
        ["-g", "email:execute"],
    ])
    def test_request_file_rejects_other_options(self, runner, tmp_path, extra):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({"tool": "data.json.parse", "args": {"text": "[1]"}}))

        result = runner.invoke(main, ["invoke", "--request", str(request_file), *extra])

        assert result.exit_code == 2
        assert "cannot be combined" in result.output
