"""
Tests for the communication tool pack.
"""

import pytest

from digital_tools.tools import ToolContext
from digital_tools.tools.communication import (
    COMMUNICATION_TOOLS,
    SendEmailTool,
    SendNotificationTool,
    SendSmsTool,
)


async def confirm_and_run(executor, tool_id, args, context):
    first = await executor.invoke(tool_id, args, context)
    assert first.needs_confirmation is True
    return await executor.invoke(tool_id, args, context.confirmed(first.confirmation_token))


class TestEmail:
    """Tests for communication.email.send."""

    def test_spec(self):
        spec = SendEmailTool.spec

        assert spec.requires_confirmation is True
        assert spec.idempotent is False
        assert [str(p) for p in spec.permissions] == ["email:execute"]
        assert spec.get_param("to").items == "string"

    @pytest.mark.asyncio
    async def test_send(self, executor):
        context = ToolContext(caller="ai", permissions=["email:execute"])
        args = {
            "to": ["a@example.com", "b@example.com"],
            "cc": ["c@example.com"],
            "subject": "Quarterly numbers",
            "body": "Attached.",
        }

        result = await confirm_and_run(executor, "communication.email.send", args, context)

        assert result.success is True
        assert result.result["recipients"] == 3
        assert result.result["message_id"].startswith("msg_")

    @pytest.mark.asyncio
    async def test_recipients_must_be_strings(self, executor):
        context = ToolContext(permissions=["email:execute"])
        args = {"to": ["a@example.com", 42], "subject": "x", "body": "y"}

        result = await executor.invoke("communication.email.send", args, context)

        assert result.error_code == "TYPE_MISMATCH"
        assert result.details["param"] == "to[1]"
        assert len(executor.confirmations) == 0


class TestSlack:
    """Tests for communication.slack.send."""

    @pytest.mark.asyncio
    async def test_send_without_confirmation(self, executor):
        context = ToolContext(caller="ai", permissions=["slack:execute"])

        result = await executor.invoke(
            "communication.slack.send",
            {"channel": "#ops", "text": "Deploy finished", "thread_ts": "123.456"},
            context,
        )

        assert result.success is True
        assert result.result["channel"] == "#ops"
        assert result.result["thread_ts"] == "123.456"
        assert result.result["ts"]

    @pytest.mark.asyncio
    async def test_requires_permission(self, executor):
        result = await executor.invoke(
            "communication.slack.send", {"channel": "#ops", "text": "hi"}, ToolContext(caller="ai")
        )

        assert result.error_code == "PERMISSION_DENIED"


class TestNotify:
    """Tests for communication.notify."""

    @pytest.mark.asyncio
    async def test_default_priority(self, executor):
        result = await executor.invoke("communication.notify", {
            "channel": "push",
            "recipients": ["user-1", "user-2"],
            "title": "Build",
            "message": "Build passed",
        })

        assert result.success is True
        assert result.result["channel"] == "push"
        assert result.result["delivered"] == ["user-1", "user-2"]
        assert result.result["notification_id"].startswith("notif_")

    @pytest.mark.asyncio
    async def test_unknown_channel(self, executor):
        result = await executor.invoke("communication.notify", {
            "channel": "carrier-pigeon",
            "recipients": ["user-1"],
            "title": "t",
            "message": "m",
        })

        assert result.error_code == "TYPE_MISMATCH"
        assert result.details["param"] == "channel"

    @pytest.mark.asyncio
    async def test_urgent_is_logged_critical(self, caplog):
        tool = SendNotificationTool()

        with caplog.at_level("INFO", logger="digital_tools.tools.communication"):
            await tool.execute(
                channel="sms", recipients=["+15550100"], title="Outage", message="API down",
                priority="urgent",
            )

        assert any(r.levelname == "CRITICAL" and "Outage" in r.getMessage() for r in caplog.records)


class TestSms:
    """Tests for communication.sms.send."""

    @pytest.mark.asyncio
    async def test_segments(self):
        tool = SendSmsTool()

        short = await tool.execute(to="+15550100", message="hello")
        long = await tool.execute(to="+15550100", message="x" * 161)

        assert short["segments"] == 1
        assert long["segments"] == 2
        assert long["message_id"].startswith("sms_")

    @pytest.mark.asyncio
    async def test_confirmation_required(self, executor):
        context = ToolContext(permissions=["sms:execute"])
        args = {"to": "+15550100", "message": "On my way"}

        result = await confirm_and_run(executor, "communication.sms.send", args, context)

        assert result.success is True


class TestCommunicationPack:
    """Pack-level properties."""

    def test_side_effecting_tools_are_not_idempotent(self):
        for tool_class in COMMUNICATION_TOOLS:
            assert tool_class.spec.category == "communication"
            assert tool_class.spec.idempotent is False
