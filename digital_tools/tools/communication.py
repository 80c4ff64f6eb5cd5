"""
Communication tools - email, Slack, SMS and notifications.

Delivery is simulated: messages are logged and given an id. Provider
integrations (SMTP, Slack API, SMS gateways) plug in behind these
definitions without changing their contracts.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from .base import Audience, ParamSpec, Tool, ToolSpec

logger = logging.getLogger(__name__)


def _message_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


# === Email ===

class SendEmailTool(Tool):
    """Send an email. Irreversible, so it requires confirmation."""

    spec = ToolSpec(
        id="communication.email.send",
        name="Send Email",
        description="Send an email to one or more recipients",
        category="communication",
        subcategory="email",
        parameters=(
            ParamSpec("to", "array", "Recipient email addresses", items="string"),
            ParamSpec("subject", "string", "Email subject"),
            ParamSpec("body", "string", "Plain text body"),
            ParamSpec("cc", "array", "CC recipients", required=False, items="string"),
            ParamSpec("bcc", "array", "BCC recipients", required=False, items="string"),
            ParamSpec("html", "string", "HTML body", required=False),
            ParamSpec("attachments", "array", "File attachments", required=False, items="object"),
        ),
        audience=Audience.BOTH,
        permissions=("email:execute",),
        requires_confirmation=True,
        tags=("email", "send", "notify"),
    )

    async def execute(
        self,
        to: List[str],
        subject: str,
        body: str,
        cc: Optional[List[str]] = None,
        bcc: Optional[List[str]] = None,
        html: Optional[str] = None,
        attachments: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> Dict[str, Any]:
        logger.info(f"[Email] Sending to: {', '.join(to)}")
        logger.info(f"[Email] Subject: {subject}")

        return {
            "success": True,
            "message_id": _message_id("msg"),
            "recipients": len(to) + len(cc or []) + len(bcc or []),
        }


# === Slack ===

class SendSlackMessageTool(Tool):
    """Post a message to a Slack channel or thread."""

    spec = ToolSpec(
        id="communication.slack.send",
        name="Send Slack Message",
        description="Send a message to a Slack channel or thread",
        category="communication",
        subcategory="slack",
        parameters=(
            ParamSpec("channel", "string", "Channel ID or name (e.g. #general)"),
            ParamSpec("text", "string", "Message text"),
            ParamSpec("blocks", "array", "Slack Block Kit blocks", required=False),
            ParamSpec("thread_ts", "string", "Thread timestamp for replies", required=False),
            ParamSpec("unfurl_links", "boolean", "Unfurl URLs in the message", required=False),
        ),
        audience=Audience.BOTH,
        permissions=("slack:execute",),
        tags=("slack", "message", "chat"),
    )

    async def execute(
        self,
        channel: str,
        text: str,
        thread_ts: Optional[str] = None,
        **kwargs
    ) -> Dict[str, Any]:
        logger.info(f"[Slack] Sending to: {channel}")
        logger.debug(f"[Slack] Message: {text}")

        return {
            "success": True,
            "ts": f"{time.time():.6f}",
            "channel": channel,
            "thread_ts": thread_ts,
        }


# === Notification ===

class SendNotificationTool(Tool):
    """Fan a notification out over one channel."""

    spec = ToolSpec(
        id="communication.notify",
        name="Send Notification",
        description="Send a notification through various channels",
        category="communication",
        subcategory="notification",
        parameters=(
            ParamSpec("channel", "string", "Notification channel",
                      enum=("email", "slack", "sms", "push", "webhook")),
            ParamSpec("recipients", "array", "Recipients", items="string"),
            ParamSpec("title", "string", "Notification title"),
            ParamSpec("message", "string", "Notification message"),
            ParamSpec("priority", "string", "Priority level", required=False, default="normal",
                      enum=("low", "normal", "high", "urgent")),
            ParamSpec("data", "object", "Additional data", required=False),
        ),
        audience=Audience.BOTH,
        tags=("notify", "alert", "message"),
    )

    async def execute(
        self,
        channel: str,
        recipients: List[str],
        title: str,
        message: str,
        priority: str = "normal",
        **kwargs
    ) -> Dict[str, Any]:
        log_message = f"[Notification] [{channel}] [{priority.upper()}] {title}: {message}"

        if priority == "urgent":
            logger.critical(log_message)
        elif priority == "high":
            logger.warning(log_message)
        else:
            logger.info(log_message)

        return {
            "success": True,
            "notification_id": _message_id("notif"),
            "channel": channel,
            "delivered": list(recipients),
        }


# === SMS ===

SMS_SEGMENT_LENGTH = 160


class SendSmsTool(Tool):
    """Send an SMS text message. Requires confirmation."""

    spec = ToolSpec(
        id="communication.sms.send",
        name="Send SMS",
        description="Send an SMS text message",
        category="communication",
        subcategory="sms",
        parameters=(
            ParamSpec("to", "string", "Phone number (E.164 format)"),
            ParamSpec("message", "string", "SMS message (max 160 chars recommended)"),
            ParamSpec("from_", "string", "Sender phone number or ID", required=False),
        ),
        audience=Audience.BOTH,
        permissions=("sms:execute",),
        requires_confirmation=True,
        tags=("sms", "text", "mobile"),
    )

    async def execute(self, to: str, message: str, **kwargs) -> Dict[str, Any]:
        logger.info(f"[SMS] Sending to: {to}")
        logger.debug(f"[SMS] Message: {message[:SMS_SEGMENT_LENGTH]}")

        segments = max(1, -(-len(message) // SMS_SEGMENT_LENGTH))
        return {
            "success": True,
            "message_id": _message_id("sms"),
            "segments": segments,
        }


COMMUNICATION_TOOLS = [
    SendEmailTool,
    SendSlackMessageTool,
    SendNotificationTool,
    SendSmsTool,
]
