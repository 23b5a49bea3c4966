# -*- coding: utf-8 -*-
"""
Status reporting.

Two sinks, both best effort:
- ChatReporter posts / edits messages in the deploy channel.
- AuditNotifier POSTs a status card to the audit webhook.

A failing sink is logged and otherwise ignored; it never changes the outcome
of a deployment and is never retried.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.webhook import WebhookClient

from deploybot.config import FOOTER_AUTHOR, Settings


log = logging.getLogger("deploy-slack.reporter")

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

COLOR_SUCCESS = "#008000"
COLOR_FAILED = "#800000"

FOOTER_LABEL = "Deployment Bot"

# Slack rejects message text much past 4k chars
MAX_TEXT = 3900


# ---------------- Text helpers ----------------
def strip_ansi(text: str) -> str:
    ansi_escape = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
    return ansi_escape.sub("", text or "")


def output_block(text: str, limit: int = MAX_TEXT) -> str:
    cleaned = strip_ansi(text).strip() or "(no output)"
    # keep the tail, that's where the error usually is
    if len(cleaned) > limit:
        cleaned = "…" + cleaned[-(limit - 1):]
    return f"```{cleaned}```"


# ---------------- Chat ----------------
class ChatReporter:
    def __init__(self, client, channel_id: str):
        self.client = client
        self.channel_id = channel_id

    def post(self, text: str) -> Optional[str]:
        try:
            resp = self.client.chat_postMessage(channel=self.channel_id, text=text)
        except SlackApiError as e:
            log.error("chat.postMessage failed: %s", e.response.get("error", e))
            return None
        except Exception:
            log.exception("chat.postMessage failed")
            return None
        return resp.get("ts")

    def update(self, ts: Optional[str], text: str) -> Optional[str]:
        if not ts:
            return self.post(text)
        try:
            self.client.chat_update(channel=self.channel_id, ts=ts, text=text)
        except SlackApiError as e:
            log.error("chat.update failed: %s", e.response.get("error", e))
            return None
        except Exception:
            log.exception("chat.update failed")
            return None
        return ts


# ---------------- Audit webhook ----------------
def rfc3339(now: datetime) -> str:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.isoformat(timespec="seconds")


def build_audit_payload(
    status: str,
    branch: str,
    author: Optional[str],
    settings: Settings,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    ok = status == STATUS_SUCCESS
    description = "Deployment Successful!" if ok else "Deployment Failed!"
    stamp = rfc3339(now)

    if settings.audit_footer == FOOTER_AUTHOR and author:
        footer = f"<@{author}>"
    else:
        footer = FOOTER_LABEL

    fallback = f"{description} ({settings.environment}, {branch}) at {stamp}"

    attachment: Dict[str, Any] = {
        "fallback": fallback,
        "color": COLOR_SUCCESS if ok else COLOR_FAILED,
        "title": "Deployment Status",
        "text": description,
        "fields": [
            {"title": "Environment", "value": settings.environment, "short": True},
            {"title": "Branch", "value": branch, "short": True},
        ],
        "thumb_url": settings.audit_icon_url,
        "footer": footer,
        "footer_icon": settings.audit_icon_url,
        "ts": int(now.timestamp()),
    }
    return {"text": fallback, "attachments": [attachment]}


class AuditNotifier:
    def __init__(self, settings: Settings, webhook: Optional[WebhookClient] = None):
        self.settings = settings
        self.webhook = webhook or WebhookClient(settings.webhook_url)

    def notify(self, status: str, branch: str, author: Optional[str] = None) -> bool:
        payload = build_audit_payload(status, branch, author, self.settings)
        try:
            resp = self.webhook.send_dict(payload)
        except Exception:
            log.exception("Audit webhook failed (status=%s branch=%s)", status, branch)
            return False
        if not 200 <= resp.status_code < 300:
            log.error("Audit webhook rejected: HTTP %s %s", resp.status_code, resp.body)
            return False
        return True
