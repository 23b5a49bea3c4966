# -*- coding: utf-8 -*-
"""Shared fixtures: settings, a fake Slack client and a fake audit webhook."""

import sys
from pathlib import Path
from types import MappingProxyType
from unittest.mock import MagicMock

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from deploybot.config import Settings  # noqa: E402
from deploybot.reporter import AuditNotifier  # noqa: E402


CHANNEL = "C0DEPLOY"
ROLE = "S0DEPLOY"
DEPLOYER = "U0ALLOWED"
OUTSIDER = "U0NOROLE"


@pytest.fixture
def settings():
    return Settings(
        bot_token="xoxb-test",
        app_token="xapp-test",
        branch="main",
        location="/srv/app",
        channel_id=CHANNEL,
        role_id=ROLE,
        webhook_url="https://hooks.example.com/audit",
    )


@pytest.fixture
def commands():
    return MappingProxyType({
        "good-key": "cd ${LOCATION} && git checkout ${BRANCH}",
        "Mixed": "echo ${BRANCH}",
    })


@pytest.fixture
def client():
    c = MagicMock()
    c.usergroups_users_list.return_value = {"ok": True, "users": [DEPLOYER, "U0OTHER"]}
    c.chat_postMessage.return_value = {"ok": True, "ts": "1700000000.000100"}
    c.chat_update.return_value = {"ok": True}
    return c


@pytest.fixture
def webhook():
    w = MagicMock()
    w.send_dict.return_value = MagicMock(status_code=200, body="ok")
    return w


@pytest.fixture
def audit(settings, webhook):
    return AuditNotifier(settings, webhook=webhook)


def message(text, user=DEPLOYER, channel=CHANNEL, **extra):
    event = {"type": "message", "user": user, "channel": channel, "text": text, "ts": "1.0"}
    event.update(extra)
    return event


def audit_statuses(webhook):
    return [c.args[0]["attachments"][0]["text"] for c in webhook.send_dict.call_args_list]
