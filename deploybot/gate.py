# -*- coding: utf-8 -*-
"""
Authorization gate.

A message is only looked at when it is a plain user message, posted in the
deploy channel, starting with `!`. The author must also belong to the deploy
user group (Slack's closest thing to a role).
"""

import logging
from typing import Any, Dict

from slack_sdk.errors import SlackApiError

from deploybot.config import Settings


log = logging.getLogger("deploy-slack.gate")

PREFIX = "!"


def is_bot_message(event: Dict[str, Any]) -> bool:
    return bool(event.get("bot_id")) or event.get("subtype") == "bot_message"


def is_command_message(event: Dict[str, Any], settings: Settings) -> bool:
    if is_bot_message(event):
        return False
    # edits, deletes, joins ... are never commands
    if event.get("subtype"):
        return False
    if not event.get("user"):
        return False
    if event.get("channel") != settings.channel_id:
        return False
    return (event.get("text") or "").startswith(PREFIX)


def check_role(client, settings: Settings, user_id: str) -> bool:
    try:
        resp = client.usergroups_users_list(usergroup=settings.role_id)
    except (SlackApiError, OSError) as e:
        log.debug("usergroups.users.list failed for %s: %s", settings.role_id, e)
        return False
    return user_id in (resp.get("users") or [])
