# -*- coding: utf-8 -*-
"""
Message pipeline: gate -> role -> parse -> validate -> spawn deployment.

Everything before the spawn runs on the event thread and is quick. The
deployment itself runs on its own thread so the next message is never held
up by a running script.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from deploybot.config import Settings
from deploybot.errors import InvalidBranchError, InvalidKeyError, MissingFieldsError
from deploybot.executor import DeployAttempt, Deployer, resolve_command
from deploybot.gate import check_role, is_command_message
from deploybot.parser import DEPLOY_CMD, command_name, parse_command
from deploybot.reporter import STATUS_FAILED, AuditNotifier, ChatReporter
from deploybot.validator import check_branch, lookup_template


log = logging.getLogger("deploy-slack.handler")

ACK_TEXT = "Deployment in progress…"
DENIED_TEXT = "You do not have permission to deploy."


class DeployHandler:
    def __init__(
        self,
        settings: Settings,
        commands: Mapping[str, str],
        deployer: Optional[Deployer] = None,
        audit: Optional[AuditNotifier] = None,
    ):
        self.settings = settings
        self.commands = commands
        self.audit = audit or AuditNotifier(settings)
        self.deployer = deployer or Deployer(settings, self.audit)

    def register(self, app) -> None:
        @app.event("message")
        def on_message(event, client):
            self.handle(event, client)

    def handle(self, event: Dict[str, Any], client) -> Optional[DeployAttempt]:
        """Run one message through the pipeline; returns the attempt if one was spawned."""
        if not is_command_message(event, self.settings):
            return None

        user = event["user"]
        text = event.get("text") or ""
        chat = ChatReporter(client, self.settings.channel_id)

        if not check_role(client, self.settings, user):
            if self.settings.deny_unauthorized:
                chat.post(DENIED_TEXT)
            return None

        name = command_name(text)
        if name != DEPLOY_CMD:
            if self.settings.reply_unknown_command:
                chat.post(f"Invalid command `({name})` specified.")
            return None

        try:
            cmd = parse_command(text)
        except MissingFieldsError as e:
            chat.post(str(e))
            return None

        try:
            template = lookup_template(self.commands, cmd.key)
        except InvalidKeyError as e:
            chat.post(str(e))
            return None

        try:
            branch = check_branch(cmd.branch, self.settings)
        except InvalidBranchError as e:
            log.warning("Rejected branch `%s` from %s (key=%s)", cmd.branch, user, cmd.key)
            chat.post(str(e))
            self.audit.notify(STATUS_FAILED, cmd.branch, user)
            return None

        attempt = DeployAttempt(
            author=user,
            branch=branch,
            key=cmd.key,
            command=resolve_command(template, self.settings.location, branch),
        )
        ack_ts = chat.post(ACK_TEXT)
        self.deployer.spawn(attempt, chat, ack_ts)
        return attempt
