# -*- coding: utf-8 -*-

from typing import NamedTuple

from deploybot.errors import MissingFieldsError
from deploybot.gate import PREFIX


DEPLOY_CMD = "deploy"
USAGE_TEXT = f"Missing fields. Usage: `{PREFIX}{DEPLOY_CMD} <branch> <key>`"


class ParsedCommand(NamedTuple):
    command: str
    branch: str
    key: str


def strip_prefix(text: str) -> str:
    return text[len(PREFIX):] if text.startswith(PREFIX) else text


def command_name(text: str) -> str:
    parts = strip_prefix(text).split()
    return parts[0].lower() if parts else ""


def parse_command(text: str) -> ParsedCommand:
    """
    `!deploy <branch> <key> [ignored...]` -> ParsedCommand.

    Command and branch are lower-cased, the key is kept as typed because
    dictionary keys are case-sensitive.
    """
    parts = strip_prefix(text).split()
    if len(parts) < 3:
        raise MissingFieldsError(USAGE_TEXT)
    return ParsedCommand(parts[0].lower(), parts[1].lower(), parts[2])
