# -*- coding: utf-8 -*-

import re
from typing import Mapping

from deploybot.config import Settings
from deploybot.errors import InvalidBranchError, InvalidKeyError


BRANCH_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def lookup_template(commands: Mapping[str, str], key: str) -> str:
    try:
        return commands[key]
    except KeyError:
        raise InvalidKeyError(key) from None


def check_branch(branch: str, settings: Settings) -> str:
    """Match the (lower-cased) token against the allowed branch; returns the branch as configured."""
    if not BRANCH_RE.fullmatch(branch) or branch != settings.branch.lower():
        raise InvalidBranchError(branch)
    return settings.branch
