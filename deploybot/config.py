# -*- coding: utf-8 -*-
"""
Settings for the deploy bot.

Every variable is looked up by name. Required ones raise ConfigError naming
the missing variable; optional ones fall back to a default.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from deploybot.errors import ConfigError


# ---------------- Defaults ----------------
DEFAULT_ENVIRONMENT = "Production"
DEFAULT_DICTIONARY_PATH = "dictionary.json"
DEFAULT_CANONICAL_BRANCH = "main"
DEFAULT_AUDIT_ICON = "https://r2.fivemanage.com/3i2fhQIkHIaRFDy1YIvi8/images/image.png"

FOOTER_STATIC = "static"
FOOTER_AUTHOR = "author"
FOOTER_POLICIES = {FOOTER_STATIC, FOOTER_AUTHOR}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    bot_token: str
    app_token: str
    branch: str
    location: str
    channel_id: str
    role_id: str
    webhook_url: str
    environment: str = DEFAULT_ENVIRONMENT
    dictionary_path: str = DEFAULT_DICTIONARY_PATH
    canonical_branch: str = DEFAULT_CANONICAL_BRANCH
    audit_icon_url: str = DEFAULT_AUDIT_ICON
    deny_unauthorized: bool = False
    reply_unknown_command: bool = False
    audit_footer: str = FOOTER_STATIC


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if value is None or not value.strip():
        raise ConfigError(f"missing environment variable: {name}")
    return value.strip()


def _optional(environ: Mapping[str, str], name: str, default: str) -> str:
    value = (environ.get(name) or "").strip()
    return value or default


def _flag(environ: Mapping[str, str], name: str) -> bool:
    value = (environ.get(name) or "").strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"invalid boolean for {name}: {value!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    footer = _optional(env, "DEPLOY_AUDIT_FOOTER", FOOTER_STATIC).lower()
    if footer not in FOOTER_POLICIES:
        raise ConfigError(
            f"invalid DEPLOY_AUDIT_FOOTER: {footer!r} "
            f"(expected one of: {', '.join(sorted(FOOTER_POLICIES))})"
        )

    return Settings(
        bot_token=_required(env, "SLACK_BOT_TOKEN"),
        app_token=_required(env, "SLACK_APP_TOKEN"),
        # kept as configured; it is what gets checked out
        branch=_required(env, "DEPLOY_BRANCH"),
        location=_required(env, "DEPLOY_LOCATION"),
        channel_id=_required(env, "DEPLOY_CHANNEL"),
        role_id=_required(env, "DEPLOY_ROLE"),
        webhook_url=_required(env, "DEPLOY_LOG_WEBHOOK"),
        environment=_optional(env, "DEPLOY_ENVIRONMENT", DEFAULT_ENVIRONMENT),
        dictionary_path=_optional(env, "DEPLOY_DICTIONARY", DEFAULT_DICTIONARY_PATH),
        canonical_branch=_optional(env, "DEPLOY_CANONICAL_BRANCH", DEFAULT_CANONICAL_BRANCH),
        audit_icon_url=_optional(env, "DEPLOY_AUDIT_ICON", DEFAULT_AUDIT_ICON),
        deny_unauthorized=_flag(env, "DEPLOY_DENY_UNAUTHORIZED"),
        reply_unknown_command=_flag(env, "DEPLOY_REPLY_UNKNOWN_COMMAND"),
        audit_footer=footer,
    )
