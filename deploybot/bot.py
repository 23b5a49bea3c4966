# -*- coding: utf-8 -*-
"""
Deploy Slack Bot (Socket Mode + `!deploy <branch> <key>` messages)

Startup is all-or-nothing: bad settings, a bad dictionary, a rejected token or
a failed Socket Mode connection end the process with exit code 1.
"""

import logging
import os
import sys

from dotenv import load_dotenv
from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from deploybot.dictionary import load_dictionary
from deploybot.config import load_settings
from deploybot.errors import DeployBotError
from deploybot.handler import DeployHandler


log = logging.getLogger("deploy-slack")


def configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))


def main() -> int:
    load_dotenv(".env")
    configure_logging()

    try:
        settings = load_settings()
        commands = load_dictionary(settings.dictionary_path)
    except DeployBotError as e:
        log.error("Startup failed: %s", e)
        return 1

    try:
        app = App(token=settings.bot_token)
    except Exception as e:
        log.error("Slack authentication failed: %s", e)
        return 1

    DeployHandler(settings, commands).register(app)

    log.info("Starting deploy Slack bot...")
    log.info("DEPLOY_BRANCH=%s", settings.branch)
    log.info("DEPLOY_LOCATION=%s", settings.location)
    log.info("DEPLOY_CHANNEL=%s", settings.channel_id)
    log.info("DEPLOY_ROLE=%s", settings.role_id)
    log.info("DEPLOY_ENVIRONMENT=%s", settings.environment)
    log.info("DICTIONARY=%s (%d keys)", settings.dictionary_path, len(commands))

    handler = SocketModeHandler(app, settings.app_token)
    try:
        handler.start()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        log.error("Socket Mode connection failed: %s", e)
        return 1
    finally:
        handler.close()

    log.info("Shutdown complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
