# -*- coding: utf-8 -*-
"""
Deploy Slack Bot launcher.

Usage:
    python deploy_slack.py

Reads .env from the working directory plus dictionary.json (or
$DEPLOY_DICTIONARY). See .env.example.
"""

import sys

from deploybot.bot import main


if __name__ == "__main__":
    sys.exit(main())
