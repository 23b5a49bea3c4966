# -*- coding: utf-8 -*-


class DeployBotError(Exception):
    pass


# ---------------- Startup ----------------
class ConfigError(DeployBotError):
    pass


class DictionaryError(DeployBotError):
    pass


# ---------------- Command validation ----------------
class CommandError(DeployBotError):
    """Raised for a well-formed `!` message that cannot be deployed."""


class MissingFieldsError(CommandError):
    pass


class InvalidKeyError(CommandError):
    def __init__(self, key: str):
        super().__init__(f"Invalid key `({key})` specified.")
        self.key = key


class InvalidBranchError(CommandError):
    def __init__(self, branch: str):
        super().__init__(f"Invalid branch `({branch})` specified.")
        self.branch = branch
