# -*- coding: utf-8 -*-
"""
Deployment executor.

Behavior:
- The dictionary template gets ${LOCATION} and ${BRANCH} substituted, then runs
  via `bash -c` with stderr folded into stdout.
- Each run has a fixed budget (DEPLOY_TIMEOUT). On expiry the whole process
  group is killed, so the deploy script's children go down with it.
- Every accepted command gets its own thread. Deployments are not queued,
  serialized or rate limited.
- The outcome is reported once: the "in progress" message is edited and one
  audit notification is sent.
"""

import enum
import logging
import os
import signal
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional

from deploybot.config import Settings
from deploybot.reporter import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    AuditNotifier,
    ChatReporter,
    output_block,
)


log = logging.getLogger("deploy-slack.executor")

DEPLOY_TIMEOUT = 120  # seconds
KILL_GRACE = 2  # seconds to collect output after the kill
SHELL = "bash"


# ---------------- Command building ----------------
def resolve_command(template: str, location: str, branch: str) -> str:
    return template.replace("${LOCATION}", location).replace("${BRANCH}", branch)


def build_shell_command(command: str) -> List[str]:
    return [SHELL, "-c", command]


# ---------------- Running ----------------
@dataclass
class RunResult:
    returncode: Optional[int]
    output: str
    timed_out: bool = False
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.error

    def describe(self) -> str:
        if self.error:
            return self.error
        return f"exit status {self.returncode}"


def _to_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def _drain(proc: subprocess.Popen) -> str:
    # a child that left the group (setsid, daemonized server) can hold the pipe open
    try:
        out, _ = proc.communicate(timeout=KILL_GRACE)
    except subprocess.TimeoutExpired as e:
        out = e.stdout
        proc.stdout.close()
        proc.wait()
    return _to_text(out)


def run_command(command: str, timeout: float = DEPLOY_TIMEOUT) -> RunResult:
    argv = build_shell_command(command)
    try:
        proc = subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            universal_newlines=True,
            start_new_session=True,
        )
    except OSError as e:
        return RunResult(returncode=None, output="", error=f"failed to start: {e}")

    try:
        out, _ = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_group(proc)
        output = _drain(proc)
        return RunResult(
            returncode=proc.returncode,
            output=output,
            timed_out=True,
            error=f"timed out after {timeout}s",
        )

    return RunResult(returncode=proc.returncode, output=_to_text(out))


# ---------------- Deploy attempts ----------------
class Outcome(enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeployAttempt:
    author: str
    branch: str
    key: str
    command: str
    outcome: Outcome = Outcome.PENDING
    output: str = ""

    def finish(self, outcome: Outcome, output: str = "") -> None:
        if self.outcome is not Outcome.PENDING:
            raise RuntimeError(f"deploy attempt already finished as {self.outcome.value}")
        if outcome is Outcome.PENDING:
            raise ValueError("cannot finish an attempt as pending")
        self.outcome = outcome
        self.output = output


def success_text(attempt: DeployAttempt, settings: Settings) -> str:
    text = "Deployment successful; wait 10s before restart."
    canonical = settings.canonical_branch
    if attempt.branch.lower() != canonical.lower():
        text += f" Make sure to return to `{canonical}` once done (e.g. `!deploy {canonical} {attempt.key}`)."
    return text


def failure_text(result: RunResult) -> str:
    return f"Deployment failed: {result.describe()}\n{output_block(result.output, limit=3800)}"


class Deployer:
    def __init__(self, settings: Settings, audit: AuditNotifier, timeout: float = DEPLOY_TIMEOUT):
        self.settings = settings
        self.audit = audit
        self.timeout = timeout

    def spawn(self, attempt: DeployAttempt, chat: ChatReporter, ack_ts: Optional[str]) -> threading.Thread:
        t = threading.Thread(
            target=self._run,
            args=(attempt, chat, ack_ts),
            name=f"deploy-{attempt.key}-{attempt.author}",
            daemon=True,
        )
        t.start()
        return t

    def _run(self, attempt: DeployAttempt, chat: ChatReporter, ack_ts: Optional[str]) -> None:
        try:
            self.execute(attempt, chat, ack_ts)
        except Exception:
            log.exception("Deployment of `%s` crashed", attempt.key)
            if attempt.outcome is Outcome.PENDING:
                attempt.finish(Outcome.FAILED)
                chat.update(ack_ts, "Deployment failed: internal error")
                self.audit.notify(STATUS_FAILED, attempt.branch, attempt.author)

    def execute(self, attempt: DeployAttempt, chat: ChatReporter, ack_ts: Optional[str]) -> None:
        log.info("Executing for %s: %s", attempt.author, attempt.command)
        result = run_command(attempt.command, timeout=self.timeout)

        if result.ok:
            attempt.finish(Outcome.SUCCESS, result.output)
            log.info(
                "Deployment succeeded: key=%s branch=%s author=%s command=%s",
                attempt.key, attempt.branch, attempt.author, attempt.command,
            )
            chat.update(ack_ts, success_text(attempt, self.settings))
            self.audit.notify(STATUS_SUCCESS, attempt.branch, attempt.author)
            return

        attempt.finish(Outcome.FAILED, result.output)
        log.error(
            "Deployment failed (%s): key=%s branch=%s author=%s command=%s\n%s",
            result.describe(), attempt.key, attempt.branch, attempt.author,
            attempt.command, result.output,
        )
        chat.update(ack_ts, failure_text(result))
        self.audit.notify(STATUS_FAILED, attempt.branch, attempt.author)
