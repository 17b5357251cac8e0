"""Pytest fixtures for mail-bridge tests."""

from pathlib import Path

import pytest

from mail_bridge.config import Settings
from mail_bridge.logging import reset_logging, setup_logging
from mail_bridge.mail.access import AccessGate
from mail_bridge.mail.client import MailClient
from mail_bridge.mail.protocol import FIELD_DELIM, RECORD_DELIM


class FakeInvoker:
    """Stands in for osascript and records every script it is given.

    Replies are handed out in order; the last one repeats.
    """

    def __init__(self, *replies: object, error: Exception | None = None) -> None:
        self.replies = list(replies)
        self.error = error
        self.scripts: list[str] = []

    def __call__(self, script: str) -> object:
        self.scripts.append(script)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0] if self.replies else ""

    @property
    def calls(self) -> int:
        return len(self.scripts)


def record(*fields: str) -> str:
    """Encode one message record the way the generated scripts do."""
    return FIELD_DELIM.join(fields) + RECORD_DELIM


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path: Path):
    """Keep log files out of ~/Library/Logs."""
    setup_logging(log_dir=tmp_path / "logs")
    yield
    reset_logging()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings that ignore the environment and stage bodies under tmp_path."""
    body_dir = tmp_path / "bodies"
    body_dir.mkdir()
    return Settings(_env_file=None, temp_dir=body_dir)


@pytest.fixture
def make_client(settings: Settings):
    """Build a MailClient around a FakeInvoker.

    Access is probed through a separate fake so the operation's own
    invocations can be counted exactly.
    """

    def _make(*replies: object, error: Exception | None = None, gate_error: Exception | None = None):
        invoker = FakeInvoker(*replies, error=error)
        gate = AccessGate(FakeInvoker("Mail", error=gate_error))
        return MailClient(invoker=invoker, settings=settings, gate=gate), invoker

    return _make
