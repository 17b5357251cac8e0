"""AppleScript execution wrapper for Mail.app integration.

This module re-exports from the shared applescript package, while providing
Mail-specific error classes.
"""

from mail_bridge.applescript.base import (
    Invoker,
    escape_applescript_string,
    run_applescript,
)
from mail_bridge.applescript.errors import AppleScriptError, AppNotRunningError

__all__ = [
    "Invoker",
    "run_applescript",
    "escape_applescript_string",
    "MailAppError",
    "MailAppNotRunningError",
    "MailAccessDeniedError",
    "MailSendError",
    "MailValidationError",
]


class MailAppError(AppleScriptError):
    """Raised when a Mail.app AppleScript command fails."""

    pass


class MailAppNotRunningError(AppNotRunningError):
    """Raised when Mail.app is not running."""

    def __init__(self) -> None:
        super().__init__("Mail.app")


class MailAccessDeniedError(MailAppError):
    """Raised when Mail.app cannot be scripted from this process.

    The message is the remediation text shown to the user.
    """

    def __init__(self, remediation: str) -> None:
        super().__init__(remediation, script=None)
        self.remediation = remediation


class MailSendError(MailAppError):
    """Raised when an outgoing message could not be handed to Mail.app."""

    pass


class MailValidationError(ValueError):
    """Raised when required input is missing before anything is sent to Mail.app."""

    pass


def _is_mail_not_running(error_msg: str) -> bool:
    """Check if an AppleScript error says Mail.app is not running."""
    return "-600" in error_msg or "not running" in error_msg.lower()
