"""Result types returned by Mail.app operations."""

from dataclasses import dataclass


@dataclass
class EmailMessage:
    """Represents an email message read from Mail.app.

    Messages carry no stable handle; actions re-resolve their target by
    subject and sender at call time.
    """

    subject: str
    sender: str  # May be in "Name <address>" form
    date_sent: str  # AppleScript's own date text, e.g. "Friday, December 20, 2024 at 10:30:00 AM"
    content: str  # Preview, truncated with "..."
    is_read: bool
    mailbox: str

    def __str__(self) -> str:
        status = " " if self.is_read else "*"
        return f"{status} {self.sender}: {self.subject}"


@dataclass
class AccessResult:
    """Outcome of probing whether Mail.app can be scripted."""

    granted: bool
    message: str


@dataclass
class OperationResult:
    """Outcome of a mutating action such as archive or delete."""

    success: bool
    message: str


@dataclass
class ReplyCheckResult:
    """Outcome of looking for a reply in the Sent mailbox."""

    replied: bool
    message: str
    reply_sent_at: str | None = None
