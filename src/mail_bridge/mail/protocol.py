"""Wire format shared by the generated scripts and the reply parser.

Scripts answer in one of two ways:

- Sentinel text: ``SUCCESS``, ``SUCCESS:<payload>``, ``ERROR:<message>``,
  ``REPLIED:<date>`` or the bare ``NOREPLYFOUND`` marker.
- Delimited records for message listings. Fields are joined with
  ``FIELD_DELIM`` and records are terminated by ``RECORD_DELIM``. Field order
  is subject, sender, date sent, read status, content and, for listings that
  span mailboxes, the mailbox name.

The delimiter strings are part of the protocol and must not change without
bumping ``PROTOCOL_VERSION``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from mail_bridge.mail.models import EmailMessage

PROTOCOL_VERSION = 1

# Chosen to be practically impossible in real subjects and bodies
FIELD_DELIM = "<<<FIELD>>>"
RECORD_DELIM = "<<<EMAIL_SEP>>>"

SUCCESS = "SUCCESS"
SUCCESS_PREFIX = "SUCCESS:"
ERROR_PREFIX = "ERROR:"
REPLIED_PREFIX = "REPLIED:"
NO_REPLY_FOUND = "NOREPLYFOUND"

MIN_RECORD_FIELDS = 4

NO_SUBJECT = "No subject"
UNKNOWN_SENDER = "Unknown sender"
CONTENT_NOT_AVAILABLE = "[Content not available]"
ELLIPSIS = "..."

# Matches how AppleScript stringifies a date on an English-locale Mac
APPLESCRIPT_DATE_FORMAT = "%A, %B %d, %Y at %I:%M:%S %p"


class ReplyKind(str, Enum):
    """Tag for a decoded sentinel reply."""

    SUCCESS = "success"
    ERROR = "error"
    REPLIED = "replied"
    NO_REPLY = "no_reply"
    EMPTY = "empty"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Reply:
    """A sentinel reply split into its tag and payload."""

    kind: ReplyKind
    payload: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is ReplyKind.SUCCESS


def parse_reply(result: object) -> Reply:
    """Decode a sentinel-prefixed reply.

    Anything that is not text, or text without a known prefix, is tagged
    UNKNOWN with the raw text as payload.
    """
    if not isinstance(result, str):
        return Reply(ReplyKind.UNKNOWN)
    if not result:
        return Reply(ReplyKind.EMPTY)

    if result == SUCCESS:
        return Reply(ReplyKind.SUCCESS)
    if result.startswith(SUCCESS_PREFIX):
        return Reply(ReplyKind.SUCCESS, result[len(SUCCESS_PREFIX):])
    if result.startswith(ERROR_PREFIX):
        return Reply(ReplyKind.ERROR, result[len(ERROR_PREFIX):])
    if result.startswith(REPLIED_PREFIX):
        return Reply(ReplyKind.REPLIED, result[len(REPLIED_PREFIX):])
    if result == NO_REPLY_FOUND:
        return Reply(ReplyKind.NO_REPLY)

    return Reply(ReplyKind.UNKNOWN, result)


def truncate_preview(content: str, limit: int) -> str:
    """Cut content down to ``limit`` characters, marking the cut with an ellipsis."""
    if len(content) > limit:
        return content[:limit] + ELLIPSIS
    return content


def parse_message_records(
    text: str,
    *,
    mailbox: str,
    preview_length: int,
) -> list[EmailMessage]:
    """
    Parse a delimited message listing into EmailMessage objects.

    Args:
        text: Raw script output.
        mailbox: Mailbox label for records that do not carry their own.
        preview_length: Maximum content preview length before the ellipsis.

    Returns:
        One EmailMessage per well-formed record. Records with fewer than
        four fields are skipped.
    """
    messages = []
    for record in text.split(RECORD_DELIM):
        if not record:
            continue

        fields = record.split(FIELD_DELIM)
        if len(fields) < MIN_RECORD_FIELDS:
            continue

        content = _field(fields, 4) or CONTENT_NOT_AVAILABLE
        messages.append(
            EmailMessage(
                subject=fields[0] or NO_SUBJECT,
                sender=fields[1] or UNKNOWN_SENDER,
                date_sent=fields[2] or _now_text(),
                is_read=fields[3] == "true",
                content=truncate_preview(content, preview_length),
                mailbox=_field(fields, 5) or mailbox,
            )
        )

    return messages


def parse_name_list(result: object) -> list[str]:
    """Decode a list of names returned either as a native list or as comma-joined text."""
    if isinstance(result, (list, tuple)):
        return [name for name in result if name and isinstance(name, str)]

    # osascript prints AppleScript lists as "a, b, c"
    if isinstance(result, str) and result.strip():
        return [name.strip() for name in result.split(",") if name.strip()]

    return []


def _field(fields: list[str], index: int) -> str:
    return fields[index] if len(fields) > index else ""


def _now_text() -> str:
    return datetime.now().strftime(APPLESCRIPT_DATE_FORMAT)
