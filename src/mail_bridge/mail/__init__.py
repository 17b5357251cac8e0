"""Mail.app interface layer via AppleScript."""

from mail_bridge.mail.applescript import (
    MailAccessDeniedError,
    MailAppError,
    MailSendError,
    MailValidationError,
    run_applescript,
)
from mail_bridge.mail.client import (
    MailClient,
    archive_email,
    check_if_replied,
    delete_email,
    get_accounts,
    get_client,
    get_latest_mails,
    get_mailboxes,
    get_mailboxes_for_account,
    get_unread_mails,
    mark_as_read,
    request_mail_access,
    search_mails,
    send_mail,
)
from mail_bridge.mail.models import (
    AccessResult,
    EmailMessage,
    OperationResult,
    ReplyCheckResult,
)

__all__ = [
    "MailAppError",
    "MailAccessDeniedError",
    "MailSendError",
    "MailValidationError",
    "run_applescript",
    "MailClient",
    "get_client",
    "AccessResult",
    "EmailMessage",
    "OperationResult",
    "ReplyCheckResult",
    "request_mail_access",
    "get_unread_mails",
    "search_mails",
    "send_mail",
    "get_mailboxes",
    "get_accounts",
    "get_mailboxes_for_account",
    "get_latest_mails",
    "archive_email",
    "delete_email",
    "mark_as_read",
    "check_if_replied",
]
