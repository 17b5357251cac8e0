"""Mail.app operations: access gate, script, invocation and parsing in one place."""

import functools
import logging

from mail_bridge.config import Settings
from mail_bridge.logging import get_account_logger
from mail_bridge.mail import scripts
from mail_bridge.mail.access import AccessGate
from mail_bridge.mail.applescript import (
    Invoker,
    MailAppError,
    MailSendError,
    MailValidationError,
    run_applescript,
)
from mail_bridge.mail.compose import staged_body
from mail_bridge.mail.models import (
    AccessResult,
    EmailMessage,
    OperationResult,
    ReplyCheckResult,
)
from mail_bridge.mail.policy import guarded
from mail_bridge.mail.protocol import (
    ReplyKind,
    parse_message_records,
    parse_name_list,
    parse_reply,
)

logger = logging.getLogger(__name__)

UNKNOWN_RESPONSE = "Unknown response from Mail"
MISSING_TARGET = "Account, subject and sender are required"


def _operation_failure(message: str) -> OperationResult:
    return OperationResult(success=False, message=message)


def _reply_check_failure(message: str) -> ReplyCheckResult:
    return ReplyCheckResult(replied=False, message=message)


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


class MailClient:
    """Scripted access to Mail.app.

    Every operation re-checks automation access, renders its AppleScript,
    runs it once and parses the reply. How failures surface is decided per
    operation by ``mail_bridge.mail.policy``.

    Args:
        invoker: Runs AppleScript source (default: osascript).
        settings: Limits and timeouts (default: from environment).
        gate: Access gate (default: one probing through ``invoker``).
    """

    def __init__(
        self,
        invoker: Invoker | None = None,
        settings: Settings | None = None,
        gate: AccessGate | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.invoker = invoker or functools.partial(
            run_applescript, timeout=self.settings.timeout_seconds
        )
        self.gate = gate or AccessGate(self.invoker)

    def _limit(self, limit: int) -> int:
        return scripts.clamp_limit(limit, self.settings.max_emails)

    # === Access ===

    def request_mail_access(self) -> AccessResult:
        """Check whether Mail.app can be scripted, with instructions if not."""
        return self.gate.request()

    # === Listings ===

    @guarded("get_unread_mails")
    def get_unread_mails(self, limit: int | None = None) -> list[EmailMessage]:
        """
        Get unread messages across all accounts.

        Args:
            limit: Maximum messages to return (capped at ``max_emails``).

        Returns:
            List of EmailMessage objects, empty on any failure.
        """
        self.gate.require()
        if limit is None:
            limit = self.settings.default_unread_limit

        script = scripts.unread_messages_script(
            self._limit(limit), self.settings.max_content_preview
        )
        return self._parse_listing(self.invoker(script), mailbox="")

    @guarded("search_mails")
    def search_mails(self, term: str, limit: int | None = None) -> list[EmailMessage]:
        """
        Find messages whose subject contains ``term``, ignoring case.

        A blank term returns an empty list without touching Mail.app.
        """
        if _is_blank(term):
            return []
        self.gate.require()
        if limit is None:
            limit = self.settings.default_search_limit

        script = scripts.search_messages_script(
            term, self._limit(limit), self.settings.max_content_preview
        )
        return self._parse_listing(self.invoker(script), mailbox="")

    @guarded("get_latest_mails")
    def get_latest_mails(self, account: str, limit: int | None = None) -> list[EmailMessage]:
        """
        Get the newest messages of an account's INBOX.

        Falls back to the account's first mailbox when it has no INBOX. The
        mailbox label is always "<account> - INBOX", even after a fallback.
        """
        self.gate.require()
        if limit is None:
            limit = self.settings.default_latest_limit

        script = scripts.latest_messages_script(
            account, self._limit(limit), self.settings.max_content_preview
        )
        return self._parse_listing(
            self.invoker(script), mailbox=f"{account} - INBOX", may_fail=True
        )

    def _parse_listing(
        self, result: object, *, mailbox: str, may_fail: bool = False
    ) -> list[EmailMessage]:
        if not isinstance(result, str):
            logger.warning(f"Unexpected listing reply of type {type(result).__name__}")
            return []

        # Only scripts that can report ERROR: are checked, a subject may start with it too
        if may_fail:
            reply = parse_reply(result)
            if reply.kind is ReplyKind.ERROR:
                raise MailAppError(reply.payload)

        messages = parse_message_records(
            result, mailbox=mailbox, preview_length=self.settings.max_content_preview
        )
        # Scripts stop at the limit already; this keeps a misbehaving reply in bounds
        return messages[: self.settings.max_emails]

    @guarded("get_mailboxes")
    def get_mailboxes(self) -> list[str]:
        """Names of all mailboxes Mail.app exposes at the top level."""
        self.gate.require()
        return parse_name_list(self.invoker(scripts.mailboxes_script()))

    @guarded("get_accounts")
    def get_accounts(self) -> list[str]:
        """Names of all configured Mail.app accounts."""
        self.gate.require()
        return parse_name_list(self.invoker(scripts.accounts_script()))

    @guarded("get_mailboxes_for_account")
    def get_mailboxes_for_account(self, account: str) -> list[str]:
        """Names of one account's mailboxes; a blank name returns [] without a lookup."""
        if _is_blank(account):
            return []
        self.gate.require()
        return parse_name_list(self.invoker(scripts.account_mailboxes_script(account)))

    # === Sending ===

    @guarded("send_mail")
    def send_mail(
        self,
        to: str,
        subject: str,
        body: str,
        cc: str | None = None,
        bcc: str | None = None,
    ) -> str:
        """
        Send a message through Mail.app.

        Args:
            to: Recipient address.
            subject: Subject line.
            body: Plain text body.
            cc: Optional CC address.
            bcc: Optional BCC address.

        Returns:
            Confirmation naming the recipient and subject.

        Raises:
            MailValidationError: If to, subject or body is blank.
            MailSendError: If Mail.app did not accept the message.
        """
        if _is_blank(to):
            raise MailValidationError("To address is required")
        if _is_blank(subject):
            raise MailValidationError("Subject is required")
        if _is_blank(body):
            raise MailValidationError("Email body is required")

        self.gate.require()

        with staged_body(body, self.settings.temp_dir) as body_path:
            script = scripts.send_message_script(to, subject, body_path, cc=cc, bcc=bcc)
            result = self.invoker(script)

        if parse_reply(result).kind is not ReplyKind.SUCCESS:
            raise MailSendError("Failed to send email")

        logger.info(f"Sent message to {to}")
        return f'Email sent to {to} with subject "{subject}"'

    # === Actions on a single message ===

    def _run_action(self, script: str, account: str, action: str) -> OperationResult:
        reply = parse_reply(self.invoker(script))
        account_logger = get_account_logger(account)

        if reply.kind is ReplyKind.SUCCESS:
            account_logger.info(f"{action}: {reply.payload}")
            return OperationResult(success=True, message=reply.payload)
        if reply.kind is ReplyKind.ERROR:
            account_logger.warning(f"{action} failed: {reply.payload}")
            return OperationResult(success=False, message=reply.payload)

        account_logger.warning(f"{action}: unexpected reply {reply.payload!r}")
        return OperationResult(success=False, message=UNKNOWN_RESPONSE)

    @guarded("archive_email", failure=_operation_failure)
    def archive_email(self, account: str, subject: str, sender: str) -> OperationResult:
        """Move the first message matching subject and sender to the account's archive."""
        if _is_blank(account) or _is_blank(subject) or _is_blank(sender):
            return _operation_failure(MISSING_TARGET)
        self.gate.require()
        script = scripts.archive_message_script(account, subject, sender)
        return self._run_action(script, account, "archive")

    @guarded("delete_email", failure=_operation_failure)
    def delete_email(self, account: str, subject: str, sender: str) -> OperationResult:
        """Move the first message matching subject and sender to the account's trash."""
        if _is_blank(account) or _is_blank(subject) or _is_blank(sender):
            return _operation_failure(MISSING_TARGET)
        self.gate.require()
        script = scripts.delete_message_script(account, subject, sender)
        return self._run_action(script, account, "delete")

    @guarded("mark_as_read", failure=_operation_failure)
    def mark_as_read(self, account: str, subject: str, sender: str) -> OperationResult:
        """Set the read flag on the first message matching subject and sender."""
        if _is_blank(account) or _is_blank(subject) or _is_blank(sender):
            return _operation_failure(MISSING_TARGET)
        self.gate.require()
        script = scripts.mark_read_script(account, subject, sender)
        return self._run_action(script, account, "mark read")

    @guarded("check_if_replied", failure=_reply_check_failure)
    def check_if_replied(self, account: str, subject: str, sender: str) -> ReplyCheckResult:
        """
        Check the account's Sent mailbox for a reply to a received message.

        Args:
            account: Account name.
            subject: Subject of the received message.
            sender: Sender of the received message.

        Returns:
            ReplyCheckResult; ``reply_sent_at`` is set only when a reply was found.
        """
        if _is_blank(account) or _is_blank(subject) or _is_blank(sender):
            return _reply_check_failure(MISSING_TARGET)
        self.gate.require()

        reply = parse_reply(self.invoker(scripts.reply_check_script(account, subject, sender)))
        get_account_logger(account).info(f"reply check for {subject!r}: {reply.kind.value}")

        if reply.kind is ReplyKind.REPLIED:
            return ReplyCheckResult(
                replied=True, message="Reply found", reply_sent_at=reply.payload
            )
        if reply.kind is ReplyKind.NO_REPLY:
            return ReplyCheckResult(replied=False, message="No reply found")
        if reply.kind is ReplyKind.ERROR:
            return ReplyCheckResult(replied=False, message=reply.payload)
        return ReplyCheckResult(replied=False, message=UNKNOWN_RESPONSE)


_default_client: MailClient | None = None


def get_client() -> MailClient:
    """Shared client built from environment settings on first use."""
    global _default_client
    if _default_client is None:
        _default_client = MailClient()
    return _default_client


def request_mail_access() -> AccessResult:
    return get_client().request_mail_access()


def get_unread_mails(limit: int | None = None) -> list[EmailMessage]:
    return get_client().get_unread_mails(limit)


def search_mails(term: str, limit: int | None = None) -> list[EmailMessage]:
    return get_client().search_mails(term, limit)


def send_mail(
    to: str,
    subject: str,
    body: str,
    cc: str | None = None,
    bcc: str | None = None,
) -> str:
    return get_client().send_mail(to, subject, body, cc=cc, bcc=bcc)


def get_mailboxes() -> list[str]:
    return get_client().get_mailboxes()


def get_accounts() -> list[str]:
    return get_client().get_accounts()


def get_mailboxes_for_account(account: str) -> list[str]:
    return get_client().get_mailboxes_for_account(account)


def get_latest_mails(account: str, limit: int | None = None) -> list[EmailMessage]:
    return get_client().get_latest_mails(account, limit)


def archive_email(account: str, subject: str, sender: str) -> OperationResult:
    return get_client().archive_email(account, subject, sender)


def delete_email(account: str, subject: str, sender: str) -> OperationResult:
    return get_client().delete_email(account, subject, sender)


def mark_as_read(account: str, subject: str, sender: str) -> OperationResult:
    return get_client().mark_as_read(account, subject, sender)


def check_if_replied(account: str, subject: str, sender: str) -> ReplyCheckResult:
    return get_client().check_if_replied(account, subject, sender)
