"""Tests for MailClient operations against a fake AppleScript invoker."""

import re
from pathlib import Path

import pytest

from conftest import record
from mail_bridge.applescript import AppleScriptError
from mail_bridge.mail.access import REMEDIATION_MESSAGE
from mail_bridge.mail.applescript import MailSendError, MailValidationError
from mail_bridge.mail.client import UNKNOWN_RESPONSE
from mail_bridge.mail.models import OperationResult, ReplyCheckResult

DENIED = AppleScriptError("Not authorized to send Apple events to Mail. (-1743)")


def _body_path(script: str) -> Path:
    return Path(re.search(r'POSIX file "([^"]+)"', script).group(1))


class TestGetUnreadMails:
    """Tests for get_unread_mails()."""

    def test_parses_records(self, make_client) -> None:
        reply = (
            record("Invoice", "Billing <billing@example.com>", "d1", "false", "Pay me", "INBOX")
            + record("Lunch?", "bob@example.com", "d2", "false", "Noon", "Work")
        )
        client, invoker = make_client(reply)

        messages = client.get_unread_mails(5)

        assert invoker.calls == 1
        assert [m.subject for m in messages] == ["Invoice", "Lunch?"]
        assert [m.mailbox for m in messages] == ["INBOX", "Work"]
        assert all(m.is_read is False for m in messages)

    def test_default_limit(self, make_client) -> None:
        client, invoker = make_client("")
        client.get_unread_mails()
        assert "emailCount >= 10" in invoker.scripts[0]

    @pytest.mark.parametrize("limit", [21, 100])
    def test_limit_clamped_to_maximum(self, make_client, limit: int) -> None:
        client, invoker = make_client("")

        client.get_unread_mails(limit)

        assert "emailCount >= 20" in invoker.scripts[0]
        assert f"emailCount >= {limit}" not in invoker.scripts[0]

    def test_result_never_exceeds_maximum(self, make_client) -> None:
        reply = "".join(record(f"s{i}", "f", "d", "false", "c", "INBOX") for i in range(30))
        client, _ = make_client(reply)

        assert len(client.get_unread_mails(50)) == 20

    def test_subject_starting_with_error_is_a_message(self, make_client) -> None:
        client, _ = make_client(record("ERROR: build failed", "ci@example.com", "d", "false", "log", "INBOX"))

        messages = client.get_unread_mails()

        assert messages[0].subject == "ERROR: build failed"

    def test_invocation_failure_returns_empty(self, make_client) -> None:
        client, _ = make_client(error=AppleScriptError("Mail got an error"))
        assert client.get_unread_mails() == []

    def test_access_denied_returns_empty_without_invocation(self, make_client) -> None:
        client, invoker = make_client("", gate_error=DENIED)

        assert client.get_unread_mails() == []
        assert invoker.calls == 0

    def test_non_text_reply_returns_empty(self, make_client) -> None:
        client, _ = make_client(["not", "records"])
        assert client.get_unread_mails() == []


class TestSearchMails:
    """Tests for search_mails()."""

    @pytest.mark.parametrize("term", ["", "   ", "\t\n"])
    def test_blank_term_never_invokes(self, make_client, term: str) -> None:
        client, invoker = make_client(record("s", "f", "d", "true"))

        assert client.search_mails(term) == []
        assert invoker.calls == 0

    def test_parses_hits(self, make_client) -> None:
        client, invoker = make_client(record("Project update", "a@example.com", "d", "true", "body", "INBOX"))

        messages = client.search_mails("PROJECT", 3)

        assert 'set searchTerm to "project"' in invoker.scripts[0]
        assert "emailCount >= 3" in invoker.scripts[0]
        assert messages[0].subject == "Project update"
        assert messages[0].is_read is True

    def test_failure_returns_empty(self, make_client) -> None:
        client, _ = make_client(error=AppleScriptError("timeout"))
        assert client.search_mails("anything") == []


class TestGetLatestMails:
    """Tests for get_latest_mails()."""

    def test_mailbox_label_is_account_inbox(self, make_client) -> None:
        client, _ = make_client(
            record("One", "a@example.com", "d1", "true", "x" * 400)
            + record("Two", "b@example.com", "d2", "false")
        )

        messages = client.get_latest_mails("Work")

        assert [m.mailbox for m in messages] == ["Work - INBOX", "Work - INBOX"]
        assert messages[0].content == "x" * 300 + "..."
        assert messages[1].content == "[Content not available]"

    def test_default_and_clamped_limit(self, make_client) -> None:
        client, invoker = make_client("")

        client.get_latest_mails("Work")
        client.get_latest_mails("Work", 99)

        assert "if msgCount > 5 then" in invoker.scripts[0]
        assert "if msgCount > 20 then" in invoker.scripts[1]

    def test_error_reply_returns_empty(self, make_client) -> None:
        client, _ = make_client("ERROR:Can't get account \"Nope\".")
        assert client.get_latest_mails("Nope") == []

    def test_short_records_dropped(self, make_client) -> None:
        client, _ = make_client(record("Only", "three", "fields"))
        assert client.get_latest_mails("Work") == []


class TestNameListings:
    """Tests for mailbox and account listings."""

    def test_mailboxes_from_text(self, make_client) -> None:
        client, _ = make_client("INBOX, Sent Messages, Trash")
        assert client.get_mailboxes() == ["INBOX", "Sent Messages", "Trash"]

    def test_accounts_from_native_list(self, make_client) -> None:
        client, _ = make_client(["iCloud", "", "Gmail"])
        assert client.get_accounts() == ["iCloud", "Gmail"]

    def test_accounts_failure_returns_empty(self, make_client) -> None:
        client, _ = make_client(error=AppleScriptError("boom"))
        assert client.get_accounts() == []

    def test_mailboxes_for_account(self, make_client) -> None:
        client, invoker = make_client("INBOX, Archive")

        assert client.get_mailboxes_for_account("iCloud") == ["INBOX", "Archive"]
        assert 'first account whose name is "iCloud"' in invoker.scripts[0]

    @pytest.mark.parametrize("account", ["", "   "])
    def test_blank_account_never_invokes(self, make_client, account: str) -> None:
        client, invoker = make_client("INBOX")

        assert client.get_mailboxes_for_account(account) == []
        assert invoker.calls == 0


class TestSendMail:
    """Tests for send_mail()."""

    @pytest.mark.parametrize(
        "to,subject,body",
        [
            ("", "Hi", "Body"),
            ("   ", "Hi", "Body"),
            ("a@example.com", "", "Body"),
            ("a@example.com", " ", "Body"),
            ("a@example.com", "Hi", ""),
            ("a@example.com", "Hi", "\n\t "),
        ],
    )
    def test_blank_input_rejected_without_invocation(
        self, make_client, to: str, subject: str, body: str
    ) -> None:
        client, invoker = make_client("SUCCESS")

        with pytest.raises(MailValidationError):
            client.send_mail(to, subject, body)
        assert invoker.calls == 0

    def test_success(self, make_client) -> None:
        client, invoker = make_client("SUCCESS")

        message = client.send_mail("jane@example.com", 'Q3 "numbers"', "See attached.")

        assert invoker.calls == 1
        assert "jane@example.com" in message
        assert 'Q3 "numbers"' in message

    def test_cc_bcc_passed_to_script(self, make_client) -> None:
        client, invoker = make_client("SUCCESS")

        client.send_mail("a@example.com", "Hi", "Body", cc="c@example.com", bcc="d@example.com")

        assert 'cc recipient with properties {address:"c@example.com"}' in invoker.scripts[0]
        assert 'bcc recipient with properties {address:"d@example.com"}' in invoker.scripts[0]

    def test_body_file_exists_during_call_and_removed_after(self, make_client) -> None:
        seen: dict[str, object] = {}
        client, invoker = make_client("SUCCESS")

        def invoke(script: str) -> str:
            path = _body_path(script)
            seen["path"] = path
            seen["existed"] = path.exists()
            seen["body"] = path.read_text(encoding="utf-8")
            return invoker(script)

        client.invoker = invoke
        client.send_mail("a@example.com", "Hi", "  Line one\nLine \"two\"  ")

        assert seen["existed"] is True
        assert seen["body"] == 'Line one\nLine "two"'
        assert not seen["path"].exists()

    def test_body_file_removed_when_invoker_raises(self, make_client, settings) -> None:
        client, invoker = make_client(error=AppleScriptError("Mail crashed"))

        with pytest.raises(MailSendError, match="Error sending email: Mail crashed"):
            client.send_mail("a@example.com", "Hi", "Body")

        assert not _body_path(invoker.scripts[0]).exists()
        assert list(settings.temp_dir.iterdir()) == []

    def test_unexpected_reply_raises(self, make_client) -> None:
        client, _ = make_client("ERROR:nope")

        with pytest.raises(MailSendError, match="Failed to send email"):
            client.send_mail("a@example.com", "Hi", "Body")

    def test_access_denied_raises(self, make_client) -> None:
        client, invoker = make_client("SUCCESS", gate_error=DENIED)

        with pytest.raises(MailSendError) as exc_info:
            client.send_mail("a@example.com", "Hi", "Body")

        assert REMEDIATION_MESSAGE in str(exc_info.value)
        assert invoker.calls == 0


@pytest.mark.parametrize(
    "method,error_prefix",
    [
        ("archive_email", "Error archiving email: "),
        ("delete_email", "Error deleting email: "),
        ("mark_as_read", "Error marking email as read: "),
    ],
)
class TestMessageActions:
    """Shared behaviour of archive, delete and mark-as-read."""

    def test_error_reply(self, make_client, method: str, error_prefix: str) -> None:
        client, _ = make_client("ERROR:boom")

        result = getattr(client, method)("Work", "Invoice", "billing@example.com")

        assert result == OperationResult(success=False, message="boom")

    def test_success_reply(self, make_client, method: str, error_prefix: str) -> None:
        client, _ = make_client("SUCCESS:Done it")

        result = getattr(client, method)("Work", "Invoice", "billing@example.com")

        assert result == OperationResult(success=True, message="Done it")

    def test_unknown_reply(self, make_client, method: str, error_prefix: str) -> None:
        client, _ = make_client("42")

        result = getattr(client, method)("Work", "Invoice", "billing@example.com")

        assert result == OperationResult(success=False, message=UNKNOWN_RESPONSE)

    def test_invocation_failure_is_structured(self, make_client, method: str, error_prefix: str) -> None:
        client, _ = make_client(error=AppleScriptError("osascript died"))

        result = getattr(client, method)("Work", "Invoice", "billing@example.com")

        assert result.success is False
        assert result.message == error_prefix + "osascript died"

    def test_access_denied_is_structured(self, make_client, method: str, error_prefix: str) -> None:
        client, invoker = make_client("SUCCESS:x", gate_error=DENIED)

        result = getattr(client, method)("Work", "Invoice", "billing@example.com")

        assert result.success is False
        assert result.message == error_prefix + REMEDIATION_MESSAGE
        assert invoker.calls == 0

    def test_blank_target_rejected(self, make_client, method: str, error_prefix: str) -> None:
        client, invoker = make_client("SUCCESS:x")

        result = getattr(client, method)("Work", "  ", "billing@example.com")

        assert result.success is False
        assert invoker.calls == 0


class TestArchiveEmail:
    """Archive-specific behaviour."""

    def test_archived(self, make_client) -> None:
        client, invoker = make_client("SUCCESS:Message archived")

        result = client.archive_email("Gmail", "Invoice", "billing@example.com")

        assert result == OperationResult(success=True, message="Message archived")
        assert '"[Gmail]/All Mail"' in invoker.scripts[0]

    def test_writes_account_log(self, make_client, tmp_path: Path) -> None:
        client, _ = make_client("SUCCESS:Message archived")

        client.archive_email("My Gmail", "Invoice", "billing@example.com")

        log_text = (tmp_path / "logs" / "mail-bridge-My-Gmail.log").read_text()
        assert "archive: Message archived" in log_text


class TestCheckIfReplied:
    """Tests for check_if_replied()."""

    def test_replied(self, make_client) -> None:
        client, _ = make_client("REPLIED:Tuesday, March 4, 2025 at 10:15:00 AM")

        result = client.check_if_replied("Work", "Project update", "Jane <jane@example.com>")

        assert result == ReplyCheckResult(
            replied=True,
            message="Reply found",
            reply_sent_at="Tuesday, March 4, 2025 at 10:15:00 AM",
        )

    def test_no_reply(self, make_client) -> None:
        client, _ = make_client("NOREPLYFOUND")

        result = client.check_if_replied("Work", "Project update", "jane@example.com")

        assert result == ReplyCheckResult(replied=False, message="No reply found")
        assert result.reply_sent_at is None

    def test_error_reply(self, make_client) -> None:
        client, _ = make_client("ERROR:Could not find Sent mailbox")

        result = client.check_if_replied("Work", "Project update", "jane@example.com")

        assert result.replied is False
        assert result.message == "Could not find Sent mailbox"

    def test_pattern_built_from_stripped_subject(self, make_client) -> None:
        client, invoker = make_client("NOREPLYFOUND")

        client.check_if_replied("Work", "Re: Project update", "Jane <Jane@Example.com>")

        assert 'set subjectPattern to "Project update"' in invoker.scripts[0]
        assert 'set recipientPattern to "jane@example.com"' in invoker.scripts[0]

    def test_invocation_failure(self, make_client) -> None:
        client, _ = make_client(error=AppleScriptError("boom"))

        result = client.check_if_replied("Work", "Project update", "jane@example.com")

        assert result == ReplyCheckResult(replied=False, message="Error checking for reply: boom")

    def test_unknown_reply(self, make_client) -> None:
        client, _ = make_client("")

        result = client.check_if_replied("Work", "Project update", "jane@example.com")

        assert result.message == UNKNOWN_RESPONSE


class TestRequestMailAccess:
    """Tests for request_mail_access()."""

    def test_granted(self, make_client) -> None:
        client, _ = make_client()
        assert client.request_mail_access().granted is True

    def test_denied(self, make_client) -> None:
        client, _ = make_client(gate_error=DENIED)

        result = client.request_mail_access()

        assert result.granted is False
        assert result.message == REMEDIATION_MESSAGE
