"""AppleScript source generation for Mail.app operations.

Every builder is a pure function returning script text. Free text is passed
through ``escape_applescript_string`` before interpolation; numeric limits are
clamped in Python and interpolated as integer literals.
"""

import re
from pathlib import Path

from mail_bridge.mail.applescript import escape_applescript_string
from mail_bridge.mail.protocol import (
    CONTENT_NOT_AVAILABLE,
    ERROR_PREFIX,
    FIELD_DELIM,
    NO_REPLY_FOUND,
    RECORD_DELIM,
    REPLIED_PREFIX,
    SUCCESS,
    SUCCESS_PREFIX,
)

_REPLY_PREFIX_RE = re.compile(r"^(Re:|RE:|Fwd:|FWD:)\s*", re.IGNORECASE)
_ANGLE_ADDRESS_RE = re.compile(r"<([^>]+)>")


def clamp_limit(limit: int, maximum: int) -> int:
    """Bound a requested result count to ``1..maximum``."""
    return max(1, min(int(limit), maximum))


def strip_reply_prefix(subject: str) -> str:
    """Remove a leading Re:/Fwd: marker from a subject line."""
    return _REPLY_PREFIX_RE.sub("", subject, count=1)


def extract_address(sender: str) -> str:
    """Pull the bare address out of ``Name <address>``, lower-cased.

    Falls back to the whole sender text when there are no angle brackets.
    """
    match = _ANGLE_ADDRESS_RE.search(sender)
    address = match.group(1) if match else sender
    return address.lower()


def _content_preview(msg_var: str, preview: int) -> str:
    """AppleScript fragment that leaves a truncated body in ``msgContent``."""
    return f'''
                set msgContent to "{CONTENT_NOT_AVAILABLE}"
                try
                    set rawContent to content of {msg_var}
                    if (length of rawContent) > {preview} then
                        set msgContent to (text 1 thru {preview} of rawContent) & "..."
                    else
                        set msgContent to rawContent
                    end if
                end try'''


def _record(*fields: str) -> str:
    """AppleScript expression appending one delimited record to ``output``."""
    joined = f' & "{FIELD_DELIM}" & '.join(fields)
    return f'set output to output & {joined} & "{RECORD_DELIM}"'


def _find_message(subject: str, sender: str) -> str:
    """AppleScript fragment resolving ``foundMsg`` across the account's mailboxes."""
    return f'''
        set foundMsg to missing value
        repeat with mb in mailboxes of targetAccount
            try
                set msgs to (messages of mb whose subject contains "{subject}" and sender contains "{sender}")
                if (count of msgs) > 0 then
                    set foundMsg to item 1 of msgs
                    exit repeat
                end if
            end try
        end repeat

        if foundMsg is missing value then
            return "{ERROR_PREFIX}Message not found"
        end if'''


def unread_messages_script(limit: int, preview: int) -> str:
    """Unread messages across every mailbox of every account, as delimited records."""
    return f'''
    tell application "Mail"
        set output to ""
        set emailCount to 0
        repeat with acct in accounts
            if emailCount >= {limit} then exit repeat
            repeat with mb in mailboxes of acct
                if emailCount >= {limit} then exit repeat
                try
                    set mailboxName to name of mb
                    set unreadMessages to (messages of mb whose read status is false)
                    repeat with msg in unreadMessages
                        if emailCount >= {limit} then exit repeat
                        try
                            set msgSubject to subject of msg
                            set msgSender to sender of msg
                            set msgDate to (date sent of msg) as string
                            {_content_preview("msg", preview)}
                            {_record("msgSubject", "msgSender", "msgDate", '"false"', "msgContent", "mailboxName")}
                            set emailCount to emailCount + 1
                        end try
                    end repeat
                end try
            end repeat
        end repeat
        return output
    end tell
    '''


def search_messages_script(term: str, limit: int, preview: int) -> str:
    """Messages whose subject contains ``term`` (case-insensitive), as delimited records."""
    term_escaped = escape_applescript_string(term.lower())
    return f'''
    tell application "Mail"
        set output to ""
        set emailCount to 0
        set searchTerm to "{term_escaped}"
        repeat with acct in accounts
            if emailCount >= {limit} then exit repeat
            repeat with mb in mailboxes of acct
                if emailCount >= {limit} then exit repeat
                try
                    set mailboxName to name of mb
                    set hits to (messages of mb whose subject contains searchTerm)
                    repeat with msg in hits
                        if emailCount >= {limit} then exit repeat
                        try
                            set msgSubject to subject of msg
                            set msgSender to sender of msg
                            set msgDate to (date sent of msg) as string
                            set msgRead to read status of msg
                            {_content_preview("msg", preview)}
                            {_record("msgSubject", "msgSender", "msgDate", "msgRead", "msgContent", "mailboxName")}
                            set emailCount to emailCount + 1
                        end try
                    end repeat
                end try
            end repeat
        end repeat
        return output
    end tell
    '''


def send_message_script(
    to: str,
    subject: str,
    body_path: Path,
    cc: str | None = None,
    bcc: str | None = None,
) -> str:
    """
    Compose and send a message whose body is read from ``body_path``.

    Args:
        to: Recipient address.
        subject: Subject line.
        body_path: UTF-8 text file holding the message body.
        cc: Optional CC address; omitted from the script when blank.
        bcc: Optional BCC address; omitted from the script when blank.
    """
    subject_escaped = escape_applescript_string(subject)
    to_escaped = escape_applescript_string(to)
    path_escaped = escape_applescript_string(str(body_path))

    recipients = [
        f'make new to recipient with properties {{address:"{to_escaped}"}}'
    ]
    if cc and cc.strip():
        cc_escaped = escape_applescript_string(cc.strip())
        recipients.append(
            f'make new cc recipient with properties {{address:"{cc_escaped}"}}'
        )
    if bcc and bcc.strip():
        bcc_escaped = escape_applescript_string(bcc.strip())
        recipients.append(
            f'make new bcc recipient with properties {{address:"{bcc_escaped}"}}'
        )
    recipient_lines = "\n            ".join(recipients)

    return f'''
    tell application "Mail"
        activate

        -- Body comes from a file so newlines and quotes survive untouched
        set emailBody to read file POSIX file "{path_escaped}" as «class utf8»

        set newMessage to make new outgoing message with properties {{subject:"{subject_escaped}", content:emailBody, visible:true}}

        tell newMessage
            {recipient_lines}
        end tell

        send newMessage
        return "{SUCCESS}"
    end tell
    '''


def mailboxes_script() -> str:
    return '''
    tell application "Mail"
        try
            set boxNames to {}
            repeat with mb in (every mailbox)
                try
                    set end of boxNames to name of mb
                end try
            end repeat
            return boxNames
        on error
            return {}
        end try
    end tell
    '''


def accounts_script() -> str:
    return '''
    tell application "Mail"
        try
            set accountNames to {}
            repeat with acct in (every account)
                try
                    set end of accountNames to name of acct
                end try
            end repeat
            return accountNames
        on error
            return {}
        end try
    end tell
    '''


def account_mailboxes_script(account: str) -> str:
    account_escaped = escape_applescript_string(account)
    return f'''
    tell application "Mail"
        set boxList to {{}}
        try
            set targetAccount to first account whose name is "{account_escaped}"
            repeat with mb in mailboxes of targetAccount
                try
                    set end of boxList to name of mb
                end try
            end repeat
        on error
            return {{}}
        end try
        return boxList
    end tell
    '''


def latest_messages_script(account: str, limit: int, preview: int) -> str:
    """Newest messages of an account's INBOX (or its first mailbox), as delimited records."""
    account_escaped = escape_applescript_string(account)
    return f'''
    tell application "Mail"
        set output to ""
        try
            set targetAccount to first account whose name is "{account_escaped}"
            try
                set targetMailbox to mailbox "INBOX" of targetAccount
            on error
                set targetMailbox to first mailbox of targetAccount
            end try

            set msgCount to count of messages of targetMailbox
            if msgCount > {limit} then set msgCount to {limit}

            repeat with i from 1 to msgCount
                try
                    set msg to message i of targetMailbox
                    set msgSubject to subject of msg
                    set msgSender to sender of msg
                    set msgDate to (date sent of msg) as string
                    set msgRead to read status of msg
                    {_content_preview("msg", preview)}
                    {_record("msgSubject", "msgSender", "msgDate", "msgRead", "msgContent")}
                end try
            end repeat
        on error errMsg
            return "{ERROR_PREFIX}" & errMsg
        end try
        return output
    end tell
    '''


def _move_to_special_mailbox_script(
    account: str,
    subject: str,
    sender: str,
    *,
    box_names: tuple[str, str],
    contains: str,
    missing_error: str,
    done_message: str,
) -> str:
    account_escaped = escape_applescript_string(account)
    subject_escaped = escape_applescript_string(subject)
    sender_escaped = escape_applescript_string(sender)
    exact, gmail = box_names
    return f'''
    tell application "Mail"
        try
            set targetAccount to first account whose name is "{account_escaped}"
            set destBox to missing value
            repeat with mb in mailboxes of targetAccount
                set mbName to name of mb
                if mbName is "{exact}" or mbName is "{gmail}" or mbName contains "{contains}" then
                    set destBox to mb
                    exit repeat
                end if
            end repeat

            if destBox is missing value then
                return "{ERROR_PREFIX}{missing_error}"
            end if
            {_find_message(subject_escaped, sender_escaped)}

            move foundMsg to destBox
            return "{SUCCESS_PREFIX}{done_message}"
        on error errMsg
            return "{ERROR_PREFIX}" & errMsg
        end try
    end tell
    '''


def archive_message_script(account: str, subject: str, sender: str) -> str:
    """Move the first matching message to the account's archive mailbox."""
    account_escaped = escape_applescript_string(account)
    return _move_to_special_mailbox_script(
        account,
        subject,
        sender,
        box_names=("Archive", "[Gmail]/All Mail"),
        contains="Archive",
        missing_error=f"No Archive mailbox found for account {account_escaped}",
        done_message="Message archived",
    )


def delete_message_script(account: str, subject: str, sender: str) -> str:
    """Move the first matching message to the account's trash mailbox."""
    return _move_to_special_mailbox_script(
        account,
        subject,
        sender,
        box_names=("Trash", "[Gmail]/Trash"),
        contains="Trash",
        missing_error="No Trash mailbox found",
        done_message="Message deleted",
    )


def mark_read_script(account: str, subject: str, sender: str) -> str:
    account_escaped = escape_applescript_string(account)
    subject_escaped = escape_applescript_string(subject)
    sender_escaped = escape_applescript_string(sender)
    return f'''
    tell application "Mail"
        try
            set targetAccount to first account whose name is "{account_escaped}"
            {_find_message(subject_escaped, sender_escaped)}

            set read status of foundMsg to true
            return "{SUCCESS_PREFIX}Message marked as read"
        on error errMsg
            return "{ERROR_PREFIX}" & errMsg
        end try
    end tell
    '''


def reply_check_script(account: str, subject: str, sender: str) -> str:
    """
    Look in the account's Sent mailbox for a reply to a received message.

    Args:
        account: Account name.
        subject: Subject of the received message; a Re:/Fwd: prefix is ignored.
        sender: Sender of the received message, bare or ``Name <address>``.
    """
    account_escaped = escape_applescript_string(account)
    subject_pattern = escape_applescript_string(strip_reply_prefix(subject))
    recipient_pattern = escape_applescript_string(extract_address(sender))
    return f'''
    tell application "Mail"
        try
            set targetAccount to first account whose name is "{account_escaped}"

            set sentBox to missing value
            repeat with mb in mailboxes of targetAccount
                set mbName to name of mb
                if mbName is "Sent" or mbName is "Sent Messages" or mbName contains "Sent Mail" or mbName is "[Gmail]/Sent Mail" then
                    set sentBox to mb
                    exit repeat
                end if
            end repeat

            if sentBox is missing value then
                return "{ERROR_PREFIX}Could not find Sent mailbox"
            end if

            set foundReply to false
            set replyDate to ""
            set subjectPattern to "{subject_pattern}"
            set recipientPattern to "{recipient_pattern}"

            repeat with msg in messages of sentBox
                try
                    if subject of msg contains subjectPattern then
                        repeat with recip in recipients of msg
                            if address of recip contains recipientPattern then
                                set foundReply to true
                                set replyDate to (date sent of msg) as string
                                exit repeat
                            end if
                        end repeat
                    end if
                    if foundReply then exit repeat
                end try
            end repeat

            if foundReply then
                return "{REPLIED_PREFIX}" & replyDate
            else
                return "{NO_REPLY_FOUND}"
            end if
        on error errMsg
            return "{ERROR_PREFIX}" & errMsg
        end try
    end tell
    '''
