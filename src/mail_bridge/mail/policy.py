"""How each Mail.app operation reports failure.

Read operations degrade to an empty list so a listing never crashes the
caller. Mutating operations report a structured failure result. Sending
propagates, since a silently dropped message is worse than an exception.
"""

import functools
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from mail_bridge.logging import get_error_logger
from mail_bridge.mail.applescript import MailSendError, MailValidationError

T = TypeVar("T")


class FailurePolicy(str, Enum):
    """What an operation does with an unexpected error."""

    DEGRADE = "degrade"  # log and return an empty result
    REPORT = "report"  # log and return a failure result
    PROPAGATE = "propagate"  # log and raise


OPERATION_POLICIES: dict[str, FailurePolicy] = {
    "get_unread_mails": FailurePolicy.DEGRADE,
    "search_mails": FailurePolicy.DEGRADE,
    "get_mailboxes": FailurePolicy.DEGRADE,
    "get_accounts": FailurePolicy.DEGRADE,
    "get_mailboxes_for_account": FailurePolicy.DEGRADE,
    "get_latest_mails": FailurePolicy.DEGRADE,
    "archive_email": FailurePolicy.REPORT,
    "delete_email": FailurePolicy.REPORT,
    "mark_as_read": FailurePolicy.REPORT,
    "check_if_replied": FailurePolicy.REPORT,
    "send_mail": FailurePolicy.PROPAGATE,
}

# Completes "Error <description>: <cause>"
FAILURE_DESCRIPTIONS: dict[str, str] = {
    "get_unread_mails": "getting unread emails",
    "search_mails": "searching emails",
    "get_mailboxes": "getting mailboxes",
    "get_accounts": "getting accounts",
    "get_mailboxes_for_account": "getting mailboxes for account",
    "get_latest_mails": "getting latest emails",
    "archive_email": "archiving email",
    "delete_email": "deleting email",
    "mark_as_read": "marking email as read",
    "check_if_replied": "checking for reply",
    "send_mail": "sending email",
}


def failure_message(operation: str, error: BaseException) -> str:
    return f"Error {FAILURE_DESCRIPTIONS[operation]}: {error}"


def guarded(
    operation: str,
    *,
    failure: Callable[[str], Any] | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Apply the operation's failure policy to a function.

    Args:
        operation: Key into OPERATION_POLICIES.
        failure: Builds the failure result from a message (REPORT only).

    Raises:
        ValueError: If a REPORT operation has no failure builder.
    """
    policy = OPERATION_POLICIES[operation]
    if policy is FailurePolicy.REPORT and failure is None:
        raise ValueError(f"{operation} reports failures but has no failure builder")

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except MailValidationError:
                # Bad input is the caller's problem, not Mail.app's
                raise
            except Exception as e:
                message = failure_message(operation, e)
                get_error_logger().error(message)
                if policy is FailurePolicy.DEGRADE:
                    return []  # type: ignore[return-value]
                if policy is FailurePolicy.REPORT:
                    return failure(message)  # type: ignore[misc]
                raise MailSendError(message) from e

        wrapper.policy = policy  # type: ignore[attr-defined]
        return wrapper

    return decorator
