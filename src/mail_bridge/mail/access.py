"""Mail.app automation access checks."""

import logging

from mail_bridge.applescript import AppleScriptError, AutomationPermissionError
from mail_bridge.mail.applescript import (
    Invoker,
    MailAccessDeniedError,
    MailAppNotRunningError,
    _is_mail_not_running,
)
from mail_bridge.mail.models import AccessResult

logger = logging.getLogger(__name__)

PROBE_SCRIPT = '''
    tell application "Mail"
        return name
    end tell
    '''

ACCESS_GRANTED_MESSAGE = "Mail access is already granted."

REMEDIATION_MESSAGE = (
    "Mail access is required but not granted. Please:\n"
    "1. Open System Settings > Privacy & Security > Automation\n"
    "2. Find your terminal/app in the list and enable 'Mail'\n"
    "3. Make sure Mail app is running and configured with at least one account\n"
    "4. Restart your terminal and try again"
)


def check_access(invoker: Invoker) -> bool:
    """
    Probe Mail.app with a no-op script.

    Args:
        invoker: Callable that runs AppleScript source.

    Returns:
        True if Mail.app answered, False if it refused or is unavailable.
    """
    try:
        invoker(PROBE_SCRIPT)
    except AutomationPermissionError as e:
        logger.error(f"Cannot access Mail app, automation not permitted: {e}")
        return False
    except AppleScriptError as e:
        if _is_mail_not_running(str(e)):
            logger.error(f"Cannot access Mail app: {MailAppNotRunningError()}")
        else:
            logger.error(f"Cannot access Mail app: {e}")
        return False
    return True


def request_access(invoker: Invoker) -> AccessResult:
    """Check access and, when missing, explain how to grant it."""
    if check_access(invoker):
        return AccessResult(granted=True, message=ACCESS_GRANTED_MESSAGE)
    return AccessResult(granted=False, message=REMEDIATION_MESSAGE)


class AccessGate:
    """Guards every Mail.app operation behind a fresh access probe.

    Results are never cached; permission can be revoked between calls.
    """

    def __init__(self, invoker: Invoker) -> None:
        self.invoker = invoker

    def request(self) -> AccessResult:
        return request_access(self.invoker)

    def require(self) -> None:
        """Raise MailAccessDeniedError unless Mail.app can be scripted."""
        result = self.request()
        if not result.granted:
            raise MailAccessDeniedError(result.message)
