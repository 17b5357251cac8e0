"""AppleScript execution wrapper for macOS app integrations."""

import logging
import subprocess
from collections.abc import Callable

from mail_bridge.applescript.errors import AppleScriptError, AutomationPermissionError

logger = logging.getLogger(__name__)

# Anything that takes AppleScript source and hands back the interpreter's reply.
# osascript always replies with text; in-process fakes may return a list.
Invoker = Callable[[str], str | list[str]]

DEFAULT_TIMEOUT = 30


def run_applescript(script: str, *, timeout: int = DEFAULT_TIMEOUT) -> str:
    """
    Execute an AppleScript and return the output.

    Args:
        script: The AppleScript code to execute.
        timeout: Maximum seconds to wait for execution.

    Returns:
        The stdout from the AppleScript execution.

    Raises:
        AutomationPermissionError: If macOS refused the Apple event.
        AppleScriptError: If the script fails to execute.
    """
    try:
        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise AppleScriptError(f"AppleScript timed out after {timeout}s", script) from e
    except FileNotFoundError as e:
        raise AppleScriptError("osascript not found. This tool requires macOS.", script) from e

    if result.returncode != 0:
        error_msg = result.stderr.strip() or "Unknown AppleScript error"
        logger.debug(f"osascript exited with {result.returncode}: {error_msg}")
        if "-1743" in error_msg or "not authorized" in error_msg.lower():
            raise AutomationPermissionError(error_msg, script)
        raise AppleScriptError(error_msg, script)

    # Only the trailing newline osascript adds; leading spaces can be data
    return result.stdout.rstrip("\n")


def escape_applescript_string(value: str) -> str:
    """Escape a string for safe inclusion in AppleScript.

    Handles backslashes, quotes, and control characters that would
    break AppleScript string syntax.
    """
    # First escape backslashes, then quotes
    result = value.replace("\\", "\\\\").replace('"', '\\"')
    # Replace control characters that break AppleScript strings
    # (newlines, tabs, carriage returns) with spaces
    result = result.replace("\n", " ").replace("\r", " ").replace("\t", " ")
    return result
