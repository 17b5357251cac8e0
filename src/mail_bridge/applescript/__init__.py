"""Shared AppleScript execution infrastructure for macOS app integrations."""

from mail_bridge.applescript.base import (
    Invoker,
    escape_applescript_string,
    run_applescript,
)
from mail_bridge.applescript.errors import (
    AppleScriptError,
    AppNotRunningError,
    AutomationPermissionError,
)

__all__ = [
    "Invoker",
    "run_applescript",
    "escape_applescript_string",
    "AppleScriptError",
    "AppNotRunningError",
    "AutomationPermissionError",
]
