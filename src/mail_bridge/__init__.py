"""Scripted access to macOS Mail.app over AppleScript."""

__version__ = "0.1.0"
