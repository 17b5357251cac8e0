"""Application configuration management."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="MAIL_BRIDGE_",
        env_file=[
            ".env",  # Project-level defaults (lower priority)
            Path.home() / ".config" / "mail-bridge" / ".env",  # User config (higher priority)
        ],
        env_file_encoding="utf-8",
    )

    # Query limits
    max_emails: int = Field(
        default=20, ge=1, description="Upper bound on messages returned by any listing"
    )
    max_content_preview: int = Field(
        default=300, ge=1, description="Characters of body kept in a message preview"
    )
    default_unread_limit: int = Field(
        default=10, ge=1, description="Unread messages returned when no limit is given"
    )
    default_search_limit: int = Field(
        default=10, ge=1, description="Search hits returned when no limit is given"
    )
    default_latest_limit: int = Field(
        default=5, ge=1, description="Latest messages returned when no limit is given"
    )

    # AppleScript execution
    timeout_seconds: int = Field(
        default=30, ge=1, description="Seconds before an osascript call is abandoned"
    )
    temp_dir: Path | None = Field(
        default=None, description="Directory for staged message bodies (default: system temp)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / "Library" / "Logs",
        description="Directory for log files (per-account logs written here)",
    )
    log_rotation_size_mb: int = Field(
        default=5, ge=1, description="Max size per log file in MB before rotation"
    )
    log_backup_count: int = Field(
        default=3, ge=0, description="Number of rotated log files to keep"
    )

    @property
    def log_max_bytes(self) -> int:
        """Rotation size in bytes."""
        return self.log_rotation_size_mb * 1024 * 1024
