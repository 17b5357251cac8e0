"""Tests for application settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mail_bridge.config import Settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.max_emails == 20
        assert settings.max_content_preview == 300
        assert settings.default_unread_limit == 10
        assert settings.default_latest_limit == 5
        assert settings.temp_dir is None
        assert settings.log_dir == Path.home() / "Library" / "Logs"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAIL_BRIDGE_MAX_EMAILS", "7")
        monkeypatch.setenv("MAIL_BRIDGE_TIMEOUT_SECONDS", "90")

        settings = Settings(_env_file=None)

        assert settings.max_emails == 7
        assert settings.timeout_seconds == 90

    def test_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("MAIL_BRIDGE_MAX_CONTENT_PREVIEW=120\n")

        settings = Settings(_env_file=env_file)

        assert settings.max_content_preview == 120

    def test_rejects_zero_limit(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_emails=0)

    def test_log_max_bytes(self) -> None:
        settings = Settings(_env_file=None, log_rotation_size_mb=2)
        assert settings.log_max_bytes == 2 * 1024 * 1024

    def test_user_env_file_location(self) -> None:
        env_files = Settings.model_config["env_file"]

        assert Path.home() / ".config" / "mail-bridge" / ".env" in env_files
        assert env_files[-1] == Path.home() / ".config" / "mail-bridge" / ".env"
