"""
Tests for Settings loading and caching.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from jjagent.config import Settings, get_settings, refresh_settings


class TestSettings:
    """Tests for defaults, environment overrides and masking."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.GOOGLE_API_KEY == ""
        assert settings.JJ_BINARY == "jj"
        assert settings.MAX_CONTEXT_FILES == 50
        assert settings.MAX_CONTEXT_TOKENS == 32000
        assert settings.DURATION_LIMIT_FACTOR == 2.0
        assert settings.OPTIMIZE_SUGGESTION_FACTOR == 1.5
        assert settings.WATCH_DEBOUNCE_MS == 1000

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_CONTEXT_FILES", "5")
        monkeypatch.setenv("WATCH_ENABLED", "false")

        settings = Settings()

        assert settings.MAX_CONTEXT_FILES == 5
        assert settings.WATCH_ENABLED is False

    def test_dotenv_file(self, tmp_path: Path) -> None:
        # The autouse fixture chdirs into tmp_path
        (tmp_path / ".env").write_text("JJ_BINARY=/opt/jj/bin/jj\nUNRELATED=1\n")

        assert Settings().JJ_BINARY == "/opt/jj/bin/jj"

    def test_negative_budget_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_CONTEXT_TOKENS", "-1")
        with pytest.raises(ValidationError):
            Settings()

    def test_masked(self) -> None:
        masked = Settings(GOOGLE_API_KEY="abcdefgh5678").masked()
        assert masked["GOOGLE_API_KEY"] == "****5678"
        assert Settings().masked()["GOOGLE_API_KEY"] == ""


class TestSettingsCache:
    """Tests for get_settings/refresh_settings."""

    def test_cached_until_refreshed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("MAX_CONTEXT_FILES", "9")

        assert get_settings() is first

        refresh_settings()
        assert get_settings().MAX_CONTEXT_FILES == 9
