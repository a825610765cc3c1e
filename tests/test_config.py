"""Tests for configuration module."""

import pytest
from pydantic import ValidationError

from webreplay.config import DEFAULT_USER_AGENT, PlaybackSettings, get_settings


class TestPlaybackSettings:
    """Tests for PlaybackSettings class."""

    def test_default_values(self):
        """Test default values match playback timing constants."""
        settings = PlaybackSettings(_env_file=None)

        assert settings.speed == 1.0
        assert settings.min_delay_ms == 50
        assert settings.selector_wait_timeout_ms == 5000
        assert settings.click_timeout_ms == 3000
        assert settings.type_delay_ms == 50
        assert settings.navigation_timeout_ms == 15000
        assert settings.implicit_navigation_pause_ms == 1000
        assert settings.explicit_navigation_pause_ms == 1500
        assert settings.headless is False
        assert settings.browser_type == "chromium"
        assert settings.user_agent == DEFAULT_USER_AGENT

    def test_loads_from_env(self, monkeypatch):
        """Test that settings load from WEBREPLAY_ variables."""
        monkeypatch.setenv("WEBREPLAY_SPEED", "2.5")
        monkeypatch.setenv("WEBREPLAY_HEADLESS", "true")
        monkeypatch.setenv("WEBREPLAY_BROWSER_TYPE", "webkit")

        settings = get_settings()

        assert settings.speed == 2.5
        assert settings.headless is True
        assert settings.browser_type == "webkit"

    @pytest.mark.parametrize("speed", [0, -1])
    def test_speed_must_be_positive(self, speed):
        with pytest.raises(ValidationError):
            PlaybackSettings(_env_file=None, speed=speed)

    def test_unknown_browser_rejected(self):
        with pytest.raises(ValidationError):
            PlaybackSettings(_env_file=None, browser_type="netscape")

    def test_env_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("WEBREPLAY_TYPE_DELAY_MS=5\nUNRELATED=1\n")
        monkeypatch.chdir(tmp_path)

        assert get_settings().type_delay_ms == 5
