"""Configuration management for webreplay."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class PlaybackSettings(BaseSettings):
    """Playback and recording settings loaded from environment variables.

    Every field can be overridden with a ``WEBREPLAY_`` prefixed variable,
    e.g. ``WEBREPLAY_SPEED=2`` or ``WEBREPLAY_HEADLESS=true``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBREPLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Playback
    speed: float = Field(1.0, gt=0, description="Playback speed multiplier (2 = twice as fast)")
    min_delay_ms: int = Field(50, ge=0, description="Minimum delay between two events")

    # Element resolution and actions
    selector_wait_timeout_ms: int = Field(5000, description="Bounded wait for the primary selector")
    click_timeout_ms: int = Field(3000, description="Timeout for element clicks")
    type_delay_ms: int = Field(50, description="Delay between typed characters")
    select_all_shortcut: str = Field("Control+A", description="Key chord that selects existing text")

    # Navigation
    navigation_timeout_ms: int = Field(15000, description="Timeout for page navigation")
    implicit_navigation_pause_ms: int = Field(1000, description="Pause after navigating to an event's page")
    explicit_navigation_pause_ms: int = Field(1500, description="Pause after a recorded navigation")

    # Browser
    headless: bool = Field(False, description="Run the browser without a window")
    browser_type: Literal["chromium", "firefox", "webkit"] = Field("chromium", description="Browser engine")
    viewport_width: Optional[int] = Field(None, description="Viewport width, None for the window size")
    viewport_height: Optional[int] = Field(None, description="Viewport height, None for the window size")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User agent sent by the browser")

    # Recording
    recordings_dir: str = Field("./recordings", description="Directory for recorded sessions")
    drain_interval_ms: int = Field(1000, gt=0, description="How often the page buffer is drained")

    # Logging
    log_level: str = Field("INFO", description="Log level")
    json_logs: bool = Field(False, description="Render logs as JSON")


def get_settings() -> PlaybackSettings:
    """Get playback settings."""
    return PlaybackSettings()
