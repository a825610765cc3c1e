"""Tests for InteractionPlayer."""

import asyncio

import pytest

from tests.fakes import FakeBrowserSession, FakeElement
from webreplay.playback import FatalPreconditionError, InteractionPlayer, PlaybackStatus
from webreplay.recording import RecordingNotFoundError


@pytest.fixture
def browser():
    return FakeBrowserSession(
        url="https://example.com/",
        elements={
            "#go": FakeElement("BUTTON"),
            "#q": FakeElement("INPUT"),
            "#search": FakeElement("FORM"),
        },
    )


@pytest.fixture
def player(fast_settings):
    return InteractionPlayer(fast_settings)


class TestInteractionPlayer:
    """Tests for the load / speed / start / stop surface."""

    def test_load_recording(self, player, recording_file):
        recording = player.load_recording(recording_file)

        assert player.recording is recording
        assert len(recording) == 4

    def test_load_missing(self, player, tmp_path):
        with pytest.raises(RecordingNotFoundError):
            player.load_recording(tmp_path / "missing.json")

    @pytest.mark.parametrize("speed", [0, -0.5])
    def test_set_speed_rejects_non_positive(self, player, speed):
        with pytest.raises(ValueError):
            player.set_speed(speed)

    def test_set_speed(self, player):
        player.set_speed(4)
        assert player.speed == 4.0

    @pytest.mark.asyncio
    async def test_start_without_recording(self, player, browser):
        with pytest.raises(FatalPreconditionError):
            await player.start(browser)

    @pytest.mark.asyncio
    async def test_start_without_browser(self, player, recording_file):
        player.load_recording(recording_file)
        with pytest.raises(FatalPreconditionError):
            await player.start(None)

    @pytest.mark.asyncio
    async def test_start_plays_everything(self, player, recording_file, browser):
        player.load_recording(recording_file)
        player.set_speed(1000)

        report = await player.start(browser)

        assert report.status == PlaybackStatus.COMPLETED
        assert report.attempted == 4
        assert report.failed == 0
        assert not player.is_playing

    @pytest.mark.asyncio
    async def test_start_with_limit(self, player, recording_file, browser):
        player.load_recording(recording_file)
        player.set_speed(1000)

        report = await player.start(browser, limit=2)

        assert report.attempted == 2
        assert report.total_in_log == 4
        assert len(player.recording) == 4

    @pytest.mark.asyncio
    async def test_stop_cancels_and_closes(self, player, recording_file, browser):
        player.load_recording(recording_file)

        run = asyncio.create_task(player.start(browser))
        await asyncio.sleep(0)
        await player.stop()
        report = await run

        assert report.status == PlaybackStatus.STOPPED
        assert report.attempted < 4
        assert browser.close_count == 1

    @pytest.mark.asyncio
    async def test_stop_when_idle(self, player):
        await player.stop()
