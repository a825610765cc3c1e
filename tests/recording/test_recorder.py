"""Tests for InteractionRecorder."""

from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest

from webreplay.recording import ClickRecord, InteractionRecorder, NavigationRecord


@pytest.fixture
def mock_page():
    """Create mock Playwright page."""
    page = MagicMock()
    page.add_init_script = AsyncMock()
    page.evaluate = AsyncMock(return_value=[])
    page.goto = AsyncMock()
    page.title = AsyncMock(return_value="Example")
    page.main_frame = MagicMock()
    page.main_frame.url = "https://example.com/"
    return page


@pytest.fixture
def clock():
    ticks = count(1750718332000, 1000)
    return lambda: next(ticks)


@pytest.fixture
def recorder(mock_page, clock):
    return InteractionRecorder(mock_page, drain_interval_ms=60_000, clock=clock)


class TestRecorderLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_start_installs_script(self, recorder, mock_page):
        await recorder.start("https://example.com/")

        mock_page.add_init_script.assert_awaited_once()
        script = mock_page.add_init_script.call_args.args[0]
        mock_page.evaluate.assert_any_await(script)
        mock_page.on.assert_called_once_with("framenavigated", recorder._on_frame_navigated)
        mock_page.goto.assert_awaited_once_with("https://example.com/")
        assert recorder.is_recording

        await recorder.stop()

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, recorder, mock_page):
        await recorder.start()
        await recorder.start()

        assert mock_page.add_init_script.await_count == 1
        await recorder.stop()

    @pytest.mark.asyncio
    async def test_stop_drains_and_detaches(self, recorder, mock_page):
        await recorder.start()
        mock_page.evaluate.return_value = [
            {"type": "click", "timestamp": 1750718332500, "selector": "#go"},
        ]

        recording = await recorder.stop()

        assert not recorder.is_recording
        mock_page.remove_listener.assert_called_once_with("framenavigated", recorder._on_frame_navigated)
        assert len(recording) == 1
        assert isinstance(recording.interactions[0], ClickRecord)
        assert recording.session_id == "1750718332000"


class TestDrain:
    """Tests for draining the page buffer."""

    @pytest.mark.asyncio
    async def test_drain_adds_page_title(self, recorder, mock_page):
        mock_page.evaluate.return_value = [{"type": "click", "timestamp": 1}]

        drained = await recorder.drain()

        assert drained == 1
        assert recorder.interactions[0]["pageTitle"] == "Example"

    @pytest.mark.asyncio
    async def test_failed_drain_keeps_nothing(self, recorder, mock_page):
        """Test a failing drain leaves the records to the next drain."""
        mock_page.evaluate.side_effect = RuntimeError("Execution context was destroyed")

        assert await recorder.drain() == 0
        assert recorder.interactions == []

    @pytest.mark.asyncio
    async def test_title_failure_tolerated(self, recorder, mock_page):
        mock_page.evaluate.return_value = [{"type": "click", "timestamp": 1}]
        mock_page.title.side_effect = RuntimeError("page closed")

        assert await recorder.drain() == 1
        assert recorder.interactions[0]["pageTitle"] is None


class TestNavigationCapture:
    """Tests for main frame navigation records."""

    def test_main_frame_recorded(self, recorder, mock_page):
        recorder._on_frame_navigated(mock_page.main_frame)

        assert recorder.interactions[0]["type"] == "navigation"
        assert recorder.interactions[0]["url"] == "https://example.com/"

    def test_child_frame_ignored(self, recorder):
        recorder._on_frame_navigated(MagicMock())
        assert recorder.interactions == []

    def test_finalize_orders_by_timestamp(self, recorder, mock_page):
        recorder._on_frame_navigated(mock_page.main_frame)  # timestamp 1750718333000
        recorder.interactions.append({"type": "click", "timestamp": 1750718332500, "selector": "#a"})

        recording = recorder.finalize()

        assert [r.kind for r in recording.interactions] == ["click", "navigation"]
        assert isinstance(recording.interactions[1], NavigationRecord)
        assert recording.total_interactions == 2
        assert recording.warnings == []


def test_default_path(recorder, tmp_path):
    path = recorder.default_path(tmp_path)
    assert path == tmp_path / "interactions_1750718332000.json"
