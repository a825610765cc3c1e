"""Main entry point for webreplay."""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Optional

import structlog

from .browser import BrowserError, create_browser_session
from .config import PlaybackSettings, get_settings
from .playback import CancellationToken, FatalPreconditionError, PlaybackController, PlaybackSession
from .recording import InteractionRecorder, RecordingError, RecordingStore
from .utils.logging import configure_logging, log_operation

logger = structlog.get_logger()


def _install_interrupt(callback) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, callback)
    except (NotImplementedError, RuntimeError):
        # Platforms without loop signal support fall back to KeyboardInterrupt
        pass


def print_summary(report) -> None:
    """Print the playback summary block."""
    print("\n" + "=" * 50)
    print("PLAYBACK SUMMARY")
    print("=" * 50)
    print(f"Session ID: {report.session_id}")
    print(f"Status: {report.status.value}")
    print(f"Speed: {report.speed}x")
    print(f"Attempted: {report.attempted}/{report.total_in_log}")
    print(f"Applied: {report.applied}")
    print(f"Coordinate fallbacks: {report.fallbacks}")
    print(f"Skipped: {report.skipped}")
    print(f"Failed: {report.failed}")
    print(f"Duration: {report.duration_ms / 1000:.1f}s")
    print("=" * 50 + "\n")


async def play(
    recording_path: str,
    settings: PlaybackSettings,
    speed: Optional[float] = None,
    headless: Optional[bool] = None,
    limit: Optional[int] = None,
    start_index: int = 0,
    report_path: Optional[str] = None,
) -> int:
    """Replay a recording file; returns the process exit code."""
    try:
        recording = RecordingStore().load(recording_path)
    except RecordingError as e:
        logger.error("Could not load recording", path=recording_path, error=str(e))
        return 1

    browser = create_browser_session(settings, headless=headless)
    try:
        await browser.start()
    except BrowserError as e:
        logger.error("Could not start browser", error=str(e))
        return 1

    token = CancellationToken()
    _install_interrupt(lambda: token.cancel("interrupted"))

    controller = PlaybackController(settings)
    async with PlaybackSession(browser=browser, speed=speed or settings.speed) as session:
        try:
            report = await controller.run(recording, session, token, start_index=start_index, limit=limit)
        except FatalPreconditionError as e:
            logger.error("Playback could not start", error=str(e))
            return 1

    print_summary(report)

    if report_path:
        path = Path(report_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        logger.info("Report saved", path=str(path))

    return 0


async def record(
    url: str,
    settings: PlaybackSettings,
    headless: Optional[bool] = None,
    output_dir: Optional[str] = None,
) -> int:
    """Record interactions on ``url`` until interrupted; returns the exit code."""
    browser = create_browser_session(settings, headless=headless)
    try:
        await browser.start()
    except BrowserError as e:
        logger.error("Could not start browser", error=str(e))
        return 1

    stop_requested = asyncio.Event()
    _install_interrupt(stop_requested.set)

    try:
        recorder = InteractionRecorder(browser.page, drain_interval_ms=settings.drain_interval_ms)
        await recorder.start(url)
        print("Recording... press Ctrl+C to stop.")
        await stop_requested.wait()

        recording = await recorder.stop()
        path = recorder.default_path(output_dir or settings.recordings_dir)
        with log_operation("save_recording", path=str(path)) as op:
            RecordingStore().save(recording, path)
            op["interactions"] = len(recording)
        print(f"Saved {len(recording)} interactions to {path}")
    finally:
        await browser.close()

    return 0


def _positive_float(value: str) -> float:
    speed = float(value)
    if speed <= 0:
        raise argparse.ArgumentTypeError(f"speed must be positive, got {value}")
    return speed


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WEBREPLAY_LOG_LEVEL or INFO)"
    )
    common.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit logs as JSON"
    )

    parser = argparse.ArgumentParser(
        description="Record user interactions on a web page and replay them in a browser"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_parser = subparsers.add_parser("play", parents=[common], help="Replay a recording")
    play_parser.add_argument("recording", help="Path to the recording JSON file")
    play_parser.add_argument(
        "--speed", "-s",
        type=_positive_float,
        help="Playback speed multiplier (default: 1.0)"
    )
    play_parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Run the browser without a window"
    )
    play_parser.add_argument(
        "--limit", "-n",
        type=_non_negative_int,
        help="Replay at most N interactions"
    )
    play_parser.add_argument(
        "--start-index",
        type=_non_negative_int,
        default=0,
        help="Index of the first interaction to replay (default: 0)"
    )
    play_parser.add_argument(
        "--report", "-o",
        help="Write the playback report as JSON to this path"
    )

    record_parser = subparsers.add_parser("record", parents=[common], help="Record interactions on a page")
    record_parser.add_argument("url", help="URL to open")
    record_parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Run the browser without a window"
    )
    record_parser.add_argument(
        "--output", "-o",
        help="Directory for the recording (default: ./recordings)"
    )

    return parser


def cli(argv: Optional[list[str]] = None) -> None:
    """Command-line interface."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    configure_logging(
        level=args.log_level or settings.log_level,
        json_format=settings.json_logs if args.json_logs is None else args.json_logs,
    )

    if args.command == "play":
        code = asyncio.run(play(
            recording_path=args.recording,
            settings=settings,
            speed=args.speed,
            headless=args.headless,
            limit=args.limit,
            start_index=args.start_index,
            report_path=args.report,
        ))
    else:
        code = asyncio.run(record(
            url=args.url,
            settings=settings,
            headless=args.headless,
            output_dir=args.output,
        ))

    sys.exit(code)


if __name__ == "__main__":
    cli()
