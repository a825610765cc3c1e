"""Shared fixtures for webreplay tests."""

import json
import os

import pytest

from webreplay.config import PlaybackSettings


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path - included in CI)"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end test requiring a real browser"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep WEBREPLAY_* variables of the developer shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("WEBREPLAY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fast_settings():
    """Settings with zero pauses so dispatch tests run instantly."""
    return PlaybackSettings(
        _env_file=None,
        min_delay_ms=0,
        selector_wait_timeout_ms=10,
        click_timeout_ms=10,
        type_delay_ms=0,
        implicit_navigation_pause_ms=0,
        explicit_navigation_pause_ms=0,
    )


@pytest.fixture
def sample_document():
    """A small but complete interaction log as decoded JSON."""
    return {
        "sessionId": "1750718332829",
        "startTime": "2025-06-23T22:38:52.829Z",
        "endTime": "2025-06-23T22:40:10.114Z",
        "totalInteractions": 4,
        "interactions": [
            {
                "type": "navigation",
                "timestamp": 1750718333000,
                "url": "https://example.com/",
                "title": "Example",
            },
            {
                "type": "click",
                "timestamp": 1750718334000,
                "url": "https://example.com/",
                "tagName": "BUTTON",
                "id": "go",
                "className": "btn primary",
                "selector": "#go",
                "coordinates": {"x": 120, "y": 48},
                "text": "Go",
            },
            {
                "type": "text",
                "timestamp": 1750718335500,
                "url": "https://example.com/",
                "tagName": "INPUT",
                "id": "q",
                "name": "q",
                "selector": "#q",
                "value": "hello",
            },
            {
                "type": "submit",
                "timestamp": 1750718336000,
                "url": "https://example.com/",
                "tagName": "FORM",
                "id": "search",
                "selector": "#search",
                "action": "https://example.com/search",
                "method": "get",
            },
        ],
    }


@pytest.fixture
def recording_file(tmp_path, sample_document):
    """The sample document written to disk."""
    path = tmp_path / "interactions_1750718332829.json"
    path.write_text(json.dumps(sample_document))
    return path
