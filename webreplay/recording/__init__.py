"""Interaction recordings - data model, persistence and live capture.

A recording is an ordered log of user interactions (navigations, clicks,
typing, form changes, submissions) captured from a browser page. The
playback engine consumes it read-only.
"""

from .capture_script import CaptureConfig, CaptureScriptGenerator
from .models import (
    CheckboxRecord,
    ChangeRecord,
    ClickRecord,
    Coordinates,
    ElementRecord,
    InputRecord,
    InteractionRecord,
    InteractionType,
    NavigationRecord,
    RangeRecord,
    Recording,
    StructuralWarning,
    SubmitRecord,
    UnsupportedRecord,
    parse_interaction,
)
from .recorder import InteractionRecorder
from .store import RecordingError, RecordingFormatError, RecordingNotFoundError, RecordingStore

__all__ = [
    # Models
    "InteractionType",
    "InteractionRecord",
    "NavigationRecord",
    "ElementRecord",
    "ClickRecord",
    "InputRecord",
    "ChangeRecord",
    "SubmitRecord",
    "CheckboxRecord",
    "RangeRecord",
    "UnsupportedRecord",
    "Coordinates",
    "Recording",
    "StructuralWarning",
    "parse_interaction",
    # Store
    "RecordingStore",
    "RecordingError",
    "RecordingNotFoundError",
    "RecordingFormatError",
    # Capture
    "CaptureConfig",
    "CaptureScriptGenerator",
    "InteractionRecorder",
]
