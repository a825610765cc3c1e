"""Recording Store - load and persist interaction logs.

The store only checks the structural shape of a recording. A declared
``totalInteractions`` that disagrees with the actual sequence is reported as
a StructuralWarning and playback uses the real sequence length.
"""

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from .models import InteractionRecord, Recording, StructuralWarning, parse_interaction

logger = structlog.get_logger()


class RecordingError(Exception):
    """Base exception for recording store errors."""
    pass


class RecordingNotFoundError(RecordingError):
    """Recording file does not exist."""
    pass


class RecordingFormatError(RecordingError):
    """Recording content is not a structurally valid interaction log."""
    pass


class RecordingStore:
    """Loads and saves recordings in the interaction log JSON format.

    Example:
        store = RecordingStore()
        recording = store.load("recordings/interactions_1750718332829.json")
        for warning in recording.warnings:
            print(warning)
    """

    def __init__(self):
        self.log = logger.bind(component="recording_store")

    def load(self, path: str | Path) -> Recording:
        """Load a recording from a JSON file.

        Raises:
            RecordingNotFoundError: The file does not exist
            RecordingFormatError: The file is not a valid interaction log
        """
        path = Path(path)
        if not path.is_file():
            raise RecordingNotFoundError(f"Recording file not found: {path}")

        recording = self.loads(path.read_text(encoding="utf-8"))
        self.log.info(
            "Loaded recording",
            path=str(path),
            session_id=recording.session_id,
            total_interactions=recording.total_interactions,
            actual_interactions=len(recording),
            start_time=recording.start_time.isoformat() if recording.start_time else None,
            end_time=recording.end_time.isoformat() if recording.end_time else None,
        )
        return recording

    def loads(self, text: str) -> Recording:
        """Parse a recording from a JSON string."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise RecordingFormatError(f"Recording is not valid JSON: {e}") from e
        return self.from_dict(data)

    def from_dict(self, data: Any) -> Recording:
        """Build a Recording from its decoded JSON document."""
        if not isinstance(data, dict):
            raise RecordingFormatError("Recording must be a JSON object")

        raw_interactions = data.get("interactions")
        if not isinstance(raw_interactions, list):
            raise RecordingFormatError("Recording 'interactions' must be a list")

        interactions = [
            self._parse_record(index, raw)
            for index, raw in enumerate(raw_interactions)
        ]

        warnings: list[StructuralWarning] = []
        declared = data.get("totalInteractions")
        if not isinstance(declared, int) or isinstance(declared, bool):
            warnings.append(StructuralWarning(
                f"totalInteractions is missing or not an integer ({declared!r}); "
                f"using actual count {len(interactions)}"
            ))
            declared = len(interactions)
        elif declared != len(interactions):
            warnings.append(StructuralWarning(
                f"totalInteractions declares {declared} but recording holds {len(interactions)}"
            ))

        start_time = self._parse_time(data.get("startTime"), "startTime", warnings)
        end_time = self._parse_time(data.get("endTime"), "endTime", warnings)

        for warning in warnings:
            self.log.warning("Recording structure warning", warning=str(warning))

        return Recording(
            session_id=str(data.get("sessionId") or ""),
            interactions=interactions,
            start_time=start_time,
            end_time=end_time,
            total_interactions=declared,
            warnings=warnings,
        )

    def _parse_record(self, index: int, raw: Any) -> InteractionRecord:
        if not isinstance(raw, dict):
            raise RecordingFormatError(f"Interaction {index} is not an object")

        kind = raw.get("type")
        if not isinstance(kind, str) or not kind:
            raise RecordingFormatError(f"Interaction {index} has no 'type'")

        timestamp = raw.get("timestamp")
        if (
            isinstance(timestamp, bool)
            or not isinstance(timestamp, (int, float))
            or not math.isfinite(timestamp)
        ):
            raise RecordingFormatError(
                f"Interaction {index} ({kind}) has no numeric 'timestamp'"
            )

        return parse_interaction(raw)

    @staticmethod
    def _parse_time(
        value: Any,
        key: str,
        warnings: list[StructuralWarning],
    ) -> Optional[datetime]:
        if value is None:
            return None
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            warnings.append(StructuralWarning(f"{key} is not an ISO-8601 timestamp: {value!r}"))
            return None

    def dump(self, recording: Recording) -> str:
        """Serialize a recording to pretty-printed JSON."""
        return json.dumps(recording.to_dict(), indent=2, ensure_ascii=False)

    def save(self, recording: Recording, path: str | Path) -> Path:
        """Write a recording to ``path``, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dump(recording), encoding="utf-8")
        self.log.info(
            "Saved recording",
            path=str(path),
            session_id=recording.session_id,
            total_interactions=recording.total_interactions,
        )
        return path
