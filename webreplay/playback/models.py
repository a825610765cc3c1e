"""Data models for the playback engine.

- ResolutionStrategy: How an element target was found
- ResolvedTarget / CoordinateTarget / Unresolved: Resolver outcomes
- EventOutcome / EventResult: What happened to one replayed event
- PlaybackStatus / PlaybackReport: Outcome of a whole run
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from webreplay.browser import ElementHandle
from webreplay.recording import Coordinates


class ResolutionStrategy(str, Enum):
    """Element resolution strategies, in priority order."""

    SELECTOR = "selector"  # Precomputed CSS selector from the recording
    ID = "id"  # #<id>
    CLASS = "class"  # .a.b.c
    TAG = "tag"  # bare tag name
    COORDINATES = "coordinates"  # Click position, click events only


@dataclass
class ResolvedTarget:
    """A live element found by one of the selector strategies."""

    element: ElementHandle
    selector: str
    strategy: ResolutionStrategy

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass
class CoordinateTarget:
    """No element resolved; click at the recorded viewport position."""

    coordinates: Coordinates
    strategy: ResolutionStrategy = ResolutionStrategy.COORDINATES

    @property
    def is_fallback(self) -> bool:
        return True


@dataclass
class Unresolved:
    """Every strategy failed for a record."""

    selector: Optional[str] = None
    tried: list[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        tried = ", ".join(self.tried) if self.tried else "no candidate selectors"
        return f"could not resolve {self.selector or '<no selector>'} (tried: {tried})"


class EventOutcome(str, Enum):
    """Outcome of replaying a single event."""

    APPLIED = "applied"  # Action performed on the resolved target
    FALLBACK = "fallback"  # Action performed at recorded coordinates
    SKIPPED = "skipped"  # Nothing to do or no target (logged skip)
    FAILED = "failed"  # Recoverable error, playback continued


@dataclass
class EventResult:
    """Result of replaying one interaction."""

    index: int
    kind: str
    outcome: EventOutcome
    target: Optional[str] = None  # Selector used, or "(x, y)" for coordinates
    strategy: Optional[ResolutionStrategy] = None
    reason: Optional[str] = None  # Skip reason or error message
    navigated: bool = False  # A proactive navigation happened first
    duration_ms: int = 0
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage/output."""
        return {
            "index": self.index,
            "kind": self.kind,
            "outcome": self.outcome.value,
            "target": self.target,
            "strategy": self.strategy.value if self.strategy else None,
            "reason": self.reason,
            "navigated": self.navigated,
            "duration_ms": self.duration_ms,
            "data": self.data,
        }


class PlaybackStatus(str, Enum):
    """Terminal status of a playback run."""

    COMPLETED = "completed"
    STOPPED = "stopped"  # Cancelled between events


@dataclass
class PlaybackReport:
    """Summary of a playback run.

    Example:
        report = await controller.run(recording, session)
        print(f"{report.attempted}/{report.total_in_log} events, {report.fallbacks} fallbacks")
    """

    session_id: str
    status: PlaybackStatus
    total_in_log: int
    speed: float = 1.0
    results: list[EventResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def attempted(self) -> int:
        return len(self.results)

    def _count(self, outcome: EventOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def applied(self) -> int:
        return self._count(EventOutcome.APPLIED)

    @property
    def fallbacks(self) -> int:
        return self._count(EventOutcome.FALLBACK)

    @property
    def skipped(self) -> int:
        return self._count(EventOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(EventOutcome.FAILED)

    @property
    def completed(self) -> bool:
        return self.status == PlaybackStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage/output."""
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "speed": self.speed,
            "attempted": self.attempted,
            "total_in_log": self.total_in_log,
            "applied": self.applied,
            "fallbacks": self.fallbacks,
            "skipped": self.skipped,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
            "warnings": self.warnings,
            "results": [r.to_dict() for r in self.results],
        }
