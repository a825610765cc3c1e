"""Playback engine - replay a recorded interaction log in a live browser.

Components:
- ElementResolver: Maps a record to a live element (selector chain, coordinates)
- ActionDispatcher: Performs the per-kind browser effect
- TimingScheduler: Reconstructs speed-adjusted pacing between events
- PlaybackController: Runs a recording in order, isolating per-event failures
- InteractionPlayer: load / set_speed / start / stop facade
"""

from .cancellation import CancellationToken
from .controller import PlaybackController, PlaybackSession
from .dispatcher import ActionDispatcher
from .errors import (
    ActionFailureError,
    FatalPreconditionError,
    NavigationFailureError,
    PlaybackError,
    UnresolvedTargetError,
)
from .models import (
    CoordinateTarget,
    EventOutcome,
    EventResult,
    PlaybackReport,
    PlaybackStatus,
    ResolutionStrategy,
    ResolvedTarget,
    Unresolved,
)
from .player import InteractionPlayer
from .resolver import ElementResolver, candidate_selectors
from .scheduler import TimingScheduler, compute_delay

__all__ = [
    # Engine
    "ElementResolver",
    "candidate_selectors",
    "ActionDispatcher",
    "TimingScheduler",
    "compute_delay",
    "PlaybackController",
    "PlaybackSession",
    "InteractionPlayer",
    "CancellationToken",
    # Models
    "ResolutionStrategy",
    "ResolvedTarget",
    "CoordinateTarget",
    "Unresolved",
    "EventOutcome",
    "EventResult",
    "PlaybackStatus",
    "PlaybackReport",
    # Errors
    "PlaybackError",
    "FatalPreconditionError",
    "UnresolvedTargetError",
    "ActionFailureError",
    "NavigationFailureError",
]
