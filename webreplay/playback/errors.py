"""Playback error taxonomy.

Only FatalPreconditionError escapes a playback run. Every other error is
raised while handling one event, caught by the controller and attributed
to that event's index and kind.
"""

from typing import Optional


class PlaybackError(Exception):
    """Base exception for playback errors."""

    def __init__(self, message: str, index: Optional[int] = None, kind: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.kind = kind


class FatalPreconditionError(PlaybackError):
    """No recording loaded or no browser attached when playback starts."""
    pass


class UnresolvedTargetError(PlaybackError):
    """Every element resolution strategy failed for an event."""

    def __init__(
        self,
        message: str,
        selector: Optional[str] = None,
        index: Optional[int] = None,
        kind: Optional[str] = None,
    ):
        super().__init__(message, index=index, kind=kind)
        self.selector = selector


class ActionFailureError(PlaybackError):
    """A browser-level action raised while replaying an event."""
    pass


class NavigationFailureError(PlaybackError):
    """A navigation failed or timed out."""
    pass
