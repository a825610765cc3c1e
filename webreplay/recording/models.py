"""Data models for recorded interaction logs.

A recording is a flat JSON document produced by the capture side:

    {
      "sessionId": "1750718332829",
      "startTime": "2025-06-23T22:38:52.829Z",
      "endTime": "2025-06-23T22:40:10.114Z",
      "totalInteractions": 2,
      "interactions": [
        {"type": "navigation", "timestamp": 1750718333000, "url": "https://example.com/"},
        {"type": "click", "timestamp": 1750718334200, "selector": "#go", "coordinates": {"x": 10, "y": 20}}
      ]
    }

Records are parsed into one dataclass per interaction kind so that each kind
only carries the fields that make sense for it. Unknown JSON keys are kept in
``extra`` and written back unchanged.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional


class InteractionType(str, Enum):
    """Interaction kinds a recording may contain."""

    NAVIGATION = "navigation"
    CLICK = "click"
    INPUT = "input"
    TEXT = "text"
    SEARCH = "search"
    CHANGE = "change"
    SELECT_ONE = "select-one"
    SUBMIT = "submit"
    CHECKBOX = "checkbox"
    RANGE = "range"


class StructuralWarning(UserWarning):
    """A recording is usable but does not match its declared shape."""


@dataclass(frozen=True)
class Coordinates:
    """Viewport pixel position of a recorded click."""

    x: float
    y: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Coordinates"]:
        """Create Coordinates from ``{"x": .., "y": ..}``, None if malformed."""
        if not isinstance(data, dict):
            return None
        try:
            return cls(x=float(data["x"]), y=float(data["y"]))
        except (KeyError, TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class InteractionRecord:
    """Base class for one captured user action."""

    kind: str
    timestamp: int
    url: Optional[str] = None
    extra: dict = field(default_factory=dict)

    # attribute name -> JSON key, for fields specific to a variant
    JSON_KEYS: ClassVar[dict[str, str]] = {}

    @property
    def interaction_type(self) -> Optional[InteractionType]:
        try:
            return InteractionType(self.kind)
        except ValueError:
            return None

    @property
    def is_element_targeted(self) -> bool:
        return False

    @classmethod
    def _known_keys(cls) -> set[str]:
        return {"type", "timestamp", "url", *cls.JSON_KEYS.values()}

    @classmethod
    def from_dict(cls, data: dict) -> "InteractionRecord":
        """Create a record of this variant from its JSON dictionary."""
        values = {attr: data.get(key) for attr, key in cls.JSON_KEYS.items()}
        extra = {k: v for k, v in data.items() if k not in cls._known_keys()}
        return cls(
            kind=str(data["type"]),
            timestamp=int(data["timestamp"]),
            url=data.get("url"),
            extra=extra,
            **cls._coerce(values),
        )

    @classmethod
    def _coerce(cls, values: dict) -> dict:
        return values

    def to_dict(self) -> dict:
        """Convert back to the JSON shape the recording was loaded from."""
        data: dict[str, Any] = {"type": self.kind, "timestamp": self.timestamp, "url": self.url}
        for attr, key in self.JSON_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, Coordinates):
                value = value.to_dict()
            data[key] = value
        data.update(self.extra)
        return data


@dataclass
class NavigationRecord(InteractionRecord):
    """The main frame navigated to ``url``."""

    title: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {"title": "title"}


@dataclass
class ElementRecord(InteractionRecord):
    """An interaction that targets one DOM element."""

    tag_name: Optional[str] = None
    element_id: Optional[str] = None
    class_name: Optional[str] = None
    name: Optional[str] = None
    selector: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {
        "tag_name": "tagName",
        "element_id": "id",
        "class_name": "className",
        "name": "name",
        "selector": "selector",
    }

    @property
    def is_element_targeted(self) -> bool:
        return True

    @classmethod
    def _coerce(cls, values: dict) -> dict:
        # SVG elements serialize className as an object; it is not usable as a selector
        if not isinstance(values.get("class_name"), (str, type(None))):
            values["class_name"] = None
        return values


@dataclass
class ClickRecord(ElementRecord):
    """A click, with the viewport position used as a last resort."""

    coordinates: Optional[Coordinates] = None
    text: Optional[str] = None
    href: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {
        **ElementRecord.JSON_KEYS,
        "coordinates": "coordinates",
        "text": "text",
        "href": "href",
    }

    @classmethod
    def _coerce(cls, values: dict) -> dict:
        values = super()._coerce(values)
        values["coordinates"] = Coordinates.from_dict(values.get("coordinates"))
        return values


@dataclass
class InputRecord(ElementRecord):
    """Text typed into a field (``input``, ``text`` and ``search`` kinds)."""

    value: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {**ElementRecord.JSON_KEYS, "value": "value"}


@dataclass
class ChangeRecord(ElementRecord):
    """A committed value change (``change`` and ``select-one`` kinds)."""

    value: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {**ElementRecord.JSON_KEYS, "value": "value"}


@dataclass
class SubmitRecord(ElementRecord):
    """A form submission."""

    action: Optional[str] = None
    method: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {
        **ElementRecord.JSON_KEYS,
        "action": "action",
        "method": "method",
    }


@dataclass
class CheckboxRecord(ElementRecord):
    """A checkbox that ended up checked or unchecked."""

    checked: Optional[bool] = None
    value: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {
        **ElementRecord.JSON_KEYS,
        "checked": "checked",
        "value": "value",
    }

    @property
    def desired_state(self) -> bool:
        """Whether the checkbox should be checked after replay."""
        return bool(self.checked) or self.value == "true"


@dataclass
class RangeRecord(ElementRecord):
    """A slider moved to ``value``."""

    value: Optional[str] = None

    JSON_KEYS: ClassVar[dict[str, str]] = {**ElementRecord.JSON_KEYS, "value": "value"}


@dataclass
class UnsupportedRecord(InteractionRecord):
    """Any kind playback does not know; replayed as a logged no-op."""


RECORD_TYPES: dict[InteractionType, type[InteractionRecord]] = {
    InteractionType.NAVIGATION: NavigationRecord,
    InteractionType.CLICK: ClickRecord,
    InteractionType.INPUT: InputRecord,
    InteractionType.TEXT: InputRecord,
    InteractionType.SEARCH: InputRecord,
    InteractionType.CHANGE: ChangeRecord,
    InteractionType.SELECT_ONE: ChangeRecord,
    InteractionType.SUBMIT: SubmitRecord,
    InteractionType.CHECKBOX: CheckboxRecord,
    InteractionType.RANGE: RangeRecord,
}


def parse_interaction(data: dict) -> InteractionRecord:
    """Build the record variant matching ``data["type"]``.

    Raises:
        KeyError: ``type`` or ``timestamp`` is missing
        ValueError: ``timestamp`` is not a number
    """
    try:
        kind = InteractionType(data["type"])
    except ValueError:
        return UnsupportedRecord.from_dict(data)
    return RECORD_TYPES[kind].from_dict(data)


@dataclass
class Recording:
    """A recorded session: ordered interactions plus session metadata.

    ``interactions`` is in capture order, which is also replay order.
    """

    session_id: str
    interactions: list[InteractionRecord] = field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_interactions: int = 0
    warnings: list[StructuralWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.interactions)

    @property
    def duration_ms(self) -> int:
        """Time between the first and the last recorded interaction."""
        if len(self.interactions) < 2:
            return 0
        return max(0, self.interactions[-1].timestamp - self.interactions[0].timestamp)

    def slice(self, start: int = 0, limit: Optional[int] = None) -> "Recording":
        """Return a new Recording holding a window of the interactions.

        The source recording is left untouched.

        Args:
            start: Index of the first interaction to keep
            limit: Maximum number of interactions to keep (None keeps the rest)
        """
        if start < 0:
            raise ValueError("start must be >= 0")
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        end = None if limit is None else start + limit
        window = list(self.interactions[start:end])
        return replace(
            self,
            interactions=window,
            total_interactions=len(window),
            warnings=list(self.warnings),
        )

    def to_dict(self) -> dict:
        """Convert to the persisted JSON format."""
        return {
            "sessionId": self.session_id,
            "startTime": _format_time(self.start_time),
            "endTime": _format_time(self.end_time),
            "totalInteractions": self.total_interactions,
            "interactions": [record.to_dict() for record in self.interactions],
        }


def _format_time(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    text = value.isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


__all__ = [
    "InteractionType",
    "StructuralWarning",
    "Coordinates",
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
    "RECORD_TYPES",
    "parse_interaction",
    "Recording",
]
