"""Tests for recording models."""

from datetime import UTC, datetime

import pytest

from webreplay.recording.models import (
    ChangeRecord,
    CheckboxRecord,
    ClickRecord,
    Coordinates,
    InputRecord,
    InteractionType,
    NavigationRecord,
    RangeRecord,
    Recording,
    SubmitRecord,
    UnsupportedRecord,
    parse_interaction,
)

# =============================================================================
# Enum Tests
# =============================================================================


class TestInteractionType:
    """Tests for InteractionType enum."""

    def test_all_kinds(self):
        """Test every kind a recording may contain."""
        assert {t.value for t in InteractionType} == {
            "navigation",
            "click",
            "input",
            "text",
            "search",
            "change",
            "select-one",
            "submit",
            "checkbox",
            "range",
        }

    def test_str_enum(self):
        """Test kinds compare equal to their JSON strings."""
        assert InteractionType.SELECT_ONE == "select-one"


# =============================================================================
# Coordinates Tests
# =============================================================================


class TestCoordinates:
    """Tests for Coordinates."""

    def test_from_dict(self):
        coords = Coordinates.from_dict({"x": 10, "y": 20.5})
        assert coords == Coordinates(10.0, 20.5)

    @pytest.mark.parametrize("data", [None, "10,20", {"x": 1}, {"x": "a", "y": 2}])
    def test_malformed_is_none(self, data):
        assert Coordinates.from_dict(data) is None


# =============================================================================
# Record Parsing Tests
# =============================================================================


class TestParseInteraction:
    """Tests for parse_interaction variant selection."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("navigation", NavigationRecord),
            ("click", ClickRecord),
            ("input", InputRecord),
            ("text", InputRecord),
            ("search", InputRecord),
            ("change", ChangeRecord),
            ("select-one", ChangeRecord),
            ("submit", SubmitRecord),
            ("checkbox", CheckboxRecord),
            ("range", RangeRecord),
        ],
    )
    def test_variant_per_kind(self, kind, expected):
        record = parse_interaction({"type": kind, "timestamp": 1})
        assert type(record) is expected
        assert record.kind == kind
        assert record.interaction_type == InteractionType(kind)

    def test_unknown_kind_is_unsupported(self):
        """Test unknown kinds are kept, not rejected."""
        record = parse_interaction({"type": "dblclick", "timestamp": 5, "selector": "#x"})

        assert isinstance(record, UnsupportedRecord)
        assert record.kind == "dblclick"
        assert record.interaction_type is None
        assert record.extra == {"selector": "#x"}

    def test_click_fields(self):
        record = parse_interaction({
            "type": "click",
            "timestamp": 1750718334000,
            "url": "https://example.com/",
            "tagName": "BUTTON",
            "id": "go",
            "className": "btn primary",
            "selector": "#go",
            "coordinates": {"x": 120, "y": 48},
            "text": "Go",
        })

        assert record.tag_name == "BUTTON"
        assert record.element_id == "go"
        assert record.class_name == "btn primary"
        assert record.selector == "#go"
        assert record.coordinates == Coordinates(120, 48)
        assert record.text == "Go"
        assert record.is_element_targeted

    def test_navigation_is_not_element_targeted(self):
        record = parse_interaction({"type": "navigation", "timestamp": 1, "url": "https://a/"})
        assert not record.is_element_targeted

    def test_non_string_class_name_dropped(self):
        """Test SVG className objects are not used as class selectors."""
        record = parse_interaction({
            "type": "click",
            "timestamp": 1,
            "className": {"baseVal": "icon", "animVal": "icon"},
        })
        assert record.class_name is None

    def test_float_timestamp_truncated(self):
        record = parse_interaction({"type": "click", "timestamp": 1000.9})
        assert record.timestamp == 1000

    def test_unknown_keys_preserved(self):
        data = {
            "type": "text",
            "timestamp": 2,
            "selector": "#q",
            "value": "hi",
            "inputType": "text",
            "pageTitle": "Search",
        }
        record = parse_interaction(data)

        assert record.extra == {"inputType": "text", "pageTitle": "Search"}
        dumped = record.to_dict()
        assert dumped["inputType"] == "text"
        assert dumped["value"] == "hi"
        assert dumped["selector"] == "#q"


class TestCheckboxRecord:
    """Tests for the desired checkbox state."""

    @pytest.mark.parametrize(
        "checked,value,expected",
        [
            (True, None, True),
            (False, None, False),
            (None, "true", True),
            (None, "on", False),
            (None, None, False),
        ],
    )
    def test_desired_state(self, checked, value, expected):
        record = CheckboxRecord(kind="checkbox", timestamp=1, checked=checked, value=value)
        assert record.desired_state is expected


# =============================================================================
# Recording Tests
# =============================================================================


def _recording(n: int) -> Recording:
    interactions = [
        ClickRecord(kind="click", timestamp=1000 + i * 100, selector=f"#b{i}")
        for i in range(n)
    ]
    return Recording(session_id="s1", interactions=interactions, total_interactions=n)


class TestRecording:
    """Tests for Recording."""

    def test_len_and_duration(self):
        recording = _recording(4)
        assert len(recording) == 4
        assert recording.duration_ms == 300

    def test_duration_single_event(self):
        assert _recording(1).duration_ms == 0

    def test_slice_returns_new_value(self):
        recording = _recording(5)
        window = recording.slice(1, 2)

        assert [r.selector for r in window.interactions] == ["#b1", "#b2"]
        assert window.total_interactions == 2
        assert len(recording) == 5
        assert recording.total_interactions == 5

    def test_slice_without_limit(self):
        assert len(_recording(5).slice(3)) == 2

    def test_slice_rejects_negative(self):
        with pytest.raises(ValueError):
            _recording(2).slice(-1)
        with pytest.raises(ValueError):
            _recording(2).slice(0, -1)

    def test_to_dict(self):
        recording = _recording(1)
        recording.start_time = datetime(2025, 6, 23, 22, 38, 52, 829000, tzinfo=UTC)

        data = recording.to_dict()

        assert data["sessionId"] == "s1"
        assert data["startTime"] == "2025-06-23T22:38:52.829Z"
        assert data["endTime"] is None
        assert data["totalInteractions"] == 1
        assert data["interactions"][0]["selector"] == "#b0"
