"""Tests for RecordingStore."""

import json

import pytest

from webreplay.recording import (
    ClickRecord,
    RecordingFormatError,
    RecordingNotFoundError,
    RecordingStore,
    StructuralWarning,
)


@pytest.fixture
def store():
    return RecordingStore()


class TestLoad:
    """Tests for loading recordings."""

    def test_load_file(self, store, recording_file):
        recording = store.load(recording_file)

        assert recording.session_id == "1750718332829"
        assert len(recording) == 4
        assert recording.total_interactions == 4
        assert recording.warnings == []
        assert isinstance(recording.interactions[1], ClickRecord)
        assert recording.start_time.year == 2025

    def test_order_preserved(self, store, sample_document):
        recording = store.from_dict(sample_document)
        assert [r.kind for r in recording.interactions] == ["navigation", "click", "text", "submit"]

    def test_missing_file(self, store, tmp_path):
        with pytest.raises(RecordingNotFoundError):
            store.load(tmp_path / "nope.json")

    def test_invalid_json(self, store):
        with pytest.raises(RecordingFormatError, match="not valid JSON"):
            store.loads("{not json")

    def test_not_an_object(self, store):
        with pytest.raises(RecordingFormatError):
            store.loads("[]")

    def test_interactions_must_be_list(self, store):
        with pytest.raises(RecordingFormatError, match="interactions"):
            store.from_dict({"sessionId": "1", "interactions": {}})

    @pytest.mark.parametrize(
        "raw",
        [
            "click",
            {"timestamp": 1},
            {"type": "", "timestamp": 1},
            {"type": "click"},
            {"type": "click", "timestamp": "soon"},
            {"type": "click", "timestamp": True},
            {"type": "click", "timestamp": float("nan")},
            {"type": "click", "timestamp": float("inf")},
        ],
    )
    def test_malformed_interaction(self, store, raw):
        with pytest.raises(RecordingFormatError):
            store.from_dict({"sessionId": "1", "totalInteractions": 1, "interactions": [raw]})

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_timestamp_text(self, store, literal):
        """Test JSON text with a non-finite timestamp is a format error."""
        text = (
            '{"sessionId": "s", "totalInteractions": 1, '
            f'"interactions": [{{"type": "click", "timestamp": {literal}}}]}}'
        )

        with pytest.raises(RecordingFormatError, match="timestamp"):
            store.loads(text)

    def test_unknown_kind_loads(self, store):
        recording = store.from_dict({
            "sessionId": "1",
            "totalInteractions": 1,
            "interactions": [{"type": "hover", "timestamp": 1}],
        })
        assert recording.interactions[0].interaction_type is None


class TestStructuralWarnings:
    """Tests for non-fatal shape mismatches."""

    def test_count_mismatch_is_warning(self, store, sample_document):
        sample_document["totalInteractions"] = 10

        recording = store.from_dict(sample_document)

        assert len(recording) == 4
        assert len(recording.warnings) == 1
        assert isinstance(recording.warnings[0], StructuralWarning)
        assert "10" in str(recording.warnings[0])

    def test_missing_count_uses_actual(self, store, sample_document):
        del sample_document["totalInteractions"]

        recording = store.from_dict(sample_document)

        assert recording.total_interactions == 4
        assert len(recording.warnings) == 1

    def test_bad_timestamp_is_warning(self, store, sample_document):
        sample_document["endTime"] = "yesterday"

        recording = store.from_dict(sample_document)

        assert recording.end_time is None
        assert any("endTime" in str(w) for w in recording.warnings)


class TestSave:
    """Tests for persisting recordings."""

    def test_save_creates_directories(self, store, sample_document, tmp_path):
        recording = store.from_dict(sample_document)
        path = tmp_path / "nested" / "dir" / "out.json"

        saved = store.save(recording, path)

        assert saved == path
        data = json.loads(path.read_text())
        assert data["sessionId"] == "1750718332829"
        assert data["totalInteractions"] == 4
        assert data["startTime"] == "2025-06-23T22:38:52.829Z"

    def test_saved_file_loads_back(self, store, sample_document, tmp_path):
        path = store.save(store.from_dict(sample_document), tmp_path / "out.json")

        reloaded = store.load(path)

        assert [r.to_dict()["selector"] for r in reloaded.interactions[1:]] == ["#go", "#q", "#search"]
        assert reloaded.interactions[1].coordinates.x == 120
