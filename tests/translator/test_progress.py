"""Tests for progress snapshots and abort signals."""

import pytest

from common.subtitle_parser import SubtitleSegment
from translator.progress import (
    IN_PROGRESS_PLACEHOLDER,
    AbortSignal,
    ProgressReporter,
    calculate_percent,
)

ENTRIES = [
    SubtitleSegment(i + 1, "00:00:00,000", "00:00:01,000", f"line {i}")
    for i in range(4)
]


@pytest.mark.unit
class TestCalculatePercent:
    @pytest.mark.parametrize(
        "completed,total,expected",
        [
            (0, 4, 0),
            (1, 4, 25),
            (1, 8, 13),
            (1, 3, 33),
            (2, 3, 67),
            (1, 200, 1),
            (1, 400, 0),
            (4, 4, 100),
            (0, 0, 100),
        ],
    )
    def test_round_half_up(self, completed, total, expected):
        assert calculate_percent(completed, total) == expected


@pytest.mark.unit
class TestAbortSignal:
    def test_abort_sets_flag(self):
        signal = AbortSignal()

        assert signal.aborted is False
        signal.abort()
        assert signal.aborted is True


@pytest.mark.unit
class TestProgressReporter:
    def test_snapshot_marks_pending_slots(self):
        reporter = ProgressReporter(ENTRIES)

        snapshot = reporter.snapshot(["A", None, "C", None], completed=2, current_index=2)

        assert snapshot.percent == 50
        assert snapshot.completed == 2
        assert snapshot.total == 4
        assert snapshot.current_index == 2
        assert snapshot.pending == frozenset({1, 3})
        assert snapshot.is_pending(1)
        assert not snapshot.is_pending(0)
        assert snapshot.entries[1].text == IN_PROGRESS_PLACEHOLDER
        assert [e.text for e in snapshot.completed_entries()] == ["A", "C"]

    def test_placeholder_text_from_translator_is_not_pending(self):
        reporter = ProgressReporter(ENTRIES)

        snapshot = reporter.snapshot([IN_PROGRESS_PLACEHOLDER, None, None, None], 1)

        assert not snapshot.is_pending(0)

    def test_partial_document_keeps_indexes(self):
        reporter = ProgressReporter(ENTRIES)

        document = reporter.snapshot([None, "B", None, "D"], 2).to_partial_document()

        assert [e.index for e in document.entries] == [2, 4]
        assert document.texts == ["B", "D"]

    def test_emit_without_sink_returns_none(self):
        assert ProgressReporter(ENTRIES).emit(["A", None, None, None], 1) is None

    def test_emit_calls_sink(self):
        received = []
        reporter = ProgressReporter(ENTRIES, received.append)

        snapshot = reporter.emit(["A", None, None, None], 1, 0)

        assert received == [snapshot]

    def test_to_dict(self):
        snapshot = ProgressReporter(ENTRIES).snapshot(["A", None, None, None], 1, 0)

        data = snapshot.to_dict()

        assert data["percent"] == 25
        assert data["entries"][0] == {
            "index": 1,
            "start_time": "00:00:00,000",
            "end_time": "00:00:01,000",
            "text": "A",
            "pending": False,
        }
        assert data["entries"][1]["pending"] is True
