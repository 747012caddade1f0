"""Progress snapshots and cancellation handles for translation jobs."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence

from common.subtitle_parser import SubtitleDocument, SubtitleSegment

logger = logging.getLogger(__name__)

# Text shown for slots that have not completed yet. Consumers should rely on
# ProgressSnapshot.is_pending() rather than comparing against this value.
IN_PROGRESS_PLACEHOLDER = "[[translating...]]"


class AbortSignal:
    """Poll-only cancellation handle shared between a caller and a job."""

    def __init__(self) -> None:
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        """Request cancellation. Only work not yet started is skipped."""
        self._aborted = True


def calculate_percent(completed: int, total: int) -> int:
    """
    Percentage of completed units, rounded half up.

    Examples:
        >>> calculate_percent(1, 8)
        13
        >>> calculate_percent(0, 0)
        100
    """
    if total <= 0:
        return 100
    return (200 * completed + total) // (2 * total)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Full positional view of a job after a unit or batch completes."""

    percent: int
    completed: int
    total: int
    entries: List[SubtitleSegment]
    pending: FrozenSet[int] = field(default_factory=frozenset)
    current_index: Optional[int] = None

    def is_pending(self, position: int) -> bool:
        """True if the slot at ``position`` has not completed yet."""
        return position in self.pending

    def completed_entries(self) -> List[SubtitleSegment]:
        """Entries whose translation has completed, in positional order."""
        return [
            entry
            for position, entry in enumerate(self.entries)
            if position not in self.pending
        ]

    def to_partial_document(self, source_format: str = "srt") -> SubtitleDocument:
        """Document containing only completed entries, for saving partial results."""
        return SubtitleDocument(
            entries=self.completed_entries(), source_format=source_format
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by the streaming API."""
        return {
            "percent": self.percent,
            "completed": self.completed,
            "total": self.total,
            "current_index": self.current_index,
            "entries": [
                {
                    "index": entry.index,
                    "start_time": entry.start_time,
                    "end_time": entry.end_time,
                    "text": entry.text,
                    "pending": position in self.pending,
                }
                for position, entry in enumerate(self.entries)
            ],
        }


ProgressSink = Callable[[ProgressSnapshot], None]


class ProgressReporter:
    """Turns a job's positional result slots into progress snapshots."""

    def __init__(
        self, entries: Sequence[SubtitleSegment], sink: Optional[ProgressSink] = None
    ):
        self.entries = list(entries)
        self.total = len(self.entries)
        self.sink = sink

    def snapshot(
        self,
        slots: Sequence[Optional[str]],
        completed: int,
        current_index: Optional[int] = None,
    ) -> ProgressSnapshot:
        """
        Build a snapshot from the current slots.

        Args:
            slots: Resolved text per position, None where not completed
            completed: Number of completed positions
            current_index: Position that just completed, if any

        Returns:
            ProgressSnapshot covering every position
        """
        entries = []
        pending = set()
        for position, (entry, text) in enumerate(zip(self.entries, slots)):
            if text is None:
                pending.add(position)
                entries.append(entry.with_text(IN_PROGRESS_PLACEHOLDER))
            else:
                entries.append(entry.with_text(text))

        return ProgressSnapshot(
            percent=calculate_percent(completed, self.total),
            completed=completed,
            total=self.total,
            entries=entries,
            pending=frozenset(pending),
            current_index=current_index,
        )

    def emit(
        self,
        slots: Sequence[Optional[str]],
        completed: int,
        current_index: Optional[int] = None,
    ) -> Optional[ProgressSnapshot]:
        """Build a snapshot and pass it to the sink, if one is attached."""
        if self.sink is None:
            return None

        snapshot = self.snapshot(slots, completed, current_index)
        logger.debug(
            f"Progress {snapshot.completed}/{snapshot.total} ({snapshot.percent}%)"
        )
        self.sink(snapshot)
        return snapshot
