"""
Fixed-granularity time grid for day and week calendar views.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from .conf import get_config
from .dates import TimeLike, format_time, from_minutes, to_minutes


@dataclass(frozen=True)
class SlotGrid:
    """
    Time labels from ``start`` to ``end`` (inclusive) every ``granularity`` minutes.

    A class starting at a label is anchored in that slot and covers
    ``span(duration)`` consecutive slots; the slots after the anchor are
    continuation slots.
    """
    granularity: int = 30
    start: str = '08:00'
    end: str = '22:00'
    labels: List[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.granularity <= 0:
            raise ValueError("Granularity must be positive")
        first, last = to_minutes(self.start), to_minutes(self.end)
        if first > last:
            raise ValueError("Grid start must not be after grid end")
        labels = [
            format_time(from_minutes(minutes))
            for minutes in range(first, last + 1, self.granularity)
        ]
        object.__setattr__(self, 'labels', labels)

    @classmethod
    def from_settings(cls) -> 'SlotGrid':
        config = get_config()
        return cls(granularity=config.slot_minutes, start=config.day_start, end=config.day_end)

    def __len__(self):
        return len(self.labels)

    def index_of(self, value: TimeLike) -> Optional[int]:
        """Slot index whose label equals ``value``, or ``None`` when off the grid."""
        try:
            label = format_time(value)
        except ValueError:
            return None
        try:
            return self.labels.index(label)
        except ValueError:
            return None

    def span(self, duration_minutes: int) -> int:
        """Number of slots a class of this duration covers."""
        return max(1, math.ceil(duration_minutes / self.granularity))

    def occupied(self, start: TimeLike, duration_minutes: int) -> Optional[range]:
        """Half-open range of slot indexes covered, or ``None`` when off the grid."""
        index = self.index_of(start)
        if index is None:
            return None
        return range(index, index + self.span(duration_minutes))

    def is_continuation(self, slot: TimeLike, start: TimeLike, duration_minutes: int) -> bool:
        """True for slots covered by the class other than its anchor slot."""
        slot_index = self.index_of(slot)
        covered = self.occupied(start, duration_minutes)
        if slot_index is None or covered is None:
            return False
        return covered.start < slot_index < covered.stop

    def height(self, duration_minutes: int, slot_height: int = 40) -> float:
        """Pixel height of a class block on a grid with ``slot_height`` rows."""
        return duration_minutes / self.granularity * slot_height

    def filtered(self, start: TimeLike, end: TimeLike) -> 'SlotGrid':
        """A grid with the same granularity showing only ``[start, end]``."""
        return SlotGrid(
            granularity=self.granularity,
            start=format_time(start),
            end=format_time(end),
        )


def overlaps(first: range, second: range) -> bool:
    """Half-open interval intersection."""
    return not (first.stop <= second.start or first.start >= second.stop)
