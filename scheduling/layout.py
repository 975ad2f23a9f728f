"""
Calendar layout: which classes occupy which grid cells, side-by-side columns
for overlapping classes, month summaries and drag-and-drop relocation checks.

Classes are matched to days by canonical weekday. A class whose weekday labels
do not canonicalize, or whose start time is not a grid label, is left out of
the grid without raising.
"""

from dataclasses import dataclass, field, replace
from datetime import date, time
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .conf import get_config
from .dates import days_in_range, format_time, month_bounds, parse_time, week_bounds
from .grid import SlotGrid, overlaps
from .types import (
    RECURRENCE_ONCE,
    RELOCATION_ACCEPTED,
    RELOCATION_DESTINATION_OCCUPIED,
    RELOCATION_OFF_GRID,
    RELOCATION_UNKNOWN_INSTANCE,
    GeneratedClass,
    RelocationIntent,
    RelocationRequest,
    RelocationResult,
)
from .weekdays import canonicalize, weekday_of

EntryId = Union[int, str]


@dataclass(frozen=True)
class CalendarEntry:
    """A class as the calendar sees it: when it happens and for how long."""
    id: EntryId
    name: str
    days_of_week: Tuple[str, ...]
    start_time: time
    duration_minutes: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    specific_date: Optional[date] = None
    court_number: Optional[int] = None
    trainer_name: str = ''
    level_from: Optional[Decimal] = None
    level_to: Optional[Decimal] = None
    participant_ids: Tuple[str, ...] = ()

    @classmethod
    def from_model(cls, scheduled_class) -> 'CalendarEntry':
        specific_date = None
        if scheduled_class.recurrence_type == RECURRENCE_ONCE:
            specific_date = scheduled_class.start_date
        return cls(
            id=scheduled_class.pk,
            name=scheduled_class.name,
            days_of_week=tuple(scheduled_class.days_of_week or ()),
            start_time=parse_time(scheduled_class.start_time),
            duration_minutes=scheduled_class.duration_minutes,
            start_date=scheduled_class.start_date,
            end_date=scheduled_class.end_date,
            specific_date=specific_date,
            court_number=scheduled_class.court_number,
            trainer_name=scheduled_class.trainer_name,
            level_from=scheduled_class.level_from,
            level_to=scheduled_class.level_to,
            participant_ids=tuple(scheduled_class.participant_ids or ()),
        )

    @classmethod
    def from_generated(cls, instance: GeneratedClass) -> 'CalendarEntry':
        return cls(
            id=instance.id,
            name=instance.name,
            days_of_week=(instance.weekday.value,),
            start_time=instance.start_time,
            duration_minutes=instance.duration_minutes,
            specific_date=instance.specific_date,
            court_number=instance.court_number,
            trainer_name=instance.trainer_name,
            level_from=instance.level_from,
            level_to=instance.level_to,
            participant_ids=tuple(instance.participant_ids),
        )


def occurs_on(entry: CalendarEntry, day: date) -> bool:
    """Whether ``entry`` takes place on ``day``."""
    if entry.specific_date is not None:
        return entry.specific_date == day
    if entry.start_date and day < entry.start_date:
        return False
    if entry.end_date and day > entry.end_date:
        return False

    target = weekday_of(day)
    return any(canonicalize(label) == target for label in entry.days_of_week)


def entries_on_day(day: date, entries: Iterable[CalendarEntry]) -> List[CalendarEntry]:
    return [entry for entry in entries if occurs_on(entry, day)]


@dataclass(frozen=True)
class CalendarFilter:
    """
    Narrows the classes shown on the calendar before layout.

    Unset criteria match everything. A class passes the level criteria when
    its whole level range lies inside ``[level_from, level_to]``, and the
    weekday criterion when it runs on at least one of ``weekdays``.
    """
    search: str = ''
    level_from: Optional[Decimal] = None
    level_to: Optional[Decimal] = None
    weekdays: Tuple[str, ...] = ()
    min_participants: Optional[int] = None
    max_participants: Optional[int] = None

    def matches(self, entry: CalendarEntry) -> bool:
        if self.search:
            needle = self.search.strip().lower()
            if needle not in entry.name.lower() and needle not in entry.trainer_name.lower():
                return False

        participants = len(entry.participant_ids)
        if self.min_participants is not None and participants < self.min_participants:
            return False
        if self.max_participants is not None and participants > self.max_participants:
            return False

        if self.level_from is not None and entry.level_from is not None:
            if entry.level_from < self.level_from:
                return False
        if self.level_to is not None and entry.level_to is not None:
            if entry.level_to > self.level_to:
                return False

        if self.weekdays:
            wanted = {canonicalize(label) for label in self.weekdays} - {None}
            if not any(canonicalize(label) in wanted for label in entry.days_of_week):
                return False

        return True


def filter_entries(
    entries: Iterable[CalendarEntry],
    calendar_filter: Optional[CalendarFilter] = None
) -> List[CalendarEntry]:
    if calendar_filter is None:
        return list(entries)
    return [entry for entry in entries if calendar_filter.matches(entry)]


def _anchored(
    day: date,
    entries: Iterable[CalendarEntry],
    grid: SlotGrid
) -> List[Tuple[CalendarEntry, range]]:
    anchored = []
    for entry in entries_on_day(day, entries):
        covered = grid.occupied(entry.start_time, entry.duration_minutes)
        if covered is not None:
            anchored.append((entry, covered))
    return anchored


@dataclass(frozen=True)
class ColumnPlacement:
    """Horizontal position of a class among the classes it overlaps."""
    column_index: int
    total_columns: int

    @property
    def width(self) -> float:
        """Width as a percentage of the day column."""
        return 100.0 / self.total_columns

    @property
    def left(self) -> float:
        """Left offset as a percentage of the day column."""
        return self.column_index * self.width


@dataclass(frozen=True)
class OverlapGroup:
    """A class and every class of the same day whose span intersects it, by start slot."""
    target_id: EntryId
    members: Tuple[CalendarEntry, ...]

    @property
    def placement(self) -> ColumnPlacement:
        ids = [member.id for member in self.members]
        return ColumnPlacement(ids.index(self.target_id), len(self.members))


def overlap_groups(
    day: date,
    entries: Iterable[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> List[OverlapGroup]:
    """One overlap group per class anchored on ``day``."""
    grid = grid or SlotGrid.from_settings()
    anchored = _anchored(day, entries, grid)

    groups = []
    for target, target_span in anchored:
        members = [
            (entry, covered) for entry, covered in anchored
            if entry.id == target.id or overlaps(covered, target_span)
        ]
        members.sort(key=lambda item: item[1].start)
        groups.append(OverlapGroup(
            target_id=target.id,
            members=tuple(entry for entry, _ in members),
        ))
    return groups


def resolve_overlaps(
    day: date,
    entries: Iterable[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> Dict[EntryId, ColumnPlacement]:
    """Column placement for every class anchored on ``day``, keyed by class id."""
    return {
        group.target_id: group.placement
        for group in overlap_groups(day, entries, grid)
    }


@dataclass(frozen=True)
class CalendarCell:
    """
    One (day, time slot) cell.

    ``anchors`` are the classes starting in this slot. ``continuations`` are
    classes started in an earlier slot that still cover this one; they are
    drawn by their anchor cell and never as content of this cell.
    """
    day: date
    time: str
    anchors: Tuple[CalendarEntry, ...] = ()
    continuations: Tuple[CalendarEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.anchors

    @property
    def is_continuation(self) -> bool:
        return bool(self.continuations)

    @property
    def has_multiple(self) -> bool:
        """Several classes start here; they render as a single indicator card."""
        return len(self.anchors) > 1

    @property
    def count(self) -> int:
        return len(self.anchors)

    @property
    def display(self) -> Optional[CalendarEntry]:
        return self.anchors[0] if self.anchors else None


@dataclass
class DayLayout:
    day: date
    cells: List[CalendarCell] = field(default_factory=list)
    placements: Dict[EntryId, ColumnPlacement] = field(default_factory=dict)

    def cell(self, value) -> Optional[CalendarCell]:
        label = format_time(value)
        return next((cell for cell in self.cells if cell.time == label), None)

    @property
    def entries(self) -> List[CalendarEntry]:
        return [entry for cell in self.cells for entry in cell.anchors]


def build_day(
    day: date,
    entries: Sequence[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> DayLayout:
    grid = grid or SlotGrid.from_settings()
    anchored = _anchored(day, entries, grid)

    cells = []
    for index, label in enumerate(grid.labels):
        anchors = tuple(entry for entry, covered in anchored if covered.start == index)
        continuations = tuple(
            entry for entry, covered in anchored
            if covered.start < index < covered.stop
        )
        cells.append(CalendarCell(day, label, anchors, continuations))

    return DayLayout(day=day, cells=cells, placements=resolve_overlaps(day, entries, grid))


def build_range(
    start_date: date,
    end_date: date,
    entries: Sequence[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> List[DayLayout]:
    grid = grid or SlotGrid.from_settings()
    return [build_day(day, entries, grid) for day in days_in_range(start_date, end_date)]


def build_week(
    day: date,
    entries: Sequence[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> List[DayLayout]:
    """Seven day layouts, Monday first, for the week containing ``day``."""
    monday, sunday = week_bounds(day)
    return build_range(monday, sunday, entries, grid)


@dataclass(frozen=True)
class MonthDay:
    """Month view cell: the classes of one day, capped for inline display."""
    day: date
    entries: Tuple[CalendarEntry, ...]
    inline_limit: int = 3

    @property
    def visible(self) -> Tuple[CalendarEntry, ...]:
        return self.entries[:self.inline_limit]

    @property
    def overflow(self) -> int:
        """How many classes the "+N more" indicator stands for."""
        return max(0, len(self.entries) - self.inline_limit)

    @property
    def count(self) -> int:
        return len(self.entries)


def build_month(
    day: date,
    entries: Sequence[CalendarEntry],
    inline_limit: Optional[int] = None
) -> List[MonthDay]:
    """Per-day class lists for the month containing ``day``."""
    if inline_limit is None:
        inline_limit = get_config().month_inline_limit
    first, last = month_bounds(day)

    month = []
    for current in days_in_range(first, last):
        matching = sorted(entries_on_day(current, entries), key=lambda entry: entry.start_time)
        month.append(MonthDay(current, tuple(matching), inline_limit))
    return month


def anchored_at(
    day: date,
    value,
    entries: Iterable[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> List[CalendarEntry]:
    """Classes whose anchor is the (day, slot) cell."""
    grid = grid or SlotGrid.from_settings()
    index = grid.index_of(value)
    if index is None:
        return []
    return [entry for entry, covered in _anchored(day, entries, grid) if covered.start == index]


def check_relocation(
    request: RelocationRequest,
    entries: Sequence[CalendarEntry],
    grid: Optional[SlotGrid] = None
) -> RelocationResult:
    """
    Decide whether a dragged class may drop on the requested cell.

    Only cells anchoring no other class accept a drop; the dragged class never
    blocks its own destination. The check is local and optimistic; storage
    must still confirm the move.
    """
    grid = grid or SlotGrid.from_settings()

    entry = find_entry(entries, request.instance_id)
    if entry is None:
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_UNKNOWN_INSTANCE,
            message=f"Class {request.instance_id} is not on the calendar",
        )

    if grid.index_of(request.time_slot) is None:
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_OFF_GRID,
            message=f"{format_time(request.time_slot)} is not a calendar slot",
        )

    others = [other for other in entries if str(other.id) != str(entry.id)]
    if anchored_at(request.day, request.time_slot, others, grid):
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_DESTINATION_OCCUPIED,
            message="A class already starts in that slot",
        )

    intent = RelocationIntent(
        instance_id=entry.id,
        new_day=request.day,
        new_time=parse_time(request.time_slot),
    )
    return RelocationResult(accepted=True, reason=RELOCATION_ACCEPTED, intent=intent)


def find_entry(entries: Iterable[CalendarEntry], entry_id: EntryId) -> Optional[CalendarEntry]:
    return next((entry for entry in entries if str(entry.id) == str(entry_id)), None)


def relocated_days(days_of_week: Sequence[str], new_day: date) -> List[str]:
    """
    Weekdays of a weekly class after moving one occurrence to ``new_day``.

    Unchanged when the class already runs on that weekday, otherwise replaced
    by the new weekday alone.
    """
    target = weekday_of(new_day)
    if any(canonicalize(label) == target for label in days_of_week):
        return [canonicalize(label).value for label in days_of_week if canonicalize(label)]
    return [target.value]


def apply_relocation(
    entries: Sequence[CalendarEntry],
    intent: RelocationIntent
) -> List[CalendarEntry]:
    """Copy of ``entries`` with the relocated class moved to its new cell."""
    moved = []
    for entry in entries:
        if str(entry.id) != str(intent.instance_id):
            moved.append(entry)
        elif entry.specific_date is not None:
            moved.append(replace(
                entry,
                specific_date=intent.new_day,
                start_date=intent.new_day,
                end_date=intent.new_day,
                days_of_week=(weekday_of(intent.new_day).value,),
                start_time=intent.new_time,
            ))
        else:
            moved.append(replace(
                entry,
                days_of_week=tuple(relocated_days(entry.days_of_week, intent.new_day)),
                start_time=intent.new_time,
            ))
    return moved
