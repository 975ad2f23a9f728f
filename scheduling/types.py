"""
Data types and constants for the class scheduling system.

This module contains:
- DTOs (Data Transfer Objects) for generation, commit and relocation
- Constants used across the application
"""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple, Union

from .dates import format_time, from_minutes, to_minutes
from .weekdays import Weekday


PLACEHOLDER_WEEKDAY = Weekday.MONDAY

RECURRENCE_ONCE = 'once'
RECURRENCE_WEEKLY = 'weekly'

# Relocation outcome codes
RELOCATION_ACCEPTED = 'accepted'
RELOCATION_DESTINATION_OCCUPIED = 'destination_occupied'
RELOCATION_UNKNOWN_INSTANCE = 'unknown_instance'
RELOCATION_OFF_GRID = 'off_grid'
RELOCATION_PERSISTENCE_FAILED = 'persistence_failed'


@dataclass(frozen=True)
class Trainer:
    """Trainer as supplied by the club directory."""
    trainer_id: str
    trainer_name: str = ''


@dataclass(frozen=True)
class BaseClassConfig:
    """Settings shared by every class of one generation run."""
    name: str = ''
    level_from: Decimal = Decimal('1')
    level_to: Decimal = Decimal('10')
    duration_minutes: int = 60
    monthly_price: Decimal = Decimal('50')
    max_participants: int = 4
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    first_class_time: Optional[time] = time(10, 0)
    first_class_date: Optional[date] = None


@dataclass
class ResourcePools:
    """
    Courts and trainers selected for a generation run.

    Order matters: the i-th court is paired with trainer ``i % len(trainers)``.
    A court can only be added while there are fewer courts than trainers
    (or before any trainer is chosen).
    """
    courts: List[int] = field(default_factory=list)
    trainers: List[Trainer] = field(default_factory=list)

    def add_court(self, court_number: int) -> bool:
        if court_number in self.courts:
            return False
        if self.trainers and len(self.courts) >= len(self.trainers):
            return False
        self.courts.append(court_number)
        return True

    def remove_court(self, court_number: int) -> None:
        if court_number in self.courts:
            self.courts.remove(court_number)

    def add_trainer(self, trainer: Trainer) -> bool:
        if any(t.trainer_id == trainer.trainer_id for t in self.trainers):
            return False
        self.trainers.append(trainer)
        return True

    def remove_trainer(self, trainer_id: str) -> None:
        """Remove a trainer and drop courts beyond the new trainer count."""
        self.trainers = [t for t in self.trainers if t.trainer_id != trainer_id]
        if len(self.courts) > len(self.trainers):
            self.courts = self.courts[:len(self.trainers)]

    def trainer_for(self, index: int) -> Trainer:
        return self.trainers[index % len(self.trainers)]

    @property
    def is_empty(self) -> bool:
        return not self.courts or not self.trainers


@dataclass(frozen=True)
class TimeSlot:
    """A daily window ``[start, end)`` stepped every ``interval`` minutes."""
    start: time
    end: time
    interval: int = 60

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError("Interval must be positive")

    def is_compatible_with(self, duration_minutes: int) -> bool:
        """One of interval and duration must be a multiple of the other."""
        if duration_minutes <= 0:
            return False
        return (
            self.interval % duration_minutes == 0
            or duration_minutes % self.interval == 0
        )

    def start_times(self) -> Iterator[time]:
        end_minutes = to_minutes(self.end)
        minutes = to_minutes(self.start)
        while minutes < end_minutes:
            yield from_minutes(minutes)
            minutes += self.interval

    def __str__(self):
        return f"{format_time(self.start)}-{format_time(self.end)}/{self.interval}min"


@dataclass(frozen=True)
class MultiplicationSpec:
    """Weekdays and time slots to multiply the base classes across."""
    weekdays: Tuple[Weekday, ...] = ()
    time_slots: Tuple[TimeSlot, ...] = ()

    @property
    def is_complete(self) -> bool:
        return bool(self.weekdays) and bool(self.time_slots)


@dataclass(frozen=True)
class GeneratedClass:
    """A class proposed by the generator, not yet persisted."""
    id: str
    name: str
    trainer_id: str
    trainer_name: str
    court_number: int
    weekday: Weekday
    start_time: time
    duration_minutes: int
    monthly_price: Decimal
    max_participants: int
    level_from: Decimal
    level_to: Decimal
    selected: bool = True
    specific_date: Optional[date] = None
    participant_ids: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[Union[date, Weekday], int, time]:
        """Composite identity used for de-duplication."""
        return (self.specific_date or self.weekday, self.court_number, self.start_time)

    @property
    def is_date_pinned(self) -> bool:
        return self.specific_date is not None


@dataclass(frozen=True)
class ClassRecord:
    """Shape of a persisted scheduled class, as sent to storage."""
    club_id: str
    trainer_id: str
    name: str
    court_number: int
    days_of_week: Tuple[str, ...]
    start_date: Optional[date]
    end_date: Optional[date]
    recurrence_type: str
    start_time: time
    duration_minutes: int
    monthly_price: Decimal
    max_participants: int
    level_from: Decimal
    level_to: Decimal
    trainer_name: str = ''
    participant_ids: Tuple[str, ...] = ()
    reference: str = ''


@dataclass
class TimeSlotValidation:
    """Result of checking time-slot intervals against the class duration."""
    is_valid: bool
    incompatible_slots: List[TimeSlot] = field(default_factory=list)


@dataclass
class CommitFailure:
    """One class the store refused, and why."""
    item_reference: str
    error_message: str
    name: str = ''
    court_number: Optional[int] = None
    day: str = ''
    start_time: Optional[time] = None


@dataclass
class CommitSuccess:
    item_reference: str
    class_id: int
    name: str = ''


@dataclass
class CommitResult:
    """Per-item outcome of committing a batch of classes."""
    successful: List[CommitSuccess] = field(default_factory=list)
    failed: List[CommitFailure] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total(self) -> int:
        return self.succeeded_count + self.failed_count

    @property
    def is_success(self) -> bool:
        return not self.failed

    @property
    def is_total_failure(self) -> bool:
        """Nothing was stored although something was submitted."""
        return self.total > 0 and not self.successful

    @property
    def is_partial_failure(self) -> bool:
        return bool(self.successful) and bool(self.failed)

    @property
    def first_error(self) -> Optional[str]:
        return self.failed[0].error_message if self.failed else None

    def summary(self) -> str:
        text = f"{self.succeeded_count} succeeded, {self.failed_count} failed"
        if self.failed:
            text += f", first error: {self.first_error}"
        return text


@dataclass(frozen=True)
class RelocationRequest:
    """A drag-and-drop request to move a class to another grid cell."""
    instance_id: Union[int, str]
    day: date
    time_slot: time


@dataclass(frozen=True)
class RelocationIntent:
    """An accepted relocation, to be confirmed by storage."""
    instance_id: Union[int, str]
    new_day: date
    new_time: time


@dataclass(frozen=True)
class RelocationResult:
    accepted: bool
    reason: str
    intent: Optional[RelocationIntent] = None
    message: str = ''
