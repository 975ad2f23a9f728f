"""
Service layer for class scheduling business logic.
Services own the database work (ORM queries, transactions, signals) and hand
the loaded classes to the pure generator and layout modules.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Union

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from . import layout
from .dates import month_bounds, week_bounds
from .generator import selected_classes, to_record
from .grid import SlotGrid
from .layout import CalendarEntry, CalendarFilter, DayLayout, MonthDay
from .models import ScheduledClass
from .signals import scheduled_class_removed
from .types import (
    RELOCATION_ACCEPTED,
    RELOCATION_PERSISTENCE_FAILED,
    RELOCATION_UNKNOWN_INSTANCE,
    BaseClassConfig,
    ClassRecord,
    CommitFailure,
    CommitResult,
    CommitSuccess,
    GeneratedClass,
    RelocationIntent,
    RelocationRequest,
    RelocationResult,
)

logger = logging.getLogger(__name__)

CALENDAR_VIEWS = ('day', 'week', 'month')


def commit_classes(
    records: Sequence[ClassRecord],
    base_config: Optional[BaseClassConfig] = None
) -> CommitResult:
    """
    Store a batch of class records, one at a time.

    Each record is saved in its own savepoint, so a rejected record does not
    undo the others.

    Args:
        records: Records to store
        base_config: Configuration the records were generated from (logged only)

    Returns:
        CommitResult listing which records were stored and which failed, and why
    """
    if base_config is not None:
        logger.info(
            "Committing %d class(es) for %r between %s and %s",
            len(records), base_config.name, base_config.start_date, base_config.end_date
        )

    result = CommitResult()
    for index, record in enumerate(records):
        reference = record.reference or str(index)
        try:
            with transaction.atomic():
                scheduled_class = _create_from_record(record)
        except (ValidationError, IntegrityError) as exc:
            message = _error_message(exc)
            logger.warning("Class %s (%s) was rejected: %s", reference, record.name, message)
            result.failed.append(CommitFailure(
                item_reference=reference,
                error_message=message,
                name=record.name,
                court_number=record.court_number,
                day=record.days_of_week[0] if record.days_of_week else '',
                start_time=record.start_time,
            ))
        else:
            result.successful.append(CommitSuccess(
                item_reference=reference,
                class_id=scheduled_class.pk,
                name=record.name,
            ))

    logger.info("Class commit finished: %s", result.summary())
    return result


def commit_generated_classes(
    instances: Sequence[GeneratedClass],
    config: BaseClassConfig,
    club_id: str
) -> CommitResult:
    """Store the selected generated classes; failures reference generated ids."""
    records = [to_record(instance, config, club_id) for instance in selected_classes(instances)]
    return commit_classes(records, base_config=config)


def _create_from_record(record: ClassRecord) -> ScheduledClass:
    return ScheduledClass.objects.create(
        club_id=record.club_id,
        trainer_id=record.trainer_id,
        trainer_name=record.trainer_name,
        name=record.name,
        level_from=record.level_from,
        level_to=record.level_to,
        court_number=record.court_number,
        days_of_week=list(record.days_of_week),
        start_date=record.start_date,
        end_date=record.end_date,
        recurrence_type=record.recurrence_type,
        start_time=record.start_time,
        duration_minutes=record.duration_minutes,
        monthly_price=record.monthly_price,
        max_participants=record.max_participants,
        participant_ids=list(record.participant_ids),
        is_active=True
    )


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return '; '.join(exc.messages)
    return str(exc)


def get_classes_in_range(
    start_date: date,
    end_date: date,
    club_id: Optional[str] = None
) -> List[ScheduledClass]:
    """
    Get active classes whose date range overlaps ``[start_date, end_date]``.

    Raises:
        ValueError: If start_date is after end_date
    """
    if start_date > end_date:
        raise ValueError("Start date must not be after end date")

    queryset = ScheduledClass.objects.active().in_range(start_date, end_date)
    if club_id:
        queryset = queryset.for_club(club_id)
    return list(queryset)


def calendar_entries(
    start_date: date,
    end_date: date,
    club_id: Optional[str] = None,
    calendar_filter: Optional[CalendarFilter] = None
) -> List[CalendarEntry]:
    """Calendar entries of the active classes in range, narrowed by ``calendar_filter``."""
    entries = [
        CalendarEntry.from_model(scheduled_class)
        for scheduled_class in get_classes_in_range(start_date, end_date, club_id)
    ]
    return layout.filter_entries(entries, calendar_filter)


def build_calendar(
    view: str,
    day: date,
    club_id: Optional[str] = None,
    grid: Optional[SlotGrid] = None,
    calendar_filter: Optional[CalendarFilter] = None
) -> Union[List[DayLayout], List[MonthDay]]:
    """
    Lay out the classes visible in a day, week or month view around ``day``.

    ``calendar_filter`` hides classes before layout, so hidden classes take no
    overlap column.

    Raises:
        ValueError: If view is not one of 'day', 'week', 'month'
    """
    if view not in CALENDAR_VIEWS:
        raise ValueError(f"Unknown calendar view: {view!r}")

    if view == 'month':
        first, last = month_bounds(day)
        entries = calendar_entries(first, last, club_id, calendar_filter)
        return layout.build_month(day, entries)

    grid = grid or SlotGrid.from_settings()
    if view == 'week':
        monday, sunday = week_bounds(day)
        entries = calendar_entries(monday, sunday, club_id, calendar_filter)
        return layout.build_week(day, entries, grid)

    entries = calendar_entries(day, day, club_id, calendar_filter)
    return [layout.build_day(day, entries, grid)]


def relocate(
    request: RelocationRequest,
    club_id: Optional[str] = None,
    grid: Optional[SlotGrid] = None
) -> RelocationResult:
    """
    Handle a drag-and-drop move: check the destination cell, then store the move.

    Nothing is written unless the destination cell anchors no other class.
    Calendar filters do not apply here: hidden classes still occupy cells.
    """
    scheduled_class = ScheduledClass.objects.active().filter(pk=request.instance_id).first()
    if scheduled_class is None:
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_UNKNOWN_INSTANCE,
            message=f"Class {request.instance_id} does not exist",
        )

    entries = calendar_entries(request.day, request.day, club_id or scheduled_class.club_id)
    if layout.find_entry(entries, scheduled_class.pk) is None:
        entries.append(CalendarEntry.from_model(scheduled_class))

    result = layout.check_relocation(request, entries, grid)
    if not result.accepted:
        logger.info(
            "Relocation of class %s to %s %s rejected: %s",
            scheduled_class.pk, request.day, request.time_slot, result.reason
        )
        return result

    return relocate_class(result.intent)


def relocate_class(intent: RelocationIntent) -> RelocationResult:
    """
    Store an accepted relocation.

    A single-occurrence class moves to the new date. A weekly class keeps its
    weekdays if it already runs on the new day, otherwise it switches to it.

    Returns:
        RelocationResult; ``persistence_failed`` leaves the stored class unchanged
    """
    scheduled_class = ScheduledClass.objects.active().filter(pk=intent.instance_id).first()
    if scheduled_class is None:
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_UNKNOWN_INSTANCE,
            intent=intent,
            message=f"Class {intent.instance_id} does not exist",
        )

    if scheduled_class.is_once:
        scheduled_class.start_date = intent.new_day
        scheduled_class.end_date = intent.new_day
    else:
        scheduled_class.days_of_week = layout.relocated_days(
            scheduled_class.days_of_week, intent.new_day
        )
    scheduled_class.start_time = intent.new_time

    try:
        with transaction.atomic():
            scheduled_class.save()
    except ValidationError as exc:
        message = _error_message(exc)
        logger.warning("Relocation of class %s failed: %s", scheduled_class.pk, message)
        return RelocationResult(
            accepted=False,
            reason=RELOCATION_PERSISTENCE_FAILED,
            intent=intent,
            message=message,
        )

    logger.info(
        "Class %s moved to %s at %s",
        scheduled_class.pk, intent.new_day, intent.new_time
    )
    return RelocationResult(accepted=True, reason=RELOCATION_ACCEPTED, intent=intent)


@transaction.atomic
def remove_class(scheduled_class: ScheduledClass) -> ScheduledClass:
    """
    Remove a class from the schedule and notify listeners.

    Raises:
        ValueError: If the class was already removed
    """
    if not scheduled_class.is_active:
        raise ValueError("Class is already removed")

    scheduled_class.is_active = False
    scheduled_class.save()

    scheduled_class_removed.send(sender=ScheduledClass, instance=scheduled_class)
    logger.info("Class %s (%s) removed", scheduled_class.pk, scheduled_class.name)
    return scheduled_class
