"""
Recurring schedule generation.

Expands a base class configuration across courts, weekdays, time slots and a
date range into concrete ``GeneratedClass`` instances, and maps those
instances to the persisted record shape. Everything here is a pure function
of its arguments: callers regenerate the whole list whenever an input changes.
"""

import logging
from dataclasses import replace
from datetime import date, time
from typing import Iterable, List, Optional, Sequence

from django.utils.translation import gettext as _

from .conf import get_config
from .dates import dates_for_weekday, format_time
from .types import (
    PLACEHOLDER_WEEKDAY,
    RECURRENCE_ONCE,
    RECURRENCE_WEEKLY,
    BaseClassConfig,
    ClassRecord,
    GeneratedClass,
    MultiplicationSpec,
    ResourcePools,
    TimeSlot,
    TimeSlotValidation,
)
from .weekdays import Weekday, canonicalize

logger = logging.getLogger(__name__)


def generate(
    config: BaseClassConfig,
    pools: ResourcePools,
    spec: Optional[MultiplicationSpec] = None
) -> List[GeneratedClass]:
    """
    Generate the classes described by a configuration.

    Without a complete multiplication spec (at least one weekday and one time
    slot) one class per court is produced at ``first_class_time`` on the
    placeholder weekday. Otherwise every matching date in the configured range
    is combined with every stepped start time and every court.

    Args:
        config: Base class configuration
        pools: Selected courts and trainers
        spec: Weekdays and time slots to multiply across

    Returns:
        Ordered list of generated classes; empty if no court, no trainer or
        no first class time is set
    """
    if pools.is_empty or config.first_class_time is None:
        return []

    spec = spec or MultiplicationSpec()
    if not spec.is_complete:
        return _base_classes(config, pools)

    limit = get_config().max_generated_classes
    expected = expected_count(config, pools, spec)
    if expected > limit:
        logger.warning(
            "Generating %d classes for %r exceeds the configured limit of %d",
            expected, config.name, limit
        )

    return _multiplied_classes(config, pools, spec)


def _base_classes(config: BaseClassConfig, pools: ResourcePools) -> List[GeneratedClass]:
    classes = []
    for index, court_number in enumerate(pools.courts):
        classes.append(_build_class(
            config,
            pools,
            index,
            class_id=f"base-{court_number}-{format_time(config.first_class_time)}",
            weekday=PLACEHOLDER_WEEKDAY,
            start_time=config.first_class_time,
        ))
    return classes


def _multiplied_classes(
    config: BaseClassConfig,
    pools: ResourcePools,
    spec: MultiplicationSpec
) -> List[GeneratedClass]:
    classes = []
    for weekday in canonical_weekdays(spec.weekdays):
        specific_dates = dates_for_weekday(config.start_date, config.end_date, weekday)

        for slot in spec.time_slots:
            for start_time in slot.start_times():
                for specific_date in specific_dates:
                    for index, court_number in enumerate(pools.courts):
                        class_id = (
                            f"{specific_date.isoformat()}-{court_number}-"
                            f"{format_time(start_time)}"
                        )
                        classes.append(_build_class(
                            config,
                            pools,
                            index,
                            class_id=class_id,
                            weekday=weekday,
                            start_time=start_time,
                            specific_date=specific_date,
                        ))
    return classes


def canonical_weekdays(labels: Iterable) -> List[Weekday]:
    """Canonical weekdays of ``labels`` in first-seen order, without repeats or unknowns."""
    weekdays = []
    for label in labels:
        weekday = canonicalize(label)
        if weekday is not None and weekday not in weekdays:
            weekdays.append(weekday)
    return weekdays


def _build_class(
    config: BaseClassConfig,
    pools: ResourcePools,
    index: int,
    class_id: str,
    weekday: Weekday,
    start_time: time,
    specific_date: Optional[date] = None
) -> GeneratedClass:
    court_number = pools.courts[index]
    trainer = pools.trainer_for(index)
    return GeneratedClass(
        id=class_id,
        name=class_name(config.name, court_number),
        trainer_id=trainer.trainer_id,
        trainer_name=trainer.trainer_name or _('Unassigned'),
        court_number=court_number,
        weekday=weekday,
        start_time=start_time,
        duration_minutes=config.duration_minutes,
        monthly_price=config.monthly_price,
        max_participants=config.max_participants,
        level_from=config.level_from,
        level_to=config.level_to,
        selected=True,
        specific_date=specific_date,
    )


def class_name(base_name: str, court_number: int) -> str:
    return _('%(name)s - Court %(court)s') % {'name': base_name, 'court': court_number}


def expected_count(
    config: BaseClassConfig,
    pools: ResourcePools,
    spec: Optional[MultiplicationSpec] = None
) -> int:
    """Number of classes ``generate`` will return for these inputs."""
    if pools.is_empty or config.first_class_time is None:
        return 0
    if spec is None or not spec.is_complete:
        return len(pools.courts)

    date_count = sum(
        len(dates_for_weekday(config.start_date, config.end_date, weekday))
        for weekday in canonical_weekdays(spec.weekdays)
    )
    step_count = sum(len(list(slot.start_times())) for slot in spec.time_slots)
    return date_count * step_count * len(pools.courts)


def validate_time_slots(
    duration_minutes: int,
    time_slots: Iterable[TimeSlot]
) -> TimeSlotValidation:
    """
    Check each time slot interval against the class duration.

    Incompatible slots are reported, not raised; generation still uses them.
    """
    incompatible = [
        slot for slot in time_slots
        if not slot.is_compatible_with(duration_minutes)
    ]
    return TimeSlotValidation(is_valid=not incompatible, incompatible_slots=incompatible)


def to_record(
    instance: GeneratedClass,
    config: BaseClassConfig,
    club_id: str
) -> ClassRecord:
    """
    Map a generated class to the persisted record shape.

    Date-pinned classes become single occurrences (``once``) starting and
    ending on their date; the rest recur weekly over the configured range.
    """
    if instance.specific_date is not None:
        recurrence_type = RECURRENCE_ONCE
        start_date = end_date = instance.specific_date
    else:
        recurrence_type = RECURRENCE_WEEKLY
        start_date, end_date = config.start_date, config.end_date

    return ClassRecord(
        club_id=club_id,
        trainer_id=instance.trainer_id,
        trainer_name=instance.trainer_name,
        name=instance.name,
        court_number=instance.court_number,
        days_of_week=(instance.weekday.value,),
        start_date=start_date,
        end_date=end_date,
        recurrence_type=recurrence_type,
        start_time=instance.start_time,
        duration_minutes=instance.duration_minutes,
        monthly_price=instance.monthly_price,
        max_participants=instance.max_participants,
        level_from=instance.level_from,
        level_to=instance.level_to,
        participant_ids=tuple(instance.participant_ids),
        reference=instance.id,
    )


def from_record(record: ClassRecord) -> GeneratedClass:
    """Rebuild a generated class from its record (inverse of ``to_record``)."""
    weekday = canonicalize(record.days_of_week[0]) if record.days_of_week else None
    specific_date = record.start_date if record.recurrence_type == RECURRENCE_ONCE else None
    if weekday is None and specific_date is not None:
        weekday = canonicalize(specific_date.weekday())

    class_id = record.reference
    if not class_id:
        prefix = specific_date.isoformat() if specific_date else 'base'
        class_id = f"{prefix}-{record.court_number}-{format_time(record.start_time)}"

    return GeneratedClass(
        id=class_id,
        name=record.name,
        trainer_id=record.trainer_id,
        trainer_name=record.trainer_name,
        court_number=record.court_number,
        weekday=weekday or PLACEHOLDER_WEEKDAY,
        start_time=record.start_time,
        duration_minutes=record.duration_minutes,
        monthly_price=record.monthly_price,
        max_participants=record.max_participants,
        level_from=record.level_from,
        level_to=record.level_to,
        specific_date=specific_date,
        participant_ids=tuple(record.participant_ids),
    )


def selected_classes(instances: Sequence[GeneratedClass]) -> List[GeneratedClass]:
    return [instance for instance in instances if instance.selected]


def toggle_selection(
    instances: Sequence[GeneratedClass],
    class_id: str
) -> List[GeneratedClass]:
    return [
        replace(instance, selected=not instance.selected) if instance.id == class_id else instance
        for instance in instances
    ]


def update_class(
    instances: Sequence[GeneratedClass],
    class_id: str,
    **changes
) -> List[GeneratedClass]:
    """Return a copy of ``instances`` with ``changes`` applied to one class."""
    return [
        replace(instance, **changes) if instance.id == class_id else instance
        for instance in instances
    ]


def assign_participants(
    instances: Sequence[GeneratedClass],
    class_id: str,
    participant_ids: Iterable[str]
) -> List[GeneratedClass]:
    return update_class(instances, class_id, participant_ids=tuple(participant_ids))
