"""
Models for the class scheduling system.

A ScheduledClass is either a weekly recurring class (one or more weekdays
between start_date and end_date) or a single occurrence pinned to one date
(start_date == end_date, recurrence_type = 'once').
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .conf import get_config
from .dates import format_time
from .managers import ScheduledClassManager
from .weekdays import canonicalize, weekday_of


def validate_court_number(value):
    maximum = get_config().max_court_number
    if not 1 <= value <= maximum:
        raise ValidationError(
            f"Court number must be between 1 and {maximum}.",
            code='invalid_court',
        )


class ScheduledClass(models.Model):
    """
    A class held on a court with a trainer at a fixed time of day.

    Weekday values are stored as canonical weekday keys.
    """

    RECURRENCE_CHOICES = [
        ('once', 'Once'),
        ('weekly', 'Weekly'),
    ]

    club_id = models.CharField(max_length=64, db_index=True)
    trainer_id = models.CharField(max_length=64)
    trainer_name = models.CharField(max_length=200, blank=True, default='')

    name = models.CharField(max_length=200)
    level_from = models.DecimalField(max_digits=4, decimal_places=1, default=1)
    level_to = models.DecimalField(max_digits=4, decimal_places=1, default=10)

    court_number = models.PositiveIntegerField(validators=[validate_court_number])
    days_of_week = models.JSONField(
        default=list,
        help_text="Canonical weekday keys, e.g. [\"monday\", \"thursday\"]"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    recurrence_type = models.CharField(
        max_length=20,
        choices=RECURRENCE_CHOICES,
        default='weekly'
    )
    start_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(
        default=60,
        validators=[MinValueValidator(1)]
    )

    monthly_price = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    max_participants = models.PositiveIntegerField(default=4)
    participant_ids = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(
        default=True,
        help_text="False once the class has been removed"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ScheduledClassManager()

    class Meta:
        ordering = ['start_date', 'start_time', 'court_number']
        indexes = [
            models.Index(fields=['club_id', 'is_active']),
            models.Index(fields=['start_date', 'end_date']),
        ]

    def __str__(self):
        days = ', '.join(self.days_of_week or [])
        return f"{self.name} - Court {self.court_number} - {days} at {format_time(self.start_time)}"

    @property
    def is_once(self):
        """Check if this is a single-occurrence class."""
        return self.recurrence_type == 'once'

    @property
    def is_weekly(self):
        """Check if this is a weekly recurring class."""
        return self.recurrence_type == 'weekly'

    def clean(self):
        """Validate class data."""
        super().clean()

        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({
                'end_date': 'End date must be on or after start date.'
            })

        if self.level_from is not None and self.level_to is not None and self.level_from > self.level_to:
            raise ValidationError({
                'level_to': 'Level range must not be inverted.'
            })

        if self.is_once:
            if self.start_date != self.end_date:
                raise ValidationError({
                    'end_date': 'Single-occurrence classes must start and end on the same date.'
                })
            if self.start_date:
                self.days_of_week = [weekday_of(self.start_date).value]
        else:
            self.days_of_week = self._canonical_days()

        self._check_court_conflicts()

    def _canonical_days(self):
        if not isinstance(self.days_of_week, list) or not self.days_of_week:
            raise ValidationError({
                'days_of_week': 'At least one weekday is required.'
            })

        canonical = []
        for label in self.days_of_week:
            weekday = canonicalize(label)
            if weekday is None:
                raise ValidationError({
                    'days_of_week': f'Unknown weekday: {label!r}.'
                })
            if weekday.value not in canonical:
                canonical.append(weekday.value)
        return canonical

    def _check_court_conflicts(self):
        """Reject a second active class on the same court, weekday and start time."""
        if not self.is_active or not (self.start_date and self.end_date and self.start_time):
            return

        candidates = (
            ScheduledClass.objects
            .active()
            .for_club(self.club_id)
            .for_court(self.court_number)
            .in_range(self.start_date, self.end_date)
            .filter(start_time=self.start_time)
            .exclude(pk=self.pk)
        )
        days = set(self.days_of_week)
        for other in candidates:
            if days.intersection(other.days_of_week or []):
                raise ValidationError(
                    f'Court {self.court_number} already has "{other.name}" '
                    f'at {format_time(self.start_time)} on {", ".join(sorted(days))}.',
                    code='court_conflict',
                )

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)
