"""
Serializers for the class scheduling API.
"""

from decimal import Decimal

from rest_framework import serializers

from .generator import canonical_weekdays
from .grid import SlotGrid
from .layout import CalendarFilter
from .models import ScheduledClass
from .types import (
    BaseClassConfig,
    GeneratedClass,
    MultiplicationSpec,
    ResourcePools,
    TimeSlot,
    Trainer,
)
from .weekdays import canonicalize


class WeekdayField(serializers.Field):
    """Weekday label in any supported language, stored as its canonical key."""

    default_error_messages = {
        'invalid': 'Unknown weekday: "{value}".',
    }

    def to_internal_value(self, data):
        weekday = canonicalize(data)
        if weekday is None:
            self.fail('invalid', value=data)
        return weekday

    def to_representation(self, value):
        weekday = canonicalize(value)
        return weekday.value if weekday else value


class TrainerSerializer(serializers.Serializer):
    trainer_id = serializers.CharField(max_length=64)
    trainer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')


class TimeSlotSerializer(serializers.Serializer):
    start = serializers.TimeField()
    end = serializers.TimeField()
    interval = serializers.IntegerField(min_value=1, default=60)


class BaseClassConfigSerializer(serializers.Serializer):
    """Shared settings of one generation run."""

    name = serializers.CharField(max_length=200, allow_blank=True, default='')
    level_from = serializers.DecimalField(max_digits=4, decimal_places=1, default=Decimal('1'))
    level_to = serializers.DecimalField(max_digits=4, decimal_places=1, default=Decimal('10'))
    duration_minutes = serializers.IntegerField(min_value=1, default=60)
    monthly_price = serializers.DecimalField(max_digits=8, decimal_places=2, default=Decimal('50'))
    max_participants = serializers.IntegerField(min_value=1, default=4)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    end_date = serializers.DateField(required=False, allow_null=True, default=None)
    first_class_time = serializers.TimeField(required=False, allow_null=True)
    first_class_date = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, data):
        """Validate configuration data."""
        start_date = data.get('start_date')
        end_date = data.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be on or after start date.'
            })

        if data.get('level_from') is not None and data.get('level_to') is not None:
            if data['level_from'] > data['level_to']:
                raise serializers.ValidationError({
                    'level_to': 'Level range must not be inverted.'
                })

        return data


def to_base_config(data) -> BaseClassConfig:
    """An omitted first_class_time keeps the default; an explicit null unsets it."""
    return BaseClassConfig(**dict(data))


class GenerateRequestSerializer(serializers.Serializer):
    """Inputs of a generation run: configuration, resources and multiplication."""

    base_config = BaseClassConfigSerializer()
    courts = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
        default=list
    )
    trainers = TrainerSerializer(many=True, required=False, default=list)
    days_of_week = serializers.ListField(child=WeekdayField(), allow_empty=True, default=list)
    time_slots = TimeSlotSerializer(many=True, required=False, default=list)

    def validate_courts(self, value):
        if len(set(value)) != len(value):
            raise serializers.ValidationError('Courts must be unique.')
        return value

    def validate_trainers(self, value):
        ids = [trainer['trainer_id'] for trainer in value]
        if len(set(ids)) != len(ids):
            raise serializers.ValidationError('Trainers must be unique.')
        return value

    def to_inputs(self):
        """Build generator inputs from validated data."""
        data = self.validated_data
        config = to_base_config(data['base_config'])
        pools = ResourcePools(
            courts=list(data.get('courts', [])),
            trainers=[Trainer(**trainer) for trainer in data.get('trainers', [])],
        )
        spec = MultiplicationSpec(
            weekdays=tuple(canonical_weekdays(data.get('days_of_week', []))),
            time_slots=tuple(TimeSlot(**slot) for slot in data.get('time_slots', [])),
        )
        return config, pools, spec


class GeneratedClassSerializer(serializers.Serializer):
    """A generated (not yet stored) class, for preview output and commit input."""

    id = serializers.CharField(max_length=100)
    name = serializers.CharField(max_length=200)
    trainer_id = serializers.CharField(max_length=64)
    trainer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    court_number = serializers.IntegerField(min_value=1)
    weekday = WeekdayField()
    start_time = serializers.TimeField(format='%H:%M')
    duration_minutes = serializers.IntegerField(min_value=1)
    monthly_price = serializers.DecimalField(max_digits=8, decimal_places=2)
    max_participants = serializers.IntegerField(min_value=1)
    level_from = serializers.DecimalField(max_digits=4, decimal_places=1)
    level_to = serializers.DecimalField(max_digits=4, decimal_places=1)
    selected = serializers.BooleanField(default=True)
    specific_date = serializers.DateField(required=False, allow_null=True, default=None)
    participant_ids = serializers.ListField(
        child=serializers.CharField(max_length=64),
        required=False,
        default=list
    )


def to_generated_class(data) -> GeneratedClass:
    kwargs = dict(data)
    kwargs['participant_ids'] = tuple(kwargs.get('participant_ids', ()))
    return GeneratedClass(**kwargs)


class CommitRequestSerializer(serializers.Serializer):
    """Generated classes to store for a club."""

    club_id = serializers.CharField(max_length=64)
    base_config = BaseClassConfigSerializer()
    classes = GeneratedClassSerializer(many=True, allow_empty=False)


class CommitSuccessSerializer(serializers.Serializer):
    item_reference = serializers.CharField()
    class_id = serializers.IntegerField()
    name = serializers.CharField()


class CommitFailureSerializer(serializers.Serializer):
    item_reference = serializers.CharField()
    error_message = serializers.CharField()
    name = serializers.CharField()
    court_number = serializers.IntegerField(allow_null=True)
    day = serializers.CharField()
    start_time = serializers.TimeField(format='%H:%M', allow_null=True)


class ScheduledClassReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying ScheduledClass (output)."""

    is_once = serializers.BooleanField(read_only=True)
    is_weekly = serializers.BooleanField(read_only=True)

    class Meta:
        model = ScheduledClass
        fields = [
            'id',
            'club_id',
            'trainer_id',
            'trainer_name',
            'name',
            'level_from',
            'level_to',
            'court_number',
            'days_of_week',
            'start_date',
            'end_date',
            'recurrence_type',
            'start_time',
            'duration_minutes',
            'monthly_price',
            'max_participants',
            'participant_ids',
            'is_active',
            'is_once',
            'is_weekly',
            'created_at',
            'updated_at',
        ]


class DateRangeQuerySerializer(serializers.Serializer):
    """Serializer for date range query parameters."""

    start = serializers.DateField(required=True)
    end = serializers.DateField(required=True)
    club_id = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        """Ensure start is not after end."""
        if data['start'] > data['end']:
            raise serializers.ValidationError(
                "Start date must not be after end date."
            )
        return data


class CalendarQuerySerializer(serializers.Serializer):
    view = serializers.ChoiceField(choices=['day', 'week', 'month'], default='week')
    date = serializers.DateField(required=True)
    club_id = serializers.CharField(required=False, allow_blank=True)
    time_from = serializers.TimeField(required=False)
    time_to = serializers.TimeField(required=False)
    search = serializers.CharField(required=False, allow_blank=True, default='')
    level_from = serializers.DecimalField(max_digits=4, decimal_places=1, required=False)
    level_to = serializers.DecimalField(max_digits=4, decimal_places=1, required=False)
    weekdays = serializers.ListField(child=WeekdayField(), required=False, default=list)
    min_participants = serializers.IntegerField(min_value=0, required=False)
    max_participants = serializers.IntegerField(min_value=0, required=False)

    def validate(self, data):
        grid = SlotGrid.from_settings()
        for name in ('time_from', 'time_to'):
            if name in data and grid.index_of(data[name]) is None:
                raise serializers.ValidationError({
                    name: f'Must be one of the calendar slots ({grid.start}-{grid.end} '
                          f'every {grid.granularity} minutes).'
                })

        if 'time_from' in data and 'time_to' in data and data['time_from'] > data['time_to']:
            raise serializers.ValidationError("time_from must not be after time_to.")

        if 'level_from' in data and 'level_to' in data and data['level_from'] > data['level_to']:
            raise serializers.ValidationError({'level_to': 'Level range must not be inverted.'})

        if ('min_participants' in data and 'max_participants' in data
                and data['min_participants'] > data['max_participants']):
            raise serializers.ValidationError({
                'max_participants': 'Participant range must not be inverted.'
            })
        return data

    def to_filter(self) -> CalendarFilter:
        """Calendar filter built from validated data."""
        data = self.validated_data
        return CalendarFilter(
            search=data.get('search', ''),
            level_from=data.get('level_from'),
            level_to=data.get('level_to'),
            weekdays=tuple(weekday.value for weekday in canonical_weekdays(data.get('weekdays', []))),
            min_participants=data.get('min_participants'),
            max_participants=data.get('max_participants'),
        )


class RelocateSerializer(serializers.Serializer):
    """Destination cell of a drag-and-drop move."""

    day = serializers.DateField()
    time = serializers.TimeField()


class CalendarEntrySerializer(serializers.Serializer):
    id = serializers.ReadOnlyField()
    name = serializers.CharField()
    days_of_week = serializers.ListField(child=serializers.CharField())
    start_time = serializers.TimeField(format='%H:%M')
    duration_minutes = serializers.IntegerField()
    specific_date = serializers.DateField(allow_null=True)
    court_number = serializers.IntegerField(allow_null=True)
    trainer_name = serializers.CharField()


class CalendarCellSerializer(serializers.Serializer):
    time = serializers.CharField()
    anchors = CalendarEntrySerializer(many=True)
    count = serializers.IntegerField()
    has_multiple = serializers.BooleanField()
    is_continuation = serializers.BooleanField()
    continuation_ids = serializers.SerializerMethodField()

    def get_continuation_ids(self, cell):
        return [entry.id for entry in cell.continuations]


class DayLayoutSerializer(serializers.Serializer):
    day = serializers.DateField()
    cells = CalendarCellSerializer(many=True)
    placements = serializers.SerializerMethodField()

    def get_placements(self, day_layout):
        return {
            str(entry_id): {
                'column_index': placement.column_index,
                'total_columns': placement.total_columns,
                'width': placement.width,
                'left': placement.left,
            }
            for entry_id, placement in day_layout.placements.items()
        }


class MonthDaySerializer(serializers.Serializer):
    day = serializers.DateField()
    count = serializers.IntegerField()
    visible = CalendarEntrySerializer(many=True)
    overflow = serializers.IntegerField()
