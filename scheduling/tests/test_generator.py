"""
Tests for recurring schedule generation.

Tests cover:
- Base set and multiplied generation
- Count formula and determinism
- Time slot validation
- Mapping generated classes to stored records
- Resource pool rules
"""

from dataclasses import replace
from datetime import date, time
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from scheduling import generator
from scheduling.types import (
    BaseClassConfig,
    MultiplicationSpec,
    ResourcePools,
    TimeSlot,
    Trainer,
)
from scheduling.weekdays import Weekday


def make_config(**overrides):
    values = dict(
        name="Beginners",
        level_from=Decimal('2'),
        level_to=Decimal('4'),
        duration_minutes=60,
        monthly_price=Decimal('45'),
        max_participants=4,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        first_class_time=time(10, 0),
    )
    values.update(overrides)
    return BaseClassConfig(**values)


def make_pools(courts=(1, 2), trainer_count=2):
    trainers = [Trainer(f"t{i}", f"Trainer {i}") for i in range(1, trainer_count + 1)]
    return ResourcePools(courts=list(courts), trainers=trainers)


class BaseSetGenerationTests(SimpleTestCase):
    """Test generation without a complete multiplication spec."""

    def test_one_class_per_court(self):
        """Test the base set holds one class per court with round-robin trainers."""
        pools = ResourcePools(
            courts=[3, 1, 2],
            trainers=[Trainer("t1", "Ana"), Trainer("t2", "Bea")]
        )
        classes = generator.generate(make_config(), pools)

        self.assertEqual(len(classes), 3)
        self.assertEqual([c.court_number for c in classes], [3, 1, 2])
        self.assertEqual([c.trainer_id for c in classes], ["t1", "t2", "t1"])
        self.assertTrue(all(c.weekday == Weekday.MONDAY for c in classes))
        self.assertTrue(all(c.specific_date is None for c in classes))
        self.assertTrue(all(c.selected for c in classes))
        self.assertEqual(classes[0].id, "base-3-10:00")
        self.assertEqual(classes[0].name, "Beginners - Court 3")
        self.assertEqual(classes[0].start_time, time(10, 0))

    def test_partial_spec_falls_back_to_base_set(self):
        """Test weekdays without time slots (or the reverse) give the base set."""
        pools = make_pools()
        only_days = MultiplicationSpec(weekdays=(Weekday.MONDAY,))
        only_slots = MultiplicationSpec(time_slots=(TimeSlot(time(10, 0), time(12, 0)),))

        for spec in (only_days, only_slots):
            classes = generator.generate(make_config(), pools, spec)
            self.assertEqual([c.id for c in classes], ["base-1-10:00", "base-2-10:00"])

    def test_missing_resources_produce_nothing(self):
        """Test empty courts, empty trainers or no first time give no classes."""
        self.assertEqual(generator.generate(make_config(), make_pools(courts=())), [])
        self.assertEqual(generator.generate(make_config(), make_pools(trainer_count=0)), [])
        self.assertEqual(
            generator.generate(make_config(first_class_time=None), make_pools()),
            []
        )

    def test_unnamed_trainer_is_unassigned(self):
        """Test a trainer without a name is shown as unassigned."""
        pools = ResourcePools(courts=[1], trainers=[Trainer("t1")])
        classes = generator.generate(make_config(), pools)
        self.assertEqual(classes[0].trainer_name, "Unassigned")


class MultipliedGenerationTests(SimpleTestCase):
    """Test generation across weekdays, time slots and dates."""

    def setUp(self):
        self.config = make_config()
        self.pools = make_pools(courts=(1, 2))
        self.spec = MultiplicationSpec(
            weekdays=(Weekday.MONDAY,),
            time_slots=(TimeSlot(time(10, 0), time(12, 0), 60),),
        )

    def test_mondays_of_june(self):
        """Test every Monday of June at 10:00 and 11:00 on both courts."""
        classes = generator.generate(self.config, self.pools, self.spec)

        # four Mondays, two start times, two courts
        self.assertEqual(len(classes), 16)
        self.assertEqual(
            sorted({c.specific_date for c in classes}),
            [date(2024, 6, 3), date(2024, 6, 10), date(2024, 6, 17), date(2024, 6, 24)]
        )
        self.assertEqual({c.start_time for c in classes}, {time(10, 0), time(11, 0)})
        self.assertEqual(len({c.id for c in classes}), 16)
        self.assertIn("2024-06-03-1-10:00", {c.id for c in classes})
        self.assertTrue(all(c.weekday == Weekday.MONDAY for c in classes))

    def test_trainer_follows_court_position(self):
        """Test each court keeps the trainer matching its position."""
        classes = generator.generate(self.config, self.pools, self.spec)
        for instance in classes:
            expected = "t1" if instance.court_number == 1 else "t2"
            self.assertEqual(instance.trainer_id, expected)

    def test_count_formula(self):
        """Test count = dates x stepped start times x courts."""
        spec = MultiplicationSpec(
            weekdays=(Weekday.MONDAY, Weekday.WEDNESDAY),
            time_slots=(
                TimeSlot(time(10, 0), time(12, 0), 60),
                TimeSlot(time(18, 0), time(19, 30), 30),
            ),
        )
        classes = generator.generate(self.config, self.pools, spec)

        # (4 Mondays + 4 Wednesdays) x (2 + 3 start times) x 2 courts
        self.assertEqual(len(classes), 80)
        self.assertEqual(generator.expected_count(self.config, self.pools, spec), 80)

    def test_slot_end_is_exclusive(self):
        """Test a start time equal to the slot end is not generated."""
        spec = MultiplicationSpec(
            weekdays=(Weekday.MONDAY,),
            time_slots=(TimeSlot(time(10, 0), time(12, 1), 60),),
        )
        classes = generator.generate(self.config, self.pools, spec)
        self.assertEqual(
            {c.start_time for c in classes},
            {time(10, 0), time(11, 0), time(12, 0)}
        )

    def test_generation_is_deterministic(self):
        """Test identical inputs give identical output in identical order."""
        first = generator.generate(self.config, self.pools, self.spec)
        second = generator.generate(self.config, self.pools, self.spec)
        self.assertEqual(first, second)
        self.assertEqual([c.id for c in first], [c.id for c in second])

    def test_loop_order(self):
        """Test courts vary fastest, then dates, then start times."""
        classes = generator.generate(self.config, self.pools, self.spec)
        self.assertEqual(
            [c.id for c in classes[:4]],
            [
                "2024-06-03-1-10:00",
                "2024-06-03-2-10:00",
                "2024-06-10-1-10:00",
                "2024-06-10-2-10:00",
            ]
        )

    def test_same_day_in_several_languages_generates_once(self):
        """Test labels naming the same weekday do not duplicate classes."""
        spec = MultiplicationSpec(
            weekdays=("lunes", "Monday", "LUNES", "dilluns"),
            time_slots=(TimeSlot(time(10, 0), time(11, 0), 60),),
        )
        pools = make_pools(courts=(1,), trainer_count=1)
        classes = generator.generate(self.config, pools, spec)

        self.assertEqual(len(classes), 4)
        self.assertEqual(len({c.id for c in classes}), 4)
        self.assertEqual(generator.expected_count(self.config, pools, spec), 4)

        toggled = generator.toggle_selection(classes, classes[0].id)
        self.assertEqual(len([c for c in toggled if not c.selected]), 1)

    def test_canonical_weekdays_keep_first_seen_order(self):
        """Test weekday labels are folded, deduplicated and unknowns dropped."""
        self.assertEqual(
            generator.canonical_weekdays(["miércoles", "lunes", "Wednesday", "funday", "Monday"]),
            [Weekday.WEDNESDAY, Weekday.MONDAY]
        )

    def test_range_without_matching_weekday(self):
        """Test a range without the weekday generates nothing."""
        config = make_config(start_date=date(2024, 6, 4), end_date=date(2024, 6, 8))
        self.assertEqual(generator.generate(config, self.pools, self.spec), [])

    @override_settings(SCHEDULING={'MAX_GENERATED_CLASSES': 5})
    def test_large_run_is_logged_not_truncated(self):
        """Test exceeding the configured limit warns but still generates everything."""
        with self.assertLogs('scheduling.generator', level='WARNING') as logs:
            classes = generator.generate(self.config, self.pools, self.spec)
        self.assertEqual(len(classes), 16)
        self.assertIn("exceeds the configured limit", logs.output[0])


class TimeSlotValidationTests(SimpleTestCase):
    """Test interval and duration compatibility."""

    def test_incompatible_interval(self):
        """Test 45 minute classes every 60 minutes are flagged."""
        slot = TimeSlot(time(10, 0), time(12, 0), 60)
        result = generator.validate_time_slots(45, [slot])
        self.assertFalse(result.is_valid)
        self.assertEqual(result.incompatible_slots, [slot])

    def test_compatible_intervals(self):
        """Test 60 minute classes every 30 or 120 minutes are accepted."""
        slots = [TimeSlot(time(10, 0), time(12, 0), 30), TimeSlot(time(16, 0), time(20, 0), 120)]
        result = generator.validate_time_slots(60, slots)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.incompatible_slots, [])

    def test_incompatible_slot_still_generates(self):
        """Test validation does not filter generation."""
        spec = MultiplicationSpec(
            weekdays=(Weekday.MONDAY,),
            time_slots=(TimeSlot(time(10, 0), time(12, 0), 60),),
        )
        config = make_config(duration_minutes=45)
        self.assertEqual(len(generator.generate(config, make_pools(), spec)), 16)

    def test_non_positive_interval_rejected(self):
        """Test a zero interval cannot be built."""
        with self.assertRaises(ValueError):
            TimeSlot(time(10, 0), time(12, 0), 0)


class RecordMappingTests(SimpleTestCase):
    """Test the mapping between generated classes and stored records."""

    def setUp(self):
        self.config = make_config()
        self.pools = make_pools()

    def test_date_pinned_class_becomes_single_occurrence(self):
        """Test a date-pinned class starts and ends on its date."""
        spec = MultiplicationSpec(
            weekdays=("miércoles",),
            time_slots=(TimeSlot(time(18, 0), time(19, 0)),),
        )
        instance = generator.generate(self.config, self.pools, spec)[0]
        record = generator.to_record(instance, self.config, "club-1")

        self.assertEqual(record.recurrence_type, "once")
        self.assertEqual(record.start_date, date(2024, 6, 5))
        self.assertEqual(record.end_date, date(2024, 6, 5))
        self.assertEqual(record.days_of_week, ("wednesday",))
        self.assertEqual(record.club_id, "club-1")
        self.assertEqual(record.reference, instance.id)

    def test_base_class_becomes_weekly(self):
        """Test a class without a date recurs weekly over the configured range."""
        instance = generator.generate(self.config, self.pools)[0]
        record = generator.to_record(instance, self.config, "club-1")

        self.assertEqual(record.recurrence_type, "weekly")
        self.assertEqual(record.start_date, self.config.start_date)
        self.assertEqual(record.end_date, self.config.end_date)
        self.assertEqual(record.days_of_week, ("monday",))

    def test_round_trip(self):
        """Test rebuilding a class from its record gives the same class."""
        spec = MultiplicationSpec(
            weekdays=(Weekday.FRIDAY,),
            time_slots=(TimeSlot(time(9, 0), time(10, 0)),),
        )
        instance = generator.generate(self.config, self.pools, spec)[0]
        instance = generator.assign_participants([instance], instance.id, ["p1", "p2"])[0]

        rebuilt = generator.from_record(generator.to_record(instance, self.config, "club-1"))
        self.assertEqual(rebuilt, instance)

    def test_rebuilt_id_without_reference(self):
        """Test a record without reference gets the synthetic id back."""
        instance = generator.generate(self.config, self.pools)[1]
        record = generator.to_record(instance, self.config, "club-1")
        rebuilt = generator.from_record(replace(record, reference=""))
        self.assertEqual(rebuilt.id, "base-2-10:00")


class SelectionTests(SimpleTestCase):
    """Test pure edits of generated class lists."""

    def setUp(self):
        self.classes = generator.generate(make_config(), make_pools())

    def test_toggle_returns_new_list(self):
        """Test toggling leaves the original list untouched."""
        toggled = generator.toggle_selection(self.classes, "base-1-10:00")

        self.assertFalse(toggled[0].selected)
        self.assertTrue(self.classes[0].selected)
        self.assertEqual([c.id for c in generator.selected_classes(toggled)], ["base-2-10:00"])

    def test_update_class(self):
        """Test editing one class changes only that class."""
        updated = generator.update_class(self.classes, "base-2-10:00", start_time=time(11, 0))
        self.assertEqual(updated[1].start_time, time(11, 0))
        self.assertEqual(updated[0], self.classes[0])


class ResourcePoolTests(SimpleTestCase):
    """Test court and trainer selection rules."""

    def test_courts_limited_by_trainers(self):
        """Test a court can only be added while courts < trainers."""
        pools = ResourcePools(trainers=[Trainer("t1")])
        self.assertTrue(pools.add_court(1))
        self.assertFalse(pools.add_court(2))
        self.assertFalse(pools.add_court(1))

    def test_courts_allowed_before_trainers(self):
        """Test courts can be chosen before any trainer."""
        pools = ResourcePools()
        self.assertTrue(pools.add_court(1))
        self.assertTrue(pools.add_court(2))

    def test_removing_trainer_truncates_courts(self):
        """Test dropping a trainer drops the courts beyond the trainer count."""
        pools = make_pools(courts=(1, 2), trainer_count=2)
        pools.remove_trainer("t2")
        self.assertEqual(pools.courts, [1])
        self.assertFalse(pools.add_trainer(Trainer("t1")))
