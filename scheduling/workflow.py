"""
Explicit state of a bulk class creation run.

Steps:
1. configure - base configuration, courts and trainers
2. multiply - weekdays and time slots
3. review - include or exclude generated classes
4. assign - attach participants before committing
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from . import generator
from .types import (
    BaseClassConfig,
    ClassRecord,
    GeneratedClass,
    MultiplicationSpec,
    ResourcePools,
    TimeSlotValidation,
)

STEP_CONFIGURE = 1
STEP_MULTIPLY = 2
STEP_REVIEW = 3
STEP_ASSIGN = 4


@dataclass
class BulkCreationWorkflow:
    club_id: str
    config: BaseClassConfig = field(default_factory=BaseClassConfig)
    pools: ResourcePools = field(default_factory=ResourcePools)
    spec: MultiplicationSpec = field(default_factory=MultiplicationSpec)
    step: int = STEP_CONFIGURE
    classes: List[GeneratedClass] = field(default_factory=list)

    def regenerate(self) -> List[GeneratedClass]:
        """Replace the generated classes with a fresh run over the current inputs."""
        self.classes = generator.generate(self.config, self.pools, self.spec)
        return self.classes

    def update_config(self, **changes) -> None:
        self.config = replace(self.config, **changes)
        self._refresh()

    def update_spec(self, spec: MultiplicationSpec) -> None:
        self.spec = spec
        self._refresh()

    def _refresh(self) -> None:
        if self.step in (STEP_MULTIPLY, STEP_REVIEW):
            self.regenerate()

    @property
    def validation(self) -> TimeSlotValidation:
        return generator.validate_time_slots(self.config.duration_minutes, self.spec.time_slots)

    def selected(self) -> List[GeneratedClass]:
        return generator.selected_classes(self.classes)

    def can_advance(self) -> bool:
        if self.step == STEP_CONFIGURE:
            return bool(
                self.config.name
                and self.config.start_date
                and self.config.end_date
                and not self.pools.is_empty
            )
        if self.step == STEP_MULTIPLY:
            return bool(
                self.spec.time_slots
                and self.classes
                and self.validation.is_valid
            )
        if self.step == STEP_REVIEW:
            return bool(self.selected())
        return False

    def advance(self) -> int:
        """
        Move to the next step.

        Raises:
            ValueError: If the current step is incomplete
        """
        if not self.can_advance():
            raise ValueError(f"Step {self.step} is not complete")
        self.step += 1
        if self.step in (STEP_MULTIPLY, STEP_REVIEW):
            self.regenerate()
        return self.step

    def back(self) -> int:
        if self.step > STEP_CONFIGURE:
            self.step -= 1
        return self.step

    def toggle(self, class_id: str) -> None:
        self.classes = generator.toggle_selection(self.classes, class_id)

    def assign_participants(self, class_id: str, participant_ids: Iterable[str]) -> None:
        self.classes = generator.assign_participants(self.classes, class_id, participant_ids)

    def find(self, class_id: str) -> Optional[GeneratedClass]:
        return next((c for c in self.classes if c.id == class_id), None)

    def records(self) -> List[ClassRecord]:
        """Records for the selected classes, ready to commit."""
        return [
            generator.to_record(instance, self.config, self.club_id)
            for instance in self.selected()
        ]
