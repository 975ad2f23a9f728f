"""
Settings for the scheduling app.

Values come from the ``SCHEDULING`` dict in Django settings, merged over the
defaults below. Unknown keys are ignored.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict

from django.conf import settings


@dataclass(frozen=True)
class SchedulingConfig:
    slot_minutes: int = 30
    day_start: str = '08:00'
    day_end: str = '22:00'
    max_generated_classes: int = 500
    month_inline_limit: int = 3
    default_class_duration: int = 60
    max_court_number: int = 50

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SchedulingConfig':
        merged = asdict(cls())
        names = {f.name for f in fields(cls)}
        for key, value in data.items():
            name = key.lower()
            if name in names:
                merged[name] = value
        return cls(**merged)


def get_config() -> SchedulingConfig:
    """Read the current ``SCHEDULING`` settings (honours ``override_settings``)."""
    return SchedulingConfig.from_dict(getattr(settings, 'SCHEDULING', {}))
