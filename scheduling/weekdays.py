"""
Canonical weekday keys.

Stored and compared weekday values are always one of the seven ``Weekday``
keys. Labels coming from users, imports or other locales go through
``canonicalize`` first, which folds case, accents and language.
"""

import unicodedata
from datetime import date
from typing import Optional, Union

from django.db import models
from django.utils import translation
from django.utils.translation import gettext_lazy as _


class Weekday(models.TextChoices):
    MONDAY = 'monday', _('Monday')
    TUESDAY = 'tuesday', _('Tuesday')
    WEDNESDAY = 'wednesday', _('Wednesday')
    THURSDAY = 'thursday', _('Thursday')
    FRIDAY = 'friday', _('Friday')
    SATURDAY = 'saturday', _('Saturday')
    SUNDAY = 'sunday', _('Sunday')

    @property
    def number(self) -> int:
        """Day number as returned by ``date.weekday()`` (0=Monday, 6=Sunday)."""
        return _WEEKDAY_ORDER.index(self.value)


_WEEKDAY_ORDER = [
    'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday',
]

# Keys are accent-free and lowercase; see _fold().
_ALIASES = {
    # English
    'monday': 'monday', 'mon': 'monday',
    'tuesday': 'tuesday', 'tue': 'tuesday', 'tues': 'tuesday',
    'wednesday': 'wednesday', 'wed': 'wednesday',
    'thursday': 'thursday', 'thu': 'thursday', 'thur': 'thursday', 'thurs': 'thursday',
    'friday': 'friday', 'fri': 'friday',
    'saturday': 'saturday', 'sat': 'saturday',
    'sunday': 'sunday', 'sun': 'sunday',
    # Spanish
    'lunes': 'monday', 'lun': 'monday',
    'martes': 'tuesday', 'mar': 'tuesday',
    'miercoles': 'wednesday', 'mie': 'wednesday',
    'jueves': 'thursday', 'jue': 'thursday',
    'viernes': 'friday', 'vie': 'friday',
    'sabado': 'saturday', 'sab': 'saturday',
    'domingo': 'sunday', 'dom': 'sunday',
    # Catalan
    'dilluns': 'monday', 'dl': 'monday',
    'dimarts': 'tuesday', 'dt': 'tuesday',
    'dimecres': 'wednesday', 'dc': 'wednesday',
    'dijous': 'thursday', 'dj': 'thursday',
    'divendres': 'friday', 'dv': 'friday',
    'dissabte': 'saturday', 'ds': 'saturday',
    'diumenge': 'sunday', 'dg': 'sunday',
}

WeekdayLike = Union['Weekday', str, int]


def _fold(label: str) -> str:
    decomposed = unicodedata.normalize('NFKD', label.strip().lower())
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch)).rstrip('.')


def canonicalize(label: Optional[WeekdayLike]) -> Optional[Weekday]:
    """
    Map a weekday label to its canonical key.

    Accepts a ``Weekday``, a label in any supported language (with or without
    accents, any case) or a ``date.weekday()`` number. Returns ``None`` for
    anything unrecognised.
    """
    if label is None or isinstance(label, bool):
        return None
    if isinstance(label, Weekday):
        return label
    if isinstance(label, int):
        if 0 <= label <= 6:
            return Weekday(_WEEKDAY_ORDER[label])
        return None
    if not isinstance(label, str):
        return None

    key = _ALIASES.get(_fold(label))
    return Weekday(key) if key else None


def weekday_of(day: date) -> Weekday:
    """Canonical weekday of a calendar date."""
    return Weekday(_WEEKDAY_ORDER[day.weekday()])


def same_weekday(first: Optional[WeekdayLike], second: Optional[WeekdayLike]) -> bool:
    key = canonicalize(first)
    return key is not None and key == canonicalize(second)


def weekday_label(key: WeekdayLike, language: Optional[str] = None) -> str:
    """
    Human-readable label for a weekday in ``language`` (or the active language).

    Raises:
        ValueError: If ``key`` is not a recognised weekday
    """
    weekday = canonicalize(key)
    if weekday is None:
        raise ValueError(f"Unknown weekday: {key!r}")

    if language is None:
        return str(weekday.label)
    with translation.override(language):
        return str(weekday.label)
