"""Weekday names and time formatting for professorship schedules."""

from __future__ import annotations

DAY_NAMES = ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo")


class ScheduleFormatError(ValueError):
    """A stored schedule row cannot be rendered."""


def day_name(day_number: int) -> str:
    """Return the Spanish weekday name for `day_number` (1 = Lunes)."""
    if not 1 <= day_number <= len(DAY_NAMES):
        raise ScheduleFormatError(f"could not convert day number [dayNumber: {day_number}] to day")
    return DAY_NAMES[day_number - 1]


def trim_seconds(value: str) -> str:
    """Drop the seconds from an `HH:MM:SS` time string.

    Hours are not zero padded by every driver, so `9:00:00` becomes `9:00`.
    """
    if len(value) < 6:
        raise ScheduleFormatError("could not trim seconds from time")
    return value[:-3]
