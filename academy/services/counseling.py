"""Counseling slot timeline and calendar helpers.

Slots run every 30 minutes from 08:00; the last slot starts at 11:30.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List
import re
import uuid

from academy.core.exceptions import ValidationError

SLOT_INTERVAL_MINUTES = 30
START_HOUR = 8
END_HOUR = 12
CALENDAR_CELL_COUNT = 42

TIME_LABEL_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass
class CalendarCell:
    date: date
    label: int
    in_current_month: bool


def parse_slot_time(label: str) -> time:
    match = TIME_LABEL_PATTERN.match(label.strip()) if label else None
    if not match:
        raise ValidationError(f"Invalid time format: {label}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if (
        minutes % SLOT_INTERVAL_MINUTES != 0
        or hours < START_HOUR
        or hours >= END_HOUR
    ):
        raise ValidationError(f"{label} is outside the counseling hours")
    return time(hours, minutes)


def daily_timeline() -> List[time]:
    slots = []
    for hour in range(START_HOUR, END_HOUR):
        for minute in range(0, 60, SLOT_INTERVAL_MINUTES):
            slots.append(time(hour, minute))
    return slots


def add_minutes(value: time, minutes: int) -> time:
    shifted = datetime.combine(date.min, value) + timedelta(minutes=minutes)
    return shifted.time()


def display_time(value: time) -> str:
    return value.strftime("%H:%M")


def generate_question_field_key(prefix: str = "question") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


def build_calendar_cells(year: int, month: int) -> List[CalendarCell]:
    """Six Sunday-first weeks covering the month"""
    first_day = date(year, month, 1)
    # date.weekday() is Monday=0; shift so Sunday opens the grid
    offset = (first_day.weekday() + 1) % 7
    grid_start = first_day - timedelta(days=offset)
    cells = []
    for index in range(CALENDAR_CELL_COUNT):
        day = grid_start + timedelta(days=index)
        cells.append(CalendarCell(date=day, label=day.day, in_current_month=day.month == month))
    return cells


def group_slots_by_date(slots: Iterable) -> Dict[str, list]:
    grouped: Dict[str, list] = {}
    for slot in sorted(slots, key=lambda s: (s.counseling_date, s.start_time)):
        grouped.setdefault(slot.counseling_date.isoformat(), []).append(
            {
                "id": str(slot.id),
                "time": display_time(slot.start_time),
                "status": slot.status.value,
            }
        )
    return grouped
