"""Calendar helpers shared by work logs, payroll and learning journals.

Month tokens are ``YYYY-MM`` strings. Weeks start on Monday.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

MONTH_TOKEN_PATTERN = re.compile(r"^\d{4}-\d{2}$")
JOURNAL_CYCLE_DAYS = 28
JOURNAL_WEEK_COUNT = 4


@dataclass
class WeeklyRange:
    week_index: int
    start_date: date
    end_date: date

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite hands them back without tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def is_month_token(value: Optional[str]) -> bool:
    return bool(value) and bool(MONTH_TOKEN_PATTERN.match(value))


def resolve_month_token(value: Union[str, date, datetime]) -> str:
    day = to_date(value)
    return f"{day.year}-{day.month:02d}"


def resolve_month_range(month_token: Optional[str] = None) -> Tuple[date, date]:
    """Return ``(first_day, first_day_of_next_month)`` for a month token.

    Falls back to the current month when the token is missing or malformed.
    """
    if is_month_token(month_token):
        year, month = (int(part) for part in month_token.split("-"))
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month token: {month_token}")
    else:
        today = utcnow().date()
        year, month = today.year, today.month

    start = date(year, month, 1)
    if month == 12:
        end_exclusive = date(year + 1, 1, 1)
    else:
        end_exclusive = date(year, month + 1, 1)
    return start, end_exclusive


def derive_month_tokens_for_range(start: Union[str, date], end: Union[str, date]) -> List[str]:
    start_day = to_date(start)
    end_day = to_date(end)
    cursor = date(start_day.year, start_day.month, 1)
    tokens: List[str] = []

    while cursor <= end_day:
        token = resolve_month_token(cursor)
        if token not in tokens:
            tokens.append(token)
        if cursor.month == 12:
            cursor = date(cursor.year + 1, 1, 1)
        else:
            cursor = date(cursor.year, cursor.month + 1, 1)

    return tokens


def start_of_week(value: date) -> date:
    return value - timedelta(days=value.weekday())


def end_of_week(value: date) -> date:
    return start_of_week(value) + timedelta(days=6)


def week_number(week_start: date) -> int:
    """1-based index of the week counted from the Monday on or before Jan 1."""
    jan_first = date(week_start.year, 1, 1)
    first_week_start = start_of_week(jan_first)
    return (week_start - first_week_start).days // 7 + 1


def calculate_period_end(start: Union[str, date], cycle_length_days: int = JOURNAL_CYCLE_DAYS) -> date:
    return to_date(start) + timedelta(days=cycle_length_days - 1)


def resolve_weekly_ranges(period_start: Union[str, date]) -> List[WeeklyRange]:
    start = to_date(period_start)
    weeks = []
    for index in range(JOURNAL_WEEK_COUNT):
        week_start = start + timedelta(days=index * 7)
        weeks.append(
            WeeklyRange(
                week_index=index + 1,
                start_date=week_start,
                end_date=week_start + timedelta(days=6),
            )
        )
    return weeks
