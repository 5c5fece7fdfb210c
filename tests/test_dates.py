from datetime import date, datetime, timezone

import pytest

from academy.utils.dates import (
    as_utc,
    calculate_period_end,
    derive_month_tokens_for_range,
    resolve_month_range,
    resolve_month_token,
    resolve_weekly_ranges,
    week_number,
)


def test_resolve_month_range_regular_month():
    assert resolve_month_range("2025-03") == (date(2025, 3, 1), date(2025, 4, 1))


def test_resolve_month_range_december_rolls_into_next_year():
    assert resolve_month_range("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))


def test_resolve_month_range_rejects_month_thirteen():
    with pytest.raises(ValueError):
        resolve_month_range("2025-13")


def test_resolve_month_range_defaults_to_current_month():
    start, end = resolve_month_range(None)
    assert start.day == 1
    assert end > start


def test_resolve_month_token_accepts_strings_and_dates():
    assert resolve_month_token("2025-07-19") == "2025-07"
    assert resolve_month_token(date(2025, 1, 3)) == "2025-01"


def test_derive_month_tokens_spanning_year_end():
    assert derive_month_tokens_for_range("2024-12-20", "2025-01-16") == ["2024-12", "2025-01"]


def test_calculate_period_end_is_four_weeks_inclusive():
    assert calculate_period_end("2025-03-03") == date(2025, 3, 30)


def test_weekly_ranges_cover_four_consecutive_weeks():
    weeks = resolve_weekly_ranges(date(2025, 3, 3))
    assert [w.week_index for w in weeks] == [1, 2, 3, 4]
    assert weeks[0].start_date == date(2025, 3, 3)
    assert weeks[0].end_date == date(2025, 3, 9)
    assert weeks[3].end_date == date(2025, 3, 30)


def test_week_number_counts_from_week_containing_january_first():
    # 2025-01-01 is a Wednesday, so week one starts on 2024-12-30
    assert week_number(date(2025, 1, 1)) == 1
    assert week_number(date(2025, 1, 6)) == 2


def test_as_utc_attaches_timezone_to_naive_values():
    naive = datetime(2025, 3, 1, 9, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    assert as_utc(None) is None
