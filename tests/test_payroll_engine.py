from datetime import date

import pytest

from academy.services.payroll_engine import (
    PayrollAdjustment,
    PayrollCalculationInput,
    WorkLogRecord,
    calculate_payroll,
    round2,
    summarize_weeks,
)

MARCH_START = date(2025, 3, 1)
MARCH_END = date(2025, 3, 31)


def _full_week(start_day=3, hours=4.0, status="work"):
    # 2025-03-03 is a Monday
    return [
        WorkLogRecord(work_date=date(2025, 3, start_day + offset), status=status, work_hours=hours)
        for offset in range(5)
    ]


def _calculate(logs, contract_type="employee", hourly_rate=10000, **kwargs):
    return calculate_payroll(
        PayrollCalculationInput(
            period_start=MARCH_START,
            period_end=MARCH_END,
            hourly_rate=hourly_rate,
            contract_type=contract_type,
            work_logs=logs,
            **kwargs,
        )
    )


def test_round2_rounds_half_up():
    assert round2(1.005) == 1.01
    assert round2(2.675) == 2.68


def test_eligible_week_earns_weekly_holiday_allowance():
    breakdown = _calculate(_full_week())

    assert breakdown.total_work_hours == 20
    assert breakdown.hourly_total == 200000
    assert breakdown.weekly_holiday_allowance_hours == 4
    assert breakdown.weekly_holiday_allowance == 40000
    assert breakdown.gross_pay == 240000
    assert breakdown.deduction_details == []
    assert breakdown.net_pay == 240000


def test_week_under_fifteen_hours_is_not_eligible():
    logs = _full_week(hours=2.8)
    breakdown = _calculate(logs)

    assert breakdown.total_work_hours == 14
    assert breakdown.weekly_holiday_allowance == 0
    assert breakdown.weekly_summaries[0].eligible_for_weekly_holiday_allowance is False


@pytest.mark.parametrize("status", ["tardy", "absence", "substitute"])
def test_irregular_day_voids_the_allowance(status):
    logs = _full_week(hours=4.0)
    logs.append(WorkLogRecord(work_date=date(2025, 3, 8), status=status, work_hours=4.0))

    breakdown = _calculate(logs)

    assert breakdown.weekly_holiday_allowance == 0
    summary = breakdown.weekly_summaries[0]
    assert summary.eligible_for_weekly_holiday_allowance is False
    # tardy hours still count towards worked hours
    expected_hours = 24 if status == "tardy" else 20
    assert summary.total_work_hours == expected_hours


def test_freelancer_gets_withholding_and_no_allowance():
    breakdown = _calculate(_full_week(), contract_type="freelancer")

    assert breakdown.weekly_holiday_allowance == 0
    assert breakdown.weekly_holiday_allowance_hours == 0
    assert breakdown.gross_pay == 200000
    assert [d.label for d in breakdown.deduction_details] == ["Freelancer withholding (3.3%)"]
    assert breakdown.deductions_total == 6600
    assert breakdown.net_pay == 193400


def test_insured_employee_pays_statutory_insurance():
    breakdown = _calculate(_full_week(), insurance_enrolled=True)

    amounts = {d.label: d.amount for d in breakdown.deduction_details}
    assert amounts["Health insurance (4.5%)"] == 10800
    assert amounts["National pension (3.545%)"] == 8508
    assert amounts["Long-term care insurance (12.81%)"] == pytest.approx(1089.87)
    assert amounts["Employment insurance (0.9%)"] == 2160
    assert breakdown.deductions_total == pytest.approx(22557.87)
    assert breakdown.net_pay == pytest.approx(217442.13)


def test_uninsured_employee_has_no_statutory_deductions():
    breakdown = _calculate(_full_week(), insurance_enrolled=False)
    assert breakdown.deduction_details == []


def test_adjustments_and_base_salary():
    breakdown = _calculate(
        [],
        contract_type="none",
        hourly_rate=0,
        base_salary_amount=2000000,
        adjustments=[
            PayrollAdjustment(label="Bonus", amount=50000),
            PayrollAdjustment(label="Lost key", amount=10000, is_deduction=True),
        ],
    )

    assert breakdown.base_salary_total == 2000000
    assert breakdown.gross_pay == 2050000
    assert [(d.label, d.amount) for d in breakdown.deduction_details] == [("Lost key", 10000)]
    assert breakdown.deductions_total == 10000
    assert breakdown.net_pay == 2040000
    assert [a.label for a in breakdown.additions] == ["Bonus"]


def test_logs_outside_the_period_are_ignored():
    logs = _full_week() + [
        WorkLogRecord(work_date=date(2025, 2, 28), status="work", work_hours=8),
        WorkLogRecord(work_date=date(2025, 4, 1), status="work", work_hours=8),
    ]
    breakdown = _calculate(logs)
    assert breakdown.total_work_hours == 20


def test_absence_hours_are_not_counted():
    logs = [WorkLogRecord(work_date=date(2025, 3, 10), status="absence", work_hours=5)]
    breakdown = _calculate(logs)
    assert breakdown.total_work_hours == 0
    assert breakdown.weekly_summaries[0].contains_absence is True


def test_week_bounds_are_clipped_to_the_period():
    logs = [
        WorkLogRecord(work_date=date(2025, 3, 1), status="work", work_hours=3),
        WorkLogRecord(work_date=date(2025, 3, 31), status="work", work_hours=3),
    ]
    summaries = summarize_weeks(logs, MARCH_START, MARCH_END)

    assert len(summaries) == 2
    assert summaries[0].week_start == date(2025, 3, 1)
    assert summaries[0].week_end == date(2025, 3, 2)
    assert summaries[1].week_start == date(2025, 3, 31)
    assert summaries[1].week_end == date(2025, 3, 31)


def test_breakdown_serializes_weekly_summaries():
    payload = _calculate(_full_week()).to_dict()
    assert payload["weekly_summaries"][0]["week_start"] == "2025-03-03"
    assert payload["weekly_summaries"][0]["entry_count"] == 5
    assert payload["net_pay"] == 240000
