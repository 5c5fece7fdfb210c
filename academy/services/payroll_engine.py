"""Monthly payroll calculation for teachers.

Everything here is pure: callers fetch the approved work logs, the payroll
profile and any manual adjustments, and get back a full breakdown including
the weekly holiday allowance (paid per eligible week) and statutory
deductions.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from academy.utils.dates import end_of_week, start_of_week, to_date, week_number

FREELANCER_WITHHOLDING_RATE = 0.033
WEEKLY_HOLIDAY_MIN_HOURS = 15
WEEKLY_HOLIDAY_STANDARD_DAYS = 5

HEALTH_INSURANCE_RATE = 0.045
NATIONAL_PENSION_RATE = 0.03545
LONG_TERM_CARE_RATE = 0.1281
EMPLOYMENT_INSURANCE_RATE = 0.009

HOURS_BEARING_STATUSES = ("work", "tardy")


def round2(value: float) -> float:
    """Round half up to two decimals."""
    quantized = Decimal(repr(float(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(quantized)


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


def requires_work_hours(status: Any) -> bool:
    return _status_value(status) in HOURS_BEARING_STATUSES


@dataclass
class PayrollAdjustment:
    label: str
    amount: float
    is_deduction: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "amount": self.amount, "is_deduction": self.is_deduction}


@dataclass
class DeductionDetail:
    label: str
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "amount": self.amount}


@dataclass
class WorkLogRecord:
    """Minimal view of a work log row. ORM ``WorkLogEntry`` objects fit the same shape."""

    work_date: date
    status: str
    work_hours: Optional[float] = None
    id: Optional[Any] = None


@dataclass
class WeeklyWorkSummary:
    week_number: int
    week_start: date
    week_end: date
    total_work_hours: float = 0.0
    contains_tardy: bool = False
    contains_absence: bool = False
    contains_substitute: bool = False
    eligible_for_weekly_holiday_allowance: bool = False
    weekly_holiday_allowance_hours: float = 0.0
    entries: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "total_work_hours": round2(self.total_work_hours),
            "contains_tardy": self.contains_tardy,
            "contains_absence": self.contains_absence,
            "contains_substitute": self.contains_substitute,
            "eligible_for_weekly_holiday_allowance": self.eligible_for_weekly_holiday_allowance,
            "weekly_holiday_allowance_hours": self.weekly_holiday_allowance_hours,
            "entry_count": len(self.entries),
        }


@dataclass
class PayrollCalculationInput:
    period_start: date
    period_end: date
    hourly_rate: float
    contract_type: str
    work_logs: Iterable[Any]
    base_salary_amount: Optional[float] = None
    insurance_enrolled: bool = False
    adjustments: List[PayrollAdjustment] = field(default_factory=list)
    teacher_id: Optional[Any] = None
    teacher_name: Optional[str] = None


@dataclass
class PayrollBreakdown:
    total_work_hours: float
    weekly_holiday_allowance_hours: float
    hourly_total: float
    weekly_holiday_allowance: float
    base_salary_total: float
    adjustments: List[PayrollAdjustment]
    gross_pay: float
    deduction_details: List[DeductionDetail]
    deductions_total: float
    net_pay: float
    weekly_summaries: List[WeeklyWorkSummary]

    @property
    def additions(self) -> List[PayrollAdjustment]:
        return [item for item in self.adjustments if not item.is_deduction]

    @property
    def deduction_adjustments(self) -> List[PayrollAdjustment]:
        return [item for item in self.adjustments if item.is_deduction]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_work_hours": self.total_work_hours,
            "weekly_holiday_allowance_hours": self.weekly_holiday_allowance_hours,
            "hourly_total": self.hourly_total,
            "weekly_holiday_allowance": self.weekly_holiday_allowance,
            "base_salary_total": self.base_salary_total,
            "adjustments": [item.to_dict() for item in self.adjustments],
            "gross_pay": self.gross_pay,
            "deduction_details": [item.to_dict() for item in self.deduction_details],
            "deductions_total": self.deductions_total,
            "net_pay": self.net_pay,
            "weekly_summaries": [summary.to_dict() for summary in self.weekly_summaries],
        }


def _normalize_adjustment(item: PayrollAdjustment) -> PayrollAdjustment:
    return PayrollAdjustment(
        label=item.label,
        amount=round2(item.amount),
        is_deduction=bool(item.is_deduction),
    )


def summarize_weeks(
    work_logs: Iterable[Any], period_start: date, period_end: date
) -> List[WeeklyWorkSummary]:
    """Bucket the logs inside ``[period_start, period_end]`` into Monday-start weeks."""
    weeks: Dict[date, WeeklyWorkSummary] = {}

    for entry in work_logs:
        work_date = to_date(entry.work_date)
        if work_date < period_start or work_date > period_end:
            continue

        week_start = start_of_week(work_date)
        summary = weeks.get(week_start)
        if summary is None:
            summary = WeeklyWorkSummary(
                week_number=week_number(week_start),
                week_start=max(week_start, period_start),
                week_end=min(end_of_week(work_date), period_end),
            )
            weeks[week_start] = summary

        summary.entries.append(entry)
        status = _status_value(entry.status)

        if requires_work_hours(status) and isinstance(entry.work_hours, (int, float)):
            summary.total_work_hours += float(entry.work_hours)

        if status == "tardy":
            summary.contains_tardy = True
        elif status == "absence":
            summary.contains_absence = True
        elif status == "substitute":
            summary.contains_substitute = True

    return sorted(weeks.values(), key=lambda item: item.week_start)


def _statutory_deductions(
    gross_pay: float, contract_type: str, insurance_enrolled: bool
) -> List[DeductionDetail]:
    if contract_type == "employee" and insurance_enrolled:
        return [
            DeductionDetail("Health insurance (4.5%)", round2(gross_pay * HEALTH_INSURANCE_RATE)),
            DeductionDetail("National pension (3.545%)", round2(gross_pay * NATIONAL_PENSION_RATE)),
            DeductionDetail(
                "Long-term care insurance (12.81%)",
                round2(gross_pay * NATIONAL_PENSION_RATE * LONG_TERM_CARE_RATE),
            ),
            DeductionDetail(
                "Employment insurance (0.9%)", round2(gross_pay * EMPLOYMENT_INSURANCE_RATE)
            ),
        ]
    if contract_type == "freelancer":
        return [
            DeductionDetail(
                "Freelancer withholding (3.3%)",
                round2(gross_pay * FREELANCER_WITHHOLDING_RATE),
            )
        ]
    return []


def calculate_payroll(payload: PayrollCalculationInput) -> PayrollBreakdown:
    period_start = to_date(payload.period_start)
    period_end = to_date(payload.period_end)
    contract_type = _status_value(payload.contract_type)
    allow_weekly_holiday = contract_type != "freelancer"

    weekly_summaries = summarize_weeks(payload.work_logs, period_start, period_end)

    for summary in weekly_summaries:
        eligible = (
            allow_weekly_holiday
            and summary.total_work_hours >= WEEKLY_HOLIDAY_MIN_HOURS
            and not summary.contains_tardy
            and not summary.contains_absence
            and not summary.contains_substitute
        )
        summary.eligible_for_weekly_holiday_allowance = eligible
        summary.weekly_holiday_allowance_hours = (
            round2(summary.total_work_hours / WEEKLY_HOLIDAY_STANDARD_DAYS) if eligible else 0.0
        )

    total_work_hours = sum(summary.total_work_hours for summary in weekly_summaries)
    allowance_hours = (
        sum(summary.weekly_holiday_allowance_hours for summary in weekly_summaries)
        if allow_weekly_holiday
        else 0.0
    )

    hourly_rate = float(payload.hourly_rate or 0)
    hourly_total = round2(total_work_hours * hourly_rate)
    weekly_holiday_allowance = (
        round2(allowance_hours * hourly_rate) if allow_weekly_holiday else 0.0
    )
    base_salary_total = round2(payload.base_salary_amount or 0)

    adjustments = [_normalize_adjustment(item) for item in payload.adjustments or []]
    addition_total = sum(item.amount for item in adjustments if not item.is_deduction)
    deduction_adjustments = [item for item in adjustments if item.is_deduction]
    deduction_adjustment_total = sum(item.amount for item in deduction_adjustments)

    gross_pay = round2(hourly_total + weekly_holiday_allowance + base_salary_total + addition_total)

    deduction_details = _statutory_deductions(
        gross_pay, contract_type, bool(payload.insurance_enrolled)
    )
    statutory_total = sum(item.amount for item in deduction_details)
    deduction_details.extend(
        DeductionDetail(item.label, item.amount) for item in deduction_adjustments
    )

    deductions_total = round2(statutory_total + deduction_adjustment_total)
    net_pay = round2(gross_pay - deductions_total)

    return PayrollBreakdown(
        total_work_hours=round2(total_work_hours),
        weekly_holiday_allowance_hours=round2(allowance_hours),
        hourly_total=hourly_total,
        weekly_holiday_allowance=weekly_holiday_allowance,
        base_salary_total=base_salary_total,
        adjustments=adjustments,
        gross_pay=gross_pay,
        deduction_details=deduction_details,
        deductions_total=deductions_total,
        net_pay=net_pay,
        weekly_summaries=weekly_summaries,
    )
