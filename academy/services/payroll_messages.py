"""Plain-text payroll statements sent to teachers for confirmation."""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from academy.services.payroll_engine import (
    FREELANCER_WITHHOLDING_RATE,
    DeductionDetail,
    PayrollAdjustment,
    PayrollBreakdown,
    round2,
)

ALLOWANCE_LABEL = "Weekly holiday allowance"
NET_PAY_LABEL = "Expected net pay"


@dataclass
class PayrollMessageContext:
    teacher_name: Optional[str]
    period_label: str
    contract_type: str
    total_work_hours: float
    hourly_total: float
    weekly_holiday_allowance: float
    base_salary_total: float
    net_pay: float
    adjustments: List[PayrollAdjustment] = field(default_factory=list)
    deductions: List[DeductionDetail] = field(default_factory=list)


def format_currency(value: float) -> str:
    won = int(Decimal(repr(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if won < 0 else ""
    return f"{sign}₩{abs(won):,}"


def format_hours(value: float) -> str:
    rounded = float(Decimal(repr(float(value))).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    if rounded.is_integer():
        return f"{int(rounded)} hours"
    return f"{rounded:.1f} hours"


def create_message_context(
    teacher_name: Optional[str],
    period_label: str,
    contract_type: str,
    breakdown: PayrollBreakdown,
) -> PayrollMessageContext:
    return PayrollMessageContext(
        teacher_name=teacher_name,
        period_label=period_label,
        contract_type=contract_type,
        total_work_hours=breakdown.total_work_hours,
        hourly_total=breakdown.hourly_total,
        weekly_holiday_allowance=breakdown.weekly_holiday_allowance,
        base_salary_total=breakdown.base_salary_total,
        net_pay=breakdown.net_pay,
        adjustments=list(breakdown.adjustments),
        deductions=list(breakdown.deduction_details),
    )


def build_payroll_message(context: PayrollMessageContext) -> str:
    teacher_label = context.teacher_name or "Teacher"
    lines: List[str] = [
        f"{teacher_label}, here is your payroll statement for {context.period_label}.",
        "Please review the details below and confirm if everything is correct.",
        "",
        f"- Work hours: {format_hours(context.total_work_hours)}",
        f"- Hourly pay: {format_currency(context.hourly_total)}",
    ]

    if context.contract_type != "freelancer" and context.weekly_holiday_allowance > 0:
        lines.append(f"- {ALLOWANCE_LABEL}: {format_currency(context.weekly_holiday_allowance)}")
    if context.base_salary_total > 0:
        lines.append(f"- Base salary: {format_currency(context.base_salary_total)}")

    for addition in context.adjustments:
        if not addition.is_deduction:
            lines.append(f"- Addition ({addition.label}): {format_currency(addition.amount)}")

    # context.deductions already ends with the manual deduction adjustments
    if context.deductions:
        lines.append("")
        lines.append("Deductions")
        for deduction in context.deductions:
            lines.append(f"- {deduction.label}: {format_currency(deduction.amount)}")

    lines.append("")
    lines.append(f"{NET_PAY_LABEL}: {format_currency(context.net_pay)}")
    lines.append("Once you confirm, the statement is forwarded to the principal.")

    return "\n".join(lines)


def _adjust_freelancer_net_pay(net_pay: float, weekly_holiday_allowance: float) -> float:
    adjusted = net_pay - weekly_holiday_allowance * (1 - FREELANCER_WITHHOLDING_RATE)
    if adjusted < 0:
        return 0.0
    return round2(adjusted)


def sanitize_payroll_message(
    message: Optional[str],
    contract_type: str,
    net_pay: Optional[float] = None,
    weekly_holiday_allowance: Optional[float] = None,
) -> Optional[str]:
    """Strip allowance lines from statements saved before a teacher became a freelancer."""
    if not message or contract_type != "freelancer":
        return message

    lines = [line for line in message.splitlines() if ALLOWANCE_LABEL not in line]

    if net_pay is not None and weekly_holiday_allowance and weekly_holiday_allowance > 0:
        adjusted = _adjust_freelancer_net_pay(net_pay, weekly_holiday_allowance)
        for index, line in enumerate(lines):
            if line.startswith(NET_PAY_LABEL):
                lines[index] = f"{NET_PAY_LABEL}: {format_currency(adjusted)}"
                break

    return "\n".join(lines)
