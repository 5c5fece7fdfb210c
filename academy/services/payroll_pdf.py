"""Monthly payroll summary rendered as a PDF table."""
import io
from typing import List, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from academy.models.payroll import ContractType, PayrollItemKind, TeacherPayrollRun

INSURANCE_COLUMNS = [
    ("Health", "Health insurance"),
    ("Pension", "National pension"),
    ("Long-term care", "Long-term care insurance"),
    ("Employment", "Employment insurance"),
]
WITHHOLDING_COLUMN = ("Withholding 3.3%", "Freelancer withholding")


def _amount(value: float) -> str:
    return f"{int(round(value or 0)):,}"


def _hours(value: float) -> str:
    value = round(float(value or 0), 1)
    return f"{int(value)}" if value.is_integer() else f"{value:.1f}"


def _deduction(run: TeacherPayrollRun, label_prefix: str) -> float:
    return sum(
        item.amount or 0
        for item in run.items
        if item.item_kind == PayrollItemKind.deduction and item.label.startswith(label_prefix)
    )


def _teacher_label(run: TeacherPayrollRun) -> str:
    name = run.teacher.display_name if run.teacher else "Unknown"
    if run.insurance_enrolled:
        return f"{name} [insured]"
    if run.contract_type == ContractType.freelancer:
        return f"{name} [3.3%]"
    return name


def build_payroll_summary_pdf(month_label: str, runs: Sequence[TeacherPayrollRun]) -> bytes:
    """One row per teacher with pay and deductions, plus a totals row.

    Insurance columns only appear when someone is insured and the
    withholding column only when someone is a freelancer.
    """
    show_insurance = any(run.insurance_enrolled for run in runs)
    show_withholding = any(run.contract_type == ContractType.freelancer for run in runs)

    deduction_columns = []
    if show_insurance:
        deduction_columns.extend(INSURANCE_COLUMNS)
    if show_withholding:
        deduction_columns.append(WITHHOLDING_COLUMN)

    header = ["Teacher", "Hours", "Base salary", "Gross"]
    header.extend(title for title, _ in deduction_columns)
    header.extend(["Deductions", "Net pay"])
    table_data: List[List[str]] = [header]

    totals = [0.0] * (4 + len(deduction_columns))
    for run in runs:
        hours = float((run.meta or {}).get("total_work_hours") or 0)
        deductions = [_deduction(run, prefix) for _, prefix in deduction_columns]
        values = [
            run.base_salary_total or 0,
            run.gross_pay or 0,
            *deductions,
            run.deductions_total or 0,
            run.net_pay or 0,
        ]
        totals[0] += hours
        for index, value in enumerate(values, start=1):
            totals[index] += value
        table_data.append([_teacher_label(run), _hours(hours)] + [_amount(v) for v in values])

    table_data.append(["Total", _hours(totals[0])] + [_amount(v) for v in totals[1:]])

    buffer = io.BytesIO()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4), leftMargin=28, rightMargin=28, topMargin=28, bottomMargin=28
    )
    elements = [
        Paragraph(f"Payroll summary {month_label}", styles["Title"]),
        Paragraph(f"{len(runs)} teachers", styles["Normal"]),
        Spacer(1, 12),
    ]
    table = Table(table_data, hAlign="LEFT", repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("BACKGROUND", (0, -1), (-1, -1), colors.whitesmoke),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(table)
    doc.build(elements)
    pdf_value = buffer.getvalue()
    buffer.close()
    return pdf_value
