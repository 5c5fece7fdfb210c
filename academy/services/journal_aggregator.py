"""Weekly content of a learning journal entry.

A period spans four weeks. For every week and subject we collect the class
template materials and the student's assignments due in that week, then
derive a completion rate over all bucketed tasks.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from academy.utils.dates import WeeklyRange, as_utc, resolve_weekly_ranges, to_date

SUBJECTS = ["directing", "screenwriting", "film_research", "integrated_theory", "karts"]

STATUS_MAP = {
    "completed": "completed",
    "in_progress": "in_progress",
    "not_started": "not_started",
    "pending": "pending",
}


@dataclass
class TaskSnapshot:
    task_id: Any
    title: str
    subject: str
    status: str
    due_at: Optional[datetime] = None
    assignment_created_at: Optional[datetime] = None
    status_override: Optional[str] = None
    submitted_late: bool = False
    completion_at: Optional[datetime] = None
    score: Optional[str] = None
    note: Optional[str] = None


@dataclass
class WeekTemplate:
    week_index: int
    subject: str
    material_ids: List[str]
    material_titles: List[str]
    material_notes: Optional[str] = None


def _value(raw: Any) -> Optional[str]:
    return getattr(raw, "value", raw)


def resolve_task_status(task: TaskSnapshot) -> Optional[str]:
    """Effective status shown in the journal, ``None`` for canceled tasks."""
    effective = _value(task.status_override) or _value(task.status)
    if effective == "canceled":
        return None
    return STATUS_MAP.get(effective, "pending")


def is_submitted_late(task: TaskSnapshot) -> bool:
    if task.submitted_late:
        return True
    completion = as_utc(task.completion_at)
    due = as_utc(task.due_at)
    return bool(completion and due and completion > due)


def _anchor_date(task: TaskSnapshot) -> Optional[date]:
    anchor = task.due_at or task.assignment_created_at
    return to_date(anchor) if anchor else None


def _find_week(weeks: List[WeeklyRange], day: date) -> Optional[WeeklyRange]:
    for week in weeks:
        if week.contains(day):
            return week
    return None


def _empty_subject_bucket() -> Dict[str, Any]:
    return {"materials": [], "material_notes": None, "assignments": []}


def build_weekly_journal(
    period_start: date,
    templates: Iterable[WeekTemplate],
    tasks: Iterable[TaskSnapshot],
) -> Dict[str, Any]:
    weeks = resolve_weekly_ranges(period_start)
    buckets: Dict[int, Dict[str, Dict[str, Any]]] = {
        week.week_index: {subject: _empty_subject_bucket() for subject in SUBJECTS}
        for week in weeks
    }

    for template in templates:
        subject = _value(template.subject)
        week_bucket = buckets.get(template.week_index)
        if week_bucket is None or subject not in week_bucket:
            continue
        ids = list(template.material_ids or [])
        titles = list(template.material_titles or [])
        week_bucket[subject]["materials"] = [
            {"id": material_id, "title": titles[index] if index < len(titles) else None}
            for index, material_id in enumerate(ids)
        ]
        week_bucket[subject]["material_notes"] = template.material_notes

    summary = {subject: {"total": 0, "completed": 0} for subject in SUBJECTS}
    total = 0
    completed = 0

    for task in tasks:
        status = resolve_task_status(task)
        subject = _value(task.subject)
        anchor = _anchor_date(task)
        if status is None or subject not in summary or anchor is None:
            continue

        week = _find_week(weeks, anchor)
        if week is None:
            continue

        due = as_utc(task.due_at)
        buckets[week.week_index][subject]["assignments"].append(
            {
                "task_id": str(task.task_id),
                "title": task.title,
                "status": status,
                "submitted_late": is_submitted_late(task),
                "due_at": due.isoformat() if due else None,
                "score": task.score,
                "note": task.note,
            }
        )
        summary[subject]["total"] += 1
        total += 1
        if status == "completed":
            summary[subject]["completed"] += 1
            completed += 1

    completion_rate = round(completed / total * 100, 2) if total else None

    return {
        "weeks": [
            {
                "week_index": week.week_index,
                "start_date": week.start_date.isoformat(),
                "end_date": week.end_date.isoformat(),
                "subjects": buckets[week.week_index],
            }
            for week in weeks
        ],
        "summary": {"subjects": summary, "total_tasks": total, "completed_tasks": completed},
        "completion_rate": completion_rate,
    }
