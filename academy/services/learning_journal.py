"""Database side of the learning journal: snapshots, regeneration and status changes."""
from datetime import datetime
from typing import List, Optional
import logging
import secrets

from sqlalchemy.orm import Session

from academy.core.exceptions import PermissionDenied, ValidationError
from academy.models.learning_journal import (
    ClassLearningJournalWeek,
    JournalEntryStatus,
    LearningJournalEntry,
    LearningJournalEntryLog,
)
from academy.models.lms import Assignment, StudentTask, TaskSubmission
from academy.models.profiles import MANAGER_ROLES, Profile
from academy.services.journal_aggregator import (
    TaskSnapshot,
    WeekTemplate,
    build_weekly_journal,
)
from academy.utils.dates import utcnow

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    JournalEntryStatus.draft: {JournalEntryStatus.submitted, JournalEntryStatus.published},
    JournalEntryStatus.submitted: {JournalEntryStatus.draft, JournalEntryStatus.published},
    JournalEntryStatus.published: {JournalEntryStatus.submitted, JournalEntryStatus.archived},
    JournalEntryStatus.archived: {JournalEntryStatus.published},
}


def _latest_evaluation(task: StudentTask) -> Optional[TaskSubmission]:
    evaluated = [s for s in task.submissions if s.evaluated_at is not None]
    if not evaluated:
        return None
    return max(evaluated, key=lambda s: s.evaluated_at)


def collect_task_snapshots(db: Session, student_id) -> List[TaskSnapshot]:
    tasks = (
        db.query(StudentTask)
        .join(Assignment, StudentTask.assignment_id == Assignment.id)
        .filter(StudentTask.student_id == student_id)
        .all()
    )

    snapshots = []
    for task in tasks:
        assignment = task.assignment
        workbook = assignment.workbook
        if workbook is None:
            continue
        evaluation = _latest_evaluation(task)
        snapshots.append(
            TaskSnapshot(
                task_id=task.id,
                title=workbook.title,
                subject=workbook.subject.value,
                status=task.status.value,
                due_at=assignment.due_at,
                assignment_created_at=assignment.created_at,
                status_override=task.status_override.value if task.status_override else None,
                submitted_late=bool(task.submitted_late),
                completion_at=task.completion_at,
                score=evaluation.score.value if evaluation and evaluation.score else None,
                note=evaluation.feedback if evaluation else None,
            )
        )
    return snapshots


def collect_week_templates(db: Session, entry: LearningJournalEntry) -> List[WeekTemplate]:
    period = entry.period
    rows = (
        db.query(ClassLearningJournalWeek)
        .filter(
            ClassLearningJournalWeek.period_id == period.id,
            ClassLearningJournalWeek.class_id == period.class_id,
        )
        .all()
    )
    return [
        WeekTemplate(
            week_index=row.week_index,
            subject=row.subject.value,
            material_ids=list(row.material_ids or []),
            material_titles=list(row.material_titles or []),
            material_notes=row.material_notes,
        )
        for row in rows
    ]


def regenerate_entry(
    db: Session, entry: LearningJournalEntry, now: Optional[datetime] = None
) -> LearningJournalEntry:
    """Rebuild ``weekly``, ``summary`` and ``completion_rate`` (caller commits)."""
    journal = build_weekly_journal(
        entry.period.start_date,
        collect_week_templates(db, entry),
        collect_task_snapshots(db, entry.student_id),
    )
    entry.weekly = {"weeks": journal["weeks"]}
    entry.summary = journal["summary"]
    entry.completion_rate = journal["completion_rate"]
    entry.last_generated_at = now or utcnow()
    return entry


def ensure_share_token(entry: LearningJournalEntry) -> str:
    if not entry.share_token:
        entry.share_token = secrets.token_urlsafe(24)
    return entry.share_token


def change_entry_status(
    entry: LearningJournalEntry,
    next_status: JournalEntryStatus,
    actor: Profile,
    note: Optional[str] = None,
) -> LearningJournalEntryLog:
    """Apply a status transition and record it (caller commits)."""
    previous = entry.status
    if previous == next_status:
        raise ValidationError(f"Entry is already {next_status.value}")
    if next_status not in ALLOWED_TRANSITIONS.get(previous, set()):
        raise ValidationError(f"Cannot move an entry from {previous.value} to {next_status.value}")
    if next_status == JournalEntryStatus.published and actor.role.value not in MANAGER_ROLES:
        raise PermissionDenied("Only managers can publish learning journals")

    now = utcnow()
    entry.status = next_status
    if next_status == JournalEntryStatus.submitted:
        entry.submitted_at = now
    elif next_status == JournalEntryStatus.published:
        entry.published_at = now
        ensure_share_token(entry)
    elif next_status == JournalEntryStatus.archived:
        entry.archived_at = now

    log = LearningJournalEntryLog(
        previous_status=previous,
        next_status=next_status,
        changed_by=actor.id,
        note=note,
    )
    entry.logs.append(log)
    logger.info(
        "[learning-journal] entry %s %s -> %s by %s",
        entry.id,
        previous.value if previous else None,
        next_status.value,
        actor.id,
    )
    return log
