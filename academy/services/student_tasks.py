from typing import Iterable, Optional
from datetime import datetime

from academy.models.lms import StudentTask, StudentTaskItem, TaskStatus
from academy.utils.dates import utcnow


def derive_task_status(items: Iterable[StudentTaskItem]) -> TaskStatus:
    items = list(items)
    completed = [item for item in items if item.completed_at is not None]
    if items and len(completed) == len(items):
        return TaskStatus.completed
    if completed:
        return TaskStatus.in_progress
    return TaskStatus.pending


def refresh_task_status(task: StudentTask, now: Optional[datetime] = None) -> TaskStatus:
    """Recompute ``task.status`` from its items, stamping completion time once."""
    status = derive_task_status(task.items)
    task.status = status
    if status == TaskStatus.completed:
        if task.completion_at is None:
            task.completion_at = now or utcnow()
    else:
        task.completion_at = None
    return status
