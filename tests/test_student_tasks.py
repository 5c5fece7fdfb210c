from datetime import datetime, timezone

from academy.models.lms import StudentTask, StudentTaskItem, TaskStatus
from academy.services.student_tasks import derive_task_status, refresh_task_status

DONE = datetime(2025, 3, 5, 9, tzinfo=timezone.utc)


def _task(*completed):
    return StudentTask(items=[StudentTaskItem(completed_at=value) for value in completed])


def test_no_items_is_pending():
    assert derive_task_status([]) == TaskStatus.pending


def test_partial_completion_is_in_progress():
    assert derive_task_status(_task(DONE, None).items) == TaskStatus.in_progress


def test_refresh_stamps_completion_once():
    task = _task(DONE, DONE)
    now = datetime(2025, 3, 6, tzinfo=timezone.utc)

    assert refresh_task_status(task, now=now) == TaskStatus.completed
    assert task.completion_at == now

    refresh_task_status(task, now=datetime(2025, 3, 7, tzinfo=timezone.utc))
    assert task.completion_at == now


def test_refresh_clears_completion_when_an_item_reopens():
    task = _task(DONE, DONE)
    refresh_task_status(task)
    task.items[0].completed_at = None

    assert refresh_task_status(task) == TaskStatus.in_progress
    assert task.completion_at is None
