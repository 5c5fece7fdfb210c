from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.models.lms import (
    StudentTask,
    StudentTaskItem,
    TaskStatus,
    TaskSubmission,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.lms import (
    StudentTaskResponse,
    TaskSubmissionResponse,
    TextSubmissionCreate,
)
from academy.services.student_tasks import refresh_task_status
from academy.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/tasks", response_model=APIResponse)
def list_my_tasks(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["student"])),
):
    """Get the tasks assigned to the current student"""
    tasks = (
        db.query(StudentTask)
        .filter(StudentTask.student_id == current_user.id)
        .order_by(StudentTask.created_at.desc())
        .all()
    )

    data = []
    for task in tasks:
        assignment = task.assignment
        data.append({
            "task": StudentTaskResponse.model_validate(task),
            "workbook_id": assignment.workbook_id,
            "workbook_title": assignment.workbook.title if assignment.workbook else None,
            "subject": assignment.workbook.subject.value if assignment.workbook else None,
            "due_at": assignment.due_at,
        })

    return {"success": True, "message": "Tasks retrieved successfully", "data": data}


@router.post("/tasks/{task_id}/items/{item_id}", response_model=APIResponse)
def submit_text_answer(
    task_id: uuid.UUID,
    item_id: uuid.UUID,
    submission_in: TextSubmissionCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["student"])),
):
    """Save (or replace) the student's text answer for one workbook item"""
    task = db.query(StudentTask).filter(StudentTask.id == task_id).first()
    if not task or task.student_id != current_user.id:
        return {"success": False, "message": "Task not found", "data": None}
    if task.status == TaskStatus.canceled:
        return {"success": False, "message": "This task has been canceled", "data": None}

    task_item = db.query(StudentTaskItem).filter(
        StudentTaskItem.student_task_id == task.id,
        StudentTaskItem.item_id == item_id,
    ).first()
    if not task_item:
        return {"success": False, "message": "Item is not part of this task", "data": None}

    content = submission_in.content.strip()
    if not content:
        return {"success": False, "message": "Answer cannot be empty", "data": None}

    submission = db.query(TaskSubmission).filter(
        TaskSubmission.student_task_id == task.id,
        TaskSubmission.item_id == item_id,
    ).first()
    if submission:
        submission.content = content
        # a new answer needs a fresh evaluation
        submission.score = None
        submission.feedback = None
        submission.evaluated_by = None
        submission.evaluated_at = None
        task_item.completed_at = None
        task_item.score = None
        task_item.last_result = None
        refresh_task_status(task)
    else:
        submission = TaskSubmission(
            student_task_id=task.id,
            item_id=item_id,
            submission_type="text",
            content=content,
        )
        db.add(submission)

    now = utcnow()
    if task.status in (TaskStatus.pending, TaskStatus.not_started):
        task.status = TaskStatus.in_progress

    due_at = as_utc(task.assignment.due_at)
    if due_at and now > due_at:
        task.submitted_late = True

    db.commit()
    db.refresh(submission)
    logger.info("[submissions] task %s item %s saved by %s", task.id, item_id, current_user.id)

    return {
        "success": True,
        "message": "Answer submitted",
        "data": TaskSubmissionResponse.model_validate(submission),
    }
