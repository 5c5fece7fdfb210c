from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.v1.assignments import can_manage_assignment
from academy.api.access import get_student_class_ids, get_teacher_class_ids, is_manager
from academy.models.lms import (
    EvaluationScore,
    StudentTask,
    StudentTaskItem,
    TaskStatus,
    TaskSubmission,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.lms import (
    EvaluationRequest,
    ReviewStateUpdate,
    StudentTaskResponse,
    TaskSubmissionResponse,
)
from academy.services.student_tasks import refresh_task_status
from academy.utils.dates import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])


def _can_review_task(db: Session, profile: Profile, task: StudentTask) -> bool:
    """Assigning teacher, managers, or any teacher of the student's class"""
    if can_manage_assignment(profile, task.assignment):
        return True
    if is_manager(profile):
        return True
    shared = get_teacher_class_ids(db, profile.id) & get_student_class_ids(db, task.student_id)
    return bool(shared)


def _get_task(db: Session, task_id: uuid.UUID):
    return db.query(StudentTask).filter(StudentTask.id == task_id).first()


@router.post("/submissions/{submission_id}", response_model=APIResponse)
def evaluate_submission(
    submission_id: uuid.UUID,
    evaluation_in: EvaluationRequest,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Grade a submission pass / nonpass and refresh the task status"""
    submission = db.query(TaskSubmission).filter(TaskSubmission.id == submission_id).first()
    if not submission:
        return {"success": False, "message": "Submission not found", "data": None}

    task = submission.task
    if not _can_review_task(db, current_user, task):
        return {"success": False, "message": "You cannot evaluate this submission", "data": None}
    if task.status == TaskStatus.canceled:
        return {"success": False, "message": "Reopen the task before evaluating it", "data": None}

    now = utcnow()
    submission.score = evaluation_in.score
    submission.feedback = (evaluation_in.feedback or "").strip() or None
    submission.evaluated_by = current_user.id
    submission.evaluated_at = now

    if submission.item_id:
        task_item = db.query(StudentTaskItem).filter(
            StudentTaskItem.student_task_id == task.id,
            StudentTaskItem.item_id == submission.item_id,
        ).first()
        if task_item:
            task_item.score = evaluation_in.score.value
            task_item.last_result = evaluation_in.score.value
            task_item.note = submission.feedback
            if evaluation_in.score == EvaluationScore.pass_:
                task_item.completed_at = now
            else:
                task_item.completed_at = None

    db.flush()
    status = refresh_task_status(task, now)
    db.commit()
    db.refresh(submission)

    return {
        "success": True,
        "message": "Submission evaluated",
        "data": {
            "submission": TaskSubmissionResponse.model_validate(submission),
            "task_status": status.value,
        },
    }


@router.post("/tasks/{task_id}/toggle", response_model=APIResponse)
def toggle_task_cancel(
    task_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Cancel an active task or reopen a canceled one"""
    task = _get_task(db, task_id)
    if not task:
        return {"success": False, "message": "Task not found", "data": None}
    if not _can_review_task(db, current_user, task):
        return {"success": False, "message": "You cannot modify this task", "data": None}

    if task.status == TaskStatus.canceled:
        refresh_task_status(task)
        message = "Task reopened"
    else:
        task.status = TaskStatus.canceled
        task.completion_at = None
        message = "Task canceled"

    db.commit()
    db.refresh(task)
    return {"success": True, "message": message, "data": StudentTaskResponse.model_validate(task)}


@router.patch("/tasks/{task_id}/review", response_model=APIResponse)
def update_review_state(
    task_id: uuid.UUID,
    review_in: ReviewStateUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    task = _get_task(db, task_id)
    if not task:
        return {"success": False, "message": "Task not found", "data": None}
    if not _can_review_task(db, current_user, task):
        return {"success": False, "message": "You cannot modify this task", "data": None}

    changes = review_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    if "status_override" in changes:
        task.status_override = changes["status_override"]
    if "submitted_late" in changes and changes["submitted_late"] is not None:
        task.submitted_late = changes["submitted_late"]

    db.commit()
    db.refresh(task)
    return {
        "success": True,
        "message": "Review state updated",
        "data": StudentTaskResponse.model_validate(task),
    }


@router.delete("/tasks/{task_id}", response_model=APIResponse)
def delete_student_task(
    task_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    task = _get_task(db, task_id)
    if not task:
        return {"success": False, "message": "Task not found", "data": None}
    if not can_manage_assignment(current_user, task.assignment):
        return {"success": False, "message": "You cannot delete this task", "data": None}

    db.delete(task)
    db.commit()
    logger.info("[evaluation] task %s deleted by %s", task_id, current_user.id)
    return {"success": True, "message": "Task deleted", "data": None}
