from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.models.film_notes import FilmNote, FilmNoteHistory, FilmNoteSource
from academy.models.lms import StudentTask, TaskStatus, WorkbookType
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.film_notes import (
    FilmHistoryEntryResponse,
    FilmHistoryResponse,
    FilmNoteResponse,
    FilmNoteSave,
)
from academy.services.film_notes import (
    coerce_film_entry,
    empty_film_entry,
    film_entry_has_value,
    film_entry_is_complete,
    film_note_count,
    record_film_progress,
)

logger = logging.getLogger(__name__)
router = APIRouter()

student_only = deps.RoleChecker(["student"])


def _get_own_note(db: Session, note_id: uuid.UUID, current_user: Profile):
    return db.query(FilmNote).filter(
        FilmNote.id == note_id,
        FilmNote.student_id == current_user.id,
    ).first()


def _load_film_task(db: Session, task_id: uuid.UUID, current_user: Profile):
    """Return (task, workbook, workbook_item) or an error message"""
    task = db.query(StudentTask).filter(
        StudentTask.id == task_id,
        StudentTask.student_id == current_user.id,
    ).first()
    if not task:
        return None, "Task not found"
    workbook = task.assignment.workbook if task.assignment else None
    if not workbook or workbook.type != WorkbookType.film:
        return None, "This task is not a film note assignment"
    if not task.items:
        return None, "This task has no workbook item"
    return (task, workbook, task.items[0].item), None


def _history_rows(db: Session, task: StudentTask, item_id: uuid.UUID):
    rows = db.query(FilmNoteHistory).filter(
        FilmNoteHistory.student_task_id == task.id,
        FilmNoteHistory.workbook_item_id == item_id,
    ).all()
    return {row.note_index: row for row in rows}


# ==================== PERSONAL NOTES ====================


@router.get("", response_model=APIResponse)
def list_notes(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    notes = (
        db.query(FilmNote)
        .filter(FilmNote.student_id == current_user.id)
        .order_by(FilmNote.created_at.desc())
        .all()
    )
    return {
        "success": True,
        "message": "Film notes retrieved successfully",
        "data": [FilmNoteResponse.model_validate(n) for n in notes],
    }


@router.post("", response_model=APIResponse)
def create_note(
    note_in: FilmNoteSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    entry = note_in.content.model_dump()
    if not film_entry_has_value(entry):
        return {"success": False, "message": "Write something before saving the note", "data": None}

    note = FilmNote(
        student_id=current_user.id,
        source=FilmNoteSource.personal,
        content=entry,
        completed=film_entry_is_complete(entry),
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return {"success": True, "message": "Film note saved", "data": FilmNoteResponse.model_validate(note)}


@router.patch("/{note_id}", response_model=APIResponse)
def update_note(
    note_id: uuid.UUID,
    note_in: FilmNoteSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    note = _get_own_note(db, note_id, current_user)
    if not note:
        return {"success": False, "message": "Film note not found", "data": None}

    entry = note_in.content.model_dump()
    if not film_entry_has_value(entry):
        return {"success": False, "message": "Write something before saving the note", "data": None}

    note.content = entry
    note.completed = film_entry_is_complete(entry)
    db.commit()
    db.refresh(note)
    return {"success": True, "message": "Film note updated", "data": FilmNoteResponse.model_validate(note)}


@router.delete("/{note_id}", response_model=APIResponse)
def delete_note(
    note_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    note = _get_own_note(db, note_id, current_user)
    if not note:
        return {"success": False, "message": "Film note not found", "data": None}

    db.delete(note)
    db.commit()
    return {"success": True, "message": "Film note deleted", "data": None}


# ==================== ASSIGNMENT HISTORY ====================


@router.get("/tasks/{task_id}/history", response_model=APIResponse)
def get_task_history(
    task_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    """Every numbered note slot of a film task, empty where nothing is saved yet"""
    loaded, error = _load_film_task(db, task_id, current_user)
    if error:
        return {"success": False, "message": error, "data": None}
    task, workbook, item = loaded

    note_count = film_note_count(workbook, task)
    rows = _history_rows(db, task, item.id)
    entries = []
    for index in range(note_count):
        row = rows.get(index)
        if row:
            entries.append(
                FilmHistoryEntryResponse(
                    note_index=index,
                    content=coerce_film_entry(row.content),
                    completed=bool(row.completed),
                    created_at=row.created_at,
                    updated_at=row.updated_at,
                )
            )
        else:
            entries.append(
                FilmHistoryEntryResponse(note_index=index, content=empty_film_entry(), completed=False)
            )

    history = FilmHistoryResponse(
        task_id=task.id,
        status=task.status.value,
        workbook_id=workbook.id,
        workbook_title=workbook.title,
        prompt=item.prompt,
        note_count=note_count,
        due_at=task.assignment.due_at,
        entries=entries,
        completed_count=sum(1 for e in entries if e.completed),
    )
    return {"success": True, "message": "Film note history retrieved successfully", "data": history}


@router.put("/tasks/{task_id}/history/{note_index}", response_model=APIResponse)
def save_task_history_entry(
    task_id: uuid.UUID,
    note_index: int,
    note_in: FilmNoteSave,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(student_only),
):
    loaded, error = _load_film_task(db, task_id, current_user)
    if error:
        return {"success": False, "message": error, "data": None}
    task, workbook, item = loaded
    if task.status == TaskStatus.canceled:
        return {"success": False, "message": "This task has been canceled", "data": None}

    note_count = film_note_count(workbook, task)
    if note_index < 0 or note_index >= note_count:
        return {"success": False, "message": "That note number is out of range", "data": None}

    entry = note_in.content.model_dump()
    completed = film_entry_is_complete(entry)
    rows = _history_rows(db, task, item.id)
    row = rows.get(note_index)
    if row:
        row.content = entry
        row.completed = completed
    else:
        row = FilmNoteHistory(
            student_task_id=task.id,
            workbook_item_id=item.id,
            note_index=note_index,
            content=entry,
            completed=completed,
        )
        db.add(row)
        rows[note_index] = row

    completed_count = sum(1 for r in rows.values() if r.completed and r.note_index < note_count)
    record_film_progress(task, note_count, completed_count)
    db.commit()
    logger.info(
        "[film-notes] task %s note %d saved (%d/%d complete)",
        task.id, note_index, completed_count, note_count,
    )
    return {
        "success": True,
        "message": "Film note saved",
        "data": {
            "note_index": note_index,
            "completed": completed,
            "completed_count": completed_count,
            "note_count": note_count,
            "task_status": task.status.value,
        },
    }
