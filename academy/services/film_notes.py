"""Film note helpers shared by personal notes and film workbook history."""
from typing import Any, Dict, Optional

from academy.models.lms import StudentTask, TaskStatus, Workbook

FILM_ENTRY_FIELDS = (
    "title",
    "director",
    "release_year",
    "genre",
    "country",
    "summary",
    "favorite_scene",
)


def empty_film_entry() -> Dict[str, str]:
    return {key: "" for key in FILM_ENTRY_FIELDS}


def sanitize_film_value(value: Optional[str]) -> str:
    if not value:
        return ""
    return value.replace("\r", "").replace("\u00a0", " ").strip()


def coerce_film_entry(raw: Any) -> Dict[str, str]:
    """Read a stored entry, ignoring unknown keys and non-string values"""
    entry = empty_film_entry()
    if not isinstance(raw, dict):
        return entry
    for key in FILM_ENTRY_FIELDS:
        value = raw.get(key)
        if isinstance(value, str):
            entry[key] = value
    return entry


def film_entry_has_value(entry: Dict[str, str]) -> bool:
    return any(entry.get(key) for key in FILM_ENTRY_FIELDS)


def film_entry_is_complete(entry: Dict[str, str]) -> bool:
    return all(entry.get(key) for key in FILM_ENTRY_FIELDS)


def film_note_count(workbook: Workbook, task: Optional[StudentTask] = None) -> int:
    """Number of notes a film workbook asks for.

    Looks at the workbook config first, then at the progress the task has
    recorded so far, and falls back to one note.
    """
    film_config = (workbook.config or {}).get("film") or {}
    for key in ("note_count", "noteCount"):
        value = film_config.get(key)
        if isinstance(value, int) and value > 0:
            return value

    if task is not None:
        total = ((task.progress_meta or {}).get("film") or {}).get("total")
        if isinstance(total, int) and total > 0:
            return total
    return 1


def record_film_progress(task: StudentTask, total: int, completed: int) -> None:
    meta = dict(task.progress_meta or {})
    meta["film"] = {"total": total, "completed": completed}
    # reassign so the JSON column is flagged dirty
    task.progress_meta = meta
    if task.status in (TaskStatus.pending, TaskStatus.not_started):
        task.status = TaskStatus.in_progress
