from fastapi import APIRouter
from academy.api.v1.members import router as members_router
from academy.api.v1.classes import router as classes_router
from academy.api.v1.enrollment import router as enrollment_router
from academy.api.v1.workbooks import router as workbooks_router
from academy.api.v1.assignments import router as assignments_router
from academy.api.v1.evaluation import router as evaluation_router
from academy.api.v1.submissions import router as submissions_router
from academy.api.v1.absences import router as absences_router
from academy.api.v1.work_logs import router as work_logs_router
from academy.api.v1.payroll import router as payroll_router
from academy.api.v1.learning_journal import router as learning_journal_router
from academy.api.v1.equipment import router as equipment_router
from academy.api.v1.notices import router as notices_router
from academy.api.v1.culture_picks import router as culture_picks_router
from academy.api.v1.photo_diary import router as photo_diary_router
from academy.api.v1.atelier import router as atelier_router
from academy.api.v1.counseling import router as counseling_router
from academy.api.v1.timetables import router as timetables_router
from academy.api.v1.class_materials import router as class_materials_router
from academy.api.v1.admission_materials import router as admission_materials_router
from academy.api.v1.lectures import router as lectures_router
from academy.api.v1.film_notes import router as film_notes_router

__all__ = [
    "members_router",
    "classes_router",
    "enrollment_router",
    "workbooks_router",
    "assignments_router",
    "evaluation_router",
    "submissions_router",
    "absences_router",
    "work_logs_router",
    "payroll_router",
    "learning_journal_router",
    "equipment_router",
    "notices_router",
    "culture_picks_router",
    "photo_diary_router",
    "atelier_router",
    "counseling_router",
    "timetables_router",
    "class_materials_router",
    "admission_materials_router",
    "lectures_router",
    "film_notes_router",
]
