import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from academy.core.config import settings
from academy.core.exceptions import DomainError
from academy.core.logging_config import setup_logging
from academy.api.v1 import (
    members_router,
    classes_router,
    enrollment_router,
    workbooks_router,
    assignments_router,
    evaluation_router,
    submissions_router,
    absences_router,
    work_logs_router,
    payroll_router,
    learning_journal_router,
    equipment_router,
    notices_router,
    culture_picks_router,
    photo_diary_router,
    atelier_router,
    counseling_router,
    timetables_router,
    class_materials_router,
    admission_materials_router,
    lectures_router,
    film_notes_router,
)

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600,
)

# Include Routers
app.include_router(members_router, prefix=f"{settings.API_V1_STR}/members", tags=["Members"])
app.include_router(classes_router, prefix=f"{settings.API_V1_STR}/classes", tags=["Classes"])
app.include_router(
    enrollment_router, prefix=f"{settings.API_V1_STR}/enrollment", tags=["Enrollment"]
)
app.include_router(
    workbooks_router, prefix=f"{settings.API_V1_STR}/workbooks", tags=["Workbooks"]
)
app.include_router(
    assignments_router, prefix=f"{settings.API_V1_STR}/assignments", tags=["Assignments"]
)
app.include_router(
    evaluation_router, prefix=f"{settings.API_V1_STR}/evaluation", tags=["Evaluation"]
)
app.include_router(
    submissions_router, prefix=f"{settings.API_V1_STR}/submissions", tags=["Submissions"]
)
app.include_router(absences_router, prefix=f"{settings.API_V1_STR}/absences", tags=["Absences"])
app.include_router(
    work_logs_router, prefix=f"{settings.API_V1_STR}/work-logs", tags=["Work Logs"]
)
app.include_router(payroll_router, prefix=f"{settings.API_V1_STR}/payroll", tags=["Payroll"])
app.include_router(
    learning_journal_router,
    prefix=f"{settings.API_V1_STR}/learning-journal",
    tags=["Learning Journal"],
)
app.include_router(
    equipment_router, prefix=f"{settings.API_V1_STR}/equipment", tags=["Equipment"]
)
app.include_router(notices_router, prefix=f"{settings.API_V1_STR}/notices", tags=["Notices"])
app.include_router(
    culture_picks_router, prefix=f"{settings.API_V1_STR}/culture-picks", tags=["Culture Picks"]
)
app.include_router(
    photo_diary_router, prefix=f"{settings.API_V1_STR}/photo-diary", tags=["Photo Diary"]
)
app.include_router(atelier_router, prefix=f"{settings.API_V1_STR}/atelier", tags=["Atelier"])
app.include_router(
    counseling_router, prefix=f"{settings.API_V1_STR}/counseling", tags=["Counseling"]
)
app.include_router(
    timetables_router, prefix=f"{settings.API_V1_STR}/timetables", tags=["Timetables"]
)
app.include_router(
    class_materials_router,
    prefix=f"{settings.API_V1_STR}/class-materials",
    tags=["Class Materials"],
)
app.include_router(
    admission_materials_router,
    prefix=f"{settings.API_V1_STR}/admission-materials",
    tags=["Admission Materials"],
)
app.include_router(lectures_router, prefix=f"{settings.API_V1_STR}/lectures", tags=["Lectures"])
app.include_router(
    film_notes_router, prefix=f"{settings.API_V1_STR}/film-notes", tags=["Film Notes"]
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("[validation] %s %s: %s", request.method, request.url.path, exc.errors())
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": message, "detail": jsonable_errors(errors)},
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    return JSONResponse(
        status_code=200,
        content={"success": False, "message": exc.message, "data": None},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[database] %s %s failed", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "A database error occurred", "data": None},
    )


def jsonable_errors(errors):
    # pydantic puts the raised exception object into ``ctx``
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(error)
    return cleaned


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
