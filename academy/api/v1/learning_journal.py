from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging
import uuid

from academy.api import deps
from academy.api.access import (
    can_access_class,
    get_class_student_ids,
    get_teacher_class_ids,
    is_manager,
)
from academy.core.config import settings
from academy.core.security import sanitize_input
from academy.models.classes import Class
from academy.models.learning_journal import (
    ClassLearningJournalWeek,
    CommentScope,
    JournalEntryStatus,
    JournalPeriodStatus,
    LearningJournalAcademicEvent,
    LearningJournalAnnualSchedule,
    LearningJournalComment,
    LearningJournalEntry,
    LearningJournalGreeting,
    LearningJournalPeriod,
)
from academy.models.profiles import Profile
from academy.schemas.common import APIResponse
from academy.schemas.learning_journal import (
    AcademicEventCreate,
    AcademicEventResponse,
    AcademicEventUpdate,
    AnnualScheduleCreate,
    AnnualScheduleResponse,
    AnnualScheduleUpdate,
    CommentResponse,
    CommentUpsert,
    EntryDetailResponse,
    EntryResponse,
    EntryStatusChange,
    GreetingResponse,
    GreetingUpsert,
    PeriodCreate,
    PeriodResponse,
    PeriodUpdate,
    WeekTemplateResponse,
    WeekTemplateUpsert,
)
from academy.services import learning_journal as journal_service
from academy.utils.dates import (
    calculate_period_end,
    derive_month_tokens_for_range,
    resolve_month_token,
    utcnow,
)
from academy.utils.email import send_learning_journal_share_email

logger = logging.getLogger(__name__)
router = APIRouter()

staff_only = deps.RoleChecker(["teacher", "manager"])
manager_only = deps.RoleChecker(["manager"])
principal_only = deps.RoleChecker(["principal"])


def _period_label(period_start, period_end) -> str:
    return f"{period_start.isoformat()} ~ {period_end.isoformat()}"


def _share_url(token: str) -> str:
    base = (settings.SITE_URL or "").rstrip("/")
    return f"{base}/learning-journal/share/{token}"


def _can_view_entry(db: Session, profile: Profile, entry: LearningJournalEntry) -> bool:
    if is_manager(profile):
        return True
    if profile.role.value == "teacher":
        return entry.period.class_id in get_teacher_class_ids(db, profile.id)
    if profile.role.value == "student":
        return entry.student_id == profile.id and entry.status == JournalEntryStatus.published
    return False


def _get_entry(db: Session, entry_id: uuid.UUID) -> Optional[LearningJournalEntry]:
    return db.query(LearningJournalEntry).filter(LearningJournalEntry.id == entry_id).first()


def _seed_entries(db: Session, period: LearningJournalPeriod) -> int:
    existing = {entry.student_id for entry in period.entries}
    created = 0
    for student_id in get_class_student_ids(db, [period.class_id]):
        if student_id in existing:
            continue
        period.entries.append(
            LearningJournalEntry(student_id=student_id, status=JournalEntryStatus.draft)
        )
        created += 1
    return created


# ==================== PERIODS ====================


@router.post("/periods", response_model=APIResponse)
def create_periods(
    period_in: PeriodCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    """Open a four-week period for each selected class and seed student entries"""
    class_ids = list(dict.fromkeys(period_in.class_ids))
    classes = db.query(Class).filter(Class.id.in_(class_ids)).all()
    if len(classes) != len(class_ids):
        return {"success": False, "message": "One or more classes were not found", "data": None}

    end_date = calculate_period_end(period_in.start_date)
    label = sanitize_input(period_in.label, 100) or _period_label(period_in.start_date, end_date)

    periods = []
    for class_id in class_ids:
        period = LearningJournalPeriod(
            class_id=class_id,
            start_date=period_in.start_date,
            end_date=end_date,
            label=label,
            status=JournalPeriodStatus.in_progress,
            created_by=current_user.id,
        )
        db.add(period)
        _seed_entries(db, period)
        periods.append(period)

    db.commit()
    for period in periods:
        db.refresh(period)
    logger.info("[learning-journal] %s periods opened from %s", len(periods), period_in.start_date)

    return {
        "success": True,
        "message": f"{len(periods)} periods created",
        "data": [PeriodResponse.model_validate(p) for p in periods],
    }


@router.get("/periods", response_model=APIResponse)
def list_periods(
    class_id: Optional[uuid.UUID] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    query = db.query(LearningJournalPeriod)
    if not is_manager(current_user):
        class_ids = get_teacher_class_ids(db, current_user.id)
        if not class_ids:
            return {"success": True, "message": "Periods retrieved successfully", "data": []}
        query = query.filter(LearningJournalPeriod.class_id.in_(list(class_ids)))
    if class_id:
        query = query.filter(LearningJournalPeriod.class_id == class_id)

    periods = query.order_by(LearningJournalPeriod.start_date.desc()).all()

    stats = {}
    if periods:
        rows = (
            db.query(
                LearningJournalEntry.period_id,
                LearningJournalEntry.status,
                func.count(LearningJournalEntry.id),
            )
            .filter(LearningJournalEntry.period_id.in_([p.id for p in periods]))
            .group_by(LearningJournalEntry.period_id, LearningJournalEntry.status)
            .all()
        )
        for period_id, status, count in rows:
            bucket = stats.setdefault(period_id, {"total": 0, "submitted": 0, "published": 0})
            bucket["total"] += count
            if status == JournalEntryStatus.submitted:
                bucket["submitted"] += count
            elif status == JournalEntryStatus.published:
                bucket["published"] += count

    data = []
    for period in periods:
        data.append({
            "period": PeriodResponse.model_validate(period),
            "class_name": period.class_.name if period.class_ else None,
            "stats": stats.get(period.id, {"total": 0, "submitted": 0, "published": 0}),
        })
    return {"success": True, "message": "Periods retrieved successfully", "data": data}


@router.patch("/periods/{period_id}", response_model=APIResponse)
def update_period(
    period_id: uuid.UUID,
    period_in: PeriodUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}

    changes = period_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    if changes.get("start_date"):
        period.start_date = changes["start_date"]
        period.end_date = calculate_period_end(period.start_date)
    if "label" in changes:
        period.label = sanitize_input(changes["label"], 100) or _period_label(
            period.start_date, period.end_date
        )
    if changes.get("status"):
        period.status = changes["status"]
        period.locked_at = utcnow() if period.status == JournalPeriodStatus.completed else None

    db.commit()
    db.refresh(period)
    return {"success": True, "message": "Period updated", "data": PeriodResponse.model_validate(period)}


@router.delete("/periods/{period_id}", response_model=APIResponse)
def delete_period(
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}

    db.delete(period)
    db.commit()
    return {"success": True, "message": "Period deleted", "data": None}


@router.post("/periods/{period_id}/regenerate", response_model=APIResponse)
def regenerate_period(
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """Rebuild the weekly content of every entry in a period"""
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}
    if not can_access_class(db, current_user, period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    _seed_entries(db, period)
    db.flush()
    now = utcnow()
    for entry in period.entries:
        journal_service.regenerate_entry(db, entry, now)
    db.commit()

    return {
        "success": True,
        "message": f"{len(period.entries)} entries regenerated",
        "data": {"period_id": period.id, "entry_count": len(period.entries)},
    }


# ==================== ENTRIES ====================


@router.get("/periods/{period_id}/entries", response_model=APIResponse)
def list_period_entries(
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}
    if not can_access_class(db, current_user, period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    data = [
        {
            "entry": EntryResponse.model_validate(entry),
            "student_name": entry.student.display_name if entry.student else None,
        }
        for entry in sorted(period.entries, key=lambda e: (e.student.name or "") if e.student else "")
    ]
    return {"success": True, "message": "Entries retrieved successfully", "data": data}


@router.get("/entries/mine", response_model=APIResponse)
def list_my_entries(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.RoleChecker(["student"])),
):
    entries = (
        db.query(LearningJournalEntry)
        .filter(
            LearningJournalEntry.student_id == current_user.id,
            LearningJournalEntry.status == JournalEntryStatus.published,
        )
        .order_by(LearningJournalEntry.published_at.desc())
        .all()
    )
    return {
        "success": True,
        "message": "Learning journals retrieved successfully",
        "data": [EntryResponse.model_validate(e) for e in entries],
    }


@router.get("/entries/{entry_id}", response_model=APIResponse)
def get_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    entry = _get_entry(db, entry_id)
    if not entry or not _can_view_entry(db, current_user, entry):
        return {"success": False, "message": "Learning journal not found", "data": None}

    return {
        "success": True,
        "message": "Learning journal retrieved successfully",
        "data": EntryDetailResponse.model_validate(entry),
    }


@router.post("/entries/{entry_id}/status", response_model=APIResponse)
def change_entry_status(
    entry_id: uuid.UUID,
    status_in: EntryStatusChange,
    background_tasks: BackgroundTasks,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    entry = _get_entry(db, entry_id)
    if not entry:
        return {"success": False, "message": "Learning journal not found", "data": None}
    if not can_access_class(db, current_user, entry.period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    journal_service.change_entry_status(
        entry, status_in.status, current_user, sanitize_input(status_in.note)
    )
    db.commit()
    db.refresh(entry)

    if entry.status == JournalEntryStatus.published and entry.student and entry.student.parent_email:
        background_tasks.add_task(
            send_learning_journal_share_email,
            entry.student.parent_email,
            entry.student.display_name,
            _share_url(entry.share_token),
        )

    return {
        "success": True,
        "message": f"Learning journal {entry.status.value}",
        "data": EntryResponse.model_validate(entry),
    }


@router.post("/entries/{entry_id}/regenerate", response_model=APIResponse)
def regenerate_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    entry = _get_entry(db, entry_id)
    if not entry:
        return {"success": False, "message": "Learning journal not found", "data": None}
    if not can_access_class(db, current_user, entry.period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    journal_service.regenerate_entry(db, entry)
    db.commit()
    db.refresh(entry)
    return {
        "success": True,
        "message": "Learning journal regenerated",
        "data": EntryResponse.model_validate(entry),
    }


@router.put("/entries/{entry_id}/comments", response_model=APIResponse)
def upsert_comment(
    entry_id: uuid.UUID,
    comment_in: CommentUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    """One comment per (entry, scope, subject); saving again replaces the body"""
    entry = _get_entry(db, entry_id)
    if not entry:
        return {"success": False, "message": "Learning journal not found", "data": None}
    if not can_access_class(db, current_user, entry.period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    body = sanitize_input(comment_in.body, 4000)
    if not body:
        return {"success": False, "message": "Comment cannot be empty", "data": None}

    query = db.query(LearningJournalComment).filter(
        LearningJournalComment.entry_id == entry.id,
        LearningJournalComment.role_scope == comment_in.role_scope,
    )
    if comment_in.role_scope == CommentScope.homeroom:
        query = query.filter(LearningJournalComment.subject.is_(None))
    else:
        query = query.filter(LearningJournalComment.subject == comment_in.subject)
    comment = query.first()

    if comment is None:
        comment = LearningJournalComment(
            entry_id=entry.id,
            role_scope=comment_in.role_scope,
            subject=comment_in.subject,
        )
        db.add(comment)
    comment.body = body
    comment.teacher_id = current_user.id

    db.commit()
    db.refresh(comment)
    return {"success": True, "message": "Comment saved", "data": CommentResponse.model_validate(comment)}


# ==================== WEEK TEMPLATES ====================


@router.put("/weeks", response_model=APIResponse)
def upsert_week_template(
    week_in: WeekTemplateUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == week_in.period_id).first()
    if not period or period.class_id != week_in.class_id:
        return {"success": False, "message": "Period not found for this class", "data": None}
    if not can_access_class(db, current_user, week_in.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    week = db.query(ClassLearningJournalWeek).filter(
        ClassLearningJournalWeek.class_id == week_in.class_id,
        ClassLearningJournalWeek.period_id == week_in.period_id,
        ClassLearningJournalWeek.week_index == week_in.week_index,
        ClassLearningJournalWeek.subject == week_in.subject,
    ).first()
    if week is None:
        week = ClassLearningJournalWeek(
            class_id=week_in.class_id,
            period_id=week_in.period_id,
            week_index=week_in.week_index,
            subject=week_in.subject,
            created_by=current_user.id,
        )
        db.add(week)

    week.material_ids = list(week_in.material_ids)
    week.material_titles = list(week_in.material_titles)
    week.material_notes = sanitize_input(week_in.material_notes)

    db.commit()
    db.refresh(week)
    return {"success": True, "message": "Week materials saved", "data": WeekTemplateResponse.model_validate(week)}


@router.get("/periods/{period_id}/weeks", response_model=APIResponse)
def list_week_templates(
    period_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    period = db.query(LearningJournalPeriod).filter(LearningJournalPeriod.id == period_id).first()
    if not period:
        return {"success": False, "message": "Period not found", "data": None}
    if not can_access_class(db, current_user, period.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    weeks = (
        db.query(ClassLearningJournalWeek)
        .filter(ClassLearningJournalWeek.period_id == period_id)
        .order_by(ClassLearningJournalWeek.week_index.asc())
        .all()
    )
    return {
        "success": True,
        "message": "Week materials retrieved successfully",
        "data": [WeekTemplateResponse.model_validate(w) for w in weeks],
    }


@router.delete("/weeks/{week_id}", response_model=APIResponse)
def delete_week_template(
    week_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    week = db.query(ClassLearningJournalWeek).filter(ClassLearningJournalWeek.id == week_id).first()
    if not week:
        return {"success": False, "message": "Week materials not found", "data": None}
    if not can_access_class(db, current_user, week.class_id):
        return {"success": False, "message": "You are not assigned to this class", "data": None}

    db.delete(week)
    db.commit()
    return {"success": True, "message": "Week materials deleted", "data": None}


# ==================== GREETINGS ====================


@router.get("/greetings", response_model=APIResponse)
def list_greetings(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    greetings = db.query(LearningJournalGreeting).order_by(LearningJournalGreeting.month_token.desc()).all()
    return {
        "success": True,
        "message": "Greetings retrieved successfully",
        "data": [GreetingResponse.model_validate(g) for g in greetings],
    }


@router.put("/greetings", response_model=APIResponse)
def upsert_greeting(
    greeting_in: GreetingUpsert,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    message = sanitize_input(greeting_in.message)
    if not message or len(message) < 10:
        return {"success": False, "message": "Greeting must be at least 10 characters", "data": None}

    greeting = db.query(LearningJournalGreeting).filter(
        LearningJournalGreeting.month_token == greeting_in.month_token
    ).first()
    if greeting is None:
        greeting = LearningJournalGreeting(month_token=greeting_in.month_token)
        db.add(greeting)
    greeting.message = message
    greeting.principal_id = current_user.id
    greeting.published_at = utcnow()

    db.commit()
    db.refresh(greeting)
    return {"success": True, "message": "Greeting saved", "data": GreetingResponse.model_validate(greeting)}


@router.delete("/greetings/{month_token}", response_model=APIResponse)
def delete_greeting(
    month_token: str,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(principal_only),
):
    greeting = db.query(LearningJournalGreeting).filter(
        LearningJournalGreeting.month_token == month_token
    ).first()
    if not greeting:
        return {"success": False, "message": "Greeting not found", "data": None}

    db.delete(greeting)
    db.commit()
    return {"success": True, "message": "Greeting deleted", "data": None}


# ==================== ACADEMIC EVENTS ====================


@router.get("/events", response_model=APIResponse)
def list_academic_events(
    month: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(staff_only),
):
    query = db.query(LearningJournalAcademicEvent)
    if month:
        query = query.filter(LearningJournalAcademicEvent.month_token == month)
    events = query.order_by(LearningJournalAcademicEvent.start_date.asc()).all()
    return {
        "success": True,
        "message": "Academic events retrieved successfully",
        "data": [AcademicEventResponse.model_validate(e) for e in events],
    }


@router.post("/events", response_model=APIResponse)
def create_academic_event(
    event_in: AcademicEventCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    title = sanitize_input(event_in.title, 200)
    if not title or len(title) < 2:
        return {"success": False, "message": "Title must be at least 2 characters", "data": None}

    event = LearningJournalAcademicEvent(
        month_token=resolve_month_token(event_in.start_date),
        title=title,
        start_date=event_in.start_date,
        end_date=event_in.end_date,
        memo=sanitize_input(event_in.memo),
        created_by=current_user.id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return {"success": True, "message": "Academic event created", "data": AcademicEventResponse.model_validate(event)}


@router.patch("/events/{event_id}", response_model=APIResponse)
def update_academic_event(
    event_id: uuid.UUID,
    event_in: AcademicEventUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    event = db.query(LearningJournalAcademicEvent).filter(LearningJournalAcademicEvent.id == event_id).first()
    if not event:
        return {"success": False, "message": "Academic event not found", "data": None}

    changes = event_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    start_date = changes.get("start_date") or event.start_date
    end_date = changes["end_date"] if "end_date" in changes else event.end_date
    if end_date and end_date < start_date:
        return {"success": False, "message": "End date cannot be before the start date", "data": None}

    if "title" in changes:
        title = sanitize_input(changes["title"], 200)
        if not title or len(title) < 2:
            return {"success": False, "message": "Title must be at least 2 characters", "data": None}
        event.title = title
    if "memo" in changes:
        event.memo = sanitize_input(changes["memo"])
    event.start_date = start_date
    event.end_date = end_date
    event.month_token = resolve_month_token(start_date)

    db.commit()
    db.refresh(event)
    return {"success": True, "message": "Academic event updated", "data": AcademicEventResponse.model_validate(event)}


@router.delete("/events/{event_id}", response_model=APIResponse)
def delete_academic_event(
    event_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    event = db.query(LearningJournalAcademicEvent).filter(LearningJournalAcademicEvent.id == event_id).first()
    if not event:
        return {"success": False, "message": "Academic event not found", "data": None}

    db.delete(event)
    db.commit()
    return {"success": True, "message": "Academic event deleted", "data": None}


# ==================== ANNUAL SCHEDULES ====================


@router.get("/annual-schedules", response_model=APIResponse)
def list_annual_schedules(
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(deps.get_current_profile),
):
    schedules = (
        db.query(LearningJournalAnnualSchedule)
        .order_by(
            LearningJournalAnnualSchedule.category.asc(),
            LearningJournalAnnualSchedule.display_order.asc(),
            LearningJournalAnnualSchedule.start_date.asc(),
        )
        .all()
    )
    return {
        "success": True,
        "message": "Annual schedules retrieved successfully",
        "data": [AnnualScheduleResponse.model_validate(s) for s in schedules],
    }


@router.post("/annual-schedules", response_model=APIResponse)
def create_annual_schedule(
    schedule_in: AnnualScheduleCreate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    schedule = LearningJournalAnnualSchedule(
        **schedule_in.model_dump(exclude={"memo"}),
        memo=sanitize_input(schedule_in.memo),
        created_by=current_user.id,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return {"success": True, "message": "Annual schedule created", "data": AnnualScheduleResponse.model_validate(schedule)}


@router.patch("/annual-schedules/{schedule_id}", response_model=APIResponse)
def update_annual_schedule(
    schedule_id: uuid.UUID,
    schedule_in: AnnualScheduleUpdate,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    schedule = db.query(LearningJournalAnnualSchedule).filter(
        LearningJournalAnnualSchedule.id == schedule_id
    ).first()
    if not schedule:
        return {"success": False, "message": "Annual schedule not found", "data": None}

    changes = schedule_in.model_dump(exclude_unset=True)
    if not changes:
        return {"success": False, "message": "Nothing to update", "data": None}

    start_date = changes.get("start_date") or schedule.start_date
    end_date = changes.get("end_date") or schedule.end_date
    if end_date < start_date:
        return {"success": False, "message": "End date cannot be before the start date", "data": None}

    for field, value in changes.items():
        if field in ("period_label", "start_date", "end_date", "category", "display_order") and value is None:
            continue
        setattr(schedule, field, value)

    db.commit()
    db.refresh(schedule)
    return {"success": True, "message": "Annual schedule updated", "data": AnnualScheduleResponse.model_validate(schedule)}


@router.delete("/annual-schedules/{schedule_id}", response_model=APIResponse)
def delete_annual_schedule(
    schedule_id: uuid.UUID,
    db: Session = Depends(deps.get_db),
    current_user: Profile = Depends(manager_only),
):
    schedule = db.query(LearningJournalAnnualSchedule).filter(
        LearningJournalAnnualSchedule.id == schedule_id
    ).first()
    if not schedule:
        return {"success": False, "message": "Annual schedule not found", "data": None}

    db.delete(schedule)
    db.commit()
    return {"success": True, "message": "Annual schedule deleted", "data": None}


# ==================== PUBLIC SHARE ====================


@router.get("/share/{token}", response_model=APIResponse)
def get_shared_entry(token: str, db: Session = Depends(deps.get_db)):
    """Public view of a published learning journal (linked from the parent email)"""
    entry = db.query(LearningJournalEntry).filter(LearningJournalEntry.share_token == token).first()
    if not entry or entry.status != JournalEntryStatus.published:
        return {"success": False, "message": "Learning journal not found", "data": None}

    period = entry.period
    month_tokens = derive_month_tokens_for_range(period.start_date, period.end_date)
    greetings = (
        db.query(LearningJournalGreeting)
        .filter(LearningJournalGreeting.month_token.in_(month_tokens))
        .order_by(LearningJournalGreeting.month_token.asc())
        .all()
    )
    events = (
        db.query(LearningJournalAcademicEvent)
        .filter(LearningJournalAcademicEvent.month_token.in_(month_tokens))
        .order_by(LearningJournalAcademicEvent.start_date.asc())
        .all()
    )

    return {
        "success": True,
        "message": "Learning journal retrieved successfully",
        "data": {
            "entry": EntryDetailResponse.model_validate(entry).model_copy(update={"logs": []}),
            "student_name": entry.student.display_name if entry.student else None,
            "class_name": period.class_.name if period.class_ else None,
            "period": PeriodResponse.model_validate(period),
            "greetings": [GreetingResponse.model_validate(g) for g in greetings],
            "academic_events": [AcademicEventResponse.model_validate(e) for e in events],
        },
    }
