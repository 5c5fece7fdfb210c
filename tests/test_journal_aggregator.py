from datetime import date, datetime, timezone

from academy.services.journal_aggregator import (
    TaskSnapshot,
    WeekTemplate,
    build_weekly_journal,
    is_submitted_late,
    resolve_task_status,
)

PERIOD_START = date(2025, 3, 3)


def _at(day, hour=12):
    return datetime(2025, 3, day, hour, tzinfo=timezone.utc)


def _subject(result, week_index, subject):
    return result["weeks"][week_index - 1]["subjects"][subject]


def test_empty_journal_has_four_weeks_and_no_rate():
    result = build_weekly_journal(PERIOD_START, [], [])

    assert [w["week_index"] for w in result["weeks"]] == [1, 2, 3, 4]
    assert result["weeks"][0]["start_date"] == "2025-03-03"
    assert result["completion_rate"] is None
    assert result["summary"]["total_tasks"] == 0


def test_templates_fill_materials_per_week_and_subject():
    template = WeekTemplate(
        week_index=2,
        subject="directing",
        material_ids=["m1", "m2"],
        material_titles=["Blocking basics"],
        material_notes="Bring a notebook",
    )
    result = build_weekly_journal(PERIOD_START, [template], [])

    bucket = _subject(result, 2, "directing")
    assert bucket["materials"] == [
        {"id": "m1", "title": "Blocking basics"},
        {"id": "m2", "title": None},
    ]
    assert bucket["material_notes"] == "Bring a notebook"
    assert _subject(result, 1, "directing")["materials"] == []


def test_tasks_are_bucketed_by_due_date():
    tasks = [
        TaskSnapshot(task_id=1, title="Shot list", subject="directing", status="completed", due_at=_at(5)),
        TaskSnapshot(task_id=2, title="Logline", subject="screenwriting", status="pending", due_at=_at(12)),
        TaskSnapshot(
            task_id=3,
            title="Essay",
            subject="film_research",
            status="in_progress",
            status_override="completed",
            assignment_created_at=_at(20),
        ),
    ]
    result = build_weekly_journal(PERIOD_START, [], tasks)

    assert _subject(result, 1, "directing")["assignments"][0]["title"] == "Shot list"
    assert _subject(result, 2, "screenwriting")["assignments"][0]["status"] == "pending"
    # no due date falls back to the assignment creation day
    assert _subject(result, 3, "film_research")["assignments"][0]["status"] == "completed"
    assert result["summary"]["completed_tasks"] == 2
    assert result["completion_rate"] == 66.67


def test_canceled_and_out_of_range_tasks_are_skipped():
    tasks = [
        TaskSnapshot(task_id=1, title="Dropped", subject="directing", status="canceled", due_at=_at(5)),
        TaskSnapshot(
            task_id=2,
            title="Pending but canceled",
            subject="directing",
            status="pending",
            status_override="canceled",
            due_at=_at(5),
        ),
        TaskSnapshot(
            task_id=3,
            title="Next cycle",
            subject="directing",
            status="pending",
            due_at=datetime(2025, 4, 10, tzinfo=timezone.utc),
        ),
        TaskSnapshot(task_id=4, title="Unknown", subject="painting", status="pending", due_at=_at(5)),
    ]
    result = build_weekly_journal(PERIOD_START, [], tasks)

    assert result["summary"]["total_tasks"] == 0
    assert result["completion_rate"] is None


def test_late_flag_from_completion_after_due():
    late = TaskSnapshot(
        task_id=1,
        title="Late",
        subject="directing",
        status="completed",
        due_at=_at(5, 9),
        completion_at=datetime(2025, 3, 5, 10),  # naive values are treated as UTC
    )
    on_time = TaskSnapshot(
        task_id=2, title="On time", subject="directing", status="completed",
        due_at=_at(5, 9), completion_at=_at(5, 8),
    )
    flagged = TaskSnapshot(
        task_id=3, title="Flagged", subject="directing", status="pending", submitted_late=True,
    )

    assert is_submitted_late(late) is True
    assert is_submitted_late(on_time) is False
    assert is_submitted_late(flagged) is True


def test_unknown_status_is_reported_as_pending():
    task = TaskSnapshot(task_id=1, title="x", subject="directing", status="mystery")
    assert resolve_task_status(task) == "pending"
