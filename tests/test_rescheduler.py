from datetime import date

import pytest

from studio.domain.timeline.errors import DateOutOfRangeError, TimelineNotFoundError
from studio.domain.timeline.rescheduler import RescheduleAdjuster
from studio.models import SessionTimeline


def test_portrait_reschedule_scenario(portrait, portrait_tasks):
    for task in portrait_tasks[:2]:
        portrait.set_completion(task.id, True, "admin")

    tasks = portrait.reschedule("session-1", date(2025, 6, 22))

    assert [t.adjusted_date for t in tasks] == [
        date(2025, 6, 1),
        date(2025, 6, 8),
        date(2025, 6, 19),
        date(2025, 6, 22),
        date(2025, 6, 24),
        date(2025, 6, 25),
        date(2025, 6, 29),
    ]
    assert [t.calculated_date for t in tasks[:2]] == [date(2025, 6, 1), date(2025, 6, 8)]
    assert all(t.calculated_date == t.adjusted_date for t in tasks)


def test_completed_tasks_are_untouched(portrait, portrait_tasks):
    done = portrait.set_completion(portrait_tasks[0].id, True, "admin")
    snapshot = (done.version, done.completed_by, done.completed_at, done.adjusted_date)

    portrait.reschedule("session-1", date(2025, 7, 1))

    task = portrait.tracker.get_task(portrait_tasks[0].id)
    assert (task.version, task.completed_by, task.completed_at, task.adjusted_date) == snapshot


def test_manual_overrides_are_reset(portrait, portrait_tasks):
    portrait.adjust_task_date(portrait_tasks[2].id, date(2025, 6, 10))

    tasks = portrait.reschedule("session-1", date(2025, 6, 15))

    assert tasks[2].adjusted_date == date(2025, 6, 12)
    assert tasks[2].calculated_date == date(2025, 6, 12)


def test_reschedule_updates_session_date(portrait, portrait_tasks, db):
    portrait.reschedule("session-1", date(2025, 8, 1))

    timeline = db.query(SessionTimeline).filter_by(session_id="session-1").one()
    assert timeline.session_date == date(2025, 8, 1)


def test_reschedule_unknown_session(db):
    with pytest.raises(TimelineNotFoundError):
        RescheduleAdjuster(db).reschedule("nope", date(2025, 8, 1))


def test_reschedule_past_the_end_of_the_calendar_changes_nothing(portrait, portrait_tasks, db):
    with pytest.raises(DateOutOfRangeError):
        portrait.reschedule("session-1", date(9999, 12, 28))

    db.expire_all()
    tasks = portrait.get_timeline("session-1")
    assert [t.adjusted_date for t in tasks] == [t.calculated_date for t in tasks]
    assert tasks[3].adjusted_date == date(2025, 6, 15)
    assert db.query(SessionTimeline).filter_by(session_id="session-1").one().session_date == date(2025, 6, 15)
