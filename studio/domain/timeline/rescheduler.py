"""Reschedule adjuster - moves open tasks when a session date changes"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from ...models import SessionTask
from .errors import TimelineNotFoundError
from .generator import due_date
from .repository import TimelineRepository

logger = logging.getLogger(__name__)


class RescheduleAdjuster:
    """Recomputes due dates for not-yet-completed tasks"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimelineRepository()

    def reschedule(self, session_id: str, new_session_date: date) -> list[SessionTask]:
        """
        Move a session's open tasks relative to its new date.

        Manual per-task overrides are discarded: they were relative to the old
        session date. Completed tasks are never modified.

        Raises:
            TimelineNotFoundError: The session has no generated timeline
            DateOutOfRangeError: A new due date falls outside the supported calendar
            ConcurrentModificationError: A task changed underneath this write
        """
        timeline = self.repo.get_timeline(self.db, session_id)
        if not timeline:
            raise TimelineNotFoundError(session_id)

        previous_date = timeline.session_date
        tasks = self.repo.get_session_tasks(self.db, session_id)

        # All dates are computed before any task is touched
        new_dates = {
            task.id: due_date(new_session_date, task.offset_days) for task in tasks if not task.is_completed
        }

        moved = 0
        overrides_dropped = 0
        for task in tasks:
            if task.is_completed:
                continue

            new_calculated = new_dates[task.id]
            if task.adjusted_date != task.calculated_date:
                overrides_dropped += 1

            if task.calculated_date != new_calculated or task.adjusted_date != new_calculated:
                task.calculated_date = new_calculated
                task.adjusted_date = new_calculated
                moved += 1

        timeline.session_date = new_session_date
        self.repo.commit(self.db)

        logger.info(
            f"📅 Rescheduled session {session_id} {previous_date} → {new_session_date}: "
            f"{moved} tasks moved, {overrides_dropped} manual overrides reset"
        )
        return self.repo.get_session_tasks(self.db, session_id)
