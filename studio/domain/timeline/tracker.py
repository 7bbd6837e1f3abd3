"""Task tracker - completion state, date overrides and the automation pull queue"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import AUTOMATION_COMPLETED, AUTOMATION_PENDING, SessionTask
from ...shared.validators import utc_now
from .errors import ConcurrentModificationError, TaskAlreadyCompletedError, TaskNotFoundError
from .repository import TimelineRepository

logger = logging.getLogger(__name__)


class TaskTracker:
    """Records completion and automation status per task instance"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.repo = TimelineRepository()

    def get_task(self, task_id: str) -> SessionTask:
        task = self.repo.get_task(self.db, task_id)
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    def get_timeline(self, session_id: str) -> list[SessionTask]:
        return self.repo.get_session_tasks(self.db, session_id)

    def list_automatable(self, session_id: Optional[str] = None) -> list[SessionTask]:
        """Automatable, open tasks sorted by due date then order"""
        return self.repo.get_automatable_tasks(self.db, session_id)

    @staticmethod
    def check_version(task: SessionTask, expected_version: Optional[int]) -> None:
        if expected_version is not None and task.version != expected_version:
            raise ConcurrentModificationError(
                f"Task '{task.id}' is at version {task.version}, not {expected_version}; reload and retry"
            )

    def set_completion(
        self,
        task_id: str,
        completed: bool,
        actor: Optional[str],
        expected_version: Optional[int] = None,
    ) -> SessionTask:
        """
        Mark a task completed or re-open it.

        Completing an already-completed task (or re-opening an open one)
        returns the current state without writing.
        """
        task = self.get_task(task_id)
        self.check_version(task, expected_version)

        if completed:
            if task.is_completed:
                logger.info(f"ℹ️ Task {task_id} already completed by {task.completed_by}, no-op")
                return task

            task.is_completed = True
            task.completed_at = self.clock()
            task.completed_by = actor
            task.automation_status = AUTOMATION_COMPLETED
            logger.info(f"✅ Task {task_id} '{task.task_name}' completed by {actor}")
        else:
            if not task.is_completed and task.automation_status == AUTOMATION_PENDING:
                return task

            # Open approval requests stay as they are; re-opening never reactivates them
            task.is_completed = False
            task.completed_at = None
            task.completed_by = None
            task.automation_status = AUTOMATION_PENDING
            logger.info(f"↩️ Task {task_id} '{task.task_name}' re-opened")

        self.repo.commit(self.db)
        self.db.refresh(task)
        return task

    def adjust_task_date(
        self,
        task_id: str,
        adjusted_date: date,
        expected_version: Optional[int] = None,
    ) -> SessionTask:
        """Manually move one task's due date without touching its calculated date"""
        task = self.get_task(task_id)
        self.check_version(task, expected_version)

        if task.is_completed:
            raise TaskAlreadyCompletedError(task_id)

        if task.adjusted_date == adjusted_date:
            return task

        previous = task.adjusted_date
        task.adjusted_date = adjusted_date
        self.repo.commit(self.db)
        self.db.refresh(task)

        logger.info(f"📅 Task {task_id} due date moved {previous} → {adjusted_date}")
        return task
