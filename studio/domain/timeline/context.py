"""Context summarizer - derived, read-only view of a session's timeline"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from ...cache import Cache, build_context_key
from ...config import CONTEXT_CACHE_TTL
from ...models import SessionTask
from ...shared.validators import ensure_utc
from .errors import TimelineNotFoundError
from .repository import TimelineRepository
from .schemas import (
    ClientRef,
    CompletedTaskSummary,
    SessionSummary,
    TaskSummary,
    TimelineContext,
)

logger = logging.getLogger(__name__)

PHASE_UPCOMING = "upcoming"
PHASE_PREPARATION = "preparation"
PHASE_IMMINENT = "imminent"
PHASE_COMPLETED = "completed"

RECENTLY_COMPLETED_LIMIT = 3


def session_phase(days_until_session: int) -> str:
    if days_until_session < 0:
        return PHASE_COMPLETED
    if days_until_session <= 3:
        return PHASE_IMMINENT
    if days_until_session <= 7:
        return PHASE_PREPARATION
    return PHASE_UPCOMING


def progress_percentage(completed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up"""
    if total == 0:
        return 0
    return (200 * completed + total) // (2 * total)


def _summary(task: SessionTask) -> TaskSummary:
    return TaskSummary(
        id=task.id,
        name=task.task_name,
        dueDate=task.adjusted_date,
        order=task.task_order,
        canAutomate=task.can_automate,
    )


class ContextSummarizer:
    """Builds phase/progress/next/overdue views for dashboards and chat assistants"""

    def __init__(self, db: Session, cache: Cache, ttl: int = CONTEXT_CACHE_TTL):
        self.db = db
        self.cache = cache
        self.ttl = ttl
        self.repo = TimelineRepository()

    def summarize(
        self,
        session_id: str,
        now: Union[datetime, date],
        client: Optional[ClientRef] = None,
    ) -> TimelineContext:
        today = now.date() if isinstance(now, datetime) else now

        key = build_context_key(session_id, today.isoformat())
        cached = self.cache.get(key)
        if cached is not None:
            context = TimelineContext.model_validate(cached)
        else:
            context = self._build(session_id, today)
            self.cache.set(key, context.model_dump(mode="json"), self.ttl)

        if client is not None:
            context = context.model_copy(update={"client": client})
        return context

    def _build(self, session_id: str, today: date) -> TimelineContext:
        timeline = self.repo.get_timeline(self.db, session_id)
        if not timeline:
            raise TimelineNotFoundError(session_id)

        tasks = self.repo.get_session_tasks(self.db, session_id)
        completed = [t for t in tasks if t.is_completed]
        open_tasks = sorted(
            (t for t in tasks if not t.is_completed),
            key=lambda t: (t.adjusted_date, t.task_order),
        )
        upcoming = [t for t in open_tasks if t.adjusted_date >= today]
        overdue = [t for t in open_tasks if t.adjusted_date < today]
        recent = sorted(
            completed, key=lambda t: (ensure_utc(t.completed_at), t.task_order)
        )[-RECENTLY_COMPLETED_LIMIT:]

        days_until_session = (timeline.session_date - today).days

        return TimelineContext(
            session=SessionSummary(
                id=timeline.session_id,
                sessionType=timeline.session_type,
                sessionDate=timeline.session_date,
            ),
            phase=session_phase(days_until_session),
            daysUntilSession=days_until_session,
            progressPercentage=progress_percentage(len(completed), len(tasks)),
            completedTasks=len(completed),
            totalTasks=len(tasks),
            upcomingCount=len(upcoming),
            overdueCount=len(overdue),
            nextTask=_summary(upcoming[0]) if upcoming else None,
            overdueTasks=[_summary(t) for t in overdue],
            recentlyCompleted=[
                CompletedTaskSummary(
                    id=t.id,
                    name=t.task_name,
                    completedAt=t.completed_at,
                    completedBy=t.completed_by,
                )
                for t in recent
            ],
        )
