"""Timeline service - the operations exposed to routers and other callers"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from sqlalchemy.orm import Session

from ...cache import Cache, invalidate_session_context
from ...models import SessionTask, TaskApproval
from ...shared.validators import utc_now
from .approval_gate import ApprovalGate
from .context import ContextSummarizer
from .errors import TimelineNotFoundError
from .generator import TimelineGenerator
from .repository import TimelineRepository
from .rescheduler import RescheduleAdjuster
from .schemas import ClientRef, TimelineContext, TimelineTemplateIn, TimelineTemplateResponse
from .template_store import TemplateStore
from .tracker import TaskTracker

logger = logging.getLogger(__name__)


class TimelineService:
    """Service layer composing the timeline components over one DB session"""

    def __init__(self, db: Session, cache: Cache, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.cache = cache
        self.clock = clock
        self.repo = TimelineRepository()
        self.templates = TemplateStore(db, cache)
        self.generator = TimelineGenerator(db, self.templates)
        self.tracker = TaskTracker(db, clock)
        self.approvals = ApprovalGate(db, self.tracker, clock)
        self.rescheduler = RescheduleAdjuster(db)
        self.summarizer = ContextSummarizer(db, cache)

    def _invalidate(self, session_id: str) -> None:
        invalidate_session_context(self.cache, session_id)

    # Templates
    def get_template(self, session_type: str) -> Optional[TimelineTemplateResponse]:
        return self.templates.get_template(session_type)

    def list_templates(self) -> list[TimelineTemplateResponse]:
        return self.templates.list_templates()

    def put_template(self, template: Union[TimelineTemplateIn, dict[str, Any]]) -> TimelineTemplateResponse:
        return self.templates.put_template(template)

    def delete_template(self, session_type: str) -> None:
        self.templates.delete_template(session_type)

    # Timelines
    def generate_timeline(self, session_id: str, session_type: str, session_date: date) -> list[SessionTask]:
        tasks = self.generator.generate(session_id, session_type, session_date)
        self._invalidate(session_id)
        return tasks

    def get_timeline(self, session_id: str) -> list[SessionTask]:
        if not self.repo.get_timeline(self.db, session_id):
            raise TimelineNotFoundError(session_id)
        return self.tracker.get_timeline(session_id)

    def delete_timeline(self, session_id: str) -> None:
        """Remove a session's timeline, tasks and approvals when the session is deleted"""
        timeline = self.repo.get_timeline(self.db, session_id)
        if not timeline:
            raise TimelineNotFoundError(session_id)

        self.repo.delete_timeline(self.db, timeline)
        self._invalidate(session_id)
        logger.info(f"🗑️ Deleted timeline for session {session_id}")

    def reschedule(self, session_id: str, new_session_date: date) -> list[SessionTask]:
        tasks = self.rescheduler.reschedule(session_id, new_session_date)
        self._invalidate(session_id)
        return tasks

    # Tasks
    def list_automatable(self, session_id: Optional[str] = None) -> list[SessionTask]:
        return self.tracker.list_automatable(session_id)

    def set_completion(
        self,
        task_id: str,
        completed: bool,
        actor: Optional[str],
        expected_version: Optional[int] = None,
    ) -> SessionTask:
        task = self.tracker.set_completion(task_id, completed, actor, expected_version)
        self._invalidate(task.session_id)
        return task

    def adjust_task_date(
        self, task_id: str, adjusted_date: date, expected_version: Optional[int] = None
    ) -> SessionTask:
        task = self.tracker.adjust_task_date(task_id, adjusted_date, expected_version)
        self._invalidate(task.session_id)
        return task

    # Approvals
    def submit_approval(
        self,
        task_id: str,
        content: Any,
        content_type: str = "email",
        metadata: Optional[dict[str, Any]] = None,
    ) -> TaskApproval:
        approval = self.approvals.submit(task_id, content, content_type, metadata)
        self._invalidate(approval.task.session_id)
        return approval

    def resolve_approval(
        self,
        approval_id: str,
        approved: bool,
        reviewed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SessionTask:
        task = self.approvals.resolve(approval_id, approved, reviewed_by, notes)
        self._invalidate(task.session_id)
        return task

    def list_pending_approvals(self, session_id: Optional[str] = None) -> list[TaskApproval]:
        return self.approvals.list_pending(session_id)

    # Context
    def get_context(
        self,
        session_id: str,
        now: Optional[Union[datetime, date]] = None,
        client: Optional[ClientRef] = None,
    ) -> TimelineContext:
        return self.summarizer.summarize(session_id, now or self.clock(), client)
