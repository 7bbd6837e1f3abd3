"""Timeline generator - instantiates a session's task list from its template"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import AUTOMATION_PENDING, SessionTask, SessionTimeline
from ...shared.validators import clean_label
from .errors import DateOutOfRangeError, NoTemplateError
from .repository import TimelineRepository
from .schemas import TaskDef
from .template_store import TemplateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedTask:
    """A task instance before it is persisted"""

    task_name: str
    task_order: int
    offset_days: int
    calculated_date: date
    can_automate: bool
    approval_required: bool
    estimated_hours: float
    requires_human: bool
    can_batch: bool


def due_date(session_date: date, offset_days: int) -> date:
    """Calendar date offset_days away from the session date"""
    try:
        return session_date + timedelta(days=offset_days)
    except OverflowError as e:
        raise DateOutOfRangeError(session_date, offset_days) from e


def plan_timeline(tasks: list[TaskDef], session_date: date) -> list[PlannedTask]:
    """Compute dated task instances for a session.

    Pure function of the task definitions and the session date; output is
    always in ascending order regardless of input order.

    Raises:
        DateOutOfRangeError: A due date falls outside the supported calendar
    """
    return [
        PlannedTask(
            task_name=task.name,
            task_order=task.order,
            offset_days=task.offsetDays,
            calculated_date=due_date(session_date, task.offsetDays),
            can_automate=task.canAutomate,
            approval_required=task.approvalRequired,
            estimated_hours=task.estimatedHours,
            requires_human=task.requiresHuman,
            can_batch=task.canBatch,
        )
        for task in sorted(tasks, key=lambda t: t.order)
    ]


class TimelineGenerator:
    """Creates exactly one task set per session"""

    def __init__(self, db: Session, template_store: TemplateStore):
        self.db = db
        self.template_store = template_store
        self.repo = TimelineRepository()

    def generate(self, session_id: str, session_type: str, session_date: date) -> list[SessionTask]:
        """
        Generate the timeline for a session, or return the existing one.

        Raises:
            NoTemplateError: No template exists for the session type
            DateOutOfRangeError: A due date falls outside the supported calendar
        """
        session_type = clean_label(session_type)
        existing = self.repo.get_timeline(self.db, session_id)
        if existing:
            self._log_existing(existing, session_type, session_date)
            return self.repo.get_session_tasks(self.db, session_id)

        template = self.template_store.get_template(session_type)
        if template is None:
            logger.warning(f"⚠️ No timeline template for session type '{session_type}' (session {session_id})")
            raise NoTemplateError(session_type)

        planned = plan_timeline(template.tasks, session_date)
        timeline = SessionTimeline(
            session_id=session_id,
            session_type=session_type,
            session_date=session_date,
            template_name=template.templateName,
            tasks=[
                SessionTask(
                    task_name=p.task_name,
                    task_order=p.task_order,
                    offset_days=p.offset_days,
                    calculated_date=p.calculated_date,
                    adjusted_date=p.calculated_date,
                    can_automate=p.can_automate,
                    approval_required=p.approval_required,
                    estimated_hours=p.estimated_hours,
                    requires_human=p.requires_human,
                    can_batch=p.can_batch,
                    automation_status=AUTOMATION_PENDING,
                    is_completed=False,
                )
                for p in planned
            ],
        )

        try:
            self.repo.create_timeline(self.db, timeline)
        except IntegrityError:
            # Lost a concurrent generation race; the winner's set is the timeline
            logger.warning(f"⚠️ Timeline for session {session_id} was generated concurrently, using existing")
            return self.repo.get_session_tasks(self.db, session_id)

        logger.info(
            f"✅ Generated {len(planned)} timeline tasks for session {session_id} "
            f"({session_type} on {session_date.isoformat()})"
        )
        return self.repo.get_session_tasks(self.db, session_id)

    @staticmethod
    def _log_existing(existing: SessionTimeline, session_type: str, session_date: date) -> None:
        if existing.session_type != session_type or existing.session_date != session_date:
            logger.warning(
                f"⚠️ Timeline for session {existing.session_id} already exists "
                f"({existing.session_type} on {existing.session_date}); "
                f"ignoring generate request for {session_type} on {session_date}"
            )
        else:
            logger.info(f"ℹ️ Timeline for session {existing.session_id} already exists, returning it")
