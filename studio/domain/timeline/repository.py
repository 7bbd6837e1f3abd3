"""Timeline repository - Database operations for templates, timelines, tasks and approvals"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...models import (
    APPROVAL_PENDING_REVIEW,
    AUTOMATION_PENDING,
    AUTOMATION_PENDING_APPROVAL,
    SessionTask,
    SessionTimeline,
    TaskApproval,
    TimelineTemplate,
)
from .errors import ConcurrentModificationError

logger = logging.getLogger(__name__)


class TimelineRepository:
    """Repository for timeline database operations"""

    @staticmethod
    def commit(db: Session) -> None:
        """Commit, translating stale optimistic-lock writes into a retryable error"""
        try:
            db.commit()
        except StaleDataError as e:
            db.rollback()
            logger.warning(f"⚠️ Concurrent modification detected: {e}")
            raise ConcurrentModificationError(
                "Task was modified by another request; reload and retry"
            ) from e
        except Exception:
            db.rollback()
            raise

    # Template Methods
    @staticmethod
    def get_template(db: Session, session_type: str) -> Optional[TimelineTemplate]:
        return db.query(TimelineTemplate).filter(TimelineTemplate.session_type == session_type).first()

    @staticmethod
    def list_templates(db: Session) -> list[TimelineTemplate]:
        return db.query(TimelineTemplate).order_by(TimelineTemplate.session_type.asc()).all()

    @staticmethod
    def upsert_template(db: Session, session_type: str, template_name: str, tasks: list[dict]) -> TimelineTemplate:
        """Create or replace a template in a single row write"""
        template = TimelineRepository.get_template(db, session_type)
        if template is None:
            template = TimelineTemplate(session_type=session_type, template_name=template_name, tasks=tasks)
            db.add(template)
        else:
            template.template_name = template_name
            template.tasks = tasks

        try:
            db.commit()
        except IntegrityError:
            # Another admin created the same session type first; replace theirs
            db.rollback()
            template = TimelineRepository.get_template(db, session_type)
            template.template_name = template_name
            template.tasks = tasks
            db.commit()

        db.refresh(template)
        return template

    @staticmethod
    def delete_template(db: Session, template: TimelineTemplate) -> None:
        db.delete(template)
        db.commit()

    # Timeline Methods
    @staticmethod
    def get_timeline(db: Session, session_id: str) -> Optional[SessionTimeline]:
        return db.query(SessionTimeline).filter(SessionTimeline.session_id == session_id).first()

    @staticmethod
    def create_timeline(db: Session, timeline: SessionTimeline) -> None:
        """Insert the ownership record and its tasks as one transaction.

        Raises IntegrityError when another caller already owns the session.
        """
        try:
            db.add(timeline)
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete_timeline(db: Session, timeline: SessionTimeline) -> None:
        db.delete(timeline)
        TimelineRepository.commit(db)

    # Task Methods
    @staticmethod
    def get_task(db: Session, task_id: str) -> Optional[SessionTask]:
        return db.query(SessionTask).filter(SessionTask.id == task_id).first()

    @staticmethod
    def get_session_tasks(db: Session, session_id: str) -> list[SessionTask]:
        """Get a session's tasks in display/execution order"""
        return (
            db.query(SessionTask)
            .filter(SessionTask.session_id == session_id)
            .order_by(SessionTask.task_order.asc())
            .all()
        )

    @staticmethod
    def get_automatable_tasks(db: Session, session_id: Optional[str] = None) -> list[SessionTask]:
        """Get tasks an automation worker may pick up, earliest due first"""
        query = db.query(SessionTask).filter(
            SessionTask.can_automate.is_(True),
            SessionTask.is_completed.is_(False),
            SessionTask.automation_status.in_([AUTOMATION_PENDING, AUTOMATION_PENDING_APPROVAL]),
        )

        if session_id:
            query = query.filter(SessionTask.session_id == session_id)

        return query.order_by(
            SessionTask.adjusted_date.asc(),
            SessionTask.task_order.asc(),
            SessionTask.id.asc(),
        ).all()

    # Approval Methods
    @staticmethod
    def get_approval(db: Session, approval_id: str) -> Optional[TaskApproval]:
        return db.query(TaskApproval).filter(TaskApproval.id == approval_id).first()

    @staticmethod
    def get_open_approval(db: Session, task_id: str) -> Optional[TaskApproval]:
        return (
            db.query(TaskApproval)
            .filter(
                TaskApproval.task_id == task_id,
                TaskApproval.approval_status == APPROVAL_PENDING_REVIEW,
            )
            .first()
        )

    @staticmethod
    def get_pending_approvals(db: Session, session_id: Optional[str] = None) -> list[TaskApproval]:
        """Review queue, oldest submission first"""
        query = db.query(TaskApproval).filter(TaskApproval.approval_status == APPROVAL_PENDING_REVIEW)

        if session_id:
            query = query.join(SessionTask, TaskApproval.task_id == SessionTask.id).filter(
                SessionTask.session_id == session_id
            )

        return query.order_by(TaskApproval.submitted_at.asc(), TaskApproval.id.asc()).all()
