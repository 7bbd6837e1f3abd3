"""Approval gate - AI-generated content waits here for human review"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import (
    APPROVAL_APPROVED,
    APPROVAL_PENDING_REVIEW,
    APPROVAL_REJECTED,
    AUTOMATION_PENDING,
    AUTOMATION_PENDING_APPROVAL,
    SessionTask,
    TaskApproval,
)
from ...shared.validators import utc_now
from .errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    ApprovalNotRequiredError,
    ConcurrentModificationError,
    TaskAlreadyCompletedError,
)
from .repository import TimelineRepository
from .tracker import TaskTracker

logger = logging.getLogger(__name__)

# Actor recorded on tasks completed through an approved submission
APPROVED_AUTOMATION_ACTOR = "ai_agent_approved"


class ApprovalGate:
    """Holds pending AI content until a reviewer approves or rejects it"""

    def __init__(self, db: Session, tracker: TaskTracker, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.tracker = tracker
        self.clock = clock
        self.repo = TimelineRepository()

    def get_approval(self, approval_id: str) -> TaskApproval:
        approval = self.repo.get_approval(self.db, approval_id)
        if not approval:
            raise ApprovalNotFoundError(approval_id)
        return approval

    def list_pending(self, session_id: Optional[str] = None) -> list[TaskApproval]:
        return self.repo.get_pending_approvals(self.db, session_id)

    def submit(
        self,
        task_id: str,
        content: Any,
        content_type: str = "email",
        metadata: Optional[dict[str, Any]] = None,
    ) -> TaskApproval:
        """
        Submit generated content for a task.

        A task has at most one open request: resubmitting overwrites the
        open request instead of adding another one.

        Raises:
            TaskNotFoundError: Unknown task
            TaskAlreadyCompletedError: The task is already done
            ApprovalNotRequiredError: The task should be completed directly
            ConcurrentModificationError: Another submission for the task won the race
        """
        task = self.tracker.get_task(task_id)

        if task.is_completed:
            raise TaskAlreadyCompletedError(task_id)
        if not task.approval_required:
            raise ApprovalNotRequiredError(task_id)

        now = self.clock()
        approval = self.repo.get_open_approval(self.db, task_id)
        if approval:
            approval.generated_content = content
            approval.content_type = content_type
            approval.metadata_ = metadata or {}
            approval.submitted_at = now
            approval.revision_count = (approval.revision_count or 0) + 1
            logger.info(
                f"🔁 Superseded open approval {approval.id} for task {task_id} "
                f"(revision {approval.revision_count})"
            )
        else:
            approval = TaskApproval(
                task_id=task_id,
                generated_content=content,
                content_type=content_type,
                metadata_=metadata or {},
                approval_status=APPROVAL_PENDING_REVIEW,
                submitted_at=now,
                revision_count=0,
            )
            self.db.add(approval)
            logger.info(f"📨 New {content_type} approval request for task {task_id}")

        task.automation_status = AUTOMATION_PENDING_APPROVAL
        try:
            self.repo.commit(self.db)
        except IntegrityError as e:
            # A concurrent submission opened the request first
            logger.warning(f"⚠️ Concurrent approval submission for task {task_id}: {e.orig}")
            raise ConcurrentModificationError(
                f"Another approval request for task '{task_id}' was submitted concurrently; reload and retry"
            ) from e
        self.db.refresh(approval)
        return approval

    def resolve(
        self,
        approval_id: str,
        approved: bool,
        reviewed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SessionTask:
        """
        Record a reviewer decision and advance the task.

        Approval completes the task as APPROVED_AUTOMATION_ACTOR; rejection
        returns it to the automation queue. Repeating a decision that was
        already recorded returns the task unchanged.
        """
        approval = self.get_approval(approval_id)
        decision = APPROVAL_APPROVED if approved else APPROVAL_REJECTED

        if approval.approval_status != APPROVAL_PENDING_REVIEW:
            if approval.approval_status == decision:
                logger.info(f"ℹ️ Approval {approval_id} already {decision}, no-op")
                return self.tracker.get_task(approval.task_id)
            raise ApprovalAlreadyResolvedError(approval_id, approval.approval_status)

        approval.approval_status = decision
        approval.reviewed_by = reviewed_by
        approval.review_notes = notes
        approval.reviewed_at = self.clock()

        if approved:
            # The decision is committed together with the completion; the
            # second commit only matters when the task was already done
            task = self.tracker.set_completion(approval.task_id, True, APPROVED_AUTOMATION_ACTOR)
            self.repo.commit(self.db)
            logger.info(f"👍 Approval {approval_id} approved by {reviewed_by or 'reviewer'}")
            return task

        task = self.tracker.get_task(approval.task_id)
        if not task.is_completed:
            task.automation_status = AUTOMATION_PENDING
        self.repo.commit(self.db)
        self.db.refresh(task)

        logger.info(f"👎 Approval {approval_id} rejected by {reviewed_by or 'reviewer'}, task back in queue")
        return task
