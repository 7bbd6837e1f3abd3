"""
API endpoints polled by the external automation worker
The worker pulls open automatable tasks, submits generated content for
review, and reports tasks it completed on its own.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..domain.timeline.router import get_timeline_service
from ..domain.timeline.schemas import (
    ApprovalResponse,
    CompletionRequest,
    SubmitApprovalRequest,
    TaskInstanceResponse,
)
from ..domain.timeline.service import TimelineService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/automation", tags=["automation"])

# Actor recorded when the worker completes a task without review
DEFAULT_AUTOMATION_ACTOR = "ai_agent"


class AutomationQueue(BaseModel):
    count: int
    tasks: list[TaskInstanceResponse]


@router.get("/tasks", response_model=AutomationQueue)
async def list_automatable_tasks(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    service: TimelineService = Depends(get_timeline_service),
):
    """Open automatable tasks, earliest due first"""
    tasks = service.list_automatable(session_id)
    return AutomationQueue(count=len(tasks), tasks=[TaskInstanceResponse.from_task(t) for t in tasks])


@router.post("/approvals", response_model=ApprovalResponse)
async def submit_for_approval(
    data: SubmitApprovalRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Submit generated content for human review"""
    approval = service.submit_approval(data.taskId, data.content, data.contentType, data.metadata)
    return ApprovalResponse.from_approval(approval)


@router.put("/tasks/{task_id}/completion", response_model=TaskInstanceResponse)
async def report_completion(
    task_id: str,
    data: CompletionRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Report a task the worker executed (or re-open it)"""
    task = service.set_completion(
        task_id, data.completed, data.actor or DEFAULT_AUTOMATION_ACTOR, data.expectedVersion
    )
    return TaskInstanceResponse.from_task(task)
