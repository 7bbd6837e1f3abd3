"""Timeline router - FastAPI endpoints for templates, session timelines and reviews"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...cache import Cache, get_cache
from ...database import get_db
from .errors import NoTemplateError
from .schemas import (
    AdjustTaskDateRequest,
    ApprovalResponse,
    ClientRef,
    CompletionRequest,
    GenerateTimelineRequest,
    RescheduleRequest,
    ResolveApprovalRequest,
    TaskInstanceResponse,
    TemplateBody,
    TimelineContext,
    TimelineTemplateResponse,
)
from .service import TimelineService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timeline", tags=["Timeline"])

# Actor recorded when a studio user toggles a task from the dashboard
DEFAULT_ADMIN_ACTOR = "admin"


def get_timeline_service(
    db: Session = Depends(get_db), cache: Cache = Depends(get_cache)
) -> TimelineService:
    """Dependency injection for TimelineService"""
    return TimelineService(db, cache)


# ============================================================================
# TEMPLATES
# ============================================================================


@router.get("/templates", response_model=list[TimelineTemplateResponse])
async def list_templates(service: TimelineService = Depends(get_timeline_service)):
    """List all timeline templates"""
    return service.list_templates()


@router.get("/templates/{session_type}", response_model=TimelineTemplateResponse)
async def get_template(session_type: str, service: TimelineService = Depends(get_timeline_service)):
    """Get the template for a session type"""
    template = service.get_template(session_type)
    if template is None:
        raise HTTPException(status_code=404, detail=f"No timeline template for session type '{session_type}'")
    return template


@router.put("/templates/{session_type}", response_model=TimelineTemplateResponse)
async def put_template(
    session_type: str,
    data: TemplateBody,
    service: TimelineService = Depends(get_timeline_service),
):
    """Create or replace the template for a session type"""
    return service.put_template(
        {"sessionType": session_type, "templateName": data.templateName, "tasks": data.tasks}
    )


@router.delete("/templates/{session_type}")
async def delete_template(session_type: str, service: TimelineService = Depends(get_timeline_service)):
    """Delete a template (existing timelines are kept)"""
    try:
        service.delete_template(session_type)
    except NoTemplateError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return {"message": "Template deleted"}


# ============================================================================
# SESSION TIMELINES
# ============================================================================


@router.post("/sessions/{session_id}", response_model=list[TaskInstanceResponse])
async def generate_timeline(
    session_id: str,
    data: GenerateTimelineRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Generate a session's timeline (returns the existing one if already generated)"""
    tasks = service.generate_timeline(session_id, data.sessionType, data.sessionDate)
    return [TaskInstanceResponse.from_task(t) for t in tasks]


@router.get("/sessions/{session_id}", response_model=list[TaskInstanceResponse])
async def get_timeline(session_id: str, service: TimelineService = Depends(get_timeline_service)):
    """Get a session's timeline in task order"""
    return [TaskInstanceResponse.from_task(t) for t in service.get_timeline(session_id)]


@router.delete("/sessions/{session_id}")
async def delete_timeline(session_id: str, service: TimelineService = Depends(get_timeline_service)):
    """Delete a session's timeline (called when the session itself is deleted)"""
    service.delete_timeline(session_id)
    return {"message": "Timeline deleted"}


@router.post("/sessions/{session_id}/reschedule", response_model=list[TaskInstanceResponse])
async def reschedule_session(
    session_id: str,
    data: RescheduleRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Recompute open task dates after the session date changed"""
    tasks = service.reschedule(session_id, data.sessionDate)
    return [TaskInstanceResponse.from_task(t) for t in tasks]


@router.get("/sessions/{session_id}/context", response_model=TimelineContext)
async def get_session_context(
    session_id: str,
    now: Optional[datetime] = Query(None),
    client_id: Optional[str] = Query(None, alias="clientId"),
    client_name: Optional[str] = Query(None, alias="clientName"),
    service: TimelineService = Depends(get_timeline_service),
):
    """Session phase, progress and next/overdue tasks for dashboards and chat assistants"""
    client = None
    if client_id and client_name:
        client = ClientRef(id=client_id, displayName=client_name)
    return service.get_context(session_id, now, client)


# ============================================================================
# TASKS
# ============================================================================


@router.put("/tasks/{task_id}/completion", response_model=TaskInstanceResponse)
async def set_task_completion(
    task_id: str,
    data: CompletionRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Mark a task completed or re-open it"""
    task = service.set_completion(
        task_id, data.completed, data.actor or DEFAULT_ADMIN_ACTOR, data.expectedVersion
    )
    return TaskInstanceResponse.from_task(task)


@router.patch("/tasks/{task_id}", response_model=TaskInstanceResponse)
async def adjust_task_date(
    task_id: str,
    data: AdjustTaskDateRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Manually move a task's due date"""
    task = service.adjust_task_date(task_id, data.adjustedDate, data.expectedVersion)
    return TaskInstanceResponse.from_task(task)


# ============================================================================
# APPROVALS
# ============================================================================


@router.get("/approvals", response_model=list[ApprovalResponse])
async def list_pending_approvals(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    service: TimelineService = Depends(get_timeline_service),
):
    """Review queue of AI content awaiting approval, oldest first"""
    return [ApprovalResponse.from_approval(a) for a in service.list_pending_approvals(session_id)]


@router.post("/approvals/{approval_id}/resolve", response_model=TaskInstanceResponse)
async def resolve_approval(
    approval_id: str,
    data: ResolveApprovalRequest,
    service: TimelineService = Depends(get_timeline_service),
):
    """Approve or reject submitted content"""
    task = service.resolve_approval(approval_id, data.approved, data.reviewedBy, data.notes)
    return TaskInstanceResponse.from_task(task)
