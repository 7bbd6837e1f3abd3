"""Timeline domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import ensure_utc, validate_label

# Offsets beyond ten years are treated as template mistakes
MAX_OFFSET_DAYS = 3650


class TaskDef(BaseModel):
    """One task definition inside a template"""

    name: str
    offsetDays: int = Field(ge=-MAX_OFFSET_DAYS, le=MAX_OFFSET_DAYS)  # Signed days from the session date
    order: int
    canAutomate: bool = False
    approvalRequired: bool = False
    estimatedHours: float = Field(0.0, allow_inf_nan=False)
    requiresHuman: bool = False
    canBatch: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_label(v, "Task name")

    @field_validator("estimatedHours")
    @classmethod
    def validate_hours(cls, v):
        if v < 0:
            raise ValueError("estimatedHours must not be negative")
        return v


class TimelineTemplateIn(BaseModel):
    """Schema for creating or replacing a template"""

    sessionType: str
    templateName: Optional[str] = None
    tasks: list[TaskDef]

    @field_validator("sessionType")
    @classmethod
    def validate_session_type(cls, v):
        return validate_label(v, "Session type", max_length=100)

    @field_validator("tasks")
    @classmethod
    def validate_tasks(cls, v):
        if not v:
            raise ValueError("A template must contain at least one task")

        orders = [task.order for task in v]
        duplicates = sorted({o for o in orders if orders.count(o) > 1})
        if duplicates:
            raise ValueError(f"Task order values must be unique (duplicated: {duplicates})")

        return sorted(v, key=lambda task: task.order)

    @model_validator(mode="after")
    def default_template_name(self):
        if not self.templateName or not self.templateName.strip():
            self.templateName = f"{self.sessionType} Standard Timeline"
        return self


class TimelineTemplateResponse(BaseModel):
    sessionType: str
    templateName: str
    tasks: list[TaskDef]
    updatedAt: Optional[datetime] = None

    @field_validator("updatedAt")
    @classmethod
    def normalize_timestamp(cls, v):
        return ensure_utc(v)


class TemplateBody(BaseModel):
    """Template payload when the session type comes from the URL.

    Tasks stay loosely typed here so the store's validation reports
    every problem as an InvalidTemplateError.
    """

    templateName: Optional[str] = None
    tasks: list[dict[str, Any]]


class TaskInstanceResponse(BaseModel):
    """Schema for task instance response"""

    id: str
    sessionId: str
    taskName: str
    calculatedDate: date
    adjustedDate: date
    offsetDays: int
    order: int
    canAutomate: bool
    approvalRequired: bool
    estimatedHours: float
    requiresHuman: bool
    canBatch: bool
    isCompleted: bool
    completedAt: Optional[datetime] = None
    completedBy: Optional[str] = None
    automationStatus: str
    version: int

    @field_validator("completedAt")
    @classmethod
    def normalize_timestamp(cls, v):
        return ensure_utc(v)

    @classmethod
    def from_task(cls, task) -> "TaskInstanceResponse":
        return cls(
            id=task.id,
            sessionId=task.session_id,
            taskName=task.task_name,
            calculatedDate=task.calculated_date,
            adjustedDate=task.adjusted_date,
            offsetDays=task.offset_days,
            order=task.task_order,
            canAutomate=task.can_automate,
            approvalRequired=task.approval_required,
            estimatedHours=task.estimated_hours,
            requiresHuman=task.requires_human,
            canBatch=task.can_batch,
            isCompleted=task.is_completed,
            completedAt=task.completed_at,
            completedBy=task.completed_by,
            automationStatus=task.automation_status,
            version=task.version,
        )


class ApprovalResponse(BaseModel):
    """Schema for approval request response"""

    id: str
    taskId: str
    generatedContent: Any
    contentType: str
    metadata: dict[str, Any]
    approvalStatus: str
    submittedAt: datetime
    revisionCount: int
    reviewedBy: Optional[str] = None
    reviewNotes: Optional[str] = None
    reviewedAt: Optional[datetime] = None

    @field_validator("submittedAt", "reviewedAt")
    @classmethod
    def normalize_timestamp(cls, v):
        return ensure_utc(v)

    @classmethod
    def from_approval(cls, approval) -> "ApprovalResponse":
        return cls(
            id=approval.id,
            taskId=approval.task_id,
            generatedContent=approval.generated_content,
            contentType=approval.content_type,
            metadata=approval.metadata_ or {},
            approvalStatus=approval.approval_status,
            submittedAt=approval.submitted_at,
            revisionCount=approval.revision_count,
            reviewedBy=approval.reviewed_by,
            reviewNotes=approval.review_notes,
            reviewedAt=approval.reviewed_at,
        )


class GenerateTimelineRequest(BaseModel):
    sessionType: str
    sessionDate: date


class RescheduleRequest(BaseModel):
    sessionDate: date


class CompletionRequest(BaseModel):
    completed: bool
    actor: Optional[str] = None
    expectedVersion: Optional[int] = None

    @field_validator("actor")
    @classmethod
    def validate_actor(cls, v):
        if v is None:
            return v
        return validate_label(v, "Actor")


class AdjustTaskDateRequest(BaseModel):
    adjustedDate: date
    expectedVersion: Optional[int] = None


class SubmitApprovalRequest(BaseModel):
    """Schema for automation worker content submission"""

    taskId: str
    content: Any
    contentType: str = "email"
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        if v is None or v == "" or v == {}:
            raise ValueError("Generated content is required")
        return v

    @field_validator("contentType")
    @classmethod
    def validate_content_type(cls, v):
        return validate_label(v, "Content type", max_length=50)


class ResolveApprovalRequest(BaseModel):
    approved: bool
    reviewedBy: Optional[str] = None
    notes: Optional[str] = None


class ClientRef(BaseModel):
    """Client identity used only for display"""

    id: str
    displayName: str


class TaskSummary(BaseModel):
    id: str
    name: str
    dueDate: date
    order: int
    canAutomate: bool


class CompletedTaskSummary(BaseModel):
    id: str
    name: str
    completedAt: Optional[datetime] = None
    completedBy: Optional[str] = None

    @field_validator("completedAt")
    @classmethod
    def normalize_timestamp(cls, v):
        return ensure_utc(v)


class SessionSummary(BaseModel):
    id: str
    sessionType: str
    sessionDate: date


class TimelineContext(BaseModel):
    """Read-only view of a session's timeline for dashboards and chat assistants"""

    session: SessionSummary
    client: Optional[ClientRef] = None
    phase: str
    daysUntilSession: int
    progressPercentage: int
    completedTasks: int
    totalTasks: int
    upcomingCount: int
    overdueCount: int
    nextTask: Optional[TaskSummary] = None
    overdueTasks: list[TaskSummary] = Field(default_factory=list)
    recentlyCompleted: list[CompletedTaskSummary] = Field(default_factory=list)
