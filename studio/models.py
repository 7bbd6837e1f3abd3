import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


# Automation status workflow: pending → pending_approval → completed
AUTOMATION_PENDING = "pending"
AUTOMATION_PENDING_APPROVAL = "pending_approval"
AUTOMATION_COMPLETED = "completed"

# Approval workflow: pending_review → approved | rejected
APPROVAL_PENDING_REVIEW = "pending_review"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"


class TimelineTemplate(Base):
    """Canonical ordered task list for one session type"""

    __tablename__ = "timeline_templates"

    id = Column(Integer, primary_key=True, index=True)
    session_type = Column(String(100), unique=True, index=True, nullable=False)
    template_name = Column(String(255), nullable=False)
    # Validated list of task definitions, stored sorted by "order"
    tasks = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SessionTimeline(Base):
    """Ownership record marking that a session's timeline has been generated.

    The unique session_id is what makes generation race-free: two callers
    generating concurrently cannot both commit this row.
    """

    __tablename__ = "session_timelines"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), unique=True, index=True, nullable=False)
    session_type = Column(String(100), nullable=False)
    session_date = Column(Date, nullable=False)  # Kept in sync by reschedule
    template_name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    tasks = relationship(
        "SessionTask",
        back_populates="timeline",
        cascade="all, delete-orphan",
        order_by="SessionTask.task_order",
    )


class SessionTask(Base):
    """One dated task instance belonging to one session"""

    __tablename__ = "session_tasks"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    session_id = Column(
        String(64),
        ForeignKey("session_timelines.session_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    task_name = Column(String(255), nullable=False)
    task_order = Column(Integer, nullable=False)
    offset_days = Column(Integer, nullable=False)

    # Due dates are calendar dates, never datetimes
    calculated_date = Column(Date, nullable=False)
    adjusted_date = Column(Date, nullable=False)

    can_automate = Column(Boolean, default=False, nullable=False)
    approval_required = Column(Boolean, default=False, nullable=False)
    estimated_hours = Column(Float, default=0.0, nullable=False)
    requires_human = Column(Boolean, default=False, nullable=False)
    can_batch = Column(Boolean, default=False, nullable=False)

    # Status workflow: pending → pending_approval → completed
    automation_status = Column(String(32), default=AUTOMATION_PENDING, nullable=False, index=True)
    is_completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completed_by = Column(String(255), nullable=True)  # "ai_agent", "admin", reviewer id...

    # Optimistic concurrency stamp, bumped by SQLAlchemy on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    timeline = relationship("SessionTimeline", back_populates="tasks")
    approvals = relationship(
        "TaskApproval",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskApproval.submitted_at",
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_session_tasks_session_order", "session_id", "task_order", unique=True),
    )


class TaskApproval(Base):
    """AI-generated content waiting on human review before a task completes"""

    __tablename__ = "ai_task_approvals"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    task_id = Column(
        String(36), ForeignKey("session_tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    generated_content = Column(JSON, nullable=False)
    content_type = Column(String(50), default="email", nullable=False)
    metadata_ = Column("metadata", JSON, default=dict, nullable=False)

    # pending_review → approved | rejected
    approval_status = Column(String(32), default=APPROVAL_PENDING_REVIEW, nullable=False, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    revision_count = Column(Integer, default=0, nullable=False)  # Times the open request was superseded

    # Review audit trail
    reviewed_by = Column(String(255), nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    task = relationship("SessionTask", back_populates="approvals")

    __table_args__ = (
        # At most one open request per task
        Index(
            "uq_ai_task_approvals_open_per_task",
            "task_id",
            unique=True,
            postgresql_where=text("approval_status = 'pending_review'"),
            sqlite_where=text("approval_status = 'pending_review'"),
        ),
    )
