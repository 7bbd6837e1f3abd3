import pytest

from studio.domain.timeline.approval_gate import APPROVED_AUTOMATION_ACTOR
from studio.domain.timeline.errors import (
    ApprovalAlreadyResolvedError,
    ApprovalNotFoundError,
    ApprovalNotRequiredError,
    ConcurrentModificationError,
    TaskAlreadyCompletedError,
)
from studio.models import (
    APPROVAL_APPROVED,
    APPROVAL_PENDING_REVIEW,
    APPROVAL_REJECTED,
    AUTOMATION_COMPLETED,
    AUTOMATION_PENDING,
    AUTOMATION_PENDING_APPROVAL,
    TaskApproval,
)
from studio.shared.validators import ensure_utc

EMAIL = {"subject": "Getting ready for your portrait session", "body": "Here is your style guide..."}


@pytest.fixture
def style_guide(portrait_tasks):
    """The approval-gated task of the Portrait timeline"""
    return portrait_tasks[1]


def test_approve_flow_sequences_statuses(portrait, style_guide):
    assert style_guide.automation_status == AUTOMATION_PENDING

    approval = portrait.submit_approval(style_guide.id, EMAIL, "email", {"tone": "warm"})
    assert approval.approval_status == APPROVAL_PENDING_REVIEW
    assert approval.metadata_ == {"tone": "warm"}
    assert portrait.tracker.get_task(style_guide.id).automation_status == AUTOMATION_PENDING_APPROVAL

    task = portrait.resolve_approval(approval.id, True, reviewed_by="jane", notes="Looks great")

    assert task.is_completed is True
    assert task.automation_status == AUTOMATION_COMPLETED
    assert task.completed_by == APPROVED_AUTOMATION_ACTOR

    resolved = portrait.approvals.get_approval(approval.id)
    assert resolved.approval_status == APPROVAL_APPROVED
    assert resolved.reviewed_by == "jane"
    assert resolved.review_notes == "Looks great"
    assert resolved.reviewed_at is not None


def test_reject_returns_task_to_queue(portrait, style_guide):
    approval = portrait.submit_approval(style_guide.id, EMAIL)

    task = portrait.resolve_approval(approval.id, False, reviewed_by="jane")

    assert task.is_completed is False
    assert task.automation_status == AUTOMATION_PENDING
    assert portrait.approvals.get_approval(approval.id).approval_status == APPROVAL_REJECTED
    assert style_guide.id in [t.id for t in portrait.list_automatable()]


def test_task_awaiting_approval_stays_in_queue(portrait, style_guide):
    portrait.submit_approval(style_guide.id, EMAIL)

    assert style_guide.id in [t.id for t in portrait.list_automatable()]


def test_resubmission_supersedes_open_request(portrait, style_guide, clock, db):
    first = portrait.submit_approval(style_guide.id, EMAIL)
    first_submitted = ensure_utc(first.submitted_at)

    clock.advance(minutes=30)
    second = portrait.submit_approval(style_guide.id, {"subject": "Revised", "body": "..."})

    assert second.id == first.id
    assert second.revision_count == 1
    assert second.generated_content["subject"] == "Revised"
    assert ensure_utc(second.submitted_at) > first_submitted
    assert db.query(TaskApproval).count() == 1


def test_resubmission_after_rejection_opens_new_request(portrait, style_guide, db):
    rejected = portrait.submit_approval(style_guide.id, EMAIL)
    portrait.resolve_approval(rejected.id, False)

    fresh = portrait.submit_approval(style_guide.id, EMAIL)

    assert fresh.id != rejected.id
    assert fresh.revision_count == 0
    assert db.query(TaskApproval).count() == 2


def test_submit_for_task_without_approval(portrait, portrait_tasks):
    with pytest.raises(ApprovalNotRequiredError):
        portrait.submit_approval(portrait_tasks[0].id, EMAIL)


def test_submit_for_completed_task(portrait, style_guide):
    portrait.set_completion(style_guide.id, True, "admin")

    with pytest.raises(TaskAlreadyCompletedError):
        portrait.submit_approval(style_guide.id, EMAIL)


def test_resolve_unknown_approval(portrait):
    with pytest.raises(ApprovalNotFoundError):
        portrait.resolve_approval("missing", True)


def test_repeating_a_decision_is_a_no_op(portrait, style_guide):
    approval = portrait.submit_approval(style_guide.id, EMAIL)
    first = portrait.resolve_approval(approval.id, True)
    version = first.version

    again = portrait.resolve_approval(approval.id, True)

    assert again.is_completed is True
    assert again.version == version


def test_opposite_decision_is_rejected(portrait, style_guide):
    approval = portrait.submit_approval(style_guide.id, EMAIL)
    portrait.resolve_approval(approval.id, True)

    with pytest.raises(ApprovalAlreadyResolvedError) as exc_info:
        portrait.resolve_approval(approval.id, False)

    assert exc_info.value.status == APPROVAL_APPROVED


def test_reject_after_manual_completion_leaves_task_done(portrait, style_guide):
    approval = portrait.submit_approval(style_guide.id, EMAIL)
    portrait.set_completion(style_guide.id, True, "admin")

    task = portrait.resolve_approval(approval.id, False)

    assert task.is_completed is True
    assert task.completed_by == "admin"
    assert task.automation_status == AUTOMATION_COMPLETED


def test_approve_after_manual_completion_keeps_original_actor(portrait, style_guide):
    approval = portrait.submit_approval(style_guide.id, EMAIL)
    portrait.set_completion(style_guide.id, True, "admin")

    task = portrait.resolve_approval(approval.id, True)

    assert task.completed_by == "admin"
    assert portrait.approvals.get_approval(approval.id).approval_status == APPROVAL_APPROVED


def test_pending_queue_oldest_first(portrait, portrait_tasks, clock):
    first = portrait.submit_approval(portrait_tasks[1].id, EMAIL)

    other_session = portrait.generate_timeline("session-2", "Portrait Session", portrait_tasks[0].calculated_date)
    clock.advance(minutes=5)
    second = portrait.submit_approval(other_session[1].id, EMAIL)

    assert [a.id for a in portrait.list_pending_approvals()] == [first.id, second.id]
    assert [a.id for a in portrait.list_pending_approvals("session-2")] == [second.id]

    portrait.resolve_approval(first.id, True)
    assert [a.id for a in portrait.list_pending_approvals()] == [second.id]


def test_losing_a_concurrent_first_submission_is_retryable(portrait, style_guide, db):
    winner = portrait.submit_approval(style_guide.id, EMAIL)
    # The second submitter looked for an open request before the winner committed
    portrait.approvals.repo.get_open_approval = lambda _db, _task_id: None

    with pytest.raises(ConcurrentModificationError):
        portrait.submit_approval(style_guide.id, {"subject": "Other draft"})

    pending = db.query(TaskApproval).filter_by(approval_status=APPROVAL_PENDING_REVIEW).all()
    assert [a.id for a in pending] == [winner.id]
    assert pending[0].revision_count == 0
