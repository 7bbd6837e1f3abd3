"""Timeline domain errors

Each error carries the HTTP status the API answers with. Only
ConcurrentModificationError is meant to be retried by callers.
"""


class TimelineError(Exception):
    """Base class for timeline engine errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoTemplateError(TimelineError):
    """No template is defined for the session type"""

    status_code = 422

    def __init__(self, session_type: str):
        super().__init__(f"No timeline template for session type '{session_type}'")
        self.session_type = session_type


class InvalidTemplateError(TimelineError):
    status_code = 422


class TimelineNotFoundError(TimelineError):
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(f"No timeline generated for session '{session_id}'")
        self.session_id = session_id


class TaskNotFoundError(TimelineError):
    status_code = 404

    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class TaskAlreadyCompletedError(TimelineError):
    status_code = 409

    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' is already completed")
        self.task_id = task_id


class ApprovalNotRequiredError(TimelineError):
    """The task can be completed directly, without review"""

    status_code = 400

    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' does not require approval; complete it directly")
        self.task_id = task_id


class ApprovalNotFoundError(TimelineError):
    status_code = 404

    def __init__(self, approval_id: str):
        super().__init__(f"Approval request '{approval_id}' not found")
        self.approval_id = approval_id


class ApprovalAlreadyResolvedError(TimelineError):
    status_code = 409

    def __init__(self, approval_id: str, status: str):
        super().__init__(f"Approval request '{approval_id}' was already {status}")
        self.approval_id = approval_id
        self.status = status


class ConcurrentModificationError(TimelineError):
    """A write targeted a stale version; reload and retry"""

    status_code = 409


class DateOutOfRangeError(TimelineError):
    """A session date plus a task offset falls outside the supported calendar"""

    status_code = 422

    def __init__(self, session_date, offset_days: int):
        super().__init__(
            f"Session date {session_date} with offset {offset_days:+d} days is outside the supported calendar"
        )
        self.session_date = session_date
        self.offset_days = offset_days
