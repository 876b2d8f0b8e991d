from .feedback import ContactChannel, FeedbackSubmission, Gender
from .results import ErrorCode, OperationError, TaskResult, UserResult
from .task_service import TaskDraft, TaskLifecycleManager

__all__ = [
    "ContactChannel",
    "ErrorCode",
    "FeedbackSubmission",
    "Gender",
    "OperationError",
    "TaskDraft",
    "TaskLifecycleManager",
    "TaskResult",
    "UserResult",
]
