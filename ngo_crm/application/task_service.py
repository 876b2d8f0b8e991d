"""
===============================================================================
APPLICATION SERVICE: Task/Feedback Lifecycle Manager
===============================================================================

Name:
    TaskLifecycleManager

Business Goal:
    Own the feedback task collection: move tasks through their status
    lifecycle, (re)assign them, create them from drafts or beneficiary
    feedback, and compute list views and statistics.

Responsibilities:
    - Enforce the status state machine (closed is terminal).
    - Re-check the acting role inside every mutation.
    - Stamp updated_at on every mutation.
    - Filter (stable, AND semantics) and compute fresh statistics.
    - Release assignments of deleted users ("Unassigned" sentinel).

Collaborators:
    - domain.repositories.TaskRepository
    - domain.permissions: can_edit / can_delete_tasks / can_submit_feedback
    - domain.task_lifecycle: can_transition, filter_tasks, compute_stats
    - application.feedback.FeedbackSubmission
    - application.results: TaskResult / ErrorCode
    - crosscutting: logger, metrics

Error Mapping:
    - FORBIDDEN: acting role lacks the permission for the operation
    - VALIDATION_ERROR: unknown status, blank assignee, invalid draft/feedback
    - NOT_FOUND: unknown task id (collection unchanged)
    - INVALID_TRANSITION: task is closed
===============================================================================
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_denial, record_transition
from ..domain import permissions
from ..domain.entities import (
    ANONYMOUS_REPORTER,
    UNASSIGNED,
    Role,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    User,
)
from ..domain.repositories import TaskRepository
from ..domain.task_lifecycle import (
    TaskFilter,
    TaskStats,
    can_transition,
    compute_stats,
    filter_tasks,
    next_reference,
    parse_status,
)
from .feedback import FeedbackSubmission
from .results import ErrorCode, TaskResult, failure

ActingRole = Role | str | None


class TaskDraft(BaseModel):
    """Task created directly from the task manager (editors only)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    type: TaskType = TaskType.PROGRAMMATIC
    assignee: str = UNASSIGNED
    reporter: str = ANONYMOUS_REPORTER
    due_date: Optional[date] = None
    project: str = ""
    location: str = ""
    age: Optional[int] = Field(default=None, ge=1, le=120)
    gender: Optional[str] = None


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


class TaskLifecycleManager:
    """
    Application service over the task repository.

    Args:
        tasks: Task repository (collection provided at startup)
        today: Clock returning the current date
        default_due_days: Due window for submitted feedback
    """

    def __init__(
        self,
        tasks: TaskRepository,
        *,
        today: Callable[[], date] = date.today,
        default_due_days: int = 7,
    ) -> None:
        self._tasks = tasks
        self._today = today
        self._default_due_days = default_due_days

    # =========================================================================
    # Queries
    # =========================================================================

    def list_tasks(self) -> List[Task]:
        return self._tasks.list_tasks()

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get_task(task_id)

    def filter(
        self,
        tasks: Optional[Iterable[Task]] = None,
        criteria: Optional[TaskFilter | Mapping[str, Any]] = None,
        **kwargs: str,
    ) -> List[Task]:
        """
        R: Stable AND filter.

        Defaults to the whole collection. Criteria may be a TaskFilter, a
        mapping (searchTerm or search_term, status, priority, type) or
        keyword arguments.

        Raises:
            ValueError: On unknown criteria keys
        """
        source = self.list_tasks() if tasks is None else tasks
        if criteria is None:
            criteria = TaskFilter.from_mapping(kwargs)
        return filter_tasks(source, criteria)

    def compute_stats(self, tasks: Optional[Iterable[Task]] = None) -> TaskStats:
        source = self.list_tasks() if tasks is None else tasks
        return compute_stats(source, self._today())

    # =========================================================================
    # Commands
    # =========================================================================

    def update_status(
        self, task_id: str, new_status: TaskStatus | str, *, actor_role: ActingRole
    ) -> TaskResult:
        """
        R: Move a task to new_status.

        Same-status updates are accepted and only refresh updated_at.
        """
        if not permissions.can_edit(actor_role):
            return self._forbidden("update_status", "You do not have permission to edit tasks.")

        try:
            target = parse_status(new_status)
        except ValueError:
            return TaskResult(
                error=failure(ErrorCode.VALIDATION_ERROR, f"Unknown status: {new_status}.")
            )

        task = self._tasks.get_task(task_id)
        if task is None:
            return self._not_found(task_id)

        if not can_transition(task.status, target):
            logger.warning(
                "Rejected transition out of terminal status",
                extra={"task_id": task_id, "from_status": task.status.value, "to_status": target.value},
            )
            return TaskResult(
                error=failure(
                    ErrorCode.INVALID_TRANSITION,
                    f"Task {task_id} is {task.status.value} and cannot change status.",
                )
            )

        previous = task.status
        task.status = target
        task.touch(self._today())
        self._tasks.save_task(task)

        record_transition(previous.value, target.value)
        logger.info(
            "Task status updated",
            extra={"task_id": task_id, "from_status": previous.value, "to_status": target.value},
        )
        return TaskResult(
            task=task, message=f"Task {task_id} status updated to {target.value}"
        )

    def assign_task(
        self, task_id: str, assignee: str, *, actor_role: ActingRole
    ) -> TaskResult:
        if not permissions.can_edit(actor_role):
            return self._forbidden("assign_task", "You do not have permission to edit tasks.")

        assignee = (assignee or "").strip()
        if not assignee:
            return TaskResult(
                error=failure(ErrorCode.VALIDATION_ERROR, "Assignee is required.")
            )

        task = self._tasks.get_task(task_id)
        if task is None:
            return self._not_found(task_id)

        if task.is_closed:
            return TaskResult(
                error=failure(
                    ErrorCode.INVALID_TRANSITION, f"Task {task_id} is closed and cannot be reassigned."
                )
            )

        task.assignee = assignee
        task.touch(self._today())
        self._tasks.save_task(task)
        logger.info("Task assigned", extra={"task_id": task_id})
        return TaskResult(task=task, message=f"Task {task_id} assigned to {assignee}")

    def delete_task(self, task_id: str, *, actor_role: ActingRole) -> TaskResult:
        """R: Admins only (stricter than editing)."""
        if not permissions.can_delete_tasks(actor_role):
            return self._forbidden("delete_task", "Only admins can delete tasks.")

        if not self._tasks.delete_task(task_id):
            return self._not_found(task_id)

        logger.info("Task deleted", extra={"task_id": task_id})
        return TaskResult(message="Task deleted successfully")

    def create_task(
        self, draft: TaskDraft | Mapping[str, Any], *, actor_role: ActingRole
    ) -> TaskResult:
        """R: New tasks always start pending with the next FB-NNN reference."""
        if not permissions.can_edit(actor_role):
            return self._forbidden("create_task", "You do not have permission to add tasks.")

        if not isinstance(draft, TaskDraft):
            try:
                draft = TaskDraft.model_validate(draft)
            except ValidationError as exc:
                return TaskResult(
                    error=failure(ErrorCode.VALIDATION_ERROR, _validation_message(exc))
                )

        today = self._today()
        task = Task(
            id=self._next_reference(),
            title=draft.title,
            description=draft.description,
            status=TaskStatus.PENDING,
            priority=draft.priority,
            type=draft.type,
            assignee=draft.assignee or UNASSIGNED,
            reporter=draft.reporter or ANONYMOUS_REPORTER,
            created_at=today,
            updated_at=today,
            due_date=draft.due_date or today + timedelta(days=self._default_due_days),
            project=draft.project,
            location=draft.location,
            age=draft.age,
            gender=draft.gender,
        )
        self._tasks.add_task(task)
        logger.info("Task created", extra={"task_id": task.id})
        return TaskResult(task=task, message=f"Task {task.id} created")

    def submit_feedback(
        self,
        submission: FeedbackSubmission | Mapping[str, Any],
        *,
        actor: Optional[User],
    ) -> TaskResult:
        """
        R: Turn beneficiary feedback into a pending task (focal persons only).

        Reporter is "Anonymous" for anonymous submissions, otherwise the
        submitting user's name.
        """
        role = actor.role if actor else None
        if not permissions.can_submit_feedback(role):
            return self._forbidden(
                "submit_feedback", "You do not have permission to submit feedback."
            )

        if not isinstance(submission, FeedbackSubmission):
            try:
                submission = FeedbackSubmission.model_validate(submission)
            except ValidationError as exc:
                return TaskResult(
                    error=failure(ErrorCode.VALIDATION_ERROR, _validation_message(exc))
                )

        today = self._today()
        task = Task(
            id=self._next_reference(),
            title=submission.resolved_title(),
            description=submission.details,
            status=TaskStatus.PENDING,
            priority=submission.priority,
            type=submission.feedback_type,
            assignee=UNASSIGNED,
            reporter=ANONYMOUS_REPORTER if submission.anonymous else actor.name,
            created_at=today,
            updated_at=today,
            due_date=today + timedelta(days=self._default_due_days),
            project=submission.project,
            location=submission.location,
            age=submission.age,
            gender=submission.gender.value if submission.gender else None,
        )
        self._tasks.add_task(task)
        logger.info(
            "Feedback submitted",
            extra={"task_id": task.id, "type": task.type.value, "priority": task.priority.value},
        )
        return TaskResult(
            task=task, message=f"Feedback submitted successfully! Reference ID: {task.id}"
        )

    def release_assignments(self, user: User) -> int:
        """
        R: Deletion listener: open tasks assigned to the deleted user's name
        go back to "Unassigned". Closed tasks and reporters keep history.
        """
        released = 0
        today = self._today()
        for task in self._tasks.list_tasks():
            if task.assignee != user.name or task.is_closed:
                continue
            task.assignee = UNASSIGNED
            task.touch(today)
            self._tasks.save_task(task)
            released += 1

        if released:
            logger.info(
                "Released assignments of deleted user",
                extra={"user_id": user.id, "tasks": released},
            )
        return released

    # =========================================================================
    # Private helpers
    # =========================================================================

    def _next_reference(self) -> str:
        return next_reference(t.id for t in self._tasks.list_tasks())

    @staticmethod
    def _forbidden(operation: str, message: str) -> TaskResult:
        record_denial(operation)
        logger.warning("Operation denied", extra={"operation": operation})
        return TaskResult(error=failure(ErrorCode.FORBIDDEN, message))

    @staticmethod
    def _not_found(task_id: str) -> TaskResult:
        logger.info("Task not found", extra={"task_id": task_id})
        return TaskResult(error=failure(ErrorCode.NOT_FOUND, f"Task {task_id} not found."))
