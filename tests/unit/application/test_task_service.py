"""
Name: TaskLifecycleManager Unit Tests

Responsibilities:
  - Validate status transitions (terminal closed, same-status updates)
  - Validate role re-checks inside every mutation
  - Cover create / assign / delete / feedback submission / assignment release

Collaborators:
  - conftest fixtures: lifecycle, task_repo, five_tasks, focal_user, today
"""

from datetime import date, timedelta

import pytest

from ngo_crm.application.results import ErrorCode
from ngo_crm.application.task_service import TaskDraft, TaskLifecycleManager
from ngo_crm.domain.entities import (
    ANONYMOUS_REPORTER,
    UNASSIGNED,
    Role,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from ngo_crm.domain.task_lifecycle import TaskFilter

pytestmark = pytest.mark.unit


def _feedback(**overrides):
    data = {
        "project": "Education Support Program",
        "feedback_type": "programmatic",
        "details": "The school latrine has been broken for two weeks.",
        "location": "Rural District A",
        "channel": "in_person",
        "priority": "high",
    }
    data.update(overrides)
    return data


# =========================================================================
# update_status
# =========================================================================


class TestUpdateStatus:
    def test_moves_task_and_stamps_updated_at(self, lifecycle, today):
        result = lifecycle.update_status("FB-001", "resolved", actor_role=Role.FOCAL_PERSON)

        assert result.ok
        assert result.message == "Task FB-001 status updated to resolved"
        task = lifecycle.get_task("FB-001")
        assert task.status == TaskStatus.RESOLVED
        assert task.updated_at == today

    def test_same_status_is_idempotent(self, lifecycle):
        lifecycle.update_status("FB-001", TaskStatus.RESOLVED, actor_role=Role.ADMIN)
        snapshot = lifecycle.list_tasks()

        result = lifecycle.update_status("FB-001", TaskStatus.RESOLVED, actor_role=Role.ADMIN)

        assert result.ok
        assert lifecycle.list_tasks() == snapshot

    def test_only_target_task_changes(self, lifecycle, five_tasks):
        lifecycle.update_status("FB-002", "resolved", actor_role=Role.ADMIN)
        after = {t.id: t.status for t in lifecycle.list_tasks()}
        before = {t.id: t.status for t in five_tasks}
        before["FB-002"] = TaskStatus.RESOLVED
        assert after == before

    def test_viewer_is_forbidden(self, lifecycle):
        result = lifecycle.update_status("FB-001", "resolved", actor_role=Role.VIEWER)
        assert result.error.code == ErrorCode.FORBIDDEN
        assert lifecycle.get_task("FB-001").status == TaskStatus.PENDING

    def test_signed_out_is_forbidden(self, lifecycle):
        result = lifecycle.update_status("FB-001", "resolved", actor_role=None)
        assert result.error.code == ErrorCode.FORBIDDEN

    def test_closed_task_cannot_change(self, lifecycle):
        result = lifecycle.update_status("FB-005", "pending", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.INVALID_TRANSITION
        assert lifecycle.get_task("FB-005").status == TaskStatus.CLOSED

    def test_unknown_task_is_not_found(self, lifecycle, five_tasks):
        result = lifecycle.update_status("FB-999", "resolved", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.NOT_FOUND
        assert lifecycle.list_tasks() == five_tasks

    def test_unknown_status_is_validation_error(self, lifecycle):
        result = lifecycle.update_status("FB-001", "archived", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    def test_updated_at_never_before_created_at(self, task_repo, task_factory):
        task_repo.add_task(task_factory("FB-010", created_at=date(2024, 2, 1)))
        manager = TaskLifecycleManager(task_repo, today=lambda: date(2024, 1, 19))

        manager.update_status("FB-010", "in_progress", actor_role=Role.ADMIN)

        task = manager.get_task("FB-010")
        assert task.updated_at >= task.created_at


# =========================================================================
# assign / delete / create
# =========================================================================


class TestAssignTask:
    def test_reassigns_open_task(self, lifecycle, today):
        result = lifecycle.assign_task("FB-001", "Michael Chen", actor_role=Role.ADMIN)
        assert result.ok
        assert lifecycle.get_task("FB-001").assignee == "Michael Chen"
        assert lifecycle.get_task("FB-001").updated_at == today

    def test_blank_assignee_rejected(self, lifecycle):
        result = lifecycle.assign_task("FB-001", "  ", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    def test_closed_task_cannot_be_reassigned(self, lifecycle):
        result = lifecycle.assign_task("FB-005", "Michael Chen", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.INVALID_TRANSITION

    def test_viewer_cannot_assign(self, lifecycle):
        result = lifecycle.assign_task("FB-001", "Mike", actor_role="viewer")
        assert result.error.code == ErrorCode.FORBIDDEN


class TestDeleteTask:
    def test_admin_deletes(self, lifecycle):
        result = lifecycle.delete_task("FB-003", actor_role=Role.ADMIN)
        assert result.ok
        assert result.message == "Task deleted successfully"
        assert lifecycle.get_task("FB-003") is None
        assert len(lifecycle.list_tasks()) == 4

    @pytest.mark.parametrize("role", [Role.FOCAL_PERSON, Role.VIEWER, None])
    def test_non_admin_is_forbidden(self, lifecycle, role):
        result = lifecycle.delete_task("FB-003", actor_role=role)
        assert result.error.code == ErrorCode.FORBIDDEN
        assert lifecycle.get_task("FB-003") is not None

    def test_unknown_task_is_not_found(self, lifecycle):
        result = lifecycle.delete_task("FB-999", actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.NOT_FOUND
        assert len(lifecycle.list_tasks()) == 5


class TestCreateTask:
    def test_creates_pending_task_with_next_reference(self, lifecycle, today):
        result = lifecycle.create_task(
            TaskDraft(title="Broken borehole", priority=TaskPriority.URGENT),
            actor_role=Role.FOCAL_PERSON,
        )

        assert result.ok
        task = result.task
        assert task.id == "FB-006"
        assert task.status == TaskStatus.PENDING
        assert task.assignee == UNASSIGNED
        assert task.created_at == task.updated_at == today
        assert task.due_date == today + timedelta(days=7)
        assert lifecycle.get_task("FB-006") is not None

    def test_accepts_mapping(self, lifecycle):
        result = lifecycle.create_task(
            {"title": "Clinic queue", "type": "sensitive", "due_date": "2024-02-01"},
            actor_role=Role.ADMIN,
        )
        assert result.task.type == TaskType.SENSITIVE
        assert result.task.due_date == date(2024, 2, 1)

    def test_invalid_draft_rejected(self, lifecycle):
        result = lifecycle.create_task({"title": "  "}, actor_role=Role.ADMIN)
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert len(lifecycle.list_tasks()) == 5

    def test_viewer_cannot_create(self, lifecycle):
        result = lifecycle.create_task({"title": "X"}, actor_role=Role.VIEWER)
        assert result.error.code == ErrorCode.FORBIDDEN


# =========================================================================
# submit_feedback
# =========================================================================


class TestSubmitFeedback:
    def test_creates_pending_task(self, lifecycle, focal_user, today):
        result = lifecycle.submit_feedback(_feedback(), actor=focal_user)

        assert result.ok
        task = result.task
        assert result.message == f"Feedback submitted successfully! Reference ID: {task.id}"
        assert task.status == TaskStatus.PENDING
        assert task.priority == TaskPriority.HIGH
        assert task.reporter == "Sarah Focal"
        assert task.assignee == UNASSIGNED
        assert task.due_date == today + timedelta(days=7)
        assert task.title.startswith("The school latrine")

    def test_anonymous_submission_hides_reporter(self, lifecycle, focal_user):
        result = lifecycle.submit_feedback(
            _feedback(anonymous=True, gender="female", age=34), actor=focal_user
        )
        assert result.task.reporter == ANONYMOUS_REPORTER
        assert result.task.gender == "female"
        assert result.task.age == 34

    def test_explicit_title_is_used(self, lifecycle, focal_user):
        result = lifecycle.submit_feedback(
            _feedback(title="Latrine repair"), actor=focal_user
        )
        assert result.task.title == "Latrine repair"

    def test_invalid_submission_rejected(self, lifecycle, focal_user):
        result = lifecycle.submit_feedback(_feedback(details="short"), actor=focal_user)
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert "details" in result.error.message

    @pytest.mark.parametrize("email", ["admin@ngo.org", "viewer@ngo.org"])
    def test_only_focal_persons_submit(self, lifecycle, user_repo, email):
        actor = user_repo.get_user_by_email(email)
        result = lifecycle.submit_feedback(_feedback(), actor=actor)
        assert result.error.code == ErrorCode.FORBIDDEN

    def test_signed_out_cannot_submit(self, lifecycle):
        result = lifecycle.submit_feedback(_feedback(), actor=None)
        assert result.error.code == ErrorCode.FORBIDDEN


# =========================================================================
# Queries and release
# =========================================================================


class TestQueries:
    def test_filter_defaults_to_collection(self, lifecycle):
        assert [t.id for t in lifecycle.filter(status="pending")] == ["FB-001", "FB-004"]

    def test_filter_accepts_criteria_object(self, lifecycle):
        result = lifecycle.filter(criteria=TaskFilter(priority="urgent"))
        assert [t.id for t in result] == ["FB-002"]

    def test_filter_accepts_mapping(self, lifecycle):
        result = lifecycle.filter(criteria={"searchTerm": "healthcare", "status": "pending"})
        assert [t.id for t in result] == ["FB-004"]

    def test_filter_rejects_unknown_criteria(self, lifecycle):
        with pytest.raises(ValueError):
            lifecycle.filter(criteria={"reporter": "Anonymous"})

    def test_stats_are_recomputed(self, lifecycle):
        assert lifecycle.compute_stats().pending == 2
        lifecycle.update_status("FB-001", "in_progress", actor_role=Role.ADMIN)
        stats = lifecycle.compute_stats()
        assert stats.pending == 1
        assert stats.in_progress == 2

    def test_returned_tasks_are_copies(self, lifecycle):
        task = lifecycle.get_task("FB-001")
        task.status = TaskStatus.CLOSED
        assert lifecycle.get_task("FB-001").status == TaskStatus.PENDING


class TestReleaseAssignments:
    def test_open_tasks_return_to_unassigned(self, lifecycle, focal_user):
        released = lifecycle.release_assignments(focal_user)

        assert released == 3
        assignees = {t.id: t.assignee for t in lifecycle.list_tasks()}
        assert assignees["FB-001"] == UNASSIGNED
        assert assignees["FB-003"] == UNASSIGNED
        assert assignees["FB-004"] == UNASSIGNED
        assert assignees["FB-002"] == "Michael Chen"
        assert assignees["FB-005"] == "Sarah Focal"

    def test_no_matches_is_a_no_op(self, lifecycle, user_repo):
        assert lifecycle.release_assignments(user_repo.get_user("3")) == 0
