"""
Name: Prometheus Metrics

Responsibilities:
  - Define Prometheus counters for identity and lifecycle events
  - Expose the registry in text exposition format

Collaborators:
  - identity/identity_service.py: login outcomes
  - application/task_service.py: denials and status transitions

Constraints:
  - Low cardinality labels only (outcome, operation, status; never user ids)

Notes:
  - Metrics live in a private CollectorRegistry so tests can import freely
  - Recording is skipped when settings.metrics_enabled is False
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest
from pydantic import ValidationError

from .config import get_settings

_registry = CollectorRegistry()

_logins_total = Counter(
    "crm_logins_total",
    "Login attempts by outcome",
    ["outcome"],
    registry=_registry,
)

_authz_denials_total = Counter(
    "crm_authz_denials_total",
    "Operations denied by role checks",
    ["operation"],
    registry=_registry,
)

_task_transitions_total = Counter(
    "crm_task_transitions_total",
    "Task status transitions",
    ["from_status", "to_status"],
    registry=_registry,
)


def _enabled() -> bool:
    try:
        return get_settings().metrics_enabled
    except ValidationError:
        return True


def record_login(success: bool) -> None:
    """R: Count a login attempt."""
    if not _enabled():
        return
    _logins_total.labels(outcome="success" if success else "failure").inc()


def record_denial(operation: str) -> None:
    """R: Count an authorization denial for an operation name."""
    if not _enabled():
        return
    _authz_denials_total.labels(operation=operation).inc()


def record_transition(from_status: str, to_status: str) -> None:
    """R: Count a task status transition."""
    if not _enabled():
        return
    _task_transitions_total.labels(
        from_status=from_status, to_status=to_status
    ).inc()


def get_metrics_text() -> bytes:
    """R: Render the registry (Prometheus text format)."""
    return generate_latest(_registry)


def get_sample_value(name: str, labels: dict[str, str]) -> float | None:
    """R: Read a single sample (tests / diagnostics)."""
    return _registry.get_sample_value(name, labels)
