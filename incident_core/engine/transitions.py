"""Incident status state machine.

The whole legal transition set lives in ``TRANSITIONS``: a map from
``(current, requested)`` to a function deriving the timestamp fields that
change. ``plan_transition`` never raises; it returns either a
``TransitionPlan`` with the field changes or a ``TransitionRejected`` naming
the error, so the table can be exercised without a database.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

from ..models.enums import IncidentStatus
from .errors import IncidentError, InvalidTransition, UnhandledState

FieldDerivation = Callable[[datetime], dict]


def _no_changes(now: datetime) -> dict:
    return {}


def _acknowledge(now: datetime) -> dict:
    return {"acknowledged_at": now}


def _resolve(now: datetime) -> dict:
    return {"resolved_at": now}


def _close(now: datetime) -> dict:
    return {"closed_at": now}


def _reopen(now: datetime) -> dict:
    # Restarts the SLA clock; the incident has to be acknowledged again.
    return {
        "current_sla_start_at": now,
        "acknowledged_at": None,
        "resolved_at": None,
        "closed_at": None,
    }


TRANSITIONS: dict[tuple[IncidentStatus, IncidentStatus], FieldDerivation] = {
    (IncidentStatus.OPEN, IncidentStatus.INVESTIGATING): _acknowledge,
    (IncidentStatus.OPEN, IncidentStatus.DISCARDED): _no_changes,
    (IncidentStatus.INVESTIGATING, IncidentStatus.IDENTIFIED): _no_changes,
    (IncidentStatus.INVESTIGATING, IncidentStatus.DISCARDED): _no_changes,
    (IncidentStatus.IDENTIFIED, IncidentStatus.MITIGATED): _no_changes,
    (IncidentStatus.MITIGATED, IncidentStatus.RESOLVED): _resolve,
    (IncidentStatus.RESOLVED, IncidentStatus.CLOSED): _close,
    (IncidentStatus.RESOLVED, IncidentStatus.INVESTIGATING): _reopen,
    (IncidentStatus.CLOSED, IncidentStatus.INVESTIGATING): _reopen,
}

REOPEN_SOURCES = frozenset({IncidentStatus.RESOLVED, IncidentStatus.CLOSED})

TERMINAL_STATUSES = frozenset({IncidentStatus.DISCARDED})


@dataclass(frozen=True)
class TransitionPlan:
    from_status: IncidentStatus
    to_status: IncidentStatus
    changes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_reopen(self) -> bool:
        return is_reopen(self.from_status, self.to_status)


@dataclass(frozen=True)
class TransitionRejected:
    error: IncidentError


TransitionOutcome = Union[TransitionPlan, TransitionRejected]


def _value(status: Any) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def allowed_targets(status: Any) -> frozenset:
    """Statuses reachable in one step from ``status`` (empty if unknown)."""
    return frozenset(to for (src, to) in TRANSITIONS if src == status)


def is_reopen(from_status: Any, to_status: Any) -> bool:
    return from_status in REOPEN_SOURCES and to_status == IncidentStatus.INVESTIGATING


def plan_transition(current_status: Any, target_status: Any, now: datetime) -> TransitionOutcome:
    """Validate ``current_status -> target_status`` and derive field changes."""
    try:
        source = IncidentStatus(current_status)
    except ValueError:
        return TransitionRejected(UnhandledState(_value(current_status)))

    try:
        target = IncidentStatus(target_status)
    except ValueError:
        return TransitionRejected(InvalidTransition(source.value, _value(target_status)))

    derive = TRANSITIONS.get((source, target))
    if derive is None:
        return TransitionRejected(InvalidTransition(source.value, target.value))
    return TransitionPlan(
        from_status=source, to_status=target, changes=MappingProxyType(derive(now))
    )


def build_status_message(from_status: Any, to_status: Any) -> str:
    """Human-readable SYSTEM_EVENT text for a status change."""
    src, dst = _value(from_status), _value(to_status)
    if is_reopen(from_status, to_status):
        return f"Incident reopened (from {src} to {dst})"
    return f"Status changed from {src} to {dst}"
