"""Severity to SLA target mapping."""

from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any

from ..models.enums import Severity
from .errors import InvalidSeverity

SLA_TARGET_MINUTES = MappingProxyType({
    Severity.LOW: 240,
    Severity.MEDIUM: 120,
    Severity.HIGH: 60,
    Severity.CRITICAL: 15,
})


def sla_target_for(severity: Any) -> int:
    """Return the SLA target in minutes, or raise InvalidSeverity."""
    try:
        minutes = SLA_TARGET_MINUTES.get(Severity(severity), 0)
    except ValueError:
        raise InvalidSeverity(severity) from None
    if not minutes:
        raise InvalidSeverity(severity)
    return minutes


def sla_due_at(incident) -> datetime:
    """When the running SLA clock of ``incident`` runs out."""
    return incident.current_sla_start_at + timedelta(minutes=incident.sla_target_minutes)
