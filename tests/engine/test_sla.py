"""Tests for the severity to SLA target table."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from incident_core.engine.errors import InvalidSeverity
from incident_core.engine.sla import SLA_TARGET_MINUTES, sla_due_at, sla_target_for
from incident_core.models.enums import Severity


@pytest.mark.parametrize("severity,minutes", [
    (Severity.LOW, 240),
    (Severity.MEDIUM, 120),
    (Severity.HIGH, 60),
    (Severity.CRITICAL, 15),
    ("CRITICAL", 15),
])
def test_sla_target_for_known_severities(severity, minutes):
    assert sla_target_for(severity) == minutes


@pytest.mark.parametrize("severity", ["URGENT", "low", "", None, 0])
def test_sla_target_for_rejects_unknown(severity):
    with pytest.raises(InvalidSeverity) as exc_info:
        sla_target_for(severity)
    assert exc_info.value.severity == severity
    assert not exc_info.value.retryable


def test_table_is_read_only():
    with pytest.raises(TypeError):
        SLA_TARGET_MINUTES[Severity.LOW] = 1


def test_sla_due_at():
    start = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    incident = SimpleNamespace(current_sla_start_at=start, sla_target_minutes=15)
    assert sla_due_at(incident) == start + timedelta(minutes=15)
