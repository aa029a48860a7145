"""Tests for the owner-or-admin status change guard."""

from unittest.mock import MagicMock

import pytest

from incident_core.auth.rbac import authorize_status_change, can_change_status, is_admin
from incident_core.engine.errors import Unauthorized


def _make_user(user_id="u-1", role="RESPONDER"):
    """Create a mock User ORM object."""
    user = MagicMock()
    user.id = user_id
    user.role = role
    return user


def _make_incident(incident_id="inc-1", owner_id="u-1"):
    incident = MagicMock()
    incident.id = incident_id
    incident.owner_id = owner_id
    return incident


class TestCanChangeStatus:
    def test_owner_allowed(self):
        assert can_change_status(_make_user("u-1"), _make_incident(owner_id="u-1"))

    def test_admin_allowed_on_any_incident(self):
        admin = _make_user("u-9", role="ADMIN")
        assert is_admin(admin)
        assert can_change_status(admin, _make_incident(owner_id="u-1"))

    @pytest.mark.parametrize("role", ["RESPONDER", "VIEWER", "admin"])
    def test_non_owner_non_admin_denied(self, role):
        assert not can_change_status(_make_user("u-2", role=role), _make_incident(owner_id="u-1"))


class TestAuthorizeStatusChange:
    def test_passes_silently_for_owner(self):
        authorize_status_change(_make_user("u-1"), _make_incident(owner_id="u-1"))

    def test_raises_with_context(self):
        with pytest.raises(Unauthorized) as exc_info:
            authorize_status_change(_make_user("u-2"), _make_incident("inc-7", owner_id="u-1"))

        err = exc_info.value
        assert err.user_id == "u-2"
        assert err.incident_id == "inc-7"
        assert err.to_dict()["code"] == "UNAUTHORIZED"
