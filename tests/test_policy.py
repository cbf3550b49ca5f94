"""
Tests for the edit access policy.
"""

import pytest

from salonschedule.domain.exceptions import AuthorizationError
from salonschedule.domain.models import Actor, Role
from salonschedule.domain.policy import AccessPolicy

OWNER = Actor(user_id="u-owner", role=Role.OWNER)
ADMIN = Actor(user_id="u-admin", role=Role.ADMIN, employee_id="emp-9")
MANAGER = Actor(user_id="u-manager", role=Role.MANAGER, employee_id="emp-5")
MASTER = Actor(user_id="u-master", role=Role.MASTER, employee_id="emp-1")


class TestAccessPolicy:
    """Elevated roles edit everyone, others only themselves."""

    def setup_method(self):
        self.policy = AccessPolicy()

    @pytest.mark.parametrize("actor", [OWNER, ADMIN])
    def test_elevated_roles_edit_anyone(self, actor):
        assert self.policy.can_edit(actor, "emp-1")
        assert self.policy.can_edit(actor, "emp-2")

    def test_master_edits_own_schedule(self):
        assert self.policy.can_edit(MASTER, "emp-1")

    def test_master_cannot_edit_others(self):
        assert not self.policy.can_edit(MASTER, "emp-2")

    def test_manager_is_not_elevated_by_default(self):
        assert self.policy.can_edit(MANAGER, "emp-5")
        assert not self.policy.can_edit(MANAGER, "emp-1")

    def test_unlinked_actor_is_denied(self):
        actor = Actor(user_id="u-x", role=Role.MASTER)
        assert not self.policy.can_edit(actor, "emp-1")

    def test_configured_elevated_roles(self):
        policy = AccessPolicy([Role.OWNER, Role.ADMIN, Role.MANAGER])
        assert policy.can_edit(MANAGER, "emp-1")

    def test_elevated_roles_accept_strings(self):
        policy = AccessPolicy(["owner"])

        assert policy.can_edit(OWNER, "emp-1")
        assert not policy.can_edit(ADMIN, "emp-1")

    def test_ensure_can_edit_raises(self):
        with pytest.raises(AuthorizationError, match="emp-2"):
            self.policy.ensure_can_edit(MASTER, "emp-2")

    def test_ensure_can_edit_passes(self):
        self.policy.ensure_can_edit(MASTER, "emp-1")
