"""Tests for the role capability table."""

import pytest

from pydantic import ValidationError

from permissions import DEFAULT, MANAGER, permissions_for


class TestPermissionsFor:
    def test_manager_can_do_everything(self):
        assert all(permissions_for('manager').model_dump().values())

    @pytest.mark.parametrize("role", ['Manager', ' manager '])
    def test_role_lookup_is_lenient(self, role):
        assert permissions_for(role) is MANAGER

    def test_technical_staff_handle_incidents_only(self):
        perms = permissions_for('technical')
        assert perms.can_update_incidents is True
        assert perms.can_edit_tasks is False
        assert perms.can_moderate_messages is False

    @pytest.mark.parametrize("role", ['maintenance', 'custom', 'agent', '', None])
    def test_other_roles_get_defaults(self, role):
        assert permissions_for(role) is DEFAULT

    def test_everybody_reports_and_posts(self):
        perms = permissions_for('maintenance')
        assert perms.can_report_incidents and perms.can_post_messages
        assert not perms.can_access_settings

    def test_presets_are_frozen(self):
        with pytest.raises(ValidationError):
            MANAGER.can_edit_agents = False
