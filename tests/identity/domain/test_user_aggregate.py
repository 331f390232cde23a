"""Tests for the User aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.identity.events import StandardAdminCreated, UserRegistered, UserRemoved, UserRoleChanged
from storefront.identity.user import AdminRole, User, UserStatus


def _shopper(**overrides):
    values = {"email": "Shopper@Example.com", "password_hash": "hash"}
    values.update(overrides)
    return User.register(**values)


class TestRegistration:
    def test_email_is_normalized(self):
        assert _shopper().email == "shopper@example.com"

    def test_shopper_has_no_admin_role(self):
        user = _shopper()
        assert user.admin_role == AdminRole.NONE.value
        assert not user.is_admin

    def test_raises_user_registered(self):
        assert isinstance(_shopper()._events[0], UserRegistered)

    @pytest.mark.parametrize("email", ["no-at-sign", "two@@example.com", "a@nodot", "a b@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            _shopper(email=email)


class TestAdmins:
    def test_standard_admin(self):
        admin = User.create_standard_admin("ops@example.com", "hash", "key-hash", created_by="main-001")
        assert admin.admin_role == AdminRole.STANDARD_ADMIN.value
        assert admin.is_admin and not admin.is_main_admin
        assert isinstance(admin._events[0], StandardAdminCreated)

    def test_main_admin_has_no_key_until_first_login(self):
        admin = User.main_admin("admin@example.com", "hash")
        assert admin.is_main_admin
        assert admin.security_key_hash is None

    def test_shopper_cannot_hold_a_security_key(self):
        with pytest.raises(ValidationError):
            _shopper().record_security_key("key-hash")


class TestRoleChanges:
    def test_promote_and_demote(self):
        user = _shopper()
        user._events.clear()

        assert user.change_role("standard_admin", changed_by="main-001") is True
        assert user.admin_role == "standard_admin"
        event = user._events[0]
        assert isinstance(event, UserRoleChanged)
        assert (event.previous_role, event.new_role) == ("none", "standard_admin")

        user.change_role("none")
        assert user.admin_role == "none"

    def test_same_role_is_a_noop(self):
        user = _shopper()
        user._events.clear()
        assert user.change_role("none") is False
        assert user._events == []

    def test_main_admin_cannot_be_granted(self):
        with pytest.raises(ValidationError):
            _shopper().change_role("main_admin")

    def test_main_admin_cannot_be_demoted(self):
        with pytest.raises(ValidationError):
            User.main_admin("admin@example.com", "hash").change_role("none")

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            _shopper().change_role("superuser")


class TestRemoval:
    def test_remove_is_soft(self):
        user = _shopper()
        user._events.clear()

        user.remove(removed_by="main-001")

        assert user.status == UserStatus.REMOVED.value
        assert not user.is_active
        assert isinstance(user._events[0], UserRemoved)

    def test_main_admin_cannot_be_removed(self):
        with pytest.raises(ValidationError):
            User.main_admin("admin@example.com", "hash").remove()
