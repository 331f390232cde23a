"""Application tests for account administration commands."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.backoffice.activity import ActivityLogEntry
from storefront.identity.administration import ChangeUserRole, RemoveUser, create_standard_admin
from storefront.identity.authentication import verify_secret
from storefront.identity.registration import seed_main_admin
from storefront.identity.user import User
from storefront.shared.queries import fetch_all


def _user(user_id):
    return current_domain.repository_for(User).get(user_id)


class TestCreateStandardAdmin:
    def test_creates_admin_with_hashed_key(self):
        main_id = seed_main_admin()

        admin_id = create_standard_admin(
            email="ops@example.com", password="ops-password", security_key="ops-key", created_by=main_id
        )

        admin = _user(admin_id)
        assert admin.admin_role == "standard_admin"
        assert verify_secret("ops-key", admin.security_key_hash)

        entries = fetch_all(ActivityLogEntry, action_type="Admin Created")
        assert len(entries) == 1
        assert str(entries[0].actor_id) == main_id
        assert json.loads(entries[0].details)["email"] == "ops@example.com"

    def test_duplicate_email_is_rejected(self, register):
        register(email="taken@example.com")
        with pytest.raises(ValidationError):
            create_standard_admin(email="taken@example.com", password="ops-password", security_key="ops-key")


class TestChangeUserRole:
    def test_promotes_customer(self, register):
        user_id = register()

        current_domain.process(
            ChangeUserRole(user_id=user_id, admin_role="standard_admin", changed_by="main-001"),
            asynchronous=False,
        )

        assert _user(user_id).admin_role == "standard_admin"
        assert len(fetch_all(ActivityLogEntry, action_type="User Role Changed")) == 1

    def test_main_admin_role_is_fixed(self):
        main_id = seed_main_admin()
        with pytest.raises(ValidationError):
            current_domain.process(ChangeUserRole(user_id=main_id, admin_role="none"), asynchronous=False)
        assert _user(main_id).admin_role == "main_admin"


class TestRemoveUser:
    def test_soft_deletes_user(self, register):
        user_id = register()

        current_domain.process(RemoveUser(user_id=user_id, removed_by="main-001"), asynchronous=False)

        assert _user(user_id).status == "removed"
        assert len(fetch_all(ActivityLogEntry, action_type="User Deleted")) == 1

    def test_cannot_remove_self(self, register):
        user_id = register()
        with pytest.raises(ValidationError):
            current_domain.process(RemoveUser(user_id=user_id, removed_by=user_id), asynchronous=False)
        assert _user(user_id).status == "active"

    def test_cannot_remove_main_admin(self):
        main_id = seed_main_admin()
        with pytest.raises(ValidationError):
            current_domain.process(RemoveUser(user_id=main_id, removed_by="someone-else"), asynchronous=False)
