"""
User Administration Tests
=========================

Listing, searching, (de)activating and re-roling staff profiles.
"""

import logging

import pytest

from tests.conftest import seed_profile

pytestmark = pytest.mark.integration


def _row(fake, profile_id):
    return next(r for r in fake.tables["dd-users"] if r["id"] == profile_id)


class TestListUsers:

    def test_admin_lists_all_profiles_newest_first(self, client, admin, employe, fake_supabase):
        # Arrange
        pending = seed_profile(fake_supabase, role="caissiere", linked=False)

        # Act
        response = client.get("/admin/users", headers=admin.headers)

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        ids = [u["id"] for u in body["users"]]
        assert ids == [pending["id"], employe.profile["id"], admin.profile["id"]]
        assert body["users"][0]["status"] == "Pending Signup"
        assert body["users"][1]["status"] == "Active"
        assert body["users"][1]["full_name"] == "Test Employe"

    def test_search_filters_case_insensitively(self, client, admin, fake_supabase):
        seed_profile(fake_supabase, role="employe", email="lina@cercle.test", pseudo="LinaB")
        seed_profile(fake_supabase, role="employe", email="omar@cercle.test")

        response = client.get("/admin/users", params={"search": "linab"}, headers=admin.headers)

        assert response.status_code == 200
        assert [u["email"] for u in response.json()["users"]] == ["lina@cercle.test"]

    @pytest.mark.parametrize("role", ["employe", "caissiere", "manager"])
    def test_non_user_managers_are_forbidden(self, client, make_staff, role):
        staff = make_staff(role)

        response = client.get("/admin/users", headers=staff.headers)

        assert response.status_code == 403
        assert response.json() == {"error": "Only admin users can manage users."}

    def test_requires_authentication(self, client):
        assert client.get("/admin/users").status_code == 401


class TestSetActive:

    def test_deactivate_employee(self, client, admin, employe, fake_supabase, caplog):
        caplog.set_level(logging.INFO)

        response = client.patch(
            f"/admin/users/{employe.profile['id']}/active",
            json={"is_active": False},
            headers=admin.headers,
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["status"] == "Inactive"
        assert _row(fake_supabase, employe.profile["id"])["is_active"] is False
        assert "DEACTIVATE_USER" in caplog.text

    def test_deactivated_employee_loses_access(self, client, admin, employe):
        client.patch(
            f"/admin/users/{employe.profile['id']}/active",
            json={"is_active": False},
            headers=admin.headers,
        )

        response = client.get("/dashboard/navigation", headers=employe.headers)

        assert response.status_code == 403

    def test_cannot_modify_own_account(self, client, admin):
        response = client.patch(
            f"/admin/users/{admin.profile['id']}/active",
            json={"is_active": False},
            headers=admin.headers,
        )

        assert response.status_code == 403
        assert response.json() == {"error": "You cannot modify your own account."}

    def test_admin_cannot_modify_another_admin(self, client, admin, make_staff):
        other = make_staff("admin")

        response = client.patch(
            f"/admin/users/{other.profile['id']}/active",
            json={"is_active": False},
            headers=admin.headers,
        )

        assert response.status_code == 403

    def test_superadmin_can_modify_admin(self, client, superadmin, admin):
        response = client.patch(
            f"/admin/users/{admin.profile['id']}/active",
            json={"is_active": False},
            headers=superadmin.headers,
        )

        assert response.status_code == 200

    def test_unknown_profile(self, client, admin):
        response = client.patch(
            "/admin/users/does-not-exist/active",
            json={"is_active": True},
            headers=admin.headers,
        )

        assert response.status_code == 404


class TestUpdateRole:

    def test_admin_changes_employee_role(self, client, admin, employe, fake_supabase, caplog):
        caplog.set_level(logging.INFO)

        response = client.patch(
            f"/admin/users/{employe.profile['id']}/role",
            json={"role": "Caissiere"},
            headers=admin.headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "caissiere"
        assert _row(fake_supabase, employe.profile["id"])["role"] == "caissiere"
        assert "UPDATE_ROLE" in caplog.text

    def test_invalid_role(self, client, admin, employe):
        response = client.patch(
            f"/admin/users/{employe.profile['id']}/role",
            json={"role": "owner"},
            headers=admin.headers,
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid role specified")

    def test_only_superadmin_grants_admin(self, client, admin, superadmin, employe):
        denied = client.patch(
            f"/admin/users/{employe.profile['id']}/role",
            json={"role": "admin"},
            headers=admin.headers,
        )
        granted = client.patch(
            f"/admin/users/{employe.profile['id']}/role",
            json={"role": "admin"},
            headers=superadmin.headers,
        )

        assert denied.status_code == 403
        assert granted.status_code == 200
        assert granted.json()["role"] == "admin"

    def test_manager_may_be_granted_by_admin(self, client, admin, employe):
        response = client.patch(
            f"/admin/users/{employe.profile['id']}/role",
            json={"role": "manager"},
            headers=admin.headers,
        )

        assert response.status_code == 200
