"""Tests for users, roles, the own profile and authentication."""

from datetime import timedelta

import pytest

from uam.auth.jwt import create_access_token
from uam.auth.passwords import verify_password
from uam.models import User, UserStatus
from tests.conftest import CALLER_NATIONAL_ID, PASSWORD


def new_user(**overrides):
    data = {
        "email": "new@example.org",
        "first_name": "Diego",
        "last_name": "Rossi",
        "national_id": "4.444.444-4",
        "password": "longenough",
    }
    data.update(overrides)
    return data


class TestAuthentication:

    def test_missing_token(self, client, seed):
        assert client.get("/api/users/me").status_code == 401

    def test_invalid_token(self, client, seed):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_expired_token(self, client, seed):
        token = create_access_token(seed.caller_id, expires_delta=timedelta(minutes=-1))
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_disabled_user_is_rejected(self, client, seed, db):
        user = db.get(User, seed.other_user_id)
        user.status = UserStatus.DISABLED
        db.commit()
        token = create_access_token(seed.other_user_id)
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestUsers:

    def test_me(self, client, seed, auth_headers):
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["national_id"] == CALLER_NATIONAL_ID
        assert body["section_name"] == "IT"
        assert [r["name"] for r in body["roles"]] == ["Admin"]

    def test_list_is_ordered_by_last_name(self, client, seed, auth_headers):
        response = client.get("/api/users", headers=auth_headers)
        assert [u["last_name"] for u in response.json()] == ["Gómez", "Pérez", "Silva"]

    def test_create_hashes_password_and_sets_roles(self, client, seed, auth_headers, session_factory):
        response = client.post(
            "/api/users",
            json=new_user(section_id=seed.warehouse_section_id, role_ids=[seed.admin_role_id]),
            headers=auth_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["section_name"] == "Warehouse"
        assert [r["name"] for r in body["roles"]] == ["Admin"]
        assert "password" not in body and "password_hash" not in body

        with session_factory() as s:
            user = s.get(User, body["id"])
            assert verify_password("longenough", user.password_hash)

    def test_create_requires_admin(self, client, seed, other_headers):
        response = client.post("/api/users", json=new_user(), headers=other_headers)
        assert response.status_code == 403

    def test_duplicate_national_id_conflicts(self, client, seed, auth_headers):
        response = client.post("/api/users", json=new_user(national_id=CALLER_NATIONAL_ID), headers=auth_headers)
        assert response.status_code == 409

    def test_duplicate_email_conflicts(self, client, seed, auth_headers):
        response = client.post("/api/users", json=new_user(email="receiver@example.org"), headers=auth_headers)
        assert response.status_code == 409

    def test_short_password_is_rejected(self, client, seed, auth_headers):
        response = client.post("/api/users", json=new_user(password="short"), headers=auth_headers)
        assert response.status_code == 422

    def test_unknown_role_is_rejected(self, client, seed, auth_headers):
        response = client.post("/api/users", json=new_user(role_ids=[999]), headers=auth_headers)
        assert response.status_code == 400

    def test_role_ids_replace_role_set(self, client, seed, auth_headers):
        granted = client.put(
            f"/api/users/{seed.other_user_id}", json={"role_ids": [seed.admin_role_id]}, headers=auth_headers
        )
        assert [r["name"] for r in granted.json()["roles"]] == ["Admin"]

        revoked = client.put(f"/api/users/{seed.other_user_id}", json={"role_ids": []}, headers=auth_headers)
        assert revoked.status_code == 200
        assert revoked.json()["roles"] == []

    def test_update_without_role_ids_keeps_roles(self, client, seed, auth_headers):
        response = client.put(f"/api/users/{seed.caller_id}", json={"first_name": "Ana María"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["full_name"] == "Ana María Pérez"
        assert [r["name"] for r in response.json()["roles"]] == ["Admin"]

    @pytest.mark.parametrize("field", ["email", "status"])
    def test_required_field_cannot_be_nulled(self, client, seed, auth_headers, field):
        response = client.put(f"/api/users/{seed.other_user_id}", json={field: None}, headers=auth_headers)
        assert response.status_code == 422

    def test_cannot_delete_self(self, client, seed, auth_headers):
        response = client.delete(f"/api/users/{seed.caller_id}", headers=auth_headers)
        assert response.status_code == 403

    def test_delete_disables_user(self, client, seed, auth_headers, session_factory):
        response = client.delete(f"/api/users/{seed.other_user_id}", headers=auth_headers)
        assert response.status_code == 200

        with session_factory() as s:
            user = s.get(User, seed.other_user_id)
            assert user.deleted_at is not None
            assert user.status == UserStatus.DISABLED
        assert client.get(f"/api/users/{seed.other_user_id}", headers=auth_headers).status_code == 404

    def test_roles_list(self, client, seed, auth_headers):
        response = client.get("/api/roles", headers=auth_headers)
        assert [r["name"] for r in response.json()] == ["Admin"]


class TestProfile:

    def test_update_profile(self, client, seed, other_headers):
        response = client.put("/api/users/me/profile", json={"last_name": "Gomez"}, headers=other_headers)
        assert response.status_code == 200
        assert response.json()["last_name"] == "Gomez"
        assert response.json()["first_name"] == "Carla"

    def test_change_password(self, client, seed, other_headers, session_factory):
        response = client.put(
            "/api/users/me/password",
            json={"current_password": PASSWORD, "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"},
            headers=other_headers,
        )
        assert response.status_code == 200
        with session_factory() as s:
            assert verify_password("brand-new-pass", s.get(User, seed.other_user_id).password_hash)

    def test_wrong_current_password(self, client, seed, other_headers):
        response = client.put(
            "/api/users/me/password",
            json={"current_password": "wrong", "new_password": "brand-new-pass", "confirm_password": "brand-new-pass"},
            headers=other_headers,
        )
        assert response.status_code == 400

    def test_confirmation_must_match(self, client, seed, other_headers):
        response = client.put(
            "/api/users/me/password",
            json={"current_password": PASSWORD, "new_password": "brand-new-pass", "confirm_password": "other-pass"},
            headers=other_headers,
        )
        assert response.status_code == 422
