"""
End-to-end tests for /api/auth: registration, login, profile, password change.
"""

import jwt

from conftest import bearer, login, register


class TestRegistration:
    def test_register_returns_201_and_no_token(self, client):
        resp = register(client, "a@b.com", "secret1")
        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] > 0
        assert "access_token" not in body

    def test_duplicate_email_is_409(self, client):
        assert register(client, "a@b.com", "secret1").status_code == 201
        resp = register(client, "A@B.com", "another1")
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Email is already registered"

    def test_short_password_is_422(self, client):
        resp = register(client, "a@b.com", "12345")
        assert resp.status_code == 422

    def test_missing_field_is_422(self, client):
        resp = client.post("/api/auth/register", json={"email": "a@b.com", "password": "secret1"})
        assert resp.status_code == 422

    def test_bad_email_is_422(self, client):
        assert register(client, "not-an-email", "secret1").status_code == 422


class TestLoginScenario:
    def test_register_login_and_role_gate(self, client, token_service):
        assert register(client, "a@b.com", "secret1").status_code == 201
        assert register(client, "a@b.com", "secret1").status_code == 409

        resp = login(client, "a@b.com", "secret1")
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["email"] == "a@b.com"
        assert body["role"] == "Resident"

        claims = token_service.verify(body["access_token"])
        assert claims.subject == body["id"]
        assert claims.role.value == "Resident"

        assert login(client, "a@b.com", "wrongpass").status_code == 401

        resp = client.get("/api/admin/users", headers=bearer(body["access_token"]))
        assert resp.status_code == 403

    def test_unknown_email_and_wrong_password_look_the_same(self, client):
        register(client, "a@b.com", "secret1")
        wrong = login(client, "a@b.com", "wrongpass")
        unknown = login(client, "nobody@b.com", "wrongpass")
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"detail": "Invalid email or password"}

    def test_login_token_is_signed_for_the_configured_issuer(self, client, test_settings):
        register(client, "a@b.com", "secret1")
        token = login(client, "a@b.com", "secret1").json()["access_token"]
        payload = jwt.decode(
            token,
            test_settings.secret_key,
            algorithms=["HS256"],
            audience=test_settings.jwt_audience,
            issuer=test_settings.jwt_issuer,
        )
        assert payload["email"] == "a@b.com"
        assert payload["name"] == "Asha Patil"


class TestProfile:
    def test_requires_token(self, client):
        resp = client.get("/api/auth/profile")
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_garbage_token(self, client):
        resp = client.get("/api/auth/profile", headers=bearer("not.a.jwt"))
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Invalid or expired token"}

    def test_rejects_non_bearer_scheme(self, client, resident_token):
        resp = client.get("/api/auth/profile", headers={"Authorization": f"Basic {resident_token}"})
        assert resp.status_code == 401

    def test_returns_profile_without_secrets(self, client, resident_token):
        resp = client.get("/api/auth/profile", headers=bearer(resident_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"] == "resident@example.com"
        assert body["village"] == "Khed"
        assert body["last_login"] is not None
        assert "password_hash" not in body
        assert "password_salt" not in body

    def test_update_profile(self, client, resident_token):
        resp = client.put(
            "/api/auth/profile",
            json={"full_name": "Asha P.", "village": "Chakan", "state": ""},
            headers=bearer(resident_token),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["full_name"] == "Asha P."
        assert body["village"] == "Chakan"
        assert body["state"] == "Maharashtra"


class TestChangePassword:
    def test_change_password_then_login_with_new_one(self, client, resident_token):
        resp = client.put(
            "/api/auth/change-password",
            json={"old_password": "secret1", "new_password": "brandnew1"},
            headers=bearer(resident_token),
        )
        assert resp.status_code == 200
        assert login(client, "resident@example.com", "secret1").status_code == 401
        assert login(client, "resident@example.com", "brandnew1").status_code == 200

    def test_wrong_old_password_is_422(self, client, resident_token):
        resp = client.put(
            "/api/auth/change-password",
            json={"old_password": "nope-nope", "new_password": "brandnew1"},
            headers=bearer(resident_token),
        )
        assert resp.status_code == 422
