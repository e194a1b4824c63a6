import time
from datetime import timedelta
from unittest.mock import patch

from core.security import create_access_token

DEFAULT_PASSWORD = "senha-forte-123"


def _login(client, email, password=DEFAULT_PASSWORD, user_type="aluno"):
    return client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "userType": user_type},
    )


class TestLocalLogin:
    def test_success_returns_token_and_establishes_session(self, client, make_user, store):
        user = make_user(email="ana@gymsync.com", user_type="personal", nome="Ana")

        response = _login(client, "ana@gymsync.com", user_type="personal")

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {
            "id": user.id,
            "email": "ana@gymsync.com",
            "userType": "personal",
            "name": "Ana",
        }
        assert body["token"]
        assert "gymsync.sid" in response.headers["set-cookie"]
        assert store.get_user(user.id).last_login is not None

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["id"] == user.id
        assert me.json()["provider"] == "local"

    def test_role_mismatch_is_indistinguishable_from_wrong_password(self, client, make_user):
        make_user(email="a@x.com", password="right-pass-77", user_type="personal")

        mismatch = _login(client, "a@x.com", "right-pass-77", user_type="aluno")
        wrong = _login(client, "a@x.com", "wrong-pass-77", user_type="personal")

        assert mismatch.status_code == wrong.status_code == 401
        assert mismatch.json() == wrong.json()
        assert mismatch.json()["detail"] == "Email ou senha inválidos"
        assert "set-cookie" not in mismatch.headers
        assert client.get("/api/auth/me").status_code == 401

    def test_unknown_email(self, client):
        response = _login(client, "ninguem@gymsync.com")
        assert response.status_code == 401
        assert response.json()["code"] == "invalid_credentials"

    def test_user_without_password_never_compares_hash(self, client, make_user):
        make_user(email="semsenha@gymsync.com", password=None)

        with patch("services.identity_providers.verify_password") as verify:
            response = _login(client, "semsenha@gymsync.com")

        assert response.status_code == 401
        assert response.json()["code"] == "no_password_set"
        verify.assert_not_called()

    def test_inactive_user(self, client, make_user):
        make_user(email="off@gymsync.com", is_active=False)
        assert _login(client, "off@gymsync.com").status_code == 401

    def test_missing_user_type(self, client, make_user):
        make_user(email="ana@gymsync.com")
        response = client.post(
            "/api/auth/login",
            json={"email": "ana@gymsync.com", "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == 422


class TestSession:
    def test_login_rotates_session_id_and_keeps_admin_flag(
        self, client, make_user, session_store, cookie_sid
    ):
        make_user(email="ana@gymsync.com")
        client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})
        before = cookie_sid(client)

        _login(client, "ana@gymsync.com")
        after = cookie_sid(client)

        assert before and after and before != after
        assert session_store.get(before) is None
        assert client.get("/api/admin/check").json() == {"authenticated": True}

    def test_logout_clears_principal(self, client, make_user, session_store, cookie_sid):
        make_user(email="ana@gymsync.com")
        _login(client, "ana@gymsync.com")
        assert client.get("/api/auth/me").status_code == 200

        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert client.get("/api/auth/me").status_code == 401
        assert len(session_store) == 0

    def test_deleted_user_degrades_to_unauthenticated(
        self, client, make_user, store, session_store, session_headers
    ):
        user = make_user()
        sid, headers = session_headers({"auth": {"user_id": user.id, "provider": "local"}})
        store.delete_user(user.id)

        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"
        assert session_store.get(sid) is None

    def test_deleted_user_keeps_admin_flag(self, client, make_user, store, session_store, session_headers):
        user = make_user()
        sid, headers = session_headers({
            "auth": {"user_id": user.id, "provider": "local"},
            "admin_authenticated": True,
        })
        store.delete_user(user.id)

        assert client.get("/api/auth/me", headers=headers).status_code == 401
        assert session_store.get(sid) == {"admin_authenticated": True}

    def test_expired_oidc_principal(self, client, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user, provider="oidc", expires_at=int(time.time()) - 60)

        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "token_expired_or_invalid"

    def test_valid_oidc_principal(self, client, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user, provider="oidc", expires_at=int(time.time()) + 600)
        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["provider"] == "oidc"


class TestBearerToken:
    def test_valid_token(self, client):
        token = create_access_token("u-1", "a@gymsync.com", "personal")
        response = client.get("/api/auth/token", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json() == {"id": "u-1", "email": "a@gymsync.com", "userType": "personal"}

    def test_missing_token(self, client):
        response = client.get("/api/auth/token")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"

    def test_expired_token(self, client):
        token = create_access_token("u-1", "a@gymsync.com", "aluno", expires_delta=timedelta(seconds=-1))
        response = client.get("/api/auth/token", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["code"] == "token_expired_or_invalid"

    def test_bearer_is_not_a_session(self, client, make_user):
        user = make_user()
        token = create_access_token(user.id, user.email, user.user_type)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_session_is_not_a_bearer(self, client, make_user, auth_headers):
        user = make_user()
        assert client.get("/api/auth/token", headers=auth_headers(user)).status_code == 401


class TestRedirect:
    def test_anonymous(self, client):
        response = client.get("/api/auth/redirect", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/"

    def test_by_role(self, client, make_user, auth_headers):
        user = make_user(user_type="personal")
        response = client.get("/api/auth/redirect", headers=auth_headers(user), follow_redirects=False)
        assert response.headers["location"] == "/personal"
