# =============================================================================
# tests/test_auth.py - 認証コードログインと認証ミドルウェア
# =============================================================================

from datetime import datetime, timedelta, timezone

from jose import jwt

from contenthub.core.config import settings
from contenthub.core.security import create_access_token
from contenthub.core.timeutils import utcnow
from contenthub.models.user import User
from conftest import bearer


def _login(client, sent_codes, email="new@example.com"):
    assert client.post("/user/send-code", json={"email": email}).status_code == 200
    return client.post(
        "/user/login-or-register",
        json={"email": email, "code": sent_codes[email.lower()]},
    )


class TestLoginFlow:
    def test_send_code_stores_code_in_redis(self, client, sent_codes, fake_redis):
        res = client.post("/user/send-code", json={"email": "new@example.com"})

        assert res.status_code == 200
        assert "verify:new@example.com" in fake_redis.store
        assert fake_redis.ttls["verify:new@example.com"] == 600
        assert len(sent_codes["new@example.com"]) == 6

    def test_first_login_registers_user(self, client, sent_codes, db):
        res = _login(client, sent_codes)

        assert res.status_code == 200
        body = res.json()
        assert body["token"]
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["role"] == "user"
        assert db.query(User).filter(User.email == "new@example.com").count() == 1

    def test_second_login_reuses_user(self, client, sent_codes, db):
        first = _login(client, sent_codes).json()
        second = _login(client, sent_codes).json()

        assert first["user"]["id"] == second["user"]["id"]
        assert db.query(User).count() == 1

    def test_code_is_single_use(self, client, sent_codes, fake_redis):
        _login(client, sent_codes)
        assert "verify:new@example.com" not in fake_redis.store

        res = client.post(
            "/user/login-or-register",
            json={"email": "new@example.com", "code": sent_codes["new@example.com"]},
        )
        assert res.status_code == 401

    def test_wrong_code_is_401(self, client, sent_codes):
        client.post("/user/send-code", json={"email": "new@example.com"})
        wrong = "000000" if sent_codes["new@example.com"] != "000000" else "111111"

        res = client.post("/user/login-or-register", json={"email": "new@example.com", "code": wrong})
        assert res.status_code == 401

    def test_too_many_failures_lock(self, client, sent_codes):
        client.post("/user/send-code", json={"email": "new@example.com"})
        wrong = "000000" if sent_codes["new@example.com"] != "000000" else "111111"

        statuses = [
            client.post("/user/login-or-register", json={"email": "new@example.com", "code": wrong}).status_code
            for _ in range(5)
        ]
        assert statuses[:4] == [401] * 4
        assert statuses[4] == 429
        # ロック中はコード再送もできない
        assert client.post("/user/send-code", json={"email": "new@example.com"}).status_code == 429

    def test_invalid_code_format_is_400(self, client):
        res = client.post("/user/login-or-register", json={"email": "new@example.com", "code": "12ab"})
        assert res.status_code == 400

    def test_invalid_email_is_400(self, client):
        res = client.post("/user/send-code", json={"email": "not-an-email"})
        assert res.status_code == 400

    def test_deleted_user_cannot_login(self, client, sent_codes, user, db):
        user.deleted_at = utcnow()
        db.commit()

        res = _login(client, sent_codes, email=user.email)
        assert res.status_code == 403

    def test_mail_failure_is_500_and_code_discarded(self, client, fake_redis, monkeypatch):
        monkeypatch.setattr("contenthub.routers.auth.send_verify_code_email", lambda **kw: False)

        res = client.post("/user/send-code", json={"email": "new@example.com"})
        assert res.status_code == 500
        assert "verify:new@example.com" not in fake_redis.store


class TestTokenEndpoints:
    def test_validate_token(self, client, user, user_headers):
        res = client.get("/user/validate-token", headers=user_headers)

        assert res.status_code == 200
        body = res.json()
        assert body["valid"] is True
        assert body["user"] == {"id": user.id, "email": user.email, "role": "user"}
        assert body["expires_in"] > 0

    def test_refresh_accepts_expired_token(self, client, user):
        expired = jwt.encode(
            {"id": user.id, "email": user.email, "role": "user",
             "exp": datetime.now(timezone.utc) - timedelta(days=1)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        res = client.post("/user/refresh-token", headers={"Authorization": f"Bearer {expired}"})

        assert res.status_code == 200
        assert res.json()["status"] == "success"
        new_token = res.json()["token"]
        assert client.get("/user/me", headers={"Authorization": f"Bearer {new_token}"}).status_code == 200

    def test_refresh_uses_current_role(self, client, admin, db):
        stale = create_access_token(admin.id, admin.email, "admin")
        admin.role = "user"
        db.commit()

        res = client.post("/user/refresh-token", headers={"Authorization": f"Bearer {stale}"})
        assert res.status_code == 200
        assert jwt.get_unverified_claims(res.json()["token"])["role"] == "user"

    def test_refresh_of_deleted_user_is_401(self, client, user, user_headers, db):
        user.deleted_at = utcnow()
        db.commit()

        assert client.post("/user/refresh-token", headers=user_headers).status_code == 401

    def test_refresh_rejects_bad_signature(self, client):
        forged = jwt.encode({"id": 1, "email": "x@example.com", "role": "admin"}, "wrong", algorithm="HS256")

        res = client.post("/user/refresh-token", headers={"Authorization": f"Bearer {forged}"})
        assert res.status_code == 401


class TestAuthMiddleware:
    """トークン抽出と検証"""

    def test_missing_token_is_401(self, client):
        res = client.get("/user/me")

        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Bearer"

    def test_malformed_header_is_401(self, client, user_headers):
        token = user_headers["Authorization"].split(" ", 1)[1]

        res = client.get("/user/me", headers={"Authorization": f"Token {token}"})
        assert res.status_code == 401

    def test_expired_token_is_401(self, client, user):
        expired = jwt.encode(
            {"id": user.id, "email": user.email, "role": "user",
             "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        res = client.get("/user/me", headers={"Authorization": f"Bearer {expired}"})
        assert res.status_code == 401

    def test_query_token(self, client, user, user_headers):
        token = user_headers["Authorization"].split(" ", 1)[1]

        res = client.get(f"/user/me?token={token}")
        assert res.status_code == 200
        assert res.json()["id"] == user.id

    def test_token_of_deleted_user_is_401(self, client, user, user_headers, db):
        user.deleted_at = utcnow()
        db.commit()

        assert client.get("/user/me", headers=user_headers).status_code == 401

    def test_optional_auth_treats_bad_token_as_anonymous(self, client):
        res = client.get("/blog", headers={"Authorization": "Bearer broken"})

        assert res.status_code == 200
        assert res.json()["blogs"] == []

    def test_admin_route_rejects_user_role(self, client, user):
        assert client.get("/user/", headers=bearer(user)).status_code == 403

    def test_token_role_claim_is_not_trusted(self, client, user):
        # adminロールのトークンでも DB上が user なら管理者扱いしない
        token = create_access_token(user.id, user.email, "admin")
        res = client.get("/user/", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 403

    def test_demoted_admin_token_loses_admin_rights(self, client, admin, admin_headers, db):
        admin.role = "user"
        db.commit()

        assert client.get("/user/", headers=admin_headers).status_code == 403

    def test_deleted_admin_token_is_401(self, client, admin, user, admin_headers, db):
        admin.deleted_at = utcnow()
        db.commit()

        assert client.delete(f"/user/{user.id}", headers=admin_headers).status_code == 401
        assert db.query(User).filter(User.id == user.id).one().deleted_at is None

    def test_deleted_owner_cannot_update_blog(self, client, user, user_headers, db):
        res = client.post("/blog", json={"title": "t", "content": "c"}, headers=user_headers)
        blog_id = res.json()["id"]
        user.deleted_at = utcnow()
        db.commit()

        res = client.put(f"/blog/{blog_id}", json={"title": "hijacked"}, headers=user_headers)
        assert res.status_code == 401
