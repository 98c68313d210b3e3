# =============================================================================
# tests/conftest.py - Pytest 設定と共通フィクスチャ
# =============================================================================
# - 設定モジュールの読み込み前にテスト用の環境変数を入れる
# - SQLite(インメモリ)にスキーマを作り、テストごとに破棄する
# - Redis はインメモリの非同期ダブル、メール送信はモンキーパッチで差し替える
# =============================================================================

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["DEBUG"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ALLOW_QUERY_TOKEN"] = "true"
os.environ["PDF_FONT_PATH"] = ""

import pytest
from fastapi.testclient import TestClient

from contenthub.core.database import Base, SessionLocal, engine
from contenthub.core.redis import get_redis
from contenthub.core.security import create_access_token
from contenthub.main import app
from contenthub.models.user import User


class FakeRedis:
    """auth_service が使うコマンドだけを持つインメモリRedis"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def exists(self, key):
        return int(key in self.store)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def ttl(self, key):
        if key not in self.store:
            return -2
        return self.ttls.get(key) or -1

    async def ping(self):
        return True


# =============================================================================
# DB / Redis / メール
# =============================================================================

@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def sent_codes(monkeypatch):
    """送信された認証コードを {email: code} で記録する"""
    codes = {}

    def fake_send(to_email, code, ttl_minutes=10):
        codes[to_email.lower()] = code
        return True

    monkeypatch.setattr("contenthub.routers.auth.send_verify_code_email", fake_send)
    return codes


@pytest.fixture
def client(db, fake_redis, sent_codes):
    async def override_redis():
        return fake_redis

    app.dependency_overrides[get_redis] = override_redis
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# =============================================================================
# ユーザーとトークン
# =============================================================================

def make_user(db, email: str, role: str = "user") -> User:
    user = User(email=email, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


@pytest.fixture
def user(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def other_user(db):
    return make_user(db, "bob@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin")


@pytest.fixture
def user_headers(user):
    return bearer(user)


@pytest.fixture
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)
