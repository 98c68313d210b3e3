"""認証ビジネスロジック: メール認証コードとユーザーの取得・自動登録"""
import json
import random
import string
from typing import Optional

import redis.asyncio as aioredis
from sqlalchemy.orm import Session

from contenthub.models.user import User
from contenthub.core.logging import get_logger

logger = get_logger(__name__)

# 認証コード設定
VERIFY_CODE_LENGTH = 6
VERIFY_CODE_TTL = 600  # 10分
VERIFY_MAX_ATTEMPTS = 5
VERIFY_LOCK_TTL = 1800  # 30分
VERIFY_CODE_PREFIX = "verify:"
VERIFY_LOCK_PREFIX = "verify_lock:"


class VerifyResult:
    """認証コード検証結果"""

    OK = "ok"
    MISMATCH = "mismatch"
    EXPIRED = "expired"
    LOCKED = "locked"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def generate_verify_code(r: aioredis.Redis, email: str) -> Optional[str]:
    """認証コードを生成してRedisに保存。ロック中ならNone"""
    email = _normalize_email(email)
    if await r.exists(f"{VERIFY_LOCK_PREFIX}{email}"):
        return None

    code = "".join(random.choices(string.digits, k=VERIFY_CODE_LENGTH))
    data = json.dumps({"code": code, "attempts": 0})
    await r.set(f"{VERIFY_CODE_PREFIX}{email}", data, ex=VERIFY_CODE_TTL)
    return code


async def discard_verify_code(r: aioredis.Redis, email: str) -> None:
    await r.delete(f"{VERIFY_CODE_PREFIX}{_normalize_email(email)}")


async def verify_code(r: aioredis.Redis, email: str, input_code: str) -> tuple[str, str]:
    """認証コードを検証。(VerifyResult, メッセージ)を返す。成功時はコードを削除"""
    email = _normalize_email(email)
    lock_key = f"{VERIFY_LOCK_PREFIX}{email}"
    if await r.exists(lock_key):
        return VerifyResult.LOCKED, "認証がロックされています。しばらくお待ちください。"

    key = f"{VERIFY_CODE_PREFIX}{email}"
    raw = await r.get(key)
    if not raw:
        return VerifyResult.EXPIRED, "認証コードが期限切れです。再送信してください。"

    data = json.loads(raw)
    if input_code == data["code"]:
        await r.delete(key)
        return VerifyResult.OK, "認証成功"

    # 失敗: 試行回数更新
    attempts = data["attempts"] + 1
    if attempts >= VERIFY_MAX_ATTEMPTS:
        await r.delete(key)
        await r.set(lock_key, "1", ex=VERIFY_LOCK_TTL)
        logger.warning(f"認証コード試行上限: email={email}")
        return VerifyResult.LOCKED, "認証コードの試行回数が上限に達しました。30分後に再度お試しください。"

    data["attempts"] = attempts
    ttl = await r.ttl(key)
    if ttl > 0:
        await r.set(key, json.dumps(data), ex=ttl)
    return VerifyResult.MISMATCH, f"認証コードが一致しません。残り{VERIFY_MAX_ATTEMPTS - attempts}回"


def get_user_by_email(db: Session, email: str, include_deleted: bool = False) -> Optional[User]:
    q = db.query(User).filter(User.email == _normalize_email(email))
    if not include_deleted:
        q = q.filter(User.deleted_at.is_(None))
    return q.first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()


def create_user(db: Session, email: str, role: str = "user") -> User:
    """新規ユーザー作成"""
    user = User(email=_normalize_email(email), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"ユーザー作成: id={user.id}, email={user.email}")
    return user


def get_or_create_user(db: Session, email: str) -> tuple[User, bool]:
    """
    ログイン兼登録。(ユーザー, 新規作成フラグ) を返す。
    論理削除済みのメールアドレスは復活させず、呼び出し側で拒否する。
    """
    user = get_user_by_email(db, email, include_deleted=True)
    if user:
        return user, False
    return create_user(db, email), True
