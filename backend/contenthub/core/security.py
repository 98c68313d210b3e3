"""JWT発行・検証 (python-jose, HS256)"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError, ExpiredSignatureError

from contenthub.core.config import settings
from contenthub.core.logging import get_logger
from contenthub.schemas.auth import TokenClaims

logger = get_logger(__name__)

# ユーザーIDとして受け付けるクレーム名 (優先順)
USER_ID_CLAIM_KEYS = ("id", "user_id", "sub")


class TokenError(Exception):
    """トークン検証エラーの基底クラス"""


class TokenExpiredError(TokenError):
    pass


class InvalidTokenError(TokenError):
    pass


def normalize_user_id(value: Any) -> Optional[int]:
    """int / float / 数字文字列のユーザーIDを正の整数に正規化。不正ならNone"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        user_id = int(value.strip())
        return user_id if user_id > 0 else None
    return None


def create_access_token(user_id: int, email: str, role: str) -> str:
    """アクセストークンを発行"""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRE_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    logger.info(f"トークン発行: user_id={user_id}, role={role}")
    return token


def _decode(token: str, verify_exp: bool = True) -> dict:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except ExpiredSignatureError:
        raise TokenExpiredError("トークンの有効期限が切れています")
    except JWTError as e:
        raise InvalidTokenError(f"無効なトークンです: {e}")


def _claims_from_payload(payload: dict) -> TokenClaims:
    user_id = None
    for key in USER_ID_CLAIM_KEYS:
        user_id = normalize_user_id(payload.get(key))
        if user_id:
            break
    if not user_id:
        raise InvalidTokenError("トークンにユーザーIDが含まれていません")

    return TokenClaims(
        id=user_id,
        email=str(payload.get("email") or ""),
        role=str(payload.get("role") or "user"),
        exp=payload.get("exp"),
    )


def decode_access_token(token: str) -> TokenClaims:
    """署名と有効期限を検証してクレームを返す"""
    return _claims_from_payload(_decode(token))


def decode_refreshable_token(token: str) -> TokenClaims:
    """
    再発行用のデコード。署名が正しければ期限切れでも受け付ける。
    新トークンのメール・ロールは呼び出し側でDBの値を使うこと
    """
    return _claims_from_payload(_decode(token, verify_exp=False))


def token_remaining_seconds(token: str) -> int:
    """有効なトークンの残り秒数"""
    claims = decode_access_token(token)
    if claims.exp is None:
        raise InvalidTokenError("トークンに有効期限がありません")
    remaining = int(claims.exp - datetime.now(timezone.utc).timestamp())
    return max(remaining, 0)
