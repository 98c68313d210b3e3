"""共通依存関数: JWT認証・ロール制御・所有者チェック"""
from typing import Optional
from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session

from contenthub.core.config import settings
from contenthub.core.database import get_db
from contenthub.core.logging import get_logger
from contenthub.core.security import (
    TokenError,
    TokenExpiredError,
    decode_access_token,
    normalize_user_id,
)
from contenthub.models.blog import Blog
from contenthub.models.task import Task
from contenthub.models.user import User
from contenthub.models.wenjuan import Wenjuan
from contenthub.schemas.auth import TokenClaims

logger = get_logger(__name__)

# リソース種別 → (モデル, 所有者カラム)
OWNER_COLUMNS = {
    "blog": (Blog, Blog.user_id),
    "task": (Task, Task.creator_id),
    "wenjuan": (Wenjuan, Wenjuan.creator_id),
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def extract_token(request: Request) -> Optional[str]:
    """Authorization: Bearer ヘッダー、なければ ?token= から取得"""
    header = request.headers.get("Authorization")
    if header:
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise _unauthorized("認証ヘッダーの形式が正しくありません")
        return token.strip()
    if settings.ALLOW_QUERY_TOKEN:
        token = request.query_params.get("token")
        if token:
            return token.strip()
    return None


def load_active_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()


def _claims_for_user(claims: TokenClaims, user: User) -> TokenClaims:
    """ロール・メールはDBの現在値を使う (降格・メール変更後の古いトークン対策)"""
    return claims.model_copy(update={"email": user.email, "role": user.role})


async def get_current_claims(request: Request, db: Session = Depends(get_db)) -> TokenClaims:
    """
    ログイン必須。トークンを検証し、ユーザーが有効(未削除)であることを確認する。
    request.state.user にクレームを載せる
    """
    token = extract_token(request)
    if not token:
        raise _unauthorized("ログインが必要です")
    try:
        claims = decode_access_token(token)
    except TokenExpiredError as e:
        raise _unauthorized(str(e))
    except TokenError as e:
        logger.warning(f"トークン検証失敗: {e}", extra={"path": request.url.path})
        raise _unauthorized("無効なトークンです")

    user = load_active_user(db, claims.id)
    if user is None:
        logger.warning("削除済みユーザーのトークン", extra={"user_id": claims.id, "path": request.url.path})
        raise _unauthorized("ユーザーが存在しないか削除されています")

    claims = _claims_for_user(claims, user)
    request.state.user = claims
    return claims


async def get_optional_claims(request: Request, db: Session = Depends(get_db)) -> Optional[TokenClaims]:
    """任意認証。トークンがない・不正・ユーザー削除済みの場合は匿名(None)として扱う"""
    try:
        token = extract_token(request)
        if not token:
            return None
        claims = decode_access_token(token)
    except (HTTPException, TokenError):
        return None
    user = load_active_user(db, claims.id)
    if user is None:
        return None
    claims = _claims_for_user(claims, user)
    request.state.user = claims
    return claims


async def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> User:
    """トークンのユーザーをDBから取得。削除済みなら401"""
    user = load_active_user(db, claims.id)
    if user is None:
        raise _unauthorized("ユーザーが存在しないか削除されています")
    return user


async def require_admin(
    claims: TokenClaims = Depends(get_current_claims),
) -> TokenClaims:
    """管理者権限必須 (DB上のロールで判定)。adminでなければ403"""
    if not claims.is_admin:
        logger.warning("管理者権限なし", extra={"user_id": claims.id})
        raise HTTPException(status_code=403, detail="管理者権限が必要です")
    return claims


def require_owner(resource: str, param: str = "id"):
    """
    所有者チェックの依存関数を作る。
    管理者は無条件で通過。それ以外はパスパラメータのIDでリソースを引き、所有者カラムと比較する。
    """
    model, owner_column = OWNER_COLUMNS[resource]

    async def check_owner(
        request: Request,
        claims: TokenClaims = Depends(get_current_claims),
        db: Session = Depends(get_db),
    ) -> TokenClaims:
        if claims.is_admin:
            return claims

        resource_id = normalize_user_id(request.path_params.get(param))
        if resource_id is None:
            raise HTTPException(status_code=400, detail="IDの形式が正しくありません")

        owner_id = (
            db.query(owner_column)
            .filter(model.id == resource_id, model.deleted_at.is_(None))
            .scalar()
        )
        if owner_id is None:
            raise HTTPException(status_code=404, detail="対象が見つかりません")
        if owner_id != claims.id:
            logger.warning(f"所有者以外の操作: resource={resource}, id={resource_id}, user_id={claims.id}")
            raise HTTPException(status_code=403, detail="この操作を行う権限がありません")
        return claims

    return check_owner
