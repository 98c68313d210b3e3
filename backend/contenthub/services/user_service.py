"""ユーザー管理"""
from typing import Optional
from sqlalchemy.orm import Session

from contenthub.models.user import User
from contenthub.core.exceptions import ValidationFailedError, NotFoundError
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import utcnow
from contenthub.services.auth_service import get_user_by_email, get_user_by_id
from contenthub.services.common import paginate, like_pattern

logger = get_logger(__name__)


def list_users(
    db: Session,
    page: int,
    per_page: int,
    search: Optional[str] = None,
    role: Optional[str] = None,
) -> tuple[list[User], int]:
    q = db.query(User).filter(User.deleted_at.is_(None))
    if search:
        q = q.filter(User.email.like(like_pattern(search), escape="\\"))
    if role:
        q = q.filter(User.role == role)
    return paginate(q.order_by(User.id), page, per_page)


def require_user(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("ユーザーが見つかりません")
    return user


def _ensure_email_available(db: Session, email: str, user_id: int) -> str:
    email = email.strip().lower()
    existing = get_user_by_email(db, email, include_deleted=True)
    if existing and existing.id != user_id:
        raise ValidationFailedError("このメールアドレスは既に使用されています")
    return email


def update_user(db: Session, user: User, email: Optional[str] = None, role: Optional[str] = None) -> User:
    """管理者によるメール・ロール変更"""
    if email is None and role is None:
        raise ValidationFailedError("更新内容がありません")
    if email is not None:
        user.email = _ensure_email_available(db, email, user.id)
    if role is not None:
        user.role = role
    db.commit()
    db.refresh(user)
    logger.info(f"ユーザー更新: id={user.id}, email={user.email}, role={user.role}")
    return user


def update_own_email(db: Session, user: User, email: str) -> User:
    user.email = _ensure_email_available(db, email, user.id)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """論理削除"""
    user.deleted_at = utcnow()
    db.commit()
    logger.info(f"ユーザー削除: id={user.id}")
