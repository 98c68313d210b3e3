"""ブログ: 一覧・作成・更新・論理削除・いいね"""
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from contenthub.models.blog import Blog
from contenthub.models.user import User
from contenthub.schemas.auth import TokenClaims
from contenthub.core.exceptions import ValidationFailedError, NotFoundError
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import utcnow
from contenthub.services.common import paginate, like_pattern

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "content", "category", "tags", "status")


def _visible_query(db: Session, viewer: Optional[TokenClaims]):
    """閲覧者に見えるブログ: 公開済み + 自分の下書き (管理者は全件)"""
    q = db.query(Blog).filter(Blog.deleted_at.is_(None))
    if viewer is None:
        return q.filter(Blog.status == "published")
    if viewer.is_admin:
        return q
    return q.filter(or_(Blog.status == "published", Blog.user_id == viewer.id))


def list_blogs(
    db: Session,
    viewer: Optional[TokenClaims],
    page: int,
    page_size: int,
    keyword: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
) -> tuple[list[Blog], int]:
    q = _visible_query(db, viewer)
    if keyword:
        q = q.filter(Blog.title.like(like_pattern(keyword), escape="\\"))
    if status:
        q = q.filter(Blog.status == status)
    if category:
        q = q.filter(Blog.category == category)
    q = q.order_by(Blog.created_at.desc(), Blog.id.desc())
    blogs, total = paginate(q, page, page_size)
    logger.debug(f"ブログ一覧: keyword={keyword}, page={page}, total={total}")
    return blogs, total


def get_blog(db: Session, blog_id: int, viewer: Optional[TokenClaims] = None) -> Blog:
    blog = _visible_query(db, viewer).filter(Blog.id == blog_id).first()
    if not blog:
        raise NotFoundError("ブログが見つかりません")
    return blog


def create_blog(db: Session, owner: User, data: dict) -> Blog:
    blog = Blog(
        title=data["title"],
        content=data["content"],
        category=data.get("category"),
        tags=data.get("tags"),
        status=data.get("status") or "draft",
        likes=0,
        user_id=owner.id,
        user_email=owner.email,
    )
    db.add(blog)
    db.commit()
    db.refresh(blog)
    logger.info(f"ブログ作成: id={blog.id}, user_id={owner.id}")
    return blog


def update_blog(db: Session, blog_id: int, updates: dict) -> Blog:
    """部分更新。値がNoneの項目は無視する"""
    fields = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
    if not fields:
        raise ValidationFailedError("更新内容がありません")

    blog = db.query(Blog).filter(Blog.id == blog_id, Blog.deleted_at.is_(None)).first()
    if not blog:
        raise NotFoundError("ブログが見つかりません")
    for key, value in fields.items():
        setattr(blog, key, value)
    db.commit()
    db.refresh(blog)
    logger.info(f"ブログ更新: id={blog_id}, fields={list(fields)}")
    return blog


def delete_blog(db: Session, blog_id: int) -> None:
    count = (
        db.query(Blog)
        .filter(Blog.id == blog_id, Blog.deleted_at.is_(None))
        .update({"deleted_at": utcnow()}, synchronize_session=False)
    )
    if count == 0:
        raise NotFoundError("ブログが見つかりません")
    db.commit()
    logger.info(f"ブログ削除: id={blog_id}")


def _current_likes(db: Session, blog_id: int) -> int:
    return db.query(Blog.likes).filter(Blog.id == blog_id).scalar() or 0


def like_blog(db: Session, blog_id: int, viewer: TokenClaims) -> int:
    """いいね +1 (UPDATE文で加算)。閲覧できないブログ(他人の下書き)は 404。更新後の件数を返す"""
    get_blog(db, blog_id, viewer)
    db.query(Blog).filter(Blog.id == blog_id).update(
        {Blog.likes: Blog.likes + 1}, synchronize_session=False
    )
    db.commit()
    return _current_likes(db, blog_id)


def dislike_blog(db: Session, blog_id: int, viewer: TokenClaims) -> int:
    """いいね -1。0未満にはしない"""
    get_blog(db, blog_id, viewer)
    db.query(Blog).filter(Blog.id == blog_id, Blog.likes > 0).update(
        {Blog.likes: Blog.likes - 1}, synchronize_session=False
    )
    db.commit()
    return _current_likes(db, blog_id)
