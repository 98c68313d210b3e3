"""問卷分類の管理"""
from typing import Optional
from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from contenthub.models.category import Category
from contenthub.models.wenjuan import Wenjuan, wenjuan_categories
from contenthub.core.exceptions import ValidationFailedError, NotFoundError
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import utcnow

logger = get_logger(__name__)


def list_categories(db: Session) -> list[tuple[Category, int]]:
    """(分類, 紐付く有効な問卷数) の一覧"""
    counts = (
        db.query(wenjuan_categories.c.category_id, func.count(Wenjuan.id).label("cnt"))
        .join(Wenjuan, Wenjuan.id == wenjuan_categories.c.wenjuan_id)
        .filter(Wenjuan.deleted_at.is_(None))
        .group_by(wenjuan_categories.c.category_id)
        .subquery()
    )
    rows = (
        db.query(Category, func.coalesce(counts.c.cnt, 0))
        .outerjoin(counts, counts.c.category_id == Category.id)
        .filter(Category.deleted_at.is_(None))
        .order_by(Category.id)
        .all()
    )
    return [(category, int(count)) for category, count in rows]


def get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id, Category.deleted_at.is_(None)).first()
    if not category:
        raise NotFoundError("分類が見つかりません")
    return category


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationFailedError("分類名は必須です")
    return name


def create_category(db: Session, name: str, description: Optional[str] = None) -> Category:
    """同名の論理削除済み分類があれば復活させる"""
    name = _clean_name(name)
    existing = db.query(Category).filter(Category.name == name).first()
    if existing and existing.deleted_at is None:
        raise ValidationFailedError("同じ名前の分類が既に存在します")

    if existing:
        existing.deleted_at = None
        existing.description = description
        category = existing
        logger.info(f"分類復活: id={existing.id}, name={name}")
    else:
        category = Category(name=name, description=description)
        db.add(category)
    db.commit()
    db.refresh(category)
    logger.info(f"分類作成: id={category.id}, name={name}")
    return category


def update_category(
    db: Session, category_id: int, name: Optional[str] = None, description: Optional[str] = None
) -> Category:
    if name is None and description is None:
        raise ValidationFailedError("更新内容がありません")
    category = get_category(db, category_id)

    if name is not None:
        name = _clean_name(name)
        duplicate = db.query(Category).filter(Category.name == name, Category.id != category_id).first()
        if duplicate:
            raise ValidationFailedError("同じ名前の分類が既に存在します")
        category.name = name
    if description is not None:
        category.description = description

    db.commit()
    db.refresh(category)
    logger.info(f"分類更新: id={category_id}")
    return category


def delete_category(db: Session, category_id: int) -> None:
    """論理削除し、問卷との紐付けは外す"""
    category = get_category(db, category_id)
    db.execute(delete(wenjuan_categories).where(wenjuan_categories.c.category_id == category_id))
    category.deleted_at = utcnow()
    db.commit()
    logger.info(f"分類削除: id={category_id}")
