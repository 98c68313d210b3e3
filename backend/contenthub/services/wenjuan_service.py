"""問卷 (アンケート): 作成・一覧・更新・削除・回答管理・集計"""
import json
from collections import Counter
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from contenthub.models.user import User
from contenthub.models.wenjuan import Wenjuan, WenjuanAnswer, wenjuan_categories
from contenthub.models.category import Category
from contenthub.schemas.auth import TokenClaims
from contenthub.core.exceptions import (
    AnswerCountMismatchError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import utcnow, to_naive_utc
from contenthub.services.common import paginate, like_pattern

logger = get_logger(__name__)

STATS_TOP_VALUES = 10


# --- JSON配列の検証 ---
def _parse_string_array(raw: str, label: str) -> list[str]:
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationFailedError(f"{label}はJSON配列形式で入力してください")
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationFailedError(f"{label}は文字列のJSON配列で入力してください")
    return value


def parse_questions(content: str) -> list[str]:
    """質問リストを取り出す。空配列・空文字の質問は不可"""
    questions = _parse_string_array(content, "質問")
    if not questions:
        raise ValidationFailedError("質問を1つ以上入力してください")
    for i, q in enumerate(questions, start=1):
        if not q.strip():
            raise ValidationFailedError(f"{i}番目の質問が空です")
    return questions


def parse_answers(answer: str) -> list[str]:
    return _parse_string_array(answer, "回答")


def _check_answer_count(wenjuan: Wenjuan, answer: str) -> None:
    answers = parse_answers(answer)
    questions = parse_questions(wenjuan.content)
    if len(answers) != len(questions):
        raise AnswerCountMismatchError(len(answers), len(questions))


def _check_deadline(deadline: Optional[datetime]) -> Optional[datetime]:
    deadline = to_naive_utc(deadline)
    if deadline is not None and deadline <= utcnow():
        raise ValidationFailedError("締切日時は現在より後に設定してください")
    return deadline


# --- 問卷 ---
def _active_query(db: Session):
    return db.query(Wenjuan).filter(Wenjuan.deleted_at.is_(None))


def _visible_query(db: Session, viewer: Optional[TokenClaims]):
    """閲覧者に見える問卷: 公開済み + 自分の下書き (管理者は全件)"""
    q = _active_query(db)
    if viewer is None:
        return q.filter(Wenjuan.status == "published")
    if viewer.is_admin:
        return q
    return q.filter(or_(Wenjuan.status == "published", Wenjuan.creator_id == viewer.id))


def get_active_wenjuan(db: Session, wenjuan_id: int) -> Wenjuan:
    wenjuan = _active_query(db).filter(Wenjuan.id == wenjuan_id).first()
    if not wenjuan:
        raise NotFoundError("問卷が見つかりません")
    return wenjuan


def get_wenjuan(db: Session, wenjuan_id: int, viewer: Optional[TokenClaims]) -> Wenjuan:
    wenjuan = (
        _visible_query(db, viewer)
        .options(selectinload(Wenjuan.categories))
        .filter(Wenjuan.id == wenjuan_id)
        .first()
    )
    if not wenjuan:
        raise NotFoundError("問卷が見つかりません")
    return wenjuan


def is_manager(wenjuan: Wenjuan, claims: Optional[TokenClaims]) -> bool:
    """作成者または管理者"""
    return claims is not None and (claims.is_admin or wenjuan.creator_id == claims.id)


def _get_active_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id, Category.deleted_at.is_(None)).first()
    if not category:
        raise NotFoundError("分類が見つかりません")
    return category


def create_wenjuan(db: Session, creator: User, data: dict) -> Wenjuan:
    """問卷作成。category_id 指定時は同一トランザクションで分類に紐付け"""
    title = data["title"].strip()
    if not title:
        raise ValidationFailedError("タイトルは必須です")
    parse_questions(data["content"])
    deadline = _check_deadline(data.get("deadline"))

    wenjuan = Wenjuan(
        title=title,
        content=data["content"],
        status=data.get("status") or "draft",
        deadline=deadline,
        is_pinned=False,
        creator_id=creator.id,
        user_email=creator.email,
    )
    category_id = data.get("category_id")
    if category_id:
        wenjuan.categories.append(_get_active_category(db, category_id))

    db.add(wenjuan)
    db.commit()
    db.refresh(wenjuan)
    logger.info(f"問卷作成: id={wenjuan.id}, creator_id={creator.id}, category_id={category_id}")
    return wenjuan


def list_wenjuans(
    db: Session,
    viewer: Optional[TokenClaims],
    page: int,
    page_size: int,
    is_pinned: Optional[bool] = None,
    category_id: Optional[int] = None,
) -> tuple[list[Wenjuan], int]:
    """置顶を先頭に、新しい順"""
    q = _visible_query(db, viewer)
    if is_pinned is not None:
        q = q.filter(Wenjuan.is_pinned == is_pinned)
    if category_id is not None:
        q = q.join(wenjuan_categories, wenjuan_categories.c.wenjuan_id == Wenjuan.id).filter(
            wenjuan_categories.c.category_id == category_id
        )
    q = q.order_by(Wenjuan.is_pinned.desc(), Wenjuan.created_at.desc(), Wenjuan.id.desc())
    return paginate(q, page, page_size)


def search_wenjuans(
    db: Session,
    viewer: Optional[TokenClaims],
    title: Optional[str],
    page: int,
    page_size: int,
) -> tuple[list[Wenjuan], int, int]:
    """
    タイトル部分一致検索。
    範囲外のページは最終ページに丸める。(行, 総件数, 実際のページ) を返す
    """
    q = _visible_query(db, viewer)
    if title:
        q = q.filter(Wenjuan.title.like(like_pattern(title), escape="\\"))
    total = q.count()
    last_page = max((total + page_size - 1) // page_size, 1)
    page = min(max(page, 1), last_page)
    items = (
        q.order_by(Wenjuan.created_at.desc(), Wenjuan.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total, page


def update_wenjuan(db: Session, wenjuan_id: int, updates: dict) -> Wenjuan:
    wenjuan = get_active_wenjuan(db, wenjuan_id)

    fields = {k: v for k, v in updates.items() if v is not None}
    if not fields:
        raise ValidationFailedError("更新内容がありません")
    if "title" in fields:
        if not fields["title"].strip():
            raise ValidationFailedError("タイトルは必須です")
        wenjuan.title = fields["title"].strip()
    if "content" in fields:
        parse_questions(fields["content"])
        wenjuan.content = fields["content"]
    if "status" in fields:
        wenjuan.status = fields["status"]
    if "deadline" in fields:
        wenjuan.deadline = _check_deadline(fields["deadline"])

    db.commit()
    db.refresh(wenjuan)
    logger.info(f"問卷更新: id={wenjuan_id}, fields={list(fields)}")
    return wenjuan


def delete_wenjuan(db: Session, wenjuan_id: int) -> None:
    """分類の紐付け・回答・問卷本体を1トランザクションで物理削除"""
    get_active_wenjuan(db, wenjuan_id)
    try:
        db.execute(delete(wenjuan_categories).where(wenjuan_categories.c.wenjuan_id == wenjuan_id))
        db.query(WenjuanAnswer).filter(WenjuanAnswer.wenjuan_id == wenjuan_id).delete(
            synchronize_session=False
        )
        db.query(Wenjuan).filter(Wenjuan.id == wenjuan_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"問卷削除失敗: id={wenjuan_id}")
        raise
    logger.info(f"問卷削除: id={wenjuan_id}")


def set_pinned(db: Session, wenjuan_id: int, pinned: bool) -> Wenjuan:
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    wenjuan.is_pinned = pinned
    db.commit()
    db.refresh(wenjuan)
    return wenjuan


def attach_category(db: Session, wenjuan_id: int, category_id: int) -> Wenjuan:
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    category = _get_active_category(db, category_id)
    if category in wenjuan.categories:
        raise ValidationFailedError("この分類は既に追加されています")
    wenjuan.categories.append(category)
    db.commit()
    db.refresh(wenjuan)
    return wenjuan


def detach_category(db: Session, wenjuan_id: int, category_id: int) -> Wenjuan:
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    category = next((c for c in wenjuan.categories if c.id == category_id), None)
    if category is None:
        raise NotFoundError("この分類は問卷に紐付いていません")
    wenjuan.categories.remove(category)
    db.commit()
    db.refresh(wenjuan)
    return wenjuan


# --- 回答 ---
def _active_answers(db: Session, wenjuan_id: int):
    return db.query(WenjuanAnswer).filter(
        WenjuanAnswer.wenjuan_id == wenjuan_id,
        WenjuanAnswer.deleted_at.is_(None),
    )


def count_answers(db: Session, wenjuan_id: int) -> int:
    return _active_answers(db, wenjuan_id).count()


def list_answers(db: Session, wenjuan_id: int) -> list[WenjuanAnswer]:
    """問卷の有効な回答一覧。問卷が存在しなければ NotFoundError"""
    get_active_wenjuan(db, wenjuan_id)
    return _active_answers(db, wenjuan_id).order_by(WenjuanAnswer.id).all()


def submit_answer(db: Session, wenjuan_id: int, answer: str, user: User) -> WenjuanAnswer:
    """回答提出。公開中・締切前・回答数一致が条件"""
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    if wenjuan.status != "published":
        raise ValidationFailedError("問卷が公開されていないため回答できません")
    if wenjuan.deadline is not None and utcnow() > wenjuan.deadline:
        raise ValidationFailedError("問卷の回答期限が過ぎています")
    _check_answer_count(wenjuan, answer)

    record = WenjuanAnswer(wenjuan_id=wenjuan.id, user_id=user.id, user_email=user.email, answer=answer)
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info(f"回答提出: answer_id={record.id}", extra={"wenjuan_id": wenjuan_id, "user_id": user.id})
    return record


def get_answer(db: Session, wenjuan_id: int, answer_id: int) -> WenjuanAnswer:
    get_active_wenjuan(db, wenjuan_id)
    record = _active_answers(db, wenjuan_id).filter(WenjuanAnswer.id == answer_id).first()
    if not record:
        raise NotFoundError("回答が見つかりません")
    return record


def check_answer_access(db: Session, record: WenjuanAnswer, claims: TokenClaims) -> None:
    """回答の閲覧・変更は 回答者本人・問卷作成者・管理者 のみ"""
    if claims.is_admin:
        return
    if record.user_id is not None and record.user_id == claims.id:
        return
    creator_id = db.query(Wenjuan.creator_id).filter(Wenjuan.id == record.wenjuan_id).scalar()
    if creator_id != claims.id:
        raise PermissionDeniedError("この回答を操作する権限がありません")


def update_answer(db: Session, wenjuan_id: int, answer_id: int, answer: str) -> WenjuanAnswer:
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    record = get_answer(db, wenjuan_id, answer_id)
    _check_answer_count(wenjuan, answer)
    record.answer = answer
    db.commit()
    db.refresh(record)
    logger.info(f"回答更新: wenjuan_id={wenjuan_id}, answer_id={answer_id}")
    return record


def delete_answer(db: Session, wenjuan_id: int, answer_id: int) -> None:
    record = get_answer(db, wenjuan_id, answer_id)
    record.deleted_at = utcnow()
    db.commit()
    logger.info(f"回答削除: wenjuan_id={wenjuan_id}, answer_id={answer_id}")


def answer_stats(db: Session, wenjuan_id: int) -> dict:
    """質問ごとの回答件数と回答値の分布 (上位のみ)"""
    wenjuan = get_active_wenjuan(db, wenjuan_id)
    questions = parse_questions(wenjuan.content)
    counters = [Counter() for _ in questions]
    answered = [0] * len(questions)

    records = list_answers(db, wenjuan_id)
    for record in records:
        try:
            values = parse_answers(record.answer)
        except ValidationFailedError:
            logger.warning(f"集計対象外の回答: answer_id={record.id}")
            continue
        for i, value in enumerate(values[: len(questions)]):
            if value.strip():
                answered[i] += 1
                counters[i][value.strip()] += 1

    return {
        "wenjuan_id": wenjuan.id,
        "title": wenjuan.title,
        "total_answers": len(records),
        "questions": [
            {
                "index": i,
                "question": q,
                "answered": answered[i],
                "distribution": [
                    {"value": value, "count": count}
                    for value, count in counters[i].most_common(STATS_TOP_VALUES)
                ],
            }
            for i, q in enumerate(questions)
        ],
    }
