"""タスク: 一覧・作成・更新・論理削除"""
from typing import Optional
from sqlalchemy.orm import Session

from contenthub.models.task import Task
from contenthub.models.user import User
from contenthub.core.exceptions import ValidationFailedError, NotFoundError
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import utcnow, to_naive_utc
from contenthub.services.common import paginate, like_pattern

logger = get_logger(__name__)

DEFAULT_PRIORITY = "medium"
DEFAULT_STATUS = "pending"
UPDATABLE_FIELDS = ("title", "description", "priority", "status", "deadline")


def _active():
    return Task.deleted_at.is_(None)


def list_tasks(
    db: Session,
    page: int,
    page_size: int,
    keyword: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    creator_id: Optional[int] = None,
) -> tuple[list[Task], int]:
    q = db.query(Task).filter(_active())
    if keyword:
        q = q.filter(Task.title.like(like_pattern(keyword), escape="\\"))
    if status:
        q = q.filter(Task.status == status)
    if priority:
        q = q.filter(Task.priority == priority)
    if creator_id is not None:
        q = q.filter(Task.creator_id == creator_id)
    return paginate(q.order_by(Task.created_at.desc(), Task.id.desc()), page, page_size)


def get_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, _active()).first()
    if not task:
        raise NotFoundError("タスクが見つかりません")
    return task


def create_task(db: Session, creator: User, data: dict) -> Task:
    task = Task(
        title=data["title"],
        description=data.get("description"),
        priority=data.get("priority") or DEFAULT_PRIORITY,
        status=data.get("status") or DEFAULT_STATUS,
        deadline=to_naive_utc(data.get("deadline")),
        creator_id=creator.id,
        user_email=creator.email,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info(f"タスク作成: id={task.id}, creator_id={creator.id}, priority={task.priority}")
    return task


def update_task(db: Session, task_id: int, updates: dict) -> Task:
    fields = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
    if not fields:
        raise ValidationFailedError("更新内容がありません")
    if "deadline" in fields:
        fields["deadline"] = to_naive_utc(fields["deadline"])

    task = get_task(db, task_id)
    for key, value in fields.items():
        setattr(task, key, value)
    db.commit()
    db.refresh(task)
    logger.info(f"タスク更新: id={task_id}, fields={list(fields)}")
    return task


def delete_task(db: Session, task_id: int) -> None:
    count = (
        db.query(Task)
        .filter(Task.id == task_id, _active())
        .update({"deleted_at": utcnow()}, synchronize_session=False)
    )
    if count == 0:
        raise NotFoundError("タスクが見つかりません")
    db.commit()
    logger.info(f"タスク削除: id={task_id}")
