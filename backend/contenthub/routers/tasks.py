"""タスクAPI"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Literal, Optional

from contenthub.core.database import get_db
from contenthub.models.user import User
from contenthub.schemas.task import TaskCreate, TaskUpdate, TaskOut
from contenthub.services import task_service
from contenthub.services.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, pagination_meta
from contenthub.routers.deps import get_current_claims, get_current_user, require_owner

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = None,
    status: Optional[Literal["pending", "in_progress", "completed"]] = None,
    priority: Optional[Literal["high", "medium", "low"]] = None,
    db: Session = Depends(get_db),
    _=Depends(get_current_claims),
):
    tasks, total = task_service.list_tasks(
        db, page, page_size, keyword=keyword, status=status, priority=priority
    )
    return {
        "status": "success",
        "tasks": [TaskOut.model_validate(t) for t in tasks],
        "total": total,
        "pagination": pagination_meta(page, page_size, total),
    }


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    _=Depends(get_current_claims),
):
    return TaskOut.model_validate(task_service.get_task(db, task_id))


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(
    data: TaskCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """タスク作成。priority / status 省略時は medium / pending"""
    return TaskOut.model_validate(task_service.create_task(db, user, data.model_dump()))


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_owner("task", "task_id")),
):
    return TaskOut.model_validate(task_service.update_task(db, task_id, data.model_dump()))


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_owner("task", "task_id")),
):
    task_service.delete_task(db, task_id)
    return {"message": "タスクを削除しました"}
