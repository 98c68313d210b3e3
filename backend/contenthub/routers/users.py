"""ユーザーAPI: 自分のプロフィール、管理者によるユーザー管理"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Literal, Optional

from contenthub.core.database import get_db
from contenthub.models.user import User
from contenthub.schemas.auth import TokenClaims, UserInfo
from contenthub.schemas.task import TaskOut
from contenthub.schemas.user import UserUpdate, SelfUpdate
from contenthub.services import user_service, task_service
from contenthub.services.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, pagination_meta
from contenthub.routers.deps import get_current_claims, get_current_user, require_admin

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/me", response_model=UserInfo)
async def get_me(user: User = Depends(get_current_user)):
    """現在のログインユーザー情報"""
    return UserInfo.model_validate(user)


@router.put("/self", response_model=UserInfo)
async def update_self(
    data: SelfUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """自分のメールアドレス変更"""
    return UserInfo.model_validate(user_service.update_own_email(db, user, data.email))


@router.get("/me/tasks")
async def list_my_tasks(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """自分が作成したタスク一覧"""
    tasks, total = task_service.list_tasks(db, page, page_size, creator_id=user.id)
    return {
        "status": "success",
        "tasks": [TaskOut.model_validate(t) for t in tasks],
        "total": total,
        "pagination": pagination_meta(page, page_size, total),
    }


@router.get("/")
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = None,
    role: Optional[Literal["user", "admin"]] = None,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    """ユーザー一覧 (管理者)"""
    users, total = user_service.list_users(db, page, per_page, search=search, role=role)
    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "users": [UserInfo.model_validate(u) for u in users],
    }


@router.get("/{user_id}", response_model=UserInfo)
async def get_user(
    user_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """ユーザー詳細 (本人または管理者)"""
    if not claims.is_admin and claims.id != user_id:
        raise HTTPException(status_code=403, detail="他のユーザー情報は閲覧できません")
    return UserInfo.model_validate(user_service.require_user(db, user_id))


@router.put("/{user_id}", response_model=UserInfo)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    """メールアドレス・ロール変更 (管理者)"""
    user = user_service.require_user(db, user_id)
    return UserInfo.model_validate(user_service.update_user(db, user, email=data.email, role=data.role))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: TokenClaims = Depends(require_admin),
):
    """ユーザー削除 (管理者・論理削除)"""
    if admin.id == user_id:
        raise HTTPException(status_code=400, detail="自分自身は削除できません")
    user = user_service.require_user(db, user_id)
    user_service.delete_user(db, user)
    return {"message": "ユーザーを削除しました"}
