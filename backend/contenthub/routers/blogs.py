"""ブログAPI"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Literal, Optional

from contenthub.core.database import get_db
from contenthub.models.user import User
from contenthub.schemas.auth import TokenClaims
from contenthub.schemas.blog import BlogCreate, BlogUpdate, BlogOut
from contenthub.services import blog_service
from contenthub.services.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, pagination_meta
from contenthub.routers.deps import get_current_claims, get_current_user, get_optional_claims, require_owner

router = APIRouter(prefix="/blog", tags=["blogs"])


@router.get("")
async def list_blogs(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = None,
    status: Optional[Literal["draft", "published"]] = None,
    category: Optional[str] = None,
    viewer: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """ブログ一覧。匿名は公開済みのみ"""
    blogs, total = blog_service.list_blogs(
        db, viewer, page, page_size, keyword=keyword, status=status, category=category
    )
    return {
        "status": "success",
        "blogs": [BlogOut.model_validate(b) for b in blogs],
        "total": total,
        "pagination": pagination_meta(page, page_size, total),
    }


@router.get("/{blog_id}", response_model=BlogOut)
async def get_blog(
    blog_id: int,
    viewer: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    return BlogOut.model_validate(blog_service.get_blog(db, blog_id, viewer))


@router.post("", response_model=BlogOut, status_code=201)
async def create_blog(
    data: BlogCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """ブログ作成。作成者は認証ユーザー"""
    return BlogOut.model_validate(blog_service.create_blog(db, user, data.model_dump()))


@router.put("/{blog_id}", response_model=BlogOut)
async def update_blog(
    blog_id: int,
    data: BlogUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_owner("blog", "blog_id")),
):
    return BlogOut.model_validate(blog_service.update_blog(db, blog_id, data.model_dump()))


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_owner("blog", "blog_id")),
):
    blog_service.delete_blog(db, blog_id)
    return {"message": "ブログを削除しました"}


@router.post("/{blog_id}/like")
async def like_blog(
    blog_id: int,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims),
):
    return {"blog_id": blog_id, "total_likes": blog_service.like_blog(db, blog_id, claims)}


@router.post("/{blog_id}/dislike")
async def dislike_blog(
    blog_id: int,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims),
):
    """いいね取り消し"""
    return {"blog_id": blog_id, "total_likes": blog_service.dislike_blog(db, blog_id, claims)}
