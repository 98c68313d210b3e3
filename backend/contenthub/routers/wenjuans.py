"""問卷API: 問卷・回答・集計・エクスポート"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Optional

from contenthub.core.database import get_db
from contenthub.models.user import User
from contenthub.models.wenjuan import Wenjuan
from contenthub.schemas.auth import TokenClaims
from contenthub.schemas.wenjuan import (
    WenjuanCreate,
    WenjuanUpdate,
    WenjuanOut,
    AnswerSubmit,
    AnswerOut,
    CategoryOut,
)
from contenthub.services import wenjuan_service, export_service
from contenthub.services.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, pagination_meta, total_pages
from contenthub.routers.deps import (
    get_current_claims,
    get_current_user,
    get_optional_claims,
    require_owner,
)

router = APIRouter(prefix="/wenjuans", tags=["wenjuans"])

owner_only = require_owner("wenjuan", "wenjuan_id")


def _detail(db: Session, wenjuan: Wenjuan, viewer: Optional[TokenClaims]) -> dict:
    """問卷詳細。回答一覧は作成者・管理者にのみ含める"""
    data = WenjuanOut.model_validate(wenjuan).model_dump()
    data["questions"] = wenjuan_service.parse_questions(wenjuan.content)
    data["categories"] = [CategoryOut.model_validate(c).model_dump() for c in wenjuan.categories]
    data["answer_count"] = wenjuan_service.count_answers(db, wenjuan.id)
    if wenjuan_service.is_manager(wenjuan, viewer):
        data["answers"] = [AnswerOut.model_validate(a) for a in wenjuan_service.list_answers(db, wenjuan.id)]
    return data


@router.get("")
async def list_wenjuans(
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    is_pinned: Optional[bool] = None,
    category_id: Optional[int] = Query(None, ge=1),
    viewer: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """問卷一覧 (置顶が先頭)"""
    wenjuans, total = wenjuan_service.list_wenjuans(
        db, viewer, page, page_size, is_pinned=is_pinned, category_id=category_id
    )
    return {
        "status": "success",
        "wenjuans": [WenjuanOut.model_validate(w) for w in wenjuans],
        "total": total,
        "pagination": pagination_meta(page, page_size, total),
    }


@router.get("/search")
async def search_wenjuans(
    title: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    viewer: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """タイトル検索"""
    wenjuans, total, page = wenjuan_service.search_wenjuans(db, viewer, title, page, page_size)
    pages = total_pages(total, page_size)
    return {
        "total": total,
        "total_pages": pages,
        "current_page": page,
        "page_size": page_size,
        "list": [WenjuanOut.model_validate(w) for w in wenjuans],
        "has_more": page < pages,
    }


@router.get("/{wenjuan_id}")
async def get_wenjuan(
    wenjuan_id: int,
    viewer: Optional[TokenClaims] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    wenjuan = wenjuan_service.get_wenjuan(db, wenjuan_id, viewer)
    return _detail(db, wenjuan, viewer)


@router.post("", status_code=201)
async def create_wenjuan(
    data: WenjuanCreate,
    user: User = Depends(get_current_user),
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    wenjuan = wenjuan_service.create_wenjuan(db, user, data.model_dump())
    return _detail(db, wenjuan, claims)


@router.put("/{wenjuan_id}")
async def update_wenjuan(
    wenjuan_id: int,
    data: WenjuanUpdate,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(owner_only),
):
    wenjuan = wenjuan_service.update_wenjuan(db, wenjuan_id, data.model_dump())
    return _detail(db, wenjuan, claims)


@router.delete("/{wenjuan_id}")
async def delete_wenjuan(
    wenjuan_id: int,
    db: Session = Depends(get_db),
    _=Depends(owner_only),
):
    """問卷・回答・分類の紐付けをまとめて削除"""
    wenjuan_service.delete_wenjuan(db, wenjuan_id)
    return {"message": "問卷を削除しました"}


@router.post("/{wenjuan_id}/pin", response_model=WenjuanOut)
async def pin_wenjuan(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    return WenjuanOut.model_validate(wenjuan_service.set_pinned(db, wenjuan_id, True))


@router.post("/{wenjuan_id}/unpin", response_model=WenjuanOut)
async def unpin_wenjuan(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    return WenjuanOut.model_validate(wenjuan_service.set_pinned(db, wenjuan_id, False))


@router.post("/{wenjuan_id}/categories/{category_id}")
async def add_category(
    wenjuan_id: int,
    category_id: int,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(owner_only),
):
    wenjuan = wenjuan_service.attach_category(db, wenjuan_id, category_id)
    return _detail(db, wenjuan, claims)


@router.delete("/{wenjuan_id}/categories/{category_id}")
async def remove_category(
    wenjuan_id: int,
    category_id: int,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(owner_only),
):
    wenjuan = wenjuan_service.detach_category(db, wenjuan_id, category_id)
    return _detail(db, wenjuan, claims)


# --- 回答 ---
@router.post("/{wenjuan_id}/answers", response_model=AnswerOut, status_code=201)
async def submit_answer(
    wenjuan_id: int,
    data: AnswerSubmit,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """回答提出。回答数は質問数と一致していること"""
    return AnswerOut.model_validate(wenjuan_service.submit_answer(db, wenjuan_id, data.answer, user))


@router.get("/{wenjuan_id}/answers")
async def list_answers(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    answers = wenjuan_service.list_answers(db, wenjuan_id)
    return {"wenjuan_id": wenjuan_id, "total": len(answers), "answers": [AnswerOut.model_validate(a) for a in answers]}


@router.get("/{wenjuan_id}/answers/{answer_id}", response_model=AnswerOut)
async def get_answer(
    wenjuan_id: int,
    answer_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    record = wenjuan_service.get_answer(db, wenjuan_id, answer_id)
    wenjuan_service.check_answer_access(db, record, claims)
    return AnswerOut.model_validate(record)


@router.put("/{wenjuan_id}/answers/{answer_id}", response_model=AnswerOut)
async def update_answer(
    wenjuan_id: int,
    answer_id: int,
    data: AnswerSubmit,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    record = wenjuan_service.get_answer(db, wenjuan_id, answer_id)
    wenjuan_service.check_answer_access(db, record, claims)
    return AnswerOut.model_validate(wenjuan_service.update_answer(db, wenjuan_id, answer_id, data.answer))


@router.delete("/{wenjuan_id}/answers/{answer_id}")
async def delete_answer(
    wenjuan_id: int,
    answer_id: int,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    record = wenjuan_service.get_answer(db, wenjuan_id, answer_id)
    wenjuan_service.check_answer_access(db, record, claims)
    wenjuan_service.delete_answer(db, wenjuan_id, answer_id)
    return {"message": "回答を削除しました"}


# --- 集計・エクスポート ---
@router.get("/{wenjuan_id}/stats")
async def get_stats(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    return wenjuan_service.answer_stats(db, wenjuan_id)


@router.get("/{wenjuan_id}/export/pdf")
async def export_pdf(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    wenjuan = wenjuan_service.get_active_wenjuan(db, wenjuan_id)
    data = export_service.export_pdf(wenjuan, wenjuan_service.list_answers(db, wenjuan_id))
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="wenjuan_{wenjuan_id}.pdf"'},
    )


@router.get("/{wenjuan_id}/export/csv")
async def export_csv(wenjuan_id: int, db: Session = Depends(get_db), _=Depends(owner_only)):
    wenjuan = wenjuan_service.get_active_wenjuan(db, wenjuan_id)
    data = export_service.export_csv(wenjuan, wenjuan_service.list_answers(db, wenjuan_id))
    return Response(
        content=data,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="wenjuan_{wenjuan_id}_answers.csv"'},
    )
