"""問卷分類API (更新系は管理者のみ)"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contenthub.core.database import get_db
from contenthub.schemas.wenjuan import CategoryCreate, CategoryUpdate, CategoryOut
from contenthub.services import category_service
from contenthub.routers.deps import require_admin

# /wenjuans/{wenjuan_id} より先に登録すること
router = APIRouter(prefix="/wenjuans/categories", tags=["categories"])


@router.get("")
async def list_categories(db: Session = Depends(get_db)):
    """分類一覧 (紐付く問卷数つき)"""
    rows = category_service.list_categories(db)
    return {
        "status": "success",
        "categories": [
            {**CategoryOut.model_validate(c).model_dump(), "wenjuan_count": count}
            for c, count in rows
        ],
    }


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: int, db: Session = Depends(get_db)):
    return CategoryOut.model_validate(category_service.get_category(db, category_id))


@router.post("", response_model=CategoryOut, status_code=201)
async def create_category(
    data: CategoryCreate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return CategoryOut.model_validate(category_service.create_category(db, data.name, data.description))


@router.put("/{category_id}", response_model=CategoryOut)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    category = category_service.update_category(db, category_id, name=data.name, description=data.description)
    return CategoryOut.model_validate(category)


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    category_service.delete_category(db, category_id)
    return {"message": "分類を削除しました"}
