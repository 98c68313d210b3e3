from fastapi import APIRouter, Depends
from contenthub.core.database import check_db_connection
from contenthub.core.redis import get_redis, check_redis_connection

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check(r=Depends(get_redis)):
    """ヘルスチェックエンドポイント"""
    db_ok = check_db_connection()
    redis_ok = await check_redis_connection(r)

    status = "ok" if (db_ok and redis_ok) else "degraded"

    return {
        "status": status,
        "db": "connected" if db_ok else "disconnected",
        "redis": "connected" if redis_ok else "disconnected",
    }
