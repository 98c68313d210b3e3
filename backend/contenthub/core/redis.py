import redis.asyncio as aioredis
from contenthub.core.config import settings

# 認証コード用の非同期Redis
redis_pool = aioredis.ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=20,
    decode_responses=True,
)


async def get_redis() -> aioredis.Redis:
    """FastAPI依存関数: 非同期Redisクライアント取得"""
    return aioredis.Redis(connection_pool=redis_pool)


async def check_redis_connection(r: aioredis.Redis) -> bool:
    """Redis接続チェック"""
    try:
        await r.ping()
        return True
    except Exception:
        return False
