from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from contenthub.core.config import settings
from contenthub.core.logging import setup_logging, get_logger
from contenthub.core.exceptions import ContentHubError, contenthub_error_handler
from contenthub.core.rate_limit import limiter, rate_limit_exceeded_handler
from contenthub.routers import health, auth, users, blogs, tasks, categories, wenjuans

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションライフサイクル管理"""
    setup_logging(
        debug=settings.DEBUG,
        log_format=settings.LOG_FORMAT,
        service=settings.SITE_NAME.lower(),
        env=settings.ENV,
    )
    logger.info("アプリケーション起動")
    yield
    logger.info("アプリケーション終了")


app = FastAPI(
    title=settings.SITE_NAME,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# レート制限設定
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(ContentHubError, contenthub_error_handler)

# --- バリデーションエラー日本語化 ---
_FIELD_JA = {
    "email": "メールアドレス",
    "code": "認証コード",
    "token": "トークン",
    "role": "ロール",
    "title": "タイトル",
    "content": "内容",
    "category": "カテゴリ",
    "tags": "タグ",
    "status": "ステータス",
    "description": "説明",
    "priority": "優先度",
    "deadline": "締切日時",
    "due_date": "締切日時",
    "answer": "回答",
    "name": "名前",
    "category_id": "分類ID",
    "page": "ページ",
    "page_size": "ページサイズ",
    "per_page": "ページサイズ",
    "is_pinned": "置顶",
    "user_id": "ユーザーID",
    "blog_id": "ブログID",
    "task_id": "タスクID",
    "wenjuan_id": "問卷ID",
    "answer_id": "回答ID",
}


def _translate_error(err: dict) -> str:
    t = err.get("type", "")
    ctx = err.get("ctx", {})
    loc = err.get("loc", [])
    field = str(loc[-1]) if loc else ""
    fj = _FIELD_JA.get(field, field)

    if "email" in t or ("value" in t and "email" in err.get("msg", "").lower()):
        return f"{fj}は有効なメールアドレス形式で入力してください"
    if t == "string_too_short":
        return f"{fj}は{ctx.get('min_length', '')}文字以上で入力してください"
    if t == "string_too_long":
        return f"{fj}は{ctx.get('max_length', '')}文字以下で入力してください"
    if t == "missing":
        return f"{fj}は必須です"
    if t in ("int_parsing", "int_type"):
        return f"{fj}は数値で入力してください"
    if t == "greater_than_equal":
        return f"{fj}は{ctx.get('ge', '')}以上の値を入力してください"
    if t == "less_than_equal":
        return f"{fj}は{ctx.get('le', '')}以下の値を入力してください"
    if t == "literal_error":
        return f"{fj}は{ctx.get('expected', '')}のいずれかを指定してください"
    if t in ("datetime_parsing", "datetime_from_date_parsing", "datetime_type"):
        return f"{fj}は日時形式で入力してください"
    if t == "string_type":
        return f"{fj}は文字列で入力してください"
    if t == "bool_parsing":
        return f"{fj}は真偽値で入力してください"
    if t == "value_error":
        return str(ctx.get("error", "")) or f"{fj}: 入力値が不正です"
    if t == "json_invalid":
        return "リクエストボディのJSON形式が正しくありません"
    return f"{fj}: 入力値が不正です"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [_translate_error(e) for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "、".join(messages)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"DBエラー: {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "データベースエラーが発生しました"})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# ルーター登録 (分類は /wenjuans/{wenjuan_id} より先)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(blogs.router)
app.include_router(tasks.router)
app.include_router(categories.router)
app.include_router(wenjuans.router)
