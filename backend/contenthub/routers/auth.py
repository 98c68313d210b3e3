"""認証ルーター: 認証コード送信、ログイン兼登録、トークン検証・再発行"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from contenthub.core.database import get_db
from contenthub.core.redis import get_redis
from contenthub.core.rate_limit import limiter, SEND_CODE_RATE_LIMIT, LOGIN_RATE_LIMIT
from contenthub.core.logging import get_logger
from contenthub.core.security import (
    TokenError,
    create_access_token,
    decode_refreshable_token,
    token_remaining_seconds,
)
from contenthub.schemas.auth import (
    SendCodeRequest,
    LoginRequest,
    LoginResponse,
    TokenResponse,
    MessageResponse,
    UserInfo,
    TokenClaims,
)
from contenthub.services import auth_service
from contenthub.services.auth_service import VerifyResult, VERIFY_CODE_TTL
from contenthub.services.mail_service import send_verify_code_email
from contenthub.routers.deps import extract_token, get_current_claims, load_active_user

logger = get_logger(__name__)

router = APIRouter(prefix="/user", tags=["auth"])


@router.post("/send-code", response_model=MessageResponse)
@limiter.limit(SEND_CODE_RATE_LIMIT)
async def send_code(request: Request, req: SendCodeRequest, r=Depends(get_redis)):
    """ログイン用認証コード送信"""
    code = await auth_service.generate_verify_code(r, req.email)
    if code is None:
        raise HTTPException(status_code=429, detail="認証がロックされています。しばらくお待ちください。")

    if not send_verify_code_email(to_email=req.email, code=code, ttl_minutes=VERIFY_CODE_TTL // 60):
        await auth_service.discard_verify_code(r, req.email)
        raise HTTPException(status_code=500, detail="認証コードの送信に失敗しました")

    return MessageResponse(message="認証コードを送信しました")


@router.post("/login-or-register", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login_or_register(
    request: Request,
    req: LoginRequest,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
):
    """認証コードでログイン。未登録のメールアドレスなら自動登録"""
    result, msg = await auth_service.verify_code(r, req.email, req.code)
    if result == VerifyResult.LOCKED:
        raise HTTPException(status_code=429, detail=msg)
    if result != VerifyResult.OK:
        logger.warning(f"認証コード検証失敗: email={req.email}, result={result}")
        raise HTTPException(status_code=401, detail=msg)

    user, created = auth_service.get_or_create_user(db, req.email)
    if user.deleted_at is not None:
        raise HTTPException(status_code=403, detail="このアカウントは無効化されています")

    token = create_access_token(user.id, user.email, user.role)
    return LoginResponse(
        message="登録しました" if created else "ログインしました",
        token=token,
        user=UserInfo.model_validate(user),
    )


@router.get("/validate-token")
async def validate_token(request: Request, claims: TokenClaims = Depends(get_current_claims)):
    """トークンの有効性と残り秒数"""
    return {
        "valid": True,
        "user": {"id": claims.id, "email": claims.email, "role": claims.role},
        "expires_in": token_remaining_seconds(extract_token(request)),
    }


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(request: Request, db: Session = Depends(get_db)):
    """トークン再発行 (期限切れでも署名が正しければ可)。削除済みユーザーは不可"""
    token = extract_token(request)
    if not token:
        raise HTTPException(
            status_code=401, detail="ログインが必要です", headers={"WWW-Authenticate": "Bearer"}
        )
    try:
        claims = decode_refreshable_token(token)
    except TokenError as e:
        logger.warning(f"トークン再発行失敗: {e}")
        raise HTTPException(
            status_code=401, detail="無効なトークンです", headers={"WWW-Authenticate": "Bearer"}
        )
    user = load_active_user(db, claims.id)
    if user is None:
        logger.warning("削除済みユーザーのトークン再発行", extra={"user_id": claims.id})
        raise HTTPException(
            status_code=401, detail="ユーザーが存在しないか削除されています", headers={"WWW-Authenticate": "Bearer"}
        )
    return TokenResponse(token=create_access_token(user.id, user.email, user.role))
