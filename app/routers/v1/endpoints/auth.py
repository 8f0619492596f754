# app/routers/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, Request, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.limiter import limiter
from app.core.redis import get_redis_client
from app.dependencies import get_current_user, get_db
from app.models.user import User
from app.schemas.user import RefreshRequest, RevokeResponse, SignInRequest, SignUpRequest, Token
from app.services import auth as auth_service

router = APIRouter(prefix="/users")


@router.post("/sign-up", response_model=Token, status_code=status.HTTP_201_CREATED)
async def user_sign_up(
    sign_up_data: SignUpRequest,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """
    Регистрация по email и паролю. Реферальный код опционален.
    """
    return await auth_service.sign_up(
        db, redis,
        email=sign_up_data.email,
        password=sign_up_data.password,
        referral_code=sign_up_data.referral_code,
    )


@router.post("/sign-in", response_model=Token)
@limiter.limit(settings.SIGN_IN_RATE_LIMIT)
async def user_sign_in(
    request: Request,
    sign_in_data: SignInRequest,
    db: Session = Depends(get_db)
):
    """
    Вход по email и паролю.
    Защищено лимитом запросов с одного IP.
    """
    return await auth_service.sign_in(db, email=sign_in_data.email, password=sign_in_data.password)


@router.post("/auth/refresh", response_model=Token)
async def user_refresh(
    refresh_data: RefreshRequest,
    db: Session = Depends(get_db)
):
    """Новая пара токенов по действующему refresh-токену."""
    return await auth_service.refresh_tokens(db, refresh_data.token)


@router.post("/auth/revoke", response_model=RevokeResponse)
def user_revoke_sessions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Отзывает все refresh-токены текущего пользователя."""
    revoked = auth_service.revoke_all_sessions(db, current_user.id)
    return RevokeResponse(revoked=revoked)
