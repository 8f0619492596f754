# app/services/auth.py

import logging
import uuid
from datetime import datetime, timedelta, timezone

from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    EmailInUseError,
    InvalidCredentialsError,
    InvalidTokenSignatureError,
    ReferralNotFoundError,
    RefreshTokenNotFoundError,
    UserNotFoundError,
)
from app.core.security import token_issuer
from app.crud import (
    referral as crud_referral,
    refresh_token as crud_refresh_token,
    user as crud_user,
)
from app.crud.user import CreateResult
from app.db.session import unit_of_work
from app.models.user import User
from app.schemas.user import Token
from app.services import referral_cache
from app.utils.passwords import DUMMY_PASSWORD_HASH, hash_password, verify_password

logger = logging.getLogger(__name__)


def create_session(db: Session, user_id: uuid.UUID) -> Token:
    """
    Выпускает пару access/refresh и сохраняет refresh-токен.
    Если любой шаг падает, сессия не возвращается.
    """
    access_token = token_issuer.issue_access_token(
        str(user_id), timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    refresh_token = token_issuer.issue_refresh_token()

    expires_at = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    crud_refresh_token.upsert_refresh_token(db, user_id=user_id, token=refresh_token, expires_at=expires_at)

    return Token(access_token=access_token, refresh_token=refresh_token)


async def sign_up(
    db: Session,
    redis: Redis,
    email: str,
    password: str,
    referral_code: str | None = None
) -> Token:
    """
    Регистрирует пользователя и сразу открывает для него сессию.
    Пользователь и реферальная связь создаются в одной транзакции.
    """
    referrer_id = None
    if referral_code:
        # Код ищется только в кеше
        referrer_id = await referral_cache.get_referrer_id(redis, referral_code)
        if referrer_id is None:
            raise ReferralNotFoundError(f"Referral code not found: {referral_code}")

    if crud_user.get_user_by_email(db, email):
        raise EmailInUseError()

    password_hash = hash_password(password)
    user_id = uuid.uuid4()

    with unit_of_work(db):
        result = crud_user.create_user(db, user_id=user_id, email=email, password_hash=password_hash)
        # Параллельная регистрация успела раньше нас
        if result is CreateResult.ALREADY_EXISTS:
            raise EmailInUseError()

        if referrer_id is not None:
            crud_referral.create_edge(db, referred_id=user_id, referrer_id=referrer_id)

    logger.info(f"User created: id={user_id}, referred_by={referrer_id}")
    return create_session(db, user_id)


async def sign_in(db: Session, email: str, password: str) -> Token:
    """
    Проверяет email и пароль. Для несуществующего email и неверного пароля
    ошибка одна и та же.
    """
    user = crud_user.get_user_by_email(db, email)
    if user is None:
        verify_password(password, DUMMY_PASSWORD_HASH)
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return create_session(db, user.id)


async def refresh_tokens(db: Session, refresh_token: str) -> Token:
    """
    Открывает новую сессию по живому refresh-токену.
    При REFRESH_TOKEN_ROTATION токен сначала удаляется, и только потом
    выпускается новая пара: один токен дает ровно одну новую сессию.
    """
    stored = crud_refresh_token.get_live_token(db, refresh_token)
    if stored is None:
        raise RefreshTokenNotFoundError()

    user_id = stored.user_id
    if settings.REFRESH_TOKEN_ROTATION:
        # Параллельный запрос с тем же токеном успел удалить его раньше нас
        if not crud_refresh_token.consume_live_token(db, user_id=user_id, token=refresh_token):
            raise RefreshTokenNotFoundError()

    return create_session(db, user_id)


def revoke_all_sessions(db: Session, user_id: uuid.UUID) -> int:
    """Удаляет все refresh-токены пользователя. Возвращает их количество."""
    revoked = crud_refresh_token.delete_all_for_user(db, user_id)
    logger.debug(f"Revoked {revoked} refresh tokens for user {user_id}")
    return revoked


def get_user_by_access_token(db: Session, token: str) -> User:
    """Проверяет access-токен и возвращает его владельца."""
    subject = token_issuer.verify_access_token(token)
    try:
        user_id = uuid.UUID(subject)
    except ValueError as e:
        raise InvalidTokenSignatureError() from e

    user = crud_user.get_user_by_id(db, user_id)
    if user is None:
        logger.debug(f"User with ID {user_id} from token not found in DB.")
        raise UserNotFoundError()
    return user
