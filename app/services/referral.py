# app/services/referral.py
import logging
import uuid
from datetime import datetime, timedelta, timezone

import httpx
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.clients.mail import MailClient
from app.core.config import settings
from app.core.exceptions import (
    CacheError,
    MailDeliveryError,
    ReferralCodeAlreadyExistsError,
    ReferralCodeNotFoundError,
    ValidationError,
)
from app.core.security import generate_opaque_token
from app.crud import referral as crud_referral
from app.services import referral_cache

logger = logging.getLogger(__name__)

REFERRAL_EMAIL_SUBJECT = "Your Referral Code"


async def create_code(db: Session, redis: Redis, user_id: uuid.UUID, ttl: timedelta) -> str:
    """
    Выпускает реферальный код на ttl.
    У пользователя может быть только один действующий код.
    Код пишется в БД и в кеш; если кеш недоступен, запись в БД откатывается.
    """
    if ttl.total_seconds() < 1:
        raise ValidationError("ttl must be at least 1s")

    code = generate_opaque_token()

    live_codes = crud_referral.get_live_codes_for_user(db, user_id)
    if live_codes:
        raise ReferralCodeAlreadyExistsError(live_codes[0].code)

    expires_at = datetime.now(timezone.utc) + ttl
    crud_referral.upsert_referral_code(db, user_id=user_id, code=code, expires_at=expires_at)

    try:
        await referral_cache.set_referral_code(redis, code, user_id, ttl)
    except CacheError:
        # Компенсация: код без записи в кеше нельзя использовать при регистрации
        logger.debug(f"Failed to cache referral code for user {user_id}, removing it from DB")
        crud_referral.delete_referral_code(db, user_id=user_id, code=code)
        raise

    logger.debug(f"Referral code issued for user {user_id}, expires at {expires_at.isoformat()}")
    return code


def find_referrals_by_user_id(db: Session, user_id: uuid.UUID) -> list[uuid.UUID]:
    """ID всех пользователей, зарегистрированных по кодам user_id."""
    return crud_referral.get_referred_user_ids(db, user_id)


def format_referral_email(code: str) -> str:
    return f"Hello!\n\nYour referral code is: {code}\n\nBest regards!"


async def send_referral_email(db: Session, mail_client: MailClient, user_id: uuid.UUID, email: str) -> None:
    """Отправляет пользователю письмо с его действующим реферальным кодом."""
    live_codes = crud_referral.get_live_codes_for_user(db, user_id)
    if not live_codes:
        raise ReferralCodeNotFoundError()

    body = format_referral_email(live_codes[0].code)
    try:
        await mail_client.send(
            sender=settings.MAIL_FROM,
            recipient=email,
            subject=REFERRAL_EMAIL_SUBJECT,
            body=body,
        )
    except httpx.HTTPError as e:
        raise MailDeliveryError(f"Failed to send referral email: {e}") from e
