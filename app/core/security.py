# app/core/security.py

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import settings
from app.core.exceptions import (
    InvalidTokenSignatureError,
    RandomnessError,
    SigningError,
    SigningKeyMissingError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)


def generate_opaque_token(nbytes: int | None = None) -> str:
    """
    Генерирует криптографически стойкую непрозрачную строку.
    Используется и для refresh-токенов, и для реферальных кодов.
    Уникальность обеспечивается случайностью, а не проверкой в БД.
    """
    try:
        return secrets.token_urlsafe(nbytes or settings.OPAQUE_TOKEN_BYTES)
    except (OSError, NotImplementedError) as e:
        logger.error("Entropy source failure while generating token", exc_info=True)
        raise RandomnessError() from e


class TokenIssuer:
    """
    Выпускает подписанные access-токены (JWT) и непрозрачные refresh-токены.
    Access-токен проверяется без обращения к БД, refresh-токен - только через БД.
    """
    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        if not secret_key:
            raise SigningKeyMissingError("SECRET_KEY is empty, cannot sign tokens")
        self.secret_key = secret_key
        self.algorithm = algorithm

    def issue_access_token(self, subject: str, ttl: timedelta) -> str:
        """Создает JWT с claim'ами sub, iat, exp и jti."""
        now = datetime.now(timezone.utc)
        to_encode = {"sub": str(subject), "iat": now, "exp": now + ttl, "jti": uuid.uuid4().hex}
        try:
            return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        except JWTError as e:
            raise SigningError() from e

    def issue_refresh_token(self) -> str:
        return generate_opaque_token()

    def verify_access_token(self, token: str) -> str:
        """
        Проверяет подпись и срок действия токена.
        Возвращает subject (ID пользователя).
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            logger.warning(f"JWT Error during token decoding: {e}")
            raise InvalidTokenSignatureError() from e

        subject = payload.get("sub")
        if not subject:
            logger.warning("Token payload is missing 'sub' (user_id).")
            raise InvalidTokenSignatureError()
        return subject


# Синглтон. Отсутствие ключа роняет приложение при импорте, а не на запросе.
token_issuer = TokenIssuer(settings.SECRET_KEY, settings.ALGORITHM)
