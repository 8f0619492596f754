# app/core/exceptions.py
"""
Иерархия ошибок сервиса.

Каждая ошибка несет HTTP-статус, который обработчик в app/main.py
использует для ответа клиенту. Сервисный слой выбрасывает их,
роутеры не перехватывают.
"""
from fastapi import status


class ServiceError(Exception):
    """Базовая ошибка сервиса."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal service error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.detail
        super().__init__(self.detail)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid input"


# --- Не найдено ---

class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class UserNotFoundError(NotFoundError):
    detail = "User not found"


class RefreshTokenNotFoundError(NotFoundError):
    detail = "Refresh token not found or expired"


class ReferralNotFoundError(NotFoundError):
    detail = "Referral code not found"


class ReferralCodeNotFoundError(NotFoundError):
    detail = "User has no active referral code"


# --- Аутентификация ---

class InvalidCredentialsError(ServiceError):
    # Одна и та же ошибка для "нет такого email" и "неверный пароль"
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid credentials"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Could not validate credentials"


class InvalidTokenSignatureError(AuthenticationError):
    detail = "Invalid token"


class TokenExpiredError(AuthenticationError):
    detail = "Token has expired"


# --- Конфликты ---

class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Conflict"


class EmailInUseError(ConflictError):
    detail = "Email already in use"


class ReferralCodeAlreadyExistsError(ConflictError):
    def __init__(self, existing_code: str):
        self.existing_code = existing_code
        super().__init__(f"Referral code {existing_code} already exists")


# --- Внешние зависимости (БД, Redis, почта) ---

class UpstreamError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Upstream service failure"


class StoreError(UpstreamError):
    detail = "Database error"


class CacheError(UpstreamError):
    detail = "Cache error"


class MailDeliveryError(UpstreamError):
    detail = "Failed to send email"


# --- Выпуск токенов ---

class SigningKeyMissingError(RuntimeError):
    """Нет ключа подписи. Фатально при старте приложения."""


class SigningError(UpstreamError):
    detail = "Failed to sign token"


class RandomnessError(UpstreamError):
    detail = "Failed to generate random token"
