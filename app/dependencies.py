# app/dependencies.py

import logging
from typing import Iterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.clients.mail import MailClient, mail_client
from app.core.exceptions import AuthenticationError, UserNotFoundError
from app.db.session import SessionLocal
from app.models.user import User
from app.services import auth as auth_service

# --- Инициализация логгера ---
logger = logging.getLogger(__name__)

# --- Схемы аутентификации ---
strict_bearer_scheme = HTTPBearer(auto_error=True)

# --- Управление сессией БД ---
def get_db_session_instance() -> Session:
    """Создает и возвращает экземпляр сессии БД."""
    return SessionLocal()

def get_db() -> Iterator[Session]:
    """
    Основная зависимость FastAPI для получения сессии БД.
    Это генератор, который корректно работает с `Depends`.
    """
    db = get_db_session_instance()
    try:
        yield db
    finally:
        db.close()

def get_mail_client() -> MailClient:
    return mail_client

# --- Зависимости аутентификации ---

def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(strict_bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    ОБЯЗАТЕЛЬНАЯ зависимость.
    Требует валидный access-токен. Если его нет или он невалиден - ошибка 401.
    """
    try:
        user = auth_service.get_user_by_access_token(db, credentials.credentials)
    except (AuthenticationError, UserNotFoundError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.user = user
    logger.debug(f"Successfully authenticated user ID: {user.id}")
    return user
