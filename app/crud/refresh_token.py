# app/crud/refresh_token.py
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.crud.dialect import insert_for, store_errors
from app.models.refresh_token import RefreshToken


def upsert_refresh_token(db: Session, user_id: uuid.UUID, token: str, expires_at: datetime) -> None:
    """Сохраняет refresh-токен. При конфликте (user_id, token) обновляет срок действия."""
    insert = insert_for(db)
    stmt = insert(RefreshToken).values(user_id=user_id, token=token, expires_at=expires_at)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "token"],
        set_={"expires_at": stmt.excluded.expires_at},
    )
    with store_errors(db, "inserting or updating refresh token"):
        db.execute(stmt)
        db.commit()

def get_live_token(db: Session, token: str) -> RefreshToken | None:
    """Находит неистекший refresh-токен по его значению."""
    now = datetime.now(timezone.utc)
    with store_errors(db, "getting refresh token"):
        return db.query(RefreshToken).filter(
            RefreshToken.token == token,
            RefreshToken.expires_at > now
        ).first()

def get_live_token_by_user_id(db: Session, user_id: uuid.UUID) -> RefreshToken | None:
    now = datetime.now(timezone.utc)
    with store_errors(db, "getting refresh token by user id"):
        return db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.expires_at > now
        ).order_by(RefreshToken.expires_at.desc()).first()

def consume_live_token(db: Session, user_id: uuid.UUID, token: str) -> bool:
    """
    Удаляет неистекший токен одним DELETE.
    False - токен уже использован другим запросом или истек.
    """
    now = datetime.now(timezone.utc)
    with store_errors(db, "consuming refresh token"):
        deleted = db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.token == token,
            RefreshToken.expires_at > now
        ).delete(synchronize_session=False)
        db.commit()
    return deleted > 0

def delete_all_for_user(db: Session, user_id: uuid.UUID) -> int:
    """Отзывает все refresh-токены пользователя."""
    with store_errors(db, "deleting refresh tokens for user"):
        deleted = db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id
        ).delete(synchronize_session=False)
        db.commit()
    return deleted

def delete_expired(db: Session) -> int:
    now = datetime.now(timezone.utc)
    with store_errors(db, "deleting expired refresh tokens"):
        deleted = db.query(RefreshToken).filter(
            RefreshToken.expires_at <= now
        ).delete(synchronize_session=False)
        db.commit()
    return deleted
