# app/crud/dialect.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreError


def insert_for(db: Session):
    """
    Возвращает конструктор INSERT с поддержкой ON CONFLICT для диалекта сессии.
    Postgres в проде, SQLite в тестах.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


@contextmanager
def store_errors(db: Session, action: str) -> Iterator[None]:
    """Любая ошибка БД внутри блока превращается в StoreError с контекстом операции."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"error {action}: {e}") from e
