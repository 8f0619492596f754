# app/db/session.py
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# Пул соединений общий для всех запросов
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Транзакция на несколько таблиц.
    Коммит ровно один раз при успехе, откат ровно один раз при любой ошибке
    (включая отмену корутины), после чего исключение пробрасывается дальше.
    """
    try:
        yield db
    except BaseException:
        db.rollback()
        logger.debug("Unit of work rolled back.")
        raise
    else:
        db.commit()
