# app/crud/user.py
import enum
import uuid

from sqlalchemy.orm import Session

from app.crud.dialect import insert_for, store_errors
from app.models.user import User


class CreateResult(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Получает пользователя по его первичному ключу."""
    with store_errors(db, "getting user by id"):
        return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> User | None:
    with store_errors(db, "getting user by email"):
        return db.query(User).filter(User.email == normalize_email(email)).first()

def create_user(db: Session, user_id: uuid.UUID, email: str, password_hash: str) -> CreateResult:
    """
    Вставляет пользователя с "ON CONFLICT (email) DO NOTHING".
    Не коммитит: вызывается внутри unit_of_work.
    Возвращает явный результат, чтобы дубликат не маскировался под успех.
    """
    insert = insert_for(db)
    stmt = (
        insert(User)
        .values(id=user_id, email=normalize_email(email), password_hash=password_hash)
        .on_conflict_do_nothing(index_elements=["email"])
    )
    with store_errors(db, "inserting user"):
        result = db.execute(stmt)

    if result.rowcount == 0:
        return CreateResult.ALREADY_EXISTS
    return CreateResult.CREATED


def count_all_users(db: Session) -> int:
    with store_errors(db, "counting users"):
        return db.query(User).count()
