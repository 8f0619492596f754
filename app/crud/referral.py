# app/crud/referral.py
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.crud.dialect import insert_for, store_errors
from app.models.referral import Referral, ReferralCode


def create_edge(db: Session, referred_id: uuid.UUID, referrer_id: uuid.UUID) -> None:
    """
    Создает реферальную связь. Если у приглашенного связь уже есть - ничего не делает.
    Не коммитит: вызывается внутри unit_of_work.
    """
    insert = insert_for(db)
    stmt = (
        insert(Referral)
        .values(user_id=referred_id, referred_by_user_id=referrer_id)
        .on_conflict_do_nothing(index_elements=["user_id"])
    )
    with store_errors(db, "inserting referral"):
        db.execute(stmt)

def get_referral_by_referred_id(db: Session, referred_id: uuid.UUID) -> Referral | None:
    """Находит реферальную связь по ID приглашенного пользователя."""
    with store_errors(db, "getting referral"):
        return db.query(Referral).filter(Referral.user_id == referred_id).first()

def get_referred_user_ids(db: Session, referrer_id: uuid.UUID) -> list[uuid.UUID]:
    """Все пользователи, которых пригласил referrer_id."""
    with store_errors(db, "getting referrals by user id"):
        rows = db.query(Referral.user_id).filter(
            Referral.referred_by_user_id == referrer_id
        ).order_by(Referral.created_at).all()
    return [row.user_id for row in rows]

# --- Реферальные коды ---

def upsert_referral_code(db: Session, user_id: uuid.UUID, code: str, expires_at: datetime) -> None:
    insert = insert_for(db)
    stmt = insert(ReferralCode).values(user_id=user_id, code=code, expires_at=expires_at)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "code"],
        set_={"expires_at": stmt.excluded.expires_at},
    )
    with store_errors(db, "inserting or updating referral code"):
        db.execute(stmt)
        db.commit()

def delete_referral_code(db: Session, user_id: uuid.UUID, code: str) -> int:
    with store_errors(db, "deleting referral code"):
        deleted = db.query(ReferralCode).filter(
            ReferralCode.user_id == user_id,
            ReferralCode.code == code
        ).delete(synchronize_session=False)
        db.commit()
    return deleted

def get_live_codes_for_user(db: Session, user_id: uuid.UUID) -> list[ReferralCode]:
    """Неистекшие коды пользователя. Пустой список означает "кода нет"."""
    now = datetime.now(timezone.utc)
    with store_errors(db, "getting referral codes"):
        return db.query(ReferralCode).filter(
            ReferralCode.user_id == user_id,
            ReferralCode.expires_at > now
        ).order_by(ReferralCode.expires_at.desc()).all()

def delete_expired_codes(db: Session) -> int:
    now = datetime.now(timezone.utc)
    with store_errors(db, "deleting expired referral codes"):
        deleted = db.query(ReferralCode).filter(
            ReferralCode.expires_at <= now
        ).delete(synchronize_session=False)
        db.commit()
    return deleted
