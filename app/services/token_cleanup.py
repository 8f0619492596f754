# app/services/token_cleanup.py
import logging
from app.db.session import SessionLocal
from app.crud import referral as crud_referral
from app.crud import refresh_token as crud_refresh_token

logger = logging.getLogger(__name__)

def purge_expired_rows_task():
    """Фоновая задача: удаляет истекшие refresh-токены и реферальные коды."""
    logger.info("--- Starting scheduled job: Purge Expired Tokens and Codes ---")
    with SessionLocal() as db:
        try:
            tokens_deleted = crud_refresh_token.delete_expired(db)
            codes_deleted = crud_referral.delete_expired_codes(db)
            if tokens_deleted or codes_deleted:
                logger.info(f"Deleted {tokens_deleted} expired refresh tokens and {codes_deleted} expired referral codes.")
            else:
                logger.info("Nothing to purge.")
        except Exception:
            logger.error("An error occurred during expired rows cleanup", exc_info=True)
            db.rollback()
    logger.info("--- Finished scheduled job: Purge Expired Tokens and Codes ---")
