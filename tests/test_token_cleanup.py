# tests/test_token_cleanup.py

from datetime import datetime, timedelta, timezone

from app.crud import referral as crud_referral
from app.crud import refresh_token as crud_refresh_token
from app.models.referral import ReferralCode
from app.models.refresh_token import RefreshToken
from app.services.token_cleanup import purge_expired_rows_task


def test_purge_removes_only_expired_rows(db_session, session_factory, registered_user, mocker):
    user, tokens = registered_user
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    crud_refresh_token.upsert_refresh_token(db_session, user_id=user.id, token="old-token", expires_at=past)
    crud_referral.upsert_referral_code(db_session, user_id=user.id, code="old-code", expires_at=past)
    crud_referral.upsert_referral_code(db_session, user_id=user.id, code="live-code", expires_at=future)
    mocker.patch("app.services.token_cleanup.SessionLocal", session_factory)

    purge_expired_rows_task()

    db_session.expire_all()
    assert [t.token for t in db_session.query(RefreshToken).all()] == [tokens.refresh_token]
    assert [c.code for c in db_session.query(ReferralCode).all()] == ["live-code"]
