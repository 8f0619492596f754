# app/models/referral.py
from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from app.db.session import Base

class Referral(Base):
    """Реферальная связь: кто кого пригласил. Создается один раз при регистрации."""
    __tablename__ = "referrals"

    # ID того, кого пригласили. Не больше одной связи на пользователя.
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # ID того, кто пригласил
    referred_by_user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    referred = relationship("User", foreign_keys=[user_id], back_populates="referrer_link")
    referrer = relationship("User", foreign_keys=[referred_by_user_id], back_populates="referrals")


class ReferralCode(Base):
    """Реферальный код с ограниченным сроком действия."""
    __tablename__ = "referral_codes"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    code = Column(String(255), primary_key=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="referral_codes")
