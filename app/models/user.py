# app/models/user.py

import uuid

from sqlalchemy import Column, String, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from .referral import Referral, ReferralCode
from .refresh_token import RefreshToken
from app.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Связи для реферальной системы
    # Кто пригласил этого пользователя
    referrer_link = relationship("Referral", foreign_keys="Referral.user_id", back_populates="referred", uselist=False)
    # Кого пригласил этот пользователь
    referrals = relationship("Referral", foreign_keys="Referral.referred_by_user_id", back_populates="referrer")
    referral_codes = relationship("ReferralCode", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
