# app/models/refresh_token.py
from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from app.db.session import Base

class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # Непрозрачная случайная строка, без claim'ов
    token = Column(String(255), primary_key=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="refresh_tokens")
