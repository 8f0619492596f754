# app/routers/v1/endpoints/referral.py
import uuid

from fastapi import APIRouter, Depends, Response, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.clients.mail import MailClient
from app.core.redis import get_redis_client
from app.dependencies import get_current_user, get_db, get_mail_client
from app.models.user import User
from app.schemas.referral import CodeResponse, CreateCodeRequest, SendEmailRequest
from app.services import referral as referral_service

router = APIRouter(prefix="/users")


@router.get("/referral", response_model=list[uuid.UUID])
def get_referrals(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """ID пользователей, приглашенных текущим пользователем."""
    return referral_service.find_referrals_by_user_id(db, current_user.id)


@router.post("/create-code", response_model=CodeResponse)
async def create_code(
    code_data: CreateCodeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client)
):
    """
    Создает реферальный код для текущего пользователя.
    ttl передается строкой вида "24h" или "1h30m".
    """
    code = await referral_service.create_code(db, redis, current_user.id, code_data.ttl)
    return CodeResponse(code=code)


@router.post("/send-email", status_code=status.HTTP_204_NO_CONTENT)
async def send_email(
    email_data: SendEmailRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    mail: MailClient = Depends(get_mail_client)
):
    """Отправляет действующий реферальный код на указанный email."""
    await referral_service.send_referral_email(db, mail, current_user.id, email_data.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
