# app/schemas/user.py
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field


def _check_email_length(value: str) -> str:
    if not 2 <= len(value) <= 64:
        raise ValueError("email must be between 2 and 64 characters")
    return value

# Email с теми же ограничениями длины, что и на фронтенде
BoundedEmail = Annotated[EmailStr, AfterValidator(_check_email_length)]


# Схемы для данных, которые мы получаем от фронтенда
class SignUpRequest(BaseModel):
    email: BoundedEmail
    password: str = Field(min_length=1, max_length=64)
    referral_code: str | None = None

class SignInRequest(BaseModel):
    email: BoundedEmail
    password: str = Field(min_length=1, max_length=64)

class RefreshRequest(BaseModel):
    token: str = Field(min_length=1)

# Схема для ответа с токенами
class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class RevokeResponse(BaseModel):
    revoked: int
