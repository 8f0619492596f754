# app/schemas/referral.py
import re
from datetime import timedelta

from pydantic import BaseModel, field_validator

from app.schemas.user import BoundedEmail

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}


def parse_duration(value: str) -> timedelta:
    """
    Разбирает длительность вида "90s", "15m", "1h30m".
    Выбрасывает ValueError на пустую, неположительную или некорректную строку.
    """
    value = value.strip()
    if not value or _DURATION_PART.sub("", value):
        raise ValueError(f"invalid duration: {value!r}")

    seconds = sum(float(amount) * _UNIT_SECONDS[unit] for amount, unit in _DURATION_PART.findall(value))
    if seconds < 1:
        raise ValueError("duration must be at least 1s")
    return timedelta(seconds=seconds)


class CreateCodeRequest(BaseModel):
    ttl: timedelta

    @field_validator("ttl", mode="before")
    def parse_ttl(cls, v):
        # Принимаем как строку-длительность, так и число секунд
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("ttl")
    def ttl_positive(cls, v: timedelta):
        if v.total_seconds() < 1:
            raise ValueError("ttl must be at least 1s")
        return v

class CodeResponse(BaseModel):
    code: str

class SendEmailRequest(BaseModel):
    email: BoundedEmail
