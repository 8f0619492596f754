from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Настройки базы данных
    DATABASE_USER: str
    DATABASE_PASSWORD: str
    DATABASE_HOST: str
    DATABASE_PORT: int
    DATABASE_NAME: str
    # Позволяет подменить DSN целиком (например, sqlite для локального запуска)
    DATABASE_URL_OVERRIDE: str | None = None

    # Настройки JWT токенов
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    # Количество случайных байт для refresh-токенов и реферальных кодов
    OPAQUE_TOKEN_BYTES: int = 32
    # False - старый refresh-токен остается валидным до своего истечения.
    # True - использованный токен удаляется при обновлении сессии.
    REFRESH_TOKEN_ROTATION: bool = False

    REDIS_HOST: str
    REDIS_PORT: int
    REDIS_DB: int = 0
    REFERRAL_CACHE_PREFIX: str = "referral_code"

    # Настройки почтового API
    MAIL_API_URL: str = "https://api.sendgrid.com/v3/mail/send"
    MAIL_API_KEY: str = ""
    MAIL_FROM: str = "no-reply@link-base.local"

    # Лимиты запросов
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    SIGN_IN_RATE_LIMIT: str = "5/minute"

    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS_STR: str = Field(default="http://localhost:3000", alias="ALLOWED_ORIGINS")

    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS_STR.split(',') if origin.strip()]

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+psycopg2://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    model_config = SettingsConfigDict(env_file=".env", populate_by_name=True)

settings = Settings()
