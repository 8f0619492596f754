# app/clients/mail.py

import httpx
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class MailClient:
    """
    Асинхронный клиент почтового HTTP API (формат SendGrid v3).
    Без повторов: любая ошибка доставки пробрасывается вызывающему.
    """
    def __init__(self, api_url: str, api_key: str):
        self.api_url = api_url
        self.api_key = api_key
        timeouts = httpx.Timeout(10.0, read=30.0)
        self.async_client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeouts
        )

    async def send(self, sender: str, recipient: str, subject: str, body: str) -> None:
        """
        Отправляет текстовое письмо.
        В случае сетевой или HTTP-ошибки (4xx/5xx) выбрасывает исключение httpx.
        """
        payload = {
            "personalizations": [{"to": [{"email": recipient}], "subject": subject}],
            "from": {"email": sender},
            "content": [{"type": "text/plain", "value": body}],
        }
        try:
            response = await self.async_client.post(self.api_url, json=payload)
            response.raise_for_status()
        except httpx.RequestError as e:
            logger.error(f"Network error during mail request to {e.request.url!r}.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during mail request to {e.request.url!r}: {e.response.text}", exc_info=True)
            raise
        logger.info(f"Email '{subject}' sent to {recipient}")

    async def aclose(self) -> None:
        await self.async_client.aclose()

# Создаем синглтон
mail_client = MailClient(
    api_url=settings.MAIL_API_URL,
    api_key=settings.MAIL_API_KEY
)
