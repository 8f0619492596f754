# app/main.py

import logging
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Конфигурация и ядро
from app.core.config import settings as config
from app.core.exceptions import ServiceError
from app.core.limiter import limiter
from app.core.logging_config import setup_logging
from app.core.redis import redis_client
from app.clients.mail import mail_client

# Роутеры FastAPI
from app.routers.v1.api import api_router as api_v1_router

# Фоновые задачи
from app.services.token_cleanup import purge_expired_rows_task

# --- Инициализация ---
logger = logging.getLogger(__name__)
scheduler = AsyncIOScheduler()

# --- Обработчики ошибок ---
async def service_exception_handler(request: Request, exc: ServiceError):
    """Ошибки сервисного слоя отдаются клиенту с их собственным статусом."""
    if exc.status_code >= 500:
        logger.error(f"Upstream failure for request {request.method} {request.url}: {exc.detail}", exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Глобальный обработчик для всех необработанных исключений.
    """
    logger.critical(f"Unhandled exception for request: {request.method} {request.url}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
    )

# --- Lifespan Manager (запуск и остановка приложения) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    logger.info("Application lifespan startup...")

    # Блокировка через Redis: планировщик запускается только в одном воркере
    is_main_worker = await redis_client.set("app_startup_lock", "1", ex=60, nx=True)

    if is_main_worker:
        logger.info("This is the main worker. Starting scheduler...")
        if not scheduler.running:
            scheduler.add_job(purge_expired_rows_task, 'cron', hour=3, minute=0)
            scheduler.start()
            logger.info("Scheduler started with background jobs.")
    else:
        logger.info("This is a secondary worker. Skipping scheduler setup.")

    yield

    if is_main_worker:
        logger.info("Main worker shutting down...")
        if scheduler.running:
            scheduler.shutdown()
            logger.info("Scheduler shut down.")
        await redis_client.delete("app_startup_lock")

    await mail_client.aclose()
    await redis_client.aclose()

# --- Создание FastAPI приложения ---
app = FastAPI(
    title="Link Base",
    description="User accounts, sessions and referral codes",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Лимитер запросов ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Регистрация обработчиков исключений ---
app.add_exception_handler(ServiceError, service_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Подключение роутеров FastAPI ---
api_router = APIRouter(prefix="/api")
api_router.include_router(api_v1_router)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
