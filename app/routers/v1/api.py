# app/routers/v1/api.py

from fastapi import APIRouter

from app.routers.v1.endpoints import auth, referral

# Создаем главный роутер для API версии v1
# Все пути, подключенные к нему, будут иметь префикс /api/v1
api_router = APIRouter(prefix="/v1")

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(referral.router, tags=["Referrals"])
