# routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from schemas.stats import HealthRead, StatsRead
from services.stats import get_stats

router = APIRouter()


@router.get("/health", response_model=HealthRead, summary="Health check")
async def healthcheck():
    return HealthRead(status="OK", timestamp=datetime.now(timezone.utc))


@router.get("/stats", response_model=StatsRead, summary="Статистика базы")
async def stats(db: AsyncSession = Depends(get_db)):
    return await get_stats(db)
