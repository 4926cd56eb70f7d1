from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.db.session import get_db
from shiftbook.schemas.stats import StatsResponse
from shiftbook.services.stats_service import get_stats

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=StatsResponse)
async def get_stats_endpoint(db: AsyncSession = Depends(get_db)):
    return await get_stats(db)
