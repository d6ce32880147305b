from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from app.clients.geocoder import MapQuestGeocoder
from app.database import get_session
from app.dependencies import get_geocoder

router = APIRouter()


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    geocoder: MapQuestGeocoder = Depends(get_geocoder),
):
    geocoder_status = "configured" if geocoder.api_key else "not_configured"
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return {
            "status": "healthy",
            "database": "connected",
            "geocoder": geocoder_status,
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "geocoder": geocoder_status,
            "error": str(e),
        }
