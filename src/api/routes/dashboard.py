"""
Dashboard Endpoints
"""
from fastapi import APIRouter, Depends

from src.api.dependencies import get_dashboard_service
from src.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("")
async def dashboard(service: DashboardService = Depends(get_dashboard_service)):
    """Stats, next pending tasks and newest contacts."""
    overview = await service.overview()
    return overview.model_dump(mode="json")


@router.get("/stats")
async def dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    stats = await service.stats()
    return stats.model_dump(mode="json")
