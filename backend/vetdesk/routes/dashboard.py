"""VetDesk Backend — Dashboard Routes"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vetdesk.database import get_db_session
from vetdesk.models import User
from vetdesk.routes.deps import AUTH_ERRORS, get_current_user
from vetdesk.schemas.dashboard import DashboardStats, UpcomingVisit
from vetdesk.services.dashboard_service import dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStats,
    responses=AUTH_ERRORS,
    summary="Headline numbers for the current month",
)
async def get_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> DashboardStats:
    return await dashboard_service.get_stats(db, user)


@router.get(
    "/upcoming",
    response_model=List[UpcomingVisit],
    responses=AUTH_ERRORS,
    summary="Next five scheduled visits",
)
async def get_upcoming(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[UpcomingVisit]:
    return await dashboard_service.get_upcoming(db, user)
