"""
Hearing list endpoints across all cases
"""
from fastapi import APIRouter, Depends, Query
from typing import List

from app.db.schemas import CaseHearing, User
from app.api.v1.deps import get_current_user, get_dashboard
from app.services.dashboard_service import HEARING_FILTERS, DashboardService
from app.utils.exceptions import RequestValidationFailed

router = APIRouter()


@router.get("/", response_model=List[CaseHearing])
async def list_hearings(
    filter: str = Query("all", description="all, today, tomorrow, upcoming or past"),
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    if filter not in HEARING_FILTERS:
        raise RequestValidationFailed(f"Unknown hearing filter: {filter}")
    return dashboard.filter_hearings(filter)
