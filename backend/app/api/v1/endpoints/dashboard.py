"""
Dashboard endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import List

from app.db.schemas import Case, CaseReport, DashboardStats, User
from app.api.v1.deps import get_current_user, get_dashboard
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    return dashboard.stats()


@router.get("/report", response_model=CaseReport)
async def get_case_report(
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    return dashboard.report()


@router.get("/recent-cases", response_model=List[Case])
async def get_recent_cases(
    limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    return dashboard.recent_cases(limit)
