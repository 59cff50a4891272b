"""
In-app notification inbox
"""
from fastapi import APIRouter, Depends
from typing import List

from app.db.schemas import AppNotification, User
from app.api.v1.deps import get_current_user, get_dashboard, get_notifications
from app.services.dashboard_service import DashboardService
from app.services.notification_service import NotificationService, daily_digest, record_reminder
from app.utils.exceptions import raise_for_error

router = APIRouter()


@router.get("/", response_model=List[AppNotification])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    inbox: NotificationService = Depends(get_notifications),
):
    return await inbox.get_notifications()


@router.get("/unread-count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    inbox: NotificationService = Depends(get_notifications),
):
    return {"unread": await inbox.unread_count()}


@router.post("/{notification_id}/read", response_model=AppNotification)
async def mark_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    inbox: NotificationService = Depends(get_notifications),
):
    result = await inbox.mark_as_read(notification_id)
    raise_for_error(result.error)
    return result.data


@router.delete("/")
async def clear_notifications(
    current_user: User = Depends(get_current_user),
    inbox: NotificationService = Depends(get_notifications),
):
    result = await inbox.clear_all_notifications()
    raise_for_error(result.error)
    return {"message": "Notifications cleared"}


@router.post("/digest", response_model=AppNotification)
async def send_daily_digest(
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
    inbox: NotificationService = Depends(get_notifications),
):
    """Record today's and tomorrow's hearing counts in the inbox right away"""
    stats = dashboard.stats()
    request = daily_digest(stats.today_hearings, stats.tomorrow_hearings)
    result = await record_reminder(inbox, request)
    raise_for_error(result.error)
    return result.data
