# app/api/v1/deps.py

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.db.schemas import User
from app.services.case_repository import CaseRepository
from app.services.container import Services
from app.services.dashboard_service import DashboardService
from app.services.notification_service import NotificationService
from app.services.session_store import SessionStore
from app.utils.exceptions import UnauthorizedError

security = HTTPBearer(auto_error=False)

# ============================================================================
# Service handles
# ============================================================================

def get_services(request: Request) -> Services:
    return request.app.state.services


def get_repository(services: Services = Depends(get_services)) -> CaseRepository:
    return services.repository


def get_sessions(services: Services = Depends(get_services)) -> SessionStore:
    return services.sessions


def get_dashboard(services: Services = Depends(get_services)) -> DashboardService:
    return services.dashboard


def get_notifications(services: Services = Depends(get_services)) -> NotificationService:
    return services.notifications

# ============================================================================
# Session Dependency
# ============================================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    sessions: SessionStore = Depends(get_sessions),
) -> User:
    """
    Accept only the token of the live session on this install.
    """
    if credentials is None:
        raise UnauthorizedError()

    user = sessions.verify_token(credentials.credentials)
    if user is None:
        raise UnauthorizedError("Invalid or expired session")
    return user
