"""
services/container.py

Builds the per-process service graph. The API keeps the result on
``app.state.services``; nothing here is a module-level singleton.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db.database import make_session_factory
from app.db.seed import demo_users
from app.services.case_repository import CaseRepository
from app.services.dashboard_service import DashboardService
from app.services.kv_store import KeyValueStore, SqlKeyValueStore, SqlSecureStore, resolve_token_store
from app.services.notification_service import HearingReminderSubscriber, NotificationService, ReminderScheduler
from app.services.session_store import BiometricVerifier, SessionStore, StaticUserDirectory

logger = logging.getLogger(__name__)


@dataclass
class Services:
    repository: CaseRepository
    sessions: SessionStore
    notifications: NotificationService
    dashboard: DashboardService
    reminders: Optional[ReminderScheduler] = None


def _open_secure_store() -> Optional[KeyValueStore]:
    try:
        return SqlSecureStore(make_session_factory(settings.secure_store_url))
    except SQLAlchemyError as e:
        logger.warning("Could not open secure store: %s", e)
        return None


async def build_services(
    store: Optional[KeyValueStore] = None,
    secure_store: Optional[KeyValueStore] = None,
    use_secure_store: bool = settings.SECURE_STORE_ENABLED,
    biometrics: Optional[BiometricVerifier] = None,
    scheduler: Optional[AsyncIOScheduler] = None,
    reminders_enabled: bool = settings.REMINDERS_ENABLED,
    clock: Optional[Callable[[], datetime]] = None,
) -> Services:
    """
    Wire storage, repository, session and notification services, then load
    the case collection and restore any saved session.
    """
    if store is None:
        store = SqlKeyValueStore(make_session_factory(settings.DATABASE_URL))
    if secure_store is None and use_secure_store:
        secure_store = _open_secure_store()
    token_store = await resolve_token_store(secure_store, store)

    repository = CaseRepository(store, clock=clock)
    sessions = SessionStore(
        store,
        StaticUserDirectory(demo_users(), settings.DEMO_USER_PASSWORD),
        token_store=token_store,
        biometrics=biometrics,
    )
    notifications = NotificationService(store, clock=clock)

    reminders = None
    if reminders_enabled:
        reminders = ReminderScheduler(notifications, scheduler)
        HearingReminderSubscriber(reminders, clock=clock).attach(repository)

    cases = await repository.load()
    state = await sessions.restore()
    logger.info(
        "Services ready: %d cases loaded, session %s",
        len(cases), "restored" if state.authenticated else "empty",
    )

    return Services(
        repository=repository,
        sessions=sessions,
        notifications=notifications,
        dashboard=DashboardService(repository),
        reminders=reminders,
    )
