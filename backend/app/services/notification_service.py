"""
services/notification_service.py

In-app notification inbox and hearing reminders.

  - NotificationService: inbox stored under ``app_notifications`` (newest first)
  - plan_hearing_reminders: when to remind about a hearing
  - ReminderScheduler: APScheduler jobs that drop reminders into the inbox
  - HearingReminderSubscriber: keeps jobs in step with the case repository

Reminders for a hearing:
  1. the day before, at REMINDER_HOUR   ("Hearing Reminder")
  2. one hour before the hearing        ("Hearing Starting Soon")
Reminders whose time has already passed are not scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Union

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from pydantic import TypeAdapter, ValidationError

from app.core.config import settings
from app.db.models import NotificationType
from app.db.schemas import (
    AppNotification,
    Case,
    CaseHearing,
    Hearing,
    NotificationCreate,
    OperationResult,
    ReminderRequest,
)
from app.services.kv_store import NOTIFICATIONS_KEY, KeyValueStore
from app.utils.exceptions import NotFoundError, StorageError
from app.utils.helpers import generate_id, to_naive_local

logger = logging.getLogger(__name__)

REMINDER_KINDS = ("day_before", "hour_before")

_notification_list = TypeAdapter(List[AppNotification])


# ============================================================================
# Inbox
# ============================================================================

class NotificationService:
    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[str], str] = generate_id,
    ):
        self._store = store
        self._clock = clock or datetime.now
        self._new_id = id_factory
        self._lock = asyncio.Lock()

    async def get_notifications(self) -> List[AppNotification]:
        """Stored notifications, newest first; unreadable data reads as empty"""
        try:
            return await self._load()
        except StorageError as e:
            logger.error("Error getting notifications: %s", e)
            return []

    async def unread_count(self) -> int:
        return sum(1 for n in await self.get_notifications() if not n.read)

    async def add_notification(self, draft: Union[NotificationCreate, Dict[str, Any]]) -> OperationResult:
        if not isinstance(draft, NotificationCreate):
            draft = NotificationCreate.model_validate(draft)
        async with self._lock:
            notification = AppNotification(
                **draft.model_dump(),
                id=self._new_id("notif"),
                created_at=self._clock(),
            )
            try:
                existing = await self._load()
                await self._save([notification] + existing)
            except StorageError as e:
                logger.error("Error adding notification: %s", e)
                return OperationResult.fail(e)
            return OperationResult.ok(notification)

    async def mark_as_read(self, notification_id: str) -> OperationResult:
        async with self._lock:
            try:
                notifications = await self._load()
            except StorageError as e:
                logger.error("Error reading notifications: %s", e)
                return OperationResult.fail(e)
            target = next((n for n in notifications if n.id == notification_id), None)
            if target is None:
                return OperationResult.fail(NotFoundError("Notification", notification_id))
            target.read = True
            try:
                await self._save(notifications)
            except StorageError as e:
                logger.error("Error marking notification as read: %s", e)
                return OperationResult.fail(e)
            return OperationResult.ok(target)

    async def clear_all_notifications(self) -> OperationResult:
        async with self._lock:
            try:
                await self._store.remove(NOTIFICATIONS_KEY)
            except StorageError as e:
                logger.error("Error clearing notifications: %s", e)
                return OperationResult.fail(e)
            return OperationResult.ok()

    async def _load(self) -> List[AppNotification]:
        raw = await self._store.get(NOTIFICATIONS_KEY)
        if not raw:
            return []
        try:
            return _notification_list.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Stored notifications are unreadable: {e}") from e

    async def _save(self, notifications: List[AppNotification]) -> None:
        payload = _notification_list.dump_json(notifications, by_alias=True).decode("utf-8")
        await self._store.set(NOTIFICATIONS_KEY, payload)


# ============================================================================
# Planning
# ============================================================================

def plan_hearing_reminders(
    hearing: Hearing,
    case_number: str,
    now: datetime,
    reminder_hour: int = settings.REMINDER_HOUR,
) -> List[ReminderRequest]:
    hearing_at = to_naive_local(hearing.date)
    now = to_naive_local(now)
    day_before = (hearing_at - timedelta(days=1)).replace(hour=reminder_hour, minute=0, second=0, microsecond=0)
    hour_before = hearing_at - timedelta(hours=1)

    candidates = [
        (
            "day_before",
            day_before,
            "Hearing Reminder",
            f"You have a hearing tomorrow for case {case_number}",
        ),
        (
            "hour_before",
            hour_before,
            "Hearing Starting Soon",
            f"Your hearing for case {case_number} starts in 1 hour",
        ),
    ]
    return [
        ReminderRequest(
            title=title,
            body=body,
            trigger_at=when,
            data={
                "hearingId": hearing.id,
                "caseId": hearing.case_id,
                "type": NotificationType.hearing_reminder.value,
                "kind": kind,
            },
        )
        for kind, when, title, body in candidates
        if when > now
    ]


def daily_digest(today_hearings: int, tomorrow_hearings: int) -> ReminderRequest:
    """Immediate summary of the next two days"""
    return ReminderRequest(
        title="Daily Digest",
        body=(
            f"You have {today_hearings} hearing(s) today and "
            f"{tomorrow_hearings} hearing(s) tomorrow"
        ),
        trigger_at=None,
        data={"type": "daily_digest"},
    )


# ============================================================================
# Scheduling
# ============================================================================

def _job_id(hearing_id: str, kind: str) -> str:
    return f"hearing:{hearing_id}:{kind}"


async def record_reminder(inbox: NotificationService, request: ReminderRequest) -> OperationResult:
    """Write a reminder into the inbox as a notification"""
    try:
        notification_type = NotificationType(request.data.get("type", NotificationType.system.value))
    except ValueError:
        notification_type = NotificationType.system
    return await inbox.add_notification(
        NotificationCreate(
            title=request.title,
            message=request.body,
            type=notification_type,
            data=request.data,
        )
    )


class ReminderScheduler:
    """Delivers ReminderRequests into the inbox at their trigger time"""

    def __init__(
        self,
        inbox: NotificationService,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self._inbox = inbox
        self._scheduler = scheduler or AsyncIOScheduler()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Reminder scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler shut down")

    def schedule(self, request: ReminderRequest, job_id: str) -> None:
        options = {
            "args": [request],
            "id": job_id,
            "name": request.title,
            "replace_existing": True,
            "misfire_grace_time": 300,
        }
        if request.trigger_at is not None:
            options["trigger"] = DateTrigger(run_date=request.trigger_at)
        self._scheduler.add_job(self.deliver, **options)
        logger.info("Reminder %s scheduled for %s", job_id, request.trigger_at or "now")

    def cancel(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            pass

    def cancel_hearing(self, hearing_id: str) -> None:
        for kind in REMINDER_KINDS:
            self.cancel(_job_id(hearing_id, kind))

    def job_ids(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    async def deliver(self, request: ReminderRequest) -> None:
        result = await record_reminder(self._inbox, request)
        if not result.success:
            logger.error("Reminder %r could not be recorded: %s", request.title, result.error.message)


class HearingReminderSubscriber:
    """Keeps reminder jobs in line with hearings as they are saved"""

    def __init__(
        self,
        scheduler: ReminderScheduler,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._scheduler = scheduler
        self._clock = clock or datetime.now

    def attach(self, repository) -> None:
        repository.subscribe("hearing_created", self.on_hearing_saved)
        repository.subscribe("hearing_updated", self.on_hearing_saved)
        repository.subscribe("hearing_removed", self.on_hearing_removed)
        repository.subscribe("case_deleted", self.on_case_deleted)

    def on_hearing_saved(self, item: CaseHearing) -> None:
        hearing = item.hearing
        self._scheduler.cancel_hearing(hearing.id)
        for request in plan_hearing_reminders(hearing, item.case.case_number, self._clock()):
            self._scheduler.schedule(request, _job_id(hearing.id, request.data["kind"]))

    def on_hearing_removed(self, item: CaseHearing) -> None:
        self._scheduler.cancel_hearing(item.hearing.id)

    def on_case_deleted(self, case: Case) -> None:
        for hearing in case.hearings:
            self._scheduler.cancel_hearing(hearing.id)
