from datetime import datetime

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.db.models import NotificationType
from app.db.schemas import Hearing
from app.services.kv_store import NOTIFICATIONS_KEY
from app.services.notification_service import (
    HearingReminderSubscriber,
    NotificationService,
    ReminderScheduler,
    daily_digest,
    plan_hearing_reminders,
    record_reminder,
)

from conftest import FlakyStore, hearing_draft


def make_hearing(when: datetime) -> Hearing:
    return Hearing(
        id="h9",
        hearing_number=3,
        date=when,
        court_order_type="Arguments",
        notes="Final arguments",
        case_id="case1",
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def inbox(store, clock):
    return NotificationService(store, clock=clock)


@pytest.fixture
async def reminders(inbox):
    # constructed inside the running loop; never started
    return ReminderScheduler(inbox, AsyncIOScheduler())


def run_dates(reminders):
    return {job.id: job.trigger.run_date.replace(tzinfo=None) for job in reminders.scheduler.get_jobs()}


# ============================================================================
# Planning
# ============================================================================

def test_plans_day_before_and_hour_before():
    requests = plan_hearing_reminders(make_hearing(datetime(2024, 1, 22, 10)), "CIV/2024/001", datetime(2024, 1, 20, 12))

    assert [(r.trigger_at, r.title, r.body) for r in requests] == [
        (datetime(2024, 1, 21, 9), "Hearing Reminder", "You have a hearing tomorrow for case CIV/2024/001"),
        (datetime(2024, 1, 22, 9), "Hearing Starting Soon", "Your hearing for case CIV/2024/001 starts in 1 hour"),
    ]
    assert requests[0].data == {
        "hearingId": "h9",
        "caseId": "case1",
        "type": "hearing_reminder",
        "kind": "day_before",
    }


def test_drops_reminders_in_the_past():
    hearing = make_hearing(datetime(2024, 1, 22, 10))

    later = plan_hearing_reminders(hearing, "CIV/2024/001", datetime(2024, 1, 21, 12))
    after = plan_hearing_reminders(hearing, "CIV/2024/001", datetime(2024, 1, 22, 9, 30))

    assert [r.data["kind"] for r in later] == ["hour_before"]
    assert after == []


def test_reminder_hour_is_configurable():
    requests = plan_hearing_reminders(
        make_hearing(datetime(2024, 1, 22, 10)), "X", datetime(2024, 1, 1), reminder_hour=18
    )
    assert requests[0].trigger_at == datetime(2024, 1, 21, 18)


def test_daily_digest_is_immediate():
    request = daily_digest(2, 1)
    assert request.trigger_at is None
    assert request.body == "You have 2 hearing(s) today and 1 hearing(s) tomorrow"


# ============================================================================
# Inbox
# ============================================================================

async def test_inbox_lists_newest_first(inbox):
    await inbox.add_notification({"title": "First", "message": "a", "type": "system"})
    await inbox.add_notification({"title": "Second", "message": "b", "type": "case_assignment"})

    notifications = await inbox.get_notifications()

    assert [n.title for n in notifications] == ["Second", "First"]
    assert await inbox.unread_count() == 2


async def test_mark_as_read(inbox):
    added = (await inbox.add_notification({"title": "T", "message": "m", "type": "system"})).data

    result = await inbox.mark_as_read(added.id)

    assert result.data.read
    assert await inbox.unread_count() == 0
    assert (await inbox.mark_as_read("missing")).error.code == "not_found"


async def test_clear_all_notifications(inbox, store):
    await inbox.add_notification({"title": "T", "message": "m", "type": "system"})

    assert (await inbox.clear_all_notifications()).success
    assert await inbox.get_notifications() == []
    assert await store.get(NOTIFICATIONS_KEY) is None


async def test_unreadable_inbox_reads_as_empty(clock):
    inbox = NotificationService(FlakyStore({NOTIFICATIONS_KEY: "oops"}), clock=clock)
    assert await inbox.get_notifications() == []


async def test_read_failure_never_overwrites_inbox(inbox, store):
    await inbox.add_notification({"title": "a", "message": "m", "type": "system"})
    first = (await inbox.add_notification({"title": "b", "message": "m", "type": "system"})).data

    store.fail_reads = True
    added = await inbox.add_notification({"title": "c", "message": "m", "type": "system"})
    marked = await inbox.mark_as_read(first.id)
    assert await inbox.get_notifications() == []
    store.fail_reads = False

    assert added.error.code == "storage_failure"
    assert marked.error.code == "storage_failure"
    assert [n.title for n in await inbox.get_notifications()] == ["b", "a"]
    assert await inbox.unread_count() == 2


async def test_corrupt_inbox_is_left_in_place(clock):
    store = FlakyStore({NOTIFICATIONS_KEY: "oops"})
    inbox = NotificationService(store, clock=clock)

    result = await inbox.add_notification({"title": "T", "message": "m", "type": "system"})

    assert result.error.code == "storage_failure"
    assert await store.get(NOTIFICATIONS_KEY) == "oops"


async def test_failed_write_is_reported(inbox, store):
    store.fail_writes = True
    result = await inbox.add_notification({"title": "T", "message": "m", "type": "system"})
    assert result.error.code == "storage_failure"


async def test_unknown_reminder_type_is_recorded_as_system(inbox):
    result = await record_reminder(inbox, daily_digest(0, 0))

    assert result.data.type == NotificationType.system
    assert result.data.message == "You have 0 hearing(s) today and 0 hearing(s) tomorrow"


# ============================================================================
# Scheduling
# ============================================================================

async def test_delivered_reminder_lands_in_inbox(reminders, inbox):
    request = plan_hearing_reminders(make_hearing(datetime(2024, 1, 22, 10)), "CIV/2024/001", datetime(2024, 1, 20))[0]

    await reminders.deliver(request)

    [notification] = await inbox.get_notifications()
    assert notification.type == NotificationType.hearing_reminder
    assert notification.title == "Hearing Reminder"
    assert notification.data["hearingId"] == "h9"


async def test_cancel_unknown_job_is_ignored(reminders):
    reminders.cancel("hearing:missing:day_before")
    assert reminders.job_ids() == []


async def test_new_hearing_schedules_reminders(repository, reminders, clock):
    HearingReminderSubscriber(reminders, clock=clock).attach(repository)

    hearing = (await repository.add_hearing("case1", hearing_draft(datetime(2024, 1, 25, 11)))).data

    assert run_dates(reminders) == {
        f"hearing:{hearing.id}:day_before": datetime(2024, 1, 24, 9),
        f"hearing:{hearing.id}:hour_before": datetime(2024, 1, 25, 10),
    }


async def test_past_hearing_schedules_nothing(repository, reminders, clock):
    HearingReminderSubscriber(reminders, clock=clock).attach(repository)

    await repository.add_hearing("case1", hearing_draft(datetime(2024, 1, 10, 11)))

    assert reminders.job_ids() == []


async def test_updated_hearing_is_rescheduled(repository, reminders, clock):
    HearingReminderSubscriber(reminders, clock=clock).attach(repository)
    hearing = (await repository.add_hearing("case1", hearing_draft(datetime(2024, 1, 25, 11)))).data

    await repository.update_hearing("case1", hearing.id, {"date": datetime(2024, 1, 28, 14)})

    assert run_dates(reminders) == {
        f"hearing:{hearing.id}:day_before": datetime(2024, 1, 27, 9),
        f"hearing:{hearing.id}:hour_before": datetime(2024, 1, 28, 13),
    }


async def test_removed_hearing_and_deleted_case_cancel_reminders(repository, reminders, clock):
    HearingReminderSubscriber(reminders, clock=clock).attach(repository)
    first = (await repository.add_hearing("case1", hearing_draft(datetime(2024, 1, 25, 11)))).data
    second = (await repository.add_hearing("case2", hearing_draft(datetime(2024, 1, 26, 11)))).data

    await repository.remove_hearing("case1", first.id)
    assert all(job_id.startswith(f"hearing:{second.id}:") for job_id in reminders.job_ids())

    await repository.delete("case2")
    assert reminders.job_ids() == []
