from datetime import datetime

import pytest

from app.db.seed import demo_users
from app.services.case_repository import CaseRepository
from app.services.kv_store import InMemoryKeyValueStore
from app.services.session_store import StaticUserDirectory
from app.utils.exceptions import StorageError


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose reads, writes or probe can be made to fail"""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.fail_ping = False

    async def get(self, key):
        if self.fail_reads:
            raise StorageError(f"read of {key} refused")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise StorageError(f"write of {key} refused")
        await super().set(key, value)

    async def remove(self, key):
        if self.fail_writes:
            raise StorageError(f"remove of {key} refused")
        await super().remove(key)

    async def ping(self):
        if self.fail_ping:
            raise StorageError("store offline")


def case_draft(**overrides):
    draft = {
        "caseNumber": "FAM/2024/010",
        "courtName": "Family Court",
        "parties": {
            "plaintiffs": [{"id": "p9", "name": "Ayesha Malik"}],
            "defendants": [{"id": "d9", "name": "Imran Malik"}],
        },
        "legalSections": ["Family Laws"],
        "assignedLawyerId": "1",
        "createdBy": "1",
        "teamId": "team1",
    }
    draft.update(overrides)
    return draft


def hearing_draft(when: datetime, **overrides):
    draft = {
        "date": when,
        "courtOrderType": "Evidence",
        "notes": "Witness examination",
    }
    draft.update(overrides)
    return draft


def document_draft(**overrides):
    draft = {
        "name": "Written Statement.pdf",
        "type": "Petition",
        "uri": "file://documents/ws.pdf",
        "size": 2048,
        "mimeType": "application/pdf",
        "uploadedBy": "1",
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 20, 8, 30))


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
async def repository(store, clock):
    repo = CaseRepository(store, clock=clock)
    await repo.load()
    return repo


@pytest.fixture(scope="session")
def directory():
    return StaticUserDirectory(demo_users(), "password123")
