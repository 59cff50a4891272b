"""
services/case_repository.py

Case repository: the only owner of the case collection.

Called by:
  - api/v1/endpoints/cases.py, hearings.py, documents.py
  - services/dashboard_service.py (read-only snapshots)
  - services/notification_service.py (via hearing hooks)

The whole collection is one JSON blob under ``cases_data``. Every mutation
runs load-mutate-save under a single asyncio.Lock on a working copy, and the
copy only replaces the in-memory collection after the save succeeded, so a
failed write never leaves memory ahead of storage.

Hooks (``subscribe``) fire after a successful save:
  - hearing_created / hearing_updated / hearing_removed  -> CaseHearing
  - case_deleted                                         -> Case (with its children)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.db.models import CaseStatus, can_transition
from app.db.schemas import (
    Case,
    CaseCreate,
    CaseDocument,
    CaseHearing,
    CaseUpdate,
    Document,
    DocumentCreate,
    Hearing,
    HearingCreate,
    HearingUpdate,
    OperationResult,
)
from app.db.seed import demo_cases
from app.services.kv_store import CASES_STORAGE_KEY, KeyValueStore
from app.utils.exceptions import DomainError, NotFoundError, StorageError, ValidationFailure
from app.utils.helpers import generate_id, local_day

logger = logging.getLogger(__name__)

HOOK_EVENTS = ("hearing_created", "hearing_updated", "hearing_removed", "case_deleted")

ModelT = TypeVar("ModelT", bound=BaseModel)

_case_list = TypeAdapter(List[Case])


def dump_cases(cases: List[Case]) -> str:
    return _case_list.dump_json(cases, by_alias=True).decode("utf-8")


def parse_cases(raw: str) -> List[Case]:
    return _case_list.validate_json(raw)


def _coerce(model_cls: Type[ModelT], data: Union[ModelT, Dict[str, Any]]) -> ModelT:
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationFailure(f"Invalid {model_cls.__name__}: {problems}") from e


def _set_fields(model: BaseModel) -> Dict[str, Any]:
    """Fields the caller actually supplied, None meaning 'leave unchanged'"""
    return {
        name: getattr(model, name)
        for name in model.model_fields_set
        if getattr(model, name) is not None
    }


def next_hearing_number(hearings: List[Hearing]) -> int:
    """
    Count of hearings + 1, lifted above the highest number still held so a
    number is never shared after a deletion. Assigned numbers never change.
    """
    return max([len(hearings)] + [h.hearing_number for h in hearings]) + 1


class CaseRepository:
    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[str], str] = generate_id,
        seed_factory: Callable[[], List[Case]] = demo_cases,
    ):
        self._store = store
        self._clock = clock or datetime.now
        self._new_id = id_factory
        self._seed_factory = seed_factory
        self._cases: List[Case] = []
        self._loaded = False
        self._fallback = False
        self._lock = asyncio.Lock()
        self._subscribers: Dict[str, List[Callable]] = {event: [] for event in HOOK_EVENTS}

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> List[Case]:
        """
        Read the collection from the store.

        An empty store is seeded with the demo dataset (persisted). Any read
        or parse failure falls back to the demo dataset in memory only, and
        mutations re-read the store first, failing while it stays unreadable.
        """
        async with self._lock:
            await self._load_unlocked()
        return self.list()

    refresh = load

    async def _load_unlocked(self) -> None:
        try:
            raw = await self._store.get(CASES_STORAGE_KEY)
            if raw:
                self._cases = parse_cases(raw)
                self._fallback = False
            else:
                seed = self._seed_factory()
                await self._store.set(CASES_STORAGE_KEY, dump_cases(seed))
                self._cases = seed
                self._fallback = False
                logger.info("Seeded case store with %d demo cases", len(seed))
        except (StorageError, ValidationError) as e:
            logger.error("Error loading cases, using demo data: %s", e)
            self._cases = self._seed_factory()
            self._fallback = True
        self._loaded = True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> List[Case]:
        return [c.model_copy(deep=True) for c in self._cases]

    def get(self, case_id: str) -> Optional[Case]:
        for case in self._cases:
            if case.id == case_id:
                return case.model_copy(deep=True)
        return None

    def query_by_status(self, status: Union[CaseStatus, str]) -> OperationResult:
        try:
            status = CaseStatus(status)
        except ValueError:
            return OperationResult.fail(ValidationFailure(f"Unknown case status: {status}"))
        return OperationResult.ok([c for c in self.list() if c.status == status])

    def all_hearings(self) -> List[CaseHearing]:
        return [CaseHearing(hearing=h, case=c) for c in self.list() for h in c.hearings]

    def all_documents(self) -> List[CaseDocument]:
        return [CaseDocument(document=d, case=c) for c in self.list() for d in c.documents]

    def hearings_on(self, day: date) -> List[CaseHearing]:
        """Hearings whose date falls on ``day`` (local calendar day)"""
        return [ch for ch in self.all_hearings() if local_day(ch.hearing.date) == day]

    def query_today_hearings(self) -> List[CaseHearing]:
        return self.hearings_on(local_day(self.now()))

    def query_tomorrow_hearings(self) -> List[CaseHearing]:
        return self.hearings_on(local_day(self.now()) + timedelta(days=1))

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def subscribe(self, event: str, callback: Callable[[Any], Any]) -> None:
        if event not in self._subscribers:
            raise ValueError(f"Unknown repository event: {event}")
        self._subscribers[event].append(callback)

    async def _emit(self, events: Iterable[Tuple[str, Any]]) -> None:
        for event, payload in events:
            for callback in self._subscribers[event]:
                try:
                    result = callback(payload)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("Subscriber for %s failed", event)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _mutate(self, apply: Callable[[List[Case]], Tuple[Any, List[Tuple[str, Any]]]]) -> OperationResult:
        async with self._lock:
            if not self._loaded or self._fallback:
                await self._load_unlocked()
            if self._fallback:
                error = StorageError("Stored cases could not be read; refusing to overwrite them")
                logger.error("Case store operation rejected: %s", error)
                return OperationResult.fail(error)
            working = [c.model_copy(deep=True) for c in self._cases]
            try:
                value, events = apply(working)
                await self._store.set(CASES_STORAGE_KEY, dump_cases(working))
            except DomainError as e:
                logger.warning("Case store operation rejected: %s", e)
                return OperationResult.fail(e)
            self._cases = working
        await self._emit(events)
        return OperationResult.ok(value)

    def now(self) -> datetime:
        return self._clock()

    async def store_available(self) -> bool:
        try:
            await self._store.ping()
        except StorageError:
            return False
        return True

    def _fresh_id(self, prefix: str, taken: Iterable[str]) -> str:
        taken = set(taken)
        new_id = self._new_id(prefix)
        while new_id in taken:
            new_id = self._new_id(prefix)
        return new_id

    @staticmethod
    def _find_case(cases: List[Case], case_id: str) -> Case:
        for case in cases:
            if case.id == case_id:
                return case
        raise NotFoundError("Case", case_id)

    @staticmethod
    def _find_hearing(case: Case, hearing_id: str) -> Hearing:
        for hearing in case.hearings:
            if hearing.id == hearing_id:
                return hearing
        raise NotFoundError("Hearing", hearing_id)

    async def create(self, draft: Union[CaseCreate, Dict[str, Any]]) -> OperationResult:
        def apply(cases: List[Case]):
            data = _coerce(CaseCreate, draft)
            now = self.now()
            case = Case(
                **data.model_dump(),
                id=self._fresh_id("case", (c.id for c in cases)),
                hearings=[],
                documents=[],
                created_at=now,
                updated_at=now,
            )
            cases.append(case)
            logger.info("Case created: %s (%s)", case.case_number, case.id)
            return case.model_copy(deep=True), []

        return await self._mutate(apply)

    async def update(self, case_id: str, partial: Union[CaseUpdate, Dict[str, Any]]) -> OperationResult:
        def apply(cases: List[Case]):
            changes = _set_fields(_coerce(CaseUpdate, partial))
            case = self._find_case(cases, case_id)
            new_status = changes.get("status")
            if new_status is not None and not can_transition(case.status, new_status):
                raise ValidationFailure(
                    f"Case {case_id} cannot move from {case.status.value} to {new_status.value}"
                )
            for field, value in changes.items():
                setattr(case, field, value)
            case.updated_at = self.now()
            logger.info("Case updated: %s fields=%s", case.case_number, sorted(changes))
            return case.model_copy(deep=True), []

        return await self._mutate(apply)

    async def delete(self, case_id: str) -> OperationResult:
        """Remove a case together with every hearing and document it owns"""
        def apply(cases: List[Case]):
            case = self._find_case(cases, case_id)
            cases.remove(case)
            logger.info(
                "Case deleted: %s (%d hearings, %d documents removed)",
                case.case_number, len(case.hearings), len(case.documents),
            )
            return case, [("case_deleted", case.model_copy(deep=True))]

        return await self._mutate(apply)

    async def add_hearing(self, case_id: str, draft: Union[HearingCreate, Dict[str, Any]]) -> OperationResult:
        def apply(cases: List[Case]):
            case = self._find_case(cases, case_id)
            data = _coerce(HearingCreate, draft)
            now = self.now()
            hearing = Hearing(
                **data.model_dump(),
                id=self._fresh_id("hearing", (h.id for c in cases for h in c.hearings)),
                hearing_number=next_hearing_number(case.hearings),
                case_id=case.id,
                created_at=now,
                updated_at=now,
            )
            case.hearings.append(hearing)
            case.updated_at = now
            logger.info("Hearing #%d added to case %s", hearing.hearing_number, case.case_number)
            created = hearing.model_copy(deep=True)
            return created, [("hearing_created", CaseHearing(hearing=created, case=case.model_copy(deep=True)))]

        return await self._mutate(apply)

    async def update_hearing(
        self,
        case_id: str,
        hearing_id: str,
        partial: Union[HearingUpdate, Dict[str, Any]],
    ) -> OperationResult:
        def apply(cases: List[Case]):
            changes = _set_fields(_coerce(HearingUpdate, partial))
            case = self._find_case(cases, case_id)
            hearing = self._find_hearing(case, hearing_id)
            now = self.now()
            for field, value in changes.items():
                setattr(hearing, field, value)
            hearing.updated_at = now
            case.updated_at = now
            updated = hearing.model_copy(deep=True)
            return updated, [("hearing_updated", CaseHearing(hearing=updated, case=case.model_copy(deep=True)))]

        return await self._mutate(apply)

    async def remove_hearing(self, case_id: str, hearing_id: str) -> OperationResult:
        """Documents filed against the hearing stay on the case, unlinked"""
        def apply(cases: List[Case]):
            case = self._find_case(cases, case_id)
            hearing = self._find_hearing(case, hearing_id)
            case.hearings.remove(hearing)
            for document in case.documents:
                if document.hearing_id == hearing_id:
                    document.hearing_id = None
            case.updated_at = self.now()
            return hearing, [("hearing_removed", CaseHearing(hearing=hearing, case=case.model_copy(deep=True)))]

        return await self._mutate(apply)

    async def add_document(self, case_id: str, draft: Union[DocumentCreate, Dict[str, Any]]) -> OperationResult:
        def apply(cases: List[Case]):
            case = self._find_case(cases, case_id)
            data = _coerce(DocumentCreate, draft)
            if data.hearing_id is not None:
                self._find_hearing(case, data.hearing_id)
            now = self.now()
            document = Document(
                **data.model_dump(),
                id=self._fresh_id("doc", (d.id for c in cases for d in c.documents)),
                case_id=case.id,
                uploaded_at=now,
            )
            case.documents.append(document)
            case.updated_at = now
            logger.info("Document %s attached to case %s", document.name, case.case_number)
            return document.model_copy(deep=True), []

        return await self._mutate(apply)

    async def remove_document(self, case_id: str, document_id: str) -> OperationResult:
        def apply(cases: List[Case]):
            case = self._find_case(cases, case_id)
            for document in case.documents:
                if document.id == document_id:
                    case.documents.remove(document)
                    case.updated_at = self.now()
                    return document, []
            raise NotFoundError("Document", document_id)

        return await self._mutate(apply)
