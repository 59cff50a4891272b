"""
services/dashboard_service.py

Read-only projections over the case repository: dashboard counters, the
practice report, hearing lists and searches. Nothing here is cached; every
call scans the current collection.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, time, timedelta
from typing import List, Optional

from app.db.models import CaseStatus, DocumentType
from app.db.schemas import Case, CaseDocument, CaseHearing, CaseReport, CourtStats, DashboardStats
from app.services.case_repository import CaseRepository
from app.utils.helpers import local_day, to_naive_local

HEARING_FILTERS = ("all", "today", "tomorrow", "upcoming", "past")


class DashboardService:
    def __init__(self, repository: CaseRepository):
        self._repository = repository

    def stats(self) -> DashboardStats:
        cases = self._repository.list()
        return DashboardStats(
            total_cases=len(cases),
            active_cases=sum(1 for c in cases if c.status == CaseStatus.active),
            today_hearings=len(self._repository.query_today_hearings()),
            tomorrow_hearings=len(self._repository.query_tomorrow_hearings()),
            pending_approvals=sum(1 for c in cases if c.status == CaseStatus.pending),
            recent_documents=sum(len(c.documents) for c in cases),
        )

    def report(self) -> CaseReport:
        cases = self._repository.list()
        by_status = Counter(c.status.value for c in cases)

        court_wise = {}
        for case in cases:
            stats = court_wise.setdefault(case.court_name.value, CourtStats())
            stats.total += 1
            if case.status == CaseStatus.active:
                stats.active += 1
            if case.status == CaseStatus.disposed:
                stats.disposed += 1

        document_types = Counter(d.type.value for c in cases for d in c.documents)

        return CaseReport(
            total_cases=len(cases),
            cases_by_status={status.value: by_status.get(status.value, 0) for status in CaseStatus},
            total_hearings=sum(len(c.hearings) for c in cases),
            total_documents=sum(len(c.documents) for c in cases),
            court_wise=court_wise,
            document_types=dict(document_types),
        )

    def filter_hearings(self, kind: str = "all") -> List[CaseHearing]:
        """
        Hearings for one of: all, today, tomorrow, upcoming (after the start of
        tomorrow, so tomorrow's hearings count too), past (before today). Sorted by date, earliest first.
        """
        if kind not in HEARING_FILTERS:
            raise ValueError(f"Unknown hearing filter: {kind}")

        if kind == "today":
            items = self._repository.query_today_hearings()
        elif kind == "tomorrow":
            items = self._repository.query_tomorrow_hearings()
        else:
            items = self._repository.all_hearings()
            today = local_day(self._repository.now())
            tomorrow = today + timedelta(days=1)
            if kind == "upcoming":
                start_of_tomorrow = datetime.combine(tomorrow, time.min)
                items = [i for i in items if to_naive_local(i.hearing.date) > start_of_tomorrow]
            elif kind == "past":
                items = [i for i in items if local_day(i.hearing.date) < today]

        return sorted(items, key=lambda i: to_naive_local(i.hearing.date))

    def search_cases(self, query: str = "", status: Optional[str] = "all") -> List[Case]:
        """Case number or party name contains ``query`` (case-insensitive)"""
        needle = (query or "").strip().lower()
        results = []
        for case in self._repository.list():
            if status and status != "all" and case.status != CaseStatus(status):
                continue
            names = [p.name for p in case.parties.plaintiffs + case.parties.defendants]
            if needle and needle not in case.case_number.lower() and not any(needle in n.lower() for n in names):
                continue
            results.append(case)
        return results

    def search_documents(self, query: str = "", doc_type: Optional[str] = "all") -> List[CaseDocument]:
        """Document name or owning case number contains ``query``; newest upload first"""
        needle = (query or "").strip().lower()
        results = []
        for item in self._repository.all_documents():
            if doc_type and doc_type != "all" and item.document.type != DocumentType(doc_type):
                continue
            if needle and needle not in item.document.name.lower() and needle not in item.case.case_number.lower():
                continue
            results.append(item)
        return sorted(results, key=lambda i: to_naive_local(i.document.uploaded_at), reverse=True)

    def recent_cases(self, limit: int = 5) -> List[Case]:
        cases = sorted(self._repository.list(), key=lambda c: c.updated_at, reverse=True)
        return cases[:max(0, limit)]
