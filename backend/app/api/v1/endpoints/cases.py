"""
Case management endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from app.db.models import CaseStatus
from app.db.schemas import (
    Case,
    CaseCreate,
    CaseUpdate,
    Document,
    DocumentCreate,
    Hearing,
    HearingCreate,
    HearingUpdate,
    User,
)
from app.api.v1.deps import get_current_user, get_dashboard, get_repository
from app.services.case_repository import CaseRepository
from app.services.dashboard_service import DashboardService
from app.utils.exceptions import ResourceNotFoundError, RequestValidationFailed, raise_for_error

router = APIRouter()

# ============================================================================
# List & Filter Endpoints
# ============================================================================

@router.get("/", response_model=List[Case])
async def get_cases(
    status: Optional[str] = Query("all", description="Filter by status"),
    q: Optional[str] = Query(None, description="Case number or party name"),
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    if status and status != "all" and status not in {s.value for s in CaseStatus}:
        raise RequestValidationFailed(f"Unknown case status: {status}")
    return dashboard.search_cases(q or "", status)


@router.get("/status/{case_status}", response_model=List[Case])
async def get_cases_by_status(
    case_status: CaseStatus,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = repository.query_by_status(case_status)
    raise_for_error(result.error)
    return result.data


@router.post("/refresh", response_model=List[Case])
async def refresh_cases(
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    """Reload the collection from storage"""
    return await repository.refresh()

# ============================================================================
# Case CRUD
# ============================================================================

@router.post("/", response_model=Case, status_code=status.HTTP_201_CREATED)
async def create_case(
    case_in: CaseCreate,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.create(case_in)
    raise_for_error(result.error)
    return result.data


@router.get("/{case_id}", response_model=Case)
async def get_case(
    case_id: str,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    case = repository.get(case_id)
    if case is None:
        raise ResourceNotFoundError(f"Case not found: {case_id}")
    return case


@router.patch("/{case_id}", response_model=Case)
async def update_case(
    case_id: str,
    case_update: CaseUpdate,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.update(case_id, case_update)
    raise_for_error(result.error)
    return result.data


@router.delete("/{case_id}")
async def delete_case(
    case_id: str,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    """Deletes the case with its hearings and documents"""
    result = await repository.delete(case_id)
    raise_for_error(result.error)
    return {"message": "Case deleted", "id": case_id}

# ============================================================================
# Hearings
# ============================================================================

@router.post("/{case_id}/hearings", response_model=Hearing, status_code=status.HTTP_201_CREATED)
async def add_hearing(
    case_id: str,
    hearing_in: HearingCreate,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.add_hearing(case_id, hearing_in)
    raise_for_error(result.error)
    return result.data


@router.patch("/{case_id}/hearings/{hearing_id}", response_model=Hearing)
async def update_hearing(
    case_id: str,
    hearing_id: str,
    hearing_update: HearingUpdate,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.update_hearing(case_id, hearing_id, hearing_update)
    raise_for_error(result.error)
    return result.data


@router.delete("/{case_id}/hearings/{hearing_id}")
async def remove_hearing(
    case_id: str,
    hearing_id: str,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.remove_hearing(case_id, hearing_id)
    raise_for_error(result.error)
    return {"message": "Hearing removed", "id": hearing_id}

# ============================================================================
# Documents
# ============================================================================

@router.post("/{case_id}/documents", response_model=Document, status_code=status.HTTP_201_CREATED)
async def add_document(
    case_id: str,
    document_in: DocumentCreate,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    """Registers document metadata; the file itself lives at ``uri``"""
    result = await repository.add_document(case_id, document_in)
    raise_for_error(result.error)
    return result.data


@router.delete("/{case_id}/documents/{document_id}")
async def remove_document(
    case_id: str,
    document_id: str,
    current_user: User = Depends(get_current_user),
    repository: CaseRepository = Depends(get_repository),
):
    result = await repository.remove_document(case_id, document_id)
    raise_for_error(result.error)
    return {"message": "Document removed", "id": document_id}
