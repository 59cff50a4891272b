"""
Document search across all cases
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.db.models import DocumentType
from app.db.schemas import CaseDocument, User
from app.api.v1.deps import get_current_user, get_dashboard
from app.services.dashboard_service import DashboardService
from app.utils.exceptions import RequestValidationFailed

router = APIRouter()


@router.get("/", response_model=List[CaseDocument])
async def search_documents(
    q: Optional[str] = Query(None, description="Document name or case number"),
    type: Optional[str] = Query("all", description="Document type or 'all'"),
    current_user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Newest upload first"""
    if type and type != "all" and type not in {t.value for t in DocumentType}:
        raise RequestValidationFailed(f"Unknown document type: {type}")
    return dashboard.search_documents(q or "", type)
