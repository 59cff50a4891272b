"""
Pydantic validation schemas

Stored blobs and API payloads use camelCase keys (``caseNumber``,
``hearingNumber``...); attributes stay snake_case in Python.
"""
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.db.models import (
    CaseStatus,
    CourtName,
    CourtOrderType,
    DocumentType,
    LegalSection,
    NotificationType,
    UserRole,
)

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _required_text(value: str, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} is required")
    return str(value).strip()


def _unique_sections(sections: List[LegalSection]) -> List[LegalSection]:
    seen: List[LegalSection] = []
    for section in sections or []:
        if section not in seen:
            seen.append(section)
    return seen

# ============================================================================
# User Schemas
# ============================================================================

class User(CamelModel):
    id: str
    name: str
    email: EmailStr
    role: UserRole
    cnic: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    team_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserLogin(BaseModel):
    """Login schema"""
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class SessionState(BaseModel):
    user: Optional[User] = None
    authenticated: bool = False


class SessionStatus(BaseModel):
    authenticated: bool = False

# ============================================================================
# Party / Hearing / Document Schemas
# ============================================================================

class Party(CamelModel):
    id: str
    name: str
    cnic: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required_text(v, "Party name")


class CaseParties(CamelModel):
    plaintiffs: List[Party] = Field(default_factory=list)
    defendants: List[Party] = Field(default_factory=list)


class HearingCreate(CamelModel):
    date: datetime
    court_order_type: CourtOrderType
    notes: str
    assigned_lawyer_id: Optional[str] = None
    previous_comments: Optional[str] = None
    next_steps: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def notes_required(cls, v):
        return _required_text(v, "Hearing notes")


class HearingUpdate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    date: Optional[datetime] = None
    court_order_type: Optional[CourtOrderType] = None
    notes: Optional[str] = None
    assigned_lawyer_id: Optional[str] = None
    previous_comments: Optional[str] = None
    next_steps: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def notes_not_blank(cls, v):
        if v is None:
            return v
        return _required_text(v, "Hearing notes")


class Hearing(HearingCreate):
    id: str
    hearing_number: int = Field(..., ge=1)
    case_id: str
    created_at: datetime
    updated_at: datetime


class DocumentCreate(CamelModel):
    name: str
    type: DocumentType
    uri: str
    size: int = Field(..., ge=0)
    mime_type: str
    uploaded_by: str
    hearing_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        return _required_text(v, "Document name")


class Document(DocumentCreate):
    id: str
    case_id: str
    uploaded_at: datetime

# ============================================================================
# Case Schemas
# ============================================================================

class CaseBase(CamelModel):
    case_number: str
    court_name: CourtName
    parties: CaseParties = Field(default_factory=CaseParties)
    opponent_lawyers: List[str] = Field(default_factory=list)
    legal_sections: List[LegalSection] = Field(default_factory=list)
    assigned_lawyer_id: str
    status: CaseStatus = CaseStatus.active
    created_by: str
    team_id: str

    @field_validator("case_number")
    @classmethod
    def case_number_required(cls, v):
        return _required_text(v, "Case number")

    @field_validator("legal_sections")
    @classmethod
    def dedupe_sections(cls, v):
        return _unique_sections(v)


class CaseCreate(CaseBase):
    pass


class CaseUpdate(CamelModel):
    """Mutable case fields; hearings and documents are changed through their own calls"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    case_number: Optional[str] = None
    court_name: Optional[CourtName] = None
    parties: Optional[CaseParties] = None
    opponent_lawyers: Optional[List[str]] = None
    legal_sections: Optional[List[LegalSection]] = None
    assigned_lawyer_id: Optional[str] = None
    status: Optional[CaseStatus] = None
    team_id: Optional[str] = None

    @field_validator("case_number")
    @classmethod
    def case_number_not_blank(cls, v):
        if v is None:
            return v
        return _required_text(v, "Case number")

    @field_validator("legal_sections")
    @classmethod
    def dedupe_sections(cls, v):
        if v is None:
            return v
        return _unique_sections(v)


class Case(CaseBase):
    id: str
    hearings: List[Hearing] = Field(default_factory=list)
    documents: List[Document] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CaseHearing(CamelModel):
    """A hearing together with the case that owns it"""
    hearing: Hearing
    case: Case


class CaseDocument(CamelModel):
    document: Document
    case: Case

# ============================================================================
# Dashboard Schemas
# ============================================================================

class DashboardStats(CamelModel):
    total_cases: int = 0
    active_cases: int = 0
    today_hearings: int = 0
    tomorrow_hearings: int = 0
    pending_approvals: int = 0
    recent_documents: int = 0


class CourtStats(CamelModel):
    total: int = 0
    active: int = 0
    disposed: int = 0


class CaseReport(CamelModel):
    total_cases: int = 0
    cases_by_status: Dict[str, int] = Field(default_factory=dict)
    total_hearings: int = 0
    total_documents: int = 0
    court_wise: Dict[str, CourtStats] = Field(default_factory=dict)
    document_types: Dict[str, int] = Field(default_factory=dict)

# ============================================================================
# Notification Schemas
# ============================================================================

class NotificationCreate(CamelModel):
    title: str
    message: str
    type: NotificationType
    data: Optional[Dict[str, Any]] = None
    read: bool = False


class AppNotification(NotificationCreate):
    id: str
    created_at: datetime


class ReminderRequest(CamelModel):
    """What to show and when; ``trigger_at`` None means immediately"""
    title: str
    body: str
    trigger_at: Optional[datetime] = None
    data: Dict[str, Any] = Field(default_factory=dict)

# ============================================================================
# Operation results
# ============================================================================

class ErrorDetail(BaseModel):
    code: str
    message: str


class OperationResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc) -> "OperationResult":
        return cls(success=False, error=ErrorDetail(code=exc.code, message=str(exc)))


class AuthResult(BaseModel):
    success: bool
    user: Optional[User] = None
    token: Optional[str] = None
    error: Optional[ErrorDetail] = None
