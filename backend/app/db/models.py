"""
Domain enums and the SQLAlchemy tables backing the key-value blob store
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, String, Text, TIMESTAMP

from app.db.database import Base

# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles"""
    senior_lawyer = "senior_lawyer"
    junior_lawyer = "junior_lawyer"
    clerk = "clerk"

class CaseStatus(str, enum.Enum):
    """Case status enum"""
    active = "active"
    pending = "pending"
    disposed = "disposed"
    adjourned = "adjourned"

class CourtName(str, enum.Enum):
    civil_court = "Civil Court"
    session_court = "Session Court"
    family_court = "Family Court"
    magistrate = "Magistrate"
    tehsildar = "Tehsildar"
    high_court = "High Court"
    supreme_court = "Supreme Court"
    nab_fia = "NAB/FIA"
    police_station = "Police Station (FIR stage)"

class LegalSection(str, enum.Enum):
    ppc = "PPC"
    crpc = "CrPC"
    cpc = "CPC"
    family_laws = "Family Laws"
    rent = "Rent"
    nab = "NAB"
    fia = "FIA"

class CourtOrderType(str, enum.Enum):
    """Order passed at a hearing"""
    evidence = "Evidence"
    cross = "Cross"
    adjournment = "Adjournment"
    arguments = "Arguments"
    judgment = "Judgment"

class DocumentType(str, enum.Enum):
    """Document categories"""
    fir = "FIR"
    petition = "Petition"
    order = "Order"
    judgment = "Judgment"
    evidence = "Evidence"
    other = "Other"

class NotificationType(str, enum.Enum):
    hearing_reminder = "hearing_reminder"
    case_assignment = "case_assignment"
    document_upload = "document_upload"
    approval_request = "approval_request"
    system = "system"


# Allowed status moves; disposed is terminal
CASE_STATUS_TRANSITIONS = {
    CaseStatus.active: {CaseStatus.pending, CaseStatus.adjourned, CaseStatus.disposed},
    CaseStatus.pending: {CaseStatus.active, CaseStatus.disposed},
    CaseStatus.adjourned: {CaseStatus.active, CaseStatus.disposed},
    CaseStatus.disposed: set(),
}


def can_transition(current: CaseStatus, target: CaseStatus) -> bool:
    if current == target:
        return True
    return target in CASE_STATUS_TRANSITIONS[current]


# ============================================================================
# Blob store tables
# ============================================================================

class StoredItem(Base):
    """General key-value blob (cases, user profile, notifications)"""
    __tablename__ = "stored_items"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)


class SecureItem(Base):
    """Credential blob (session token), kept apart from general data"""
    __tablename__ = "secure_items"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
