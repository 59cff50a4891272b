# backend/app/db/seed.py

"""
Demo dataset

Seeds an empty store with two cases and the demo user directory.
"""

from datetime import datetime
from typing import List

from app.db.models import (
    CaseStatus,
    CourtName,
    CourtOrderType,
    DocumentType,
    LegalSection,
    UserRole,
)
from app.db.schemas import Case, CaseParties, Document, Hearing, Party, User

# ============================================================================
# Users
# ============================================================================

def demo_users() -> List[User]:
    """Demo user directory"""
    return [
        User(
            id="1",
            name="Advocate Muhammad Ali Khan",
            email="ali.khan@lawfirm.pk",
            role=UserRole.senior_lawyer,
            cnic="42101-1234567-1",
            mobile="+92-300-1234567",
            address="Lahore High Court Bar Association, Lahore",
            team_id="team1",
            created_at=datetime(2023, 1, 15),
            updated_at=datetime(2024, 1, 15),
        ),
        User(
            id="2",
            name="Advocate Sarah Ahmed",
            email="sarah.ahmed@lawfirm.pk",
            role=UserRole.junior_lawyer,
            cnic="42101-2345678-2",
            mobile="+92-301-2345678",
            address="Karachi Bar Association, Karachi",
            team_id="team1",
            created_at=datetime(2023, 6, 1),
            updated_at=datetime(2024, 1, 10),
        ),
        User(
            id="3",
            name="Muhammad Hassan",
            email="hassan@lawfirm.pk",
            role=UserRole.clerk,
            cnic="42101-3456789-3",
            mobile="+92-302-3456789",
            address="Islamabad Bar Association, Islamabad",
            team_id="team1",
            created_at=datetime(2023, 8, 15),
            updated_at=datetime(2024, 1, 5),
        ),
    ]

# ============================================================================
# Cases
# ============================================================================

def demo_cases() -> List[Case]:
    """Two active cases, one with a filed petition"""
    civil = Case(
        id="case1",
        case_number="CIV/2024/001",
        court_name=CourtName.high_court,
        parties=CaseParties(
            plaintiffs=[
                Party(
                    id="p1",
                    name="ABC Corporation Ltd.",
                    cnic="42101-1111111-1",
                    mobile="+92-300-1111111",
                    email="legal@abc.com",
                    address="Main Boulevard, Gulberg, Lahore",
                ),
            ],
            defendants=[
                Party(
                    id="d1",
                    name="XYZ Industries",
                    cnic="42101-2222222-2",
                    mobile="+92-301-2222222",
                    email="info@xyz.com",
                    address="Industrial Area, Karachi",
                ),
            ],
        ),
        opponent_lawyers=["Advocate Tariq Mahmood", "Advocate Fatima Sheikh"],
        legal_sections=[LegalSection.cpc, LegalSection.family_laws],
        hearings=[
            Hearing(
                id="h1",
                hearing_number=1,
                date=datetime(2024, 1, 20),
                court_order_type=CourtOrderType.evidence,
                notes="First hearing scheduled for evidence presentation",
                assigned_lawyer_id="1",
                previous_comments="Case filed successfully",
                next_steps="Prepare evidence documents",
                case_id="case1",
                created_at=datetime(2024, 1, 15),
                updated_at=datetime(2024, 1, 15),
            ),
        ],
        documents=[
            Document(
                id="doc1",
                name="Initial Petition.pdf",
                type=DocumentType.petition,
                uri="file://documents/petition1.pdf",
                size=1024000,
                mime_type="application/pdf",
                case_id="case1",
                uploaded_by="1",
                uploaded_at=datetime(2024, 1, 15),
                tags=["petition", "initial"],
            ),
        ],
        assigned_lawyer_id="1",
        status=CaseStatus.active,
        created_at=datetime(2024, 1, 15),
        updated_at=datetime(2024, 1, 15),
        created_by="1",
        team_id="team1",
    )

    criminal = Case(
        id="case2",
        case_number="CRM/2024/002",
        court_name=CourtName.session_court,
        parties=CaseParties(
            plaintiffs=[
                Party(id="p2", name="State vs Accused", address="Government Prosecutor Office"),
            ],
            defendants=[
                Party(
                    id="d2",
                    name="Ahmad Ali",
                    cnic="42101-3333333-3",
                    mobile="+92-302-3333333",
                    address="Model Town, Lahore",
                ),
            ],
        ),
        opponent_lawyers=["Public Prosecutor"],
        legal_sections=[LegalSection.ppc, LegalSection.crpc],
        hearings=[
            Hearing(
                id="h2",
                hearing_number=1,
                date=datetime(2024, 1, 22),
                court_order_type=CourtOrderType.arguments,
                notes="Defense arguments to be presented",
                assigned_lawyer_id="2",
                previous_comments="Bail application filed",
                next_steps="Prepare defense arguments",
                case_id="case2",
                created_at=datetime(2024, 1, 16),
                updated_at=datetime(2024, 1, 16),
            ),
        ],
        documents=[],
        assigned_lawyer_id="2",
        status=CaseStatus.active,
        created_at=datetime(2024, 1, 16),
        updated_at=datetime(2024, 1, 16),
        created_by="2",
        team_id="team1",
    )

    return [civil, criminal]
