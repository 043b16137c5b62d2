"""
SQLAlchemy ORM Models
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from advocatedesk.db.database import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles"""
    advocate = "advocate"
    admin = "admin"
    team_member = "team_member"
    client = "client"

class CaseType(str, enum.Enum):
    civil = "civil"
    criminal = "criminal"
    family = "family"
    corporate = "corporate"
    property = "property"
    other = "other"

class CaseStatus(str, enum.Enum):
    """Case status enum"""
    active = "active"
    closed = "closed"
    pending = "pending"
    on_hold = "on_hold"
    settled = "settled"
    dismissed = "dismissed"

# A client with a case in one of these states cannot be deleted.
OPEN_CASE_STATUSES = (CaseStatus.active, CaseStatus.pending, CaseStatus.on_hold)

class CasePriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"

class TaskStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    overdue = "overdue"

class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"

class HearingStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    adjourned = "adjourned"
    cancelled = "cancelled"


# ============================================================================
# Models
# ============================================================================

class User(Base):
    """Advocates, admins, team members and clients share one table"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    roles = Column(JSONType, nullable=False, default=lambda: [UserRole.advocate.value])

    phone = Column(String(20), nullable=True)
    company_name = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    # Tenant the user belongs to; null for a main advocate
    advocate_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    is_main_advocate = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, nullable=False, default=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    profile_image_path = Column(Text, nullable=True)

    password_reset_token = Column(String(128), nullable=True, index=True)
    password_reset_expires = Column(TIMESTAMP, nullable=True)

    last_login_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def has_role(self, role: UserRole) -> bool:
        return role.value in (self.roles or [])

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, roles={self.roles})>"


class Case(Base):
    """Legal case model"""
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=_uuid)

    # Foreign Keys
    advocate_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Case Identification
    case_number = Column(String(100), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    case_type = Column(SQLEnum(CaseType), nullable=False)
    status = Column(SQLEnum(CaseStatus), nullable=False, default=CaseStatus.active)
    priority = Column(SQLEnum(CasePriority), nullable=False, default=CasePriority.medium)
    stage = Column(String(100), nullable=True)
    particulars = Column(Text, nullable=True)
    year = Column(Integer, nullable=True)

    # Court
    court_name = Column(String(255), nullable=True)
    court_location = Column(String(255), nullable=True)
    judge_name = Column(String(255), nullable=True)
    opposing_party = Column(String(255), nullable=True)
    opposing_lawyer = Column(String(255), nullable=True)

    # Dates
    registration_date = Column(TIMESTAMP, nullable=False)
    filing_date = Column(TIMESTAMP, nullable=True)
    previous_date = Column(TIMESTAMP, nullable=True)
    next_hearing_date = Column(TIMESTAMP, nullable=True)
    deadline_date = Column(TIMESTAMP, nullable=True)
    closed_date = Column(TIMESTAMP, nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client = relationship("User", foreign_keys=[client_id])
    documents = relationship(
        "CaseDocument", back_populates="case", cascade="all, delete-orphan",
        order_by="CaseDocument.uploaded_at",
    )
    notes = relationship(
        "CaseNote", back_populates="case", cascade="all, delete-orphan",
        order_by="CaseNote.created_at",
    )
    tasks = relationship(
        "CaseTask", back_populates="case", cascade="all, delete-orphan",
        order_by="CaseTask.created_at",
    )
    hearings = relationship("Hearing", back_populates="case", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("advocate_id", "case_number", name="uq_case_number_per_advocate"),
        Index("idx_cases_advocate_status", "advocate_id", "status"),
    )

    def __repr__(self):
        return f"<Case(id={self.id}, case_number={self.case_number})>"


class CaseDocument(Base):
    """Metadata for a file stored under cases/{case_id}/ in the object store"""
    __tablename__ = "case_documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(500), nullable=False)
    content_type = Column(String(255), nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    storage_path = Column(Text, nullable=False, unique=True)

    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    case = relationship("Case", back_populates="documents")

    def __repr__(self):
        return f"<CaseDocument(id={self.id}, name={self.name})>"


class CaseNote(Base):
    __tablename__ = "case_notes"

    id = Column(String(36), primary_key=True, default=_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_private = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    case = relationship("Case", back_populates="notes")


class CaseTask(Base):
    __tablename__ = "case_tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    due_date = Column(TIMESTAMP, nullable=True)
    status = Column(SQLEnum(TaskStatus), nullable=False, default=TaskStatus.pending)
    priority = Column(SQLEnum(TaskPriority), nullable=False, default=TaskPriority.medium)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    case = relationship("Case", back_populates="tasks")


class Hearing(Base):
    """Scheduled court appearance for a case"""
    __tablename__ = "hearings"

    id = Column(String(36), primary_key=True, default=_uuid)
    advocate_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)

    hearing_type = Column(String(100), nullable=False)
    date_time = Column(TIMESTAMP, nullable=False, index=True)
    duration = Column(Integer, nullable=False, default=60)  # minutes
    court_room = Column(String(100), nullable=True)
    judge_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    attendees = Column(JSONType, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(HearingStatus), nullable=False, default=HearingStatus.scheduled)

    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    case = relationship("Case", back_populates="hearings")

    def __repr__(self):
        return f"<Hearing(id={self.id}, case_id={self.case_id}, date_time={self.date_time})>"
