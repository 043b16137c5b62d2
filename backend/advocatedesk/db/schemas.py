"""
Pydantic validation schemas
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from advocatedesk.db.models import (
    CasePriority,
    CaseStatus,
    CaseType,
    HearingStatus,
    TaskPriority,
    TaskStatus,
)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


# ============================================================================
# Auth Schemas
# ============================================================================

class SignupRequest(BaseModel):
    """Registers a main advocate who owns a new tenant"""
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    phone: Optional[str] = None
    company_name: Optional[str] = None


class UserLogin(BaseModel):
    """Login schema"""
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    """Forgot password - request reset link"""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Reset password with token from email"""
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=72)


# ============================================================================
# User Schemas
# ============================================================================

class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    roles: List[str]
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
    advocate_id: Optional[str] = None
    is_main_advocate: bool
    is_active: bool
    email_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None


class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: Optional[str] = None


# ============================================================================
# Client Schemas
# ============================================================================

class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class ClientResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: datetime
    total_cases: int = 0
    active_cases: int = 0

    class Config:
        from_attributes = True


# ============================================================================
# Case Schemas
# ============================================================================

class CaseCreate(BaseModel):
    case_number: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=500)
    case_type: CaseType
    client_id: str = Field(..., min_length=1)
    registration_date: datetime
    description: Optional[str] = None
    priority: CasePriority = CasePriority.medium
    stage: Optional[str] = None
    particulars: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    court_name: Optional[str] = None
    court_location: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_lawyer: Optional[str] = None
    filing_date: Optional[datetime] = None
    previous_date: Optional[datetime] = None
    next_hearing_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None

    @field_validator("case_number", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CaseUpdate(BaseModel):
    case_number: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    case_type: Optional[CaseType] = None
    status: Optional[CaseStatus] = None
    priority: Optional[CasePriority] = None
    description: Optional[str] = None
    stage: Optional[str] = None
    particulars: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    court_name: Optional[str] = None
    court_location: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_lawyer: Optional[str] = None
    registration_date: Optional[datetime] = None
    filing_date: Optional[datetime] = None
    previous_date: Optional[datetime] = None
    next_hearing_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None
    closed_date: Optional[datetime] = None


class CaseResponse(BaseModel):
    id: str
    advocate_id: str
    client_id: str
    created_by: Optional[str] = None
    case_number: str
    title: str
    description: Optional[str] = None
    case_type: CaseType
    status: CaseStatus
    priority: CasePriority
    stage: Optional[str] = None
    particulars: Optional[str] = None
    year: Optional[int] = None
    court_name: Optional[str] = None
    court_location: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_lawyer: Optional[str] = None
    registration_date: datetime
    filing_date: Optional[datetime] = None
    previous_date: Optional[datetime] = None
    next_hearing_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None
    closed_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    client: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class NoteCreate(BaseModel):
    content: str = Field(..., min_length=1)
    is_private: bool = False


class NoteResponse(BaseModel):
    id: str
    case_id: str
    content: str
    is_private: bool
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.medium


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None


class TaskResponse(BaseModel):
    id: str
    case_id: str
    title: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Document Schemas
# ============================================================================

class DocumentResponse(BaseModel):
    id: str
    case_id: str
    name: str
    content_type: Optional[str] = None
    size: int
    uploaded_by: Optional[str] = None
    uploaded_at: datetime

    class Config:
        from_attributes = True


class DocumentListItem(DocumentResponse):
    case_number: str
    case_title: str
    client_name: Optional[str] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentListItem]
    pagination: Pagination


class CaseDetailResponse(CaseResponse):
    documents: List[DocumentResponse] = []
    notes: List[NoteResponse] = []
    tasks: List[TaskResponse] = []


# ============================================================================
# Hearing Schemas
# ============================================================================

def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class HearingCreate(BaseModel):
    case_id: str = Field(..., min_length=1)
    hearing_type: str = Field(..., min_length=1, max_length=100)
    date_time: datetime
    duration: int = Field(60, ge=1, le=24 * 60)
    court_room: Optional[str] = None
    judge_name: Optional[str] = None
    description: Optional[str] = None
    attendees: List[str] = []
    notes: Optional[str] = None

    @field_validator("date_time")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return _naive_utc(v)


class HearingUpdate(BaseModel):
    hearing_type: Optional[str] = Field(None, min_length=1, max_length=100)
    date_time: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, le=24 * 60)
    court_room: Optional[str] = None
    judge_name: Optional[str] = None
    description: Optional[str] = None
    attendees: Optional[List[str]] = None
    notes: Optional[str] = None
    status: Optional[HearingStatus] = None

    @field_validator("date_time")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(v) if v else v


class HearingResponse(BaseModel):
    id: str
    advocate_id: str
    case_id: str
    hearing_type: str
    date_time: datetime
    duration: int
    court_room: Optional[str] = None
    judge_name: Optional[str] = None
    description: Optional[str] = None
    attendees: List[str] = []
    notes: Optional[str] = None
    status: HearingStatus
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Backup / System Schemas
# ============================================================================

class BackupRestoreRequest(BaseModel):
    backup_file: str = Field(..., min_length=1)


class CleanupSummary(BaseModel):
    deleted_count: int
    errors: List[str]


class StorageStats(BaseModel):
    total_files: int
    total_size: int
    bucket_name: str
