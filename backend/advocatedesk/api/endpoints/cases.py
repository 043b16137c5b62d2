"""
Case management endpoints
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from advocatedesk.api.deps import get_tenant_id, require_advocate_side
from advocatedesk.core.logger import logger
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import (
    Case,
    CaseNote,
    CasePriority,
    CaseStatus,
    CaseTask,
    CaseType,
    User,
)
from advocatedesk.db.schemas import (
    CaseCreate,
    CaseDetailResponse,
    CaseResponse,
    CaseUpdate,
    NoteCreate,
    NoteResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from advocatedesk.services.case_service import (
    case_number_taken,
    delete_case,
    get_tenant_case,
    get_tenant_client,
    get_tenant_member,
)
from advocatedesk.services.storage_service import S3ObjectStore, get_object_store
from advocatedesk.utils.exceptions import DuplicateKeyError, NotFoundError
from advocatedesk.utils.helpers import ESCAPE_CHAR, like_pattern, paginate

router = APIRouter()

# ============================================================================
# List & Create
# ============================================================================

@router.get("")
def list_cases(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[CaseStatus] = Query(None),
    priority: Optional[CasePriority] = Query(None),
    case_type: Optional[CaseType] = Query(None, alias="caseType"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    search: Optional[str] = Query(None),
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    List the tenant's cases with filters and a case-insensitive search over
    case number, title, description and client name.
    """
    query = (
        db.query(Case)
        .join(User, Case.client_id == User.id)
        .options(joinedload(Case.client))
        .filter(Case.advocate_id == tenant_id)
    )

    if status:
        query = query.filter(Case.status == status)
    if priority:
        query = query.filter(Case.priority == priority)
    if case_type:
        query = query.filter(Case.case_type == case_type)
    if date_from:
        query = query.filter(Case.registration_date >= date_from)
    if date_to:
        query = query.filter(Case.registration_date <= date_to)

    if search:
        search_term = like_pattern(search)
        query = query.filter(
            or_(
                Case.case_number.ilike(search_term, escape=ESCAPE_CHAR),
                Case.title.ilike(search_term, escape=ESCAPE_CHAR),
                Case.description.ilike(search_term, escape=ESCAPE_CHAR),
                User.name.ilike(search_term, escape=ESCAPE_CHAR),
            )
        )

    cases, pagination = paginate(query.order_by(Case.created_at.desc()), page, limit)
    return {
        "cases": [CaseResponse.model_validate(c) for c in cases],
        "pagination": pagination,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_case(
    body: CaseCreate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    client = get_tenant_client(db, body.client_id, tenant_id)

    if case_number_taken(db, tenant_id, body.case_number):
        raise DuplicateKeyError("Case number already exists")

    case = Case(
        **body.model_dump(),
        advocate_id=tenant_id,
        created_by=principal.id,
        status=CaseStatus.active,
    )
    db.add(case)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateKeyError("Case number already exists")
    db.refresh(case)

    logger.info(f"Case created: {case.case_number} for client {client.id} in tenant {tenant_id}")
    return {"case": CaseResponse.model_validate(case)}


# ============================================================================
# Single Case
# ============================================================================

@router.get("/{case_id}")
def get_case(
    case_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, case_id, tenant_id)
    return {"case": CaseDetailResponse.model_validate(case)}


@router.put("/{case_id}")
def update_case(
    case_id: str,
    body: CaseUpdate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, case_id, tenant_id)
    changes = body.model_dump(exclude_unset=True)

    new_number = changes.get("case_number")
    if new_number and new_number != case.case_number:
        if case_number_taken(db, tenant_id, new_number, exclude_id=case.id):
            raise DuplicateKeyError("Case number already exists")

    for key, value in changes.items():
        if value is None and key in ("case_number", "title", "case_type", "status", "priority", "registration_date"):
            continue
        setattr(case, key, value)

    if changes.get("status") == CaseStatus.closed and not case.closed_date:
        case.closed_date = datetime.utcnow()

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateKeyError("Case number already exists")
    db.refresh(case)
    return {"case": CaseResponse.model_validate(case)}


@router.delete("/{case_id}")
def remove_case(
    case_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
):
    case = get_tenant_case(db, case_id, tenant_id)
    cleanup = delete_case(db, store, case)
    return {"message": "Case deleted successfully", "cleanup": cleanup.as_dict()}


# ============================================================================
# Notes & Tasks
# ============================================================================

@router.post("/{case_id}/notes", status_code=status.HTTP_201_CREATED)
def add_note(
    case_id: str,
    body: NoteCreate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, case_id, tenant_id)
    note = CaseNote(case_id=case.id, content=body.content, is_private=body.is_private, created_by=principal.id)
    db.add(note)
    db.commit()
    db.refresh(note)
    return {"note": NoteResponse.model_validate(note)}


@router.post("/{case_id}/tasks", status_code=status.HTTP_201_CREATED)
def add_task(
    case_id: str,
    body: TaskCreate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, case_id, tenant_id)
    if body.assigned_to:
        get_tenant_member(db, body.assigned_to, tenant_id)
    task = CaseTask(case_id=case.id, **body.model_dump())
    db.add(task)
    db.commit()
    db.refresh(task)
    return {"task": TaskResponse.model_validate(task)}


@router.patch("/{case_id}/tasks/{task_id}")
def update_task(
    case_id: str,
    task_id: str,
    body: TaskUpdate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, case_id, tenant_id)
    task = db.query(CaseTask).filter(CaseTask.id == task_id, CaseTask.case_id == case.id).first()
    if not task:
        raise NotFoundError("Task")

    changes = body.model_dump(exclude_unset=True)
    if changes.get("assigned_to"):
        get_tenant_member(db, changes["assigned_to"], tenant_id)

    for key, value in changes.items():
        if value is None and key in ("title", "status", "priority"):
            continue
        setattr(task, key, value)

    db.commit()
    db.refresh(task)
    return {"task": TaskResponse.model_validate(task)}
