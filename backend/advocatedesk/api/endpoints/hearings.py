"""
Hearing scheduling endpoints
"""
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_tenant_id, require_advocate_side
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import Hearing, HearingStatus
from advocatedesk.db.schemas import HearingCreate, HearingResponse, HearingUpdate
from advocatedesk.services.case_service import get_tenant_case
from advocatedesk.utils.exceptions import NotFoundError
from advocatedesk.utils.helpers import paginate

router = APIRouter()


def _get_tenant_hearing(db: Session, hearing_id: str, tenant_id: str) -> Hearing:
    hearing = db.query(Hearing).filter(Hearing.id == hearing_id, Hearing.advocate_id == tenant_id).first()
    if not hearing:
        raise NotFoundError("Hearing")
    return hearing


@router.get("")
def list_hearings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    case_id: Optional[str] = Query(None, alias="caseId"),
    on_date: Optional[date] = Query(None, alias="date"),
    status: Optional[HearingStatus] = Query(None),
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    query = db.query(Hearing).filter(Hearing.advocate_id == tenant_id)
    if case_id:
        query = query.filter(Hearing.case_id == case_id)
    if on_date:
        start = datetime.combine(on_date, time.min)
        query = query.filter(Hearing.date_time >= start, Hearing.date_time < start + timedelta(days=1))
    if status:
        query = query.filter(Hearing.status == status)

    hearings, pagination = paginate(query.order_by(Hearing.date_time.asc()), page, limit)
    return {
        "hearings": [HearingResponse.model_validate(h) for h in hearings],
        "pagination": pagination,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_hearing(
    body: HearingCreate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    case = get_tenant_case(db, body.case_id, tenant_id)
    hearing = Hearing(
        **body.model_dump(),
        advocate_id=tenant_id,
        status=HearingStatus.scheduled,
        created_by=principal.id,
    )
    db.add(hearing)

    # Keep the case's next hearing pointer on the earliest upcoming date.
    if hearing.date_time >= datetime.utcnow() and (
        case.next_hearing_date is None or hearing.date_time < case.next_hearing_date
    ):
        case.next_hearing_date = hearing.date_time

    db.commit()
    db.refresh(hearing)
    return {"hearing": HearingResponse.model_validate(hearing)}


@router.get("/{hearing_id}")
def get_hearing(
    hearing_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    hearing = _get_tenant_hearing(db, hearing_id, tenant_id)
    return {"hearing": HearingResponse.model_validate(hearing)}


@router.put("/{hearing_id}")
def update_hearing(
    hearing_id: str,
    body: HearingUpdate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    hearing = _get_tenant_hearing(db, hearing_id, tenant_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in ("hearing_type", "date_time", "duration", "status", "attendees"):
            continue
        setattr(hearing, key, value)
    db.commit()
    db.refresh(hearing)
    return {"hearing": HearingResponse.model_validate(hearing)}


@router.delete("/{hearing_id}")
def delete_hearing(
    hearing_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    hearing = _get_tenant_hearing(db, hearing_id, tenant_id)
    db.delete(hearing)
    db.commit()
    return {"message": "Hearing deleted successfully"}
