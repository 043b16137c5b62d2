"""
Dashboard statistics endpoints
"""
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_current_user, get_tenant_id, require_advocate_side
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import (
    Case,
    CaseDocument,
    CaseStatus,
    CaseTask,
    Hearing,
    HearingStatus,
    TaskStatus,
    User,
    UserRole,
)
from advocatedesk.services.case_service import role_clause

router = APIRouter()

# Landing areas guarded by the role gate middleware
area_router = APIRouter()


@router.get("/stats")
def get_dashboard_stats(
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Tenant-wide counts for the advocate dashboard
    """
    by_status = dict(
        db.query(Case.status, func.count(Case.id))
        .filter(Case.advocate_id == tenant_id)
        .group_by(Case.status)
        .all()
    )
    cases_by_status = {s.value: by_status.get(s, 0) for s in CaseStatus}

    total_clients = (
        db.query(User)
        .filter(User.advocate_id == tenant_id, role_clause(UserRole.client))
        .count()
    )

    now = datetime.utcnow()
    upcoming_hearings = db.query(Hearing).filter(
        Hearing.advocate_id == tenant_id,
        Hearing.status == HearingStatus.scheduled,
        Hearing.date_time.between(now, now + timedelta(days=30)),
    ).count()

    tasks = db.query(CaseTask).join(Case, CaseTask.case_id == Case.id).filter(Case.advocate_id == tenant_id)
    overdue_tasks = tasks.filter(
        CaseTask.status != TaskStatus.completed,
        or_(
            CaseTask.status == TaskStatus.overdue,
            and_(CaseTask.due_date.isnot(None), CaseTask.due_date < now),
        ),
    ).count()
    completed_tasks = tasks.filter(CaseTask.status == TaskStatus.completed).count()

    total_documents = (
        db.query(CaseDocument)
        .join(Case, CaseDocument.case_id == Case.id)
        .filter(Case.advocate_id == tenant_id)
        .count()
    )

    return {
        "total_cases": sum(cases_by_status.values()),
        "active_cases": cases_by_status[CaseStatus.active.value],
        "closed_cases": cases_by_status[CaseStatus.closed.value],
        "cases_by_status": cases_by_status,
        "total_clients": total_clients,
        "upcoming_hearings": upcoming_hearings,
        "overdue_tasks": overdue_tasks,
        "completed_tasks": completed_tasks,
        "total_documents": total_documents,
    }


@area_router.get("/dashboard")
def dashboard_home(current_user: User = Depends(get_current_user)):
    return {"area": "dashboard", "user": current_user.name}


@area_router.get("/dashboard/advocates")
def advocates_area(current_user: User = Depends(get_current_user)):
    return {"area": "advocates", "user": current_user.name}


@area_router.get("/dashboard/clients")
def clients_area(current_user: User = Depends(get_current_user)):
    return {"area": "clients", "user": current_user.name}
