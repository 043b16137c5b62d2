"""
Read-only case access for client accounts
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from advocatedesk.api.deps import require_client
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import Case
from advocatedesk.db.schemas import CaseResponse, DocumentResponse, NoteResponse
from advocatedesk.utils.exceptions import NotFoundError
from advocatedesk.utils.helpers import paginate

router = APIRouter()


@router.get("/cases")
def list_my_cases(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    principal: Principal = Depends(require_client),
    db: Session = Depends(get_db),
):
    query = db.query(Case).filter(Case.client_id == principal.id).order_by(Case.created_at.desc())
    cases, pagination = paginate(query, page, limit)
    return {
        "cases": [CaseResponse.model_validate(c) for c in cases],
        "pagination": pagination,
    }


@router.get("/cases/{case_id}")
def get_my_case(
    case_id: str,
    principal: Principal = Depends(require_client),
    db: Session = Depends(get_db),
):
    case = db.query(Case).filter(Case.id == case_id, Case.client_id == principal.id).first()
    if not case:
        raise NotFoundError("Case")
    return {
        "case": CaseResponse.model_validate(case),
        "documents": [DocumentResponse.model_validate(d) for d in case.documents],
        "notes": [NoteResponse.model_validate(n) for n in case.notes if not n.is_private],
    }
