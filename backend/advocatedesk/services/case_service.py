# advocatedesk/services/case_service.py
"""
Tenant-scoped lookups shared by the case, client, document and hearing
endpoints. Every lookup filters on ``advocate_id``; a record in another
tenant is indistinguishable from a missing one.
"""
from typing import Dict, Iterable

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from advocatedesk.core.logger import logger
from advocatedesk.db.models import OPEN_CASE_STATUSES, Case, User, UserRole
from advocatedesk.services.cleanup_service import CleanupResult, cleanup_case_files
from advocatedesk.utils.exceptions import NotFoundError


def role_clause(role: UserRole):
    """SQL filter matching users whose JSON role list contains ``role``."""
    return cast(User.roles, String).like(f'%"{role.value}"%')


def get_tenant_case(db: Session, case_id: str, tenant_id: str) -> Case:
    case = db.query(Case).filter(Case.id == case_id, Case.advocate_id == tenant_id).first()
    if not case:
        raise NotFoundError("Case")
    return case


def get_tenant_client(db: Session, client_id: str, tenant_id: str) -> User:
    client = (
        db.query(User)
        .filter(User.id == client_id, User.advocate_id == tenant_id, role_clause(UserRole.client))
        .first()
    )
    if not client:
        raise NotFoundError("Client")
    return client


def get_tenant_member(db: Session, user_id: str, tenant_id: str) -> User:
    """A user of the tenant: the main advocate or anyone bound to it."""
    user = (
        db.query(User)
        .filter(User.id == user_id, or_(User.id == tenant_id, User.advocate_id == tenant_id))
        .first()
    )
    if not user:
        raise NotFoundError("User")
    return user


def case_number_taken(db: Session, tenant_id: str, case_number: str, exclude_id: str = None) -> bool:
    query = db.query(Case.id).filter(Case.advocate_id == tenant_id, Case.case_number == case_number)
    if exclude_id:
        query = query.filter(Case.id != exclude_id)
    return query.first() is not None


def case_counts(db: Session, tenant_id: str, client_ids: Iterable[str]) -> Dict[str, Dict[str, int]]:
    """Total and open case counts per client."""
    client_ids = list(client_ids)
    counts = {cid: {"total_cases": 0, "active_cases": 0} for cid in client_ids}
    if not client_ids:
        return counts

    rows = (
        db.query(Case.client_id, Case.status, func.count(Case.id))
        .filter(Case.advocate_id == tenant_id, Case.client_id.in_(client_ids))
        .group_by(Case.client_id, Case.status)
        .all()
    )
    for client_id, status, count in rows:
        counts[client_id]["total_cases"] += count
        if status in OPEN_CASE_STATUSES:
            counts[client_id]["active_cases"] += count
    return counts


def delete_case(db: Session, store, case: Case) -> CleanupResult:
    """Delete ``case`` with its children, then its stored files."""
    case_id = case.id
    db.delete(case)
    db.commit()
    logger.info(f"Case {case_id} deleted")
    return cleanup_case_files(store, case_id)
