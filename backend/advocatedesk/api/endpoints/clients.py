"""
Client management endpoints
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_tenant_id, require_advocate_side
from advocatedesk.core.logger import logger
from advocatedesk.core.security import generate_password, get_password_hash
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import OPEN_CASE_STATUSES, Case, User, UserRole
from advocatedesk.db.schemas import ClientCreate, ClientResponse, ClientUpdate
from advocatedesk.services.case_service import (
    case_counts,
    get_tenant_client,
    role_clause,
)
from advocatedesk.services.cleanup_service import (
    CleanupResult,
    cleanup_case_files,
    cleanup_client_files,
)
from advocatedesk.services.notification_service import (
    NotificationDispatcher,
    account_deleted_email,
    credentials_email,
    get_notifier,
)
from advocatedesk.services.storage_service import S3ObjectStore, get_object_store
from advocatedesk.utils.exceptions import DuplicateKeyError, HasActiveDependentsError
from advocatedesk.utils.helpers import ESCAPE_CHAR, like_pattern, paginate

router = APIRouter()


def _client_payload(client: User, counts: dict) -> ClientResponse:
    data = ClientResponse.model_validate(client)
    return data.model_copy(update=counts.get(client.id, {}))


@router.get("")
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None, pattern="^(active|inactive)$"),
    search: Optional[str] = Query(None),
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    query = db.query(User).filter(User.advocate_id == tenant_id, role_clause(UserRole.client))

    if status == "active":
        query = query.filter(User.is_active == True)  # noqa: E712
    elif status == "inactive":
        query = query.filter(User.is_active == False)  # noqa: E712

    if search:
        search_term = like_pattern(search)
        query = query.filter(
            or_(
                User.name.ilike(search_term, escape=ESCAPE_CHAR),
                User.email.ilike(search_term, escape=ESCAPE_CHAR),
                User.phone.ilike(search_term, escape=ESCAPE_CHAR),
            )
        )

    clients, pagination = paginate(query.order_by(User.created_at.desc()), page, limit)
    counts = case_counts(db, tenant_id, (c.id for c in clients))
    return {
        "clients": [_client_payload(c, counts) for c in clients],
        "pagination": pagination,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    body: ClientCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """
    Create a client account, or grant the client role to an existing user of
    the same tenant. New accounts get a random password sent by email.
    """
    email = body.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()

    if existing:
        if existing.advocate_id != tenant_id:
            raise DuplicateKeyError("A user with this email already exists")
        if not existing.has_role(UserRole.client):
            existing.roles = list(existing.roles or []) + [UserRole.client.value]
        db.commit()
        db.refresh(existing)
        logger.info(f"Existing user {existing.id} granted client role in tenant {tenant_id}")
        return {"client": _client_payload(existing, {}), "created": False}

    password = generate_password()
    client = User(
        name=body.name.strip(),
        email=email,
        password_hash=get_password_hash(password),
        roles=[UserRole.client.value],
        phone=body.phone,
        company_name=body.company_name,
        address=body.address,
        advocate_id=tenant_id,
    )
    db.add(client)
    db.commit()
    db.refresh(client)

    message = credentials_email(client.name, client.email, password, principal.name)
    background_tasks.add_task(notifier.send, client.email, message["subject"], message["html"])

    logger.info(f"Client {client.id} created in tenant {tenant_id}")
    return {"client": _client_payload(client, {}), "created": True}


@router.get("/{client_id}")
def get_client(
    client_id: str,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    client = get_tenant_client(db, client_id, tenant_id)
    counts = case_counts(db, tenant_id, [client.id])
    return {"client": _client_payload(client, counts)}


@router.put("/{client_id}")
def update_client(
    client_id: str,
    body: ClientUpdate,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    client = get_tenant_client(db, client_id, tenant_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in ("name", "is_active"):
            continue
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    counts = case_counts(db, tenant_id, [client.id])
    return {"client": _client_payload(client, counts)}


@router.delete("/{client_id}")
def delete_client(
    client_id: str,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_advocate_side),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    store: S3ObjectStore = Depends(get_object_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """
    Delete a client with all of its cases and files. Refused while any of
    the client's cases is still open.
    """
    client = get_tenant_client(db, client_id, tenant_id)
    cases = db.query(Case).filter(Case.client_id == client.id, Case.advocate_id == tenant_id).all()

    open_cases = [c for c in cases if c.status in OPEN_CASE_STATUSES]
    if open_cases:
        raise HasActiveDependentsError(
            f"Cannot delete client with {len(open_cases)} active case(s). Close or settle them first."
        )

    case_ids = [c.id for c in cases]
    name, email = client.name, client.email
    for case in cases:
        db.delete(case)
    db.delete(client)
    db.commit()

    cleanup = CleanupResult()
    for case_id in case_ids:
        cleanup.merge(cleanup_case_files(store, case_id))
    cleanup.merge(cleanup_client_files(store, client_id))

    message = account_deleted_email(name, len(case_ids))
    background_tasks.add_task(notifier.send, email, message["subject"], message["html"])

    logger.info(
        f"Client {client_id} deleted with {len(case_ids)} cases; "
        f"{cleanup.deleted_count} files removed, {len(cleanup.errors)} cleanup errors"
    )
    return {
        "message": "Client deleted successfully",
        "deleted_cases": len(case_ids),
        "cleanup": cleanup.as_dict(),
    }
