"""
Team member endpoints
"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_tenant_id, require_advocate_or_admin
from advocatedesk.core.logger import logger
from advocatedesk.core.security import generate_password, get_password_hash
from advocatedesk.core.tenancy import Principal
from advocatedesk.db.database import get_db
from advocatedesk.db.models import User, UserRole
from advocatedesk.db.schemas import TeamMemberCreate, UserResponse
from advocatedesk.services.case_service import role_clause
from advocatedesk.services.notification_service import (
    NotificationDispatcher,
    credentials_email,
    get_notifier,
)
from advocatedesk.utils.exceptions import DuplicateKeyError

router = APIRouter()


@router.get("")
def list_team(
    principal: Principal = Depends(require_advocate_or_admin),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    members = (
        db.query(User)
        .filter(User.advocate_id == tenant_id, role_clause(UserRole.team_member))
        .order_by(User.created_at.asc())
        .all()
    )
    return {"members": [UserResponse.model_validate(m) for m in members]}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_team_member(
    body: TeamMemberCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_advocate_or_admin),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    email = body.email.strip().lower()
    if db.query(User.id).filter(User.email == email).first():
        raise DuplicateKeyError("A user with this email already exists")

    password = generate_password()
    member = User(
        name=body.name.strip(),
        email=email,
        password_hash=get_password_hash(password),
        roles=[UserRole.team_member.value],
        phone=body.phone,
        advocate_id=tenant_id,
    )
    db.add(member)
    db.commit()
    db.refresh(member)

    message = credentials_email(member.name, member.email, password, principal.name, account_label="team member")
    background_tasks.add_task(notifier.send, member.email, message["subject"], message["html"])

    logger.info(f"Team member {member.id} added to tenant {tenant_id}")
    return {"member": UserResponse.model_validate(member)}
