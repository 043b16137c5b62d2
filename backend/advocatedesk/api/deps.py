# advocatedesk/api/deps.py

from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from advocatedesk.core.config import settings
from advocatedesk.core.security import decode_access_token
from advocatedesk.core.tenancy import Principal, resolve_tenant_id
from advocatedesk.db.database import get_db
from advocatedesk.db.models import User, UserRole
from advocatedesk.utils.exceptions import ForbiddenError, UnauthorizedError

security = HTTPBearer(auto_error=False)

# ============================================================================
# Session Dependencies
# ============================================================================

def _session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the session token (cookie or Bearer header) and return the user.
    """
    token = _session_token(request, credentials)
    if not token:
        raise UnauthorizedError()

    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise ForbiddenError("User account is deactivated")
    return user


def get_principal(current_user: User = Depends(get_current_user)) -> Principal:
    return Principal.from_user(current_user)


def get_tenant_id(principal: Principal = Depends(get_principal)) -> str:
    """Tenant scope for the caller; 400 when it cannot be derived."""
    return resolve_tenant_id(principal)


# ============================================================================
# Role Guards
# ============================================================================

def require_roles(*roles: UserRole):
    def _guard(principal: Principal = Depends(get_principal)) -> Principal:
        if not principal.has_role(*roles):
            raise ForbiddenError()
        return principal
    return _guard


require_advocate_side = require_roles(UserRole.advocate, UserRole.admin, UserRole.team_member)
require_advocate_or_admin = require_roles(UserRole.advocate, UserRole.admin)
require_admin = require_roles(UserRole.admin)
require_client = require_roles(UserRole.client)
