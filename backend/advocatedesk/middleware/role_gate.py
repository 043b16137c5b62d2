"""
Role gate for the dashboard areas.

``/dashboard/advocates`` is reserved for advocates and admins and
``/dashboard/clients`` for clients. Anyone else is redirected to the area
matching their roles, and requests without a valid session go to the
sign-in page. API routes enforce roles through their own dependencies.
"""
from __future__ import annotations

from typing import Iterable, Optional

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from advocatedesk.core.config import settings
from advocatedesk.core.security import decode_access_token

SIGNIN_PATH = "/auth/signin"
ADVOCATES_AREA = "/dashboard/advocates"
CLIENTS_AREA = "/dashboard/clients"
DASHBOARD_HOME = "/dashboard"


def _in_area(path: str, area: str) -> bool:
    return path == area or path.startswith(area + "/")


def redirect_target(path: str, roles: Optional[Iterable[str]]) -> Optional[str]:
    """Where to send a request for ``path``, or None to let it through."""
    if not (_in_area(path, ADVOCATES_AREA) or _in_area(path, CLIENTS_AREA)):
        return None
    if roles is None:
        return SIGNIN_PATH

    roles = set(roles)
    advocate_side = bool(roles & {"advocate", "admin"})
    client = "client" in roles

    if _in_area(path, ADVOCATES_AREA) and not advocate_side:
        return CLIENTS_AREA if client else DASHBOARD_HOME
    if _in_area(path, CLIENTS_AREA) and not client:
        return ADVOCATES_AREA if advocate_side else DASHBOARD_HOME
    return None


class RoleGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        roles = None
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if token:
            try:
                roles = decode_access_token(token).get("roles") or []
            except jwt.PyJWTError:
                roles = None

        target = redirect_target(request.url.path, roles)
        if target:
            return RedirectResponse(url=target, status_code=303)
        return await call_next(request)
