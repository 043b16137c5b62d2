"""
Tenant resolution.

Every advocate-facing record (cases, client accounts, hearings, team members)
carries an ``advocate_id`` naming the main advocate that owns the data
partition. ``resolve_tenant_id`` derives that value for the caller and must
run before any tenant-scoped query.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from advocatedesk.db.models import User, UserRole
from advocatedesk.utils.exceptions import InvalidTenantConfigurationError


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind a request."""

    id: str
    email: str
    name: str = ""
    roles: FrozenSet[UserRole] = field(default_factory=frozenset)
    advocate_id: Optional[str] = None
    is_main_advocate: bool = False

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name or "",
            roles=parse_roles(user.roles or []),
            advocate_id=str(user.advocate_id) if user.advocate_id else None,
            is_main_advocate=bool(user.is_main_advocate),
        )

    def has_role(self, *roles: UserRole) -> bool:
        return any(role in self.roles for role in roles)


def parse_roles(values: Iterable[str]) -> FrozenSet[UserRole]:
    roles = set()
    for value in values:
        try:
            roles.add(UserRole(value))
        except ValueError:
            continue
    return frozenset(roles)


def is_main_advocate(principal: Principal) -> bool:
    return principal.is_main_advocate or (
        not principal.advocate_id and UserRole.advocate in principal.roles
    )


def resolve_tenant_id(principal: Principal) -> str:
    """Return the tenant scope for ``principal`` or raise 400."""
    if is_main_advocate(principal):
        return principal.id
    if principal.advocate_id:
        return principal.advocate_id
    raise InvalidTenantConfigurationError()


def can_access_tenant(principal: Principal, tenant_id: str) -> bool:
    try:
        return resolve_tenant_id(principal) == str(tenant_id)
    except InvalidTenantConfigurationError:
        return False
