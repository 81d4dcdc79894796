"""Domain-membership resolver.

A module may be offered through several domains, and enrollments are scoped
per (user, domain). Every enrollment-scoped action must name exactly one
scope; this module decides which one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.models import DomainModule, UserDomain
from lms.errors import AccessDeniedError, AmbiguousScopeError


@dataclass(frozen=True)
class Resolved:
    user_domain_id: int
    domain_id: int


@dataclass(frozen=True)
class Ambiguous:
    candidate_domain_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class Denied:
    reason: str
    requested_domain_id: int | None = None


ScopeResolution = Resolved | Ambiguous | Denied


async def qualifying_scopes(db: AsyncSession, user_id: int, module_id: int) -> list[UserDomain]:
    """Every UserDomain of the user whose domain offers the module."""
    result = await db.execute(
        select(UserDomain)
        .join(DomainModule, DomainModule.domain_id == UserDomain.domain_id)
        .where(
            UserDomain.user_id == user_id,
            DomainModule.module_id == module_id,
        )
        .order_by(UserDomain.domain_id)
    )
    return list(result.scalars().all())


async def resolve_enrollment_scope(
    db: AsyncSession,
    user_id: int,
    module_id: int,
    requested_domain_id: int | None = None,
) -> ScopeResolution:
    """Resolve the scope without raising."""
    scopes = await qualifying_scopes(db, user_id, module_id)

    if not scopes:
        return Denied(
            "User is not assigned to any domain offering this module",
            requested_domain_id,
        )

    if requested_domain_id is not None:
        for scope in scopes:
            if scope.domain_id == requested_domain_id:
                return Resolved(scope.id, scope.domain_id)
        return Denied(
            f"User does not have access to this module in domain {requested_domain_id}",
            requested_domain_id,
        )

    if len(scopes) > 1:
        return Ambiguous([scope.domain_id for scope in scopes])

    return Resolved(scopes[0].id, scopes[0].domain_id)


def require_resolved(resolution: ScopeResolution) -> Resolved:
    """Turn a non-resolved outcome into the matching typed failure."""
    if isinstance(resolution, Resolved):
        return resolution
    if isinstance(resolution, Ambiguous):
        ids = ", ".join(str(d) for d in resolution.candidate_domain_ids)
        raise AmbiguousScopeError(
            f"Module is available in multiple domains. Specify domain_id. Available domains: {ids}",
            resolution.candidate_domain_ids,
        )
    raise AccessDeniedError(resolution.reason)


async def get_enrollment_scope(
    db: AsyncSession,
    user_id: int,
    module_id: int,
    requested_domain_id: int | None = None,
) -> int:
    """Return the user_domain_id for the action or raise."""
    resolution = await resolve_enrollment_scope(db, user_id, module_id, requested_domain_id)
    return require_resolved(resolution).user_domain_id
