"""Tests for domain-membership scope resolution."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from lms.enrollment.resolver import (
    Ambiguous,
    Denied,
    Resolved,
    get_enrollment_scope,
    resolve_enrollment_scope,
)
from lms.errors import AccessDeniedError, AmbiguousScopeError
from tests.helpers import join_domains, make_domain, make_module, make_user


@pytest.mark.asyncio
class TestResolveEnrollmentScope:
    """Resolved / Ambiguous / Denied outcomes."""

    async def test_single_domain_resolves_without_hint(self, db_session: AsyncSession):
        user = await make_user(db_session)
        domain = await make_domain(db_session)
        module = await make_module(db_session, domain)
        [scope] = await join_domains(db_session, user, domain)

        result = await resolve_enrollment_scope(db_session, user.id, module.id)
        assert result == Resolved(scope.id, domain.id)

    async def test_multiple_domains_without_hint_is_ambiguous(self, db_session: AsyncSession):
        user = await make_user(db_session)
        d1, d2 = await make_domain(db_session), await make_domain(db_session)
        module = await make_module(db_session, d1, d2)
        await join_domains(db_session, user, d1, d2)

        result = await resolve_enrollment_scope(db_session, user.id, module.id)
        assert isinstance(result, Ambiguous)
        assert sorted(result.candidate_domain_ids) == sorted([d1.id, d2.id])

    async def test_hint_picks_one_of_several(self, db_session: AsyncSession):
        user = await make_user(db_session)
        d1, d2 = await make_domain(db_session), await make_domain(db_session)
        module = await make_module(db_session, d1, d2)
        _, scope2 = await join_domains(db_session, user, d1, d2)

        result = await resolve_enrollment_scope(db_session, user.id, module.id, d2.id)
        assert result == Resolved(scope2.id, d2.id)

    async def test_no_qualifying_domain_is_denied(self, db_session: AsyncSession):
        user = await make_user(db_session)
        offered, other = await make_domain(db_session), await make_domain(db_session)
        module = await make_module(db_session, offered)
        await join_domains(db_session, user, other)

        result = await resolve_enrollment_scope(db_session, user.id, module.id)
        assert isinstance(result, Denied)

    async def test_hint_outside_users_domains_is_denied(self, db_session: AsyncSession):
        user = await make_user(db_session)
        d1, d2 = await make_domain(db_session), await make_domain(db_session)
        module = await make_module(db_session, d1, d2)
        await join_domains(db_session, user, d1)

        result = await resolve_enrollment_scope(db_session, user.id, module.id, d2.id)
        assert isinstance(result, Denied)
        assert result.requested_domain_id == d2.id

    async def test_user_domain_not_offering_module_does_not_count(self, db_session: AsyncSession):
        """Only domains that offer the module are candidates."""
        user = await make_user(db_session)
        offered, unrelated = await make_domain(db_session), await make_domain(db_session)
        module = await make_module(db_session, offered)
        scope, _ = await join_domains(db_session, user, offered, unrelated)

        result = await resolve_enrollment_scope(db_session, user.id, module.id)
        assert result == Resolved(scope.id, offered.id)


@pytest.mark.asyncio
class TestGetEnrollmentScope:
    """Raising wrapper used by the services."""

    async def test_ambiguous_raises_with_all_candidates(self, db_session: AsyncSession):
        user = await make_user(db_session)
        domains = [await make_domain(db_session) for _ in range(3)]
        module = await make_module(db_session, *domains)
        await join_domains(db_session, user, *domains)

        with pytest.raises(AmbiguousScopeError) as exc_info:
            await get_enrollment_scope(db_session, user.id, module.id)
        assert sorted(exc_info.value.candidate_domain_ids) == sorted(d.id for d in domains)

    async def test_denied_raises_access_denied(self, db_session: AsyncSession):
        user = await make_user(db_session)
        module = await make_module(db_session, await make_domain(db_session))

        with pytest.raises(AccessDeniedError):
            await get_enrollment_scope(db_session, user.id, module.id)
