"""Tests for the task-local tenant context and its isolation under concurrency."""
from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
import threading

import pytest

from contract_authz.policy import GlobalRole
from contract_authz.security.context import (
    TenantContext,
    bind_tenant_context,
    clear_tenant_context,
    current_tenant_context,
    reset_tenant_context,
    tenant_scope,
)
from contract_authz.security.predicates import inject_access_predicate, referenced_values


def _ctx(n: int) -> TenantContext:
    return TenantContext(user_id=f"user-{n}", global_role=GlobalRole.USER, company_id=f"company-{n}")


def test_default_is_no_context():
    assert current_tenant_context() is None


def test_tenant_scope_restores_previous_context():
    outer = _ctx(1)
    with tenant_scope(outer):
        with tenant_scope(_ctx(2)):
            assert current_tenant_context().user_id == "user-2"
        assert current_tenant_context() is outer
    assert current_tenant_context() is None


def test_tenant_scope_restores_on_error():
    with pytest.raises(RuntimeError):
        with tenant_scope(_ctx(1)):
            raise RuntimeError("boom")
    assert current_tenant_context() is None


def test_bind_reset_and_clear():
    token = bind_tenant_context(_ctx(1))
    clear_tenant_context()
    assert current_tenant_context() is None
    reset_tenant_context(token)
    assert current_tenant_context() is None


def test_context_is_immutable():
    ctx = _ctx(1)
    with pytest.raises(AttributeError):
        ctx.user_id = "someone-else"  # type: ignore[misc]


def test_to_dict():
    assert _ctx(3).to_dict() == {
        "user_id": "user-3",
        "global_role": "USER",
        "company_id": "company-3",
        "company_role": None,
        "department": None,
        "department_role": None,
        "is_admin": False,
    }


def test_concurrent_tasks_never_see_each_other():
    async def request(n: int) -> set[object]:
        seen: set[object] = set()
        with tenant_scope(_ctx(n)):
            for _ in range(5):
                # Yield so other "requests" run between establish and use.
                await asyncio.sleep(0)
                predicate = inject_access_predicate("company", {"status": "DRAFT"}, current_tenant_context())
                seen |= referenced_values(predicate)
        return seen

    async def main() -> list[set[object]]:
        return await asyncio.gather(*(request(n) for n in range(50)))

    results = asyncio.run(main())

    for n, seen in enumerate(results):
        assert seen == {"DRAFT", f"user-{n}", f"company-{n}"}


def test_concurrent_threads_never_see_each_other():
    barrier = threading.Barrier(8)

    def request(n: int) -> set[object]:
        with tenant_scope(_ctx(n)):
            barrier.wait()
            predicate = inject_access_predicate("company", None, current_tenant_context())
            return referenced_values(predicate)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(request, range(8)))

    for n, seen in enumerate(results):
        assert seen == {f"user-{n}", f"company-{n}"}
