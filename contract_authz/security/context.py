from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass

from contract_authz.policy import CompanyRole, Department, DepartmentRole, GlobalRole


@dataclass(frozen=True)
class TenantContext:
    """
    Per-request tenant context.

    Immutable, so it can be handed to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime)
    - the task-local slot below (asyncio task / thread lifetime)
    without any of them being able to change what another one sees.
    """

    user_id: str
    global_role: GlobalRole | None = None
    company_id: str | None = None
    company_role: CompanyRole | None = None
    department: Department | None = None
    department_role: DepartmentRole | None = None

    @property
    def is_admin(self) -> bool:
        return self.global_role is GlobalRole.ADMIN

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "user_id": self.user_id,
            "global_role": _value(self.global_role),
            "company_id": self.company_id,
            "company_role": _value(self.company_role),
            "department": _value(self.department),
            "department_role": _value(self.department_role),
            "is_admin": self.is_admin,
        }


def _value(member) -> str | None:
    return member.value if member is not None else None


# Each asyncio task (and each thread) sees its own value; nothing is shared process-wide.
_tenant_context_var: ContextVar[TenantContext | None] = ContextVar("tenant_context", default=None)


def bind_tenant_context(context: TenantContext | None) -> Token[TenantContext | None]:
    return _tenant_context_var.set(context)


def reset_tenant_context(token: Token[TenantContext | None]) -> None:
    _tenant_context_var.reset(token)


def current_tenant_context() -> TenantContext | None:
    return _tenant_context_var.get()


def clear_tenant_context() -> None:
    _tenant_context_var.set(None)


@contextmanager
def tenant_scope(context: TenantContext | None) -> Iterator[TenantContext | None]:
    """Bind ``context`` for the enclosed block and restore the previous value on exit or error."""

    token = bind_tenant_context(context)
    try:
        yield context
    finally:
        reset_tenant_context(token)
