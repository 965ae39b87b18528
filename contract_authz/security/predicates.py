"""
Typed filter expressions and access-predicate injection.

Filters are small immutable trees (``Eq``, ``In``, ``CompanyAccess``,
``And``, ``Or``, ``Deny``). ``inject_access_predicate`` is the single place
where a caller's filter meets the tenant rules: the result is always
``And(caller_filter, access_predicate)`` so nothing in the caller's filter
can widen what the access predicate allows. Alternatives (OR) only ever
appear inside the access predicate itself.

Trees are persistence-agnostic. ``contract_authz.db.compiler`` turns them
into SQLAlchemy criteria; ``matches`` evaluates them against an in-memory
record for write checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Protocol, Union

from .config import RecordCategory, RecordRule
from .context import TenantContext
from .errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Eq:
    field: str
    value: object


@dataclass(frozen=True)
class In:
    field: str
    values: frozenset


@dataclass(frozen=True)
class CompanyAccess:
    """
    Record's company is one the user belongs to (created it, or is a member).

    When ``company_id`` is set, only that company counts, and only if the
    user actually belongs to it.
    """

    user_id: str
    field: str = "company_id"
    company_id: str | None = None


@dataclass(frozen=True)
class And:
    clauses: tuple[Predicate, ...]


@dataclass(frozen=True)
class Or:
    clauses: tuple[Predicate, ...]


@dataclass(frozen=True)
class Deny:
    """Matches nothing."""


Predicate = Union[Eq, In, CompanyAccess, And, Or, Deny]


class CompanyMembership(Protocol):
    def accessible_company_ids(self, user_id: str) -> frozenset[str]: ...


def all_of(*clauses: Predicate) -> Predicate:
    return clauses[0] if len(clauses) == 1 else And(tuple(clauses))


def any_of(*clauses: Predicate) -> Predicate:
    return clauses[0] if len(clauses) == 1 else Or(tuple(clauses))


def filter_from_mapping(values: Mapping[str, object]) -> Predicate | None:
    """``{"status": "DRAFT"}`` -> ``Eq("status", "DRAFT")``; several keys are ANDed."""

    if not values:
        return None
    clauses: list[Predicate] = []
    for field, value in values.items():
        if isinstance(value, (set, frozenset, list, tuple)):
            clauses.append(In(field, frozenset(value)))
        else:
            clauses.append(Eq(field, value))
    return all_of(*clauses)


def access_predicate(rule: RecordRule, context: TenantContext | None, *, write: bool = False) -> Predicate | None:
    """
    Build the access predicate for one record type.

    Returns None when no restriction applies (admin context). Raises
    ``Unauthenticated`` when there is no context and the operation is not a
    read of a publicly readable type.

    With ``write=True`` the predicate describes rows the context may create,
    modify or delete, which for visibility-scoped types excludes other
    tenants' public rows.
    """

    if context is None:
        if rule.publicly_readable and not write:
            return Eq(rule.public_flag, True)
        raise Unauthenticated()

    if context.is_admin:
        return None

    uid = context.user_id
    category = rule.category

    if category is RecordCategory.OWNERSHIP:
        return Eq(rule.created_by, uid)

    if category is RecordCategory.COMPANY:
        return any_of(
            Eq(rule.created_by, uid),
            CompanyAccess(user_id=uid, field=rule.company, company_id=context.company_id),
        )

    if category is RecordCategory.VISIBILITY:
        # Public records are readable by everyone but writable only by their owners.
        clauses: list[Predicate] = [] if write else [Eq(rule.public_flag, True)]
        clauses.append(Eq(rule.created_by, uid))
        if context.company_id is not None and context.company_role is not None:
            clauses.append(Eq(rule.company, context.company_id))
        return any_of(*clauses)

    if category is RecordCategory.USER_PRIVATE:
        return Eq(rule.owner, uid)

    # Unknown categories cannot come out of the config loader; deny regardless.
    return Deny()


def inject_access_predicate(
    rule: RecordRule | RecordCategory | str,
    base_filter: Predicate | Mapping[str, object] | None,
    context: TenantContext | None,
    *,
    write: bool = False,
) -> Predicate | None:
    """
    Merge the caller's filter with the access predicate for ``rule``.

    The caller's filter is always ANDed at the top level.
    """

    if not isinstance(rule, RecordRule):
        rule = RecordRule.for_category(rule)
    if isinstance(base_filter, Mapping):
        base_filter = filter_from_mapping(base_filter)

    injected = access_predicate(rule, context, write=write)
    if injected is None:
        return base_filter
    if base_filter is None:
        result = injected
    else:
        result = And((base_filter, injected))

    logger.debug(
        "Injected access predicate category=%s user=%s predicate=%s",
        rule.category.value,
        context.user_id if context else None,
        render(result),
    )
    return result


def render(predicate: Predicate | None) -> str:
    """Human-readable form for logs and diagnostics."""

    if predicate is None:
        return "TRUE"
    if isinstance(predicate, Eq):
        return f"{predicate.field} == {predicate.value!r}"
    if isinstance(predicate, In):
        return f"{predicate.field} IN {sorted(map(repr, predicate.values))}"
    if isinstance(predicate, CompanyAccess):
        scope = predicate.company_id if predicate.company_id is not None else "*"
        return f"company_access({predicate.field}, {scope}, {predicate.user_id})"
    if isinstance(predicate, Deny):
        return "FALSE"
    joiner = " AND " if isinstance(predicate, And) else " OR "
    return "(" + joiner.join(render(c) for c in predicate.clauses) + ")"


def companies_for(predicate: CompanyAccess, membership: CompanyMembership) -> frozenset[str]:
    """Company ids a ``CompanyAccess`` node admits."""

    accessible = membership.accessible_company_ids(predicate.user_id)
    if predicate.company_id is None:
        return accessible
    return accessible & {predicate.company_id}


def matches(predicate: Predicate | None, record: object, membership: CompanyMembership) -> bool:
    """Evaluate ``predicate`` against an in-memory record (attribute access)."""

    if predicate is None:
        return True
    if isinstance(predicate, Eq):
        return getattr(record, predicate.field, None) == predicate.value
    if isinstance(predicate, In):
        return getattr(record, predicate.field, None) in predicate.values
    if isinstance(predicate, CompanyAccess):
        value = getattr(record, predicate.field, None)
        return value is not None and value in companies_for(predicate, membership)
    if isinstance(predicate, And):
        return all(matches(c, record, membership) for c in predicate.clauses)
    if isinstance(predicate, Or):
        return any(matches(c, record, membership) for c in predicate.clauses)
    return False


def referenced_values(predicate: Predicate | None) -> set[object]:
    """Every literal a predicate compares against (user ids, company ids, flags)."""

    if predicate is None or isinstance(predicate, Deny):
        return set()
    if isinstance(predicate, Eq):
        return {predicate.value}
    if isinstance(predicate, In):
        return set(predicate.values)
    if isinstance(predicate, CompanyAccess):
        return {predicate.user_id} | ({predicate.company_id} if predicate.company_id else set())
    return set().union(*(referenced_values(c) for c in predicate.clauses))



def referenced_fields(predicate: Predicate | None) -> set[str]:
    """Record fields a predicate reads."""

    if predicate is None or isinstance(predicate, Deny):
        return set()
    if isinstance(predicate, (Eq, In, CompanyAccess)):
        return {predicate.field}
    return set().union(*(referenced_fields(c) for c in predicate.clauses))
