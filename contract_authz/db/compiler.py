from __future__ import annotations

from sqlalchemy import and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from contract_authz.security.predicates import (
    And,
    CompanyAccess,
    CompanyMembership,
    Deny,
    Eq,
    In,
    Or,
    Predicate,
    companies_for,
)


def to_criteria(predicate: Predicate, model: type, membership: CompanyMembership) -> ColumnElement[bool]:
    """
    Compile a predicate tree into a SQLAlchemy boolean expression over ``model``.

    Field names must be mapped attributes of ``model``; a missing one raises
    AttributeError instead of silently dropping the clause.
    """

    if isinstance(predicate, Eq):
        column = getattr(model, predicate.field)
        if isinstance(predicate.value, bool) or predicate.value is None:
            return column.is_(predicate.value)
        return column == predicate.value

    if isinstance(predicate, In):
        return getattr(model, predicate.field).in_(sorted(predicate.values, key=str))

    if isinstance(predicate, CompanyAccess):
        ids = companies_for(predicate, membership)
        if not ids:
            return false()
        return getattr(model, predicate.field).in_(sorted(ids))

    if isinstance(predicate, And):
        return and_(*(to_criteria(c, model, membership) for c in predicate.clauses))

    if isinstance(predicate, Or):
        return or_(*(to_criteria(c, model, membership) for c in predicate.clauses))

    if isinstance(predicate, Deny):
        return false()

    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")
