from __future__ import annotations

from collections.abc import Mapping
import logging

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper, ORMExecuteState, Session, with_loader_criteria

from contract_authz.db.base import Base
from contract_authz.db.compiler import to_criteria
from contract_authz.db.directory import DIRECTORY_LOOKUP_OPTION, directory_for
from contract_authz.security.config import IsolationConfig, RecordRule, get_isolation_config
from contract_authz.security.context import TenantContext, current_tenant_context
from contract_authz.security.errors import RecordAccessDenied, Unauthenticated
from contract_authz.security.predicates import (
    Deny,
    inject_access_predicate,
    matches,
    referenced_fields,
)

logger = logging.getLogger(__name__)


def session_tenant_context(session: Session) -> TenantContext | None:
    """
    Context for a session: an explicit ``Session.info["tenant_context"]``
    (even None) wins; otherwise the task-local context.
    """

    if "tenant_context" in session.info:
        return session.info["tenant_context"]
    return current_tenant_context()


def _rule_for_mapper(mapper: Mapper, config: IsolationConfig) -> RecordRule | None:
    table = getattr(mapper, "local_table", None)
    return config.rule_for(table.name) if table is not None else None


def declared_models(config: IsolationConfig) -> list[tuple[type, RecordRule]]:
    declared = []
    for mapper in Base.registry.mappers:
        rule = _rule_for_mapper(mapper, config)
        if rule is not None:
            declared.append((mapper.class_, rule))
    return declared


@event.listens_for(Session, "do_orm_execute")
def _apply_tenant_isolation(execute_state: ORMExecuteState) -> None:
    """
    Transparent tenant isolation for ORM statements.

    Existing query code stays unchanged:
        db.scalars(select(Contract)).all()
    only returns rows the session's tenant context may see.

    Predicates come from ``inject_access_predicate``. ``with_loader_criteria``
    and ``.where()`` both AND them with the statement's own WHERE clause, so
    the caller's filter is always combined at the top level.
    """

    if execute_state.is_select and (execute_state.is_column_load or execute_state.is_relationship_load):
        # Loader criteria already propagated from the statement that loaded the parent.
        return

    config = get_isolation_config()
    declared = declared_models(config)
    if not declared:
        return

    targets = {m.class_ for m in execute_state.all_mappers}
    declared_targets = targets & {model for model, _ in declared}
    if execute_state.execution_options.get(DIRECTORY_LOOKUP_OPTION) and not declared_targets:
        return

    session = execute_state.session
    context = session_tenant_context(session)

    if execute_state.is_insert:
        if declared_targets and (context is None or not context.is_admin):
            logger.info(
                "Rejected bulk insert into %s user=%s",
                sorted(t.__name__ for t in declared_targets),
                context and context.user_id,
            )
            if context is None:
                raise Unauthenticated()
            raise RecordAccessDenied()
        return

    if context is not None and context.is_admin:
        return

    if execute_state.is_update or execute_state.is_delete:
        _restrict_write(execute_state, context, config)
        return

    if not execute_state.is_select:
        return

    options = []
    for model, rule in declared:
        try:
            predicate = inject_access_predicate(rule, None, context)
        except Unauthenticated:
            if model in declared_targets:
                logger.info("Rejected unauthenticated read of %s", model.__name__)
                raise
            predicate = Deny()
        if predicate is None:
            continue
        criteria = to_criteria(predicate, model, directory_for(session))
        options.append(with_loader_criteria(model, criteria, include_aliases=True))

    execute_state.statement = execute_state.statement.options(*options)


def _assigned_fields(execute_state: ORMExecuteState) -> set[str]:
    """Attribute names a bulk UPDATE assigns, from ``.values()`` and execute parameters."""

    statement = execute_state.statement
    keys = list(getattr(statement, "_values", None) or ())
    keys.extend(k for k, _ in getattr(statement, "_ordered_values", None) or ())

    parameters = execute_state.parameters
    if isinstance(parameters, Mapping):
        keys.extend(parameters)
    elif parameters:
        for row in parameters:
            keys.extend(row)

    return {getattr(k, "key", None) or str(k) for k in keys}


def _restrict_write(execute_state: ORMExecuteState, context: TenantContext | None, config: IsolationConfig) -> None:
    mapper = execute_state.bind_mapper
    rule = _rule_for_mapper(mapper, config) if mapper is not None else None
    if rule is None:
        return

    try:
        predicate = inject_access_predicate(rule, None, context, write=True)
    except Unauthenticated:
        logger.info("Rejected unauthenticated write to %s", mapper.class_.__name__)
        raise
    if predicate is None:
        return

    if execute_state.is_update:
        # Rows must stay inside the caller's scope after the update too.
        reassigned = _assigned_fields(execute_state) & referenced_fields(predicate)
        if reassigned:
            logger.info(
                "Rejected bulk update of %s columns=%s user=%s",
                mapper.class_.__name__,
                sorted(reassigned),
                context.user_id,
            )
            raise RecordAccessDenied()

    criteria = to_criteria(predicate, mapper.class_, directory_for(execute_state.session))
    execute_state.statement = execute_state.statement.where(criteria)


@event.listens_for(Session, "before_flush")
def _check_tenant_writes(session: Session, flush_context, instances) -> None:
    """
    Unit-of-work writes: every new, modified or deleted row of a declared
    type must satisfy the access predicate of the session's context.
    """

    context = session_tenant_context(session)
    if context is not None and context.is_admin:
        return

    config = get_isolation_config()
    for obj in (*session.new, *session.dirty, *session.deleted):
        rule = _rule_for_mapper(inspect(obj).mapper, config)
        if rule is None:
            continue

        try:
            predicate = inject_access_predicate(rule, None, context, write=True)
        except Unauthenticated:
            logger.info("Rejected unauthenticated write of %s", type(obj).__name__)
            raise

        if not matches(predicate, obj, directory_for(session)):
            logger.info("Rejected out-of-scope write of %s user=%s", type(obj).__name__, context and context.user_id)
            raise RecordAccessDenied()
