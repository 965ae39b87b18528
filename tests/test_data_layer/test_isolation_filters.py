"""
Tests for transparent tenant isolation of ORM reads.

Rows are arranged under an admin context, then queried as the user under
test. Queries are written exactly as handlers write them; the session hooks
add the access predicates.
"""
from __future__ import annotations

import logging

import pytest
from sqlalchemy import func, select

from contract_authz.models.contracts import Contract, ContractAttachment, ContractTemplate, Notification
from contract_authz.policy import CompanyRole, GlobalRole
from contract_authz.security.context import TenantContext, tenant_scope
from contract_authz.security.errors import Unauthenticated
from tests.conftest import ADMIN, act_as


MEMBER = TenantContext(user_id="u-member", global_role=GlobalRole.USER)
MEMBER_IN_ACME = TenantContext(
    user_id="u-member", global_role=GlobalRole.USER, company_id="c-acme", company_role=CompanyRole.MEMBER
)
OUTSIDER = TenantContext(user_id="u-outsider", global_role=GlobalRole.VIEWER)
OUTSIDER_IN_ACME = TenantContext(user_id="u-outsider", global_role=GlobalRole.VIEWER, company_id="c-acme")


@pytest.fixture
def records(tenants):
    db = tenants
    db.add_all(
        [
            Contract(id="k-acme-draft", title="Acme draft", contract_type="NDA", status="DRAFT", company_id="c-acme", created_by_id="u-owner"),
            Contract(id="k-acme-active", title="Acme active", contract_type="LEASE", status="ACTIVE", company_id="c-acme", created_by_id="u-owner"),
            Contract(id="k-globex", title="Globex deal", contract_type="SALES_AGREEMENT", status="DRAFT", company_id="c-globex", created_by_id="u-other"),
            Contract(id="k-outsider", title="Outsider own", contract_type="OTHER", status="DRAFT", company_id=None, created_by_id="u-outsider"),
            ContractTemplate(id="t-public", name="Public NDA", contract_type="NDA", is_public=True, created_by_id="u-other"),
            ContractTemplate(id="t-private", name="Private", contract_type="NDA", is_public=False, created_by_id="u-other"),
            ContractTemplate(id="t-acme", name="Acme internal", contract_type="LEASE", is_public=False, company_id="c-acme", created_by_id="u-owner"),
            Notification(id="n-member", user_id="u-member", message="for member"),
            Notification(id="n-other", user_id="u-other", message="for other"),
        ]
    )
    db.flush()
    db.add_all(
        [
            ContractAttachment(id="a-owner", contract_id="k-acme-draft", file_name="owner.pdf", uploaded_by_id="u-owner"),
            ContractAttachment(id="a-member", contract_id="k-acme-draft", file_name="member.pdf", uploaded_by_id="u-member"),
        ]
    )
    db.commit()
    return db


def _ids(db, model) -> set[str]:
    return set(db.scalars(select(model.id)).all())


def test_null_context_reads_only_public_templates(records):
    act_as(records, None)

    templates = records.scalars(select(ContractTemplate)).all()

    assert [t.id for t in templates] == ["t-public"]


def test_null_context_is_rejected_for_contracts(records):
    act_as(records, None)

    with pytest.raises(Unauthenticated):
        records.scalars(select(Contract)).all()
    with pytest.raises(Unauthenticated):
        records.get(Notification, "n-member")


def test_admin_sees_everything(records):
    act_as(records, ADMIN)
    assert len(_ids(records, Contract)) == 4
    assert len(_ids(records, ContractTemplate)) == 3


def test_company_member_sees_own_and_company_contracts(records):
    act_as(records, MEMBER_IN_ACME)
    assert _ids(records, Contract) == {"k-acme-draft", "k-acme-active"}

    act_as(records, MEMBER)
    assert _ids(records, Contract) == {"k-acme-draft", "k-acme-active"}


def test_outsider_sees_only_own_contracts(records):
    act_as(records, OUTSIDER)
    assert _ids(records, Contract) == {"k-outsider"}


def test_requested_company_without_membership_admits_nothing_from_it(records):
    act_as(records, OUTSIDER_IN_ACME)
    assert _ids(records, Contract) == {"k-outsider"}


def test_caller_filter_is_combined_with_access_predicate(records):
    act_as(records, MEMBER_IN_ACME)

    drafts = records.scalars(select(Contract).where(Contract.status == "DRAFT")).all()

    # k-globex is a DRAFT too, but not visible.
    assert {c.id for c in drafts} == {"k-acme-draft"}


def test_caller_or_cannot_widen_access(records):
    act_as(records, OUTSIDER)

    stmt = select(Contract).where((Contract.company_id == "c-globex") | (Contract.created_by_id == "u-other"))

    assert records.scalars(stmt).all() == []


def test_missing_and_invisible_records_look_the_same(records):
    act_as(records, OUTSIDER)
    assert records.get(Contract, "k-globex") is None
    assert records.get(Contract, "does-not-exist") is None


def test_aggregates_are_scoped(records):
    act_as(records, MEMBER)
    assert records.scalar(select(func.count()).select_from(Contract)) == 2


def test_visibility_includes_own_and_current_company_templates(records):
    act_as(records, MEMBER_IN_ACME)
    assert _ids(records, ContractTemplate) == {"t-public", "t-acme"}

    act_as(records, MEMBER)
    assert _ids(records, ContractTemplate) == {"t-public"}

    act_as(records, TenantContext(user_id="u-other", global_role=GlobalRole.USER))
    assert _ids(records, ContractTemplate) == {"t-public", "t-private"}


def test_company_templates_need_membership_not_just_the_header(records):
    act_as(records, OUTSIDER_IN_ACME)
    assert _ids(records, ContractTemplate) == {"t-public"}


def test_scoped_reads_go_through_predicate_injection(records, caplog):
    act_as(records, OUTSIDER)

    with caplog.at_level(logging.DEBUG, logger="contract_authz.security.predicates"):
        records.scalars(select(Contract).where(Contract.status == "DRAFT")).all()

    assert "Injected access predicate category=company user=u-outsider" in caplog.text


def test_user_private_records(records):
    act_as(records, MEMBER)
    assert _ids(records, Notification) == {"n-member"}


def test_ownership_scoped_records_use_configured_column(records):
    act_as(records, MEMBER)
    assert _ids(records, ContractAttachment) == {"a-member"}


def test_joined_types_are_both_scoped(records):
    act_as(records, OUTSIDER)

    stmt = select(ContractAttachment.id).join(Contract, ContractAttachment.contract_id == Contract.id)

    assert records.scalars(stmt).all() == []


def test_relationship_loads_keep_the_parent_criteria(records):
    act_as(records, MEMBER)

    contract = records.scalars(select(Contract).where(Contract.id == "k-acme-draft")).one()

    assert [a.id for a in contract.attachments] == ["a-member"]


def test_task_local_context_is_used_when_session_has_none(records):
    act_as(records, None)
    records.info.pop("tenant_context")

    with tenant_scope(OUTSIDER):
        assert _ids(records, Contract) == {"k-outsider"}

    with pytest.raises(Unauthenticated):
        records.scalars(select(Contract)).all()


def test_session_context_wins_over_task_local_context(records):
    act_as(records, OUTSIDER)

    with tenant_scope(ADMIN):
        assert _ids(records, Contract) == {"k-outsider"}
