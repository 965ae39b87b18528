"""Tests for building the per-request tenant context from an identity."""
from __future__ import annotations

import logging

from contract_authz.policy import CompanyRole, Department, DepartmentRole, GlobalRole
from contract_authz.security.tenant import Identity, establish_tenant_context, resolve_company_role


class FakeDirectory:
    def __init__(self, owners=None, members=None):
        self.owners = owners or {}
        self.members = members or {}

    def company_owner_id(self, company_id):
        return self.owners.get(company_id)

    def member_role(self, company_id, user_id):
        return self.members.get((company_id, user_id))

    def accessible_company_ids(self, user_id):
        return frozenset()


DIRECTORY = FakeDirectory(
    owners={"c1": "owner"},
    members={("c1", "member"): "MANAGER", ("c1", "owner"): "MEMBER", ("c1", "odd"): "CHIEF"},
)


def test_no_identity_gives_no_context():
    assert establish_tenant_context(None, DIRECTORY) is None
    assert establish_tenant_context(Identity(user_id="", global_role="USER"), DIRECTORY) is None


def test_ownership_wins_over_membership():
    assert resolve_company_role(DIRECTORY, "c1", "owner") is CompanyRole.OWNER
    assert resolve_company_role(DIRECTORY, "c1", "member") is CompanyRole.MANAGER
    assert resolve_company_role(DIRECTORY, "c1", "stranger") is None


def test_context_fields_are_parsed():
    identity = Identity(user_id="member", global_role="editor", department="legal", department_role="LEGAL_COUNSEL")
    ctx = establish_tenant_context(identity, DIRECTORY, company_id="c1")

    assert ctx.user_id == "member"
    assert ctx.global_role is GlobalRole.EDITOR
    assert ctx.is_admin is False
    assert ctx.company_id == "c1"
    assert ctx.company_role is CompanyRole.MANAGER
    assert ctx.department is Department.LEGAL
    assert ctx.department_role is DepartmentRole.LEGAL_COUNSEL


def test_requested_company_wins_over_hint():
    identity = Identity(user_id="member", global_role="USER", company_id_hint="c-other")
    assert establish_tenant_context(identity, DIRECTORY, company_id="c1").company_id == "c1"
    assert establish_tenant_context(identity, DIRECTORY).company_id == "c-other"


def test_no_company_requested_means_no_company_scope():
    ctx = establish_tenant_context(Identity(user_id="member", global_role="USER"), DIRECTORY)
    assert ctx.company_id is None
    assert ctx.company_role is None


def test_company_without_membership_keeps_company_but_no_role(caplog):
    with caplog.at_level(logging.INFO, logger="contract_authz"):
        ctx = establish_tenant_context(Identity(user_id="stranger", global_role="USER"), DIRECTORY, company_id="c1")

    assert ctx.company_id == "c1"
    assert ctx.company_role is None
    assert "no role in requested company" in caplog.text


def test_malformed_roles_become_none():
    ctx = establish_tenant_context(
        Identity(user_id="odd", global_role="GOD", department="MARKETING", department_role="GURU"),
        DIRECTORY,
        company_id="c1",
    )
    assert ctx.global_role is None
    assert ctx.company_role is None
    assert ctx.department is None
    assert ctx.department_role is None


def test_admin_flag_derives_from_global_role():
    ctx = establish_tenant_context(Identity(user_id="root", global_role="ADMIN"), DIRECTORY)
    assert ctx.is_admin is True
