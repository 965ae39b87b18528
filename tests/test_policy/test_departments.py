"""Tests for the contract-type department evaluator."""
from __future__ import annotations

import pytest

from contract_authz.policy import (
    CONTRACT_TYPE_DEPARTMENTS,
    ContractType,
    Department,
    DepartmentRole,
    accessible_subtypes,
    allowed_departments,
    can_access_subtype,
    can_create_subtype,
    can_oversee_subtype,
    creatable_subtypes,
)


def test_legal_counsel_scenarios():
    assert can_access_subtype(ContractType.NDA, Department.LEGAL, DepartmentRole.LEGAL_COUNSEL) is True
    assert can_access_subtype(ContractType.SOFTWARE_LICENSE, Department.LEGAL, DepartmentRole.LEGAL_COUNSEL) is True
    assert can_access_subtype(ContractType.SALES_AGREEMENT, Department.LEGAL, DepartmentRole.LEGAL_COUNSEL) is False


def test_cross_department_oversight_comes_from_role_permissions():
    # Counsel carries contract:view:hr, so it passes for HR paper.
    assert can_access_subtype("EMPLOYMENT", "HR", "LEGAL_COUNSEL") is True
    # An HR assistant carries no Sales grant.
    assert can_access_subtype("SALES_AGREEMENT", "SALES", "HR_ASSISTANT") is False


@pytest.mark.parametrize("subtype", list(CONTRACT_TYPE_DEPARTMENTS))
@pytest.mark.parametrize("department", list(Department))
def test_department_outside_allowed_set_is_never_eligible(subtype, department):
    if department in allowed_departments(subtype):
        return
    for role in [None, *DepartmentRole]:
        assert can_access_subtype(subtype, department, role) is False
        assert can_create_subtype(subtype, department, role) is False


def test_no_department_role_means_no_type_scoped_access():
    assert can_access_subtype(ContractType.NDA, Department.HR, None) is False


def test_malformed_department_or_role_fails_closed():
    assert can_access_subtype(ContractType.NDA, "HUMAN_RESOURCES", DepartmentRole.HR_MANAGER) is False
    assert can_access_subtype(ContractType.NDA, Department.HR, "HR_BOSS") is False


def test_unknown_subtype_defaults_to_general():
    assert allowed_departments("TIMESHARE") == (Department.GENERAL,)
    assert allowed_departments(ContractType.OTHER) == (Department.GENERAL,)


def test_subtype_lookup_is_case_insensitive():
    assert allowed_departments("nda") == (Department.HR, Department.LEGAL, Department.SALES)


def test_every_contract_type_maps_to_at_least_one_department():
    for contract_type in ContractType:
        assert allowed_departments(contract_type)


def test_assistants_can_view_but_not_create():
    assert can_access_subtype(ContractType.RFP, Department.PROCUREMENT, DepartmentRole.PROCUREMENT_ASSISTANT) is True
    assert can_create_subtype(ContractType.RFP, Department.PROCUREMENT, DepartmentRole.PROCUREMENT_ASSISTANT) is False
    assert can_create_subtype(ContractType.RFP, Department.PROCUREMENT, DepartmentRole.PROCUREMENT_SPECIALIST) is True


def test_legal_manager_creates_any_legal_listed_type():
    assert can_create_subtype(ContractType.LEASE, Department.LEGAL, DepartmentRole.LEGAL_MANAGER) is True
    assert can_create_subtype(ContractType.RFP, Department.LEGAL, DepartmentRole.LEGAL_MANAGER) is False


def test_accessible_and_creatable_subtypes():
    legal_types = {"NDA", "SERVICE", "EMPLOYMENT", "PARTNERSHIP", "SOFTWARE_LICENSE", "LEASE"}

    assert set(accessible_subtypes(Department.LEGAL, DepartmentRole.LEGAL_COUNSEL)) == legal_types
    assert set(creatable_subtypes(Department.LEGAL, DepartmentRole.LEGAL_COUNSEL)) == legal_types
    assert creatable_subtypes(Department.LEGAL, DepartmentRole.LEGAL_ASSISTANT) == ()
    assert accessible_subtypes(None, None) == ()


def test_oversight_needs_the_department_specific_grant():
    assert can_oversee_subtype(ContractType.EMPLOYMENT, Department.HR, DepartmentRole.LEGAL_COUNSEL) is True
    assert can_oversee_subtype(ContractType.LEASE, Department.FINANCE, DepartmentRole.LEGAL_COUNSEL) is True
    # contract:view:all is a home-department grant only.
    assert can_oversee_subtype(ContractType.SALES_AGREEMENT, Department.SALES, DepartmentRole.LEGAL_MANAGER) is False
    # Unlisted departments stay closed whatever the grant.
    assert can_oversee_subtype(ContractType.RFP, Department.HR, DepartmentRole.LEGAL_COUNSEL) is False
    assert can_oversee_subtype(ContractType.EMPLOYMENT, Department.HR, None) is False
