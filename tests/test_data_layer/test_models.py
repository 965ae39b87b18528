"""Tests for model defaults."""
from __future__ import annotations

from datetime import timedelta, timezone

from contract_authz.db.base import utcnow
from contract_authz.models.contracts import Contract


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is timezone.utc
    assert now.utcoffset() == timedelta(0)


def test_created_at_is_stamped_on_flush(tenants):
    contract = Contract(id="k-new", title="New", contract_type="NDA", created_by_id="u-owner")
    tenants.add(contract)
    tenants.flush()

    assert contract.created_at is not None
    assert contract.created_at.tzinfo is timezone.utc
