from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from contract_authz.db.base import Base
from contract_authz.db.session import SessionLocal, engine
from contract_authz.models.contracts import Contract, ContractTemplate, Notification
from contract_authz.models.tenancy import Company, CompanyMember, User
from contract_authz.policy import GlobalRole
from contract_authz.security.context import TenantContext

# Seed rows belong to many tenants; only an admin context may write them.
SEED_CONTEXT = TenantContext(user_id="system", global_role=GlobalRole.ADMIN)


def init_db() -> None:
    """
    Create tables + seed demo data.

    Small and deterministic so the isolation rules can be tried without
    additional setup.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal(info={"tenant_context": SEED_CONTEXT}) as db:
        if _has_seed_data(db):
            return
        _seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(User.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    # Users
    alice = User(id="u-alice", email="alice.admin@example.com", name="Alice Admin", global_role="ADMIN")
    oscar = User(
        id="u-oscar",
        email="oscar.owner@example.com",
        name="Oscar Owner",
        global_role="EDITOR",
        department="LEGAL",
        department_role="LEGAL_MANAGER",
    )
    hana = User(
        id="u-hana",
        email="hana.hr@example.com",
        name="Hana HR",
        global_role="USER",
        department="HR",
        department_role="HR_SPECIALIST",
    )
    sam = User(
        id="u-sam",
        email="sam.sales@example.com",
        name="Sam Sales",
        global_role="USER",
        department="SALES",
        department_role="SALES_MANAGER",
    )
    vera = User(id="u-vera", email="vera.viewer@example.com", name="Vera Viewer", global_role="VIEWER")
    db.add_all([alice, oscar, hana, sam, vera])
    db.flush()

    # Companies
    acme = Company(id="c-acme", name="Acme Corp", created_by_id=oscar.id)
    globex = Company(id="c-globex", name="Globex", created_by_id=sam.id)
    db.add_all([acme, globex])
    db.flush()

    db.add_all(
        [
            CompanyMember(company_id=acme.id, user_id=hana.id, role="MANAGER"),
            CompanyMember(company_id=acme.id, user_id=vera.id, role="MEMBER"),
        ]
    )

    # Contracts
    db.add_all(
        [
            Contract(
                title="Acme employee NDA",
                contract_type="NDA",
                department="HR",
                status="ACTIVE",
                company_id=acme.id,
                created_by_id=hana.id,
            ),
            Contract(
                title="Acme office lease",
                contract_type="LEASE",
                department="LEGAL",
                status="DRAFT",
                value=Decimal("48000.00"),
                company_id=acme.id,
                created_by_id=oscar.id,
            ),
            Contract(
                title="Globex distribution deal",
                contract_type="SALES_AGREEMENT",
                department="SALES",
                status="ACTIVE",
                value=Decimal("125000.00"),
                company_id=globex.id,
                created_by_id=sam.id,
            ),
        ]
    )

    # Templates (one public, one company-internal)
    db.add_all(
        [
            ContractTemplate(
                name="Mutual NDA",
                contract_type="NDA",
                body="Standard mutual non-disclosure agreement.",
                is_public=True,
                created_by_id=oscar.id,
            ),
            ContractTemplate(
                name="Acme lease addendum",
                contract_type="LEASE",
                is_public=False,
                company_id=acme.id,
                created_by_id=oscar.id,
            ),
        ]
    )

    db.add(Notification(user_id=hana.id, message="Acme employee NDA is awaiting signature."))

    db.commit()
