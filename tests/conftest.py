"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. Sessions start under an
admin context so tests can arrange rows for any tenant; switch to the context
under test with ``act_as``.
"""
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from contract_authz.db import filters as _filters  # noqa: F401  (register tenant isolation hooks)
from contract_authz.policy import GlobalRole
from contract_authz.security.context import TenantContext


TEST_DB_URL = "sqlite:///:memory:"

ADMIN = TenantContext(user_id="u-admin", global_role=GlobalRole.ADMIN)


def act_as(session: Session, context: TenantContext | None) -> None:
    """Pin ``context`` to the session; forget loaded objects and memoized membership lookups."""
    session.expunge_all()
    session.info["tenant_context"] = context
    session.info.pop("company_directory", None)


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from contract_authz.db.base import Base
    from contract_authz.models import contracts, tenancy  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession(info={"tenant_context": ADMIN})
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def tenants(db_session):
    """
    Two companies and their people.

    - c-acme: owned by u-owner, u-member is a MEMBER
    - c-globex: owned by u-other
    - u-outsider belongs to nothing
    """
    from contract_authz.models.tenancy import Company, CompanyMember, User

    db_session.add_all(
        [
            User(id="u-admin", email="admin@example.com", global_role="ADMIN"),
            User(id="u-owner", email="owner@example.com", global_role="USER"),
            User(id="u-member", email="member@example.com", global_role="USER"),
            User(id="u-other", email="other@example.com", global_role="USER"),
            User(id="u-outsider", email="outsider@example.com", global_role="VIEWER"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            Company(id="c-acme", name="Acme", created_by_id="u-owner"),
            Company(id="c-globex", name="Globex", created_by_id="u-other"),
        ]
    )
    db_session.flush()
    db_session.add(CompanyMember(company_id="c-acme", user_id="u-member", role="MEMBER"))
    db_session.commit()
    return db_session
