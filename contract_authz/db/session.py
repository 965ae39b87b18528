from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from contract_authz.db import filters as _filters  # noqa: F401  (register tenant isolation hooks)
from contract_authz.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.resolved_db_url(),
    connect_args={"check_same_thread": False} if _settings.resolved_db_url().startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Main DB dependency.

    The request's tenant context (possibly None) is pinned to the session, so
    `db.scalars(select(Contract))` is scoped by the hooks in db/filters.py
    without the handler passing anything along. The key is always set: a
    session opened for an unauthenticated request must not fall back to any
    other context.
    """

    db = SessionLocal()
    try:
        db.info["tenant_context"] = getattr(getattr(request, "state", None), "tenant_context", None)
        yield db
    finally:
        db.close()
