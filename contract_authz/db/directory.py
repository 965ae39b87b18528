from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from contract_authz.models.tenancy import Company, CompanyMember
from contract_authz.policy import CompanyRole
from contract_authz.security.tenant import resolve_company_role

logger = logging.getLogger(__name__)

# Marks statements issued by the directory itself; they only touch directory tables.
DIRECTORY_LOOKUP_OPTION = "contract_authz_directory_lookup"


def _lookup(stmt):
    return stmt.execution_options(**{DIRECTORY_LOOKUP_OPTION: True})


class SqlCompanyDirectory:
    """
    Company ownership/membership lookups backed by the ORM session.

    One instance lives for one session (one request), and every answer is
    memoized, so many queries in a request cost a single membership lookup.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._owners: dict[str, str | None] = {}
        self._member_roles: dict[tuple[str, str], str | None] = {}
        self._accessible: dict[str, frozenset[str]] = {}

    def company_owner_id(self, company_id: str) -> str | None:
        if company_id not in self._owners:
            with self._db.no_autoflush:
                self._owners[company_id] = self._db.execute(
                    _lookup(select(Company.created_by_id).where(Company.id == company_id))
                ).scalar_one_or_none()
        return self._owners[company_id]

    def member_role(self, company_id: str, user_id: str) -> str | None:
        key = (company_id, user_id)
        if key not in self._member_roles:
            with self._db.no_autoflush:
                self._member_roles[key] = self._db.execute(
                    _lookup(
                        select(CompanyMember.role).where(
                            CompanyMember.company_id == company_id,
                            CompanyMember.user_id == user_id,
                        )
                    )
                ).scalar_one_or_none()
        return self._member_roles[key]

    def company_role(self, company_id: str, user_id: str) -> CompanyRole | None:
        """Owner first, then the membership row."""
        return resolve_company_role(self, company_id, user_id)

    def accessible_company_ids(self, user_id: str) -> frozenset[str]:
        if user_id not in self._accessible:
            member_of = select(CompanyMember.company_id).where(CompanyMember.user_id == user_id)
            stmt = select(Company.id).where(or_(Company.created_by_id == user_id, Company.id.in_(member_of)))
            with self._db.no_autoflush:
                ids = frozenset(self._db.execute(_lookup(stmt)).scalars().all())
            logger.debug("Resolved %d accessible companies for user=%s", len(ids), user_id)
            self._accessible[user_id] = ids
        return self._accessible[user_id]

    def user_companies(self, user_id: str) -> list[dict[str, str]]:
        """Companies the user owns or belongs to, with the user's role in each."""

        owned = self._db.execute(
            select(Company.id, Company.name).where(Company.created_by_id == user_id).order_by(Company.name)
        ).all()
        member = self._db.execute(
            select(Company.id, Company.name, CompanyMember.role)
            .join(CompanyMember, CompanyMember.company_id == Company.id)
            .where(CompanyMember.user_id == user_id, Company.created_by_id != user_id)
            .order_by(Company.name)
        ).all()

        return [{"id": row.id, "name": row.name, "role": "OWNER"} for row in owned] + [
            {"id": row.id, "name": row.name, "role": row.role} for row in member
        ]


def directory_for(db: Session) -> SqlCompanyDirectory:
    """The session's directory, created on first use."""

    directory = db.info.get("company_directory")
    if directory is None:
        directory = SqlCompanyDirectory(db)
        db.info["company_directory"] = directory
    return directory
