from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class RecordCategory(str, Enum):
    """How a tenant-scoped record type is isolated."""

    OWNERSHIP = "ownership"
    COMPANY = "company"
    VISIBILITY = "visibility"
    USER_PRIVATE = "user_private"


class FieldNames(BaseModel):
    created_by: str = "created_by_id"
    company: str = "company_id"
    public_flag: str = "is_public"
    owner: str = "owner_user_id"


class RecordRuleModel(BaseModel):
    category: RecordCategory
    columns: FieldNames = Field(default_factory=FieldNames)


class IsolationConfigModel(BaseModel):
    records: dict[str, RecordRuleModel] = Field(default_factory=dict)


@dataclass(frozen=True)
class RecordRule:
    """
    Fully-resolved isolation rule for one record type (defaults applied).
    """

    category: RecordCategory
    created_by: str = "created_by_id"
    company: str = "company_id"
    public_flag: str = "is_public"
    owner: str = "owner_user_id"

    @classmethod
    def for_category(cls, category: RecordCategory | str) -> RecordRule:
        return cls(category=RecordCategory(category))

    @property
    def publicly_readable(self) -> bool:
        return self.category is RecordCategory.VISIBILITY


class IsolationConfig:
    """
    Runtime helper around the validated config: table name -> rule.
    """

    def __init__(self, model: IsolationConfigModel):
        self.model = model
        self._rules: dict[str, RecordRule] = {
            table: RecordRule(
                category=rule.category,
                created_by=rule.columns.created_by,
                company=rule.columns.company,
                public_flag=rule.columns.public_flag,
                owner=rule.columns.owner,
            )
            for table, rule in model.records.items()
        }

    @property
    def tables(self) -> frozenset[str]:
        return frozenset(self._rules)

    def rule_for(self, table_name: str) -> RecordRule | None:
        return self._rules.get(table_name)


def load_isolation_config(path: Path) -> IsolationConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "isolation" not in raw:
        raise ValueError(f"Missing top-level 'isolation' key in config: {path}")

    model = IsolationConfigModel.model_validate(raw["isolation"] or {})
    return IsolationConfig(model)


@lru_cache
def get_isolation_config() -> IsolationConfig:
    # Local import keeps this module usable without app settings (e.g. in tests).
    from contract_authz.settings import get_settings

    return load_isolation_config(get_settings().resolved_isolation_config_path())
