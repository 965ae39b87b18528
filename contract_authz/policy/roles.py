"""
Closed role and permission vocabularies.

Every identifier the engine understands is a member of one of the enums
below. Values coming from outside (database columns, token claims) are
converted with ``parse_role`` which maps anything unknown to ``None`` so the
rest of the engine fails closed instead of raising on a request path.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import TypeVar

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """Namespaced ``<domain>:<action>[:<scope>]`` permission identifiers."""

    # User management
    USER_VIEW = "user:view"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"
    USER_ROLES_MANAGE = "user:roles:manage"

    # Company management
    COMPANY_VIEW = "company:view"
    COMPANY_CREATE = "company:create"
    COMPANY_UPDATE = "company:update"
    COMPANY_DELETE = "company:delete"
    COMPANY_SETTINGS_MANAGE = "company:settings:manage"
    COMPANY_MEMBERS_MANAGE = "company:members:manage"
    COMPANY_INVITES_MANAGE = "company:invites:manage"

    # Contract management
    CONTRACT_VIEW = "contract:view"
    CONTRACT_CREATE = "contract:create"
    CONTRACT_UPDATE = "contract:update"
    CONTRACT_DELETE = "contract:delete"
    CONTRACT_APPROVE = "contract:approve"
    CONTRACT_SIGN = "contract:sign"
    CONTRACT_ARCHIVE = "contract:archive"
    CONTRACT_VIEW_ALL = "contract:view:all"

    # Department-scoped contract access
    CONTRACT_VIEW_HR = "contract:view:hr"
    CONTRACT_VIEW_FINANCE = "contract:view:finance"
    CONTRACT_VIEW_LEGAL = "contract:view:legal"
    CONTRACT_VIEW_SALES = "contract:view:sales"
    CONTRACT_VIEW_IT = "contract:view:it"
    CONTRACT_VIEW_PROCUREMENT = "contract:view:procurement"
    CONTRACT_VIEW_GENERAL = "contract:view:general"
    CONTRACT_CREATE_HR = "contract:create:hr"
    CONTRACT_CREATE_FINANCE = "contract:create:finance"
    CONTRACT_CREATE_LEGAL = "contract:create:legal"
    CONTRACT_CREATE_SALES = "contract:create:sales"
    CONTRACT_CREATE_IT = "contract:create:it"
    CONTRACT_CREATE_PROCUREMENT = "contract:create:procurement"
    CONTRACT_CREATE_GENERAL = "contract:create:general"

    # Template management
    TEMPLATE_VIEW = "template:view"
    TEMPLATE_CREATE = "template:create"
    TEMPLATE_UPDATE = "template:update"
    TEMPLATE_DELETE = "template:delete"
    TEMPLATE_PUBLISH = "template:publish"

    # Attachments
    ATTACHMENT_VIEW = "attachment:view"
    ATTACHMENT_UPLOAD = "attachment:upload"
    ATTACHMENT_DELETE = "attachment:delete"

    # Notifications
    NOTIFICATION_VIEW = "notification:view"
    NOTIFICATION_MANAGE = "notification:manage"
    NOTIFICATION_SEND = "notification:send"

    # Reports and analytics
    REPORT_VIEW = "report:view"
    REPORT_GENERATE = "report:generate"
    ANALYTICS_VIEW = "analytics:view"

    # System administration
    SYSTEM_ADMIN = "system:admin"
    SYSTEM_SETTINGS = "system:settings"
    SYSTEM_LOGS = "system:logs"


class GlobalRole(str, Enum):
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    APPROVER = "APPROVER"
    VIEWER = "VIEWER"
    USER = "USER"


class CompanyRole(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"


class Department(str, Enum):
    HR = "HR"
    FINANCE = "FINANCE"
    LEGAL = "LEGAL"
    SALES = "SALES"
    IT = "IT"
    PROCUREMENT = "PROCUREMENT"
    GENERAL = "GENERAL"


class DepartmentRole(str, Enum):
    """Functional roles, grouped by department in manager/specialist/assistant tiers."""

    HR_MANAGER = "HR_MANAGER"
    HR_SPECIALIST = "HR_SPECIALIST"
    HR_ASSISTANT = "HR_ASSISTANT"

    FINANCE_MANAGER = "FINANCE_MANAGER"
    FINANCE_SPECIALIST = "FINANCE_SPECIALIST"
    FINANCE_ASSISTANT = "FINANCE_ASSISTANT"

    LEGAL_MANAGER = "LEGAL_MANAGER"
    LEGAL_COUNSEL = "LEGAL_COUNSEL"
    LEGAL_ASSISTANT = "LEGAL_ASSISTANT"

    SALES_MANAGER = "SALES_MANAGER"
    SALES_SPECIALIST = "SALES_SPECIALIST"
    SALES_ASSISTANT = "SALES_ASSISTANT"

    IT_MANAGER = "IT_MANAGER"
    IT_SPECIALIST = "IT_SPECIALIST"
    IT_ASSISTANT = "IT_ASSISTANT"

    PROCUREMENT_MANAGER = "PROCUREMENT_MANAGER"
    PROCUREMENT_SPECIALIST = "PROCUREMENT_SPECIALIST"
    PROCUREMENT_ASSISTANT = "PROCUREMENT_ASSISTANT"


E = TypeVar("E", bound=Enum)


def parse_role(enum_cls: type[E], value: object) -> E | None:
    """
    Convert an external value into a member of ``enum_cls``.

    ``None`` and empty strings mean "no role". Anything else that is not a
    member value is a malformed role: it is logged and treated as ``None``.
    Matching is case-insensitive on the value.
    """

    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value

    raw = str(value.value if isinstance(value, Enum) else value).strip()
    if not raw:
        return None

    try:
        return enum_cls(raw.upper())
    except ValueError:
        logger.warning("Malformed %s value %r; treating as no role", enum_cls.__name__, raw)
        return None
