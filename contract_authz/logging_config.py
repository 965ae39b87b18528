from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for this package's loggers.

    Notes:
    - Uvicorn already configures handlers; this function only sets levels.
    - Set `APP_LOG_LEVEL=DEBUG` to see every injected access predicate.
    """

    normalized = level.upper()
    logging.getLogger("contract_authz").setLevel(normalized)
    logging.getLogger("contract_authz").propagate = True
