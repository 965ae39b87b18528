from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from contract_authz.db import filters as _filters  # noqa: F401  (register tenant isolation hooks)
from contract_authz.db.init_db import init_db
from contract_authz.identity import SessionTokenConfig, SessionTokenValidator
from contract_authz.logging_config import configure_app_logging
from contract_authz.routers import contracts, me, templates
from contract_authz.security.config import get_isolation_config
from contract_authz.security.dependencies import establish_request_context
from contract_authz.security.errors import AuthorizationError
from contract_authz.settings import get_settings

logger = logging.getLogger(__name__)


async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc), "code": exc.code})


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        # Fail at startup, not on the first query, if the isolation config is broken.
        isolation = get_isolation_config()
        logger.info(
            "Loaded isolation config: %s (%d record types)",
            settings.resolved_isolation_config_path(),
            len(isolation.tables),
        )

        if settings.token_secret:
            app.state.token_validator = SessionTokenValidator(SessionTokenConfig.from_settings(settings))
        else:
            app.state.token_validator = None
            logger.warning("APP_TOKEN_SECRET not set; all requests are anonymous")

        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield
        # Shutdown (nothing to clean up)

    # Global dependency: every request gets a tenant context (possibly null) before its handler runs.
    app = FastAPI(dependencies=[Depends(establish_request_context)], lifespan=lifespan)
    app.add_exception_handler(AuthorizationError, authorization_error_handler)

    app.include_router(me.router)
    app.include_router(contracts.router)
    app.include_router(templates.router)

    return app


app = create_app()
