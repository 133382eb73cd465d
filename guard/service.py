"""
Guard Service Entrypoint

FastAPI application for the SecureGuard control API.
Builds the store and the system change applier once, attaches them to
app.state and mounts every router under /api/security.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from guard import config
from guard.api import firewall, logs, remote_access, services, settings, status
from guard.errors import GuardError
from guard.store import SecurityStore
from guard.system_changes import SystemChangeApplier, build_applier

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI):
    @app.exception_handler(GuardError)
    def guard_error_handler(request: Request, exc: GuardError):
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path} -> 400: {len(exc.errors())} validation error(s)")
        return JSONResponse(status_code=400, content={"message": "Invalid request data"})

    @app.exception_handler(Exception)
    def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(
    store: Optional[SecurityStore] = None,
    applier: Optional[SystemChangeApplier] = None,
) -> FastAPI:
    app = FastAPI(title="SecureGuard Control Service")

    app.state.store = store if store is not None else SecurityStore()
    app.state.applier = applier if applier is not None else build_applier(config.APPLIER, config.APPLY_SCRIPT)

    app.include_router(settings.router, prefix=config.API_PREFIX)
    app.include_router(remote_access.router, prefix=config.API_PREFIX)
    app.include_router(firewall.router, prefix=config.API_PREFIX)
    app.include_router(services.router, prefix=config.API_PREFIX)
    app.include_router(logs.router, prefix=config.API_PREFIX)
    app.include_router(status.router, prefix=config.API_PREFIX)

    _register_error_handlers(app)

    @app.get("/")
    def root():
        return {
            "service": "guard",
            "message": "SecureGuard control service running",
            "api_prefix": config.API_PREFIX,
        }

    logger.info(f"Guard app ready (applier={type(app.state.applier).__name__})")
    return app


app = create_app()
