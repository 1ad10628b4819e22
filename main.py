# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Chama API
=========
Back office for a savings and credit association: member registration and
PIN login, loan requests moving through treasurer, secretary and chairperson
sign-off, the chair queue of minutes/reports awaiting approval, polls,
welfare claims, transactions, notifications and signatures.

Loan workflow:
    Pending ─► TreasurerApproved ─► SecretaryApproved ─► ChairApproved
    any non-terminal state ─► Rejected

Storage is pluggable (memory, JSON files, SQL, GitHub repository) and chosen
with STORE_BACKEND.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chama.controllers import (
    auth_controller, export_controller, ledger_controller, loan_controller,
    member_controller, notification_controller, poll_controller,
    publication_controller, queue_controller, system_controller,
)
from chama.core.config import settings as default_settings
from chama.core.dependencies import Services
from chama.core.errors import ChamaError
from chama.core.logging import get_logger
from chama.middleware import MetricsMiddleware, RequestIDMiddleware
from chama.repositories import build_store
from chama.repositories.base import CollectionStore

logger = get_logger("chama")

ROUTERS = (
    system_controller, auth_controller, member_controller, loan_controller,
    queue_controller, poll_controller, publication_controller,
    ledger_controller, notification_controller, export_controller,
)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChamaError)
    async def chama_error_handler(request: Request, exc: ChamaError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method,
                         request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(store: Optional[CollectionStore] = None, settings=None) -> FastAPI:
    """Build the application. ``store`` overrides the backend chosen by settings."""
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        active = store if store is not None else build_store(cfg)
        active.open()
        application.state.settings = cfg
        application.state.store = active
        application.state.services = Services(active, cfg)
        logger.info("Chama API starting, store backend=%s", active.backend)
        yield
        active.close()
        logger.info("Shutting down, store closed")

    app = FastAPI(
        title="Chama API",
        description="Members, loans, chair approvals, polls and notifications for a chama.",
        version=cfg.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
