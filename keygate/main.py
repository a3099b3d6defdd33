"""Keygate FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import timedelta

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from keygate import __version__
from keygate.api.dependencies import resolve_identity
from keygate.api.middleware import ApiKeyMiddleware, IdentityResolver
from keygate.config import Settings, get_settings
from keygate.db import close_db, init_db
from keygate.errors import KeygateError
from keygate.logging import configure_logging
from keygate.services.cooldown import Cooldown
from keygate.services.email import EmailSender, create_email_sender
from keygate.services.gc.lifecycle import init_gc_scheduler, shutdown_gc_scheduler
from keygate.services.http import http_client_manager
from keygate.services.usage import UsageMeter

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("keygate.startup", version=__version__)
    await init_db()
    await http_client_manager.startup()
    await init_gc_scheduler(app.state.cooldown)

    yield

    logger.info("keygate.shutdown")
    await shutdown_gc_scheduler()
    await http_client_manager.shutdown()
    await close_db()


def build_cooldown(settings: Settings) -> Cooldown:
    """Cooldown for the verification email resend action."""
    return Cooldown(
        interval=timedelta(seconds=settings.cooldown.interval_seconds),
        sweep_margin=timedelta(seconds=settings.cooldown.sweep_margin_seconds),
        stripes=settings.cooldown.stripes,
    )


def create_app(
    *,
    resolver: IdentityResolver | None = None,
    usage_meter: UsageMeter | None = None,
    email_sender: EmailSender | None = None,
    cooldown: Cooldown | None = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.logging)

    app = FastAPI(
        title="Keygate",
        description="API key issuance, plan quotas and request authentication",
        version=__version__,
        lifespan=lifespan,
    )

    # Process-wide collaborators, chosen once at startup
    app.state.cooldown = cooldown if cooldown is not None else build_cooldown(settings)
    app.state.email_sender = (
        email_sender if email_sender is not None else create_email_sender(settings.email)
    )

    app.add_middleware(
        ApiKeyMiddleware,
        resolver=resolver if resolver is not None else resolve_identity,
        exempt_prefixes=settings.security.exempt_path_prefixes,
        usage_meter=usage_meter,
    )

    # Request ID middleware (outermost, so rejections carry it too)
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    @app.exception_handler(KeygateError)
    async def keygate_error_handler(request: Request, exc: KeygateError):
        """Handle Keygate errors with consistent format."""
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        """Log unexpected faults with context; never leak details outside debug."""
        request_id = getattr(request.state, "request_id", None)
        logger.exception(
            "request.unhandled_error",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        error = KeygateError(
            "An unexpected error occurred",
            details={"exception": repr(exc)} if get_settings().debug else None,
        )
        return JSONResponse(status_code=500, content=error.to_dict(request_id))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    from keygate.api.account import router as account_router
    from keygate.api.v1 import router as v1_router

    app.include_router(v1_router, prefix="/v1")
    app.include_router(account_router)

    return app


# Create default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "keygate.main:app",
        host=settings.server.host,
        port=settings.server.port,
    )
