"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (token config, upload dir,
database engine). Middleware, CORS, static uploads, exception handlers
and routers are all registered here; each concern lives in its own module.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from rentdesk import __version__
from rentdesk.api import api_router
from rentdesk.api.errors import register_exception_handlers
from rentdesk.auth.jwt import get_token_service
from rentdesk.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown. The token service is built here once, so a broken JWT
    configuration fails the boot instead of the first login.
    """
    tokens = get_token_service()
    logger.info(
        "rentdesk.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        token_ttl_minutes=int(tokens.config.ttl.total_seconds() // 60),
        gate_rejects_disabled=settings.gate_rejects_disabled,
    )

    yield

    logger.info("rentdesk.shutdown")

    from rentdesk.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="rentdesk",
        description="Accounts, sessions and storefront catalogue",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from rentdesk.middleware.request_id import RequestIdMiddleware
    from rentdesk.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    # Uploaded avatars and product images are served read-only
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    return app


# Default app instance (used by uvicorn: rentdesk.main:app)
app = create_app()
