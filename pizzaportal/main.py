"""
PizzaPortal — application entry point.

Builds the FastAPI app: store, menu snapshot and gateways are created in
the lifespan and handed to request handlers through `app.state`.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from pizzaportal.api.api import api_router
from pizzaportal.api.endpoints.tokens import limiter
from pizzaportal.core.config import settings
from pizzaportal.core.exceptions import register_exception_handlers
from pizzaportal.services.gateway import MailgunNotifier, StripePayments
from pizzaportal.services.menu import load_menu
from pizzaportal.store.factory import build_store

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    await store.init()

    # The menu is read once and stays immutable for the life of the process
    app.state.store = store
    app.state.menu = await load_menu(store, settings.DEFAULT_MENU)
    app.state.payments = StripePayments(settings)
    app.state.notifier = MailgunNotifier(settings)

    logger.info(
        "🍕 %s v%s started (%s, %s store)",
        settings.PROJECT_NAME,
        settings.VERSION,
        settings.ENV_NAME,
        settings.STORE_BACKEND,
    )
    yield
    await store.close()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Pizza ordering API: accounts, menu, carts and orders",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # Login rate limiting
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Domain, validation and routing errors as JSON
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "pizzaportal.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        ssl_keyfile=settings.HTTPS_KEY_FILE,
        ssl_certfile=settings.HTTPS_CERT_FILE,
        log_level=settings.LOG_LEVEL.lower(),
    )
