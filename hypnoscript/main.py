"""FastAPI application wiring for the script service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import router as api_router
from .config import DEFAULT_JWT_SECRET, Settings, get_settings
from .domain.script_service import ScriptService
from .domain.service import AccountService
from .generation import get_generator
from .security.passwords import PasswordHasher
from .security.throttle import build_throttle
from .security.tokens import TokenIssuer
from .store import build_record_store

logger = logging.getLogger(__name__)

settings = get_settings()


def configure_state(app: FastAPI, settings: Settings) -> None:
    """Build the store, services, and throttle once and attach them to the app."""
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; using the development default")
    store = build_record_store(settings.storage_backend, settings.sqlite_path)
    tokens = TokenIssuer(
        settings.jwt_secret,
        ttl=timedelta(seconds=settings.jwt_ttl_seconds),
        issuer=settings.jwt_issuer,
    )
    app.state.account_service = AccountService(store, PasswordHasher(settings.bcrypt_rounds), tokens)
    app.state.script_service = ScriptService(store, get_generator(settings.ai_provider))
    app.state.throttle = build_throttle(
        backend=settings.rate_limit_backend,
        max_attempts=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        redis_url=settings.redis_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources for the app lifecycle."""
    logging.basicConfig(level=settings.log_level)
    configure_state(app, settings)
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(api_router)


# Prometheus metrics endpoint for Prometheus scrapes
try:
    from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
except ImportError:  # pragma: no cover - metrics are optional in dev
    pass
