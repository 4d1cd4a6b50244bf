from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_JWT_SECRET = "dev-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once at startup and injected into components."""

    app_name: str = os.getenv("APP_NAME", "hypnoscript")
    version: str = "0.1.0"
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "4000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    jwt_secret: str = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    jwt_issuer: str = os.getenv("JWT_ISSUER", "hypnoscript.auth")
    jwt_ttl_seconds: int = int(os.getenv("JWT_TTL_SECONDS", str(7 * 24 * 3600)))
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    sqlite_path: str = os.getenv("SQLITE_PATH", "./data/hypnoscript.db")
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    ai_provider: str = os.getenv("AI_PROVIDER", "stub").lower()
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    rate_limit_requests: int = int(os.getenv("RATE_LIMIT_REQUESTS", "20"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
    rate_limit_backend: str = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()
    redis_url: str = os.getenv("REDIS_URL", "")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
