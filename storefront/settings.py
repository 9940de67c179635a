"""Centralized configuration management for the storefront backend."""

from __future__ import annotations

import logging
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so every consumer importing :mod:`storefront.settings`
# observes the same values regardless of import order.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/storefront.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_REDIS_RETRY_BACKOFF_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_STORAGE_NAMESPACE = "holacupid"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
)


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides infrastructure URLs the class carries the storefront's business
    constants (bulk discount threshold, processing fee model, admin roles) so
    that tests and deployments can tune them without touching code.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force SQLite usage regardless of DATABASE_URL.",
    )
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        alias="REDIS_URL",
        description="Redis connection string backing per-client storage.",
    )
    redis_retry_backoff_seconds: float = Field(
        default=DEFAULT_REDIS_RETRY_BACKOFF_SECONDS,
        alias="REDIS_RETRY_BACKOFF_SECONDS",
        description="Cooldown duration applied after Redis connection failures.",
    )
    fallback_storage_max_clients: int = Field(
        default=1000,
        alias="FALLBACK_STORAGE_MAX_CLIENTS",
        ge=1,
        description="Client keyspaces kept in memory while Redis is unavailable.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    storage_namespace: str = Field(
        default=DEFAULT_STORAGE_NAMESPACE,
        alias="STORAGE_NAMESPACE",
        description="Prefix for cart and favorites keys in client storage.",
    )
    bulk_discount_threshold: int = Field(
        default=10,
        alias="BULK_DISCOUNT_THRESHOLD",
        ge=1,
        description="Cart size at which the flat per-item bulk rate applies.",
    )
    bulk_unit_price: Decimal = Field(
        default=Decimal("1.00"),
        alias="BULK_UNIT_PRICE",
        description="Flat per-item rate charged once the bulk threshold is met.",
    )
    processing_fee_rate: Decimal = Field(
        default=Decimal("0.029"),
        alias="PROCESSING_FEE_RATE",
        description="Percentage component of the payment processing fee.",
    )
    processing_fee_fixed: Decimal = Field(
        default=Decimal("0.30"),
        alias="PROCESSING_FEE_FIXED",
        description="Fixed component of the payment processing fee.",
    )
    admin_roles_raw: str = Field(
        default="admin,super_admin",
        alias="ADMIN_ROLES",
        description="Comma-separated user roles allowed into the back-office.",
    )
    supabase_url: str | None = Field(
        default=None,
        alias="SUPABASE_URL",
        description="Base URL of the hosted authentication provider.",
    )
    supabase_anon_key: str | None = Field(
        default=None,
        alias="SUPABASE_ANON_KEY",
        description="Public API key sent with every authentication request.",
    )
    auth_timeout_seconds: float = Field(
        default=10.0,
        alias="AUTH_TIMEOUT_SECONDS",
        description="HTTP timeout applied to authentication provider calls.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return list(DEFAULT_CORS_ORIGINS)

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def admin_role_set(self) -> frozenset[str]:
        """Return the admin roles as a normalised set."""

        return frozenset(
            role.strip().lower()
            for role in self.admin_roles_raw.split(",")
            if role.strip()
        )

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if self.redis_url == DEFAULT_REDIS_URL:
            warnings.append(
                "REDIS_URL is not set - client storage falls back to process memory "
                "when the local Redis is unreachable"
            )

        if not self.supabase_url or not self.supabase_anon_key:
            warnings.append(
                "SUPABASE_URL/SUPABASE_ANON_KEY are not set - sign-in and "
                "authenticated routes will be unavailable"
            )

        if not self.cors_allow_origins_raw:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


# Module-level singleton; the getter remains available for tests that prefer
# dependency injection.
settings = get_settings()

__all__ = [
    "AppSettings",
    "DEFAULT_CORS_ORIGINS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_RETRY_BACKOFF_SECONDS",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_STORAGE_NAMESPACE",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
    "settings",
]
