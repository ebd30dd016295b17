from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlsplit

DEFAULT_OPERATION_TIMEOUT = 5.0
DEFAULT_CONNECT_TIMEOUT = 3.0


def normalize_database_url(database_url: str) -> str:
    """Normalize DATABASE_URL to an async SQLAlchemy URL.

    Supports:
    - Bare: host:port/dbname or user:pass@host:port/dbname
    - postgresql://
    - postgres://
    - postgresql+<driver>:// (e.g. psycopg2)
    - postgresql+asyncpg://

    Any other scheme (e.g. sqlite+aiosqlite://) is returned unchanged.
    """
    if "://" not in database_url:
        candidate = f"postgresql+asyncpg://{database_url}"
        parsed = urlsplit(candidate)
        if not parsed.netloc or parsed.path in {"", "/"}:
            raise ValueError("Unsupported DATABASE_URL format. Expected host:port/dbname or user:pass@host:port/dbname")
        database_url = candidate

    if database_url.startswith("postgresql+asyncpg://"):
        return database_url
    if database_url.startswith("postgresql+"):
        # Handle postgresql+psycopg2://, postgresql+psycopg://, etc.
        return "postgresql+asyncpg://" + database_url.split("://", 1)[1]
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)

    return database_url


def _pg_ssl_connect_args(environ: Mapping[str, str]) -> dict[str, str]:
    """Build asyncpg SSL kwargs from PGSSLMODE.

    asyncpg reads PGSSLROOTCERT, PGSSLCERT and PGSSLKEY from the environment on
    its own; only the mode has to be passed explicitly. Returns an empty dict when unset.
    """
    sslmode = environ.get("PGSSLMODE")
    return {"ssl": sslmode} if sslmode else {}


def _float_from_env(environ: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = environ.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    return value if value > 0 else None


@dataclass(frozen=True)
class PostgresConfig:
    """Connection configuration.

    `database_url` should come from environment (e.g. DATABASE_URL).
    Do not log it.

    `operation_timeout` is the default per-operation timeout in seconds
    (None disables it).
    """

    database_url: str
    operation_timeout: float | None = DEFAULT_OPERATION_TIMEOUT
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT
    ssl_args: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PostgresConfig":
        environ = os.environ if environ is None else environ
        database_url = environ.get("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL environment variable is required")

        return cls(
            database_url=normalize_database_url(database_url),
            operation_timeout=_float_from_env(environ, "POST_STORE_TIMEOUT", DEFAULT_OPERATION_TIMEOUT),
            connect_timeout=_float_from_env(environ, "DB_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
            ssl_args=_pg_ssl_connect_args(environ),
        )

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    def engine_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for create_async_engine."""
        kwargs: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
        if self.is_postgres:
            connect_args: dict[str, Any] = dict(self.ssl_args)
            if self.connect_timeout is not None:
                connect_args["timeout"] = self.connect_timeout
            kwargs["connect_args"] = connect_args
        return kwargs
