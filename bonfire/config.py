"""
Runtime settings for BonFire.

Values come from environment variables (a local ``.env`` file is loaded
first).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def _normalize_database_url(url: Optional[str]) -> Optional[str]:
    # Hosted Postgres providers still hand out postgres:// URLs
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass
class Settings:
    """Resolved configuration"""
    store_backend: str = "memory"
    database_url: Optional[str] = None
    integration_timeout: float = 10.0
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Optional[str] = None
    cors_origins: List[str] = field(
        default_factory=lambda: _DEFAULT_CORS_ORIGINS.split(",")
    )


def get_settings() -> Settings:
    """
    Build Settings from the current environment.

    Raises:
        ValueError: If STORE_BACKEND is unknown, or is "sql" without DATABASE_URL
    """
    store_backend = os.getenv("STORE_BACKEND", "memory").lower()
    if store_backend not in ("memory", "sql"):
        raise ValueError(
            f"Unknown STORE_BACKEND '{store_backend}'. Valid values: memory, sql"
        )

    database_url = _normalize_database_url(os.getenv("DATABASE_URL"))
    if store_backend == "sql" and not database_url:
        raise ValueError(
            "DATABASE_URL environment variable not set. "
            "It is required when STORE_BACKEND=sql."
        )

    origins = os.getenv("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)

    return Settings(
        store_backend=store_backend,
        database_url=database_url,
        integration_timeout=float(os.getenv("INTEGRATION_TIMEOUT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        json_logs=os.getenv("JSON_LOGS", "false").lower() == "true",
        log_file=os.getenv("LOG_FILE") or None,
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
