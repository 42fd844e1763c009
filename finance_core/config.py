"""Environment-driven settings for the finance dashboard."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

ENV_PREFIX = "FINANCE_DASHBOARD_"
DEFAULT_DATABASE_URL = "sqlite:///finance.db"

_TRUTHY = {"1", "true", "yes", "on"}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _flag(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "").strip().upper()
    return level if level in LOG_LEVELS else "INFO"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    env: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)
    check_owners: bool = True
    sql_echo: bool = False
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``FINANCE_DASHBOARD_*`` variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        origins = get("ALLOWED_ORIGINS") or ""
        return cls(
            database_url=get("DATABASE_URL") or env.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
            env=(get("ENV") or "prod").strip().lower(),
            allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            check_owners=_flag(get("CHECK_OWNERS"), True),
            sql_echo=_flag(get("SQL_ECHO"), False),
            log_level=_log_level(get("LOG_LEVEL")),
        )
