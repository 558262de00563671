from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from credential_registry.models.identity import normalize_address

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# Placeholder owner for local runs; prod must set REGISTRY_OWNER explicitly.
DEV_REGISTRY_OWNER = "0x" + "0" * 39 + "1"


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    registry_owner: str
    receipt_ttl_seconds: int = 7 * 24 * 3600

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def applies_inline(self) -> bool:
        """Without Redis there is no separate worker, so the API applies
        queued transactions itself."""
        return self.redis_url is None


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    ttl_raw = _getenv("RECEIPT_TTL_SECONDS", str(7 * 24 * 3600))

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0", "yes", "no"):
        raise ValueError(f"LOG_JSON must be a boolean (got {log_json_raw!r})")

    port = _parse_int("PORT", port_raw)
    receipt_ttl = _parse_int("RECEIPT_TTL_SECONDS", ttl_raw)
    if receipt_ttl <= 0:
        raise ValueError(f"RECEIPT_TTL_SECONDS must be positive (got {receipt_ttl})")

    owner_raw = _getenv("REGISTRY_OWNER", "")
    if not owner_raw:
        if app_env_raw == "prod":
            raise ValueError("REGISTRY_OWNER is required when APP_ENV=prod")
        owner_raw = DEV_REGISTRY_OWNER
    try:
        registry_owner = normalize_address(owner_raw)
    except ValueError as e:
        raise ValueError(f"REGISTRY_OWNER is invalid: {e}") from None

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None
    # The worker applies queued transactions in its own process, so registry
    # state must live in a shared database once a queue is shared.
    if redis_url and not database_url:
        raise ValueError("REDIS_URL requires DATABASE_URL")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1", "yes"),
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        registry_owner=registry_owner,
        receipt_ttl_seconds=receipt_ttl,
    )


SETTINGS = load_settings()
