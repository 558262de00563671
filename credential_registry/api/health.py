"""Health and readiness endpoints.

  /health (liveness):
    Always 200 while the process can answer.  The ``status`` field says
    whether backing services are impaired, and ``registry`` carries the
    current owner and credential counts.

  /ready (readiness):
    503 when the instance cannot serve registry traffic: the configured
    database is unreachable or genesis has not recorded an owner.  Redis
    is not critical here; reads keep working without it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from credential_registry.db.engine import engine, ping_database
from credential_registry.db.redis import ping_redis, redis_pool
from credential_registry.services.registry import registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _dependency_checks() -> dict[str, str]:
    checks: dict[str, str] = {}
    if redis_pool is None:
        checks["redis"] = "not_configured"
    else:
        checks["redis"] = "ok" if await ping_redis() else "degraded"

    if engine is None:
        checks["database"] = "not_configured"
    else:
        checks["database"] = "ok" if await ping_database() else "degraded"
    return checks


@router.get("/health")
async def health() -> dict:
    checks = await _dependency_checks()
    overall = "degraded" if "degraded" in checks.values() else "ok"

    registry_status: dict | None
    try:
        summary = await registry.summary()
    except Exception:
        logger.warning("Registry summary unavailable", exc_info=True)
        registry_status = None
        overall = "degraded"
    else:
        registry_status = {
            "owner": summary.owner,
            "total": summary.total,
            "revoked": summary.revoked,
            "active": summary.active,
        }

    return {
        "status": overall,
        "checks": checks,
        "registry": registry_status,
    }


@router.get("/ready")
async def ready() -> Response:
    if engine is not None and not await ping_database():
        return Response(status_code=503)
    try:
        await registry.owner()
    except Exception:
        logger.warning("Not ready: registry owner unavailable", exc_info=True)
        return Response(status_code=503)
    return Response(status_code=200)
