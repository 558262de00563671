"""Prometheus scrape endpoint (text exposition format, not JSON).

Exposes the HTTP request metrics alongside the registry's own series,
for example:

  registry_transactions_total{operation="issue",outcome="committed"} 12.0
  registry_verifications_total{result="revoked"} 3.0
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
