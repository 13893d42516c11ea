"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from unistellar.infra import postgres
from unistellar.settings import settings

router = APIRouter(prefix="", tags=["ops"])

logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name}


@router.get("/health/ready")
async def health_ready() -> Response:
	if settings.store_backend == "memory":
		return JSONResponse({"status": "ok", "store": "memory"})
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=0.5)
	except Exception:
		logger.warning("readiness probe failed", exc_info=True)
		return JSONResponse({"status": "unavailable", "store": "postgres"}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
	return JSONResponse({"status": "ok", "store": "postgres"})


@router.get("/metrics")
async def prometheus_metrics() -> Response:
	if not settings.obs_metrics_public:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
