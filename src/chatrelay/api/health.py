"""Liveness and Prometheus scrape endpoints."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["ops"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check; does not contact either provider."""
    return {"status": "ok"}


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus text exposition of the relay and upstream metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
