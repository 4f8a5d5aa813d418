"""
Blog API — Root & Health Check Routes
=======================================

What:  Liveness endpoints that never touch the store.
    - GET /        plain-text greeting
    - GET /health  {"status": "OK", "timestamp": <UTC ISO 8601>}
Who:   Load balancers, platform probes, humans with curl.

Both answer as long as the process is serving; the store connection was
already proven at startup.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from blog_api.schemas.blog import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/", response_class=PlainTextResponse, summary="Liveness text")
async def root() -> str:
    return "Hello World!"


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))
