"""System-level routes for diagnostics and client bootstrap."""
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from ..config import get_settings

router = APIRouter(tags=["system"])


class ServiceInfoResponse(BaseModel):
    service: str
    version: str
    poll_interval_seconds: float


@router.get("/api", response_model=ServiceInfoResponse)
def api_info() -> ServiceInfoResponse:
    settings = get_settings()
    return ServiceInfoResponse(
        service=settings.app_name,
        version=settings.api_version,
        poll_interval_seconds=settings.poll_interval_seconds,
    )


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


__all__ = ["router"]
