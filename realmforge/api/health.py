"""
Health check endpoints.

Liveness, plus a readiness probe that checks card data is in place.
"""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from realmforge.api.decks import get_data_dir
from realmforge.config import settings
from realmforge.services.card_database import set_file_path

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    missing_sets: list[str] | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check card data.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    data_dir: Annotated[Path, Depends(get_data_dir)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if any default set's CSV is missing from the data directory.
    """
    missing = [
        set_name
        for set_name in settings.default_data_sets
        if not set_file_path(set_name, data_dir).exists()
    ]
    if missing:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", missing_sets=missing)
    return HealthResponse(status="ready")
