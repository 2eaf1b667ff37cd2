from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from schemas.news import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="OK",
        message="NewsAPI Dashboard Backend is running",
        timestamp=datetime.now(timezone.utc),
    )
