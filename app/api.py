"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from app.schemas import BinScore, BinStats, DailyAggregate, Rankings, Reading
from models.errors import NotFoundError, ValidationError
from services.waste import WasteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
health_router = APIRouter()

_STORE_UNAVAILABLE = "Reading store is unavailable."
_EXAMPLE_READING = {
    "binId": "BIN-001",
    "weightKg": 2.35,
    "moistureRaw": 650,
    "wasteTag": "organic",
}


def get_service(request: Request) -> WasteService:
    return request.app.state.service


@router.post(
    "/waste",
    status_code=status.HTTP_201_CREATED,
    response_model=Reading,
    summary="Record a waste reading for a bin.",
)
async def create_reading(
    payload: Any = Body(..., examples=[_EXAMPLE_READING]),
    service: WasteService = Depends(get_service),
) -> Reading:
    try:
        return service.record_reading(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except OSError as exc:
        logger.exception("Failed to persist reading", extra={"reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_STORE_UNAVAILABLE,
        ) from exc


@router.get(
    "/waste/recent",
    response_model=List[Reading],
    summary="Most recent readings, newest first.",
)
async def recent_readings(service: WasteService = Depends(get_service)) -> List[Reading]:
    return service.recent_readings()


@router.get(
    "/waste/daily",
    response_model=List[DailyAggregate],
    summary="Per-day totals for the trailing window (max 30 days).",
)
async def daily_readings(
    days: Optional[int] = Query(None, description="Window length in days, default 7."),
    service: WasteService = Depends(get_service),
) -> List[DailyAggregate]:
    return service.daily(days)


@router.get(
    "/bins/stats",
    response_model=List[BinStats],
    summary="Per-bin statistics over the trailing window.",
)
async def bin_stats(
    days: Optional[int] = Query(None, description="Window length in days, default 7."),
    service: WasteService = Depends(get_service),
) -> List[BinStats]:
    return service.bin_stats(days)


@router.get(
    "/bins/score/{bin_id}",
    response_model=BinScore,
    summary="Segregation score for a single bin.",
)
async def bin_score(
    bin_id: str,
    service: WasteService = Depends(get_service),
) -> BinScore:
    try:
        return service.bin_score(bin_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.get(
    "/admin/top",
    response_model=Rankings,
    summary="Top 10 performing and offending bins.",
)
async def top_bins(service: WasteService = Depends(get_service)) -> Rankings:
    return service.rankings()


@health_router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


@health_router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> Dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status and /ui for the dashboard."}
