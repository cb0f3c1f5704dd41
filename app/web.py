from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from app.api import get_service
from app.schemas import BIN_ID_PATTERN, DailyAggregate, Reading
from models.errors import NotFoundError, ValidationError
from models.records import WasteTag
from services.waste import WasteService


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_BIN_ID_RE = re.compile(BIN_ID_PATTERN)


def _bar_widths(daily: Iterable[DailyAggregate]) -> dict[str, int]:
    """Percent widths of each day's total relative to the heaviest day."""
    buckets = list(daily)
    heaviest = max((bucket.total_kg for bucket in buckets), default=0.0)
    if heaviest <= 0:
        return {bucket.date: 0 for bucket in buckets}
    return {bucket.date: round(bucket.total_kg / heaviest * 100) for bucket in buckets}


def _newest_first(readings: Iterable[Reading]) -> list[Reading]:
    return sorted(readings, key=lambda reading: reading.timestamp, reverse=True)


def _form_number(value: str) -> Any:
    """HTML forms submit text; hand numbers to validation as numbers."""
    candidate = value.strip()
    for parse in (int, float):
        try:
            return parse(candidate)
        except ValueError:
            continue
    return candidate


def _render_index(
    request: Request,
    service: WasteService,
    error: Optional[str] = None,
    form: Optional[Dict[str, str]] = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    daily = service.daily()
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "readings": service.recent_readings(),
            "daily": daily,
            "bar_widths": _bar_widths(daily),
            "rankings": service.rankings(),
            "waste_tags": [tag.value for tag in WasteTag],
            "error": error,
            "form": form or {},
        },
        status_code=status_code,
    )


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    service: WasteService = Depends(get_service),
) -> HTMLResponse:
    return _render_index(request, service)


@router.post("/ui/readings", name="ui_submit_reading", response_class=HTMLResponse)
async def ui_submit_reading(
    request: Request,
    bin_id: str = Form(""),
    weight_kg: str = Form(""),
    moisture_raw: str = Form(""),
    waste_tag: str = Form(WasteTag.organic.value),
    service: WasteService = Depends(get_service),
) -> Response:
    form = {
        "bin_id": bin_id,
        "weight_kg": weight_kg,
        "moisture_raw": moisture_raw,
        "waste_tag": waste_tag,
    }
    payload = {
        "binId": bin_id,
        "weightKg": _form_number(weight_kg),
        "moistureRaw": _form_number(moisture_raw),
        "wasteTag": waste_tag,
    }
    try:
        service.record_reading(payload)
    except ValidationError as exc:
        return _render_index(
            request, service, error=str(exc), form=form, status_code=status.HTTP_400_BAD_REQUEST
        )
    return RedirectResponse(request.url_for("ui_index"), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/ui/lookup", name="ui_lookup", response_class=HTMLResponse)
async def ui_lookup(
    request: Request,
    bin_id: str = "",
    service: WasteService = Depends(get_service),
) -> Response:
    candidate = bin_id.strip()
    if not candidate or not _BIN_ID_RE.match(candidate):
        return _render_index(
            request,
            service,
            error="Enter a bin ID without / ? # or % to look up its score.",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    if not service.bin_readings(candidate):
        return _render_index(
            request,
            service,
            error=str(NotFoundError(candidate)),
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return RedirectResponse(
        request.url_for("ui_bin_detail", bin_id=candidate),
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/ui/bins/{bin_id}", name="ui_bin_detail", response_class=HTMLResponse)
async def ui_bin_detail(
    request: Request,
    bin_id: str,
    service: WasteService = Depends(get_service),
) -> HTMLResponse:
    try:
        score = service.bin_score(bin_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return templates.TemplateResponse(
        request,
        "ui/detail.html",
        {
            "score": score,
            "readings": _newest_first(service.bin_readings(bin_id)),
        },
    )
