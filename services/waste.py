"""Coordinates the reading store and the scoring engine for the API layer."""

from __future__ import annotations

import logging
from datetime import date, timezone, tzinfo
from functools import lru_cache
from typing import Any, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.schemas import (
    BinScore,
    BinStats,
    DailyAggregate,
    Rankings,
    Reading,
    ReadingCreate,
)
from datastore.reading_store import ReadingStore, build_default_store
from models.errors import NotFoundError
from services.aggregator import (
    DEFAULT_RANKING_SIZE,
    Aggregator,
    clamp_days,
)
from settings import get_settings

logger = logging.getLogger(__name__)


class WasteService:
    """Records readings and answers aggregate queries over them."""

    def __init__(
        self,
        store: ReadingStore,
        aggregator: Aggregator,
        recent_limit: int = 50,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.recent_limit = recent_limit

    def record_reading(self, payload: Union[ReadingCreate, Mapping[str, Any]]) -> Reading:
        reading = self.store.append(payload)
        logger.info(
            "Recorded reading",
            extra={
                "reading_id": reading.id,
                "bin_id": reading.bin_id,
                "waste_tag": reading.waste_tag.value,
            },
        )
        return reading

    def recent_readings(self, limit: Optional[int] = None) -> list[Reading]:
        return self.store.recent(self.recent_limit if limit is None else limit)

    def bin_readings(self, bin_id: str) -> list[Reading]:
        return self.store.by_bin(bin_id)

    def daily(self, days: Optional[int] = None, today: Optional[date] = None) -> list[DailyAggregate]:
        window = clamp_days(days)
        # one extra day covers the part of the oldest calendar day before "now - window"
        readings = self.store.in_range(window + 1)
        buckets = self.aggregator.daily_aggregate(readings, days=window, today=today)
        return [DailyAggregate.model_validate(bucket) for bucket in buckets]

    def bin_stats(self, days: Optional[int] = None) -> list[BinStats]:
        window = clamp_days(days, maximum=None)
        summaries = self.aggregator.bin_stats(self.store.in_range(window))
        logger.debug("Computed bin statistics", extra={"days": window, "count": len(summaries)})
        return [BinStats.model_validate(summary) for summary in summaries]

    def bin_score(self, bin_id: str) -> BinScore:
        try:
            card = self.aggregator.score(self.store.by_bin(bin_id), bin_id=bin_id)
        except NotFoundError:
            logger.info("No readings to score", extra={"bin_id": bin_id})
            raise
        logger.debug(
            "Scored bin",
            extra={"bin_id": bin_id, "score": card.score, "entries": card.entries},
        )
        return BinScore.model_validate(card)

    def rankings(self, n: int = DEFAULT_RANKING_SIZE) -> Rankings:
        result = self.aggregator.rank_bins(self.store.scan(), n=n)
        return Rankings(
            performers=[BinScore.model_validate(card) for card in result.performers],
            offenders=[BinScore.model_validate(card) for card in result.offenders],
        )


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone, falling back to UTC", extra={"reason": name})
        return timezone.utc


@lru_cache
def build_default_service() -> WasteService:
    """Factory that wires the service with the configured store."""
    settings = get_settings()
    store = build_default_store()
    aggregator = Aggregator(reference_tz=resolve_timezone(settings.timezone))
    return WasteService(store=store, aggregator=aggregator, recent_limit=settings.recent_limit)
