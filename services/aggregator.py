"""Scoring and aggregation logic for waste readings."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from app.schemas import Reading
from models.errors import NotFoundError

DEFAULT_DAYS = 7
MAX_DAILY_DAYS = 30
DEFAULT_RANKING_SIZE = 10

MOISTURE_SEVERE = 750
MOISTURE_HIGH = 600
WEIGHT_SEVERE = 3.0
WEIGHT_HIGH = 1.5
ACTIVE_BIN_ENTRIES = 15


@dataclass
class DailyBucket:
    date: str
    total_kg: float
    avg_moisture: float
    count: int


@dataclass
class BinSummary:
    """Per-bin statistics computed over that bin's readings."""

    bin_id: str
    total_kg: float
    avg_weight: float
    avg_moisture: float
    entries: int


@dataclass
class BinScoreCard(BinSummary):
    score: int = 0


@dataclass
class RankingResult:
    performers: List[BinScoreCard]
    offenders: List[BinScoreCard]


def clamp_days(
    days: Optional[int],
    default: int = DEFAULT_DAYS,
    maximum: Optional[int] = MAX_DAILY_DAYS,
) -> int:
    """Normalize a trailing-window length: missing uses ``default``, then clamp."""
    if days is None:
        return default
    days = max(1, days)
    if maximum is not None:
        days = min(days, maximum)
    return days


def segregation_score(avg_moisture: float, avg_weight: float, entries: int) -> int:
    """Rule-based 0-100 score; only the highest matching threshold per factor applies."""
    score = 100

    if avg_moisture > MOISTURE_SEVERE:
        score -= 30
    elif avg_moisture > MOISTURE_HIGH:
        score -= 15

    if avg_weight > WEIGHT_SEVERE:
        score -= 20
    elif avg_weight > WEIGHT_HIGH:
        score -= 7

    if entries > ACTIVE_BIN_ENTRIES:
        score += 5

    return max(0, min(100, score))


def _summarize(bin_id: str, readings: Sequence[Reading]) -> BinSummary:
    entries = len(readings)
    total_kg = sum(reading.weight_kg for reading in readings)
    total_moisture = sum(reading.moisture_raw for reading in readings)
    return BinSummary(
        bin_id=bin_id,
        total_kg=total_kg,
        avg_weight=total_kg / entries,
        avg_moisture=total_moisture / entries,
        entries=entries,
    )


def _group_by_bin(readings: Iterable[Reading]) -> Dict[str, List[Reading]]:
    groups: Dict[str, List[Reading]] = defaultdict(list)
    for reading in readings:
        groups[reading.bin_id].append(reading)
    return groups


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation.

    Calendar-day bucketing happens in ``reference_tz``; every other operation
    is timezone independent.
    """

    def __init__(self, reference_tz: tzinfo = timezone.utc) -> None:
        self.reference_tz = reference_tz

    def local_date(self, moment: datetime) -> date:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.reference_tz).date()

    def daily_aggregate(
        self,
        readings: Iterable[Reading],
        days: Optional[int] = DEFAULT_DAYS,
        today: Optional[date] = None,
    ) -> List[DailyBucket]:
        window = clamp_days(days)
        if today is None:
            today = datetime.now(self.reference_tz).date()
        first_day = today - timedelta(days=window - 1)

        totals: Dict[date, float] = defaultdict(float)
        moisture: Dict[date, int] = defaultdict(int)
        counts: Dict[date, int] = defaultdict(int)
        for reading in readings:
            day = self.local_date(reading.timestamp)
            if day < first_day or day > today:
                continue
            totals[day] += reading.weight_kg
            moisture[day] += reading.moisture_raw
            counts[day] += 1

        return [
            DailyBucket(
                date=day.isoformat(),
                total_kg=totals[day],
                avg_moisture=moisture[day] / counts[day],
                count=counts[day],
            )
            for day in sorted(counts)
        ]

    def bin_stats(self, readings: Iterable[Reading]) -> List[BinSummary]:
        groups = _group_by_bin(readings)
        return [_summarize(bin_id, groups[bin_id]) for bin_id in sorted(groups)]

    def score(
        self, bin_readings: Iterable[Reading], bin_id: Optional[str] = None
    ) -> BinScoreCard:
        items = list(bin_readings)
        if not items:
            raise NotFoundError(bin_id)

        summary = _summarize(bin_id or items[0].bin_id, items)
        return BinScoreCard(
            bin_id=summary.bin_id,
            total_kg=summary.total_kg,
            avg_weight=summary.avg_weight,
            avg_moisture=summary.avg_moisture,
            entries=summary.entries,
            score=segregation_score(summary.avg_moisture, summary.avg_weight, summary.entries),
        )

    def top_and_bottom(
        self, scored_bins: Iterable[BinScoreCard], n: int = DEFAULT_RANKING_SIZE
    ) -> RankingResult:
        """Best ``n`` bins by score and the ``n`` worst, worst first."""
        ranked = [card for card in scored_bins if card.entries >= 1]
        ranked.sort(key=lambda card: (-card.score, card.bin_id))
        if n <= 0:
            return RankingResult(performers=[], offenders=[])
        worst_first = sorted(ranked, key=lambda card: (card.score, card.bin_id))
        return RankingResult(performers=ranked[:n], offenders=worst_first[:n])

    def rank_bins(
        self, readings: Iterable[Reading], n: int = DEFAULT_RANKING_SIZE
    ) -> RankingResult:
        groups = _group_by_bin(readings)
        cards = [self.score(items, bin_id) for bin_id, items in groups.items()]
        return self.top_and_bottom(cards, n=n)
