"""Pydantic schemas for the HTTP API layer.

Wire names are camelCase (``binId``, ``weightKg``) while Python attributes
stay snake_case; every model accepts either spelling on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.records import WasteTag


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ids end up as a single URL path segment on the dashboard and score routes
BIN_ID_PATTERN = r"^[^/?#%]+$"


class ReadingCreate(_WireModel):
    """Payload accepted when recording a new reading."""

    model_config = ConfigDict(str_strip_whitespace=True)

    bin_id: str = Field(
        ...,
        min_length=1,
        pattern=BIN_ID_PATTERN,
        description="Identifier of the physical bin; may not contain / ? # or %.",
    )
    weight_kg: float = Field(..., ge=0, allow_inf_nan=False)
    moisture_raw: int = Field(..., ge=0, description="Raw moisture sensor value.")
    waste_tag: WasteTag

    @field_validator("waste_tag", mode="before")
    @classmethod
    def _normalize_tag(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("weight_kg", "moisture_raw", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        if isinstance(value, (bool, str)):
            raise ValueError("must be a number")
        return value


class Reading(_WireModel):
    """A stored reading; immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    bin_id: str
    weight_kg: float
    moisture_raw: int
    waste_tag: WasteTag
    timestamp: datetime


class DailyAggregate(_WireModel):
    """Totals for one calendar day in the reference timezone."""

    date: str = Field(..., description="Bucket date formatted as YYYY-MM-DD.")
    total_kg: float
    avg_moisture: float
    count: int = Field(..., ge=1)


class BinStats(_WireModel):
    bin_id: str
    total_kg: float
    avg_weight: float
    avg_moisture: float
    entries: int = Field(..., ge=1)


class BinScore(BinStats):
    """Segregation score of a bin together with the statistics it derives from."""

    score: int = Field(..., ge=0, le=100)


class Rankings(_WireModel):
    performers: List[BinScore] = Field(default_factory=list)
    offenders: List[BinScore] = Field(default_factory=list)
