"""Domain vocabulary shared across services."""

from __future__ import annotations

from enum import Enum


class WasteTag(str, Enum):
    """Waste categories a reading can be tagged with."""

    organic = "organic"
    plastic = "plastic"
    paper = "paper"
    metal = "metal"
    glass = "glass"
