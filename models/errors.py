"""Errors raised by the reading store and the scoring engine."""

from __future__ import annotations


class ValidationError(ValueError):
    """A reading payload is malformed or holds out-of-range values."""


class NotFoundError(LookupError):
    """No readings exist for the requested bin."""

    def __init__(self, bin_id: str | None = None) -> None:
        self.bin_id = bin_id
        if bin_id is None:
            message = "No readings available to score."
        else:
            message = f"No readings found for bin {bin_id!r}."
        super().__init__(message)
