"""
Visit normalizer.

Turns raw visit records into validated, tagged date intervals. Normalization
is time-independent: an absent exit date stays open and is only resolved
against an as-of date when a window is evaluated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from stayguard.core.errors import InvalidIntervalError
from stayguard.core.ontology import (
    DateInterval,
    RawVisit,
    VisitInterval,
    resolve_country_code,
)

logger = logging.getLogger(__name__)


class RecordError(BaseModel):
    """A visit record rejected in tolerant mode."""

    index: int = Field(..., description="Position of the record in the input")
    visit_id: str | None = None
    error_type: str
    message: str


class NormalizationResult(BaseModel):
    """Normalized intervals plus any per-record errors (tolerant mode only)."""

    intervals: list[VisitInterval] = Field(default_factory=list)
    errors: list[RecordError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


VisitInput = RawVisit | VisitInterval | Mapping[str, Any]


def normalize_visit(raw: VisitInput) -> VisitInterval:
    """
    Normalize a single visit record.

    Raises:
        InvalidIntervalError: exit precedes entry, or the record is malformed
    """
    if isinstance(raw, VisitInterval):
        return raw

    if not isinstance(raw, RawVisit):
        try:
            raw = RawVisit.model_validate(raw)
        except ValidationError as exc:
            visit_id = raw.get("id") if isinstance(raw, Mapping) else None
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
            raise InvalidIntervalError(
                f"Malformed visit record (invalid fields: {fields})",
                visit_id=str(visit_id) if visit_id is not None else None,
            ) from exc

    if raw.exit_date is not None and raw.exit_date < raw.entry_date:
        raise InvalidIntervalError(
            f"Visit {raw.id}: exit date {raw.exit_date} precedes entry date {raw.entry_date}",
            visit_id=raw.id,
            start=raw.entry_date,
            end=raw.exit_date,
        )

    try:
        country_code = resolve_country_code(raw.country)
    except ValueError as exc:
        raise InvalidIntervalError(f"Visit {raw.id}: {exc}", visit_id=raw.id) from exc

    return VisitInterval(
        visit_id=raw.id,
        country_code=country_code,
        interval=DateInterval(start=raw.entry_date, end=raw.exit_date),
        visa_type=raw.visa_type,
        source_policy_id=raw.source_policy_id,
        max_days=raw.max_days,
    )


def normalize(raw_visits: Iterable[VisitInput], *, strict: bool = True) -> NormalizationResult:
    """
    Normalize raw visits into intervals sorted by start date.

    Overlapping visits are kept as-is; de-duplication happens when days are
    counted, not here.

    Args:
        raw_visits: Raw records, dicts with the same fields, or already
            normalized intervals
        strict: Raise on the first invalid record instead of collecting it

    Returns:
        NormalizationResult with sorted intervals and collected errors

    Raises:
        InvalidIntervalError: In strict mode, for the first invalid record
    """
    intervals: list[VisitInterval] = []
    errors: list[RecordError] = []

    for index, raw in enumerate(raw_visits):
        try:
            intervals.append(normalize_visit(raw))
        except InvalidIntervalError as exc:
            if strict:
                raise
            logger.warning("Skipping visit record %d (%s): %s", index, exc.visit_id, exc)
            errors.append(
                RecordError(
                    index=index,
                    visit_id=exc.visit_id,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            )

    intervals.sort(key=lambda v: (v.start, v.visit_id))
    return NormalizationResult(intervals=intervals, errors=errors)
