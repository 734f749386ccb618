"""Core domain types for stay-limit compliance.

This module defines the value objects every engine component exchanges:
- Date intervals (inclusive on both ends, optionally open-ended)
- Raw visits as supplied by the visit store, and their normalized form
- Calculation methods and severity tiers
- The compliance status produced by every evaluation
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .countries import region_for


# =============================================================================
# Enumerations
# =============================================================================

class CalculationMethod(str, Enum):
    """How a stay policy counts days."""

    ROLLING_WINDOW = "rolling_window"  # N days in any M-day window (Schengen)
    CALENDAR_YEAR = "calendar_year"  # Jan 1 - Dec 31 of the as-of year
    ENTRY_BASED = "entry_based"  # length of the current stay
    PER_ENTRY = "per_entry"  # length of the current stay
    VISA_VALIDITY = "visa_validity"  # inside the visa validity dates
    CUSTOM = "custom"  # caller-supplied strategy


class Severity(str, Enum):
    """Warning tiers, ordered from harmless to critical."""

    NONE = "none"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.NONE: 0,
    Severity.CAUTION: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


# =============================================================================
# Intervals
# =============================================================================

class DateInterval(BaseModel):
    """A span of calendar days, inclusive on both ends.

    ``end=None`` means the stay is ongoing; it is resolved against an as-of
    date only when the interval is evaluated.
    """

    model_config = ConfigDict(frozen=True)

    start: date
    end: date | None = None

    @model_validator(mode="after")
    def _check_order(self) -> DateInterval:
        if self.end is not None and self.end < self.start:
            raise ValueError(f"end {self.end} precedes start {self.start}")
        return self

    @property
    def is_open(self) -> bool:
        return self.end is None

    def resolved_end(self, as_of: date) -> date:
        """End date with an ongoing stay resolved to ``as_of``."""
        return self.end if self.end is not None else as_of

    def length(self, as_of: date | None = None) -> int:
        """Number of calendar days covered, counting entry and exit days."""
        if self.end is None and as_of is None:
            raise ValueError("as_of is required to measure an open interval")
        end = self.end if self.end is not None else as_of
        if end < self.start:
            return 0
        return (end - self.start).days + 1

    def clip(self, window_start: date, window_end: date, as_of: date) -> DateInterval | None:
        """Intersect with ``[window_start, window_end]``; None when disjoint."""
        effective_start = max(self.start, window_start)
        effective_end = min(self.resolved_end(as_of), window_end)
        if effective_start > effective_end:
            return None
        return DateInterval(start=effective_start, end=effective_end)

    @classmethod
    def of_length(cls, start: date, days: int) -> DateInterval:
        """Closed interval of ``days`` calendar days starting at ``start``."""
        if days < 1:
            raise ValueError("An interval covers at least one day")
        return cls(start=start, end=start + timedelta(days=days - 1))


# =============================================================================
# Visits
# =============================================================================

class RawVisit(BaseModel):
    """A visit record as delivered by the visit store.

    ``country`` may be an ISO code or an English country name.
    """

    id: str
    country: str
    entry_date: date
    exit_date: date | None = None
    visa_type: str = "tourist"
    max_days: int | None = Field(None, ge=0, description="Per-visit stay limit, if known")
    source_policy_id: str | None = None


class VisitInterval(BaseModel):
    """A normalized visit: a validated interval tagged with its source."""

    model_config = ConfigDict(frozen=True)

    visit_id: str
    country_code: str
    interval: DateInterval
    visa_type: str = "tourist"
    source_policy_id: str | None = None
    max_days: int | None = None

    @property
    def start(self) -> date:
        return self.interval.start

    @property
    def end(self) -> date | None:
        return self.interval.end

    @property
    def region(self) -> str:
        """Aggregation key (Schengen zone for member states)."""
        return region_for(self.country_code)


# Visits are immutable once normalized; the record and its interval view are the same object
VisitRecord = VisitInterval


# =============================================================================
# Compliance status
# =============================================================================

class ComplianceStatus(BaseModel):
    """Result of evaluating usage against a stay policy at an as-of date.

    ``remaining_days`` is ``max_days - used_days`` and goes negative on
    overstay.
    """

    model_config = ConfigDict(frozen=True)

    used_days: int
    remaining_days: int
    is_compliant: bool
    window_start: date
    window_end: date
    as_of_date: date

    country_code: str
    visa_type: str | None = None
    calculation_method: CalculationMethod
    policy_id: str
    max_days: int

    @property
    def days_over(self) -> int:
        return max(0, self.used_days - self.max_days)

    @property
    def usage_ratio(self) -> float:
        """Share of the limit consumed (0.0 for an unused zero limit)."""
        if self.max_days <= 0:
            return float("inf") if self.used_days > 0 else 0.0
        return self.used_days / self.max_days
