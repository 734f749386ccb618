"""
Compliance facade schemas.

Result models returned by the ComplianceCalculator and the request bodies of
the /compliance API.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from stayguard.core.ontology import ComplianceStatus, RawVisit, Severity, StayPolicy
from stayguard.intervals import RecordError
from stayguard.passports import PassportCandidate


# =============================================================================
# Results
# =============================================================================

class ComprehensiveStatus(BaseModel):
    """Compliance status with its severity tier, warnings and advice."""

    status: ComplianceStatus
    severity: Severity
    usage_ratio: float
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    next_allowed_entry: date | None = Field(
        None, description="First date a one-day stay is possible again, when the limit is used up"
    )
    errors: list[RecordError] = Field(default_factory=list)


class OverstayWarning(BaseModel):
    """A current stay that is close to, or past, its limit."""

    id: str
    visit_id: str | None = None
    country_code: str
    country_name: str
    warning_type: Literal["exceeded", "imminent", "approaching", "visa_expiring"]
    severity: Severity
    current_stay_days: int
    max_stay_days: int
    days_remaining: int
    entry_date: date
    expected_exit_date: date
    visa_expiry_date: date | None = None
    message: str
    recommendations: list[str] = Field(default_factory=list)


class SchengenOverstayWarning(OverstayWarning):
    """Overstay warning for the Schengen zone under the 90/180 rule."""

    schengen_days_used: int
    schengen_days_remaining: int
    window_start: date
    window_end: date


class OverstaySummary(BaseModel):
    """Warning counts by severity."""

    total: int = 0
    critical: int = 0
    warning: int = 0
    caution: int = 0


class OverstayReport(BaseModel):
    """All overstay warnings for a traveler as of a date."""

    warnings: list[OverstayWarning] = Field(default_factory=list)
    schengen_warnings: list[SchengenOverstayWarning] = Field(default_factory=list)
    summary: OverstaySummary = Field(default_factory=OverstaySummary)
    errors: list[RecordError] = Field(default_factory=list)


# =============================================================================
# API requests
# =============================================================================

class StatusRequest(BaseModel):
    """Request body for Schengen and comprehensive status."""

    visits: list[RawVisit] = Field(default_factory=list)
    as_of: date
    country: str | None = Field(None, description="Destination; defaults to the Schengen zone")
    visa_type: str | None = None
    nationality: str | None = Field(None, max_length=2)
    strict: bool | None = Field(None, description="Fail on the first invalid visit (default from settings)")


class StatusResponse(BaseModel):
    """Plain compliance status plus any skipped records."""

    status: ComplianceStatus
    errors: list[RecordError] = Field(default_factory=list)


class TripValidationRequest(BaseModel):
    """Request body for validating a planned trip."""

    visits: list[RawVisit] = Field(default_factory=list)
    destination: str = Field("SCHENGEN", min_length=2)
    entry_date: date
    exit_date: date
    now: date
    visa_type: str | None = None
    nationality: str | None = Field(None, max_length=2)
    strict: bool | None = None


class OverstayRequest(BaseModel):
    """Request body for overstay warnings."""

    visits: list[RawVisit] = Field(default_factory=list)
    as_of: date
    nationality: str | None = Field(None, max_length=2)
    strict: bool | None = None


class PassportComparisonRequest(BaseModel):
    """Request body for comparing passports."""

    passports: list[PassportCandidate] = Field(..., min_length=1)
    destination: str = Field(..., min_length=2)
    as_of: date
    used_days: dict[str, int] = Field(default_factory=dict, description="Days already used per passport id")
    visa_type: str | None = None


class PolicyListResponse(BaseModel):
    """Loaded stay policies."""

    policies: list[StayPolicy]
    total: int
