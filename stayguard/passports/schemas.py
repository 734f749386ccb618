"""
Multi-passport comparison schemas.

Pydantic models for ranking a traveler's passports for one destination.
"""

from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from stayguard.core.ontology import ComplianceStatus, Severity, StayPolicy, resolve_country_code


class PassportTier(str, Enum):
    """Entry conditions for a passport, best first."""

    VISA_FREE = "visa_free"
    VISA_FREE_NEAR_LIMIT = "visa_free_near_limit"
    VISA_REQUIRED = "visa_required"

    @property
    def rank(self) -> int:
        return list(PassportTier).index(self)


class DecidingFactor(str, Enum):
    """What separated the recommended passport from the runner-up."""

    VISA_REQUIREMENT = "visa-free vs visa-required"
    STAY_HEADROOM = "compliant vs near-limit"
    REMAINING_DAYS = "remaining days"
    VISA_FEE = "visa fee"
    PROCESSING_TIME = "processing time"
    TIE = "tie"
    SINGLE_CANDIDATE = "single candidate"


class PassportCandidate(BaseModel):
    """A passport considered for a trip.

    ``applicable_policies`` take precedence over the policy table; fee and
    processing overrides take precedence over the policy's values.
    """

    passport_id: str
    country_code: str = Field(..., description="Issuing country (nationality)")
    applicable_policies: list[StayPolicy] = Field(default_factory=list)
    visa_fee: float | None = Field(None, ge=0)
    processing_days: int | None = Field(None, ge=0)

    @field_validator("country_code")
    @classmethod
    def _normalize_country(cls, value: str) -> str:
        return resolve_country_code(value)


class PassportEvaluation(BaseModel):
    """One passport's evaluated position for the destination."""

    passport_id: str
    country_code: str
    policy_id: str
    tier: PassportTier
    visa_required: bool
    severity: Severity
    remaining_days: int
    visa_fee: float | None = None
    processing_days: int | None = None
    status: ComplianceStatus
    score: float = Field(..., ge=0, le=100, description="Display score, 0-100")
    rank: int = Field(..., ge=1)
    recommendation: Literal["best", "good", "avoid"]


class Savings(BaseModel):
    """Advantage of the recommended passport over the runner-up."""

    visa_fee: float | None = None
    processing_days: int | None = None
    extra_days: int = 0


class PassportComparison(BaseModel):
    """Ranked passports for a destination."""

    destination: str
    as_of: date
    evaluations: list[PassportEvaluation]
    best_passport_id: str
    deciding_factor: DecidingFactor
    reason: str
    savings: Savings | None = None

    @property
    def best(self) -> PassportEvaluation:
        return self.evaluations[0]
