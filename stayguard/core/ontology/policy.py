"""Stay policy reference data."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import CalculationMethod


ANY_VISA_TYPE = "*"


class StayPolicy(BaseModel):
    """A day-limit regime for a country (or region) and visa type.

    ``nationality`` scopes the policy to travelers holding that passport;
    None applies to every nationality.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    country_code: str
    visa_type: str = ANY_VISA_TYPE
    calculation_method: CalculationMethod
    max_days_per_stay: int = Field(..., ge=0)
    max_days_per_period: int | None = Field(None, ge=0)
    period_days: int | None = None
    valid_from: date | None = None
    valid_until: date | None = None

    nationality: str | None = None
    requires_visa: bool = False
    visa_fee: float | None = Field(None, ge=0)
    processing_days: int | None = Field(None, ge=0)
    description: str | None = None
    restrictions: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_validity_range(self) -> StayPolicy:
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValueError(f"valid_until precedes valid_from in policy {self.id}")
        return self

    @property
    def limit(self) -> int:
        """The day count compared against usage for this policy's method."""
        if self.calculation_method in (
            CalculationMethod.ROLLING_WINDOW,
            CalculationMethod.CALENDAR_YEAR,
        ):
            if self.max_days_per_period is not None:
                return self.max_days_per_period
        return self.max_days_per_stay

    @property
    def is_visa_free(self) -> bool:
        return not self.requires_visa
