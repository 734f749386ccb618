"""Core ontology types for stay-limit compliance."""

from .types import (
    CalculationMethod,
    Severity,
    DateInterval,
    RawVisit,
    VisitInterval,
    VisitRecord,
    ComplianceStatus,
)
from .policy import ANY_VISA_TYPE, StayPolicy
from .countries import (
    SCHENGEN_ZONE,
    SCHENGEN_COUNTRIES,
    COUNTRY_NAMES,
    resolve_country_code,
    is_schengen,
    region_for,
    country_name,
)

__all__ = [
    # Types
    "CalculationMethod",
    "Severity",
    "DateInterval",
    "RawVisit",
    "VisitInterval",
    "VisitRecord",
    "ComplianceStatus",
    # Policy
    "ANY_VISA_TYPE",
    "StayPolicy",
    # Countries
    "SCHENGEN_ZONE",
    "SCHENGEN_COUNTRIES",
    "COUNTRY_NAMES",
    "resolve_country_code",
    "is_schengen",
    "region_for",
    "country_name",
]
