"""StayGuard - stay-limit compliance engine.

Computes days used and remaining under the Schengen 90/180 rule and
per-country visa stay limits, validates planned trips and compares passports.
The engine is pure and synchronous; every operation takes an explicit as-of
date.
"""

__version__ = "0.1.0"

# Core ontology types
from .core.ontology import (
    CalculationMethod,
    Severity,
    DateInterval,
    RawVisit,
    VisitInterval,
    VisitRecord,
    ComplianceStatus,
    StayPolicy,
    SCHENGEN_ZONE,
)

# Errors
from .core.errors import (
    ComplianceError,
    InvalidIntervalError,
    PolicyNotFoundError,
    InvalidWindowError,
    UnsupportedPolicyError,
    PolicyLoadError,
)

# Engine components
from .intervals import normalize, days_in_window
from .policies import PolicyEngine, PolicyLoader, PolicyTable, load_policy_table
from .planning import FutureTripValidation, validate_future_trip
from .passports import PassportCandidate, PassportComparison, PassportOptimizer
from .status import StatusReport, build_report

# Facade
from .compliance.service import ComplianceCalculator
from .compliance.schemas import ComprehensiveStatus, OverstayReport

__all__ = [
    "__version__",
    # Ontology
    "CalculationMethod",
    "Severity",
    "DateInterval",
    "RawVisit",
    "VisitInterval",
    "VisitRecord",
    "ComplianceStatus",
    "StayPolicy",
    "SCHENGEN_ZONE",
    # Errors
    "ComplianceError",
    "InvalidIntervalError",
    "PolicyNotFoundError",
    "InvalidWindowError",
    "UnsupportedPolicyError",
    "PolicyLoadError",
    # Engine
    "normalize",
    "days_in_window",
    "PolicyEngine",
    "PolicyLoader",
    "PolicyTable",
    "load_policy_table",
    "FutureTripValidation",
    "validate_future_trip",
    "PassportCandidate",
    "PassportComparison",
    "PassportOptimizer",
    "StatusReport",
    "build_report",
    # Facade
    "ComplianceCalculator",
    "ComprehensiveStatus",
    "OverstayReport",
]
