"""Compliance domain - calculator facade and /compliance API."""

from .schemas import (
    ComprehensiveStatus,
    OverstayWarning,
    SchengenOverstayWarning,
    OverstaySummary,
    OverstayReport,
    StatusRequest,
    StatusResponse,
    TripValidationRequest,
    OverstayRequest,
    PassportComparisonRequest,
    PolicyListResponse,
)
from .service import ComplianceCalculator
from .router import router, get_calculator

__all__ = [
    # Results
    "ComprehensiveStatus",
    "OverstayWarning",
    "SchengenOverstayWarning",
    "OverstaySummary",
    "OverstayReport",
    # Requests
    "StatusRequest",
    "StatusResponse",
    "TripValidationRequest",
    "OverstayRequest",
    "PassportComparisonRequest",
    "PolicyListResponse",
    # Service
    "ComplianceCalculator",
    # Router
    "router",
    "get_calculator",
]
