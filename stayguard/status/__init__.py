"""Status domain - severity tiers and rule-keyed recommendations."""

from .messages import (
    WarningKey,
    WARNING_MESSAGES,
    RECOMMENDATIONS,
    GENERIC_RECOMMENDATIONS,
    OVERSTAY_MESSAGES,
    OVERSTAY_RECOMMENDATIONS,
    VISA_EXPIRY_NOTE,
    VISA_EXPIRY_RECOMMENDATION,
    TRIP_MESSAGES,
    recommendation_templates,
)
from .service import (
    CAUTION_THRESHOLD,
    WARNING_THRESHOLD,
    CRITICAL_THRESHOLD,
    StatusReport,
    classify_severity,
    warning_keys,
    build_report,
)

__all__ = [
    # Messages
    "WarningKey",
    "WARNING_MESSAGES",
    "RECOMMENDATIONS",
    "GENERIC_RECOMMENDATIONS",
    "OVERSTAY_MESSAGES",
    "OVERSTAY_RECOMMENDATIONS",
    "VISA_EXPIRY_NOTE",
    "VISA_EXPIRY_RECOMMENDATION",
    "TRIP_MESSAGES",
    "recommendation_templates",
    # Service
    "CAUTION_THRESHOLD",
    "WARNING_THRESHOLD",
    "CRITICAL_THRESHOLD",
    "StatusReport",
    "classify_severity",
    "warning_keys",
    "build_report",
]
