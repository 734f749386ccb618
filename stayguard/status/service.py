"""
Status and recommendation builder.

Maps a ComplianceStatus to a severity tier and to warning and recommendation
lines from the fixed message catalogue. The mapping is deterministic: the
same status always yields the same report.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field

from stayguard.core.ontology import ComplianceStatus, Severity

from .messages import WARNING_MESSAGES, WarningKey, recommendation_templates


# Usage-ratio lower bounds for each tier (critical also covers any violation)
CAUTION_THRESHOLD = 0.60
WARNING_THRESHOLD = 0.80
CRITICAL_THRESHOLD = 0.95


class StatusReport(BaseModel):
    """Tiered warnings and recommendations for one compliance status."""

    severity: Severity
    usage_ratio: float
    warning_keys: list[WarningKey] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


def classify_severity(status: ComplianceStatus) -> Severity:
    """
    Severity tier for a status.

    Below 60% of the limit is harmless, 60-80% caution, 80-95% warning,
    95% and above (or any violation) critical.
    """
    if not status.is_compliant:
        return Severity.CRITICAL

    ratio = status.usage_ratio
    if ratio >= CRITICAL_THRESHOLD:
        return Severity.CRITICAL
    if ratio >= WARNING_THRESHOLD:
        return Severity.WARNING
    if ratio >= CAUTION_THRESHOLD:
        return Severity.CAUTION
    return Severity.NONE


def warning_keys(status: ComplianceStatus, severity: Severity) -> list[WarningKey]:
    """Warning conditions raised by a status."""
    if not status.is_compliant:
        return [WarningKey.EXCEEDED]
    if status.remaining_days <= 0:
        return [WarningKey.AT_LIMIT]
    if severity in (Severity.WARNING, Severity.CRITICAL):
        return [WarningKey.NEAR_LIMIT]
    if severity is Severity.CAUTION:
        return [WarningKey.APPROACHING]
    return []


def _template_fields(status: ComplianceStatus) -> dict[str, object]:
    return {
        "used": status.used_days,
        "limit": status.max_days,
        "remaining": max(0, status.remaining_days),
        "over": status.days_over,
        "window_start": status.window_start.isoformat(),
        "window_end": status.window_end.isoformat(),
        "reset_date": (status.window_end + timedelta(days=1)).isoformat(),
        "year": status.as_of_date.year,
        "next_year": status.as_of_date.year + 1,
    }


def build_report(status: ComplianceStatus) -> StatusReport:
    """Build the tiered report for a compliance status."""
    severity = classify_severity(status)
    fields = _template_fields(status)
    keys = warning_keys(status, severity)

    return StatusReport(
        severity=severity,
        usage_ratio=status.usage_ratio,
        warning_keys=keys,
        warnings=[WARNING_MESSAGES[key].format(**fields) for key in keys],
        recommendations=[
            template.format(**fields)
            for template in recommendation_templates(severity, status.calculation_method)
        ],
    )
