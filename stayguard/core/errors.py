"""Exception taxonomy for the compliance engine.

Every error is raised synchronously and deterministically. Nothing here is
transient, so callers should never retry on these.
"""

from __future__ import annotations

from datetime import date


class ComplianceError(Exception):
    """Base class for all engine errors."""


class InvalidIntervalError(ComplianceError):
    """A visit or trip interval is malformed (e.g. exit precedes entry)."""

    def __init__(
        self,
        message: str,
        *,
        visit_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ):
        super().__init__(message)
        self.visit_id = visit_id
        self.start = start
        self.end = end


class PolicyNotFoundError(ComplianceError):
    """No stay policy matches and no default policy is configured."""

    def __init__(self, country_code: str, visa_type: str | None = None, nationality: str | None = None):
        parts = [f"country={country_code}"]
        if visa_type:
            parts.append(f"visa_type={visa_type}")
        if nationality:
            parts.append(f"nationality={nationality}")
        super().__init__(f"No stay policy found for {', '.join(parts)}")
        self.country_code = country_code
        self.visa_type = visa_type
        self.nationality = nationality


class InvalidWindowError(ComplianceError):
    """A counting window has a non-positive length."""

    def __init__(self, window_days: int, policy_id: str | None = None):
        message = f"Window length must be positive, got {window_days}"
        if policy_id:
            message += f" (policy {policy_id})"
        super().__init__(message)
        self.window_days = window_days
        self.policy_id = policy_id


class UnsupportedPolicyError(ComplianceError):
    """A custom policy was evaluated without a registered strategy."""

    def __init__(self, policy_id: str):
        super().__init__(f"No custom evaluator registered for policy '{policy_id}'")
        self.policy_id = policy_id


class PolicyLoadError(ComplianceError):
    """A policy file could not be parsed into stay policies."""
