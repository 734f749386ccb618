"""Core package - shared configuration, errors, and domain types."""

from .config import Settings, get_settings
from .errors import (
    ComplianceError,
    InvalidIntervalError,
    PolicyNotFoundError,
    InvalidWindowError,
    UnsupportedPolicyError,
    PolicyLoadError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ComplianceError",
    "InvalidIntervalError",
    "PolicyNotFoundError",
    "InvalidWindowError",
    "UnsupportedPolicyError",
    "PolicyLoadError",
]
