"""Policies domain - stay policy table, YAML loader, and evaluation engine."""

from .loader import (
    DEFAULT_POLICY_ID,
    PolicyLoader,
    PolicyTable,
    default_policy,
    load_policy_table,
)
from .engine import (
    Usage,
    CustomContext,
    CustomEvaluator,
    PolicyEngine,
    calendar_year_bounds,
)

__all__ = [
    # Loader
    "DEFAULT_POLICY_ID",
    "PolicyLoader",
    "PolicyTable",
    "default_policy",
    "load_policy_table",
    # Engine
    "Usage",
    "CustomContext",
    "CustomEvaluator",
    "PolicyEngine",
    "calendar_year_bounds",
]
