"""Interval domain - visit normalization and overlap-safe day counting."""

from .normalizer import (
    RecordError,
    NormalizationResult,
    normalize,
    normalize_visit,
)
from .aggregator import (
    window_bounds,
    merge_spans,
    span_days,
    clipped_spans,
    days_in_range,
    days_in_window,
    current_stay,
)

__all__ = [
    # Normalizer
    "RecordError",
    "NormalizationResult",
    "normalize",
    "normalize_visit",
    # Aggregator
    "window_bounds",
    "merge_spans",
    "span_days",
    "clipped_spans",
    "days_in_range",
    "days_in_window",
    "current_stay",
]
