"""Passports domain - multi-passport comparison for a destination."""

from .schemas import (
    PassportTier,
    DecidingFactor,
    PassportCandidate,
    PassportEvaluation,
    Savings,
    PassportComparison,
)
from .service import PassportOptimizer, TIER_BASE_SCORE, REASONS

__all__ = [
    # Schemas
    "PassportTier",
    "DecidingFactor",
    "PassportCandidate",
    "PassportEvaluation",
    "Savings",
    "PassportComparison",
    # Service
    "PassportOptimizer",
    "TIER_BASE_SCORE",
    "REASONS",
]
