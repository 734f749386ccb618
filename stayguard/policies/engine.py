"""
Policy engine.

Evaluates a traveler's usage against a stay policy. Calculation methods form
a closed set dispatched with ``match``; the ``custom`` method is the only
extension point and delegates to a caller-supplied strategy function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, timedelta
from typing import assert_never

from pydantic import BaseModel, ConfigDict, Field

from stayguard.core.config import Settings, get_settings
from stayguard.core.errors import InvalidWindowError, PolicyNotFoundError, UnsupportedPolicyError
from stayguard.core.ontology import (
    CalculationMethod,
    ComplianceStatus,
    StayPolicy,
    VisitInterval,
)
from stayguard.intervals import current_stay, days_in_range, days_in_window, window_bounds

from .loader import PolicyTable

logger = logging.getLogger(__name__)


class Usage(BaseModel):
    """Days consumed under a policy, with the window they were counted in."""

    model_config = ConfigDict(frozen=True)

    used_days: int = Field(..., ge=0)
    window_start: date
    window_end: date
    stay_days: int = Field(0, ge=0, description="Length of the current or most recent stay")


class CustomContext(BaseModel):
    """Everything a custom strategy may look at."""

    model_config = ConfigDict(frozen=True)

    country_code: str
    visa_type: str | None
    policy: StayPolicy
    as_of: date
    intervals: tuple[VisitInterval, ...] = ()
    usage: Usage | None = None


CustomEvaluator = Callable[[CustomContext], ComplianceStatus]


def calendar_year_bounds(as_of: date) -> tuple[date, date]:
    return date(as_of.year, 1, 1), date(as_of.year, 12, 31)


class PolicyEngine:
    """Evaluates usage against stay policies.

    Args:
        table: Policy table used by :meth:`resolve`
        custom_evaluators: Strategies for ``custom`` policies, keyed by policy id
        default_custom: Strategy for ``custom`` policies without a keyed entry
        settings: Engine defaults (fallback rolling window length)
    """

    def __init__(
        self,
        table: PolicyTable | None = None,
        *,
        custom_evaluators: Mapping[str, CustomEvaluator] | None = None,
        default_custom: CustomEvaluator | None = None,
        settings: Settings | None = None,
    ):
        self.table = table
        self.settings = settings or get_settings()
        self._custom = dict(custom_evaluators or {})
        self._default_custom = default_custom

    # -------------------------------------------------------------------------
    # Policy lookup
    # -------------------------------------------------------------------------

    def resolve(
        self,
        country_code: str,
        visa_type: str | None = None,
        nationality: str | None = None,
    ) -> StayPolicy:
        """Resolve a policy from the table (falls back to the table default)."""
        if self.table is None:
            raise PolicyNotFoundError(country_code, visa_type, nationality)
        return self.table.resolve(country_code, visa_type, nationality)

    def period_days(self, policy: StayPolicy) -> int:
        """Rolling window length for a policy.

        Raises:
            InvalidWindowError: The policy declares a non-positive period
        """
        period = policy.period_days if policy.period_days is not None else self.settings.default_period_days
        if period <= 0:
            raise InvalidWindowError(period, policy.id)
        return period

    # -------------------------------------------------------------------------
    # Measuring usage
    # -------------------------------------------------------------------------

    def measure(
        self,
        intervals: Sequence[VisitInterval],
        policy: StayPolicy,
        as_of: date,
    ) -> Usage:
        """
        Count the days consumed under ``policy`` as of ``as_of``.

        Callers pass only the intervals relevant to the destination (same
        country or region).
        """
        stay = current_stay(intervals, as_of)
        stay_days = stay.length(as_of) if stay else 0

        match policy.calculation_method:
            case CalculationMethod.ROLLING_WINDOW:
                period = self.period_days(policy)
                window_start, window_end = window_bounds(as_of, period)
                used = days_in_window(intervals, as_of, period)
                return Usage(
                    used_days=used,
                    window_start=window_start,
                    window_end=window_end,
                    stay_days=stay_days,
                )
            case CalculationMethod.CALENDAR_YEAR:
                year_start, year_end = calendar_year_bounds(as_of)
                used = days_in_range(intervals, year_start, year_end, as_of=as_of)
                return Usage(
                    used_days=used,
                    window_start=year_start,
                    window_end=year_end,
                    stay_days=stay_days,
                )
            case (
                CalculationMethod.ENTRY_BASED
                | CalculationMethod.PER_ENTRY
                | CalculationMethod.VISA_VALIDITY
            ):
                if stay is None:
                    return Usage(used_days=0, window_start=as_of, window_end=as_of)
                return Usage(
                    used_days=stay_days,
                    window_start=stay.start,
                    window_end=stay.resolved_end(as_of),
                    stay_days=stay_days,
                )
            case CalculationMethod.CUSTOM:
                # Custom strategies do their own counting; offer the rolling count as a hint
                period = self.period_days(policy)
                window_start, window_end = window_bounds(as_of, period)
                return Usage(
                    used_days=days_in_window(intervals, as_of, period),
                    window_start=window_start,
                    window_end=window_end,
                    stay_days=stay_days,
                )
            case _:
                assert_never(policy.calculation_method)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(
        self,
        country_code: str,
        visa_type: str | None,
        used_days: int | Usage,
        policy: StayPolicy,
        *,
        as_of: date,
        intervals: Sequence[VisitInterval] = (),
    ) -> ComplianceStatus:
        """
        Compare usage against ``policy`` and build a compliance status.

        ``used_days`` may be a bare count; the reported window is then derived
        from the policy method. A count exactly at the limit is compliant.
        """
        usage = used_days if isinstance(used_days, Usage) else self._usage_from_count(used_days, policy, as_of)

        method = policy.calculation_method
        match method:
            case CalculationMethod.ROLLING_WINDOW | CalculationMethod.CALENDAR_YEAR:
                self._check_window(policy)
                limit = policy.limit
                used = usage.used_days
                is_compliant = used <= limit
                remaining = limit - used
            case CalculationMethod.ENTRY_BASED | CalculationMethod.PER_ENTRY:
                limit = policy.max_days_per_stay
                used = usage.used_days
                is_compliant = used <= limit
                remaining = limit - used
            case CalculationMethod.VISA_VALIDITY:
                limit = policy.max_days_per_stay
                used = usage.stay_days or usage.used_days
                within_validity = (policy.valid_from is None or policy.valid_from <= as_of) and (
                    policy.valid_until is None or as_of <= policy.valid_until
                )
                is_compliant = within_validity and used <= limit
                remaining = limit - used
                if policy.valid_until is not None:
                    remaining = min(remaining, (policy.valid_until - as_of).days)
                usage = usage.model_copy(
                    update={
                        "window_start": policy.valid_from or usage.window_start,
                        "window_end": policy.valid_until or usage.window_end,
                    }
                )
            case CalculationMethod.CUSTOM:
                return self._evaluate_custom(country_code, visa_type, policy, as_of, intervals, usage)
            case _:
                assert_never(method)

        logger.debug(
            "Evaluated %s (%s) as of %s: used=%d limit=%d compliant=%s",
            policy.id, method.value, as_of, used, limit, is_compliant,
        )
        return ComplianceStatus(
            used_days=used,
            remaining_days=remaining,
            is_compliant=is_compliant,
            window_start=usage.window_start,
            window_end=usage.window_end,
            as_of_date=as_of,
            country_code=country_code,
            visa_type=visa_type,
            calculation_method=method,
            policy_id=policy.id,
            max_days=limit,
        )

    def evaluate_intervals(
        self,
        intervals: Sequence[VisitInterval],
        policy: StayPolicy,
        *,
        as_of: date,
        country_code: str | None = None,
        visa_type: str | None = None,
    ) -> ComplianceStatus:
        """Measure usage from intervals, then evaluate it."""
        country_code = country_code or policy.country_code
        if policy.calculation_method is CalculationMethod.CUSTOM:
            return self._evaluate_custom(country_code, visa_type, policy, as_of, intervals, None)
        usage = self.measure(intervals, policy, as_of)
        return self.evaluate(country_code, visa_type, usage, policy, as_of=as_of, intervals=intervals)

    def _check_window(self, policy: StayPolicy) -> None:
        if policy.calculation_method is CalculationMethod.ROLLING_WINDOW:
            self.period_days(policy)

    def _usage_from_count(self, used_days: int, policy: StayPolicy, as_of: date) -> Usage:
        match policy.calculation_method:
            case CalculationMethod.ROLLING_WINDOW | CalculationMethod.CUSTOM:
                window_start, window_end = window_bounds(as_of, self.period_days(policy))
            case CalculationMethod.CALENDAR_YEAR:
                window_start, window_end = calendar_year_bounds(as_of)
            case (
                CalculationMethod.ENTRY_BASED
                | CalculationMethod.PER_ENTRY
                | CalculationMethod.VISA_VALIDITY
            ):
                window_start = as_of - timedelta(days=max(used_days - 1, 0))
                window_end = as_of
            case _:
                assert_never(policy.calculation_method)
        return Usage(
            used_days=used_days,
            window_start=window_start,
            window_end=window_end,
            stay_days=used_days if policy.calculation_method is not CalculationMethod.CALENDAR_YEAR else 0,
        )

    def _evaluate_custom(
        self,
        country_code: str,
        visa_type: str | None,
        policy: StayPolicy,
        as_of: date,
        intervals: Sequence[VisitInterval],
        usage: Usage | None,
    ) -> ComplianceStatus:
        evaluator = self._custom.get(policy.id, self._default_custom)
        if evaluator is None:
            raise UnsupportedPolicyError(policy.id)
        context = CustomContext(
            country_code=country_code,
            visa_type=visa_type,
            policy=policy,
            as_of=as_of,
            intervals=tuple(intervals),
            usage=usage,
        )
        logger.debug("Delegating policy %s to custom evaluator", policy.id)
        return evaluator(context)
