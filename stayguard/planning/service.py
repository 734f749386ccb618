"""
Future-trip validation and travel date planning.

A planned trip is simulated by appending it to the traveler's existing
intervals and re-evaluating the policy at the trip's entry and exit dates.
The caller supplies "now"; nothing here reads the system clock.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta

from pydantic import BaseModel, Field

from stayguard.core.config import get_settings
from stayguard.core.errors import InvalidIntervalError
from stayguard.core.ontology import (
    CalculationMethod,
    ComplianceStatus,
    DateInterval,
    StayPolicy,
    VisitInterval,
)
from stayguard.policies import PolicyEngine
from stayguard.status import TRIP_MESSAGES

logger = logging.getLogger(__name__)

PLANNED_TRIP_ID = "planned-trip"


class TripWarning(BaseModel):
    """A rule-keyed warning about a planned trip."""

    code: str
    message: str
    excess_days: int = 0


class FutureTripValidation(BaseModel):
    """Outcome of simulating a planned trip."""

    can_travel: bool
    warnings: list[TripWarning] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    projected_used_days: int
    planned_days: int
    max_stay_days: int = Field(..., description="Longest compliant stay from the planned entry date")
    remaining_days_after_trip: int
    excess_days: int = 0
    violates_rule: bool
    next_entry_date: date | None = None
    status_on_entry: ComplianceStatus
    status_on_exit: ComplianceStatus

    @property
    def messages(self) -> list[str]:
        return [w.message for w in self.warnings]


def _as_visit(
    candidate: DateInterval | VisitInterval,
    policy: StayPolicy,
    country_code: str | None,
    visa_type: str | None,
) -> VisitInterval:
    if isinstance(candidate, VisitInterval):
        return candidate
    return VisitInterval(
        visit_id=PLANNED_TRIP_ID,
        country_code=country_code or policy.country_code,
        interval=candidate,
        visa_type=visa_type or "tourist",
    )


def _more_restrictive(a: ComplianceStatus, b: ComplianceStatus) -> ComplianceStatus:
    """Non-compliant beats compliant; otherwise the one with fewer days left."""
    return min((a, b), key=lambda s: (s.is_compliant, s.remaining_days))


def _trip_is_compliant(
    engine: PolicyEngine,
    existing: Sequence[VisitInterval],
    trip: VisitInterval,
    policy: StayPolicy,
    country_code: str,
    visa_type: str | None,
) -> bool:
    combined = [*existing, trip]
    for as_of in (trip.start, trip.end):
        status = engine.evaluate_intervals(
            combined, policy, as_of=as_of, country_code=country_code, visa_type=visa_type
        )
        if not status.is_compliant:
            return False
    return True


def max_compliant_stay(
    existing: Sequence[VisitInterval],
    entry: date,
    policy: StayPolicy,
    *,
    engine: PolicyEngine | None = None,
    country_code: str | None = None,
    visa_type: str | None = None,
    search_days: int | None = None,
) -> int:
    """Longest stay starting on ``entry`` that remains compliant (0 if none)."""
    engine = engine or PolicyEngine()
    search_days = search_days or engine.settings.safe_date_search_days
    country_code = country_code or policy.country_code

    best = 0
    for length in range(1, search_days + 1):
        trip = _as_visit(DateInterval.of_length(entry, length), policy, country_code, visa_type)
        if not _trip_is_compliant(engine, existing, trip, policy, country_code, visa_type):
            break
        best = length
    return best


def next_entry_date(
    existing: Sequence[VisitInterval],
    policy: StayPolicy,
    *,
    as_of: date,
    engine: PolicyEngine | None = None,
    country_code: str | None = None,
    visa_type: str | None = None,
    search_days: int | None = None,
) -> date | None:
    """First date from ``as_of`` on which a one-day stay would be compliant."""
    engine = engine or PolicyEngine()
    search_days = search_days or engine.settings.safe_date_search_days
    country_code = country_code or policy.country_code

    for offset in range(search_days):
        day = as_of + timedelta(days=offset)
        trip = _as_visit(DateInterval(start=day, end=day), policy, country_code, visa_type)
        if _trip_is_compliant(engine, existing, trip, policy, country_code, visa_type):
            return day
    return None


def find_safe_travel_dates(
    existing: Sequence[VisitInterval],
    duration_days: int,
    policy: StayPolicy,
    *,
    earliest: date,
    engine: PolicyEngine | None = None,
    country_code: str | None = None,
    visa_type: str | None = None,
    search_days: int | None = None,
) -> DateInterval | None:
    """
    Earliest trip of ``duration_days`` starting on or after ``earliest`` that
    stays compliant, or None when none fits within the search horizon.
    """
    if duration_days < 1:
        raise InvalidIntervalError(f"Trip duration must be at least one day, got {duration_days}")

    engine = engine or PolicyEngine()
    search_days = search_days or engine.settings.safe_date_search_days
    country_code = country_code or policy.country_code

    for offset in range(search_days):
        candidate = DateInterval.of_length(earliest + timedelta(days=offset), duration_days)
        trip = _as_visit(candidate, policy, country_code, visa_type)
        if _trip_is_compliant(engine, existing, trip, policy, country_code, visa_type):
            return candidate
    logger.debug("No %d-day window found within %d days of %s", duration_days, search_days, earliest)
    return None


def _validity_warnings(policy: StayPolicy, interval: DateInterval) -> list[TripWarning]:
    """Warnings for the parts of a trip that fall outside a visa's validity dates."""
    if policy.calculation_method is not CalculationMethod.VISA_VALIDITY:
        return []
    warnings = []
    if policy.valid_from is not None and interval.start < policy.valid_from:
        warnings.append(
            TripWarning(
                code="before_validity",
                message=TRIP_MESSAGES["before_validity"].format(date=policy.valid_from.isoformat()),
            )
        )
    if policy.valid_until is not None and interval.end > policy.valid_until:
        warnings.append(
            TripWarning(
                code="after_validity",
                message=TRIP_MESSAGES["after_validity"].format(date=policy.valid_until.isoformat()),
            )
        )
    return warnings


def validate_future_trip(
    existing: Sequence[VisitInterval],
    candidate: DateInterval | VisitInterval,
    policy: StayPolicy,
    *,
    now: date,
    engine: PolicyEngine | None = None,
    country_code: str | None = None,
    visa_type: str | None = None,
) -> FutureTripValidation:
    """
    Predict whether a planned trip would breach ``policy``.

    The trip is appended to ``existing`` and evaluated on its entry date
    (catches a pre-existing overstay) and on its exit date (worst-case
    cumulative usage); the more restrictive outcome wins.

    Args:
        existing: Normalized intervals relevant to the destination
        candidate: Planned trip; must be closed and not start before ``now``
        policy: Policy governing the destination
        now: Caller's current date
        engine: Policy engine (a default one is built if omitted)
        country_code: Destination, used to tag an untagged candidate

    Raises:
        InvalidIntervalError: The candidate is open-ended or in the past
    """
    engine = engine or PolicyEngine()
    interval = candidate.interval if isinstance(candidate, VisitInterval) else candidate
    if interval.end is None:
        raise InvalidIntervalError("A planned trip needs an exit date", start=interval.start)
    if interval.start < now:
        raise InvalidIntervalError(
            f"Planned trip starts on {interval.start}, before {now}",
            start=interval.start,
            end=interval.end,
        )

    trip = _as_visit(candidate, policy, country_code, visa_type)
    country_code = country_code or trip.country_code
    visa_type = visa_type or trip.visa_type
    combined = [*existing, trip]

    on_entry = engine.evaluate_intervals(
        combined, policy, as_of=interval.start, country_code=country_code, visa_type=visa_type
    )
    on_exit = engine.evaluate_intervals(
        combined, policy, as_of=interval.end, country_code=country_code, visa_type=visa_type
    )
    decisive = _more_restrictive(on_entry, on_exit)
    can_travel = on_entry.is_compliant and on_exit.is_compliant

    planned_days = interval.length()
    search_days = max(planned_days, decisive.max_days, 1)
    max_stay = max_compliant_stay(
        existing, interval.start, policy,
        engine=engine, country_code=country_code, visa_type=visa_type, search_days=search_days,
    )

    validity_warnings = _validity_warnings(policy, interval)
    warnings: list[TripWarning] = list(validity_warnings)
    suggestions: list[str] = []
    entry_date = None

    # Day counts say nothing about a trip outside the visa's validity dates
    if not validity_warnings and max_stay == 0:
        warnings.append(
            TripWarning(
                code="limit_on_entry",
                message=TRIP_MESSAGES["limit_on_entry"].format(limit=decisive.max_days),
            )
        )
        entry_date = next_entry_date(
            existing, policy, as_of=interval.start,
            engine=engine, country_code=country_code, visa_type=visa_type,
        )
        if entry_date is not None:
            suggestions.append(TRIP_MESSAGES["next_entry"].format(date=entry_date.isoformat()))
    elif not validity_warnings and planned_days > max_stay:
        warnings.append(
            TripWarning(
                code="exceeds_available",
                message=TRIP_MESSAGES["exceeds_available"].format(planned=planned_days, available=max_stay),
            )
        )
        suggestions.append(TRIP_MESSAGES["max_stay"].format(available=max_stay))

    if not can_travel:
        excess = decisive.days_over
        if excess > 0 or not validity_warnings:
            warnings.append(
                TripWarning(
                    code="violates_rule",
                    message=TRIP_MESSAGES["violates_rule"].format(limit=decisive.max_days, excess=excess),
                    excess_days=excess,
                )
            )
        if max_stay > 0:
            safe = DateInterval.of_length(interval.start, max_stay)
            suggestions.append(
                TRIP_MESSAGES["safe_range"].format(start=safe.start.isoformat(), end=safe.end.isoformat())
            )
    else:
        suggestions.append(TRIP_MESSAGES["complies"])
        suggestions.append(TRIP_MESSAGES["remaining_after"].format(remaining=on_exit.remaining_days))

    logger.debug(
        "Trip %s..%s under %s: can_travel=%s projected=%d",
        interval.start, interval.end, policy.id, can_travel, decisive.used_days,
    )
    return FutureTripValidation(
        can_travel=can_travel,
        warnings=warnings,
        suggestions=suggestions,
        projected_used_days=decisive.used_days,
        planned_days=planned_days,
        max_stay_days=max_stay,
        remaining_days_after_trip=on_exit.remaining_days,
        excess_days=decisive.days_over,
        violates_rule=not can_travel,
        next_entry_date=entry_date,
        status_on_entry=on_entry,
        status_on_exit=on_exit,
    )
