"""
Compliance calculator facade.

Ties the pipeline together: raw visits are normalized, filtered to the
destination's region, evaluated against the resolved stay policy and turned
into tiered reports. Every operation takes its as-of (or "now") date
explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta
from typing import Any

from stayguard.core.config import Settings, get_settings
from stayguard.core.ontology import (
    SCHENGEN_ZONE,
    ComplianceStatus,
    DateInterval,
    RawVisit,
    Severity,
    StayPolicy,
    VisitInterval,
    country_name,
    region_for,
    resolve_country_code,
)
from stayguard.intervals import NormalizationResult, current_stay, normalize, normalize_visit
from stayguard.passports import PassportCandidate, PassportComparison, PassportOptimizer
from stayguard.planning import FutureTripValidation, next_entry_date
from stayguard.planning import validate_future_trip as simulate_trip
from stayguard.policies import CustomEvaluator, PolicyEngine, PolicyTable, load_policy_table
from stayguard.status import (
    OVERSTAY_MESSAGES,
    OVERSTAY_RECOMMENDATIONS,
    VISA_EXPIRY_NOTE,
    VISA_EXPIRY_RECOMMENDATION,
    build_report,
)

from .schemas import (
    ComprehensiveStatus,
    OverstayReport,
    OverstaySummary,
    OverstayWarning,
    SchengenOverstayWarning,
)

logger = logging.getLogger(__name__)

VisitInput = RawVisit | VisitInterval | Mapping[str, Any]

# Days-remaining thresholds for stays outside the Schengen zone
IMMINENT_DAYS = 3
NEAR_DAYS = 7
VISA_EXPIRY_NOTICE_DAYS = 30


def _overstay_tier(days_remaining: int, notice_days: int) -> tuple[str, Severity] | None:
    """Warning type and severity for the days left in a stay."""
    if days_remaining < 0:
        return "exceeded", Severity.CRITICAL
    if days_remaining <= IMMINENT_DAYS:
        return "imminent", Severity.CRITICAL
    if days_remaining <= NEAR_DAYS:
        return "approaching", Severity.WARNING
    if days_remaining <= notice_days:
        return "approaching", Severity.CAUTION
    return None


def _overstay_message(warning_type: str, country: str, days_remaining: int) -> str:
    days = abs(days_remaining) if warning_type == "exceeded" else days_remaining
    return OVERSTAY_MESSAGES[warning_type].format(country=country, days=days)


def _closed_at(intervals: Iterable[VisitInterval], as_of: date) -> list[VisitInterval]:
    """Close open-ended visits on ``as_of`` (the traveler leaves that day)."""
    closed = []
    for visit in intervals:
        if visit.end is None or visit.end > as_of:
            if visit.start > as_of:
                continue
            visit = visit.model_copy(update={"interval": DateInterval(start=visit.start, end=as_of)})
        closed.append(visit)
    return closed


class ComplianceCalculator:
    """
    Entry point for stay-limit compliance.

    Args:
        table: Policy table (loaded from ``settings.policies_dir`` if omitted)
        settings: Engine settings
        custom_evaluators: Strategies for ``custom`` policies, keyed by policy id
        default_custom: Strategy for ``custom`` policies without a keyed entry
    """

    def __init__(
        self,
        table: PolicyTable | None = None,
        *,
        settings: Settings | None = None,
        custom_evaluators: Mapping[str, CustomEvaluator] | None = None,
        default_custom: CustomEvaluator | None = None,
    ):
        self.settings = settings or get_settings()
        self.table = table if table is not None else load_policy_table(self.settings)
        self.engine = PolicyEngine(
            self.table,
            custom_evaluators=custom_evaluators,
            default_custom=default_custom,
            settings=self.settings,
        )
        self.optimizer = PassportOptimizer(self.engine)

    # -------------------------------------------------------------------------
    # Normalization and policy lookup
    # -------------------------------------------------------------------------

    def normalize(self, visits: Iterable[VisitInput], *, strict: bool | None = None) -> NormalizationResult:
        """Normalize visits, using the configured mode unless ``strict`` is given."""
        strict = self.settings.strict_mode if strict is None else strict
        return normalize(visits, strict=strict)

    def policy_for(
        self,
        region: str,
        visa_type: str | None = None,
        nationality: str | None = None,
        intervals: Sequence[VisitInterval] = (),
    ) -> StayPolicy:
        """Policy for a region; a policy id recorded on the latest visit wins."""
        for visit in reversed(intervals):
            if visit.source_policy_id:
                policy = self.table.get(visit.source_policy_id)
                if policy is not None:
                    return policy
                logger.warning(
                    "Visit %s references unknown policy %s", visit.visit_id, visit.source_policy_id
                )
                break
        return self.engine.resolve(region, visa_type, nationality)

    @staticmethod
    def _in_region(intervals: Iterable[VisitInterval], region: str) -> list[VisitInterval]:
        return [visit for visit in intervals if visit.region == region]

    def _evaluate_region(
        self,
        intervals: Sequence[VisitInterval],
        region: str,
        *,
        as_of: date,
        visa_type: str | None,
        nationality: str | None,
    ) -> tuple[ComplianceStatus, StayPolicy]:
        relevant = [visit for visit in intervals if visit.start <= as_of]
        if visa_type is None and relevant:
            visa_type = relevant[-1].visa_type
        policy = self.policy_for(region, visa_type, nationality, relevant)
        status = self.engine.evaluate_intervals(
            intervals, policy, as_of=as_of, country_code=region, visa_type=visa_type
        )
        return status, policy

    def _comprehensive(
        self,
        status: ComplianceStatus,
        policy: StayPolicy,
        intervals: Sequence[VisitInterval],
        errors: list,
    ) -> ComprehensiveStatus:
        report = build_report(status)

        next_allowed = None
        if status.remaining_days <= 0:
            as_of = status.as_of_date
            next_allowed = next_entry_date(
                _closed_at(intervals, as_of),
                policy,
                as_of=as_of + timedelta(days=1),
                engine=self.engine,
                country_code=status.country_code,
                visa_type=status.visa_type,
            )

        return ComprehensiveStatus(
            status=status,
            severity=report.severity,
            usage_ratio=report.usage_ratio,
            warnings=report.warnings,
            recommendations=report.recommendations,
            next_allowed_entry=next_allowed,
            errors=errors,
        )

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def calculate_schengen_status(
        self,
        visits: Iterable[VisitInput],
        *,
        as_of: date,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> ComplianceStatus:
        """
        Schengen 90/180 status as of a date.

        Visits to all member states count together; overlapping records are
        counted once.
        """
        result = self.normalize(visits, strict=strict)
        intervals = self._in_region(result.intervals, SCHENGEN_ZONE)
        status, _ = self._evaluate_region(
            intervals, SCHENGEN_ZONE, as_of=as_of, visa_type=None, nationality=nationality
        )
        return status

    def calculate_country_status(
        self,
        visits: Iterable[VisitInput],
        country_code: str,
        *,
        as_of: date,
        visa_type: str | None = None,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> ComprehensiveStatus:
        """
        Status for one destination, with severity, warnings and advice.

        Schengen member states are evaluated as the zone.
        """
        region = region_for(resolve_country_code(country_code))
        result = self.normalize(visits, strict=strict)
        intervals = self._in_region(result.intervals, region)
        status, policy = self._evaluate_region(
            intervals, region, as_of=as_of, visa_type=visa_type, nationality=nationality
        )
        return self._comprehensive(status, policy, intervals, result.errors)

    def calculate_comprehensive_status(
        self,
        visits: Iterable[VisitInput],
        *,
        as_of: date,
        visa_type: str | None = None,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> ComprehensiveStatus:
        """Schengen status with severity tier, warnings and recommendations."""
        return self.calculate_country_status(
            visits, SCHENGEN_ZONE, as_of=as_of, visa_type=visa_type, nationality=nationality, strict=strict
        )

    def calculate_all_statuses(
        self,
        visits: Iterable[VisitInput],
        *,
        as_of: date,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> list[ComprehensiveStatus]:
        """
        Status for every region visited on or before ``as_of``, most severe first.

        Records skipped in tolerant mode are attached to the first status.
        """
        result = self.normalize(visits, strict=strict)

        regions: dict[str, list[VisitInterval]] = {}
        for visit in result.intervals:
            if visit.start <= as_of:
                regions.setdefault(visit.region, [])
        for visit in result.intervals:
            if visit.region in regions:
                regions[visit.region].append(visit)

        statuses = []
        for region, intervals in regions.items():
            status, policy = self._evaluate_region(
                intervals, region, as_of=as_of, visa_type=None, nationality=nationality
            )
            statuses.append(self._comprehensive(status, policy, intervals, []))

        statuses.sort(key=lambda s: (-s.severity.rank, s.status.country_code))
        if statuses:
            statuses[0].errors.extend(result.errors)
        return statuses

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def validate_future_trip(
        self,
        visits: Iterable[VisitInput],
        candidate_trip: VisitInput | DateInterval,
        *,
        now: date,
        destination: str | None = None,
        visa_type: str | None = None,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> FutureTripValidation:
        """
        Predict whether a planned trip would breach the destination's limit.

        ``candidate_trip`` is either a visit record (its country is the
        destination) or a bare interval for ``destination`` (default: the
        Schengen zone).

        Raises:
            InvalidIntervalError: The trip is open-ended, malformed, or starts before ``now``
        """
        if isinstance(candidate_trip, DateInterval):
            trip: VisitInterval | DateInterval = candidate_trip
            region = region_for(resolve_country_code(destination or SCHENGEN_ZONE))
        else:
            trip = normalize_visit(candidate_trip)
            region = trip.region
            visa_type = visa_type or trip.visa_type

        existing = self._in_region(self.normalize(visits, strict=strict).intervals, region)
        policy = self.policy_for(region, visa_type, nationality)
        return simulate_trip(
            existing,
            trip,
            policy,
            now=now,
            engine=self.engine,
            country_code=region,
            visa_type=visa_type,
        )

    # -------------------------------------------------------------------------
    # Overstay warnings
    # -------------------------------------------------------------------------

    def check_overstay_warnings(
        self,
        visits: Iterable[VisitInput],
        as_of: date,
        *,
        nationality: str | None = None,
        strict: bool | None = None,
    ) -> OverstayReport:
        """
        Warnings for stays in progress on ``as_of``.

        Schengen stays are checked against the zone's rolling limit; other
        stays against the visit's own ``max_days`` or the policy's per-stay
        limit. Visa-validity policies also warn when the visa is about to
        expire.
        """
        result = self.normalize(visits, strict=strict)
        notice_days = self.settings.overstay_notice_days

        regions: dict[str, list[VisitInterval]] = {}
        for visit in result.intervals:
            regions.setdefault(visit.region, []).append(visit)

        warnings: list[OverstayWarning] = []
        schengen_warnings: list[SchengenOverstayWarning] = []

        for region, intervals in regions.items():
            stay = current_stay(intervals, as_of)
            in_progress = [
                v for v in intervals if v.start <= as_of and v.interval.resolved_end(as_of) >= as_of
            ]
            if stay is None or not in_progress:
                continue
            latest = in_progress[-1]
            status, policy = self._evaluate_region(
                intervals, region, as_of=as_of, visa_type=latest.visa_type, nationality=nationality
            )

            if region == SCHENGEN_ZONE:
                warning = self._schengen_warning(status, latest, stay, as_of, notice_days)
                if warning is not None:
                    schengen_warnings.append(warning)
            else:
                warning = self._stay_warning(policy, latest, stay, as_of, notice_days)
                if warning is not None:
                    warnings.append(warning)

            expiry = self._expiry_warning(policy, region, latest, as_of)
            if expiry is not None:
                warnings.append(expiry)

        every = [*warnings, *schengen_warnings]
        summary = OverstaySummary(
            total=len(every),
            critical=sum(1 for w in every if w.severity is Severity.CRITICAL),
            warning=sum(1 for w in every if w.severity is Severity.WARNING),
            caution=sum(1 for w in every if w.severity is Severity.CAUTION),
        )
        logger.debug("Overstay check as of %s: %d warnings", as_of, summary.total)
        return OverstayReport(
            warnings=warnings,
            schengen_warnings=schengen_warnings,
            summary=summary,
            errors=result.errors,
        )

    def _stay_warning(
        self,
        policy: StayPolicy,
        visit: VisitInterval,
        stay: DateInterval,
        as_of: date,
        notice_days: int,
    ) -> OverstayWarning | None:
        max_days = visit.max_days if visit.max_days is not None else policy.max_days_per_stay
        stay_days = stay.length(as_of)
        days_remaining = max_days - stay_days
        tier = _overstay_tier(days_remaining, notice_days)
        if tier is None:
            return None

        warning_type, severity = tier
        name = country_name(visit.country_code)
        expected_exit = stay.start + timedelta(days=max_days - 1)
        message = _overstay_message(warning_type, name, days_remaining)
        recommendations = list(OVERSTAY_RECOMMENDATIONS[warning_type])

        if policy.valid_until is not None and policy.valid_until < expected_exit:
            severity = Severity.CRITICAL
            message += VISA_EXPIRY_NOTE.format(date=policy.valid_until.isoformat())
            recommendations.insert(0, VISA_EXPIRY_RECOMMENDATION)

        return OverstayWarning(
            id=f"{visit.visit_id}-stay",
            visit_id=visit.visit_id,
            country_code=visit.country_code,
            country_name=name,
            warning_type=warning_type,
            severity=severity,
            current_stay_days=stay_days,
            max_stay_days=max_days,
            days_remaining=days_remaining,
            entry_date=stay.start,
            expected_exit_date=expected_exit,
            visa_expiry_date=policy.valid_until,
            message=message,
            recommendations=recommendations,
        )

    def _schengen_warning(
        self,
        status: ComplianceStatus,
        visit: VisitInterval,
        stay: DateInterval,
        as_of: date,
        notice_days: int,
    ) -> SchengenOverstayWarning | None:
        days_remaining = status.remaining_days
        if days_remaining >= notice_days:
            return None
        warning_type, severity = _overstay_tier(days_remaining, notice_days) or ("approaching", Severity.CAUTION)
        name = country_name(SCHENGEN_ZONE)

        return SchengenOverstayWarning(
            id=f"schengen-{visit.visit_id}",
            visit_id=visit.visit_id,
            country_code=visit.country_code,
            country_name=name,
            warning_type=warning_type,
            severity=severity,
            current_stay_days=stay.length(as_of),
            max_stay_days=status.max_days,
            days_remaining=days_remaining,
            entry_date=stay.start,
            expected_exit_date=as_of + timedelta(days=max(days_remaining, 0)),
            message=_overstay_message(warning_type, name, days_remaining),
            recommendations=list(OVERSTAY_RECOMMENDATIONS[warning_type]),
            schengen_days_used=status.used_days,
            schengen_days_remaining=days_remaining,
            window_start=status.window_start,
            window_end=status.window_end,
        )

    @staticmethod
    def _expiry_warning(
        policy: StayPolicy,
        region: str,
        visit: VisitInterval,
        as_of: date,
    ) -> OverstayWarning | None:
        if policy.valid_until is None:
            return None
        days_until = (policy.valid_until - as_of).days
        if not 0 < days_until <= VISA_EXPIRY_NOTICE_DAYS:
            return None

        name = country_name(region)
        return OverstayWarning(
            id=f"{policy.id}-expiry",
            visit_id=visit.visit_id,
            country_code=region,
            country_name=name,
            warning_type="visa_expiring",
            severity=Severity.CRITICAL if days_until <= NEAR_DAYS else Severity.WARNING,
            current_stay_days=0,
            max_stay_days=policy.max_days_per_stay,
            days_remaining=days_until,
            entry_date=as_of,
            expected_exit_date=policy.valid_until,
            visa_expiry_date=policy.valid_until,
            message=OVERSTAY_MESSAGES["visa_expiring"].format(country=name, days=days_until),
            recommendations=list(OVERSTAY_RECOMMENDATIONS["visa_expiring"]),
        )

    # -------------------------------------------------------------------------
    # Passports
    # -------------------------------------------------------------------------

    def compare_passports(
        self,
        passports: Sequence[PassportCandidate],
        destination: str,
        *,
        as_of: date,
        used_days: Mapping[str, int] | None = None,
        visa_type: str | None = None,
    ) -> PassportComparison:
        """Rank passports for a destination (see PassportOptimizer.compare)."""
        return self.optimizer.compare(
            passports, destination, used_days, as_of=as_of, visa_type=visa_type
        )

    def list_policies(self, country_code: str | None = None) -> list[StayPolicy]:
        """Loaded policies, optionally for one country or region."""
        if country_code is None:
            return self.table.all()
        return self.table.for_country(resolve_country_code(country_code))
