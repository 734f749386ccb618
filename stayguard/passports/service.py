"""
Multi-passport optimizer.

Evaluates each of a traveler's passports against the destination's policy for
that nationality and ranks them: visa-free and comfortably compliant first,
then visa-free but near the limit, then visa-required. Passports already over
their limit rank after every compliant one. Ties are broken by remaining days,
then visa fee, then processing time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import date

from stayguard.core.ontology import (
    ANY_VISA_TYPE,
    Severity,
    StayPolicy,
    region_for,
    resolve_country_code,
)
from stayguard.policies import PolicyEngine
from stayguard.status import classify_severity

from .schemas import (
    DecidingFactor,
    PassportCandidate,
    PassportComparison,
    PassportEvaluation,
    PassportTier,
    Savings,
)

logger = logging.getLogger(__name__)


TIER_BASE_SCORE: dict[PassportTier, float] = {
    PassportTier.VISA_FREE: 70.0,
    PassportTier.VISA_FREE_NEAR_LIMIT: 40.0,
    PassportTier.VISA_REQUIRED: 10.0,
}

REASONS: dict[DecidingFactor, str] = {
    DecidingFactor.VISA_REQUIREMENT: "Passport {passport} allows visa-free entry to {destination}.",
    DecidingFactor.STAY_HEADROOM: "Passport {passport} is comfortably within the stay limit for {destination}.",
    DecidingFactor.REMAINING_DAYS: "Passport {passport} leaves the most days available in {destination}.",
    DecidingFactor.VISA_FEE: "Passport {passport} has the lowest visa fee for {destination}.",
    DecidingFactor.PROCESSING_TIME: "Passport {passport} has the shortest visa processing time for {destination}.",
    DecidingFactor.TIE: "Passports are equivalent for {destination}; {passport} is listed first.",
    DecidingFactor.SINGLE_CANDIDATE: "Passport {passport} is the only candidate for {destination}.",
}


def _missing_last(value: float | None) -> float:
    return math.inf if value is None else value


class PassportOptimizer:
    """Ranks passports for a destination using the policy engine."""

    def __init__(self, engine: PolicyEngine | None = None):
        self.engine = engine or PolicyEngine()

    def policy_for(
        self,
        passport: PassportCandidate,
        destination: str,
        visa_type: str | None = None,
    ) -> StayPolicy:
        """Policy for a passport: its own applicable policies first, then the table."""
        codes = (destination, region_for(destination))
        wanted = {ANY_VISA_TYPE, (visa_type or ANY_VISA_TYPE).lower()}
        for code in codes:
            for policy in passport.applicable_policies:
                if policy.country_code == code and policy.visa_type.lower() in wanted:
                    return policy
        return self.engine.resolve(destination, visa_type, nationality=passport.country_code)

    def evaluate_passport(
        self,
        passport: PassportCandidate,
        destination: str,
        used_days: int,
        *,
        as_of: date,
        visa_type: str | None = None,
    ) -> PassportEvaluation:
        """Evaluate one passport (rank and recommendation are provisional)."""
        policy = self.policy_for(passport, destination, visa_type)
        status = self.engine.evaluate(destination, visa_type, used_days, policy, as_of=as_of)
        severity = classify_severity(status)

        if not policy.is_visa_free:
            tier = PassportTier.VISA_REQUIRED
        elif status.is_compliant and severity in (Severity.NONE, Severity.CAUTION):
            tier = PassportTier.VISA_FREE
        else:
            tier = PassportTier.VISA_FREE_NEAR_LIMIT

        headroom = 0.0
        if status.max_days > 0:
            headroom = min(max(status.remaining_days / status.max_days, 0.0), 1.0)
        score = round(TIER_BASE_SCORE[tier] + 30.0 * headroom, 1) if status.is_compliant else 0.0

        return PassportEvaluation(
            passport_id=passport.passport_id,
            country_code=passport.country_code,
            policy_id=policy.id,
            tier=tier,
            visa_required=policy.requires_visa,
            severity=severity,
            remaining_days=status.remaining_days,
            visa_fee=passport.visa_fee if passport.visa_fee is not None else policy.visa_fee,
            processing_days=(
                passport.processing_days if passport.processing_days is not None else policy.processing_days
            ),
            status=status,
            score=score,
            rank=1,
            recommendation="good",
        )

    def compare(
        self,
        passports: Sequence[PassportCandidate],
        destination: str,
        used_days_per_passport: Mapping[str, int] | None = None,
        *,
        as_of: date,
        visa_type: str | None = None,
    ) -> PassportComparison:
        """
        Rank passports for a destination.

        Args:
            passports: Candidate passports (at least one)
            destination: Destination country code or name
            used_days_per_passport: Days already used per passport id (default 0)
            as_of: Evaluation date
            visa_type: Intended visa type, if any

        Returns:
            PassportComparison with ranked evaluations and the deciding factor
        """
        if not passports:
            raise ValueError("At least one passport is required for a comparison")

        destination = resolve_country_code(destination)
        used = used_days_per_passport or {}

        evaluations = [
            self.evaluate_passport(
                passport, destination, used.get(passport.passport_id, 0), as_of=as_of, visa_type=visa_type
            )
            for passport in passports
        ]
        evaluations.sort(key=self._ranking_key)

        ranked = []
        for index, evaluation in enumerate(evaluations, start=1):
            if not evaluation.status.is_compliant:
                recommendation = "avoid"
            elif index == 1:
                recommendation = "best"
            elif evaluation.tier is PassportTier.VISA_REQUIRED:
                recommendation = "avoid"
            else:
                recommendation = "good"
            ranked.append(evaluation.model_copy(update={"rank": index, "recommendation": recommendation}))

        best = ranked[0]
        runner_up = ranked[1] if len(ranked) > 1 else None
        factor = self._deciding_factor(best, runner_up)

        logger.debug(
            "Passport comparison for %s: best=%s factor=%s", destination, best.passport_id, factor.value
        )
        return PassportComparison(
            destination=destination,
            as_of=as_of,
            evaluations=ranked,
            best_passport_id=best.passport_id,
            deciding_factor=factor,
            reason=REASONS[factor].format(passport=best.passport_id, destination=destination),
            savings=self._savings(best, runner_up),
        )

    @staticmethod
    def _ranking_key(evaluation: PassportEvaluation) -> tuple:
        # Passports already over their limit cannot be used to enter
        return (
            not evaluation.status.is_compliant,
            evaluation.tier.rank,
            -evaluation.remaining_days,
            _missing_last(evaluation.visa_fee),
            _missing_last(evaluation.processing_days),
            evaluation.passport_id,
        )

    @staticmethod
    def _deciding_factor(best: PassportEvaluation, runner_up: PassportEvaluation | None) -> DecidingFactor:
        if runner_up is None:
            return DecidingFactor.SINGLE_CANDIDATE
        if best.status.is_compliant != runner_up.status.is_compliant:
            return DecidingFactor.STAY_HEADROOM
        if best.tier is not runner_up.tier:
            if runner_up.tier is PassportTier.VISA_REQUIRED:
                return DecidingFactor.VISA_REQUIREMENT
            return DecidingFactor.STAY_HEADROOM
        if best.remaining_days != runner_up.remaining_days:
            return DecidingFactor.REMAINING_DAYS
        if _missing_last(best.visa_fee) != _missing_last(runner_up.visa_fee):
            return DecidingFactor.VISA_FEE
        if _missing_last(best.processing_days) != _missing_last(runner_up.processing_days):
            return DecidingFactor.PROCESSING_TIME
        return DecidingFactor.TIE

    @staticmethod
    def _savings(best: PassportEvaluation, runner_up: PassportEvaluation | None) -> Savings | None:
        if runner_up is None:
            return None
        fee = None
        if best.visa_fee is not None and runner_up.visa_fee is not None:
            fee = runner_up.visa_fee - best.visa_fee
        elif runner_up.visa_fee is not None and not best.visa_required:
            fee = runner_up.visa_fee
        processing = None
        if best.processing_days is not None and runner_up.processing_days is not None:
            processing = runner_up.processing_days - best.processing_days
        elif runner_up.processing_days is not None and not best.visa_required:
            processing = runner_up.processing_days
        return Savings(
            visa_fee=fee,
            processing_days=processing,
            extra_days=best.remaining_days - runner_up.remaining_days,
        )
