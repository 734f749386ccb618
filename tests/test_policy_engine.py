"""Tests for policy evaluation."""

import pytest
from datetime import date

from stayguard.core.errors import InvalidWindowError, PolicyNotFoundError, UnsupportedPolicyError
from stayguard.core.ontology import CalculationMethod, ComplianceStatus, StayPolicy
from stayguard.policies import CustomContext, PolicyEngine, PolicyTable


def _policy(**overrides) -> StayPolicy:
    data = {
        "id": "test_policy",
        "country_code": "SG",
        "calculation_method": CalculationMethod.PER_ENTRY,
        "max_days_per_stay": 30,
    }
    data.update(overrides)
    return StayPolicy(**data)


class TestRollingWindow:
    """Tests for the Schengen-style rolling window."""

    def test_no_visits(self, engine: PolicyEngine, schengen_policy: StayPolicy):
        status = engine.evaluate_intervals([], schengen_policy, as_of=date(2024, 6, 1))
        assert status.used_days == 0
        assert status.remaining_days == 90
        assert status.is_compliant
        assert status.window_start == date(2023, 12, 5)
        assert status.window_end == date(2024, 6, 1)

    def test_exactly_at_limit_is_compliant(self, engine, schengen_policy, make_visit):
        visits = [make_visit("FR", date(2024, 1, 1), 90)]
        status = engine.evaluate_intervals(visits, schengen_policy, as_of=date(2024, 3, 30))
        assert status.used_days == 90
        assert status.remaining_days == 0
        assert status.is_compliant

    def test_one_day_over_limit(self, engine, schengen_policy, make_visit):
        visits = [make_visit("FR", date(2024, 1, 1), 91)]
        status = engine.evaluate_intervals(visits, schengen_policy, as_of=date(2024, 3, 31))
        assert status.used_days == 91
        assert status.remaining_days == -1
        assert not status.is_compliant
        assert status.days_over == 1

    def test_bare_count(self, engine, schengen_policy):
        as_of = date(2024, 6, 1)
        assert engine.evaluate("SCHENGEN", None, 90, schengen_policy, as_of=as_of).is_compliant
        assert not engine.evaluate("SCHENGEN", None, 91, schengen_policy, as_of=as_of).is_compliant

    def test_zero_period_rejected(self, engine, make_visit):
        policy = _policy(
            calculation_method=CalculationMethod.ROLLING_WINDOW, max_days_per_period=90, period_days=0
        )
        with pytest.raises(InvalidWindowError):
            engine.evaluate_intervals([make_visit("SG", date(2024, 1, 1), 5)], policy, as_of=date(2024, 2, 1))
        with pytest.raises(InvalidWindowError):
            engine.evaluate("SG", None, 5, policy, as_of=date(2024, 2, 1))

    def test_missing_period_uses_default(self, engine):
        policy = _policy(calculation_method=CalculationMethod.ROLLING_WINDOW, max_days_per_period=90)
        assert engine.period_days(policy) == 180


class TestCalendarYear:
    """Tests for calendar-year limits."""

    def test_counts_from_january_first(self, engine, policy_table, make_visit):
        policy = policy_table.get("th_visa_exempt")
        visits = [make_visit("TH", date(2023, 12, 20), 22)]
        status = engine.evaluate_intervals(visits, policy, as_of=date(2024, 3, 1))
        assert status.used_days == 10
        assert status.remaining_days == 170
        assert status.window_start == date(2024, 1, 1)
        assert status.window_end == date(2024, 12, 31)


class TestPerEntry:
    """Tests for per-entry and entry-based limits."""

    def test_counts_current_stay_only(self, engine, policy_table, make_visit):
        policy = policy_table.get("us_visa_waiver")
        visits = [
            make_visit("US", date(2024, 1, 1), 20),
            make_visit("US", date(2024, 3, 1)),
        ]
        status = engine.evaluate_intervals(visits, policy, as_of=date(2024, 3, 10))
        assert status.used_days == 10
        assert status.remaining_days == 80
        assert status.window_start == date(2024, 3, 1)

    def test_long_stay_exceeds(self, engine, policy_table, make_visit):
        policy = policy_table.get("us_visa_waiver")
        status = engine.evaluate_intervals(
            [make_visit("US", date(2024, 1, 1))], policy, as_of=date(2024, 4, 5)
        )
        assert status.used_days == 96
        assert status.remaining_days == -6
        assert not status.is_compliant

    def test_entry_based(self, engine, make_visit):
        policy = _policy(calculation_method=CalculationMethod.ENTRY_BASED)
        status = engine.evaluate_intervals(
            [make_visit("SG", date(2024, 1, 1), 30)], policy, as_of=date(2024, 1, 30)
        )
        assert status.used_days == 30
        assert status.remaining_days == 0
        assert status.is_compliant


class TestVisaValidity:
    """Tests for visa-validity limits."""

    @pytest.fixture
    def visa_policy(self) -> StayPolicy:
        return _policy(
            id="cn_visa",
            country_code="CN",
            calculation_method=CalculationMethod.VISA_VALIDITY,
            valid_from=date(2024, 1, 1),
            valid_until=date(2024, 6, 30),
            requires_visa=True,
        )

    def test_within_validity(self, engine, visa_policy, make_visit):
        status = engine.evaluate_intervals(
            [make_visit("CN", date(2024, 3, 1))], visa_policy, as_of=date(2024, 3, 10)
        )
        assert status.used_days == 10
        assert status.remaining_days == 20
        assert status.is_compliant
        assert status.window_start == date(2024, 1, 1)
        assert status.window_end == date(2024, 6, 30)

    def test_remaining_capped_by_expiry(self, engine, visa_policy, make_visit):
        status = engine.evaluate_intervals(
            [make_visit("CN", date(2024, 6, 20))], visa_policy, as_of=date(2024, 6, 25)
        )
        assert status.used_days == 6
        assert status.remaining_days == 5

    def test_after_expiry(self, engine, visa_policy, make_visit):
        status = engine.evaluate_intervals(
            [make_visit("CN", date(2024, 6, 25))], visa_policy, as_of=date(2024, 7, 2)
        )
        assert not status.is_compliant
        assert status.remaining_days == -2


class TestCustom:
    """Tests for custom strategies."""

    @pytest.fixture
    def custom_policy(self) -> StayPolicy:
        return _policy(id="custom_x", calculation_method=CalculationMethod.CUSTOM, max_days_per_stay=5)

    @staticmethod
    def _count_visits(context: CustomContext) -> ComplianceStatus:
        used = len(context.intervals)
        limit = context.policy.max_days_per_stay
        return ComplianceStatus(
            used_days=used,
            remaining_days=limit - used,
            is_compliant=used <= limit,
            window_start=context.as_of,
            window_end=context.as_of,
            as_of_date=context.as_of,
            country_code=context.country_code,
            calculation_method=CalculationMethod.CUSTOM,
            policy_id=context.policy.id,
            max_days=limit,
        )

    def test_delegates_to_registered_strategy(self, policy_table, settings, custom_policy, make_visit):
        engine = PolicyEngine(policy_table, custom_evaluators={"custom_x": self._count_visits}, settings=settings)
        visits = [make_visit("SG", date(2024, 1, 1), 2), make_visit("SG", date(2024, 2, 1), 2)]
        status = engine.evaluate_intervals(visits, custom_policy, as_of=date(2024, 3, 1))
        assert status.used_days == 2
        assert status.remaining_days == 3

    def test_default_strategy(self, policy_table, settings, custom_policy):
        engine = PolicyEngine(policy_table, default_custom=self._count_visits, settings=settings)
        status = engine.evaluate_intervals([], custom_policy, as_of=date(2024, 3, 1))
        assert status.used_days == 0

    def test_missing_strategy(self, engine, custom_policy):
        with pytest.raises(UnsupportedPolicyError):
            engine.evaluate_intervals([], custom_policy, as_of=date(2024, 3, 1))


class TestResolve:
    """Tests for engine-level policy lookup."""

    def test_nationality_tie_break(self, engine):
        assert engine.resolve("FR", nationality="IN").id == "schengen_short_stay_visa_in"

    def test_no_table(self, settings):
        with pytest.raises(PolicyNotFoundError):
            PolicyEngine(settings=settings).resolve("FR")

    def test_no_default(self, settings):
        engine = PolicyEngine(PolicyTable([]), settings=settings)
        with pytest.raises(PolicyNotFoundError):
            engine.resolve("FR")
