"""Tests for the compliance calculator facade."""

import pytest
from datetime import date

from stayguard.compliance import ComplianceCalculator
from stayguard.core.errors import InvalidIntervalError
from stayguard.core.ontology import CalculationMethod, DateInterval, RawVisit, Severity, StayPolicy
from stayguard.passports import DecidingFactor, PassportCandidate
from stayguard.policies import PolicyTable, default_policy


def _visit(visit_id: str, country: str, entry: date, exit: date | None = None, **extra) -> RawVisit:
    return RawVisit(id=visit_id, country=country, entry_date=entry, exit_date=exit, **extra)


# =============================================================================
# Schengen status
# =============================================================================


class TestSchengenStatus:
    """Tests for the 90/180 status."""

    def test_no_visits(self, calculator: ComplianceCalculator):
        status = calculator.calculate_schengen_status([], as_of=date(2024, 6, 1))
        assert status.used_days == 0
        assert status.remaining_days == 90
        assert status.is_compliant
        assert status.policy_id == "schengen_short_stay"

    def test_single_visit_within_window(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1), date(2024, 1, 30))]
        status = calculator.calculate_schengen_status(visits, as_of=date(2024, 6, 1))
        assert status.used_days == 30
        assert status.remaining_days == 60
        assert status.is_compliant
        assert status.window_start == date(2023, 12, 5)

    def test_ninety_days_compliant(self, calculator):
        visits = [_visit("v1", "IT", date(2024, 1, 1), date(2024, 3, 30))]
        status = calculator.calculate_schengen_status(visits, as_of=date(2024, 3, 30))
        assert status.used_days == 90
        assert status.is_compliant

    def test_ninety_one_days_not_compliant(self, calculator):
        visits = [_visit("v1", "IT", date(2024, 1, 1), date(2024, 3, 31))]
        status = calculator.calculate_schengen_status(visits, as_of=date(2024, 3, 31))
        assert not status.is_compliant
        assert status.remaining_days == -1

    def test_member_states_share_limit_and_others_ignored(self, calculator):
        visits = [
            _visit("fr", "FR", date(2024, 1, 1), date(2024, 1, 10)),
            _visit("de", "Germany", date(2024, 1, 5), date(2024, 1, 15)),
            _visit("jp", "JP", date(2024, 1, 20), date(2024, 1, 30)),
        ]
        status = calculator.calculate_schengen_status(visits, as_of=date(2024, 6, 1))
        assert status.used_days == 15

    def test_strict_mode_raises(self, calculator):
        visits = [_visit("bad", "FR", date(2024, 1, 10), date(2024, 1, 1))]
        with pytest.raises(InvalidIntervalError):
            calculator.calculate_schengen_status(visits, as_of=date(2024, 6, 1))


# =============================================================================
# Comprehensive and per-country status
# =============================================================================


class TestComprehensiveStatus:
    """Tests for status with severity and advice."""

    def test_near_limit(self, calculator):
        visits = [_visit("v1", "ES", date(2024, 1, 1), date(2024, 3, 15))]
        result = calculator.calculate_comprehensive_status(visits, as_of=date(2024, 3, 20))
        assert result.status.used_days == 75
        assert result.severity == Severity.WARNING
        assert result.warnings == ["Only 15 days remain under the 90-day limit."]
        assert result.recommendations
        assert result.next_allowed_entry is None

    def test_at_limit_reports_next_entry(self, calculator):
        visits = [_visit("v1", "ES", date(2024, 1, 1), date(2024, 3, 30))]
        result = calculator.calculate_comprehensive_status(visits, as_of=date(2024, 3, 30))
        assert result.severity == Severity.CRITICAL
        assert result.next_allowed_entry == date(2024, 6, 29)

    def test_tolerant_mode_collects_errors(self, calculator):
        visits = [
            _visit("ok", "FR", date(2024, 1, 1), date(2024, 1, 10)),
            _visit("bad", "FR", date(2024, 2, 10), date(2024, 2, 1)),
        ]
        result = calculator.calculate_comprehensive_status(visits, as_of=date(2024, 6, 1), strict=False)
        assert result.status.used_days == 10
        assert [e.visit_id for e in result.errors] == ["bad"]

    def test_per_entry_country(self, calculator):
        visits = [_visit("v1", "US", date(2024, 1, 1))]
        result = calculator.calculate_country_status(visits, "US", as_of=date(2024, 3, 10))
        assert result.status.policy_id == "us_visa_waiver"
        assert result.status.calculation_method == CalculationMethod.PER_ENTRY
        assert result.status.used_days == 70
        assert result.status.remaining_days == 20
        assert result.severity == Severity.CAUTION

    def test_nationality_specific_policy(self, calculator):
        visits = [_visit("v1", "US", date(2024, 1, 1), date(2024, 1, 10))]
        result = calculator.calculate_country_status(visits, "US", as_of=date(2024, 2, 1), nationality="CN")
        assert result.status.policy_id == "us_visa_required_cn"

    def test_nationality_code_case_insensitive(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1), date(2024, 1, 10))]
        result = calculator.calculate_country_status(visits, "FR", as_of=date(2024, 2, 1), nationality="cn")
        assert result.status.policy_id == "schengen_short_stay_visa_cn"

    def test_member_state_evaluated_as_zone(self, calculator):
        visits = [_visit("v1", "NL", date(2024, 1, 1), date(2024, 1, 10))]
        result = calculator.calculate_country_status(visits, "Netherlands", as_of=date(2024, 2, 1))
        assert result.status.country_code == "SCHENGEN"
        assert result.status.used_days == 10

    def test_recorded_policy_id_wins(self, calculator):
        visits = [_visit("v1", "US", date(2024, 1, 1), source_policy_id="us_b1b2_visa")]
        result = calculator.calculate_country_status(visits, "US", as_of=date(2024, 1, 20))
        assert result.status.policy_id == "us_b1b2_visa"

    def test_all_statuses_most_severe_first(self, calculator):
        visits = [
            _visit("jp", "JP", date(2024, 2, 1), date(2024, 2, 10)),
            _visit("es", "ES", date(2024, 1, 1), date(2024, 3, 15)),
            _visit("th", "TH", date(2024, 5, 1), date(2024, 5, 10)),
        ]
        results = calculator.calculate_all_statuses(visits, as_of=date(2024, 3, 20))
        assert [r.status.country_code for r in results] == ["SCHENGEN", "JP"]
        assert results[0].severity == Severity.WARNING
        assert results[1].severity == Severity.NONE


# =============================================================================
# Future trips
# =============================================================================


class TestValidateFutureTrip:
    """Tests for trip validation through the facade."""

    def test_trip_exceeding_limit(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1), date(2024, 3, 25))]
        result = calculator.validate_future_trip(
            visits, DateInterval.of_length(date(2024, 4, 1), 10), now=date(2024, 3, 31)
        )
        assert not result.can_travel
        assert result.excess_days == 5
        assert any("by 5 days" in message for message in result.messages)

    def test_trip_as_visit_record(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1), date(2024, 1, 30))]
        trip = _visit("plan", "DE", date(2024, 4, 1), date(2024, 4, 10))
        result = calculator.validate_future_trip(visits, trip, now=date(2024, 3, 31))
        assert result.can_travel
        assert result.remaining_days_after_trip == 50

    def test_other_destination(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1), date(2024, 3, 25))]
        result = calculator.validate_future_trip(
            visits,
            DateInterval.of_length(date(2024, 4, 1), 10),
            now=date(2024, 3, 31),
            destination="JP",
        )
        assert result.can_travel
        assert result.status_on_exit.policy_id == "jp_visa_exempt"

    def test_open_trip_rejected(self, calculator):
        with pytest.raises(InvalidIntervalError):
            calculator.validate_future_trip([], _visit("plan", "FR", date(2024, 4, 1)), now=date(2024, 3, 31))


# =============================================================================
# Overstay warnings
# =============================================================================


class TestOverstayWarnings:
    """Tests for overstay warnings on stays in progress."""

    def test_schengen_warning(self, calculator):
        visits = [_visit("v1", "FR", date(2024, 1, 1))]
        report = calculator.check_overstay_warnings(visits, date(2024, 3, 25))
        assert report.warnings == []
        assert len(report.schengen_warnings) == 1
        warning = report.schengen_warnings[0]
        assert warning.schengen_days_used == 85
        assert warning.schengen_days_remaining == 5
        assert warning.severity == Severity.WARNING
        assert report.summary.total == 1
        assert report.summary.warning == 1

    def test_per_stay_warning(self, calculator):
        visits = [_visit("v1", "US", date(2024, 1, 1))]
        report = calculator.check_overstay_warnings(visits, date(2024, 3, 25))
        warning = report.warnings[0]
        assert warning.warning_type == "approaching"
        assert warning.days_remaining == 5
        assert warning.expected_exit_date == date(2024, 3, 30)

    def test_exceeded(self, calculator):
        visits = [_visit("v1", "TH", date(2024, 1, 1))]
        report = calculator.check_overstay_warnings(visits, date(2024, 3, 5))
        warning = report.warnings[0]
        assert warning.warning_type == "exceeded"
        assert warning.severity == Severity.CRITICAL
        assert warning.message == "Thailand stay limit exceeded by 5 days."
        assert report.summary.critical == 1

    def test_visit_limit_overrides_policy(self, calculator):
        visits = [_visit("v1", "US", date(2024, 3, 1), max_days=30)]
        report = calculator.check_overstay_warnings(visits, date(2024, 3, 29))
        warning = report.warnings[0]
        assert warning.warning_type == "imminent"
        assert warning.max_stay_days == 30
        assert warning.severity == Severity.CRITICAL

    def test_completed_and_comfortable_stays_ignored(self, calculator):
        visits = [
            _visit("done", "US", date(2024, 1, 1), date(2024, 3, 20)),
            _visit("fresh", "JP", date(2024, 3, 20)),
        ]
        report = calculator.check_overstay_warnings(visits, date(2024, 3, 25))
        assert report.summary.total == 0

    def test_visa_expiry(self, settings):
        visa = StayPolicy(
            id="vn_evisa",
            country_code="VN",
            calculation_method=CalculationMethod.VISA_VALIDITY,
            max_days_per_stay=90,
            valid_from=date(2024, 1, 1),
            valid_until=date(2024, 3, 20),
            requires_visa=True,
        )
        calculator = ComplianceCalculator(PolicyTable([visa], default=default_policy(settings)), settings=settings)
        report = calculator.check_overstay_warnings([_visit("v1", "VN", date(2024, 3, 1))], date(2024, 3, 10))
        assert [w.warning_type for w in report.warnings] == ["visa_expiring"]
        assert report.warnings[0].days_remaining == 10
        assert report.warnings[0].severity == Severity.WARNING


# =============================================================================
# Passports and policies
# =============================================================================


class TestFacadeExtras:
    """Tests for passport comparison and policy listing."""

    def test_compare_passports(self, calculator):
        passports = [
            PassportCandidate(passport_id="us", country_code="US"),
            PassportCandidate(passport_id="cn", country_code="CN"),
        ]
        result = calculator.compare_passports(passports, "FR", as_of=date(2024, 6, 1), used_days={"us": 30})
        assert result.best_passport_id == "us"
        assert result.deciding_factor == DecidingFactor.VISA_REQUIREMENT

    def test_list_policies_for_member_state(self, calculator):
        policies = calculator.list_policies("FR")
        assert policies
        assert {p.country_code for p in policies} == {"SCHENGEN"}
