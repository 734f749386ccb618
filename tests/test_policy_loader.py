"""Tests for the YAML policy loader and policy table."""

import pytest
from pathlib import Path

from stayguard.core.errors import PolicyLoadError, PolicyNotFoundError
from stayguard.core.ontology import CalculationMethod, StayPolicy
from stayguard.policies import DEFAULT_POLICY_ID, PolicyLoader, PolicyTable, default_policy


ROLLING_POLICY_YAML = """
id: test_rolling
country_code: JP
calculation_method: rolling_window
max_days_per_stay: 90
max_days_per_period: 90
period_days: 180
"""


class TestPolicyLoader:
    """Tests for loading policy files."""

    def test_load_bundled_directory(self, policies_dir: Path):
        loader = PolicyLoader(policies_dir)
        policies = loader.load_directory()
        ids = {p.id for p in policies}
        assert {"schengen_short_stay", "us_visa_waiver", "th_visa_exempt"} <= ids
        assert loader.get_policy("schengen_short_stay").period_days == 180

    def test_load_single_policy_file(self, tmp_path: Path):
        path = tmp_path / "single.yaml"
        path.write_text(ROLLING_POLICY_YAML)
        policies = PolicyLoader().load_file(path)
        assert len(policies) == 1
        assert policies[0].calculation_method == CalculationMethod.ROLLING_WINDOW

    def test_load_list_file(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text(
            "- id: a\n  country_code: SG\n  calculation_method: per_entry\n  max_days_per_stay: 30\n"
            "- id: b\n  country_code: PH\n  calculation_method: per_entry\n  max_days_per_stay: 30\n"
        )
        assert [p.id for p in PolicyLoader().load_file(path)] == ["a", "b"]

    def test_visa_type_lowercased(self, tmp_path: Path):
        path = tmp_path / "visa.yaml"
        path.write_text(ROLLING_POLICY_YAML + "visa_type: Tourist\n")
        assert PolicyLoader().load_file(path)[0].visa_type == "tourist"

    def test_invalid_policy_rejected(self, tmp_path: Path):
        path = tmp_path / "invalid.yaml"
        path.write_text("id: broken\ncountry_code: JP\nmax_days_per_stay: 90\n")
        with pytest.raises(PolicyLoadError):
            PolicyLoader().load_file(path)

    def test_invalid_yaml_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("id: [unclosed\n")
        with pytest.raises(PolicyLoadError):
            PolicyLoader().load_file(path)

    def test_directory_skips_broken_files(self, tmp_path: Path):
        (tmp_path / "good.yaml").write_text(ROLLING_POLICY_YAML)
        (tmp_path / "bad.yaml").write_text("- just a string\n")
        policies = PolicyLoader(tmp_path).load_directory()
        assert [p.id for p in policies] == ["test_rolling"]

    def test_partially_invalid_file_registers_nothing(self, tmp_path: Path):
        path = tmp_path / "mixed.yaml"
        path.write_text(
            "- id: good\n  country_code: SG\n  calculation_method: per_entry\n  max_days_per_stay: 30\n"
            "- id: broken\n  country_code: PH\n  max_days_per_stay: 30\n"
        )
        loader = PolicyLoader(tmp_path)
        assert loader.load_directory() == []
        assert loader.get_policy("good") is None

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            PolicyLoader().load_file(tmp_path / "missing.yaml")

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            PolicyLoader(tmp_path / "missing").load_directory()


class TestPolicyTable:
    """Tests for policy resolution."""

    def test_member_state_resolves_to_schengen(self, policy_table: PolicyTable):
        assert policy_table.resolve("FR").id == "schengen_short_stay"

    def test_nationality_specific_policy_wins(self, policy_table: PolicyTable):
        assert policy_table.resolve("FR", nationality="CN").id == "schengen_short_stay_visa_cn"
        assert policy_table.resolve("US", nationality="IN").id == "us_visa_required_in"

    def test_nationality_case_insensitive(self, policy_table: PolicyTable):
        assert policy_table.resolve("FR", nationality="cn").id == "schengen_short_stay_visa_cn"
        assert policy_table.resolve("US", nationality=" in ").id == "us_visa_required_in"

    def test_generic_policy_for_other_nationalities(self, policy_table: PolicyTable):
        assert policy_table.resolve("US", nationality="GB").id == "us_visa_waiver"

    def test_visa_type_match(self, policy_table: PolicyTable):
        assert policy_table.resolve("US", "b1/b2").id == "us_b1b2_visa"
        assert policy_table.resolve("US", "B1/B2").id == "us_b1b2_visa"
        assert policy_table.resolve("DE", "national_d").id == "schengen_national_d_visa"

    def test_unknown_visa_type_falls_back_to_any(self, policy_table: PolicyTable):
        assert policy_table.resolve("US", "tourist").id == "us_visa_waiver"

    def test_unknown_country_uses_default(self, policy_table: PolicyTable):
        policy = policy_table.resolve("ZZ")
        assert policy.id == DEFAULT_POLICY_ID
        assert policy.limit == 90

    def test_no_default_raises(self):
        table = PolicyTable([])
        with pytest.raises(PolicyNotFoundError):
            table.resolve("ZZ")

    def test_duplicate_ids_rejected(self):
        policy = StayPolicy(
            id="dup", country_code="SG", calculation_method="per_entry", max_days_per_stay=30
        )
        with pytest.raises(PolicyLoadError):
            PolicyTable([policy, policy])

    def test_for_country_includes_region(self, policy_table: PolicyTable):
        ids = {p.id for p in policy_table.for_country("DE")}
        assert "schengen_short_stay" in ids
        assert all(p.country_code == "SCHENGEN" for p in policy_table.for_country("DE"))

    def test_get_default_by_id(self, policy_table: PolicyTable):
        assert policy_table.get(DEFAULT_POLICY_ID) is policy_table.default


class TestDefaultPolicy:
    """Tests for the configured default."""

    def test_default_rolling_90_180(self, settings):
        policy = default_policy(settings)
        assert policy.calculation_method == CalculationMethod.ROLLING_WINDOW
        assert policy.max_days_per_period == 90
        assert policy.period_days == 180
