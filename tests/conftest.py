"""Pytest fixtures for test suite."""

import pytest
from datetime import date
from pathlib import Path

from stayguard.compliance import ComplianceCalculator
from stayguard.core.config import Settings
from stayguard.core.ontology import DateInterval, StayPolicy, VisitInterval
from stayguard.policies import PolicyEngine, PolicyLoader, PolicyTable, default_policy


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def policies_dir() -> Path:
    """Path to the bundled policy directory."""
    return Path(__file__).parent.parent / "stayguard" / "policies" / "data"


@pytest.fixture
def settings(policies_dir: Path) -> Settings:
    """Settings pointing at the bundled policies, strict mode on."""
    return Settings(policies_dir=str(policies_dir), strict_mode=True)


@pytest.fixture
def policy_loader(policies_dir: Path) -> PolicyLoader:
    """Policy loader with the bundled policies loaded."""
    loader = PolicyLoader(policies_dir)
    loader.load_directory()
    return loader


@pytest.fixture
def policy_table(policy_loader: PolicyLoader, settings: Settings) -> PolicyTable:
    """Policy table with the 90/180 default policy."""
    return policy_loader.build_table(default=default_policy(settings))


@pytest.fixture
def engine(policy_table: PolicyTable, settings: Settings) -> PolicyEngine:
    """Policy engine over the bundled policy table."""
    return PolicyEngine(policy_table, settings=settings)


@pytest.fixture
def calculator(policy_table: PolicyTable, settings: Settings) -> ComplianceCalculator:
    """Compliance calculator over the bundled policy table."""
    return ComplianceCalculator(policy_table, settings=settings)


@pytest.fixture
def schengen_policy(policy_table: PolicyTable) -> StayPolicy:
    """The Schengen 90/180 short-stay policy."""
    return policy_table.get("schengen_short_stay")


# =============================================================================
# Visit Builders
# =============================================================================


@pytest.fixture
def make_visit():
    """Factory for normalized visits: ``make_visit("FR", start, days)``."""

    def _make(country: str, start: date, days: int | None = None, visit_id: str | None = None) -> VisitInterval:
        interval = DateInterval(start=start) if days is None else DateInterval.of_length(start, days)
        return VisitInterval(
            visit_id=visit_id or f"{country}-{start.isoformat()}",
            country_code=country,
            interval=interval,
        )

    return _make
