"""YAML stay-policy loader and the read-only policy table."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import ValidationError

from stayguard.core.config import Settings, get_settings
from stayguard.core.errors import PolicyLoadError, PolicyNotFoundError
from stayguard.core.ontology import (
    ANY_VISA_TYPE,
    CalculationMethod,
    StayPolicy,
    region_for,
    resolve_country_code,
)

logger = logging.getLogger(__name__)

DEFAULT_POLICY_ID = "default_rolling_90_180"

PolicyKey = tuple[str, str, str | None]  # (country_code, visa_type, nationality)


def default_policy(settings: Settings | None = None) -> StayPolicy:
    """System default: ``default_max_days`` in any ``default_period_days`` window."""
    settings = settings or get_settings()
    return StayPolicy(
        id=DEFAULT_POLICY_ID,
        country_code="*",
        calculation_method=CalculationMethod.ROLLING_WINDOW,
        max_days_per_stay=settings.default_max_days,
        max_days_per_period=settings.default_max_days,
        period_days=settings.default_period_days,
        description=(
            f"Default limit: {settings.default_max_days} days "
            f"in any {settings.default_period_days}-day period"
        ),
    )


class PolicyTable:
    """Immutable lookup of stay policies by country, visa type and nationality.

    Built once and shared read-only, so concurrent readers need no locking.
    """

    def __init__(self, policies: Iterable[StayPolicy], default: StayPolicy | None = None):
        by_id: dict[str, StayPolicy] = {}
        index: dict[PolicyKey, StayPolicy] = {}

        for policy in policies:
            if policy.id in by_id:
                raise PolicyLoadError(f"Duplicate policy id: {policy.id}")
            nationality = resolve_country_code(policy.nationality) if policy.nationality else None
            key = (policy.country_code, policy.visa_type.lower(), nationality)
            if key in index:
                logger.warning(
                    "Policy %s shadows %s for %s", policy.id, index[key].id, key
                )
            by_id[policy.id] = policy
            index[key] = policy

        self._by_id = MappingProxyType(by_id)
        self._index = MappingProxyType(index)
        self._default = default

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, policy_id: object) -> bool:
        return policy_id in self._by_id

    @property
    def default(self) -> StayPolicy | None:
        return self._default

    @property
    def policies(self) -> Mapping[str, StayPolicy]:
        return self._by_id

    def get(self, policy_id: str) -> StayPolicy | None:
        """Get a policy by ID."""
        if self._default is not None and policy_id == self._default.id:
            return self._default
        return self._by_id.get(policy_id)

    def all(self) -> list[StayPolicy]:
        """All policies, sorted by country then ID."""
        return sorted(self._by_id.values(), key=lambda p: (p.country_code, p.id))

    def for_country(self, country_code: str) -> list[StayPolicy]:
        """Policies declared for a country or for the region it belongs to."""
        codes = {country_code, region_for(country_code)}
        return [p for p in self.all() if p.country_code in codes]

    def find(
        self,
        country_code: str,
        visa_type: str | None = None,
        nationality: str | None = None,
    ) -> StayPolicy | None:
        """Most specific matching policy, without falling back to the default."""
        for key in self._candidate_keys(country_code, visa_type, nationality):
            policy = self._index.get(key)
            if policy is not None:
                return policy
        return None

    def resolve(
        self,
        country_code: str,
        visa_type: str | None = None,
        nationality: str | None = None,
    ) -> StayPolicy:
        """
        Resolve the policy for a country/visa type, falling back to the default.

        Lookup order, first for the country and then for its region:
        nationality + visa type, visa type, nationality + any visa, any visa.

        Raises:
            PolicyNotFoundError: Nothing matches and no default is configured
        """
        policy = self.find(country_code, visa_type, nationality)
        if policy is not None:
            logger.debug("Resolved %s/%s/%s -> %s", country_code, visa_type, nationality, policy.id)
            return policy
        if self._default is not None:
            logger.debug("No policy for %s/%s, using default", country_code, visa_type)
            return self._default
        raise PolicyNotFoundError(country_code, visa_type, nationality)

    @staticmethod
    def _candidate_keys(
        country_code: str,
        visa_type: str | None,
        nationality: str | None,
    ) -> list[PolicyKey]:
        nationality = resolve_country_code(nationality) if nationality and nationality.strip() else None
        codes = [country_code]
        region = region_for(country_code)
        if region != country_code:
            codes.append(region)

        visa_types = [ANY_VISA_TYPE]
        if visa_type and visa_type != ANY_VISA_TYPE:
            visa_types.insert(0, visa_type.lower())

        keys: list[PolicyKey] = []
        for code in codes:
            for vt in visa_types:
                if nationality:
                    keys.append((code, vt, nationality))
                keys.append((code, vt, None))
        return keys


class PolicyLoader:
    """Loads and validates YAML stay policies from files or directories."""

    def __init__(self, policies_dir: str | Path | None = None):
        self.policies_dir = Path(policies_dir) if policies_dir else None
        self._policies: dict[str, StayPolicy] = {}

    def load_file(self, path: str | Path) -> list[StayPolicy]:
        """Load policies from a single YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                content = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise PolicyLoadError(f"Invalid YAML in {path}: {exc}") from exc

        # Handle a single policy, a list, or a {"policies": [...]} document
        if isinstance(content, Mapping) and "policies" in content:
            content = content["policies"]
        items = content if isinstance(content, list) else [content]

        # Parse the whole file before registering any of it
        policies = [self._parse_policy(item, source=path) for item in items]
        for policy in policies:
            self._policies[policy.id] = policy
        return policies

    def load_directory(self, path: str | Path | None = None) -> list[StayPolicy]:
        """Load all YAML policies from a directory, skipping unreadable files."""
        path = Path(path) if path else self.policies_dir
        if not path:
            raise ValueError("No policies directory specified")
        if not path.exists():
            raise FileNotFoundError(f"Policies directory not found: {path}")

        policies = []
        for yaml_file in sorted([*path.glob("*.yaml"), *path.glob("*.yml")]):
            try:
                policies.extend(self.load_file(yaml_file))
            except PolicyLoadError as exc:
                logger.warning("Failed to load %s: %s", yaml_file, exc)
        return policies

    def get_policy(self, policy_id: str) -> StayPolicy | None:
        """Get a loaded policy by ID."""
        return self._policies.get(policy_id)

    def build_table(self, default: StayPolicy | None = None) -> PolicyTable:
        """Freeze the loaded policies into a table."""
        return PolicyTable(self._policies.values(), default=default)

    def _parse_policy(self, data: Any, source: Path | None = None) -> StayPolicy:
        """Parse a policy from dictionary data."""
        if not isinstance(data, Mapping):
            raise PolicyLoadError(f"Expected a mapping in {source}, got {type(data).__name__}")

        data = dict(data)
        if "visa_type" in data and data["visa_type"] is not None:
            data["visa_type"] = str(data["visa_type"]).lower()
        try:
            return StayPolicy.model_validate(data)
        except ValidationError as exc:
            raise PolicyLoadError(
                f"Invalid policy {data.get('id', '?')} in {source}: {exc}"
            ) from exc


def load_policy_table(settings: Settings | None = None) -> PolicyTable:
    """Load the configured policy directory into a table with the default policy."""
    settings = settings or get_settings()
    loader = PolicyLoader(settings.policies_dir)
    loader.load_directory()
    default = default_policy(settings) if settings.use_default_policy else None
    table = loader.build_table(default=default)
    logger.info("Loaded %d stay policies from %s", len(table), settings.policies_dir)
    return table
