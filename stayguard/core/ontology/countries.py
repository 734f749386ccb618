"""
Country codes and travel regions.

A *region* is the key under which stays are aggregated: member states of the
Schengen area share the ``SCHENGEN`` region, every other country is its own
region.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


SCHENGEN_ZONE = "SCHENGEN"

# Schengen area members (29 states as of 2025)
SCHENGEN_COUNTRIES: dict[str, str] = {
    "AT": "Austria",
    "BE": "Belgium",
    "BG": "Bulgaria",
    "HR": "Croatia",
    "CZ": "Czech Republic",
    "DK": "Denmark",
    "EE": "Estonia",
    "FI": "Finland",
    "FR": "France",
    "DE": "Germany",
    "GR": "Greece",
    "HU": "Hungary",
    "IS": "Iceland",
    "IT": "Italy",
    "LV": "Latvia",
    "LI": "Liechtenstein",
    "LT": "Lithuania",
    "LU": "Luxembourg",
    "MT": "Malta",
    "NL": "Netherlands",
    "NO": "Norway",
    "PL": "Poland",
    "PT": "Portugal",
    "RO": "Romania",
    "SK": "Slovakia",
    "SI": "Slovenia",
    "ES": "Spain",
    "SE": "Sweden",
    "CH": "Switzerland",
}

OTHER_COUNTRIES: dict[str, str] = {
    "GB": "United Kingdom",
    "IE": "Ireland",
    "US": "United States",
    "CA": "Canada",
    "MX": "Mexico",
    "BR": "Brazil",
    "AU": "Australia",
    "NZ": "New Zealand",
    "JP": "Japan",
    "KR": "South Korea",
    "CN": "China",
    "TW": "Taiwan",
    "TH": "Thailand",
    "VN": "Vietnam",
    "MY": "Malaysia",
    "SG": "Singapore",
    "PH": "Philippines",
    "ID": "Indonesia",
    "IN": "India",
    "TR": "Turkey",
    "AE": "United Arab Emirates",
}

COUNTRY_NAMES: dict[str, str] = {**SCHENGEN_COUNTRIES, **OTHER_COUNTRIES}

# Common aliases seen in trip records
_ALIASES: dict[str, str] = {
    "uk": "GB",
    "great britain": "GB",
    "england": "GB",
    "usa": "US",
    "united states of america": "US",
    "korea": "KR",
    "republic of korea": "KR",
    "czechia": "CZ",
    "holland": "NL",
    "uae": "AE",
    "schengen": SCHENGEN_ZONE,
    "schengen area": SCHENGEN_ZONE,
}

_NAME_TO_CODE: dict[str, str] = {name.lower(): code for code, name in COUNTRY_NAMES.items()}


def resolve_country_code(value: str) -> str:
    """
    Resolve a country code or English country name to an upper-case code.

    Two-letter values are treated as ISO-3166 alpha-2 codes. Unknown names are
    upper-cased and passed through so that callers with their own code lists
    still work; such values fall back to the default policy.
    """
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("Country must not be empty")

    lowered = cleaned.lower()
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    if len(cleaned) == 2 and cleaned.isalpha():
        return cleaned.upper()
    if lowered in _NAME_TO_CODE:
        return _NAME_TO_CODE[lowered]
    if cleaned.upper() == SCHENGEN_ZONE:
        return SCHENGEN_ZONE

    logger.debug("Unknown country %r passed through as-is", value)
    return cleaned.upper()


def is_schengen(country_code: str) -> bool:
    """Check whether a country code belongs to the Schengen area."""
    return country_code == SCHENGEN_ZONE or country_code in SCHENGEN_COUNTRIES


def region_for(country_code: str) -> str:
    """Aggregation region for a country: the Schengen zone or the country itself."""
    return SCHENGEN_ZONE if is_schengen(country_code) else country_code


def country_name(country_code: str) -> str:
    """Display name for a country code."""
    if country_code == SCHENGEN_ZONE:
        return "Schengen Area"
    return COUNTRY_NAMES.get(country_code, country_code)
