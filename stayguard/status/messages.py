"""Fixed message catalogue for status warnings and recommendations.

Messages are selected by key, never composed; templates only receive numbers
and dates from the evaluated status.
"""

from enum import Enum

from stayguard.core.ontology import CalculationMethod, Severity


class WarningKey(str, Enum):
    """Warning conditions, keyed independently of calculation method."""

    APPROACHING = "approaching"
    NEAR_LIMIT = "near_limit"
    AT_LIMIT = "at_limit"
    EXCEEDED = "exceeded"


WARNING_MESSAGES: dict[WarningKey, str] = {
    WarningKey.APPROACHING: "{used} of {limit} allowed days used.",
    WarningKey.NEAR_LIMIT: "Only {remaining} days remain under the {limit}-day limit.",
    WarningKey.AT_LIMIT: "The {limit}-day limit has been reached; no further days are available.",
    WarningKey.EXCEEDED: "Stay limit exceeded by {over} days ({used} used, limit {limit}).",
}


_M = CalculationMethod
_S = Severity

RECOMMENDATIONS: dict[tuple[Severity, CalculationMethod], tuple[str, ...]] = {
    # Rolling window (Schengen 90/180 and similar)
    (_S.NONE, _M.ROLLING_WINDOW): (
        "Current usage is well within the limit.",
    ),
    (_S.CAUTION, _M.ROLLING_WINDOW): (
        "Keep track of upcoming trips; {remaining} days remain in the current window.",
    ),
    (_S.WARNING, _M.ROLLING_WINDOW): (
        "Plan your departure or time outside the area; {remaining} days remain.",
        "Days older than {window_start} no longer count towards the limit.",
    ),
    (_S.CRITICAL, _M.ROLLING_WINDOW): (
        "Leave the area before the limit is exceeded, or contact the immigration authorities.",
        "Check the earliest date on which days become available again before re-entering.",
    ),
    # Calendar year
    (_S.NONE, _M.CALENDAR_YEAR): (
        "Current usage is well within this year's limit.",
    ),
    (_S.CAUTION, _M.CALENDAR_YEAR): (
        "{remaining} days remain for the rest of {year}.",
    ),
    (_S.WARNING, _M.CALENDAR_YEAR): (
        "Only {remaining} days remain for {year}; the allowance resets on January 1, {next_year}.",
    ),
    (_S.CRITICAL, _M.CALENDAR_YEAR): (
        "The annual limit is reached or exceeded; entry may be refused until January 1, {next_year}.",
    ),
    # Per entry
    (_S.NONE, _M.PER_ENTRY): (
        "The current stay is within the per-entry limit; each new entry starts a fresh allowance.",
    ),
    (_S.CAUTION, _M.PER_ENTRY): (
        "Monitor the length of the current stay; {remaining} days remain.",
    ),
    (_S.WARNING, _M.PER_ENTRY): (
        "Book your departure; the current stay must end within {remaining} days.",
    ),
    (_S.CRITICAL, _M.PER_ENTRY): (
        "Depart immediately; the per-entry limit is reached or exceeded.",
    ),
    # Entry based
    (_S.NONE, _M.ENTRY_BASED): (
        "The current stay is within the allowed length.",
    ),
    (_S.CAUTION, _M.ENTRY_BASED): (
        "Monitor the length of the current stay; {remaining} days remain.",
    ),
    (_S.WARNING, _M.ENTRY_BASED): (
        "Book your departure; the current stay must end within {remaining} days.",
    ),
    (_S.CRITICAL, _M.ENTRY_BASED): (
        "Depart immediately; the allowed stay length is reached or exceeded.",
    ),
    # Visa validity
    (_S.NONE, _M.VISA_VALIDITY): (
        "The stay is covered by a valid visa.",
    ),
    (_S.CAUTION, _M.VISA_VALIDITY): (
        "Check the visa expiry date against your travel plans.",
    ),
    (_S.WARNING, _M.VISA_VALIDITY): (
        "Consider renewing or extending the visa; {remaining} days remain.",
    ),
    (_S.CRITICAL, _M.VISA_VALIDITY): (
        "Leave before the visa expires or apply for an extension now.",
    ),
}

# Custom policies get method-neutral advice
GENERIC_RECOMMENDATIONS: dict[Severity, tuple[str, ...]] = {
    _S.NONE: ("Current usage is within the limit.",),
    _S.CAUTION: ("{remaining} days remain under the applicable limit.",),
    _S.WARNING: ("Plan your departure; {remaining} days remain.",),
    _S.CRITICAL: ("Leave before the limit is exceeded, or contact the immigration authorities.",),
}

# Fixed summary lines for the overstay checker
OVERSTAY_MESSAGES: dict[str, str] = {
    "exceeded": "{country} stay limit exceeded by {days} days.",
    "imminent": "{country} stay limit is reached in {days} days.",
    "approaching": "{days} days remain for the stay in {country}.",
    "visa_expiring": "The visa for {country} expires in {days} days.",
}

# Appended when the visa expires before the stay limit is reached
VISA_EXPIRY_NOTE = " The visa expires on {date}."
VISA_EXPIRY_RECOMMENDATION = "Leave before the visa expires."

OVERSTAY_RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "exceeded": (
        "Plan your departure immediately.",
        "Contact the local immigration office to explain the situation.",
        "Fines or future entry refusals may apply.",
    ),
    "imminent": (
        "Start preparing your departure and book a ticket.",
        "Check whether an extension is possible.",
    ),
    "approaching": (
        "Plan your departure date.",
        "Apply for an extension if you need to stay longer.",
    ),
    "visa_expiring": (
        "Consider renewing the visa.",
        "Complete any travel under this visa before it expires.",
    ),
}

# Fixed lines for the future-trip validator
TRIP_MESSAGES: dict[str, str] = {
    "limit_on_entry": "The {limit}-day limit is already reached on the planned entry date.",
    "exceeds_available": "The planned {planned}-day stay exceeds the {available} days available on entry.",
    "violates_rule": "This trip exceeds the {limit}-day limit by {excess} days.",
    "next_entry": "Days become available again from {date}.",
    "max_stay": "A stay of at most {available} days is possible from the planned entry date.",
    "safe_range": "A compliant stay is possible from {start} to {end}.",
    "complies": "The planned trip complies with the stay limit.",
    "remaining_after": "{remaining} days will remain after the trip.",
    "before_validity": "The visa is not valid before {date}; the planned trip starts earlier.",
    "after_validity": "The visa is only valid until {date}; the planned trip ends later.",
}


def recommendation_templates(severity: Severity, method: CalculationMethod) -> tuple[str, ...]:
    """Templates for a severity tier and calculation method."""
    return RECOMMENDATIONS.get((severity, method), GENERIC_RECOMMENDATIONS[severity])
