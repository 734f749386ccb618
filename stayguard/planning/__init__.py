"""Planning domain - future-trip simulation and safe travel dates."""

from .service import (
    PLANNED_TRIP_ID,
    TripWarning,
    FutureTripValidation,
    validate_future_trip,
    max_compliant_stay,
    next_entry_date,
    find_safe_travel_dates,
)

__all__ = [
    "PLANNED_TRIP_ID",
    "TripWarning",
    "FutureTripValidation",
    "validate_future_trip",
    "max_compliant_stay",
    "next_entry_date",
    "find_safe_travel_dates",
]
