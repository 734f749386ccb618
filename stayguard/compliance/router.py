"""Stay compliance API endpoints."""

from fastapi import APIRouter, HTTPException

from stayguard.core.errors import (
    ComplianceError,
    InvalidIntervalError,
    InvalidWindowError,
    PolicyNotFoundError,
    UnsupportedPolicyError,
)
from stayguard.core.ontology import DateInterval
from stayguard.passports import PassportComparison
from stayguard.planning import FutureTripValidation

from .schemas import (
    ComprehensiveStatus,
    OverstayReport,
    OverstayRequest,
    PassportComparisonRequest,
    PolicyListResponse,
    StatusRequest,
    StatusResponse,
    TripValidationRequest,
)
from .service import ComplianceCalculator

router = APIRouter(prefix="/compliance", tags=["compliance"])

# Global calculator instance (lazy initialized)
_calculator: ComplianceCalculator | None = None


def get_calculator() -> ComplianceCalculator:
    """Get or create the compliance calculator instance."""
    global _calculator
    if _calculator is None:
        _calculator = ComplianceCalculator()
    return _calculator


def _http_error(exc: ComplianceError) -> HTTPException:
    if isinstance(exc, (InvalidIntervalError, InvalidWindowError)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, PolicyNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnsupportedPolicyError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.post("/schengen-status", response_model=StatusResponse)
async def schengen_status(request: StatusRequest) -> StatusResponse:
    """
    Schengen 90/180 status as of a date.

    Days spent in any member state count towards the same limit; days
    covered by overlapping records are counted once.
    """
    calculator = get_calculator()
    try:
        result = calculator.normalize(request.visits, strict=request.strict)
        status = calculator.calculate_schengen_status(
            result.intervals, as_of=request.as_of, nationality=request.nationality
        )
    except ComplianceError as exc:
        raise _http_error(exc) from exc
    return StatusResponse(status=status, errors=result.errors)


@router.post("/comprehensive-status", response_model=ComprehensiveStatus)
async def comprehensive_status(request: StatusRequest) -> ComprehensiveStatus:
    """
    Status with severity tier, warnings and recommendations.

    Evaluates the Schengen zone unless ``country`` names another destination.
    """
    calculator = get_calculator()
    try:
        if request.country is None:
            return calculator.calculate_comprehensive_status(
                request.visits,
                as_of=request.as_of,
                visa_type=request.visa_type,
                nationality=request.nationality,
                strict=request.strict,
            )
        return calculator.calculate_country_status(
            request.visits,
            request.country,
            as_of=request.as_of,
            visa_type=request.visa_type,
            nationality=request.nationality,
            strict=request.strict,
        )
    except ComplianceError as exc:
        raise _http_error(exc) from exc


@router.post("/validate-trip", response_model=FutureTripValidation)
async def validate_trip(request: TripValidationRequest) -> FutureTripValidation:
    """
    Check whether a planned trip would breach the destination's stay limit.

    The trip is evaluated on its entry and exit dates together with the
    existing visits.
    """
    if request.exit_date < request.entry_date:
        raise HTTPException(
            status_code=422,
            detail=f"Exit date {request.exit_date} precedes entry date {request.entry_date}",
        )

    calculator = get_calculator()
    try:
        return calculator.validate_future_trip(
            request.visits,
            DateInterval(start=request.entry_date, end=request.exit_date),
            now=request.now,
            destination=request.destination,
            visa_type=request.visa_type,
            nationality=request.nationality,
            strict=request.strict,
        )
    except ComplianceError as exc:
        raise _http_error(exc) from exc


@router.post("/overstay-warnings", response_model=OverstayReport)
async def overstay_warnings(request: OverstayRequest) -> OverstayReport:
    """Warnings for stays in progress that are close to, or past, their limit."""
    calculator = get_calculator()
    try:
        return calculator.check_overstay_warnings(
            request.visits,
            request.as_of,
            nationality=request.nationality,
            strict=request.strict,
        )
    except ComplianceError as exc:
        raise _http_error(exc) from exc


@router.post("/compare-passports", response_model=PassportComparison)
async def compare_passports(request: PassportComparisonRequest) -> PassportComparison:
    """
    Rank a traveler's passports for a destination.

    Visa-free entry beats visa-required entry; ties are broken by remaining
    days, visa fee and processing time.
    """
    calculator = get_calculator()
    try:
        return calculator.compare_passports(
            request.passports,
            request.destination,
            as_of=request.as_of,
            used_days=request.used_days,
            visa_type=request.visa_type,
        )
    except ComplianceError as exc:
        raise _http_error(exc) from exc


@router.get("/policies", response_model=PolicyListResponse)
async def list_policies(country: str | None = None) -> PolicyListResponse:
    """List loaded stay policies, optionally for one country."""
    policies = get_calculator().list_policies(country)
    return PolicyListResponse(policies=policies, total=len(policies))
