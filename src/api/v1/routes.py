"""
API v1 routes.

Defines REST endpoints for event registration and the organizer audit views.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_event_catalog,
    get_registration_coordinator,
    get_repository,
)
from src.api.models import (
    ErrorResponse,
    RegistrationAttemptResponse,
    RegistrationCheckResponse,
    RegistrationCountResponse,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationStatsResponse,
)
from src.domain.exceptions import (
    AlreadyRegistered,
    InvalidRequest,
    PaidButUnrecorded,
    PaymentIndeterminate,
    RegistrationClosed,
    RetryableStoreError,
    StoreError,
)
from src.domain.models import AttendeeInfo, Event, RegistrationOutcome, normalize_email
from src.domain.ports import AttemptState, EventCatalog, RegistrationRepository
from src.domain.registration import RegistrationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

# Checked in order; subclasses first
_ERROR_STATUS = (
    (PaidButUnrecorded, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PaymentIndeterminate, status.HTTP_502_BAD_GATEWAY),
    (RetryableStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidRequest, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RegistrationClosed, status.HTTP_409_CONFLICT),
    (AlreadyRegistered, status.HTTP_409_CONFLICT),
)

_STORE_UNAVAILABLE = "Registration store unavailable"


def _load_event(catalog: EventCatalog, event_id: str) -> Event:
    try:
        event = catalog.get_event(event_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
        ) from None
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def _error_response(outcome: RegistrationOutcome, transitions: list[str]) -> JSONResponse:
    error = outcome.error
    status_code = next(
        (code for kind, code in _ERROR_STATUS if isinstance(error, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    body = ErrorResponse(
        detail=error.user_message,
        error=error.kind,
        payment_reference=outcome.reference,
        support_required=error.requires_support,
        transitions=transitions,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/events/{event_id}/registrations",
    response_model=RegistrationAttemptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": RegistrationAttemptResponse, "description": "Payment cancelled or already registered"},
        404: {"model": ErrorResponse, "description": "Event not found"},
        409: {"model": ErrorResponse, "description": "Registration closed or already registered"},
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Paid but unrecorded, contact support"},
        502: {"model": ErrorResponse, "description": "Payment status unknown, contact support"},
        503: {"model": ErrorResponse, "description": "Store unavailable, safe to retry"},
    },
    summary="Register for an event",
    description="Register an attendee for an event. Paid events are charged through "
    "the payment gateway before the registration is recorded.",
)
def register_for_event(
    event_id: str,
    request_data: RegistrationRequest,
    response: Response,
    catalog: EventCatalog = Depends(get_event_catalog),
    coordinator: RegistrationCoordinator = Depends(get_registration_coordinator),
) -> RegistrationAttemptResponse | JSONResponse:
    """
    Register an attendee, charging the event price when it is not free.

    - **name**: Attendee full name
    - **email**: Attendee email (de-duplication key per event)
    - **phone**: Optional phone number

    Blocks while the gateway checkout is open, up to payment_timeout_seconds,
    occupying one worker thread for that time.
    """
    event = _load_event(catalog, event_id)
    attendee = AttendeeInfo(
        name=request_data.name,
        email=str(request_data.email),
        phone=request_data.phone,
    )

    transitions: list[str] = []
    outcome = RegistrationOutcome(state=AttemptState.IDLE)
    for outcome in coordinator.register(event, attendee):
        transitions.append(outcome.state.value)

    if outcome.error is not None and not outcome.succeeded:
        return _error_response(outcome, transitions)

    registration = (
        RegistrationResponse.from_domain(outcome.registration) if outcome.registration else None
    )
    if outcome.cancelled:
        response.status_code = status.HTTP_200_OK
        message = "Payment cancelled"
    elif outcome.error is not None:
        response.status_code = status.HTTP_200_OK
        message = outcome.error.user_message
    else:
        message = "Registration confirmed"

    return RegistrationAttemptResponse(
        state=outcome.state.value,
        message=message,
        transitions=transitions,
        payment_reference=outcome.reference,
        registration=registration,
    )


@router.get(
    "/events/{event_id}/registrations",
    response_model=list[RegistrationResponse],
    responses={404: {"model": ErrorResponse, "description": "Event not found"}},
    summary="List event registrations",
)
def list_registrations(
    event_id: str,
    catalog: EventCatalog = Depends(get_event_catalog),
    repository: RegistrationRepository = Depends(get_repository),
) -> list[RegistrationResponse]:
    """All registrations for an event, newest first (organizer audit view)."""
    _load_event(catalog, event_id)
    try:
        rows = repository.list_for_event(event_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
        ) from None
    return [RegistrationResponse.from_domain(row) for row in rows]


@router.get(
    "/events/{event_id}/registrations/count",
    response_model=RegistrationCountResponse,
    summary="Count confirmed registrations",
)
def count_registrations(
    event_id: str,
    catalog: EventCatalog = Depends(get_event_catalog),
    repository: RegistrationRepository = Depends(get_repository),
) -> RegistrationCountResponse:
    """Confirmed registration count. Display only; not a capacity guarantee."""
    _load_event(catalog, event_id)
    try:
        confirmed = repository.count_confirmed(event_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
        ) from None
    return RegistrationCountResponse(event_id=event_id, confirmed=confirmed)


@router.get(
    "/events/{event_id}/registrations/stats",
    response_model=RegistrationStatsResponse,
    summary="Registration statistics",
)
def registration_stats(
    event_id: str,
    catalog: EventCatalog = Depends(get_event_catalog),
    repository: RegistrationRepository = Depends(get_repository),
) -> RegistrationStatsResponse:
    _load_event(catalog, event_id)
    try:
        stats = repository.stats_for_event(event_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
        ) from None
    return RegistrationStatsResponse.from_domain(event_id, stats)


@router.get(
    "/events/{event_id}/registrations/check",
    response_model=RegistrationCheckResponse,
    summary="Check whether an email is registered",
)
def check_registration(
    event_id: str,
    email: str = Query(..., min_length=3),
    catalog: EventCatalog = Depends(get_event_catalog),
    repository: RegistrationRepository = Depends(get_repository),
) -> RegistrationCheckResponse:
    _load_event(catalog, event_id)
    normalized_email = normalize_email(email)
    try:
        existing = repository.find_confirmed(event_id, normalized_email)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_STORE_UNAVAILABLE
        ) from None
    return RegistrationCheckResponse(
        event_id=event_id,
        email=normalized_email,
        is_registered=existing is not None,
        registration=RegistrationResponse.from_domain(existing) if existing else None,
    )
