"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from travel_reservations.domain.errors import (
    DuplicateIDError,
    InsufficientCapacityError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    PersistenceFailure,
    ReservationSystemError,
    ResourceValidationError,
)
from travel_reservations.services.auth_service import (
    AdminRequiredError,
    AuthService,
    InvalidSessionError,
    Session,
)
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.services.report_service import ReportService


bearer_scheme = HTTPBearer(auto_error=False)

_ENGINE_ERROR_STATUS: tuple[tuple[type[ReservationSystemError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateIDError, status.HTTP_409_CONFLICT),
    (InsufficientCapacityError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (ResourceValidationError, status.HTTP_400_BAD_REQUEST),
    (PersistenceFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def engine_http_error(exc: ReservationSystemError) -> HTTPException:
    """Translate a typed engine failure into the matching HTTP error."""
    for error_type, status_code in _ENGINE_ERROR_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(
                status_code=status_code,
                detail={"error": type(exc).__name__, "message": str(exc)},
            )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": type(exc).__name__, "message": str(exc)},
    )


def _from_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_engine(request: Request) -> ReservationEngine:
    return _from_state(request, "engine", "Reservation engine")


def get_auth_service(request: Request) -> AuthService:
    return _from_state(request, "auth_service", "Auth service")


def get_report_service(request: Request) -> ReportService:
    return _from_state(request, "report_service", "Report service")


async def require_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Session:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        return auth_service.resolve(credentials.credentials)
    except InvalidSessionError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Session:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    try:
        return auth_service.require_admin(credentials.credentials)
    except InvalidSessionError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except AdminRequiredError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc
