"""Controller layer for the reservation request/approval/cancellation workflow."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from travel_reservations.controllers.dependencies import (
    engine_http_error,
    get_engine,
    get_report_service,
    require_admin,
    require_user,
)
from travel_reservations.domain.errors import ReservationSystemError
from travel_reservations.domain.models import Reservation, ReservationStatus, ResourceKind
from travel_reservations.services.auth_service import Session
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.services.report_service import ReportService
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["reservations"])


class ReservationRequest(BaseModel):
    resource_kind: ResourceKind
    resource_id: int = Field(gt=0)


class ReservationResponse(BaseModel):
    id: int = Field(gt=0)
    owner_username: str
    resource_kind: ResourceKind
    resource_id: int
    status: ReservationStatus

    @classmethod
    def from_domain(cls, reservation: Reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            owner_username=reservation.owner_username,
            resource_kind=reservation.resource_kind,
            resource_id=reservation.resource_id,
            status=reservation.status,
        )


class NotificationsResponse(BaseModel):
    pending: list[ReservationResponse]
    cancel_requested: list[ReservationResponse]


class ReportResponse(BaseModel):
    path: str
    reservation_count: int = Field(ge=0)
    status_counts: dict[str, int]


@router.post(
    "/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_reservation(
    payload: ReservationRequest,
    session: Session = Depends(require_user),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    try:
        reservation_id = engine.controller.request_reservation(
            session.username,
            payload.resource_kind,
            payload.resource_id,
        )
        return ReservationResponse.from_domain(engine.controller.get_reservation(reservation_id))
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc


@router.get("/reservations/mine", response_model=list[ReservationResponse])
async def my_reservations(
    session: Session = Depends(require_user),
    engine: ReservationEngine = Depends(get_engine),
) -> list[ReservationResponse]:
    return [
        ReservationResponse.from_domain(reservation)
        for reservation in engine.controller.reservations_for(session.username)
    ]


@router.post("/reservations/{reservation_id}/cancel", response_model=ReservationResponse)
async def request_cancellation(
    reservation_id: int,
    session: Session = Depends(require_user),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    try:
        updated = engine.controller.request_cancellation(reservation_id, session.username)
        return ReservationResponse.from_domain(updated)
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc


@router.get(
    "/reservations",
    response_model=list[ReservationResponse],
    dependencies=[Depends(require_admin)],
)
async def list_reservations(
    status_filter: ReservationStatus | None = Query(default=None, alias="status"),
    engine: ReservationEngine = Depends(get_engine),
) -> list[ReservationResponse]:
    if status_filter is None:
        reservations = engine.controller.all_reservations()
    else:
        reservations = engine.controller.reservations_by_status(status_filter)
    return [ReservationResponse.from_domain(reservation) for reservation in reservations]


@router.get(
    "/notifications",
    response_model=NotificationsResponse,
    dependencies=[Depends(require_admin)],
)
async def notifications(
    report_service: ReportService = Depends(get_report_service),
) -> NotificationsResponse:
    result = report_service.admin_notifications()
    return NotificationsResponse(
        pending=[ReservationResponse(**row) for row in result["pending"]],
        cancel_requested=[ReservationResponse(**row) for row in result["cancel_requested"]],
    )


def _admin_transition(engine: ReservationEngine, action: str, reservation_id: int, admin: Session):
    operations = {
        "approve": engine.controller.approve,
        "reject": engine.controller.reject,
        "confirm": engine.controller.confirm_cancellation,
        "deny": engine.controller.deny_cancellation,
    }
    try:
        updated = operations[action](reservation_id)
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    logger.info("Admin %s ran %s on reservation %s", admin.username, action, reservation_id)
    return ReservationResponse.from_domain(updated)


@router.post("/reservations/{reservation_id}/approve", response_model=ReservationResponse)
async def approve(
    reservation_id: int,
    admin: Session = Depends(require_admin),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    return _admin_transition(engine, "approve", reservation_id, admin)


@router.post("/reservations/{reservation_id}/reject", response_model=ReservationResponse)
async def reject(
    reservation_id: int,
    admin: Session = Depends(require_admin),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    return _admin_transition(engine, "reject", reservation_id, admin)


@router.post(
    "/reservations/{reservation_id}/cancellation/confirm",
    response_model=ReservationResponse,
)
async def confirm_cancellation(
    reservation_id: int,
    admin: Session = Depends(require_admin),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    return _admin_transition(engine, "confirm", reservation_id, admin)


@router.post(
    "/reservations/{reservation_id}/cancellation/deny",
    response_model=ReservationResponse,
)
async def deny_cancellation(
    reservation_id: int,
    admin: Session = Depends(require_admin),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationResponse:
    return _admin_transition(engine, "deny", reservation_id, admin)


@router.post(
    "/report",
    response_model=ReportResponse,
    dependencies=[Depends(require_admin)],
)
async def generate_report(
    report_service: ReportService = Depends(get_report_service),
) -> ReportResponse:
    try:
        path = report_service.write_report()
    except OSError as exc:
        logger.exception("Reservations report could not be written")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to write report: {exc}",
        ) from exc
    counts = report_service.status_summary()
    return ReportResponse(
        path=str(path),
        reservation_count=sum(counts.values()),
        status_counts=counts,
    )
