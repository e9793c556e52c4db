"""HTTP controller layer for flight and hotel catalogs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from travel_reservations.controllers.dependencies import (
    engine_http_error,
    get_engine,
    get_report_service,
    require_admin,
)
from travel_reservations.domain.errors import ReservationSystemError
from travel_reservations.domain.models import FlightResource, HotelResource, ResourceKind
from travel_reservations.services.capacity_service import AvailabilityRow
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.services.report_service import ReportService


router = APIRouter(tags=["inventory"])


class FlightPayload(BaseModel):
    """Input DTO validated before entering the engine."""

    id: int = Field(gt=0)
    origin: str = Field(min_length=1, max_length=49)
    destination: str = Field(min_length=1, max_length=49)
    departure_time: str = Field(min_length=1, max_length=19)
    arrival_time: str = Field(min_length=1, max_length=19)
    total_seats: int = Field(ge=0)


class FlightUpdate(BaseModel):
    origin: str | None = Field(default=None, min_length=1, max_length=49)
    destination: str | None = Field(default=None, min_length=1, max_length=49)
    departure_time: str | None = Field(default=None, min_length=1, max_length=19)
    arrival_time: str | None = Field(default=None, min_length=1, max_length=19)
    total_seats: int | None = Field(default=None, ge=0)


class HotelPayload(BaseModel):
    id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=49)
    location: str = Field(min_length=1, max_length=99)
    total_rooms: int = Field(ge=0)


class HotelUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=49)
    location: str | None = Field(default=None, min_length=1, max_length=99)
    total_rooms: int | None = Field(default=None, ge=0)


class FlightResponse(FlightPayload):
    seats_available: int = Field(ge=0)
    over_capacity: bool = False


class HotelResponse(HotelPayload):
    rooms_available: int = Field(ge=0)
    over_capacity: bool = False


class AvailabilityResponse(BaseModel):
    resource_kind: ResourceKind
    resource_id: int
    available: int = Field(ge=0)


class RecommendationResponse(BaseModel):
    flight_id: int | None = None
    message: str


def _flight_response(row: AvailabilityRow) -> FlightResponse:
    flight = row.resource
    return FlightResponse(
        id=flight.id,
        origin=flight.origin,
        destination=flight.destination,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
        total_seats=flight.total_seats,
        seats_available=row.available,
        over_capacity=row.over_capacity,
    )


def _hotel_response(row: AvailabilityRow) -> HotelResponse:
    hotel = row.resource
    return HotelResponse(
        id=hotel.id,
        name=hotel.name,
        location=hotel.location,
        total_rooms=hotel.total_rooms,
        rooms_available=row.available,
        over_capacity=row.over_capacity,
    )


def _row_for(engine: ReservationEngine, kind: ResourceKind, resource_id: int) -> AvailabilityRow:
    for row in engine.oracle.snapshot(kind):
        if row.resource.id == resource_id:
            return row
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{kind.value} {resource_id} was not found",
    )


@router.get("/flights", response_model=list[FlightResponse])
async def list_flights(engine: ReservationEngine = Depends(get_engine)) -> list[FlightResponse]:
    return [_flight_response(row) for row in engine.oracle.snapshot(ResourceKind.FLIGHT)]


@router.get("/hotels", response_model=list[HotelResponse])
async def list_hotels(engine: ReservationEngine = Depends(get_engine)) -> list[HotelResponse]:
    return [_hotel_response(row) for row in engine.oracle.snapshot(ResourceKind.HOTEL)]


@router.get("/flights/{flight_id}/availability", response_model=AvailabilityResponse)
async def flight_availability(
    flight_id: int,
    engine: ReservationEngine = Depends(get_engine),
) -> AvailabilityResponse:
    return AvailabilityResponse(
        resource_kind=ResourceKind.FLIGHT,
        resource_id=flight_id,
        available=engine.oracle.available_seats(flight_id),
    )


@router.get("/hotels/{hotel_id}/availability", response_model=AvailabilityResponse)
async def hotel_availability(
    hotel_id: int,
    engine: ReservationEngine = Depends(get_engine),
) -> AvailabilityResponse:
    return AvailabilityResponse(
        resource_kind=ResourceKind.HOTEL,
        resource_id=hotel_id,
        available=engine.oracle.available_rooms(hotel_id),
    )


@router.get("/recommendation", response_model=RecommendationResponse)
async def recommendation(
    report_service: ReportService = Depends(get_report_service),
) -> RecommendationResponse:
    result = report_service.recommend_flight()
    if result is None:
        return RecommendationResponse(message="No flights available to recommend.")
    return RecommendationResponse(flight_id=result.flight.id, message=result.message)


@router.post(
    "/flights",
    response_model=FlightResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_flight(
    payload: FlightPayload,
    engine: ReservationEngine = Depends(get_engine),
) -> FlightResponse:
    try:
        created = engine.add_flight(FlightResource(**payload.model_dump()))
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return _flight_response(_row_for(engine, ResourceKind.FLIGHT, created.id))


@router.put(
    "/flights/{flight_id}",
    response_model=FlightResponse,
    dependencies=[Depends(require_admin)],
)
async def update_flight(
    flight_id: int,
    payload: FlightUpdate,
    engine: ReservationEngine = Depends(get_engine),
) -> FlightResponse:
    try:
        engine.update_flight(flight_id, **payload.model_dump(exclude_none=True))
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return _flight_response(_row_for(engine, ResourceKind.FLIGHT, flight_id))


@router.delete(
    "/flights/{flight_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_flight(
    flight_id: int,
    engine: ReservationEngine = Depends(get_engine),
) -> Response:
    try:
        engine.delete_flight(flight_id)
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/hotels",
    response_model=HotelResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_hotel(
    payload: HotelPayload,
    engine: ReservationEngine = Depends(get_engine),
) -> HotelResponse:
    try:
        created = engine.add_hotel(HotelResource(**payload.model_dump()))
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return _hotel_response(_row_for(engine, ResourceKind.HOTEL, created.id))


@router.put(
    "/hotels/{hotel_id}",
    response_model=HotelResponse,
    dependencies=[Depends(require_admin)],
)
async def update_hotel(
    hotel_id: int,
    payload: HotelUpdate,
    engine: ReservationEngine = Depends(get_engine),
) -> HotelResponse:
    try:
        engine.update_hotel(hotel_id, **payload.model_dump(exclude_none=True))
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return _hotel_response(_row_for(engine, ResourceKind.HOTEL, hotel_id))


@router.delete(
    "/hotels/{hotel_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_hotel(
    hotel_id: int,
    engine: ReservationEngine = Depends(get_engine),
) -> Response:
    try:
        engine.delete_hotel(hotel_id)
    except ReservationSystemError as exc:
        raise engine_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
