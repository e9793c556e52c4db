"""Reservation report, admin notifications and flight recommendation."""

from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from travel_reservations.domain.models import FlightResource, ReservationStatus
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.utils.config import Settings, get_settings
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

REPORT_COLUMNS = ["id", "user", "kind", "resource_id", "status"]

RECOMMENDATION_PHRASES = (
    "You should take a look at this flight: Flight {id} from {origin} to {destination}. "
    "It's a super hot destination among our travelers!",
    "Don't miss out on Flight {id} from {origin} to {destination}. "
    "It's a top choice for our travel enthusiasts!",
    "Explore the wonders of Flight {id} by booking a trip from {origin} to {destination}. "
    "Adventure awaits!",
)


@dataclass(frozen=True)
class FlightRecommendation:
    flight: FlightResource
    message: str


class ReportService:
    """Read-only views over engine state for operators and customers.

    Nothing here takes part in admission control.
    """

    def __init__(
        self,
        engine: ReservationEngine,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._engine = engine
        # Seeded once per process; every recommendation draws from the same stream.
        self._random = random.Random(self._settings.recommendation_random_seed)

    def build_report(self) -> pd.DataFrame:
        rows = [
            {
                "id": reservation.id,
                "user": reservation.owner_username,
                "kind": reservation.resource_kind.value,
                "resource_id": reservation.resource_id,
                "status": reservation.status.value,
            }
            for reservation in self._engine.controller.all_reservations()
        ]
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)

    def status_summary(self) -> dict[str, int]:
        frame = self.build_report()
        counts = frame["status"].value_counts().to_dict() if not frame.empty else {}
        return {status.value: int(counts.get(status.value, 0)) for status in ReservationStatus}

    def render_report(self) -> str:
        frame = self.build_report()
        if frame.empty:
            return "No reservations available.\n"
        lines = ["Reservations Report:", " | ".join(REPORT_COLUMNS)]
        lines.extend(
            " | ".join(str(value) for value in row)
            for row in frame.itertuples(index=False, name=None)
        )
        return "\n".join(lines) + "\n"

    def write_report(self, path: Optional[Path] = None) -> Path:
        target = Path(path or self._settings.report_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render_report(), encoding="utf-8")
        logger.info("Reservations report written to %s", target)
        return target

    def admin_notifications(self) -> dict[str, list[dict[str, str | int]]]:
        controller = self._engine.controller
        return {
            "pending": [
                reservation.to_dict()
                for reservation in controller.reservations_by_status(ReservationStatus.PENDING)
            ],
            "cancel_requested": [
                reservation.to_dict()
                for reservation in controller.reservations_by_status(
                    ReservationStatus.CANCEL_REQUESTED
                )
            ],
        }

    def recommend_flight(self) -> Optional[FlightRecommendation]:
        flights = self._engine.flights.snapshot()
        if not flights:
            return None
        flight = self._random.choice(flights)
        phrase = self._random.choice(RECOMMENDATION_PHRASES)
        return FlightRecommendation(
            flight=flight,
            message=phrase.format(
                id=flight.id,
                origin=flight.origin,
                destination=flight.destination,
            ),
        )
