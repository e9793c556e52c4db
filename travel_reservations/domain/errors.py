"""Typed failures raised by the reservation engine and its collaborators."""

from __future__ import annotations


class ReservationSystemError(Exception):
    """Base exception for every engine failure."""


class NotFoundError(ReservationSystemError):
    """Raised when a resource or reservation id is unknown."""


class ResourceNotFoundError(NotFoundError):
    """Raised when a flight or hotel id does not exist in its catalog."""


class ReservationNotFoundError(NotFoundError):
    """Raised when a reservation id does not exist in the ledger."""


class DuplicateIDError(ReservationSystemError):
    """Raised on a catalog id collision or a ledger id collision."""


class InsufficientCapacityError(ReservationSystemError):
    """Raised when admission control refuses a new reservation."""


class InvalidTransitionError(ReservationSystemError):
    """Raised when the current status does not permit the requested change."""


class NotAuthorizedError(ReservationSystemError):
    """Raised when the actor does not own the reservation being cancelled."""


class ResourceValidationError(ReservationSystemError):
    """Raised when resource fields are malformed."""


class PersistenceFailure(ReservationSystemError):
    """Raised when the persistence collaborator cannot load or store state.

    An operation that raises this was not durably committed.
    """


class EngineNotLoadedError(RuntimeError):
    """Raised when the engine is used before ``load()`` or after ``shutdown()``."""
