"""Persistence contract consumed by the reservation engine."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from travel_reservations.domain.models import Reservation, Resource, ResourceKind, UserAccount


@runtime_checkable
class PersistenceGateway(Protocol):
    """Load/store surface the engine and auth service depend on.

    Implementations raise ``PersistenceFailure`` for any I/O problem.
    ``store_*`` calls replace the whole snapshot and must be atomic.
    """

    def load_resources(self, kind: ResourceKind) -> Sequence[Resource]: ...

    def store_resources(self, kind: ResourceKind, resources: Sequence[Resource]) -> None: ...

    def load_ledger(self) -> Sequence[Reservation]: ...

    def store_ledger(self, reservations: Sequence[Reservation]) -> None: ...

    def load_last_issued_id(self) -> Optional[int]: ...

    def store_last_issued_id(self, value: int) -> None: ...

    def load_users(self) -> Sequence[UserAccount]: ...

    def store_user(self, account: UserAccount) -> None: ...

    def delete_user(self, username: str) -> None: ...
