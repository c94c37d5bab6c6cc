from typing import Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class Reservation:
    """
    One unit of ticket-type capacity held by the ledger.

    `replayed` is True when the same reservation id was already held and the
    call did not increment again.
    """

    reservation_id: UUID
    ticket_type_id: int
    sold_count: Optional[int] = None
    replayed: bool = False


@attrs.define(frozen=True)
class Release:
    """
    Outcome of releasing a reservation.

    `released` is False for a missing or already-released entry (no-op).
    `clamped` is True when the entry was held but sold_count was already zero.
    """

    reservation_id: UUID
    released: bool
    clamped: bool = False
