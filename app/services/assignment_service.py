"""
Manual seating operations

Each operation works on a deep copy of the arrangement and returns the copy;
the caller decides whether to persist it.
"""

import logging
from typing import Dict, Iterable, Optional

from app.core.exceptions import (
    DuplicateTable,
    GuestNotFound,
    InvalidCapacity,
    SeatTaken,
    TableFull,
)
from app.schemas.seating import GuestRef, SeatedGuest, SeatingArrangement, SeatingTable
from app.services.seating_model import can_accommodate, find_table, known_guests

logger = logging.getLogger(__name__)


def _next_seat_number(table: SeatingTable) -> int:
    taken = {guest.seat_number for guest in table.guests if guest.seat_number is not None}
    candidate = table.occupancy + 1
    if candidate not in taken:
        return candidate
    # Explicit seat numbers can leave gaps; take the lowest free one
    candidate = 1
    while candidate in taken:
        candidate += 1
    return candidate


def _remove_guest(arrangement: SeatingArrangement, guest_id: str):
    """Detach a guest from wherever it sits; returns (table_id, index) or None"""
    for table in arrangement.tables:
        for index, guest in enumerate(table.guests):
            if guest.id == guest_id:
                del table.guests[index]
                return table.id, index
    arrangement.unassigned_guests = [
        guest for guest in arrangement.unassigned_guests if guest.id != guest_id
    ]
    return None


def assign_guest(
    arrangement: SeatingArrangement,
    table_id: str,
    guest_id: str,
    seat_number: Optional[int] = None,
    roster: Optional[Iterable[GuestRef]] = None,
) -> SeatingArrangement:
    """Seat a guest at a table, moving them from their current table or the pool

    ``roster`` is the event's guest list; without one, only guests already
    present in the arrangement are known.
    """
    updated = arrangement.model_copy(deep=True)
    destination = find_table(updated, table_id)

    guests: Dict[str, GuestRef] = known_guests(updated)
    if roster is not None:
        guests = {guest.id: guest for guest in roster}
    if guest_id not in guests:
        raise GuestNotFound(guest_id)
    guest = guests[guest_id]

    previous = _remove_guest(updated, guest_id)

    if not can_accommodate(destination):
        logger.warning(f"Rejected seating guest {guest_id} at full table {table_id}")
        raise TableFull(table_id, destination.capacity)

    if seat_number is not None:
        if any(seated.seat_number == seat_number for seated in destination.guests):
            raise SeatTaken(table_id, seat_number)
    else:
        seat_number = _next_seat_number(destination)

    seated = SeatedGuest(id=guest.id, name=guest.name, seat_number=seat_number)
    if previous is not None and previous[0] == table_id:
        # Re-seating at the same table keeps the guest's place in the list
        destination.guests.insert(previous[1], seated)
    else:
        destination.guests.append(seated)
    return updated


def unassign_guest(
    arrangement: SeatingArrangement,
    table_id: str,
    guest_id: str,
) -> SeatingArrangement:
    """Move a guest from a table back to the unassigned pool"""
    updated = arrangement.model_copy(deep=True)
    table = find_table(updated, table_id)

    for index, guest in enumerate(table.guests):
        if guest.id == guest_id:
            del table.guests[index]
            updated.unassigned_guests.append(guest.as_ref())
            break
    return updated


def delete_table(arrangement: SeatingArrangement, table_id: str) -> SeatingArrangement:
    """Remove a table, sending its guests to the unassigned pool"""
    updated = arrangement.model_copy(deep=True)
    table = find_table(updated, table_id)

    updated.unassigned_guests.extend(guest.as_ref() for guest in table.guests)
    updated.tables = [t for t in updated.tables if t.id != table_id]
    return updated


def add_table(arrangement: SeatingArrangement, table: SeatingTable) -> SeatingArrangement:
    updated = arrangement.model_copy(deep=True)
    if any(existing.id == table.id for existing in updated.tables):
        raise DuplicateTable(table.id)
    updated.tables.append(table.model_copy(deep=True))
    return updated


def update_table(arrangement: SeatingArrangement, table_id: str, **changes) -> SeatingArrangement:
    """Change table fields; capacity may never drop below current occupancy"""
    updated = arrangement.model_copy(deep=True)
    table = find_table(updated, table_id)

    capacity = changes.get("capacity")
    if capacity is not None:
        if capacity <= 0:
            raise InvalidCapacity(capacity)
        if capacity < table.occupancy:
            raise InvalidCapacity(
                capacity,
                f"Table '{table_id}' seats {table.occupancy} guests; capacity {capacity} is too small",
            )

    for field, value in changes.items():
        if field in ("id", "guests") or value is None:
            continue
        setattr(table, field, value)
    return updated


def reconcile_roster(arrangement: SeatingArrangement, roster: Iterable[GuestRef]) -> SeatingArrangement:
    """Bring an arrangement in line with the current guest roster

    Guests no longer on the roster are dropped, names are refreshed, and
    roster guests the arrangement has never seen join the unassigned pool.
    """
    updated = arrangement.model_copy(deep=True)
    guests = {guest.id: guest for guest in roster}
    seen = set()

    for table in updated.tables:
        table.guests = [guest for guest in table.guests if guest.id in guests]
        for guest in table.guests:
            guest.name = guests[guest.id].name
            seen.add(guest.id)

    pool = []
    for guest in updated.unassigned_guests:
        if guest.id in guests and guest.id not in seen:
            pool.append(GuestRef(id=guest.id, name=guests[guest.id].name))
            seen.add(guest.id)
    pool.extend(
        GuestRef(id=guest.id, name=guest.name) for guest in guests.values() if guest.id not in seen
    )
    updated.unassigned_guests = pool
    return updated
