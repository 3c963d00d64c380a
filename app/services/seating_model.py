"""
Seating model: table construction and arrangement invariants

Every guest in an arrangement is either seated at exactly one table or sits in
the unassigned pool, and no table holds more guests than its capacity.
"""

import uuid
from collections import Counter
from typing import Dict, List, Optional, Tuple

from app.core.exceptions import (
    DuplicateAssignment,
    InvalidCapacity,
    SeatTaken,
    TableFull,
    TableNotFound,
)
from app.schemas.seating import (
    GuestRef,
    SeatingArrangement,
    SeatingTable,
    TableShape,
    VenueLayout,
)


def create_table(
    number: int,
    name: str,
    capacity: int,
    shape: Optional[TableShape] = None,
    position: Optional[Tuple[float, float]] = None,
    table_id: Optional[str] = None,
) -> SeatingTable:
    """Build an empty table, rejecting non-positive capacities"""
    if capacity is None or capacity <= 0:
        raise InvalidCapacity(capacity)

    x, y = position if position is not None else (None, None)
    return SeatingTable(
        id=table_id or str(uuid.uuid4()),
        number=number,
        name=name,
        capacity=capacity,
        shape=shape or TableShape.ROUND,
        x=x,
        y=y,
        guests=[],
    )


def can_accommodate(table: SeatingTable, additional_guests: int = 1) -> bool:
    return table.occupancy + additional_guests <= table.capacity


def is_guest_seated(arrangement: SeatingArrangement, guest_id: str) -> Optional[SeatingTable]:
    """Return the table holding ``guest_id``, or None if the guest is unassigned"""
    for table in arrangement.tables:
        if any(guest.id == guest_id for guest in table.guests):
            return table
    return None


def find_table(arrangement: SeatingArrangement, table_id: str) -> SeatingTable:
    for table in arrangement.tables:
        if table.id == table_id:
            return table
    raise TableNotFound(table_id)


def known_guests(arrangement: SeatingArrangement) -> Dict[str, GuestRef]:
    """Every guest referenced by the arrangement, keyed by id"""
    guests: Dict[str, GuestRef] = {}
    for table in arrangement.tables:
        for guest in table.guests:
            guests[guest.id] = guest.as_ref()
    for guest in arrangement.unassigned_guests:
        guests[guest.id] = guest
    return guests


def validate_arrangement(arrangement: SeatingArrangement) -> None:
    """Check capacity, seat uniqueness and single-assignment over a whole arrangement

    Used when a client submits a complete arrangement rather than going
    through the individual assignment operations.
    """
    for table in arrangement.tables:
        if table.occupancy > table.capacity:
            raise TableFull(table.id, table.capacity)
        taken = set()
        for guest in table.guests:
            if guest.seat_number is None:
                continue
            if guest.seat_number in taken:
                raise SeatTaken(table.id, guest.seat_number)
            taken.add(guest.seat_number)

    counts = Counter(guest.id for table in arrangement.tables for guest in table.guests)
    counts.update(guest.id for guest in arrangement.unassigned_guests)
    duplicates = sorted(guest_id for guest_id, count in counts.items() if count > 1)
    if duplicates:
        raise DuplicateAssignment(duplicates)


def arrangement_stats(arrangement: SeatingArrangement) -> Dict[str, int]:
    seated = sum(table.occupancy for table in arrangement.tables)
    capacity = sum(table.capacity for table in arrangement.tables)
    unassigned = len(arrangement.unassigned_guests)
    return {
        "total_guests": seated + unassigned,
        "seated_guests": seated,
        "unassigned_guests": unassigned,
        "total_tables": len(arrangement.tables),
        "total_capacity": capacity,
        "available_seats": capacity - seated,
    }


def generate_tables_from_layout(
    layout: VenueLayout,
    capacity: int,
    shape: TableShape = TableShape.ROUND,
) -> List[SeatingTable]:
    """Create one empty table per position in a venue layout"""
    return [
        create_table(
            number=index,
            name=f"Table {index}",
            capacity=capacity,
            shape=shape,
            position=(position.x, position.y),
            table_id=position.id,
        )
        for index, position in enumerate(layout.tables, start=1)
    ]
