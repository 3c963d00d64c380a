"""
Tests for the seating model invariants and manual assignment operations
"""

import pytest

from app.core.exceptions import (
    DuplicateAssignment,
    DuplicateTable,
    GuestNotFound,
    InvalidCapacity,
    SeatTaken,
    TableFull,
    TableNotFound,
)
from app.schemas.seating import (
    GuestRef,
    LayoutTablePosition,
    SeatedGuest,
    SeatingArrangement,
    TableShape,
    VenueLayout,
)
from app.services import assignment_service
from app.services.seating_model import (
    arrangement_stats,
    can_accommodate,
    create_table,
    generate_tables_from_layout,
    is_guest_seated,
    validate_arrangement,
)

ROSTER = [GuestRef(id=guest_id, name=name) for guest_id, name in [
    ("g1", "Alice"), ("g2", "Bob"), ("g3", "Carol"), ("g4", "Dan"), ("g5", "Eve"),
]]

@pytest.fixture
def arrangement():
    """Table A (capacity 2) holds Alice and Bob, table B (capacity 3) holds Carol"""
    table_a = create_table(1, "Head Table", 2, table_id="A")
    table_a.guests = [
        SeatedGuest(id="g1", name="Alice", seat_number=1),
        SeatedGuest(id="g2", name="Bob", seat_number=2),
    ]
    table_b = create_table(2, "Family", 3, shape=TableShape.OVAL, table_id="B")
    table_b.guests = [SeatedGuest(id="g3", name="Carol", seat_number=1)]
    return SeatingArrangement(
        tables=[table_a, table_b],
        unassigned_guests=[GuestRef(id="g4", name="Dan"), GuestRef(id="g5", name="Eve")],
    )

def guest_ids(table):
    return [guest.id for guest in table.guests]

# -------- Model --------

def test_create_table_defaults():
    table = create_table(3, "Friends", 8, position=(10.0, 20.5))

    assert table.id
    assert table.shape == TableShape.ROUND
    assert (table.x, table.y) == (10.0, 20.5)
    assert table.guests == []

@pytest.mark.parametrize("capacity", [0, -1])
def test_create_table_rejects_invalid_capacity(capacity):
    with pytest.raises(InvalidCapacity):
        create_table(1, "Broken", capacity)

def test_can_accommodate(arrangement):
    table_a, table_b = arrangement.tables

    assert not can_accommodate(table_a)
    assert can_accommodate(table_b, 2)
    assert not can_accommodate(table_b, 3)

def test_is_guest_seated(arrangement):
    assert is_guest_seated(arrangement, "g3").id == "B"
    assert is_guest_seated(arrangement, "g4") is None
    assert is_guest_seated(arrangement, "missing") is None

def test_validate_arrangement_detects_duplicates(arrangement):
    arrangement.unassigned_guests.append(GuestRef(id="g1", name="Alice"))

    with pytest.raises(DuplicateAssignment) as exc_info:
        validate_arrangement(arrangement)
    assert exc_info.value.guest_ids == ["g1"]

def test_validate_arrangement_detects_shared_seat(arrangement):
    arrangement.tables[1].guests.append(SeatedGuest(id="g4", name="Dan", seat_number=1))
    arrangement.unassigned_guests = [GuestRef(id="g5", name="Eve")]

    with pytest.raises(SeatTaken) as exc_info:
        validate_arrangement(arrangement)
    assert (exc_info.value.table_id, exc_info.value.seat_number) == ("B", 1)

def test_validate_arrangement_allows_unnumbered_seats(arrangement):
    arrangement.tables[1].guests.append(SeatedGuest(id="g4", name="Dan"))
    arrangement.tables[1].guests.append(SeatedGuest(id="g5", name="Eve"))
    arrangement.unassigned_guests = []

    validate_arrangement(arrangement)

def test_validate_arrangement_detects_over_capacity(arrangement):
    arrangement.tables[0].guests.append(SeatedGuest(id="g4", name="Dan", seat_number=3))
    arrangement.unassigned_guests = [GuestRef(id="g5", name="Eve")]

    with pytest.raises(TableFull):
        validate_arrangement(arrangement)

def test_arrangement_stats(arrangement):
    assert arrangement_stats(arrangement) == {
        "total_guests": 5,
        "seated_guests": 3,
        "unassigned_guests": 2,
        "total_tables": 2,
        "total_capacity": 5,
        "available_seats": 2,
    }

def test_generate_tables_from_layout():
    layout = VenueLayout(width=800, height=600, tables=[
        LayoutTablePosition(id="north", x=100, y=50),
        LayoutTablePosition(id="south", x=100, y=450, rotation=90),
    ])

    tables = generate_tables_from_layout(layout, capacity=10, shape=TableShape.SQUARE)

    assert [(t.id, t.number, t.name) for t in tables] == [("north", 1, "Table 1"), ("south", 2, "Table 2")]
    assert all(t.capacity == 10 and t.shape == TableShape.SQUARE for t in tables)
    assert (tables[1].x, tables[1].y) == (100, 450)

# -------- Assign --------

def test_assign_from_pool(arrangement):
    updated = assignment_service.assign_guest(arrangement, "B", "g4", roster=ROSTER)

    assert guest_ids(updated.tables[1]) == ["g3", "g4"]
    assert updated.tables[1].guests[-1].seat_number == 2
    assert [g.id for g in updated.unassigned_guests] == ["g5"]
    # input untouched
    assert [g.id for g in arrangement.unassigned_guests] == ["g4", "g5"]

def test_assign_moves_between_tables(arrangement):
    updated = assignment_service.assign_guest(arrangement, "B", "g1", seat_number=3, roster=ROSTER)

    assert guest_ids(updated.tables[0]) == ["g2"]
    assert updated.tables[0].guests[0].seat_number == 2
    assert guest_ids(updated.tables[1]) == ["g3", "g1"]
    assert updated.tables[1].guests[-1].seat_number == 3

def test_reseat_same_table_same_seat_is_unchanged(arrangement):
    updated = assignment_service.assign_guest(arrangement, "A", "g1", seat_number=1, roster=ROSTER)

    assert updated == arrangement

def test_reseat_at_full_table_does_not_fail(arrangement):
    updated = assignment_service.assign_guest(arrangement, "A", "g2", roster=ROSTER)

    assert guest_ids(updated.tables[0]) == ["g1", "g2"]

def test_assign_to_full_table_raises(arrangement):
    with pytest.raises(TableFull):
        assignment_service.assign_guest(arrangement, "A", "g4", roster=ROSTER)

def test_assign_unknown_table_raises(arrangement):
    with pytest.raises(TableNotFound):
        assignment_service.assign_guest(arrangement, "Z", "g4", roster=ROSTER)

def test_assign_unknown_guest_raises(arrangement):
    with pytest.raises(GuestNotFound):
        assignment_service.assign_guest(arrangement, "B", "stranger", roster=ROSTER)

def test_assign_without_roster_uses_known_guests(arrangement):
    updated = assignment_service.assign_guest(arrangement, "B", "g5")
    assert "g5" in guest_ids(updated.tables[1])

    with pytest.raises(GuestNotFound):
        assignment_service.assign_guest(arrangement, "B", "g9")

def test_assign_taken_seat_raises(arrangement):
    with pytest.raises(SeatTaken):
        assignment_service.assign_guest(arrangement, "B", "g4", seat_number=1, roster=ROSTER)

def test_default_seat_skips_taken_numbers(arrangement):
    arrangement.tables[1].guests[0].seat_number = 2

    updated = assignment_service.assign_guest(arrangement, "B", "g4", roster=ROSTER)

    assert updated.tables[1].guests[-1].seat_number == 1

# -------- Unassign / delete --------

def test_unassign_guest(arrangement):
    updated = assignment_service.unassign_guest(arrangement, "A", "g1")

    assert guest_ids(updated.tables[0]) == ["g2"]
    assert [g.id for g in updated.unassigned_guests] == ["g4", "g5", "g1"]

def test_unassign_guest_not_at_table_is_noop(arrangement):
    updated = assignment_service.unassign_guest(arrangement, "A", "g3")

    assert updated == arrangement

def test_unassign_unknown_table_raises(arrangement):
    with pytest.raises(TableNotFound):
        assignment_service.unassign_guest(arrangement, "Z", "g1")

def test_delete_occupied_table(arrangement):
    updated = assignment_service.delete_table(arrangement, "A")

    assert [t.id for t in updated.tables] == ["B"]
    assert [g.id for g in updated.unassigned_guests] == ["g4", "g5", "g1", "g2"]

def test_delete_unknown_table_raises(arrangement):
    with pytest.raises(TableNotFound):
        assignment_service.delete_table(arrangement, "Z")

# -------- Table edits --------

def test_add_table(arrangement):
    updated = assignment_service.add_table(arrangement, create_table(3, "Kids", 6, table_id="C"))

    assert [t.id for t in updated.tables] == ["A", "B", "C"]

def test_add_duplicate_table_raises(arrangement):
    with pytest.raises(DuplicateTable):
        assignment_service.add_table(arrangement, create_table(3, "Again", 6, table_id="A"))

def test_update_table(arrangement):
    updated = assignment_service.update_table(arrangement, "B", name="Cousins", capacity=5, shape=TableShape.SQUARE)

    table = updated.tables[1]
    assert (table.name, table.capacity, table.shape) == ("Cousins", 5, TableShape.SQUARE)
    assert guest_ids(table) == ["g3"]

def test_update_table_capacity_below_occupancy_raises(arrangement):
    with pytest.raises(InvalidCapacity):
        assignment_service.update_table(arrangement, "A", capacity=1)

# -------- Roster reconciliation --------

def test_reconcile_roster(arrangement):
    roster = [
        GuestRef(id="g1", name="Alice Smith"),
        GuestRef(id="g3", name="Carol"),
        GuestRef(id="g4", name="Dan"),
        GuestRef(id="g6", name="Frank"),
    ]

    updated = assignment_service.reconcile_roster(arrangement, roster)

    assert [(g.id, g.name) for g in updated.tables[0].guests] == [("g1", "Alice Smith")]
    assert guest_ids(updated.tables[1]) == ["g3"]
    assert [g.id for g in updated.unassigned_guests] == ["g4", "g6"]
