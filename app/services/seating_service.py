"""
Seating arrangement service

Each public method is one load -> mutate -> save unit on a single session:
the arrangement row is locked on load where the database supports it and the
session is committed once at the end.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    DuplicateAssignment,
    DuplicatePreference,
    DuplicateTable,
    EventNotFound,
    GuestNotFound,
)
from app.schemas.seating import (
    GuestRef,
    OptimizeRequest,
    SeatingArrangement,
    SeatingPreferenceIn,
    SeatingTable,
    TableCreate,
    TableShape,
    VenueLayout,
)
from app.services import assignment_service
from app.services.repositories import (
    ArrangementRepo,
    EventRepo,
    GuestRepo,
    LayoutRepo,
    PreferenceRepo,
)
from app.services.seating_model import (
    arrangement_stats,
    create_table,
    generate_tables_from_layout,
    known_guests,
    validate_arrangement,
)
from app.services.seating_optimizer import optimize_seating

logger = logging.getLogger(__name__)

def _duplicates(ids: Iterable[str]) -> List[str]:
    counts = Counter(ids)
    return sorted(item for item, count in counts.items() if count > 1)

class SeatingService:
    """Service for seating arrangement operations"""

    @staticmethod
    def _current(event_id: int, db: Session, for_update: bool = False) -> SeatingArrangement:
        """Stored arrangement, or every attending guest unassigned if none is stored"""
        EventRepo.require(db, event_id)
        arrangement = ArrangementRepo.load(db, event_id, for_update=for_update)
        if arrangement is None:
            arrangement = SeatingArrangement(tables=[], unassigned_guests=GuestRepo.roster(db, event_id))
        return arrangement

    @staticmethod
    def _store(event_id: int, arrangement: SeatingArrangement, db: Session) -> SeatingArrangement:
        ArrangementRepo.save(db, event_id, arrangement)
        GuestRepo.sync_table_assignments(db, event_id, arrangement)
        db.commit()
        return arrangement

    @staticmethod
    def _require_on_roster(guest_ids: Iterable[str], roster: List[GuestRef]) -> None:
        roster_ids = {guest.id for guest in roster}
        for guest_id in guest_ids:
            if guest_id not in roster_ids:
                raise GuestNotFound(guest_id)

    @staticmethod
    def get_arrangement(event_id: int, db: Session) -> SeatingArrangement:
        return SeatingService._current(event_id, db)

    @staticmethod
    def save_arrangement(event_id: int, arrangement: SeatingArrangement, db: Session) -> SeatingArrangement:
        """Replace the whole arrangement after checking its invariants"""
        EventRepo.require(db, event_id)
        validate_arrangement(arrangement)
        ArrangementRepo.get_record(db, event_id, for_update=True)

        roster = GuestRepo.roster(db, event_id)
        SeatingService._require_on_roster(known_guests(arrangement), roster)
        # Attending guests left out of the document go to the unassigned pool
        arrangement = assignment_service.reconcile_roster(arrangement, roster)

        SeatingService._store(event_id, arrangement, db)
        logger.info(f"Saved seating arrangement for event {event_id} with {len(arrangement.tables)} tables")
        return arrangement

    @staticmethod
    def sync_roster(event_id: int, db: Session) -> Optional[SeatingArrangement]:
        """Apply pending roster changes to the stored arrangement and commit"""
        arrangement = ArrangementRepo.load(db, event_id, for_update=True)
        if arrangement is None:
            db.commit()
            return None
        arrangement = assignment_service.reconcile_roster(arrangement, GuestRepo.roster(db, event_id))
        return SeatingService._store(event_id, arrangement, db)

    @staticmethod
    def add_table(event_id: int, table_data: TableCreate, db: Session) -> SeatingTable:
        arrangement = SeatingService._current(event_id, db, for_update=True)
        table = create_table(
            number=table_data.number,
            name=table_data.name,
            capacity=table_data.capacity,
            shape=table_data.shape,
            position=(table_data.x, table_data.y),
            table_id=table_data.id,
        )
        arrangement = assignment_service.add_table(arrangement, table)
        SeatingService._store(event_id, arrangement, db)
        return table

    @staticmethod
    def update_table(event_id: int, table_id: str, changes: Dict, db: Session) -> SeatingTable:
        arrangement = SeatingService._current(event_id, db, for_update=True)
        arrangement = assignment_service.update_table(arrangement, table_id, **changes)
        SeatingService._store(event_id, arrangement, db)
        return next(table for table in arrangement.tables if table.id == table_id)

    @staticmethod
    def remove_table(event_id: int, table_id: str, db: Session) -> SeatingArrangement:
        arrangement = SeatingService._current(event_id, db, for_update=True)
        arrangement = assignment_service.delete_table(arrangement, table_id)
        return SeatingService._store(event_id, arrangement, db)

    @staticmethod
    def assign_guest(
        event_id: int,
        table_id: str,
        guest_id: str,
        seat_number: Optional[int],
        db: Session
    ) -> SeatingArrangement:
        arrangement = SeatingService._current(event_id, db, for_update=True)
        arrangement = assignment_service.assign_guest(
            arrangement,
            table_id,
            guest_id,
            seat_number=seat_number,
            roster=GuestRepo.roster(db, event_id),
        )
        return SeatingService._store(event_id, arrangement, db)

    @staticmethod
    def unassign_guest(event_id: int, table_id: str, guest_id: str, db: Session) -> SeatingArrangement:
        arrangement = SeatingService._current(event_id, db, for_update=True)
        arrangement = assignment_service.unassign_guest(arrangement, table_id, guest_id)
        return SeatingService._store(event_id, arrangement, db)

    @staticmethod
    def optimize(event_id: int, request: OptimizeRequest, db: Session) -> Dict:
        """Run the optimizer and store its result as the current arrangement

        Collections missing from the request fall back to the event's current
        tables, attending roster and stored preferences.
        """
        current = SeatingService._current(event_id, db, for_update=True)

        if request.tables is None:
            tables = current.tables
        else:
            duplicates = _duplicates(table.id for table in request.tables)
            if duplicates:
                raise DuplicateTable(duplicates[0])
            existing = {table.id: table for table in current.tables}
            tables = []
            for index, requested in enumerate(request.tables, start=1):
                if requested.id in existing:
                    tables.append(existing[requested.id].model_copy(update={"capacity": requested.capacity}))
                else:
                    tables.append(create_table(index, f"Table {index}", requested.capacity, table_id=requested.id))

        if request.guests is None:
            guests = GuestRepo.roster(db, event_id)
        else:
            duplicates = _duplicates(guest.id for guest in request.guests)
            if duplicates:
                raise DuplicateAssignment(duplicates)
            SeatingService._require_on_roster(
                (guest.id for guest in request.guests), GuestRepo.roster(db, event_id)
            )
            guests = [GuestRef(id=guest.id, name=guest.name) for guest in request.guests]

        preferences = request.preferences
        if preferences is None:
            preferences = PreferenceRepo.list_for_event(db, event_id)

        arrangement = optimize_seating(tables, guests, preferences)
        validate_arrangement(arrangement)
        stats = arrangement_stats(arrangement)

        # Roster guests not passed to the optimizer stay in the pool
        arrangement = assignment_service.reconcile_roster(arrangement, GuestRepo.roster(db, event_id))
        SeatingService._store(event_id, arrangement, db)

        return {
            "optimized": True,
            "arrangement": arrangement,
            "stats": {
                "total_guests": len(guests),
                "seated_guests": stats["seated_guests"],
                "unassigned_guests": stats["unassigned_guests"],
            },
        }

    @staticmethod
    def generate_tables(
        event_id: int,
        layout_id: int,
        capacity: Optional[int],
        shape: TableShape,
        db: Session
    ) -> SeatingArrangement:
        """Replace the arrangement's tables with one empty table per layout position

        Guests seated at the previous tables return to the unassigned pool.
        """
        current = SeatingService._current(event_id, db, for_update=True)
        layout = LayoutRepo.require(db, event_id, layout_id)
        tables = generate_tables_from_layout(
            VenueLayout.model_validate(layout.layout_data),
            capacity or settings.DEFAULT_TABLE_CAPACITY,
            shape,
        )

        pool: List[GuestRef] = [guest.as_ref() for table in current.tables for guest in table.guests]
        pool.extend(current.unassigned_guests)
        arrangement = SeatingArrangement(tables=tables, unassigned_guests=pool)
        return SeatingService._store(event_id, arrangement, db)

    @staticmethod
    def get_preferences(event_id: int, db: Session) -> List[SeatingPreferenceIn]:
        EventRepo.require(db, event_id)
        return PreferenceRepo.list_for_event(db, event_id)

    @staticmethod
    def save_preferences(
        event_id: int,
        preferences: List[SeatingPreferenceIn],
        db: Session
    ) -> List[SeatingPreferenceIn]:
        EventRepo.require(db, event_id)
        duplicates = _duplicates(preference.guest_id for preference in preferences)
        if duplicates:
            raise DuplicatePreference(duplicates)

        guest_ids = {guest.id for guest in GuestRepo.list_for_event(db, event_id)}
        for preference in preferences:
            if preference.guest_id not in guest_ids:
                raise GuestNotFound(preference.guest_id)
        PreferenceRepo.replace_for_event(db, event_id, preferences)
        db.commit()
        return preferences

    @staticmethod
    def get_seating_summary(public_code: str, db: Session) -> Dict:
        """Get public seating summary"""
        event = EventRepo.get_by_public_code(db, public_code)
        if not event:
            raise EventNotFound(public_code)

        arrangement = ArrangementRepo.load(db, event.id) or SeatingArrangement()
        stats = arrangement_stats(arrangement)

        tables = [
            {
                "table_number": table.number,
                "table_name": table.name,
                "total_guests": table.occupancy,
                "capacity": table.capacity,
                "available_seats": table.capacity - table.occupancy
            }
            for table in arrangement.tables
        ]

        return {
            "event_name": event.name,
            "event_date": event.date.isoformat(),
            "total_guests": stats["total_guests"],
            "seated_guests": stats["seated_guests"],
            "total_tables": stats["total_tables"],
            "tables": tables
        }
