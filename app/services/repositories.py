"""
Repository layer over the SQLAlchemy models.

The arrangement is stored as one JSON document per event; repositories only
load and store, they never commit. The calling service commits once per
load -> mutate -> save unit.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import EventNotFound, LayoutNotFound
from app.models import Event, Guest, SeatingArrangement, SeatingLayout, SeatingPreference
from app.schemas.seating import GuestRef, SeatingArrangement as ArrangementSchema, SeatingPreferenceIn


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_public_code(db: Session, public_code: str) -> Optional[Event]:
        return db.query(Event).filter(Event.public_code == public_code).first()

    @staticmethod
    def get_by_id(db: Session, event_id: int) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def require(db: Session, event_id: int) -> Event:
        event = EventRepo.get_by_id(db, event_id)
        if not event:
            raise EventNotFound(event_id)
        return event


# -------- Guest repository --------

class GuestRepo:
    @staticmethod
    def list_for_event(db: Session, event_id: int) -> List[Guest]:
        return db.query(Guest).filter(Guest.event_id == event_id).order_by(Guest.name, Guest.id).all()

    @staticmethod
    def get(db: Session, event_id: int, guest_id: str) -> Optional[Guest]:
        return db.query(Guest).filter(Guest.event_id == event_id, Guest.id == guest_id).first()

    @staticmethod
    def roster(db: Session, event_id: int) -> List[GuestRef]:
        """Attending guests as the seating core sees them"""
        return [
            GuestRef(id=guest.id, name=guest.name)
            for guest in GuestRepo.list_for_event(db, event_id)
            if guest.is_attending
        ]

    @staticmethod
    def sync_table_assignments(db: Session, event_id: int, arrangement: ArrangementSchema) -> None:
        """Mirror an arrangement onto Guest.table_name / Guest.seat_no"""
        seats = {
            seated.id: (table.name, seated.seat_number)
            for table in arrangement.tables
            for seated in table.guests
        }
        for guest in GuestRepo.list_for_event(db, event_id):
            guest.table_name, guest.seat_no = seats.get(guest.id, (None, None))


# -------- Arrangement repository --------

class ArrangementRepo:
    @staticmethod
    def get_record(db: Session, event_id: int, for_update: bool = False) -> Optional[SeatingArrangement]:
        query = db.query(SeatingArrangement).filter(SeatingArrangement.event_id == event_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def load(db: Session, event_id: int, for_update: bool = False) -> Optional[ArrangementSchema]:
        record = ArrangementRepo.get_record(db, event_id, for_update=for_update)
        if record is None:
            return None
        return ArrangementSchema.model_validate(record.arrangement_data)

    @staticmethod
    def save(db: Session, event_id: int, arrangement: ArrangementSchema) -> SeatingArrangement:
        """Replace the event's arrangement document"""
        data = arrangement.model_dump(mode="json", by_alias=True)
        record = ArrangementRepo.get_record(db, event_id)
        if record:
            record.arrangement_data = data
            record.updated_at = datetime.utcnow()
        else:
            record = SeatingArrangement(event_id=event_id, arrangement_data=data)
            db.add(record)
        db.flush()
        return record


# -------- Preference repository --------

class PreferenceRepo:
    @staticmethod
    def list_for_event(db: Session, event_id: int) -> List[SeatingPreferenceIn]:
        records = (
            db.query(SeatingPreference)
            .filter(SeatingPreference.event_id == event_id)
            .order_by(SeatingPreference.id)
            .all()
        )
        return [
            SeatingPreferenceIn(
                guest_id=record.guest_id,
                prefer_with=record.prefer_with or [],
                avoid_with=record.avoid_with or [],
                special_needs=record.special_needs,
            )
            for record in records
        ]

    @staticmethod
    def replace_for_event(db: Session, event_id: int, preferences: List[SeatingPreferenceIn]) -> None:
        db.query(SeatingPreference).filter(SeatingPreference.event_id == event_id).delete()
        for preference in preferences:
            db.add(SeatingPreference(
                event_id=event_id,
                guest_id=preference.guest_id,
                prefer_with=list(preference.prefer_with),
                avoid_with=list(preference.avoid_with),
                special_needs=preference.special_needs,
            ))
        db.flush()


# -------- Layout repository --------

class LayoutRepo:
    @staticmethod
    def list_for_event(db: Session, event_id: int) -> List[SeatingLayout]:
        return (
            db.query(SeatingLayout)
            .filter(SeatingLayout.event_id == event_id)
            .order_by(SeatingLayout.created_at.desc(), SeatingLayout.id.desc())
            .all()
        )

    @staticmethod
    def require(db: Session, event_id: int, layout_id: int) -> SeatingLayout:
        layout = db.query(SeatingLayout).filter(
            SeatingLayout.event_id == event_id,
            SeatingLayout.id == layout_id
        ).first()
        if not layout:
            raise LayoutNotFound(layout_id)
        return layout

    @staticmethod
    def clear_default(db: Session, event_id: int) -> None:
        db.query(SeatingLayout).filter(
            SeatingLayout.event_id == event_id,
            SeatingLayout.is_default == True
        ).update({SeatingLayout.is_default: False}, synchronize_session="fetch")
