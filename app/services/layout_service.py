"""
Venue layout service
"""

import copy
import logging
from typing import List

from sqlalchemy.orm import Session

from app.models import SeatingLayout
from app.schemas.seating import LayoutCreate, LayoutUpdate
from app.services.repositories import EventRepo, LayoutRepo

logger = logging.getLogger(__name__)

class LayoutService:
    """Named, reusable table positions; at most one default per event"""

    @staticmethod
    def serialize(layout: SeatingLayout) -> dict:
        return {
            "id": layout.id,
            "name": layout.name,
            "venueLayout": layout.layout_data,
            "isDefault": bool(layout.is_default),
            "createdAt": layout.created_at.isoformat() if layout.created_at else None,
            "updatedAt": layout.updated_at.isoformat() if layout.updated_at else None,
        }

    @staticmethod
    def list_layouts(event_id: int, db: Session) -> List[SeatingLayout]:
        EventRepo.require(db, event_id)
        return LayoutRepo.list_for_event(db, event_id)

    @staticmethod
    def create_layout(event_id: int, layout_data: LayoutCreate, db: Session) -> SeatingLayout:
        EventRepo.require(db, event_id)
        if layout_data.is_default:
            LayoutRepo.clear_default(db, event_id)

        layout = SeatingLayout(
            event_id=event_id,
            name=layout_data.name,
            layout_data=layout_data.venue_layout.model_dump(mode="json", by_alias=True),
            is_default=layout_data.is_default
        )
        db.add(layout)
        db.commit()
        db.refresh(layout)
        logger.info(f"Created layout {layout.id} for event {event_id}")
        return layout

    @staticmethod
    def update_layout(event_id: int, layout_id: int, updates: LayoutUpdate, db: Session) -> SeatingLayout:
        layout = LayoutRepo.require(db, event_id, layout_id)

        if updates.is_default:
            LayoutRepo.clear_default(db, event_id)
        if updates.name is not None:
            layout.name = updates.name
        if updates.venue_layout is not None:
            layout.layout_data = updates.venue_layout.model_dump(mode="json", by_alias=True)
        if updates.is_default is not None:
            layout.is_default = updates.is_default

        db.commit()
        db.refresh(layout)
        return layout

    @staticmethod
    def duplicate_layout(event_id: int, layout_id: int, name: str, db: Session) -> SeatingLayout:
        """Copy a layout's table positions under a new name; the copy is never the default"""
        original = LayoutRepo.require(db, event_id, layout_id)

        layout = SeatingLayout(
            event_id=event_id,
            name=name,
            layout_data=copy.deepcopy(original.layout_data),
            is_default=False
        )
        db.add(layout)
        db.commit()
        db.refresh(layout)
        logger.info(f"Duplicated layout {layout_id} as {layout.id} for event {event_id}")
        return layout

    @staticmethod
    def delete_layout(event_id: int, layout_id: int, db: Session) -> None:
        layout = LayoutRepo.require(db, event_id, layout_id)
        db.delete(layout)
        db.commit()
