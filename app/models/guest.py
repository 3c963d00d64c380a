"""
Guest model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class Guest(Base):
    __tablename__ = "guests"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    dietary = Column(String(255), default="none")  # none, vegetarian, halal, allergies:<text>
    rsvp_status = Column(String(20), default="pending")  # pending, confirmed, declined
    # Mirrors the saved arrangement; NULL means unassigned
    table_name = Column(String(100), nullable=True)
    seat_no = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    event = relationship("Event", back_populates="guests")
    preference = relationship(
        "SeatingPreference", back_populates="guest", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def is_attending(self) -> bool:
        return self.rsvp_status != "declined"
