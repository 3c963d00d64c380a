"""
Seating preference model
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.core.db import Base

class SeatingPreference(Base):
    __tablename__ = "seating_preferences"
    
    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    guest_id = Column(String(36), ForeignKey("guests.id"), nullable=False, unique=True)
    prefer_with = Column(JSON, default=list)
    avoid_with = Column(JSON, default=list)
    special_needs = Column(Text, nullable=True)
    
    # Relationships
    event = relationship("Event", back_populates="preferences")
    guest = relationship("Guest", back_populates="preference")
