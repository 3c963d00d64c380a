"""
Event-related Pydantic schemas
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr

class EventCreate(BaseModel):
    """Schema for creating an event"""
    name: str
    date: datetime
    organizer_email: EmailStr

class EventResponse(BaseModel):
    """Basic event response"""
    id: int
    name: str
    date: datetime
    organizer_email: str
    public_code: str
    created_at: datetime
    
    class Config:
        from_attributes = True

class EventDetail(EventResponse):
    """Detailed event response with counts"""
    total_guests: int
    total_tables: int
    seated_guests: int
