"""
Guest-related Pydantic schemas
"""

from typing import Optional
from pydantic import BaseModel

class GuestCreate(BaseModel):
    """Schema for creating a guest"""
    name: str
    dietary: str = "none"
    rsvp_status: str = "pending"

class GuestUpdate(BaseModel):
    """Schema for updating a guest"""
    name: Optional[str] = None
    dietary: Optional[str] = None
    rsvp_status: Optional[str] = None

class GuestResponse(BaseModel):
    """Guest response schema"""
    id: str
    name: str
    dietary: str
    rsvp_status: str
    table_name: Optional[str] = None
    seat_no: Optional[int] = None
    
    class Config:
        from_attributes = True
