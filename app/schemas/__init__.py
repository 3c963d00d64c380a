"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .guest import *
from .seating import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventCreate",
    "EventResponse",
    "EventDetail",
    "GuestResponse",
    "GuestCreate",
    "GuestUpdate",
    "GuestRef",
    "SeatedGuest",
    "SeatingTable",
    "SeatingArrangement",
    "SeatingPreferenceIn",
    "SeatingPreferencesUpdate",
    "TableShape",
    "TableCreate",
    "TableUpdate",
    "AssignGuestRequest",
    "OptimizeRequest",
    "VenueLayout",
    "LayoutCreate",
    "LayoutUpdate",
    "LayoutDuplicate",
    "GenerateTablesRequest",
]
