"""
Database models package
"""

from .event import Event
from .guest import Guest
from .arrangement import SeatingArrangement
from .layout import SeatingLayout
from .preference import SeatingPreference

__all__ = ["Event", "Guest", "SeatingArrangement", "SeatingLayout", "SeatingPreference"]
