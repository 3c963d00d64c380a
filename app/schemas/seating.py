"""
Seating-related Pydantic schemas

Field names are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that accepts and emits camelCase aliases"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TableShape(str, Enum):
    ROUND = "round"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    OVAL = "oval"


class GuestRef(CamelModel):
    """A guest as it appears in the roster or the unassigned pool"""
    id: str
    name: str


class SeatedGuest(GuestRef):
    """A guest seated at a table"""
    seat_number: Optional[int] = Field(default=None, ge=1)

    def as_ref(self) -> GuestRef:
        return GuestRef(id=self.id, name=self.name)


class SeatingTable(CamelModel):
    """One physical table and the guests currently seated at it"""
    id: str
    number: int = Field(gt=0)
    name: str
    capacity: int = Field(gt=0)
    shape: TableShape = TableShape.ROUND
    x: Optional[float] = None
    y: Optional[float] = None
    guests: List[SeatedGuest] = Field(default_factory=list)

    @property
    def occupancy(self) -> int:
        return len(self.guests)


class SeatingArrangement(CamelModel):
    """Complete snapshot of every table plus the unassigned pool"""
    tables: List[SeatingTable] = Field(default_factory=list)
    unassigned_guests: List[GuestRef] = Field(default_factory=list)


class SeatingPreferenceIn(CamelModel):
    """Per-guest soft preferences used by the optimizer"""
    guest_id: str
    prefer_with: List[str] = Field(default_factory=list)
    avoid_with: List[str] = Field(default_factory=list)
    special_needs: Optional[str] = None


class SeatingPreferencesUpdate(CamelModel):
    preferences: List[SeatingPreferenceIn]


class TableCreate(CamelModel):
    """Schema for creating a table; id is generated when omitted"""
    id: Optional[str] = None
    number: int = Field(gt=0)
    name: str
    # Validated by create_table so the error uses the seating taxonomy
    capacity: int
    shape: TableShape = TableShape.ROUND
    x: Optional[float] = None
    y: Optional[float] = None


class TableUpdate(CamelModel):
    number: Optional[int] = Field(default=None, gt=0)
    name: Optional[str] = None
    capacity: Optional[int] = None
    shape: Optional[TableShape] = None
    x: Optional[float] = None
    y: Optional[float] = None


class AssignGuestRequest(CamelModel):
    guest_id: str
    seat_number: Optional[int] = Field(default=None, ge=1)


class OptimizeTable(CamelModel):
    id: str
    capacity: int = Field(gt=0)


class OptimizeGuest(CamelModel):
    id: str
    name: str
    group_id: Optional[str] = None


class OptimizeRequest(CamelModel):
    """Bulk optimization request; omitted collections come from the event"""
    tables: Optional[List[OptimizeTable]] = None
    guests: Optional[List[OptimizeGuest]] = None
    preferences: Optional[List[SeatingPreferenceIn]] = None


class LayoutTablePosition(CamelModel):
    id: str
    x: float
    y: float
    rotation: Optional[float] = None


class VenueLayout(CamelModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    tables: List[LayoutTablePosition] = Field(default_factory=list)


class LayoutCreate(CamelModel):
    name: str
    venue_layout: VenueLayout
    is_default: bool = False


class LayoutUpdate(CamelModel):
    name: Optional[str] = None
    venue_layout: Optional[VenueLayout] = None
    is_default: Optional[bool] = None


class LayoutDuplicate(CamelModel):
    name: str


class GenerateTablesRequest(CamelModel):
    capacity: Optional[int] = None
    shape: TableShape = TableShape.ROUND
