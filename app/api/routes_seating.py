"""
Seating API routes - arrangement, tables, assignments, optimizer and layouts
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.seating import (
    AssignGuestRequest,
    GenerateTablesRequest,
    LayoutCreate,
    LayoutDuplicate,
    LayoutUpdate,
    OptimizeRequest,
    SeatingArrangement,
    SeatingPreferencesUpdate,
    TableCreate,
    TableUpdate,
)
from app.services.excel_service import ExcelService
from app.services.layout_service import LayoutService
from app.services.repositories import EventRepo
from app.services.seating_service import SeatingService
from app.utils.security import verify_admin_token
from app.utils.responses import success_response

router = APIRouter()

def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)

# -------- Arrangement --------

@router.get("/events/{event_id}/seating")
async def get_arrangement(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Fetch the current seating arrangement"""
    arrangement = SeatingService.get_arrangement(event_id, db)
    return success_response(message="Seating arrangement retrieved", data=_dump(arrangement))

@router.post("/events/{event_id}/seating")
@router.put("/events/{event_id}/seating")
async def save_arrangement(
    event_id: int,
    arrangement: SeatingArrangement,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Replace the seating arrangement"""
    saved = SeatingService.save_arrangement(event_id, arrangement, db)
    return success_response(message="Seating arrangement saved", data=_dump(saved))

@router.get("/events/{event_id}/seating/export.xlsx")
async def export_arrangement(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Download the seating chart as Excel"""
    event = EventRepo.require(db, event_id)
    arrangement = SeatingService.get_arrangement(event_id, db)

    return Response(
        content=ExcelService.export_arrangement(arrangement),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=seating_chart_{event.public_code}.xlsx"}
    )

# -------- Tables --------

@router.post("/events/{event_id}/seating/tables")
async def create_table(
    event_id: int,
    table_data: TableCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Add a table to the arrangement"""
    table = SeatingService.add_table(event_id, table_data, db)
    return success_response(message="Table created", data=_dump(table), status_code=201)

@router.patch("/events/{event_id}/seating/tables/{table_id}")
async def update_table(
    event_id: int,
    table_id: str,
    updates: TableUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Update table fields"""
    table = SeatingService.update_table(event_id, table_id, updates.model_dump(exclude_unset=True), db)
    return success_response(message="Table updated", data=_dump(table))

@router.delete("/events/{event_id}/seating/tables/{table_id}")
async def delete_table(
    event_id: int,
    table_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete a table; its guests return to the unassigned pool"""
    arrangement = SeatingService.remove_table(event_id, table_id, db)
    return success_response(
        message="Table deleted",
        data={"id": table_id, "arrangement": _dump(arrangement)}
    )

# -------- Assignments --------

@router.post("/events/{event_id}/seating/tables/{table_id}/guests")
async def assign_guest(
    event_id: int,
    table_id: str,
    request: AssignGuestRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat a guest at a table"""
    arrangement = SeatingService.assign_guest(
        event_id, table_id, request.guest_id, request.seat_number, db
    )
    return success_response(message="Guest assigned", data=_dump(arrangement))

@router.delete("/events/{event_id}/seating/tables/{table_id}/guests/{guest_id}")
async def unassign_guest(
    event_id: int,
    table_id: str,
    guest_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Move a guest from a table back to the unassigned pool"""
    arrangement = SeatingService.unassign_guest(event_id, table_id, guest_id, db)
    return success_response(message="Guest unassigned", data=_dump(arrangement))

# -------- Optimizer and preferences --------

@router.post("/events/{event_id}/seating/optimize")
async def optimize_seating(
    event_id: int,
    request: OptimizeRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Seat every guest from scratch using the greedy optimizer"""
    result = SeatingService.optimize(event_id, request, db)
    stats = result["stats"]
    return success_response(
        message="Seating optimized",
        data={
            "optimized": True,
            "arrangement": _dump(result["arrangement"]),
            "stats": {
                "totalGuests": stats["total_guests"],
                "seatedGuests": stats["seated_guests"],
                "unassignedGuests": stats["unassigned_guests"]
            }
        }
    )

@router.get("/events/{event_id}/seating/preferences")
async def get_preferences(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    preferences = SeatingService.get_preferences(event_id, db)
    return success_response(
        message="Seating preferences retrieved",
        data={"preferences": [_dump(preference) for preference in preferences]}
    )

@router.put("/events/{event_id}/seating/preferences")
async def save_preferences(
    event_id: int,
    request: SeatingPreferencesUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Replace all seating preferences for the event"""
    preferences = SeatingService.save_preferences(event_id, request.preferences, db)
    return success_response(
        message="Seating preferences saved",
        data={"preferences": [_dump(preference) for preference in preferences]}
    )

# -------- Layouts --------

@router.get("/events/{event_id}/layouts")
async def list_layouts(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    layouts = LayoutService.list_layouts(event_id, db)
    return success_response(
        message="Layouts retrieved",
        data={"layouts": [LayoutService.serialize(layout) for layout in layouts]}
    )

@router.post("/events/{event_id}/layouts")
async def create_layout(
    event_id: int,
    layout_data: LayoutCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    layout = LayoutService.create_layout(event_id, layout_data, db)
    return success_response(message="Layout created", data=LayoutService.serialize(layout), status_code=201)

@router.patch("/events/{event_id}/layouts/{layout_id}")
async def update_layout(
    event_id: int,
    layout_id: int,
    updates: LayoutUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    layout = LayoutService.update_layout(event_id, layout_id, updates, db)
    return success_response(message="Layout updated", data=LayoutService.serialize(layout))

@router.post("/events/{event_id}/layouts/{layout_id}/duplicate")
async def duplicate_layout(
    event_id: int,
    layout_id: int,
    request: LayoutDuplicate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Copy a layout under a new name"""
    layout = LayoutService.duplicate_layout(event_id, layout_id, request.name, db)
    return success_response(message="Layout duplicated", data=LayoutService.serialize(layout), status_code=201)

@router.delete("/events/{event_id}/layouts/{layout_id}")
async def delete_layout(
    event_id: int,
    layout_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    LayoutService.delete_layout(event_id, layout_id, db)
    return success_response(message="Layout deleted", data={"id": layout_id})

@router.post("/events/{event_id}/layouts/{layout_id}/generate-tables")
async def generate_tables(
    event_id: int,
    layout_id: int,
    request: GenerateTablesRequest,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Replace the arrangement's tables with one table per layout position"""
    arrangement = SeatingService.generate_tables(event_id, layout_id, request.capacity, request.shape, db)
    return success_response(message="Tables generated from layout", data=_dump(arrangement))
