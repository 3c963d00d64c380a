"""
Admin API routes - requires authentication
"""

import secrets
from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.models import Event, Guest
from app.schemas.event import EventCreate
from app.schemas.guest import GuestCreate, GuestUpdate, GuestResponse
from app.services.excel_service import ExcelService
from app.services.repositories import ArrangementRepo, GuestRepo
from app.services.seating_model import arrangement_stats
from app.services.seating_service import SeatingService
from app.utils.security import verify_admin_token
from app.utils.responses import success_response, error_response, not_found_error

router = APIRouter()

def _event_payload(event: Event) -> dict:
    return {
        "id": event.id,
        "name": event.name,
        "date": event.date.isoformat(),
        "organizer_email": event.organizer_email,
        "public_code": event.public_code,
        "created_at": event.created_at.isoformat()
    }

def _guest_payload(guest: Guest) -> dict:
    return GuestResponse.model_validate(guest).model_dump()

def _get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        not_found_error("Event")
    return event

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Create a new event"""
    # Generate unique public code
    public_code = secrets.token_urlsafe(8)
    while db.query(Event).filter(Event.public_code == public_code).first():
        public_code = secrets.token_urlsafe(8)

    event = Event(
        name=event_data.name,
        date=event_data.date,
        organizer_email=event_data.organizer_email,
        public_code=public_code
    )

    db.add(event)
    db.commit()
    db.refresh(event)

    return success_response(
        message="Event created successfully",
        data=_event_payload(event),
        status_code=201
    )

@router.get("/events/{event_id}")
async def get_event_details(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Get detailed event information"""
    event = _get_event(db, event_id)

    total_guests = db.query(Guest).filter(Guest.event_id == event_id).count()
    arrangement = ArrangementRepo.load(db, event_id)
    stats = arrangement_stats(arrangement) if arrangement else {"total_tables": 0, "seated_guests": 0}

    return success_response(
        message="Event details retrieved",
        data={
            **_event_payload(event),
            "total_guests": total_guests,
            "total_tables": stats["total_tables"],
            "seated_guests": stats["seated_guests"]
        }
    )

@router.delete("/events/{event_id}")
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete an event with its guests, arrangement and layouts"""
    event = _get_event(db, event_id)

    db.delete(event)
    db.commit()

    return success_response(
        message="Event deleted successfully",
        data={"deleted_event_id": event_id}
    )

@router.get("/events/{event_id}/guests")
async def search_guests(
    event_id: int,
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Search and list guests for an event"""
    _get_event(db, event_id)

    query = db.query(Guest).filter(Guest.event_id == event_id)
    if search:
        query = query.filter(Guest.name.ilike(f"%{search}%"))

    total = query.count()
    offset = (page - 1) * per_page
    guests = query.order_by(Guest.name).offset(offset).limit(per_page).all()

    return success_response(
        message="Guests retrieved successfully",
        data={
            "guests": [_guest_payload(guest) for guest in guests],
            "pagination": {
                "page": page,
                "per_page": per_page,
                "total": total,
                "pages": (total + per_page - 1) // per_page
            }
        }
    )

@router.post("/events/{event_id}/guests")
async def create_guest(
    event_id: int,
    guest_data: GuestCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Add a guest to the roster; new guests start unassigned"""
    _get_event(db, event_id)

    if guest_data.rsvp_status not in ExcelService.RSVP_VALUES:
        return error_response(
            message="Validation failed",
            details=[f"Invalid RSVP status '{guest_data.rsvp_status}'"],
            status_code=422
        )

    guest = Guest(
        event_id=event_id,
        name=guest_data.name,
        dietary=guest_data.dietary,
        rsvp_status=guest_data.rsvp_status
    )
    db.add(guest)
    db.flush()
    SeatingService.sync_roster(event_id, db)
    db.refresh(guest)

    return success_response(
        message="Guest created successfully",
        data=_guest_payload(guest),
        status_code=201
    )

@router.patch("/events/{event_id}/guests/{guest_id}")
async def update_guest(
    event_id: int,
    guest_id: str,
    guest_update: GuestUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Update guest information"""
    _get_event(db, event_id)

    guest = GuestRepo.get(db, event_id, guest_id)
    if not guest:
        not_found_error("Guest")

    if guest_update.rsvp_status and guest_update.rsvp_status not in ExcelService.RSVP_VALUES:
        return error_response(
            message="Validation failed",
            details=[f"Invalid RSVP status '{guest_update.rsvp_status}'"],
            status_code=422
        )

    if guest_update.name:
        guest.name = guest_update.name
    if guest_update.dietary:
        guest.dietary = guest_update.dietary
    if guest_update.rsvp_status:
        guest.rsvp_status = guest_update.rsvp_status

    db.flush()
    SeatingService.sync_roster(event_id, db)
    db.refresh(guest)

    return success_response(
        message="Guest updated successfully",
        data=_guest_payload(guest)
    )

@router.delete("/events/{event_id}/guests/{guest_id}")
async def delete_guest(
    event_id: int,
    guest_id: str,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete a guest and drop them from the seating arrangement"""
    _get_event(db, event_id)

    guest = GuestRepo.get(db, event_id, guest_id)
    if not guest:
        not_found_error("Guest")

    db.delete(guest)
    db.flush()
    SeatingService.sync_roster(event_id, db)

    return success_response(
        message="Guest deleted successfully",
        data={"deleted_guest_id": guest_id}
    )

@router.post("/events/{event_id}/guests/upload")
async def upload_guests(
    event_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Import guests from an Excel roster"""
    _get_event(db, event_id)

    if not file.filename.endswith(('.xlsx', '.xls')):
        return error_response(
            message="Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            status_code=400
        )

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        return error_response(
            message="File too large",
            status_code=413
        )

    success, errors, processed_count = ExcelService.process_excel_upload(
        file_content=file_content,
        event_id=event_id,
        db=db
    )

    if not success:
        return error_response(
            message="Excel file validation failed",
            details=errors,
            status_code=422
        )

    # Newly imported guests join the unassigned pool
    SeatingService.sync_roster(event_id, db)

    return success_response(
        message=f"Excel file processed successfully. {processed_count} guests imported.",
        data={
            "processed_count": processed_count,
            "filename": file.filename
        }
    )

@router.get("/template/guest_list_template.xlsx")
async def download_template(token: str = Depends(verify_admin_token)):
    """Download the Excel roster template"""
    return Response(
        content=ExcelService.create_template(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=guest_list_template.xlsx"}
    )
