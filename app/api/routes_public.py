"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.seating_service import SeatingService
from app.utils.security import rate_limit_check, get_client_ip
from app.utils.responses import success_response, rate_limit_error

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/events/{public_code}/seating")
async def get_seating_summary(
    public_code: str,
    request: Request,
    db: Session = Depends(get_db)
):
    """Get public per-table occupancy summary"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        rate_limit_error()

    summary = SeatingService.get_seating_summary(public_code=public_code, db=db)

    return success_response(
        message="Seating summary retrieved successfully",
        data=summary
    )
