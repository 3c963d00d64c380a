"""
Seating error taxonomy

Every error here is a synchronous validation failure. The API layer renders
them through a single exception handler using ``error_code`` and
``status_code``.
"""

from typing import Any, Optional


class SeatingError(Exception):
    """Base class for seating failures"""

    error_code = "SEATING_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidCapacity(SeatingError):
    error_code = "INVALID_CAPACITY"
    status_code = 422

    def __init__(self, capacity: int, message: Optional[str] = None):
        super().__init__(message or f"Table capacity must be a positive integer, got {capacity}")
        self.capacity = capacity


class TableNotFound(SeatingError):
    error_code = "TABLE_NOT_FOUND"
    status_code = 404

    def __init__(self, table_id: str):
        super().__init__(f"Table '{table_id}' not found")
        self.table_id = table_id


class GuestNotFound(SeatingError):
    error_code = "GUEST_NOT_FOUND"
    status_code = 404

    def __init__(self, guest_id: str):
        super().__init__(f"Guest '{guest_id}' not found")
        self.guest_id = guest_id


class TableFull(SeatingError):
    error_code = "TABLE_FULL"
    status_code = 409

    def __init__(self, table_id: str, capacity: int):
        super().__init__(f"Table '{table_id}' is at its capacity of {capacity} guests")
        self.table_id = table_id
        self.capacity = capacity


class SeatTaken(SeatingError):
    error_code = "SEAT_TAKEN"
    status_code = 409

    def __init__(self, table_id: str, seat_number: int):
        super().__init__(f"Seat {seat_number} is already taken at table '{table_id}'")
        self.table_id = table_id
        self.seat_number = seat_number


class DuplicateTable(SeatingError):
    error_code = "DUPLICATE_TABLE"
    status_code = 409

    def __init__(self, table_id: str):
        super().__init__(f"Table '{table_id}' already exists")
        self.table_id = table_id


class DuplicateAssignment(SeatingError):
    error_code = "DUPLICATE_ASSIGNMENT"
    status_code = 422

    def __init__(self, guest_ids):
        super().__init__("Guests appear more than once in the arrangement", details=list(guest_ids))
        self.guest_ids = list(guest_ids)


class DuplicatePreference(SeatingError):
    error_code = "DUPLICATE_PREFERENCE"
    status_code = 422

    def __init__(self, guest_ids):
        super().__init__("Guests have more than one preference entry", details=list(guest_ids))
        self.guest_ids = list(guest_ids)


class LayoutNotFound(SeatingError):
    error_code = "LAYOUT_NOT_FOUND"
    status_code = 404

    def __init__(self, layout_id: int):
        super().__init__(f"Layout {layout_id} not found")
        self.layout_id = layout_id


class EventNotFound(SeatingError):
    error_code = "EVENT_NOT_FOUND"
    status_code = 404

    def __init__(self, event_ref):
        super().__init__(f"Event '{event_ref}' not found")
        self.event_ref = event_ref
