"""
Error classification for the booking core.

Services return plain result dicts; failures carry a coarse HTTP-class `code`,
a short `message` and a machine-readable `error` from the table below.
Routers translate these into responses, nothing in the core raises
HTTPException.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    PERSISTENCE = "PERSISTENCE"


# HTTP-class status codes
STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500


# error -> (kind, code, default message)
ERRORS: dict[str, tuple[ErrorKind, int, str]] = {
    "MERCHANT_NOT_FOUND": (ErrorKind.NOT_FOUND, STATUS_NOT_FOUND, "merchant not found"),
    "BOOKING_NOT_FOUND": (ErrorKind.NOT_FOUND, STATUS_NOT_FOUND, "booking not found"),
    "MISSING_START": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "missing 'start' or 'slots[0]'"),
    "INVALID_START": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "invalid start datetime"),
    "MISSING_BOOKING_ID": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "missing booking_id"),
    "INVALID_ACTION": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "invalid action"),
    "MISSING_NEW_START": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "missing new_start"),
    "INVALID_NEW_START": (ErrorKind.VALIDATION, STATUS_BAD_REQUEST, "invalid new_start"),
    "SLOT_UNAVAILABLE": (ErrorKind.CONFLICT, STATUS_CONFLICT, "slot unavailable"),
    "PARTY_EXCEEDS_CAPACITY": (ErrorKind.CONFLICT, STATUS_CONFLICT, "party exceeds capacity"),
    "NEW_SLOT_UNAVAILABLE": (ErrorKind.CONFLICT, STATUS_CONFLICT, "new slot unavailable"),
    "BOOKING_NOT_ACTIVE": (ErrorKind.CONFLICT, STATUS_CONFLICT, "booking is no longer active"),
    "DB_WRITE_FAILED": (ErrorKind.PERSISTENCE, STATUS_INTERNAL_ERROR, "db insert failed"),
}


def error_result(error: str, message: str | None = None, status: str = "ERROR", **extra) -> dict:
    """
    Build a failure result dict.

    `status` is CONFLICT for create-time capacity failures and ERROR otherwise
    (a modify that hits a full slot still reports ERROR with a 409 code).
    """
    kind, code, default_message = ERRORS[error]
    return {
        "status": status,
        "code": code,
        "error": error,
        "kind": kind.value,
        "message": message or default_message,
        **extra,
    }
