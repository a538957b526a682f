# backend/reserve_api/services/bookings/__init__.py
"""
Partner booking lifecycle.

store:   storage boundary (reflected booking table, state encoding)
filler:  structural values for required columns we do not own
service: create / cancel / modify workflow
"""

from .store import BookingState, BookingStore, DuplicateBookingId

__all__ = ["BookingState", "BookingStore", "DuplicateBookingId"]
