# backend/reserve_api/schemas/partner.py
"""
Pydantic schemas for the partner (aggregator) API.

Request models are deliberately lenient: bad timestamps or party sizes are
handled by the booking core (zero capacity / defaults), not rejected with 422.
"""

from typing import Any

from pydantic import BaseModel, Field


class AvailabilityLookupRequest(BaseModel):
    merchant_id: str = ""
    service_id: str = Field("", description='"<merchant guid>:noon" or "<merchant guid>:evening"')
    slots: list[Any] = Field(default_factory=list, description="ISO-8601 start times")
    party_size: Any = 2


class SlotCapacity(BaseModel):
    start: str
    capacity: int


class AvailabilityLookupResponse(BaseModel):
    results: list[SlotCapacity]


class Customer(BaseModel):
    first_name: Any = None
    last_name: Any = None
    email: Any = None
    phone: Any = None

    model_config = {"extra": "ignore"}


class BookingCreateRequest(BaseModel):
    merchant_id: str = ""
    service_id: str = ""
    start: Any = None
    slots: list[Any] = Field(default_factory=list)
    party_size: Any = None
    customer: Customer = Field(default_factory=Customer)

    model_config = {"extra": "ignore"}


class BookingCreated(BaseModel):
    booking_id: str
    status: str = "CONFIRMED"
    start: str
    party_size: int


class BookingUpdateRequest(BaseModel):
    merchant_id: str = ""
    booking_id: str = ""
    action: str = Field("", description="CANCEL | MODIFY")
    new_start: Any = None
    new_party_size: Any = None

    model_config = {"extra": "ignore"}
