# backend/reserve_api/routers/partner.py
"""
Partner API endpoints (reservation aggregator).

GET  /google/health
POST /google/availability-lookup
POST /google/create-booking     (X-Idempotency-Key optional)
POST /google/update-booking

Access: X-Api-Key (+ optional X-Signature), checked by partner_auth_middleware.
"""

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.partner import (
    AvailabilityLookupRequest,
    AvailabilityLookupResponse,
    BookingCreateRequest,
    BookingCreated,
    BookingUpdateRequest,
)
from ..services.bookings.service import (
    DEFAULT_PARTY_SIZE,
    create_booking,
    party_size_of,
    update_booking,
)
from ..services.slots import lookup_availability
from ..utils.timezone import format_iso8601, local_now

router = APIRouter(prefix="/google", tags=["partner"])


@router.get("/health")
def health():
    return {"status": "ok", "time": format_iso8601(local_now())}


@router.post("/availability-lookup", response_model=AvailabilityLookupResponse)
def availability_lookup(
    data: AvailabilityLookupRequest,
    db: Session = Depends(get_db),
):
    results = lookup_availability(
        db,
        data.merchant_id,
        data.service_id,
        data.slots,
        party_size_of(data.party_size, DEFAULT_PARTY_SIZE),
    )
    return {"results": results}


@router.post("/create-booking")
def create(
    data: BookingCreateRequest,
    x_idempotency_key: str | None = Header(None),
    db: Session = Depends(get_db),
):
    res = create_booking(db, data.model_dump(), x_idempotency_key)

    if res["status"] == "CONFLICT":
        return _error("UNAVAILABLE", res["message"], 409)
    if res["status"] == "ERROR":
        return _error("ERROR", res["message"], res.get("code", 400))

    body = BookingCreated(
        booking_id=res["id"],
        start=res["start"],
        party_size=res["party"],
    )
    return JSONResponse(
        status_code=200 if res.get("replayed") else 201,
        content=body.model_dump(),
    )


@router.post("/update-booking")
def update(
    data: BookingUpdateRequest,
    db: Session = Depends(get_db),
):
    res = update_booking(db, data.model_dump())

    if res["status"] == "ERROR":
        return _error("ERROR", res["message"], res.get("code", 400))
    return res


def _error(error: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
    )
