# backend/reserve_api/services/bookings/service.py
"""
Partner booking workflow: create, cancel, modify.

State machine:
    REQUESTED -> CONFIRMED  (create)
    CONFIRMED -> CANCELLED  (cancel, idempotent)
    CONFIRMED -> CONFIRMED  (modify date / time / party in place)

Concurrency: there is no lock around a slot. Two things keep us honest:
  - booking.guid is UNIQUE: a second insert of the same guid (idempotent
    retry, or a colliding random id) is answered as a replay of the first.
  - capacity is re-read from live counts right before the insert.
Two creates racing on the same slot can both pass the capacity check, so a
slot may end up over quota by (number of racers - 1). This is accepted.
"""

import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import settings
from ...core.errors import error_result
from ...utils.hashing import hash_value
from ...utils.phone import normalize_phone
from ...utils.timezone import format_atom, format_iso8601, local_now, parse_instant
from ..slots.engine import capacity_for
from .filler import fill_required
from .store import BookingState, BookingStore, DuplicateBookingId, timestamp_value

logger = logging.getLogger(__name__)

DEFAULT_PARTY_SIZE = 2
IDEMPOTENT_PREFIX = "IDEMP_"
RANDOM_PREFIX = "BK_"
IDEMPOTENT_DIGEST_LENGTH = 20

ACTION_CANCEL = "CANCEL"
ACTION_MODIFY = "MODIFY"


# ── Create ───────────────────────────────────────────────────────────────


def create_booking(
    db: Session,
    payload: dict,
    idempotency_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Create a confirmed booking.

    Payload:
        merchant_id:  merchant GUID
        service_id:   "<guid>:noon|evening" (optional)
        start:        ISO-8601 start, or
        slots:        list whose first element is the start
        party_size:   default 2, floored at 1
        customer:     {first_name, last_name, email, phone}

    Returns:
        {"status": "OK", "id", "start", "party"[, "replayed": True]}
        or an error result (status CONFLICT / ERROR, code, message).
    """
    store = BookingStore(db)
    now_local = local_now(now)

    # Step 1: merchant
    merchant_guid = str(payload.get("merchant_id") or "").strip()
    restaurant_id = store.resolve_merchant_id(merchant_guid)
    if not restaurant_id:
        return error_result("MERCHANT_NOT_FOUND")

    # Step 2: start (start OR slots[0])
    start_raw = payload.get("start") or _first_slot(payload.get("slots"))
    if not start_raw:
        return error_result("MISSING_START")
    try:
        start = parse_instant(start_raw)
    except ValueError:
        return error_result("INVALID_START")

    # Step 3: service / party
    service_id = str(payload.get("service_id") or "")
    party = party_size_of(payload.get("party_size"), DEFAULT_PARTY_SIZE)

    customer = payload.get("customer") or {}
    email = customer.get("email") or None

    # Step 4: idempotent replay, before any capacity check
    booking_id = None
    if idempotency_key:
        booking_id = idempotent_booking_id(
            merchant_guid, service_id, start, party, email, idempotency_key,
        )
        if store.exists(booking_id):
            logger.info(f"[BOOKING] idempotent replay {booking_id}")
            return _created(booking_id, start, party, replayed=True)

    # Step 5: capacity
    capacity = capacity_for(db, restaurant_id, service_id, start, now=now, store=store)
    if capacity <= 0:
        return error_result("SLOT_UNAVAILABLE", status="CONFLICT")
    if party > capacity:
        return error_result("PARTY_EXCEEDS_CAPACITY", status="CONFLICT")

    if booking_id is None:
        booking_id = random_booking_id(now_local)

    # Step 6: schema-adaptive insert
    record = _booking_record(
        store, restaurant_id, booking_id, start, party, customer, now_local,
    )
    try:
        store.insert(record)
    except DuplicateBookingId:
        # Concurrent create with the same guid won the race: same answer
        logger.info(f"[BOOKING] guid collision on insert, replaying {booking_id}")
        return _created(booking_id, start, party, replayed=True)
    except SQLAlchemyError as e:
        logger.exception(f"[BOOKING] insert failed for {booking_id}")
        return error_result("DB_WRITE_FAILED", f"db insert failed: {e}")

    logger.info(
        f"[BOOKING] created {booking_id}: restaurant={restaurant_id} "
        f"start={start.isoformat()} party={party}"
    )
    return _created(booking_id, start, party)


def _booking_record(
    store: BookingStore,
    restaurant_id: int,
    booking_id: str,
    start: datetime,
    party: int,
    customer: dict,
    now: datetime,
) -> dict:
    """Fields we own, plus filler for whatever else the schema requires."""
    first = str(customer.get("first_name") or "").strip()
    last = str(customer.get("last_name") or "").strip()
    name = f"{first} {last}".strip() or settings.default_customer_name

    record: dict[str, Any] = {
        "name": name,
        "email": str(customer.get("email") or "").strip() or None,
        "phone_number": normalize_phone(customer.get("phone")),
        "tableware_count": party,
        **store.slot_fields(start),
        "restaurant_id": restaurant_id,
        "guid": booking_id,
    }
    if store.has_column("source"):
        record["source"] = settings.booking_source
    record.update(store.state_fields(BookingState.CONFIRMED))
    for col in ("created_at", "updated_at"):
        if store.has_column(col):
            record[col] = timestamp_value(store.category(col), now)

    return fill_required(store.describe_columns(), record, start, now)


# ── Update (cancel / modify) ─────────────────────────────────────────────


def update_booking(
    db: Session,
    payload: dict,
    now: Optional[datetime] = None,
) -> dict:
    """
    Cancel or modify an existing booking.

    Payload:
        merchant_id:     merchant GUID
        booking_id:      booking guid
        action:          CANCEL | MODIFY
        new_start:       required for MODIFY
        new_party_size:  optional for MODIFY
    """
    store = BookingStore(db)
    now_local = local_now(now)

    booking_id = str(payload.get("booking_id") or "").strip()

    restaurant_id = store.resolve_merchant_id(str(payload.get("merchant_id") or ""))
    if not restaurant_id:
        return error_result("MERCHANT_NOT_FOUND", booking_id=booking_id)

    if not booking_id:
        return error_result("MISSING_BOOKING_ID", booking_id=booking_id)

    row = store.find_by_identifier(restaurant_id, booking_id)
    if row is None:
        return error_result("BOOKING_NOT_FOUND", booking_id=booking_id)

    action = str(payload.get("action") or "").strip().upper()
    if action not in (ACTION_CANCEL, ACTION_MODIFY):
        return error_result("INVALID_ACTION", booking_id=booking_id)

    if action == ACTION_CANCEL:
        return _cancel(store, booking_id, row, now_local)
    return _modify(db, store, restaurant_id, booking_id, row, payload, now, now_local)


def _cancel(store: BookingStore, booking_id: str, row: dict, now: datetime) -> dict:
    if store.state_of(row) is BookingState.CANCELLED:
        logger.info(f"[BOOKING] {booking_id} already cancelled")

    fields = store.state_fields(BookingState.CANCELLED)
    fields.update(_touch(store, now))
    try:
        store.update(booking_id, fields)
    except SQLAlchemyError as e:
        logger.exception(f"[BOOKING] cancel failed for {booking_id}")
        return error_result("DB_WRITE_FAILED", f"db update failed: {e}", booking_id=booking_id)

    logger.info(f"[BOOKING] cancelled {booking_id}")
    return {"status": "OK", "booking_id": booking_id, "result": "CANCELLED"}


def _modify(
    db: Session,
    store: BookingStore,
    restaurant_id: int,
    booking_id: str,
    row: dict,
    payload: dict,
    now: Optional[datetime],
    now_local: datetime,
) -> dict:
    if not store.state_of(row).is_active:
        return error_result("BOOKING_NOT_ACTIVE", booking_id=booking_id)

    new_start_raw = payload.get("new_start")
    if not new_start_raw:
        return error_result("MISSING_NEW_START", booking_id=booking_id)
    try:
        new_start = parse_instant(new_start_raw)
    except ValueError:
        return error_result("INVALID_NEW_START", booking_id=booking_id)

    current_party = party_size_of(row.get("tableware_count"), 1)
    new_party = party_size_of(payload.get("new_party_size"), current_party)

    # The booking being moved still occupies its old slot here: a same-slot
    # party change is checked against the full remaining capacity.
    # Bookings do not store their service, so the noon cutoff applies.
    capacity = capacity_for(db, restaurant_id, "", new_start, now=now, store=store)
    if capacity <= 0 or new_party > capacity:
        return error_result("NEW_SLOT_UNAVAILABLE", booking_id=booking_id)

    fields = {
        **store.slot_fields(new_start),
        "tableware_count": new_party,
        **_touch(store, now_local),
    }
    try:
        store.update(booking_id, fields)
    except SQLAlchemyError as e:
        logger.exception(f"[BOOKING] modify failed for {booking_id}")
        return error_result("DB_WRITE_FAILED", f"db update failed: {e}", booking_id=booking_id)

    logger.info(
        f"[BOOKING] modified {booking_id}: start={new_start.isoformat()} party={new_party}"
    )
    return {
        "status": "OK",
        "booking_id": booking_id,
        "start": format_iso8601(new_start),
        "party": new_party,
        "result": "MODIFIED",
    }


# ── Identifiers ──────────────────────────────────────────────────────────


def idempotent_booking_id(
    merchant_guid: str,
    service_id: str,
    start: datetime,
    party: int,
    email: Optional[str],
    idempotency_key: str,
) -> str:
    """Same request + same key -> same guid."""
    seed = "|".join([
        merchant_guid,
        service_id,
        format_atom(start),
        str(party),
        str(email or "").lower(),
        idempotency_key,
    ])
    return IDEMPOTENT_PREFIX + hash_value(seed)[:IDEMPOTENT_DIGEST_LENGTH]


def random_booking_id(now: datetime) -> str:
    """BK_<YYYYmmdd_HHMM>_<6 hex>: sortable by creation, no coordination."""
    return f"{RANDOM_PREFIX}{now:%Y%m%d_%H%M}_{secrets.token_hex(3)}"


# ── Helpers ──────────────────────────────────────────────────────────────


def party_size_of(value, default: int) -> int:
    try:
        party = int(value)
    except (TypeError, ValueError):
        party = default
    return max(1, party)


def _first_slot(slots) -> Optional[Any]:
    if isinstance(slots, (list, tuple)) and slots:
        return slots[0]
    return None


def _touch(store: BookingStore, now: datetime) -> dict:
    if store.has_column("updated_at"):
        return {"updated_at": timestamp_value(store.category("updated_at"), now)}
    return {}


def _created(booking_id: str, start: datetime, party: int, replayed: bool = False) -> dict:
    result = {
        "status": "OK",
        "id": booking_id,
        "start": format_iso8601(start),
        "party": party,
    }
    if replayed:
        result["replayed"] = True
    return result
