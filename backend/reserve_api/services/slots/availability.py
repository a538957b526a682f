# backend/reserve_api/services/slots/availability.py
"""
Batch availability lookup for the partner API.

Validates the merchant / service pair once, then asks the slot engine for
every requested instant. Bad input never fails the batch: it degrades to
capacity 0, either for the whole set (invalid merchant/service) or for the
single entry (unparseable timestamp).
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...utils.timezone import parse_instant
from ..bookings.store import BookingStore
from .config import PERIODS, LookupOptions, resolve_merchant_config, round_to_step
from .engine import capacity_for

logger = logging.getLogger(__name__)


def lookup_availability(
    db: Session,
    merchant_guid: str,
    service_id: str,
    starts: list[Any],
    party_size: int = 2,
    now: Optional[datetime] = None,
    options: Optional[LookupOptions] = None,
) -> list[dict]:
    """
    Remaining capacity for each requested start.

    Returns:
        [{"start": <input string>, "capacity": int}, ...] sorted by the input
        string (lexical, not chronological). Empty / non-string inputs are
        dropped; duplicates are kept.
    """
    options = options or LookupOptions.from_settings()

    merchant_guid = (merchant_guid or "").strip()
    service_id = (service_id or "").strip()
    starts = [s for s in (starts or []) if isinstance(s, str) and s != ""]

    if not merchant_guid or not service_id or not starts:
        return _all_zero(starts)

    # Step 1: merchant
    store = BookingStore(db)
    restaurant_id = store.resolve_merchant_id(merchant_guid)
    if not restaurant_id:
        logger.info(f"[SLOTS] lookup for unknown merchant {merchant_guid!r}")
        return _all_zero(starts)

    # Step 2: service must be "<merchant_guid>:<noon|evening>"
    prefix, _, suffix = service_id.rpartition(":")
    if suffix.lower() not in PERIODS:
        return _all_zero(starts)
    if prefix != merchant_guid:
        logger.info(f"[SLOTS] service {service_id!r} does not belong to {merchant_guid!r}")
        return _all_zero(starts)

    config = resolve_merchant_config(db, restaurant_id)

    # Step 3: per-instant capacity
    results = []
    for raw in starts:
        try:
            start = parse_instant(raw)
        except ValueError:
            results.append({"start": raw, "capacity": 0})
            continue

        if options.round_to_step:
            start = round_to_step(start, config.step_minutes)

        capacity = capacity_for(
            db, restaurant_id, service_id, start,
            now=now, config=config, store=store,
        )
        if options.filter_by_party_size and party_size > capacity:
            capacity = 0

        results.append({"start": raw, "capacity": max(0, int(capacity))})

    # Step 4: stable order by the literal input string
    results.sort(key=lambda r: r["start"])
    return results


def _all_zero(starts: list[str]) -> list[dict]:
    return sorted(
        ({"start": s, "capacity": 0} for s in starts),
        key=lambda r: r["start"],
    )
