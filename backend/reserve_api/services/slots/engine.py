# backend/reserve_api/services/slots/engine.py
"""
Remaining capacity for a single slot.

One scalar quota per (merchant, date, HH:MM). Occupancy is counted live from
the booking table on every call, nothing is cached.

Takes into account:
✓ per-merchant capacity_per_step (restaurant_config, with defaults)
✓ same-day cutoff per service period (noon / evening)
✓ active bookings at exactly the requested date + HH:MM

Does NOT:
✗ snap the instant to the step grid (see LookupOptions.round_to_step)
✗ look at party sizes of existing bookings (one booking = one unit)
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...utils.timezone import local_now
from ..bookings.store import BookingStore
from .config import MerchantConfig, period_of, resolve_merchant_config

logger = logging.getLogger(__name__)


def capacity_for(
    db: Session,
    restaurant_id: int,
    service_id: str,
    start: datetime,
    now: Optional[datetime] = None,
    config: Optional[MerchantConfig] = None,
    store: Optional[BookingStore] = None,
) -> int:
    """
    Remaining capacity (>= 0) for the slot starting at `start`.

    Date and HH:MM are read from `start` as given (its own offset); "today"
    is evaluated in the local zone.
    """
    config = config or resolve_merchant_config(db, restaurant_id)
    store = store or BookingStore(db)

    # Step 1: same-day cutoff
    if is_past_cutoff(config, service_id, start, now):
        logger.info(
            f"[SLOTS] cutoff reached: restaurant={restaurant_id} "
            f"service={service_id!r} start={start.isoformat()}"
        )
        return 0

    # Step 2: live occupancy
    slot_time = start.time().replace(second=0, microsecond=0)
    active = store.count_active(restaurant_id, start.date(), slot_time)

    return max(0, config.capacity_per_step - active)


def is_past_cutoff(
    config: MerchantConfig,
    service_id: str,
    start: datetime,
    now: Optional[datetime] = None,
) -> bool:
    """True if `start` is today and at/after the period's cutoff."""
    cutoff = config.cutoff_for(period_of(service_id))
    if cutoff is None:
        return False
    today = local_now(now).date()
    if start.date() != today:
        return False
    return start.strftime("%H:%M") >= cutoff
