# backend/reserve_api/services/slots/config.py
"""
Per-merchant slot configuration.

Stored in restaurant_config, owned by merchant administration. Missing rows,
null fields and non-positive numbers all fall back to the defaults below.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import settings

DEFAULT_STEP_MINUTES = 15
DEFAULT_CAPACITY_PER_STEP = 6

PERIODS = ("noon", "evening")

_HHMM = re.compile(r"^\d{2}:\d{2}$")


@dataclass(frozen=True)
class MerchantConfig:
    """
    Slot configuration for one merchant.

    Attributes:
        step_minutes: Slot granularity in minutes
        capacity_per_step: Bookings accepted per slot
        noon_cutoff: Same-day "HH:MM" after which noon service closes
        evening_cutoff: Same-day "HH:MM" after which evening service closes
    """
    step_minutes: int = DEFAULT_STEP_MINUTES
    capacity_per_step: int = DEFAULT_CAPACITY_PER_STEP
    noon_cutoff: Optional[str] = None
    evening_cutoff: Optional[str] = None

    def cutoff_for(self, period: str) -> Optional[str]:
        """Cutoff for the period, only if it is a well-formed "HH:MM"."""
        value = self.noon_cutoff if period == "noon" else self.evening_cutoff
        return value if is_hhmm(value) else None


@dataclass(frozen=True)
class LookupOptions:
    """
    Optional availability behaviour, both off by default.

    round_to_step: round requested instants down to the merchant step
    filter_by_party_size: report 0 when the party does not fit the slot
    """
    round_to_step: bool = False
    filter_by_party_size: bool = False

    @classmethod
    def from_settings(cls) -> "LookupOptions":
        return cls(
            round_to_step=settings.slot_rounding_enabled,
            filter_by_party_size=settings.party_size_filter_enabled,
        )


def resolve_merchant_config(db: Session, restaurant_id: int) -> MerchantConfig:
    """Load config for a restaurant. Never fails: absence means defaults."""
    from ...models.generated import RestaurantConfig

    row = (
        db.query(RestaurantConfig)
        .filter(RestaurantConfig.restaurant_id == restaurant_id)
        .first()
    )
    if row is None:
        return MerchantConfig()

    capacity = row.max_booking_by_step
    if capacity is None:
        capacity = row.booking_step_table_count

    return MerchantConfig(
        step_minutes=_positive_or(row.booking_step, DEFAULT_STEP_MINUTES),
        capacity_per_step=_positive_or(capacity, DEFAULT_CAPACITY_PER_STEP),
        noon_cutoff=_clean_str(row.today_booking_noon_max_hour),
        evening_cutoff=_clean_str(row.today_booking_evening_max_hour),
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def is_hhmm(value: Optional[str]) -> bool:
    return isinstance(value, str) and _HHMM.match(value) is not None


def period_of(service_id: str) -> str:
    """
    Day period from a "<guid>:<period>" service id.

    Unknown suffixes fall back to noon.
    """
    suffix = (service_id or "").rsplit(":", 1)[-1].strip().lower()
    return suffix if suffix in PERIODS else "noon"


def round_to_step(dt: datetime, step_minutes: int) -> datetime:
    """Round an instant down to the slot grid."""
    step = max(1, step_minutes)
    delta = dt.minute % step
    return (dt - timedelta(minutes=delta)).replace(second=0, microsecond=0)


def _positive_or(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _clean_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
