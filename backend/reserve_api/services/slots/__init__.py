# backend/reserve_api/services/slots/__init__.py
"""
Slot capacity module.

Config:       per-merchant step / capacity / same-day cutoffs
Engine:       remaining capacity for one slot (live count)
Availability: batch lookup for the partner API
"""

from .config import LookupOptions, MerchantConfig, resolve_merchant_config
from .engine import capacity_for
from .availability import lookup_availability

__all__ = [
    "MerchantConfig",
    "LookupOptions",
    "resolve_merchant_config",
    "capacity_for",
    "lookup_availability",
]
