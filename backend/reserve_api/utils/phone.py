# backend/reserve_api/utils/phone.py

import re
from typing import Optional

from ..config import settings

_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(raw: Optional[str], country_code: Optional[str] = None) -> Optional[str]:
    """
    Normalize a customer phone to international form.

    "06 12 34 56 78"  -> "+33612345678" (national trunk zero dropped)
    "+1 650 555 0100" -> "+16505550100"
    anything else     -> digits only
    Empty input (or no digits at all) -> None.
    """
    if not raw:
        return None
    raw = str(raw).strip()
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return None
    if len(digits) == 10 and digits.startswith("0"):
        code = country_code if country_code is not None else settings.phone_country_code
        return f"+{code}{digits[1:]}"
    if raw.startswith("+"):
        return "+" + digits
    return digits
