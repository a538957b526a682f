from __future__ import annotations

import pytest

from reserve_api.utils.phone import normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0612345678", "+33612345678"),
        ("06 12 34 56 78", "+33612345678"),
        ("06.12.34.56.78", "+33612345678"),
        ("+1 650 555 0100", "+16505550100"),
        ("+33 (0)6 12 34 56 78", "+330612345678"),
        ("612345678", "612345678"),
        ("0033612345678", "0033612345678"),
    ],
)
def test_normalize_phone(raw, expected) -> None:
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "n/a"])
def test_empty_phone_is_none(raw) -> None:
    assert normalize_phone(raw) is None


def test_country_code_is_configurable() -> None:
    assert normalize_phone("0612345678", country_code="32") == "+32612345678"
