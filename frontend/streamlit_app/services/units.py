# frontend/streamlit_app/services/units.py
# SPDX-License-Identifier: Apache-2.0
"""Exact conversion between decimal amount strings and integer base units.

Amounts fed into transactions never pass through binary floating point: the
integer and fractional digits are split as text and combined with integer
arithmetic. Decimal strings produced here are canonical (no exponent, no
trailing fractional zeros, no trailing dot), so
``to_decimal_string(to_base_units(s, d), d) == s`` for any canonical `s`
representable with `d` decimals.
"""

from __future__ import annotations

import re
from decimal import Decimal

from core.errors import InvalidAmount

_AMOUNT_RE = re.compile(r"^(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?$")


def _check_decimals(decimals: int) -> int:
    d = int(decimals)
    if d < 0:
        raise ValueError(f"Token decimals must be >= 0, got {decimals}")
    return d


def to_base_units(amount: str, decimals: int) -> int:
    """Parse a human decimal string into integer base units.

    Args:
        amount: Non-negative decimal such as ``"150000"`` or ``"0.25"``.
        decimals: Token precision as reported by the token contract.

    Raises:
        InvalidAmount: empty, signed, exponent/NaN/inf notation, non-digit
            characters, or more fractional digits than `decimals`.
    """
    d = _check_decimals(decimals)
    text = (amount or "").strip() if isinstance(amount, str) else ""
    m = _AMOUNT_RE.match(text)
    if not m or not (m.group("whole") or m.group("frac")):
        raise InvalidAmount(f"Invalid amount: {amount!r}")

    whole = m.group("whole") or "0"
    frac = (m.group("frac") or "").rstrip("0")
    if len(frac) > d:
        raise InvalidAmount(
            f"Amount {amount!r} has more than {d} decimal places"
        )
    return int(whole) * 10**d + int(frac.ljust(d, "0") or "0")


def to_decimal_string(units: int, decimals: int) -> str:
    """Format integer base units as a canonical decimal string."""
    d = _check_decimals(decimals)
    value = int(units)
    if value < 0:
        raise InvalidAmount(f"Base units must be non-negative, got {units}")
    whole, frac = divmod(value, 10**d)
    if d == 0 or frac == 0:
        return str(whole)
    return f"{whole}.{str(frac).rjust(d, '0').rstrip('0')}"


def to_decimal(units: int, decimals: int) -> Decimal:
    """Base units as an exact `Decimal` (used by the read model)."""
    return Decimal(to_decimal_string(units, decimals))
