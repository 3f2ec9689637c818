# frontend/streamlit_app/core/state.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Session-scoped UI state helpers for the Verifund console.

This module centralizes the **default values** we expect to exist in
`st.session_state`, provides a single entry point to initialize them, and
hosts the preserved-peak cache used when displaying failed campaigns.

Design notes
------------
- Defaults are primitive and safe to serialize. Never put private keys or
  other secrets into session state.
- Initialization is **idempotent**: calling `ensure_defaults()` multiple
  times is safe; existing values are preserved.

Preserved peak
--------------
Once a failed campaign has been shown with an amount X > 0 in this session,
it keeps showing at least X, even if a later read returns a lower balance
(refunds drain the contract). The memory for an address is dropped when the
campaign is next observed as Active. This is presentation state only; the
read model in `services.campaigns` stays cache-free.
"""

from collections.abc import Mapping, MutableMapping
from decimal import Decimal
from typing import Any, Final

import streamlit as st

from services.campaigns import Campaign, CampaignStatus, display_amount

# Canonical set of session keys and their initial values.
DEFAULTS: Final[Mapping[str, Any]] = {
    # Campaign address currently opened in the detail tab.
    "SELECTED_CAMPAIGN": "",
    # Last payment reference created on the Payments tab.
    "LAST_PAYMENT_REFERENCE": "",
    # Guardian analysis captured on the Create tab (dict or None).
    "GUARDIAN_ANALYSIS": None,
}

#: Session key holding the campaign address → preserved amount map.
PEAK_AMOUNTS_KEY: Final[str] = "PEAK_AMOUNTS"

__all__ = ["DEFAULTS", "PEAK_AMOUNTS_KEY", "PeakAmountCache", "ensure_defaults"]


def ensure_defaults() -> None:
    """Ensure all expected session keys exist with sane defaults."""
    for key, default_value in DEFAULTS.items():
        # setdefault avoids stomping on values a widget has already set.
        st.session_state.setdefault(key, default_value)


class PeakAmountCache:
    """Keyed memo of the highest amount shown for each failed campaign.

    Args:
        store: Mapping to keep the memo in. Defaults to `st.session_state`, so
            the memo lives exactly as long as the browser session. Tests pass
            a plain dict.
    """

    def __init__(self, store: MutableMapping[str, Any] | None = None) -> None:
        self._store = store

    def _peaks(self) -> dict[str, Decimal]:
        store = st.session_state if self._store is None else self._store
        if PEAK_AMOUNTS_KEY not in store:
            store[PEAK_AMOUNTS_KEY] = {}
        return store[PEAK_AMOUNTS_KEY]

    def resolve(self, campaign: Campaign) -> Decimal:
        """Return the amount to display for `campaign`, updating the memo."""
        amount = display_amount(campaign)
        peaks = self._peaks()
        key = campaign.address.lower()

        if campaign.status is CampaignStatus.ACTIVE:
            peaks.pop(key, None)
            return amount
        if campaign.status is CampaignStatus.FAILED:
            kept = peaks.get(key)
            if kept is not None and kept >= amount:
                return kept
            if amount > 0:
                peaks[key] = amount
        return amount

    def get(self, address: str) -> Decimal | None:
        return self._peaks().get(address.lower())

    def clear(self) -> None:
        self._peaks().clear()
