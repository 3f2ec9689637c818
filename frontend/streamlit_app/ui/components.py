# frontend/streamlit_app/ui/components.py
# SPDX-License-Identifier: Apache-2.0
"""Reusable presentation helpers for campaign views.

The formatting functions are pure so they can be unit-tested without a
running Streamlit session; the `render_*` functions draw with Streamlit.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import streamlit as st

from core.constants import TOKEN_SYMBOL
from services.campaigns import Campaign, CampaignStatus, progress_percentage
from services.history import DonationEntry

# How many characters to show from the start/end of an address when eliding.
_ADDR_PREFIX = 6
_ADDR_SUFFIX = 4

_STATUS_BADGES = {
    CampaignStatus.ACTIVE: "🟢 Active",
    CampaignStatus.SUCCESSFUL: "🏆 Successful",
    CampaignStatus.FAILED: "🔴 Failed",
}


def short_addr(addr: str | None, *, prefix: int = _ADDR_PREFIX, suffix: int = _ADDR_SUFFIX) -> str:
    """``0x1234…abcd`` form of an address; "-" for empty input."""
    if not addr:
        return "-"
    if len(addr) <= prefix + suffix + 1:
        return addr
    return f"{addr[:prefix]}…{addr[-suffix:]}"


def format_amount(amount: Decimal | str, symbol: str = TOKEN_SYMBOL) -> str:
    """Thousands-separated amount; fractional digits only when present."""
    value = Decimal(amount)
    if value == value.to_integral_value():
        text = f"{value:,.0f}"
    else:
        text = f"{value.normalize():,f}"
    return f"{text} {symbol}"


def format_time_remaining(seconds: int) -> str:
    if seconds <= 0:
        return "Ended"
    days, rest = divmod(int(seconds), 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes = rest // 60
    if days:
        return f"{days}d {hours}h left"
    if hours:
        return f"{hours}h {minutes}m left"
    return f"{max(minutes, 1)}m left"


def status_badge(status: CampaignStatus) -> str:
    return _STATUS_BADGES[status]


def render_campaign_card(campaign: Campaign, amount: Decimal, *, key: str) -> bool:
    """Draw a compact campaign card; returns True when "Open" was clicked."""
    with st.container(border=True):
        title = campaign.name or short_addr(campaign.address)
        st.markdown(f"**{title}**  {'✅' if campaign.is_owner_verified else ''}")
        st.caption(
            f"{status_badge(campaign.status)} · {format_time_remaining(campaign.time_remaining)}"
            f" · by `{short_addr(campaign.owner)}`"
        )
        st.progress(progress_percentage(amount, campaign.target) / 100)
        st.write(f"{format_amount(amount)} of {format_amount(campaign.target)}")
        return st.button("Open", key=key, use_container_width=True)


def render_history_table(entries: Sequence[DonationEntry]) -> None:
    if not entries:
        st.info("No donations yet.")
        return
    st.table(
        [
            {
                "Source": "Wallet" if e.source == "wallet" else "IDRX",
                "Donor": short_addr(e.donor) if e.donor.startswith("0x") else e.donor,
                "Amount": format_amount(e.amount),
                "Status": e.status,
                "Tx": short_addr(e.tx_hash),
            }
            for e in entries
        ]
    )
