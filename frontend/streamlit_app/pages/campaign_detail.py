# frontend/streamlit_app/pages/campaign_detail.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Campaign (detail + actions)

Shows one campaign snapshot with its metadata and merged donation history,
and offers the actions the connected wallet is eligible for:

• Donate (balance/gas pre-checks, allowance reset + approve, donate)
• Owner: record peak balance, sync IDRX donations, withdraw
• Donor: refund from a failed campaign with an unverified owner

Eligibility is advisory; every action re-reads the chain first and the
contract has the final word.
"""

import streamlit as st

from core.clients import get_idrx, get_pinata
from core.constants import TOKEN_SYMBOL
from core.state import PeakAmountCache
from services import actions
from services.campaigns import (
    ZERO,
    eligibility,
    get_campaign_details,
    get_user_donation,
    progress_percentage,
)
from services.chain import checksum
from services.history import campaign_history
from ui.components import (
    format_amount,
    format_time_remaining,
    render_history_table,
    short_addr,
    status_badge,
)
from ui.keys import k
from ui.layout import ACTION_ERRORS, section_error


def _metadata_block(ipfs_hash: str) -> None:
    pinata = get_pinata()
    if not (pinata and ipfs_hash):
        return
    try:
        meta = pinata.fetch_metadata(ipfs_hash)
    except ACTION_ERRORS as e:
        st.caption(f"⚠️ Metadata unavailable: {e}")
        return
    if meta.image:
        st.image(pinata.gateway_url(meta.image), width=360)
    st.caption(f"{meta.category} · by {meta.creator_name or 'anonymous'}")
    st.write(meta.description)
    if meta.guardian_analysis:
        ga = meta.guardian_analysis
        st.caption(
            f"🛡️ Guardian: credibility {ga.credibility_score}/100 · risk {ga.risk_level.value}"
        )


def _run(action: str, fn, *args, **kwargs) -> None:
    try:
        with st.spinner(f"{action}…"):
            tx = fn(*args, **kwargs)
        st.success(f"✅ {action} confirmed: `{tx}`")
    except ACTION_ERRORS as e:
        section_error(action, e)


def render(ctx: dict) -> None:
    st.subheader("Campaign")
    chain, signer, viewer = ctx["chain"], ctx["signer"], ctx["viewer"]

    raw = st.text_input(
        "Campaign address",
        value=st.session_state.get("SELECTED_CAMPAIGN", ""),
        key=k("detail", "address"),
    )
    if not raw:
        st.info("Pick a campaign on the Campaigns tab or paste an address.")
        return
    try:
        address = checksum(raw.strip())
        campaign = get_campaign_details(chain, address)
        donation = get_user_donation(chain, address, viewer) if viewer else None
    except ACTION_ERRORS as e:
        section_error("Loading campaign", e)
        return

    amount = PeakAmountCache().resolve(campaign)
    st.markdown(f"### {campaign.name} {'✅' if campaign.is_owner_verified else ''}")
    st.caption(
        f"{status_badge(campaign.status)} · {format_time_remaining(campaign.time_remaining)} · "
        f"owner `{short_addr(campaign.owner)}`"
    )
    _metadata_block(campaign.ipfs_hash)

    st.progress(progress_percentage(amount, campaign.target) / 100)
    c1, c2, c3 = st.columns(3)
    c1.metric("Raised", format_amount(amount))
    c2.metric("Target", format_amount(campaign.target))
    c3.metric("Recorded via donate", format_amount(campaign.raised))
    if campaign.has_external_transfers:
        st.info(
            f"{format_amount(campaign.unrecorded_amount)} arrived as direct transfers "
            "(e.g. IDRX fiat payments) and is not yet in the campaign ledger."
        )
    if campaign.is_withdrawn:
        st.caption("Funds have been withdrawn by the owner.")

    gates = eligibility(campaign, viewer, donation.attributed if donation else ZERO)

    # ---------------------------------------------------------------- donate
    if not campaign.has_ended:
        st.markdown("#### Donate")
        amt = st.text_input(f"Amount ({TOKEN_SYMBOL})", key=k("detail", "donate", address))
        if st.button("Donate", key=k("detail", "donate_btn", address), disabled=not amt):
            _run(
                "Donation",
                actions.donate,
                chain,
                signer,
                address,
                amt.strip(),
                min_gas_balance=ctx["settings"].MIN_GAS_BALANCE,
            )

    # ----------------------------------------------------------------- donor
    if donation is not None and donation.total > 0:
        st.caption(
            f"Your contribution: {format_amount(donation.total)} "
            f"({format_amount(donation.direct)} as direct transfers since block "
            f"{donation.scanned_from_block})"
        )
    if gates.funds_go_to_verified_owner:
        st.info(
            "This campaign missed its target, but its owner is verified: "
            "the funds go to the owner instead of being refunded to donors."
        )
    if gates.can_refund and st.button("Request refund", key=k("detail", "refund", address)):
        _run("Refund", actions.refund, chain, signer, address)

    # ----------------------------------------------------------------- owner
    if gates.can_update_peak_balance:
        st.warning("Record the peak balance before withdrawing so donors see the full amount.")
        if st.button("Record peak balance", key=k("detail", "peak", address)):
            _run("Peak balance update", actions.update_peak_balance, chain, signer, address)
    if (
        viewer
        and viewer.lower() == campaign.owner.lower()
        and campaign.has_external_transfers
        and st.button("Sync IDRX donations", key=k("detail", "sync", address))
    ):
        _run("Sync", actions.sync_idrx_donations, chain, signer, address)
    if gates.can_withdraw and st.button("Withdraw", key=k("detail", "withdraw", address)):
        _run("Withdrawal", actions.withdraw, chain, signer, address)

    # --------------------------------------------------------------- history
    st.markdown("#### Donation history")
    page = st.number_input("Page", min_value=1, value=1, step=1, key=k("detail", "page", address))
    try:
        entries, pages = campaign_history(chain, get_idrx(), address, page=int(page))
    except ACTION_ERRORS as e:
        section_error("Loading history", e)
        return
    render_history_table(entries)
    st.caption(f"Page {min(int(page), pages)} of {pages}")
