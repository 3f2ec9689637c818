# frontend/streamlit_app/pages/payments.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: IDRX Payments

Fiat donations through the IDRX gateway. A mint request returns a hosted
payment link; once paid, the gateway mints IDRX straight to the campaign
address. Those tokens show up in the campaign's live balance immediately
and in its ledger only after the owner syncs.
"""

import streamlit as st

from core.clients import get_idrx
from core.constants import TOKEN_SYMBOL, TRANSACTION_TYPES
from services.chain import checksum
from ui.components import short_addr
from ui.keys import k
from ui.layout import ACTION_ERRORS, section_error


def render(ctx: dict) -> None:
    st.subheader("Pay with IDRX")
    idrx = get_idrx()
    if idrx is None:
        st.warning("IDRX_API_KEY / IDRX_SECRET_KEY are not configured.")
        return
    ss = st.session_state
    expiry = ctx["settings"].PAYMENT_EXPIRY_HOURS

    campaign = st.text_input(
        "Campaign address", value=ss.get("SELECTED_CAMPAIGN", ""), key=k("pay", "campaign")
    )
    amount = st.text_input(f"Amount ({TOKEN_SYMBOL})", key=k("pay", "amount"))
    if st.button("Create payment link", key=k("pay", "create"), disabled=not (campaign and amount)):
        try:
            req = idrx.create_mint_request(amount.strip(), checksum(campaign.strip()), expiry)
            ss["LAST_PAYMENT_REFERENCE"] = req.reference
            st.success(f"Reference `{req.reference}` for {req.amount} {TOKEN_SYMBOL}")
            st.link_button("Open payment page", req.payment_url)
        except ACTION_ERRORS as e:
            section_error("Payment request", e)

    st.markdown("---")
    st.markdown("#### Payment status")
    ref = st.text_input("Reference", value=ss.get("LAST_PAYMENT_REFERENCE", ""), key=k("pay", "ref"))
    if st.button("Check status", key=k("pay", "status"), disabled=not ref):
        try:
            rec = idrx.check_payment_status(ref.strip())
            st.write(
                f"Payment **{rec.payment_status.value}** · mint **{rec.user_mint_status.value}**"
            )
            if rec.tx_hash:
                st.caption(f"Mint tx `{rec.tx_hash}`")
        except ACTION_ERRORS as e:
            section_error("Status check", e)

    st.markdown("---")
    st.markdown("#### Gateway transactions")
    ttype = st.selectbox("Type", TRANSACTION_TYPES, key=k("pay", "type"))
    page = st.number_input("Page", min_value=1, value=1, step=1, key=k("pay", "page"))
    only_campaign = st.checkbox("Only this campaign", value=bool(campaign), key=k("pay", "only"))
    if st.button("Load", key=k("pay", "load")):
        try:
            records = idrx.query_transactions(
                ttype, int(page), 10, campaign_address=campaign.strip() if only_campaign else None
            )
        except ACTION_ERRORS as e:
            section_error("Loading transactions", e)
            return
        if not records:
            st.info("No transactions on this page.")
            return
        st.table(
            [
                {
                    "Reference": r.reference,
                    "To": short_addr(r.destination_wallet_address),
                    "Amount": r.to_be_minted,
                    "Payment": r.payment_status.value,
                    "Mint": r.user_mint_status.value,
                    "Created": r.created_at,
                }
                for r in records
            ]
        )
