# frontend/streamlit_app/pages/campaigns.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Campaigns (browse)

Lists every deployed campaign with its derived status, display amount and
owner badge. Amounts for failed campaigns go through the session's
`PeakAmountCache`, so a campaign drained by refunds keeps showing the peak
it reached earlier in the session.
"""

import streamlit as st

from core.state import PeakAmountCache
from services.campaigns import CampaignStatus, get_all_campaign_details
from ui.components import render_campaign_card
from ui.keys import k
from ui.layout import ACTION_ERRORS, section_error

_COLUMNS = 3


def render(ctx: dict) -> None:
    st.subheader("Campaigns")

    filt = st.radio(
        "Show",
        ["All", *[s.label for s in CampaignStatus]],
        horizontal=True,
        key=k("list", "filter"),
    )
    if st.button("Refresh", key=k("list", "refresh")):
        st.rerun()

    try:
        campaigns = get_all_campaign_details(ctx["chain"])
    except ACTION_ERRORS as e:
        section_error("Loading campaigns", e)
        return

    if filt != "All":
        campaigns = [c for c in campaigns if c.status.label == filt]
    if not campaigns:
        st.info("No campaigns to show.")
        return

    peaks = PeakAmountCache()
    cols = st.columns(_COLUMNS)
    for i, campaign in enumerate(campaigns):
        with cols[i % _COLUMNS]:
            amount = peaks.resolve(campaign)
            if render_campaign_card(campaign, amount, key=k("list", "open", campaign.address)):
                st.session_state["SELECTED_CAMPAIGN"] = campaign.address
                st.info("Opened in the **Campaign** tab.")
