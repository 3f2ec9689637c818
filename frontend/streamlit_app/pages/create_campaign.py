# frontend/streamlit_app/pages/create_campaign.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Streamlit page: Create Campaign

Flow
----
1) Optional Guardian check of the description (credibility / risk).
2) Pin the cover image (if any), then the metadata JSON, to IPFS.
3) Deploy through the factory with the metadata hash.

A pinning failure stops the flow before any transaction is sent.
"""

from typing import Final

import streamlit as st

from core.clients import get_guardian, get_pinata
from core.constants import CAMPAIGN_CATEGORIES, TOKEN_SYMBOL
from services.actions import create_campaign
from services.guardian import GuardianAnalysis
from services.ipfs import CampaignMetadata
from ui.keys import k
from ui.layout import ACTION_ERRORS, section_error

_SECONDS_PER_DAY: Final[int] = 86_400


def _show_analysis(analysis: GuardianAnalysis) -> None:
    st.metric("Credibility", f"{analysis.credibility_score}/100")
    st.write(f"Risk level: **{analysis.risk_level.value}**")
    st.write(analysis.summary)
    for s in analysis.suggestions:
        st.write(f"• {s}")


def render(ctx: dict) -> None:
    st.subheader("Create a campaign")
    ss = st.session_state

    name = st.text_input("Name", key=k("create", "name"))
    description = st.text_area("Description", key=k("create", "description"))
    category = st.selectbox("Category", CAMPAIGN_CATEGORIES, key=k("create", "category"))
    creator = st.text_input("Creator name", key=k("create", "creator"))
    image = st.file_uploader("Cover image", type=["png", "jpg", "jpeg", "webp"], key=k("create", "image"))
    target = st.text_input(f"Target ({TOKEN_SYMBOL})", key=k("create", "target"))
    days = st.number_input("Duration (days)", min_value=1, value=30, step=1, key=k("create", "days"))

    if st.button("Check with Guardian", key=k("create", "guardian"), disabled=not description):
        try:
            with st.spinner("Analyzing…"):
                ss["GUARDIAN_ANALYSIS"] = get_guardian().analyze(description).to_dict()
        except ACTION_ERRORS as e:
            section_error("Guardian analysis", e)

    analysis = None
    if ss.get("GUARDIAN_ANALYSIS"):
        analysis = GuardianAnalysis.from_dict(ss["GUARDIAN_ANALYSIS"])
        _show_analysis(analysis)

    pinata = get_pinata()
    if pinata is None:
        st.warning("PINATA_JWT is not configured; campaigns cannot be created.")

    if st.button(
        "Create campaign",
        key=k("create", "submit"),
        disabled=pinata is None or not (name and target),
        use_container_width=True,
    ):
        try:
            with st.spinner("Uploading metadata…"):
                image_cid = None
                if image is not None:
                    image_cid = pinata.pin_file(image.getvalue(), image.name, image.type)
                meta = CampaignMetadata(
                    name=name.strip(),
                    description=description,
                    category=category,
                    creator_name=creator,
                    image=image_cid,
                    guardian_analysis=analysis,
                )
                cid = pinata.pin_json(meta)
            with st.spinner("Deploying campaign…"):
                tx = create_campaign(
                    ctx["chain"], ctx["signer"], name, target.strip(), int(days) * _SECONDS_PER_DAY, cid
                )
            st.success(f"✅ Campaign created: `{tx}` (metadata `{cid}`)")
            ss["GUARDIAN_ANALYSIS"] = None
        except ACTION_ERRORS as e:
            section_error("Create campaign", e)
