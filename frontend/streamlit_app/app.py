# frontend/streamlit_app/app.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__doc__ = """Verifund — transparent crowdfunding console (Streamlit).

This module is the Streamlit entrypoint. It wires up the page chrome, the
wallet sidebar and the main tab set.

Tabs (left-to-right order):
  1) Campaigns  — Browse every campaign with derived status and amounts.
  2) Campaign   — Detail view, donate, refund, withdraw, donation history.
  3) Create     — Guardian check, IPFS metadata, factory deployment.
  4) Payments   — IDRX fiat payment links and gateway records.

Design notes:
* Sibling packages (ui/, pages/, core/, services/) are imported by adding this
  directory to sys.path, so the app runs without being installed.
* Keep this file thin. Chain logic belongs to services/*.
"""

# ────────────────────── sys.path bootstrap for local packages ─────────────────
import logging
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))
# ──────────────────────────────────────────────────────────────────────────────

from typing import Final

import streamlit as st

from core.config import settings
from pages import campaign_detail, campaigns, create_campaign, payments
from ui.layout import configure_page
from ui.sidebar import render_sidebar_and_status

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)-8s: %(message)s",
)

configure_page(title="Verifund — Transparent Crowdfunding")

# The sidebar returns the shared ctx (settings, chain, signer, viewer).
ctx: dict = render_sidebar_and_status()

TAB_TITLES: Final[list[str]] = ["Campaigns", "Campaign", "Create", "Payments"]
tab1, tab2, tab3, tab4 = st.tabs(TAB_TITLES)

with tab1:
    campaigns.render(ctx)

with tab2:
    campaign_detail.render(ctx)

with tab3:
    create_campaign.render(ctx)

with tab4:
    payments.render(ctx)
