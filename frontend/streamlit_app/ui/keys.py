# frontend/streamlit_app/ui/keys.py
# SPDX-License-Identifier: Apache-2.0
"""Namespaced Streamlit widget keys.

Several tabs render similar controls (an amount box, a campaign picker, a
submit button). Prefixing every key with its tab keeps them from colliding
and keeps `st.session_state` readable.

Usage
-----
    from ui.keys import k

    amount = st.text_input("Amount (IDRX)", key=k("detail", "donate_amount"))

Per-campaign widgets add the address as a third part so switching campaigns
does not carry state over:

    st.button("Refund", key=k("detail", "refund", campaign.address))
"""

from __future__ import annotations


def k(page: str, name: str, *scope: str) -> str:
    """Return a stable key of the form ``"<page>:<name>[:<scope>...]"``."""
    return ":".join((page, name, *(s.lower() for s in scope if s)))
