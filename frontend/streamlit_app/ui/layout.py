# frontend/streamlit_app/ui/layout.py
# SPDX-License-Identifier: Apache-2.0
"""Page-level layout helpers."""

from __future__ import annotations

import requests
import streamlit as st
from web3.exceptions import TimeExhausted, Web3Exception

from core.errors import VerifundError

#: Failures a user action may end with; shown as a banner, never re-raised.
ACTION_ERRORS = (VerifundError, ValueError, Web3Exception, requests.RequestException)


def configure_page(title: str) -> None:
    """Set the browser title and wide layout, then render the in-app title.

    Streamlit requires `st.set_page_config` before any other element, so call
    this first in the entrypoint.
    """
    st.set_page_config(page_title=title, page_icon="🤝", layout="wide")
    st.title(f"🤝 {title}")


def section_error(action: str, exc: Exception) -> None:
    """Uniform error banner for a failed user action."""
    if isinstance(exc, TimeExhausted):
        st.warning(
            f"{action} is still pending: no receipt yet. "
            "Check the transaction on the explorer before trying again."
        )
        return
    st.error(f"{action} failed: {exc}")
