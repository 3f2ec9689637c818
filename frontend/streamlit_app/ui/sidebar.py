# frontend/streamlit_app/ui/sidebar.py
# SPDX-License-Identifier: Apache-2.0
"""Sidebar: wallet connection and live balances.

The wallet is connected either with a private key (signed locally with
eth-account) or with a plain address whose key is managed by the RPC node.
With neither, the console is read-only and every write action raises
`WalletNotConnected`.

Security & Privacy
------------------
- **Testnet only.** The key field is a password input with no widget key,
  so its value lives only in Streamlit's internal widget state and is never
  readable through `st.session_state`. It is never logged.
- `WALLET_PRIVATE_KEY` from `.env` pre-fills the field for local development.

Returns
-------
`render_sidebar_and_status()` returns the context dict passed to every tab:
- `settings`: the loaded settings dataclass instance.
- `chain`: the shared `ChainContext`.
- `signer`: `Signer` or `None`.
- `viewer`: the connected address or `None`.
"""

from __future__ import annotations

from typing import Any

import streamlit as st
from web3.exceptions import Web3Exception

from core.clients import get_chain
from core.config import settings
from core.constants import TOKEN_SYMBOL
from core.state import ensure_defaults
from services.campaigns import check_gas_balance, check_token_balance
from services.wallet import Signer, connect_wallet
from ui.components import short_addr
from ui.keys import k


def _balances_row(chain, addr: str) -> None:
    try:
        tokens = check_token_balance(chain, addr)
        gas = check_gas_balance(chain, addr)
        st.sidebar.write(f"`{short_addr(addr)}`  ✅ {tokens} {TOKEN_SYMBOL} · {gas} ETH")
    except (Web3Exception, OSError, ValueError):
        # The node being down should not take the whole sidebar with it.
        st.sidebar.write(f"`{short_addr(addr)}`  ⚠️ balances n/a")


def render_sidebar_and_status() -> dict[str, Any]:
    ensure_defaults()
    chain = get_chain()

    st.sidebar.header("Wallet (testnet only)")
    mode = st.sidebar.radio(
        "Connect with",
        ["Private key", "Node account", "Read-only"],
        key=k("sidebar", "mode"),
        horizontal=True,
    )

    signer: Signer | None = None
    try:
        if mode == "Private key":
            pk = st.sidebar.text_input(
                "Private key",
                settings.WALLET_PRIVATE_KEY,
                type="password",
            )
            signer = connect_wallet(chain.w3, private_key=pk)
        elif mode == "Node account":
            addr = st.sidebar.text_input("Address", key=k("sidebar", "address"))
            signer = connect_wallet(chain.w3, address=addr)
    except ValueError as e:
        st.sidebar.error(str(e))

    if signer is None:
        st.sidebar.info("No wallet connected. Browsing is read-only.")
    else:
        _balances_row(chain, signer.address)

    st.sidebar.markdown("---")
    st.sidebar.caption(
        f"RPC: `{settings.RPC_URL}`  \n"
        f"Factory: `{short_addr(settings.CAMPAIGN_FACTORY_ADDRESS)}`  \n"
        f"Token: `{short_addr(settings.IDRX_TOKEN_ADDRESS)}`"
    )

    return dict(
        settings=settings,
        chain=chain,
        signer=signer,
        viewer=signer.address if signer else None,
    )
