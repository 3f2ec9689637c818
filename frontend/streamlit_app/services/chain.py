# frontend/streamlit_app/services/chain.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Explicit chain context shared by the read model and the write operations.

`ChainContext` bundles one `Web3` instance with the configured contract
addresses and hands out contract objects on demand. It carries no mutable
state: every read goes to the node, so snapshots are never served from a
cache.

Callers build one context per process (`build_chain_context(settings)`) and
pass it by argument. The Streamlit layer wraps the builder with
`st.cache_resource` (see `core.clients`).

Test doubles only need the same small surface: `factory()`, `campaign(addr)`,
`token()`, `registry()`, `native_balance(addr)`, `latest_block()` and
`block_timestamp(number)`.
"""

from dataclasses import dataclass

from web3 import Web3
from web3.contract import Contract

from core.abi import CAMPAIGN_ABI, FACTORY_ABI, REGISTRY_ABI, TOKEN_ABI
from core.config import Settings
from core.constants import DEFAULT_TRANSFER_LOOKBACK_BLOCKS


def checksum(addr: str) -> str:
    """Return the EIP-55 checksum form; raises ValueError on malformed input."""
    try:
        return Web3.to_checksum_address(addr)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid address: {addr!r}") from e


def same_address(a: str | None, b: str | None) -> bool:
    """Case-insensitive address equality; False when either side is empty."""
    return bool(a) and bool(b) and a.lower() == b.lower()


@dataclass(frozen=True)
class ChainContext:
    w3: Web3
    factory_address: str
    token_address: str
    registry_address: str
    transfer_lookback_blocks: int = DEFAULT_TRANSFER_LOOKBACK_BLOCKS

    def _contract(self, address: str, abi: list) -> Contract:
        return self.w3.eth.contract(address=checksum(address), abi=abi)

    def factory(self) -> Contract:
        return self._contract(self.factory_address, FACTORY_ABI)

    def campaign(self, address: str) -> Contract:
        return self._contract(address, CAMPAIGN_ABI)

    def token(self) -> Contract:
        return self._contract(self.token_address, TOKEN_ABI)

    def registry(self) -> Contract:
        return self._contract(self.registry_address, REGISTRY_ABI)

    def native_balance(self, address: str) -> int:
        return int(self.w3.eth.get_balance(checksum(address)))

    def latest_block(self) -> int:
        return int(self.w3.eth.block_number)

    def block_timestamp(self, number: int) -> int:
        return int(self.w3.eth.get_block(number)["timestamp"])


def build_chain_context(cfg: Settings) -> ChainContext:
    """Construct a `ChainContext` from settings. No network call is made here."""
    w3 = Web3(Web3.HTTPProvider(cfg.RPC_URL, request_kwargs={"timeout": cfg.HTTP_TIMEOUT}))
    return ChainContext(
        w3=w3,
        factory_address=cfg.CAMPAIGN_FACTORY_ADDRESS,
        token_address=cfg.IDRX_TOKEN_ADDRESS,
        registry_address=cfg.VERIFICATION_REGISTRY_ADDRESS,
        transfer_lookback_blocks=cfg.TRANSFER_LOOKBACK_BLOCKS,
    )
