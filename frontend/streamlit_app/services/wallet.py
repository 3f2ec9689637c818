# frontend/streamlit_app/services/wallet.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Signing adapter: turns a connected wallet into "sign and send this call".

Two kinds of connection are supported:

- **Local key** (`connect_wallet(w3, private_key=...)`): the transaction is
  built, signed in-process with eth-account and broadcast raw.
- **Node-managed account** (`connect_wallet(w3, address=...)`): the node or
  wallet provider behind the RPC endpoint signs (`eth_sendTransaction`). A
  user declining the prompt surfaces as `TransactionRejected`.

`Signer.transact()` always blocks on the receipt before returning, so callers
can chain dependent steps (reset allowance, approve, donate) safely. There is
no retry and no custom timeout; web3's receipt wait default applies.
"""

import logging
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from core.errors import (
    ContractReverted,
    InsufficientGas,
    TransactionRejected,
    WalletNotConnected,
)
from services.chain import checksum

log = logging.getLogger(__name__)

# EIP-1193 "User Rejected Request".
_USER_REJECTED_CODE = 4001


def _rpc_error(exc: Exception) -> dict[str, Any]:
    """Best-effort extraction of the JSON-RPC error object from a web3 error."""
    response = getattr(exc, "rpc_response", None)
    if isinstance(response, dict) and isinstance(response.get("error"), dict):
        return response["error"]
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0]
    return {}


def translate_chain_error(exc: Exception) -> Exception:
    """Map a web3 / provider exception onto the Verifund error taxonomy."""
    if isinstance(exc, ContractLogicError):
        return ContractReverted(getattr(exc, "message", None) or str(exc) or None)
    err = _rpc_error(exc)
    message = str(err.get("message") or exc)
    lowered = message.lower()
    if err.get("code") == _USER_REJECTED_CODE or "user rejected" in lowered or "user denied" in lowered:
        return TransactionRejected()
    if "insufficient funds" in lowered:
        return InsufficientGas(
            "Insufficient funds for gas fees. Please add more native tokens to your wallet."
        )
    return ContractReverted(message or None)


class Signer:
    """Capability to sign and send contract calls for one connected account."""

    def __init__(self, w3: Web3, address: str, account: LocalAccount | None = None) -> None:
        self.w3 = w3
        self.address = checksum(address)
        self._account = account

    def __repr__(self) -> str:  # never leak key material
        kind = "local" if self._account is not None else "node"
        return f"Signer({self.address}, {kind})"

    def _send(self, call: Any) -> Any:
        if self._account is None:
            return call.transact({"from": self.address})
        tx = call.build_transaction(
            {
                "from": self.address,
                "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
            }
        )
        signed = self._account.sign_transaction(tx)
        return self.w3.eth.send_raw_transaction(signed.raw_transaction)

    def transact(self, call: Any, *, label: str = "") -> str:
        """Submit a prepared contract function call and wait for its receipt.

        Args:
            call: A bound contract function, e.g.
                ``token.functions.approve(spender, amount)``.
            label: Short description used in logs.

        Returns:
            The transaction hash as a 0x-prefixed hex string.

        Raises:
            TransactionRejected, InsufficientGas, ContractReverted.
            TimeExhausted: no receipt within web3's default wait; the
                transaction may still be mined.
        """
        try:
            tx_hash = self._send(call)
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except TimeExhausted:
            # Still pending, not failed.
            raise
        except (Web3Exception, ValueError) as e:
            raise translate_chain_error(e) from e

        hex_hash = Web3.to_hex(receipt["transactionHash"])
        if receipt.get("status", 1) != 1:
            log.warning("%s reverted in tx %s", label or "transaction", hex_hash)
            raise ContractReverted(None)
        log.info("%s confirmed in tx %s", label or "transaction", hex_hash)
        return hex_hash


def connect_wallet(
    w3: Web3, *, private_key: str | None = None, address: str | None = None
) -> Signer | None:
    """Build a `Signer` from a private key or a node-managed address.

    Returns None when neither is supplied (no wallet connected). A malformed
    key or address raises ValueError.
    """
    if private_key:
        try:
            acct: LocalAccount = Account.from_key(private_key.strip())
        except (ValueError, TypeError) as e:
            raise ValueError("Invalid private key") from e
        return Signer(w3, acct.address, acct)
    if address:
        return Signer(w3, address)
    return None


def require_signer(signer: Signer | None) -> Signer:
    """Return `signer` or raise `WalletNotConnected`."""
    if signer is None:
        raise WalletNotConnected()
    return signer
