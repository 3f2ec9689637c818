# frontend/streamlit_app/services/actions.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
State-changing campaign operations.

Every function takes the `ChainContext` and the connected `Signer` explicitly
and returns the confirmed transaction hash. Pre-flight validation happens
before anything is submitted, so a failing check never leaves a half-done
approve behind:

    WalletNotConnected → InvalidAmount → InsufficientFunds / InsufficientGas

Dependent transactions are strictly sequential: `Signer.transact()` blocks on
each receipt before the next step is built (reset allowance → approve →
donate).

Withdraw, refund, peak checkpoint and sync are single guarded calls. They do
not re-check the read model's eligibility; the contract is the final arbiter
and its revert reason is surfaced through `ContractReverted`.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from core.constants import DEFAULT_MIN_GAS_BALANCE, NATIVE_DECIMALS
from core.errors import InsufficientFunds, InsufficientGas, InvalidAmount
from services.campaigns import token_decimals
from services.chain import checksum
from services.units import to_base_units, to_decimal_string
from services.wallet import Signer, require_signer

log = logging.getLogger(__name__)


def _positive_units(amount: str, decimals: int, what: str) -> int:
    units = to_base_units(amount, decimals)
    if units <= 0:
        raise InvalidAmount(f"{what} must be greater than zero")
    return units


def create_campaign(
    chain,
    signer: Signer | None,
    name: str,
    target: str,
    duration_seconds: int,
    metadata_handle: str,
) -> str:
    """Deploy a campaign through the factory.

    Args:
        name: Display name stored on-chain.
        target: Target amount as a decimal string in token units.
        duration_seconds: Campaign length in seconds. Converting from minutes
            or days is the caller's job.
        metadata_handle: IPFS hash of the pinned `CampaignMetadata`.
    """
    signer = require_signer(signer)
    if not (name or "").strip():
        raise ValueError("Campaign name is required")
    if int(duration_seconds) <= 0:
        raise ValueError("Campaign duration must be positive")

    target_units = _positive_units(target, token_decimals(chain), "Target")
    call = chain.factory().functions.createCampaign(
        name.strip(), target_units, int(duration_seconds), metadata_handle
    )
    return signer.transact(call, label=f"createCampaign({name.strip()!r})")


def donate(
    chain,
    signer: Signer | None,
    address: str,
    amount: str,
    *,
    min_gas_balance: str = DEFAULT_MIN_GAS_BALANCE,
) -> str:
    """Donate `amount` tokens to the campaign at `address`.

    Steps: balance and gas pre-checks (concurrently), allowance check, reset a
    stale non-zero allowance to 0, approve the exact amount, then ``donate``.
    Each submitted step waits for confirmation before the next one.
    """
    signer = require_signer(signer)
    decimals = token_decimals(chain)
    units = _positive_units(amount, decimals, "Donation amount")
    min_gas_wei = to_base_units(min_gas_balance, NATIVE_DECIMALS)

    token = chain.token()
    user = signer.address
    spender = checksum(address)

    with ThreadPoolExecutor(max_workers=2) as pool:
        f_balance = pool.submit(token.functions.balanceOf(user).call)
        f_gas = pool.submit(chain.native_balance, user)
        balance = int(f_balance.result())
        gas = int(f_gas.result())

    if balance < units:
        raise InsufficientFunds(
            f"Insufficient IDRX balance. You have {to_decimal_string(balance, decimals)} "
            f"IDRX, need {to_decimal_string(units, decimals)} IDRX"
        )
    if gas < min_gas_wei:
        raise InsufficientGas(
            f"Insufficient gas balance. You need at least {min_gas_balance} "
            "native tokens for transaction fees"
        )

    allowance = int(token.functions.allowance(user, spender).call())
    if allowance >= units:
        log.info("Allowance %s already covers %s, skipping approve", allowance, units)
    else:
        if allowance > 0:
            # Some tokens reject changing one non-zero allowance to another.
            signer.transact(token.functions.approve(spender, 0), label="approve(0)")
        signer.transact(token.functions.approve(spender, units), label="approve")

    campaign = chain.campaign(address)
    return signer.transact(campaign.functions.donate(units), label=f"donate({address})")


def _single_call(chain, signer: Signer | None, address: str, method: str) -> str:
    signer = require_signer(signer)
    call = getattr(chain.campaign(address).functions, method)()
    return signer.transact(call, label=f"{method}({address})")


def withdraw(chain, signer: Signer | None, address: str) -> str:
    """Owner withdrawal. Eligibility is enforced by the contract."""
    return _single_call(chain, signer, address, "withdraw")


def refund(chain, signer: Signer | None, address: str) -> str:
    """Donor refund from a failed campaign."""
    return _single_call(chain, signer, address, "refund")


def update_peak_balance(chain, signer: Signer | None, address: str) -> str:
    """Record the current token balance as the campaign's peak (owner only)."""
    return _single_call(chain, signer, address, "updatePeakBalance")


def sync_idrx_donations(chain, signer: Signer | None, address: str) -> str:
    """Ask the campaign to fold direct IDRX transfers into its own ledger."""
    return _single_call(chain, signer, address, "syncIDRXDonations")
