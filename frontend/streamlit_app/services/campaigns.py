# frontend/streamlit_app/services/campaigns.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Campaign read model: one normalized snapshot per campaign, straight from chain.

A campaign's money is described by several partly inconsistent sources:

- ``raised``: the contract's own counter, moved only by ``donate``.
- ``actualBalance``: the live token balance, which also grows through plain
  token transfers (for example fiat-rail mints sent to the campaign address).
- ``peakBalance``: a checkpoint the owner records before withdrawing, once
  ``isPeakBalanceUpdated`` is set it never changes.

This module reconciles them:

- `get_campaign_details()` fetches every field concurrently, normalizes the
  amounts with the token's declared decimals and **recomputes** the status from
  ``timeRemaining``/``raised``/``target``. The on-chain status field is kept
  only as ``reported_status``.
- `display_amount()` picks the figure a view should show.
- `eligibility()` derives the advisory withdraw / refund / checkpoint gates.

Nothing here is cached. Time-derived fields go stale continuously, so every
view and every pre-flight check re-reads the chain.

Precision boundary
------------------
`get_user_donation()` infers direct transfers by scanning only the last
``transfer_lookback_blocks`` blocks. Older transfers are not counted; the
returned ``scanned_from_block`` makes that boundary explicit.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum
from typing import Any

from core.constants import NATIVE_DECIMALS, SNAPSHOT_READ_WORKERS
from services.chain import checksum, same_address
from services.units import to_decimal, to_decimal_string

log = logging.getLogger(__name__)

ZERO = Decimal(0)


class CampaignStatus(IntEnum):
    ACTIVE = 0
    SUCCESSFUL = 1
    FAILED = 2

    @property
    def label(self) -> str:
        return self.name.title()


def derive_status(time_remaining: int, raised: Any, target: Any) -> CampaignStatus:
    """Status as a pure function of time and funding.

    Active while time remains; once ended, Successful if ``raised >= target``
    and Failed otherwise.
    """
    if int(time_remaining) > 0:
        return CampaignStatus.ACTIVE
    return CampaignStatus.SUCCESSFUL if raised >= target else CampaignStatus.FAILED


@dataclass(frozen=True)
class Campaign:
    """Normalized campaign snapshot. Amounts are exact token-unit Decimals."""

    address: str
    owner: str
    name: str
    target: Decimal
    raised: Decimal
    actual_balance: Decimal
    peak_balance: Decimal
    time_remaining: int
    status: CampaignStatus
    reported_status: int
    ipfs_hash: str
    is_peak_balance_updated: bool
    is_withdrawn: bool
    is_owner_verified: bool

    @property
    def has_external_transfers(self) -> bool:
        return self.actual_balance > self.raised

    @property
    def unrecorded_amount(self) -> Decimal:
        """Tokens held beyond what ``donate`` recorded (0 if none)."""
        return self.actual_balance - self.raised if self.has_external_transfers else ZERO

    @property
    def has_ended(self) -> bool:
        return self.time_remaining == 0


@dataclass(frozen=True)
class Donation:
    """One user's contribution to one campaign.

    ``attributed`` comes from the contract's donate ledger; ``direct`` sums
    token transfers from the user to the campaign found in the scanned window.
    """

    attributed: Decimal
    direct: Decimal
    scanned_from_block: int

    @property
    def total(self) -> Decimal:
        return self.attributed + self.direct


@dataclass(frozen=True)
class Eligibility:
    can_update_peak_balance: bool
    can_withdraw: bool
    can_refund: bool
    # Donor of a failed campaign whose verified owner keeps the funds.
    funds_go_to_verified_owner: bool = False


# =============================================================================
# Reads
# =============================================================================


def token_decimals(chain) -> int:
    return int(chain.token().functions.decimals().call())


def get_all_campaigns(chain) -> list[str]:
    """All deployed campaign addresses, as returned by the factory."""
    return list(chain.factory().functions.getDeployedCampaigns().call())


def is_verified(chain, owner: str) -> bool:
    return bool(chain.registry().functions.isVerified(owner).call())


def get_campaign_details(
    chain, address: str, *, verified_cache: dict[str, bool] | None = None
) -> Campaign:
    """Fetch and assemble one campaign snapshot.

    All reads are issued concurrently and all must succeed; any failure
    propagates and no partial snapshot is returned.

    Args:
        chain: `ChainContext` (or a test double with the same surface).
        address: Campaign contract address.
        verified_cache: Optional owner → verified map shared across one
            listing, so owners with several campaigns are queried once.
    """
    campaign = chain.campaign(address)
    fn = campaign.functions
    with ThreadPoolExecutor(max_workers=SNAPSHOT_READ_WORKERS) as pool:
        f_info = pool.submit(fn.getCampaignInfo().call)
        f_hash = pool.submit(fn.ipfsHash().call)
        f_peak = pool.submit(fn.getPeakBalance().call)
        f_peak_set = pool.submit(fn.isPeakBalanceUpdated().call)
        f_withdrawn = pool.submit(fn.isWithdrawn().call)
        f_decimals = pool.submit(token_decimals, chain)
        info = f_info.result()
        ipfs_hash = f_hash.result()
        peak_raw = f_peak.result()
        peak_set = f_peak_set.result()
        withdrawn = f_withdrawn.result()
        decimals = f_decimals.result()

    owner, name, target_raw, raised_raw, balance_raw, time_remaining, raw_status = info
    target = to_decimal(target_raw, decimals)
    raised = to_decimal(raised_raw, decimals)
    time_remaining = int(time_remaining)

    cache_key = owner.lower()
    if verified_cache is not None and cache_key in verified_cache:
        owner_verified = verified_cache[cache_key]
    else:
        owner_verified = is_verified(chain, owner)
        if verified_cache is not None:
            verified_cache[cache_key] = owner_verified

    status = derive_status(time_remaining, raised, target)
    if status != int(raw_status):
        log.debug(
            "Campaign %s reports status %s, derived %s", address, raw_status, status.name
        )

    return Campaign(
        address=address,
        owner=owner,
        name=name,
        target=target,
        raised=raised,
        actual_balance=to_decimal(balance_raw, decimals),
        peak_balance=to_decimal(peak_raw, decimals),
        time_remaining=time_remaining,
        status=status,
        reported_status=int(raw_status),
        ipfs_hash=ipfs_hash,
        is_peak_balance_updated=bool(peak_set),
        is_withdrawn=bool(withdrawn),
        is_owner_verified=owner_verified,
    )


def get_all_campaign_details(chain) -> list[Campaign]:
    """Snapshot every deployed campaign, checking each owner's badge once."""
    verified: dict[str, bool] = {}
    return [
        get_campaign_details(chain, addr, verified_cache=verified)
        for addr in get_all_campaigns(chain)
    ]


def get_user_donation(chain, address: str, user: str) -> Donation:
    """Ledger donation plus direct transfers inside the lookback window."""
    decimals = token_decimals(chain)
    attributed = chain.campaign(address).functions.donations(user).call()

    latest = chain.latest_block()
    from_block = max(0, latest - int(chain.transfer_lookback_blocks))
    logs = chain.token().events.Transfer().get_logs(
        from_block=from_block,
        to_block=latest,
        argument_filters={"from": checksum(user), "to": checksum(address)},
    )
    direct = sum(int(entry["args"]["value"]) for entry in logs)
    return Donation(
        attributed=to_decimal(attributed, decimals),
        direct=to_decimal(direct, decimals),
        scanned_from_block=from_block,
    )


def check_token_balance(chain, wallet: str) -> str:
    balance = chain.token().functions.balanceOf(wallet).call()
    return to_decimal_string(balance, token_decimals(chain))


def check_gas_balance(chain, wallet: str) -> str:
    return to_decimal_string(chain.native_balance(wallet), NATIVE_DECIMALS)


# =============================================================================
# Derivations (pure)
# =============================================================================


def display_amount(campaign: Campaign) -> Decimal:
    """The "amount raised" figure a view should display.

    - Active: the live balance, including unrecorded external transfers.
    - Successful: ``max(raised, actualBalance)`` so withdrawal never shrinks it.
    - Failed: the checkpointed peak when set and positive, otherwise
      ``max(raised, actualBalance)``. Session-level preservation against later
      drains is layered on top by `core.state.PeakAmountCache`.
    """
    if campaign.status is CampaignStatus.ACTIVE:
        return campaign.actual_balance
    if (
        campaign.status is CampaignStatus.FAILED
        and campaign.is_peak_balance_updated
        and campaign.peak_balance > 0
    ):
        return campaign.peak_balance
    return max(campaign.raised, campaign.actual_balance)


def progress_percentage(amount: Decimal, target: Decimal) -> float:
    """Display-only progress in [0, 100]; 0 when the target is 0."""
    if target <= 0:
        return 0.0
    return max(0.0, min(float(amount / target * 100), 100.0))


def eligibility(
    campaign: Campaign, viewer: str | None, donated: Decimal = ZERO
) -> Eligibility:
    """Advisory action gates for `viewer` on a freshly fetched snapshot.

    `donated` is the viewer's ledger donation (``Donation.attributed``);
    direct transfers are not refundable by the contract.

    Verified owners may withdraw from failed campaigns; in that case donors
    are never offered a refund and `funds_go_to_verified_owner` is set so the
    view can say so.
    """
    is_owner = same_address(viewer, campaign.owner)
    ended = campaign.has_ended
    external = campaign.has_external_transfers

    can_update_peak = (
        is_owner
        and ended
        and not campaign.is_peak_balance_updated
        and external
        and campaign.actual_balance > 0
    )
    can_withdraw = (
        is_owner
        and ended
        and (campaign.is_peak_balance_updated or not external)
        and (
            campaign.status is CampaignStatus.SUCCESSFUL
            or (campaign.status is CampaignStatus.FAILED and campaign.is_owner_verified)
        )
    )
    can_refund = (
        viewer is not None
        and donated > 0
        and ended
        and campaign.status is CampaignStatus.FAILED
        and not campaign.is_owner_verified
    )
    funds_to_owner = (
        viewer is not None
        and donated > 0
        and ended
        and campaign.status is CampaignStatus.FAILED
        and campaign.is_owner_verified
    )
    return Eligibility(
        can_update_peak_balance=bool(can_update_peak),
        can_withdraw=bool(can_withdraw),
        can_refund=bool(can_refund),
        funds_go_to_verified_owner=bool(funds_to_owner),
    )
