# frontend/streamlit_app/services/history.py
# SPDX-License-Identifier: Apache-2.0
"""Merged donation history for one campaign.

Two sources feed the timeline: ``Donated`` events emitted by the campaign
contract (wallet donations) and mint records from the IDRX gateway whose
destination is the campaign address (fiat donations). Entries are merged,
sorted newest first and paginated locally.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal

import requests
from web3 import Web3

from core.constants import HISTORY_PAGE_SIZE
from core.errors import GatewayError
from services.campaigns import token_decimals
from services.idrx import IdrxClient
from services.units import to_decimal

log = logging.getLogger(__name__)

SOURCE_WALLET = "wallet"
SOURCE_IDRX = "idrx"


@dataclass(frozen=True)
class DonationEntry:
    source: str
    donor: str
    amount: Decimal
    timestamp: int
    tx_hash: str = ""
    status: str = ""
    reference: str = ""


def wallet_donations(chain, address: str) -> list[DonationEntry]:
    """``Donated`` events of the campaign, with their block timestamps."""
    decimals = token_decimals(chain)
    events = chain.campaign(address).events.Donated().get_logs(from_block=0, to_block="latest")

    block_times: dict[int, int] = {}
    entries = []
    for ev in events:
        number = int(ev["blockNumber"])
        if number not in block_times:
            block_times[number] = chain.block_timestamp(number)
        entries.append(
            DonationEntry(
                source=SOURCE_WALLET,
                donor=ev["args"]["donor"],
                amount=to_decimal(ev["args"]["amount"], decimals),
                timestamp=block_times[number],
                tx_hash=Web3.to_hex(ev["transactionHash"]),
                status="CONFIRMED",
            )
        )
    return entries


def idrx_donations(idrx: IdrxClient, address: str, take: int = 100) -> list[DonationEntry]:
    """Paid gateway mints destined to the campaign."""
    entries = []
    for record in idrx.get_campaign_transactions(address, page=1, take=take):
        entries.append(
            DonationEntry(
                source=SOURCE_IDRX,
                donor=record.customer_name or record.email or "IDRX payment",
                amount=Decimal(record.to_be_minted or "0"),
                timestamp=record.created_timestamp,
                tx_hash=record.tx_hash,
                status=record.payment_status.value,
                reference=record.reference,
            )
        )
    return entries


def campaign_history(
    chain,
    idrx: IdrxClient | None,
    address: str,
    page: int = 1,
    per_page: int = HISTORY_PAGE_SIZE,
) -> tuple[list[DonationEntry], int]:
    """One page of the merged timeline and the total page count.

    A gateway failure drops the fiat side only; chain read failures propagate.
    """
    entries = wallet_donations(chain, address)
    if idrx is not None:
        try:
            entries.extend(idrx_donations(idrx, address))
        except (GatewayError, requests.RequestException) as e:
            log.warning("IDRX history unavailable for %s: %s", address, e)

    entries.sort(key=lambda e: e.timestamp, reverse=True)
    total_pages = max(1, math.ceil(len(entries) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return entries[start : start + per_page], total_pages
