# frontend/streamlit_app/core/constants.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Chain, gateway and presentation constants.

This module centralizes:
  1) **Chain economics** used by pre-flight checks (native decimals, the
     default gas floor).
  2) **Gateway vocabulary** for the IDRX payment API (header names, request
     type, the mint transaction type).
  3) **Presentation tunables** (history page size, status labels).

Constants are typed `Final` to communicate immutability and to help static
analyzers catch accidental reassignment.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------

#: Native gas token precision (wei per ether-equivalent unit).
NATIVE_DECIMALS: Final[int] = 18

#: Fallback gas floor when `MIN_GAS_BALANCE` is not configured.
DEFAULT_MIN_GAS_BALANCE: Final[str] = "0.00001"

#: Default number of recent blocks scanned for direct token transfers.
DEFAULT_TRANSFER_LOOKBACK_BLOCKS: Final[int] = 10_000

#: Thread pool width used to fan out the reads that compose one snapshot.
SNAPSHOT_READ_WORKERS: Final[int] = 6

# ---------------------------------------------------------------------------
# IDRX gateway
# ---------------------------------------------------------------------------

HEADER_API_KEY: Final[str] = "idrx-api-key"
HEADER_SIGNATURE: Final[str] = "idrx-api-sig"
HEADER_TIMESTAMP: Final[str] = "idrx-api-ts"

#: `requestType` sent with every mint request created for a campaign.
MINT_REQUEST_TYPE: Final[str] = "donation"

MINT_REQUEST_PATH: Final[str] = "/transaction/mint-request"
TRANSACTION_HISTORY_PATH: Final[str] = "/transaction/user-transaction-history"
TRANSACTION_STATUS_PATH: Final[str] = "/transaction/status"

TRANSACTION_TYPES: Final[tuple[str, ...]] = ("MINT", "BURN", "BRIDGE", "DEPOSIT_REDEEM")

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

#: Entries per page in the merged donation history.
HISTORY_PAGE_SIZE: Final[int] = 10

#: Token symbol shown next to amounts.
TOKEN_SYMBOL: Final[str] = "IDRX"

CAMPAIGN_CATEGORIES: Final[list[str]] = [
    "Education",
    "Health",
    "Disaster Relief",
    "Environment",
    "Community",
    "Technology",
    "Other",
]
