# frontend/streamlit_app/services/idrx.py
# SPDX-License-Identifier: Apache-2.0
"""
IDRX payment bridge: fiat-to-token mint requests aimed at a campaign address.

The gateway is an off-chain alternate payment rail. A donor pays fiat on the
gateway's payment page; the gateway later mints IDRX straight to the campaign
address (a direct token transfer, outside the campaign's ``donate`` path).
This client only creates requests and reads records; it never moves a record
between states.

Every request is signed with the server-held secret, so this module must only
run server-side (Streamlit server process, FastAPI backend, scripts).

Signature scheme
----------------
``HMAC-SHA256(key)`` updated, in order, with the timestamp
string, the HTTP method, the path including its query string, and the JSON
body bytes when a body is present. The digest is base64url-encoded without
padding and sent with the API key and timestamp headers.

The key is the base64-decoded secret read as a binary string and encoded as
UTF-8, so every decoded byte of 0x80 or above becomes two key bytes. Gateway
clients in JavaScript do exactly this (`atob` then `createHmac`), and the
gateway only accepts signatures keyed that way.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import urlencode

import requests

from core.constants import (
    HEADER_API_KEY,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
    MINT_REQUEST_PATH,
    MINT_REQUEST_TYPE,
    TRANSACTION_HISTORY_PATH,
    TRANSACTION_STATUS_PATH,
)
from core.errors import GatewayError

log = logging.getLogger(__name__)


# =============================================================================
# Signing
# =============================================================================


def serialize_body(body: Mapping[str, Any]) -> bytes:
    """Compact JSON bytes, identical to what is both signed and sent."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def create_signature(
    method: str,
    path: str,
    body: bytes | None,
    timestamp: str,
    secret_key: str,
) -> str:
    """Return the base64url request signature (see module docstring)."""
    key = base64.b64decode(secret_key).decode("latin-1").encode("utf-8")
    mac = hmac.new(key, digestmod=hashlib.sha256)
    mac.update(timestamp.encode("utf-8"))
    mac.update(method.encode("utf-8"))
    mac.update(path.encode("utf-8"))
    if body:
        mac.update(body)
    return base64.urlsafe_b64encode(mac.digest()).rstrip(b"=").decode("ascii")


def generate_timestamp() -> str:
    """Unix seconds as a string."""
    return str(int(time.time()))


# =============================================================================
# Records
# =============================================================================


class _TolerantEnum(str, Enum):
    """String enum that maps unknown gateway values to UNKNOWN."""

    @classmethod
    def _missing_(cls, value: object):
        return cls.UNKNOWN  # type: ignore[attr-defined]


class PaymentStatus(_TolerantEnum):
    WAITING_FOR_PAYMENT = "WAITING_FOR_PAYMENT"
    PAID = "PAID"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"


class UserMintStatus(_TolerantEnum):
    NOT_AVAILABLE = "NOT_AVAILABLE"
    PROCESSING = "PROCESSING"
    MINTED = "MINTED"
    FAILED = "FAILED"
    REJECTED = "REJECTED"
    REFUND = "REFUND"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class MintRequest:
    payment_url: str
    reference: str
    amount: str
    merchant_order_id: str = ""


@dataclass(frozen=True)
class PaymentRecord:
    """One gateway transaction record (fiat payment + token mint)."""

    reference: str
    merchant_order_id: str
    destination_wallet_address: str
    to_be_minted: str
    payment_amount: float
    payment_status: PaymentStatus
    user_mint_status: UserMintStatus
    tx_hash: str
    created_at: str
    updated_at: str = ""
    customer_name: str = ""
    email: str = ""
    id: int | None = None

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "PaymentRecord":
        return cls(
            reference=str(raw.get("reference") or ""),
            merchant_order_id=str(raw.get("merchantOrderId") or ""),
            destination_wallet_address=str(raw.get("destinationWalletAddress") or ""),
            to_be_minted=str(raw.get("toBeMinted") or "0"),
            payment_amount=float(raw.get("paymentAmount") or 0),
            payment_status=PaymentStatus(raw.get("paymentStatus") or "UNKNOWN"),
            user_mint_status=UserMintStatus(raw.get("userMintStatus") or "UNKNOWN"),
            tx_hash=str(raw.get("txHash") or ""),
            created_at=str(raw.get("createdAt") or ""),
            updated_at=str(raw.get("updatedAt") or ""),
            customer_name=str(raw.get("customerVaName") or ""),
            email=str(raw.get("email") or ""),
            id=raw.get("id"),
        )

    @property
    def created_timestamp(self) -> int:
        """`createdAt` as Unix seconds (0 when missing or unparseable)."""
        try:
            return int(datetime.fromisoformat(self.created_at.replace("Z", "+00:00")).timestamp())
        except ValueError:
            return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "reference": self.reference,
            "merchantOrderId": self.merchant_order_id,
            "destinationWalletAddress": self.destination_wallet_address,
            "toBeMinted": self.to_be_minted,
            "paymentAmount": self.payment_amount,
            "paymentStatus": self.payment_status.value,
            "userMintStatus": self.user_mint_status.value,
            "txHash": self.tx_hash,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "customerVaName": self.customer_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class HistoryQuery:
    """Filters accepted by the transaction history endpoint."""

    transaction_type: str = "MINT"
    page: int = 1
    take: int = 10
    user_mint_status: str | None = None
    payment_status: str | None = None
    merchant_order_id: str | None = None
    reference: str | None = None
    tx_hash: str | None = None
    order_by_date: str | None = None

    def to_query_string(self) -> str:
        params: dict[str, str] = {
            "transactionType": self.transaction_type,
            "page": str(self.page),
            "take": str(self.take),
        }
        optional = (
            ("userMintStatus", self.user_mint_status),
            ("paymentStatus", self.payment_status),
            ("merchantOrderId", self.merchant_order_id),
            ("reference", self.reference),
            ("txHash", self.tx_hash),
            ("orderByDate", self.order_by_date),
        )
        params.update({k: v for k, v in optional if v})
        return urlencode(params)


@dataclass(frozen=True)
class HistoryPage:
    records: list[PaymentRecord] = field(default_factory=list)
    total_count: int = 0
    page: int | None = None
    page_count: int | None = None


# =============================================================================
# Client
# =============================================================================


class IdrxClient:
    """Signed client for the IDRX gateway API.

    Args:
        api_key: Public API key sent as a header.
        secret_key: Base64-encoded HMAC secret.
        base_url: API root, e.g. ``https://idrx.co/api``.
        network_chain_id: Chain the minted tokens are delivered on.
        session: Optional `requests.Session` (tests inject a fake).
        timeout: Seconds per request.
    """

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        base_url: str,
        network_chain_id: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30,
    ) -> None:
        self.api_key = api_key
        self._secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.network_chain_id = str(network_chain_id)
        self.session = session or requests.Session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"IdrxClient({self.base_url!r})"

    def _request(self, method: str, path: str, body: Mapping[str, Any] | None = None) -> Any:
        timestamp = generate_timestamp()
        payload = serialize_body(body) if body is not None else None
        headers = {
            HEADER_API_KEY: self.api_key,
            HEADER_SIGNATURE: create_signature(method, path, payload, timestamp, self._secret_key),
            HEADER_TIMESTAMP: timestamp,
        }
        if payload is not None:
            headers["Content-Type"] = "application/json"

        resp = self.session.request(
            method, f"{self.base_url}{path}", data=payload, headers=headers, timeout=self.timeout
        )
        if not resp.ok:
            log.warning("IDRX %s %s failed: %s", method, path.split("?")[0], resp.status_code)
            raise GatewayError(resp.status_code, resp.reason or "")
        return resp.json()

    # --- mint requests -------------------------------------------------------

    def create_mint_request(
        self, amount: str, destination: str, expiry_hours: int = 24
    ) -> MintRequest:
        """Create a fiat payment request that mints `amount` IDRX to `destination`."""
        body = {
            "toBeMinted": str(amount),
            "destinationWalletAddress": destination,
            "expiryPeriod": int(expiry_hours),
            "networkChainId": self.network_chain_id,
            "requestType": MINT_REQUEST_TYPE,
        }
        data = self._request("POST", MINT_REQUEST_PATH, body).get("data") or {}
        log.info("Mint request %s created for %s", data.get("reference"), destination)
        return MintRequest(
            payment_url=str(data.get("paymentUrl") or ""),
            reference=str(data.get("reference") or ""),
            amount=str(data.get("amount") or amount),
            merchant_order_id=str(data.get("merchantOrderId") or ""),
        )

    # --- queries -------------------------------------------------------------

    def get_transaction_history(self, query: HistoryQuery) -> HistoryPage:
        path = f"{TRANSACTION_HISTORY_PATH}?{query.to_query_string()}"
        data = self._request("GET", path)
        meta = data.get("metadata") or {}
        records = [PaymentRecord.from_api(r) for r in data.get("records") or []]
        return HistoryPage(
            records=records,
            total_count=int(meta.get("totalCount") or len(records)),
            page=meta.get("page"),
            page_count=meta.get("pageCount"),
        )

    def get_transaction_by_reference(self, reference: str) -> PaymentRecord | None:
        page = self.get_transaction_history(
            HistoryQuery(transaction_type="MINT", page=1, take=1, reference=reference)
        )
        return page.records[0] if page.records else None

    def get_campaign_transactions(
        self, campaign_address: str, page: int = 1, take: int = 10
    ) -> list[PaymentRecord]:
        """Newest-first mint records destined to `campaign_address`.

        The gateway cannot filter by destination, so the page is filtered here;
        a page may therefore hold fewer than `take` matching records.
        """
        history = self.get_transaction_history(
            HistoryQuery(transaction_type="MINT", page=page, take=take, order_by_date="DESC")
        )
        wanted = campaign_address.lower()
        return [r for r in history.records if r.destination_wallet_address.lower() == wanted]

    def check_payment_status(self, reference: str) -> PaymentRecord:
        data = self._request("GET", f"{TRANSACTION_STATUS_PATH}/{reference}")
        return PaymentRecord.from_api(data.get("data", data))

    def query_transactions(
        self,
        transaction_type: str = "MINT",
        page: int = 1,
        take: int = 10,
        *,
        campaign_address: str | None = None,
        reference: str | None = None,
    ) -> list[PaymentRecord]:
        """Reference lookup, campaign listing, or general newest-first listing."""
        if reference:
            record = self.get_transaction_by_reference(reference)
            return [record] if record else []
        if campaign_address:
            return self.get_campaign_transactions(campaign_address, page, take)
        return self.get_transaction_history(
            HistoryQuery(transaction_type=transaction_type, page=page, take=take, order_by_date="DESC")
        ).records
