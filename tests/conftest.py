# tests/conftest.py
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: an in-memory chain and a recording signer.

`FakeContract` reproduces the small part of the web3 contract surface the
services use: ``contract.functions.<name>(*args).call()`` and
``contract.events.<Event>().get_logs(...)``.
"""

from __future__ import annotations

import pathlib
import sys
from typing import Any

import pytest

APP_DIR = pathlib.Path(__file__).resolve().parents[1] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

FACTORY = "0x00000000000000000000000000000000000000f1"
TOKEN = "0x00000000000000000000000000000000000000a1"
REGISTRY = "0x00000000000000000000000000000000000000e1"
CAMPAIGN = "0x1111111111111111111111111111111111111111"
CAMPAIGN_2 = "0x2222222222222222222222222222222222222222"
OWNER = "0x3333333333333333333333333333333333333333"
DONOR = "0x4444444444444444444444444444444444444444"


class FakeCall:
    def __init__(self, contract: "FakeContract", name: str, args: tuple) -> None:
        self.contract = contract
        self.name = name
        self.args = args

    def call(self) -> Any:
        self.contract.reads.append((self.name, self.args))
        value = self.contract.fns[self.name]
        if isinstance(value, Exception):
            raise value
        return value(*self.args) if callable(value) else value


class _Functions:
    def __init__(self, contract: "FakeContract") -> None:
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda *args: FakeCall(self._contract, name, args)


class _Event:
    def __init__(self, logs: list, queries: list) -> None:
        self._logs = logs
        self._queries = queries

    def get_logs(self, **kwargs: Any) -> list:
        self._queries.append(kwargs)
        return list(self._logs)


class _Events:
    def __init__(self, contract: "FakeContract") -> None:
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda: _Event(self._contract.logs.get(name, []), self._contract.log_queries)


class FakeContract:
    def __init__(self, address: str, fns: dict[str, Any] | None = None) -> None:
        self.address = address
        self.fns: dict[str, Any] = dict(fns or {})
        self.logs: dict[str, list] = {}
        self.log_queries: list[dict] = []
        self.reads: list[tuple] = []
        self.functions = _Functions(self)
        self.events = _Events(self)


class FakeChain:
    """Stand-in for `services.chain.ChainContext`."""

    def __init__(self, decimals: int = 2, latest_block: int = 50_000) -> None:
        self.w3 = None
        self.transfer_lookback_blocks = 10_000
        self._latest = latest_block
        self.native: dict[str, int] = {}
        self.block_times: dict[int, int] = {}
        self.factory_contract = FakeContract(FACTORY, {"getDeployedCampaigns": []})
        self.token_contract = FakeContract(
            TOKEN,
            {
                "decimals": decimals,
                "balanceOf": lambda who: 0,
                "allowance": lambda owner, spender: 0,
            },
        )
        self.registry_verified: dict[str, bool] = {}
        self.registry_contract = FakeContract(
            REGISTRY,
            {"isVerified": lambda owner: self.registry_verified.get(owner.lower(), False)},
        )
        self.campaigns: dict[str, FakeContract] = {}

    def add_campaign(
        self,
        address: str = CAMPAIGN,
        *,
        owner: str = OWNER,
        name: str = "Clean Water",
        target: int = 100_000,
        raised: int = 0,
        balance: int | None = None,
        time_remaining: int = 3_600,
        status: int = 0,
        peak: int = 0,
        peak_set: bool = False,
        withdrawn: bool = False,
        ipfs_hash: str = "QmHash",
        donations: dict[str, int] | None = None,
    ) -> FakeContract:
        ledger = {k.lower(): v for k, v in (donations or {}).items()}
        contract = FakeContract(
            address,
            {
                "getCampaignInfo": (
                    owner,
                    name,
                    target,
                    raised,
                    raised if balance is None else balance,
                    time_remaining,
                    status,
                ),
                "ipfsHash": ipfs_hash,
                "getPeakBalance": peak,
                "isPeakBalanceUpdated": peak_set,
                "isWithdrawn": withdrawn,
                "donations": lambda who: ledger.get(who.lower(), 0),
            },
        )
        self.campaigns[address.lower()] = contract
        deployed = self.factory_contract.fns["getDeployedCampaigns"]
        self.factory_contract.fns["getDeployedCampaigns"] = [*deployed, address]
        return contract

    # --- ChainContext surface ---------------------------------------------

    def factory(self) -> FakeContract:
        return self.factory_contract

    def campaign(self, address: str) -> FakeContract:
        return self.campaigns[address.lower()]

    def token(self) -> FakeContract:
        return self.token_contract

    def registry(self) -> FakeContract:
        return self.registry_contract

    def native_balance(self, address: str) -> int:
        return self.native.get(address.lower(), 0)

    def latest_block(self) -> int:
        return self._latest

    def block_timestamp(self, number: int) -> int:
        return self.block_times.get(number, 1_700_000_000 + number)


class FakeSigner:
    """Records submitted calls instead of sending them."""

    def __init__(self, address: str = DONOR) -> None:
        self.address = address
        self.sent: list[tuple[str, tuple]] = []

    def transact(self, call: FakeCall, *, label: str = "") -> str:
        self.sent.append((call.name, call.args))
        return f"0x{len(self.sent):064x}"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.reason = reason or ("OK" if status_code < 400 else "Error")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        import requests

        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)


class FakeSession:
    """Minimal `requests.Session` double: queued responses, recorded calls."""

    def __init__(self, *responses: FakeResponse | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        return self._next(method, url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()
