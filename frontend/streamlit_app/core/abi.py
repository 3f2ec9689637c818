# frontend/streamlit_app/core/abi.py
# SPDX-License-Identifier: Apache-2.0
"""Minimal contract ABIs for the campaign factory, campaigns, token and registry.

Only the entries this app calls are declared. The campaign info tuple follows
the latest contract shape:
(owner, name, target, raised, actualBalance, timeRemaining, status).
"""

from __future__ import annotations

from typing import Any


def _params(*pairs: tuple[str, str]) -> list[dict[str, Any]]:
    return [{"name": name, "type": typ} for name, typ in pairs]


def _fn(
    name: str,
    inputs: tuple[tuple[str, str], ...] = (),
    outputs: tuple[tuple[str, str], ...] = (),
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": _params(*inputs),
        "outputs": _params(*outputs),
        "stateMutability": mutability,
    }


def _event(name: str, *inputs: tuple[str, str, bool]) -> dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": n, "type": t, "indexed": indexed} for n, t, indexed in inputs
        ],
    }


FACTORY_ABI: list[dict[str, Any]] = [
    _fn(
        "createCampaign",
        (("name", "string"), ("target", "uint256"), ("duration", "uint256"), ("ipfsHash", "string")),
        (),
        "nonpayable",
    ),
    _fn("getDeployedCampaigns", (), (("", "address[]"),)),
]

CAMPAIGN_ABI: list[dict[str, Any]] = [
    _fn(
        "getCampaignInfo",
        (),
        (
            ("owner", "address"),
            ("name", "string"),
            ("target", "uint256"),
            ("raised", "uint256"),
            ("actualBalance", "uint256"),
            ("timeRemaining", "uint256"),
            ("status", "uint8"),
        ),
    ),
    _fn("ipfsHash", (), (("", "string"),)),
    _fn("isWithdrawn", (), (("", "bool"),)),
    _fn("getPeakBalance", (), (("", "uint256"),)),
    _fn("isPeakBalanceUpdated", (), (("", "bool"),)),
    _fn("donations", (("donor", "address"),), (("", "uint256"),)),
    _fn("donate", (("amount", "uint256"),), (), "nonpayable"),
    _fn("withdraw", (), (), "nonpayable"),
    _fn("refund", (), (), "nonpayable"),
    _fn("updatePeakBalance", (), (), "nonpayable"),
    _fn("syncIDRXDonations", (), (), "nonpayable"),
    _event("Donated", ("donor", "address", True), ("amount", "uint256", False)),
]

TOKEN_ABI: list[dict[str, Any]] = [
    _fn("decimals", (), (("", "uint8"),)),
    _fn("balanceOf", (("owner", "address"),), (("", "uint256"),)),
    _fn("allowance", (("owner", "address"), ("spender", "address")), (("", "uint256"),)),
    _fn("approve", (("spender", "address"), ("amount", "uint256")), (("", "bool"),), "nonpayable"),
    _event("Transfer", ("from", "address", True), ("to", "address", True), ("value", "uint256", False)),
]

REGISTRY_ABI: list[dict[str, Any]] = [
    _fn("isVerified", (("account", "address"),), (("", "bool"),)),
]
