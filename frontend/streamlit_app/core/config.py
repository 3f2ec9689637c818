# frontend/streamlit_app/core/config.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Centralized, immutable configuration for the Verifund console and backend.

This module defines a frozen `Settings` dataclass whose fields are populated
from environment variables (loaded via python-dotenv if a `.env` file is
present). The resulting singleton `settings` is imported by other modules to
avoid scattering `os.getenv` calls throughout the codebase.

Design goals
------------
- **Single source of truth**: chain endpoints, contract addresses, gateway
  credentials and AI model settings live here.
- **Immutability**: `@dataclass(frozen=True)` prevents accidental mutation at
  runtime. Changes require process restart (or re-instantiation in tests).
- **Fast import**: only the dotenv load and dataclass construction happen at
  import time. No network calls, no validation of addresses.
- **Safe defaults**: endpoints default to Lisk Sepolia and the public IDRX /
  Pinata / Gemini hosts. Secrets default to empty strings.

Security notes
--------------
- `IDRX_SECRET_KEY`, `PINATA_JWT` and `GEMINI_API_KEY` are server-side
  secrets. They are read by the Streamlit server process and the backend,
  never sent to a browser.
- `WALLET_PRIVATE_KEY` only pre-fills the sidebar for local development. Do
  not put a funded production key in `.env`.

Testing
-------
Construct `Settings(...)` directly with keyword overrides, or set environment
variables **before** importing this module and reload it.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# `override=False` by default, so pre-set env vars take precedence.
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """
    Immutable application settings.

    Each attribute is populated from the corresponding environment variable;
    when unset, a documented default is used. See `.env.example`.
    """

    # --- Chain ---------------------------------------------------------------
    # JSON-RPC endpoint used for every read (and for sending signed txns).
    RPC_URL: str = os.getenv("RPC_URL", "https://rpc.sepolia-api.lisk.com")
    # Factory that deploys campaigns and lists their addresses.
    CAMPAIGN_FACTORY_ADDRESS: str = os.getenv("CAMPAIGN_FACTORY_ADDRESS", "")
    # Fungible token campaigns are denominated in (IDRX).
    IDRX_TOKEN_ADDRESS: str = os.getenv("IDRX_TOKEN_ADDRESS", "")
    # Soul-bound verification registry queried for owner badges.
    VERIFICATION_REGISTRY_ADDRESS: str = os.getenv("VERIFICATION_REGISTRY_ADDRESS", "")
    # Block window scanned for direct token transfers to a campaign.
    TRANSFER_LOOKBACK_BLOCKS: int = int(os.getenv("TRANSFER_LOOKBACK_BLOCKS", "10000"))
    # Minimum native balance (decimal string, native units) before donating.
    MIN_GAS_BALANCE: str = os.getenv("MIN_GAS_BALANCE", "0.00001")

    # --- IDRX fiat payment gateway -------------------------------------------
    IDRX_API_KEY: str = os.getenv("IDRX_API_KEY", "")
    # Base64-encoded HMAC secret. Server-side only.
    IDRX_SECRET_KEY: str = os.getenv("IDRX_SECRET_KEY", "")
    IDRX_BASE_URL: str = os.getenv("IDRX_BASE_URL", "https://idrx.co/api")
    IDRX_NETWORK_CHAIN_ID: str = os.getenv("IDRX_NETWORK_CHAIN_ID", "4202")
    PAYMENT_EXPIRY_HOURS: int = int(os.getenv("PAYMENT_EXPIRY_HOURS", "24"))

    # --- Metadata store (Pinata / IPFS) --------------------------------------
    PINATA_JWT: str = os.getenv("PINATA_JWT", "")
    PINATA_API_URL: str = os.getenv("PINATA_API_URL", "https://api.pinata.cloud")
    IPFS_GATEWAY_URL: str = os.getenv(
        "IPFS_GATEWAY_URL", "https://gateway.pinata.cloud/ipfs"
    )

    # --- Guardian risk analysis (Gemini) -------------------------------------
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")
    GEMINI_API_URL: str = os.getenv(
        "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta"
    )

    # --- Misc ----------------------------------------------------------------
    # Seconds applied to every outbound HTTP request.
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # Development convenience: pre-fills the sidebar private key field.
    WALLET_PRIVATE_KEY: str = os.getenv("WALLET_PRIVATE_KEY", "")
    # Comma-separated CORS origins for the backend ("*" when empty).
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "")


# Singleton settings object imported by consumers.
settings = Settings()
