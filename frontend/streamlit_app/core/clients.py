# frontend/streamlit_app/core/clients.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Client factories for the external services used by the Verifund console.

This module exposes four cached constructors:

- `get_chain()`    → `services.chain.ChainContext` (Web3 + contract addresses)
- `get_idrx()`     → `Optional[services.idrx.IdrxClient]`
- `get_pinata()`   → `Optional[services.ipfs.PinataClient]`
- `get_guardian()` → `services.guardian.GuardianClient`

All are wrapped with `@st.cache_resource` so a single instance (and its HTTP
connection pool) is reused across reruns. The backend and the scripts call the
uncached `build_*` functions directly.

Security notes:
  * Keys and JWTs are read from `core.config.settings` and never logged.
  * If credentials change at runtime, clear the resource cache to force
    re-creation.

Failure behavior:
  * `get_idrx()` / `get_pinata()` return `None` when their credentials are not
    configured. Pages hide the matching feature in that case.
  * No factory performs a health check; network errors surface on first use.
"""

import streamlit as st

from services.chain import ChainContext, build_chain_context
from services.guardian import GuardianClient
from services.idrx import IdrxClient
from services.ipfs import PinataClient

from .config import Settings, settings


def build_idrx(cfg: Settings) -> IdrxClient | None:
    if not (cfg.IDRX_API_KEY and cfg.IDRX_SECRET_KEY):
        return None
    return IdrxClient(
        cfg.IDRX_API_KEY,
        cfg.IDRX_SECRET_KEY,
        cfg.IDRX_BASE_URL,
        cfg.IDRX_NETWORK_CHAIN_ID,
        timeout=cfg.HTTP_TIMEOUT,
    )


def build_pinata(cfg: Settings) -> PinataClient | None:
    if not cfg.PINATA_JWT:
        return None
    return PinataClient(
        cfg.PINATA_JWT, cfg.PINATA_API_URL, cfg.IPFS_GATEWAY_URL, timeout=cfg.HTTP_TIMEOUT
    )


def build_guardian(cfg: Settings) -> GuardianClient:
    # A missing key is reported per call as AnalysisUnavailable.
    return GuardianClient(cfg.GEMINI_API_KEY, cfg.GEMINI_MODEL, cfg.GEMINI_API_URL)


@st.cache_resource(show_spinner=False)
def get_chain() -> ChainContext:
    return build_chain_context(settings)


@st.cache_resource(show_spinner=False)
def get_idrx() -> IdrxClient | None:
    return build_idrx(settings)


@st.cache_resource(show_spinner=False)
def get_pinata() -> PinataClient | None:
    return build_pinata(settings)


@st.cache_resource(show_spinner=False)
def get_guardian() -> GuardianClient:
    return build_guardian(settings)
