# backend/api/app.py
# SPDX-License-Identifier: Apache-2.0
"""Verifund internal API (FastAPI).

These routes exist to keep the IDRX secret, the Pinata JWT and the Gemini key
on the server. They validate required inputs and pass through to the service
clients; no other business logic lives here.

Errors are JSON bodies of the form ``{"error": "<message>"}``: 400 for a
missing required field, 500 with a fixed generic message for any upstream
failure (the upstream detail is logged, never returned).

Run
---
    uvicorn backend.api.app:app --reload --port 8000
"""

from __future__ import annotations

# ────────────────────── sys.path bootstrap for local packages ─────────────────
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parents[2] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))
# ──────────────────────────────────────────────────────────────────────────────

import logging
from functools import lru_cache
from typing import Any

import requests
from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.clients import build_guardian, build_idrx, build_pinata
from core.config import settings
from core.errors import VerifundError
from services.guardian import GuardianClient
from services.idrx import IdrxClient
from services.ipfs import PinataClient

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)-8s: %(message)s",
)
log = logging.getLogger(__name__)

#: Failures of an upstream service that map to a generic 500.
UPSTREAM_ERRORS = (VerifundError, requests.RequestException, ValueError, KeyError)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def get_allowed_origins() -> list[str]:
    origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
    if not origins:
        log.warning("No CORS origins configured, allowing all origins")
        origins = ["*"]
    return origins


# ===== DEPENDENCIES ===========================================================
# Overridden in tests through `app.dependency_overrides`.


@lru_cache(maxsize=1)
def get_idrx_client() -> IdrxClient | None:
    return build_idrx(settings)


@lru_cache(maxsize=1)
def get_pinata_client() -> PinataClient | None:
    return build_pinata(settings)


@lru_cache(maxsize=1)
def get_guardian_client() -> GuardianClient:
    return build_guardian(settings)


async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


# ===== APP ====================================================================

app = FastAPI(title="Verifund API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}


@app.post("/api/idrx/mint-request")
async def mint_request(request: Request, idrx: IdrxClient | None = Depends(get_idrx_client)):
    body = await _json_body(request)
    amount, campaign = body.get("amount"), body.get("campaignAddress")
    if not amount or not campaign:
        return _error(400, "Amount and campaign address are required")
    if idrx is None:
        log.error("IDRX credentials are not configured")
        return _error(500, "Failed to create payment request")
    try:
        req = idrx.create_mint_request(str(amount), str(campaign), settings.PAYMENT_EXPIRY_HOURS)
    except UPSTREAM_ERRORS as e:
        log.error("IDRX mint request failed: %s", e)
        return _error(500, "Failed to create payment request")
    return {
        "success": True,
        "paymentUrl": req.payment_url,
        "reference": req.reference,
        "amount": req.amount,
    }


@app.get("/api/idrx/transaction-history")
def transaction_history(
    transactionType: str | None = Query(None),
    page: int = Query(1, ge=1),
    take: int = Query(10, ge=1),
    campaignAddress: str | None = Query(None),
    reference: str | None = Query(None),
    idrx: IdrxClient | None = Depends(get_idrx_client),
):
    if not transactionType:
        return _error(400, "transactionType is required")
    if idrx is None:
        log.error("IDRX credentials are not configured")
        return _error(500, "Failed to fetch transaction history")
    try:
        records = idrx.query_transactions(
            transactionType, page, take, campaign_address=campaignAddress, reference=reference
        )
    except UPSTREAM_ERRORS as e:
        log.error("IDRX history failed: %s", e)
        return _error(500, "Failed to fetch transaction history")
    return {"success": True, "data": [r.to_dict() for r in records]}


@app.post("/api/ipfs/upload-metadata")
async def upload_metadata(
    request: Request, pinata: PinataClient | None = Depends(get_pinata_client)
):
    metadata = await _json_body(request)
    if not metadata:
        return _error(400, "Metadata is required")
    if pinata is None:
        log.error("PINATA_JWT is not configured")
        return _error(500, "Failed to upload metadata to IPFS")
    try:
        cid = pinata.pin_json(metadata)
    except UPSTREAM_ERRORS as e:
        log.error("Metadata upload failed: %s", e)
        return _error(500, "Failed to upload metadata to IPFS")
    return {"success": True, "ipfsHash": cid}


@app.post("/api/ipfs/upload-image")
async def upload_image(
    file: UploadFile | None = File(None),
    pinata: PinataClient | None = Depends(get_pinata_client),
):
    if file is None:
        return _error(400, "No file provided")
    if pinata is None:
        log.error("PINATA_JWT is not configured")
        return _error(500, "Failed to upload image to IPFS")
    try:
        cid = pinata.pin_file(await file.read(), file.filename or "upload", file.content_type)
    except UPSTREAM_ERRORS as e:
        log.error("Image upload failed: %s", e)
        return _error(500, "Failed to upload image to IPFS")
    return {"success": True, "imageUrl": pinata.gateway_url(cid), "ipfsHash": cid}


@app.post("/api/guardian")
async def guardian(request: Request, client: GuardianClient = Depends(get_guardian_client)):
    body = await _json_body(request)
    description = body.get("description")
    if not description:
        return _error(400, "Description is required")
    try:
        analysis = client.analyze(str(description))
    except UPSTREAM_ERRORS as e:
        log.error("Guardian analysis failed: %s", e)
        return _error(500, "Failed to analyze campaign")
    return analysis.to_dict()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
