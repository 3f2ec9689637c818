# frontend/streamlit_app/services/ipfs.py
# SPDX-License-Identifier: Apache-2.0
"""Metadata store client (Pinata pinning API + public IPFS gateway).

Campaign descriptive content lives off-chain as immutable JSON; the campaign
contract only stores the returned IPFS hash. Failures are fatal to the calling
flow and surface as `StorageError`. There is no retry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests

from core.errors import AnalysisParseError, StorageError
from services.guardian import GuardianAnalysis

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CampaignMetadata:
    name: str
    description: str
    category: str
    creator_name: str
    image: str | None = None
    guardian_analysis: GuardianAnalysis | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "creatorName": self.creator_name,
        }
        if self.image:
            out["image"] = self.image
        if self.guardian_analysis is not None:
            out["guardianAnalysis"] = self.guardian_analysis.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CampaignMetadata":
        analysis = None
        if isinstance(raw.get("guardianAnalysis"), Mapping):
            try:
                analysis = GuardianAnalysis.from_dict(raw["guardianAnalysis"])
            except AnalysisParseError:
                # Older pins may carry a partial analysis; show none rather than a wrong one.
                analysis = None
        return cls(
            name=str(raw.get("name") or ""),
            description=str(raw.get("description") or ""),
            category=str(raw.get("category") or ""),
            creator_name=str(raw.get("creatorName") or ""),
            image=raw.get("image") or None,
            guardian_analysis=analysis,
        )


class PinataClient:
    """Pin JSON / files and resolve hashes through the public gateway."""

    def __init__(
        self,
        jwt: str,
        api_url: str = "https://api.pinata.cloud",
        gateway_url: str = "https://gateway.pinata.cloud/ipfs",
        *,
        session: requests.Session | None = None,
        timeout: float = 30,
    ) -> None:
        self._jwt = jwt
        self.api_url = api_url.rstrip("/")
        self.gateway = gateway_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _auth(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._jwt}"}

    def _pin(self, path: str, **kwargs: Any) -> str:
        try:
            resp = self.session.post(
                f"{self.api_url}{path}", headers=self._auth(), timeout=self.timeout, **kwargs
            )
            resp.raise_for_status()
            return str(resp.json()["IpfsHash"])
        except (requests.RequestException, KeyError, ValueError) as e:
            log.warning("Pinata %s failed: %s", path, e.__class__.__name__)
            raise StorageError("Failed to upload to IPFS") from e

    def pin_json(self, content: Mapping[str, Any] | CampaignMetadata) -> str:
        """Pin a JSON document; returns its IPFS hash."""
        body = content.to_dict() if isinstance(content, CampaignMetadata) else dict(content)
        cid = self._pin("/pinning/pinJSONToIPFS", json=body)
        log.info("Pinned metadata %s", cid)
        return cid

    def pin_file(self, content: bytes, filename: str, content_type: str | None = None) -> str:
        """Pin a binary blob (image); returns its IPFS hash."""
        file_part = (filename, content, content_type) if content_type else (filename, content)
        cid = self._pin("/pinning/pinFileToIPFS", files={"file": file_part})
        log.info("Pinned file %s as %s", filename, cid)
        return cid

    def gateway_url(self, cid: str) -> str:
        return f"{self.gateway}/{cid}"

    def fetch_json(self, cid: str) -> dict[str, Any]:
        try:
            resp = self.session.get(self.gateway_url(cid), timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise StorageError(f"Failed to fetch metadata {cid} from IPFS") from e
        if not isinstance(data, dict):
            raise StorageError(f"Metadata {cid} is not a JSON object")
        return data

    def fetch_metadata(self, cid: str) -> CampaignMetadata:
        return CampaignMetadata.from_dict(self.fetch_json(cid))
