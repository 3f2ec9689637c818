# tests/test_idrx.py
# SPDX-License-Identifier: Apache-2.0
import base64
import json

import pytest

from conftest import CAMPAIGN, CAMPAIGN_2, FakeResponse, FakeSession
from core.errors import GatewayError
from services.idrx import (
    HistoryQuery,
    IdrxClient,
    PaymentStatus,
    UserMintStatus,
    create_signature,
    serialize_body,
)

SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="  # base64("secret-key-for-tests")
TS = "1700000000"

MINT_BODY = {
    "toBeMinted": "150000",
    "destinationWalletAddress": CAMPAIGN,
    "expiryPeriod": 24,
    "networkChainId": "4202",
    "requestType": "donation",
}


def record(**overrides):
    base = {
        "id": 1,
        "reference": "REF-1",
        "merchantOrderId": "M-1",
        "destinationWalletAddress": CAMPAIGN,
        "toBeMinted": "150000",
        "paymentAmount": 150000,
        "paymentStatus": "PAID",
        "userMintStatus": "MINTED",
        "txHash": "0xabc",
        "createdAt": "2024-05-01T10:00:00.000Z",
    }
    base.update(overrides)
    return base


def client(*responses):
    session = FakeSession(*responses)
    return IdrxClient("api-key", SECRET, "https://idrx.test/api/", "4202", session=session), session


class TestSignature:
    def test_post_vector(self):
        body = serialize_body(MINT_BODY)
        sig = create_signature("POST", "/transaction/mint-request", body, TS, SECRET)
        assert sig == "dXYnHk20OW7t43WF94akH-hs5ADUuTL0ALll__OJvxQ"

    def test_get_without_body(self):
        path = "/transaction/user-transaction-history?transactionType=MINT&page=1&take=10&orderByDate=DESC"
        assert create_signature("GET", path, None, TS, SECRET) == (
            "ETG3aiBWvIb1FearsatQBVOO8DN1piGCRW5xV5xZaV8"
        )

    def test_high_bytes_in_secret_are_utf8_encoded(self):
        # "/4AB" decodes to ff 80 01; the key bytes are c3 bf c2 80 01.
        sig = create_signature("GET", "/transaction/status/REF-1", None, TS, "/4AB")
        assert sig == "1rbw7p2AnMNTQOep56Gwzl2PRfJPfDpw4juQfAuQVDU"

    def test_every_byte_value_in_secret(self):
        secret = base64.b64encode(bytes(range(256))).decode("ascii")
        sig = create_signature("GET", "/transaction/status/REF-1", None, TS, secret)
        assert sig == "L7ApCBG-rTokVh4md4voYtij1jFPOlmoVCQabV9u3c4"

    def test_order_sensitive(self):
        path = "/transaction/status/REF-1"
        right = create_signature("GET", path, None, TS, "/4AB")
        # Same inputs with method and timestamp swapped.
        swapped = create_signature(TS, path, None, "GET", "/4AB")
        assert swapped == "NJ1E80Veu_3hwgdHuLhF7Du0PPg38it6aJKFWdHwfzA"
        assert right != swapped

    def test_no_padding_and_urlsafe(self):
        sig = create_signature("POST", "/x", b"{}", TS, SECRET)
        assert "=" not in sig and "+" not in sig and "/" not in sig

    def test_body_serialization_is_compact(self):
        assert serialize_body({"a": 1, "b": "é"}) == '{"a":1,"b":"é"}'.encode()


class TestMintRequest:
    def test_signed_post_and_result(self, monkeypatch):
        monkeypatch.setattr("services.idrx.generate_timestamp", lambda: TS)
        idrx, session = client(
            FakeResponse(
                200,
                {"data": {"paymentUrl": "https://pay/1", "reference": "REF-1", "amount": "150000"}},
            )
        )

        req = idrx.create_mint_request("150000", CAMPAIGN, 24)

        assert req.payment_url == "https://pay/1"
        assert req.reference == "REF-1"
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "https://idrx.test/api/transaction/mint-request"
        assert json.loads(call["data"]) == MINT_BODY
        headers = call["headers"]
        assert headers["idrx-api-key"] == "api-key"
        assert headers["idrx-api-ts"] == TS
        assert headers["idrx-api-sig"] == "dXYnHk20OW7t43WF94akH-hs5ADUuTL0ALll__OJvxQ"
        assert call["timeout"] == 30

    def test_http_error(self):
        idrx, _ = client(FakeResponse(401, {"message": "bad sig"}, reason="Unauthorized"))
        with pytest.raises(GatewayError) as exc:
            idrx.create_mint_request("10", CAMPAIGN)
        assert exc.value.status_code == 401
        assert "401" in str(exc.value)


class TestQueries:
    def test_query_string_order(self):
        q = HistoryQuery(transaction_type="MINT", page=2, take=5, reference="R", order_by_date="DESC")
        assert q.to_query_string() == "transactionType=MINT&page=2&take=5&reference=R&orderByDate=DESC"

    def test_campaign_filter_is_client_side(self):
        idrx, session = client(
            FakeResponse(
                200,
                {
                    "metadata": {"totalCount": 3},
                    "records": [
                        record(reference="A", destinationWalletAddress=CAMPAIGN.upper().replace("0X", "0x")),
                        record(reference="B", destinationWalletAddress=CAMPAIGN_2),
                        record(reference="C"),
                    ],
                },
            )
        )
        records = idrx.query_transactions("MINT", 1, 10, campaign_address=CAMPAIGN)
        assert [r.reference for r in records] == ["A", "C"]
        assert "orderByDate=DESC" in session.calls[0]["url"]
        assert session.calls[0]["data"] is None

    def test_reference_lookup(self):
        idrx, session = client(FakeResponse(200, {"records": [record()]}))
        records = idrx.query_transactions(reference="REF-1")
        assert [r.reference for r in records] == ["REF-1"]
        assert "take=1&reference=REF-1" in session.calls[0]["url"]

    def test_reference_not_found(self):
        idrx, _ = client(FakeResponse(200, {"records": []}))
        assert idrx.get_transaction_by_reference("nope") is None

    def test_record_parsing_tolerates_new_statuses(self):
        idrx, _ = client(
            FakeResponse(200, {"records": [record(paymentStatus="PARTIAL", userMintStatus=None)]})
        )
        rec = idrx.get_transaction_history(HistoryQuery()).records[0]
        assert rec.payment_status is PaymentStatus.UNKNOWN
        assert rec.user_mint_status is UserMintStatus.UNKNOWN
        assert rec.created_timestamp == 1714557600
        assert rec.to_dict()["paymentStatus"] == "UNKNOWN"

    def test_payment_status(self):
        idrx, session = client(FakeResponse(200, {"data": record(paymentStatus="WAITING_FOR_PAYMENT")}))
        rec = idrx.check_payment_status("REF-1")
        assert rec.payment_status is PaymentStatus.WAITING_FOR_PAYMENT
        assert session.calls[0]["url"].endswith("/transaction/status/REF-1")
