# tests/test_matching.py
# 매칭 엔진 + /check-transaction 테스트

import pytest
import sys
import os
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from conftest import minutes_ago
from matching.engine import MatchEngine, parse_amount_hint

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(store):
    return MatchEngine(store, clock=lambda: NOW)


class TestParseAmountHint:
    """금액 힌트 파싱"""

    def test_absent(self):
        assert parse_amount_hint(None) is None
        assert parse_amount_hint("") is None
        assert parse_amount_hint("  ") is None

    def test_numbers(self):
        assert parse_amount_hint("50000") == 50000
        assert parse_amount_hint("50000.0") == 50000
        assert parse_amount_hint("0") == 0

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_amount_hint("abc")
        with pytest.raises(ValueError):
            parse_amount_hint("nan")


class TestMatchEngine:
    """매칭 조건"""

    def test_case_insensitive_substring(self, engine, store, make_transaction):
        """content "Payment SEVQRAB12X ok" ↔ code sevqrab12x"""
        store.add(make_transaction(content="Payment SEVQRAB12X ok", received_at=minutes_ago(1, NOW)))

        match = engine.check("sevqrab12x")
        assert match is not None
        assert match.content == "Payment SEVQRAB12X ok"

    def test_no_content_match(self, engine, store, make_transaction):
        store.add(make_transaction(content="SEVQR11111", received_at=minutes_ago(1, NOW)))
        assert engine.check("SEVQR22222") is None

    def test_window_29_minutes_matches(self, engine, store, make_transaction):
        store.add(make_transaction(received_at=minutes_ago(29, NOW)))
        assert engine.check("SEVQR00001") is not None

    def test_window_31_minutes_rejected(self, engine, store, make_transaction):
        """31분 전 수신 → 내용이 같아도 불일치"""
        store.add(make_transaction(received_at=minutes_ago(31, NOW)))
        assert engine.check("SEVQR00001") is None

    def test_window_boundary_inclusive(self, engine, store, make_transaction):
        store.add(make_transaction(received_at=minutes_ago(30, NOW)))
        assert engine.check("SEVQR00001") is not None

    def test_unparsable_received_at(self, engine, store, make_transaction):
        """receivedAt 파싱 불가 → 아주 오래된 것으로 취급"""
        store.add(make_transaction(received_at="yesterday-ish"))
        store.add(make_transaction(received_at=""))
        assert engine.check("SEVQR00001") is None

    def test_outgoing_never_matches(self, engine, store, make_transaction):
        """out 거래는 모든 조건이 맞아도 확인되지 않음"""
        store.add(make_transaction(transfer_type="out", received_at=minutes_ago(1, NOW)))

        assert engine.check(
            "SEVQR00001",
            account_number="0011001234567",
            amount=50000
        ) is None

    def test_account_hint_narrows(self, engine, store, make_transaction):
        """계좌 힌트로 두 후보 중 하나 선택"""
        store.add(make_transaction(id="first", account_number="AAA", received_at=minutes_ago(2, NOW)))
        store.add(make_transaction(id="second", account_number="BBB", received_at=minutes_ago(1, NOW)))

        assert engine.check("SEVQR00001", account_number="BBB").id == "second"
        assert engine.check("SEVQR00001").id == "first"
        assert engine.check("SEVQR00001", account_number="CCC") is None

    def test_amount_hint(self, engine, store, make_transaction):
        store.add(make_transaction(id="small", transfer_amount=10000, received_at=minutes_ago(1, NOW)))
        store.add(make_transaction(id="big", transfer_amount=50000, received_at=minutes_ago(1, NOW)))

        assert engine.check("SEVQR00001", amount=50000).id == "big"
        assert engine.check("SEVQR00001", amount=50000.0).id == "big"
        assert engine.check("SEVQR00001", amount=1) is None

    def test_explicit_now(self, store, make_transaction):
        """호출자가 준 now 기준으로 시간창 계산"""
        store.add(make_transaction(received_at=minutes_ago(1, NOW)))
        engine = MatchEngine(store)

        assert engine.check("SEVQR00001", now=NOW) is not None
        assert engine.check("SEVQR00001", now=NOW + timedelta(hours=1)) is None

    def test_custom_window(self, store, make_transaction):
        store.add(make_transaction(received_at=minutes_ago(10, NOW)))
        engine = MatchEngine(store, window=timedelta(minutes=5), clock=lambda: NOW)

        assert engine.check("SEVQR00001") is None

    def test_empty_code(self, engine, store, make_transaction):
        store.add(make_transaction(received_at=minutes_ago(1, NOW)))
        assert engine.check("") is None


class TestCheckTransactionAPI:
    """GET /check-transaction"""

    def ingest(self, client, sepay_headers, payload, **fields):
        payload = dict(payload, **fields)
        response = client.post("/webhook", json=payload, headers=sepay_headers)
        assert response.status_code == 200

    def test_missing_code(self, client):
        response = client.get("/check-transaction")

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing code parameter"}

    def test_invalid_amount(self, client):
        response = client.get("/check-transaction", params={"code": "X", "amount": "abc"})
        assert response.status_code == 400

    def test_not_confirmed(self, client):
        response = client.get("/check-transaction", params={"code": "SEVQRNOPE1"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "confirmed": False}

    def test_confirmed_projection(self, client, sepay_headers, sample_sepay_payload):
        """확인 시 외부 표시용 필드만"""
        self.ingest(client, sepay_headers, sample_sepay_payload)

        response = client.get("/check-transaction", params={
            "code": "sevqrab12x",
            "accountNumber": "0123499999",
            "amount": "2277000"
        })
        data = response.json()

        assert data["success"] is True
        assert data["confirmed"] is True
        assert data["transaction"] == {
            "id": "92704",
            "gateway": "Vietcombank",
            "transactionDate": "2026-10-19 14:02:37",
            "accountNumber": "0123499999",
            "content": "chuyen tien SEVQRAB12X mua hang",
            "transferAmount": 2277000,
            "accumulated": 19077000,
            "referenceCode": "MBVCB.3278907687",
        }

    def test_hints_mismatch(self, client, sepay_headers, sample_sepay_payload):
        self.ingest(client, sepay_headers, sample_sepay_payload)

        wrong_account = client.get("/check-transaction", params={
            "code": "SEVQRAB12X", "accountNumber": "999"
        })
        wrong_amount = client.get("/check-transaction", params={
            "code": "SEVQRAB12X", "amount": "1000"
        })

        assert wrong_account.json()["confirmed"] is False
        assert wrong_amount.json()["confirmed"] is False

    def test_empty_hints_ignored(self, client, sepay_headers, sample_sepay_payload):
        self.ingest(client, sepay_headers, sample_sepay_payload)

        response = client.get("/check-transaction", params={
            "code": "SEVQRAB12X", "accountNumber": "", "amount": ""
        })
        assert response.json()["confirmed"] is True

    def test_outgoing_not_confirmed(self, client, sepay_headers, sample_sepay_payload):
        self.ingest(client, sepay_headers, sample_sepay_payload, transferType="out")

        response = client.get("/check-transaction", params={"code": "SEVQRAB12X"})
        assert response.json()["confirmed"] is False

    def test_casso_transaction_confirmed(self, client, casso_headers, sample_casso_payload):
        client.post("/webhook-casso", json=sample_casso_payload, headers=casso_headers)

        response = client.get("/check-transaction", params={
            "code": "SEVQR7K2QX",
            "accountNumber": "0011001234567",
            "amount": "150000"
        })
        data = response.json()

        assert data["confirmed"] is True
        assert data["transaction"]["id"] == "casso_123456"
        assert "providerData" not in data["transaction"]

    def test_method_not_allowed(self, client):
        response = client.post("/check-transaction", params={"code": "X"})
        assert response.status_code == 405
