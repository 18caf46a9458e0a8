# tests/conftest.py
# Pytest 공통 설정 및 Fixtures

import pytest
import sys
import os
from datetime import datetime, timedelta, timezone

# 백엔드 경로 추가
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from fastapi.testclient import TestClient

from config import Settings
from core.models import Source, Transaction, TransferType
from storage import JsonSnapshotFile, TransactionStore

SEPAY_KEY = "sepay_test_key"
CASSO_TOKEN = "casso_test_token"


def iso(dt: datetime) -> str:
    """테스트용 receivedAt 문자열"""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def minutes_ago(minutes: float, now: datetime = None) -> str:
    now = now or datetime.now(timezone.utc)
    return iso(now - timedelta(minutes=minutes))


@pytest.fixture
def settings(tmp_path):
    """임시 데이터 디렉터리 + 테스트 키"""
    return Settings(
        sepay_api_key=SEPAY_KEY,
        casso_secure_token=CASSO_TOKEN,
        data_dir=tmp_path / "data",
        sepay_api_base="https://sepay.test",
    )


@pytest.fixture
def make_app(settings):
    from main import create_app

    def _make(**overrides):
        return create_app(settings.model_copy(update=overrides))
    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sepay_headers():
    return {"Authorization": f"Apikey {SEPAY_KEY}"}


@pytest.fixture
def casso_headers():
    return {"Secure-Token": CASSO_TOKEN}


@pytest.fixture
def store(tmp_path):
    s = TransactionStore(JsonSnapshotFile(tmp_path / "transactions.json"))
    s.initialize()
    return s


@pytest.fixture
def make_transaction():
    """Transaction 팩토리"""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        data = {
            "id": f"tx_{counter['n']}",
            "gateway": "Vietcombank",
            "transaction_date": "2026-10-19 10:00:00",
            "account_number": "0011001234567",
            "content": "SEVQR00001 thanh toan",
            "transfer_type": TransferType.IN,
            "transfer_amount": 50000,
            "accumulated": 1500000,
            "reference_code": "FT123",
            "received_at": minutes_ago(1),
            "source": Source.SEPAY,
        }
        data.update(fields)
        return Transaction(**data)
    return _make


@pytest.fixture
def sample_sepay_payload():
    """SePay Webhook 샘플 페이로드"""
    return {
        "id": 92704,
        "gateway": "Vietcombank",
        "transactionDate": "2026-10-19 14:02:37",
        "accountNumber": "0123499999",
        "code": None,
        "content": "chuyen tien SEVQRAB12X mua hang",
        "transferType": "in",
        "transferAmount": 2277000,
        "accumulated": 19077000,
        "subAccount": None,
        "referenceCode": "MBVCB.3278907687",
        "description": "chuyen tien SEVQRAB12X mua hang"
    }


@pytest.fixture
def sample_casso_entry():
    """Casso 거래 항목 하나"""
    return {
        "id": 123456,
        "tid": "TF230410XXXX",
        "description": "SEVQR7K2QX thanh toan don hang",
        "amount": 150000,
        "cusum_balance": 9850000,
        "when": "2026-10-19 14:05:00",
        "bank_sub_acc_id": "0011001234567",
        "subAccId": "0011001234567",
        "bankName": "Vietcombank",
        "bankAbbreviation": "VCB",
        "virtualAccount": "",
        "virtualAccountName": "",
        "corresponsiveName": "NGUYEN VAN A",
        "corresponsiveAccount": "1903xxxx",
        "corresponsiveBankId": "970407",
        "corresponsiveBankName": "Techcombank"
    }


@pytest.fixture
def sample_casso_payload(sample_casso_entry):
    """Casso Webhook 샘플 페이로드"""
    return {"error": 0, "data": [sample_casso_entry]}
