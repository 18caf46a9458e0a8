# backend/webhooks/common.py
# 웹훅 라우터 공통 처리

import json
from typing import Any, Optional

from fastapi import Request

from core.models import Transaction, TransferType
from storage.transactions import TransactionStore


async def read_json_body(request: Request) -> Any:
    """
    요청 본문 파싱

    JSON이 아니면 원문 문자열을 그대로 돌려준다 (감사 로그에는 남기고 검증에서 거부)
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")


def listing_response(store: TransactionStore) -> dict:
    """GET 응답: 저장된 거래 전체"""
    transactions = store.get_all()
    return {
        "success": True,
        "total": len(transactions),
        "transactions": [t.to_json() for t in transactions],
    }


def as_text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def as_optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def describe(record: Transaction) -> str:
    """로그용 한 줄 요약"""
    label = "IN" if record.transfer_type == TransferType.IN else "OUT"
    return f"{label} {record.transfer_amount:,} VND | {record.gateway} | {record.content}"
