# backend/webhooks/sepay_webhook.py
# SePay 입출금 웹훅 처리 (단건)

from typing import Dict

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from auth.middleware import verify_sepay_api_key
from core.dependencies import get_store, get_webhook_log
from core.exceptions import PayloadValidationError
from core.models import Source, Transaction, TransferType, to_amount, to_number, utc_now_iso
from logging_setup import get_logger
from storage.transactions import TransactionStore
from .common import as_optional_text, as_text, describe, listing_response, read_json_body
from .webhook_log import WebhookLog

router = APIRouter()
logger = get_logger("webhook.sepay")


def normalize_sepay(data: Dict) -> Transaction:
    """SePay 페이로드 → 공통 거래 레코드 (필드 1:1)"""
    return Transaction(
        id=str(data["id"]),
        gateway=as_text(data.get("gateway")),
        transaction_date=as_text(data.get("transactionDate")),
        account_number=as_text(data.get("accountNumber")),
        code=as_optional_text(data.get("code")),
        content=as_text(data.get("content")),
        transfer_type=TransferType.IN if data.get("transferType") == "in" else TransferType.OUT,
        transfer_amount=to_amount(data.get("transferAmount")),
        accumulated=to_number(data.get("accumulated")),
        sub_account=as_optional_text(data.get("subAccount")),
        reference_code=as_text(data.get("referenceCode")),
        description=as_text(data.get("description")),
        received_at=utc_now_iso(),
        source=Source.SEPAY,
    )


@router.get("")
async def list_sepay_transactions(store: TransactionStore = Depends(get_store)):
    """저장된 거래 목록 (필터 없음)"""
    return listing_response(store)


@router.post("", dependencies=[Depends(verify_sepay_api_key)])
async def sepay_webhook(
    request: Request,
    store: TransactionStore = Depends(get_store),
    webhook_log: WebhookLog = Depends(get_webhook_log)
):
    """
    SePay 웹훅 엔드포인트

    처리 순서:
    1. Authorization: Apikey <key> 검증 (의존성)
    2. 원본 페이로드 기록 (검증 전)
    3. id 필수
    4. 중복 id → 성공 + "already processed"
    5. 정규화 후 저장 (금액이 유한하지 않으면 400)

    파일 쓰기는 스레드풀에서 돌려 조회 요청을 막지 않는다
    """
    data = await read_json_body(request)

    await run_in_threadpool(webhook_log.record, Source.SEPAY, data)

    if not isinstance(data, dict) or not data.get("id"):
        raise PayloadValidationError("Invalid transaction data")

    try:
        record = normalize_sepay(data)
    except ValueError as e:
        logger.warning("Rejected SePay payload %s: %s", data.get("id"), e)
        raise PayloadValidationError("Invalid transaction amount") from e

    if store.exists(record.id) or not await run_in_threadpool(store.add, record):
        logger.info("Duplicate transaction ID: %s", record.id)
        return {"success": True, "message": "Transaction already processed"}

    logger.info(describe(record))
    return {"success": True}
