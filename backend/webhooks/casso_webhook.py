# backend/webhooks/casso_webhook.py
# Casso 웹훅 처리 (배치, 항목별 부분 성공 허용)

from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from auth.middleware import verify_casso_secure_token
from core.dependencies import get_forwarder, get_store, get_webhook_log
from core.exceptions import PersistenceError
from core.models import (
    Source, Transaction, TransferType, json_safe, parse_number, to_amount, to_number, utc_now_iso
)
from logging_setup import get_logger
from storage.transactions import TransactionStore
from .common import as_optional_text, as_text, describe, listing_response, read_json_body
from .forwarder import WebhookForwarder
from .webhook_log import WebhookLog

router = APIRouter()
logger = get_logger("webhook.casso")

ID_PREFIX = "casso_"
SUCCESS_CODE = 0

# providerData에 그대로 보존하는 Casso 원본 필드
PRESERVED_FIELDS = (
    "corresponsiveName",
    "corresponsiveAccount",
    "corresponsiveBankId",
    "corresponsiveBankName",
    "virtualAccountName",
)


def casso_id(native_id: Any) -> str:
    """SePay id와 겹치지 않도록 접두사"""
    return f"{ID_PREFIX}{native_id}"


def is_valid_payload(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    error = body.get("error")
    if isinstance(error, bool) or error != SUCCESS_CODE:
        return False
    return isinstance(body.get("data"), list)


def normalize_casso(entry: Dict) -> Transaction:
    """
    Casso 항목 → 공통 거래 레코드

    - 방향: amount > 0 → in, 그 외 → out
    - 금액: 절대값 (유한하지 않으면 ValueError)
    """
    amount = parse_number(entry.get("amount"))

    provider_data = {"id": json_safe(entry.get("id")), "tid": json_safe(entry.get("tid"))}
    for field in PRESERVED_FIELDS:
        provider_data[field] = json_safe(entry.get(field)) or ""

    return Transaction(
        id=casso_id(entry["id"]),
        gateway=as_text(entry.get("bankName") or entry.get("bankAbbreviation")),
        transaction_date=as_text(entry.get("when")),
        account_number=as_text(entry.get("bank_sub_acc_id") or entry.get("subAccId")),
        code=None,
        content=as_text(entry.get("description")),
        transfer_type=TransferType.IN if amount > 0 else TransferType.OUT,
        transfer_amount=to_amount(amount),
        accumulated=to_number(entry.get("cusum_balance")),
        sub_account=as_optional_text(entry.get("virtualAccount")),
        reference_code=as_text(entry.get("tid")),
        description=as_text(entry.get("description")),
        received_at=utc_now_iso(),
        source=Source.CASSO,
        provider_data=provider_data,
    )


def process_entries(store: TransactionStore, entries: List[Any]) -> List[Dict]:
    """항목별 처리 (processed / duplicate / skipped)"""
    results = []

    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("id"):
            results.append({"id": None, "status": "skipped", "reason": "Missing transaction id"})
            continue

        record_id = casso_id(entry["id"])

        if store.exists(record_id):
            logger.info("Duplicate transaction ID: %s", record_id)
            results.append({"id": record_id, "status": "duplicate"})
            continue

        try:
            record = normalize_casso(entry)
        except ValueError as e:
            logger.warning("Skipping %s: %s", record_id, e)
            results.append({"id": record_id, "status": "skipped", "reason": "Invalid amount"})
            continue

        if not store.add(record):
            results.append({"id": record_id, "status": "duplicate"})
            continue

        logger.info(describe(record))
        results.append({"id": record_id, "status": "processed"})

    return results


@router.get("")
async def list_casso_transactions(store: TransactionStore = Depends(get_store)):
    """저장된 거래 목록 (필터 없음)"""
    return listing_response(store)


@router.post("", dependencies=[Depends(verify_casso_secure_token)])
async def casso_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    store: TransactionStore = Depends(get_store),
    webhook_log: WebhookLog = Depends(get_webhook_log),
    forwarder: WebhookForwarder = Depends(get_forwarder)
):
    """
    Casso 웹훅 엔드포인트

    본문: {"error": 0, "data": [...]}

    기록과 포워딩은 구조 검증 전에 일어난다. 포워딩은 응답 이후
    백그라운드로 돌기 때문에 400/503 응답에도 붙여서 보낸다.
    """
    body = await read_json_body(request)

    await run_in_threadpool(webhook_log.record, Source.CASSO, body)
    background_tasks.add_task(forwarder.forward, Source.CASSO, body)

    if not is_valid_payload(body):
        logger.warning("Invalid payload: %s", body)
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid Casso payload"},
            background=background_tasks
        )

    try:
        results = await run_in_threadpool(process_entries, store, body["data"])
    except PersistenceError as e:
        logger.error("Casso batch aborted: %s", e)
        return JSONResponse(
            status_code=PersistenceError.status_code,
            content={"success": False, "error": "Transaction could not be persisted"},
            background=background_tasks
        )

    return {"success": True, "results": results}
