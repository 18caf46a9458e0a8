# backend/payment_qr/api.py
# QR 생성 API

from typing import Optional

from fastapi import APIRouter, Depends, Query

from config import Settings
from core.dependencies import get_settings
from core.exceptions import PayloadValidationError
from .generator import build_qr_url, clean_amount, generate_session_code

router = APIRouter(tags=["QR"])


@router.get("/qr")
async def create_qr(
    acc: Optional[str] = Query(None),
    bank: Optional[str] = Query(None),
    amount: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings)
):
    """
    이체 QR 생성

    code를 /check-transaction 폴링에 그대로 사용
    """
    if not acc or not bank:
        raise PayloadValidationError("Missing acc or bank parameter")

    code = generate_session_code(settings.qr_code_prefix, settings.qr_code_length)
    qr_url = build_qr_url(
        settings.qr_image_base,
        account_number=acc,
        bank=bank,
        amount=clean_amount(amount),
        description=code
    )

    return {
        "success": True,
        "code": code,
        "qrUrl": qr_url,
        "accountNumber": acc,
        "bank": bank,
    }
