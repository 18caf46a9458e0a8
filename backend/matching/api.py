# backend/matching/api.py
# 입금 확인 API (클라이언트 폴링용)

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.dependencies import get_match_engine
from core.exceptions import PayloadValidationError
from .engine import MatchEngine, parse_amount_hint

router = APIRouter(tags=["Check Transaction"])


@router.get("/check-transaction")
async def check_transaction(
    code: Optional[str] = Query(None),
    account_number: Optional[str] = Query(None, alias="accountNumber"),
    amount: Optional[str] = Query(None),
    engine: MatchEngine = Depends(get_match_engine)
):
    """
    QR 설명(code)에 해당하는 입금 확인

    - 30분 이내 수신된 입금(in)만 대상
    - 미확인도 200 (confirmed: false)
    """
    if not code:
        raise PayloadValidationError("Missing code parameter")

    try:
        amount_hint = parse_amount_hint(amount)
    except ValueError:
        raise PayloadValidationError("Invalid amount parameter")

    match = engine.check(code, account_number=account_number or None, amount=amount_hint)

    if match is None:
        return {"success": True, "confirmed": False}

    return {
        "success": True,
        "confirmed": True,
        "transaction": match.to_public(),
    }
