# backend/bankaccounts/api.py
# 은행 계좌 목록 API

from fastapi import APIRouter, Depends

from core.dependencies import get_bank_accounts
from .client import BankAccountCache

router = APIRouter(tags=["Bank Accounts"])


@router.get("/bankaccounts")
async def list_bank_accounts(cache: BankAccountCache = Depends(get_bank_accounts)):
    """QR 생성용 계좌 목록 (5분 캐시)"""
    return await cache.get()
