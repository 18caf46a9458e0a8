# backend/bankaccounts/__init__.py
# 은행 계좌 목록 모듈

from .client import SePayBankAccountClient, BankAccountCache, UpstreamError
from .api import router

__all__ = [
    "SePayBankAccountClient",
    "BankAccountCache",
    "UpstreamError",
    "router"
]
