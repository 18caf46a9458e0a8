# backend/payment_qr/__init__.py
# QR 결제 세션 모듈

from .generator import generate_session_code, build_qr_url, clean_amount
from .watcher import PaymentWatcher, CheckTransactionClient, WatchState
from .api import router

__all__ = [
    "generate_session_code",
    "build_qr_url",
    "clean_amount",
    "PaymentWatcher",
    "CheckTransactionClient",
    "WatchState",
    "router"
]
