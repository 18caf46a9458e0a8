# backend/webhooks/__init__.py
# 게이트웨이 웹훅 모듈

from .webhook_log import WebhookLog
from .forwarder import WebhookForwarder
from .sepay_webhook import router as sepay_router, normalize_sepay
from .casso_webhook import router as casso_router, normalize_casso, casso_id

__all__ = [
    "WebhookLog",
    "WebhookForwarder",
    "sepay_router",
    "casso_router",
    "normalize_sepay",
    "normalize_casso",
    "casso_id"
]
