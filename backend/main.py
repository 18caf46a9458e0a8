# backend/main.py
# SEVQR Payment Hub - QR 이체 입금 확인 API

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from core.exceptions import PaymentHubError, PersistenceError
from logging_setup import configure_logging, get_logger
from storage import JsonSnapshotFile, TransactionStore
from matching import MatchEngine
from bankaccounts import BankAccountCache, SePayBankAccountClient

# 라우터 임포트
from webhooks.sepay_webhook import router as sepay_router
from webhooks.casso_webhook import router as casso_router
from webhooks.webhook_log import WebhookLog
from webhooks.forwarder import WebhookForwarder
from matching.api import router as check_router
from bankaccounts.api import router as bankaccounts_router
from payment_qr.api import router as qr_router

logger = get_logger("app")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 라이프사이클"""
    settings: Settings = app.state.settings

    app.state.store.initialize()

    logger.info("SEVQR Payment Hub started (data dir: %s)", settings.data_dir)
    if not settings.sepay_api_key:
        logger.warning("SEPAY_API_KEY is not set: every SePay webhook will be rejected")
    if not settings.casso_secure_token:
        logger.warning(
            "CASSO_SECURE_TOKEN is not set: Casso webhooks are accepted WITHOUT authentication"
        )
    if not app.state.forwarder.enabled:
        logger.info("WEBHOOK_FORWARD_URL is not set: webhook forwarding disabled")

    yield

    await app.state.bank_accounts.close()
    logger.info("SEVQR Payment Hub stopped")


def register_exception_handlers(app: FastAPI) -> None:
    """모든 오류 응답을 {success: false, error} 형태로"""

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": "Transaction could not be persisted"}
        )

    @app.exception_handler(PaymentHubError)
    async def handle_hub_error(request: Request, exc: PaymentHubError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message}
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None)
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    앱 생성

    저장소/로그/포워더/매칭 엔진은 여기서 한 번 만들어 app.state에 붙이고
    라우터는 의존성으로 꺼내 쓴다.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="SEVQR Payment Hub",
        description="""
## SEVQR Payment Hub

은행 이체 QR 생성 → 웹훅으로 입금 감지 → 코드 매칭으로 확인

### 웹훅
- **SePay**: `POST /webhook` (`Authorization: Apikey <key>`)
- **Casso**: `POST /webhook-casso` (`Secure-Token: <token>`)

### 확인
- `GET /check-transaction?code=&accountNumber=&amount=` (30분 이내 입금만)
        """,
        version=VERSION,
        lifespan=lifespan
    )

    store = TransactionStore(
        JsonSnapshotFile(settings.transactions_file),
        strict=settings.strict_persistence
    )

    app.state.settings = settings
    app.state.store = store
    app.state.webhook_log = WebhookLog(settings.log_dir)
    app.state.forwarder = WebhookForwarder(
        url=settings.forward_url,
        api_key=settings.forward_api_key,
        log_dir=settings.log_dir,
        timeout=settings.forward_timeout_seconds
    )
    app.state.match_engine = MatchEngine(
        store,
        window=timedelta(minutes=settings.match_window_minutes)
    )
    app.state.bank_accounts = BankAccountCache(
        SePayBankAccountClient(settings.sepay_api_base, settings.sepay_api_key),
        ttl_seconds=settings.bank_accounts_cache_ttl
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # 라우터 등록
    app.include_router(sepay_router, prefix="/webhook", tags=["Webhook - SePay"])
    app.include_router(casso_router, prefix="/webhook-casso", tags=["Webhook - Casso"])
    app.include_router(check_router)
    app.include_router(bankaccounts_router)
    app.include_router(qr_router)

    @app.get("/")
    async def root():
        """API 정보"""
        return {
            "name": "SEVQR Payment Hub",
            "version": VERSION,
            "endpoints": {
                "webhooks": ["/webhook", "/webhook-casso"],
                "check": ["/check-transaction"],
                "qr": ["/qr", "/bankaccounts"]
            }
        }

    @app.get("/health")
    async def health():
        """헬스체크"""
        return {
            "status": "healthy",
            "transactions": len(app.state.store),
            "forwarding": app.state.forwarder.enabled,
            "casso_auth": bool(settings.casso_secure_token)
        }

    return app


app = create_app()


# 직접 실행 시
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
