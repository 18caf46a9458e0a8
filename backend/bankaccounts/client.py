# backend/bankaccounts/client.py
# SePay 은행 계좌 목록 클라이언트 + TTL 캐시

import asyncio
import time
from typing import Callable, Dict, List, Optional

import httpx

from core.exceptions import PaymentHubError
from logging_setup import get_logger

logger = get_logger("bankaccounts")


class UpstreamError(PaymentHubError):
    """SePay API가 오류를 돌려줌 (상태 코드 그대로 전달)"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class SePayBankAccountClient:
    """SePay 사용자 API 클라이언트"""

    LIST_PATH = "/userapi/bankaccounts/list"

    def __init__(
        self,
        api_base: str,
        api_token: Optional[str],
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_base = api_base.rstrip("/")
        self.api_token = api_token
        self.http_client = httpx.AsyncClient(timeout=30.0, transport=transport)

    def _get_headers(self) -> Dict:
        return {
            "Authorization": f"Bearer {self.api_token or ''}",
            "Content-Type": "application/json"
        }

    async def fetch_accounts(self) -> List[Dict]:
        """
        계좌 목록 조회

        Raises:
            UpstreamError: HTTP 오류 응답 또는 실패 페이로드
            httpx.HTTPError: 네트워크 오류
        """
        response = await self.http_client.get(
            f"{self.api_base}{self.LIST_PATH}",
            headers=self._get_headers()
        )

        if not response.is_success:
            raise UpstreamError(
                f"SePay API returned error {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("SePay API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError("Unable to fetch bank account list")
        if data.get("status") == 200 and (data.get("messages") or {}).get("success"):
            return data.get("bankaccounts") or []

        raise UpstreamError(data.get("error") or "Unable to fetch bank account list")

    async def close(self):
        await self.http_client.aclose()


class BankAccountCache:
    """
    계좌 목록 캐시

    - TTL 이내면 캐시 반환
    - 네트워크 오류 시 이전 캐시가 있으면 stale로 반환
    """

    def __init__(
        self,
        client: SePayBankAccountClient,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._data: Optional[List[Dict]] = None
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return self._data is not None and (self.clock() - self._fetched_at) < self.ttl_seconds

    async def get(self) -> Dict:
        async with self._lock:
            if self._is_fresh():
                logger.debug("Returning cached bank accounts")
                return {"success": True, "bankaccounts": self._data, "cached": True}

            try:
                logger.info("Fetching bank accounts from SePay API")
                accounts = await self.client.fetch_accounts()
            except httpx.HTTPError as e:
                if self._data is not None:
                    logger.warning("SePay API error, returning stale cache: %s", e)
                    return {
                        "success": True,
                        "bankaccounts": self._data,
                        "cached": True,
                        "stale": True
                    }
                logger.error("SePay API connection error: %s", e)
                raise UpstreamError("Cannot connect to SePay API", status_code=500) from e

            self._data = accounts
            self._fetched_at = self.clock()
            return {"success": True, "bankaccounts": accounts, "cached": False}

    async def close(self):
        await self.client.close()
