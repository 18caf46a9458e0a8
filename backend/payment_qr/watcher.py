# backend/payment_qr/watcher.py
# 입금 확인 폴링 (클라이언트 측)

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

import httpx

from logging_setup import get_logger

logger = get_logger("watcher")

CheckFn = Callable[[], Awaitable[Optional[Dict]]]


class WatchState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentWatcher:
    """
    입금 확인 와처

    폴링 주기 / 전체 타임아웃 / 남은 시간 표시를 하나의 태스크로 묶음.
    확인, 만료, cancel() 중 하나가 일어나면 전부 한 번에 멈춘다.

    이벤트:
    - on_tick(remaining_seconds): 매 폴링 직전
    - on_expire(): 타임아웃 도달
    """

    def __init__(
        self,
        check: CheckFn,
        interval: float = 3.0,
        timeout: float = 30 * 60,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expire: Optional[Callable[[], None]] = None
    ):
        self.check = check
        self.interval = interval
        self.timeout = timeout
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.state = WatchState.IDLE
        self.result: Optional[Dict] = None
        self._stop = asyncio.Event()

    def cancel(self) -> None:
        if self.state in (WatchState.IDLE, WatchState.PENDING):
            self.state = WatchState.CANCELLED
        self._stop.set()

    def start(self) -> "asyncio.Task":
        """분리된 태스크로 실행"""
        return asyncio.ensure_future(self.run())

    async def _wait(self, seconds: float) -> bool:
        """seconds 동안 대기. 중간에 cancel()되면 True"""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> Optional[Dict]:
        """확인된 거래 반환. 만료/취소 시 None"""
        if self.state == WatchState.CANCELLED:
            return None

        self.state = WatchState.PENDING
        deadline = time.monotonic() + self.timeout

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.state = WatchState.EXPIRED
                self._stop.set()
                if self.on_expire:
                    self.on_expire()
                return None

            if await self._wait(min(self.interval, remaining)):
                return None

            if time.monotonic() >= deadline:
                continue

            if self.on_tick:
                self.on_tick(max(0, int(deadline - time.monotonic())))

            try:
                transaction = await self.check()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Poll error: %s", e)
                continue

            if self._stop.is_set():
                return None

            if transaction:
                self.state = WatchState.CONFIRMED
                self.result = transaction
                self._stop.set()
                return transaction


class CheckTransactionClient:
    """/check-transaction 호출 (PaymentWatcher의 check 함수)"""

    def __init__(
        self,
        base_url: str,
        code: str,
        account_number: Optional[str] = None,
        amount: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.params = {"code": code}
        if account_number:
            self.params["accountNumber"] = account_number
        if amount:
            self.params["amount"] = amount
        self.http_client = httpx.AsyncClient(base_url=base_url, timeout=10.0, transport=transport)

    async def __call__(self) -> Optional[Dict]:
        response = await self.http_client.get("/check-transaction", params=self.params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response: {data!r}")
        if data.get("success") and data.get("confirmed"):
            return data.get("transaction")
        return None

    async def close(self):
        await self.http_client.aclose()
