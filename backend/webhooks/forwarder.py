# backend/webhooks/forwarder.py
# 원본 웹훅을 외부 엔드포인트로 전달 (fire-and-forget)

from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx
from starlette.concurrency import run_in_threadpool

from core.exceptions import ForwardingError, PersistenceError
from core.models import Source, utc_now_iso
from logging_setup import get_logger
from storage.snapshot import JsonSnapshotFile

logger = get_logger("forwarder")

RESPONSE_LOG_LIMIT = 500


class WebhookForwarder:
    """
    웹훅 포워더

    - 응답 경로와 분리: 라우터에서 BackgroundTasks로 forward()를 예약
    - 10초 타임아웃, 재시도 없음
    - 결과(성공/실패)는 webhook-forward.json 에만 기록
    - url 미설정 시 아무것도 하지 않음
    """

    def __init__(
        self,
        url: Optional[str],
        api_key: Optional[str],
        log_dir: Union[str, Path],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.log_file = JsonSnapshotFile(Path(log_dir) / "webhook-forward.json")

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def forward(self, source: Union[Source, str], body: Any) -> Optional[Dict]:
        """전달 시도 1회. 어떤 실패도 호출자에게 올리지 않는다"""
        name = Source(source).value

        if not self.enabled:
            logger.debug("Forwarding disabled, dropping %s payload", name)
            return None

        payload = {
            "source": name,
            "forwardedAt": utc_now_iso(),
            "data": body,
        }
        headers = {
            "Authorization": f"Apikey {self.api_key or ''}",
            "X-Webhook-Source": name,
        }

        try:
            entry = await self._send(name, payload, headers)
            logger.info(
                "%s -> %s | Status: %s | OK | Response: %s",
                name, self.url, entry["status"], entry["response"][:200]
            )
        except ForwardingError as e:
            entry = self._failure(name, e)
            logger.error("%s -> %s | FAILED | %s", name, self.url, e.message)

        await run_in_threadpool(self._log_result, entry)
        return entry

    async def _send(self, name: str, payload: Dict, headers: Dict) -> Dict:
        # 대상 서버가 self-signed 인증서를 쓸 수 있음
        async with httpx.AsyncClient(
            timeout=self.timeout,
            verify=False,
            transport=self.transport
        ) as client:
            try:
                response = await client.post(self.url, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                raise ForwardingError(f"Timeout after {self.timeout:g}s") from e
            except httpx.HTTPError as e:
                raise ForwardingError(str(e) or e.__class__.__name__) from e

        text = response.text[:RESPONSE_LOG_LIMIT]
        if not response.is_success:
            raise ForwardingError(
                f"HTTP {response.status_code}",
                status=response.status_code,
                response=text
            )

        return {
            "time": utc_now_iso(),
            "source": name,
            "url": self.url,
            "status": response.status_code,
            "success": True,
            "response": text,
        }

    def _failure(self, name: str, error: ForwardingError) -> Dict:
        entry = {
            "time": utc_now_iso(),
            "source": name,
            "url": self.url,
            "status": error.status,
            "success": False,
            "error": error.message,
        }
        if error.response:
            entry["response"] = error.response
        return entry

    def _log_result(self, entry: Dict) -> None:
        try:
            self.log_file.append(entry)
        except PersistenceError as e:
            logger.error("Error writing forward log: %s", e)
