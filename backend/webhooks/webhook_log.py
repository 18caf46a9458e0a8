# backend/webhooks/webhook_log.py
# 원본 웹훅 페이로드 기록 (출처별 감사 로그)

from pathlib import Path
from typing import Any, Dict, Union

from core.exceptions import PersistenceError
from core.models import Source, utc_now_iso
from logging_setup import get_logger
from storage.snapshot import JsonSnapshotFile

logger = get_logger("webhook_log")


class WebhookLog:
    """
    webhook-<source>.json 에 {receivedAt, body}를 계속 추가

    거래 저장소와는 별개. 검증 전에 기록하므로 잘못된 페이로드도 남는다.
    """

    def __init__(self, log_dir: Union[str, Path]):
        self.log_dir = Path(log_dir)
        self._files: Dict[str, JsonSnapshotFile] = {}

    def file_for(self, source: Union[Source, str]) -> JsonSnapshotFile:
        name = Source(source).value
        if name not in self._files:
            self._files[name] = JsonSnapshotFile(self.log_dir / f"webhook-{name}.json")
        return self._files[name]

    def record(self, source: Union[Source, str], body: Any) -> None:
        """실패해도 예외를 올리지 않음"""
        try:
            self.file_for(source).append({
                "receivedAt": utc_now_iso(),
                "body": body,
            })
        except PersistenceError as e:
            logger.error("Error writing %s webhook log: %s", Source(source).value, e)
