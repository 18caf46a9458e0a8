# backend/config.py
# 환경 변수 설정

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


def _flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """앱 설정 (환경 변수 기반)"""

    # 웹훅 인증
    sepay_api_key: Optional[str] = None
    casso_secure_token: Optional[str] = None

    # 웹훅 포워딩 (미설정 시 비활성)
    forward_url: Optional[str] = None
    forward_api_key: Optional[str] = None
    forward_timeout_seconds: float = 10.0

    # 저장소
    data_dir: Path = Path("data")
    strict_persistence: bool = False

    # 매칭
    match_window_minutes: int = 30

    # 은행 계좌 목록
    sepay_api_base: str = "https://my.sepay.vn"
    bank_accounts_cache_ttl: float = 300.0

    # QR
    qr_image_base: str = "https://qr.sepay.vn/img"
    qr_code_prefix: str = "SEVQR"
    qr_code_length: int = 8

    # 로깅
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def transactions_file(self) -> Path:
        return self.data_dir / "transactions.json"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"

    @classmethod
    def from_env(cls) -> "Settings":
        """환경 변수에서 설정 로드"""
        return cls(
            sepay_api_key=os.getenv("SEPAY_API_KEY") or None,
            casso_secure_token=os.getenv("CASSO_SECURE_TOKEN") or None,
            forward_url=os.getenv("WEBHOOK_FORWARD_URL") or None,
            forward_api_key=os.getenv("WEBHOOK_FORWARD_API_KEY") or None,
            forward_timeout_seconds=float(os.getenv("FORWARD_TIMEOUT_SECONDS", "10")),
            data_dir=Path(os.getenv("DATA_DIR", "data")),
            strict_persistence=_flag("STORE_STRICT_PERSISTENCE"),
            match_window_minutes=int(os.getenv("MATCH_WINDOW_MINUTES", "30")),
            sepay_api_base=os.getenv("SEPAY_API_BASE", "https://my.sepay.vn"),
            bank_accounts_cache_ttl=float(os.getenv("BANK_ACCOUNTS_CACHE_TTL", "300")),
            qr_image_base=os.getenv("QR_IMAGE_BASE", "https://qr.sepay.vn/img"),
            qr_code_prefix=os.getenv("QR_CODE_PREFIX", "SEVQR"),
            qr_code_length=int(os.getenv("QR_CODE_LENGTH", "8")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_flag("LOG_JSON"),
        )
