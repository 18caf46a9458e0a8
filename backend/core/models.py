# backend/core/models.py
# 거래 레코드 (게이트웨이 공통 형식)

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TransferType(str, Enum):
    IN = "in"
    OUT = "out"


class Source(str, Enum):
    """웹훅 출처"""
    SEPAY = "sepay"
    CASSO = "casso"


def utc_now_iso() -> str:
    """수신 시각 (UTC, 밀리초, Z 접미사)"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """ISO-8601 파싱. 실패하면 None (타임존 없으면 UTC로 간주)"""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_amount(value: Any) -> int:
    """금액 → 0 이상의 정수 (부호는 transferType으로). 유한하지 않으면 ValueError"""
    number = parse_number(value)
    return int(round(abs(number)))


def parse_number(value: Any) -> Union[int, float]:
    """
    JSON 숫자/문자열 → 숫자

    숫자가 아니면 0. 1e400, NaN, Infinity 처럼 유한하지 않으면 ValueError
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
    else:
        return 0
    if isinstance(number, float):
        if not math.isfinite(number):
            raise ValueError(f"Non-finite number: {value!r}")
        if isinstance(value, str) and number.is_integer():
            return int(number)
    return number


def to_number(value: Any) -> Union[int, float]:
    """잔액 등 보조 숫자. 변환 불가/유한하지 않으면 0"""
    try:
        return parse_number(value)
    except ValueError:
        return 0


def json_safe(value: Any) -> Any:
    """유한하지 않은 float → None (스냅샷/응답 JSON이 깨지지 않도록)"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


class Transaction(BaseModel):
    """
    정규화된 거래 레코드

    - id: 스토어 내 유일 (Casso는 "casso_" 접두사)
    - receivedAt: 이 서버가 수신한 시각. 매칭 시간창의 기준
    - providerData: 게이트웨이별 원본 필드 (매칭에는 사용하지 않음)
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
    )

    id: str
    gateway: str = ""
    transaction_date: str = ""
    account_number: str = ""
    code: Optional[str] = None
    content: str = ""
    transfer_type: TransferType = TransferType.OUT
    transfer_amount: int = Field(default=0, ge=0)
    accumulated: Union[int, float] = 0
    sub_account: Optional[str] = None
    reference_code: str = ""
    description: str = ""
    received_at: str = Field(default_factory=utc_now_iso)
    source: Source
    provider_data: Optional[Dict[str, Any]] = None

    @field_validator("accumulated")
    @classmethod
    def _finite_accumulated(cls, value):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("accumulated must be a finite number")
        return value

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def to_public(self) -> Dict[str, Any]:
        """외부 표시용 필드만"""
        return {
            "id": self.id,
            "gateway": self.gateway,
            "transactionDate": self.transaction_date,
            "accountNumber": self.account_number,
            "content": self.content,
            "transferAmount": self.transfer_amount,
            "accumulated": self.accumulated,
            "referenceCode": self.reference_code,
        }
