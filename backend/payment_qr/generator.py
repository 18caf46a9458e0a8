# backend/payment_qr/generator.py
# QR 세션 코드 + 이미지 URL 생성

import re
import secrets
import string
from typing import Optional
from urllib.parse import urlencode

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_session_code(prefix: str = "SEVQR", length: int = 8) -> str:
    """이체 내용에 넣을 랜덤 코드 (예: SEVQR7K2QX9AB)"""
    return prefix + "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def clean_amount(value: Optional[str]) -> Optional[str]:
    """숫자만 남김. 비면 None"""
    if value is None:
        return None
    digits = re.sub(r"\D", "", str(value))
    return digits or None


def build_qr_url(
    base_url: str,
    account_number: str,
    bank: str,
    amount: Optional[str] = None,
    description: Optional[str] = None
) -> str:
    """QR 이미지 URL (렌더링은 외부 서비스)"""
    params = {"acc": account_number, "bank": bank}
    if amount:
        params["amount"] = amount
    if description:
        params["des"] = description
    return f"{base_url}?{urlencode(params)}"
