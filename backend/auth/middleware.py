# backend/auth/middleware.py
# 웹훅 인증 의존성

import hmac
from typing import Optional

from fastapi import Depends, Header

from config import Settings
from core.dependencies import get_settings
from core.exceptions import AuthError
from logging_setup import get_logger

logger = get_logger("auth")

SEPAY_AUTH_SCHEME = "Apikey"
CASSO_TOKEN_HEADER = "Secure-Token"


def _same(received: str, expected: str) -> bool:
    """상수 시간 비교 (대소문자 구분)"""
    return hmac.compare_digest(received.encode(), expected.encode())


def check_sepay_authorization(authorization: Optional[str], api_key: Optional[str]) -> bool:
    """
    SePay: Authorization 헤더 == "Apikey <key>"

    키 미설정이면 항상 거부 (fail closed)
    """
    if not api_key:
        return False
    return _same(authorization or "", f"{SEPAY_AUTH_SCHEME} {api_key}")


def check_casso_token(secure_token: Optional[str], expected: Optional[str]) -> bool:
    """
    Casso: Secure-Token 헤더 == 설정값

    설정값이 없으면 검사 생략 (open mode, 개발용)
    """
    if not expected:
        return True
    return _same(secure_token or "", expected)


async def verify_sepay_api_key(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings)
) -> None:
    """SePay 웹훅 인증 필수"""
    if not check_sepay_authorization(authorization, settings.sepay_api_key):
        logger.warning("SePay webhook rejected: invalid API key")
        raise AuthError("Unauthorized")


async def verify_casso_secure_token(
    secure_token: Optional[str] = Header(None, alias=CASSO_TOKEN_HEADER),
    settings: Settings = Depends(get_settings)
) -> None:
    """Casso 웹훅 인증 (토큰 설정 시에만)"""
    if not check_casso_token(secure_token, settings.casso_secure_token):
        logger.warning("Casso webhook rejected: invalid secure token")
        raise AuthError("Unauthorized")
