# backend/auth/__init__.py
# 웹훅 인증 모듈

from .middleware import (
    check_sepay_authorization,
    check_casso_token,
    verify_sepay_api_key,
    verify_casso_secure_token,
    SEPAY_AUTH_SCHEME,
    CASSO_TOKEN_HEADER
)

__all__ = [
    "check_sepay_authorization",
    "check_casso_token",
    "verify_sepay_api_key",
    "verify_casso_secure_token",
    "SEPAY_AUTH_SCHEME",
    "CASSO_TOKEN_HEADER"
]
