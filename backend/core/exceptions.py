# backend/core/exceptions.py
# 도메인 예외

from typing import Optional


class PaymentHubError(Exception):
    """기본 예외"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(PaymentHubError):
    """웹훅 인증 실패 (키/토큰 누락 또는 불일치)"""

    status_code = 401


class PayloadValidationError(PaymentHubError):
    """웹훅 페이로드 구조 오류"""

    status_code = 400


class PersistenceError(PaymentHubError):
    """스냅샷 파일 읽기/쓰기 실패"""

    status_code = 503


class ForwardingError(PaymentHubError):
    """포워딩 실패 (로그에만 기록, 호출자에게 전파하지 않음)"""

    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None, response: str = ""):
        super().__init__(message)
        self.status = status
        self.response = response
