# backend/matching/engine.py
# 입금 확인 매칭 엔진

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from core.models import Transaction, TransferType, parse_timestamp
from storage.transactions import TransactionStore

DEFAULT_WINDOW = timedelta(minutes=30)

Number = Union[int, float]


def parse_amount_hint(value: Optional[str]) -> Optional[Number]:
    """
    쿼리 문자열 금액 → 숫자

    None/빈 문자열 → None (조건 생략), 숫자가 아니면 ValueError
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    number = float(text)
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"not a finite number: {value!r}")
    return int(number) if number.is_integer() else number


class MatchEngine:
    """
    코드 기반 입금 매칭

    조건 (모두 만족하는 첫 거래, 삽입 순서):
    1. content에 code 포함 (대소문자 무시)
    2. transferType == in
    3. now - receivedAt <= window (receivedAt 파싱 실패 시 불일치)
    4. accountNumber 힌트가 있으면 정확히 일치
    5. amount 힌트가 있으면 transferAmount와 숫자 일치
    """

    def __init__(
        self,
        store: TransactionStore,
        window: timedelta = DEFAULT_WINDOW,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.window = window
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def predicate(
        self,
        code: str,
        account_number: Optional[str] = None,
        amount: Optional[Number] = None,
        now: Optional[datetime] = None
    ) -> Callable[[Transaction], bool]:
        needle = code.upper()
        current = now or self.clock()

        def matches(t: Transaction) -> bool:
            if not t.content or needle not in t.content.upper():
                return False
            if t.transfer_type != TransferType.IN:
                return False

            received = parse_timestamp(t.received_at)
            if received is None or current - received > self.window:
                return False

            if account_number and t.account_number != account_number:
                return False
            if amount is not None and t.transfer_amount != amount:
                return False
            return True

        return matches

    def check(
        self,
        code: str,
        account_number: Optional[str] = None,
        amount: Optional[Number] = None,
        now: Optional[datetime] = None
    ) -> Optional[Transaction]:
        """일치하는 거래 또는 None (None은 오류가 아니라 '미확인')"""
        if not code:
            return None
        return self.store.find(self.predicate(code, account_number, amount, now))
