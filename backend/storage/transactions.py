# backend/storage/transactions.py
# 거래 저장소 (append-only, write-through)

import threading
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from core.exceptions import PersistenceError
from core.models import Transaction
from logging_setup import get_logger
from .snapshot import JsonSnapshotFile

logger = get_logger("store")


class TransactionStore:
    """
    거래 저장소

    - 프로세스당 하나 생성해서 모든 어댑터/매칭 엔진이 공유
    - 삽입 순서 유지, 수정/삭제 없음
    - add() 할 때마다 전체 스냅샷을 다시 씀 (라우터는 스레드풀에서 호출)
    - 조회(get_all/exists/find)는 락을 잡지 않음

    strict=False (기본): 저장 실패는 로그만 남기고 메모리에는 유지
    strict=True: 저장 실패 시 메모리 append를 되돌리고 PersistenceError
    """

    def __init__(self, snapshot: JsonSnapshotFile, strict: bool = False):
        self.snapshot = snapshot
        self.strict = strict
        self._records: List[Transaction] = []
        self._index: Dict[str, Transaction] = {}
        self._lock = threading.RLock()
        self._loaded = False

    def initialize(self) -> None:
        """스냅샷 로드 (최초 1회). 실패해도 빈 저장소로 시작"""
        if self._loaded:
            return

        with self._lock:
            if self._loaded:
                return
            try:
                self._load()
            finally:
                self._loaded = True

    def _load(self) -> None:
        try:
            rows = self.snapshot.load()
        except PersistenceError as e:
            logger.error("Error loading transactions, starting empty: %s", e)
            return

        for row in rows:
            try:
                record = Transaction.model_validate(row)
            except ValidationError as e:
                logger.warning("Skipping unreadable stored transaction: %s", e)
                continue
            if record.id in self._index:
                continue
            self._records.append(record)
            self._index[record.id] = record

        logger.info("Loaded %d transactions from %s", len(self._records), self.snapshot.path)

    def get_all(self) -> Tuple[Transaction, ...]:
        self.initialize()
        return tuple(self._records)

    def exists(self, transaction_id: str) -> bool:
        self.initialize()
        return transaction_id in self._index

    def find(self, predicate: Callable[[Transaction], bool]) -> Optional[Transaction]:
        """삽입 순서상 첫 번째로 조건을 만족하는 거래"""
        for record in self.get_all():
            if predicate(record):
                return record
        return None

    def add(self, record: Transaction) -> bool:
        """
        거래 추가 + 스냅샷 저장

        Returns:
            True: 추가됨, False: 이미 있는 id (아무것도 안 함)
        """
        self.initialize()
        with self._lock:
            if record.id in self._index:
                return False

            self._records.append(record)
            self._index[record.id] = record

            try:
                self.snapshot.save([r.to_json() for r in self._records])
            except PersistenceError as e:
                if self.strict:
                    self._records.pop()
                    del self._index[record.id]
                    raise
                logger.error("Error saving transactions (kept in memory): %s", e)

            return True

    def __len__(self) -> int:
        return len(self.get_all())
