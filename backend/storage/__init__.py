# backend/storage/__init__.py
# 저장소 모듈

from .snapshot import JsonSnapshotFile
from .transactions import TransactionStore

__all__ = [
    "JsonSnapshotFile",
    "TransactionStore"
]
