# backend/storage/snapshot.py
# JSON 스냅샷 파일 (전체 컬렉션을 매번 다시 쓰는 방식)

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, List, Union

from core.exceptions import PersistenceError


class JsonSnapshotFile:
    """
    JSON 배열 하나를 담는 파일

    - load(): 파일 없으면 빈 리스트
    - save(): 임시 파일에 쓴 뒤 os.replace로 교체 (읽는 쪽이 반쯤 쓴 파일을 보지 않음)
    - append(): load + append + save (로그 파일용)

    실패는 모두 PersistenceError로 올린다. 삼킬지 말지는 호출하는 쪽이 정한다.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> List[Any]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} does not contain a JSON array")
        return data

    def save(self, items: List[Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e

    def append(self, entry: Any) -> None:
        with self._lock:
            items = self.load()
            items.append(entry)
            self.save(items)
