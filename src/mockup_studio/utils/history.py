from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class HistoryStore:
    """생성 이미지 히스토리 (최신순, 최대 limit개).

    JSON 파일에 보존하며, 저장소 오류(디스크 가득 참 등)가 나면
    경고만 남기고 메모리 전용으로 계속 동작합니다. 생성 흐름을 막지 않습니다.
    """

    def __init__(self, path: Path | None = None, limit: int = 20) -> None:
        self.path = path
        self.limit = limit
        self._items: list[str] = self._load()

    def _load(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return []
        try:
            items = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read history from %s: %s", self.path, exc)
            return []
        if not isinstance(items, list):
            logger.warning("Ignoring malformed history file %s", self.path)
            return []
        return [item for item in items if isinstance(item, str)][: self.limit]

    def _persist(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._items), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save history to %s (keeping in memory): %s", self.path, exc)

    def append(self, image: str) -> None:
        self._items = [image, *self._items][: self.limit]
        self._persist()

    def list(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items = []
        if self.path is None:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to remove history file %s: %s", self.path, exc)

    def __len__(self) -> int:
        return len(self._items)
