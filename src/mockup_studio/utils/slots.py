"""
슬롯 기반 결과 무효화

이미지 슬롯(스타일 레퍼런스, 제품 바이브, 레이아웃 등)마다 단조 증가하는
요청 세대(generation) 카운터를 둡니다. 결과는 완료 시점의 세대 번호가
슬롯의 현재 세대와 같을 때만 적용됩니다. 교체된 이미지의 늦은 결과는 버립니다.
"""
from __future__ import annotations

import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisSlot(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self.generation = 0
        self.value: T | None = None
        self.pending = False

    def begin(self) -> int:
        """새 요청을 시작합니다. 이전 결과와 진행 중인 요청은 무효화됩니다."""
        self.generation += 1
        self.value = None
        self.pending = True
        return self.generation

    def is_current(self, ticket: int) -> bool:
        return ticket == self.generation

    def resolve(self, ticket: int, value: T) -> bool:
        if not self.is_current(ticket):
            logger.info(
                "Discarding stale %s result (ticket=%d, current=%d)",
                self.name,
                ticket,
                self.generation,
            )
            return False
        self.value = value
        self.pending = False
        return True

    def fail(self, ticket: int) -> bool:
        """요청 실패를 기록합니다. 현재 요청일 때만 True (오류 표시 여부 판단용)."""
        if not self.is_current(ticket):
            return False
        self.pending = False
        return True

    def clear(self) -> None:
        self.generation += 1
        self.value = None
        self.pending = False

    @property
    def ready(self) -> bool:
        return self.value is not None

    def __repr__(self) -> str:
        return (
            f"AnalysisSlot({self.name!r}, generation={self.generation}, "
            f"ready={self.ready}, pending={self.pending})"
        )
