"""
Text Overlay 파이프라인

네 개의 이름 있는 산출물로 이루어진 의존성 그래프입니다.

  layout  ← style_image                       (Stage 1, 레이아웃 분석)
  info    ← product_image                     (Stage 2, 제품 정보 추출)
  content ← layout + info                     (Stage 3, 텍스트 생성)
  render  ← product_image + layout + content  (Stage 4, 합성 렌더)

수동 단계 실행과 "전체 실행"이 같은 run_stage 루틴을 공유합니다.
입력 이미지가 바뀌면 그 이미지에 의존하는 산출물을 하위까지 모두 무효화하고,
진행 중이던 요청의 결과는 도착하더라도 버립니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mockup_studio.agents.layout_analyzer import analyze_text_layout
from mockup_studio.agents.overlay_renderer import render_text_overlay
from mockup_studio.agents.product_info import extract_product_info
from mockup_studio.agents.text_content import generate_text_content
from mockup_studio.config import get_settings
from mockup_studio.errors import PipelineStageError
from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import (
    GeneratedTextContentSchema,
    OverlayRender,
    ProductInfoSchema,
    TextLayoutSchema,
)
from mockup_studio.utils.slots import AnalysisSlot

logger = logging.getLogger(__name__)

STYLE_IMAGE = "style_image"
PRODUCT_IMAGE = "product_image"


class PipelineState(str, Enum):
    IDLE = "idle"
    LAYOUT_READY = "layout_ready"
    INFO_READY = "info_ready"
    CONTENT_READY = "content_ready"
    RENDERED = "rendered"


@dataclass(frozen=True)
class Stage:
    name: str
    requires: tuple[str, ...]
    description: str


STAGES: tuple[Stage, ...] = (
    Stage("layout", (STYLE_IMAGE,), "analyze layout"),
    Stage("info", (PRODUCT_IMAGE,), "extract product info"),
    Stage("content", ("layout", "info"), "generate text content"),
    Stage("render", (PRODUCT_IMAGE, "layout", "content"), "render overlay"),
)
STAGE_BY_NAME = {stage.name: stage for stage in STAGES}


class TextOverlayPipeline:
    def __init__(
        self,
        language: str | None = None,
        add_vibe_elements: bool = False,
        match_style_background: bool = False,
    ) -> None:
        self.language = language or get_settings().default_language
        self.add_vibe_elements = add_vibe_elements
        self.match_style_background = match_style_background
        self._inputs: dict[str, EncodedImage | None] = {STYLE_IMAGE: None, PRODUCT_IMAGE: None}
        self._slots: dict[str, AnalysisSlot[Any]] = {
            stage.name: AnalysisSlot(stage.name) for stage in STAGES
        }

    # ── 입력 ──────────────────────────────────────────────────────────────
    @property
    def style_image(self) -> EncodedImage | None:
        return self._inputs[STYLE_IMAGE]

    @property
    def product_image(self) -> EncodedImage | None:
        return self._inputs[PRODUCT_IMAGE]

    def set_style_image(self, image: EncodedImage | None) -> None:
        self._set_input(STYLE_IMAGE, image)

    def set_product_image(self, image: EncodedImage | None) -> None:
        self._set_input(PRODUCT_IMAGE, image)

    def set_language(self, language: str) -> None:
        if language != self.language:
            self.language = language
            self._slots["render"].clear()

    def _set_input(self, name: str, image: EncodedImage | None) -> None:
        if image == self._inputs[name]:
            return
        self._inputs[name] = image
        self._invalidate_dependents(name)

    def _invalidate_dependents(self, name: str) -> None:
        for stage in STAGES:
            if name in stage.requires:
                self._slots[stage.name].clear()
                self._invalidate_dependents(stage.name)

    # ── 산출물 ────────────────────────────────────────────────────────────
    @property
    def layout(self) -> TextLayoutSchema | None:
        return self._slots["layout"].value

    @property
    def product_info(self) -> ProductInfoSchema | None:
        return self._slots["info"].value

    @property
    def content(self) -> GeneratedTextContentSchema | None:
        return self._slots["content"].value

    @property
    def render(self) -> OverlayRender | None:
        return self._slots["render"].value

    def _available(self, name: str) -> bool:
        if name in self._inputs:
            return self._inputs[name] is not None
        return self._slots[name].ready

    def missing_requirements(self, stage_name: str) -> list[str]:
        return [req for req in STAGE_BY_NAME[stage_name].requires if not self._available(req)]

    def is_running(self, stage_name: str) -> bool:
        return self._slots[stage_name].pending

    def ready_stages(self) -> list[str]:
        """선행 조건이 모두 갖춰졌고 실행 중이 아닌 단계."""
        return [
            stage.name
            for stage in STAGES
            if not self.missing_requirements(stage.name) and not self.is_running(stage.name)
        ]

    @property
    def state(self) -> PipelineState:
        # layout과 info가 모두 있으면 INFO_READY (전체 실행 순서상 info가 나중)
        if self.render is not None:
            return PipelineState.RENDERED
        if self.content is not None:
            return PipelineState.CONTENT_READY
        if self.product_info is not None:
            return PipelineState.INFO_READY
        if self.layout is not None:
            return PipelineState.LAYOUT_READY
        return PipelineState.IDLE

    # ── 실행 ──────────────────────────────────────────────────────────────
    async def _execute(self, stage_name: str) -> Any:
        if stage_name == "layout":
            return await analyze_text_layout(self.style_image)
        if stage_name == "info":
            return await extract_product_info(self.product_image)
        if stage_name == "content":
            return await generate_text_content(self.product_info, self.layout, self.language)
        if stage_name == "render":
            return await render_text_overlay(
                self.product_image,
                self.layout,
                self.content,
                self.language,
                self.add_vibe_elements,
                self.match_style_background,
            )
        raise PipelineStageError(f"Unknown pipeline stage: {stage_name}")

    async def run_stage(self, stage_name: str) -> Any:
        """단계 하나를 실행합니다.

        선행 산출물이 없으면 PipelineStageError. 실행 도중 입력이 바뀌어 결과가
        낡았으면 결과를 버리고 None을 반환합니다. 실패 시 예외를 그대로 전파하며
        이미 확보된 다른 산출물은 유지됩니다.
        """
        if stage_name not in STAGE_BY_NAME:
            raise PipelineStageError(f"Unknown pipeline stage: {stage_name}")
        missing = self.missing_requirements(stage_name)
        if missing:
            raise PipelineStageError(
                f"Cannot {STAGE_BY_NAME[stage_name].description} before "
                f"{', '.join(missing)} is available"
            )

        # 재실행은 이 단계에 의존하는 하위 산출물을 무효화
        self._invalidate_dependents(stage_name)
        slot = self._slots[stage_name]
        ticket = slot.begin()
        logger.info("Overlay stage %s started (ticket=%d)", stage_name, ticket)
        try:
            result = await self._execute(stage_name)
        except Exception:
            slot.fail(ticket)
            raise
        if not slot.resolve(ticket, result):
            return None
        logger.info("Overlay stage %s completed → %s", stage_name, self.state.value)
        return result

    async def run_all(self, force: bool = False) -> OverlayRender | None:
        """layout → info → content → render 순서로 끝까지 실행합니다.

        첫 실패에서 중단하며, 파이프라인은 마지막으로 성공한 상태에 머뭅니다.
        force=False면 이미 있는 유효한 layout/info/content는 재사용합니다.
        """
        if self.product_image is None:
            raise PipelineStageError("A product image is required to run all overlay steps")
        if self.style_image is None:
            raise PipelineStageError("A text overlay style reference image is required")

        for stage in STAGES:
            if not force and stage.name != "render" and self._slots[stage.name].ready:
                logger.info("Overlay stage %s reused", stage.name)
                continue
            if await self.run_stage(stage.name) is None:
                logger.info("Overlay run stopped: %s result was superseded", stage.name)
                return None
        return self.render
