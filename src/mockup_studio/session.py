"""
목업 스튜디오 세션 (오케스트레이터 경계)

사용자 1명의 작업 상태를 보관하고, 모든 공개 코루틴에서 ConfigurationError를
제외한 MockupStudioError를 잡아 `"Failed to <작업>: <상세>"` 메시지로 바꿉니다.
ConfigurationError는 호출 전에 즉시 실패해야 하므로 그대로 전파합니다.

이미지 슬롯(스타일 레퍼런스, 제품 바이브)은 AnalysisSlot으로 관리합니다.
같은 슬롯에 새 이미지가 들어오면 이전 요청의 결과는 도착하더라도 버립니다.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from mockup_studio.agents.extractor import (
    analyze_product_vibe,
    analyze_style_reference,
    extract_label_text,
)
from mockup_studio.agents.generator import generate_mockup
from mockup_studio.agents.modifier import modify_image
from mockup_studio.config import get_settings
from mockup_studio.errors import ConfigurationError, MockupStudioError
from mockup_studio.models.generation import GenerationSettings, MockupResult, ShotOptions
from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import OverlayRender
from mockup_studio.pipeline import TextOverlayPipeline
from mockup_studio.utils.history import HistoryStore
from mockup_studio.utils.slots import AnalysisSlot

logger = logging.getLogger(__name__)


def _reraise_unexpected(outcome: Any) -> None:
    """gather(return_exceptions=True) 결과 중 경계에서 처리하지 않는 예외를 다시 던집니다."""
    if isinstance(outcome, ConfigurationError):
        raise outcome
    if isinstance(outcome, BaseException) and not isinstance(outcome, MockupStudioError):
        raise outcome


class MockupSession:
    def __init__(self, history: HistoryStore | None = None) -> None:
        if history is None:
            settings = get_settings()
            history = HistoryStore(settings.history_path, settings.history_limit)
        self.history = history

        # 입력
        self.product_image: EncodedImage | None = None
        self.style_reference_image: EncodedImage | None = None
        self.use_style_reference = False
        self.match_product_vibe = False
        self.options = ShotOptions()

        # 이미지 슬롯별 분석 결과 (프롬프트에 들어갈 텍스트)
        self.style_slot: AnalysisSlot[str] = AnalysisSlot("style reference")
        self.vibe_slot: AnalysisSlot[str] = AnalysisSlot("product vibe")

        # 출력
        self.generated_image: EncodedImage | None = None
        self.extracted_text: str | None = None
        self.final_prompt: str | None = None
        self.settings_summary: str | None = None
        self.error: str | None = None
        self._mockup: AnalysisSlot[MockupResult] = AnalysisSlot("mockup")

        # 텍스트 오버레이
        self.overlay = TextOverlayPipeline()
        self.overlay_product_image: EncodedImage | None = None

    # ── 공통 ──────────────────────────────────────────────────────────────
    def _report(self, operation: str, detail: object) -> None:
        self.error = f"Failed to {operation}: {detail}"
        logger.error(self.error)

    @property
    def style_reference_prompt(self) -> str | None:
        return self.style_slot.value

    @property
    def product_vibe(self) -> str | None:
        return self.vibe_slot.value

    @property
    def is_analyzing_style(self) -> bool:
        return self.style_slot.pending

    @property
    def is_analyzing_vibe(self) -> bool:
        return self.vibe_slot.pending

    def update_options(self, **changes: Any) -> ShotOptions:
        """촬영 파라미터를 바꿉니다. 선택지 밖의 값은 ValidationError."""
        self.options = ShotOptions.model_validate({**self.options.model_dump(), **changes})
        return self.options

    async def _analyze(
        self,
        slot: AnalysisSlot[str],
        operation: str,
        analyzer: Callable[[EncodedImage], Awaitable[Any]],
        image: EncodedImage,
        to_text: Callable[[Any], str],
    ) -> str | None:
        ticket = slot.begin()
        logger.info("Analyzing %s (ticket=%d)", slot.name, ticket)
        try:
            result = await analyzer(image)
        except ConfigurationError:
            slot.fail(ticket)
            raise
        except MockupStudioError as exc:
            # 교체된 이미지의 실패는 표시하지 않음
            if slot.fail(ticket):
                self._report(operation, exc)
            return None
        text = to_text(result)
        if not slot.resolve(ticket, text):
            return None
        return text

    # ── 이미지 슬롯 ───────────────────────────────────────────────────────
    async def set_product_image(self, image: EncodedImage | None) -> None:
        """제품 이미지를 교체합니다. 이전 목업 출력은 지우고 제품 바이브를 다시 분석합니다."""
        self.product_image = image
        self._clear_outputs()
        if image is None:
            self.vibe_slot.clear()
            return
        await self._analyze(
            self.vibe_slot,
            "analyze product vibe",
            analyze_product_vibe,
            image,
            lambda vibe: vibe.keywords,
        )

    async def set_style_reference_image(self, image: EncodedImage | None) -> None:
        self.style_reference_image = image
        if image is None:
            self.style_slot.clear()
            return
        await self._analyze(
            self.style_slot,
            "analyze style reference",
            analyze_style_reference,
            image,
            lambda analysis: analysis.to_prompt(),
        )

    def _clear_outputs(self) -> None:
        self._mockup.clear()
        self._reset_outputs()

    def _reset_outputs(self) -> None:
        self.generated_image = None
        self.extracted_text = None
        self.final_prompt = None
        self.settings_summary = None
        self.error = None
        self._sync_overlay_product()

    # ── 목업 생성 / 수정 ─────────────────────────────────────────────────
    def build_settings(self) -> GenerationSettings:
        """현재 세션 상태로 GenerationSettings를 만듭니다.

        스타일 레퍼런스를 쓰지 않으면 바이브 매칭은 비활성값으로 강제합니다.
        이미 분석된 바이브 키워드는 세션에 남아 다시 켜면 그대로 쓰입니다.
        """
        if self.product_image is None:
            raise ValueError("A product image is required")
        use_style = self.use_style_reference and self.style_reference_image is not None
        return GenerationSettings(
            **self.options.model_dump(),
            product_image=self.product_image,
            style_reference_image=self.style_reference_image if use_style else None,
            style_reference_prompt=self.style_slot.value if use_style else None,
            match_product_vibe=use_style and self.match_product_vibe,
            product_vibe_prompt=self.vibe_slot.value if use_style else None,
        )

    async def generate(self) -> MockupResult | None:
        """라벨 텍스트 추출과 목업 생성을 병렬로 실행합니다.

        라벨 추출 실패는 생성을 막지 않으며, 생성이 성공한 뒤에 보고합니다.
        생성 실패 시 이미 얻은 라벨 텍스트는 유지합니다.
        """
        if self.product_image is None:
            self._report("generate", "a product image is required")
            return None
        settings = self.build_settings()
        ticket = self._mockup.begin()
        # 이전 목업은 새 생성이 시작되면 화면에서 내림
        self._reset_outputs()

        label, result = await asyncio.gather(
            extract_label_text(settings.product_image),
            generate_mockup(settings),
            return_exceptions=True,
        )
        if not self._mockup.is_current(ticket):
            logger.info("Discarding stale mockup result (ticket=%d)", ticket)
            return None
        _reraise_unexpected(label)
        _reraise_unexpected(result)

        if isinstance(label, MockupStudioError):
            logger.warning("Label text extraction failed: %s", label)
        else:
            self.extracted_text = label.extracted_text

        if isinstance(result, MockupStudioError):
            self._mockup.fail(ticket)
            self._report("generate", result)
            return None

        self._mockup.resolve(ticket, result)
        self.generated_image = result.image
        self.final_prompt = result.prompt_used
        self.settings_summary = result.settings_summary
        self.history.append(result.image.to_data_url())
        self._sync_overlay_product()
        if isinstance(label, MockupStudioError):
            self._report("extract label text", label)
        return result

    async def modify(
        self, instruction: str, base_image: EncodedImage | None = None
    ) -> EncodedImage | None:
        """현재 이미지(또는 base_image)를 수정합니다. 실패하면 현재 이미지를 그대로 둡니다."""
        base = base_image or self.generated_image
        if base is None:
            self._report("modify image", "there is no image to modify")
            return None
        if not instruction.strip():
            self._report("modify image", "the modification instruction is empty")
            return None
        try:
            image = await modify_image(base, instruction)
        except ConfigurationError:
            raise
        except MockupStudioError as exc:
            self._report("modify image", exc)
            return None

        self.generated_image = image
        self.error = None
        self.history.append(image.to_data_url())
        self._sync_overlay_product()
        return image

    # ── 텍스트 오버레이 ──────────────────────────────────────────────────
    def _sync_overlay_product(self) -> None:
        # 명시적으로 지정한 오버레이 제품 이미지가 최근 목업보다 우선
        self.overlay.set_product_image(self.overlay_product_image or self.generated_image)

    def set_overlay_product_image(self, image: EncodedImage | None) -> None:
        self.overlay_product_image = image
        self._sync_overlay_product()

    async def set_overlay_style_image(self, image: EncodedImage | None) -> None:
        """레이아웃 스타일 이미지를 교체하고 바로 레이아웃을 분석합니다."""
        self.overlay.set_style_image(image)
        if image is not None:
            await self.analyze_overlay_layout()

    async def _run_overlay_stage(self, stage: str, operation: str) -> Any:
        try:
            return await self.overlay.run_stage(stage)
        except ConfigurationError:
            raise
        except MockupStudioError as exc:
            self._report(operation, exc)
            return None

    async def analyze_overlay_layout(self):
        return await self._run_overlay_stage("layout", "analyze layout")

    async def extract_product_info(self):
        return await self._run_overlay_stage("info", "extract product info")

    async def generate_text_content(self):
        return await self._run_overlay_stage("content", "generate text content")

    async def render_overlay(self) -> OverlayRender | None:
        return await self._run_overlay_stage("render", "render overlay")

    async def run_overlay_all(self, force: bool = False) -> OverlayRender | None:
        """텍스트 오버레이 4단계를 끝까지 실행합니다. 첫 실패에서 멈춥니다."""
        try:
            render = await self.overlay.run_all(force=force)
        except ConfigurationError:
            raise
        except MockupStudioError as exc:
            self._report("complete overlay generation", exc)
            return None
        if render is not None:
            self.error = None
        return render
