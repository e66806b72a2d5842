"""Text Overlay 1단계: 스타일 레퍼런스 레이아웃 분석기

스타일 레퍼런스 이미지를 Vision 모델로 분석해 텍스트 블록의 위치·정렬·크기·굵기와
글꼴 힌트, 색상 팔레트를 추출합니다. 레퍼런스에 보이는 글자는 자리표시자일 뿐이며
출력으로 복사하지 않도록 지시합니다.
"""
from __future__ import annotations

import logging
from pathlib import Path

from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import TextLayoutSchema
from mockup_studio.utils.executor import request_json

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = (
    Path(__file__).parent.parent / "utils/prompt_templates/layout_analyzer.txt"
)


async def analyze_text_layout(style_image: EncodedImage) -> TextLayoutSchema:
    """Stage 1: 스타일 레퍼런스 → TextLayoutSchema.

    Args:
        style_image: 텍스트 배치를 참고할 광고/패키지 레퍼런스 이미지

    Returns:
        TextLayoutSchema: font_hint, color_palette, blocks (id 고유, 좌표 0~1)
    """
    instruction = _TEMPLATE_PATH.read_text(encoding="utf-8")
    layout = await request_json(TextLayoutSchema, instruction, [style_image])

    logger.info(
        "Layout analysis: font_hint=%s, blocks=%s",
        layout.font_hint,
        [f"{b.id}:{b.role}" for b in layout.blocks],
    )
    return layout
