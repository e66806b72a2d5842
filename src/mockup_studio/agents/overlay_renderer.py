"""Text Overlay 4단계: 텍스트 합성 렌더

대상 언어 콘텐츠가 있는 블록만 렌더 지시문에 포함합니다. 콘텐츠가 없는 블록은
레이아웃 JSON에서도 빠지므로 모델이 빈 텍스트 상자를 그릴 여지가 없습니다.
두 토글(add_vibe_elements, match_style_background)은 켜졌을 때만 지시문 블록을 추가합니다.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from mockup_studio.agents.text_content import LANGUAGE_NAMES
from mockup_studio.config import get_settings
from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import (
    GeneratedTextContentSchema,
    OverlayRender,
    TextLayoutSchema,
)
from mockup_studio.utils.executor import request_image

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = (
    Path(__file__).parent.parent / "utils/prompt_templates/overlay_render.txt"
)

VIBE_ELEMENTS_INSTRUCTION = (
    "- **Vibe Elements Handling:** If the style reference includes decorative items "
    "(e.g., flowers, fruits, aloe leaves, herbs), add 1-2 matching, subtle, and realistic "
    "elements. Place them harmonically near the product, but NEVER block the product's label "
    "or overpower the composition. If the style reference has no such elements, add none."
)
MATCH_BACKGROUND_INSTRUCTION = (
    "- **Match Style Background:** Adopt the color palette or a soft background tone from the "
    "style reference. You MUST NOT replace or regenerate the background fully. Preserve the "
    "existing background structure, shadows, and product realism, only subtly blending the "
    "style reference's background aesthetic."
)


def compose_render_prompt(
    layout: TextLayoutSchema,
    content: GeneratedTextContentSchema,
    language: str,
    add_vibe_elements: bool = False,
    match_style_background: bool = False,
) -> tuple[str, list[str]]:
    """렌더 지시문과 실제로 그릴 블록 id 목록을 반환합니다."""
    drawn = content.renderable_blocks(language)
    drawn_ids = [block.id for block in drawn]

    layout_payload = {
        "font_hint": layout.font_hint,
        "color_palette": layout.color_palette,
        "blocks": [
            block.model_dump(mode="json") for block in layout.blocks if block.id in drawn_ids
        ],
    }
    content_payload = {
        "blocks": [
            {
                "id": block.id,
                "role": block.role,
                ("items" if block.is_list else "text") + f"_{language}": block.content_for(language),
            }
            for block in drawn
        ]
    }

    optional = []
    if add_vibe_elements:
        optional.append(VIBE_ELEMENTS_INSTRUCTION)
    if match_style_background:
        optional.append(MATCH_BACKGROUND_INSTRUCTION)

    template = _TEMPLATE_PATH.read_text(encoding="utf-8")
    prompt = template.format(
        language=language,
        language_name=LANGUAGE_NAMES.get(language, language),
        layout_json=json.dumps(layout_payload, ensure_ascii=False),
        content_json=json.dumps(content_payload, ensure_ascii=False),
        optional_instructions="".join(f"{line}\n" for line in optional),
    )
    return prompt, drawn_ids


async def render_text_overlay(
    product_image: EncodedImage,
    layout: TextLayoutSchema,
    content: GeneratedTextContentSchema,
    language: str | None = None,
    add_vibe_elements: bool = False,
    match_style_background: bool = False,
) -> OverlayRender:
    """Stage 4: 제품 이미지 위에 생성된 텍스트를 레이아웃대로 합성합니다.

    Returns:
        OverlayRender: 결과 이미지와 그려진 블록 id 목록
    """
    language = language or get_settings().default_language
    prompt, drawn_ids = compose_render_prompt(
        layout, content, language, add_vibe_elements, match_style_background
    )
    skipped = [b.id for b in content.blocks if b.id not in drawn_ids]
    logger.info("Rendering overlay (%s): drawn=%s, skipped=%s", language, drawn_ids, skipped)

    image = await request_image(prompt, [product_image])
    return OverlayRender(image=image, language=language, drawn_block_ids=drawn_ids)
