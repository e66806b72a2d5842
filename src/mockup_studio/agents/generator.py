from __future__ import annotations

import logging

from mockup_studio.agents.composer import compose_mockup_prompt
from mockup_studio.models.generation import GenerationSettings, MockupResult
from mockup_studio.options import canvas_size_for
from mockup_studio.utils.executor import request_image

logger = logging.getLogger(__name__)


async def generate_mockup(settings: GenerationSettings) -> MockupResult:
    """목업 촬영 이미지를 생성합니다.

    이미지 파트 순서: 제품 이미지 → (스타일 레퍼런스 사용 시) 스타일 이미지.
    라벨 텍스트 추출은 여기서 하지 않습니다: 같은 제품 이미지에서 파생되는
    독립 호출이므로 세션이 병렬로 실행합니다.

    Returns:
        MockupResult: 생성 이미지, 사용된 프롬프트, 이미지 제외 설정값 JSON 요약
    """
    prompt = compose_mockup_prompt(settings)
    images = [settings.product_image]
    if settings.style_reference_image is not None:
        images.append(settings.style_reference_image)

    logger.info(
        "Generating mockup: %s, %s, style_reference=%s, vibe=%s",
        settings.aspect_ratio,
        settings.camera_angle,
        settings.style_reference_image is not None,
        settings.match_product_vibe,
    )
    image = await request_image(
        prompt, images, size=canvas_size_for(settings.aspect_ratio)
    )
    return MockupResult(
        image=image,
        prompt_used=prompt,
        settings_summary=settings.summary_json(),
    )
