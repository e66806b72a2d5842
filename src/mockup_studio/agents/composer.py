"""목업 / 수정 프롬프트 컴포저

프롬프트는 (조건, 렌더 함수) 쌍의 고정 순서 목록을 평가해 이어 붙입니다.
조건이 거짓인 블록은 출력에 흔적을 남기지 않습니다.

순서:
  1) 제품 보존·새 장면 생성 규칙   (항상)
  2) 네거티브 제약                 (항상)
  3) 종횡비                        (항상)
  4) 장면 설명                     (항상, 반사·투명 배경 절은 조건부)
  5) 스타일 레퍼런스               (스타일 이미지 + 분석 텍스트가 모두 있을 때)
  6) 제품 바이브 병합              (바이브 매칭 ON + 바이브 문구가 있을 때)
"""
from __future__ import annotations

from collections.abc import Callable

from mockup_studio.models.generation import GenerationSettings
from mockup_studio.options import NO_REFLECTION

Predicate = Callable[[GenerationSettings], bool]
Renderer = Callable[[GenerationSettings], str]

PREAMBLE = (
    "You are an expert AI Product Mockup Generator. "
    "Your job is to generate a clean, photorealistic product mockup."
)
CLOSING = "Generate the final image based on all these instructions."

RULES_HEADER = "**-- CRITICAL RULES (MUST be followed) --**"
SCENE_HEADER = "**-- SCENE DESCRIPTION --**"
STYLE_HEADER = "**-- STYLE REFERENCE --**"
VIBE_HEADER = "**-- PRODUCT VIBE (Merge with Style Reference) --**"

MODIFICATION_PRESERVE_CLAUSE = (
    "Important: Preserve the core product and any text labels on it exactly as they "
    "are in the original image. Only modify the background or add elements as requested."
)


def _preservation_rules(settings: GenerationSettings) -> str:
    return "\n".join(
        [
            RULES_HEADER,
            "1.  **PRESERVE THE ORIGINAL PRODUCT:** Isolate the product from the user-provided "
            "product image. The product's label, text, colors, geometry, cap, and logos MUST "
            "remain UNCHANGED. Do NOT alter, repaint, relabel, rewrite, or regenerate anything "
            "inside the product mask. The original product image must be the *only* product "
            "appearing in the final shot.",
            "2.  **CREATE A NEW SCENE:** Place the preserved original product into a new, "
            "photorealistic scene based *only* on the Scene Description below. The product from "
            "the style reference image (if provided) MUST NOT appear in the final image. The "
            "scene should adopt the *style* of the reference, not its specific product content.",
        ]
    )


def _negative_constraints(settings: GenerationSettings) -> str:
    return (
        "3.  **NEGATIVE PROMPT (Apply ALWAYS):** Do not alter or repaint any text or logos on "
        "the product. Do not distort the product. Do not generate multiple products, floating "
        "labels, warped geometry, artificial halos, noise, exaggerated glow, stickers, glitter, "
        "or hands. No extra objects or props, unless explicitly requested in scene description."
    )


def _aspect_ratio(settings: GenerationSettings) -> str:
    return (
        f"4.  **ASPECT RATIO:** The final image must have a {settings.aspect_ratio} aspect ratio."
    )


def reflection_clause(settings: GenerationSettings) -> str:
    if settings.reflection == NO_REFLECTION:
        return ""
    return f" The surface has {settings.reflection.lower()}."


def _scene_lines(settings: GenerationSettings) -> list[str]:
    lines = [
        f"- **Camera & Composition:** An image captured from a {settings.camera_angle} with a "
        f"{settings.lens} lens at {settings.depth_of_field}. The product is framed using a "
        f"{settings.composition} composition.",
        f"- **Lighting & Mood:** The scene uses {settings.lighting_type} with light coming from "
        f"the {settings.lighting_direction}. The shadows are {settings.shadow.lower()}."
        f"{reflection_clause(settings)} The color style is {settings.color_style.lower()}.",
        f"- **Environment:** The product is placed on a {settings.surface.lower()} surface "
        f"with a {settings.background.lower()} background.",
    ]
    if settings.output_png:
        lines.append(
            "- **Output Format:** The output should have a transparent background (PNG)."
        )
    return lines


def _scene_description(settings: GenerationSettings) -> str:
    return "\n".join([SCENE_HEADER, *_scene_lines(settings)])


def _has_style_reference(settings: GenerationSettings) -> bool:
    return bool(settings.style_reference_image and settings.style_reference_prompt)


def _style_reference(settings: GenerationSettings) -> str:
    return "\n".join(
        [
            STYLE_HEADER,
            "A style reference image has been provided. You MUST adopt its lighting, "
            "composition, photographic angle, color palette, and overall mood. However, do NOT "
            "copy or recreate any text, graphics, logos, or product shapes from the style "
            "reference. Only copy the vibe. The reference is described as:",
            settings.style_reference_prompt or "",
        ]
    )


def _has_product_vibe(settings: GenerationSettings) -> bool:
    return bool(settings.match_product_vibe and settings.product_vibe_prompt)


def _product_vibe(settings: GenerationSettings) -> str:
    return "\n".join(
        [
            VIBE_HEADER,
            "The original product has a vibe that can be described as: "
            f'"{settings.product_vibe_prompt}".',
            "The generated scene MUST match and complement this vibe. Do NOT make the scene "
            "contradict the product's natural essence. For example, if the product is 'aloe', "
            "ensure the scene suggests 'fresh, nature, green'. This vibe should intelligently "
            "merge with the style reference without contradicting it.",
        ]
    )


def _always(settings: GenerationSettings) -> bool:
    return True


MOCKUP_BLOCKS: list[tuple[str, Predicate, Renderer]] = [
    ("preservation_rules", _always, _preservation_rules),
    ("negative_constraints", _always, _negative_constraints),
    ("aspect_ratio", _always, _aspect_ratio),
    ("scene_description", _always, _scene_description),
    ("style_reference", _has_style_reference, _style_reference),
    ("product_vibe", _has_product_vibe, _product_vibe),
]


def active_blocks(settings: GenerationSettings) -> list[str]:
    """설정값에 대해 포함되는 블록 이름을 순서대로 반환합니다."""
    return [name for name, applies, _ in MOCKUP_BLOCKS if applies(settings)]


def compose_mockup_prompt(settings: GenerationSettings) -> str:
    body = [render(settings) for _, applies, render in MOCKUP_BLOCKS if applies(settings)]
    # 규칙 1-4는 하나의 번호 목록, 장면 설명부터는 빈 줄로 구분
    rules = "\n".join(body[:3])
    sections = [PREAMBLE, rules, *body[3:], CLOSING]
    return "\n\n".join(sections)


def compose_modification_prompt(instruction: str) -> str:
    """사용자 지시문 뒤에 제품 보존 절을 항상 덧붙입니다."""
    return f"{instruction.strip().rstrip('.')}. {MODIFICATION_PRESERVE_CLAUSE}"
