"""Text Overlay 3단계: 오버레이 텍스트 생성

제품 정보(무엇을 쓸지) + 레이아웃(어디에 쓸지) → 블록별 다국어 콘텐츠.

모델 응답은 프롬프트 규칙과 별개로 결정적 후처리를 거칩니다:
  1) 레이아웃 id 기준 재배치: 레이아웃에 없는 블록 제거, 좌표·정렬은 레이아웃 값 사용
  2) 보충제 전용 문구 제거: 제품 유형이 보충제가 아니면 mg 용량·캡슐·흡수율 등 삭제
  3) 반복 제거: 같은 사실이 두 번째 전면 블록에 다시 나오면 삭제 (background_headline 제외)
빈 콘텐츠는 None으로 남아 렌더 단계에서 그려지지 않습니다.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from pathlib import Path

from mockup_studio.config import get_settings
from mockup_studio.models.text_overlay import (
    GeneratedTextBlock,
    GeneratedTextContentSchema,
    ProductInfoSchema,
    TextLayoutSchema,
)
from mockup_studio.utils.executor import dump_for_prompt, request_json

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = (
    Path(__file__).parent.parent / "utils/prompt_templates/text_content.txt"
)

LANGUAGE_NAMES = {
    "sq": "Albanian (shqip)",
    "en": "English",
}

# 반복 제거 대상에서 빠지는 역할 (제품명을 배경에 크게 반복하는 디자인 허용)
_REPEAT_EXEMPT_ROLES = frozenset({"background_headline"})

_SUPPLEMENT_TYPE = re.compile(
    r"supplement|suplement|vitamin|capsul|kapsul|tablet|mineral", re.IGNORECASE
)
_SUPPLEMENT_WORDING = re.compile(
    r"\b\d+(?:[.,]\d+)?\s?(?:mg|mcg|µg|iu)\b"
    r"|\bx\s?\d+\b"
    r"|\bcapsul\w*|\bkapsul\w*|\btablet\w*"
    r"|\bdos(?:e|es|age|azh\w*)\b|\bdoz[aëei]\w*"
    r"|\babsor\w*|\b(?:për)?thithj\w*"
    r"|\bbio-?availab\w*|\bbiodisponib\w*",
    re.IGNORECASE,
)


def _normalize(text: str) -> str:
    text = re.sub(r"[\W_]+", " ", text.casefold()).strip()
    # "500 ml"과 "500ml"은 같은 값
    return re.sub(r"(\d) (?=[^\W\d_])", r"\1", text)


def secondary_language(language: str) -> str:
    return "en" if language != "en" else "sq"


def is_supplement_type(product_type: str | None) -> bool:
    return bool(product_type and _SUPPLEMENT_TYPE.search(product_type))


def _label_facts(info: ProductInfoSchema) -> list[str]:
    facts = [*info.visible_claims, info.volume, info.brand, info.product_name]
    return [_normalize(f) for f in facts if f]


def _is_supplement_wording(text: str, label_facts: list[str]) -> bool:
    # 라벨에 실제로 적힌 표현은 보충제 문구여도 유지
    for match in _SUPPLEMENT_WORDING.finditer(text):
        token = _normalize(match.group(0))
        if not any(token in fact for fact in label_facts):
            return True
    return False


class _FactLedger:
    """언어별로 이미 출력된 사실을 기록합니다."""

    def __init__(self, volume: str | None) -> None:
        self.volume = _normalize(volume) if volume else ""
        self.seen: set[str] = set()
        self.volume_used = False

    def admit(self, text: str) -> bool:
        key = _normalize(text)
        if not key or key in self.seen:
            return False
        mentions_volume = bool(self.volume) and self.volume in key
        if mentions_volume and self.volume_used:
            return False
        self.seen.add(key)
        self.volume_used = self.volume_used or mentions_volume
        return True


def _language_of(field_name: str) -> str:
    return field_name.split("_", 1)[1]


def _localized_content(block: GeneratedTextBlock | None) -> dict:
    if block is None:
        return {}
    return {name: getattr(block, name) for name in block.localized_fields()}


def _strip_supplement_wording(content: dict, label_facts: list[str]) -> dict:
    cleaned = {}
    for name, value in content.items():
        if isinstance(value, str):
            cleaned[name] = None if _is_supplement_wording(value, label_facts) else value
        elif isinstance(value, list):
            cleaned[name] = [v for v in value if not _is_supplement_wording(v, label_facts)]
        else:
            cleaned[name] = value
    return cleaned


def _drop_repeated_facts(content: dict, ledgers: dict[str, _FactLedger]) -> dict:
    cleaned = {}
    for name, value in content.items():
        ledger = ledgers[_language_of(name)]
        if isinstance(value, str):
            cleaned[name] = value if ledger.admit(value) else None
        elif isinstance(value, list):
            cleaned[name] = [v for v in value if ledger.admit(v)]
        else:
            cleaned[name] = value
    return cleaned


def finalize_text_content(
    generated: GeneratedTextContentSchema,
    layout: TextLayoutSchema,
    product_info: ProductInfoSchema,
) -> GeneratedTextContentSchema:
    """모델이 생성한 콘텐츠를 레이아웃에 고정하고 관련성·반복 규칙을 적용합니다."""
    by_id = {block.id: block for block in generated.blocks}
    unknown = [block_id for block_id in by_id if layout.block(block_id) is None]
    if unknown:
        logger.warning("Dropping generated blocks not present in layout: %s", unknown)

    strip_supplements = not is_supplement_type(product_info.product_type)
    label_facts = _label_facts(product_info)
    ledgers: dict[str, _FactLedger] = defaultdict(lambda: _FactLedger(product_info.volume))

    blocks: list[GeneratedTextBlock] = []
    for layout_block in layout.blocks:
        content = _localized_content(by_id.get(layout_block.id))
        if strip_supplements:
            content = _strip_supplement_wording(content, label_facts)
        if layout_block.role not in _REPEAT_EXEMPT_ROLES:
            content = _drop_repeated_facts(content, ledgers)
        blocks.append(
            GeneratedTextBlock.model_validate({**layout_block.model_dump(), **content})
        )

    return GeneratedTextContentSchema(
        font_hint=layout.font_hint,
        color_palette=list(layout.color_palette),
        blocks=blocks,
    )


async def generate_text_content(
    product_info: ProductInfoSchema,
    layout: TextLayoutSchema,
    language: str | None = None,
) -> GeneratedTextContentSchema:
    """Stage 3: ProductInfoSchema + TextLayoutSchema → GeneratedTextContentSchema.

    language가 없으면 설정의 기본 언어(sq)를 사용합니다.
    """
    language = language or get_settings().default_language
    secondary = secondary_language(language)
    template = _TEMPLATE_PATH.read_text(encoding="utf-8")
    instruction = template.format(
        language=language,
        language_name=LANGUAGE_NAMES.get(language, language),
        secondary_language=secondary,
        product_data=dump_for_prompt(product_info),
        text_layout=dump_for_prompt(layout),
    )

    generated = await request_json(
        GeneratedTextContentSchema, instruction, purpose="text"
    )
    content = finalize_text_content(generated, layout, product_info)
    logger.info(
        "Text content generated (%s): renderable blocks=%s",
        language,
        [b.id for b in content.renderable_blocks(language)],
    )
    return content
