from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mockup_studio.models.image import EncodedImage

BlockRole = Literal[
    "headline",
    "subheadline",
    "bullet_list",
    "specs_volume",
    "tagline",
    "background_headline",
]
Align = Literal["left", "center", "right"]
SizeHint = Literal["xl", "lg", "md", "sm", "xs"]
WeightHint = Literal["bold", "medium", "light"]

LIST_ROLES = frozenset({"bullet_list"})


class TextBlock(BaseModel):
    id: str = Field(min_length=1, description='Unique block id, e.g. "headline_main"')
    role: BlockRole
    anchor_box: tuple[float, float, float, float] = Field(
        description="[x1, y1, x2, y2] relative coordinates (0-1)"
    )
    align: Align
    size_hint: SizeHint
    weight_hint: WeightHint

    @field_validator("anchor_box")
    @classmethod
    def _check_anchor_box(cls, box):
        x1, y1, x2, y2 = box
        if not all(0.0 <= v <= 1.0 for v in box):
            raise ValueError(f"anchor_box coordinates must be within [0, 1]: {box}")
        if not (x1 < x2 and y1 < y2):
            raise ValueError(f"anchor_box must satisfy x1<x2 and y1<y2: {box}")
        return box

    @property
    def is_list(self) -> bool:
        return self.role in LIST_ROLES


def _check_unique_ids(blocks) -> None:
    seen: set[str] = set()
    for block in blocks:
        if block.id in seen:
            raise ValueError(f"duplicate block id: {block.id}")
        seen.add(block.id)


class TextLayoutSchema(BaseModel):
    """스타일 레퍼런스에서 추출한 텍스트 블록 배치 정보 (텍스트 내용 없음)."""

    font_hint: str = Field(description='e.g. "modern_sans_medium"')
    color_palette: list[str] = Field(description="Hex codes for text colors")
    blocks: list[TextBlock]

    @model_validator(mode="after")
    def _unique_block_ids(self) -> TextLayoutSchema:
        _check_unique_ids(self.blocks)
        return self

    def block(self, block_id: str) -> TextBlock | None:
        return next((b for b in self.blocks if b.id == block_id), None)


class ProductInfoSchema(BaseModel):
    """라벨에서 실제로 읽힌 정보만 담습니다. 읽을 수 없는 값은 None (추측 금지)."""

    brand: str | None
    product_name: str | None
    product_type: str | None
    visible_claims: list[str] = Field(default_factory=list)
    volume: str | None
    language_detected: str = Field(description='ISO 639-1 code, e.g. "sq", "en"')


class GeneratedTextBlock(TextBlock):
    """레이아웃 블록 + 언어별 콘텐츠 (text_<lang> / 리스트 블록은 items_<lang>)."""

    model_config = ConfigDict(extra="allow")

    text_sq: str | None = None
    text_en: str | None = None
    items_sq: list[str] | None = None
    items_en: list[str] | None = None

    @model_validator(mode="after")
    def _blank_to_absent(self) -> GeneratedTextBlock:
        # 빈 문자열/빈 리스트는 "콘텐츠 없음"으로 정규화
        for name in self.localized_fields():
            value = getattr(self, name)
            if isinstance(value, str) and not value.strip():
                setattr(self, name, None)
            elif isinstance(value, list):
                items = [item for item in value if isinstance(item, str) and item.strip()]
                setattr(self, name, items or None)
        return self

    def localized_fields(self) -> list[str]:
        names = [
            name
            for name in (*type(self).model_fields, *(self.model_extra or {}))
            if name.startswith(("text_", "items_"))
        ]
        return list(dict.fromkeys(names))

    def content_for(self, language: str) -> str | list[str] | None:
        """대상 언어 콘텐츠. 없으면 None. 이 블록은 렌더링하지 않습니다."""
        if self.is_list:
            value = getattr(self, f"items_{language}", None)
            if value is None:
                value = getattr(self, f"text_{language}", None)
        else:
            value = getattr(self, f"text_{language}", None)
        return value or None

    def has_content(self, language: str) -> bool:
        return self.content_for(language) is not None


class GeneratedTextContentSchema(BaseModel):
    font_hint: str
    color_palette: list[str]
    blocks: list[GeneratedTextBlock]

    @model_validator(mode="after")
    def _unique_block_ids(self) -> GeneratedTextContentSchema:
        _check_unique_ids(self.blocks)
        return self

    def renderable_blocks(self, language: str) -> list[GeneratedTextBlock]:
        return [b for b in self.blocks if b.has_content(language)]


class OverlayRender(BaseModel):
    image: EncodedImage
    language: str
    drawn_block_ids: list[str]
