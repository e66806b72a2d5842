from pydantic import BaseModel, ConfigDict, Field

from mockup_studio.models.image import EncodedImage
from mockup_studio.options import (
    Aperture,
    AspectRatio,
    Background,
    CameraAngle,
    ColorStyle,
    Composition,
    LightingDirection,
    LightingType,
    Lens,
    Reflection,
    Resolution,
    Shadow,
    Surface,
)

# JSON 요약에서 제외할 원본 이미지 필드
IMAGE_FIELDS = frozenset({"product_image", "style_reference_image"})


class ShotOptions(BaseModel):
    """사용자가 고르는 촬영 파라미터 13종 + 출력 포맷."""

    model_config = ConfigDict(frozen=True)

    aspect_ratio: AspectRatio = "4:5"
    resolution: Resolution = "1080x1350"
    camera_angle: CameraAngle = "45° hero angle"
    lens: Lens = "50mm"
    depth_of_field: Aperture = "f/5.6"
    lighting_type: LightingType = "Natural window light"
    lighting_direction: LightingDirection = "Left"
    surface: Surface = "Marble (white or grey)"
    background: Background = "Off-white studio"
    shadow: Shadow = "Soft contact shadow"
    reflection: Reflection = "None"
    color_style: ColorStyle = "Neutral"
    composition: Composition = "Center framed"
    output_png: bool = False


class GenerationSettings(ShotOptions):
    """목업 1회 생성 요청의 설정값. 컴포저에 전달된 이후에는 변경하지 않습니다.

    바이브 매칭 필드는 스타일 레퍼런스를 사용할 때만 의미가 있습니다.
    세션이 설정값을 만들 때 스타일 레퍼런스가 꺼져 있으면 비활성값으로 강제합니다.
    """

    product_image: EncodedImage
    style_reference_image: EncodedImage | None = None
    style_reference_prompt: str | None = Field(
        default=None, description="스타일 레퍼런스 분석 결과 텍스트 블록"
    )
    match_product_vibe: bool = False
    product_vibe_prompt: str | None = Field(
        default=None, description="제품 바이브 키워드"
    )

    def summary_json(self) -> str:
        """원본 이미지 페이로드를 제외한 설정값 JSON 요약."""
        return self.model_dump_json(exclude=set(IMAGE_FIELDS), indent=2)


class MockupResult(BaseModel):
    image: EncodedImage
    prompt_used: str
    settings_summary: str
