"""공용 픽스처: 테스트 설정값과 Pillow로 만든 샘플 이미지"""
import io

import pytest
from PIL import Image

from mockup_studio.config import get_settings
from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import ProductInfoSchema, TextLayoutSchema


def make_image(color: str = "white", fmt: str = "PNG", size=(8, 8)) -> EncodedImage:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    media_type = "image/png" if fmt == "PNG" else "image/jpeg"
    return EncodedImage.from_bytes(buffer.getvalue(), media_type)


@pytest.fixture(autouse=True)
def test_settings(monkeypatch, tmp_path):
    """실제 키·홈 디렉토리 히스토리를 쓰지 않도록 환경변수를 고정합니다."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    monkeypatch.setenv("ANALYSIS_PROVIDER", "openai")
    monkeypatch.setenv("DEFAULT_LANGUAGE", "sq")
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def product_image() -> EncodedImage:
    return make_image("green")


@pytest.fixture
def style_image() -> EncodedImage:
    return make_image("beige", fmt="JPEG")


@pytest.fixture
def drink_info() -> ProductInfoSchema:
    return ProductInfoSchema(
        brand="Aloe Fresh",
        product_name="Aloe Vera Drink",
        product_type="drink",
        visible_claims=["Natural aloe pieces", "No added sugar"],
        volume="500ml",
        language_detected="en",
    )


@pytest.fixture
def layout() -> TextLayoutSchema:
    return TextLayoutSchema.model_validate(
        {
            "font_hint": "geometric_sans_bold",
            "color_palette": ["#FFFFFF", "#1A1A1A"],
            "blocks": [
                {
                    "id": "bg_title",
                    "role": "background_headline",
                    "anchor_box": [0.0, 0.1, 1.0, 0.5],
                    "align": "center",
                    "size_hint": "xl",
                    "weight_hint": "bold",
                },
                {
                    "id": "headline_main",
                    "role": "headline",
                    "anchor_box": [0.05, 0.05, 0.95, 0.15],
                    "align": "center",
                    "size_hint": "lg",
                    "weight_hint": "bold",
                },
                {
                    "id": "sub",
                    "role": "subheadline",
                    "anchor_box": [0.1, 0.16, 0.9, 0.22],
                    "align": "center",
                    "size_hint": "md",
                    "weight_hint": "medium",
                },
                {
                    "id": "callouts_left",
                    "role": "bullet_list",
                    "anchor_box": [0.02, 0.5, 0.3, 0.8],
                    "align": "left",
                    "size_hint": "sm",
                    "weight_hint": "medium",
                },
                {
                    "id": "volume_badge",
                    "role": "specs_volume",
                    "anchor_box": [0.7, 0.85, 0.95, 0.95],
                    "align": "right",
                    "size_hint": "xs",
                    "weight_hint": "light",
                },
            ],
        }
    )
