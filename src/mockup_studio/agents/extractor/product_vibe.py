from pathlib import Path

from mockup_studio.models.analysis import ProductVibeAnalysis
from mockup_studio.models.image import EncodedImage
from mockup_studio.utils.executor import request_json

_TEMPLATE_PATH = (
    Path(__file__).parent.parent.parent
    / "utils/prompt_templates/extractor/product_vibe.txt"
)


async def analyze_product_vibe(image: EncodedImage) -> ProductVibeAnalysis:
    """제품 이미지의 분위기·테마를 3~5개 키워드로 추출합니다 (제품·라벨 묘사 제외)."""
    instruction = _TEMPLATE_PATH.read_text(encoding="utf-8")
    return await request_json(ProductVibeAnalysis, instruction, [image])
