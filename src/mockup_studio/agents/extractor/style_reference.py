from pathlib import Path

from mockup_studio.models.analysis import StyleReferenceAnalysis
from mockup_studio.models.image import EncodedImage
from mockup_studio.utils.executor import request_json

_TEMPLATE_PATH = (
    Path(__file__).parent.parent.parent
    / "utils/prompt_templates/extractor/style_reference.txt"
)


async def analyze_style_reference(image: EncodedImage) -> StyleReferenceAnalysis:
    """스타일 레퍼런스에서 미학 요소(환경·조명·색감·구도·질감·분위기)만 추출합니다.

    지시문은 제품·텍스트·로고 묘사를 금지합니다. 레퍼런스의 제품 내용이
    목업 장면으로 새어 들어가지 않게 하는 계약입니다.
    """
    instruction = _TEMPLATE_PATH.read_text(encoding="utf-8")
    return await request_json(StyleReferenceAnalysis, instruction, [image])
