from pathlib import Path

from mockup_studio.models.analysis import LabelText
from mockup_studio.models.image import EncodedImage
from mockup_studio.utils.executor import request_json

_TEMPLATE_PATH = (
    Path(__file__).parent.parent.parent
    / "utils/prompt_templates/extractor/label_text.txt"
)


async def extract_label_text(image: EncodedImage) -> LabelText:
    """제품 라벨 텍스트를 원문 그대로 추출합니다. 읽히지 않는 텍스트는 만들어내지 않습니다."""
    instruction = _TEMPLATE_PATH.read_text(encoding="utf-8")
    return await request_json(LabelText, instruction, [image])
