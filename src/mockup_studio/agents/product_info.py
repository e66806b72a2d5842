import logging
from pathlib import Path

from mockup_studio.models.image import EncodedImage
from mockup_studio.models.text_overlay import ProductInfoSchema
from mockup_studio.utils.executor import request_json

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = (
    Path(__file__).parent.parent / "utils/prompt_templates/product_info.txt"
)


async def extract_product_info(product_image: EncodedImage) -> ProductInfoSchema:
    """Stage 2: 제품 라벨에서 브랜드·제품명·유형·클레임·용량을 추출합니다.

    읽을 수 없는 값은 None으로 남깁니다. 추측으로 채우지 않습니다.
    """
    instruction = _TEMPLATE_PATH.read_text(encoding="utf-8")
    info = await request_json(ProductInfoSchema, instruction, [product_image])
    logger.info(
        "Product info: brand=%s, name=%s, type=%s, claims=%d",
        info.brand,
        info.product_name,
        info.product_type,
        len(info.visible_claims),
    )
    return info
