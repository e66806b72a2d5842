import logging

from mockup_studio.agents.composer import compose_modification_prompt
from mockup_studio.models.image import EncodedImage
from mockup_studio.utils.executor import request_image

logger = logging.getLogger(__name__)


async def modify_image(base_image: EncodedImage, instruction: str) -> EncodedImage:
    """생성된 이미지를 자유 지시문으로 수정합니다 (제품·라벨 보존 절 자동 추가)."""
    if not instruction.strip():
        raise ValueError("Modification instruction must not be empty")
    logger.info("Modifying image: %s", instruction)
    return await request_image(compose_modification_prompt(instruction), [base_image])
