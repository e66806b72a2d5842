"""
스키마 제약 요청 실행기

외부 모델 호출 1회 = 이미지(0개 이상) + 지시문 + 기대 출력 형태.
- request_json: pydantic 모델의 JSON Schema를 그대로 응답 스키마로 선언하고,
  같은 모델로 응답을 검증합니다. 파싱·검증 실패 → ResponseFormatError (기본값 대체 없음)
- request_image: 응답에서 인라인 이미지 페이로드를 찾고, 없으면 EmptyResultError

재시도하지 않습니다. 재시도 여부는 호출자(사용자)가 결정합니다.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Literal, TypeVar

import anthropic
import httpx
import openai
from pydantic import BaseModel, ValidationError

from mockup_studio.config import get_settings
from mockup_studio.errors import (
    ConfigurationError,
    EmptyResultError,
    ResponseFormatError,
    UpstreamError,
)
from mockup_studio.models.image import EncodedImage
from mockup_studio.utils.http_client import create_anthropic_client, create_openai_client

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

Purpose = Literal["analysis", "text"]

# gpt-image 계열은 항상 PNG를 돌려줍니다
_IMAGE_RESPONSE_MEDIA_TYPE = "image/png"


def parse_structured(schema: type[T], payload: str | dict[str, Any] | None) -> T:
    """모델 응답(JSON 문자열 또는 dict)을 선언된 스키마로 검증합니다."""
    if payload is None:
        raise ResponseFormatError(f"Model returned no content for {schema.__name__}")
    try:
        if isinstance(payload, str):
            return schema.model_validate_json(payload.strip())
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ResponseFormatError(
            f"Model response does not match {schema.__name__}: "
            f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}"
        ) from exc


def _openai_image_part(image: EncodedImage) -> dict:
    return {
        "type": "image_url",
        "image_url": {"url": image.to_data_url(), "detail": "high"},
    }


def _anthropic_image_part(image: EncodedImage) -> dict:
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": image.media_type,
            "data": image.data,
        },
    }


async def _openai_json(
    schema: type[BaseModel],
    instruction: str,
    images: Sequence[EncodedImage],
    model: str,
) -> str | None:
    settings = get_settings()
    client = create_openai_client()
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        *(_openai_image_part(img) for img in images),
                        {"type": "text", "text": instruction},
                    ],
                }
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": schema.__name__,
                    "schema": schema.model_json_schema(),
                    "strict": False,
                },
            },
            max_tokens=settings.max_tokens,
        )
    except (openai.APIError, httpx.HTTPError) as exc:
        raise UpstreamError(str(exc)) from exc
    finally:
        await client.close()

    if not response.choices:
        return None
    return response.choices[0].message.content


def tool_input_schema(schema: type[BaseModel]) -> dict:
    """Anthropic 도구 입력 스키마. 별칭 모델은 populate_by_name으로 필드 이름 응답도 받습니다."""
    return schema.model_json_schema(by_alias=False)


async def _anthropic_json(
    schema: type[BaseModel],
    instruction: str,
    images: Sequence[EncodedImage],
    model: str,
) -> dict | None:
    # Claude는 강제 tool_use의 input_schema로 구조화 출력을 받습니다.
    # 도구 스키마의 속성 키는 [a-zA-Z0-9_.-]만 허용되므로 별칭 대신 필드 이름을 씁니다
    settings = get_settings()
    client = create_anthropic_client()
    tool_name = schema.__name__
    try:
        response = await client.messages.create(
            model=model,
            max_tokens=settings.max_tokens,
            tools=[
                {
                    "name": tool_name,
                    "description": f"Record the result as a {tool_name} object.",
                    "input_schema": tool_input_schema(schema),
                }
            ],
            tool_choice={"type": "tool", "name": tool_name},
            messages=[
                {
                    "role": "user",
                    "content": [
                        *(_anthropic_image_part(img) for img in images),
                        {"type": "text", "text": instruction},
                    ],
                }
            ],
        )
    except (anthropic.APIError, httpx.HTTPError) as exc:
        raise UpstreamError(str(exc)) from exc
    finally:
        await client.close()

    block = next((b for b in response.content if b.type == "tool_use"), None)
    return None if block is None else block.input


async def request_json(
    schema: type[T],
    instruction: str,
    images: Sequence[EncodedImage] = (),
    *,
    purpose: Purpose = "analysis",
) -> T:
    """구조화 JSON 모드로 1회 호출하고 검증된 스키마 객체를 반환합니다."""
    settings = get_settings()
    provider = settings.analysis_provider
    logger.debug("request_json %s via %s (%d image(s))", schema.__name__, provider, len(images))

    if provider == "openai":
        model = settings.analysis_model if purpose == "analysis" else settings.text_model
        payload = await _openai_json(schema, instruction, images, model)
    elif provider == "anthropic":
        model = (
            settings.anthropic_analysis_model
            if purpose == "analysis"
            else settings.anthropic_text_model
        )
        payload = await _anthropic_json(schema, instruction, images, model)
    else:
        raise ConfigurationError(f"Unknown analysis provider: {provider}")

    return parse_structured(schema, payload)


async def request_image(
    instruction: str,
    images: Sequence[EncodedImage],
    *,
    size: str = "auto",
) -> EncodedImage:
    """이미지 모드로 1회 호출하고 응답의 인라인 이미지를 반환합니다.

    images 순서가 곧 모델에 전달되는 파트 순서입니다 (제품 이미지 우선).
    """
    if not images:
        raise ValueError("request_image requires at least one input image")

    settings = get_settings()
    files = [
        (f"image_{i}.{img.extension}", img.to_bytes(), img.media_type)
        for i, img in enumerate(images)
    ]
    client = create_openai_client()
    logger.debug("request_image via %s (%d image(s), size=%s)", settings.image_model, len(files), size)
    try:
        response = await client.images.edit(
            model=settings.image_model,
            image=files if len(files) > 1 else files[0],
            prompt=instruction,
            size=size,
            n=1,
        )
    except (openai.APIError, httpx.HTTPError) as exc:
        raise UpstreamError(str(exc)) from exc
    finally:
        await client.close()

    for item in response.data or []:
        if item.b64_json:
            return EncodedImage(data=item.b64_json, media_type=_IMAGE_RESPONSE_MEDIA_TYPE)
    raise EmptyResultError("No image was generated in the response.")


def dump_for_prompt(model: BaseModel, **kwargs) -> str:
    """프롬프트에 삽입할 컴팩트 JSON 문자열 (None 필드 포함)."""
    return json.dumps(model.model_dump(mode="json", **kwargs), ensure_ascii=False)
