"""목업 생성 / 이미지 수정 에이전트 테스트 (request_image는 mock)"""
from unittest.mock import AsyncMock, patch

import pytest

from mockup_studio.agents.composer import MODIFICATION_PRESERVE_CLAUSE, STYLE_HEADER
from mockup_studio.agents.generator import generate_mockup
from mockup_studio.agents.modifier import modify_image
from mockup_studio.errors import EmptyResultError
from mockup_studio.models.generation import GenerationSettings
from mockup_studio.options import canvas_size_for

from conftest import make_image


@pytest.mark.asyncio
async def test_generate_mockup_sends_product_then_style(product_image, style_image):
    settings = GenerationSettings(
        product_image=product_image,
        style_reference_image=style_image,
        style_reference_prompt="- Environment: studio",
        aspect_ratio="16:9",
    )
    output = make_image("blue")
    mock = AsyncMock(return_value=output)
    with patch("mockup_studio.agents.generator.request_image", new=mock):
        result = await generate_mockup(settings)

    prompt, images = mock.await_args.args
    assert images == [product_image, style_image]
    assert mock.await_args.kwargs == {"size": "1536x1024"}
    assert STYLE_HEADER in prompt
    assert result.image == output
    assert result.prompt_used == prompt
    assert result.settings_summary == settings.summary_json()


@pytest.mark.asyncio
async def test_generate_mockup_product_only(product_image):
    mock = AsyncMock(return_value=make_image())
    with patch("mockup_studio.agents.generator.request_image", new=mock):
        await generate_mockup(GenerationSettings(product_image=product_image))

    assert mock.await_args.args[1] == [product_image]
    assert mock.await_args.kwargs == {"size": "1024x1536"}


@pytest.mark.asyncio
async def test_generate_mockup_propagates_empty_result(product_image):
    mock = AsyncMock(side_effect=EmptyResultError("No image was generated in the response."))
    with patch("mockup_studio.agents.generator.request_image", new=mock):
        with pytest.raises(EmptyResultError):
            await generate_mockup(GenerationSettings(product_image=product_image))


@pytest.mark.parametrize(
    "ratio, size",
    [("9:16", "1024x1536"), ("4:5", "1024x1536"), ("1:1", "1024x1024"), ("16:9", "1536x1024"), ("3:2", "1536x1024")],
)
def test_canvas_size_for(ratio, size):
    assert canvas_size_for(ratio) == size


def test_summary_json_excludes_images(product_image, style_image):
    summary = GenerationSettings(
        product_image=product_image, style_reference_image=style_image
    ).summary_json()

    assert "product_image" not in summary
    assert "style_reference_image" not in summary
    assert '"camera_angle": "45° hero angle"' in summary


@pytest.mark.asyncio
async def test_modify_image_appends_preserve_clause(product_image):
    mock = AsyncMock(return_value=make_image("purple"))
    with patch("mockup_studio.agents.modifier.request_image", new=mock):
        await modify_image(product_image, "Add a soft shadow")

    prompt, images = mock.await_args.args
    assert prompt.startswith("Add a soft shadow.")
    assert prompt.endswith(MODIFICATION_PRESERVE_CLAUSE)
    assert images == [product_image]


@pytest.mark.asyncio
async def test_modify_image_rejects_empty_instruction(product_image):
    with pytest.raises(ValueError):
        await modify_image(product_image, "   ")
