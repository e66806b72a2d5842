"""세션(오케스트레이터 경계) 테스트: 오류 변환, 부분 성공 보존, 슬롯 무효화"""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from mockup_studio.errors import ConfigurationError, EmptyResultError, ResponseFormatError, UpstreamError
from mockup_studio.models.analysis import LabelText, ProductVibeAnalysis, StyleReferenceAnalysis
from mockup_studio.models.generation import MockupResult
from mockup_studio.models.text_overlay import OverlayRender
from mockup_studio.pipeline import PipelineState
from mockup_studio.session import MockupSession
from mockup_studio.utils.history import HistoryStore

from conftest import make_image

STYLE = StyleReferenceAnalysis(environment="sunlit bathroom", lighting="soft window light")


@pytest.fixture
def session() -> MockupSession:
    return MockupSession(history=HistoryStore())


@pytest.fixture
def analyzers():
    mocks = {
        "analyze_product_vibe": AsyncMock(return_value=ProductVibeAnalysis(keywords="fresh, green")),
        "analyze_style_reference": AsyncMock(return_value=STYLE),
        "extract_label_text": AsyncMock(return_value=LabelText(extracted_text="ALOE FRESH 500ml")),
    }
    patches = [patch(f"mockup_studio.session.{name}", new=mock) for name, mock in mocks.items()]
    for p in patches:
        p.start()
    yield mocks
    for p in patches:
        p.stop()


def _mockup(settings):
    return MockupResult(
        image=make_image("blue"),
        prompt_used="prompt",
        settings_summary=settings.summary_json(),
    )


@pytest.fixture
def generator():
    mock = AsyncMock(side_effect=_mockup)
    with patch("mockup_studio.session.generate_mockup", new=mock):
        yield mock


@pytest.mark.asyncio
async def test_upload_runs_slot_analyses(session, analyzers, product_image, style_image):
    await session.set_product_image(product_image)
    await session.set_style_reference_image(style_image)

    assert session.product_vibe == "fresh, green"
    assert session.style_reference_prompt == STYLE.to_prompt()
    analyzers["analyze_product_vibe"].assert_awaited_once_with(product_image)
    analyzers["analyze_style_reference"].assert_awaited_once_with(style_image)


@pytest.mark.asyncio
async def test_removing_style_image_clears_analysis(session, analyzers, style_image):
    await session.set_style_reference_image(style_image)
    await session.set_style_reference_image(None)
    assert session.style_reference_prompt is None


@pytest.mark.asyncio
async def test_analysis_failure_is_reported(session, analyzers, style_image):
    analyzers["analyze_style_reference"].side_effect = ResponseFormatError("not JSON")

    await session.set_style_reference_image(style_image)

    assert session.error == "Failed to analyze style reference: not JSON"
    assert session.style_reference_prompt is None


@pytest.mark.asyncio
async def test_sibling_analysis_failure_keeps_other_result(session, analyzers, product_image, style_image):
    await session.set_product_image(product_image)
    analyzers["analyze_style_reference"].side_effect = UpstreamError("timeout")

    await session.set_style_reference_image(style_image)

    assert session.product_vibe == "fresh, green"


@pytest.mark.asyncio
async def test_stale_style_analysis_is_discarded(session, analyzers):
    first_gate = asyncio.Event()
    first, second = make_image("red"), make_image("yellow")

    async def analyze(image):
        if image == first:
            await first_gate.wait()
            return StyleReferenceAnalysis(environment="OLD")
        return StyleReferenceAnalysis(environment="NEW")

    analyzers["analyze_style_reference"].side_effect = analyze
    stale = asyncio.create_task(session.set_style_reference_image(first))
    await asyncio.sleep(0)
    await session.set_style_reference_image(second)
    first_gate.set()
    await stale

    assert "NEW" in session.style_reference_prompt
    assert "OLD" not in session.style_reference_prompt


@pytest.mark.asyncio
async def test_stale_failure_is_not_reported(session, analyzers):
    gate = asyncio.Event()
    first, second = make_image("red"), make_image("yellow")

    async def analyze(image):
        if image == first:
            await gate.wait()
            raise UpstreamError("late failure")
        return STYLE

    analyzers["analyze_style_reference"].side_effect = analyze
    stale = asyncio.create_task(session.set_style_reference_image(first))
    await asyncio.sleep(0)
    await session.set_style_reference_image(second)
    gate.set()
    await stale

    assert session.error is None
    assert session.style_reference_prompt == STYLE.to_prompt()


@pytest.mark.asyncio
async def test_generate_success(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    result = await session.generate()

    assert result is not None
    assert session.generated_image == result.image
    assert session.extracted_text == "ALOE FRESH 500ml"
    assert session.final_prompt == "prompt"
    assert session.error is None
    assert session.history.list() == [result.image.to_data_url()]


@pytest.mark.asyncio
async def test_settings_summary_excludes_image_payloads(session, analyzers, generator, product_image, style_image):
    session.use_style_reference = True
    await session.set_product_image(product_image)
    await session.set_style_reference_image(style_image)
    await session.generate()

    summary = json.loads(session.settings_summary)
    assert "product_image" not in summary
    assert "style_reference_image" not in summary
    assert summary["aspect_ratio"] == "4:5"
    assert product_image.data not in session.settings_summary


@pytest.mark.asyncio
async def test_label_failure_does_not_block_generation(session, analyzers, generator, product_image):
    analyzers["extract_label_text"].side_effect = UpstreamError("label service down")
    await session.set_product_image(product_image)

    result = await session.generate()

    assert result is not None
    assert session.generated_image == result.image
    assert session.extracted_text is None
    assert session.error == "Failed to extract label text: label service down"


@pytest.mark.asyncio
async def test_generation_failure_keeps_extracted_text(session, analyzers, generator, product_image):
    generator.side_effect = EmptyResultError("No image was generated in the response.")
    await session.set_product_image(product_image)

    assert await session.generate() is None
    assert session.error == "Failed to generate: No image was generated in the response."
    assert session.extracted_text == "ALOE FRESH 500ml"
    assert session.generated_image is None
    assert len(session.history) == 0


@pytest.mark.asyncio
async def test_generate_without_product_image(session, generator):
    assert await session.generate() is None
    assert session.error.startswith("Failed to generate:")
    generator.assert_not_awaited()


@pytest.mark.asyncio
async def test_configuration_error_propagates(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    generator.side_effect = ConfigurationError("OPENAI_API_KEY environment variable is not set.")

    with pytest.raises(ConfigurationError):
        await session.generate()


@pytest.mark.asyncio
async def test_vibe_inert_without_style_reference(session, analyzers, generator, product_image, style_image):
    session.match_product_vibe = True
    await session.set_product_image(product_image)
    await session.set_style_reference_image(style_image)

    settings = session.build_settings()
    assert settings.style_reference_image is None
    assert settings.style_reference_prompt is None
    assert settings.match_product_vibe is False
    assert settings.product_vibe_prompt is None
    # 분석 결과는 보존되어 스타일 레퍼런스를 켜면 다시 쓰임
    assert session.product_vibe == "fresh, green"

    session.use_style_reference = True
    settings = session.build_settings()
    assert settings.style_reference_image == style_image
    assert settings.match_product_vibe is True
    assert settings.product_vibe_prompt == "fresh, green"


@pytest.mark.asyncio
async def test_generate_sends_style_image_only_when_enabled(session, analyzers, generator, product_image, style_image):
    await session.set_product_image(product_image)
    await session.set_style_reference_image(style_image)
    await session.generate()
    assert generator.await_args.args[0].style_reference_image is None

    session.use_style_reference = True
    await session.generate()
    assert generator.await_args.args[0].style_reference_image == style_image


def test_update_options_validates(session):
    session.update_options(lens="85mm", output_png=True)
    assert session.options.lens == "85mm"
    assert session.options.output_png is True

    with pytest.raises(ValueError):
        session.update_options(lens="fisheye")
    assert session.options.lens == "85mm"


@pytest.mark.asyncio
async def test_new_product_image_clears_outputs(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    await session.generate()

    await session.set_product_image(make_image("red"))

    assert session.generated_image is None
    assert session.extracted_text is None
    assert session.final_prompt is None
    assert session.settings_summary is None


@pytest.mark.asyncio
async def test_modify_replaces_image(session, product_image):
    modified = make_image("purple")
    with patch("mockup_studio.session.modify_image", new=AsyncMock(return_value=modified)) as mock:
        result = await session.modify("Add water droplets", base_image=product_image)

    assert result == modified
    assert session.generated_image == modified
    assert session.history.list()[0] == modified.to_data_url()
    mock.assert_awaited_once_with(product_image, "Add water droplets")


@pytest.mark.asyncio
async def test_modify_failure_keeps_prior_image(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    await session.generate()
    before = session.generated_image

    with patch(
        "mockup_studio.session.modify_image",
        new=AsyncMock(side_effect=UpstreamError("rate limited")),
    ):
        assert await session.modify("Make it warmer") is None

    assert session.generated_image == before
    assert session.error == "Failed to modify image: rate limited"


@pytest.mark.asyncio
async def test_modify_without_image(session):
    assert await session.modify("Make it warmer") is None
    assert session.error.startswith("Failed to modify image:")


@pytest.mark.asyncio
async def test_generated_mockup_feeds_overlay_pipeline(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    result = await session.generate()
    assert session.overlay.product_image == result.image

    explicit = make_image("orange")
    session.set_overlay_product_image(explicit)
    assert session.overlay.product_image == explicit

    await session.generate()
    assert session.overlay.product_image == explicit


@pytest.mark.asyncio
async def test_overlay_stage_errors_are_reported(session):
    assert await session.generate_text_content() is None
    assert session.error.startswith("Failed to generate text content: Cannot generate text content")


@pytest.mark.asyncio
async def test_overlay_style_upload_triggers_layout(session, style_image, layout):
    with patch("mockup_studio.pipeline.analyze_text_layout", new=AsyncMock(return_value=layout)):
        await session.set_overlay_style_image(style_image)

    assert session.overlay.layout is layout
    assert session.overlay.state is PipelineState.LAYOUT_READY


@pytest.mark.asyncio
async def test_run_overlay_all_failure_message(session, product_image, style_image, layout):
    session.set_overlay_product_image(product_image)
    session.overlay.set_style_image(style_image)

    with (
        patch("mockup_studio.pipeline.analyze_text_layout", new=AsyncMock(return_value=layout)),
        patch(
            "mockup_studio.pipeline.extract_product_info",
            new=AsyncMock(side_effect=ResponseFormatError("bad JSON")),
        ),
    ):
        assert await session.run_overlay_all() is None

    assert session.error == "Failed to complete overlay generation: bad JSON"
    assert session.overlay.state is PipelineState.LAYOUT_READY


@pytest.mark.asyncio
async def test_run_overlay_all_success(session, product_image, style_image, layout, drink_info):
    render = OverlayRender(image=make_image("blue"), language="sq", drawn_block_ids=[])
    session.set_overlay_product_image(product_image)
    session.overlay.set_style_image(style_image)

    with (
        patch("mockup_studio.pipeline.analyze_text_layout", new=AsyncMock(return_value=layout)),
        patch("mockup_studio.pipeline.extract_product_info", new=AsyncMock(return_value=drink_info)),
        patch("mockup_studio.pipeline.generate_text_content", new=AsyncMock()),
        patch("mockup_studio.pipeline.render_text_overlay", new=AsyncMock(return_value=render)),
    ):
        assert await session.run_overlay_all() is render

    assert session.error is None
    assert session.overlay.state is PipelineState.RENDERED


@pytest.mark.asyncio
async def test_analyzing_flags_track_in_flight_analysis(session, analyzers, style_image):
    """분석이 진행 중인 동안만 is_analyzing_* 가 True입니다."""
    gate = asyncio.Event()

    async def analyze(image):
        await gate.wait()
        return STYLE

    analyzers["analyze_style_reference"].side_effect = analyze
    assert session.is_analyzing_style is False

    task = asyncio.create_task(session.set_style_reference_image(style_image))
    await asyncio.sleep(0)
    assert session.is_analyzing_style is True
    assert session.is_analyzing_vibe is False

    gate.set()
    await task
    assert session.is_analyzing_style is False
    assert session.style_reference_prompt == STYLE.to_prompt()


@pytest.mark.asyncio
async def test_analyzing_flag_resets_after_failure(session, analyzers, product_image):
    analyzers["analyze_product_vibe"].side_effect = UpstreamError("timeout")

    await session.set_product_image(product_image)

    assert session.is_analyzing_vibe is False
    assert session.error == "Failed to analyze product vibe: timeout"


@pytest.mark.asyncio
async def test_failed_regeneration_clears_previous_mockup(session, analyzers, generator, product_image):
    """재생성이 실패하면 이전 목업과 프롬프트가 현재 결과처럼 남지 않아야 합니다."""
    await session.set_product_image(product_image)
    first = await session.generate()
    assert session.overlay.product_image == first.image

    generator.side_effect = UpstreamError("rate limited")
    assert await session.generate() is None

    assert session.generated_image is None
    assert session.final_prompt is None
    assert session.settings_summary is None
    assert session.extracted_text == "ALOE FRESH 500ml"
    assert session.error == "Failed to generate: rate limited"
    assert session.overlay.product_image is None
    assert len(session.history) == 1


@pytest.mark.asyncio
async def test_outputs_are_cleared_while_generating(session, analyzers, generator, product_image):
    await session.set_product_image(product_image)
    await session.generate()

    gate = asyncio.Event()

    async def slow_mockup(settings):
        await gate.wait()
        return _mockup(settings)

    generator.side_effect = slow_mockup
    task = asyncio.create_task(session.generate())
    await asyncio.sleep(0)
    assert session.generated_image is None
    assert session.final_prompt is None

    gate.set()
    result = await task
    assert session.generated_image == result.image
