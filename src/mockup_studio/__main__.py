"""
사용법:
  mockup-studio generate ./product.png --style ./ref.jpg --match-vibe -o out/mockup.png
  mockup-studio modify out/mockup.png "Make the background slightly warmer" -o out/modified.png
  mockup-studio overlay out/mockup.png ./layout_ref.jpg --language en -o out/overlay.png
  mockup-studio history [--clear]

입력 이미지는 로컬 파일 경로 또는 http(s) URL.
작업 실패 시 종료 코드 1, 설정 오류(API 키 누락 등) 시 2.
"""
import argparse
import asyncio
import logging
import sys

from mockup_studio import options
from mockup_studio.errors import ConfigurationError, MockupStudioError
from mockup_studio.session import MockupSession
from mockup_studio.utils.executor import dump_for_prompt
from mockup_studio.utils.image_utils import load_image, save_image

logger = logging.getLogger("mockup_studio")

# (CLI 옵션, ShotOptions 필드, 선택지)
_SHOT_ARGUMENTS = (
    ("--aspect-ratio", "aspect_ratio", options.ASPECT_RATIOS),
    ("--resolution", "resolution", options.RESOLUTIONS),
    ("--camera-angle", "camera_angle", options.CAMERA_ANGLES),
    ("--lens", "lens", options.LENSES),
    ("--aperture", "depth_of_field", options.APERTURES),
    ("--lighting-type", "lighting_type", options.LIGHTING_TYPES),
    ("--lighting-direction", "lighting_direction", options.LIGHTING_DIRECTIONS),
    ("--surface", "surface", options.SURFACES),
    ("--background", "background", options.BACKGROUNDS),
    ("--shadow", "shadow", options.SHADOWS),
    ("--reflection", "reflection", options.REFLECTIONS),
    ("--color-style", "color_style", options.COLOR_STYLES),
    ("--composition", "composition", options.COMPOSITIONS),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mockup-studio",
        description="Product mockup photography and text overlay generator",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a product mockup")
    generate.add_argument("product", help="Product image path or URL")
    generate.add_argument("--style", help="Style reference image path or URL")
    generate.add_argument(
        "--match-vibe",
        action="store_true",
        help="Merge the product vibe into the style reference (requires --style)",
    )
    for flag, dest, choices in _SHOT_ARGUMENTS:
        generate.add_argument(flag, dest=dest, choices=choices, default=None)
    generate.add_argument("--png", action="store_true", help="Request a transparent PNG")
    generate.add_argument("-o", "--output", default="output/mockup.png")

    modify = commands.add_parser("modify", help="Modify a generated image")
    modify.add_argument("image", help="Image path or URL to modify")
    modify.add_argument("instruction", help="Free-text modification instruction")
    modify.add_argument("-o", "--output", default="output/modified.png")

    overlay = commands.add_parser("overlay", help="Run all text overlay steps")
    overlay.add_argument("product", help="Product image path or URL")
    overlay.add_argument("style", help="Text layout style reference image path or URL")
    overlay.add_argument("--language", choices=options.OVERLAY_LANGUAGES, default=None)
    overlay.add_argument("--vibe-elements", action="store_true")
    overlay.add_argument("--match-background", action="store_true")
    overlay.add_argument("-o", "--output", default="output/overlay.png")

    history = commands.add_parser("history", help="List or clear generated image history")
    history.add_argument("--clear", action="store_true")
    return parser


def _fail(session: MockupSession) -> int:
    print(session.error, file=sys.stderr)
    return 1


async def _generate(session: MockupSession, args: argparse.Namespace) -> int:
    shot = {dest: getattr(args, dest) for _, dest, _ in _SHOT_ARGUMENTS}
    session.update_options(
        **{key: value for key, value in shot.items() if value is not None},
        output_png=args.png,
    )

    await session.set_product_image(await load_image(args.product))
    if args.style:
        session.use_style_reference = True
        session.match_product_vibe = args.match_vibe
        await session.set_style_reference_image(await load_image(args.style))
    if session.error:
        # 분석 실패는 생성을 막지 않음
        print(session.error, file=sys.stderr)

    result = await session.generate()
    if result is None:
        return _fail(session)

    path = save_image(result.image, args.output)
    print(f"Saved mockup: {path}")
    if session.extracted_text is not None:
        print("\n[Extracted label text]")
        print(session.extracted_text)
    print("\n[Prompt]")
    print(result.prompt_used)
    print("\n[Settings]")
    print(result.settings_summary)
    if session.error:
        print(session.error, file=sys.stderr)
    return 0


async def _modify(session: MockupSession, args: argparse.Namespace) -> int:
    image = await session.modify(args.instruction, await load_image(args.image))
    if image is None:
        return _fail(session)
    print(f"Saved modified image: {save_image(image, args.output)}")
    return 0


async def _overlay(session: MockupSession, args: argparse.Namespace) -> int:
    pipeline = session.overlay
    if args.language:
        pipeline.set_language(args.language)
    pipeline.add_vibe_elements = args.vibe_elements
    pipeline.match_style_background = args.match_background
    session.set_overlay_product_image(await load_image(args.product))
    pipeline.set_style_image(await load_image(args.style))

    render = await session.run_overlay_all()
    for title, artifact in (
        ("Layout", pipeline.layout),
        ("Product info", pipeline.product_info),
        ("Text content", pipeline.content),
    ):
        if artifact is not None:
            print(f"\n[{title}]")
            print(dump_for_prompt(artifact))
    if render is None:
        return _fail(session)

    path = save_image(render.image, args.output)
    print(f"\nSaved overlay ({render.language}): {path}")
    print(f"Drawn blocks: {', '.join(render.drawn_block_ids) or '(none)'}")
    return 0


def _history(session: MockupSession, args: argparse.Namespace) -> int:
    if args.clear:
        session.history.clear()
        print("History cleared")
        return 0
    items = session.history.list()
    if not items:
        print("History is empty")
    for index, item in enumerate(items, start=1):
        print(f"{index:2d}. {item[:60]}... ({len(item)} chars)")
    return 0


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    session = MockupSession()
    try:
        if args.command == "generate":
            return await _generate(session, args)
        if args.command == "modify":
            return await _modify(session, args)
        if args.command == "overlay":
            return await _overlay(session, args)
        return _history(session, args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except (MockupStudioError, OSError) as exc:
        # 입력 이미지 로드 실패 등 세션 밖에서 난 오류
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
