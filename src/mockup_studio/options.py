"""목업 촬영 파라미터 선택지

각 파라미터는 Literal 타입 + 값 튜플 + 기본값으로 정의됩니다.
GenerationSettings가 이 Literal로 입력값을 검증합니다.
"""
from typing import Literal, get_args

AspectRatio = Literal["9:16", "4:5", "1:1", "16:9", "3:2"]
Resolution = Literal[
    "1080x1920", "1080x1350", "1350x1080", "1920x1080", "2048x2048", "4096x4096"
]
CameraAngle = Literal[
    "Eye-level",
    "Low hero 15°",
    "High 15°",
    "45° hero angle",
    "Top-down 10–25°",
    "Macro detail",
]
Lens = Literal["35mm", "50mm", "70mm", "85mm", "100mm macro"]
Aperture = Literal["f/2.8 (shallow)", "f/4", "f/5.6", "f/8"]
LightingType = Literal[
    "Natural window light",
    "Softbox studio lighting",
    "Golden hour warm",
    "Overcast diffused",
    "Rim/edge light",
    "3-point lighting",
]
LightingDirection = Literal["Left", "Right", "Back", "Top", "Mixed (key + fill + rim)"]
Surface = Literal[
    "Matte stone",
    "Polished stone",
    "Light oak",
    "Concrete",
    "Marble (white or grey)",
    "Glass",
    "Minimal seamless table",
]
Background = Literal[
    "Pure seamless white",
    "Off-white studio",
    "Light gradient",
    "Dark gradient",
    "Soft bokeh forest (aloe/nature)",
    "Bathroom vanity",
    "Minimal kitchen counter",
    "Desk setup",
    "Soft haze / ambient mist",
]
Shadow = Literal["Soft contact shadow", "Area shadow", "High softbox shadow", "No shadow"]
Reflection = Literal["None", "Subtle reflection", "Strong glossy reflection"]
ColorStyle = Literal["Neutral", "Warm", "Cool", "Match style reference"]
Composition = Literal[
    "Center framed",
    "Rule of thirds",
    "Tight crop",
    "Medium crop",
    "Roomy crop (space for text overlays)",
]
OverlayLanguage = Literal["sq", "en"]

ASPECT_RATIOS: tuple[str, ...] = get_args(AspectRatio)
RESOLUTIONS: tuple[str, ...] = get_args(Resolution)
CAMERA_ANGLES: tuple[str, ...] = get_args(CameraAngle)
LENSES: tuple[str, ...] = get_args(Lens)
APERTURES: tuple[str, ...] = get_args(Aperture)
LIGHTING_TYPES: tuple[str, ...] = get_args(LightingType)
LIGHTING_DIRECTIONS: tuple[str, ...] = get_args(LightingDirection)
SURFACES: tuple[str, ...] = get_args(Surface)
BACKGROUNDS: tuple[str, ...] = get_args(Background)
SHADOWS: tuple[str, ...] = get_args(Shadow)
REFLECTIONS: tuple[str, ...] = get_args(Reflection)
COLOR_STYLES: tuple[str, ...] = get_args(ColorStyle)
COMPOSITIONS: tuple[str, ...] = get_args(Composition)
OVERLAY_LANGUAGES: tuple[str, ...] = get_args(OverlayLanguage)

NO_REFLECTION = "None"

# 이미지 엔드포인트가 지원하는 캔버스 크기로 매핑
_PORTRAIT_SIZE = "1024x1536"
_SQUARE_SIZE = "1024x1024"
_LANDSCAPE_SIZE = "1536x1024"

CANVAS_SIZES: dict[str, str] = {
    "9:16": _PORTRAIT_SIZE,
    "4:5": _PORTRAIT_SIZE,
    "1:1": _SQUARE_SIZE,
    "16:9": _LANDSCAPE_SIZE,
    "3:2": _LANDSCAPE_SIZE,
}


def canvas_size_for(aspect_ratio: str) -> str:
    return CANVAS_SIZES.get(aspect_ratio, _SQUARE_SIZE)
