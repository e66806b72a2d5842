from .analysis import LabelText, ProductVibeAnalysis, StyleReferenceAnalysis
from .generation import GenerationSettings, MockupResult, ShotOptions
from .image import EncodedImage
from .text_overlay import (
    GeneratedTextBlock,
    GeneratedTextContentSchema,
    OverlayRender,
    ProductInfoSchema,
    TextBlock,
    TextLayoutSchema,
)

__all__ = [
    "EncodedImage",
    "GenerationSettings",
    "MockupResult",
    "ShotOptions",
    "StyleReferenceAnalysis",
    "ProductVibeAnalysis",
    "LabelText",
    "TextBlock",
    "TextLayoutSchema",
    "ProductInfoSchema",
    "GeneratedTextBlock",
    "GeneratedTextContentSchema",
    "OverlayRender",
]
