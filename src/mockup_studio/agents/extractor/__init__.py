from .label_text import extract_label_text
from .product_vibe import analyze_product_vibe
from .style_reference import analyze_style_reference

__all__ = [
    "analyze_style_reference",
    "analyze_product_vibe",
    "extract_label_text",
]
