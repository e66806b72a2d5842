from .composer import compose_mockup_prompt, compose_modification_prompt
from .extractor import analyze_product_vibe, analyze_style_reference, extract_label_text
from .generator import generate_mockup
from .layout_analyzer import analyze_text_layout
from .modifier import modify_image
from .overlay_renderer import render_text_overlay
from .product_info import extract_product_info
from .text_content import generate_text_content

__all__ = [
    "compose_mockup_prompt",
    "compose_modification_prompt",
    "analyze_style_reference",
    "analyze_product_vibe",
    "extract_label_text",
    "generate_mockup",
    "modify_image",
    "analyze_text_layout",
    "extract_product_info",
    "generate_text_content",
    "render_text_overlay",
]
