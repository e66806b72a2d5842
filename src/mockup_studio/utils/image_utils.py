from __future__ import annotations

import io
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from mockup_studio.errors import ImageEncodingError, UpstreamError
from mockup_studio.models.image import EncodedImage

_MIME_MAP = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def parse_data_url(data_url: str) -> EncodedImage:
    """업로드 콜라보레이터가 넘긴 data URL을 전송용 (base64, MIME) 쌍으로 변환합니다."""
    return EncodedImage.from_data_url(data_url)


def sniff_media_type(raw: bytes, fallback: str = "image/jpeg") -> str:
    """Pillow로 실제 이미지 포맷을 판별해 MIME 타입을 반환합니다."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            return Image.MIME.get(img.format or "", fallback)
    except UnidentifiedImageError as exc:
        raise ImageEncodingError("Input is not a recognizable image") from exc


async def download_image(url: str) -> bytes:
    """URL에서 이미지 바이트를 다운로드합니다."""
    try:
        async with httpx.AsyncClient(timeout=30) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Failed to download image {url}: {exc}") from exc
    return response.content


async def load_image(path_or_url: str) -> EncodedImage:
    """로컬 파일 경로, URL 또는 data URL에서 EncodedImage를 만듭니다.

    - data URL → 그대로 분해
    - HTTPS/HTTP URL → httpx로 다운로드
    - 로컬 파일 경로 → 바이트를 읽고 Pillow로 포맷 판별
    """
    if path_or_url.startswith("data:"):
        return parse_data_url(path_or_url)
    if path_or_url.startswith(("http://", "https://")):
        raw = await download_image(path_or_url)
        return EncodedImage.from_bytes(raw, sniff_media_type(raw))

    path = Path(path_or_url)
    raw = path.read_bytes()
    fallback = _MIME_MAP.get(path.suffix.lower(), "image/jpeg")
    return EncodedImage.from_bytes(raw, sniff_media_type(raw, fallback))


def save_image(image: EncodedImage, path: str | Path) -> Path:
    """EncodedImage를 파일로 저장합니다. 확장자가 MIME과 다르면 Pillow로 변환합니다."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    raw = image.to_bytes()
    wanted = _MIME_MAP.get(target.suffix.lower())
    if wanted is None or wanted == image.media_type:
        target.write_bytes(raw)
        return target

    with Image.open(io.BytesIO(raw)) as img:
        if wanted == "image/jpeg":
            img = img.convert("RGB")
        img.save(target)
    return target
