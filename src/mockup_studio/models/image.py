from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field

from mockup_studio.errors import ImageEncodingError

_DATA_URL_PREFIX = "data:"
_BASE64_DELIMITER = ";base64,"


class EncodedImage(BaseModel):
    """외부 모델 전송용 이미지 표현 (base64 페이로드 + MIME 타입)."""

    model_config = ConfigDict(frozen=True)

    data: str = Field(description="base64 인코딩된 이미지 바이트")
    media_type: str = Field(description="MIME 타입 (예: image/png)")

    @classmethod
    def from_data_url(cls, data_url: str) -> EncodedImage:
        """`data:<mime>;base64,<payload>` 문자열을 분해합니다.

        구분자 구조가 없거나 MIME 타입/페이로드가 비어 있으면 ImageEncodingError.
        """
        if not isinstance(data_url, str) or not data_url.startswith(_DATA_URL_PREFIX):
            raise ImageEncodingError("Image must be a data URL starting with 'data:'")
        header, sep, payload = data_url.partition(_BASE64_DELIMITER)
        if not sep:
            raise ImageEncodingError("Image data URL is missing the ';base64,' delimiter")
        media_type = header[len(_DATA_URL_PREFIX):]
        if not media_type or not payload:
            raise ImageEncodingError("Image data URL has an empty media type or payload")
        return cls(data=payload, media_type=media_type)

    @classmethod
    def from_bytes(cls, raw: bytes, media_type: str) -> EncodedImage:
        return cls(data=base64.b64encode(raw).decode("utf-8"), media_type=media_type)

    def to_data_url(self) -> str:
        return f"{_DATA_URL_PREFIX}{self.media_type}{_BASE64_DELIMITER}{self.data}"

    def to_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as exc:
            raise ImageEncodingError(f"Invalid base64 image payload: {exc}") from exc

    @property
    def extension(self) -> str:
        subtype = self.media_type.split("/")[-1].lower()
        return "jpg" if subtype == "jpeg" else subtype
