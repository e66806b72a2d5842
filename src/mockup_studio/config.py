from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # LLM APIs
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # 구조화 JSON 호출(분석기·텍스트 생성)을 담당할 벤더. 이미지 호출은 항상 OpenAI
    analysis_provider: Literal["openai", "anthropic"] = "openai"

    # Model Configuration
    # 분석기 (스타일·바이브·라벨·레이아웃·제품정보): 빠른 Vision 분석
    analysis_model: str = "gpt-4.1-mini"
    anthropic_analysis_model: str = "claude-haiku-4-5-20251001"
    # 오버레이 텍스트 생성 (이미지 없음, 다국어 카피)
    text_model: str = "gpt-4.1"
    anthropic_text_model: str = "claude-sonnet-4-6"
    # 목업 생성 / 수정 / 오버레이 렌더
    image_model: str = "gpt-image-1"

    max_tokens: int = 2048
    request_timeout: float = 180.0

    # Text Overlay
    default_language: Literal["sq", "en"] = "sq"

    # History
    history_path: Path = Path.home() / ".mockup_studio" / "history.json"
    history_limit: int = 20

    # SSL / Proxy Configuration
    # 기업 프록시 환경에서 SSL 검증 오류 발생 시 false로 설정
    ssl_verify: bool = True
    # 커스텀 CA 인증서 경로 (기업 CA 번들 경로, 비워두면 certifi 기본값 사용)
    ca_bundle_path: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
