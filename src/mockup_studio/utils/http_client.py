"""
공유 LLM 클라이언트 팩토리

- API 키가 비어 있으면 네트워크 호출 전에 ConfigurationError로 즉시 실패합니다.
- SDK 내부 재시도를 끕니다 (max_retries=0). 호출당 정확히 한 번만 시도합니다.
- 기업 프록시 환경의 SSL 인증서 오류를 처리합니다.
  SSL_VERIFY=false 또는 CA_BUNDLE_PATH 설정으로 동작을 제어합니다.
"""
import ssl

import certifi
import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from mockup_studio.config import get_settings
from mockup_studio.errors import ConfigurationError


def _build_ssl_context() -> ssl.SSLContext | bool | str:
    """환경설정에 따라 SSL 컨텍스트를 반환합니다.

    Returns:
        - ssl.SSLContext: 커스텀 CA 번들 사용 시
        - str (certifi 경로): 기본 동작
        - False: SSL 검증 완전 비활성화 (비권장, 프록시 환경 임시 우회용)
    """
    settings = get_settings()

    if not settings.ssl_verify:
        return False

    if settings.ca_bundle_path:
        # 기업 CA 인증서를 certifi 기본 번들과 합쳐서 사용
        ctx = ssl.create_default_context(cafile=certifi.where())
        ctx.load_verify_locations(cafile=settings.ca_bundle_path)
        return ctx

    # 기본값: certifi CA 번들 (시스템 인증서보다 최신 유지)
    return certifi.where()


def _build_http_client() -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        verify=_build_ssl_context(),
        timeout=settings.request_timeout,
    )


def require_openai_key() -> str:
    key = get_settings().openai_api_key
    if not key:
        raise ConfigurationError("OPENAI_API_KEY environment variable is not set.")
    return key


def require_anthropic_key() -> str:
    key = get_settings().anthropic_api_key
    if not key:
        raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set.")
    return key


def create_openai_client() -> AsyncOpenAI:
    """SSL 설정이 적용된 AsyncOpenAI 클라이언트를 생성합니다."""
    api_key = require_openai_key()
    return AsyncOpenAI(
        api_key=api_key,
        http_client=_build_http_client(),
        max_retries=0,
    )


def create_anthropic_client() -> AsyncAnthropic:
    """SSL 설정이 적용된 AsyncAnthropic 클라이언트를 생성합니다."""
    api_key = require_anthropic_key()
    return AsyncAnthropic(
        api_key=api_key,
        http_client=_build_http_client(),
        max_retries=0,
    )
