"""목업 스튜디오 예외 계층

- ConfigurationError: 자격 증명 누락 등: 네트워크 호출 전에 즉시 실패, 세션 경계에서 잡지 않음
- 나머지 MockupStudioError: 세션 경계에서 "Failed to <작업>: <상세>" 메시지로 변환
"""


class MockupStudioError(Exception):
    """모든 목업 스튜디오 오류의 기반 클래스."""


class ConfigurationError(MockupStudioError):
    """필수 API 키가 없거나 설정값이 잘못된 경우."""


class ImageEncodingError(MockupStudioError, ValueError):
    """data URL 형식(`data:<mime>;base64,<payload>`)이 아닌 입력."""


class ResponseFormatError(MockupStudioError):
    """모델 응답이 JSON으로 파싱되지 않거나 선언된 스키마를 위반한 경우."""


class EmptyResultError(MockupStudioError):
    """이미지 모드 응답에 인라인 이미지 데이터가 없는 경우."""


class UpstreamError(MockupStudioError):
    """네트워크 오류 또는 벤더 API 오류."""


class PipelineStageError(MockupStudioError):
    """선행 산출물이 준비되지 않은 텍스트 오버레이 단계를 실행하려 한 경우."""
