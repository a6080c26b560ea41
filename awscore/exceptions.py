"""
awscore/exceptions.py - 통합 예외 계층 구조

클라이언트 런타임 전체에서 사용되는 예외 클래스들을 정의합니다.
모든 예외는 ErrorCategory 분류 태그를 가지며, 재시도 여부는
RetryPolicy가 이 태그를 보고 결정합니다.

예외 계층 구조:
    AWSCoreError (베이스)
    ├── ConfigurationError (설정 오류 - 프로그래밍 계약 위반)
    ├── CredentialsError (서명 자격 증명 누락/오류)
    ├── NetworkError (연결 거부, DNS, 타임아웃)
    ├── MalformedResponseError (응답 본문 파싱 불가)
    └── ServiceError (원격 서비스가 응답한 에러)
        ├── ServiceUnavailableError (5xx, 429, 쓰로틀링)
        ├── ClientError (4xx, 잘못된 요청 파라미터)
        └── RemoteServiceError (본문에 에러 코드가 담긴 응답)

Usage:
    from awscore.exceptions import ClientError, is_throttling

    try:
        tree = client.call("describe_volumes", {"volume_ids": ["vol-123"]})
    except ClientError as e:
        print(e.error_code, e.error_message, e.attempts)
"""

from __future__ import annotations

from typing import Any

from awscore.retry.types import ErrorCategory

# =============================================================================
# 베이스 예외
# =============================================================================


class AWSCoreError(Exception):
    """awscore 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
        operation: 실패한 원격 작업 이름 (Client가 전파 시 설정)
        attempts: 전파 시점까지 시도한 횟수 (Client가 전파 시 설정)
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}
        self.operation: str | None = None
        self.attempts: int = 0

    def __str__(self) -> str:
        text = self.message
        if self.cause:
            text = f"{text}: {self.cause}"
        if self.attempts > 1:
            text = f"{text} (시도 {self.attempts}회)"
        return text

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "operation": self.operation,
            "attempts": self.attempts,
            "details": self.details,
        }


class ConfigurationError(AWSCoreError):
    """설정 관련 예외

    잘못된 Configuration 조합처럼 호출자의 프로그래밍 오류를 나타냅니다.
    원격 실패가 아니므로 재시도 대상이 아닙니다.
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, key: str, message: str, cause: Exception | None = None):
        super().__init__(f"설정 오류 [{key}]: {message}", cause)
        self.config_key = key
        self.details["config_key"] = key


class CredentialsError(AWSCoreError):
    """서명에 필요한 자격 증명이 없거나 형식이 잘못된 경우"""

    category = ErrorCategory.CREDENTIALS

    def __init__(self, message: str = "자격 증명이 없습니다", cause: Exception | None = None):
        super().__init__(message, cause)


class NetworkError(AWSCoreError):
    """전송 계층 실패 (연결 거부, DNS 실패, 타임아웃)"""

    category = ErrorCategory.NETWORK
    retryable = True


class MalformedResponseError(AWSCoreError):
    """응답 본문을 디코딩할 수 없는 경우

    잘린 본문이나 깨진 XML/JSON은 같은 파라미터로 재전송해도 해결되지 않는다고
    보고 재시도하지 않습니다.
    """

    category = ErrorCategory.MALFORMED

    def __init__(self, message: str, body: bytes = b"", cause: Exception | None = None):
        super().__init__(message, cause)
        self.body = body
        self.details["body_preview"] = body[:200].decode("utf-8", "replace")


# =============================================================================
# 원격 서비스 에러
# =============================================================================


class ServiceError(AWSCoreError):
    """원격 서비스가 응답으로 알려준 에러의 공통 베이스

    Attributes:
        error_code: 원격 에러 코드 (예: "InvalidParameterValue")
        error_message: 원격 에러 메시지
        status_code: HTTP 상태 코드
        request_id: 원격 요청 ID (있는 경우)
    """

    def __init__(
        self,
        error_code: str | None = None,
        error_message: str | None = None,
        status_code: int | None = None,
        request_id: str | None = None,
        cause: Exception | None = None,
    ):
        message = error_code or f"HTTP {status_code}"
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message, cause)
        self.error_code = error_code
        self.error_message = error_message
        self.status_code = status_code
        self.request_id = request_id
        self.details.update(
            {
                "error_code": error_code,
                "status_code": status_code,
                "request_id": request_id,
            }
        )

    @classmethod
    def from_error(cls, other: ServiceError, **overrides: Any) -> ServiceError:
        """다른 ServiceError의 정보를 이 분류로 옮겨 새 예외 생성"""
        fields: dict[str, Any] = {
            "error_code": other.error_code,
            "error_message": other.error_message,
            "status_code": other.status_code,
            "request_id": other.request_id,
        }
        fields.update(overrides)
        return cls(**fields)


class ServiceUnavailableError(ServiceError):
    """HTTP 5xx, 429 또는 쓰로틀링 계열 에러 코드"""

    category = ErrorCategory.SERVICE_UNAVAILABLE
    retryable = True


class ClientError(ServiceError):
    """호출자가 보낸 파라미터 문제 (쓰로틀링 이외의 HTTP 4xx)"""

    category = ErrorCategory.CLIENT


class RemoteServiceError(ServiceError):
    """정상 형식의 응답 본문에 에러 코드가 담긴 경우"""

    category = ErrorCategory.REMOTE


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

THROTTLING_CODES: frozenset[str] = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
        "SlowDown",
    }
)

NOT_FOUND_CODES: frozenset[str] = frozenset(
    {
        "ResourceNotFoundException",
        "NotFoundException",
        "NoSuchEntity",
        "InvalidVolume.NotFound",
        "InvalidInstanceID.NotFound",
    }
)

ACCESS_DENIED_CODES: frozenset[str] = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedOperation",
        "AuthFailure",
    }
)


def _error_code(error: Exception) -> str | None:
    return getattr(error, "error_code", None)


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인"""
    return _error_code(error) in NOT_FOUND_CODES


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인"""
    return _error_code(error) in ACCESS_DENIED_CODES


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    friendly_messages = {
        "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
        "AuthFailure": "인증에 실패했습니다. 자격 증명을 확인하세요.",
        "ExpiredToken": "인증 토큰이 만료되었습니다.",
        "InvalidClientTokenId": "잘못된 자격 증명입니다.",
        "SignatureDoesNotMatch": "요청 서명이 일치하지 않습니다. 비밀 키를 확인하세요.",
        "Throttling": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
    }

    code = _error_code(error)
    if code and code in friendly_messages:
        return friendly_messages[code]
    return str(error)
