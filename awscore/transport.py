"""
awscore/transport.py - HTTP 전송과 응답 분류

서명된 요청을 보내고 결과를 성공/재시도 가능 실패/치명적 실패로 분류합니다.
Transport는 재시도하지 않습니다. 분류 결과를 Client에 돌려주고
재시도 결정은 Client(RetryPolicy)가 합니다.

주요 구성 요소:
- TransportResult: 응답 또는 분류된 에러
- Transport: 전송 추상 기본 클래스
- RequestsTransport: requests.Session 기반 구현
- classify_status: HTTP 상태 코드 분류
- classify_response: 상태 코드 + 본문 에러 코드 종합 분류

분류 규칙:
    연결 거부/DNS/타임아웃      -> NetworkError (재시도)
    HTTP 5xx, 429              -> ServiceUnavailableError (재시도)
    그 외 HTTP 4xx             -> ClientError (재시도 안 함)
    본문 에러 코드가 일시적 코드 -> ServiceUnavailableError (상태 코드 무관)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests

from awscore.exceptions import (
    AWSCoreError,
    ClientError,
    NetworkError,
    RemoteServiceError,
    ServiceError,
    ServiceUnavailableError,
)
from awscore.request import RawResponse, SignedRequest
from awscore.retry.policy import RETRYABLE_ERROR_CODES

logger = logging.getLogger(__name__)

Timeout = tuple[float, float]


@dataclass(frozen=True)
class TransportResult:
    """전송 결과

    HTTP 응답을 받았으면 response가, 네트워크 수준에서 실패했으면 error가 설정됩니다.
    response의 상태 코드 분류는 classify_status로 error에도 함께 담깁니다.

    Attributes:
        response: 원시 HTTP 응답
        error: 분류된 에러
    """

    response: RawResponse | None = None
    error: AWSCoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def classify_status(response: RawResponse) -> ServiceError | None:
    """HTTP 상태 코드만으로 응답 분류

    Returns:
        2xx/3xx면 None, 아니면 분류된 ServiceError
    """
    status = response.status_code
    if status < 400:
        return None
    if status >= 500 or status == 429:
        return ServiceUnavailableError(status_code=status, request_id=response.request_id)
    return ClientError(status_code=status, request_id=response.request_id)


def classify_response(response: RawResponse, remote_error: ServiceError | None) -> ServiceError | None:
    """상태 코드와 본문 에러 코드를 종합해 최종 분류

    Args:
        response: 원시 응답
        remote_error: ResponseParser가 본문에서 찾은 에러 (없으면 None)

    Returns:
        성공이면 None, 아니면 최종 분류된 ServiceError
    """
    status_error = classify_status(response)
    if remote_error is None:
        return status_error

    overrides = {"status_code": response.status_code}
    if remote_error.request_id is None:
        overrides["request_id"] = response.request_id

    if remote_error.error_code in RETRYABLE_ERROR_CODES or isinstance(status_error, ServiceUnavailableError):
        return ServiceUnavailableError.from_error(remote_error, **overrides)
    if isinstance(status_error, ClientError):
        return ClientError.from_error(remote_error, **overrides)
    # 2xx 응답 본문에 담긴 에러
    return RemoteServiceError.from_error(remote_error, **overrides)


# =============================================================================
# Transport Interface
# =============================================================================


class Transport(ABC):
    """전송 추상 기본 클래스

    구현체는 예외를 던지지 않고 TransportResult로 결과를 돌려줍니다.
    """

    @abstractmethod
    def send(self, signed: SignedRequest, timeout: Timeout) -> TransportResult:
        """서명된 요청을 전송

        Args:
            signed: 서명 완료 요청
            timeout: (연결, 읽기) 타임아웃 (초)
        """
        pass

    def close(self) -> None:  # noqa: B027
        """연결 자원을 정리합니다."""
        pass


class RequestsTransport(Transport):
    """requests.Session 기반 Transport

    세션(연결 풀)은 인스턴스가 소유합니다. 여러 스레드에서 동시에 send를 호출할 수 있습니다.
    """

    def __init__(self, session: requests.Session | None = None, user_agent: str | None = None):
        self._session = session or requests.Session()
        if user_agent:
            self._session.headers["User-Agent"] = user_agent

    def send(self, signed: SignedRequest, timeout: Timeout) -> TransportResult:
        try:
            resp = self._session.request(
                signed.method,
                signed.url,
                headers=signed.headers,
                data=signed.body or None,
                timeout=timeout,
                allow_redirects=False,
            )
            body = resp.content
        except requests.exceptions.Timeout as e:
            logger.debug(f"{signed.request.operation} 타임아웃: {e}")
            return TransportResult(error=NetworkError(f"요청 타임아웃 ({signed.request.host})", cause=e))
        except requests.exceptions.ConnectionError as e:
            logger.debug(f"{signed.request.operation} 연결 실패: {e}")
            return TransportResult(error=NetworkError(f"연결 실패 ({signed.request.host})", cause=e))
        except requests.exceptions.RequestException as e:
            logger.debug(f"{signed.request.operation} 전송 실패: {e}")
            return TransportResult(error=NetworkError(f"전송 실패 ({signed.request.host})", cause=e))

        raw = RawResponse(status_code=resp.status_code, headers=dict(resp.headers), body=body)
        return TransportResult(response=raw, error=classify_status(raw))

    def close(self) -> None:
        self._session.close()
