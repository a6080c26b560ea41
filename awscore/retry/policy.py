"""
awscore/retry/policy.py - 에러 분류 및 재시도 정책

원격 호출 실패의 분류, 재시도 가능 여부 판단,
지수 백오프 + 지터 대기 시간 계산을 제공합니다.

주요 구성 요소:
- RetryPolicy: 재시도 결정 (지수 백오프 + 지터 + 상한)
- RetryDecision: should_retry 결과 (retry, delay)
- RETRYABLE_ERROR_CODES: 본문 에러 코드 중 재시도 대상
- categorize_error / get_error_code / is_retryable: 예외 분석 헬퍼
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from awscore.exceptions import AWSCoreError

from .types import ErrorCategory

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.3  # 초
DEFAULT_MAX_DELAY = 20.0  # 초

# 재시도 가능한 원격 에러 코드
RETRYABLE_ERROR_CODES: frozenset[str] = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
        "SlowDown",
        "ServiceUnavailable",
        "ServiceUnavailableException",
        "Unavailable",
        "InternalError",
        "InternalFailure",
        "InternalServiceError",
        "RequestTimeout",
        "RequestTimeoutException",
        "ProvisionedThroughputExceededException",
        "PriorRequestNotComplete",
    }
)


@dataclass(frozen=True)
class RetryDecision:
    """재시도 결정

    Attributes:
        retry: 재시도 여부
        delay: 다음 시도 전 대기 시간 (초)
    """

    retry: bool
    delay: float = 0.0


NO_RETRY = RetryDecision(retry=False)


@dataclass
class RetryPolicy:
    """재시도 정책

    NETWORK, SERVICE_UNAVAILABLE 분류만 max_retries회까지 재시도합니다.
    CLIENT, CREDENTIALS, MALFORMED 등은 재시도하지 않습니다.

    Attributes:
        max_retries: 최대 추가 시도 횟수 (0이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부 ([0, base_delay) 범위의 랜덤 값 추가)
        random_func: 지터용 난수 함수 (테스트에서 고정 가능)
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    exponential_base: float = 2.0
    jitter: bool = True
    random_func: Callable[[], float] = field(default=random.random, repr=False)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delay must be >= 0")

    @classmethod
    def from_config(cls, config) -> RetryPolicy:
        """Configuration의 재시도 설정으로 정책 생성"""
        return cls(
            max_retries=config.max_retries,
            base_delay=config.base_delay,
            max_delay=config.max_delay,
        )

    def get_delay(self, attempt: int) -> float:
        """재시도 대기 시간 계산

        Args:
            attempt: 실패한 시도 번호 (1부터 시작)

        Returns:
            대기 시간 (초)
        """
        retries = max(attempt - 1, 0)
        delay = self.base_delay * (self.exponential_base**retries)
        if self.jitter:
            # [0, base_delay) 지터: 다음 단계의 기본값을 넘지 않음
            delay += self.random_func() * self.base_delay
        return min(delay, self.max_delay)

    def should_retry(self, attempt: int, error: AWSCoreError) -> RetryDecision:
        """재시도 여부와 대기 시간 결정

        Args:
            attempt: 방금 실패한 시도 번호 (1부터 시작)
            error: 분류된 에러

        Returns:
            RetryDecision
        """
        if not is_retryable(error):
            return NO_RETRY
        if attempt > self.max_retries:
            logger.debug(f"재시도 한도 초과: {attempt - 1}/{self.max_retries} ({get_error_code(error)})")
            return NO_RETRY
        return RetryDecision(retry=True, delay=self.get_delay(attempt))


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 ErrorCategory로 분류

    awscore 예외는 자신의 분류 태그를 사용하고,
    그 외 연결/타임아웃 계열 예외는 NETWORK로 분류합니다.
    """
    if isinstance(error, AWSCoreError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    원격 에러 코드가 있으면 그것을, 없으면 예외 클래스명을 반환합니다.
    """
    code = getattr(error, "error_code", None)
    if code:
        return str(code)
    return error.__class__.__name__


def is_retryable(error: Exception) -> bool:
    """재시도 가능한 에러인지 확인"""
    if isinstance(error, AWSCoreError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))
