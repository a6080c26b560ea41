"""
awscore/retry/types.py - 에러 분류 태그와 결과 값 타입

ErrorCategory는 모든 awscore 예외가 갖는 분류 태그이고,
Outcome은 Transport/ResponseParser가 예외를 던지는 대신 돌려주는
명시적 결과 값입니다. Client만 Outcome을 보고 재시도/전파를 결정합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from awscore.exceptions import AWSCoreError

T = TypeVar("T")


class ErrorCategory(Enum):
    """에러 분류 태그"""

    NETWORK = "network"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CLIENT = "client"
    CREDENTIALS = "credentials"
    REMOTE = "remote"
    MALFORMED = "malformed"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """성공 값 또는 분류된 에러 중 하나를 담는 결과

    Attributes:
        value: 성공 시 값
        error: 실패 시 분류된 에러
    """

    value: T | None = None
    error: AWSCoreError | None = None

    def __post_init__(self) -> None:
        if self.value is not None and self.error is not None:
            raise ValueError("Outcome은 value와 error를 동시에 가질 수 없습니다")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AWSCoreError) -> Outcome[T]:
        return cls(error=error)

    def unwrap(self) -> T:
        """값을 반환하고, 실패 결과면 에러를 발생시킵니다."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
