"""
awscore/parallel/types.py - 병렬 실행 결과 타입

주요 구성 요소:
- TaskError: 실패한 작업의 분류된 에러 정보
- TaskResult: 작업 하나의 결과 (성공 데이터 또는 TaskError)
- ParallelExecutionResult: 전체 실행 결과 집계
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from awscore.retry.types import ErrorCategory

T = TypeVar("T")

_RETRYABLE_CATEGORIES = frozenset({ErrorCategory.NETWORK, ErrorCategory.SERVICE_UNAVAILABLE})


@dataclass
class TaskError:
    """작업 실패 정보

    Attributes:
        identifier: 작업 식별자 (예: 리전, 리소스 ID)
        category: 에러 분류
        error_code: 원격 에러 코드 또는 예외 클래스명
        message: 에러 메시지
        attempts: Client가 시도한 횟수
        original_exception: 원본 예외
        timestamp: 발생 시각
    """

    identifier: str
    category: ErrorCategory
    error_code: str
    message: str
    attempts: int = 0
    original_exception: Exception | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.identifier}] {self.error_code}: {self.message}"

    def is_retryable(self) -> bool:
        return self.category in _RETRYABLE_CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "category": self.category.value,
            "error_code": self.error_code,
            "message": self.message,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class TaskResult(Generic[T]):
    """작업 하나의 결과"""

    identifier: str
    success: bool
    data: T | None = None
    error: TaskError | None = None
    duration_ms: float = 0.0

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{self.identifier}] {status} ({self.duration_ms:.0f}ms)"


@dataclass
class ParallelExecutionResult(Generic[T]):
    """병렬 실행 전체 결과

    실패한 작업은 빈 데이터로 숨기지 않고 errors로 따로 보관합니다.
    """

    results: tuple[TaskResult[T], ...] | list[TaskResult[T]] = field(default_factory=tuple)

    @property
    def successful(self) -> list[TaskResult[T]]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[TaskResult[T]]:
        return [r for r in self.results if not r.success]

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    @property
    def total_duration_ms(self) -> float:
        return sum(r.duration_ms for r in self.results)

    def has_any_success(self) -> bool:
        return self.success_count > 0

    def has_any_failure(self) -> bool:
        return self.error_count > 0

    def has_failures_only(self) -> bool:
        return bool(self.results) and self.success_count == 0

    def get_data(self) -> dict[str, T]:
        """성공한 작업의 식별자 -> 데이터 (None 제외)"""
        return {r.identifier: r.data for r in self.successful if r.data is not None}

    def get_flat_data(self) -> list[Any]:
        """성공한 작업의 리스트 데이터를 하나로 평탄화"""
        flat: list[Any] = []
        for r in self.successful:
            if r.data is None:
                continue
            if isinstance(r.data, list):
                flat.extend(r.data)
            else:
                flat.append(r.data)
        return flat

    def get_errors(self) -> list[TaskError]:
        return [r.error for r in self.failed if r.error is not None]

    def get_errors_by_category(self) -> dict[ErrorCategory, list[TaskError]]:
        grouped: dict[ErrorCategory, list[TaskError]] = {}
        for error in self.get_errors():
            grouped.setdefault(error.category, []).append(error)
        return grouped

    def get_error_summary(self, max_per_category: int = 5) -> str:
        """카테고리별 에러 요약 문자열 (에러가 없으면 빈 문자열)"""
        errors = self.get_errors()
        if not errors:
            return ""

        lines = [f"총 {len(errors)}개 작업 실패"]
        for category, items in self.get_errors_by_category().items():
            lines.append(f"[{category.value}] {len(items)}건")
            for error in items[:max_per_category]:
                lines.append(f"  - {error}")
            if len(items) > max_per_category:
                lines.append(f"  ... 외 {len(items) - max_per_category}건")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total_count,
            "success": self.success_count,
            "failed": self.error_count,
            "total_duration_ms": self.total_duration_ms,
            "errors": [e.to_dict() for e in self.get_errors()],
        }
