"""
awscore/retry - 에러 분류와 재시도 정책

Example:
    from awscore.retry import RetryPolicy

    policy = RetryPolicy(max_retries=3)
    decision = policy.should_retry(attempt, error)
    if decision.retry:
        time.sleep(decision.delay)

Note:
    policy 모듈은 awscore.exceptions에 의존하고 awscore.exceptions는
    types 모듈에 의존하므로, policy 심볼은 Lazy Import로 노출합니다.
"""

from .types import ErrorCategory, Outcome

__all__: list[str] = [
    "ErrorCategory",
    "Outcome",
    "RetryDecision",
    "RetryPolicy",
    "RETRYABLE_ERROR_CODES",
    "categorize_error",
    "get_error_code",
    "is_retryable",
]

# Lazy import 매핑 테이블
_IMPORT_MAPPING = {
    "RetryDecision": (".policy", "RetryDecision"),
    "RetryPolicy": (".policy", "RetryPolicy"),
    "RETRYABLE_ERROR_CODES": (".policy", "RETRYABLE_ERROR_CODES"),
    "categorize_error": (".policy", "categorize_error"),
    "get_error_code": (".policy", "get_error_code"),
    "is_retryable": (".policy", "is_retryable"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
