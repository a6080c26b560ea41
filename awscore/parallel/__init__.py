"""
awscore/parallel - 독립 호출 병렬 실행 헬퍼

사용 예시:
    from awscore.parallel import parallel_collect, prefetch

    result = parallel_collect(regions, list_volumes, max_workers=5)
    prefetch(users)
"""

from .executor import parallel_collect, prefetch
from .types import ParallelExecutionResult, TaskError, TaskResult

__all__: list[str] = [
    "parallel_collect",
    "prefetch",
    "ParallelExecutionResult",
    "TaskError",
    "TaskResult",
]
