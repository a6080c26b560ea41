"""
awscore/parallel/executor.py - 독립 호출의 병렬 실행

코어 자체는 호출 하나당 블로킹 네트워크 호출 하나만 수행합니다.
여러 Collection/Model을 동시에 다루고 싶은 호출자를 위해
ThreadPoolExecutor 기반 헬퍼를 제공합니다. 재시도는 각 Client가 담당하므로
여기서는 다시 재시도하지 않습니다.

주요 구성 요소:
- parallel_collect: 작업 목록에 함수를 병렬 적용하고 결과 집계
- prefetch: 여러 Model의 속성을 병렬로 미리 로드

Example:
    from awscore.parallel import parallel_collect

    def list_volumes(region):
        config = base_config.with_options(endpoint=f"ec2.{region}.amazonaws.com", region=region)
        return list(Collection(config, "describe_volumes", items_key="volume_set"))

    result = parallel_collect(["us-east-1", "ap-northeast-2"], list_volumes)
    volumes = result.get_flat_data()
    print(result.get_error_summary())
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any, TypeVar

from awscore.retry.policy import categorize_error, get_error_code

from .types import ParallelExecutionResult, TaskError, TaskResult

if TYPE_CHECKING:
    from awscore.model import Model

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 10
MAX_WORKERS_LIMIT = 100


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


def _task_id(task: Any) -> str:
    identifier = getattr(task, "identifier", None)
    return str(identifier if identifier is not None else task)


def _run_single(func: Callable[[Any], T], task: Any) -> TaskResult[T]:
    """단일 작업 실행 (워커 스레드 내에서 호출)"""
    identifier = _task_id(task)
    start_time = time.monotonic()
    try:
        data = func(task)
    except Exception as e:
        _clear_exception_chain(e)
        logger.debug(f"작업 실패 [{identifier}]: {get_error_code(e)} - {e}")
        return TaskResult(
            identifier=identifier,
            success=False,
            error=TaskError(
                identifier=identifier,
                category=categorize_error(e),
                error_code=get_error_code(e),
                message=str(e),
                attempts=getattr(e, "attempts", 0),
                original_exception=e,
            ),
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    return TaskResult(
        identifier=identifier,
        success=True,
        data=data,
        duration_ms=(time.monotonic() - start_time) * 1000,
    )


def parallel_collect(
    tasks: Iterable[Any],
    func: Callable[[Any], T],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> ParallelExecutionResult[T]:
    """작업마다 func를 병렬 실행하고 결과를 모음

    Args:
        tasks: 작업 입력 목록 (식별자로 str(task) 또는 task.identifier 사용)
        func: task -> T 함수
        max_workers: 최대 동시 스레드 수 (1~100)

    Returns:
        ParallelExecutionResult[T]: 입력 순서대로 정렬된 결과
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")
    max_workers = min(max_workers, MAX_WORKERS_LIMIT)

    task_list = list(tasks)
    if not task_list:
        logger.warning("실행할 작업이 없습니다")
        return ParallelExecutionResult()

    logger.info(f"병렬 실행 시작: {len(task_list)}개 작업, max_workers={max_workers}")
    start_time = time.monotonic()
    results: list[TaskResult[T] | None] = [None] * len(task_list)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(_run_single, func, task): index for index, task in enumerate(task_list)}
        for future in as_completed(futures):
            results[futures[future]] = future.result()

    exec_result = ParallelExecutionResult(results=tuple(r for r in results if r is not None))
    total_time = (time.monotonic() - start_time) * 1000
    logger.info(
        f"병렬 실행 완료: 성공 {exec_result.success_count}, 실패 {exec_result.error_count}, 총 {total_time:.0f}ms"
    )
    return exec_result


def prefetch(models: Iterable[Model], max_workers: int = DEFAULT_MAX_WORKERS) -> ParallelExecutionResult[Any]:
    """여러 Model의 속성을 병렬로 로드

    이미 로드된 Model은 네트워크 호출 없이 성공으로 처리됩니다.
    같은 인스턴스가 여러 번 들어와도 로드는 한 번만 일어납니다.
    """
    return parallel_collect(models, lambda model: model.ensure_loaded(), max_workers=max_workers)
