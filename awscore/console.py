"""
awscore/console.py - Rich 콘솔/로깅 헬퍼

라이브러리 모듈은 logging.getLogger(__name__)만 사용하고 핸들러를 설정하지 않습니다.
애플리케이션이나 디버깅 스크립트에서 로그와 응답 트리를 보기 좋게 출력할 때 사용합니다.

Example:
    from awscore.console import get_logger, print_tree

    get_logger("awscore", level=logging.DEBUG)
    print_tree("GetUser", client.call("get_user", {"user_name": "bob"}))
"""

import logging
import platform
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from awscore.parallel.types import ParallelExecutionResult

_console: Console | None = None


def get_console() -> Console:
    """공유 Rich Console 인스턴스를 반환합니다 (첫 호출 시 생성)."""
    global _console
    if _console is None:
        is_windows = platform.system().lower() == "windows"
        _console = Console(
            color_system="auto",
            highlight=True,
            soft_wrap=True,
            markup=True,
            emoji=not is_windows,
        )
    return _console


def get_logger(name: str = "awscore", level: int = logging.INFO) -> logging.Logger:
    """Rich 핸들러가 설정된 logger를 반환합니다.

    Args:
        name: logger 이름 (기본값: "awscore", 라이브러리 전체 로그)
        level: 로그 레벨

    Returns:
        logging.Logger: 설정된 logger 인스턴스
    """
    # urllib3 연결 풀 노이즈 로그 제한
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 이미 핸들러가 설정되어 있으면 반환
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return logger

    handler = RichHandler(console=get_console(), rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger


def build_tree(title: str, value: Any) -> Tree:
    """AttributeTree를 Rich Tree로 변환"""
    tree = Tree(f"[bold]{escape(title)}[/bold]")
    _add_branch(tree, value)
    return tree


def _add_branch(node: Tree, value: Any) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            if isinstance(child, (dict, list)):
                _add_branch(node.add(f"[cyan]{escape(str(key))}[/cyan]"), child)
            else:
                node.add(f"[cyan]{escape(str(key))}[/cyan]: {escape(repr(child))}")
    elif isinstance(value, list):
        for index, child in enumerate(value):
            if isinstance(child, (dict, list)):
                _add_branch(node.add(f"[dim][{index}][/dim]"), child)
            else:
                node.add(f"[dim][{index}][/dim] {escape(repr(child))}")
    else:
        node.add(escape(repr(value)))


def print_tree(title: str, value: Any) -> None:
    """AttributeTree를 계층 트리로 출력

    Example:
        print_tree("DescribeVolumes", {"volume_set": [{"volume_id": "vol-1", "size": 8}]})
    """
    get_console().print(build_tree(title, value))


def print_table(title: str, items: list[dict[str, Any]], columns: list[str]) -> None:
    """목록 항목(AttributeTree)을 테이블로 출력

    Args:
        title: 테이블 제목
        items: 항목 리스트
        columns: 출력할 키 목록
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(column)
    for item in items:
        table.add_row(*["" if item.get(column) is None else escape(str(item.get(column))) for column in columns])
    get_console().print(table)


def print_error_tree(result: ParallelExecutionResult, title: str = "오류 요약", max_items: int = 3) -> None:
    """병렬 실행 실패를 카테고리별 계층 트리로 출력"""
    tree = Tree(f"[bold yellow]{title}[/bold yellow]")
    for category, errors in result.get_errors_by_category().items():
        branch = tree.add(f"[red]{category.value}[/red] ({len(errors)}건)")
        for error in errors[:max_items]:
            branch.add(f"[dim]{escape(str(error))}[/dim]")
        if len(errors) > max_items:
            branch.add(f"[dim]... 외 {len(errors) - max_items}건[/dim]")
    get_console().print(tree)
