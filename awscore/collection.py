"""
awscore/collection.py - 커서 기반 지연 페이지네이션

Collection은 목록 작업(list_*/describe_*)의 결과를 필요할 때 한 페이지씩 가져오는
유한한 시퀀스입니다. 상태 기계로 동작합니다.

    START -> FETCHING -> YIELDING -> (다음 커서 있음? FETCHING : DONE)

- FETCHING 전이마다 현재 커서로 Client 호출 한 번
- 응답의 다음 커서가 비어있거나 is_truncated가 False면 마지막 페이지
- 마지막 페이지의 항목을 모두 내보내면 DONE
- 열거를 도중에 멈추면 남은 항목은 버퍼에 남고, 다음 열거가 거기서 이어짐
- DONE은 종료 상태이며, 처음부터 다시 열거하려면 reset() 또는 새 Collection 필요
- 원격 데이터가 열거 사이에 바뀌면 재열거 순서는 보장되지 않음 (스냅샷 격리 없음)

Example:
    users = Collection(
        config,
        "list_users",
        items_key="users",
        model_factory=User,
        identifier_key="user_name",
    )
    for user in users:
        print(user.identifier, user.attribute("arn"))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any, Union

from awscore.client import Client
from awscore.config import Configuration
from awscore.model import Model
from awscore.parsers import AttributeTree

logger = logging.getLogger(__name__)

ModelFactory = Union[type[Model], Callable[[AttributeTree], Any]]


class CollectionState(Enum):
    """페이지네이션 상태"""

    START = "start"
    FETCHING = "fetching"
    YIELDING = "yielding"
    DONE = "done"


def _lookup(tree: AttributeTree, path: str) -> Any:
    """점(.)으로 구분된 경로로 중첩 값 조회 (예: "reservation_set.item")"""
    value: Any = tree
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _as_items(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    # 항목이 하나뿐인 XML 목록은 dict로 디코딩됨
    return [value]


def _build_item(
    factory: ModelFactory | None,
    item: Any,
    identifier_key: str,
    config: Configuration,
    client: Client,
) -> Any:
    """목록 항목을 factory로 변환 (Model 서브클래스면 받은 속성으로 캐시를 채움)"""
    if factory is None:
        return item
    if isinstance(factory, type) and issubclass(factory, Model):
        if isinstance(item, dict):
            return factory.from_attributes(item.get(identifier_key), config, item, client=client)
        return factory(item, config, client=client)
    return factory(item)


class Collection:
    """원격 목록 작업의 지연 페이지네이션 시퀀스

    Attributes:
        parent: Configuration 또는 부모 Model
        operation: 목록 작업 이름 (예: "list_users")
        params: 매 페이지 요청에 공통으로 보내는 파라미터
        items_key: 응답 트리에서 항목 목록의 경로
        cursor_param: 다음 페이지 요청에 커서를 보내는 파라미터 이름
        cursor_key: 응답 트리에서 다음 커서의 경로
        truncated_key: 응답 트리에서 "더 있음" 플래그의 경로 (None이면 커서만 사용)
        limit_param: 페이지 크기 파라미터 이름 (예: "max_items")
        page_size: 페이지당 요청 항목 수
        limit: 전체 최대 항목 수
        model_factory: 항목을 Model로 만드는 클래스 또는 함수 (None이면 AttributeTree 그대로)
        identifier_key: 항목에서 Model 식별자를 꺼내는 키
    """

    def __init__(
        self,
        parent: Configuration | Model,
        operation: str,
        params: dict[str, Any] | None = None,
        *,
        items_key: str = "items",
        cursor_param: str = "marker",
        cursor_key: str = "marker",
        truncated_key: str | None = "is_truncated",
        limit_param: str | None = None,
        page_size: int | None = None,
        limit: int | None = None,
        model_factory: ModelFactory | None = None,
        identifier_key: str = "id",
        parent_param: str | None = None,
        client: Client | None = None,
    ):
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        self.parent = parent
        self.operation = operation
        self.params = dict(params or {})
        self.items_key = items_key
        self.cursor_param = cursor_param
        self.cursor_key = cursor_key
        self.truncated_key = truncated_key
        self.limit_param = limit_param
        self.page_size = page_size
        self.limit = limit
        self.model_factory = model_factory
        self.identifier_key = identifier_key

        if isinstance(parent, Model):
            self.config = parent.config
            self.params[parent_param or parent.identifier_param] = parent.identifier
            self._client = client or parent.client
        else:
            self.config = parent
            self._client = client

        self._lock = threading.Lock()
        self._state = CollectionState.START
        self._cursor: str | None = None
        self._pages_fetched = 0
        self._yielded = 0
        # 가져왔지만 아직 내보내지 않은 항목은 _page[_position:]
        self._page: list[Any] = []
        self._position = 0
        self._last_page = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.operation!r}, state={self._state.value})"

    def __iter__(self) -> Iterator[Any]:
        return self.enumerate()

    @property
    def client(self) -> Client:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = Client(self.config)
        return self._client

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def cursor(self) -> str | None:
        """다음 페이지 요청에 사용할 커서"""
        return self._cursor

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    def reset(self) -> None:
        """상태를 START로 되돌려 처음부터 다시 열거할 수 있게 함"""
        self._state = CollectionState.START
        self._cursor = None
        self._pages_fetched = 0
        self._yielded = 0
        self._page = []
        self._position = 0
        self._last_page = False

    # =========================================================================
    # 열거
    # =========================================================================

    def pages(self) -> Iterator[list[AttributeTree]]:
        """페이지 단위로 원시 항목 목록을 지연 생성

        이전 열거가 페이지 중간에서 멈췄다면 그 페이지의 남은 항목부터 생성합니다.
        이미 DONE 상태면 아무것도 생성하지 않습니다.
        페이지 요청이 실패하면 에러가 그대로 전파되고, 상태는 실패 직전으로 돌아가
        같은 커서에서 다시 열거할 수 있습니다.
        """
        if self._position < len(self._page):
            rest = self._page[self._position :]
            self._consume(len(rest))
            yield rest
        while self._advance():
            page = self._page
            self._consume(len(page))
            yield page

    def enumerate(self) -> Iterator[Any]:
        """항목을 하나씩 지연 생성 (model_factory가 있으면 Model)"""
        while True:
            while self._position < len(self._page):
                item = self._page[self._position]
                self._consume(1)
                yield self._build(item)
            if not self._advance():
                return

    def first(self) -> Any | None:
        """첫 항목 (없으면 None)

        첫 페이지만 가져오며 Collection 상태는 바꾸지 않습니다.
        """
        head = Collection(
            self.config,
            self.operation,
            self.params,
            items_key=self.items_key,
            cursor_param=self.cursor_param,
            cursor_key=self.cursor_key,
            truncated_key=self.truncated_key,
            limit_param=self.limit_param,
            page_size=self.page_size,
            limit=1,
            model_factory=self.model_factory,
            identifier_key=self.identifier_key,
            client=self.client,
        )
        return next(head.enumerate(), None)

    # =========================================================================
    # 상태 전이
    # =========================================================================

    def _remaining(self) -> int | None:
        if self.limit is None:
            return None
        return self.limit - self._yielded

    def _consume(self, count: int) -> None:
        """버퍼 항목 count개를 내보낸 것으로 기록 (마지막 페이지를 다 내보내면 DONE)"""
        self._position += count
        self._yielded += count
        if self._last_page and self._position >= len(self._page):
            self._state = CollectionState.DONE

    def _advance(self) -> bool:
        """버퍼가 빈 상태에서 다음 페이지를 가져옴 (더 가져올 페이지가 없으면 False)"""
        if self._state is CollectionState.DONE or self._last_page:
            self._state = CollectionState.DONE
            return False
        remaining = self._remaining()
        if remaining is not None and remaining <= 0:
            self._state = CollectionState.DONE
            return False
        self._page = self._fetch_page()
        self._position = 0
        return True

    def _request_params(self) -> dict[str, Any]:
        params = dict(self.params)
        if self._cursor:
            params[self.cursor_param] = self._cursor
        if self.limit_param:
            size = self.page_size
            remaining = self._remaining()
            if remaining is not None:
                size = remaining if size is None else min(size, remaining)
            if size is not None:
                params[self.limit_param] = size
        return params

    def _fetch_page(self) -> list[AttributeTree]:
        """FETCHING 전이: 현재 커서로 한 페이지 요청"""
        remaining = self._remaining()
        previous = self._state
        self._state = CollectionState.FETCHING
        try:
            tree = self.client.call(self.operation, self._request_params())
        except Exception:
            self._state = previous
            raise

        self._pages_fetched += 1
        items = _as_items(_lookup(tree, self.items_key))
        if remaining is not None and len(items) > remaining:
            items = items[:remaining]

        next_cursor = _lookup(tree, self.cursor_key)
        truncated = _lookup(tree, self.truncated_key) if self.truncated_key else None
        logger.debug(
            f"{self.operation} 페이지 {self._pages_fetched}: {len(items)}개 항목, 다음 커서={next_cursor!r}"
        )

        if not next_cursor or truncated is False or (remaining is not None and len(items) >= remaining):
            self._cursor = None
            self._last_page = True
            self._state = CollectionState.YIELDING if items else CollectionState.DONE
        else:
            self._cursor = str(next_cursor)
            self._state = CollectionState.YIELDING
        return items

    def _build(self, item: Any) -> Any:
        return _build_item(self.model_factory, item, self.identifier_key, self.config, self.client)


class AttributeCollection:
    """부모 Model의 리스트 속성을 항목 시퀀스로 다루는 페이지네이션 없는 Collection

    예: 볼륨의 attachment_set, 그룹의 users

    Example:
        attachments = AttributeCollection(volume, "attachment_set", model_factory=Attachment,
                                          identifier_key="instance_id")
        for attachment in attachments:
            ...
    """

    def __init__(
        self,
        parent: Model,
        attribute: str,
        *,
        model_factory: ModelFactory | None = None,
        identifier_key: str = "id",
    ):
        self.parent = parent
        self.attribute = attribute
        self.model_factory = model_factory
        self.identifier_key = identifier_key

    def __repr__(self) -> str:
        return f"AttributeCollection({self.parent!r}, {self.attribute!r})"

    def __iter__(self) -> Iterator[Any]:
        return self.enumerate()

    def enumerate(self) -> Iterator[Any]:
        """부모 속성의 항목을 생성 (부모가 로드되지 않았으면 로드)"""
        for item in _as_items(self.parent.attribute(self.attribute)):
            yield self._build(item)

    def first(self) -> Any | None:
        return next(self.enumerate(), None)

    def _build(self, item: Any) -> Any:
        return _build_item(self.model_factory, item, self.identifier_key, self.parent.config, self.parent.client)
