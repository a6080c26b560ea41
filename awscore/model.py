"""
awscore/model.py - 원격 엔티티의 지연 로딩 캐시 뷰

Model은 식별자 하나로 원격 엔티티를 가리킵니다.
생성 시에는 네트워크 호출이 없고, 첫 속성 조회 때 describe/get 작업으로
속성을 가져와 캐시합니다. 변경 작업 후에는 invalidate()로 캐시를 비웁니다.

동시성:
    같은 Model 인스턴스에서 첫 로드가 진행 중일 때 다른 스레드가 속성을 읽으면
    두 번째 호출을 만들지 않고 진행 중인 로드의 결과(또는 에러)를 기다립니다.
    같은 식별자의 다른 Model 인스턴스와는 캐시를 공유하지 않습니다.

Example:
    class User(Model):
        describe_operation = "get_user"
        identifier_param = "user_name"
        result_key = "user"

    user = User("bob", config)
    user.attribute("arn")      # 첫 조회: GetUser 호출
    user.attribute("user_id")  # 캐시에서 반환
    user.perform("update_user", {"new_path": "/ops/"})  # 호출 후 캐시 무효화
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from awscore.exceptions import ClientError
from awscore.parsers import AttributeTree

if TYPE_CHECKING:
    from awscore.client import Client
    from awscore.config import Configuration

logger = logging.getLogger(__name__)


class Model:
    """원격 엔티티 하나의 지연 로딩 캐시 뷰

    서브클래스는 클래스 속성으로 describe 작업을 지정합니다.

    Attributes:
        describe_operation: 속성을 가져오는 작업 이름 (예: "get_user")
        identifier_param: describe 작업에 식별자를 넘기는 파라미터 이름
        result_key: 응답 트리에서 엔티티 속성이 들어있는 키 (None이면 트리 전체,
            값이 리스트면 첫 항목)
    """

    describe_operation: str = "describe"
    identifier_param: str = "id"
    result_key: str | None = None

    def __init__(
        self,
        identifier: str,
        config: Configuration,
        *,
        client: Client | None = None,
        describe_operation: str | None = None,
        identifier_param: str | None = None,
        result_key: str | None = None,
    ):
        self.identifier = identifier
        self.config = config
        self._client = client
        if describe_operation is not None:
            self.describe_operation = describe_operation
        if identifier_param is not None:
            self.identifier_param = identifier_param
        if result_key is not None:
            self.result_key = result_key

        self._lock = threading.Lock()
        self._attributes: AttributeTree | None = None
        self._inflight: Future[AttributeTree] | None = None

    @classmethod
    def from_attributes(
        cls,
        identifier: str,
        config: Configuration,
        attributes: AttributeTree,
        **kwargs: Any,
    ) -> Model:
        """이미 받은 속성(예: 목록 응답의 항목)으로 캐시를 채운 Model 생성"""
        model = cls(identifier, config, **kwargs)
        model._attributes = dict(attributes)
        return model

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return type(self) is type(other) and self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.identifier))

    @property
    def client(self) -> Client:
        """이 Model이 사용하는 Client (없으면 Configuration으로 생성)"""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    from awscore.client import Client

                    self._client = Client(self.config)
        return self._client

    @property
    def is_loaded(self) -> bool:
        with self._lock:
            return self._attributes is not None

    @property
    def attributes(self) -> AttributeTree:
        """캐시된 속성의 복사본 (필요하면 로드)"""
        return dict(self.ensure_loaded())

    def attribute(self, name: str, default: Any = None) -> Any:
        """속성 하나 조회

        Args:
            name: 로컬 속성 이름 (예: "create_date")
            default: 원격 엔티티에 해당 속성이 없을 때 반환할 값

        Raises:
            AWSCoreError: 로드 실패 시 (빈 값으로 숨기지 않음)
        """
        return self.ensure_loaded().get(name, default)

    def ensure_loaded(self) -> AttributeTree:
        """캐시가 비어있으면 로드하고 캐시된 속성을 반환

        동시에 여러 스레드가 호출해도 원격 호출은 한 번만 일어납니다.
        """
        with self._lock:
            if self._attributes is not None:
                return self._attributes
            future = self._inflight
            owner = future is None
            if owner:
                future = self._inflight = Future()

        if not owner:
            return future.result()

        try:
            attributes = self.load()
        except BaseException as e:
            with self._lock:
                if self._inflight is future:
                    self._inflight = None
            future.set_exception(e)
            raise

        with self._lock:
            # 로드 중 invalidate()가 호출됐으면 이 결과는 캐시하지 않음
            if self._inflight is future:
                self._attributes = attributes
                self._inflight = None
        future.set_result(attributes)
        return attributes

    def load(self) -> AttributeTree:
        """describe 작업으로 원격 속성을 가져옴 (캐시 사용 안 함)"""
        logger.debug(f"{self!r} 속성 로드: {self.describe_operation}")
        tree = self.client.call(self.describe_operation, {self.identifier_param: self.identifier})
        return self.extract_attributes(tree)

    def extract_attributes(self, tree: AttributeTree) -> AttributeTree:
        """describe 응답 트리에서 엔티티 속성 부분을 꺼냄

        Raises:
            ClientError: result_key 값이 없거나 빈 목록인 경우 (error_code "NotFoundException")
        """
        if self.result_key is None:
            return tree
        value = tree.get(self.result_key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            error = ClientError(
                error_code="NotFoundException",
                error_message=f"{self!r}: {self.describe_operation} 응답에 {self.result_key!r} 항목이 없습니다",
            )
            error.operation = self.describe_operation
            raise error
        if not isinstance(value, dict):
            return {self.result_key: value}
        return value

    def invalidate(self) -> None:
        """캐시를 비움 (변경 작업 후 호출)"""
        with self._lock:
            self._attributes = None
            self._inflight = None

    def refresh(self) -> AttributeTree:
        """캐시를 무조건 비우고 다시 로드"""
        self.invalidate()
        return self.ensure_loaded()

    def perform(self, operation: str, params: dict[str, Any] | None = None) -> AttributeTree:
        """이 엔티티에 대한 변경 작업을 호출하고 캐시를 무효화

        식별자 파라미터는 자동으로 추가됩니다.
        """
        call_params = {self.identifier_param: self.identifier}
        call_params.update(params or {})
        try:
            return self.client.call(operation, call_params)
        finally:
            self.invalidate()
