"""
awscore/service.py - 서비스 단위 진입점

ServiceInterface는 하나의 Configuration에 묶인 Client를 소유하고,
그 Client를 공유하는 Collection/Model을 만들어 줍니다.
서비스별 파사드(IAM, EC2 등)는 이 클래스를 상속해 작업 이름만 채웁니다.

Example:
    class IAM(ServiceInterface):
        def users(self) -> Collection:
            return self.collection("list_users", items_key="users", model_factory=User,
                                   identifier_key="user_name")

        def account_summary(self) -> dict:
            return self.summary_map("get_account_summary")

    iam = IAM(config)
    iam.account_summary()["users_quota"]
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from awscore.client import Client
from awscore.collection import Collection
from awscore.config import Configuration
from awscore.exceptions import MalformedResponseError
from awscore.inflection import local_name
from awscore.model import Model
from awscore.parsers import AttributeTree

logger = logging.getLogger(__name__)


class ServiceInterface:
    """Configuration 하나에 묶인 서비스 진입점

    Attributes:
        config: 공유 Configuration
    """

    def __init__(self, config: Configuration, *, client: Client | None = None):
        self.config = config
        self._client = client
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(service={self.config.service_name!r})"

    def __enter__(self) -> ServiceInterface:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def client(self) -> Client:
        """지연 생성되는 공유 Client"""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    logger.debug(f"{self.config.service_name} Client 생성: {self.config.endpoint_url}")
                    self._client = Client(self.config)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def call(self, operation: str, params: dict[str, Any] | None = None) -> AttributeTree:
        return self.client.call(operation, params)

    def collection(self, operation: str, params: dict[str, Any] | None = None, **options: Any) -> Collection:
        """이 서비스의 Client를 공유하는 Collection 생성

        Args:
            operation: 목록 작업 이름
            params: 공통 요청 파라미터
            **options: Collection 키워드 옵션 (items_key, model_factory 등)
        """
        return Collection(self.config, operation, params, client=self.client, **options)

    def model(self, model_class: type[Model], identifier: str, **options: Any) -> Model:
        """이 서비스의 Client를 공유하는 Model 생성 (네트워크 호출 없음)"""
        return model_class(identifier, self.config, client=self.client, **options)

    def summary_map(self, operation: str, map_key: str = "summary_map") -> dict[str, Any]:
        """키/값 엔트리 맵 응답을 로컬 이름 dict로 변환

        query 포맷의 맵은 다음처럼 디코딩됩니다.
            {"summary_map": {"entry": [{"key": "UsersQuota", "value": 5000}, ...]}}
        이를 {"users_quota": 5000, ...}로 바꿉니다.

        Raises:
            MalformedResponseError: 맵 키가 응답에 없는 경우
        """
        tree = self.client.call(operation)
        if map_key not in tree:
            raise MalformedResponseError(f"{operation} 응답에 {map_key} 항목이 없습니다")

        value = tree[map_key]
        if isinstance(value, dict) and "entry" in value:
            value = value["entry"]
        if isinstance(value, dict) and set(value) == {"key", "value"}:
            value = [value]

        if isinstance(value, list):
            return {local_name(str(entry["key"])): entry.get("value") for entry in value}
        if isinstance(value, dict):
            return {local_name(str(key)): item for key, item in value.items()}
        return {}
