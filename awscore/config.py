"""
awscore/config.py - 클라이언트 설정

Configuration은 엔드포인트, 리전, 재시도 한도, 타임아웃, 자격 증명,
API 포맷/서명 버전 선택을 담는 불변 값입니다.
같은 Configuration에서 만든 모든 Client/Model/Collection이 참조로 공유합니다.

전역 기본 설정은 없습니다. 항상 명시적으로 생성해서 전달합니다.

Usage:
    from awscore.config import Configuration
    from awscore.auth import Credentials

    config = Configuration(
        endpoint="iam.amazonaws.com",
        service_name="iam",
        api_version="2010-05-08",
        credentials=Credentials("AKID", "SECRET"),
    )
    ec2_config = config.with_options(endpoint="ec2.us-east-1.amazonaws.com", service_name="ec2")
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from awscore.auth.types import CredentialProvider, Credentials, resolve_credentials
from awscore.exceptions import ConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.3
DEFAULT_MAX_DELAY = 20.0
DEFAULT_CONNECT_TIMEOUT = 10.0  # 초
DEFAULT_READ_TIMEOUT = 60.0  # 초
DEFAULT_USER_AGENT = "awscore-python/0.1.0"

VALID_API_FORMATS = ("query", "json")
VALID_SIGNATURE_VERSIONS = ("v2", "v4")
VALID_LIST_STYLES = ("member", "indexed")

# json 포맷에서 값이 사용자 데이터인 맵 (로컬 이름). 키 이름만 변환하고 하위 키는 그대로 둠
DEFAULT_JSON_DATA_KEYS: frozenset[str] = frozenset(
    {
        "item",
        "items",
        "key",
        "keys",
        "attributes",
        "attribute_updates",
        "expected",
        "exclusive_start_key",
        "last_evaluated_key",
        "expression_attribute_names",
        "expression_attribute_values",
        "key_conditions",
        "query_filter",
        "scan_filter",
        "request_items",
        "responses",
        "unprocessed_items",
        "unprocessed_keys",
    }
)


# =============================================================================
# 환경변수 헬퍼
# =============================================================================


def get_env_bool(key: str, default: bool = False) -> bool:
    """환경변수에서 불리언 값 조회"""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_env_int(key: str, default: int) -> int:
    """환경변수에서 정수 값 조회 (변환 실패 시 기본값)"""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_float(key: str, default: float) -> float:
    """환경변수에서 실수 값 조회 (변환 실패 시 기본값)"""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_default_region() -> str:
    """환경변수의 기본 리전 (AWS_REGION > AWS_DEFAULT_REGION > us-east-1)"""
    return os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class Configuration:
    """클라이언트 런타임 설정 (불변)

    Attributes:
        endpoint: 호스트명 또는 URL (예: "iam.amazonaws.com")
        service_name: 서명에 쓰는 서비스 이름 (예: "iam", "ec2")
        api_version: 원격 API 버전 (query 포맷의 Version 파라미터)
        region: 리전
        api_format: 요청/응답 포맷 ("query" 또는 "json")
        signature_version: 서명 알고리즘 ("v2" 또는 "v4")
        json_target_prefix: json 포맷의 X-Amz-Target 접두사 (예: "DynamoDB_20120810")
        json_version: json 포맷의 Content-Type 버전 ("1.0" 또는 "1.1")
        credentials: Credentials 값 또는 CredentialProvider
        max_retries: 재시도 가능한 실패의 최대 추가 시도 횟수
        base_delay: 백오프 기본 대기 시간 (초)
        max_delay: 백오프 최대 대기 시간 (초)
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        use_ssl: endpoint가 호스트명일 때 https 사용 여부
        http_method: query 포맷 요청 메서드
        query_list_style: 리스트 파라미터 평탄화 방식 ("member": Key.member.N, "indexed": Key.N)
        acronyms: 원격 이름에서 대문자로 쓰는 서비스별 약어 (예: {"db"} -> "DBInstanceIdentifier")
        lower_camel_params: 요청 파라미터 이름을 lowerCamel로 보낼지 여부 (예: "volumeId")
        json_data_keys: json 포맷에서 하위 키를 변환하지 않는 사용자 데이터 맵 (로컬 이름)
        user_agent: User-Agent 헤더
    """

    endpoint: str
    service_name: str
    api_version: str = ""
    region: str = DEFAULT_REGION
    api_format: str = "query"
    signature_version: str = "v4"
    json_target_prefix: str | None = None
    json_version: str = "1.1"
    credentials: Credentials | CredentialProvider | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    use_ssl: bool = True
    http_method: str = "POST"
    query_list_style: str = "member"
    user_agent: str = DEFAULT_USER_AGENT
    acronyms: frozenset[str] = frozenset()
    lower_camel_params: bool = False
    json_data_keys: frozenset[str] = DEFAULT_JSON_DATA_KEYS

    def __post_init__(self) -> None:
        object.__setattr__(self, "acronyms", frozenset(a.lower() for a in self.acronyms))
        object.__setattr__(self, "json_data_keys", frozenset(self.json_data_keys))
        if not self.endpoint:
            raise ConfigurationError("endpoint", "엔드포인트가 비어있습니다")
        if not self.service_name:
            raise ConfigurationError("service_name", "서비스 이름이 비어있습니다")
        if self.api_format not in VALID_API_FORMATS:
            raise ConfigurationError("api_format", f"지원하지 않는 포맷: {self.api_format}")
        if self.signature_version not in VALID_SIGNATURE_VERSIONS:
            raise ConfigurationError("signature_version", f"지원하지 않는 서명 버전: {self.signature_version}")
        if self.signature_version == "v2" and self.api_format != "query":
            raise ConfigurationError("signature_version", "v2 서명은 query 포맷에서만 사용할 수 있습니다")
        if self.api_format == "json" and not self.json_target_prefix:
            raise ConfigurationError("json_target_prefix", "json 포맷에는 X-Amz-Target 접두사가 필요합니다")
        if self.api_format == "query" and not self.api_version:
            raise ConfigurationError("api_version", "query 포맷에는 API 버전이 필요합니다")
        if self.query_list_style not in VALID_LIST_STYLES:
            raise ConfigurationError("query_list_style", f"지원하지 않는 리스트 방식: {self.query_list_style}")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries", "0 이상이어야 합니다")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("base_delay", "대기 시간은 0 이상이어야 합니다")
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ConfigurationError("timeout", "타임아웃은 0보다 커야 합니다")

    @classmethod
    def from_env(cls, **overrides: Any) -> Configuration:
        """환경변수 기반 설정 생성

        환경변수:
            AWS_REGION / AWS_DEFAULT_REGION: 리전
            AWSCORE_MAX_RETRIES: 최대 재시도 횟수
            AWSCORE_CONNECT_TIMEOUT / AWSCORE_READ_TIMEOUT: 타임아웃 (초)
            AWSCORE_USE_SSL: https 사용 여부

        Args:
            **overrides: 환경변수보다 우선하는 필드 값 (endpoint, service_name 필수)
        """
        values: dict[str, Any] = {
            "region": get_default_region(),
            "max_retries": get_env_int("AWSCORE_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            "connect_timeout": get_env_float("AWSCORE_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
            "read_timeout": get_env_float("AWSCORE_READ_TIMEOUT", DEFAULT_READ_TIMEOUT),
            "use_ssl": get_env_bool("AWSCORE_USE_SSL", True),
        }
        values.update(overrides)
        return cls(**values)

    def with_options(self, **changes: Any) -> Configuration:
        """일부 필드를 바꾼 새 Configuration 반환"""
        return dataclasses.replace(self, **changes)

    @property
    def endpoint_url(self) -> str:
        """스킴이 포함된 엔드포인트 URL"""
        if "://" in self.endpoint:
            return self.endpoint.rstrip("/")
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"

    @property
    def scheme(self) -> str:
        return urlsplit(self.endpoint_url).scheme

    @property
    def host(self) -> str:
        """서명에 쓰는 호스트 (포트 포함)"""
        return urlsplit(self.endpoint_url).netloc

    @property
    def base_path(self) -> str:
        """엔드포인트 URL의 경로 (없으면 "/")"""
        return urlsplit(self.endpoint_url).path or "/"

    @property
    def timeout(self) -> tuple[float, float]:
        """(연결, 읽기) 타임아웃"""
        return (self.connect_timeout, self.read_timeout)

    def resolve_credentials(self) -> Credentials:
        """서명 시점의 자격 증명 조회

        Raises:
            CredentialsError: 자격 증명이 없거나 형식이 잘못된 경우
        """
        return resolve_credentials(self.credentials)
