"""
awscore/request.py - 요청/응답 값 타입과 요청 인코딩

주요 구성 요소:
- Request: 원격 작업 이름 + 원격 이름으로 변환된 파라미터
- SignedRequest: 서명이 끝난 단일 사용 요청 (재시도 시 새로 만듦)
- RawResponse: 상태 코드, 헤더, 본문 바이트
- build_request: 로컬 이름 파라미터를 포맷에 맞춰 Request로 변환

Example:
    request = build_request(config, "describe_volumes", {"volume_id": ["vol-1", "vol-2"]})
    request.params
    # {"Action": "DescribeVolumes", "Version": "2011-12-15",
    #  "VolumeId.member.1": "vol-1", "VolumeId.member.2": "vol-2"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from awscore.inflection import remote_keys, remote_name

if TYPE_CHECKING:
    from awscore.config import Configuration


@dataclass(frozen=True)
class Request:
    """서명 전 요청

    Attributes:
        operation: 원격 작업 이름 (예: "DescribeVolumes")
        params: 원격 이름 -> 값 (query 포맷은 평탄화된 문자열, json 포맷은 중첩 구조)
        host: 서명 대상 호스트
        path: 요청 경로
        method: HTTP 메서드
        service_name: 서명용 서비스 이름
        region: 서명용 리전
        api_format: "query" 또는 "json"
        headers: 서명 전 추가 헤더
        scheme: 전송 스킴 ("https" 또는 "http")
    """

    operation: str
    params: dict[str, Any]
    host: str
    path: str = "/"
    method: str = "POST"
    service_name: str = ""
    region: str = ""
    api_format: str = "query"
    headers: dict[str, str] = field(default_factory=dict)
    scheme: str = "https"

    def body(self) -> bytes:
        """json 포맷의 요청 본문 (query 포맷은 서명 단계에서 만듦)"""
        if self.api_format == "json":
            return json.dumps(self.params, separators=(",", ":"), default=_json_default).encode("utf-8")
        return b""


@dataclass(frozen=True)
class SignedRequest:
    """서명 완료 요청 (단일 사용)

    재시도 시에는 같은 바이트를 재전송하지 않고 새 타임스탬프로 다시 서명합니다.

    Attributes:
        request: 원본 Request
        url: 전송 URL (쿼리 문자열 포함 가능)
        headers: 전송 헤더
        body: 전송 본문
        signature: 계산된 서명
        timestamp: 서명 시각 (UTC)
    """

    request: Request
    url: str
    headers: dict[str, str]
    body: bytes
    signature: str
    timestamp: datetime

    @property
    def method(self) -> str:
        return self.request.method


@dataclass(frozen=True)
class RawResponse:
    """원시 HTTP 응답

    Attributes:
        status_code: HTTP 상태 코드
        headers: 응답 헤더
        body: 본문 바이트
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", "replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def request_id(self) -> str | None:
        """응답 헤더의 요청 ID"""
        for key, value in self.headers.items():
            if key.lower() in ("x-amzn-requestid", "x-amz-request-id"):
                return value
        return None


# =============================================================================
# 요청 인코딩
# =============================================================================


def build_request(config: Configuration, operation: str, params: dict[str, Any] | None = None) -> Request:
    """로컬 작업 이름/파라미터로 Request 생성

    Args:
        config: Configuration
        operation: 로컬 작업 이름 (예: "describe_volumes") 또는 원격 이름
        params: 로컬 이름 파라미터 (중첩 dict/list 허용)

    Returns:
        Request
    """
    remote_operation = remote_name(operation, acronyms=config.acronyms)
    lower_first = config.lower_camel_params
    params = params or {}

    if config.api_format == "json":
        headers = {
            "Content-Type": f"application/x-amz-json-{config.json_version}",
            "X-Amz-Target": f"{config.json_target_prefix}.{remote_operation}",
        }
        return Request(
            operation=remote_operation,
            params=remote_keys(params, lower_first, acronyms=config.acronyms, verbatim_keys=config.json_data_keys),
            host=config.host,
            path=config.base_path,
            method="POST",
            service_name=config.service_name,
            region=config.region,
            api_format="json",
            headers=headers,
            scheme=config.scheme,
        )

    flat: dict[str, str] = {"Action": remote_operation, "Version": config.api_version}
    for key, value in params.items():
        _flatten(flat, remote_name(key, lower_first, config.acronyms), value, config)

    return Request(
        operation=remote_operation,
        params=flat,
        host=config.host,
        path=config.base_path,
        method=config.http_method,
        service_name=config.service_name,
        region=config.region,
        api_format="query",
        scheme=config.scheme,
    )


def _flatten(out: dict[str, str], prefix: str, value: Any, config: Configuration) -> None:
    """중첩 값을 query 파라미터로 평탄화

    - dict: Prefix.SubKey
    - list: Prefix.member.N (member) 또는 Prefix.N (indexed), N은 1부터
    - None: 생략
    """
    if value is None:
        return
    if isinstance(value, dict):
        for key, sub in value.items():
            name = remote_name(key, config.lower_camel_params, config.acronyms)
            _flatten(out, f"{prefix}.{name}", sub, config)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value, start=1):
            name = f"{prefix}.member.{index}" if config.query_list_style == "member" else f"{prefix}.{index}"
            _flatten(out, name, item, config)
    else:
        out[prefix] = _scalar(value)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.timestamp()
    raise TypeError(f"JSON으로 직렬화할 수 없는 타입: {type(value).__name__}")
