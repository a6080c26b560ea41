"""
awscore/parsers.py - 응답 본문 디코딩

원시 응답 본문을 AttributeTree(중첩 dict/list + 스칼라)로 디코딩합니다.
키 이름은 Inflector로 로컬 이름(snake_case)으로 변환됩니다.

Configuration.api_format으로 선택되는 파서 전략:
- XmlResponseParser: query 포맷의 XML 응답
- JsonResponseParser: json 포맷의 JSON 응답

파서는 예외를 던지지 않고 Outcome을 돌려줍니다.
- 본문이 정상 형식이지만 에러 코드를 담고 있으면 RemoteServiceError
- 본문이 깨졌거나 잘렸으면 MalformedResponseError

Example:
    outcome = XmlResponseParser().parse(raw)
    if outcome.ok:
        outcome.value.tree        # {"user": {"user_name": "bob", ...}}
        outcome.value.request_id  # "7a62c49f-..."
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any

from awscore.exceptions import ConfigurationError, MalformedResponseError, RemoteServiceError
from awscore.inflection import local_keys, local_name
from awscore.request import RawResponse
from awscore.retry.types import Outcome

logger = logging.getLogger(__name__)

AttributeTree = dict[str, Any]

_INTEGER = re.compile(r"^-?(0|[1-9]\d*)$")
_LIST_ITEM_TAGS = frozenset({"member", "item"})
_METADATA_TAGS = frozenset({"ResponseMetadata", "requestId", "RequestId", "RequestID"})


@dataclass(frozen=True)
class ParsedResponse:
    """디코딩된 응답

    Attributes:
        tree: AttributeTree
        request_id: 원격 요청 ID
        status_code: HTTP 상태 코드
    """

    tree: AttributeTree = field(default_factory=dict)
    request_id: str | None = None
    status_code: int = 200


class ResponseParser(ABC):
    """응답 파서 추상 기본 클래스"""

    format: str = ""

    @abstractmethod
    def parse(self, raw: RawResponse) -> Outcome[ParsedResponse]:
        """원시 응답을 디코딩

        Returns:
            ParsedResponse 또는 RemoteServiceError / MalformedResponseError
        """
        pass


# =============================================================================
# XML
# =============================================================================


def _tag(element: ET.Element) -> str:
    """네임스페이스를 제거한 태그 이름"""
    return element.tag.rsplit("}", 1)[-1]


def _scalar(text: str | None) -> Any:
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    if _INTEGER.match(text):
        return int(text)
    if text in ("true", "false"):
        return text == "true"
    return text


def _element_value(element: ET.Element) -> Any:
    """XML 요소를 AttributeTree 값으로 변환

    - 자식 없음: 스칼라 (빈 요소는 None)
    - 자식이 모두 member/item: 리스트
    - 그 외: dict (같은 태그가 반복되면 리스트)
    """
    children = list(element)
    if not children:
        return _scalar(element.text)

    if all(_tag(child) in _LIST_ITEM_TAGS for child in children):
        return [_element_value(child) for child in children]

    result: dict[str, Any] = {}
    repeated: set[str] = set()
    for child in children:
        key = local_name(_tag(child))
        value = _element_value(child)
        if key in result:
            if key not in repeated:
                result[key] = [result[key]]
                repeated.add(key)
            result[key].append(value)
        else:
            result[key] = value
    return result


def _find(root: ET.Element, *names: str) -> ET.Element | None:
    for element in root.iter():
        if _tag(element) in names:
            return element
    return None


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _tag(child) == name:
            return (child.text or "").strip() or None
    return None


class XmlResponseParser(ResponseParser):
    """query 포맷 XML 응답 파서

    성공 응답:
        <GetUserResponse>
          <GetUserResult><User>...</User></GetUserResult>
          <ResponseMetadata><RequestId>...</RequestId></ResponseMetadata>
        </GetUserResponse>
        -> {"user": {...}}

    에러 응답:
        <ErrorResponse><Error><Code>...</Code><Message>...</Message></Error></ErrorResponse>
        <Response><Errors><Error><Code>...</Code>...</Error></Errors></Response>
    """

    format = "query"

    def parse(self, raw: RawResponse) -> Outcome[ParsedResponse]:
        if not raw.body.strip():
            return Outcome.success(ParsedResponse(request_id=raw.request_id, status_code=raw.status_code))

        try:
            root = ET.fromstring(raw.body)
        except ET.ParseError as e:
            return Outcome.failure(MalformedResponseError(f"XML 응답을 파싱할 수 없습니다: {e}", body=raw.body, cause=e))

        request_id_element = _find(root, "RequestId", "RequestID", "requestId")
        request_id = None
        if request_id_element is not None:
            request_id = (request_id_element.text or "").strip() or None
        request_id = request_id or raw.request_id

        error = self._parse_error(root, request_id, raw.status_code)
        if error is not None:
            return Outcome.failure(error)

        return Outcome.success(
            ParsedResponse(tree=self._parse_result(root), request_id=request_id, status_code=raw.status_code)
        )

    @staticmethod
    def _parse_error(root: ET.Element, request_id: str | None, status_code: int) -> RemoteServiceError | None:
        if _tag(root) not in ("ErrorResponse", "Response", "Error"):
            return None
        error = root if _tag(root) == "Error" else _find(root, "Error")
        if error is None:
            return None
        code = _child_text(error, "Code")
        if code is None:
            return None
        return RemoteServiceError(
            error_code=code,
            error_message=_child_text(error, "Message"),
            status_code=status_code,
            request_id=request_id,
        )

    @staticmethod
    def _parse_result(root: ET.Element) -> AttributeTree:
        children = [child for child in root if _tag(child) not in _METADATA_TAGS]
        if len(children) == 1 and _tag(children[0]).endswith("Result"):
            value = _element_value(children[0])
            if value is None:
                return {}
            if isinstance(value, dict):
                return value
            return {local_name(_tag(children[0])): value}

        container = ET.Element(root.tag)
        container.extend(children)
        value = _element_value(container)
        return value if isinstance(value, dict) else {}


# =============================================================================
# JSON
# =============================================================================


class JsonResponseParser(ResponseParser):
    """json 포맷 응답 파서

    에러 응답:
        {"__type": "com.amazonaws.dynamodb.v20120810#ResourceNotFoundException",
         "message": "Requested resource not found"}
    """

    format = "json"

    def __init__(self, data_keys: Collection[str] = ()):
        self.data_keys = frozenset(data_keys)

    def parse(self, raw: RawResponse) -> Outcome[ParsedResponse]:
        if not raw.body.strip():
            return Outcome.success(ParsedResponse(request_id=raw.request_id, status_code=raw.status_code))

        try:
            data = json.loads(raw.body)
        except ValueError as e:
            return Outcome.failure(
                MalformedResponseError(f"JSON 응답을 파싱할 수 없습니다: {e}", body=raw.body, cause=e)
            )

        if not isinstance(data, dict):
            return Outcome.failure(
                MalformedResponseError(f"JSON 응답이 객체가 아닙니다: {type(data).__name__}", body=raw.body)
            )

        code = data.get("__type") or self._header_error_type(raw)
        if code:
            return Outcome.failure(
                RemoteServiceError(
                    error_code=str(code).rsplit("#", 1)[-1],
                    error_message=data.get("message") or data.get("Message"),
                    status_code=raw.status_code,
                    request_id=raw.request_id,
                )
            )

        return Outcome.success(
            ParsedResponse(tree=local_keys(data, self.data_keys), request_id=raw.request_id, status_code=raw.status_code)
        )

    @staticmethod
    def _header_error_type(raw: RawResponse) -> str | None:
        for key, value in raw.headers.items():
            if key.lower() == "x-amzn-errortype" and value:
                # "ThrottlingException:http://internal.amazon.com/..."
                return value.split(":", 1)[0]
        return None


_PARSERS: dict[str, type[ResponseParser]] = {
    "query": XmlResponseParser,
    "json": JsonResponseParser,
}


def get_parser(api_format: str, data_keys: Collection[str] = ()) -> ResponseParser:
    """API 포맷 문자열로 파서 생성

    Args:
        api_format: "query" 또는 "json"
        data_keys: json 포맷에서 하위 키를 변환하지 않는 사용자 데이터 맵 (로컬 이름)

    Raises:
        ConfigurationError: 지원하지 않는 포맷
    """
    try:
        parser_class = _PARSERS[api_format]
    except KeyError:
        raise ConfigurationError("api_format", f"지원하지 않는 포맷: {api_format}") from None
    if parser_class is JsonResponseParser:
        return JsonResponseParser(data_keys)
    return parser_class()
