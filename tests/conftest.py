"""
tests/conftest.py - pytest 공통 픽스처

네트워크 없이 Client 파이프라인을 검증하기 위한 가짜 Transport와
고정 시각, 테스트용 Configuration을 제공합니다.

Usage:
    def test_something(make_client, xml_body):
        client, transport = make_client(RawResponse(200, body=xml_body("GetUser", "<User/>")))
        client.call("get_user")
        assert transport.call_count == 1
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from awscore.auth.types import Credentials  # noqa: E402
from awscore.client import Client  # noqa: E402
from awscore.config import Configuration  # noqa: E402
from awscore.exceptions import AWSCoreError  # noqa: E402
from awscore.request import RawResponse  # noqa: E402
from awscore.retry.policy import RetryPolicy  # noqa: E402
from awscore.transport import Transport, TransportResult, classify_status  # noqa: E402

FROZEN_NOW = datetime(2015, 8, 30, 12, 36, 0, tzinfo=timezone.utc)


# =============================================================================
# 가짜 Transport
# =============================================================================


class FakeTransport(Transport):
    """미리 넣어둔 응답/에러를 순서대로 돌려주는 Transport

    큐 항목:
        RawResponse: HTTP 응답 (상태 코드 분류 포함)
        AWSCoreError: 네트워크 수준 실패
    """

    def __init__(self, *items):
        self._queue = list(items)
        self.sent = []
        self.timeouts = []
        self.closed = False

    def queue(self, *items) -> None:
        self._queue.extend(items)

    @property
    def call_count(self) -> int:
        return len(self.sent)

    def send(self, signed, timeout):
        self.sent.append(signed)
        self.timeouts.append(timeout)
        if not self._queue:
            raise AssertionError(f"예상하지 못한 전송: {signed.request.operation}")
        item = self._queue.pop(0)
        if isinstance(item, AWSCoreError):
            return TransportResult(error=item)
        return TransportResult(response=item, error=classify_status(item))

    def close(self) -> None:
        self.closed = True


# =============================================================================
# 응답 본문 헬퍼
# =============================================================================


def make_xml_body(operation: str, inner: str, request_id: str = "req-0001") -> bytes:
    """query 포맷 성공 응답 본문"""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<{operation}Response xmlns="https://ec2.amazonaws.com/doc/2011-12-15/">'
        f"<{operation}Result>{inner}</{operation}Result>"
        f"<ResponseMetadata><RequestId>{request_id}</RequestId></ResponseMetadata>"
        f"</{operation}Response>"
    ).encode("utf-8")


def make_xml_error(code: str, message: str = "", request_id: str = "req-err") -> bytes:
    """query 포맷 에러 응답 본문"""
    return (
        f"<ErrorResponse><Error><Type>Sender</Type><Code>{code}</Code>"
        f"<Message>{message}</Message></Error><RequestId>{request_id}</RequestId></ErrorResponse>"
    ).encode("utf-8")


@pytest.fixture
def xml_body():
    return make_xml_body


@pytest.fixture
def xml_error():
    return make_xml_error


# =============================================================================
# 설정 픽스처
# =============================================================================


@pytest.fixture
def frozen_now():
    return FROZEN_NOW


@pytest.fixture
def credentials():
    return Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY")


@pytest.fixture
def query_config(credentials):
    """query 포맷 + v4 서명 설정"""
    return Configuration(
        endpoint="ec2.us-east-1.amazonaws.com",
        service_name="ec2",
        api_version="2011-12-15",
        region="us-east-1",
        credentials=credentials,
    )


@pytest.fixture
def json_config(credentials):
    """json 포맷 + v4 서명 설정"""
    return Configuration(
        endpoint="dynamodb.us-east-1.amazonaws.com",
        service_name="dynamodb",
        region="us-east-1",
        api_format="json",
        json_target_prefix="DynamoDB_20120810",
        json_version="1.0",
        credentials=credentials,
    )


@pytest.fixture
def fake_transport():
    """FakeTransport 클래스 (큐 항목을 인자로 생성)"""
    return FakeTransport


@pytest.fixture
def make_client(query_config):
    """가짜 Transport를 쓰는 Client 팩토리

    대기(sleep)는 실제로 하지 않고 sleeps 리스트에 기록합니다.

    Returns:
        (client, transport) 튜플을 만드는 함수
    """

    def factory(*items, config=None, retry_policy=None):
        transport = FakeTransport(*items)
        sleeps = []
        client = Client(
            config or query_config,
            transport=transport,
            retry_policy=retry_policy or RetryPolicy(max_retries=3, jitter=False),
            sleep=sleeps.append,
            clock=lambda: FROZEN_NOW,
        )
        client.sleeps = sleeps
        return client, transport

    return factory


@pytest.fixture
def ok_response():
    """RawResponse 생성 헬퍼"""

    def factory(body: bytes = b"", status: int = 200, headers=None):
        return RawResponse(status_code=status, headers=headers or {}, body=body)

    return factory
