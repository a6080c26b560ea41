"""
tests/awscore/test_awscore_exceptions.py - 예외 계층 테스트
"""

import pytest

from awscore.exceptions import (
    AWSCoreError,
    ClientError,
    ConfigurationError,
    CredentialsError,
    MalformedResponseError,
    NetworkError,
    RemoteServiceError,
    ServiceError,
    ServiceUnavailableError,
    format_error_for_user,
    is_access_denied,
    is_not_found,
    is_throttling,
)
from awscore.retry.types import ErrorCategory


class TestAWSCoreError:
    """기본 예외 테스트"""

    def test_message_and_cause(self):
        cause = ValueError("bad")
        error = AWSCoreError("실패", cause=cause)

        assert error.message == "실패"
        assert error.cause is cause
        assert str(error) == "실패: bad"

    def test_attempts_in_str(self):
        error = AWSCoreError("실패")
        error.attempts = 4
        assert str(error) == "실패 (시도 4회)"

    def test_to_dict(self):
        error = NetworkError("연결 실패")
        error.operation = "DescribeVolumes"
        error.attempts = 2

        d = error.to_dict()

        assert d["error_type"] == "NetworkError"
        assert d["category"] == "network"
        assert d["operation"] == "DescribeVolumes"
        assert d["attempts"] == 2


class TestCategories:
    """분류 태그와 재시도 가능 여부"""

    @pytest.mark.parametrize(
        "error,category,retryable",
        [
            (ConfigurationError("endpoint", "x"), ErrorCategory.CONFIGURATION, False),
            (CredentialsError(), ErrorCategory.CREDENTIALS, False),
            (NetworkError("x"), ErrorCategory.NETWORK, True),
            (MalformedResponseError("x"), ErrorCategory.MALFORMED, False),
            (ServiceUnavailableError(status_code=503), ErrorCategory.SERVICE_UNAVAILABLE, True),
            (ClientError("InvalidParameterValue"), ErrorCategory.CLIENT, False),
            (RemoteServiceError("Odd"), ErrorCategory.REMOTE, False),
        ],
    )
    def test_category(self, error, category, retryable):
        assert error.category is category
        assert error.retryable is retryable
        assert isinstance(error, AWSCoreError)


class TestServiceError:
    """원격 서비스 에러 테스트"""

    def test_message_from_code(self):
        error = ClientError("InvalidParameterValue", "Value (x) for parameter size is invalid", 400, "req-1")

        assert str(error) == "InvalidParameterValue: Value (x) for parameter size is invalid"
        assert error.details["request_id"] == "req-1"

    def test_message_from_status(self):
        assert str(ServiceUnavailableError(status_code=503)) == "HTTP 503"

    def test_from_error(self):
        remote = RemoteServiceError("Throttling", "Rate exceeded", 200, "req-1")

        error = ServiceUnavailableError.from_error(remote, status_code=400)

        assert isinstance(error, ServiceUnavailableError)
        assert error.error_code == "Throttling"
        assert error.status_code == 400
        assert error.request_id == "req-1"

    def test_malformed_body_preview(self):
        error = MalformedResponseError("깨짐", body=b"<html>" + b"x" * 500)
        assert len(error.details["body_preview"]) == 200


class TestHelpers:
    """예외 유틸리티 함수 테스트"""

    def test_is_throttling(self):
        assert is_throttling(ServiceUnavailableError("Throttling")) is True
        assert is_throttling(ClientError("InvalidParameterValue")) is False
        assert is_throttling(ValueError()) is False

    def test_is_not_found(self):
        assert is_not_found(ClientError("NoSuchEntity")) is True

    def test_is_access_denied(self):
        assert is_access_denied(ClientError("AccessDenied")) is True

    def test_format_error_for_user(self):
        assert "권한" in format_error_for_user(ClientError("AccessDenied"))
        assert format_error_for_user(ClientError("Other", "msg")) == "Other: msg"


class TestPackageExports:
    """패키지 최상위 lazy export"""

    def test_lazy_exports(self):
        import awscore
        from awscore.client import Client
        from awscore.collection import Collection

        assert awscore.ClientError is ClientError
        assert awscore.Client is Client
        assert awscore.Collection is Collection
        assert set(awscore.__all__) <= set(awscore._IMPORT_MAPPING)

    def test_unknown_attribute(self):
        import awscore

        with pytest.raises(AttributeError):
            awscore.does_not_exist  # noqa: B018
