"""
tests/awscore/test_awscore_config.py - Configuration 테스트
"""

import dataclasses

import pytest

from awscore.auth.types import Credentials, EnvironmentCredentialProvider
from awscore.config import (
    DEFAULT_JSON_DATA_KEYS,
    DEFAULT_REGION,
    Configuration,
    get_default_region,
    get_env_bool,
    get_env_float,
    get_env_int,
)
from awscore.exceptions import ConfigurationError, CredentialsError


def _config(**overrides):
    values = {"endpoint": "iam.amazonaws.com", "service_name": "iam", "api_version": "2010-05-08"}
    values.update(overrides)
    return Configuration(**values)


class TestEnvHelpers:
    """환경변수 헬퍼 테스트"""

    def test_get_env_int(self, monkeypatch):
        monkeypatch.setenv("AWSCORE_TEST_INT", "7")
        assert get_env_int("AWSCORE_TEST_INT", 1) == 7

    def test_get_env_int_invalid(self, monkeypatch):
        monkeypatch.setenv("AWSCORE_TEST_INT", "abc")
        assert get_env_int("AWSCORE_TEST_INT", 1) == 1

    def test_get_env_float_missing(self, monkeypatch):
        monkeypatch.delenv("AWSCORE_TEST_FLOAT", raising=False)
        assert get_env_float("AWSCORE_TEST_FLOAT", 2.5) == 2.5

    @pytest.mark.parametrize("value,expected", [("1", True), ("true", True), ("Yes", True), ("0", False), ("off", False)])
    def test_get_env_bool(self, monkeypatch, value, expected):
        monkeypatch.setenv("AWSCORE_TEST_BOOL", value)
        assert get_env_bool("AWSCORE_TEST_BOOL") is expected

    def test_get_default_region(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        assert get_default_region() == DEFAULT_REGION

        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-northeast-2")
        assert get_default_region() == "ap-northeast-2"

        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        assert get_default_region() == "eu-west-1"


class TestConfiguration:
    """Configuration 생성/검증 테스트"""

    def test_defaults(self):
        config = _config()

        assert config.api_format == "query"
        assert config.signature_version == "v4"
        assert config.max_retries == 3
        assert config.timeout == (10.0, 60.0)

    def test_immutable(self):
        config = _config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.region = "eu-west-1"

    def test_with_options(self):
        config = _config()
        other = config.with_options(endpoint="ec2.amazonaws.com", service_name="ec2")

        assert other.endpoint == "ec2.amazonaws.com"
        assert other.api_version == config.api_version
        assert config.endpoint == "iam.amazonaws.com"

    def test_with_options_validates(self):
        with pytest.raises(ConfigurationError):
            _config().with_options(max_retries=-1)

    def test_name_options_defaults(self):
        config = _config()

        assert config.acronyms == frozenset()
        assert config.lower_camel_params is False
        assert config.json_data_keys == DEFAULT_JSON_DATA_KEYS
        assert "item" in config.json_data_keys

    def test_name_options_normalized(self):
        """약어는 소문자 frozenset으로, 데이터 키는 frozenset으로 정규화"""
        config = _config(acronyms=["DB", "Id"], json_data_keys=["item"])

        assert config.acronyms == frozenset({"db", "id"})
        assert config.json_data_keys == frozenset({"item"})

    @pytest.mark.parametrize(
        "overrides,key",
        [
            ({"endpoint": ""}, "endpoint"),
            ({"service_name": ""}, "service_name"),
            ({"api_format": "rest-xml"}, "api_format"),
            ({"signature_version": "v3"}, "signature_version"),
            ({"signature_version": "v2", "api_format": "json", "json_target_prefix": "X"}, "signature_version"),
            ({"api_format": "json"}, "json_target_prefix"),
            ({"api_version": ""}, "api_version"),
            ({"query_list_style": "flat"}, "query_list_style"),
            ({"max_retries": -1}, "max_retries"),
            ({"read_timeout": 0}, "timeout"),
        ],
    )
    def test_invalid(self, overrides, key):
        with pytest.raises(ConfigurationError) as exc_info:
            _config(**overrides)
        assert exc_info.value.config_key == key

    def test_endpoint_url_from_host(self):
        config = _config()
        assert config.endpoint_url == "https://iam.amazonaws.com"
        assert config.host == "iam.amazonaws.com"
        assert config.base_path == "/"
        assert config.scheme == "https"

    def test_endpoint_url_without_ssl(self):
        config = _config(use_ssl=False)
        assert config.endpoint_url == "http://iam.amazonaws.com"
        assert config.scheme == "http"

    def test_endpoint_url_explicit(self):
        config = _config(endpoint="http://localhost:4566/iam/")
        assert config.endpoint_url == "http://localhost:4566/iam"
        assert config.host == "localhost:4566"
        assert config.base_path == "/iam"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "ap-northeast-2")
        monkeypatch.setenv("AWSCORE_MAX_RETRIES", "5")
        monkeypatch.setenv("AWSCORE_READ_TIMEOUT", "30")

        config = Configuration.from_env(endpoint="iam.amazonaws.com", service_name="iam", api_version="2010-05-08")

        assert config.region == "ap-northeast-2"
        assert config.max_retries == 5
        assert config.read_timeout == 30.0

    def test_from_env_overrides_win(self, monkeypatch):
        monkeypatch.setenv("AWSCORE_MAX_RETRIES", "5")
        config = Configuration.from_env(
            endpoint="iam.amazonaws.com", service_name="iam", api_version="2010-05-08", max_retries=0
        )
        assert config.max_retries == 0


class TestResolveCredentials:
    """서명 시점 자격 증명 조회"""

    def test_static(self):
        creds = Credentials("AKID", "SECRET")
        assert _config(credentials=creds).resolve_credentials() is creds

    def test_missing(self):
        with pytest.raises(CredentialsError):
            _config().resolve_credentials()

    def test_provider_reads_each_time(self, monkeypatch):
        """Provider는 호출마다 다시 읽어 교체를 반영"""
        config = _config(credentials=EnvironmentCredentialProvider())

        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKID1")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "SECRET1")
        assert config.resolve_credentials().access_key_id == "AKID1"

        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKID2")
        assert config.resolve_credentials().access_key_id == "AKID2"
