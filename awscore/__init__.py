"""
awscore - 클라우드 API 클라이언트 런타임 코어

서비스별 리소스 파사드가 공유하는 런타임입니다.
요청 서명, HTTP 전송, 재시도, 응답 파싱, 지연 로딩 Model, 지연 페이지네이션 Collection을 제공합니다.

아키텍처:
    Collection / Model / ServiceInterface
        └── Client.call(operation, params)
            ├── build_request  (Inflector로 로컬 이름 -> 원격 이름)
            ├── Signer         (v2 / v4, Configuration으로 선택)
            ├── Transport      (requests.Session)
            ├── ResponseParser (XML / JSON, Configuration으로 선택)
            └── RetryPolicy    (지수 백오프 + 지터)

사용 예시:
    from awscore import Client, Configuration, Credentials

    config = Configuration(
        endpoint="ec2.us-east-1.amazonaws.com",
        service_name="ec2",
        api_version="2011-12-15",
        credentials=Credentials("AKID", "SECRET"),
    )
    with Client(config) as client:
        tree = client.call("describe_volumes", {"volume_id": ["vol-123"]})
"""

__version__ = "0.1.0"

__all__ = [
    # Config
    "Configuration",
    # Auth
    "Credentials",
    "EnvironmentCredentialProvider",
    "StaticCredentialProvider",
    # Runtime
    "Client",
    "Model",
    "Collection",
    "CollectionState",
    "AttributeCollection",
    "ServiceInterface",
    "RetryPolicy",
    # Parallel
    "parallel_collect",
    "prefetch",
    # Exceptions
    "AWSCoreError",
    "ConfigurationError",
    "CredentialsError",
    "NetworkError",
    "MalformedResponseError",
    "ServiceError",
    "ServiceUnavailableError",
    "ClientError",
    "RemoteServiceError",
]

# Lazy import 매핑 테이블
_IMPORT_MAPPING = {
    # Config
    "Configuration": (".config", "Configuration"),
    # Auth
    "Credentials": (".auth.types", "Credentials"),
    "EnvironmentCredentialProvider": (".auth.types", "EnvironmentCredentialProvider"),
    "StaticCredentialProvider": (".auth.types", "StaticCredentialProvider"),
    # Runtime
    "Client": (".client", "Client"),
    "Model": (".model", "Model"),
    "Collection": (".collection", "Collection"),
    "CollectionState": (".collection", "CollectionState"),
    "AttributeCollection": (".collection", "AttributeCollection"),
    "ServiceInterface": (".service", "ServiceInterface"),
    "RetryPolicy": (".retry.policy", "RetryPolicy"),
    # Parallel
    "parallel_collect": (".parallel.executor", "parallel_collect"),
    "prefetch": (".parallel.executor", "prefetch"),
    # Exceptions
    "AWSCoreError": (".exceptions", "AWSCoreError"),
    "ConfigurationError": (".exceptions", "ConfigurationError"),
    "CredentialsError": (".exceptions", "CredentialsError"),
    "NetworkError": (".exceptions", "NetworkError"),
    "MalformedResponseError": (".exceptions", "MalformedResponseError"),
    "ServiceError": (".exceptions", "ServiceError"),
    "ServiceUnavailableError": (".exceptions", "ServiceUnavailableError"),
    "ClientError": (".exceptions", "ClientError"),
    "RemoteServiceError": (".exceptions", "RemoteServiceError"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드

    requests 같은 전송 의존성은 Client를 처음 참조할 때 로드됩니다.
    """
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
