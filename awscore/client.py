"""
awscore/client.py - 원격 작업 호출 (런타임 조립 지점)

Client는 하나의 논리적 작업을 다음 파이프라인으로 실행합니다.

    build_request -> (sign -> send -> parse -> classify) -> [RetryPolicy -> sleep -> 재서명] -> 결과

재시도 상태(시도 횟수)는 call 한 번의 지역 변수로만 존재하며 호출 간에 공유되지 않습니다.
재시도 여부는 Client만 결정하고, 전파하는 에러는 분류된 그대로 호출자에게 전달됩니다.

Example:
    from awscore import Client, Configuration

    with Client(config) as client:
        tree = client.call("get_user", {"user_name": "bob"})
        tree["user"]["arn"]
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from awscore.auth.signers import Signer, get_signer
from awscore.config import Configuration
from awscore.exceptions import CredentialsError, NetworkError, ServiceError
from awscore.parsers import AttributeTree, ParsedResponse, ResponseParser, get_parser
from awscore.request import Request, build_request
from awscore.retry.policy import NO_RETRY, RetryPolicy, get_error_code
from awscore.retry.types import Outcome
from awscore.transport import RequestsTransport, Transport, classify_response

logger = logging.getLogger(__name__)

# deadline이 거의 소진됐을 때도 0이 아닌 타임아웃을 넘기기 위한 하한 (초)
MIN_ATTEMPT_TIMEOUT = 0.001


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Client:
    """원격 API 클라이언트

    Signer, Transport, ResponseParser, RetryPolicy는 Configuration으로 선택되며
    테스트나 특수 환경을 위해 직접 주입할 수 있습니다.

    Attributes:
        config: Configuration (참조로 공유)
        transport: 전송 구현
        signer: 서명 전략
        parser: 응답 파서 전략
        retry_policy: 재시도 정책
    """

    def __init__(
        self,
        config: Configuration,
        *,
        transport: Transport | None = None,
        signer: Signer | None = None,
        parser: ResponseParser | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.transport = transport or RequestsTransport(user_agent=config.user_agent)
        self.signer = signer or get_signer(config.signature_version)
        self.parser = parser or get_parser(config.api_format, config.json_data_keys)
        self.retry_policy = retry_policy or RetryPolicy.from_config(config)
        self._sleep = sleep
        self._clock = clock

    def __repr__(self) -> str:
        return f"Client(service={self.config.service_name!r}, endpoint={self.config.endpoint_url!r})"

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Transport 자원 정리"""
        self.transport.close()

    def call(
        self,
        operation: str,
        params: dict[str, Any] | None = None,
        *,
        deadline: float | None = None,
    ) -> AttributeTree:
        """원격 작업 호출

        Args:
            operation: 로컬 작업 이름 (예: "describe_volumes")
            params: 로컬 이름 파라미터
            deadline: 재시도 대기를 포함한 전체 시간 예산 (초). None이면 제한 없음

        Returns:
            AttributeTree (로컬 이름 키)

        Raises:
            AWSCoreError: 재시도 후에도 실패한 경우 마지막으로 분류된 에러
        """
        return self.call_raw(operation, params, deadline=deadline).tree

    def call_raw(
        self,
        operation: str,
        params: dict[str, Any] | None = None,
        *,
        deadline: float | None = None,
    ) -> ParsedResponse:
        """원격 작업 호출 (요청 ID/상태 코드 포함 결과 반환)"""
        request = build_request(self.config, operation, params)
        started = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            outcome = self._attempt(request, self._attempt_timeout(started, deadline))
            if outcome.ok:
                parsed = outcome.unwrap()
                logger.debug(f"{request.operation} 성공 (시도 {attempt}회, request_id={parsed.request_id})")
                return parsed

            error = outcome.error
            decision = self.retry_policy.should_retry(attempt, error)
            if decision.retry and deadline is not None:
                if time.monotonic() - started + decision.delay >= deadline:
                    logger.debug(f"{request.operation} 시간 예산 {deadline}초 초과, 재시도 중단")
                    decision = NO_RETRY

            if not decision.retry:
                error.operation = request.operation
                error.attempts = attempt
                logger.debug(f"{request.operation} 실패 (시도 {attempt}회): {get_error_code(error)} - {error}")
                raise error

            logger.warning(
                f"{request.operation} 시도 {attempt} 실패 ({get_error_code(error)}), {decision.delay:.2f}초 후 재시도..."
            )
            self._sleep(decision.delay)

    def _attempt_timeout(self, started: float, deadline: float | None) -> tuple[float, float]:
        connect, read = self.config.timeout
        if deadline is None:
            return connect, read
        remaining = max(deadline - (time.monotonic() - started), MIN_ATTEMPT_TIMEOUT)
        return min(connect, remaining), min(read, remaining)

    def _attempt(self, request: Request, timeout: tuple[float, float]) -> Outcome[ParsedResponse]:
        """한 번의 시도: 새 타임스탬프로 서명 -> 전송 -> 파싱 -> 분류"""
        try:
            credentials = self.config.resolve_credentials()
            signed = self.signer.prepare(request, credentials, self._clock())
        except CredentialsError as e:
            return Outcome.failure(e)

        result = self.transport.send(signed, timeout)
        raw = result.response
        if raw is None:
            return Outcome.failure(result.error or NetworkError(f"응답 없음 ({request.host})"))

        logger.debug(f"{request.operation} 응답 HTTP {raw.status_code} ({len(raw.body)} bytes)")
        parsed = self.parser.parse(raw)
        remote_error = parsed.error if isinstance(parsed.error, ServiceError) else None
        error = classify_response(raw, remote_error)
        if error is not None:
            return Outcome.failure(error)
        # 2xx 응답이면 파싱 결과 그대로 (MalformedResponseError 포함)
        return parsed
