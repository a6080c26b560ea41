"""
awscore/auth/signers.py - 요청 서명 알고리즘

Configuration.signature_version으로 선택되는 서명 전략들입니다.
같은 (request, credentials, timestamp) 입력에는 항상 같은 서명을 만들며
부수 효과가 없습니다.

주요 구성 요소:
- Signer: 서명 전략 추상 기본 클래스
- QuerySignerV2: query 파라미터 기반 HmacSHA256 서명 (Signature Version 2)
- SignerV4: 헤더 기반 AWS4-HMAC-SHA256 서명 (Signature Version 4)
- get_signer: 버전 문자열로 전략 선택

Example:
    signer = get_signer("v4")
    signed = signer.prepare(request, credentials, datetime.now(timezone.utc))
    signed.headers["Authorization"]
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from urllib.parse import quote

from awscore.exceptions import ConfigurationError, CredentialsError
from awscore.request import Request, SignedRequest

from .types import Credentials

V2_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
V4_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"
V4_DATE_FORMAT = "%Y%m%d"
V4_ALGORITHM = "AWS4-HMAC-SHA256"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"


def percent_encode(value: str) -> str:
    """RFC 3986 퍼센트 인코딩 (비예약 문자 A-Z a-z 0-9 - _ . ~ 만 유지)"""
    return quote(str(value), safe="-_.~")


def canonical_query(params: dict[str, str]) -> str:
    """이름순 정렬 + 이름/값 퍼센트 인코딩한 쿼리 문자열"""
    pairs = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in pairs)


def _utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _check_credentials(credentials: Credentials | None) -> Credentials:
    if credentials is None:
        raise CredentialsError()
    if not isinstance(credentials, Credentials):
        raise CredentialsError(f"지원하지 않는 자격 증명 타입: {type(credentials).__name__}")
    return credentials.validate()


def _url(request: Request, query: str = "") -> str:
    url = f"{request.scheme}://{request.host}{request.path or '/'}"
    return f"{url}?{query}" if query else url


# =============================================================================
# Signer Interface
# =============================================================================


class Signer(ABC):
    """서명 전략 추상 기본 클래스"""

    version: str = ""

    @abstractmethod
    def sign(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        """요청 서명 계산

        Raises:
            CredentialsError: 자격 증명이 없거나 형식이 잘못된 경우
        """
        pass

    @abstractmethod
    def prepare(self, request: Request, credentials: Credentials, timestamp: datetime) -> SignedRequest:
        """서명을 계산하고 전송 가능한 SignedRequest 조립

        Raises:
            CredentialsError: 자격 증명이 없거나 형식이 잘못된 경우
        """
        pass


# =============================================================================
# Signature Version 2
# =============================================================================


class QuerySignerV2(Signer):
    """Signature Version 2 (query 파라미터 서명)

    string-to-sign:
        METHOD\\nhost\\npath\\ncanonical-query
    """

    version = "v2"

    def signing_params(self, request: Request, credentials: Credentials, timestamp: datetime) -> dict[str, str]:
        """서명 대상 파라미터 (요청 파라미터 + 인증 파라미터)"""
        params = dict(request.params)
        params["AWSAccessKeyId"] = credentials.access_key_id
        params["SignatureMethod"] = "HmacSHA256"
        params["SignatureVersion"] = "2"
        params["Timestamp"] = _utc(timestamp).strftime(V2_TIMESTAMP_FORMAT)
        if credentials.session_token:
            params["SecurityToken"] = credentials.session_token
        return params

    def string_to_sign(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        credentials = _check_credentials(credentials)
        params = self.signing_params(request, credentials, timestamp)
        return "\n".join(
            [
                request.method.upper(),
                request.host.lower(),
                request.path or "/",
                canonical_query(params),
            ]
        )

    def sign(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        credentials = _check_credentials(credentials)
        digest = _hmac(
            credentials.secret_access_key.encode("utf-8"),
            self.string_to_sign(request, credentials, timestamp),
        )
        return base64.b64encode(digest).decode("ascii")

    def prepare(self, request: Request, credentials: Credentials, timestamp: datetime) -> SignedRequest:
        if request.api_format != "query":
            raise ConfigurationError("signature_version", "v2 서명은 query 포맷에서만 사용할 수 있습니다")
        credentials = _check_credentials(credentials)
        signature = self.sign(request, credentials, timestamp)
        params = self.signing_params(request, credentials, timestamp)
        query = f"{canonical_query(params)}&Signature={percent_encode(signature)}"

        headers = dict(request.headers)
        if request.method.upper() == "GET":
            url, body = _url(request, query), b""
        else:
            url, body = _url(request), query.encode("utf-8")
            headers["Content-Type"] = FORM_CONTENT_TYPE

        return SignedRequest(
            request=request,
            url=url,
            headers=headers,
            body=body,
            signature=signature,
            timestamp=_utc(timestamp),
        )


# =============================================================================
# Signature Version 4
# =============================================================================


class SignerV4(Signer):
    """Signature Version 4 (AWS4-HMAC-SHA256 헤더 서명)

    query 포맷 POST는 정렬된 폼 본문을, json 포맷은 JSON 본문을
    payload로 서명합니다.
    """

    version = "v4"

    def _payload_and_query(self, request: Request) -> tuple[bytes, str]:
        if request.api_format == "json":
            return request.body(), ""
        query = canonical_query(request.params)
        if request.method.upper() == "GET":
            return b"", query
        return query.encode("utf-8"), ""

    def _headers(self, request: Request, credentials: Credentials, timestamp: datetime) -> dict[str, str]:
        headers = dict(request.headers)
        if request.api_format == "query" and request.method.upper() != "GET":
            headers.setdefault("Content-Type", FORM_CONTENT_TYPE)
        headers["Host"] = request.host
        headers["X-Amz-Date"] = _utc(timestamp).strftime(V4_TIMESTAMP_FORMAT)
        if credentials.session_token:
            headers["X-Amz-Security-Token"] = credentials.session_token
        return headers

    @staticmethod
    def _signed_headers(headers: dict[str, str]) -> str:
        return ";".join(sorted(k.lower() for k in headers))

    def credential_scope(self, request: Request, timestamp: datetime) -> str:
        date = _utc(timestamp).strftime(V4_DATE_FORMAT)
        return f"{date}/{request.region}/{request.service_name}/aws4_request"

    def canonical_request(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        payload, query = self._payload_and_query(request)
        headers = self._headers(request, credentials, timestamp)
        canonical_headers = "".join(
            f"{k}:{' '.join(v.split())}\n" for k, v in sorted((k.lower(), v) for k, v in headers.items())
        )
        return "\n".join(
            [
                request.method.upper(),
                quote(request.path or "/", safe="/-_.~"),
                query,
                canonical_headers,
                self._signed_headers(headers),
                hashlib.sha256(payload).hexdigest(),
            ]
        )

    def string_to_sign(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        credentials = _check_credentials(credentials)
        canonical = self.canonical_request(request, credentials, timestamp)
        return "\n".join(
            [
                V4_ALGORITHM,
                _utc(timestamp).strftime(V4_TIMESTAMP_FORMAT),
                self.credential_scope(request, timestamp),
                hashlib.sha256(canonical.encode("utf-8")).hexdigest(),
            ]
        )

    def signing_key(self, request: Request, credentials: Credentials, timestamp: datetime) -> bytes:
        date = _utc(timestamp).strftime(V4_DATE_FORMAT)
        key = _hmac(f"AWS4{credentials.secret_access_key}".encode(), date)
        key = _hmac(key, request.region)
        key = _hmac(key, request.service_name)
        return _hmac(key, "aws4_request")

    def sign(self, request: Request, credentials: Credentials, timestamp: datetime) -> str:
        credentials = _check_credentials(credentials)
        key = self.signing_key(request, credentials, timestamp)
        string_to_sign = self.string_to_sign(request, credentials, timestamp)
        return hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    def prepare(self, request: Request, credentials: Credentials, timestamp: datetime) -> SignedRequest:
        credentials = _check_credentials(credentials)
        signature = self.sign(request, credentials, timestamp)
        payload, query = self._payload_and_query(request)
        headers = self._headers(request, credentials, timestamp)
        headers["Authorization"] = (
            f"{V4_ALGORITHM} Credential={credentials.access_key_id}/{self.credential_scope(request, timestamp)}, "
            f"SignedHeaders={self._signed_headers(headers)}, Signature={signature}"
        )
        return SignedRequest(
            request=request,
            url=_url(request, query),
            headers=headers,
            body=payload,
            signature=signature,
            timestamp=_utc(timestamp),
        )


_SIGNERS: dict[str, type[Signer]] = {
    "v2": QuerySignerV2,
    "v4": SignerV4,
}


def get_signer(version: str) -> Signer:
    """서명 버전 문자열로 Signer 생성

    Raises:
        ConfigurationError: 지원하지 않는 버전
    """
    try:
        return _SIGNERS[version]()
    except KeyError:
        raise ConfigurationError("signature_version", f"지원하지 않는 서명 버전: {version}") from None
