# awscore/auth/types.py
"""
awscore/auth/types.py - 서명 자격 증명 타입 정의

포함 항목:
    - Credentials: 액세스 키 ID + 비밀 키 (+ 세션 토큰), 불변 값
    - CredentialProvider: 서명 시점에 자격 증명을 제공하는 추상 기본 클래스 (ABC)
    - StaticCredentialProvider: 고정 자격 증명 Provider
    - EnvironmentCredentialProvider: 환경 변수 기반 Provider

Note:
    Configuration은 Credentials 값 또는 CredentialProvider를 참조합니다.
    Provider를 쓰면 자격 증명 교체(rotation)가 이후 서명에 바로 반영됩니다.
    자격 증명 파일(~/.aws/credentials) 로딩은 이 패키지의 범위가 아닙니다.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from awscore.exceptions import CredentialsError

logger = logging.getLogger(__name__)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """비밀 값을 마스킹 (앞 몇 글자만 표시)"""
    if not value:
        return "<empty>"
    return f"{value[:visible]}{'*' * max(len(value) - visible, 0)}"


# =============================================================================
# Credentials
# =============================================================================


@dataclass(frozen=True)
class Credentials:
    """서명용 자격 증명

    Attributes:
        access_key_id: 액세스 키 ID
        secret_access_key: 비밀 액세스 키
        session_token: 임시 자격 증명의 세션 토큰 (옵션)
    """

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key_id={mask_secret(self.access_key_id)!r}, "
            f"secret_access_key='****', session_token={'set' if self.session_token else None})"
        )

    def validate(self) -> Credentials:
        """서명 가능한 형식인지 검사

        Returns:
            self

        Raises:
            CredentialsError: 키가 비어있거나 문자열이 아닌 경우
        """
        if not isinstance(self.access_key_id, str) or not self.access_key_id.strip():
            raise CredentialsError("access_key_id가 비어있거나 잘못되었습니다")
        if not isinstance(self.secret_access_key, str) or not self.secret_access_key:
            raise CredentialsError("secret_access_key가 비어있거나 잘못되었습니다")
        if self.session_token is not None and not isinstance(self.session_token, str):
            raise CredentialsError("session_token은 문자열이어야 합니다")
        return self


# =============================================================================
# Provider Interface (Abstract Base Class)
# =============================================================================


class CredentialProvider(ABC):
    """서명 시점마다 자격 증명을 제공하는 추상 기본 클래스

    Example:
        class VaultProvider(CredentialProvider):
            def load(self) -> Credentials:
                secret = vault.read("aws/creds")
                return Credentials(secret["key"], secret["secret"])
    """

    @abstractmethod
    def load(self) -> Credentials:
        """현재 유효한 자격 증명을 반환합니다.

        Raises:
            CredentialsError: 자격 증명을 찾을 수 없는 경우
        """
        pass


class StaticCredentialProvider(CredentialProvider):
    """고정된 자격 증명을 반환하는 Provider"""

    def __init__(self, credentials: Credentials):
        self._credentials = credentials

    def load(self) -> Credentials:
        return self._credentials


class EnvironmentCredentialProvider(CredentialProvider):
    """환경 변수에서 자격 증명을 읽는 Provider

    매 호출마다 환경 변수를 다시 읽으므로 프로세스 내 교체가 반영됩니다.

    환경 변수:
        AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_SESSION_TOKEN
    """

    def load(self) -> Credentials:
        access_key_id = os.environ.get("AWS_ACCESS_KEY_ID")
        secret_access_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
        if not access_key_id or not secret_access_key:
            raise CredentialsError("환경 변수에 AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY가 없습니다")

        logger.debug("환경 변수에서 자격 증명 로드: %s", mask_secret(access_key_id))
        return Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=os.environ.get("AWS_SESSION_TOKEN") or None,
        )


def resolve_credentials(source: Credentials | CredentialProvider | None) -> Credentials:
    """Credentials 값 또는 Provider를 검증된 Credentials로 변환

    Raises:
        CredentialsError: 자격 증명이 없거나 형식이 잘못된 경우
    """
    if source is None:
        raise CredentialsError()
    if isinstance(source, CredentialProvider):
        source = source.load()
    if not isinstance(source, Credentials):
        raise CredentialsError(f"지원하지 않는 자격 증명 타입: {type(source).__name__}")
    return source.validate()
