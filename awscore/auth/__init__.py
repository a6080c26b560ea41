"""
awscore/auth - 자격 증명과 요청 서명

지원하는 서명 방식:
- QuerySignerV2: Signature Version 2 (query 파라미터 HmacSHA256)
- SignerV4: Signature Version 4 (AWS4-HMAC-SHA256)

사용 예시:
    from awscore.auth import Credentials, get_signer

    signer = get_signer(config.signature_version)
    signed = signer.prepare(request, config.resolve_credentials(), now)
"""

from .signers import QuerySignerV2, Signer, SignerV4, canonical_query, get_signer, percent_encode
from .types import (
    CredentialProvider,
    Credentials,
    EnvironmentCredentialProvider,
    StaticCredentialProvider,
    mask_secret,
    resolve_credentials,
)

__all__: list[str] = [
    # Types
    "Credentials",
    "CredentialProvider",
    "StaticCredentialProvider",
    "EnvironmentCredentialProvider",
    "resolve_credentials",
    "mask_secret",
    # Signers
    "Signer",
    "QuerySignerV2",
    "SignerV4",
    "get_signer",
    "canonical_query",
    "percent_encode",
]
