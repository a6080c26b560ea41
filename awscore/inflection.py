"""
awscore/inflection.py - 원격 API 이름 <-> 로컬 이름 변환

원격 API는 "UserName", "volumeId", "MFADevices" 같은 CamelCase 이름을,
로컬 코드는 "user_name", "volume_id", "mfa_devices" 같은 snake_case 이름을 씁니다.

Example:
    local_name("AttachmentSet")      # "attachment_set"
    local_name("MFADevices")         # "mfa_devices"
    remote_name("user_name")         # "UserName"
    remote_name("mfa_devices")       # "MFADevices" (약어 테이블 사용)
    remote_name("db_instance_identifier", acronyms={"db"})  # "DBInstanceIdentifier"

local_name은 정보를 잃는 변환입니다. "volumeId"와 "VolumeId"는 모두 "volume_id"가 되고,
되돌리면 lower_first 옵션에 따라 한쪽으로만 돌아갑니다. 약어도 테이블에 있는 것만
대문자로 복원됩니다.
"""

from __future__ import annotations

import re
from collections.abc import Collection

# 원격 이름에서 전부 대문자로 쓰이는 약어 (예: "ListMFADevices", "SSHPublicKey")
ACRONYMS: frozenset[str] = frozenset({"mfa", "ssh"})

# "MFADevices" -> "MFA_Devices", "attachmentSet" -> "attachment_Set"
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def local_name(name: str) -> str:
    """원격 이름을 로컬(snake_case) 이름으로 변환

    Args:
        name: 원격 API 이름 (예: "UserName", "volumeId", "MFADevices")

    Returns:
        snake_case 이름 (예: "user_name", "volume_id", "mfa_devices")
    """
    if not name:
        return name
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    text = _WORD_BOUNDARY.sub(r"\1_\2", text)
    return text.replace("-", "_").lower()


def remote_name(name: str, lower_first: bool = False, acronyms: Collection[str] | None = None) -> str:
    """로컬 이름을 원격(CamelCase) 이름으로 변환

    Args:
        name: snake_case 이름 (예: "user_name")
        lower_first: True이면 첫 단어를 소문자로 유지 (예: "volumeId")
        acronyms: 기본 약어 테이블에 더할 서비스별 약어 (예: {"db"} -> "DBInstanceIdentifier")

    Returns:
        CamelCase 이름. 이미 원격 형식(밑줄 없음, 대문자 포함)인 이름은 그대로 반환하므로
        "OpenIDConnectProviderArn"처럼 약어 규칙이 서비스 안에서도 섞이는 이름은
        원격 이름을 직접 넘기면 됩니다.
    """
    if not name or "_" not in name and not name.islower():
        return name

    table = ACRONYMS if not acronyms else ACRONYMS | {a.lower() for a in acronyms}
    words = [w for w in name.split("_") if w]
    parts = [_camel_word(w, table) for w in words]
    if lower_first and parts:
        parts[0] = words[0].lower()
    return "".join(parts)


def _camel_word(word: str, table: Collection[str]) -> str:
    lowered = word.lower()
    if lowered in table:
        return lowered.upper()
    return lowered[:1].upper() + lowered[1:]


def local_keys(value, verbatim_keys: Collection[str] = ()):
    """AttributeTree의 매핑 키를 재귀적으로 로컬 이름으로 변환

    verbatim_keys(로컬 이름)에 해당하는 키의 값은 사용자 데이터로 보고
    하위 키를 바꾸지 않습니다 (예: DynamoDB "Item"의 속성 이름).
    """
    if isinstance(value, dict):
        result = {}
        for key, child in value.items():
            name = local_name(key)
            result[name] = child if name in verbatim_keys else local_keys(child, verbatim_keys)
        return result
    if isinstance(value, list):
        return [local_keys(v, verbatim_keys) for v in value]
    return value


def remote_keys(
    value,
    lower_first: bool = False,
    *,
    acronyms: Collection[str] | None = None,
    verbatim_keys: Collection[str] = (),
):
    """AttributeTree의 매핑 키를 재귀적으로 원격 이름으로 변환

    verbatim_keys(로컬 이름)에 해당하는 키는 이름만 바꾸고 값은 그대로 보냅니다.
    """
    if isinstance(value, dict):
        result = {}
        for key, child in value.items():
            name = remote_name(key, lower_first, acronyms)
            if local_name(key) in verbatim_keys:
                result[name] = child
            else:
                result[name] = remote_keys(child, lower_first, acronyms=acronyms, verbatim_keys=verbatim_keys)
        return result
    if isinstance(value, list):
        return [remote_keys(v, lower_first, acronyms=acronyms, verbatim_keys=verbatim_keys) for v in value]
    return value
