"""
tests/awscore/test_awscore_inflection.py - 이름 변환 테스트
"""

import pytest

from awscore.inflection import local_keys, local_name, remote_keys, remote_name


class TestLocalName:
    """원격 이름 -> 로컬 이름"""

    @pytest.mark.parametrize(
        "remote,local",
        [
            ("UserName", "user_name"),
            ("volumeId", "volume_id"),
            ("AttachmentSet", "attachment_set"),
            ("MFADevices", "mfa_devices"),
            ("ListMFADevices", "list_mfa_devices"),
            ("SSHPublicKeyId", "ssh_public_key_id"),
            ("Ec2InstanceId", "ec2_instance_id"),
            ("IsTruncated", "is_truncated"),
        ],
    )
    def test_camel_case(self, remote, local):
        assert local_name(remote) == local

    def test_already_local(self):
        """이미 snake_case인 이름은 그대로"""
        assert local_name("user_name") == "user_name"

    def test_hyphen(self):
        assert local_name("x-amz-date") == "x_amz_date"

    def test_empty(self):
        assert local_name("") == ""


class TestRemoteName:
    """로컬 이름 -> 원격 이름"""

    def test_basic(self):
        assert remote_name("user_name") == "UserName"
        assert remote_name("describe_volumes") == "DescribeVolumes"

    def test_acronym(self):
        """약어 테이블의 단어는 대문자로"""
        assert remote_name("list_mfa_devices") == "ListMFADevices"
        assert remote_name("ssh_public_key_id") == "SSHPublicKeyId"

    def test_lower_first(self):
        assert remote_name("volume_id", lower_first=True) == "volumeId"

    def test_single_word(self):
        assert remote_name("marker") == "Marker"

    def test_already_remote(self):
        """이미 CamelCase인 이름은 그대로"""
        assert remote_name("DescribeVolumes") == "DescribeVolumes"

    @pytest.mark.parametrize("name", ["UserName", "AttachmentSet", "ListMFADevices", "MaxItems"])
    def test_round_trip(self, name):
        """원격 -> 로컬 -> 원격 변환이 원래 이름으로 돌아옴"""
        assert remote_name(local_name(name)) == name

    @pytest.mark.parametrize(
        "name,restored",
        [
            ("volumeId", "VolumeId"),
            ("DBInstanceIdentifier", "DbInstanceIdentifier"),
            ("OpenIDConnectProviderArn", "OpenIdConnectProviderArn"),
        ],
    )
    def test_lossy_without_options(self, name, restored):
        """lowerCamel과 테이블에 없는 약어는 기본 옵션으로는 복원되지 않음"""
        assert remote_name(local_name(name)) == restored

    def test_lower_first_round_trip(self):
        assert remote_name(local_name("volumeId"), lower_first=True) == "volumeId"

    @pytest.mark.parametrize(
        "name,acronyms",
        [
            ("DBInstanceIdentifier", {"db"}),
            ("DescribeDBSnapshots", {"DB"}),
            ("OpenIDConnectProviderArn", {"id"}),
        ],
    )
    def test_extra_acronyms_round_trip(self, name, acronyms):
        assert remote_name(local_name(name), acronyms=acronyms) == name

    def test_remote_name_escape_hatch(self):
        """약어 규칙이 섞이는 서비스는 원격 이름을 직접 넘김"""
        assert remote_name("OpenIDConnectProviderArn", acronyms={"db"}) == "OpenIDConnectProviderArn"
        assert remote_name("user_id", acronyms={"db"}) == "UserId"


class TestKeys:
    """AttributeTree 키 재귀 변환"""

    def test_local_keys_nested(self):
        tree = {"User": {"UserName": "bob", "Tags": [{"Key": "team", "Value": "ops"}]}}

        assert local_keys(tree) == {
            "user": {"user_name": "bob", "tags": [{"key": "team", "value": "ops"}]},
        }

    def test_remote_keys_nested(self):
        tree = {"key_schema": [{"attribute_name": "id", "key_type": "HASH"}]}

        assert remote_keys(tree) == {"KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}]}

    def test_scalars_untouched(self):
        assert local_keys([1, "A", None]) == [1, "A", None]

    def test_remote_keys_verbatim(self):
        """사용자 데이터 맵은 키 이름만 변환하고 값은 그대로"""
        params = {"table_name": "users", "item": {"user_id": {"S": "1"}, "email": {"S": "x"}}}

        assert remote_keys(params, verbatim_keys={"item"}) == {
            "TableName": "users",
            "Item": {"user_id": {"S": "1"}, "email": {"S": "x"}},
        }

    def test_local_keys_verbatim(self):
        data = {"Items": [{"user_id": {"S": "1"}}], "LastEvaluatedKey": {"user_id": {"S": "1"}}, "Count": 1}

        assert local_keys(data, verbatim_keys={"items", "last_evaluated_key"}) == {
            "items": [{"user_id": {"S": "1"}}],
            "last_evaluated_key": {"user_id": {"S": "1"}},
            "count": 1,
        }

    def test_remote_keys_acronyms_and_lower_first(self):
        assert remote_keys({"db_instance_identifier": "db-1"}, acronyms={"db"}) == {"DBInstanceIdentifier": "db-1"}
        assert remote_keys({"volume_id": "vol-1"}, lower_first=True) == {"volumeId": "vol-1"}
