"""
tests/awscore/test_awscore_parsers.py - 응답 파서 테스트
"""

import json
from xml.sax.saxutils import escape

import pytest

from awscore.config import DEFAULT_JSON_DATA_KEYS
from awscore.exceptions import ConfigurationError, MalformedResponseError, RemoteServiceError
from awscore.inflection import remote_name
from awscore.parsers import JsonResponseParser, XmlResponseParser, get_parser
from awscore.request import RawResponse


def encode_xml(value) -> str:
    """AttributeTree를 query 포맷 XML 조각으로 되돌리는 테스트용 인코더

    dict는 원격 이름 요소로, list는 member 요소로 인코딩합니다.
    """
    if isinstance(value, dict):
        return "".join(f"<{remote_name(k)}>{encode_xml(v)}</{remote_name(k)}>" for k, v in value.items())
    if isinstance(value, list):
        return "".join(f"<member>{encode_xml(v)}</member>" for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return escape(str(value))


class TestXmlResponseParser:
    """query 포맷 XML 파서 테스트"""

    @pytest.fixture
    def parser(self):
        return XmlResponseParser()

    def test_describe_volume(self, parser, xml_body):
        raw = RawResponse(200, body=xml_body("DescribeVolume", "<Size>8</Size><State>available</State>"))

        outcome = parser.parse(raw)

        assert outcome.ok
        assert outcome.value.tree == {"size": 8, "state": "available"}
        assert outcome.value.request_id == "req-0001"

    def test_member_list(self, parser, xml_body):
        inner = "<Users><member><UserName>bob</UserName></member><member><UserName>amy</UserName></member></Users>"

        tree = parser.parse(RawResponse(200, body=xml_body("ListUsers", inner))).unwrap().tree

        assert tree == {"users": [{"user_name": "bob"}, {"user_name": "amy"}]}

    def test_single_member_is_list(self, parser, xml_body):
        inner = "<Users><member><UserName>bob</UserName></member></Users>"

        tree = parser.parse(RawResponse(200, body=xml_body("ListUsers", inner))).unwrap().tree

        assert tree == {"users": [{"user_name": "bob"}]}

    def test_item_list_without_result_wrapper(self, parser):
        """EC2 스타일 응답 (Result 래퍼 없음, item 목록)"""
        body = (
            b'<DescribeVolumesResponse xmlns="http://ec2.amazonaws.com/doc/2011-12-15/">'
            b"<requestId>req-ec2</requestId>"
            b"<volumeSet><item><volumeId>vol-1</volumeId><size>8</size></item></volumeSet>"
            b"</DescribeVolumesResponse>"
        )

        outcome = parser.parse(RawResponse(200, body=body))

        assert outcome.value.tree == {"volume_set": [{"volume_id": "vol-1", "size": 8}]}
        assert outcome.value.request_id == "req-ec2"

    def test_repeated_tags_become_list(self, parser, xml_body):
        inner = "<SummaryMap><entry><key>Users</key><value>2</value></entry><entry><key>Groups</key><value>1</value></entry></SummaryMap>"

        tree = parser.parse(RawResponse(200, body=xml_body("GetAccountSummary", inner))).unwrap().tree

        assert tree == {"summary_map": {"entry": [{"key": "Users", "value": 2}, {"key": "Groups", "value": 1}]}}

    def test_scalar_coercion(self, parser, xml_body):
        inner = "<IsTruncated>false</IsTruncated><Count>-3</Count><Zip>007</Zip><Marker/><Name>bob</Name>"

        tree = parser.parse(RawResponse(200, body=xml_body("ListUsers", inner))).unwrap().tree

        assert tree == {"is_truncated": False, "count": -3, "zip": "007", "marker": None, "name": "bob"}

    def test_empty_body(self, parser):
        outcome = parser.parse(RawResponse(200, headers={"x-amzn-RequestId": "r1"}))

        assert outcome.value.tree == {}
        assert outcome.value.request_id == "r1"

    def test_error_response(self, parser, xml_error):
        raw = RawResponse(400, body=xml_error("InvalidParameterValue", "bad size"))

        outcome = parser.parse(raw)

        assert not outcome.ok
        assert isinstance(outcome.error, RemoteServiceError)
        assert outcome.error.error_code == "InvalidParameterValue"
        assert outcome.error.error_message == "bad size"
        assert outcome.error.request_id == "req-err"
        assert outcome.error.status_code == 400

    def test_ec2_error_envelope(self, parser):
        body = (
            b"<Response><Errors><Error><Code>InvalidVolume.NotFound</Code>"
            b"<Message>The volume does not exist</Message></Error></Errors>"
            b"<RequestID>req-9</RequestID></Response>"
        )

        outcome = parser.parse(RawResponse(400, body=body))

        assert outcome.error.error_code == "InvalidVolume.NotFound"
        assert outcome.error.request_id == "req-9"

    def test_malformed(self, parser):
        outcome = parser.parse(RawResponse(200, body=b"<DescribeVolumesResponse><volumeSet>"))

        assert isinstance(outcome.error, MalformedResponseError)
        assert outcome.error.details["body_preview"].startswith("<DescribeVolumesResponse>")

    def test_round_trip(self, parser, xml_body):
        """파싱 결과를 다시 인코딩해 파싱하면 같은 키/값"""
        tree = {
            "volume_set": [
                {
                    "volume_id": "vol-1",
                    "size": 8,
                    "encrypted": False,
                    "attachment_set": [{"instance_id": "i-1", "device": "/dev/sdf"}],
                },
                {"volume_id": "vol-2", "size": 100, "encrypted": True, "snapshot_id": "snap-<1>"},
            ],
            "next_token": "abc",
        }

        first = parser.parse(RawResponse(200, body=xml_body("DescribeVolumes", encode_xml(tree)))).unwrap().tree
        second = parser.parse(RawResponse(200, body=xml_body("DescribeVolumes", encode_xml(first)))).unwrap().tree

        assert first == tree
        assert second == first


class TestJsonResponseParser:
    """json 포맷 파서 테스트"""

    @pytest.fixture
    def parser(self):
        return JsonResponseParser()

    def test_success(self, parser):
        body = json.dumps({"Table": {"TableName": "users", "ItemCount": 3}}).encode()

        outcome = parser.parse(RawResponse(200, headers={"x-amzn-RequestId": "r1"}, body=body))

        assert outcome.value.tree == {"table": {"table_name": "users", "item_count": 3}}
        assert outcome.value.request_id == "r1"

    def test_error_type(self, parser):
        body = json.dumps(
            {"__type": "com.amazonaws.dynamodb.v20120810#ResourceNotFoundException", "message": "not found"}
        ).encode()

        outcome = parser.parse(RawResponse(400, body=body))

        assert outcome.error.error_code == "ResourceNotFoundException"
        assert outcome.error.error_message == "not found"

    def test_error_type_header(self, parser):
        raw = RawResponse(400, headers={"X-Amzn-ErrorType": "ThrottlingException:http://internal/"}, body=b"{}")

        assert parser.parse(raw).error.error_code == "ThrottlingException"

    def test_invalid_json(self, parser):
        assert isinstance(parser.parse(RawResponse(200, body=b'{"Table": ')).error, MalformedResponseError)

    def test_not_object(self, parser):
        assert isinstance(parser.parse(RawResponse(200, body=b"[1, 2]")).error, MalformedResponseError)

    def test_empty_body(self, parser):
        assert parser.parse(RawResponse(200)).value.tree == {}

    def test_data_keys_verbatim(self):
        """Item/Items 안의 속성 이름은 원격 그대로 유지"""
        body = json.dumps(
            {
                "Items": [{"user_id": {"S": "1"}, "Email": {"S": "x"}}],
                "LastEvaluatedKey": {"user_id": {"S": "1"}},
                "ConsumedCapacity": {"TableName": "users", "CapacityUnits": 0.5},
            }
        ).encode()

        tree = JsonResponseParser(DEFAULT_JSON_DATA_KEYS).parse(RawResponse(200, body=body)).value.tree

        assert tree == {
            "items": [{"user_id": {"S": "1"}, "Email": {"S": "x"}}],
            "last_evaluated_key": {"user_id": {"S": "1"}},
            "consumed_capacity": {"table_name": "users", "capacity_units": 0.5},
        }


class TestGetParser:
    """파서 선택"""

    def test_formats(self):
        assert isinstance(get_parser("query"), XmlResponseParser)
        assert isinstance(get_parser("json"), JsonResponseParser)

    def test_json_data_keys(self):
        parser = get_parser("json", {"item"})

        assert parser.data_keys == frozenset({"item"})

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            get_parser("rest-xml")
