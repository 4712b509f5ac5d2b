import io

import pytest

from imapkit.reader import ParseError, Reader
from imapkit.response import (
    CODE_CAPABILITY,
    ContinuationReq,
    DataResp,
    StatusResp,
    StatusRespType,
    new_untagged_resp,
    parse_named_resp,
    read_resp,
)


def _read(text):
    return read_resp(Reader(io.BytesIO(text.encode())))


def test_read_continuation_req():
    resp = _read("+ send literal\r\n")
    assert resp == ContinuationReq(info="send literal")


def test_read_continuation_req_no_info():
    resp = _read("+\r\n")
    assert resp == ContinuationReq(info="")


def test_read_data_resp():
    resp = _read("* 1 EXISTS\r\n")
    assert isinstance(resp, DataResp)
    assert resp.tag == "*"
    assert resp.fields == ["1", "EXISTS"]


def test_read_data_resp_no_args():
    resp = _read("* SEARCH\r\n")
    assert isinstance(resp, DataResp)
    assert resp.tag == "*"
    assert resp.fields == ["SEARCH"]


@pytest.mark.parametrize(
    "text,expected",
    [
        (
            "* OK IMAP4rev1 Service Ready\r\n",
            StatusResp(tag="*", type=StatusRespType.OK, info="IMAP4rev1 Service Ready"),
        ),
        (
            "* PREAUTH Welcome Pauline!\r\n",
            StatusResp(tag="*", type=StatusRespType.PREAUTH, info="Welcome Pauline!"),
        ),
        (
            "a001 OK NOOP completed\r\n",
            StatusResp(tag="a001", type=StatusRespType.OK, info="NOOP completed"),
        ),
        (
            "a001 OK [READ-ONLY] SELECT completed\r\n",
            StatusResp(
                tag="a001", type=StatusRespType.OK, code="READ-ONLY", info="SELECT completed"
            ),
        ),
        (
            "a001 OK [CAPABILITY IMAP4rev1 UIDPLUS] LOGIN completed\r\n",
            StatusResp(
                tag="a001",
                type=StatusRespType.OK,
                code=CODE_CAPABILITY,
                arguments=["IMAP4rev1", "UIDPLUS"],
                info="LOGIN completed",
            ),
        ),
    ],
)
def test_read_status_resp(text, expected):
    assert _read(text) == expected


def test_read_resp_nil_tag():
    with pytest.raises(ParseError):
        _read("NIL OK done\r\n")


def test_read_resp_missing_space_after_tag():
    with pytest.raises(ParseError):
        _read("*\r\n")


@pytest.mark.parametrize(
    "fields,name,rest",
    [
        (["CAPABILITY", "IMAP4rev1"], "CAPABILITY", ["IMAP4rev1"]),
        (["42", "EXISTS"], "EXISTS", ["42"]),
        (["42", "FETCH", "blah"], "FETCH", ["42", "blah"]),
        (["search", "1"], "SEARCH", ["1"]),
    ],
)
def test_parse_named_resp(fields, name, rest):
    assert parse_named_resp(DataResp(fields=fields)) == (name, rest)


def test_parse_named_resp_unnamed():
    assert parse_named_resp(DataResp(fields=[])) is None
    assert parse_named_resp(DataResp(fields=[["list"]])) is None
    assert parse_named_resp(ContinuationReq(info="go on")) is None


def test_new_untagged_resp():
    resp = new_untagged_resp(["1", "EXISTS"])
    assert resp == DataResp(tag="*", fields=["1", "EXISTS"])