"""IMAP responses: status, data and continuation requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from imapkit.reader import ParseError, Reader, parse_number

# Response codes from RFC 3501 section 7.1.
CODE_ALERT = "ALERT"
CODE_BAD_CHARSET = "BADCHARSET"
CODE_CAPABILITY = "CAPABILITY"
CODE_PARSE = "PARSE"
CODE_PERMANENT_FLAGS = "PERMANENTFLAGS"
CODE_READ_ONLY = "READ-ONLY"
CODE_READ_WRITE = "READ-WRITE"
CODE_TRY_CREATE = "TRYCREATE"
CODE_UID_NEXT = "UIDNEXT"
CODE_UID_VALIDITY = "UIDVALIDITY"
CODE_UNSEEN = "UNSEEN"


class StatusRespType(str, Enum):
    """The kind of a status response."""

    OK = "OK"
    NO = "NO"
    BAD = "BAD"
    PREAUTH = "PREAUTH"
    BYE = "BYE"


_STATUS_TYPES = {t.value: t for t in StatusRespType}


@dataclass
class StatusResp:
    """A status response, tagged or untagged."""

    tag: str = ""
    type: StatusRespType = StatusRespType.OK
    code: str = ""
    arguments: list[Any] = field(default_factory=list)
    info: str = ""


@dataclass
class DataResp:
    """A response carrying data fields."""

    tag: str = ""
    fields: list[Any] = field(default_factory=list)


@dataclass
class ContinuationReq:
    """A continuation request."""

    info: str = ""


Resp = Union[StatusResp, DataResp, ContinuationReq]


def _peek(reader: Reader) -> str:
    ch = reader._read_rune()
    reader._unread_rune()
    return ch


def _try_sp(reader: Reader) -> bool:
    try:
        reader.read_sp()
    except (ParseError, EOFError):
        reader._unread_rune()
        return False
    return True


def read_resp(reader: Reader) -> Resp:
    """Read a single response from a reader."""
    tag = reader.read_atom()
    if not isinstance(tag, str):
        raise ParseError("response tag is not an atom")

    if tag == "+":
        _try_sp(reader)
        return ContinuationReq(info=reader.read_info())

    reader.read_sp()

    fields: list[Any] = []
    try:
        atom = reader.read_atom()
    except (ParseError, EOFError):
        reader._unread_rune()
    else:
        fields.append(atom)
        if _try_sp(reader) and isinstance(atom, str) and atom in _STATUS_TYPES:
            resp = StatusResp(tag=tag, type=_STATUS_TYPES[atom])
            if _peek(reader) == "[":
                resp.code, resp.arguments = reader.read_resp_code()
            resp.info = reader.read_info()
            return resp

    fields.extend(reader.read_line())
    return DataResp(tag=tag, fields=fields)


def new_untagged_resp(fields: list[Any]) -> DataResp:
    """Create an untagged data response."""
    return DataResp(tag="*", fields=list(fields))


def parse_named_resp(resp: Resp) -> Optional[tuple[str, list[Any]]]:
    """Split a data response into its upper-case name and its other fields.

    Responses such as EXISTS put a number before the name; the number is then
    kept as the first field. Returns None when the response has no name.
    """
    if not isinstance(resp, DataResp) or not resp.fields:
        return None
    fields = resp.fields

    if len(fields) > 1 and isinstance(fields[1], str):
        try:
            parse_number(fields[0])
        except ParseError:
            pass
        else:
            return fields[1].upper(), [fields[0], *fields[2:]]

    if not isinstance(fields[0], str):
        return None
    return fields[0].upper(), list(fields[1:])