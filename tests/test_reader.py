import io

import pytest

from imapkit.reader import (
    Literal,
    ParseError,
    RawString,
    Reader,
    parse_number,
    parse_string,
    parse_string_list,
)


def new_reader(data):
    b = io.BytesIO(data.encode())
    return b, Reader(b)


def rest(b):
    return b.read()


@pytest.mark.parametrize("f,n", [("42", 42), ("0", 0), (RawString("7"), 7)])
def test_parse_number(f, n):
    assert parse_number(f) == n


@pytest.mark.parametrize("f", ["-1", "1.2", None, Literal(b"cc")])
def test_parse_number_invalid(f):
    with pytest.raises(ParseError):
        parse_number(f)


@pytest.mark.parametrize(
    "field,expected",
    [(["a", "b", "c", "d"], ["a", "b", "c", "d"]), (["a"], ["a"]), ([], [])],
)
def test_parse_string_list(field, expected):
    assert parse_string_list(field) == expected


@pytest.mark.parametrize("field", [["a", 42, "c", "d"], ["a", None, "c", "d"], "Asuka FTW"])
def test_parse_string_list_invalid(field):
    with pytest.raises(ParseError):
        parse_string_list(field)


def test_parse_string_literal():
    assert parse_string(Literal(b"hello")) == "hello"


def test_read_sp():
    b, r = new_reader(" ")
    r.read_sp()
    assert rest(b) == b""
    _, r = new_reader("")
    with pytest.raises(EOFError):
        r.read_sp()


def test_read_crlf():
    b, r = new_reader("\r\n")
    r.read_crlf()
    assert rest(b) == b""
    _, r = new_reader("\n")
    r.read_crlf()
    for data in ["", "\r", "\r42"]:
        _, r = new_reader(data)
        with pytest.raises((ParseError, EOFError)):
            r.read_crlf()


def test_read_atom_nil():
    b, r = new_reader("NIL\r\n")
    assert r.read_atom() is None
    r.read_crlf()
    assert rest(b) == b""


def test_read_atom():
    b, r = new_reader("atom\r\n")
    assert r.read_atom() == "atom"
    r.read_crlf()
    assert rest(b) == b""


@pytest.mark.parametrize(
    "data", ["", "(hi there)\r\n", "{42}\r\n", '"\r\n', "abc]", "[abc]def]ghi"]
)
def test_read_atom_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_atom()


def test_read_literal_sync_sends_continuation():
    calls = []
    r = Reader(io.BytesIO(b"{7}\r\nabcdefg"), continues=lambda: calls.append(True))
    lit = r.read_literal()
    assert len(lit) == 7
    assert calls == [True]


def test_read_literal_non_sync():
    calls = []
    b = io.BytesIO(b"{7+}\r\nabcdefg")
    r = Reader(b, continues=lambda: calls.append(True))
    lit = r.read_literal()
    assert len(lit) == 7
    assert calls == []
    assert lit.read() == b"abcdefg"
    assert b.read() == b""


def test_read_literal():
    b, r = new_reader("{7}\r\nabcdefg")
    lit = r.read_literal()
    assert len(lit) == 7
    assert lit.read() == b"abcdefg"
    assert rest(b) == b""
    _, r = new_reader("{7}\nabcdefg")
    assert r.read_literal().read() == b"abcdefg"


@pytest.mark.parametrize(
    "data",
    ["", "[7}\r\nabcdefg", "{7]\r\nabcdefg", "{7.4}\r\nabcdefg", "{7}abcdefg",
     "{7}\rabcdefg", "{7}\r\nabcd"],
)
def test_read_literal_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_literal()


def test_read_literal_max_size():
    r = Reader(io.BytesIO(b"{7}\r\nabcdefg"), max_literal_size=3)
    with pytest.raises(ParseError):
        r.read_literal()


def test_read_quoted_string():
    b, r = new_reader('"hello gopher"\r\n')
    assert r.read_quoted_string() == "hello gopher"
    r.read_crlf()
    assert rest(b) == b""

    _, r = new_reader(
        "\"here's a backslash: \\\\, and here's a double quote: \\\" !\"\r\n"
    )
    assert r.read_quoted_string() == "here's a backslash: \\, and here's a double quote: \" !"


@pytest.mark.parametrize(
    "data", ["", 'hello gopher"\r\n', '"hello gopher\r\n', '"hello \\gopher"\r\n']
)
def test_read_quoted_string_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_quoted_string()


def test_read_fields():
    b, r = new_reader('field1 "field2"\r\n')
    assert r.read_fields() == ["field1", "field2"]
    r.read_crlf()
    assert rest(b) == b""


@pytest.mark.parametrize(
    "data",
    ["", 'fi"eld1 "field2"\r\n', "field1 ", "field1 (", 'field1"field2"\r\n',
     '"field1""field2"\r\n'],
)
def test_read_fields_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_fields()


def test_read_list():
    b, r = new_reader('(field1 "field2" {6}\r\nfield3 field4)')
    fields = r.read_list()
    assert len(fields) == 4
    assert fields[0] == "field1"
    assert fields[1] == "field2"
    assert isinstance(fields[2], Literal)
    assert fields[2].read() == b"field3"
    assert fields[3] == "field4"
    assert rest(b) == b""


def test_read_empty_list():
    b, r = new_reader("()")
    assert r.read_list() == []
    assert rest(b) == b""


@pytest.mark.parametrize(
    "data", ["", "[field1 field2 field3)", '(field1 fie"ld2 field3)', "(field1 field2 field3\r\n"]
)
def test_read_list_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_list()


def test_read_line():
    b, r = new_reader("field1 field2\r\n")
    assert r.read_line() == ["field1", "field2"]
    assert rest(b) == b""


@pytest.mark.parametrize("data", ["", "field1 field2\rabc"])
def test_read_line_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_line()


def test_read_resp_code():
    b, r = new_reader("[CAPABILITY NOOP STARTTLS]")
    code, fields = r.read_resp_code()
    assert code == "CAPABILITY"
    assert fields == ["NOOP", "STARTTLS"]
    assert rest(b) == b""


@pytest.mark.parametrize(
    "data",
    ["", "{CAPABILITY NOOP STARTTLS]", '[CAPABILITY NO"OP STARTTLS]', "[]",
     "[{3}\r\nabc]", "[CAPABILITY NOOP STARTTLS\r\n"],
)
def test_read_resp_code_invalid(data):
    _, r = new_reader(data)
    with pytest.raises((ParseError, EOFError)):
        r.read_resp_code()


def test_read_info():
    b, r = new_reader("I love potatoes.\r\n")
    assert r.read_info() == "I love potatoes."
    assert rest(b) == b""
    _, r = new_reader("I love potatoes.\n")
    assert r.read_info() == "I love potatoes."


@pytest.mark.parametrize(
    "data", ["I love potatoes.", "I love potatoes.\r", "I love potatoes.\rabc"]
)
def test_read_info_invalid(data):
    _, r = new_reader(data)
    with pytest.raises(EOFError):
        r.read_info()