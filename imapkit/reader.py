"""Parsing of IMAP wire syntax: atoms, quoted strings, literals and lists."""

from __future__ import annotations

import io
import re
from typing import Any, BinaryIO, Callable, Optional

SP = " "
CR = "\r"
LF = "\n"
DQUOTE = '"'
LITERAL_START = "{"
LITERAL_END = "}"
LIST_START = "("
LIST_END = ")"
RESP_CODE_START = "["
RESP_CODE_END = "]"
NIL_ATOM = "NIL"
QUOTED_SPECIALS = '"\\'

_DIGITS = re.compile(r"[0-9]+")
_MAX_UINT32 = 2**32 - 1


class ParseError(ValueError):
    """Raised when input does not follow IMAP syntax."""


class RawString(str):
    """A string written verbatim, never quoted."""


class Literal:
    """A literal string as defined in RFC 3501 section 4.3."""

    def __init__(self, data: bytes = b"") -> None:
        self._buf = io.BytesIO(bytes(data))

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(size)

    def __len__(self) -> int:
        return len(self._buf.getbuffer()) - self._buf.tell()

    def __repr__(self) -> str:
        return f"Literal({len(self)} bytes)"


def parse_number(f: Any) -> int:
    """Parse an unsigned 32-bit number from an atom."""
    if isinstance(f, int) and not isinstance(f, bool):
        if 0 <= f <= _MAX_UINT32:
            return f
        raise ParseError("number out of range")
    if not isinstance(f, str):
        raise ParseError("expected a number, got a non-atom")
    if not _DIGITS.fullmatch(f):
        raise ParseError(f"invalid number: {f!r}")
    n = int(f)
    if n > _MAX_UINT32:
        raise ParseError("number out of range")
    return n


def parse_string(f: Any) -> str:
    """Parse a string, which is either a literal, a quoted string or an atom."""
    if isinstance(f, str):
        return str(f)
    if isinstance(f, Literal):
        return f.read().decode("utf-8", "replace")
    raise ParseError("expected a string")


def parse_string_list(f: Any) -> list[str]:
    """Convert a field list into a list of strings."""
    if not isinstance(f, list):
        raise ParseError("expected a string list, got a non-list")
    try:
        return [parse_string(item) for item in f]
    except ParseError as exc:
        raise ParseError(f"cannot parse string in string list: {exc}") from None


def _utf8_extra(lead: int) -> int:
    if lead >> 5 == 0b110:
        return 1
    if lead >> 4 == 0b1110:
        return 2
    if lead >> 3 == 0b11110:
        return 3
    return 0


class Reader:
    """Reads IMAP syntax elements from a binary stream."""

    def __init__(
        self,
        stream: BinaryIO,
        continues: Optional[Callable[[], None]] = None,
        max_literal_size: int = 0,
    ) -> None:
        self._stream = stream
        self.continues = continues
        self.max_literal_size = max_literal_size
        self._pushback: list[str] = []
        self._last: Optional[str] = None
        self._brackets = 0
        self._in_resp_code = False

    def _read_rune(self) -> str:
        if self._pushback:
            ch = self._pushback.pop()
        else:
            b = self._stream.read(1)
            if not b:
                self._last = None
                raise EOFError("unexpected end of input")
            extra = _utf8_extra(b[0])
            if extra:
                b += self._stream.read(extra)
            decoded = b.decode("utf-8", "replace")
            ch = decoded[0]
            self._pushback.extend(reversed(decoded[1:]))
        self._last = ch
        return ch

    def _unread_rune(self) -> None:
        if self._last is not None:
            self._pushback.append(self._last)
            self._last = None

    def _read_until(self, delim: str) -> str:
        chars = []
        while True:
            ch = self._read_rune()
            chars.append(ch)
            if ch == delim:
                break
        self._last = None
        return "".join(chars)

    def _read_bytes(self, n: int) -> bytes:
        out = bytearray()
        while self._pushback and len(out) < n:
            out += self._pushback.pop().encode("utf-8")
        while len(out) < n:
            chunk = self._stream.read(n - len(out))
            if not chunk:
                raise EOFError("unexpected end of input in literal")
            out += chunk
        self._last = None
        return bytes(out)

    def read_sp(self) -> None:
        if self._read_rune() != SP:
            raise ParseError("expected a space")

    def read_crlf(self) -> None:
        ch = self._read_rune()
        if ch == LF:
            return
        if ch != CR:
            raise ParseError("line doesn't end with a CR")
        if self._read_rune() != LF:
            raise ParseError("line doesn't end with a LF")

    def read_atom(self) -> Optional[str]:
        """Read an atom; the NIL atom gives None."""
        self._brackets = 0
        chars = []
        while True:
            ch = self._read_rune()
            if self._brackets == 0 and ch in (LIST_START, LITERAL_START, DQUOTE):
                raise ParseError("atom contains forbidden char: " + ch)
            if ch in (CR, LF):
                break
            if self._brackets == 0 and ch in (SP, LIST_END):
                break
            if ch == RESP_CODE_END:
                if self._brackets == 0:
                    if self._in_resp_code:
                        break
                    raise ParseError("atom contains bad brackets nesting")
                self._brackets -= 1
            if ch == RESP_CODE_START:
                self._brackets += 1
            chars.append(ch)
        self._unread_rune()
        atom = "".join(chars)
        return None if atom == NIL_ATOM else atom

    def read_literal(self) -> Literal:
        if self._read_rune() != LITERAL_START:
            raise ParseError("literal string doesn't start with an open brace")
        spec = self._read_until(LITERAL_END)[:-1]
        non_sync = spec.endswith("+")
        if non_sync:
            spec = spec[:-1]
        if not _DIGITS.fullmatch(spec) or int(spec) > _MAX_UINT32:
            raise ParseError(f"cannot parse literal length: {spec!r}")
        n = int(spec)
        if self.max_literal_size > 0 and n > self.max_literal_size:
            raise ParseError("literal exceeding maximum size")
        self.read_crlf()
        if self.continues is not None and not non_sync:
            self.continues()
        return Literal(self._read_bytes(n))

    def read_quoted_string(self) -> str:
        if self._read_rune() != DQUOTE:
            raise ParseError("quoted string doesn't start with a double quote")
        chars = []
        escaped = False
        while True:
            ch = self._read_rune()
            if ch == "\\" and not escaped:
                escaped = True
                continue
            if ch in (CR, LF):
                self._unread_rune()
                raise ParseError("CR or LF not allowed in quoted string")
            if ch == DQUOTE and not escaped:
                break
            if escaped and ch not in QUOTED_SPECIALS:
                raise ParseError(
                    "quoted string cannot contain backslash followed by a "
                    "non-quoted-specials char"
                )
            chars.append(ch)
            escaped = False
        return "".join(chars)

    def read_fields(self) -> list[Any]:
        fields: list[Any] = []
        while True:
            ch = self._read_rune()
            self._unread_rune()
            if ch == CR:
                return fields
            if ch == LITERAL_START:
                fields.append(self.read_literal())
            elif ch == DQUOTE:
                fields.append(self.read_quoted_string())
            elif ch == LIST_START:
                fields.append(self.read_list())
            elif ch != LIST_END:
                fields.append(self.read_atom())

            ch = self._read_rune()
            if ch in (CR, LF, LIST_END, RESP_CODE_END):
                if ch in (CR, LF):
                    self._unread_rune()
                return fields
            if ch == LIST_START:
                self._unread_rune()
                continue
            if ch != SP:
                raise ParseError("fields are not separated by a space")

    def _last_char_is(self, expected: str) -> bool:
        self._unread_rune()
        return self._read_rune() == expected

    def read_list(self) -> list[Any]:
        if self._read_rune() != LIST_START:
            raise ParseError("list doesn't start with an open parenthesis")
        fields = self.read_fields()
        if not self._last_char_is(LIST_END):
            raise ParseError("list doesn't end with a close parenthesis")
        return fields

    def read_line(self) -> list[Any]:
        fields = self.read_fields()
        self._unread_rune()
        self.read_crlf()
        return fields

    def read_resp_code(self) -> tuple[str, list[Any]]:
        """Read a bracketed response code and its arguments."""
        if self._read_rune() != RESP_CODE_START:
            raise ParseError("response code doesn't start with an open bracket")
        self._in_resp_code = True
        try:
            fields = self.read_fields()
        finally:
            self._in_resp_code = False
        if not fields:
            raise ParseError("response code doesn't contain any field")
        code = fields[0]
        if not isinstance(code, str):
            raise ParseError("response code doesn't start with a string atom")
        if code == "":
            raise ParseError("response code is empty")
        if not self._last_char_is(RESP_CODE_END):
            raise ParseError("response code doesn't end with a close bracket")
        return code.upper(), fields[1:]

    def read_info(self) -> str:
        info = self._read_until(LF)
        info = info.removesuffix(LF).removesuffix(CR)
        return info.lstrip(" ")