"""Message flags, parameter lists and MIME encoded-word header values."""

from __future__ import annotations

import base64
import binascii
import codecs
import re
from typing import Any, Optional

from imapkit.reader import ParseError, parse_string

# System message flags, RFC 3501 section 2.3.2.
SEEN_FLAG = "\\Seen"
ANSWERED_FLAG = "\\Answered"
FLAGGED_FLAG = "\\Flagged"
DELETED_FLAG = "\\Deleted"
DRAFT_FLAG = "\\Draft"
RECENT_FLAG = "\\Recent"

# A flag signalling a message that is likely important, RFC 8457 section 2.
IMPORTANT_FLAG = "$Important"

# In permanent flags, tells that new keywords can be created by storing them.
TRY_CREATE_FLAG = "\\*"

SYSTEM_FLAGS = (
    SEEN_FLAG,
    ANSWERED_FLAG,
    FLAGGED_FLAG,
    DELETED_FLAG,
    DRAFT_FLAG,
    RECENT_FLAG,
)

_CANONICAL_FLAGS = {flag.lower(): flag for flag in SYSTEM_FLAGS}

_ENCODED_WORD = re.compile(r"=\?([^?\s]+)\?([QqBb])\?(.*?)\?=")
_BAD_Q_ESCAPE = re.compile(rb"=(?![0-9A-Fa-f]{2})")
_Q_ESCAPE = re.compile(rb"=([0-9A-Fa-f]{2})")

_CHARSET = "utf-8"
_MAX_ENCODED_WORD = 75
_MAX_CONTENT = _MAX_ENCODED_WORD - len("=?") - len(_CHARSET) - len("?q?") - len("?=")


class CharsetError(ValueError):
    """Raised when an encoded word uses a charset that cannot be decoded."""


def canonical_flag(flag: str) -> str:
    """Return the canonical form of a flag.

    System flags keep the case of RFC 3501; other flags are lower-cased.
    """
    lowered = flag.lower()
    return _CANONICAL_FLAGS.get(lowered, lowered)


def parse_param_list(fields: Optional[list[Any]]) -> dict[str, str]:
    """Parse a list of alternating parameter names and values."""
    strings: list[str] = []
    for f in fields or []:
        try:
            strings.append(parse_string(f))
        except ParseError as exc:
            raise ParseError(f"Parameter list contains a non-string: {exc}") from None
    if len(strings) % 2 and strings[-1] != "":
        raise ParseError("Parameter list contains a key without a value")
    return dict(zip(strings[0::2], strings[1::2]))


def format_param_list(params: dict[str, str]) -> list[Any]:
    """Return alternating parameter names and values."""
    fields: list[Any] = []
    for key, value in params.items():
        fields.extend([key, value])
    return fields


def _q_decode(text: str) -> Optional[bytes]:
    try:
        raw = text.encode("latin-1")
    except UnicodeEncodeError:
        return None
    raw = raw.replace(b"_", b" ")
    if _BAD_Q_ESCAPE.search(raw):
        return None
    return _Q_ESCAPE.sub(lambda m: bytes([int(m[1], 16)]), raw)


def _b_decode(text: str) -> Optional[bytes]:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None


def _decode_word(charset: str, encoding: str, text: str) -> Optional[str]:
    raw = _b_decode(text) if encoding in "Bb" else _q_decode(text)
    if raw is None:
        return None
    try:
        codecs.lookup(charset)
    except LookupError:
        raise CharsetError(f"imap: unhandled charset {charset!r}") from None
    return raw.decode(charset, "replace")


def decode_header(value: str) -> str:
    """Decode the MIME encoded words of a header value.

    Malformed encoded words are left as they are; an unknown charset raises
    CharsetError.
    """
    out: list[str] = []
    pos = 0
    had_word = False
    for m in _ENCODED_WORD.finditer(value):
        decoded = _decode_word(*m.groups())
        if decoded is None:
            continue
        gap = value[pos:m.start()]
        if not had_word or gap.strip(" \t\r\n"):
            out.append(gap)
        out.append(decoded)
        pos = m.end()
        had_word = True
    out.append(value[pos:])
    return "".join(out)


def _decoded_or_raw(value: str) -> str:
    try:
        return decode_header(value)
    except CharsetError:
        return value


def _needs_encoding(value: str) -> bool:
    return any((ch < " " or ch > "~") and ch != "\t" for ch in value)


def _q_byte(b: int) -> str:
    if b == 0x20:
        return "_"
    if 0x21 <= b <= 0x7E and b not in b"=?_":
        return chr(b)
    return f"={b:02X}"


def encode_header(value: str) -> str:
    """Encode a header value as Q-encoded UTF-8 words when it needs it."""
    if not _needs_encoding(value):
        return value
    words: list[str] = []
    current: list[str] = []
    length = 0
    for ch in value:
        encoded = "".join(_q_byte(b) for b in ch.encode("utf-8"))
        if current and length + len(encoded) > _MAX_CONTENT:
            words.append("".join(current))
            current, length = [], 0
        current.append(encoded)
        length += len(encoded)
    words.append("".join(current))
    return " ".join(f"=?{_CHARSET}?q?{word}?=" for word in words)


def parse_header_param_list(fields: Optional[list[Any]]) -> dict[str, str]:
    """Parse a parameter list with lower-case names and decoded values."""
    return {
        key.lower(): _decoded_or_raw(value)
        for key, value in parse_param_list(fields).items()
    }


def format_header_param_list(params: dict[str, str]) -> list[Any]:
    """Format a parameter list with encoded values."""
    return format_param_list({key: encode_header(value) for key, value in params.items()})