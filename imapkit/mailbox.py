"""Mailbox names, LIST information and STATUS data."""

from __future__ import annotations

import base64
import binascii
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from imapkit.items import StatusItem
from imapkit.reader import ParseError, RawString, parse_number, parse_string, parse_string_list

INBOX_NAME = "INBOX"

# Mailbox attributes from RFC 3501 section 7.2.2.
NO_INFERIORS_ATTR = "\\Noinferiors"
NO_SELECT_ATTR = "\\Noselect"
MARKED_ATTR = "\\Marked"
UNMARKED_ATTR = "\\Unmarked"

# Mailbox attributes from RFC 6154 section 2 (SPECIAL-USE).
ALL_ATTR = "\\All"
ARCHIVE_ATTR = "\\Archive"
DRAFTS_ATTR = "\\Drafts"
FLAGGED_ATTR = "\\Flagged"
JUNK_ATTR = "\\Junk"
SENT_ATTR = "\\Sent"
TRASH_ATTR = "\\Trash"

# Mailbox attributes from RFC 3348 (CHILDREN).
HAS_CHILDREN_ATTR = "\\HasChildren"
HAS_NO_CHILDREN_ATTR = "\\HasNoChildren"

# Mailbox attribute from RFC 8457 section 3.
IMPORTANT_ATTR = "\\Important"

_WILDCARD = re.compile(r"[*%]")
_SHIFT = re.compile(r"&([^-]*)(-?)")


def _is_printable(ch: str) -> bool:
    return 0x20 <= ord(ch) <= 0x7E


def _utf7_encode(name: str) -> str:
    """Encode a mailbox name with the modified UTF-7 of RFC 3501 section 5.1.3."""
    out: list[str] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            raw = "".join(pending).encode("utf-16-be")
            encoded = base64.b64encode(raw).decode("ascii").rstrip("=").replace("/", ",")
            out.append("&" + encoded + "-")
            pending.clear()

    for ch in name:
        if _is_printable(ch):
            flush()
            out.append("&-" if ch == "&" else ch)
        else:
            pending.append(ch)
    flush()
    return "".join(out)


def _check_plain(text: str) -> None:
    if not all(_is_printable(ch) for ch in text):
        raise ValueError("mailbox name contains a non-printable character")


def _utf7_decode(name: str) -> str:
    """Decode a mailbox name written in modified UTF-7."""
    parts: list[str] = []
    pos = 0
    for m in _SHIFT.finditer(name):
        plain = name[pos:m.start()]
        _check_plain(plain)
        parts.append(plain)
        body, end = m.groups()
        if not end:
            raise ValueError("unterminated modified UTF-7 sequence")
        if not body:
            parts.append("&")
        else:
            padded = body.replace(",", "/") + "=" * (-len(body) % 4)
            try:
                raw = base64.b64decode(padded, validate=True)
                parts.append(raw.decode("utf-16-be"))
            except (binascii.Error, UnicodeDecodeError):
                raise ValueError("invalid modified UTF-7 sequence") from None
        pos = m.end()
    tail = name[pos:]
    _check_plain(tail)
    parts.append(tail)
    return "".join(parts)


def canonical_mailbox_name(name: str) -> str:
    """Return the canonical form of a mailbox name: INBOX is case-insensitive."""
    if name.upper() == INBOX_NAME:
        return INBOX_NAME
    return name


def format_mailbox_name(name: str) -> str:
    """Return a mailbox name ready to be written, leaving INBOX unquoted."""
    if name.casefold() == INBOX_NAME.casefold():
        return RawString(name)
    return name


def _key_str(key: Union[StatusItem, str]) -> str:
    return key.value if isinstance(key, StatusItem) else str(key)


def _status_key(name: str) -> Union[StatusItem, str]:
    upper = name.upper()
    try:
        return StatusItem(upper)
    except ValueError:
        return upper


@dataclass
class MailboxInfo:
    """Basic mailbox information, as returned by LIST."""

    attributes: list[str] = field(default_factory=list)
    delimiter: str = ""
    name: str = ""

    @classmethod
    def parse(cls, fields: list[Any]) -> "MailboxInfo":
        """Build mailbox information from the fields of a LIST response."""
        if len(fields) < 3:
            raise ParseError("Mailbox info needs at least 3 fields")
        attributes = parse_string_list(fields[0])
        delimiter = fields[1]
        if delimiter is None:
            delimiter = ""
        elif not isinstance(delimiter, str):
            raise ParseError("Mailbox delimiter must be a string")
        name = _utf7_decode(parse_string(fields[2]))
        return cls(attributes=attributes, delimiter=str(delimiter),
                   name=canonical_mailbox_name(name))

    def format(self) -> list[Any]:
        """Return the fields of a LIST response for this mailbox."""
        name = _utf7_encode(self.name)
        attrs = [RawString(attr) for attr in self.attributes]
        delimiter: Optional[str] = self.delimiter or None
        return [attrs, delimiter, format_mailbox_name(name)]

    def _match(self, name: str, pattern: str) -> bool:
        m = _WILDCARD.search(pattern)
        if m is None:
            return name == pattern
        i = m.start()
        chunk, wildcard, rest = pattern[:i], pattern[i], pattern[i + 1:]
        if chunk and not name.startswith(chunk):
            return False
        name = name[len(chunk):]

        end = len(name)
        for j, ch in enumerate(name):
            if wildcard == "%" and ch == self.delimiter:
                end = j
                break
            if self._match(name[j:], rest):
                return True
        return self._match(name[end:], rest)

    def match(self, reference: str, pattern: str) -> bool:
        """Check a reference and a pattern against this mailbox name (RFC 3501 6.3.8)."""
        name = self.name
        if self.delimiter and pattern.startswith(self.delimiter):
            reference = ""
            pattern = pattern[len(self.delimiter):]
        if reference:
            if self.delimiter and not reference.endswith(self.delimiter):
                reference += self.delimiter
            if not name.startswith(reference):
                return False
            name = name[len(reference):]
        return self._match(name, pattern)


_NUMERIC_ITEMS = {
    StatusItem.MESSAGES: "messages",
    StatusItem.RECENT: "recent",
    StatusItem.UNSEEN: "unseen",
    StatusItem.UIDNEXT: "uid_next",
    StatusItem.UIDVALIDITY: "uid_validity",
}


@dataclass
class MailboxStatus:
    """The status of a mailbox."""

    name: str = ""
    read_only: bool = False
    items: dict[Union[StatusItem, str], Any] = field(default_factory=dict)
    flags: Optional[list[str]] = None
    permanent_flags: Optional[list[str]] = None
    unseen_seq_num: int = 0
    messages: int = 0
    recent: int = 0
    unseen: int = 0
    uid_next: int = 0
    uid_validity: int = 0
    items_lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @classmethod
    def with_items(cls, name: str, items: list[Union[StatusItem, str]]) -> "MailboxStatus":
        """Create an empty status that will hold the given items."""
        return cls(name=name, items={item: None for item in items})

    def parse(self, fields: list[Any]) -> None:
        """Fill this status from a list of alternating item names and values."""
        self.items = {}
        it = iter(fields)
        for key in it:
            if not isinstance(key, str):
                raise ParseError(
                    "cannot parse mailbox status: key is not a string, "
                    f"but a {type(key).__name__}"
                )
            item = _status_key(key)
            try:
                value = next(it)
            except StopIteration:
                break
            self.items[item] = None
            attr = _NUMERIC_ITEMS.get(item) if isinstance(item, StatusItem) else None
            if attr is not None:
                setattr(self, attr, parse_number(value))
            else:
                self.items[item] = value

    def format(self) -> list[Any]:
        """Return alternating item names and values for this status."""
        fields: list[Any] = []
        for key, value in self.items.items():
            attr = _NUMERIC_ITEMS.get(key) if isinstance(key, StatusItem) else None
            if attr is not None:
                value = getattr(self, attr)
            fields.extend([RawString(_key_str(key)), value])
        return fields