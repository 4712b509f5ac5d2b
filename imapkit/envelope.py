"""Message addresses and envelopes, RFC 3501 page 77."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from imapkit.dates import format_envelope_date_time, parse_message_datetime
from imapkit.headers import CharsetError, decode_header, encode_header
from imapkit.reader import ParseError, parse_string


def _decoded(value: str) -> str:
    try:
        return decode_header(value)
    except CharsetError:
        return value


@dataclass
class Address:
    """An address as it appears in an envelope."""

    personal_name: str = ""
    at_domain_list: str = ""
    mailbox_name: str = ""
    host_name: str = ""

    def address(self) -> str:
        """Return the mailbox address, such as user@example.com."""
        return f"{self.mailbox_name}@{self.host_name}"

    @classmethod
    def parse(cls, fields: list[Any]) -> "Address":
        """Build an address from its four fields."""
        if len(fields) < 4:
            raise ParseError("Address doesn't contain 4 fields")
        addr = cls()
        try:
            addr.personal_name = _decoded(parse_string(fields[0]))
        except ParseError:
            pass
        try:
            addr.at_domain_list = _decoded(parse_string(fields[1]))
        except ParseError:
            pass
        try:
            addr.mailbox_name = _decoded(parse_string(fields[2]))
        except ParseError:
            raise ParseError("Mailbox name could not be parsed") from None
        try:
            addr.host_name = _decoded(parse_string(fields[3]))
        except ParseError:
            raise ParseError("Host name could not be parsed") from None
        return addr

    def format(self) -> list[Any]:
        """Return the four fields of this address."""
        return [
            encode_header(self.personal_name) if self.personal_name else None,
            self.at_domain_list or None,
            self.mailbox_name or None,
            self.host_name or None,
        ]


def parse_address_list(fields: list[Any]) -> list[Address]:
    """Parse an address list, skipping entries that are not valid addresses."""
    addrs: list[Address] = []
    for f in fields:
        if isinstance(f, list):
            try:
                addrs.append(Address.parse(f))
            except ParseError:
                continue
    return addrs


def format_address_list(addrs: Optional[list[Address]]) -> Optional[list[Any]]:
    """Format an address list; an empty list gives None."""
    if not addrs:
        return None
    return [addr.format() for addr in addrs]


@dataclass
class Envelope:
    """Message metadata taken from its headers."""

    date: Optional[datetime] = None
    subject: str = ""
    from_: list[Address] = field(default_factory=list)
    sender: list[Address] = field(default_factory=list)
    reply_to: list[Address] = field(default_factory=list)
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    in_reply_to: str = ""
    message_id: str = ""

    @classmethod
    def parse(cls, fields: list[Any]) -> "Envelope":
        """Build an envelope from its ten fields."""
        if len(fields) < 10:
            raise ParseError("ENVELOPE doesn't contain 10 fields")
        env = cls()
        if isinstance(fields[0], str):
            try:
                env.date = parse_message_datetime(fields[0])
            except ValueError:
                env.date = None
        try:
            env.subject = _decoded(parse_string(fields[1]))
        except ParseError:
            pass
        for name, value in zip(
            ("from_", "sender", "reply_to", "to", "cc", "bcc"), fields[2:8]
        ):
            if isinstance(value, list):
                setattr(env, name, parse_address_list(value))
        if isinstance(fields[8], str):
            env.in_reply_to = str(fields[8])
        if isinstance(fields[9], str):
            env.message_id = str(fields[9])
        return env

    def format(self) -> list[Any]:
        """Return the ten fields of this envelope."""
        return [
            format_envelope_date_time(self.date) if self.date is not None else None,
            encode_header(self.subject) if self.subject else None,
            format_address_list(self.from_),
            format_address_list(self.sender),
            format_address_list(self.reply_to),
            format_address_list(self.to),
            format_address_list(self.cc),
            format_address_list(self.bcc),
            self.in_reply_to or None,
            self.message_id or None,
        ]