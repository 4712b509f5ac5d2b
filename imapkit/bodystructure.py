"""MIME body structures as returned by FETCH BODY and BODYSTRUCTURE."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from imapkit.envelope import Envelope
from imapkit.headers import (
    CharsetError,
    decode_header,
    encode_header,
    format_header_param_list,
    parse_header_param_list,
)
from imapkit.reader import ParseError, parse_number, parse_string, parse_string_list

WalkFunc = Callable[[list[int], "BodyStructure"], bool]


def _decoded(value: str) -> str:
    try:
        return decode_header(value)
    except CharsetError:
        return value


def _lowered(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def _number(value: Any) -> int:
    try:
        return parse_number(value)
    except ParseError:
        return 0


def _header_params(value: Any) -> Optional[dict[str, str]]:
    try:
        return parse_header_param_list(value if isinstance(value, list) else None)
    except ParseError:
        return None


@dataclass
class BodyStructure:
    """A body structure, RFC 3501 page 74."""

    mime_type: str = ""
    mime_sub_type: str = ""
    params: Optional[dict[str, str]] = None
    id: str = ""
    description: str = ""
    encoding: str = ""
    size: int = 0
    parts: list["BodyStructure"] = field(default_factory=list)
    envelope: Optional[Envelope] = None
    body_structure: Optional["BodyStructure"] = None
    lines: int = 0
    extended: bool = False
    disposition: str = ""
    disposition_params: Optional[dict[str, str]] = None
    language: Optional[list[str]] = None
    location: Optional[list[str]] = None
    md5: str = ""

    @classmethod
    def parse(cls, fields: list[Any]) -> "BodyStructure":
        """Build a body structure from its fields."""
        bs = cls()
        bs._fill(fields)
        return bs

    def _fill(self, fields: list[Any]) -> None:
        if not fields:
            return
        self.params = {}
        if isinstance(fields[0], list):
            self._fill_multipart(fields)
        elif isinstance(fields[0], str):
            self._fill_single(fields)

    def _fill_multipart(self, fields: list[Any]) -> None:
        self.mime_type = "multipart"
        end = 0
        for i, f in enumerate(fields):
            if isinstance(f, list):
                self.parts.append(BodyStructure.parse(f))
            elif isinstance(f, str):
                end = i
                break

        sub_type = fields[end]
        self.mime_sub_type = str(sub_type) if isinstance(sub_type, str) else ""
        end += 1

        if len(fields) > end:
            self.extended = True
            self.params = _header_params(fields[end])
            end += 1
        self._fill_extension_tail(fields, end)

    def _fill_single(self, fields: list[Any]) -> None:
        if len(fields) < 7:
            raise ParseError("Non-multipart body part doesn't have 7 fields")

        self.mime_type = _lowered(fields[0])
        self.mime_sub_type = _lowered(fields[1])
        self.params = _header_params(fields[2])
        self.id = str(fields[3]) if isinstance(fields[3], str) else ""
        try:
            self.description = _decoded(parse_string(fields[4]))
        except ParseError:
            pass
        self.encoding = _lowered(fields[5])
        self.size = _number(fields[6])

        end = 7
        if self.mime_type == "message" and self.mime_sub_type == "rfc822":
            if len(fields) - end < 3:
                raise ParseError("Missing type-specific fields for message/rfc822")
            env_fields = fields[end]
            try:
                self.envelope = Envelope.parse(env_fields if isinstance(env_fields, list) else [])
            except ParseError:
                self.envelope = Envelope()
            inner = BodyStructure()
            structure = fields[end + 1]
            try:
                inner._fill(structure if isinstance(structure, list) else [])
            except ParseError:
                pass
            self.body_structure = inner
            self.lines = _number(fields[end + 2])
            end += 3
        if self.mime_type == "text":
            if len(fields) - end < 1:
                raise ParseError("Missing type-specific fields for text/*")
            self.lines = _number(fields[end])
            end += 1

        if len(fields) > end:
            self.extended = True
            md5 = fields[end]
            self.md5 = str(md5) if isinstance(md5, str) else ""
            end += 1
        self._fill_extension_tail(fields, end)

    def _fill_extension_tail(self, fields: list[Any], end: int) -> None:
        if len(fields) > end:
            disp = fields[end]
            if isinstance(disp, list) and len(disp) >= 2:
                if isinstance(disp[0], str):
                    self.disposition = _decoded(disp[0]).lower()
                if isinstance(disp[1], list):
                    self.disposition_params = _header_params(disp[1])
            end += 1
        if len(fields) > end:
            langs = fields[end]
            if isinstance(langs, str):
                self.language = [str(langs)]
            elif isinstance(langs, list):
                try:
                    self.language = parse_string_list(langs)
                except ParseError:
                    self.language = None
            else:
                self.language = None
            end += 1
        if len(fields) > end:
            location = fields[end]
            try:
                self.location = parse_string_list(location if isinstance(location, list) else [])
            except ParseError:
                self.location = None

    def _format_disposition(self) -> Optional[list[Any]]:
        if not self.disposition:
            return None
        return [
            encode_header(self.disposition),
            format_header_param_list(self.disposition_params or {}),
        ]

    def _format_tail(self) -> list[Any]:
        return [
            self._format_disposition(),
            list(self.language) if self.language is not None else None,
            list(self.location) if self.location is not None else None,
        ]

    def format(self) -> list[Any]:
        """Return the fields describing this body structure."""
        if self.mime_type.lower() == "multipart":
            fields: list[Any] = [part.format() for part in self.parts]
            fields.append(self.mime_sub_type)
            if self.extended:
                params = (
                    format_header_param_list(self.params) if self.params is not None else None
                )
                fields.append(params)
                fields.extend(self._format_tail())
            return fields

        fields = [
            self.mime_type,
            self.mime_sub_type,
            format_header_param_list(self.params or {}),
            self.id or None,
            encode_header(self.description) if self.description else None,
            self.encoding or None,
            self.size,
        ]
        if self.mime_type.lower() == "message" and self.mime_sub_type.lower() == "rfc822":
            fields.append(self.envelope.format() if self.envelope is not None else None)
            fields.append(
                self.body_structure.format() if self.body_structure is not None else None
            )
            fields.append(self.lines)
        if self.mime_type.lower() == "text":
            fields.append(self.lines)
        if self.extended:
            fields.append(self.md5 or None)
            fields.extend(self._format_tail())
        return fields

    def filename(self) -> str:
        """Return the decoded attachment file name, or an empty string.

        Raises CharsetError when the name uses an unknown charset.
        """
        disposition_params = self.disposition_params or {}
        if "filename" in disposition_params:
            raw = disposition_params["filename"]
        else:
            raw = (self.params or {}).get("name", "")
        return decode_header(raw)

    def walk(self, func: WalkFunc) -> None:
        """Visit every part depth-first, pre-order, including this one.

        func receives the IMAP part path and the part and returns whether the
        part's children should be visited.
        """
        if not self.parts:
            func([1], self)
            return
        self._walk(func, [])

    def _walk(self, func: WalkFunc, path: list[int]) -> None:
        if not func(list(path), self):
            return
        for num, part in enumerate(self.parts, start=1):
            part._walk(func, [*path, num])