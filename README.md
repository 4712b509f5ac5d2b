# imapkit

Building blocks for reading IMAP4rev1 (RFC 3501) protocol data in Python:
a wire reader, server response parsing, and models for mailboxes,
envelopes, addresses and MIME body structures that parse from response
fields and format back to them.

It uses only the standard library and does no networking of its own.
You supply the bytes, and it gives you Python values.

## Installation

```
pip install imapkit
```

## Reading server responses

```python
import io
from imapkit.reader import Reader
from imapkit.response import read_resp, StatusResp, parse_named_resp

reader = Reader(io.BytesIO(b"a001 OK [CAPABILITY IMAP4rev1 UIDPLUS] LOGIN completed\r\n"))
resp = read_resp(reader)
assert isinstance(resp, StatusResp)
print(resp.tag, resp.type, resp.code, resp.arguments, resp.info)
# a001 StatusRespType.OK CAPABILITY ['IMAP4rev1', 'UIDPLUS'] LOGIN completed

resp = read_resp(Reader(io.BytesIO(b"* 42 EXISTS\r\n")))
print(parse_named_resp(resp))  # ('EXISTS', ['42'])
```

`read_resp` returns a `StatusResp`, a `DataResp` or a `ContinuationReq`.
`new_untagged_resp` builds an untagged `DataResp`. `parse_named_resp`
returns `None` when a response has no name.

Malformed input raises `imapkit.reader.ParseError` (a `ValueError`);
input that ends too soon raises `EOFError`.

## Low-level fields (`imapkit.reader`)

`Reader` wraps a binary stream and reads atoms (`read_atom`, where `NIL`
gives `None`), quoted strings, literals, lists, whole lines, response
codes and info text. A `continues` callback, if given, is called before a
synchronizing literal is read; `max_literal_size` rejects literals that
are too large.

Literals come back as `Literal` objects, readable like a file and with a
length. `RawString` marks a string that is meant to be written verbatim.
`parse_number`, `parse_string` and `parse_string_list` turn fields into
Python values.

## Mailboxes (`imapkit.mailbox`)

```python
from imapkit.mailbox import MailboxInfo, MailboxStatus

info = MailboxInfo.parse([["\\Noselect"], "/", "INBOX"])
print(info.format())  # [['\\Noselect'], '/', 'INBOX']

info = MailboxInfo(name="Work/Reports", delimiter="/")
print(info.match("", "Work/%"))  # True

status = MailboxStatus()
status.parse(["MESSAGES", "42", "UIDNEXT", "65536"])
print(status.messages, status.uid_next)  # 42 65536
```

Mailbox names are decoded from and encoded to modified UTF-7.
`canonical_mailbox_name` treats INBOX case-insensitively, and
`MailboxStatus.with_items` creates a status that will hold the given
`StatusItem`s.

## Envelopes, addresses and body structures

`imapkit.envelope.Envelope` and `imapkit.envelope.Address` parse from and
format to ENVELOPE fields; `parse_address_list` and `format_address_list`
handle address lists. `imapkit.bodystructure.BodyStructure` does the same
for BODY and BODYSTRUCTURE data, finds an attachment's name with
`filename()`, and visits a MIME tree depth-first with `walk()`:

```python
from imapkit.bodystructure import BodyStructure

bs = BodyStructure.parse([
    ["text", "plain", [], None, None, "us-ascii", "87", "22"],
    ["text", "html", [], None, None, "us-ascii", "106", "36"],
    "alternative",
])
bs.walk(lambda path, part: print(path, part.mime_type, part.mime_sub_type) or True)
# [] multipart alternative
# [1] text plain
# [2] text html
```

## Headers, flags and dates

`imapkit.headers` has `canonical_flag`, `parse_param_list`,
`format_param_list`, and `decode_header` and `encode_header` for MIME
encoded words:

```python
from imapkit.headers import decode_header, encode_header

print(decode_header("=?utf-8?q?caf=C3=A9?="))  # café
print(encode_header("café"))                   # =?utf-8?q?caf=C3=A9?=
```

`imapkit.dates` parses and formats IMAP dates and date-times
(`parse_date`, `parse_date_time`, `format_date`, `format_date_time`) and
message header dates (`parse_message_datetime`,
`format_envelope_date_time`).

`imapkit.items` has `StatusItem`, the fetch item names,
`expand_fetch_item` for the ALL, FAST and FULL macros, and `FlagsOp` with
`format_flags_op` and `parse_flags_op` for STORE item names.

## What it does not do

- It opens no connections and runs no client or server.
- `format()` methods give lists of fields, not bytes; there is no writer
  that serialises fields back to the wire.
- There are no classes for whole FETCH message data, for body section
  names such as `BODY[HEADER]<0.512>`, for client commands, or for
  handlers that collect LIST, FETCH, SEARCH or SELECT results.

## Running the tests

```
pip install -e ".[test]"
pytest
```