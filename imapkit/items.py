"""Status items, fetch items and STORE flag operations."""

from __future__ import annotations

from enum import Enum


class StatusItem(str, Enum):
    """A mailbox status data item that can be requested with STATUS."""

    MESSAGES = "MESSAGES"
    RECENT = "RECENT"
    UIDNEXT = "UIDNEXT"
    UIDVALIDITY = "UIDVALIDITY"
    UNSEEN = "UNSEEN"


# Fetch macros
FETCH_ALL = "ALL"
FETCH_FAST = "FAST"
FETCH_FULL = "FULL"

# Fetch items
FETCH_BODY = "BODY"
FETCH_BODY_STRUCTURE = "BODYSTRUCTURE"
FETCH_ENVELOPE = "ENVELOPE"
FETCH_FLAGS = "FLAGS"
FETCH_INTERNAL_DATE = "INTERNALDATE"
FETCH_RFC822 = "RFC822"
FETCH_RFC822_HEADER = "RFC822.HEADER"
FETCH_RFC822_SIZE = "RFC822.SIZE"
FETCH_RFC822_TEXT = "RFC822.TEXT"
FETCH_UID = "UID"

_MACROS = {
    FETCH_ALL: [FETCH_FLAGS, FETCH_INTERNAL_DATE, FETCH_RFC822_SIZE, FETCH_ENVELOPE],
    FETCH_FAST: [FETCH_FLAGS, FETCH_INTERNAL_DATE, FETCH_RFC822_SIZE],
    FETCH_FULL: [
        FETCH_FLAGS,
        FETCH_INTERNAL_DATE,
        FETCH_RFC822_SIZE,
        FETCH_ENVELOPE,
        FETCH_BODY,
    ],
}


def expand_fetch_item(item: str) -> list[str]:
    """Expand a fetch macro into its items; other items are returned alone."""
    return list(_MACROS.get(item, [item]))


class FlagsOp(str, Enum):
    """An operation applied to message flags by STORE."""

    SET = "FLAGS"
    ADD = "+FLAGS"
    REMOVE = "-FLAGS"


_SILENT = ".SILENT"


def format_flags_op(op: FlagsOp, silent: bool) -> str:
    """Return the STORE item name for a flags operation."""
    value = FlagsOp(op).value
    return value + _SILENT if silent else value


def parse_flags_op(item: str) -> tuple[FlagsOp, bool]:
    """Split a STORE item name into its flags operation and silent marker."""
    silent = item.endswith(_SILENT)
    if silent:
        item = item[: -len(_SILENT)]
    try:
        return FlagsOp(item), silent
    except ValueError:
        raise ValueError("Unsupported STORE operation") from None