"""IMAP4rev1 wire reading, responses, mailboxes, envelopes and body structures."""

__version__ = "0.1.0"