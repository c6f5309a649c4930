"""Hex command parsing and formatting."""

from __future__ import annotations

import re

from hidpanel.core.errors import EmptyCommandError, InvalidCommandTextError

_TOKEN_RE = re.compile(r"^(?:0x)?([0-9a-f]{1,2})$", re.IGNORECASE)


def encode_command(text: str) -> bytes:
    """Parse whitespace-separated hex tokens into a command frame.

    Each token is one byte written as one or two hex digits, optionally
    prefixed with ``0x``. Raises `EmptyCommandError` when ``text`` holds no
    tokens and `InvalidCommandTextError` on the first malformed token.
    """
    tokens = text.split()
    if not tokens:
        raise EmptyCommandError("No command entered")

    frame = bytearray()
    for index, token in enumerate(tokens, start=1):
        match = _TOKEN_RE.match(token)
        if not match:
            raise InvalidCommandTextError(
                f"Token {index} '{token}' is not a hex byte (expected 00-FF)"
            )
        frame.append(int(match.group(1), 16))
    return bytes(frame)


def format_hex(data: bytes | bytearray | list[int]) -> str:
    return " ".join(f"{b:02X}" for b in data)
