"""Reading hex-encoded byte fields from text streams and dumping byte buffers."""

from __future__ import annotations

import re
from typing import Optional, TextIO

_WHITESPACE = frozenset(" \t\n\v\f\r")
_NEWLINES = frozenset("\r\n")
_ALNUM = frozenset("0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_HEX_PAIR = re.compile(r"[0-9A-Fa-f]{1,2}")


class CharReader:
    """Character reader over a text stream with push-back and end-of-file tracking."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._pushback: list[str] = []
        self._eof = False

    def read(self) -> str:
        """Return the next character, or an empty string at end of input."""
        if self._pushback:
            return self._pushback.pop()
        char = self._stream.read(1)
        if not char:
            self._eof = True
        return char

    def unread(self, char: str) -> None:
        """Push a character back so the next read returns it."""
        if not char:
            return
        self._pushback.append(char)
        self._eof = False

    def at_eof(self) -> bool:
        """True once a read has run past the end and nothing was pushed back."""
        return self._eof and not self._pushback


def read_hex(reader: CharReader, capacity: int, consume_newline: bool) -> Optional[bytes]:
    """Read one whitespace-delimited hex field of at most ``capacity`` characters.

    Returns ``None`` when no field is found: at end of input, or, when
    ``consume_newline`` is false, when a line ending is met first. A field of
    alphanumeric characters that holds no hex digits yields empty bytes.
    """
    if reader.at_eof():
        return None

    while not reader.at_eof():
        char = reader.read()
        if not consume_newline and char in _NEWLINES:
            return None
        if char not in _WHITESPACE:
            reader.unread(char)
            break

    chars: list[str] = []
    while not reader.at_eof() and len(chars) < capacity:
        char = reader.read()
        if char not in _ALNUM:
            reader.unread(char)
            break
        chars.append(char)
    if not chars:
        return None

    text = "".join(chars)
    decoded = bytearray()
    offset = 0
    while offset < len(text) and len(decoded) < capacity:
        match = _HEX_PAIR.match(text, offset)
        if match is None:
            break
        decoded.append(int(match.group(), 16))
        offset = match.end()
    return bytes(decoded)


def format_dump(data: bytes, size: int, prefix: str, name: str, limit: int) -> str:
    """Render a buffer as an indented block of hex bytes, sixteen per line."""
    parts = [
        f"{prefix}{name} {{\n",
        f"{prefix}  .length = {len(data)}\n",
        f"{prefix}  .size = {size}\n",
        f"{prefix}  .buffer = {{\n",
        f"{prefix}    ",
    ]
    for index, byte in enumerate(data):
        if index > 15 and index % 16 == 0:
            parts.append(f"\n{prefix}    ")
        if index > limit:
            parts.append(". . .")
            break
        parts.append(f"{byte:02x} ")
    parts.append(f"\n{prefix}}}\n")
    return "".join(parts)


def write_dump(data: bytes, size: int, prefix: str, name: str, limit: int, fp: TextIO) -> None:
    """Write the rendering of :func:`format_dump` to ``fp``."""
    fp.write(format_dump(data, size, prefix, name, limit))