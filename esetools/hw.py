"""Secure element backends and the table of supported hardware."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, TextIO


@dataclass(frozen=True)
class Hardware:
    """A named secure element implementation."""

    name: str
    sym: str
    lib: str
    options: Any = None


class SecureElementError(Exception):
    """Raised when a secure element operation fails."""

    def __init__(self, message: str, code: int = -1) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class SecureElement:
    """A secure element session.

    The base implementation answers every command with the command itself
    and keeps a record of the commands it has seen; backends override
    ``_exchange`` to talk to real or simulated hardware.
    """

    name = "echo"

    def __init__(self) -> None:
        self._open = False
        self.options: Any = None
        self.reset_count = 0
        self.exchanges: List[bytes] = []

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, options: Any = None) -> None:
        """Open the element with backend-specific ``options``."""
        if self._open:
            raise SecureElementError(f"{self.name} is already open")
        self.options = options
        self._open = True

    def close(self) -> None:
        """Close the element; closing a closed element does nothing."""
        self._open = False

    def transceive(self, data: bytes, max_len: int) -> bytes:
        """Send ``data`` and return a reply of at most ``max_len`` bytes."""
        self._require_open()
        reply = bytes(self._exchange(bytes(data)))
        if len(reply) > max_len:
            raise SecureElementError(
                f"reply of {len(reply)} bytes exceeds the {max_len} byte limit"
            )
        return reply

    def hw_reset(self) -> None:
        """Reset the hardware."""
        self._require_open()
        self.reset_count += 1

    def _exchange(self, data: bytes) -> bytes:
        """Record the command and echo it back."""
        self.exchanges.append(data)
        return data

    def _require_open(self) -> None:
        if not self._open:
            raise SecureElementError(f"{self.name} is not open")

    def __enter__(self) -> "SecureElement":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def find_supported_hardware(supported: Iterable[Hardware], name: str) -> Hardware:
    """Return the first entry called ``name``; raise ``KeyError`` if none is."""
    for hardware in supported:
        if hardware.name == name:
            return hardware
    raise KeyError(name)


def format_supported_hardware(supported: Iterable[Hardware]) -> str:
    """Render the supported hardware table."""
    lines = ["Supported hardware:\n"]
    lines.extend(f"\t{hw.name}\t({hw.sym} / {hw.lib})\n" for hw in supported)
    return "".join(lines)


def print_supported_hardware(supported: Iterable[Hardware], out: Optional[TextIO] = None) -> None:
    """Write the supported hardware table to ``out`` (standard output by default)."""
    (out if out is not None else sys.stdout).write(format_supported_hardware(supported))