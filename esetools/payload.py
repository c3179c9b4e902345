"""Command/response pairs read from a line-oriented hex script."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, TextIO

from .buffer import CharReader, read_hex, write_dump

DEFAULT_TX_SIZE = 10 * 1024 * 1024
DEFAULT_EXPECTED_SIZE = 1024 * 4
DEFAULT_EXPECTED = b"\x90\x00"
DUMP_LIMIT = 240


@dataclass
class Payload:
    """A command to transmit and the trailing bytes expected in the reply."""

    tx: bytes
    expected: bytes
    tx_size: int = DEFAULT_TX_SIZE
    expected_size: int = DEFAULT_EXPECTED_SIZE

    def dump(self, fp: TextIO) -> None:
        """Write a readable description of the payload to ``fp``."""
        fp.write("Payload {\n")
        write_dump(self.tx, self.tx_size, "  ", "Transmit", DUMP_LIMIT, fp)
        write_dump(self.expected, self.expected_size, "  ", "Expected", DUMP_LIMIT, fp)
        fp.write("}\n")


def read_payload(
    reader: CharReader,
    tx_size: int = DEFAULT_TX_SIZE,
    expected_size: int = DEFAULT_EXPECTED_SIZE,
) -> Optional[Payload]:
    """Read the next payload, or return ``None`` when no command remains.

    Fields that hold no hex bytes are skipped when looking for a command.
    A line without a response field expects ``90 00``.
    """
    while True:
        tx = read_hex(reader, tx_size, True)
        if tx is None or tx:
            break
    if not tx:
        return None
    expected = read_hex(reader, expected_size, False)
    if expected is None:
        expected = DEFAULT_EXPECTED
    return Payload(tx, expected, tx_size, expected_size)


def iter_payloads(
    reader: CharReader,
    tx_size: int = DEFAULT_TX_SIZE,
    expected_size: int = DEFAULT_EXPECTED_SIZE,
) -> Iterator[Payload]:
    """Yield payloads until the input is exhausted."""
    while not reader.at_eof():
        payload = read_payload(reader, tx_size, expected_size)
        if payload is None:
            return
        yield payload