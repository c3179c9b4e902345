"""Forward framed APDUs from a local socket client to a secure element."""

from __future__ import annotations

import enum
import logging
import socket
import struct
import sys
import time
from typing import Any, Optional, TextIO

from .hw import SecureElement, SecureElementError

log = logging.getLogger("ese-relay")

LISTENER_NAME = "ese-relay"
UNIX_PATH_MAX = 108
MAX_PAYLOAD = 4096
BACKLOG = 4

JCOP_ATR = bytes(
    [
        0x3B, 0xF8, 0x13, 0x00, 0x00, 0x81, 0x31, 0xFE, 0x45,
        0x4A, 0x43, 0x4F, 0x50, 0x76, 0x32, 0x34, 0x31, 0xB7,
    ]
)

_LENGTH = struct.Struct(">H")


class ControlCommand(enum.IntEnum):
    """Single-byte control requests understood by the relay."""

    POWER_OFF = 0
    POWER_ON = 1
    RESET = 2
    ATR = 4


class RelayVariant(enum.Enum):
    """Relay configurations: the ATR reported and the data the element is opened with."""

    FAKE = ("fake", b"\x00\x00", None)
    NQ_NCI = ("nq-nci", JCOP_ATR, None)
    SPIDEV = ("pn80t-spidev", JCOP_ATR, "hikey-spidev")

    def __init__(self, label: str, atr: bytes, open_data: Any) -> None:
        self.label = label
        self.atr = atr
        self.open_data = open_data


class RelayError(Exception):
    """Raised when the relay cannot continue."""


def setup_socket(name: str = LISTENER_NAME) -> socket.socket:
    """Create a stream socket bound to the abstract Unix address ``name``."""
    if len(name) > UNIX_PATH_MAX - 1:
        raise RelayError("Abstract listener name too long.")
    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    except OSError as exc:
        raise RelayError("Could not open socket.") from exc
    try:
        sock.bind("\0" + name)
    except OSError as exc:
        sock.close()
        raise RelayError("Failed to bind to abstract socket name") from exc
    return sock


def handle_control(element: SecureElement, command: int, atr: bytes) -> bytes:
    """Carry out a control request and return the bytes to send back, if any."""
    try:
        request = ControlCommand(command)
    except ValueError:
        log.error("Unknown control byte seen: %x", command)
        return b""
    if request in (ControlCommand.POWER_OFF, ControlCommand.RESET):
        element.hw_reset()
        return b""
    if request is ControlCommand.ATR:
        log.debug("Sending back ATR of length %u", len(atr))
        return bytes(atr)
    return b""


def _hex_line(label: str, data: bytes) -> str:
    return f"{label}: " + "".join(f"{byte:02X} " for byte in data) + "\n"


def _recv_exact(conn: socket.socket, count: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < count:
        chunk = conn.recv(count - len(chunks))
        if not chunk:
            break
        chunks.extend(chunk)
    return bytes(chunks)


def serve_client(
    element: SecureElement, conn: socket.socket, atr: bytes, out: Optional[TextIO] = None
) -> int:
    """Relay frames between ``conn`` and an open ``element``; return the frames handled.

    Each frame is a big-endian 16-bit length followed by that many bytes. A
    one-byte frame is a control request; control requests that produce no data
    get no reply.
    """
    out = sys.stdout if out is None else out
    handled = 0
    while True:
        out.write("Listening for data from client\n")
        header = _recv_exact(conn, _LENGTH.size)
        if len(header) != _LENGTH.size:
            log.error("Client disconnected.")
            break
        (tx_len,) = _LENGTH.unpack(header)
        out.write(f"tx_len: {tx_len}\n")
        if tx_len == 0:
            log.error("Client had nothing to say. Goodbye.")
            break
        if tx_len > MAX_PAYLOAD:
            log.error("Client payload too large: %u", tx_len)
            break
        tx = _recv_exact(conn, tx_len)
        if len(tx) != tx_len:
            log.error("Client abandoned hope during transmission.")
            break
        out.write(f"Sending {tx_len} bytes to card\n")
        out.write(_hex_line("TX", tx))
        handled += 1

        if tx_len == 1:
            out.write(f"Received a control request: {tx[0]:x}\n")
            rx = handle_control(element, tx[0], atr)
            if not rx:
                continue
        else:
            try:
                rx = element.transceive(tx, MAX_PAYLOAD)
            except SecureElementError as exc:
                raise RelayError(f"An error ({exc.code}) occurred: {exc.message}") from exc

        if rx:
            out.write(f"Read {len(rx)} bytes from card\n")
            out.write(_hex_line("RX", rx))
        try:
            conn.sendall(_LENGTH.pack(len(rx)) + rx)
        except OSError:
            log.error("Client abandoned hope during response.")
            break
        time.sleep(0.001)
    return handled


def serve(
    element: SecureElement,
    server: socket.socket,
    variant: RelayVariant = RelayVariant.FAKE,
    out: Optional[TextIO] = None,
) -> None:
    """Listen on ``server`` and relay one client session after another."""
    out = sys.stdout if out is None else out
    try:
        server.listen(BACKLOG)
    except OSError as exc:
        server.close()
        raise RelayError("Failed to listen on socket.") from exc
    while True:
        try:
            conn, _ = server.accept()
        except OSError as exc:
            raise RelayError("Fatal error accepting a client connection.") from exc
        out.write("Client connected.\n")
        try:
            element.open(variant.open_data)
        except SecureElementError as exc:
            conn.close()
            raise RelayError(f"Cannot open hw: eSE error ({exc.code}): {exc.message}") from exc
        out.write("eSE is open\n")
        try:
            serve_client(element, conn, variant.atr, out)
        finally:
            conn.close()
            out.write("Session ended\n\n")
            element.close()