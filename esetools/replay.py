"""Replay a script of command APDUs against a secure element and check the replies."""

from __future__ import annotations

import enum
import logging
import sys
from typing import Callable, Mapping, Optional, Sequence, TextIO

from .buffer import CharReader, write_dump
from .hw import (
    Hardware,
    SecureElement,
    SecureElementError,
    find_supported_hardware,
    print_supported_hardware,
)
from .payload import DEFAULT_EXPECTED_SIZE, DEFAULT_TX_SIZE, iter_payloads

log = logging.getLogger("ese-replay")

PROG = "ese-replay"
REPLY_SIZE = 2048
DUMP_LIMIT = 240

SUPPORTED_HARDWARE: tuple[Hardware, ...] = (
    Hardware("nq-nci", "ESE_HW_NXP_PN80T_NQ_NCI_ops", "libese-hw-nxp-pn80t-nq-nci.so"),
    Hardware("fake", "ESE_HW_FAKE_ops", "libese-hw-fake.so"),
    Hardware("echo", "ESE_HW_ECHO_ops", "libese-hw-echo.so"),
)

DEFAULT_BACKENDS: Mapping[str, Callable[[], SecureElement]] = {"echo": SecureElement}


class ReplayOutcome(enum.Enum):
    """Why a replay stopped."""

    COMPLETE = "complete"
    TRANSCEIVE_ERROR = "transceive error"
    SHORT_RESPONSE = "short response"
    MISMATCH = "mismatch"


def replay(element: SecureElement, stream: TextIO, out: TextIO) -> ReplayOutcome:
    """Send every payload in ``stream`` to ``element``, stopping at the first failure.

    A reply matches when it ends with the payload's expected bytes.
    """
    reader = CharReader(stream)
    for payload in iter_payloads(reader, DEFAULT_TX_SIZE, DEFAULT_EXPECTED_SIZE):
        payload.dump(out)
        try:
            reply = element.transceive(payload.tx, REPLY_SIZE)
        except SecureElementError as exc:
            out.write("Transceive error. See logcat -s ese-replay\n")
            log.error("An error (%d) occurred: %s", exc.code, exc.message)
            return ReplayOutcome.TRANSCEIVE_ERROR
        write_dump(reply, REPLY_SIZE, "", "Response", DUMP_LIMIT, out)
        if len(reply) < len(payload.expected):
            out.write(
                f"Received less data than expected: {len(reply)} < {len(payload.expected)}\n"
            )
            return ReplayOutcome.SHORT_RESPONSE
        if not reply.endswith(payload.expected):
            out.write("Response did not match. Aborting!\n")
            return ReplayOutcome.MISMATCH
    return ReplayOutcome.COMPLETE


def usage(prog: str = PROG) -> str:
    """Return the usage text."""
    return (
        f"Usage:\n{prog} [hw_impl] < file_with_apdus\n\n"
        "File format:\n"
        "  hex-apdu-to-send hex-trailing-response-bytes\\n\n"
        "\n"
        "For example,\n"
        f"  echo -e '00A4040000 9000\\n80CA9F7F00 9000\\n' | {prog} nq-nci\n"
    )


def main(
    argv: Optional[Sequence[str]] = None,
    backends: Optional[Mapping[str, Callable[[], SecureElement]]] = None,
) -> int:
    """Run the replay tool; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    available = DEFAULT_BACKENDS if backends is None else backends
    out = sys.stdout

    if len(args) != 1:
        out.write(usage(PROG))
        print_supported_hardware(SUPPORTED_HARDWARE, out)
        return 1
    try:
        hw = find_supported_hardware(SUPPORTED_HARDWARE, args[0])
    except KeyError:
        sys.stderr.write(f"Unknown hardware name: {args[0]}\n")
        return 3

    out.write("[-] Initializing eSE\n")
    factory = available.get(hw.name)
    if factory is None:
        sys.stderr.write(f"Failed to open hardware implementation: {hw.lib}\n")
        sys.stderr.write("Could not initialize hardware\n")
        return 2
    element = factory()
    out.write(f"eSE implementation selected: {element.name}\n")
    try:
        element.open(hw.options)
    except SecureElementError as exc:
        log.error("Cannot open hw")
        log.error("eSE error (%d): %s", exc.code, exc.message)
        return 5
    out.write("eSE is open\n")

    with element:
        replay(element, sys.stdin, out)
        out.write("Transmissions complete.\n")
    return 0