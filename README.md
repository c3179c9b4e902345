# esetools

Development helpers for talking to an embedded secure element (eSE):

* **replay** reads a script of APDUs, sends each one to an element, and checks
  that each response ends with the bytes you expect.
* **relay** listens on an abstract Unix socket and forwards length-prefixed
  APDUs from a client, such as a virtual smart card reader, to an element.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Replaying APDU scripts

```
esetools-replay HW_NAME < apdus.txt
```

Run `esetools-replay` with no arguments (or with more than one) to print the
usage text and the table of hardware names: `nq-nci`, `fake` and `echo`.

Each line of the input holds a hex-encoded APDU to send, optionally followed by
whitespace and the hex-encoded bytes the response must end with. If no expected
bytes are given on the line, the response must end with `90 00`:

```
00A4040000 9000
80CA9F7F00 9000
```

For every line the tool prints the payload and the response. It stops at the
first transceive error, at a response shorter than the expected bytes, or at a
response whose trailing bytes do not match, and then prints
`Transmissions complete.`

The exit status is `1` for wrong usage, `3` for an unknown hardware name,
`2` if no backend is available for the chosen name, `5` if the element could
not be opened, and `0` once the script has been processed, whether or not
every response matched.

## Backends

The only backend the command provides is `echo`: the base `SecureElement`
class, which answers every command with the command itself and records what it
was sent. A script therefore passes against `echo` only where each command ends
with its expected bytes.

The names `nq-nci` and `fake` are listed in the hardware table, but no backend
for them ships with the package, so choosing them exits with status `2`.
`esetools.replay.main(argv, backends)` accepts a mapping from hardware name to
a factory returning a `SecureElement`, which is how a backend for real or
simulated hardware is plugged in from Python.

## Using the library

* `esetools.buffer` — `CharReader` wraps a text stream with character
  push-back and end-of-file tracking; `read_hex` reads one field of hex digits
  from it; `format_dump` and `write_dump` render bytes in the tool's dump
  layout, sixteen bytes per line.
* `esetools.payload` — `read_payload` and `iter_payloads` parse script lines
  into `Payload` objects (the bytes to send and the expected trailing bytes);
  `Payload.dump` writes one out.
* `esetools.hw` — `Hardware` describes a table entry; `SecureElement` is the
  session interface (`open`, `close`, `transceive`, `hw_reset`, and use as a
  context manager that closes it); subclasses override `_exchange` to talk to
  other hardware. `SecureElementError` reports failures with a message and a
  code. `find_supported_hardware` (raises `KeyError` for an unknown name),
  `format_supported_hardware` and `print_supported_hardware` work over a
  table of `Hardware` entries.
* `esetools.replay` — `replay(element, stream, out)` runs a script against an
  already open element and returns a `ReplayOutcome` (`COMPLETE`,
  `TRANSCEIVE_ERROR`, `SHORT_RESPONSE` or `MISMATCH`); `usage(prog)` returns
  the usage text.
* `esetools.relay` — `setup_socket(name)` binds a stream socket to the
  abstract Unix address `name` (default `ese-relay`; abstract addresses need
  Linux). `serve(element, server, variant, out)` listens, accepts clients one
  at a time, opens the element with the variant's open data for each session,
  and hands the connection to `serve_client`. A one-byte request is a
  `ControlCommand`: power off and reset call `hw_reset`, power on does nothing,
  and ATR replies with the ATR of the chosen `RelayVariant` (`FAKE`, `NQ_NCI`
  or `SPIDEV`); control requests that produce no data get no reply. Any
  longer request is sent to the element as an APDU. Fatal conditions, including
  a transceive error, raise `RelayError`.

Frames on the relay socket are a two-byte big-endian length followed by that
many bytes, in both directions. A zero length, a payload larger than 4096
bytes, or a disconnect ends the session.

## What the package does not do

There is no command for the relay: it is started from Python by calling
`setup_socket` and `serve` with a `SecureElement`. The package has no drivers
for physical secure elements; the relay variants only choose the ATR and the
open data passed to whichever `SecureElement` you supply.